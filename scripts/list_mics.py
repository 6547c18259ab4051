# scripts/list_mics.py
"""Print input devices; pick one with GEMCHAT_INPUT_DEVICE_INDEX=<index>."""
from __future__ import annotations

from audio.mic import list_input_devices


def main():
    devices = list_input_devices()
    if not devices:
        print("No input devices found.")
        return
    print("Available input devices:")
    for index, name in devices:
        print(f"[{index}] {name}")


if __name__ == "__main__":
    main()
