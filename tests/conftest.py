# tests/conftest.py
from __future__ import annotations

import os
import sys
import tempfile

import pytest

# --- FORCE PROJECT ROOT ONTO sys.path ----------------------------------------

# Project root = parent of the "tests" directory
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Ensure project root is at the *front* of sys.path so it wins over site-packages
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# -----------------------------------------------------------------------------

# Session-wide defaults, set before config.settings is first built so tests don't:
#   - open browsers
#   - write DBs under ./data
#   - pick up real API keys from the developer's shell
_TMP_ROOT = tempfile.mkdtemp(prefix="gemchat_test_")
os.environ.setdefault("GEMCHAT_DATA_DIR", os.path.join(_TMP_ROOT, "data"))
os.environ.setdefault("GEMCHAT_DB_FILENAME", "gemchat_test.sqlite3")
os.environ.setdefault("GEMCHAT_DB_WAL", "false")
os.environ.setdefault("GEMCHAT_GRADIO_AUTO_OPEN", "false")
for _key in ("GEMINI_API_KEY", "DEEPGRAM_API_KEY", "GEMCHAT_GEMINI_API_KEY", "GEMCHAT_DEEPGRAM_API_KEY"):
    os.environ.pop(_key, None)


@pytest.fixture
def storage(tmp_path):
    from memory.storage import LocalStorage

    st = LocalStorage(str(tmp_path / "store.sqlite3"), wal=False)
    yield st
    st.close()


@pytest.fixture
def store(storage):
    from memory.conversation import ConversationStore

    s = ConversationStore(storage, key="chats")
    s.load()
    return s
