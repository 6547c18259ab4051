# ui/styles.py

CSS = """
:root {
    --gc-bg: #0f172a;
    --gc-panel: #1e293b;
    --gc-line: #334155;
    --gc-text: #e2e8f0;
    --gc-muted: #94a3b8;
    --gc-accent: #2563eb;
    --gc-danger: #b91c1c;
}

body { background: var(--gc-bg); color: var(--gc-text); }
.gradio-container { max-width: 1200px !important; margin: 0 auto; }

/* sidebar | chat */
.chat-grid {
    display: grid !important;
    grid-template-columns: 260px minmax(0, 1fr);
    gap: 12px;
}
#sidebar_col, #chat_col { min-width: 0; }
#new_chat_btn { width: 100%; }

.chat-header { align-items: center; justify-content: space-between; }
#chat_title h3 { margin: 0; overflow: hidden; text-overflow: ellipsis; white-space: nowrap; }
#status_banner { min-height: 26px; text-align: right; }

.status-badge {
    display: inline-flex;
    align-items: center;
    gap: 6px;
    padding: 2px 10px;
    border-radius: 999px;
    font-size: 0.85rem;
    font-weight: 600;
}
.status-idle      { background: var(--gc-line); color: var(--gc-text); }
.status-busy      { background: #1e3a8a; color: #dbeafe; }
.status-recording { background: var(--gc-danger); color: #fee2e2; }
.status-speaking  { background: #166534; color: #dcfce7; }

.spinner {
    width: 10px;
    height: 10px;
    border: 2px solid currentColor;
    border-right-color: transparent;
    border-radius: 50%;
    animation: gc-spin 0.8s linear infinite;
}
@keyframes gc-spin { to { transform: rotate(360deg); } }

#history_box {
    height: 560px;
    border: 1px solid var(--gc-line) !important;
    background: var(--gc-panel) !important;
}

.status-text { color: #f87171; min-height: 22px; margin: 0; }
.transcript-hint { color: var(--gc-muted); font-size: 0.8rem; min-height: 20px; }
.input-row { align-items: flex-end; }

#mic_btn { font-size: 1.15rem; }

.clear-btn { background: var(--gc-danger) !important; color: #fff !important; }

/* conversation list */
#conv_list_wrapper { position: relative; }
.conversation-list { max-height: 500px; overflow-y: auto; }
.conversation-list label {
    display: block;
    width: 100%;
    padding: 6px 34px 6px 10px;
    border-radius: 6px;
    background: transparent;
    white-space: nowrap;
    overflow: hidden;
    text-overflow: ellipsis;
    cursor: pointer;
}
.conversation-list label:hover { background: var(--gc-line); }
.conversation-list label:has(input:checked) { background: var(--gc-accent); color: #fff; }

#conv_menu_button {
    position: absolute;
    top: 4px;
    right: 4px;
    min-width: 28px;
    width: 28px;
    padding: 0;
    z-index: 5;
}

/* settings dialog */
#conv_menu_overlay {
    position: fixed !important;
    inset: 0;
    z-index: 1000;
    background: rgba(15, 23, 42, 0.6) !important;
    border: none !important;
}
#conv_menu_overlay .conv-menu-card {
    max-width: 400px;
    margin: 12vh auto 0;
    padding: 16px;
    border-radius: 10px;
    background: var(--gc-panel) !important;
}
"""
