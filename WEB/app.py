"""
Fraglock: Web Edition
=====================

Streamlit application entry point.

Launch:
    streamlit run WEB/app.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# -- Ensure project root is importable ------------------------------------
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

# -- Ensure WEB/ directory is importable ----------------------------------
_web_root = str(Path(__file__).resolve().parent)
if _web_root not in sys.path:
    sys.path.insert(0, _web_root)

import streamlit as st  # noqa: E402

# ---------------------------------------------------------------------------
# Page config: must be the first Streamlit command
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Fraglock",
    page_icon="🧩",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.title("🧩 Fraglock")
st.caption("Fragmenting cipher with interleaved redundancy shards")

with st.sidebar:
    st.markdown(
        "Keys are 1-32 bytes and are never stored. Encryption is "
        "deterministic, and decryption reads fragment and shard settings "
        "from the ciphertext."
    )

from tabs.text_tab import render as render_text  # noqa: E402
from tabs.file_tab import render as render_file  # noqa: E402

tab_text, tab_file = st.tabs(["📝 Text", "📁 File"])

with tab_text:
    render_text()

with tab_file:
    render_file()
