"""
Fraglock Web: File Tab
======================

Encrypt / decrypt uploaded files in memory through ``fraglock.encrypt`` /
``fraglock.decrypt`` and offer the result for download.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import streamlit as st

# -- project-root import ---------------------------------------------------
_root = str(Path(__file__).resolve().parent.parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import fraglock  # noqa: E402

from tabs.text_tab import render_params  # noqa: E402
from utils import human_file_size, safe_output_filename  # noqa: E402


# ---------------------------------------------------------------------------
# Public render function
# ---------------------------------------------------------------------------

def render() -> None:
    """Render the File encryption / decryption tab."""

    operation = st.radio(
        "Operation",
        ["Encrypt", "Decrypt"],
        horizontal=True,
        key="file_operation",
    )

    uploaded = st.file_uploader(
        "Choose a file" if operation == "Encrypt" else "Choose an encrypted file",
        key="file_uploader",
    )

    if uploaded:
        st.caption(f"**{uploaded.name}**  |  {human_file_size(uploaded.size)}")
        if operation == "Decrypt":
            try:
                info = fraglock.inspect_envelope(uploaded.getvalue())
                st.caption(
                    f"{info.cipher}  |  frag {info.frag:,}  |  redun {info.redun:,}  |  "
                    f"{info.fragments} fragment(s)  |  {info.shards} shard(s)"
                )
            except fraglock.FormatError as e:
                st.warning(f"Not a Fraglock envelope: {e}")

    key = st.text_input(
        "Key (1-32 bytes)",
        type="password",
        placeholder="Enter your key…",
        key="file_key",
    )

    frag, redun, cipher = fraglock.DEFAULT_FRAGMENT_SIZE, fraglock.DEFAULT_REDUNDANCY, fraglock.DEFAULT_CIPHER
    if operation == "Encrypt":
        frag, redun, cipher = render_params("file")

    st.markdown("---")
    btn_label = "🔒 Encrypt File" if operation == "Encrypt" else "🔓 Decrypt File"

    if st.button(btn_label, type="primary", use_container_width=True, key="file_action"):
        if not uploaded:
            st.error("Please upload a file first.")
            return

        try:
            result_bytes, out_name = _process_file(uploaded, operation, key, frag, redun, cipher)
            st.success(
                f"{'Encryption' if operation == 'Encrypt' else 'Decryption'} "
                f"successful!  ({human_file_size(len(result_bytes))})"
            )
            st.download_button(
                f"📥 Download {out_name}",
                data=result_bytes,
                file_name=out_name,
                mime="application/octet-stream",
                key="file_download",
            )

        except fraglock.InvalidKeyError as e:
            st.error(f"Invalid key: {e}")
        except fraglock.InvalidParametersError as e:
            st.error(f"Invalid parameters: {e}")
        except fraglock.IntegrityError as e:
            st.error(f"Decryption failed: {e}")
        except fraglock.FormatError as e:
            st.error(f"Format error: {e}")
        except fraglock.FraglockError as e:
            st.error(f"Error: {e}")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _process_file(
    uploaded,
    operation: str,
    key: str,
    frag: int,
    redun: int,
    cipher: int,
) -> tuple[bytes, str]:
    """
    Process the uploaded file through the engine.

    Returns (result_bytes, suggested_output_filename).
    """
    encrypting = operation == "Encrypt"
    out_name = safe_output_filename(uploaded.name, encrypting)
    data = uploaded.getvalue()

    progress_bar = st.progress(0, text="Processing…")

    def progress_cb(done: int, total: int) -> None:
        if total > 0:
            pct = min(done / total, 1.0)
            progress_bar.progress(pct, text=f"Processing… {human_file_size(done)} / {human_file_size(total)}")

    if encrypting:
        result = fraglock.encrypt(
            data, key,
            frag=frag, redun=redun, cipher=cipher,
            max_workers=os.cpu_count(), progress_callback=progress_cb,
        )
    else:
        result = fraglock.decrypt(
            data, key,
            max_workers=os.cpu_count(), progress_callback=progress_cb,
        )

    progress_bar.progress(1.0, text="Done!")
    return result, out_name
