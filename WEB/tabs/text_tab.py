"""
Fraglock Web: Text Tab
======================

Encrypt text to a numeric string, or decrypt a numeric string back to
text.  The numeric string is safe to paste into any text-only channel.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# -- project-root import ---------------------------------------------------
_root = str(Path(__file__).resolve().parent.parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import fraglock  # noqa: E402

from utils import key_strength, parse_digit_input, wrap_digits  # noqa: E402


# ---------------------------------------------------------------------------
# Public render function
# ---------------------------------------------------------------------------

def render() -> None:
    """Render the Text encryption / decryption tab."""

    operation = st.radio(
        "Operation",
        ["Encrypt", "Decrypt"],
        horizontal=True,
        key="text_operation",
    )

    key = st.text_input(
        "Key (1-32 bytes)",
        type="password",
        placeholder="Enter your key…",
        key="text_key",
    )
    if key:
        score, label, color = key_strength(key)
        cols = st.columns([4, 1])
        with cols[0]:
            st.progress(score / 100)
        with cols[1]:
            st.markdown(
                f"<span style='color:{color}; font-weight:600;'>{label}</span>",
                unsafe_allow_html=True,
            )

    frag, redun, cipher = fraglock.DEFAULT_FRAGMENT_SIZE, fraglock.DEFAULT_REDUNDANCY, fraglock.DEFAULT_CIPHER
    if operation == "Encrypt":
        frag, redun, cipher = render_params("text")

    st.markdown("---")

    if operation == "Encrypt":
        input_text = st.text_area(
            "Plaintext",
            height=200,
            placeholder="Enter text to encrypt…",
            key="text_input_encrypt",
        )
    else:
        input_text = st.text_area(
            "Ciphertext (numeric string)",
            height=200,
            placeholder="Paste the digit string…",
            key="text_input_decrypt",
        )

    if input_text:
        n_chars = len(input_text)
        n_bytes = len(input_text.encode("utf-8"))
        st.caption(f"{n_chars:,} chars  |  {n_bytes:,} bytes")

    btn_label = "🔒 Encrypt" if operation == "Encrypt" else "🔓 Decrypt"
    if st.button(btn_label, type="primary", use_container_width=True, key="text_action"):
        if not input_text:
            st.error("Please enter some text first.")
            return

        try:
            if operation == "Encrypt":
                digits = fraglock.encrypt_text(input_text, key, frag=frag, redun=redun, cipher=cipher)
                info = fraglock.inspect_envelope(fraglock.string_to_data(digits))

                st.success("Encryption successful!")
                st.text_area(
                    "Encrypted Output (numeric string)",
                    value=wrap_digits(digits),
                    height=200,
                    key="text_output_display",
                )
                st.caption(
                    f"{info.cipher}  |  {info.fragments} fragment(s)  |  "
                    f"{info.shards} shard(s)  |  {info.size:,} bytes"
                )
                st.download_button(
                    "📥 Download as .txt file",
                    data=digits,
                    file_name="encrypted.txt",
                    mime="text/plain",
                    key="text_download_enc",
                )
            else:
                plaintext = fraglock.decrypt_text(parse_digit_input(input_text), key)

                st.success("Decryption successful!")
                st.text_area(
                    "Decrypted Output",
                    value=plaintext,
                    height=200,
                    key="text_output_display",
                )

        except fraglock.InvalidKeyError as e:
            st.error(f"Invalid key: {e}")
        except fraglock.InvalidParametersError as e:
            st.error(f"Invalid parameters: {e}")
        except fraglock.InvalidEncodingError as e:
            st.error(f"Not a numeric string: {e}")
        except fraglock.IntegrityError as e:
            st.error(f"Decryption failed: {e}")
        except fraglock.FormatError as e:
            st.error(f"Format error: {e}")
        except fraglock.FraglockError as e:
            st.error(f"Error: {e}")


def render_params(prefix: str) -> tuple[int, int, int]:
    """Fragment size, redundancy interval and cipher inputs."""
    with st.expander("Fragmentation settings"):
        cols = st.columns(3)
        with cols[0]:
            frag = st.number_input(
                "Fragment size (bytes)",
                min_value=2,
                value=fraglock.DEFAULT_FRAGMENT_SIZE,
                step=1024,
                key=f"{prefix}_frag",
            )
        with cols[1]:
            redun = st.number_input(
                "Redundancy interval (bytes)",
                min_value=1,
                value=fraglock.DEFAULT_REDUNDANCY,
                step=1024,
                key=f"{prefix}_redun",
                help="Smaller values mean more shards. Keep at or below frag / 8.",
            )
        with cols[2]:
            cipher = st.selectbox(
                "Cipher",
                list(fraglock.CIPHER_NAMES),
                format_func=lambda cid: fraglock.CIPHER_NAMES[cid],
                key=f"{prefix}_cipher",
            )
    return int(frag), int(redun), int(cipher)
