"""
Fraglock Web: Utility Helpers
=============================

Shared helpers for key strength, digit-string cleanup, file size
formatting, and output filename generation.
"""

from __future__ import annotations

import math
import re

ENVELOPE_SUFFIX = ".flk"
MAX_KEY_BYTES = 32


# ---------------------------------------------------------------------------
# Key strength
# ---------------------------------------------------------------------------

def key_strength(key: str) -> tuple[int, str, str]:
    """
    Evaluate a 1-32 byte key by character-pool entropy.

    Returns
    -------
    (score, label, color) : tuple[int, str, str]
        score : 0-100 normalised against 128-bit target entropy
        label : "Too long" / "Weak" / "Fair" / "Good" / "Strong" / ""
        color : hex colour string for the UI indicator
    """
    if not key:
        return 0, "", "#6c6c80"

    size = len(key.encode("utf-8"))
    if size > MAX_KEY_BYTES:
        return 0, "Too long", "#e74c3c"

    pool = 0
    if re.search(r"[a-z]", key):
        pool += 26
    if re.search(r"[A-Z]", key):
        pool += 26
    if re.search(r"[0-9]", key):
        pool += 10
    if re.search(r"[^a-zA-Z0-9]", key):
        pool += 32
    pool = max(pool, 1)

    entropy = len(key) * math.log2(pool)
    score = min(int(entropy * 100 / 128), 100)

    if score < 25:
        return score, "Weak", "#e74c3c"
    if score < 50:
        return score, "Fair", "#f39c12"
    if score < 75:
        return score, "Good", "#3498db"
    return score, "Strong", "#2ecc71"


# ---------------------------------------------------------------------------
# Pasted numeric strings
# ---------------------------------------------------------------------------

def parse_digit_input(text: str) -> str:
    """Drop whitespace and line breaks from a pasted digit string."""
    return re.sub(r"\s+", "", text)


def wrap_digits(digits: str, width: int = 96) -> str:
    """Break a long digit string into lines of *width* (a multiple of 3)."""
    if width < 3 or width % 3:
        raise ValueError("width must be a positive multiple of 3")
    return "\n".join(digits[i : i + width] for i in range(0, len(digits), width))


# ---------------------------------------------------------------------------
# Human-readable file size
# ---------------------------------------------------------------------------

def human_file_size(size_bytes: int) -> str:
    """Convert byte count to a human-readable string (e.g. '1.5 MB')."""
    if size_bytes < 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024.0:
            return f"{size_bytes} B" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


# ---------------------------------------------------------------------------
# Output filename helper
# ---------------------------------------------------------------------------

def safe_output_filename(original: str, encrypting: bool) -> str:
    """
    Derive an output filename for download.

    * Encrypting  → append ``.flk``
    * Decrypting  → strip ``.flk`` suffix if present, else prepend ``decrypted_``
    """
    if encrypting:
        return original + ENVELOPE_SUFFIX
    if original.endswith(ENVELOPE_SUFFIX) and len(original) > len(ENVELOPE_SUFFIX):
        return original[: -len(ENVELOPE_SUFFIX)]
    return "decrypted_" + original
