"""
Fraglock Fragmenting Cipher Engine
==================================

Keyed, fragmenting transform with interleaved redundancy units:
- HKDF-SHA256 expansion of a short master key (1-32 bytes) into per-fragment subkeys
- Per-fragment XOR keystream (AES-256-CTR or ChaCha20)
- Truncated HMAC-SHA256 redundancy unit after every ``redun`` bytes of output
- Self-describing envelope: decryption needs only the key
- Reversible decimal-digit encoding of ciphertext for text-only channels

Uses the ``cryptography`` library for every primitive.

Format specification (v1)
-------------------------
::

    [HEADER: 36 bytes, big-endian]
      0-7    Magic    b"FRAGLOK\\x00"
      8      Version  0x01
      9      CipherID 0x01 (AES-256-CTR) | 0x02 (ChaCha20)
     10      UnitSize 0x08 (redundancy unit width)
     11      Reserved (zeroed)
     12-19   Plaintext length
     20-27   Fragment size  (frag)
     28-35   Redundancy interval (redun)

    [BODY]
      window_0 || unit_0 || window_1 || unit_1 || ...

    Windows are consecutive ``redun``-byte slices of the transformed
    stream (all fragments concatenated).  The last window may be shorter
    and still carries a unit, so every ciphertext byte is covered.

      unit_k = HMAC-SHA256(shard_key, k (8 BE) || window_k)[:8]

Subkeys are bound to the header, so altering any header field changes
every subkey and every unit.

ChaCha20 uses the last 12 nonce bytes with a zero block counter, which
caps a ChaCha20 fragment at 64 * 2**32 bytes.
"""

from __future__ import annotations

import logging
import struct
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from cryptography.hazmat.primitives import constant_time, hashes, hmac
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF, HKDFExpand

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAGIC: bytes = b"FRAGLOK\x00"
FORMAT_VERSION: int = 1

CIPHER_AES_CTR: int = 1
CIPHER_CHACHA20: int = 2
CIPHER_NAMES = {
    CIPHER_AES_CTR: "AES-256-CTR",
    CIPHER_CHACHA20: "ChaCha20",
}
DEFAULT_CIPHER: int = CIPHER_AES_CTR

_HEADER_STRUCT = struct.Struct(">8sBBBBQQQ")
HEADER_SIZE: int = _HEADER_STRUCT.size  # 36

MIN_KEY_SIZE: int = 1
MAX_KEY_SIZE: int = 32
UNIT_SIZE: int = 8          # truncated HMAC-SHA256
SUBKEY_SIZE: int = 32       # AES-256 / ChaCha20 key
NONCE_SIZE: int = 16        # CTR initial block / ChaCha20 nonce
MAX_U64: int = 2**64 - 1
CHACHA20_MAX_FRAGMENT: int = 64 * 2**32  # 32-bit block counter from zero

DEFAULT_FRAGMENT_SIZE: int = 393216
DEFAULT_REDUNDANCY: int = 49152  # frag / 8

DIGITS_PER_BYTE: int = 3

_KDF_SALT: bytes = b"fraglock/v1"

ProgressCallback = Callable[[int, int], None]
PathLike = Union[str, Path]

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class FraglockError(Exception):
    """Base exception for all Fraglock errors."""


class InvalidKeyError(FraglockError):
    """Key is not bytes/str or its length is outside 1..32."""


class InvalidParametersError(FraglockError):
    """Fragment size, redundancy interval, cipher or worker count is invalid."""


class BufferTooSmallError(FraglockError):
    """Caller-supplied output buffer cannot hold the result."""

    def __init__(self, required: int, available: int):
        super().__init__(
            f"Output buffer too small: {required} bytes required, {available} available."
        )
        self.required = required
        self.available = available


class CorruptCiphertextError(FraglockError):
    """Ciphertext is malformed, truncated or fails verification."""


class FormatError(CorruptCiphertextError):
    """Envelope header is invalid or inconsistent with the body."""


class IntegrityError(CorruptCiphertextError):
    """A redundancy unit does not match the window it follows."""

    def __init__(self, message: str, shard_index: Optional[int] = None):
        super().__init__(message)
        self.shard_index = shard_index


class InvalidEncodingError(FraglockError):
    """Numeric string is not a valid digit encoding."""


class FileAccessError(FraglockError):
    """Input file could not be read or output file could not be written."""


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


def _check_count(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidParametersError(f"{name} must be an integer (got {type(value).__name__}).")
    if value < 1:
        raise InvalidParametersError(f"{name} must be at least 1 (got {value}).")
    if value > MAX_U64:
        raise InvalidParametersError(f"{name} must fit in 64 bits (got {value}).")


@dataclass(frozen=True)
class FragmentParams:
    """Fragment size and redundancy interval, validated on construction."""

    frag: int = DEFAULT_FRAGMENT_SIZE
    redun: int = DEFAULT_REDUNDANCY

    def __post_init__(self) -> None:
        _check_count("frag", self.frag)
        _check_count("redun", self.redun)
        if self.redun >= self.frag:
            raise InvalidParametersError(
                f"redun must be smaller than frag (got redun={self.redun}, frag={self.frag})."
            )


def _check_cipher(cipher: int, frag: int = 1) -> None:
    if cipher not in CIPHER_NAMES:
        raise InvalidParametersError(f"Unknown cipher id {cipher!r}.")
    if cipher == CIPHER_CHACHA20 and frag > CHACHA20_MAX_FRAGMENT:
        raise InvalidParametersError(
            f"ChaCha20 fragments are limited to {CHACHA20_MAX_FRAGMENT} bytes (got frag={frag})."
        )


def _check_workers(max_workers: Optional[int]) -> None:
    if max_workers is None:
        return
    if not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 1:
        raise InvalidParametersError(f"max_workers must be a positive integer (got {max_workers!r}).")


# ---------------------------------------------------------------------------
# Envelope header
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EnvelopeHeader:
    """Fixed-width header; enough on its own to locate every fragment and unit."""

    length: int
    frag: int
    redun: int
    cipher: int = DEFAULT_CIPHER
    version: int = FORMAT_VERSION
    unit_size: int = UNIT_SIZE

    def pack(self) -> bytes:
        return _HEADER_STRUCT.pack(
            MAGIC,
            self.version,
            self.cipher,
            self.unit_size,
            0,
            self.length,
            self.frag,
            self.redun,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "EnvelopeHeader":
        """
        Parse and validate the header at the start of *data*.

        Raises
        ------
        FormatError
            If the header is truncated, unsupported or self-inconsistent.
        """
        if len(data) < HEADER_SIZE:
            raise FormatError("Data too short to contain a valid Fraglock header.")
        magic, version, cipher, unit_size, reserved, length, frag, redun = _HEADER_STRUCT.unpack_from(data)
        if magic != MAGIC:
            raise FormatError("Invalid magic bytes: not a Fraglock envelope.")
        if version != FORMAT_VERSION:
            raise FormatError(f"Unsupported format version {version} (expected {FORMAT_VERSION}).")
        if cipher not in CIPHER_NAMES:
            raise FormatError(f"Unsupported cipher id {cipher}.")
        if unit_size != UNIT_SIZE:
            raise FormatError(f"Unsupported redundancy unit size {unit_size}.")
        if reserved != 0:
            raise FormatError("Reserved header byte is not zero.")
        try:
            FragmentParams(frag, redun)
            _check_cipher(cipher, frag)
        except InvalidParametersError as exc:
            raise FormatError(f"Inconsistent header parameters: {exc}") from exc
        return cls(length=length, frag=frag, redun=redun, cipher=cipher,
                   version=version, unit_size=unit_size)


# ---------------------------------------------------------------------------
# Key expansion
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FragmentKey:
    """Subkey material for one fragment."""

    index: int
    key: bytes
    nonce: bytes


@dataclass(frozen=True)
class ExpandedKey:
    fragment_keys: List[FragmentKey]
    shard_key: bytes


def _coerce_key(key: Union[bytes, bytearray, memoryview, str]) -> bytes:
    if isinstance(key, str):
        key = key.encode("utf-8")
    elif isinstance(key, (bytes, bytearray, memoryview)):
        key = bytes(key)
    else:
        raise InvalidKeyError("Key must be bytes or str.")
    if not MIN_KEY_SIZE <= len(key) <= MAX_KEY_SIZE:
        raise InvalidKeyError(
            f"Key must be {MIN_KEY_SIZE}-{MAX_KEY_SIZE} bytes (got {len(key)})."
        )
    return key


def expand_key(
    key: Union[bytes, str],
    header: bytes,
    fragment_count: int,
) -> ExpandedKey:
    """
    Derive one subkey per fragment plus the shard (redundancy) key.

    The master key is extracted with HKDF-SHA256 using the packed *header*
    as context, then each fragment subkey is an independent HKDF-Expand
    output labelled with its index.
    """
    master = _coerce_key(key)
    prk = HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_KDF_SALT,
        info=b"fraglock prk|" + bytes(header),
    ).derive(master)

    fragment_keys = []
    for index in range(fragment_count):
        okm = HKDFExpand(
            algorithm=hashes.SHA256(),
            length=SUBKEY_SIZE + NONCE_SIZE,
            info=b"fragment|" + struct.pack(">Q", index),
        ).derive(prk)
        fragment_keys.append(FragmentKey(index, okm[:SUBKEY_SIZE], okm[SUBKEY_SIZE:]))

    shard_key = HKDFExpand(
        algorithm=hashes.SHA256(),
        length=32,
        info=b"shard",
    ).derive(prk)
    return ExpandedKey(fragment_keys, shard_key)


# ---------------------------------------------------------------------------
# Fragmenter
# ---------------------------------------------------------------------------


def fragment_count(length: int, frag: int) -> int:
    """Number of fragments needed for *length* bytes: ``ceil(length / frag)``."""
    _check_count("frag", frag)
    if length < 0:
        raise InvalidParametersError("length must be non-negative.")
    return -(-length // frag)


def split_fragments(buffer: bytes, frag: int) -> List[bytes]:
    """Split *buffer* into ``frag``-byte fragments; the last may be shorter."""
    _check_count("frag", frag)
    return [bytes(buffer[i : i + frag]) for i in range(0, len(buffer), frag)]


def join_fragments(fragments: Sequence[bytes]) -> bytes:
    return b"".join(fragments)


# ---------------------------------------------------------------------------
# Fragment cipher
# ---------------------------------------------------------------------------


def _keystream_cipher(fragment_key: FragmentKey, cipher: int) -> Cipher:
    if cipher == CIPHER_AES_CTR:
        return Cipher(algorithms.AES(fragment_key.key), modes.CTR(fragment_key.nonce))
    if cipher == CIPHER_CHACHA20:
        # first 4 nonce bytes are the block counter; always start it at zero
        nonce = b"\x00" * 4 + fragment_key.nonce[4:]
        return Cipher(algorithms.ChaCha20(fragment_key.key, nonce), mode=None)
    raise InvalidParametersError(f"Unknown cipher id {cipher!r}.")


def transform_fragment(data: bytes, fragment_key: FragmentKey, cipher: int = DEFAULT_CIPHER) -> bytes:
    """XOR *data* with the keystream of *fragment_key*; output has the same length."""
    encryptor = _keystream_cipher(fragment_key, cipher).encryptor()
    return encryptor.update(data) + encryptor.finalize()


def invert_fragment(data: bytes, fragment_key: FragmentKey, cipher: int = DEFAULT_CIPHER) -> bytes:
    """Inverse of :func:`transform_fragment` under the same subkey."""
    decryptor = _keystream_cipher(fragment_key, cipher).decryptor()
    return decryptor.update(data) + decryptor.finalize()


def _run_fragments(
    fragments: List[bytes],
    keys: List[FragmentKey],
    cipher: int,
    fn: Callable[[bytes, FragmentKey, int], bytes],
    max_workers: Optional[int],
    progress_callback: Optional[ProgressCallback],
) -> List[bytes]:
    total = sum(len(f) for f in fragments)
    if max_workers and max_workers > 1 and len(fragments) > 1:
        executor = ThreadPoolExecutor(max_workers=max_workers)
        results = executor.map(lambda pair: fn(pair[0], pair[1], cipher), zip(fragments, keys))
    else:
        executor = None
        results = (fn(f, k, cipher) for f, k in zip(fragments, keys))

    out = []
    done = 0
    try:
        for result in results:
            out.append(result)
            done += len(result)
            if progress_callback:
                progress_callback(done, total)
    finally:
        if executor is not None:
            executor.shutdown(wait=True)
    return out


# ---------------------------------------------------------------------------
# Redundancy units
# ---------------------------------------------------------------------------


def shard_count(stream_length: int, redun: int) -> int:
    """Units in a stream of *stream_length* bytes; the trailing partial window counts."""
    _check_count("redun", redun)
    if stream_length < 0:
        raise InvalidParametersError("stream_length must be non-negative.")
    return -(-stream_length // redun)


def _compute_unit(shard_key: bytes, index: int, window: bytes) -> bytes:
    h = hmac.HMAC(shard_key, hashes.SHA256())
    h.update(struct.pack(">Q", index))
    h.update(window)
    return h.finalize()[:UNIT_SIZE]


def insert_redundancy(stream: bytes, redun: int, shard_key: bytes) -> bytes:
    """Follow every ``redun``-byte window of *stream* with its redundancy unit."""
    _check_count("redun", redun)
    parts = []
    for index, start in enumerate(range(0, len(stream), redun)):
        window = stream[start : start + redun]
        parts.append(window)
        parts.append(_compute_unit(shard_key, index, window))
    return b"".join(parts)


def verify_redundancy(body: bytes, redun: int, shard_key: bytes, stream_length: int) -> bytes:
    """
    Check and strip every redundancy unit in *body*.

    Returns the transformed stream.

    Raises
    ------
    FormatError
        If the body size does not match *stream_length* and *redun*.
    IntegrityError
        If any unit does not match its window.
    """
    units = shard_count(stream_length, redun)
    expected = stream_length + units * UNIT_SIZE
    if len(body) != expected:
        raise FormatError(
            f"Body is {len(body)} bytes, expected {expected}: data truncated or padded."
        )

    windows = []
    pos = 0
    remaining = stream_length
    for index in range(units):
        width = min(redun, remaining)
        window = bytes(body[pos : pos + width])
        unit = bytes(body[pos + width : pos + width + UNIT_SIZE])
        if not constant_time.bytes_eq(unit, _compute_unit(shard_key, index, window)):
            logger.warning("Shard %d failed verification", index)
            raise IntegrityError(
                f"Shard {index} failed verification: wrong key or corrupted data.",
                shard_index=index,
            )
        windows.append(window)
        pos += width + UNIT_SIZE
        remaining -= width
    return b"".join(windows)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EnvelopeInfo:
    """Keyless summary of an envelope."""

    version: int
    cipher: str
    length: int
    frag: int
    redun: int
    fragments: int
    shards: int
    size: int


def assemble_envelope(header: EnvelopeHeader, body: bytes) -> bytes:
    return header.pack() + body


def parse_envelope(data: bytes) -> Tuple[EnvelopeHeader, bytes]:
    """
    Split *data* into a validated header and its body.

    The body size is checked against the header before any unit is
    verified.
    """
    header = EnvelopeHeader.unpack(data)
    body = data[HEADER_SIZE:]
    expected = header.length + shard_count(header.length, header.redun) * UNIT_SIZE
    if len(body) != expected:
        raise FormatError(
            f"Declared length {header.length} does not match body of {len(body)} bytes."
        )
    return header, body


def inspect_envelope(data: bytes) -> EnvelopeInfo:
    """Describe an envelope without decrypting it."""
    header, _ = parse_envelope(data)
    return EnvelopeInfo(
        version=header.version,
        cipher=CIPHER_NAMES[header.cipher],
        length=header.length,
        frag=header.frag,
        redun=header.redun,
        fragments=fragment_count(header.length, header.frag),
        shards=shard_count(header.length, header.redun),
        size=len(data),
    )


def ciphertext_size(
    plaintext_length: int,
    frag: int = DEFAULT_FRAGMENT_SIZE,
    redun: int = DEFAULT_REDUNDANCY,
) -> int:
    """Exact envelope size for a plaintext of *plaintext_length* bytes."""
    params = FragmentParams(frag, redun)
    return HEADER_SIZE + plaintext_length + shard_count(plaintext_length, params.redun) * UNIT_SIZE


def plaintext_size(ciphertext: bytes) -> int:
    """Plaintext length declared by (and consistent with) *ciphertext*."""
    header, _ = parse_envelope(ciphertext)
    return header.length


# ---------------------------------------------------------------------------
# Numeric string codec
# ---------------------------------------------------------------------------


def data_to_string(data: bytes) -> str:
    """Render each byte as three decimal digits (``0x00`` -> ``"000"``)."""
    return "".join(f"{b:03d}" for b in bytes(data))


def string_to_data(text: str) -> bytes:
    """
    Inverse of :func:`data_to_string`.

    Raises
    ------
    InvalidEncodingError
        On non-digit characters, a length that is not a multiple of three,
        or a group above 255.
    """
    if not isinstance(text, str):
        raise InvalidEncodingError("Numeric string must be str.")
    if len(text) % DIGITS_PER_BYTE:
        raise InvalidEncodingError(
            f"Numeric string length {len(text)} is not a multiple of {DIGITS_PER_BYTE}."
        )
    if text and not (text.isascii() and text.isdigit()):
        raise InvalidEncodingError("Numeric string may contain only ASCII digits.")
    out = bytearray()
    for i in range(0, len(text), DIGITS_PER_BYTE):
        value = int(text[i : i + DIGITS_PER_BYTE])
        if value > 255:
            raise InvalidEncodingError(
                f"Digit group {text[i : i + DIGITS_PER_BYTE]!r} at offset {i} exceeds 255."
            )
        out.append(value)
    return bytes(out)


# ---------------------------------------------------------------------------
# FraglockEngine
# ---------------------------------------------------------------------------


def _writable_view(out) -> memoryview:
    view = memoryview(out)
    if view.readonly:
        raise TypeError("Output buffer must be writable.")
    return view.cast("B")


class FraglockEngine:
    """
    High-level encryption / decryption engine.

    All public methods are **static**; the class serves as a logical
    namespace.  Every call is a pure function of its arguments.
    """

    # ------------------------------------------------------------------
    # In-memory encrypt / decrypt
    # ------------------------------------------------------------------

    @staticmethod
    def encrypt(
        plaintext: bytes,
        key: Union[bytes, str],
        *,
        frag: int = DEFAULT_FRAGMENT_SIZE,
        redun: int = DEFAULT_REDUNDANCY,
        cipher: int = DEFAULT_CIPHER,
        max_workers: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> bytes:
        """
        Encrypt *plaintext* under *key* (1-32 bytes).

        Returns a self-contained envelope:
        ``header(36) || window || unit || window || unit ...``

        Parameters
        ----------
        frag : int
            Fragment size; each fragment gets its own subkey.
        redun : int
            Redundancy interval; must be smaller than *frag*.
        cipher : int
            ``CIPHER_AES_CTR`` or ``CIPHER_CHACHA20``.
        max_workers : int, optional
            Transform fragments on a thread pool of this size.
        progress_callback : callable(bytes_processed, total_bytes)
        """
        key = _coerce_key(key)
        params = FragmentParams(frag, redun)
        _check_cipher(cipher, params.frag)
        _check_workers(max_workers)

        plaintext = bytes(plaintext)
        header = EnvelopeHeader(len(plaintext), params.frag, params.redun, cipher)
        packed = header.pack()
        fragments = split_fragments(plaintext, params.frag)
        expanded = expand_key(key, packed, len(fragments))

        transformed = _run_fragments(
            fragments, expanded.fragment_keys, cipher, transform_fragment,
            max_workers, progress_callback,
        )
        body = insert_redundancy(join_fragments(transformed), params.redun, expanded.shard_key)
        logger.debug(
            "encrypt: %d bytes, %d fragments, %d shards",
            len(plaintext), len(fragments), shard_count(len(plaintext), params.redun),
        )
        return packed + body

    @staticmethod
    def decrypt(
        ciphertext: bytes,
        key: Union[bytes, str],
        *,
        max_workers: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> bytes:
        """
        Decrypt an envelope produced by :meth:`encrypt`.

        ``frag``, ``redun`` and the cipher are read from the header.

        Raises
        ------
        InvalidKeyError
            If the key length is outside 1-32.
        FormatError
            If the header is invalid or the data is truncated.
        IntegrityError
            If the key is wrong or the data is corrupted.
        """
        key = _coerce_key(key)
        _check_workers(max_workers)

        ciphertext = bytes(ciphertext)
        header, body = parse_envelope(ciphertext)
        count = fragment_count(header.length, header.frag)
        expanded = expand_key(key, ciphertext[:HEADER_SIZE], count)

        stream = verify_redundancy(body, header.redun, expanded.shard_key, header.length)
        fragments = split_fragments(stream, header.frag)
        restored = _run_fragments(
            fragments, expanded.fragment_keys, header.cipher, invert_fragment,
            max_workers, progress_callback,
        )
        logger.debug(
            "decrypt: %d bytes, %d fragments, %d shards",
            header.length, count, shard_count(header.length, header.redun),
        )
        return join_fragments(restored)

    # ------------------------------------------------------------------
    # Caller-supplied output buffers
    # ------------------------------------------------------------------

    @staticmethod
    def encrypt_into(
        plaintext: bytes,
        key: Union[bytes, str],
        out,
        *,
        frag: int = DEFAULT_FRAGMENT_SIZE,
        redun: int = DEFAULT_REDUNDANCY,
        cipher: int = DEFAULT_CIPHER,
        max_workers: Optional[int] = None,
    ) -> int:
        """
        Encrypt into the writable buffer *out* and return the bytes written.

        Raises :class:`BufferTooSmallError` (with ``.required``) before any
        work is done if *out* is too small.
        """
        _coerce_key(key)
        plaintext = bytes(plaintext)
        view = _writable_view(out)
        required = ciphertext_size(len(plaintext), frag, redun)
        if len(view) < required:
            raise BufferTooSmallError(required, len(view))
        result = FraglockEngine.encrypt(
            plaintext, key, frag=frag, redun=redun, cipher=cipher, max_workers=max_workers,
        )
        view[: len(result)] = result
        return len(result)

    @staticmethod
    def decrypt_into(
        ciphertext: bytes,
        key: Union[bytes, str],
        out,
        *,
        max_workers: Optional[int] = None,
    ) -> int:
        """Decrypt into the writable buffer *out* and return the bytes written."""
        _coerce_key(key)
        ciphertext = bytes(ciphertext)
        view = _writable_view(out)
        required = plaintext_size(ciphertext)
        if len(view) < required:
            raise BufferTooSmallError(required, len(view))
        result = FraglockEngine.decrypt(ciphertext, key, max_workers=max_workers)
        view[: len(result)] = result
        return len(result)

    # ------------------------------------------------------------------
    # Text wrappers (numeric string transport)
    # ------------------------------------------------------------------

    @staticmethod
    def encrypt_text(text: str, key: Union[bytes, str], **kwargs) -> str:
        """Encrypt UTF-8 *text* and return the envelope as a digit string."""
        return data_to_string(FraglockEngine.encrypt(text.encode("utf-8"), key, **kwargs))

    @staticmethod
    def decrypt_text(digits: str, key: Union[bytes, str], **kwargs) -> str:
        """Decrypt a digit string produced by :meth:`encrypt_text`."""
        plaintext = FraglockEngine.decrypt(string_to_data(digits), key, **kwargs)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormatError("Decrypted data is not valid UTF-8 text.") from exc

    # ------------------------------------------------------------------
    # File wrappers
    # ------------------------------------------------------------------

    @staticmethod
    def encrypt_file(
        input_path: PathLike,
        output_path: PathLike,
        key: Union[bytes, str],
        **kwargs,
    ) -> None:
        """
        Encrypt a whole file into an envelope file.

        Keyword arguments are passed to :meth:`encrypt`.  Engine errors
        propagate unchanged; I/O failures raise :class:`FileAccessError`.
        """
        data = _read_file(input_path)
        _write_file(output_path, FraglockEngine.encrypt(data, key, **kwargs))

    @staticmethod
    def decrypt_file(
        input_path: PathLike,
        output_path: PathLike,
        key: Union[bytes, str],
        **kwargs,
    ) -> None:
        """Decrypt an envelope file produced by :meth:`encrypt_file`."""
        data = _read_file(input_path)
        _write_file(output_path, FraglockEngine.decrypt(data, key, **kwargs))


def _read_file(path: PathLike) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise FileAccessError(f"Cannot read {path}: {exc.strerror or exc}") from exc


def _write_file(path: PathLike, data: bytes) -> None:
    try:
        Path(path).write_bytes(data)
    except OSError as exc:
        raise FileAccessError(f"Cannot write {path}: {exc.strerror or exc}") from exc


# ---------------------------------------------------------------------------
# Module-level convenience functions
# ---------------------------------------------------------------------------

_engine = FraglockEngine

encrypt = _engine.encrypt
decrypt = _engine.decrypt
encrypt_into = _engine.encrypt_into
decrypt_into = _engine.decrypt_into

encrypt_text = _engine.encrypt_text
decrypt_text = _engine.decrypt_text

encrypt_file = _engine.encrypt_file
decrypt_file = _engine.decrypt_file


# ---------------------------------------------------------------------------
# Self-test (run with: python fraglock.py)
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import os
    import sys

    passed = 0
    failed = 0

    def _test(name: str, fn):
        global passed, failed
        try:
            fn()
            print(f"  [PASS] {name}")
            passed += 1
        except Exception as exc:
            print(f"  [FAIL] {name}: {exc}")
            failed += 1

    print("=" * 60)
    print("Fraglock Engine Self-Test")
    print("=" * 60)

    def test_roundtrip():
        pt = b"Text to encrypt."
        assert decrypt(encrypt(pt, "maryhadalittlela"), "maryhadalittlela") == pt

    _test("Encrypt -> Decrypt round-trip", test_roundtrip)

    def test_small_fragments():
        pt = os.urandom(25)
        ct = encrypt(pt, b"k", frag=10, redun=3)
        info = inspect_envelope(ct)
        assert (info.fragments, info.shards) == (3, 9)
        assert decrypt(ct, b"k") == pt

    _test("frag=10 redun=3 on 25 bytes", test_small_fragments)

    def test_tamper():
        ct = bytearray(encrypt(b"data" * 10, b"key"))
        ct[-1] ^= 0xFF
        try:
            decrypt(bytes(ct), b"key")
            assert False, "Should have raised"
        except CorruptCiphertextError:
            pass

    _test("Tampered ciphertext raises CorruptCiphertextError", test_tamper)

    def test_digits():
        data = b"\x00\x00\xff\x10"
        assert string_to_data(data_to_string(data)) == data

    _test("Numeric string round-trip", test_digits)

    print("\n" + "=" * 60)
    print(f"Results: {passed}/{passed + failed} passed, {failed} failed")
    print("=" * 60)
    if failed:
        sys.exit(1)
