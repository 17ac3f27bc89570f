import os
from array import array

import pytest

import fraglock
from fraglock import (
    CIPHER_AES_CTR,
    CIPHER_CHACHA20,
    DEFAULT_FRAGMENT_SIZE,
    DEFAULT_REDUNDANCY,
    HEADER_SIZE,
    UNIT_SIZE,
    BufferTooSmallError,
    CorruptCiphertextError,
    EnvelopeHeader,
    FileAccessError,
    FormatError,
    FragmentKey,
    FragmentParams,
    IntegrityError,
    InvalidEncodingError,
    InvalidKeyError,
    InvalidParametersError,
)

KEY = b"maryhadalittlela"


# ---------------------------------------------------------------------------
# Facade round trips
# ---------------------------------------------------------------------------


def test_documented_example_roundtrip():
    pt = b"Text to encrypt."
    ct = fraglock.encrypt(pt, KEY)
    assert len(ct) >= 16
    assert fraglock.inspect_envelope(ct).fragments == 1
    assert fraglock.decrypt(ct, KEY) == pt


@pytest.mark.parametrize("key_len", range(1, 33))
def test_roundtrip_every_key_length(key_len):
    key = bytes(range(key_len))
    pt = os.urandom(300)
    assert fraglock.decrypt(fraglock.encrypt(pt, key), key) == pt


def test_roundtrip_every_length_small_params():
    frag, redun = 8, 3
    for n in range(2 * frag + 2):
        pt = os.urandom(n)
        ct = fraglock.encrypt(pt, KEY, frag=frag, redun=redun)
        assert fraglock.decrypt(ct, KEY) == pt


@pytest.mark.parametrize(
    "length",
    [1, DEFAULT_REDUNDANCY - 1, DEFAULT_REDUNDANCY, DEFAULT_REDUNDANCY + 1,
     DEFAULT_FRAGMENT_SIZE, DEFAULT_FRAGMENT_SIZE + 1],
)
def test_roundtrip_default_param_boundaries(length):
    pt = os.urandom(length)
    assert fraglock.decrypt(fraglock.encrypt(pt, KEY), KEY) == pt


def test_empty_plaintext_is_header_only():
    ct = fraglock.encrypt(b"", KEY)
    assert len(ct) == HEADER_SIZE
    assert fraglock.decrypt(ct, KEY) == b""


def test_str_key_matches_utf8_bytes():
    pt = b"same key, two spellings"
    assert fraglock.encrypt(pt, "maryhadalittlela") == fraglock.encrypt(pt, KEY)


def test_encrypt_is_deterministic():
    pt = os.urandom(1000)
    c1 = fraglock.encrypt(pt, KEY, frag=100, redun=7)
    c2 = fraglock.encrypt(pt, KEY, frag=100, redun=7)
    assert c1 == c2


def test_ciphertext_hides_plaintext():
    pt = b"A" * 64
    ct = fraglock.encrypt(pt, KEY)
    assert pt not in ct


def test_chacha20_roundtrip_and_differs_from_aes():
    pt = os.urandom(500)
    aes = fraglock.encrypt(pt, KEY, frag=64, redun=8)
    chacha = fraglock.encrypt(pt, KEY, frag=64, redun=8, cipher=CIPHER_CHACHA20)
    assert aes != chacha
    assert fraglock.inspect_envelope(chacha).cipher == "ChaCha20"
    assert fraglock.decrypt(chacha, KEY) == pt



def test_chacha20_counter_starts_at_zero_for_any_derived_nonce():
    data = os.urandom(200)
    fk = FragmentKey(0, os.urandom(32), b"\xff" * 4 + os.urandom(12))
    out = fraglock.transform_fragment(data, fk, CIPHER_CHACHA20)
    assert len(out) == len(data)
    assert fraglock.invert_fragment(out, fk, CIPHER_CHACHA20) == data

    # only the trailing 12 nonce bytes reach the cipher
    same = FragmentKey(0, fk.key, b"\x00" * 4 + fk.nonce[4:])
    assert fraglock.transform_fragment(data, same, CIPHER_CHACHA20) == out


def test_chacha20_large_single_fragment_roundtrip():
    pt = os.urandom(1 << 20)
    ct = fraglock.encrypt(pt, b"k199967", frag=1 << 21, redun=1 << 18, cipher=CIPHER_CHACHA20)
    assert fraglock.decrypt(ct, b"k199967") == pt


def test_chacha20_fragment_size_limit():
    limit = fraglock.CHACHA20_MAX_FRAGMENT
    with pytest.raises(InvalidParametersError):
        fraglock.encrypt(b"x", KEY, frag=limit + 1, redun=8, cipher=CIPHER_CHACHA20)
    # AES-CTR has no such limit
    assert fraglock.decrypt(fraglock.encrypt(b"x", KEY, frag=limit + 1, redun=8), KEY) == b"x"

    header = EnvelopeHeader(length=0, frag=limit + 1, redun=8, cipher=CIPHER_CHACHA20).pack()
    with pytest.raises(FormatError):
        fraglock.parse_envelope(header)

def test_parallel_matches_sequential():
    pt = os.urandom(10_000)
    seq = fraglock.encrypt(pt, KEY, frag=1000, redun=100)
    par = fraglock.encrypt(pt, KEY, frag=1000, redun=100, max_workers=4)
    assert seq == par
    assert fraglock.decrypt(par, KEY, max_workers=4) == pt


def test_progress_callback_reports_each_fragment():
    calls = []
    pt = os.urandom(2500)
    fraglock.encrypt(pt, KEY, frag=1000, redun=100,
                     progress_callback=lambda done, total: calls.append((done, total)))
    assert calls == [(1000, 2500), (2000, 2500), (2500, 2500)]


# ---------------------------------------------------------------------------
# Fragment / shard arithmetic
# ---------------------------------------------------------------------------


def test_frag10_redun3_on_25_bytes():
    pt = bytes(range(25))
    ct = fraglock.encrypt(pt, KEY, frag=10, redun=3)
    info = fraglock.inspect_envelope(ct)
    assert info.fragments == 3
    assert info.shards == 9
    assert len(ct) == HEADER_SIZE + 25 + 9 * UNIT_SIZE == 133
    assert [len(f) for f in fraglock.split_fragments(pt, 10)] == [10, 10, 5]
    assert fraglock.decrypt(ct, KEY) == pt


@pytest.mark.parametrize("length", [0, 1, 9, 10, 11, 99, 100, 101])
def test_fragment_count_is_ceiling(length):
    assert fraglock.fragment_count(length, 10) == -(-length // 10)
    assert len(fraglock.split_fragments(b"x" * length, 10)) == fraglock.fragment_count(length, 10)


def test_split_join_roundtrip():
    data = os.urandom(37)
    for frag in (1, 2, 5, 37, 100):
        assert fraglock.join_fragments(fraglock.split_fragments(data, frag)) == data
    assert fraglock.split_fragments(b"", 4) == []


def test_split_rejects_zero_frag():
    with pytest.raises(InvalidParametersError):
        fraglock.split_fragments(b"abc", 0)


def test_shard_count_and_ciphertext_size():
    assert fraglock.shard_count(0, 3) == 0
    assert fraglock.shard_count(3, 3) == 1
    assert fraglock.shard_count(4, 3) == 2
    for n in (0, 1, 16, 1000):
        assert fraglock.ciphertext_size(n, 64, 8) == len(fraglock.encrypt(os.urandom(n), KEY, frag=64, redun=8))


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


def test_expand_key_deterministic_and_distinct():
    header = EnvelopeHeader(100, 10, 3).pack()
    a = fraglock.expand_key(KEY, header, 10)
    b = fraglock.expand_key(KEY, header, 10)
    assert a == b
    assert len({k.key for k in a.fragment_keys}) == 10
    assert len({k.nonce for k in a.fragment_keys}) == 10

    other = fraglock.expand_key(KEY, EnvelopeHeader(100, 11, 3).pack(), 10)
    assert other.fragment_keys[0].key != a.fragment_keys[0].key
    assert other.shard_key != a.shard_key


def test_expand_key_rejects_bad_keys():
    header = EnvelopeHeader(0, 10, 3).pack()
    for key in (b"", b"x" * 33, 12345):
        with pytest.raises(InvalidKeyError):
            fraglock.expand_key(key, header, 1)


@pytest.mark.parametrize("cipher", [CIPHER_AES_CTR, CIPHER_CHACHA20])
def test_fragment_transform_inverts(cipher):
    fk = FragmentKey(0, os.urandom(32), os.urandom(16))
    for n in range(0, 33):
        data = os.urandom(n)
        out = fraglock.transform_fragment(data, fk, cipher)
        assert len(out) == n
        assert fraglock.invert_fragment(out, fk, cipher) == data


def test_fragment_invert_needs_matching_subkey():
    fk = FragmentKey(0, os.urandom(32), os.urandom(16))
    other = FragmentKey(0, os.urandom(32), os.urandom(16))
    data = os.urandom(64)
    assert fraglock.invert_fragment(fraglock.transform_fragment(data, fk), other) != data


def test_redundancy_insert_verify():
    shard_key = os.urandom(32)
    stream = os.urandom(10)
    body = fraglock.insert_redundancy(stream, 4, shard_key)
    assert len(body) == 10 + 3 * UNIT_SIZE
    assert body[:4] == stream[:4]
    assert body[4 + UNIT_SIZE : 8 + UNIT_SIZE] == stream[4:8]
    assert fraglock.verify_redundancy(body, 4, shard_key, 10) == stream


def test_redundancy_verify_rejects_wrong_size():
    shard_key = os.urandom(32)
    body = fraglock.insert_redundancy(os.urandom(10), 4, shard_key)
    with pytest.raises(FormatError):
        fraglock.verify_redundancy(body[:-1], 4, shard_key, 10)


def test_fragment_params_validation():
    assert FragmentParams() == FragmentParams(393216, 49152)
    for frag, redun in [(0, 1), (10, 0), (10, 10), (10, 11), (True, 1), (10, 2.5), (2**64, 3)]:
        with pytest.raises(InvalidParametersError):
            FragmentParams(frag, redun)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("key", [b"", b"k" * 33, "", None])
def test_invalid_key_rejected(key):
    with pytest.raises(InvalidKeyError):
        fraglock.encrypt(b"data", key)
    ct = fraglock.encrypt(b"data", KEY)
    with pytest.raises(InvalidKeyError):
        fraglock.decrypt(ct, key)


@pytest.mark.parametrize("frag,redun", [(10, 10), (10, 20), (0, 1), (5, 0)])
def test_invalid_parameters_rejected(frag, redun):
    with pytest.raises(InvalidParametersError):
        fraglock.encrypt(b"data", KEY, frag=frag, redun=redun)


def test_unknown_cipher_and_workers_rejected():
    with pytest.raises(InvalidParametersError):
        fraglock.encrypt(b"data", KEY, cipher=99)
    with pytest.raises(InvalidParametersError):
        fraglock.encrypt(b"data", KEY, max_workers=0)


def test_every_single_byte_flip_is_detected():
    ct = fraglock.encrypt(bytes(range(25)), KEY, frag=10, redun=3)
    for i in range(len(ct)):
        tampered = bytearray(ct)
        tampered[i] ^= 0xFF
        with pytest.raises(CorruptCiphertextError):
            fraglock.decrypt(bytes(tampered), KEY)


def test_tamper_reports_shard_index():
    ct = bytearray(fraglock.encrypt(bytes(range(25)), KEY, frag=10, redun=3))
    ct[HEADER_SIZE + 4 * (3 + UNIT_SIZE) + 1] ^= 0x01
    with pytest.raises(IntegrityError) as excinfo:
        fraglock.decrypt(bytes(ct), KEY)
    assert excinfo.value.shard_index == 4


def test_wrong_key_fails_integrity():
    ct = fraglock.encrypt(b"secret payload", KEY)
    with pytest.raises(IntegrityError):
        fraglock.decrypt(ct, b"maryhadalittlelb")


def test_truncated_and_padded_ciphertext():
    ct = fraglock.encrypt(os.urandom(50), KEY, frag=16, redun=4)
    with pytest.raises(FormatError):
        fraglock.decrypt(ct[:-1], KEY)
    with pytest.raises(FormatError):
        fraglock.decrypt(ct + b"\x00", KEY)
    with pytest.raises(FormatError):
        fraglock.decrypt(ct[: HEADER_SIZE - 1], KEY)


def test_bad_magic():
    with pytest.raises(FormatError):
        fraglock.decrypt(b"BADDATA!" + b"\x00" * 50, KEY)


def test_header_with_redun_not_below_frag_rejected():
    bad = EnvelopeHeader(0, 4, 4).pack()
    with pytest.raises(FormatError):
        fraglock.parse_envelope(bad)


# ---------------------------------------------------------------------------
# Caller-supplied buffers
# ---------------------------------------------------------------------------


def test_encrypt_into_and_decrypt_into():
    pt = os.urandom(100)
    size = fraglock.ciphertext_size(len(pt), 32, 8)
    out = bytearray(size + 10)
    written = fraglock.encrypt_into(pt, KEY, out, frag=32, redun=8)
    assert written == size
    assert bytes(out[:written]) == fraglock.encrypt(pt, KEY, frag=32, redun=8)

    plain = bytearray(len(pt))
    assert fraglock.decrypt_into(bytes(out[:written]), KEY, plain) == len(pt)
    assert bytes(plain) == pt


def test_into_reports_required_size():
    pt = os.urandom(100)
    size = fraglock.ciphertext_size(len(pt), 32, 8)
    with pytest.raises(BufferTooSmallError) as excinfo:
        fraglock.encrypt_into(pt, KEY, bytearray(size - 1), frag=32, redun=8)
    assert excinfo.value.required == size

    ct = fraglock.encrypt(pt, KEY)
    with pytest.raises(BufferTooSmallError) as excinfo:
        fraglock.decrypt_into(ct, KEY, bytearray(10))
    assert excinfo.value.required == 100
    assert fraglock.plaintext_size(ct) == 100


def test_into_sizes_buffer_protocol_input_by_bytes():
    arr = array("I", range(10))
    raw = bytes(arr)
    size = fraglock.ciphertext_size(len(raw), 32, 8)
    out = bytearray(size)
    assert fraglock.encrypt_into(arr, KEY, out, frag=32, redun=8) == size
    assert bytes(out) == fraglock.encrypt(raw, KEY, frag=32, redun=8)

    plain = bytearray(len(raw))
    assert fraglock.decrypt_into(memoryview(out), KEY, plain) == len(raw)
    assert bytes(plain) == raw


def test_into_rejects_readonly_buffer():
    with pytest.raises(TypeError):
        fraglock.encrypt_into(b"x", KEY, bytes(1000))


# ---------------------------------------------------------------------------
# Numeric string codec
# ---------------------------------------------------------------------------


def test_numeric_string_roundtrip():
    samples = [b"", b"\x00", b"\x00\x00\x01", bytes(range(256)), os.urandom(1000)]
    for data in samples:
        text = fraglock.data_to_string(data)
        assert len(text) == 3 * len(data)
        assert text == "" or text.isdigit()
        assert fraglock.string_to_data(text) == data


def test_numeric_string_format():
    assert fraglock.data_to_string(b"\x00\x01\xff") == "000001255"


@pytest.mark.parametrize("text", ["12", "0001", "12a", "256", " 001", "00-", "００１", b"001"])
def test_numeric_string_rejects_malformed(text):
    with pytest.raises(InvalidEncodingError):
        fraglock.string_to_data(text)


def test_numeric_string_carries_ciphertext():
    ct = fraglock.encrypt(b"Text to encrypt.", KEY)
    digits = fraglock.data_to_string(ct)
    assert fraglock.decrypt(fraglock.string_to_data(digits), KEY) == b"Text to encrypt."


# ---------------------------------------------------------------------------
# Text and file wrappers
# ---------------------------------------------------------------------------


def test_text_roundtrip():
    digits = fraglock.encrypt_text("héllo wörld", "secret", frag=16, redun=4)
    assert digits.isdigit()
    assert fraglock.decrypt_text(digits, "secret") == "héllo wörld"


def test_decrypt_text_rejects_binary_plaintext():
    digits = fraglock.data_to_string(fraglock.encrypt(b"\xff\xfe", KEY))
    with pytest.raises(FormatError):
        fraglock.decrypt_text(digits, KEY)


def test_file_roundtrip(tmp_path):
    pt = os.urandom(5000)
    src = tmp_path / "plain.bin"
    enc = tmp_path / "plain.bin.enc"
    dec = tmp_path / "plain.dec"
    src.write_bytes(pt)

    fraglock.encrypt_file(src, enc, KEY, frag=1024, redun=128)
    assert enc.read_bytes() == fraglock.encrypt(pt, KEY, frag=1024, redun=128)
    fraglock.decrypt_file(str(enc), str(dec), KEY)
    assert dec.read_bytes() == pt


def test_file_errors(tmp_path):
    with pytest.raises(FileAccessError):
        fraglock.encrypt_file(tmp_path / "missing.bin", tmp_path / "out.enc", KEY)

    src = tmp_path / "plain.bin"
    src.write_bytes(b"data")
    with pytest.raises(FileAccessError):
        fraglock.encrypt_file(src, tmp_path / "no" / "such" / "dir.enc", KEY)

    bogus = tmp_path / "bogus.enc"
    bogus.write_bytes(b"not an envelope")
    with pytest.raises(FormatError):
        fraglock.decrypt_file(bogus, tmp_path / "out.bin", KEY)
