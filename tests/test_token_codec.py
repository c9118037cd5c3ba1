"""
secure_token — Token Codec Test Suite
======================================
Run with:  python -m pytest tests/ -v
       or:  python tests/test_token_codec.py
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import dataclasses

import pytest
import secure_token
from secure_token                   import CodecConfig, TokenCodec
from secure_token.errors            import (AuthenticationFailed, DerivationFailed,
                                            InvalidPlaintext, InvalidSecret,
                                            MalformedInput, TokenCodecError)
from secure_token.stages            import stage1_kdf
from secure_token.stages.stage3_pack import packed_length

TOKEN  = "access.token.content"
SECRET = "foo"

# sealed under "foo" by the Node.js secure-token codec (aes-128-ccm)
NODE_TOKEN = (
    "f424d93c69e9cc4baf0463e29259014e831401ad"   # ciphertext
    "cbc3da9262091a153219d67a"                   # nonce
    "4cfdd1fc60435355d115cd8b894dd685"           # tag
)


def flip_bit(packed: str, byte_index: int, bit: int = 0) -> str:
    raw = bytearray(bytes.fromhex(packed))
    raw[byte_index] ^= 1 << bit
    return raw.hex()


# ── Round trip ────────────────────────────────────────────────────────────────
def test_codec_concrete_scenario():
    packed = secure_token.encrypt(SECRET, TOKEN)
    assert len(TOKEN) == 20
    assert len(packed) == packed_length(len(TOKEN)) == 96
    assert secure_token.decrypt(SECRET, packed) == TOKEN
    with pytest.raises(AuthenticationFailed):
        secure_token.decrypt("bar", packed)

@pytest.mark.parametrize("plaintext", ["", "x", "a.b.c", "é single byte ÿ", "A" * 500])
def test_codec_roundtrip(plaintext):
    codec  = TokenCodec()
    packed = codec.encrypt(SECRET, plaintext)
    assert len(packed) == packed_length(len(plaintext))
    assert codec.decrypt(SECRET, packed) == plaintext

def test_codec_bytes_roundtrip():
    codec  = TokenCodec()
    blob   = bytes(range(256))
    packed = codec.encrypt(b"\x00secret\xff", blob)
    assert codec.decrypt_bytes(b"\x00secret\xff", packed) == blob

def test_codec_output_is_lowercase_hex():
    packed = secure_token.encrypt(SECRET, TOKEN)
    assert packed == packed.lower()
    bytes.fromhex(packed)

def test_codec_accepts_uppercase_hex_and_bytes():
    packed = secure_token.encrypt(SECRET, TOKEN)
    assert secure_token.decrypt(SECRET, packed.upper()) == TOKEN
    assert secure_token.decrypt(SECRET, packed.encode("ascii")) == TOKEN

def test_codec_non_deterministic():
    a = secure_token.encrypt(SECRET, TOKEN)
    b = secure_token.encrypt(SECRET, TOKEN)
    assert a != b
    assert a[-56:-32] != b[-56:-32]   # distinct nonces
    assert secure_token.decrypt(SECRET, a) == secure_token.decrypt(SECRET, b) == TOKEN

# ── Wire compatibility ────────────────────────────────────────────────────────
def test_codec_decrypts_node_token():
    assert len(NODE_TOKEN) == packed_length(len(TOKEN))
    assert secure_token.decrypt(SECRET, NODE_TOKEN) == TOKEN
    assert secure_token.decrypt(b"foo", NODE_TOKEN.upper()) == TOKEN

def test_codec_node_token_rejected_when_altered():
    with pytest.raises(AuthenticationFailed):
        secure_token.decrypt("bar", NODE_TOKEN)
    with pytest.raises(AuthenticationFailed):
        secure_token.decrypt(SECRET, flip_bit(NODE_TOKEN, 47, 6))
    with pytest.raises(AuthenticationFailed):
        TokenCodec(CodecConfig(key_size_bits=256)).decrypt(SECRET, NODE_TOKEN)

# ── Tamper / wrong key ────────────────────────────────────────────────────────
@pytest.mark.parametrize("byte_index,bit", [
    (0, 0), (19, 7),     # ciphertext
    (20, 3), (31, 5),    # nonce
    (32, 1), (47, 6),    # tag
])
def test_codec_tamper_detected(byte_index, bit):
    packed   = secure_token.encrypt(SECRET, TOKEN)
    tampered = flip_bit(packed, byte_index, bit)
    with pytest.raises(AuthenticationFailed):
        secure_token.decrypt(SECRET, tampered)

def test_codec_truncated_ciphertext_rejected():
    packed = secure_token.encrypt(SECRET, TOKEN)
    with pytest.raises(AuthenticationFailed):
        secure_token.decrypt(SECRET, packed[2:])

def test_codec_wrong_key_and_tamper_indistinguishable():
    packed = secure_token.encrypt(SECRET, TOKEN)
    with pytest.raises(AuthenticationFailed) as wrong_key:
        secure_token.decrypt("bar", packed)
    with pytest.raises(AuthenticationFailed) as tampered:
        secure_token.decrypt(SECRET, flip_bit(packed, 0))
    assert str(wrong_key.value) == str(tampered.value) == "Authentication failed."
    assert wrong_key.value.__cause__ is None
    assert tampered.value.__cause__ is None

# ── Malformed input ───────────────────────────────────────────────────────────
@pytest.mark.parametrize("packed", ["", "ab", "0" * 55, "0" * 57, "zz" * 28, " " + "0" * 55, None, 42])
def test_codec_malformed_input(packed):
    with pytest.raises(MalformedInput):
        secure_token.decrypt(SECRET, packed)

# ── Secret validation ────────────────────────────────────────────────────────
class _NoScrypt:
    def __init__(self, *args, **kwargs):
        raise AssertionError("scrypt must not run")

@pytest.mark.parametrize("secret", ["", b"", None, 123])
def test_codec_invalid_secret_before_crypto(monkeypatch, secret):
    monkeypatch.setattr(stage1_kdf, "Scrypt", _NoScrypt)
    with pytest.raises(InvalidSecret):
        secure_token.encrypt(secret, "x")
    with pytest.raises(InvalidSecret):
        secure_token.decrypt(secret, "...")

def test_codec_invalid_plaintext():
    with pytest.raises(InvalidPlaintext):
        secure_token.encrypt(SECRET, "snowman ☃")
    with pytest.raises(InvalidPlaintext):
        secure_token.encrypt(SECRET, 12345)

def test_codec_error_hierarchy():
    for err in (InvalidSecret, InvalidPlaintext, DerivationFailed,
                MalformedInput, AuthenticationFailed):
        assert issubclass(err, TokenCodecError)
    assert issubclass(InvalidSecret, ValueError)
    assert issubclass(MalformedInput, ValueError)
    assert not issubclass(AuthenticationFailed, ValueError)

# ── Key sizes / configuration ────────────────────────────────────────────────
@pytest.mark.parametrize("bits", [128, 192, 256])
def test_codec_key_sizes_roundtrip(bits):
    codec  = TokenCodec(CodecConfig(key_size_bits=bits))
    packed = codec.encrypt(SECRET, TOKEN)
    assert len(packed) == packed_length(len(TOKEN)) == 96
    assert codec.decrypt(SECRET, packed) == TOKEN

def test_codec_key_sizes_incompatible():
    packed = TokenCodec(CodecConfig(key_size_bits=256)).encrypt(SECRET, TOKEN)
    with pytest.raises(AuthenticationFailed):
        TokenCodec(CodecConfig(key_size_bits=128)).decrypt(SECRET, packed)

@pytest.mark.parametrize("bits", [64, 100, 512])
def test_codec_unsupported_key_size(bits):
    codec = TokenCodec(CodecConfig(key_size_bits=bits))
    with pytest.raises(DerivationFailed):
        codec.encrypt(SECRET, TOKEN)

def test_config_defaults():
    cfg = CodecConfig()
    assert cfg.key_size_bits == 128
    assert cfg.key_length == 16
    assert cfg.algorithm == "aes-128-ccm"
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.key_size_bits = 256

def test_config_from_env():
    assert CodecConfig.from_env({}).key_size_bits == 128
    assert CodecConfig.from_env({"SECURE_TOKEN_KEY_BITS": "256"}).key_length == 32
    with pytest.raises(ValueError):
        CodecConfig.from_env({"SECURE_TOKEN_KEY_BITS": "big"})

def test_config_from_os_environ(monkeypatch):
    monkeypatch.setenv("SECURE_TOKEN_KEY_BITS", "192")
    assert CodecConfig.from_env().algorithm == "aes-192-ccm"

# ── asyncio ──────────────────────────────────────────────────────────────────
def test_codec_async_roundtrip():
    codec = TokenCodec()

    async def run():
        packed = await codec.encrypt_async(SECRET, TOKEN)
        plain  = await codec.decrypt_async(SECRET, packed)
        return packed, plain

    packed, plain = asyncio.run(run())
    assert plain == TOKEN
    assert codec.decrypt(SECRET, packed) == TOKEN

def test_codec_async_failures():
    codec  = TokenCodec()
    packed = codec.encrypt(SECRET, TOKEN)
    with pytest.raises(AuthenticationFailed):
        asyncio.run(codec.decrypt_async("bar", packed))
    with pytest.raises(MalformedInput):
        asyncio.run(codec.decrypt_bytes_async(SECRET, "ab"))
    with pytest.raises(InvalidSecret):
        asyncio.run(codec.encrypt_async("", TOKEN))

def test_codec_async_concurrent():
    codec = TokenCodec()

    async def run():
        tokens = [f"token-{i}" for i in range(4)]
        packed = await asyncio.gather(*(codec.encrypt_async(SECRET, t) for t in tokens))
        plain  = await asyncio.gather(*(codec.decrypt_async(SECRET, p) for p in packed))
        return tokens, plain

    tokens, plain = asyncio.run(run())
    assert plain == tokens


# ── run directly ─────────────────────────────────────────────────────────────
if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
