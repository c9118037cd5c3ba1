"""
Token Codec — scrypt + AES-CCM + hex packing
=============================================
Turns an access token into one opaque hex string and back.

    encrypt:  secret ─► scrypt ─► key ─► AES-CCM seal ─► pack ─► str
    decrypt:  str ─► unpack ─► scrypt(secret) ─► key ─► AES-CCM open ─► plaintext

Plaintext is handled one byte per character (Latin-1). A str holding a
character above U+00FF is refused with InvalidPlaintext rather than being
silently re-encoded; pass bytes to seal arbitrary binary data.

The codec holds nothing but its immutable CodecConfig, so one instance can
be shared freely between threads. Key derivation is the only slow step; the
*_async methods push just that step onto a worker thread and run the cipher
inline.
"""

import asyncio
import logging
from typing import Optional, Union

from .config import CodecConfig
from .errors import AuthenticationFailed, DerivationFailed, InvalidPlaintext
from .stages.stage1_kdf import ScryptKDF, Secret, secret_to_bytes
from .stages.stage2_ccm import AESCCMCipher
from .stages.stage3_pack import pack, unpack

logger = logging.getLogger(__name__)

Plaintext = Union[str, bytes]


def plaintext_to_bytes(plaintext: Plaintext) -> bytes:
    if isinstance(plaintext, (bytes, bytearray, memoryview)):
        return bytes(plaintext)
    if not isinstance(plaintext, str):
        raise InvalidPlaintext("Plaintext must be str or bytes.")
    try:
        return plaintext.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise InvalidPlaintext(
            f"Plaintext character {plaintext[exc.start]!r} at position {exc.start} "
            "is not a single-byte character."
        ) from None


class TokenCodec:
    """Password-keyed authenticated encryption of short tokens."""

    def __init__(self, config: Optional[CodecConfig] = None):
        self._config = config or CodecConfig()
        logger.info(f"TokenCodec {self._config.algorithm} | scrypt N={ScryptKDF.N}")

    @property
    def config(self) -> CodecConfig:
        return self._config

    def _derive(self, secret: bytes) -> bytes:
        bits = self._config.key_size_bits
        if not isinstance(bits, int) or bits % 8:
            raise DerivationFailed(f"Key size must be a whole number of bytes, got {bits!r} bits.")
        return ScryptKDF.derive(secret, self._config.key_length)

    @staticmethod
    def _seal(key: bytes, data: bytes) -> str:
        ciphertext, nonce, tag = AESCCMCipher(key).seal(data)
        packed = pack(ciphertext, nonce, tag)
        logger.debug(f"Sealed {len(data)}B -> {len(packed)} hex chars")
        return packed

    @staticmethod
    def _open(key: bytes, ciphertext: bytes, nonce: bytes, tag: bytes) -> bytes:
        try:
            data = AESCCMCipher(key).open(ciphertext, nonce, tag)
        except AuthenticationFailed:
            logger.debug(f"Tag check failed for {len(ciphertext)}B ciphertext")
            raise
        logger.debug(f"Opened {len(ciphertext)}B ciphertext")
        return data

    # ── synchronous API ─────────────────────────────────────────────────────

    def encrypt(self, secret: Secret, plaintext: Plaintext) -> str:
        """
        Encrypt `plaintext` under a key derived from `secret`.
        Returns: hex(ciphertext) || hex(nonce) || hex(tag)
        """
        material = secret_to_bytes(secret)
        data     = plaintext_to_bytes(plaintext)
        return self._seal(self._derive(material), data)

    def decrypt_bytes(self, secret: Secret, packed: Union[str, bytes]) -> bytes:
        """
        Verify and decrypt a packed token, returning raw plaintext bytes.
        Raises MalformedInput, DerivationFailed or AuthenticationFailed.
        """
        material = secret_to_bytes(secret)
        ciphertext, nonce, tag = unpack(packed)
        return self._open(self._derive(material), ciphertext, nonce, tag)

    def decrypt(self, secret: Secret, packed: Union[str, bytes]) -> str:
        """Like decrypt_bytes(), decoded one character per byte."""
        return self.decrypt_bytes(secret, packed).decode("latin-1")

    # ── asyncio API ─────────────────────────────────────────────────────────

    async def encrypt_async(self, secret: Secret, plaintext: Plaintext) -> str:
        material = secret_to_bytes(secret)
        data     = plaintext_to_bytes(plaintext)
        key      = await asyncio.to_thread(self._derive, material)
        return self._seal(key, data)

    async def decrypt_bytes_async(self, secret: Secret, packed: Union[str, bytes]) -> bytes:
        material = secret_to_bytes(secret)
        ciphertext, nonce, tag = unpack(packed)
        key = await asyncio.to_thread(self._derive, material)
        return self._open(key, ciphertext, nonce, tag)

    async def decrypt_async(self, secret: Secret, packed: Union[str, bytes]) -> str:
        data = await self.decrypt_bytes_async(secret, packed)
        return data.decode("latin-1")

    def __repr__(self):
        return f"TokenCodec({self._config.algorithm})"


_default = TokenCodec()


def encrypt(secret: Secret, plaintext: Plaintext) -> str:
    """Encrypt with the default AES-128-CCM codec."""
    return _default.encrypt(secret, plaintext)


def decrypt(secret: Secret, packed: Union[str, bytes]) -> str:
    """Decrypt with the default AES-128-CCM codec."""
    return _default.decrypt(secret, packed)
