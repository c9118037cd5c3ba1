"""
Stage 2 — AUTHENTICATED CIPHER: AES-CCM
========================================
AES in Counter with CBC-MAC mode.

CCM provides authenticated encryption — the ciphertext carries a 128-bit
tag computed over the key, nonce, fixed associated data and the message.
Flipping a single bit anywhere fails verification, and the primitive never
releases plaintext that did not verify.

Key size: 128 bits by default (192 / 256 selectable)
Nonce:    96 bits (12 bytes) — randomly generated per message
Tag:      128 bits (16 bytes)
AAD:      0x0123456789ab — constant, authenticated but not encrypted

CCM ciphertext is exactly as long as the plaintext. With a 12-byte nonce
the length field is 3 bytes, capping a message at 2**24 - 1 bytes.

Dependencies: cryptography >= 41.0
"""

import os
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESCCM

from ..errors import AuthenticationFailed, InvalidPlaintext, MalformedInput


class AESCCMCipher:
    """AES-CCM sealing with a detached nonce and tag."""

    KEY_SIZES   = (16, 24, 32)
    NONCE_SIZE  = 12
    TAG_SIZE    = 16
    AAD         = bytes.fromhex("0123456789ab")
    MAX_MESSAGE = 2 ** (8 * (15 - NONCE_SIZE)) - 1

    def __init__(self, key: bytes):
        if len(key) not in self.KEY_SIZES:
            raise ValueError(f"AES-CCM key must be one of {self.KEY_SIZES} bytes.")
        self._ccm = AESCCM(key, tag_length=self.TAG_SIZE)

    def seal(self, plaintext: bytes) -> Tuple[bytes, bytes, bytes]:
        """
        Encrypt and authenticate.
        Returns: (ciphertext, nonce, tag)
        """
        if len(plaintext) > self.MAX_MESSAGE:
            raise InvalidPlaintext(
                f"Plaintext too long: {len(plaintext)} bytes, max {self.MAX_MESSAGE}."
            )
        nonce  = os.urandom(self.NONCE_SIZE)
        sealed = self._ccm.encrypt(nonce, plaintext, self.AAD)
        return sealed[:-self.TAG_SIZE], nonce, sealed[-self.TAG_SIZE:]

    def open(self, ciphertext: bytes, nonce: bytes, tag: bytes) -> bytes:
        """
        Verify the tag and decrypt.
        Raises AuthenticationFailed on any mismatch; nothing is returned then.
        Raises MalformedInput if the segments cannot be valid CCM input.
        """
        if len(nonce) != self.NONCE_SIZE or len(tag) != self.TAG_SIZE:
            raise MalformedInput("Nonce or tag has the wrong length.")
        if len(ciphertext) > self.MAX_MESSAGE:
            raise MalformedInput(
                f"Ciphertext too long: {len(ciphertext)} bytes, max {self.MAX_MESSAGE}."
            )
        try:
            return self._ccm.decrypt(nonce, ciphertext + tag, self.AAD)
        except InvalidTag:
            raise AuthenticationFailed() from None
