"""
Stage 1 — KEY DERIVATION: scrypt
=================================
Stretches a low-entropy secret into a fixed-length AES key.

scrypt is memory-hard: every guess costs ~16 MiB of RAM and a few tens of
milliseconds of CPU, which is what makes offline brute force of a leaked
token expensive. The cost parameters are class constants, never per-call
options, so encrypt and decrypt always derive the same key.

Salt:     b"salt" — FIXED for every secret. Identical secrets yield
          identical keys across deployments (precomputation risk). Kept
          as-is because changing it breaks every token already issued.
Cost:     N=2**14, r=8, p=1
Lengths:  16 / 24 / 32 bytes (AES-128 / 192 / 256)

Dependencies: cryptography >= 41.0
"""

import logging
from typing import Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..errors import DerivationFailed, InvalidSecret

logger = logging.getLogger(__name__)

Secret = Union[str, bytes]


def secret_to_bytes(secret: Secret) -> bytes:
    """
    Validate a caller secret and return its bytes (str is UTF-8 encoded).
    Raises InvalidSecret for None, empty, or non-str/bytes values.
    """
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    elif isinstance(secret, (bytes, bytearray, memoryview)):
        secret = bytes(secret)
    else:
        raise InvalidSecret("Secret must be str or bytes.")
    if not secret:
        raise InvalidSecret("Secret must not be empty.")
    return secret


class ScryptKDF:
    """scrypt key derivation with a fixed salt and fixed cost."""

    SALT = b"salt"
    N    = 2 ** 14   # CPU/memory cost
    R    = 8         # block size
    P    = 1         # parallelism

    SUPPORTED_LENGTHS = (16, 24, 32)

    @classmethod
    def derive(cls, secret: Secret, length: int) -> bytes:
        """
        Derive `length` key bytes from `secret`.

        Raises InvalidSecret before any work if the secret is empty,
        DerivationFailed if the length is unsupported or scrypt refuses.
        """
        material = secret_to_bytes(secret)
        if length not in cls.SUPPORTED_LENGTHS:
            raise DerivationFailed(
                f"Key length must be one of {cls.SUPPORTED_LENGTHS} bytes, got {length!r}."
            )
        try:
            kdf = Scrypt(salt=cls.SALT, length=length, n=cls.N, r=cls.R, p=cls.P)
            key = kdf.derive(material)
        except (ValueError, MemoryError, UnsupportedAlgorithm) as exc:
            raise DerivationFailed(f"scrypt rejected parameters: {exc}") from exc
        logger.debug(f"Derived {len(key)}B key (scrypt N={cls.N} r={cls.R} p={cls.P})")
        return key
