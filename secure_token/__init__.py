"""
secure_token — Password-keyed access token encryption
======================================================
One opaque hex string per token, authenticated end to end.

Stages:
    1  KEY DERIVATION  — scrypt (N=2**14, r=8, p=1, fixed salt)
    2  CIPHER          — AES-CCM, 12-byte nonce, 16-byte tag, fixed AAD
    3  PACKING         — hex(ciphertext) || hex(nonce) || hex(tag)

    >>> import secure_token
    >>> token = secure_token.encrypt("foo", "access.token.content")
    >>> secure_token.decrypt("foo", token)
    'access.token.content'

License: Apache 2.0
"""

__version__ = "1.0.0"

from .config                import CodecConfig
from .errors                import (
    TokenCodecError,
    InvalidSecret,
    InvalidPlaintext,
    DerivationFailed,
    MalformedInput,
    AuthenticationFailed,
)
from .stages.stage1_kdf     import ScryptKDF
from .stages.stage2_ccm     import AESCCMCipher
from .stages.stage3_pack    import pack, unpack, packed_length
from .codec                 import TokenCodec, encrypt, decrypt

__all__ = [
    "CodecConfig",
    "TokenCodecError",
    "InvalidSecret",
    "InvalidPlaintext",
    "DerivationFailed",
    "MalformedInput",
    "AuthenticationFailed",
    "ScryptKDF",
    "AESCCMCipher",
    "pack",
    "unpack",
    "packed_length",
    "TokenCodec",
    "encrypt",
    "decrypt",
]
