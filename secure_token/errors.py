"""
Error taxonomy for the token codec.

Every failure the codec can report derives from TokenCodecError, so a
caller can catch the whole family or match on the exact class:

    InvalidSecret        — secret missing or empty (checked before any crypto)
    InvalidPlaintext     — plaintext not representable one byte per character
    DerivationFailed     — key derivation rejected its parameters
    MalformedInput       — packed token too short or not hex
    AuthenticationFailed — tag mismatch (tampered data OR wrong secret)
"""


class TokenCodecError(Exception):
    """Base class for every codec failure."""


class InvalidSecret(TokenCodecError, ValueError):
    """The secret is empty, missing, or not str/bytes."""


class InvalidPlaintext(TokenCodecError, ValueError):
    """The plaintext cannot be sealed as single-byte characters."""


class DerivationFailed(TokenCodecError):
    """The key derivation primitive rejected its parameters."""


class MalformedInput(TokenCodecError, ValueError):
    """The packed token cannot be split into ciphertext, nonce and tag."""


class AuthenticationFailed(TokenCodecError):
    """
    Tag verification failed.

    Raised identically for a wrong secret and for tampered data.
    """

    def __init__(self, message: str = "Authentication failed."):
        super().__init__(message)
