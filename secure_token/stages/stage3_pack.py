"""
Stage 3 — PACKED FORMAT: hex(ciphertext) || hex(nonce) || hex(tag)
===================================================================
The only artifact a caller ever sees.

    packed = hex(ciphertext) || hex(nonce[12]) || hex(tag[16])

Lowercase hex, no separators, no version field. Parsing works from the
END of the string: the last 32 characters are the tag, the 24 before them
the nonce, and everything in front is ciphertext. Those offsets hold only
because nonce and tag sizes are constants; the segment order here and in
the cipher stage must change together.

    len(packed) == 2 * (len(ciphertext) + 12 + 16)
"""

import re
from typing import Tuple, Union

from ..errors import MalformedInput

NONCE_SIZE = 12
TAG_SIZE   = 16

NONCE_HEX = 2 * NONCE_SIZE   # 24
TAG_HEX   = 2 * TAG_SIZE     # 32
MIN_PACKED_LENGTH = NONCE_HEX + TAG_HEX

_HEX = re.compile(r"[0-9a-fA-F]*")


def packed_length(plaintext_length: int) -> int:
    """Length of the packed string for a plaintext of `plaintext_length` bytes."""
    return 2 * (plaintext_length + NONCE_SIZE + TAG_SIZE)


def pack(ciphertext: bytes, nonce: bytes, tag: bytes) -> str:
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"Nonce must be {NONCE_SIZE} bytes.")
    if len(tag) != TAG_SIZE:
        raise ValueError(f"Tag must be {TAG_SIZE} bytes.")
    return ciphertext.hex() + nonce.hex() + tag.hex()


def unpack(packed: Union[str, bytes]) -> Tuple[bytes, bytes, bytes]:
    """
    Split a packed token into (ciphertext, nonce, tag).

    Raises MalformedInput if the value is not a string, is shorter than
    nonce + tag, has an odd length, or contains anything but hex digits.
    """
    if isinstance(packed, (bytes, bytearray)):
        try:
            packed = bytes(packed).decode("ascii")
        except UnicodeDecodeError:
            raise MalformedInput("Packed token is not hex.") from None
    if not isinstance(packed, str):
        raise MalformedInput("Packed token must be a string.")
    if len(packed) < MIN_PACKED_LENGTH:
        raise MalformedInput(
            f"Packed token too short: {len(packed)} chars, need at least {MIN_PACKED_LENGTH}."
        )
    if len(packed) % 2:
        raise MalformedInput("Packed token has an odd number of hex digits.")
    if not _HEX.fullmatch(packed):
        raise MalformedInput("Packed token is not hex.")

    ct_end  = len(packed) - MIN_PACKED_LENGTH
    tag_at  = len(packed) - TAG_HEX
    return (
        bytes.fromhex(packed[:ct_end]),
        bytes.fromhex(packed[ct_end:tag_at]),
        bytes.fromhex(packed[tag_at:]),
    )
