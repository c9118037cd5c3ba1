"""
Codec configuration.

A CodecConfig is immutable and handed to TokenCodec explicitly; nothing in
the package keeps configuration in module-level mutable state. The only
tunable is the AES key size — cost parameters, salt, nonce and tag sizes
are fixed so every deployment derives and parses tokens the same way.

Environment:
    SECURE_TOKEN_KEY_BITS   128 (default), 192 or 256
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_KEY_BITS = "SECURE_TOKEN_KEY_BITS"
DEFAULT_KEY_BITS = 128


@dataclass(frozen=True)
class CodecConfig:
    key_size_bits: int = DEFAULT_KEY_BITS

    @property
    def key_length(self) -> int:
        return self.key_size_bits // 8

    @property
    def algorithm(self) -> str:
        return f"aes-{self.key_size_bits}-ccm"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CodecConfig":
        """
        Build a config from the environment (os.environ by default).
        Raises ValueError if SECURE_TOKEN_KEY_BITS is not an integer.
        """
        env = os.environ if environ is None else environ
        raw = env.get(ENV_KEY_BITS, "").strip()
        if not raw:
            return cls()
        try:
            bits = int(raw)
        except ValueError:
            raise ValueError(f"{ENV_KEY_BITS} must be an integer, got {raw!r}.") from None
        return cls(key_size_bits=bits)
