"""
Command line for the token codec.

    secure-token encrypt "access.token.content"
    secure-token decrypt 3f1c...e09a

The secret comes from --secret, else $SECURE_TOKEN_SECRET, else a prompt.
"""

import argparse
import getpass
import logging
import os
import sys
from typing import List, Optional

from .codec import TokenCodec
from .config import CodecConfig
from .errors import TokenCodecError

ENV_SECRET = "SECURE_TOKEN_SECRET"


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="secure-token",
        description="Encrypt or decrypt an access token with a password-derived AES-CCM key.",
    )
    ap.add_argument("--key-bits", type=int, choices=(128, 192, 256), default=None,
                    help="AES key size (default: $SECURE_TOKEN_KEY_BITS or 128)")
    ap.add_argument("--secret", default=None, help=f"Secret (default: ${ENV_SECRET}, else prompt)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    sub = ap.add_subparsers(dest="cmd", required=True)
    p_enc = sub.add_parser("encrypt", help="Encrypt a plaintext token")
    p_enc.add_argument("plaintext")
    p_dec = sub.add_parser("decrypt", help="Decrypt a packed token")
    p_dec.add_argument("packed")
    return ap


def _resolve_secret(arg: Optional[str]) -> str:
    if arg is not None:
        return arg
    env = os.environ.get(ENV_SECRET)
    if env:
        return env
    return getpass.getpass("Secret: ")


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=" %(name)s: %(message)s",
    )

    try:
        config = (CodecConfig(key_size_bits=args.key_bits) if args.key_bits
                  else CodecConfig.from_env())
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    codec = TokenCodec(config)
    try:
        secret = _resolve_secret(args.secret)
    except (EOFError, KeyboardInterrupt):
        print("\nerror: no secret given", file=sys.stderr)
        return 1
    try:
        if args.cmd == "encrypt":
            print(codec.encrypt(secret, args.plaintext))
        else:
            print(codec.decrypt(secret, args.packed))
    except TokenCodecError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
