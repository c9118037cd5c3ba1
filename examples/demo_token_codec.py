"""
secure_token — Live Demo
=========================
Run:  python examples/demo_token_codec.py

Encrypts an access token, decrypts it, then shows tampering and a wrong
secret being rejected, with timings and sizes for each step.
"""

import sys, os, time
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from secure_token        import CodecConfig, TokenCodec, AuthenticationFailed, MalformedInput
from secure_token.stages.stage3_pack import packed_length

LINE   = "═" * 70
SECRET = "correct horse battery staple"
TOKEN  = "access.token.content"

def header(step, name):
    print(f"\n{LINE}")
    print(f"  {step} — {name}")
    print(LINE)

def ok(label, value=""):
    print(f"  ✓  {label}{f': {value}' if value else ''}")

# ─────────────────────────────────────────────────────────────────────────────
print(f"\n{LINE}")
print("  secure_token — scrypt + AES-CCM Token Codec Demo")
print(LINE)
print(f"  Token: {TOKEN}\n")

# ── ROUND TRIP ───────────────────────────────────────────────────────────────
for bits in (128, 192, 256):
    header(f"AES-{bits}", "encrypt / decrypt")
    codec   = TokenCodec(CodecConfig(key_size_bits=bits))
    t0      = time.perf_counter()
    packed  = codec.encrypt(SECRET, TOKEN)
    plain   = codec.decrypt(SECRET, packed)
    elapsed = time.perf_counter() - t0
    ok("Algorithm",  codec.config.algorithm)
    ok("Packed",     packed[:40] + "...")
    ok("Length",     f"{len(packed)} hex chars (expected {packed_length(len(TOKEN))})")
    ok("Round-trip", f"{elapsed*1000:.0f} ms (two scrypt derivations)")
    ok("Decrypted",  plain)

# ── REJECTIONS ───────────────────────────────────────────────────────────────
header("REJECT", "tamper / wrong secret / malformed")
codec  = TokenCodec()
packed = codec.encrypt(SECRET, TOKEN)
raw    = bytearray(bytes.fromhex(packed))
raw[-1] ^= 0x01
for label, secret, value in (
    ("Tampered tag",  SECRET,  raw.hex()),
    ("Wrong secret",  "guess", packed),
    ("Truncated",     SECRET,  packed[:40]),
):
    try:
        codec.decrypt(secret, value)
        print(f"  ✗  {label}: ACCEPTED")
    except (AuthenticationFailed, MalformedInput) as exc:
        ok(label, f"{type(exc).__name__} — {exc}")

print(f"\n{LINE}")
print("  Same token, same secret, different ciphertext every time:")
print(f"    {codec.encrypt(SECRET, TOKEN)[:48]}...")
print(f"    {codec.encrypt(SECRET, TOKEN)[:48]}...")
print(LINE + "\n")
