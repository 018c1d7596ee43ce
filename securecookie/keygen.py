import argparse

from . import config
from .crypto import generate_random_key

# Quick one-off keygen for a deployment.
# - 64-byte HMAC key, 32-byte AES key (AES-256) unless told otherwise.
# - Prints shell `export` lines; paste them into your env / .env file.
# - Nothing is written to disk; keep the output somewhere safe.


def main() -> None:
    parser = argparse.ArgumentParser(prog="securecookie-keygen", description="Generate securecookie keys")
    parser.add_argument("--hash-bytes", type=int, default=64, help="HMAC key length (32 or 64 recommended)")
    parser.add_argument("--block-bytes", type=int, default=32, choices=[0, 16, 24, 32],
                        help="AES key length; 0 = signed-only cookies")
    args = parser.parse_args()

    # 1) Pull fresh randomness from the OS.
    hash_key = generate_random_key(args.hash_bytes)
    block_key = generate_random_key(args.block_bytes) if args.block_bytes else None
    if hash_key is None or (args.block_bytes and block_key is None):
        raise SystemExit("OS random source unavailable; no keys generated")

    # 2) Print them the way config.load_settings() reads them back.
    settings = config.CookieSettings(hash_key=hash_key, block_key=block_key)
    for name, value in config.settings_to_env(settings).items():
        print(f"export {name}={value}")


if __name__ == "__main__":
    main()
