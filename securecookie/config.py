import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

from .cookie import DEFAULT_MAX_AGE, SecureCookie
from .crypto import b64url_decode, b64url_encode
from .errors import ConfigError, InvalidValueError
from .framing import DEFAULT_MAX_LENGTH

"""
config.py: codec settings from environment variables.

Variables (all optional except the hash key):
- SECURECOOKIE_HASH_KEY    base64url HMAC key (required)
- SECURECOOKIE_BLOCK_KEY   base64url AES key; unset = signed only
- SECURECOOKIE_MAX_AGE     seconds, 0 = no limit (default 30 days)
- SECURECOOKIE_MIN_AGE     seconds, 0 = no limit
- SECURECOOKIE_MAX_LENGTH  characters, 0 = no limit (default 4096)
- SECURECOOKIE_OLD_KEYS    comma list of "hash[:block]" pairs still accepted
                           while keys rotate

Set the same values on every process that reads or writes the cookie.
Run securecookie-keygen (python -m securecookie.keygen) to get fresh ones.
"""

ENV_PREFIX = "SECURECOOKIE_"


@dataclass
class CookieSettings:
    hash_key: bytes
    block_key: Optional[bytes] = None
    max_age: int = DEFAULT_MAX_AGE
    min_age: int = 0
    max_length: int = DEFAULT_MAX_LENGTH
    old_keys: List[Tuple[bytes, Optional[bytes]]] = field(default_factory=list)


def _key(raw: str, var: str) -> bytes:
    try:
        key = b64url_decode(raw.strip())
    except InvalidValueError as exc:
        raise ConfigError(f"securecookie: {var} is not valid base64url") from exc
    if not key:
        raise ConfigError(f"securecookie: {var} is empty")
    return key


def _int(env: Mapping[str, str], var: str, default: int) -> int:
    raw = env.get(var)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"securecookie: {var} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"securecookie: {var} must not be negative")
    return value


def _old_keys(raw: str, var: str) -> List[Tuple[bytes, Optional[bytes]]]:
    pairs = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        hash_part, _, block_part = item.partition(":")
        pairs.append((_key(hash_part, var), _key(block_part, var) if block_part else None))
    return pairs


def load_settings(environ: Optional[Mapping[str, str]] = None) -> CookieSettings:
    """Read CookieSettings from `environ` (os.environ by default)."""
    env = os.environ if environ is None else environ

    hash_var = ENV_PREFIX + "HASH_KEY"
    raw_hash = env.get(hash_var)
    if not raw_hash:
        raise ConfigError(f"securecookie: set {hash_var} (see securecookie-keygen)")

    block_var = ENV_PREFIX + "BLOCK_KEY"
    raw_block = env.get(block_var)

    old_var = ENV_PREFIX + "OLD_KEYS"
    return CookieSettings(
        hash_key=_key(raw_hash, hash_var),
        block_key=_key(raw_block, block_var) if raw_block else None,
        max_age=_int(env, ENV_PREFIX + "MAX_AGE", DEFAULT_MAX_AGE),
        min_age=_int(env, ENV_PREFIX + "MIN_AGE", 0),
        max_length=_int(env, ENV_PREFIX + "MAX_LENGTH", DEFAULT_MAX_LENGTH),
        old_keys=_old_keys(env.get(old_var, ""), old_var),
    )


def codecs_from_settings(settings: CookieSettings) -> Tuple[SecureCookie, ...]:
    """Current keys first, then each old pair, all sharing the same limits."""
    pairs = [(settings.hash_key, settings.block_key)] + list(settings.old_keys)
    return tuple(
        SecureCookie(
            hash_key,
            block_key,
            max_age=settings.max_age,
            min_age=settings.min_age,
            max_length=settings.max_length,
        )
        for hash_key, block_key in pairs
    )


def settings_to_env(settings: CookieSettings) -> dict:
    """Inverse of load_settings(), handy for writing a .env file."""
    env = {
        ENV_PREFIX + "HASH_KEY": b64url_encode(settings.hash_key).decode("ascii"),
        ENV_PREFIX + "MAX_AGE": str(settings.max_age),
        ENV_PREFIX + "MIN_AGE": str(settings.min_age),
        ENV_PREFIX + "MAX_LENGTH": str(settings.max_length),
    }
    if settings.block_key:
        env[ENV_PREFIX + "BLOCK_KEY"] = b64url_encode(settings.block_key).decode("ascii")
    return env
