"""
securecookie: authenticated, optionally encrypted cookie values.

What you get:
- HMAC-SHA256 over "name|timestamp|value", checked in constant time.
- Optional AES-CTR encryption with a fresh random IV per value.
- Timestamp window (max_age / min_age) and a max token length.
- Key rotation via encode_multi/decode_multi over an ordered codec list.

What it doesn't do:
- Set or read HTTP cookies. Hand it the cookie name and the raw value.
- Store sessions or manage keys. Keys come from you (or the environment,
  see securecookie.config).

Quick start:
    from securecookie import SecureCookie, generate_random_key
    codec = SecureCookie(generate_random_key(32), generate_random_key(16))
    token = codec.encode("sid", {"foo": "bar", "baz": 128})
    codec.decode("sid", token)   # -> {"foo": "bar", "baz": 128}
"""
from .cookie import DEFAULT_MAX_AGE, Codec, CodecState, SecureCookie
from .crypto import generate_random_key
from .errors import (
    ConfigError,
    DecryptionError,
    EncryptionError,
    ExpiredError,
    InvalidValueError,
    MacInvalidError,
    MultiError,
    NoBlockKeyError,
    NoCodecsError,
    NoHashKeyError,
    SecureCookieError,
    SerializationError,
    TimestampInvalidError,
    TooLongError,
    TooNewError,
)
from .multi import codecs_from_pairs, decode_multi, encode_multi
from .serializer import Coder

__all__ = [
    "Codec",
    "CodecState",
    "Coder",
    "ConfigError",
    "DEFAULT_MAX_AGE",
    "DecryptionError",
    "EncryptionError",
    "ExpiredError",
    "InvalidValueError",
    "MacInvalidError",
    "MultiError",
    "NoBlockKeyError",
    "NoCodecsError",
    "NoHashKeyError",
    "SecureCookie",
    "SecureCookieError",
    "SerializationError",
    "TimestampInvalidError",
    "TooLongError",
    "TooNewError",
    "codecs_from_pairs",
    "decode_multi",
    "encode_multi",
    "generate_random_key",
]
