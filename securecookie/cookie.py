"""
cookie.py: SecureCookie, the codec that ties the pipeline together.

Encode:  value -> bytes -> [encrypt] -> b64 -> "name|ts|b64|" -> MAC
         -> drop "name|" -> b64 -> length check
Decode:  the exact reverse, and nothing past the MAC check runs unless the
         MAC is good.

Typical usage:
    codec = SecureCookie(hash_key, block_key)
    token = codec.encode("sid", {"user": 42})
    value = codec.decode("sid", token)

State:
- A codec is READY or FAILED. Missing/invalid keys flip it to FAILED and the
  same error is raised from every encode/decode after that. There is no way
  back; build a new codec with good keys.
"""

import enum
import logging
import re
import time
from typing import Any, Callable, Optional, Protocol

from . import crypto
from .errors import (
    NoBlockKeyError,
    NoHashKeyError,
    SecureCookieError,
    SerializationError,
    TimestampInvalidError,
    TooLongError,
    TooNewError,
    ExpiredError,
    MacInvalidError,
)
from .framing import DEFAULT_MAX_LENGTH, DELIMITER, build_frame, mac_input, split_frame
from .serializer import Serializer, is_coder

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = 86400 * 30  # 30 days
_TIMESTAMP_RE = re.compile(rb"-?[0-9]+")


def utc_now() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


class Codec(Protocol):
    """Anything that can encode/decode cookie values (used for key rotation lists)."""

    def encode(self, name: str, value: Any) -> str:
        ...

    def decode(self, name: str, value: str, dst: Any = None) -> Any:
        ...


class CodecState(enum.Enum):
    READY = "ready"
    FAILED = "failed"


class SecureCookie:
    """
    Authenticated (and optionally encrypted) cookie value codec.

    Args:
        hash_key:  required, HMAC key. 32 or 64 random bytes recommended.
        block_key: optional, enables encryption. For AES (the default) it must
                   be 16, 24 or 32 bytes.
        hash_func: hashlib-style constructor for the HMAC (default sha256).
        block_func: builds the block cipher from block_key (default AES).
        max_length / max_age / min_age: 0 turns the check off.
        time_func: clock returning Unix seconds; tests pin it.
    """

    def __init__(
        self,
        hash_key: Optional[bytes],
        block_key: Optional[bytes] = None,
        *,
        hash_func: crypto.HashFunc = crypto.DEFAULT_HASH_FUNC,
        block_func: Optional[crypto.BlockFunc] = None,
        max_length: int = DEFAULT_MAX_LENGTH,
        max_age: int = DEFAULT_MAX_AGE,
        min_age: int = 0,
        time_func: Optional[Callable[[], int]] = None,
    ) -> None:
        self.hash_key = hash_key
        self.block_key = block_key
        self.hash_func = hash_func
        self.max_length = max_length
        self.max_age = max_age
        self.min_age = min_age
        self.time_func = time_func or utc_now

        self._block = None
        self._serializer = Serializer()
        self.state = CodecState.READY
        self.error: Optional[SecureCookieError] = None

        if not hash_key:
            self._fail(NoHashKeyError())
        if block_key is not None or block_func is not None:
            self.set_block_func(block_func or crypto.DEFAULT_BLOCK_FUNC)

    # -----------------------------
    # Configuration (chainable)
    # -----------------------------

    def set_max_length(self, value: int) -> "SecureCookie":
        self.max_length = value
        return self

    def set_max_age(self, value: int) -> "SecureCookie":
        self.max_age = value
        return self

    def set_min_age(self, value: int) -> "SecureCookie":
        self.min_age = value
        return self

    def set_hash_func(self, func: crypto.HashFunc) -> "SecureCookie":
        self.hash_func = func
        return self

    def set_block_func(self, func: crypto.BlockFunc) -> "SecureCookie":
        """Build the cipher from block_key. Any failure latches the codec."""
        if not self.block_key:
            self._fail(NoBlockKeyError())
            return self
        try:
            self._block = func(self.block_key)
        except (ValueError, TypeError) as exc:
            self._fail(SecureCookieError(f"securecookie: invalid block key: {exc}"))
        return self

    def register(self, value: Any) -> None:
        """Prime the default serializer with a value or dataclass type."""
        self._serializer.register(value)

    @property
    def encrypted(self) -> bool:
        return self._block is not None

    # -----------------------------
    # Encode / Decode
    # -----------------------------

    def encode(self, name: str, value: Any) -> str:
        """
        Serialize, optionally encrypt, sign and base64 a cookie value.

        `name` is MACed but not stored in the token; decode() must be given
        the same name.
        """
        self._check_ready()

        # 1) Serialize.
        if is_coder(value):
            try:
                data = value.to_bytes()
            except SecureCookieError:
                raise
            except Exception as exc:
                raise SerializationError(f"securecookie: to_bytes failed: {exc}") from exc
            if not isinstance(data, (bytes, bytearray)):
                raise SerializationError("securecookie: to_bytes must return bytes")
            data = bytes(data)
        else:
            data = self._serializer.serialize(value)

        # 2) Encrypt (optional).
        if self._block is not None:
            data = crypto.encrypt(self._block, data)

        # 3) MAC over "name|ts|value", then drop the name.
        frame = build_frame(name, self._timestamp(), crypto.b64url_encode(data))
        mac = crypto.create_mac(self.hash_key, self.hash_func, frame[:-1])
        frame = (frame + mac)[len(name.encode("utf-8")) + 1:]

        # 4) Encode.
        out = crypto.b64url_encode(frame).decode("ascii")

        # 5) Length.
        if self.max_length and len(out) > self.max_length:
            raise TooLongError()
        return out

    def decode(self, name: str, value: str, dst: Any = None) -> Any:
        """
        Verify and decode a cookie value produced by encode().

        Args:
            name:  the same name used at encode time.
            value: the token string.
            dst:   optional target. A Coder instance gets from_bytes() called
                   and is returned; a dataclass type is built from the payload.

        Returns:
            The decoded value (or `dst` for Coder targets).
        """
        self._check_ready()

        # 1) Length, before spending anything on attacker input.
        if self.max_length and len(value) > self.max_length:
            raise TooLongError()

        try:
            # 2) Base64.
            raw = crypto.b64url_decode(value)

            # 3) Split + verify MAC. Malformed and forged look the same,
            #    and both cost one HMAC.
            try:
                ts_field, payload_field, mac = split_frame(raw)
            except MacInvalidError:
                crypto.create_mac(self.hash_key, self.hash_func, mac_input(name, raw))
                raise
            signed = raw[: len(raw) - len(mac) - len(DELIMITER)]
            crypto.verify_mac(self.hash_key, self.hash_func, mac_input(name, signed), mac)

            # 4) Timestamp window.
            self._check_age(ts_field)

            # 5) Decode + decrypt (optional).
            data = crypto.b64url_decode(payload_field)
            if self._block is not None:
                data = crypto.decrypt(self._block, data)

            # 6) Deserialize.
            return self._load(data, dst)
        except SecureCookieError as exc:
            logger.debug(f"Rejected cookie {name!r}: {type(exc).__name__}")
            raise

    # -----------------------------
    # Internals
    # -----------------------------

    def _check_ready(self) -> None:
        if self.state is CodecState.FAILED:
            raise self.error
        if not self.hash_key:
            self._fail(NoHashKeyError())
            raise self.error

    def _fail(self, error: SecureCookieError) -> None:
        # First failure wins; later ones don't overwrite the reason.
        if self.state is CodecState.FAILED:
            return
        self.state = CodecState.FAILED
        self.error = error
        logger.warning(f"SecureCookie disabled: {error}")

    def _timestamp(self) -> int:
        return int(self.time_func())

    def _check_age(self, ts_field: bytes) -> None:
        if not _TIMESTAMP_RE.fullmatch(ts_field):
            raise TimestampInvalidError()
        ts = int(ts_field)
        now = self._timestamp()
        if self.min_age and ts > now - self.min_age:
            raise TooNewError()
        if self.max_age and ts < now - self.max_age:
            raise ExpiredError()

    def _load(self, data: bytes, dst: Any) -> Any:
        if is_coder(dst):
            try:
                dst.from_bytes(data)
            except SecureCookieError:
                raise
            except Exception as exc:
                raise SerializationError(f"securecookie: from_bytes failed: {exc}") from exc
            return dst
        return self._serializer.deserialize(data, into=dst if isinstance(dst, type) else None)

    def __repr__(self) -> str:
        return (
            f"SecureCookie(state={self.state.value}, encrypted={self.encrypted}, "
            f"max_age={self.max_age}, min_age={self.min_age}, max_length={self.max_length})"
        )
