"""
errors.py: every failure the codec can raise, in one place.

All of them derive from SecureCookieError so callers can do a single
`except SecureCookieError` and treat the token as untrusted.

Note on MacInvalidError:
- It covers BOTH a wrong MAC and a structurally broken frame. Same class,
  same message. An attacker poking at tokens learns nothing from which one
  they hit.
"""

from typing import Iterable, List, Optional


class SecureCookieError(Exception):
    """Base class for everything raised by this package."""


# -----------------------------
# Key / configuration problems
# -----------------------------

class NoHashKeyError(SecureCookieError):
    def __init__(self, message: str = "securecookie: hash key is not set") -> None:
        super().__init__(message)


class NoBlockKeyError(SecureCookieError):
    def __init__(self, message: str = "securecookie: no block key set") -> None:
        super().__init__(message)


class ConfigError(SecureCookieError):
    """Bad environment configuration (unparseable number, broken base64 key...)."""


# -----------------------------
# Token validation
# -----------------------------

class InvalidValueError(SecureCookieError):
    def __init__(self, message: str = "securecookie: the value is not valid base64") -> None:
        super().__init__(message)


class MacInvalidError(SecureCookieError):
    def __init__(self, message: str = "securecookie: the value is not valid") -> None:
        super().__init__(message)


class TimestampInvalidError(SecureCookieError):
    def __init__(self, message: str = "securecookie: invalid timestamp") -> None:
        super().__init__(message)


class TooNewError(SecureCookieError):
    def __init__(self, message: str = "securecookie: timestamp too new") -> None:
        super().__init__(message)


class ExpiredError(SecureCookieError):
    def __init__(self, message: str = "securecookie: expired") -> None:
        super().__init__(message)


class TooLongError(SecureCookieError):
    def __init__(self, message: str = "securecookie: value too long") -> None:
        super().__init__(message)


# -----------------------------
# Payload pipeline
# -----------------------------

class EncryptionError(SecureCookieError):
    pass


class DecryptionError(SecureCookieError):
    def __init__(self, message: str = "securecookie: the value could not be decrypted") -> None:
        super().__init__(message)


class SerializationError(SecureCookieError):
    pass


# -----------------------------
# Multi-codec
# -----------------------------

class NoCodecsError(SecureCookieError):
    def __init__(self, message: str = "securecookie: no codecs provided") -> None:
        super().__init__(message)


class MultiError(SecureCookieError):
    """
    Every codec in a rotation list failed; this groups their errors.

    The message is the first error plus a count of the rest, e.g.
    "securecookie: the value is not valid (and 2 other errors)".
    """

    def __init__(self, errors: Optional[Iterable[BaseException]] = None) -> None:
        self.errors: List[BaseException] = list(errors or [])
        super().__init__(self._format())

    def _format(self) -> str:
        present = [e for e in self.errors if e is not None]
        n = len(present)
        if n == 0:
            return "(0 errors)"
        first = str(present[0])
        if n == 1:
            return first
        if n == 2:
            return f"{first} (and 1 other error)"
        return f"{first} (and {n - 1} other errors)"

    @property
    def count(self) -> int:
        return sum(1 for e in self.errors if e is not None)

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        return self._format()
