"""
Shared fixtures for securecookie tests.
"""
import os
import sys
from dataclasses import dataclass

import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from securecookie import SecureCookie  # noqa: E402

HASH_KEY = b"12345"
BLOCK_KEY = b"1234567890123456"
OTHER_HASH_KEY = b"54321"
OTHER_BLOCK_KEY = b"6543210987654321"

START = 1_700_000_000


class FakeClock:
    """Settable clock; pass as time_func."""

    def __init__(self, now: int = START) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@dataclass
class FooBar:
    foo: int
    bar: str


class TextCoder:
    """Brings its own byte format (plain UTF-8)."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    def to_bytes(self) -> bytes:
        return self.text.encode("utf-8")

    def from_bytes(self, data: bytes) -> None:
        self.text = data.decode("utf-8")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def codec(clock):
    """Signed + AES-128 encrypted codec on a fixed clock."""
    return SecureCookie(HASH_KEY, BLOCK_KEY, time_func=clock)


@pytest.fixture
def signed_codec(clock):
    """Signed-only codec (no block key)."""
    return SecureCookie(HASH_KEY, time_func=clock)


@pytest.fixture
def other_codec(clock):
    return SecureCookie(OTHER_HASH_KEY, OTHER_BLOCK_KEY, time_func=clock)
