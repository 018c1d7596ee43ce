"""
multi.py: key rotation: try a list of codecs in order.

Put the newest keys first. encode_multi() signs with the first codec that
works; decode_multi() accepts a token from any of them. If every codec fails
you get one MultiError carrying all of their errors.
"""

import logging
from typing import Any, Optional, Tuple

from .cookie import Codec, SecureCookie
from .errors import MultiError, NoCodecsError, SecureCookieError

logger = logging.getLogger(__name__)


def codecs_from_pairs(*key_pairs: Optional[bytes]) -> Tuple[SecureCookie, ...]:
    """
    Build codecs from alternating hash/block keys:

        codecs_from_pairs(new_hash, new_block, old_hash, old_block)

    A trailing hash key without a partner gets no block key (signed only).
    """
    codecs = []
    for i in range(0, len(key_pairs), 2):
        block_key = key_pairs[i + 1] if i + 1 < len(key_pairs) else None
        codecs.append(SecureCookie(key_pairs[i], block_key))
    return tuple(codecs)


def encode_multi(name: str, value: Any, *codecs: Codec) -> str:
    """Encode with the first codec that succeeds."""
    if not codecs:
        raise NoCodecsError()

    errors = []
    for codec in codecs:
        try:
            return codec.encode(name, value)
        except SecureCookieError as exc:
            errors.append(exc)
    raise MultiError(errors)


def decode_multi(name: str, value: str, *codecs: Codec, dst: Any = None) -> Any:
    """Decode with the first codec that accepts the token."""
    if not codecs:
        raise NoCodecsError()

    errors = []
    for index, codec in enumerate(codecs):
        try:
            decoded = codec.decode(name, value, dst)
        except SecureCookieError as exc:
            errors.append(exc)
            continue
        if index:
            logger.debug(f"Cookie {name!r} accepted by fallback codec #{index}")
        return decoded
    raise MultiError(errors)

