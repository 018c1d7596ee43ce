"""
crypto.py: the primitive helpers the codec is built from.

Why this exists:
- Keep base64, HMAC and the block cipher in one place so cookie.py reads
  like the pipeline it is: serialize -> encrypt -> frame -> MAC -> encode.
- Everything here works on bytes; no knowledge of names or timestamps.

Notes:
- Base64 is URL-safe WITH '=' padding. Decoding is strict: a wrong alphabet
  or broken padding is an error, not something we quietly repair.
- HMAC defaults to SHA-256; any hashlib-style constructor can be swapped in.
- Encryption is counter mode with a fresh random IV per call, IV prepended.
  The block cipher comes from `cryptography` (AES unless told otherwise).
"""

import base64
import binascii
import hashlib
import hmac
import logging
import os
from typing import Callable, Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers import BlockCipherAlgorithm, Cipher, algorithms, modes

from .errors import DecryptionError, EncryptionError, InvalidValueError, MacInvalidError

logger = logging.getLogger(__name__)

# A hashlib-style constructor (hashlib.sha256) or a name hmac understands ("sha512").
HashFunc = Union[Callable[..., "hashlib._Hash"], str]
# Takes raw key bytes, returns a cryptography block cipher algorithm.
BlockFunc = Callable[[bytes], BlockCipherAlgorithm]

DEFAULT_HASH_FUNC = hashlib.sha256
DEFAULT_BLOCK_FUNC: BlockFunc = algorithms.AES


# -----------------------------
# Base64 URL helpers (padded)
# -----------------------------

def b64url_encode(data: bytes) -> bytes:
    """URL-safe Base64, '=' padding kept, no line breaks."""
    return base64.urlsafe_b64encode(data)


def b64url_decode(data: Union[str, bytes]) -> bytes:
    """
    Strict inverse of b64url_encode().

    Raises:
        InvalidValueError: non-ASCII input, characters outside the URL-safe
        alphabet (including '+' and '/'), bad padding, or a non-canonical
        encoding (stray low bits in the last character).
    """
    if isinstance(data, str):
        try:
            data = data.encode("ascii")
        except UnicodeEncodeError as exc:
            raise InvalidValueError() from exc
    # b64decode maps '-_' onto '+/' first, so reject the standard alphabet up front.
    if b"+" in data or b"/" in data:
        raise InvalidValueError()
    try:
        out = base64.b64decode(data, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidValueError() from exc
    # One encoding per byte string: "AB==" must not pass for "AA==".
    if base64.urlsafe_b64encode(out) != data:
        raise InvalidValueError()
    return out


# -----------------
# MAC helpers
# -----------------

def create_mac(key: bytes, hash_func: HashFunc, message: bytes) -> bytes:
    """HMAC(key, message) with the given hash; returns the raw digest."""
    return hmac.new(key, message, hash_func).digest()


def verify_mac(key: bytes, hash_func: HashFunc, message: bytes, mac: bytes) -> None:
    """
    Recompute the MAC and compare in constant time.

    Raises:
        MacInvalidError: on any mismatch. A length mismatch bails early;
        digest length isn't secret.
    """
    expected = create_mac(key, hash_func, message)
    if len(mac) != len(expected) or not hmac.compare_digest(mac, expected):
        raise MacInvalidError()


# ---------------------------
# Encryption & Decryption API
# ---------------------------

def block_size(block: BlockCipherAlgorithm) -> int:
    """Cipher block size in bytes (cryptography reports bits)."""
    return block.block_size // 8


def encrypt(block: BlockCipherAlgorithm, value: bytes) -> bytes:
    """
    Encrypt `value` in CTR mode and return iv + ciphertext.

    The IV is random and exactly one block long. If the system can't give us
    randomness we fail loudly; a fixed IV would break CTR completely.
    """
    iv = generate_random_key(block_size(block))
    if iv is None:
        raise EncryptionError("securecookie: failed to generate random iv")
    try:
        encryptor = Cipher(block, modes.CTR(iv)).encryptor()
        ciphertext = encryptor.update(value) + encryptor.finalize()
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise EncryptionError(f"securecookie: encryption failed: {exc}") from exc
    return iv + ciphertext


def decrypt(block: BlockCipherAlgorithm, value: bytes) -> bytes:
    """
    Reverse of encrypt(). Input must be longer than one block (IV + at least
    one byte of ciphertext).
    """
    size = block_size(block)
    if len(value) <= size:
        raise DecryptionError()
    iv, ciphertext = value[:size], value[size:]
    try:
        decryptor = Cipher(block, modes.CTR(iv)).decryptor()
        return decryptor.update(ciphertext) + decryptor.finalize()
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise DecryptionError() from exc


# -------------------
# Keys
# -------------------

def generate_random_key(length: int) -> Optional[bytes]:
    """
    Return `length` bytes from the OS CSPRNG, or None if it isn't available.

    Good for hash keys (32 or 64 bytes) and AES block keys (16, 24 or 32).
    """
    try:
        return os.urandom(length)
    except (OSError, NotImplementedError) as exc:
        logger.error(f"Random source unavailable: {exc}")
        return None
