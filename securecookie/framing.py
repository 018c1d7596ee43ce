from typing import Tuple

from .errors import MacInvalidError

"""
framing.py: the pipe-delimited byte layout that ties a token together.

Layout (what gets MACed, plus the MAC itself):
- name | timestamp | payload | mac
- `timestamp` is a plain base-10 integer (seconds since the epoch).
- `payload` is base64url text, so it never contains a pipe.
- `mac` is raw digest bytes and MAY contain `|`, that's why the decoder
  splits on exactly the first two pipes and keeps the rest verbatim.

Why so strict?
- Any wiggle room in the split is a forgery vector. Two pipes, left to right,
  done.
- Broken frames raise MacInvalidError, the same error a bad MAC gets.
"""

DELIMITER = b"|"
DEFAULT_MAX_LENGTH = 4096  # biggest cookie value old browsers accept


def build_frame(name: str, timestamp: int, payload: bytes) -> bytes:
    """
    Return `name|timestamp|payload|`.

    The trailing pipe is intentional: the MAC is computed over everything
    before it, then appended after it.
    """
    if isinstance(name, str):
        name = name.encode("utf-8")
    return b"".join([
        name, DELIMITER,
        str(int(timestamp)).encode("ascii"), DELIMITER,
        payload, DELIMITER,
    ])


def split_frame(data: bytes) -> Tuple[bytes, bytes, bytes]:
    """
    Split `timestamp|payload|mac` into its three fields.

    Raises:
        MacInvalidError: a delimiter is missing, or a field before it is empty.
    """
    fields = []
    offset = 0
    for _ in range(2):
        j = data.find(DELIMITER, offset)
        # Not found, or an empty field (leading / doubled pipe).
        if j == -1 or j == offset:
            raise MacInvalidError()
        fields.append(data[offset:j])
        offset = j + 1
    fields.append(data[offset:])
    return fields[0], fields[1], fields[2]


def mac_input(name: str, signed_part: bytes) -> bytes:
    """
    Rebuild exactly what was MACed at encode time: `name|` + `timestamp|payload`.

    `signed_part` is the decoded token minus `|mac`. The name comes from the
    caller, never from the token.
    """
    if isinstance(name, str):
        name = name.encode("utf-8")
    return name + DELIMITER + signed_part
