"""
Key Codes
=========

Named key values understood by the command layer. Keys travel through
the system as one-character strings whose code point fits in a byte,
the same way a terminal in raw mode hands them to us.

    KEY_RELEASE    0x00  Key-up sentinel. Ignored while editing.
    KEY_BACKSPACE  0x08  Erase one character.
    KEY_ENTER      0x0a  Complete the current input.
    KEY_ESCAPE     0x1b  Cancel the current input.
    KEY_DELETE     0x7f  Erase one character (what most terminals send).
    LONG_PREFIX    '.'   Starts a long command such as ".dial 1234".
"""

from __future__ import annotations

from typing import Union

from keystroke_commands.errors import InvalidArgument


KEY_RELEASE = "\x00"
KEY_BACKSPACE = "\b"
KEY_ENTER = "\n"
KEY_ESCAPE = "\x1b"
KEY_DELETE = "\x7f"
KEY_SPACE = " "

LONG_PREFIX = "."

ERASE_KEYS = (KEY_BACKSPACE, KEY_DELETE)

# One byte worth of key space
KEY_SPACE_SIZE = 256


def normalize_key(key: Union[str, int, bytes]) -> str:
    """Return ``key`` as a one-character string.

    Accepts a one-character ``str``, a one-byte ``bytes`` object or an
    ``int`` byte value. Anything outside the byte range raises
    InvalidArgument.
    """
    if isinstance(key, bytes):
        if len(key) != 1:
            raise InvalidArgument(f"key must be a single byte, got {key!r}")
        return chr(key[0])

    if isinstance(key, int):
        if not 0 <= key < KEY_SPACE_SIZE:
            raise InvalidArgument(f"key value out of range: {key}")
        return chr(key)

    if isinstance(key, str) and len(key) == 1 and ord(key) < KEY_SPACE_SIZE:
        return key

    raise InvalidArgument(f"not a valid key: {key!r}")
