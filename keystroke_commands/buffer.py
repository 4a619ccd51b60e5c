"""
Input Buffer
============

Growable byte buffer with a write cursor, used by the line editor to
accumulate what the user types.

Two positions are tracked:

    pos   where the next byte is written
    end   logical end of the content

Appending writes at ``pos`` and advances both. Erasing moves ``pos``
and ``end`` back by one without touching the stored bytes, so the
"deleted" byte is still physically present until the next append
overwrites it:

    write "abc"     storage: a b c      pos=3 end=3   text "abc"
    truncate        storage: a b c      pos=2 end=2   text "ab"
    write "x"       storage: a b x      pos=3 end=3   text "abx"

Text is stored one byte per key (latin-1), matching the byte-sized key
space of the command layer.
"""

from __future__ import annotations

from keystroke_commands.errors import InvalidArgument
from keystroke_commands.keys import normalize_key


ENCODING = "latin-1"


class InputBuffer:
    """Append / truncate / snapshot buffer backing an edit session."""

    def __init__(self, capacity: int = 32):
        if capacity < 0:
            raise InvalidArgument(f"capacity must not be negative: {capacity}")
        self._data = bytearray(capacity)
        self._pos = 0
        self._end = 0

    @property
    def pos(self) -> int:
        return self._pos

    @property
    def end(self) -> int:
        return self._end

    @property
    def capacity(self) -> int:
        return 0 if self._data is None else len(self._data)

    def __len__(self) -> int:
        return self._end

    def __bool__(self) -> bool:
        return self._end > 0

    def write_byte(self, value: int) -> None:
        """Write one byte at the cursor, growing the storage if needed."""
        if self._data is None:
            raise InvalidArgument("buffer has been released")
        if not 0 <= value <= 0xFF:
            raise InvalidArgument(f"byte value out of range: {value}")

        if self._pos >= len(self._data):
            # double the storage
            self._data.extend(bytes(max(len(self._data), 1)))
        self._data[self._pos] = value

        self._pos += 1
        self._end = max(self._end, self._pos)

    def append(self, key) -> None:
        """Append a one-character key (str, int or bytes)."""
        self.write_byte(ord(normalize_key(key)))

    def truncate(self) -> bool:
        """Drop the last character. Returns False if the buffer was empty."""
        if self._pos == 0:
            return False
        self._pos = self._end = self._pos - 1
        return True

    def snapshot(self) -> str:
        """Current logical content as text."""
        if self._data is None:
            raise InvalidArgument("buffer has been released")
        return bytes(self._data[:self._end]).decode(ENCODING)

    def release(self) -> None:
        """Drop the storage. Further appends or snapshots are errors."""
        self._data = None
        self._pos = self._end = 0

    @property
    def released(self) -> bool:
        return self._data is None

    def __repr__(self) -> str:
        if self._data is None:
            return "InputBuffer(released)"
        return f"InputBuffer({self.snapshot()!r}, pos={self._pos})"
