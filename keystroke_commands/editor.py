"""
Line Editor
===========

An EditSession is the transient state of "the user is typing a
parameter" (fixed command with CommandFlags.PARAMETER) or "the user is
typing a long command" (after the long prefix key).

Each step consumes one key:

    ESC            → "Cancel", session ends, no handler runs
    ENTER          → session ends, input is completed:
                       fixed mode: handler(param, is_final=True)
                       long mode:  line goes to the long-command parser
    BACKSPACE/DEL  → drop the last character (if any)
    RELEASE        → nothing typed, preview is redrawn
    anything else  → appended

After every step that leaves the session open the current input is
echoed on the same terminal line ("\\r" + preview). Progressive
commands also get an intermediate call (is_final=False) on each of
those steps, which is how search-as-you-type works.

The session owns its InputBuffer and releases it when it ends, whether
the input completed, was cancelled, or a handler raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from keystroke_commands.buffer import InputBuffer
from keystroke_commands.keys import ERASE_KEYS, KEY_ENTER, KEY_ESCAPE, KEY_RELEASE
from keystroke_commands.registry import CommandArgument, FixedCommand


LongLineHandler = Callable[[str, Any, Any], Any]


class EditSession:
    """Accumulate-edit-complete state for one caller."""

    def __init__(self, command: Optional[FixedCommand] = None, is_long: bool = False,
                 prompt_marker: str = "> ", preview_width: int = 32,
                 capacity: int = 32):
        self.logger = logging.getLogger(__name__)
        self.buffer = InputBuffer(capacity)
        self.command = command
        self.is_long = is_long
        self.prompt_marker = prompt_marker
        self.preview_width = preview_width
        self.finished = False

    @property
    def text(self) -> str:
        return self.buffer.snapshot()

    def step(self, key: str, sink, context: Any = None,
             on_long_line: Optional[LongLineHandler] = None) -> bool:
        """Feed one key into the session.

        Parameters
        ----------
        key : str
            Normalized key.
        sink
            Output stream for the echo and for the handler.
        context : object
            Caller data passed through to handlers.
        on_long_line : callable
            ``on_long_line(text, sink, context)``, called with the whole
            line when a long-mode session completes.

        Returns
        -------
        bool
            True if the session has ended and must be dropped.
        """
        if self.finished:
            return True

        try:
            if key == KEY_ESCAPE:
                self.finished = True
                sink.write("\nCancel\n")
                return True

            if key == KEY_ENTER:
                self.finished = True
                sink.write("\n")
                self._complete(sink, context, on_long_line)
                return True

            if key in ERASE_KEYS:
                self.buffer.truncate()
            elif key != KEY_RELEASE:
                self.buffer.append(key)

            self._echo(sink)

            if not self.is_long and self.command is not None and self.command.is_progressive:
                self._report(sink, context, is_final=False)

            return False
        finally:
            if self.finished:
                self.close()

    def close(self) -> None:
        """End the session and release its buffer."""
        self.finished = True
        if not self.buffer.released:
            self.buffer.release()

    def _complete(self, sink, context, on_long_line) -> None:
        if self.is_long:
            if on_long_line is None:
                self.logger.warning("long command completed with no line handler")
                return
            on_long_line(self.text, sink, context)
        elif self.command is not None:
            self._report(sink, context, is_final=True)

    def _report(self, sink, context, is_final: bool) -> Any:
        arg = CommandArgument(
            key=self.command.key,
            parameter=self.text,
            is_final=is_final,
            context=context,
        )
        return self.command.handler(sink, arg)

    def _echo(self, sink) -> None:
        text = self.text
        if self.is_long:
            sink.write(f"\r{text}")
            return

        width = self.preview_width
        if width > 0:
            text = text[-width:].rjust(width)
        sink.write(f"\r{self.prompt_marker}{text}")

    def __repr__(self) -> str:
        if self.is_long:
            mode = "long"
        else:
            mode = f"key={self.command.key!r}" if self.command else "none"
        state = "finished" if self.finished else repr(self.buffer)
        return f"EditSession({mode}, {state})"


@dataclass
class SessionSlot:
    """Caller-owned storage for the edit session of one terminal.

    The dispatcher keeps no per-caller state of its own; each caller
    hands the same slot to every ``process()`` call.
    """
    session: Optional[EditSession] = None

    @property
    def active(self) -> bool:
        return self.session is not None

    @property
    def is_long(self) -> bool:
        return self.session is not None and self.session.is_long

    def clear(self) -> None:
        if self.session is not None:
            self.session.close()
        self.session = None
