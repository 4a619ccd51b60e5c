#!/usr/bin/env python3
"""
Keystroke Command Console: Interactive Demo

Puts the terminal in raw mode and feeds every keystroke to a
KeyDispatcher. Try:

    h             help
    e             type a parameter, ENTER to echo it, ESC to cancel
    s             search-as-you-type through a small word list
    .echo hi      long command
    .upper radio  long command with a parameter
    q             quit

When stdin is not a terminal, each input line is fed key by key
followed by ENTER, which makes the console scriptable:

    printf 'e42\\n.echo hello\\nq' | keystroke-commands
"""

import logging
import os
import select
import sys
from typing import Iterator, List, Optional

from keystroke_commands.buffer import ENCODING
from keystroke_commands.config_manager import setup_configuration, setup_logging
from keystroke_commands.dispatcher import KeyDispatcher
from keystroke_commands.editor import SessionSlot
from keystroke_commands.errors import CommandError
from keystroke_commands.keys import KEY_ENTER
from keystroke_commands.registry import (
    CommandBlock,
    CommandFlags,
    CommandRegistry,
    FixedCommand,
    LongCommand,
)

try:
    import termios
    import tty
except ImportError:  # not a POSIX terminal
    termios = None
    tty = None


WORDS = [
    "alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf",
    "hotel", "india", "juliett", "kilo", "lima", "mike", "november",
]


class ConsoleState:
    """Per-terminal state shared with the demo handlers."""

    def __init__(self):
        self.running = True
        self.history: List[str] = []


class RawKeyReader:
    """Yields single keys from stdin, in raw mode when stdin is a tty."""

    def __init__(self, stream=None, poll_interval: float = 0.1):
        self.stream = stream or sys.stdin
        self.poll_interval = poll_interval
        self._saved = None

    @property
    def interactive(self) -> bool:
        return termios is not None and self.stream.isatty()

    def __enter__(self):
        if self.interactive:
            fd = self.stream.fileno()
            self._saved = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._saved is not None:
            termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self._saved)
            self._saved = None
        return False

    def keys(self) -> Iterator[str]:
        if not self.interactive:
            for line in self.stream:
                for key in line.rstrip("\r\n"):
                    yield key
                yield KEY_ENTER
            return

        # unbuffered reads: bytes not yet consumed stay visible to select
        fd = self.stream.fileno()
        while True:
            # Use select for non-blocking input on Unix systems
            if select.select([fd], [], [], self.poll_interval)[0]:
                data = os.read(fd, 1)
                if not data:
                    return
                key = data.decode(ENCODING)
                yield KEY_ENTER if key == "\r" else key


# ─── Demo handlers ──────────────────────────────────────────────────

def _quit(sink, arg):
    arg.context.running = False
    sink.write("\n73!\n")


def _echo(sink, arg):
    text = arg.parameter or ""
    arg.context.history.append(text)
    sink.write(f"echo: {text}\n")


def _search(sink, arg):
    prefix = (arg.parameter or "").lower()
    matches = [word for word in WORDS if word.startswith(prefix)] if prefix else []
    if arg.is_final:
        sink.write(f"selected: {matches[0] if matches else '(none)'}\n")
    else:
        sink.write(f"   [{', '.join(matches[:5])}]")


def _upper(sink, arg):
    sink.write(f"{(arg.parameter or '').upper()}\n")


def _history(sink, arg):
    entries = arg.context.history
    sink.write(f"{len(entries)} echoed\n")
    for i, text in enumerate(entries, 1):
        sink.write(f"  {i}. {text}\n")


def build_demo_dispatcher(registry: Optional[CommandRegistry] = None, config=None) -> KeyDispatcher:
    """Dispatcher with the demo commands registered."""
    dispatcher = KeyDispatcher(registry, config)

    dispatcher.register_commands(CommandBlock([
        FixedCommand('h', "Help", dispatcher.print_help),
        FixedCommand('q', "Quit", _quit),
        FixedCommand('e', "Echo a parameter", _echo, CommandFlags.PARAMETER),
        FixedCommand('s', "Search words as you type", _search,
                     CommandFlags.PARAMETER | CommandFlags.PROGRESSIVE),
    ], name="demo"))

    dispatcher.register_long_commands([
        LongCommand("echo", "Echo the rest of the line", _echo, CommandFlags.PARAMETER),
        LongCommand("upper", "Echo in upper case", _upper, CommandFlags.PARAMETER),
        LongCommand("history", "List echoed text", _history),
        LongCommand("quit", "Quit", _quit),
    ])
    return dispatcher


def main(argv=None) -> int:
    config, should_exit, _ = setup_configuration(argv)
    if should_exit:
        return 0 if config is None else 1

    setup_logging(config.logging)
    logger = logging.getLogger(__name__)

    dispatcher = build_demo_dispatcher(config=config)
    state = ConsoleState()
    slot = SessionSlot()

    print("=" * 60)
    print("  Keystroke Command Console Demo")
    print("  Press h for help, q to quit")
    print("=" * 60)

    with RawKeyReader() as reader:
        try:
            for key in reader.keys():
                try:
                    dispatcher.process(slot, key, sys.stdout, context=state)
                except CommandError as e:
                    logger.error(f"{type(e).__name__}: {e}")
                sys.stdout.flush()
                if not state.running:
                    break
        except (EOFError, KeyboardInterrupt):
            print("\n73!")

    slot.clear()
    return 0


if __name__ == "__main__":
    sys.exit(main())
