"""
Key Dispatcher
==============

Routes each keystroke to the right place. This is the top-level state
machine of the command layer.

States
------
    Idle          no session in the caller's slot
    Editing       session collecting a parameter for a fixed command
    EditingLong   session collecting a long-command line

Routing of ``process(slot, key)``
---------------------------------
    session active?
      ├─ yes: RELEASE → ignored
      │       else    → session.step(key); slot cleared when it ends
      └─ no:  fixed command for key?
                ├─ needs parameter → new session (Editing), fed the key
                │                    if it is a digit, else discarded
                ├─ otherwise       → handler(is_final=True), stay Idle
              long prefix?         → prompt, new long session (EditingLong)
              RELEASE?             → nothing
              anything else        → help listing

An unknown key is a request for help, not an error.

    registry = CommandRegistry()
    dispatcher = KeyDispatcher(registry)
    slot = SessionSlot()

    for key in terminal_keys():
        dispatcher.process(slot, key, sys.stdout, context=call)

The dispatcher keeps no per-caller state. Each terminal keeps its own
SessionSlot and passes it on every call; calls for one slot must not
overlap.
"""

from __future__ import annotations

import logging
import string
import sys
from typing import Any, Iterable, Optional

from keystroke_commands.config_manager import CommandSystemConfig
from keystroke_commands.editor import EditSession, SessionSlot
from keystroke_commands.errors import InvalidArgument
from keystroke_commands.help import HelpFormatter
from keystroke_commands.keys import KEY_RELEASE, normalize_key
from keystroke_commands.parser import LongLineParser
from keystroke_commands.registry import (
    CommandArgument,
    CommandBlock,
    CommandRegistry,
    FixedCommand,
    LongCommand,
)


class KeyDispatcher:
    """Feeds keystrokes to commands of a CommandRegistry."""

    def __init__(self, registry: Optional[CommandRegistry] = None,
                 config: Optional[CommandSystemConfig] = None):
        self.registry = registry if registry is not None else CommandRegistry()
        self.config = config if config is not None else CommandSystemConfig()
        self.logger = logging.getLogger(__name__)

        self.long_prefix = self.config.editor.long_prefix
        self.parser = LongLineParser(self.registry)
        self.help = HelpFormatter(
            self.registry,
            min_width=self.config.help.min_width,
            long_prefix=self.long_prefix,
            first_key=self.config.help.first_key,
            last_key=self.config.help.last_key,
        )

    # ─── Registry pass-throughs ─────────────────────────────────────

    def register_commands(self, block: CommandBlock) -> None:
        self.registry.register_commands(block)

    def unregister_commands(self, block: CommandBlock) -> None:
        self.registry.unregister_commands(block)

    def register_long_commands(self, entries: Iterable[LongCommand]) -> None:
        self.registry.register_long_commands(entries)

    def unregister_long_commands(self, entries: Iterable[LongCommand]) -> None:
        self.registry.unregister_long_commands(entries)

    def find_long_command(self, name: str) -> Optional[LongCommand]:
        return self.registry.find_long_command(name)

    # ─── Dispatch ───────────────────────────────────────────────────

    def process(self, slot: Optional[SessionSlot], key, sink=None, context: Any = None) -> Any:
        """Process one keystroke.

        Parameters
        ----------
        slot : SessionSlot or None
            The caller's session storage. Required for parameter and long
            commands; plain key commands work without one.
        key : str, int or bytes
            The keystroke (see keys.normalize_key).
        sink
            Output stream, ``sys.stdout`` if omitted.
        context : object
            Opaque caller data handed to handlers.

        Returns
        -------
        object
            The handler's return value for a directly invoked command,
            otherwise None.

        Raises
        ------
        InvalidArgument
            A parameter or long command was started without a slot, or
            the key is not a valid byte.
        """
        key = normalize_key(key)
        sink = sink if sink is not None else sys.stdout

        # are we in edit-mode?
        if slot is not None and slot.session is not None:
            if key == KEY_RELEASE:
                return None
            return self._process_edit(slot, key, sink, context)

        command = self.registry.find_command(key)
        if command is not None:
            if command.requires_parameter:
                return self._start_edit(slot, command, key, sink, context)

            arg = CommandArgument(key=key, parameter=None, is_final=True, context=context)
            return command.handler(sink, arg)

        if key == self.long_prefix:
            sink.write("\nPlease enter long command:\n")

            if slot is None:
                self.logger.warning("a session slot is required for long commands")
                raise InvalidArgument("a session slot is required for long commands")

            slot.session = self._new_session(None, is_long=True)
            return None

        if key == KEY_RELEASE:
            return None

        self.help.print_help(sink)
        return None

    def process_long_line(self, text: Optional[str], sink=None, context: Any = None) -> Any:
        """Run a complete long-command line without going through the editor."""
        sink = sink if sink is not None else sys.stdout
        return self.parser.process(text, sink, context)

    def print_help(self, sink=None, arg: Optional[CommandArgument] = None) -> None:
        """Write the help listing. Usable as a command handler."""
        self.help.print_help(sink, arg)

    # ─── Editing ────────────────────────────────────────────────────

    def _start_edit(self, slot, command: FixedCommand, key: str, sink, context) -> Any:
        if slot is None:
            self.logger.warning(f"a session slot is required for command '{key}'")
            raise InvalidArgument(f"a session slot is required for command '{key}'")

        slot.session = self._new_session(command, is_long=False)

        # digits are kept as the first character typed, other triggers dropped
        first = key if key in string.digits else KEY_RELEASE
        return self._process_edit(slot, first, sink, context)

    def _process_edit(self, slot: SessionSlot, key: str, sink, context) -> None:
        session = slot.session
        try:
            session.step(key, sink, context, on_long_line=self.parser.process)
        finally:
            if session.finished:
                slot.session = None
        return None

    def _new_session(self, command: Optional[FixedCommand], is_long: bool) -> EditSession:
        editor = self.config.editor
        return EditSession(
            command,
            is_long=is_long,
            prompt_marker=editor.prompt_marker,
            preview_width=editor.preview_width,
            capacity=editor.buffer_capacity,
        )
