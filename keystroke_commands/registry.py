"""
Command Registry
================

The lookup tables behind the keystroke command layer.

Two kinds of command live here:

    Fixed commands   bound to one key ('h', ' ', '\\n' ...). Supplied in
                     blocks: a feature module registers all its keys at
                     once and can later unregister the whole block.

    Long commands    bound to a typed name (".dial 1234"). Unique under
                     case-insensitive comparison, kept sorted for the
                     help listing.

Key Precedence
--------------
Blocks shadow each other. The most recently registered block that
defines a key wins; unregistering it uncovers the older binding again:

    register(base)    'a' → base.answer
    register(call)    'a' → call.accept      (call shadows base)
    unregister(call)  'a' → base.answer

The key space is one byte, so CommandTable keeps a small precedence
stack per key instead of scanning every block on every keystroke.

Handlers
--------
A handler is any callable ``handler(sink, arg)``. ``sink`` is the
output stream (anything with ``write(text)``) and ``arg`` is a
CommandArgument. Whatever the handler raises propagates to the caller.

Thread Safety
-------------
None. Register and unregister at setup / teardown points, or guard the
registry with an external lock if commands come and go while keys are
being dispatched.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from keystroke_commands.errors import AlreadyRegistered, InvalidArgument
from keystroke_commands.keys import KEY_ENTER, KEY_ESCAPE, KEY_SPACE, normalize_key


Handler = Callable[[Any, "CommandArgument"], Any]


# ─── Domain Model ───────────────────────────────────────────────────

class CommandFlags(enum.Flag):
    """Behaviour switches for a command."""
    NONE = 0
    PARAMETER = enum.auto()     # collect a parameter before calling
    PROGRESSIVE = enum.auto()   # call on every keystroke while editing


@dataclass(frozen=True)
class CommandArgument:
    """What a handler receives when it is invoked.

    Attributes
    ----------
    key : str
        The key bound to the fixed command, or KEY_RELEASE for long
        commands.
    parameter : str or None
        Text collected by the editor, or the text after a long-command
        name. None when the command has no parameter.
    is_final : bool
        False for the intermediate calls a progressive command gets
        while the user is still typing.
    context : object
        Opaque caller data handed through from ``process()``.
    name : str or None
        The long-command name as typed. None for fixed commands.
    """
    key: str
    parameter: Optional[str] = None
    is_final: bool = True
    context: Any = None
    name: Optional[str] = None


@dataclass(frozen=True)
class FixedCommand:
    """A handler bound to a single key."""
    key: str
    description: str
    handler: Optional[Handler]
    flags: CommandFlags = CommandFlags.NONE

    def __post_init__(self):
        object.__setattr__(self, "key", normalize_key(self.key))

    @property
    def requires_parameter(self) -> bool:
        return bool(self.flags & CommandFlags.PARAMETER)

    @property
    def is_progressive(self) -> bool:
        return bool(self.flags & CommandFlags.PROGRESSIVE)


@dataclass(frozen=True)
class LongCommand:
    """A handler bound to a typed command name."""
    name: str
    description: str
    handler: Handler
    flags: CommandFlags = CommandFlags.NONE

    def __post_init__(self):
        if not self.name or " " in self.name:
            raise InvalidArgument(f"invalid long command name: {self.name!r}")

    @property
    def requires_parameter(self) -> bool:
        return bool(self.flags & CommandFlags.PARAMETER)


class CommandBlock:
    """An ordered group of fixed commands registered as one unit.

    Identity is the block object: two blocks holding equal commands are
    still different blocks.
    """

    def __init__(self, commands: Iterable[FixedCommand], name: str = ""):
        self.commands: Tuple[FixedCommand, ...] = tuple(commands)
        self.name = name

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[FixedCommand]:
        return iter(self.commands)

    def __repr__(self) -> str:
        label = self.name or hex(id(self))
        return f"CommandBlock({label}, {len(self.commands)} commands)"


def describe_key(command: FixedCommand) -> str:
    """Human-readable name for the key of ``command``."""
    if command.key == KEY_SPACE:
        return "SPACE"
    if command.key == KEY_ENTER:
        return "ENTER"
    if command.key == KEY_ESCAPE:
        return "ESC"

    if command.requires_parameter:
        return f"{command.key} .."
    return command.key


# ─── Fixed-key table ────────────────────────────────────────────────

class CommandTable:
    """Registered command blocks with per-key precedence."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._blocks: List[CommandBlock] = []
        # key → [(block, command), ...], most recent registration last
        self._by_key: Dict[str, List[Tuple[CommandBlock, FixedCommand]]] = {}

    def register(self, block: CommandBlock) -> None:
        """Register ``block`` as the most recent block.

        Raises
        ------
        InvalidArgument
            If the block is None or holds no commands.
        AlreadyRegistered
            If this very block is already registered.
        """
        if block is None or len(block) == 0:
            raise InvalidArgument("command block must hold at least one command")

        if block in self:
            raise AlreadyRegistered(f"{block!r} is already registered")

        entries = {}
        for command in block:
            # first live entry for a key wins inside a block
            if command.handler is not None and command.key not in entries:
                entries[command.key] = command

        self._blocks.append(block)
        for key, command in entries.items():
            self._by_key.setdefault(key, []).append((block, command))

        self.logger.debug(f"Registered {block!r}")

    def unregister(self, block: CommandBlock) -> None:
        """Remove ``block``. Unknown blocks are ignored."""
        if block not in self:
            return

        self._blocks = [b for b in self._blocks if b is not block]
        for key in list(self._by_key):
            stack = [entry for entry in self._by_key[key] if entry[0] is not block]
            if stack:
                self._by_key[key] = stack
            else:
                del self._by_key[key]

        self.logger.debug(f"Unregistered {block!r}")

    def find_by_key(self, key) -> Optional[FixedCommand]:
        """Live command for ``key`` from the most recent block defining it."""
        stack = self._by_key.get(normalize_key(key))
        if not stack:
            return None
        return stack[-1][1]

    def __contains__(self, block) -> bool:
        return any(b is block for b in self._blocks)

    @property
    def blocks(self) -> List[CommandBlock]:
        """Registered blocks, oldest first."""
        return list(self._blocks)

    @property
    def count(self) -> int:
        """Number of commands across all registered blocks."""
        return sum(len(block) for block in self._blocks)


# ─── Long-command table ─────────────────────────────────────────────

def _display_order(command: LongCommand) -> Tuple[str, str]:
    return (command.name.casefold(), command.name)


class LongCommandTable:
    """Name-keyed commands in ascending case-insensitive name order."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._commands: List[LongCommand] = []

    def register(self, entries: Iterable[LongCommand]) -> None:
        """Register each entry in turn.

        Entries registered before a collision stay registered.

        Raises
        ------
        AlreadyRegistered
            If an entry's name matches a registered name, ignoring case.
        """
        for command in entries:
            if self.find_by_name(command.name) is not None:
                self.logger.warning(f"long command '{command.name}' already registered")
                raise AlreadyRegistered(f"long command '{command.name}' already registered")

            self._commands.append(command)
            self._commands.sort(key=_display_order)

    def unregister(self, entries: Iterable[LongCommand]) -> None:
        """Remove each registered entry. Unknown entries are ignored."""
        for command in entries:
            if command in self._commands:
                self._commands.remove(command)

    def find_by_name(self, name: Optional[str]) -> Optional[LongCommand]:
        """Case-insensitive exact lookup."""
        if not name:
            return None
        wanted = name.casefold()
        for command in self._commands:
            if command.name.casefold() == wanted:
                return command
        return None

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[LongCommand]:
        return iter(list(self._commands))

    @property
    def longest_name(self) -> int:
        return max((len(command.name) for command in self._commands), default=0)


# ─── Registry ───────────────────────────────────────────────────────

class CommandRegistry:
    """Both command tables, created by the host and passed around.

    Usage
    -----
        registry = CommandRegistry()
        registry.register_commands(CommandBlock([
            FixedCommand('h', "Help", show_help),
            FixedCommand('d', "Dial", dial, CommandFlags.PARAMETER),
        ]))
        registry.register_long_commands([
            LongCommand("dial", "Dial a number", dial, CommandFlags.PARAMETER),
        ])
    """

    def __init__(self):
        self.commands = CommandTable()
        self.long_commands = LongCommandTable()

    def register_commands(self, block: CommandBlock) -> None:
        self.commands.register(block)

    def unregister_commands(self, block: CommandBlock) -> None:
        self.commands.unregister(block)

    def register_long_commands(self, entries: Iterable[LongCommand]) -> None:
        self.long_commands.register(entries)

    def unregister_long_commands(self, entries: Iterable[LongCommand]) -> None:
        self.long_commands.unregister(entries)

    def find_command(self, key) -> Optional[FixedCommand]:
        return self.commands.find_by_key(key)

    def find_long_command(self, name: Optional[str]) -> Optional[LongCommand]:
        return self.long_commands.find_by_name(name)
