"""
Help Listing
============

Renders every registered command:

    --- Help ---
     SPACE   Toggle call on hold
     d ..    Dial
     h       Help

    Long commands: (2)
     .dial     ..   Dial a number
     .hangup        Hang up the active call

Fixed commands are listed in key order and only when they carry a
description. Long commands follow the table's display order, with
".." marking the ones that take a parameter.
"""

from __future__ import annotations

from typing import Any, Optional

from keystroke_commands.errors import InvalidArgument
from keystroke_commands.keys import KEY_SPACE_SIZE, LONG_PREFIX
from keystroke_commands.registry import CommandRegistry, describe_key


class HelpFormatter:
    """Formats the command tables of a registry as text."""

    def __init__(self, registry: CommandRegistry, min_width: int = 5,
                 long_prefix: str = LONG_PREFIX,
                 first_key: int = 1, last_key: int = KEY_SPACE_SIZE - 1):
        self.registry = registry
        self.min_width = min_width
        self.long_prefix = long_prefix
        self.first_key = first_key
        self.last_key = last_key

    def render(self) -> str:
        lines = ["--- Help ---"]

        for value in range(self.first_key, self.last_key + 1):
            command = self.registry.find_command(value)
            if command is None or not command.description:
                continue
            lines.append(f" {describe_key(command):<{self.min_width}}   {command.description}")

        lines.append("")

        long_commands = self.registry.long_commands
        lines.append(f"Long commands: ({len(long_commands)})")

        width = max(self.min_width, long_commands.longest_name)
        for command in long_commands:
            marker = ".." if command.requires_parameter else "  "
            lines.append(f" {self.long_prefix}{command.name:<{width}}   {marker}   {command.description}")

        lines.append("")
        return "\n".join(lines) + "\n"

    def print_help(self, sink, arg: Optional[Any] = None) -> None:
        """Write the listing to ``sink``.

        Takes the handler signature so it can be bound to a help key
        directly.
        """
        if sink is None:
            raise InvalidArgument("no output sink for help")
        sink.write(self.render())
