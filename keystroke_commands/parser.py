"""
Long-Command Parser
===================

Turns a completed long-command line into a handler call.

    "dial 1234"       → name "dial",  parameter "1234"
    "hangup"          → name "hangup", parameter None
    "  mute   on"     → name "mute",  parameter "on"
    "say hello  "     → name "say",   parameter "hello  "

The name is the first run of non-space characters; spaces after it are
skipped and whatever remains is the parameter, untouched. A line with
no name at all (empty, or nothing but spaces) is a ParseFailure.

An unknown name is not an error: the user sees
"command not found (<name>)" and the call returns normally.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Tuple

from keystroke_commands.errors import InvalidArgument, ParseFailure
from keystroke_commands.keys import KEY_RELEASE
from keystroke_commands.registry import CommandArgument, CommandRegistry


_LINE_PATTERN = re.compile(r"([^ ]+) *(.*)", re.DOTALL)


def split_long_line(text: str) -> Tuple[str, Optional[str]]:
    """Split ``text`` into command name and optional parameter.

    Raises
    ------
    ParseFailure
        If ``text`` holds no command name.
    """
    match = _LINE_PATTERN.search(text)
    if match is None:
        raise ParseFailure(f"no command name in {text!r}")

    name, parameter = match.group(1), match.group(2)
    return name, parameter or None


class LongLineParser:
    """Looks up and invokes long commands from complete lines."""

    def __init__(self, registry: CommandRegistry):
        self.registry = registry
        self.logger = logging.getLogger(__name__)

    def process(self, text: Optional[str], sink, context: Any = None) -> Any:
        """Run the long command named in ``text``.

        Returns whatever the handler returns, or None if the command was
        not found.

        Raises
        ------
        InvalidArgument
            If ``text`` is None or empty.
        ParseFailure
            If no command name can be extracted.
        """
        if not text:
            raise InvalidArgument("long command line is empty")

        try:
            name, parameter = split_long_line(text)
        except ParseFailure:
            self.logger.warning(f"could not parse long command line {text!r}")
            raise

        command = self.registry.find_long_command(name)
        if command is None:
            sink.write(f"command not found ({name})\n")
            return None

        self.logger.debug(f"long command '{command.name}' parameter={parameter!r}")

        arg = CommandArgument(
            key=KEY_RELEASE,
            parameter=parameter,
            is_final=True,
            context=context,
            name=name,
        )
        return command.handler(sink, arg)
