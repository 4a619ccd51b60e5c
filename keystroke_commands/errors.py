"""
Command Layer Errors
====================

Every failure the command layer reports derives from CommandError, so
a host loop can catch one type around each keystroke and keep going.

    CommandError
    ├── InvalidArgument    missing session slot, empty block, bad key,
    │                      empty long-command line, no output sink
    ├── AlreadyRegistered  block registered twice, or a long-command
    │                      name that collides (case-insensitive)
    └── ParseFailure       a long-command line with no command name

Allocation failure is Python's own MemoryError and is not wrapped.

"Command not found" is deliberately absent: an unknown long command is
reported to the user through the output sink and is not an error.
"""


class CommandError(Exception):
    """Base class for command layer errors."""


class InvalidArgument(CommandError, ValueError):
    """A required argument was missing or malformed."""


class AlreadyRegistered(CommandError):
    """A command block or long-command name is already registered."""


class ParseFailure(CommandError, ValueError):
    """A long-command line could not be split into name and parameter."""
