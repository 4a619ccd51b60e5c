"""
Keystroke Command System
========================

The interactive command layer of a console application. Single
keystrokes and typed "long" commands are mapped to registered handler
callbacks, and a small line editor collects a parameter when a command
needs one.

Architecture Overview
---------------------
The host delivers one key at a time. The dispatcher either feeds it to
the caller's active edit session, runs the fixed command bound to the
key, opens a long-command session, or prints help.

    ┌──────────────┐     ┌──────────────┐     ┌────────────────────┐
    │  Terminal     │────►│  Key         │────►│  Command handlers  │
    │  (raw keys)   │     │  Dispatcher  │     │  handler(sink, arg)│
    └──────────────┘     └──────┬───────┘     └────────────────────┘
                                │
                     ┌──────────┼───────────┐
                     ▼          ▼           ▼
               CommandTable  EditSession  LongLineParser
               (key → cmd)   (typing a    (".dial 1234" →
                             parameter)    LongCommandTable)

What the dispatcher does per key:

    'h'            fixed command, runs immediately
    'd' 1 2 ENTER  parameter command: handler gets "12" on ENTER
    '.' d i a l    long command: ".dial" runs on ENTER
    ESC            cancels whatever is being typed
    unknown key    prints the help listing

Usage
-----
    import sys
    from keystroke_commands import (
        CommandBlock, CommandFlags, CommandRegistry, FixedCommand,
        KeyDispatcher, LongCommand, SessionSlot,
    )

    def dial(sink, arg):
        sink.write(f"dialling {arg.parameter}\\n")

    registry = CommandRegistry()
    registry.register_commands(CommandBlock([
        FixedCommand('d', "Dial", dial, CommandFlags.PARAMETER),
    ]))
    registry.register_long_commands([
        LongCommand("dial", "Dial a number", dial, CommandFlags.PARAMETER),
    ])

    dispatcher = KeyDispatcher(registry)
    slot = SessionSlot()            # one per terminal
    for key in "d123\\n":
        dispatcher.process(slot, key, sys.stdout)

Module Structure
----------------
    keystroke_commands/
    ├── __init__.py        ← This file. Public names.
    ├── keys.py            ← Key codes (ESC, ENTER, DEL, release, '.').
    ├── errors.py          ← CommandError and its subclasses.
    ├── buffer.py          ← InputBuffer: append / truncate / snapshot.
    ├── registry.py        ← Commands, blocks, the two lookup tables.
    ├── editor.py          ← EditSession line editor, SessionSlot.
    ├── parser.py          ← Long-command line parsing and invocation.
    ├── help.py            ← Help listing.
    ├── dispatcher.py      ← KeyDispatcher, the top-level state machine.
    ├── config_manager.py  ← YAML configuration and CLI options.
    └── demo.py            ← Interactive raw-terminal console.

Dependencies
------------
PyYAML for configuration files. Everything else is standard library.
"""

from keystroke_commands.buffer import InputBuffer
from keystroke_commands.config_manager import CommandSystemConfig, ConfigurationManager
from keystroke_commands.dispatcher import KeyDispatcher
from keystroke_commands.editor import EditSession, SessionSlot
from keystroke_commands.errors import (
    AlreadyRegistered,
    CommandError,
    InvalidArgument,
    ParseFailure,
)
from keystroke_commands.help import HelpFormatter
from keystroke_commands.keys import (
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_RELEASE,
    LONG_PREFIX,
)
from keystroke_commands.parser import LongLineParser, split_long_line
from keystroke_commands.registry import (
    CommandArgument,
    CommandBlock,
    CommandFlags,
    CommandRegistry,
    CommandTable,
    FixedCommand,
    LongCommand,
    LongCommandTable,
    describe_key,
)

__version__ = "0.1.0"

__all__ = [
    'AlreadyRegistered', 'CommandArgument', 'CommandBlock', 'CommandError',
    'CommandFlags', 'CommandRegistry', 'CommandSystemConfig', 'CommandTable',
    'ConfigurationManager', 'EditSession', 'FixedCommand', 'HelpFormatter',
    'InputBuffer', 'InvalidArgument', 'KEY_BACKSPACE', 'KEY_DELETE',
    'KEY_ENTER', 'KEY_ESCAPE', 'KEY_RELEASE', 'KeyDispatcher', 'LONG_PREFIX',
    'LongCommand', 'LongCommandTable', 'LongLineParser', 'ParseFailure',
    'SessionSlot', 'describe_key', 'split_long_line',
]
