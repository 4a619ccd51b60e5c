"""
Tests for the input buffer and the line editor.

Run with:  python -m pytest keystroke_commands/test_editor.py -v
"""

import io

import pytest

from keystroke_commands.buffer import InputBuffer
from keystroke_commands.editor import EditSession, SessionSlot
from keystroke_commands.errors import InvalidArgument
from keystroke_commands.keys import (
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_RELEASE,
)
from keystroke_commands.registry import CommandFlags, FixedCommand


class Recorder:
    """Handler that remembers every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, sink, arg):
        self.calls.append(arg)


def feed(session, keys, sink, **kwargs):
    ended = False
    for key in keys:
        ended = session.step(key, sink, **kwargs)
    return ended


# ============================================================
# InputBuffer
# ============================================================

class TestInputBuffer:
    """Tests for append / truncate / snapshot."""

    def test_append_and_snapshot(self):
        buf = InputBuffer()
        for key in "abc":
            buf.append(key)
        assert buf.snapshot() == "abc"
        assert len(buf) == 3
        assert buf.pos == buf.end == 3

    def test_truncate_is_logical(self):
        buf = InputBuffer()
        for key in "abc":
            buf.append(key)
        assert buf.truncate()
        assert buf.snapshot() == "ab"
        assert buf.pos == buf.end == 2

    def test_append_after_truncate_overwrites_tail(self):
        buf = InputBuffer()
        for key in "abc":
            buf.append(key)
        buf.truncate()
        buf.append("x")
        assert buf.snapshot() == "abx"

    def test_truncate_empty(self):
        buf = InputBuffer()
        assert not buf.truncate()
        assert buf.snapshot() == ""
        assert not buf

    def test_grows_past_capacity(self):
        buf = InputBuffer(capacity=2)
        for key in "hello world":
            buf.append(key)
        assert buf.snapshot() == "hello world"
        assert buf.capacity >= 11

    def test_zero_capacity_grows(self):
        buf = InputBuffer(capacity=0)
        buf.append("a")
        assert buf.snapshot() == "a"

    def test_latin1_key(self):
        buf = InputBuffer()
        buf.append("\xe9")
        assert buf.snapshot() == "\xe9"

    def test_released_buffer_rejects_use(self):
        buf = InputBuffer()
        buf.append("a")
        buf.release()
        assert buf.released
        assert buf.capacity == 0
        with pytest.raises(InvalidArgument):
            buf.append("b")
        with pytest.raises(InvalidArgument):
            buf.snapshot()

    def test_negative_capacity_rejected(self):
        with pytest.raises(InvalidArgument):
            InputBuffer(capacity=-1)

    def test_key_outside_byte_range_rejected(self):
        buf = InputBuffer()
        with pytest.raises(InvalidArgument):
            buf.append("€")
        assert buf.snapshot() == ""

    def test_multi_character_key_rejected(self):
        buf = InputBuffer()
        with pytest.raises(InvalidArgument):
            buf.append("ab")
        assert buf.snapshot() == ""

    def test_int_key(self):
        buf = InputBuffer()
        buf.append(65)
        assert buf.snapshot() == "A"


# ============================================================
# EditSession
# ============================================================

@pytest.fixture
def sink():
    return io.StringIO()


@pytest.fixture
def recorder():
    return Recorder()


class TestFixedModeSession:
    """Tests for collecting a fixed command's parameter."""

    def test_enter_invokes_handler_once(self, sink, recorder):
        command = FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER)
        session = EditSession(command)
        assert not feed(session, "123", sink, context="ctx")
        assert recorder.calls == []

        assert session.step(KEY_ENTER, sink, context="ctx")
        assert len(recorder.calls) == 1
        arg = recorder.calls[0]
        assert arg.key == "d"
        assert arg.parameter == "123"
        assert arg.is_final
        assert arg.context == "ctx"
        assert arg.name is None

    def test_enter_on_empty_input(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        assert session.step(KEY_ENTER, sink)
        assert recorder.calls[0].parameter == ""

    def test_escape_cancels_without_handler(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        feed(session, "12", sink)
        assert session.step(KEY_ESCAPE, sink)
        assert recorder.calls == []
        assert "\nCancel\n" in sink.getvalue()
        assert session.finished
        assert session.buffer.released

    def test_backspace_and_delete(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        feed(session, ["1", "2", KEY_DELETE, "3", "4", KEY_BACKSPACE, KEY_ENTER], sink)
        assert recorder.calls[0].parameter == "13"

    def test_backspace_on_empty_input(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        feed(session, [KEY_BACKSPACE, KEY_BACKSPACE, "7", KEY_ENTER], sink)
        assert recorder.calls[0].parameter == "7"

    def test_release_appends_nothing(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        feed(session, [KEY_RELEASE, "5", KEY_RELEASE, KEY_ENTER], sink)
        assert recorder.calls[0].parameter == "5"

    def test_echo_uses_prompt_and_width(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        session.step("1", sink)
        assert sink.getvalue() == "\r> " + " " * 31 + "1"

    def test_echo_shows_tail_of_long_input(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER),
                              preview_width=4)
        feed(session, "abcdef", sink)
        assert sink.getvalue().endswith("\r> cdef")

    def test_enter_terminates_line_without_echo(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        session.step(KEY_ENTER, sink)
        assert sink.getvalue() == "\n"

    def test_non_progressive_has_no_intermediate_calls(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        feed(session, "123", sink)
        assert recorder.calls == []

    def test_progressive_invoked_on_every_key(self, sink, recorder):
        command = FixedCommand("s", "Search", recorder,
                               CommandFlags.PARAMETER | CommandFlags.PROGRESSIVE)
        session = EditSession(command)
        feed(session, ["a", "b", KEY_BACKSPACE, KEY_ENTER], sink)
        seen = [(arg.parameter, arg.is_final) for arg in recorder.calls]
        assert seen == [("a", False), ("ab", False), ("a", False), ("a", True)]

    def test_progressive_not_invoked_on_escape(self, sink, recorder):
        command = FixedCommand("s", "Search", recorder,
                               CommandFlags.PARAMETER | CommandFlags.PROGRESSIVE)
        session = EditSession(command)
        session.step("a", sink)
        session.step(KEY_ESCAPE, sink)
        assert len(recorder.calls) == 1

    def test_handler_error_still_releases_buffer(self, sink):
        def broken(sink, arg):
            raise RuntimeError("handler failed")

        session = EditSession(FixedCommand("d", "Dial", broken, CommandFlags.PARAMETER))
        session.step("1", sink)
        with pytest.raises(RuntimeError, match="handler failed"):
            session.step(KEY_ENTER, sink)
        assert session.finished
        assert session.buffer.released

    def test_key_outside_byte_range_rejected(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        with pytest.raises(InvalidArgument):
            session.step("€", sink)
        assert session.text == ""
        assert recorder.calls == []

    def test_finished_session_ignores_keys(self, sink, recorder):
        session = EditSession(FixedCommand("d", "Dial", recorder, CommandFlags.PARAMETER))
        session.step(KEY_ENTER, sink)
        assert session.step("1", sink)
        assert len(recorder.calls) == 1


class TestLongModeSession:
    """Tests for collecting a long-command line."""

    def test_enter_hands_line_to_parser(self, sink):
        lines = []
        session = EditSession(None, is_long=True)
        ended = feed(session, "dial 42\n", sink, context="ctx",
                     on_long_line=lambda text, s, c: lines.append((text, c)))
        assert ended
        assert lines == [("dial 42", "ctx")]

    def test_echo_is_raw(self, sink):
        session = EditSession(None, is_long=True)
        feed(session, "ab", sink)
        assert sink.getvalue() == "\ra\rab"

    def test_escape_skips_parser(self, sink):
        lines = []
        session = EditSession(None, is_long=True)
        feed(session, ["d", KEY_ESCAPE], sink,
             on_long_line=lambda text, s, c: lines.append(text))
        assert lines == []


class TestSessionSlot:
    """Tests for the caller-owned session storage."""

    def test_starts_empty(self):
        slot = SessionSlot()
        assert not slot.active
        assert not slot.is_long

    def test_clear_releases_session(self):
        session = EditSession(None, is_long=True)
        slot = SessionSlot(session)
        assert slot.active and slot.is_long
        slot.clear()
        assert slot.session is None
        assert session.buffer.released
