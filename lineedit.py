# Copyright (c) 2026 zenox contributors
# SPDX-License-Identifier: ISC

"""
Single-line editor for zenox prompts.

edit_line() shows a prompt, puts the terminal in raw mode, and lets the user
edit a line with these keys:

  Left/Right          : Move the cursor
  Home/Ctrl-A         : Beginning of line
  End/Ctrl-E          : End of line
  Backspace           : Delete the character left of the cursor
  Delete/Ctrl-D       : Delete the character under the cursor
  Ctrl-K              : Delete to the end of the line
  Ctrl-U              : Delete to the beginning of the line
  Ctrl-W              : Delete the word left of the cursor
  Enter               : Submit
  Esc                 : Cancel

What ESC cancels depends on the prompt. With exit_on_escape=True the whole
program is torn down through the AbortCoordinator. Otherwise, only the
prompt is cancelled and the caller gets an empty value with cancelled=True.

If standard input isn't a terminal, a plain line is read instead.
"""

import collections
import re
import sys

from rawterm import (
    CLEAR_LINE,
    Key,
    KeyDecoder,
    TerminalError,
    TerminalMode,
    cursor_left,
    str_width,
)
from teardown import (
    END_OF_INPUT,
    ESCAPE_PRESSED,
    INTERRUPTED,
    AbortCoordinator,
    warn,
)

# value:
#   The submitted string (the default if the user submitted an empty line),
#   or "" if cancelled
#
# cancelled:
#   True if the prompt was cancelled with ESC (or input ran out) and the
#   process was not torn down
EditResult = collections.namedtuple("EditResult", "value cancelled")


class LineBuffer:
    """
    The text being edited and the cursor position in it.

    The cursor is an insertion index, always in the range 0..len(text).
    Operations that would move it out of range, or delete past either end,
    do nothing.
    """

    def __init__(self, text=""):
        self._chars = list(text)
        self._cursor = len(self._chars)

    @property
    def text(self):
        return "".join(self._chars)

    @property
    def cursor(self):
        return self._cursor

    def __len__(self):
        return len(self._chars)

    def insert(self, s):
        """Inserts 's' (one or more characters) at the cursor."""
        self._chars[self._cursor : self._cursor] = s
        self._cursor += len(s)

    def backspace(self):
        if self._cursor > 0:
            del self._chars[self._cursor - 1]
            self._cursor -= 1

    def delete(self):
        if self._cursor < len(self._chars):
            del self._chars[self._cursor]

    def move_left(self):
        if self._cursor > 0:
            self._cursor -= 1

    def move_right(self):
        if self._cursor < len(self._chars):
            self._cursor += 1

    def home(self):
        self._cursor = 0

    def end(self):
        self._cursor = len(self._chars)

    def kill_to_end(self):
        del self._chars[self._cursor :]

    def kill_line(self):
        # Everything before the cursor
        del self._chars[: self._cursor]
        self._cursor = 0

    def kill_word(self):
        # The \W removes characters like ',' one at a time
        before = self.text[: self._cursor]
        start = re.search(r"(?:\w*|\W)\s*$", before).start()
        del self._chars[start : self._cursor]
        self._cursor = start

    def clear(self):
        self._chars = []
        self._cursor = 0

    def apply(self, key):
        """
        Applies a key event from rawterm.KeyDecoder. Returns True if the key
        is an editing key (the line may need a redraw), and False for keys
        the buffer doesn't handle (ENTER, ESCAPE, INTERRUPT).
        """
        op = _KEY_OPS.get(key)
        if op is not None:
            op(self)
            return True

        if len(key) == 1:
            self.insert(key)
            return True

        return False

    def submit(self, default):
        """
        Returns the text, or 'default' if the text is empty. The one place
        where default values are filled in.
        """
        return self.text if self._chars else default


_KEY_OPS = {
    Key.BACKSPACE: LineBuffer.backspace,
    Key.DELETE: LineBuffer.delete,
    Key.LEFT: LineBuffer.move_left,
    Key.RIGHT: LineBuffer.move_right,
    Key.HOME: LineBuffer.home,
    Key.END: LineBuffer.end,
    Key.KILL_TO_END: LineBuffer.kill_to_end,
    Key.KILL_LINE: LineBuffer.kill_line,
    Key.KILL_WORD: LineBuffer.kill_word,
}


def render_line(prompt, buf):
    """
    Returns the output that redraws the current line: clear it, print the
    prompt and the text, then step back from the end of the text to the
    cursor.
    """
    text = buf.text
    return CLEAR_LINE + prompt + text + cursor_left(str_width(text[buf.cursor :]))


# EditSession._loop() outcomes
_SUBMITTED = "submitted"
_ESCAPED = "escaped"
_END_OF_INPUT = "end of input"
_INTERRUPTED = "interrupted"


class EditSession:
    """
    One prompt: a LineBuffer plus everything needed to edit it.

    prompt:
      Text shown before the input. May contain SGR color sequences.

    default:
      Value returned when an empty line is submitted.

    exit_on_escape:
      If True, ESC tears down the whole process through 'coordinator'. If
      False, ESC only cancels this prompt.

    coordinator:
      AbortCoordinator that handles teardown. A private one (with no pending
      project) is created if not given. If its signal handlers aren't
      installed, they are installed for the duration of the prompt, so
      Ctrl-C and SIGTERM still restore the terminal.

    terminal:
      rawterm.TerminalMode for the input terminal. Defaults to standard
      input's.

    decoder:
      rawterm.KeyDecoder to read keys from. Defaults to one reading standard
      input.

    output:
      Stream the prompt and line are drawn on. sys.stdout if None.
    """

    def __init__(
        self,
        prompt,
        default="",
        exit_on_escape=True,
        coordinator=None,
        terminal=None,
        decoder=None,
        output=None,
    ):
        self.prompt = prompt
        self.default = default
        self.exit_on_escape = exit_on_escape
        self.coordinator = coordinator if coordinator is not None else AbortCoordinator()
        self.terminal = terminal if terminal is not None else TerminalMode()
        self.decoder = decoder if decoder is not None else KeyDecoder()
        self.buffer = LineBuffer()

        self._output = output

    def run(self):
        """
        Edits a line and returns an EditResult.

        Raises TerminalError without touching the terminal if raw mode can't
        be acquired (e.g. input isn't a terminal). Doesn't return if the
        prompt is cancelled in a way that ends the process.
        """
        terminal = self.terminal
        coordinator = self.coordinator

        own_handlers = self._install_handlers()
        try:
            # Attached before acquiring, so that a signal at any point after
            # the switch to raw mode restores it
            coordinator.attach_terminal(terminal)
            terminal.acquire()
            outcome = self._loop()
        finally:
            coordinator.detach_terminal(terminal)
            try:
                terminal.release()
            except TerminalError as e:
                warn(e)
            if own_handlers:
                coordinator.uninstall()

        return self._finish(outcome)

    def read_plain(self, stream=None):
        """
        Fallback for when the terminal can't be put in raw mode. Reads one
        line from 'stream' (sys.stdin by default) without any editing, and
        returns an EditResult like run().
        """
        if stream is None:
            stream = sys.stdin

        self._write(self.prompt)
        own_handlers = self._install_handlers()
        try:
            line = stream.readline()
        finally:
            if own_handlers:
                self.coordinator.uninstall()

        if not line:
            self._write("\n")
            return self._finish(_END_OF_INPUT)

        self.buffer = LineBuffer(line.rstrip("\r\n"))
        return self._finish(_SUBMITTED)

    def _install_handlers(self):
        # Installs the coordinator's signal handlers unless the caller already
        # did. Returns True if they were installed here.
        if self.coordinator.installed:
            return False
        self.coordinator.install()
        return True

    def _loop(self):
        buf = self.buffer
        self._write(render_line(self.prompt, buf))

        while True:
            try:
                key = self.decoder.read_key()
            except EOFError:
                self._write("\n")
                return _END_OF_INPUT

            if key == Key.ENTER:
                self._write("\n")
                return _SUBMITTED

            if key == Key.ESCAPE:
                # Drop the partial input from the screen too
                buf.clear()
                self._write(render_line(self.prompt, buf) + "\n")
                return _ESCAPED

            if key == Key.INTERRUPT:
                self._write("\n")
                return _INTERRUPTED

            if buf.apply(key):
                self._write(render_line(self.prompt, buf))

    def _finish(self, outcome):
        # Turns a loop outcome into an EditResult, or into a teardown. The
        # terminal has been released at this point.

        if outcome == _SUBMITTED:
            return EditResult(self.buffer.submit(self.default), False)

        if outcome == _INTERRUPTED:
            self.coordinator.abort(INTERRUPTED)
        elif self.exit_on_escape:
            self.coordinator.abort(
                ESCAPE_PRESSED if outcome == _ESCAPED else END_OF_INPUT
            )

        # Only reached for local cancellation, or if a teardown is already
        # running
        self.buffer.clear()
        return EditResult("", True)

    def _write(self, s):
        # Best-effort. A failed redraw isn't worth dying over.
        output = self._output if self._output is not None else sys.stdout
        try:
            output.write(s)
            output.flush()
        except (OSError, ValueError):
            pass


def edit_line(
    prompt,
    default="",
    exit_on_escape=True,
    coordinator=None,
    esc_timeout=None,
    output=None,
):
    """
    Prompts for a line on standard input. Returns a (value, cancelled)
    EditResult; see EditSession for the parameters.

    esc_timeout:
      Seconds to wait for the rest of an escape sequence after ESC. See
      rawterm.KeyDecoder.

    Falls back to a plain line read if standard input is not a terminal.
    """
    try:
        fd = sys.stdin.fileno()
    except (AttributeError, OSError, ValueError):
        # Replaced or closed stdin
        fd = None

    session = EditSession(
        prompt,
        default,
        exit_on_escape,
        coordinator,
        terminal=TerminalMode(fd),
        decoder=KeyDecoder(fd, esc_timeout),
        output=output,
    )

    if fd is None:
        return session.read_plain()

    try:
        return session.run()
    except TerminalError:
        return session.read_plain()
