#!/usr/bin/env python3

# Copyright (c) 2026 zenox contributors
# SPDX-License-Identifier: ISC

"""
rawterm -- pure-Python raw terminal input for zenox prompts

Not a curses replacement. Just what a single-line editor needs: switching the
controlling terminal in and out of raw mode, decoding keystrokes (including
escape sequences for arrow/Home/End/Delete keys) and a handful of ANSI/VT100
output sequences.

Zero external dependencies. Uses only Python stdlib: termios, select, os,
codecs, unicodedata. Unix only (Linux, macOS).
"""

import codecs
import os
import select
import unicodedata

try:
    import termios
except ImportError:  # Windows
    termios = None


class TerminalError(RuntimeError):
    """Raised when the terminal mode can't be acquired or restored."""


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


class Color:
    """Terminal color: named constant or 256-color index."""

    __slots__ = ("_kind", "_value")

    # kind: "default", "named", "index"
    def __init__(self, kind, value):
        self._kind = kind
        self._value = value

    DEFAULT = None  # assigned below

    BLACK = None
    RED = None
    GREEN = None
    YELLOW = None
    BLUE = None
    MAGENTA = None
    CYAN = None
    WHITE = None

    @staticmethod
    def index(n):
        """Create a color from xterm 256-color palette index."""
        return Color("index", n)

    def _sgr_fg(self):
        if self._kind == "default":
            return "39"
        if self._kind == "named":
            idx = self._value
            if idx < 8:
                return str(30 + idx)
            return str(90 + idx - 8)
        return f"38;5;{self._value}"

    def _sgr_bg(self):
        if self._kind == "default":
            return "49"
        if self._kind == "named":
            idx = self._value
            if idx < 8:
                return str(40 + idx)
            return str(100 + idx - 8)
        return f"48;5;{self._value}"

    def __eq__(self, other):
        if not isinstance(other, Color):
            return NotImplemented
        return self._kind == other._kind and self._value == other._value

    def __hash__(self):
        return hash((self._kind, self._value))

    def __repr__(self):
        if self._kind == "default":
            return "Color.DEFAULT"
        return f"Color({self._kind!r}, {self._value})"


Color.DEFAULT = Color("default", None)
Color.BLACK = Color("named", 0)
Color.RED = Color("named", 1)
Color.GREEN = Color("named", 2)
Color.YELLOW = Color("named", 3)
Color.BLUE = Color("named", 4)
Color.MAGENTA = Color("named", 5)
Color.CYAN = Color("named", 6)
Color.WHITE = Color("named", 7)

# Color names accepted in ZENOX_STYLE. "bright" variants use indices 8-15.
NAMED_COLORS = {
    "black": Color.BLACK,
    "red": Color.RED,
    "green": Color.GREEN,
    "yellow": Color.YELLOW,
    "blue": Color.BLUE,
    "magenta": Color.MAGENTA,
    "cyan": Color.CYAN,
    "white": Color.WHITE,
    "purple": Color.MAGENTA,
}
for _i, _name in enumerate(
    ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")
):
    NAMED_COLORS["bright" + _name] = Color("named", 8 + _i)
NAMED_COLORS["brightpurple"] = NAMED_COLORS["brightmagenta"]
del _i, _name


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------


class Style:
    """Immutable style combining foreground, background, and attributes."""

    __slots__ = ("fg", "bg", "bold", "standout", "underline")

    def __init__(self, fg=None, bg=None, bold=False, standout=False, underline=False):
        self.fg = fg if fg is not None else Color.DEFAULT
        self.bg = bg if bg is not None else Color.DEFAULT
        self.bold = bold
        self.standout = standout
        self.underline = underline

    def sgr(self):
        """Return the SGR escape sequence string for this style."""
        parts = ["0", self.fg._sgr_fg(), self.bg._sgr_bg()]
        if self.bold:
            parts.append("1")
        if self.underline:
            parts.append("4")
        if self.standout:
            parts.append("7")
        return "\x1b[{}m".format(";".join(parts))

    def paint(self, text):
        """
        Return 'text' wrapped in this style, followed by an SGR reset. Text
        in the default style is returned as is.
        """
        if self == STYLE_DEFAULT:
            return text
        return self.sgr() + text + RESET

    def __eq__(self, other):
        if not isinstance(other, Style):
            return NotImplemented
        return (
            self.fg == other.fg
            and self.bg == other.bg
            and self.bold == other.bold
            and self.standout == other.standout
            and self.underline == other.underline
        )

    def __hash__(self):
        return hash((self.fg, self.bg, self.bold, self.standout, self.underline))

    def __repr__(self):
        parts = []
        if self.fg != Color.DEFAULT:
            parts.append(f"fg={self.fg}")
        if self.bg != Color.DEFAULT:
            parts.append(f"bg={self.bg}")
        if self.bold:
            parts.append("bold")
        if self.standout:
            parts.append("standout")
        if self.underline:
            parts.append("underline")
        return "Style({})".format(", ".join(parts))


STYLE_DEFAULT = Style()


# ---------------------------------------------------------------------------
# Output sequences
# ---------------------------------------------------------------------------

RESET = "\x1b[0m"
CLEAR_LINE = "\r\x1b[2K"


def cursor_left(n):
    """Move the cursor 'n' cells left. Empty string for n <= 0."""
    return f"\x1b[{n}D" if n > 0 else ""


def cursor_right(n):
    """Move the cursor 'n' cells right. Empty string for n <= 0."""
    return f"\x1b[{n}C" if n > 0 else ""


# ---------------------------------------------------------------------------
# Character width
# ---------------------------------------------------------------------------


def char_width(ch):
    """Return the display width of a character in terminal cells.

    - ASCII printable (0x20-0x7E): 1 cell (fast path)
    - East Asian Wide/Fullwidth: 2 cells
    - Combining marks, control chars: 0 cells
    - Everything else: 1 cell
    """
    o = ord(ch)

    if 0x20 <= o <= 0x7E:
        return 1

    if o < 0x20 or o == 0x7F:
        return 0

    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2

    if unicodedata.category(ch).startswith("M"):
        return 0

    return 1


def str_width(s):
    """Return the display width of a string in terminal cells."""
    return sum(char_width(ch) for ch in s)


# ---------------------------------------------------------------------------
# Input constants
# ---------------------------------------------------------------------------


class Key:
    """Named key events. Printable characters are returned as plain str."""

    ENTER = "key_enter"
    BACKSPACE = "key_backspace"
    DELETE = "key_delete"
    LEFT = "key_left"
    RIGHT = "key_right"
    HOME = "key_home"
    END = "key_end"
    KILL_TO_END = "key_kill_to_end"
    KILL_LINE = "key_kill_line"
    KILL_WORD = "key_kill_word"
    ESCAPE = "key_escape"
    INTERRUPT = "key_interrupt"


# Single control bytes with an editing meaning. Everything else below 0x20
# is dropped.
_CONTROL_KEYS = {
    0x0D: Key.ENTER,  # \r
    0x0A: Key.ENTER,  # \n
    0x7F: Key.BACKSPACE,  # DEL
    0x08: Key.BACKSPACE,  # \b
    0x01: Key.HOME,  # CTRL-A
    0x05: Key.END,  # CTRL-E
    0x0B: Key.KILL_TO_END,  # CTRL-K
    0x15: Key.KILL_LINE,  # CTRL-U
    0x04: Key.DELETE,  # CTRL-D
    0x17: Key.KILL_WORD,  # CTRL-W
    0x03: Key.INTERRUPT,  # CTRL-C
}

# Keys that are recognized (so the whole sequence is consumed) but have no
# meaning on a single line
_IGNORED = "ignored"

# Map escape sequences to Key constants. Multiple entries per key to
# handle terminal variants (xterm, rxvt, tmux, application mode).
_ESCAPE_SEQUENCES = {
    "\x1b[D": Key.LEFT,
    "\x1bOD": Key.LEFT,  # application mode
    "\x1b[C": Key.RIGHT,
    "\x1bOC": Key.RIGHT,
    # Home
    "\x1b[H": Key.HOME,  # xterm
    "\x1bOH": Key.HOME,  # application mode
    "\x1b[1~": Key.HOME,  # tmux/linux
    "\x1b[7~": Key.HOME,  # rxvt
    # End
    "\x1b[F": Key.END,  # xterm
    "\x1bOF": Key.END,  # application mode
    "\x1b[4~": Key.END,  # tmux/linux
    "\x1b[8~": Key.END,  # rxvt
    # Delete
    "\x1b[3~": Key.DELETE,
    # Up/Down/Page Up/Page Down
    "\x1b[A": _IGNORED,
    "\x1bOA": _IGNORED,
    "\x1b[B": _IGNORED,
    "\x1bOB": _IGNORED,
    "\x1b[5~": _IGNORED,
    "\x1b[6~": _IGNORED,
}


def _build_trie(sequences):
    """Build a trie (nested dict) from escape sequence table."""
    root = {}
    for seq, key in sequences.items():
        node = root
        for ch in seq[:-1]:
            if ch not in node:
                node[ch] = {}
            node = node[ch]
        node[seq[-1]] = key
    return root


_ESCAPE_TRIE = _build_trie(_ESCAPE_SEQUENCES)

# Default time to wait for the rest of an escape sequence after ESC, in
# seconds. Terminals write a sequence in one burst, so a human pressing ESC
# and then another key is far slower than this.
ESC_TIMEOUT = 0.025


# ---------------------------------------------------------------------------
# Terminal mode
# ---------------------------------------------------------------------------

# The TerminalMode currently holding the terminal, if any
_live_mode = None


def live_mode():
    """Return the TerminalMode currently holding the terminal, or None."""
    return _live_mode


class TerminalMode:
    """
    Raw (non-canonical, no-echo) mode on a terminal file descriptor.

    acquire() saves the current attributes and switches to raw mode;
    release() puts the saved attributes back. Use it as a context manager to
    get scoped acquisition:

      with TerminalMode(fd):
          ...

    Only one TerminalMode can hold the terminal at a time. Re-entrant
    acquisition raises TerminalError.
    """

    def __init__(self, fd=None):
        self.fd = 0 if fd is None else fd
        self._saved = None

    @property
    def active(self):
        """True between a successful acquire() and the matching release()."""
        return self._saved is not None

    def acquire(self):
        global _live_mode

        if termios is None:
            raise TerminalError("raw terminal mode is not supported on this platform")
        if _live_mode is not None:
            raise TerminalError("the terminal is already in raw mode")
        if not os.isatty(self.fd):
            raise TerminalError("input is not a terminal")

        try:
            saved = termios.tcgetattr(self.fd)
        except (termios.error, OSError) as e:
            raise TerminalError(f"failed to set raw mode: {e}") from e

        # Recorded before switching, so that a signal arriving during the
        # switch still finds something to restore
        self._saved = saved
        _live_mode = self

        try:
            _set_raw(self.fd, saved)
        except (termios.error, OSError) as e:
            self._saved = None
            _live_mode = None
            raise TerminalError(f"failed to set raw mode: {e}") from e

    def release(self):
        """
        Restores the attributes saved by acquire(). Returns True if this call
        restored them, and False if there was nothing to restore (never
        acquired, or already released).

        The saved attributes are dropped before restoring, so a failing
        restore (TerminalError) is never retried.
        """
        global _live_mode

        saved = self._saved
        if saved is None:
            return False

        self._saved = None
        if _live_mode is self:
            _live_mode = None

        try:
            termios.tcsetattr(self.fd, termios.TCSANOW, saved)
        except (termios.error, OSError) as e:
            raise TerminalError(f"failed to restore terminal mode: {e}") from e

        return True

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, *_):
        self.release()


def _set_raw(fd, attrs):
    # Applies raw terminal settings derived from 'attrs' (which is left
    # untouched): no echo, no canonical mode, no CR/LF translation. ISIG is
    # kept so that Ctrl-C still arrives as SIGINT.
    new = list(attrs)
    new[6] = list(attrs[6])
    # LFLAG: clear ICANON, ECHO, IEXTEN
    new[3] &= ~(termios.ICANON | termios.ECHO | termios.IEXTEN)
    # IFLAG: clear IXON, IXOFF, ICRNL, INLCR, IGNCR
    new[1] &= ~(
        termios.IXON | termios.IXOFF | termios.ICRNL | termios.INLCR | termios.IGNCR
    )
    new[6][termios.VMIN] = 1
    new[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSANOW, new)


# ---------------------------------------------------------------------------
# Key decoding
# ---------------------------------------------------------------------------


class KeyDecoder:
    """
    Turns the bytes of a file descriptor into key events, one per
    read_key() call.

    fd:
      File descriptor to read from (standard input by default). Does not
      need to be a terminal, which is handy for pipes.

    esc_timeout:
      Seconds to wait for the rest of an escape sequence before deciding that
      ESC was pressed on its own. Defaults to ESC_TIMEOUT.
    """

    def __init__(self, fd=None, esc_timeout=None):
        self.fd = 0 if fd is None else fd
        self.esc_timeout = ESC_TIMEOUT if esc_timeout is None else esc_timeout

        self._decoder = codecs.getincrementaldecoder("utf-8")("replace")
        # Byte read past the end of an escape sequence dead end, to be
        # decoded by the next read_key()
        self._pending = None

    def read_key(self):
        """
        Block and return the next key event: a Key constant or a one-character
        str for printable characters.

        Raises EOFError at end of input.
        """
        while True:
            if self._pending is not None:
                b = self._pending
                self._pending = None
            else:
                b = self._read_byte()
                if b is None:
                    raise EOFError

            if b == 0x1B:
                key = self._read_escape()
            elif b >= 0x80:
                key = self._read_utf8(b)
            elif b in _CONTROL_KEYS:
                key = _CONTROL_KEYS[b]
            elif b < 0x20:
                # Unknown control character
                key = None
            else:
                key = chr(b)

            if key is not None:
                return key

    def _read_byte(self, timeout=None):
        # Returns the next byte as an int, or None at end of input or when
        # 'timeout' (in seconds) elapses with nothing to read

        if timeout is not None:
            poller = select.poll()
            poller.register(self.fd, select.POLLIN)
            if not poller.poll(max(int(timeout * 1000), 0)):
                return None

        data = os.read(self.fd, 1)
        if not data:
            return None
        return data[0]

    def _read_escape(self):
        # Called after ESC. Walks the escape sequence trie while more bytes
        # arrive within the timeout. Returns a Key constant, or None if the
        # sequence should be dropped.

        node = _ESCAPE_TRIE["\x1b"]
        seq = "\x1b"

        while True:
            b = self._read_byte(self.esc_timeout)
            if b is None:
                # Timeout or end of input. A lone ESC, or a sequence that
                # never finished.
                return Key.ESCAPE

            ch = chr(b)
            if ch not in node:
                if seq == "\x1b":
                    # ESC followed by an unrelated key. Report the ESC and
                    # decode the other key next time.
                    self._pending = b
                    return Key.ESCAPE

                if seq.startswith("\x1b["):
                    # Unknown CSI sequence, e.g. ESC [ 1 ; 5 C for
                    # Ctrl-Right. Swallow the rest of it.
                    self._skip_csi(b)
                else:
                    # ESC O followed by an unrelated key. Drop the ESC O,
                    # keep the key.
                    self._pending = b
                return None

            val = node[ch]
            if isinstance(val, dict):
                node = val
                seq += ch
                continue

            if val is _IGNORED:
                return None
            return val

    def _skip_csi(self, b):
        # Discards CSI parameter/intermediate bytes up to and including the
        # final byte (0x40-0x7E)
        while b is not None and not 0x40 <= b <= 0x7E:
            b = self._read_byte(self.esc_timeout)

    def _read_utf8(self, b):
        # Feeds bytes of a multi-byte UTF-8 character to the incremental
        # decoder until a character comes out

        while True:
            chars = self._decoder.decode(bytes((b,)))
            if len(chars) > 1:
                # Invalid continuation byte. It starts the next key.
                self._decoder.reset()
                self._pending = b
                return chars[0]
            if chars:
                return chars

            b = self._read_byte(self.esc_timeout)
            if b is None:
                # Truncated character
                self._decoder.reset()
                return "\ufffd"
