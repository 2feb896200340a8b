#!/usr/bin/env python3
"""Smoke-test zenox outside pytest.

Exercises rawterm Color/Style/Key, raw mode acquire/release on the real
terminal (if there is one) and on a pseudo-terminal, and a headless zenox
run with answers piped through the plain-line fallback.

Run from the project root: python .ci/validate-zenox.py
"""

import io
import os
import sys
import tempfile

# Ensure the project root (CWD) is on the import path, since Python
# adds the script's directory (.ci/) rather than CWD by default.
sys.path.insert(0, os.getcwd())


def check_rawterm_units():
    """rawterm Color, Style, Key -- no terminal required."""
    from rawterm import Style, Color, Key, NAMED_COLORS, cursor_left

    assert Color.RED == Color.RED, "named color identity"
    assert Color.index(196) == Color.index(196), "index color identity"
    assert Color.RED != Color.index(1), "named vs index differ"

    s1 = Style(fg=Color.RED)
    s2 = Style(fg=Color.RED, bold=True)
    assert s1 != s2, "bold changes style"
    assert s2.sgr() == "\x1b[0;31;49;1m", "SGR sequence"

    for attr in (
        "ENTER",
        "BACKSPACE",
        "DELETE",
        "LEFT",
        "RIGHT",
        "HOME",
        "END",
        "KILL_TO_END",
        "KILL_LINE",
        "KILL_WORD",
        "ESCAPE",
        "INTERRUPT",
    ):
        assert getattr(Key, attr) is not None, "Key." + attr

    for name in ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"):
        assert name in NAMED_COLORS, "missing " + name
        assert "bright" + name in NAMED_COLORS, "missing bright" + name

    assert cursor_left(2) == "\x1b[2D", "cursor movement"

    print("rawterm unit checks passed")


def _check_raw_mode(fd):
    import termios
    from rawterm import TerminalMode

    original = termios.tcgetattr(fd)
    with TerminalMode(fd) as mode:
        assert mode.active, "mode active"
        raw = termios.tcgetattr(fd)
        assert not raw[3] & termios.ICANON, "canonical mode off"
        assert not raw[3] & termios.ECHO, "echo off"
    assert termios.tcgetattr(fd) == original, "attributes restored"


def check_terminal_mode():
    """Raw mode round trip on stdin (if a TTY) and on a pseudo-terminal."""
    try:
        import pty
    except ImportError:
        print("Terminal mode checks skipped (no termios/pty)")
        return

    if os.isatty(sys.stdin.fileno()):
        _check_raw_mode(sys.stdin.fileno())
    else:
        print("  stdin is not a TTY, using a pseudo-terminal only")

    master, slave = pty.openpty()
    try:
        _check_raw_mode(slave)
    finally:
        os.close(slave)
        os.close(master)

    print("Terminal mode checks passed")


def check_zenox_headless():
    """Complete zenox run, answering the prompts from a fake stdin."""
    import zenox

    old_stdin = sys.stdin
    old_no_color = os.environ.get("NO_COLOR")
    os.environ["NO_COLOR"] = "1"
    try:
        with tempfile.TemporaryDirectory() as base_dir:
            sys.stdin = io.StringIO("demo\ny\ny\nnode\n")
            zenox.main(["--debug", "--base-dir", base_dir])

            project = os.path.join(base_dir, "demo")
            with open(os.path.join(project, ".gitignore")) as f:
                assert f.read() == zenox.GITIGNORES["node"], ".gitignore contents"
            with open(os.path.join(project, "README.md")) as f:
                assert f.read() == "# demo\n", "README.md contents"
    finally:
        sys.stdin = old_stdin
        if old_no_color is None:
            del os.environ["NO_COLOR"]
        else:
            os.environ["NO_COLOR"] = old_no_color

    print("zenox headless run passed")


if __name__ == "__main__":
    check_rawterm_units()
    check_terminal_mode()
    check_zenox_headless()
    print("All checks passed")
