# Copyright (c) 2026 zenox contributors
# SPDX-License-Identifier: ISC
#
# Shared fixtures for the zenox pytest suite: real file descriptors for key
# input (pipes) and for raw mode (pseudo-terminals).

import os
import sys

import pytest

# Ensure the modules are importable from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import rawterm  # noqa: E402

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fake_home(tmp_path, monkeypatch):
    """Point HOME at an empty directory, so no test can touch the real one."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    yield home


@pytest.fixture(autouse=True)
def _release_live_mode():
    """Make sure a failing test doesn't leave the terminal marked as taken."""
    yield
    if rawterm.live_mode() is not None:
        rawterm.live_mode().release()


class KeyPipe:
    """Pipe carrying keystrokes. The write end stays open until the test
    ends, so the decoder sees silence (not end of input) after the last
    byte."""

    def __init__(self):
        self.read_fd, self.write_fd = os.pipe()

    def send(self, data):
        if isinstance(data, str):
            data = data.encode("utf-8")
        os.write(self.write_fd, data)

    def close_write(self):
        if self.write_fd is not None:
            os.close(self.write_fd)
            self.write_fd = None

    def close(self):
        self.close_write()
        os.close(self.read_fd)


@pytest.fixture
def keys():
    pipe = KeyPipe()
    yield pipe
    pipe.close()


@pytest.fixture
def tty():
    """Slave side of a pseudo-terminal, usable with rawterm.TerminalMode."""
    pty = pytest.importorskip("pty")
    master, slave = pty.openpty()
    yield slave
    os.close(slave)
    os.close(master)


# ---------------------------------------------------------------------------
# Assertion helpers
# ---------------------------------------------------------------------------


def read_keys(decoder, n):
    """Read 'n' key events from 'decoder'."""
    return [decoder.read_key() for _ in range(n)]
