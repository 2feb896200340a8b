# Copyright (c) 2026 zenox contributors
# SPDX-License-Identifier: ISC

"""
Cancellation handling for zenox.

An AbortCoordinator is the single place where zenox gives up: on ESC in a
prompt that can't be skipped, on Ctrl-C/SIGTERM/SIGHUP, or on a fatal error
in the project workflow. Teardown always runs the same steps, in order:

  1. Restore the terminal mode, so the user's shell is never left in raw
     mode.

  2. Delete the project directory that was created but not yet completed
     (see PendingProject), if it still exists and is_safe_to_delete() agrees.

  3. Print the cancellation message.

  4. Exit with status 1.

Each step is best-effort. A failure is reported as a warning on stderr and
the remaining steps still run.
"""

import atexit
import os
import shutil
import signal
import sys

import rawterm
from rawterm import Color, Style, TerminalError

ESCAPE_PRESSED = "Escape pressed."
INTERRUPTED = "Interrupted."
END_OF_INPUT = "End of input."

# Well-known directories directly under the home directory that are never
# deleted, whatever the project path was computed to be
PROTECTED_HOME_DIRS = ("Desktop", "Documents")

_TERMINATING_SIGNALS = tuple(
    getattr(signal, name)
    for name in ("SIGINT", "SIGTERM", "SIGHUP")
    if hasattr(signal, name)
)


def warn(*args):
    print("zenox warning: ", end="", file=sys.stderr)
    print(*args, file=sys.stderr)


def is_safe_to_delete(path, home=None):
    """
    Returns True if 'path' may be deleted by a teardown.

    Rejects empty paths, the home directory, the directories in
    PROTECTED_HOME_DIRS, and any directory that contains the home directory
    (including the filesystem root). Symlinks and '..' are resolved before
    comparing.

    home:
      Home directory to protect. Defaults to the current user's (~).
    """
    if not path:
        return False

    full_path = os.path.realpath(path)
    home = os.path.realpath(os.path.expanduser("~") if home is None else home)

    forbidden = {home}
    forbidden.update(os.path.join(home, name) for name in PROTECTED_HOME_DIRS)
    if full_path in forbidden:
        return False

    # The root directory and any parent of the home directory
    return not _is_within(home, full_path)


def _is_within(path, directory):
    # True if 'path' is 'directory' or lies somewhere below it
    try:
        return os.path.commonpath((path, directory)) == directory
    except ValueError:
        # Different drives on Windows
        return False


class PendingProject:
    """
    The project directory that has been created but not finished yet.

    The workflow calls set() right after creating the directory and clear()
    once setup completes. The AbortCoordinator only reads it.
    """

    def __init__(self):
        self._path = None

    @property
    def path(self):
        """Absolute path of the pending project directory, or None."""
        return self._path

    def set(self, path):
        self._path = os.path.abspath(path)

    def clear(self):
        self._path = None

    def __repr__(self):
        return f"<PendingProject {self._path!r}>"


class AbortCoordinator:
    """
    Runs the teardown sequence described in the module docstring.

    pending:
      PendingProject consulted for the directory to remove. A fresh (empty)
      one is created if not given.

    output:
      Stream for the cancellation messages. Resolved to sys.stdout at
      teardown time if None.

    style:
      rawterm.Style for the cancellation message.
    """

    def __init__(self, pending=None, output=None, style=None):
        self.pending = pending if pending is not None else PendingProject()
        self.style = style if style is not None else Style(fg=Color.RED, bold=True)

        self._output = output
        # TerminalMode to restore, attached by the active edit session
        self._terminal = None
        self._old_handlers = {}
        self._aborting = False
        self._installed = False
        self._atexit_registered = False

    @property
    def aborting(self):
        """True once a teardown has started."""
        return self._aborting

    @property
    def installed(self):
        """True between install() and uninstall()."""
        return self._installed

    def attach_terminal(self, terminal):
        """Makes 'terminal' the TerminalMode restored on teardown."""
        self._terminal = terminal

    def detach_terminal(self, terminal):
        if self._terminal is terminal:
            self._terminal = None

    def install(self, signals=_TERMINATING_SIGNALS):
        """
        Installs handlers for 'signals' (SIGINT, SIGTERM and SIGHUP by
        default) that tear down with INTERRUPTED, and registers an atexit hook
        that restores the terminal if the process exits some other way.
        """
        for signum in signals:
            if signum not in self._old_handlers:
                self._old_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, self._handle_signal)
        self._installed = True

        if not self._atexit_registered:
            atexit.register(self.restore_terminal)
            self._atexit_registered = True

    def uninstall(self):
        """Puts back the signal handlers that were replaced by install()."""
        for signum, handler in self._old_handlers.items():
            signal.signal(signum, handler)
        self._old_handlers.clear()
        self._installed = False

    def _handle_signal(self, signum, frame):
        self.abort(INTERRUPTED)

    def restore_terminal(self):
        """
        Restores the attached terminal mode. If none is attached, restores
        whichever rawterm.TerminalMode holds the terminal, if any. Returns
        True if a mode was restored by this call. Failures are warned about,
        not raised.
        """
        terminal = self._terminal
        if terminal is None:
            terminal = rawterm.live_mode()
        if terminal is None:
            return False

        try:
            return terminal.release()
        except TerminalError as e:
            warn(e)
            return False

    def remove_pending_project(self):
        """
        Deletes the pending project directory if it exists and is safe to
        delete. Returns True if a directory was removed.
        """
        path = self.pending.path
        if path is None or not os.path.isdir(path):
            return False

        if not is_safe_to_delete(path):
            warn(f"refusing to delete '{path}'")
            return False

        try:
            if _is_within(os.getcwd(), os.path.realpath(path)):
                # Can't leave the current directory dangling
                os.chdir(os.path.dirname(os.path.realpath(path)))
        except OSError as e:
            warn(f"could not leave '{path}': {e}")

        self._print(f"Deleting project directory: {path}")
        try:
            shutil.rmtree(path)
        except OSError as e:
            warn(f"failed to delete '{path}': {e}")
            return False

        return True

    def teardown(self, message):
        """
        Runs the first three teardown steps (restore terminal, remove the
        pending project, print 'message') without exiting.
        """
        if self.restore_terminal():
            # Interrupted mid-prompt. Leave the prompt line.
            self._print("")
        self.remove_pending_project()
        self._print(self.style.paint(message))

    def abort(self, message):
        """
        Tears down and exits the process with status 1, via SystemExit.

        A second abort() while one is in progress (e.g. Ctrl-C hammered during
        teardown) is ignored.
        """
        if self._aborting:
            return
        self._aborting = True

        try:
            self.teardown(message)
        finally:
            sys.exit(1)

    def _print(self, s):
        output = self._output if self._output is not None else sys.stdout
        try:
            print(s, file=output, flush=True)
        except (OSError, ValueError):
            # Closed or broken stream. Nothing useful to do.
            pass
