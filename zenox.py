#!/usr/bin/env python3

# Copyright (c) 2026 zenox contributors
# SPDX-License-Identifier: ISC

"""
Interactive project scaffolding.

Asks for a project name, creates <base directory>/<name>, and optionally
writes a README.md and a .gitignore into it.

Every prompt is a line editor (see lineedit.py). Pressing ESC at the project
name prompt, or Ctrl-C at any point, cancels everything: the terminal is
restored and a project directory that was created but not finished is
removed again. ESC at an optional prompt (the project type for .gitignore)
just skips it.

Configuration
=============

ZENOX_BASE_DIR
  Directory new projects are created in. DEFAULT_PROJECT_PATH is also
  accepted. Defaults to the current directory. --base-dir overrides it.

ZENOX_ESC_TIMEOUT
  Seconds to wait after ESC for the rest of an arrow/Home/End/Delete key
  sequence (default 0.025). Raise it on slow remote connections if arrow
  keys get mistaken for ESC. --esc-timeout overrides it.

ZENOX_DEFAULT_TYPE
  Project type used for .gitignore when the type prompt is left empty or
  skipped. DEFAULT_INIT_TYPE is also accepted. Known types: node, python,
  java, rust, go. Other types get an empty .gitignore.

ZENOX_STYLE
  Colors, as a list of <element>=<style> assignments. Elements: prompt,
  info, success, warning, error, banner. A style is a comma separated list
  of fg:COLOR, bg:COLOR, bold, underline and standout, where COLOR is one of
  the 8 basic colors (optionally prefixed with 'bright') or a 256-color
  index. A word without '=' names a built-in template ('default' or
  'monochrome'). Example:

    ZENOX_STYLE="monochrome error=fg:brightred,bold"

  NO_COLOR (set to anything) forces the 'monochrome' template and ignores
  ZENOX_STYLE.

The exit status is 1 if project creation is cancelled or fails.
"""

import argparse
import os
import sys
import time

from lineedit import edit_line
from rawterm import NAMED_COLORS, RESET, STYLE_DEFAULT, Color, Style
from teardown import AbortCoordinator, PendingProject, warn

# .gitignore contents per project type
GITIGNORES = {
    "node": "node_modules/\n.env\n",
    "python": "__pycache__/\n.env\n.venv/\n",
    "java": "bin/\n*.class\n",
    "rust": "target/\n",
    "go": "bin/\n*.exe\n",
}

_BANNER = r"""
  __________
  \____    /____   ____   _______  ___
    /     // __ \ /    \ /  _ \  \/  /
   /     /\  ___/|   |  (  <_> >    <
  /_______ \___  >___|  /\____/__/\_ \
          \/   \/     \/            \/
"""

# Delay between characters when animating the banner, in seconds
_BANNER_CHAR_DELAY = 0.005


#
# Styling
#

_STYLES = {
    "default": """
    prompt=fg:yellow,bold
    info=fg:cyan
    success=fg:green
    warning=fg:yellow
    error=fg:red,bold
    banner=fg:cyan
    """,
    "monochrome": """
    prompt=bold
    info=
    success=
    warning=
    error=bold
    banner=
    """,
}

# Dictionary mapping element names to rawterm.Style objects
_style = {}


def _parse_color(color_def):
    """Parse a color definition string, returning a rawterm.Color."""
    if color_def in NAMED_COLORS:
        return NAMED_COLORS[color_def]

    try:
        num = int(color_def, 0)
        if 0 <= num <= 255:
            return Color.index(num)
        warn(f"Ignoring color {color_def} outside range 0..255")
        return Color.DEFAULT
    except ValueError:
        warn("Ignoring color", color_def, "that's neither predefined nor a number")
        return Color.DEFAULT


def _style_from_def(style_def):
    """Parse a style definition string, returning a rawterm.Style."""
    fg = Color.DEFAULT
    bg = Color.DEFAULT
    bold = False
    standout = False
    underline = False

    if style_def:
        for field in style_def.split(","):
            if field.startswith("fg:"):
                fg = _parse_color(field.split(":", 1)[1])
            elif field.startswith("bg:"):
                bg = _parse_color(field.split(":", 1)[1])
            elif field == "bold":
                bold = True
            elif field == "standout":
                standout = True
            elif field == "underline":
                underline = True
            else:
                warn("Ignoring unknown style attribute", field)

    return Style(fg=fg, bg=bg, bold=bold, standout=standout, underline=underline)


def _parse_style(style_str, parsing_default):
    # Parses a string with '<element>=<style>' assignments. Anything not
    # containing '=' is assumed to be a reference to a built-in style, which is
    # treated as if all the assignments from the style were inserted at that
    # point in the string.
    #
    # The parsing_default flag is set to True when we're implicitly parsing the
    # 'default'/'monochrome' style, to prevent warnings.

    for sline in style_str.split():
        if "=" in sline:
            key, data = sline.split("=", 1)

            if key not in _style and not parsing_default:
                warn("Ignoring non-existent style", key)
                continue

            # If data is a reference to another key, copy its style
            if data in _style:
                _style[key] = _style[data]
            else:
                _style[key] = _style_from_def(data)

        elif sline in _STYLES:
            _parse_style(_STYLES[sline], parsing_default)

        else:
            warn("Ignoring non-existent style template", sline)


def _init_styles():
    # Use the 'default' theme as the base, and add any user-defined style
    # settings from the environment

    _style.clear()
    if "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb":
        _parse_style("monochrome", True)
        return

    _parse_style("default", True)
    if "ZENOX_STYLE" in os.environ:
        _parse_style(os.environ["ZENOX_STYLE"], False)


def _say(element, text):
    print(_style.get(element, STYLE_DEFAULT).paint(text), flush=True)


#
# Main application
#


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="zenox",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=__doc__,
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Print the banner at once instead of animating it",
    )

    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Show what would be done without touching the filesystem",
    )

    parser.add_argument(
        "--base-dir",
        help="Directory to create the project in (default: $ZENOX_BASE_DIR, "
        "$DEFAULT_PROJECT_PATH, or the current directory)",
    )

    parser.add_argument(
        "--esc-timeout",
        type=float,
        help="Seconds to wait for the rest of an escape sequence after ESC "
        "(default: $ZENOX_ESC_TIMEOUT or 0.025)",
    )

    args = parser.parse_args(argv)

    if args.esc_timeout is not None and args.esc_timeout < 0:
        parser.error("--esc-timeout must not be negative")

    _init_styles()

    base_dir = _base_dir(args.base_dir)
    if not os.path.isdir(base_dir):
        sys.exit(f"error: base directory '{base_dir}' does not exist")

    esc_timeout = args.esc_timeout
    if esc_timeout is None:
        esc_timeout = _env_esc_timeout()

    coordinator = AbortCoordinator(PendingProject(), style=_style["error"])
    coordinator.install()
    try:
        _animate(args.debug)
        _say("info", f"Base directory: {base_dir}")
        create_project(
            base_dir,
            coordinator,
            dry_run=args.dry_run,
            esc_timeout=esc_timeout,
            default_type=(
                os.environ.get("ZENOX_DEFAULT_TYPE")
                or os.environ.get("DEFAULT_INIT_TYPE", "")
            ),
        )
    finally:
        coordinator.uninstall()


def create_project(
    base_dir, coordinator, dry_run=False, esc_timeout=None, default_type=""
):
    """
    Runs the interactive project creation in 'base_dir' and returns the
    path of the new project directory.

    coordinator:
      AbortCoordinator used for all prompts and failures. Its PendingProject
      holds the new directory until setup completes, so that a cancellation
      removes it.

    dry_run:
      If True, only print what would be created.

    esc_timeout:
      Passed on to lineedit.edit_line().

    default_type:
      Project type for .gitignore if the type prompt is left empty or
      skipped with ESC.
    """

    def ask(prompt, default="", exit_on_escape=True):
        return edit_line(
            _style.get("prompt", STYLE_DEFAULT).paint(prompt) + " ",
            default,
            exit_on_escape,
            coordinator,
            esc_timeout,
        )

    name = ask("Enter the project name:").value.strip()
    if not name:
        coordinator.abort("Project name cannot be empty.")
    if os.sep in name or name in (os.curdir, os.pardir):
        coordinator.abort(f"Invalid project name '{name}'.")

    project_dir = os.path.join(base_dir, name)
    if os.path.lexists(project_dir):
        # Not ours. Don't mark it pending, or the teardown would remove it.
        coordinator.abort("Project already exists.")

    if dry_run:
        _say("warning", f"[Dry Run] Creating directory {project_dir}")
    else:
        try:
            os.mkdir(project_dir)
        except OSError as e:
            coordinator.abort(f"Failed to create project directory: {e}")
        coordinator.pending.set(project_dir)

    readme = ask("Create README.md? (Y/N) [N]:", "N").value
    gitignore = ask("Create .gitignore? (Y/N) [N]:", "N").value

    if _is_yes(gitignore):
        project_type, cancelled = ask(
            f"Project type [{default_type or 'none'}]:",
            default_type,
            exit_on_escape=False,
        )
        if cancelled:
            project_type = default_type

        _write_project_file(
            coordinator,
            project_dir,
            ".gitignore",
            gitignore_for(project_type),
            dry_run,
        )

    if _is_yes(readme):
        _write_project_file(
            coordinator, project_dir, "README.md", f"# {name}\n", dry_run
        )

    coordinator.pending.clear()

    _say("success", f"Project setup complete at {project_dir}.")
    if dry_run:
        _say("warning", "(Dry run mode: no files were written.)")

    return project_dir


def gitignore_for(project_type):
    """
    Returns the .gitignore contents for 'project_type' (case-insensitive).
    Unknown types get an empty file.
    """
    return GITIGNORES.get(project_type.strip().lower(), "")


def _write_project_file(coordinator, project_dir, filename, contents, dry_run):
    path = os.path.join(project_dir, filename)

    if dry_run:
        _say("warning", f"[Dry Run] Creating {filename}")
        return

    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(contents)
    except OSError as e:
        coordinator.abort(f"Failed to write {filename}: {e}")

    _say("success", f"Created {filename}")


def _is_yes(answer):
    return answer.strip().lower() in ("y", "yes")


def _base_dir(arg):
    # Picks the base directory from the command line or the environment, with
    # '~' expanded and symlinks resolved

    base_dir = (
        arg
        or os.environ.get("ZENOX_BASE_DIR")
        or os.environ.get("DEFAULT_PROJECT_PATH")
        or os.getcwd()
    )
    return os.path.realpath(os.path.expanduser(base_dir))


def _env_esc_timeout():
    # Returns ZENOX_ESC_TIMEOUT as a float, or None (rawterm default) if unset
    # or invalid

    val = os.environ.get("ZENOX_ESC_TIMEOUT")
    if not val:
        return None

    try:
        timeout = float(val)
    except ValueError:
        warn(f"Ignoring ZENOX_ESC_TIMEOUT={val!r}, which is not a number")
        return None

    if timeout < 0:
        warn(f"Ignoring negative ZENOX_ESC_TIMEOUT={val!r}")
        return None

    return timeout


def _animate(static):
    # Prints the banner, one character at a time unless 'static' is True

    if static:
        _say("banner", _BANNER)
        return

    style = _style.get("banner", STYLE_DEFAULT)
    colored = style != STYLE_DEFAULT
    if colored:
        sys.stdout.write(style.sgr())
    for line in _BANNER.splitlines():
        for ch in line:
            sys.stdout.write(ch)
            sys.stdout.flush()
            time.sleep(_BANNER_CHAR_DELAY)
        sys.stdout.write("\n")
    if colored:
        sys.stdout.write(RESET)
    sys.stdout.flush()


if __name__ == "__main__":
    main()
