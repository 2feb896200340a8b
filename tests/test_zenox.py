# Copyright (c) 2026 zenox contributors
# SPDX-License-Identifier: ISC
#
# Project workflow tests. Prompts are answered by a scripted edit_line()
# (or, for main(), by the plain-line fallback reading a fake stdin).

import io
import signal
import sys

import pytest

import teardown
import zenox
from lineedit import EditResult
from rawterm import STYLE_DEFAULT, Color, Style
from teardown import ESCAPE_PRESSED, AbortCoordinator, PendingProject

# Scripted answer standing for an ESC keypress
ESC = object()


class ScriptedPrompts:
    """
    Replacement for zenox.edit_line() that answers prompts from a list and
    records what was asked.
    """

    def __init__(self, answers):
        self.answers = list(answers)
        self.asked = []

    def __call__(self, prompt, default, exit_on_escape, coordinator, esc_timeout):
        self.asked.append((prompt, default, exit_on_escape, esc_timeout))

        answer = self.answers.pop(0)
        if answer is ESC:
            if exit_on_escape:
                coordinator.abort(ESCAPE_PRESSED)
            return EditResult("", True)

        return EditResult(answer or default, False)


@pytest.fixture(autouse=True)
def _plain_styles(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("ZENOX_STYLE", raising=False)
    zenox._init_styles()


@pytest.fixture
def prompts(monkeypatch):
    def script(*answers):
        scripted = ScriptedPrompts(answers)
        monkeypatch.setattr(zenox, "edit_line", scripted)
        return scripted

    return script


def run(base_dir, **kwargs):
    coordinator = AbortCoordinator(PendingProject(), output=io.StringIO())
    return zenox.create_project(str(base_dir), coordinator, **kwargs), coordinator


# -- Workflow ------------------------------------------------------------------


def test_full_setup(tmp_path, prompts, capsys):
    scripted = prompts("myapp", "y", "y", "python")
    project_dir, coordinator = run(tmp_path)

    project = tmp_path / "myapp"
    assert project_dir == str(project)
    assert (project / "README.md").read_text() == "# myapp\n"
    assert (project / ".gitignore").read_text() == zenox.GITIGNORES["python"]
    assert coordinator.pending.path is None

    out = capsys.readouterr().out
    assert "Created README.md" in out
    assert "Created .gitignore" in out
    assert f"Project setup complete at {project}." in out

    # Name, README, .gitignore, type. Only the type prompt is skippable.
    assert [exit_on_escape for _, _, exit_on_escape, _ in scripted.asked] == [
        True,
        True,
        True,
        False,
    ]
    assert [default for _, default, _, _ in scripted.asked] == ["", "N", "N", ""]


def test_defaults_create_empty_project(tmp_path, prompts):
    scripted = prompts("myapp", "", "")
    run(tmp_path)

    assert list((tmp_path / "myapp").iterdir()) == []
    assert len(scripted.asked) == 3


def test_name_is_stripped(tmp_path, prompts):
    prompts("  spaced  ", "n", "n")
    run(tmp_path)
    assert (tmp_path / "spaced").is_dir()


def test_unknown_type_gets_empty_gitignore(tmp_path, prompts):
    prompts("myapp", "n", "yes", "cobol")
    run(tmp_path)
    assert (tmp_path / "myapp" / ".gitignore").read_text() == ""


def test_skipped_type_uses_default_type(tmp_path, prompts):
    scripted = prompts("myapp", "n", "Y", ESC)
    run(tmp_path, default_type="node")

    assert (tmp_path / "myapp" / ".gitignore").read_text() == zenox.GITIGNORES["node"]
    assert "Project type [node]:" in scripted.asked[-1][0]


def test_esc_timeout_is_passed_on(tmp_path, prompts):
    scripted = prompts("myapp", "", "")
    run(tmp_path, esc_timeout=0.3)
    assert all(asked[3] == 0.3 for asked in scripted.asked)


def test_empty_name(tmp_path, prompts, capsys):
    prompts("   ")
    with pytest.raises(SystemExit) as e:
        run(tmp_path)

    assert e.value.code == 1
    assert list(tmp_path.iterdir()) == [tmp_path / "home"]


@pytest.mark.parametrize("name", ["..", "a/b"])
def test_invalid_name(tmp_path, prompts, name):
    prompts(name)
    with pytest.raises(SystemExit):
        run(tmp_path)
    assert not (tmp_path / "a").exists()


def test_existing_project_is_left_alone(tmp_path, prompts):
    existing = tmp_path / "myapp"
    existing.mkdir()
    (existing / "keep.txt").write_text("mine")
    output = io.StringIO()
    coordinator = AbortCoordinator(PendingProject(), output=output)

    prompts("myapp")
    with pytest.raises(SystemExit):
        zenox.create_project(str(tmp_path), coordinator)

    assert (existing / "keep.txt").read_text() == "mine"
    assert "Project already exists." in output.getvalue()
    assert "Deleting" not in output.getvalue()


def test_escape_after_creation_removes_project(tmp_path, prompts):
    output = io.StringIO()
    coordinator = AbortCoordinator(PendingProject(), output=output)

    prompts("myapp", "y", ESC)
    with pytest.raises(SystemExit) as e:
        zenox.create_project(str(tmp_path), coordinator)

    assert e.value.code == 1
    assert not (tmp_path / "myapp").exists()
    assert ESCAPE_PRESSED in output.getvalue()


def test_write_failure_removes_project(tmp_path, prompts, monkeypatch):
    def failing_open(*args, **kwargs):
        raise PermissionError("read-only")

    # Shadows the builtin for zenox only
    monkeypatch.setattr(zenox, "open", failing_open, raising=False)
    output = io.StringIO()
    coordinator = AbortCoordinator(PendingProject(), output=output)

    prompts("myapp", "y", "n")
    with pytest.raises(SystemExit):
        zenox.create_project(str(tmp_path), coordinator)

    assert not (tmp_path / "myapp").exists()
    assert "Failed to write README.md: read-only" in output.getvalue()


def test_escape_at_name_prompt(tmp_path, prompts):
    prompts(ESC)
    with pytest.raises(SystemExit):
        run(tmp_path)
    assert list(tmp_path.iterdir()) == [tmp_path / "home"]


def test_dry_run(tmp_path, prompts, capsys):
    prompts("myapp", "y", "y", "java")
    project_dir, coordinator = run(tmp_path, dry_run=True)

    assert project_dir == str(tmp_path / "myapp")
    assert not (tmp_path / "myapp").exists()
    assert coordinator.pending.path is None

    out = capsys.readouterr().out
    assert f"[Dry Run] Creating directory {tmp_path / 'myapp'}" in out
    assert "[Dry Run] Creating .gitignore" in out
    assert "[Dry Run] Creating README.md" in out
    assert "(Dry run mode: no files were written.)" in out


def test_gitignore_for():
    assert zenox.gitignore_for("node") == "node_modules/\n.env\n"
    assert zenox.gitignore_for(" Python ") == "__pycache__/\n.env\n.venv/\n"
    assert zenox.gitignore_for("JAVA") == "bin/\n*.class\n"
    assert zenox.gitignore_for("") == ""
    assert zenox.gitignore_for("Rust") == "target/\n"
    assert zenox.gitignore_for("cobol") == ""


# -- Styles --------------------------------------------------------------------


def test_no_color_is_monochrome():
    assert zenox._style["info"] == STYLE_DEFAULT
    assert zenox._style["error"] == Style(bold=True)


def test_default_styles(monkeypatch):
    monkeypatch.delenv("NO_COLOR")
    monkeypatch.setenv("TERM", "xterm-256color")
    zenox._init_styles()

    assert zenox._style["error"] == Style(fg=Color.RED, bold=True)
    assert zenox._style["success"] == Style(fg=Color.GREEN)


def test_user_style(monkeypatch, capsys):
    monkeypatch.delenv("NO_COLOR")
    monkeypatch.setenv("TERM", "xterm-256color")
    monkeypatch.setenv(
        "ZENOX_STYLE", "monochrome error=fg:brightred,underline info=error nosuch=bold"
    )
    zenox._init_styles()

    error = Style(fg=zenox.NAMED_COLORS["brightred"], underline=True)
    assert zenox._style["error"] == error
    assert zenox._style["info"] == error
    assert zenox._style["success"] == STYLE_DEFAULT
    assert "nosuch" not in zenox._style
    assert "Ignoring non-existent style nosuch" in capsys.readouterr().err


def test_bad_style_definitions(capsys):
    assert zenox._style_from_def("fg:300,bg:12,blink") == Style(bg=Color.index(12))

    err = capsys.readouterr().err
    assert "zenox warning: Ignoring color 300 outside range 0..255" in err
    assert "Ignoring unknown style attribute blink" in err


# -- Configuration -------------------------------------------------------------


@pytest.mark.parametrize(
    "value, expected", [(None, None), ("", None), ("0.1", 0.1), ("abc", None), ("-1", None)]
)
def test_env_esc_timeout(monkeypatch, value, expected):
    if value is None:
        monkeypatch.delenv("ZENOX_ESC_TIMEOUT", raising=False)
    else:
        monkeypatch.setenv("ZENOX_ESC_TIMEOUT", value)
    assert zenox._env_esc_timeout() == expected


def test_base_dir(monkeypatch, tmp_path, _fake_home):
    monkeypatch.delenv("ZENOX_BASE_DIR", raising=False)
    monkeypatch.delenv("DEFAULT_PROJECT_PATH", raising=False)
    monkeypatch.chdir(tmp_path)
    assert zenox._base_dir(None) == str(tmp_path)

    monkeypatch.setenv("DEFAULT_PROJECT_PATH", "~")
    assert zenox._base_dir(None) == str(_fake_home)

    monkeypatch.setenv("ZENOX_BASE_DIR", str(tmp_path / "x" / ".."))
    assert zenox._base_dir(None) == str(tmp_path)

    assert zenox._base_dir("~/src") == str(_fake_home / "src")


# -- main() --------------------------------------------------------------------


@pytest.fixture
def no_atexit(monkeypatch):
    monkeypatch.setattr(teardown.atexit, "register", lambda fn: None)


def test_main(tmp_path, monkeypatch, capsys, no_atexit):
    monkeypatch.setattr(sys, "stdin", io.StringIO("myapp\ny\nn\n"))
    sigint_handler = signal.getsignal(signal.SIGINT)

    zenox.main(["--debug", "--base-dir", str(tmp_path)])

    assert (tmp_path / "myapp" / "README.md").read_text() == "# myapp\n"
    assert not (tmp_path / "myapp" / ".gitignore").exists()
    assert signal.getsignal(signal.SIGINT) == sigint_handler

    out = capsys.readouterr().out
    assert f"Base directory: {tmp_path}" in out
    assert "Enter the project name:" in out


def test_main_end_of_input_removes_project(tmp_path, monkeypatch, capsys, no_atexit):
    monkeypatch.setattr(sys, "stdin", io.StringIO("myapp\n"))

    with pytest.raises(SystemExit) as e:
        zenox.main(["-d", "--base-dir", str(tmp_path)])

    assert e.value.code == 1
    assert not (tmp_path / "myapp").exists()
    assert "End of input." in capsys.readouterr().out


def test_main_missing_base_dir(tmp_path, no_atexit):
    with pytest.raises(SystemExit) as e:
        zenox.main(["-d", "--base-dir", str(tmp_path / "nope")])
    assert "does not exist" in str(e.value.code)


def test_main_negative_esc_timeout(tmp_path, capsys):
    with pytest.raises(SystemExit) as e:
        zenox.main(["--esc-timeout", "-1", "--base-dir", str(tmp_path)])
    assert e.value.code == 2
    assert "must not be negative" in capsys.readouterr().err


@pytest.mark.parametrize(
    "env, expected",
    [
        ({"DEFAULT_INIT_TYPE": "python"}, "python"),
        ({"ZENOX_DEFAULT_TYPE": "node", "DEFAULT_INIT_TYPE": "python"}, "node"),
    ],
)
def test_main_default_type(tmp_path, monkeypatch, no_atexit, env, expected):
    monkeypatch.delenv("ZENOX_DEFAULT_TYPE", raising=False)
    monkeypatch.delenv("DEFAULT_INIT_TYPE", raising=False)
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    # Name, no README, .gitignore, empty project type
    monkeypatch.setattr(sys, "stdin", io.StringIO("myapp\nn\ny\n\n"))

    zenox.main(["-d", "--base-dir", str(tmp_path)])

    gitignore = (tmp_path / "myapp" / ".gitignore").read_text()
    assert gitignore == zenox.GITIGNORES[expected]
