# Copyright (c) 2026 rawprompt contributors
# SPDX-License-Identifier: ISC
#
# Tests for the rawask command-line tool. Prompts run on a ScriptedTerminal
# instead of the real terminal.

import pytest

import rawask
import rawprompt
from promptterm import ScriptedTerminal, TerminalError
from rawprompt import Renderer

DOWN = "\x1b[B"


@pytest.fixture
def keys(monkeypatch):
    """Call with the keys to feed the prompt that rawask runs."""

    def set_keys(*script):
        def prompt_on_terminal(options):
            return options.prompt_with_renderer(Renderer(ScriptedTerminal(script)))

        monkeypatch.setattr(rawprompt, "_prompt_on_terminal", prompt_on_terminal)

    return set_keys


def _exit_code(argv):
    with pytest.raises(SystemExit) as e:
        rawask.main(argv)
    return e.value.code


def test_text(keys, capsys):
    keys("Bob\r")
    rawask.main(["text", "Name?"])
    assert capsys.readouterr().out == "Bob\n"


def test_text_default(keys, capsys):
    keys("\r")
    rawask.main(["text", "Name?", "--default", "demo"])
    assert capsys.readouterr().out == "demo\n"


def test_text_length_limits(keys, capsys):
    keys("ab\r", "c\r")
    rawask.main(["text", "Name?", "--min-length", "3", "--max-length", "5"])
    assert capsys.readouterr().out == "abc\n"


def test_text_required(keys, capsys):
    keys("\r", "x\r")
    rawask.main(["text", "Name?", "--required"])
    assert capsys.readouterr().out == "x\n"


def test_password(keys, capsys):
    keys("s3cret\r")
    rawask.main(["password", "Password?"])
    assert capsys.readouterr().out == "s3cret\n"


def test_password_default_rejected(keys):
    assert (
        _exit_code(["password", "Password?", "--default", "x"])
        == "error: password prompts have no default"
    )


def test_items_rejected(keys):
    assert _exit_code(["text", "Name?", "a", "b"]) == "error: text prompts take no items"
    assert _exit_code(["confirm", "Sure?", "a"]) == "error: confirm prompts take no items"


def test_confirm(keys, capsys):
    keys("y\r")
    rawask.main(["confirm", "Sure?"])
    assert capsys.readouterr().out == "yes\n"


@pytest.mark.parametrize("default, out", [("no", "no\n"), ("Y", "yes\n"), ("1", "yes\n")])
def test_confirm_default(keys, capsys, default, out):
    keys("\r")
    rawask.main(["confirm", "Sure?", "--default", default])
    assert capsys.readouterr().out == out


def test_confirm_bad_default(keys):
    assert (
        _exit_code(["confirm", "Sure?", "--default", "maybe"])
        == "error: 'maybe' is not a yes/no value"
    )


def test_confirm_status(keys, capsys):
    keys("y\r")
    assert _exit_code(["confirm", "Sure?", "--status"]) == 0

    keys("n\r")
    assert _exit_code(["confirm", "Sure?", "--status"]) == 1

    assert capsys.readouterr().out == ""


def test_status_only_for_confirm(keys):
    assert (
        _exit_code(["text", "Name?", "--status"])
        == "error: --status only applies to confirm prompts"
    )


@pytest.mark.parametrize(
    "argv, err",
    [
        (
            ["select", "Target?", "a", "--placeholder", "x"],
            "error: --placeholder only applies to text prompts",
        ),
        (
            ["password", "Password?", "--placeholder", "x"],
            "error: --placeholder only applies to text prompts",
        ),
        (
            ["confirm", "Sure?", "--min-length", "2"],
            "error: --min-length only applies to text and password prompts",
        ),
        (
            ["multiselect", "Features?", "a", "--max-length", "2"],
            "error: --max-length only applies to text and password prompts",
        ),
        (
            ["select", "Target?", "a", "--required"],
            "error: --required doesn't apply to select prompts",
        ),
        (
            ["confirm", "Sure?", "--required"],
            "error: --required doesn't apply to confirm prompts",
        ),
    ],
)
def test_options_for_other_kinds_rejected(keys, argv, err):
    assert _exit_code(argv) == err


def test_select(keys, capsys):
    keys(DOWN, "\r")
    rawask.main(["select", "Target?", "debug", "release"])
    assert capsys.readouterr().out == "release\n"


def test_select_default(keys, capsys):
    keys("\r")
    rawask.main(["select", "Target?", "debug", "release", "--default", "release"])
    assert capsys.readouterr().out == "release\n"


def test_select_bad_default(keys):
    assert (
        _exit_code(["select", "Target?", "debug", "--default", "release"])
        == "error: default 'release' is not one of the items"
    )


def test_select_needs_items(keys):
    assert _exit_code(["select", "Target?"]) == "error: select prompts need at least one item"


def test_multiselect(keys, capsys):
    keys(" ", DOWN, DOWN, " ", "\r")
    rawask.main(["multiselect", "Features?", "ssl", "zlib", "lz4"])
    assert capsys.readouterr().out == "ssl\nlz4\n"


def test_multiselect_default(keys, capsys):
    keys("\r")
    rawask.main(["multiselect", "Features?", "ssl", "zlib", "lz4", "--default", "lz4,zlib"])
    assert capsys.readouterr().out == "zlib\nlz4\n"


def test_multiselect_required(keys, capsys):
    keys("\r", " ", "\r")
    rawask.main(["multiselect", "Features?", "ssl", "zlib", "--required"])
    assert capsys.readouterr().out == "ssl\n"


def test_multiselect_bad_default(keys):
    assert (
        _exit_code(["multiselect", "Features?", "ssl", "--default", "ssl,tls"])
        == "error: default 'tls' is not one of the items"
    )


def test_help_message(keys, capsys):
    keys("\r")
    rawask.main(["select", "Target?", "debug", "--help-message", "Build type"])
    assert capsys.readouterr().out == "debug\n"


def test_canceled(keys, capsys):
    keys("ab\x03")
    assert _exit_code(["text", "Name?"]) == "error: canceled"
    assert capsys.readouterr().out == ""


def test_terminal_error(monkeypatch):
    def prompt_on_terminal(options):
        raise TerminalError("stdin is not a terminal")

    monkeypatch.setattr(rawprompt, "_prompt_on_terminal", prompt_on_terminal)
    assert _exit_code(["confirm", "Sure?"]) == "error: stdin is not a terminal"


def test_bad_kind():
    assert _exit_code(["number", "How many?"]) == 2
