# Copyright (c) 2026 rawprompt contributors
# SPDX-License-Identifier: ISC
#
# Shared fixtures and helpers for the rawprompt pytest suite.

import os
import re
import sys

import pytest

# Ensure rawprompt is importable from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from promptterm import ScriptedTerminal  # noqa: E402
from rawprompt import Renderer  # noqa: E402

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove environment variables that change how prompts are styled."""
    for var in ("RAWPROMPT_STYLE", "NO_COLOR"):
        monkeypatch.delenv(var, raising=False)
    yield


# ---------------------------------------------------------------------------
# Helpers
#
# 'script' arguments are passed on to ScriptedTerminal: strings of raw
# terminal input ("\r" is Enter, "\x7f" Backspace, "\x1b[A" Up, ...) and/or
# KeyEvents.
# ---------------------------------------------------------------------------

BACKSPACE = "\x7f"
ENTER = "\r"
UP = "\x1b[A"
DOWN = "\x1b[B"
RIGHT = "\x1b[C"
LEFT = "\x1b[D"
HOME = "\x1b[H"
END = "\x1b[F"
DELETE = "\x1b[3~"
PAGE_UP = "\x1b[5~"
PAGE_DOWN = "\x1b[6~"
CTRL_C = "\x03"
F1 = "\x1bOP"

_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


def run(options, *script, width=80):
    """Runs the prompt 'options' on a scripted terminal. Returns the answer
    and the terminal."""
    term = ScriptedTerminal(script, width=width)
    answer = options.prompt_with_renderer(Renderer(term))
    return answer, term


def ask(options, *script):
    """Like run(), returning just the answer."""
    return run(options, *script)[0]


def plain_output(term):
    """Everything written to 'term', with escape sequences and carriage
    returns removed."""
    return _ESCAPE_RE.sub("", term.output.getvalue()).replace("\r", "")


def final_line(term):
    """The last line written to 'term', which for a finished prompt is the
    '? message answer' line."""
    lines = [line for line in plain_output(term).split("\n") if line]
    return lines[-1]
