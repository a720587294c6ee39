# Copyright (c) 2026 rawprompt contributors
# SPDX-License-Identifier: ISC

"""
Overview
========

Interactive prompts for command-line programs. A prompt renders one question
below the program's existing output, reads keys in raw mode, validates the
answer when the user presses Enter, and finally replaces itself with a single
line showing the committed answer:

  ? Database password ********

Five kinds of prompts are available:

  Password     Masked text input. The typed text is never echoed.
  Text         Free text input with a cursor, default value, placeholder,
               suggestions and history.
  Confirm      Yes/no question.
  Select       One item from a list. Typing filters the list.
  MultiSelect  Any number of items from a list.

Each is configured through chained with_*() calls and run with prompt():

  import rawprompt

  name = rawprompt.Text("Project name?").with_default("demo").prompt()

  password = (
      rawprompt.Password("Database password")
      .with_validator(rawprompt.min_length(8))
      .prompt()
  )

  color = rawprompt.Select("Color?", ["red", "green", "blue"]).prompt()
  print(color.index, color.value)

prompt() raises OperationCanceled if the user presses Esc or Ctrl-C, and
TerminalError if the terminal can't be used (e.g. stdin is not a tty). The
terminal is always restored before either exception propagates.


Keys
====

  Enter        Submit. Validators run now, never while typing. The first
               failing validator's message is shown above the question and
               the input is kept for correction.
  Esc/Ctrl-C   Cancel.
  F1           Toggle the help line.

Text prompts: Left/Right, Home/End (Ctrl-A/Ctrl-E), Backspace, Delete,
Ctrl-W (delete word), Ctrl-K (delete to end), Ctrl-U (delete to start), Tab
(complete the highlighted suggestion), Up/Down (suggestions or history).

List prompts: Up/Down (wrapping around at the ends), PageUp/PageDown,
Home/End, and any other character edits the filter. In MultiSelect, Space
toggles the highlighted item, Right selects all shown items and Left
deselects them.

Editing works on grapheme clusters, so e.g. an emoji made of several code
points is deleted by a single Backspace.


Validators and formatters
=========================

A validator is a function that takes the candidate answer and returns None
(or "") to accept it, or an error message to reject it. A formatter is a
function that turns the accepted answer into the text shown on the final
line. Formatters never change the value returned by prompt().


Color schemes
=============

Colors can be customized by setting the RAWPROMPT_STYLE environment variable
to whitespace-separated '<element>=<style>' assignments. The elements are:

    - prefix        The '?' in front of the question
    - prompt        The question
    - default       Default value hint, e.g. '(Y/n)'
    - answer        The committed answer on the final line
    - error         Validation error line
    - help          Help line
    - placeholder   Placeholder text in an empty Text prompt
    - cursor        Text cursor
    - selection     Highlighted list item
    - option        Other list items
    - checked       '[x]' in MultiSelect
    - unchecked     '[ ]' in MultiSelect
    - filter        Filter text of list prompts

A style is a comma-separated list of fg:COLOR, bg:COLOR, bold, dim,
standout, and underline. COLOR is one of the 16 basic color names (black,
red, green, yellow, blue, magenta, cyan, white, with 'bright' versions like
brightred), a number 0-255 (hexadecimal and octal accepted), or #RRGGBB.

The right-hand side may also be the name of another element, whose style is
copied. A word without '=' names a built-in theme ('default' or
'monochrome') whose assignments are inserted at that point. 'default' is
always parsed first:

    RAWPROMPT_STYLE="selection=fg:white,bg:blue help=error"

If NO_COLOR is set or TERM is 'dumb', the 'monochrome' theme is used and
RAWPROMPT_STYLE is ignored. Errors in style definitions are reported on
stderr and otherwise ignored.
"""

import os
import re
import sys

import grapheme

from promptterm import (
    NAMED_COLORS,
    Color,
    KeyCode,
    Modifier,
    Style,
    Terminal,
    TerminalError,
    char_width,
)

#
# Configuration variables
#

# Number of list items shown at once by default
_DEFAULT_PAGE_SIZE = 7

# Shown in place of the password on the final line
_DEFAULT_MASK = "********"

_SELECT_HELP = "↑↓ to move, enter to select, type to filter"

_MULTISELECT_HELP = (
    "↑↓ to move, space to select one, → to all, ← to none, type to filter"
)

_SUGGESTIONS_HELP = "↑↓ to move, tab to autocomplete, enter to submit"

_NO_MATCHES = "No matching options"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class PromptError(Exception):
    """Base class for the exceptions raised by rawprompt."""


class OperationCanceled(PromptError):
    """
    Raised by prompt() when the user cancels the prompt with Esc or Ctrl-C.
    No answer is produced.
    """

    def __init__(self, message="Operation was canceled by the user"):
        super().__init__(message)


class ValidationFailed(PromptError):
    """
    Raised internally when a validator rejects an answer. The prompt shows
    the message and keeps running, so this never propagates out of prompt().
    """

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidConfiguration(PromptError):
    """
    Raised when a prompt is configured with values it can't work with, like
    an empty list of options.
    """


# TerminalError (imported from promptterm above) is raised for all terminal
# I/O failures. It is not a PromptError.


# ---------------------------------------------------------------------------
# Key model
# ---------------------------------------------------------------------------


class Key:
    """
    A logical key, decoupled from how the terminal encodes it.

    kind:
      One of the kind constants below.

    char:
      The character, for CHAR keys. None otherwise.

    modifiers:
      promptterm.Modifier flags. Printable characters normally arrive with
      Modifier.NONE. Ctrl combinations arrive as CHAR keys with the letter in
      'char' and Modifier.CTRL set.
    """

    __slots__ = ("kind", "char", "modifiers")

    CHAR = "char"
    BACKSPACE = "backspace"
    DELETE = "delete"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    TAB = "tab"
    BACKTAB = "backtab"
    SUBMIT = "submit"
    CANCEL = "cancel"
    HELP = "help"
    # Anything else. Prompts ignore it.
    OTHER = "other"

    def __init__(self, kind, char=None, modifiers=Modifier.NONE):
        self.kind = kind
        self.char = char
        self.modifiers = modifiers

    @staticmethod
    def of_char(char, modifiers=Modifier.NONE):
        return Key(Key.CHAR, char, modifiers)

    def __eq__(self, other):
        if not isinstance(other, Key):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.char == other.char
            and self.modifiers == other.modifiers
        )

    def __hash__(self):
        return hash((self.kind, self.char, self.modifiers))

    def __repr__(self):
        if self.kind == Key.CHAR:
            return f"Key.of_char({self.char!r}, {self.modifiers})"
        return f"Key({self.kind!r})"


_KEYCODE_TO_KIND = {
    KeyCode.BACKSPACE: Key.BACKSPACE,
    KeyCode.DELETE: Key.DELETE,
    KeyCode.UP: Key.UP,
    KeyCode.DOWN: Key.DOWN,
    KeyCode.LEFT: Key.LEFT,
    KeyCode.RIGHT: Key.RIGHT,
    KeyCode.HOME: Key.HOME,
    KeyCode.END: Key.END,
    KeyCode.PAGE_UP: Key.PAGE_UP,
    KeyCode.PAGE_DOWN: Key.PAGE_DOWN,
    KeyCode.TAB: Key.TAB,
    KeyCode.BACKTAB: Key.BACKTAB,
}


def key_from_event(event):
    """
    Maps a promptterm.KeyEvent to a Key. Events with no meaning to prompts
    map to Key.OTHER.
    """
    code = event.code
    mods = event.modifiers

    if code == KeyCode.ENTER:
        return Key(Key.SUBMIT)

    if code == KeyCode.ESC or (code == "c" and mods == Modifier.CTRL):
        return Key(Key.CANCEL)

    if code == KeyCode.F1:
        return Key(Key.HELP)

    if code in _KEYCODE_TO_KIND:
        return Key(_KEYCODE_TO_KIND[code], modifiers=mods)

    if len(code) == 1:
        return Key.of_char(code, mods)

    return Key(Key.OTHER)


# ---------------------------------------------------------------------------
# Styling
# ---------------------------------------------------------------------------

_STYLES = {
    "default": """
    prefix=fg:green,bold
    prompt=bold
    default=dim
    answer=fg:cyan
    error=fg:red
    help=fg:cyan,dim
    placeholder=fg:brightblack
    cursor=standout
    selection=fg:cyan
    option=
    checked=fg:green
    unchecked=
    filter=underline
    """,
    # This style is forced on terminals that do not support colors
    "monochrome": """
    prefix=bold
    prompt=bold
    default=dim
    answer=bold
    error=bold
    help=dim
    placeholder=dim
    cursor=standout
    selection=standout
    option=
    checked=bold
    unchecked=
    filter=underline
    """,
}


def _warn(*args):
    # Prints a warning to stderr. Only called before raw mode is entered, so
    # the output doesn't disturb the prompt's line bookkeeping.
    print("rawprompt warning: ", end="", file=sys.stderr)
    print(*args, file=sys.stderr)


def _parse_color(color_def):
    # Parses a color definition string, returning a promptterm.Color

    # HTML format, #RRGGBB
    if re.match("^#[A-Fa-f0-9]{6}$", color_def):
        return Color.rgb(
            int(color_def[1:3], 16),
            int(color_def[3:5], 16),
            int(color_def[5:7], 16),
        )

    if color_def in NAMED_COLORS:
        return NAMED_COLORS[color_def]

    try:
        num = int(color_def, 0)
    except ValueError:
        _warn("Ignoring color", color_def, "that's neither predefined nor a number")
        return Color.DEFAULT

    if 0 <= num <= 255:
        return Color.index(num)

    _warn(f"Ignoring color {color_def} outside range 0..255")
    return Color.DEFAULT


def _style_from_def(style_def):
    # Parses a style definition string like "fg:red,bold", returning a
    # promptterm.Style

    fg = bg = Color.DEFAULT
    attrs = dict.fromkeys(("bold", "dim", "standout", "underline"), False)

    if style_def:
        for field in style_def.split(","):
            if field.startswith("fg:"):
                fg = _parse_color(field[3:])
            elif field.startswith("bg:"):
                bg = _parse_color(field[3:])
            elif field in attrs:
                attrs[field] = True
            else:
                _warn("Ignoring unknown style attribute", field)

    return Style(fg=fg, bg=bg, **attrs)


def _parse_style(style_str, styles, parsing_default):
    # Parses a string with '<element>=<style>' assignments into 'styles'.
    # Anything not containing '=' is assumed to be a reference to a built-in
    # theme, which is treated as if all the assignments from the theme were
    # inserted at that point in the string.
    #
    # The parsing_default flag is set to True when we're implicitly parsing
    # the 'default'/'monochrome' theme, to prevent warnings.

    for sline in style_str.split():
        if "=" in sline:
            key, data = sline.split("=", 1)

            if key not in styles and not parsing_default:
                _warn("Ignoring non-existent style", key)
                continue

            # If data is a reference to another element, copy its style
            if data in styles:
                styles[key] = styles[data]
            else:
                styles[key] = _style_from_def(data)

        elif sline in _STYLES:
            _parse_style(_STYLES[sline], styles, parsing_default)

        else:
            _warn("Ignoring non-existent style template", sline)


def load_styles(style_str=None, color=True):
    """
    Returns a dictionary mapping element names to promptterm.Style objects.

    style_str:
      Style assignments in RAWPROMPT_STYLE format, applied on top of the
      'default' theme. Ignored if 'color' is False.

    color:
      If False, the 'monochrome' theme is returned.
    """
    styles = {}
    if not color:
        _parse_style(_STYLES["monochrome"], styles, True)
        return styles

    _parse_style(_STYLES["default"], styles, True)
    if style_str:
        _parse_style(style_str, styles, False)
    return styles


def styles_from_environment(environ=None):
    """
    Like load_styles(), with the settings taken from the RAWPROMPT_STYLE,
    NO_COLOR, and TERM environment variables (see the module docstring).
    """
    if environ is None:
        environ = os.environ

    color = "NO_COLOR" not in environ and environ.get("TERM") != "dumb"
    return load_styles(environ.get("RAWPROMPT_STYLE"), color)


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class Renderer:
    """
    Draws prompt frames on a terminal.

    A frame is drawn line by line with the print_*() methods and committed
    with flush(). The renderer counts the terminal rows each frame occupies,
    soft wraps included, so that reset_prompt() can erase exactly the
    previous frame and nothing above it. cleanup() draws the final line of a
    prompt, which is never erased.

    terminal:
      A promptterm.Terminal or promptterm.ScriptedTerminal. The renderer
      doesn't close it.

    styles:
      Dictionary from load_styles(). Defaults to the built-in theme suited to
      the terminal.
    """

    def __init__(self, terminal, styles=None):
        self._terminal = terminal
        if styles is None:
            styles = load_styles(color=terminal.supports_color)
        self._styles = styles

        # Completed rows of the current frame, and the display column the
        # cursor is at in the row being written
        self._rows = 0
        self._col = 0

        self.help_visible = True

        self._cursor_hidden = True
        terminal.hide_cursor()

    @property
    def painted_rows(self):
        """Number of terminal rows the frame drawn so far occupies."""
        if self._col:
            return self._rows + self._wrapped_rows(self._col)
        return self._rows

    def _wrapped_rows(self, col):
        # Rows taken by a line 'col' cells wide. A line exactly as wide as the
        # terminal leaves the cursor in the last column without wrapping.
        width = max(self._terminal.width, 1)
        return max(col - 1, 0) // width + 1

    def _write(self, text, element=None):
        lines = text.split("\n")
        for i, line in enumerate(lines):
            if i:
                self._new_line()
            if line:
                self._terminal.write(line, self._styles.get(element))
                self._advance(line)

    def _advance(self, text):
        # Moves _col over 'text'. A wide character that doesn't fit in the
        # rest of a row is moved to the next row by the terminal, leaving the
        # skipped cells blank.
        width = max(self._terminal.width, 1)
        col = self._col
        for ch in text:
            w = char_width(ch)
            if w and col % width + w > width:
                col += width - col % width
            col += w
        self._col = col

    def _new_line(self):
        self._rows += self._wrapped_rows(self._col)
        self._col = 0
        self._terminal.new_line()

    def reset_prompt(self):
        """Erases the rows drawn since the last reset. Does nothing if nothing
        was drawn."""
        if not self._cursor_hidden:
            # A new prompt on the same renderer after cleanup()
            self._terminal.hide_cursor()
            self._cursor_hidden = True

        up = self.painted_rows
        if up:
            # The cursor is on the row below the frame, or on the last row of
            # the frame if the last line wasn't finished
            if self._col:
                up -= 1
            self._terminal.carriage_return()
            self._terminal.cursor_up(up)
            self._terminal.clear_to_end()

        self._rows = 0
        self._col = 0

    def toggle_help(self):
        self.help_visible = not self.help_visible

    def print_error_message(self, message):
        self._write(f"# {message}", "error")
        self._new_line()

    def _print_question(self, message, default):
        self._write("?", "prefix")
        self._write(" ")
        self._write(message, "prompt")
        if default is not None:
            self._write(" ")
            self._write(f"({default})", "default")

    def print_prompt(self, message, default=None, content=None, element=None):
        """
        Prints the question line: '? message (default) content'.

        element:
          Style element for 'content'. Plain text if None.
        """
        self._print_question(message, default)
        if content:
            self._write(" ")
            self._write(content, element)
        self._new_line()

    def print_prompt_with_cursor(
        self, message, default=None, before="", at="", after="", placeholder=None
    ):
        """
        Prints the question line of a text input, with the grapheme 'at'
        shown as the cursor. An empty 'at' draws the cursor as a space after
        the text. 'placeholder' is shown after the cursor when there's no
        text.
        """
        self._print_question(message, default)
        self._write(" ")
        self._write(before)
        self._write(at or " ", "cursor")
        self._write(after)
        if placeholder and not (before or at or after):
            self._write(placeholder, "placeholder")
        self._new_line()

    def print_help(self, message):
        if self.help_visible:
            self._write(f"[{message}]", "help")
            self._new_line()

    def print_option(self, cursor, text):
        if cursor:
            self._write(f"> {text}", "selection")
        else:
            self._write(f"  {text}", "option")
        self._new_line()

    def print_multi_option(self, cursor, checked, text):
        self._write("> " if cursor else "  ", "selection" if cursor else None)
        if checked:
            self._write("[x]", "checked")
        else:
            self._write("[ ]", "unchecked")
        self._write(f" {text}", "selection" if cursor else "option")
        self._new_line()

    def print_line(self, text, element=None):
        self._write(text, element)
        self._new_line()

    def flush(self):
        self._terminal.flush()

    def read_key(self):
        """Blocks until a key is pressed and returns it as a Key."""
        return key_from_event(self._terminal.read_key())

    def cleanup(self, message, answer):
        """
        Replaces the current frame with '? message answer'. The line is left
        on screen; the next reset_prompt() starts below it.
        The cursor is shown again.
        """
        self.reset_prompt()
        self._write("?", "prefix")
        self._write(" ")
        self._write(message, "prompt")
        self._write(" ")
        self._write(answer, "answer")
        self._new_line()
        self._terminal.show_cursor()
        self._cursor_hidden = False
        self.flush()

        self._rows = 0
        self._col = 0


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def _length(value):
    # Length in grapheme clusters for text, in items for anything else
    if isinstance(value, str):
        return grapheme.length(value)
    return len(value)


def required(message="A response is required"):
    """Rejects empty text or an empty selection."""

    def validator(value):
        if not _length(value):
            return message
        return None

    return validator


def min_length(n, message=None):
    """Rejects text shorter than n grapheme clusters."""
    if message is None:
        message = f"The length of the response should be at least {n}"

    def validator(value):
        if _length(value) < n:
            return message
        return None

    return validator


def max_length(n, message=None):
    """Rejects text longer than n grapheme clusters."""
    if message is None:
        message = f"The length of the response should be at most {n}"

    def validator(value):
        if _length(value) > n:
            return message
        return None

    return validator


def length(n, message=None):
    """Rejects text that isn't exactly n grapheme clusters long."""
    if message is None:
        message = f"The length of the response should be {n}"

    def validator(value):
        if _length(value) != n:
            return message
        return None

    return validator


def min_selected(n, message=None):
    """Rejects a MultiSelect answer with fewer than n items."""
    if message is None:
        message = f"Please select at least {n} option" + ("s" if n != 1 else "")
    return min_length(n, message)


def max_selected(n, message=None):
    """Rejects a MultiSelect answer with more than n items."""
    if message is None:
        message = f"Please select at most {n} option" + ("s" if n != 1 else "")
    return max_length(n, message)


def _validate(validators, value):
    # Raises ValidationFailed with the message of the first validator that
    # rejects 'value'

    for validator in validators:
        err = validator(value)
        if err:
            raise ValidationFailed(err)


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------


class OptionAnswer:
    """
    An item chosen in a Select or MultiSelect prompt.

    index:
      Index of the item in the list passed to the prompt.

    value:
      The item itself.
    """

    __slots__ = ("index", "value")

    def __init__(self, index, value):
        self.index = index
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, OptionAnswer):
            return NotImplemented
        return self.index == other.index and self.value == other.value

    def __hash__(self):
        return hash((self.index, self.value))

    def __str__(self):
        return str(self.value)

    def __repr__(self):
        return f"OptionAnswer({self.index}, {self.value!r})"


class Answer:
    """
    Result of a prompt: one of TEXT (a str), BOOL, OPTION (an OptionAnswer),
    or OPTIONS (a list of OptionAnswer in list order).
    """

    __slots__ = ("kind", "value")

    TEXT = "text"
    BOOL = "bool"
    OPTION = "option"
    OPTIONS = "options"

    def __init__(self, kind, value):
        self.kind = kind
        self.value = value

    @staticmethod
    def text(s):
        return Answer(Answer.TEXT, s)

    @staticmethod
    def boolean(b):
        return Answer(Answer.BOOL, b)

    @staticmethod
    def option(opt):
        return Answer(Answer.OPTION, opt)

    @staticmethod
    def options(opts):
        return Answer(Answer.OPTIONS, opts)

    def __eq__(self, other):
        if not isinstance(other, Answer):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __repr__(self):
        return f"Answer({self.kind!r}, {self.value!r})"


# ---------------------------------------------------------------------------
# Prompt loop
# ---------------------------------------------------------------------------


def _run_prompt(state, renderer):
    # The loop shared by all prompt kinds. 'state' provides render(),
    # on_change(), get_final_answer(), format_answer(), and the 'message' and
    # 'error' attributes.
    #
    # get_final_answer() returns an Answer, raises ValidationFailed, or
    # returns None if there's nothing to submit yet.

    while True:
        state.render(renderer)

        key = renderer.read_key()

        if key.kind == Key.CANCEL:
            raise OperationCanceled()

        if key.kind == Key.SUBMIT:
            try:
                answer = state.get_final_answer()
            except ValidationFailed as e:
                state.error = e.message
                continue

            if answer is not None:
                break

        elif key.kind == Key.HELP:
            renderer.toggle_help()

        else:
            state.on_change(key)

    renderer.cleanup(state.message, state.format_answer(answer))
    return answer


def _prompt_on_terminal(options):
    # Runs a prompt on the real terminal. Styles are loaded first, since
    # style warnings can't be printed once raw mode is on.

    styles = styles_from_environment()
    with Terminal() as term:
        return options.prompt_with_renderer(Renderer(term, styles))


class _Options:
    # Builder methods shared by all prompt kinds

    def with_help_message(self, message):
        """Sets the help message shown below the question."""
        self.help_message = message
        return self

    def with_formatter(self, formatter):
        """Sets the function that formats the answer for the final line."""
        self.formatter = formatter
        return self

    def with_validator(self, validator):
        """Adds a validator. Validators run in the order they were added."""
        self.validators.append(validator)
        return self

    def with_validators(self, validators):
        """Adds each of the validators in 'validators'."""
        self.validators.extend(validators)
        return self

    def prompt(self):
        """
        Prompts the user on the terminal and returns the answer.

        Raises OperationCanceled if the user cancels, and TerminalError if
        the terminal can't be used.
        """
        return _prompt_on_terminal(self)


def _graphemes(s):
    return list(grapheme.graphemes(s))


# ---------------------------------------------------------------------------
# Password
# ---------------------------------------------------------------------------


class Password(_Options):
    """
    Prompts for a secret. The typed text is never echoed, and the final line
    shows the formatted answer (by default a fixed mask) instead of the text.

    The returned value is always the text as typed.
    """

    DEFAULT_FORMATTER = staticmethod(lambda _: _DEFAULT_MASK)
    DEFAULT_HELP_MESSAGE = None

    def __init__(self, message):
        self.message = message
        self.help_message = Password.DEFAULT_HELP_MESSAGE
        self.formatter = Password.DEFAULT_FORMATTER
        self.validators = []

    def prompt_with_renderer(self, renderer):
        return _PasswordPrompt(self).prompt(renderer).value


class _PasswordPrompt:
    def __init__(self, options):
        self.message = options.message
        self.help_message = options.help_message
        self.formatter = options.formatter
        self.validators = list(options.validators)
        self.content = ""
        self.error = None

    def on_change(self, key):
        if key.kind == Key.BACKSPACE:
            self.content = "".join(_graphemes(self.content)[:-1])

        elif key.kind == Key.CHAR and key.modifiers == Modifier.NONE:
            self.content += key.char

    def get_final_answer(self):
        _validate(self.validators, self.content)
        return Answer.text(self.content)

    def format_answer(self, answer):
        return self.formatter(answer.value)

    def render(self, renderer):
        renderer.reset_prompt()

        if self.error is not None:
            renderer.print_error_message(self.error)

        renderer.print_prompt(self.message)

        if self.help_message is not None:
            renderer.print_help(self.help_message)

        renderer.flush()

    def prompt(self, renderer):
        return _run_prompt(self, renderer)


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def _is_word(g):
    return re.match(r"\w", g) is not None


class _LineInput:
    # Editable line of text with a cursor. The cursor is an index into the
    # grapheme clusters of the text.

    def __init__(self, text=""):
        self._g = _graphemes(text)
        self.cursor = len(self._g)

    @property
    def content(self):
        return "".join(self._g)

    def set(self, text):
        self._g = _graphemes(text)
        self.cursor = len(self._g)

    def split(self):
        # Returns the text before the cursor, the grapheme under the cursor
        # ("" at the end), and the text after it
        return (
            "".join(self._g[: self.cursor]),
            self._g[self.cursor] if self.cursor < len(self._g) else "",
            "".join(self._g[self.cursor + 1 :]),
        )

    def handle(self, key):
        # Implements text editing commands. Returns True if the text changed.

        g = self._g
        i = self.cursor
        kind = key.kind
        ctrl = kind == Key.CHAR and key.modifiers == Modifier.CTRL

        if kind == Key.LEFT:
            self.cursor = max(i - 1, 0)

        elif kind == Key.RIGHT:
            self.cursor = min(i + 1, len(g))

        elif kind == Key.HOME or (ctrl and key.char == "a"):
            self.cursor = 0

        elif kind == Key.END or (ctrl and key.char == "e"):
            self.cursor = len(g)

        elif kind == Key.BACKSPACE:
            if i == 0:
                return False
            del g[i - 1]
            self.cursor = i - 1
            return True

        elif kind == Key.DELETE:
            if i == len(g):
                return False
            del g[i]
            return True

        elif ctrl and key.char == "w":
            # Deletes trailing whitespace and then either a run of word
            # characters or a single non-word character
            new_i = i
            while new_i and g[new_i - 1].isspace():
                new_i -= 1
            if new_i and _is_word(g[new_i - 1]):
                while new_i and _is_word(g[new_i - 1]):
                    new_i -= 1
            elif new_i:
                new_i -= 1
            if new_i == i:
                return False
            del g[new_i:i]
            self.cursor = new_i
            return True

        elif ctrl and key.char == "k":
            if i == len(g):
                return False
            del g[i:]
            return True

        elif ctrl and key.char == "u":
            if i == 0:
                return False
            del g[:i]
            self.cursor = 0
            return True

        elif kind == Key.CHAR and not key.modifiers & (Modifier.CTRL | Modifier.ALT):
            # Resegment around the insertion point, since the new code point
            # might extend the grapheme before it (e.g. a combining mark or a
            # zero-width joiner)
            before = "".join(g[:i]) + key.char
            after = g[i:]
            self._g = _graphemes(before) + after
            self.cursor = len(self._g) - len(after)
            return True

        return False


class Text(_Options):
    """
    Prompts for a line of text. The text is edited in place with a visible
    cursor.
    """

    DEFAULT_FORMATTER = staticmethod(lambda text: text)
    DEFAULT_HELP_MESSAGE = None
    DEFAULT_PAGE_SIZE = _DEFAULT_PAGE_SIZE

    def __init__(self, message):
        self.message = message
        self.help_message = Text.DEFAULT_HELP_MESSAGE
        self.formatter = Text.DEFAULT_FORMATTER
        self.validators = []
        self.default = None
        self.placeholder = None
        self.initial_value = ""
        self.suggester = None
        self.page_size = Text.DEFAULT_PAGE_SIZE
        self.history = []

    def with_default(self, default):
        """
        Sets the answer used when the user submits without typing anything.
        The default is returned as is, without running validators.
        """
        self.default = default
        return self

    def with_placeholder(self, placeholder):
        """Sets a hint shown while the input is empty."""
        self.placeholder = placeholder
        return self

    def with_initial_value(self, text):
        """Sets editable text the input starts with."""
        self.initial_value = text
        return self

    def with_suggester(self, suggester):
        """
        Sets a function that maps the current input to a list of suggested
        answers, shown below the question.
        """
        self.suggester = suggester
        return self

    def with_page_size(self, page_size):
        """Sets how many suggestions are shown at once."""
        if page_size < 1:
            raise InvalidConfiguration(f"page size must be positive, not {page_size}")
        self.page_size = page_size
        return self

    def with_history(self, entries):
        """
        Sets previous answers, oldest first, that Up/Down step through when
        no suggestions are shown.
        """
        self.history = list(entries)
        return self

    def prompt_with_renderer(self, renderer):
        return _TextPrompt(self).prompt(renderer).value


class _TextPrompt:
    def __init__(self, options):
        self.message = options.message
        self.help_message = options.help_message
        self.formatter = options.formatter
        self.validators = list(options.validators)
        self.default = options.default
        self.placeholder = options.placeholder
        self.suggester = options.suggester
        self.page_size = options.page_size
        self.history = options.history
        self.error = None

        self.input = _LineInput(options.initial_value)

        # Index into 'history' of the recalled entry, or None while editing
        # the draft
        self.history_i = None
        self.draft = ""

        self.suggestions = []
        self.suggestion_i = 0
        self._update_suggestions()

    def _update_suggestions(self):
        if self.suggester is None:
            return
        self.suggestions = list(self.suggester(self.input.content))
        self.suggestion_i = 0

    def _recall(self, i):
        if self.history_i is None:
            self.draft = self.input.content
        self.history_i = i
        self.input.set(self.draft if i is None else self.history[i])
        self._update_suggestions()

    def on_change(self, key):
        kind = key.kind

        if self.suggestions and kind in (Key.UP, Key.DOWN):
            step = -1 if kind == Key.UP else 1
            self.suggestion_i = (self.suggestion_i + step) % len(self.suggestions)

        elif self.suggestions and kind == Key.TAB:
            self.input.set(self.suggestions[self.suggestion_i])
            self._update_suggestions()

        elif kind == Key.UP:
            if self.history:
                if self.history_i is None:
                    self._recall(len(self.history) - 1)
                elif self.history_i:
                    self._recall(self.history_i - 1)

        elif kind == Key.DOWN:
            if self.history_i is not None:
                if self.history_i + 1 < len(self.history):
                    self._recall(self.history_i + 1)
                else:
                    self._recall(None)

        elif self.input.handle(key):
            self.history_i = None
            self._update_suggestions()

    def get_final_answer(self):
        content = self.input.content
        if not content and self.default is not None:
            return Answer.text(self.default)

        _validate(self.validators, content)
        return Answer.text(content)

    def format_answer(self, answer):
        return self.formatter(answer.value)

    def render(self, renderer):
        renderer.reset_prompt()

        if self.error is not None:
            renderer.print_error_message(self.error)

        before, at, after = self.input.split()
        empty = not (before or at)
        renderer.print_prompt_with_cursor(
            self.message,
            self.default if empty else None,
            before,
            at,
            after,
            self.placeholder,
        )

        if self.help_message is not None:
            renderer.print_help(self.help_message)
        elif self.suggestions:
            renderer.print_help(_SUGGESTIONS_HELP)

        start, shown = _page(self.suggestions, self.suggestion_i, self.page_size)
        for i, suggestion in enumerate(shown, start):
            renderer.print_option(i == self.suggestion_i, suggestion)

        renderer.flush()

    def prompt(self, renderer):
        return _run_prompt(self, renderer)


# ---------------------------------------------------------------------------
# Confirm
# ---------------------------------------------------------------------------


def _bool_formatter(value):
    return "Yes" if value else "No"


class Confirm(_Options):
    """
    Asks a yes/no question. The yes/no keys are matched case-insensitively.
    Submitting without an answer uses the default, or shows an error if there
    is no default.
    """

    DEFAULT_FORMATTER = staticmethod(_bool_formatter)
    DEFAULT_HELP_MESSAGE = None
    DEFAULT_YES_KEY = "y"
    DEFAULT_NO_KEY = "n"

    def __init__(self, message):
        self.message = message
        self.help_message = Confirm.DEFAULT_HELP_MESSAGE
        self.formatter = Confirm.DEFAULT_FORMATTER
        self.validators = []
        self.default = None
        self.yes_key = Confirm.DEFAULT_YES_KEY
        self.no_key = Confirm.DEFAULT_NO_KEY

    def with_default(self, default):
        """Sets the answer used on Enter. None removes the default."""
        self.default = None if default is None else bool(default)
        return self

    def with_keys(self, yes, no):
        """Sets the keys that answer yes and no, e.g. with_keys("j", "n")."""
        yes = yes.lower()
        no = no.lower()
        if len(yes) != 1 or len(no) != 1:
            raise InvalidConfiguration("yes/no keys must be single characters")
        if yes == no:
            raise InvalidConfiguration(f"yes and no can't both be '{yes}'")
        self.yes_key = yes
        self.no_key = no
        return self

    def prompt_with_renderer(self, renderer):
        return _ConfirmPrompt(self).prompt(renderer).value


class _ConfirmPrompt:
    def __init__(self, options):
        self.message = options.message
        self.help_message = options.help_message
        self.formatter = options.formatter
        self.validators = list(options.validators)
        self.default = options.default
        self.yes_key = options.yes_key
        self.no_key = options.no_key
        self.error = None

        # None until the user answers
        self.value = None

    def on_change(self, key):
        if key.kind == Key.CHAR and not key.modifiers & (Modifier.CTRL | Modifier.ALT):
            c = key.char.lower()
            if c == self.yes_key:
                self.value = True
            elif c == self.no_key:
                self.value = False

        elif key.kind in (Key.BACKSPACE, Key.DELETE):
            self.value = None

    def get_final_answer(self):
        value = self.value if self.value is not None else self.default
        if value is None:
            raise ValidationFailed(f"Please answer {self.yes_key} or {self.no_key}")

        _validate(self.validators, value)
        return Answer.boolean(value)

    def format_answer(self, answer):
        return self.formatter(answer.value)

    def _default_hint(self):
        y, n = self.yes_key, self.no_key
        if self.default is True:
            return f"{y.upper()}/{n}"
        if self.default is False:
            return f"{y}/{n.upper()}"
        return f"{y}/{n}"

    def render(self, renderer):
        renderer.reset_prompt()

        if self.error is not None:
            renderer.print_error_message(self.error)

        if self.value is None:
            content = None
        else:
            content = self.yes_key if self.value else self.no_key
        renderer.print_prompt(self.message, self._default_hint(), content)

        if self.help_message is not None:
            renderer.print_help(self.help_message)

        renderer.flush()

    def prompt(self, renderer):
        return _run_prompt(self, renderer)


# ---------------------------------------------------------------------------
# List navigation, shared by Select and MultiSelect
# ---------------------------------------------------------------------------


def _default_filter(filter_text, item):
    return filter_text.lower() in str(item).lower()


def _page(lst, cursor, page_size):
    # Returns (start, items) for the page of 'lst' to show, scrolled so that
    # 'cursor' stays near the middle when possible

    if len(lst) <= page_size:
        return 0, lst

    start = min(max(cursor - page_size // 2, 0), len(lst) - page_size)
    return start, lst[start : start + page_size]


class _ListView:
    # Filtered view of a list of items with a cursor. The cursor is an index
    # into 'shown', which holds the indices of the items matching the filter.
    #
    # Up/Down wrap around at the ends of the list. PageUp/PageDown stop at
    # the ends.

    def __init__(self, items, filter_fn, page_size, cursor=0):
        self.items = items
        self.filter_fn = filter_fn
        self.page_size = page_size
        self.filter_text = ""
        self.shown = list(range(len(items)))
        self.cursor = cursor

    def current(self):
        # Index in 'items' of the highlighted item, or None if no item
        # matches the filter
        if not self.shown:
            return None
        return self.shown[self.cursor]

    def set_filter(self, text):
        self.filter_text = text
        self.shown = [
            i for i, item in enumerate(self.items) if self.filter_fn(text, item)
        ]
        self.cursor = 0

    def page(self):
        return _page(self.shown, self.cursor, self.page_size)

    def handle_navigation(self, key):
        # Returns True if 'key' was a navigation key

        n = len(self.shown)
        kind = key.kind

        if kind == Key.UP:
            if n:
                self.cursor = (self.cursor - 1) % n
        elif kind == Key.DOWN:
            if n:
                self.cursor = (self.cursor + 1) % n
        elif kind == Key.PAGE_UP:
            self.cursor = max(self.cursor - self.page_size, 0)
        elif kind == Key.PAGE_DOWN:
            self.cursor = max(min(self.cursor + self.page_size, n - 1), 0)
        elif kind == Key.HOME:
            self.cursor = 0
        elif kind == Key.END:
            self.cursor = max(n - 1, 0)
        else:
            return False

        return True

    def handle_filter(self, key):
        # Returns True if 'key' edited the filter

        if key.kind == Key.BACKSPACE:
            if not self.filter_text:
                return False
            self.set_filter("".join(_graphemes(self.filter_text)[:-1]))
            return True

        if key.kind == Key.CHAR and key.modifiers == Modifier.NONE:
            self.set_filter(self.filter_text + key.char)
            return True

        return False


def _check_options(options):
    options = list(options)
    if not options:
        raise InvalidConfiguration("Available options can not be empty")
    return options


def _check_page_size(page_size):
    if page_size < 1:
        raise InvalidConfiguration(f"page size must be positive, not {page_size}")
    return page_size


# ---------------------------------------------------------------------------
# Select
# ---------------------------------------------------------------------------


class Select(_Options):
    """
    Asks the user to choose one item from a list. The answer is an
    OptionAnswer with the index and value of the chosen item.

    options:
      Non-empty sequence of items. Items are displayed with str().
    """

    DEFAULT_FORMATTER = staticmethod(str)
    DEFAULT_HELP_MESSAGE = _SELECT_HELP
    DEFAULT_PAGE_SIZE = _DEFAULT_PAGE_SIZE
    DEFAULT_FILTER = staticmethod(_default_filter)

    def __init__(self, message, options):
        self.message = message
        self.options = _check_options(options)
        self.help_message = Select.DEFAULT_HELP_MESSAGE
        self.formatter = Select.DEFAULT_FORMATTER
        self.validators = []
        self.page_size = Select.DEFAULT_PAGE_SIZE
        self.filter = Select.DEFAULT_FILTER
        self.starting_cursor = 0

    def with_page_size(self, page_size):
        self.page_size = _check_page_size(page_size)
        return self

    def with_filter(self, filter_fn):
        """
        Sets the function that decides which items match the typed filter.
        It's called as filter_fn(filter_text, item) and returns a bool.
        """
        self.filter = filter_fn
        return self

    def with_starting_cursor(self, index):
        if not 0 <= index < len(self.options):
            raise InvalidConfiguration(
                f"starting cursor {index} is outside the {len(self.options)} options"
            )
        self.starting_cursor = index
        return self

    def prompt_with_renderer(self, renderer):
        return _SelectPrompt(self).prompt(renderer).value


class _SelectPrompt:
    def __init__(self, options):
        self.message = options.message
        self.help_message = options.help_message
        self.formatter = options.formatter
        self.validators = list(options.validators)
        self.error = None

        self.view = _ListView(
            options.options, options.filter, options.page_size, options.starting_cursor
        )

    def on_change(self, key):
        if not self.view.handle_navigation(key):
            self.view.handle_filter(key)

    def get_final_answer(self):
        i = self.view.current()
        if i is None:
            return None

        answer = OptionAnswer(i, self.view.items[i])
        _validate(self.validators, answer)
        return Answer.option(answer)

    def format_answer(self, answer):
        return self.formatter(answer.value)

    def render(self, renderer):
        renderer.reset_prompt()

        if self.error is not None:
            renderer.print_error_message(self.error)

        renderer.print_prompt(self.message, content=self.view.filter_text, element="filter")

        if self.help_message is not None:
            renderer.print_help(self.help_message)

        start, shown = self.view.page()
        if not shown:
            renderer.print_line(_NO_MATCHES, "placeholder")
        for pos, i in enumerate(shown, start):
            renderer.print_option(pos == self.view.cursor, str(self.view.items[i]))

        renderer.flush()

    def prompt(self, renderer):
        return _run_prompt(self, renderer)


# ---------------------------------------------------------------------------
# MultiSelect
# ---------------------------------------------------------------------------


def _multi_formatter(answers):
    return ", ".join(str(answer.value) for answer in answers)


class MultiSelect(_Options):
    """
    Asks the user to choose any number of items from a list. The answer is a
    list of OptionAnswer, in list order.

    Validators receive that list, so e.g. min_selected(1) requires at least
    one item.
    """

    DEFAULT_FORMATTER = staticmethod(_multi_formatter)
    DEFAULT_HELP_MESSAGE = _MULTISELECT_HELP
    DEFAULT_PAGE_SIZE = _DEFAULT_PAGE_SIZE
    DEFAULT_FILTER = staticmethod(_default_filter)
    DEFAULT_KEEP_FILTER = True

    def __init__(self, message, options):
        self.message = message
        self.options = _check_options(options)
        self.help_message = MultiSelect.DEFAULT_HELP_MESSAGE
        self.formatter = MultiSelect.DEFAULT_FORMATTER
        self.validators = []
        self.page_size = MultiSelect.DEFAULT_PAGE_SIZE
        self.filter = MultiSelect.DEFAULT_FILTER
        self.keep_filter = MultiSelect.DEFAULT_KEEP_FILTER
        self.default = []
        self.starting_cursor = 0

    def with_page_size(self, page_size):
        self.page_size = _check_page_size(page_size)
        return self

    def with_filter(self, filter_fn):
        """See Select.with_filter()."""
        self.filter = filter_fn
        return self

    def with_keep_filter(self, keep_filter):
        """If False, the filter is cleared each time an item is toggled."""
        self.keep_filter = keep_filter
        return self

    def with_default(self, indices):
        """Sets the indices of the items that start out selected."""
        indices = list(indices)
        for i in indices:
            if not 0 <= i < len(self.options):
                raise InvalidConfiguration(
                    f"default index {i} is outside the {len(self.options)} options"
                )
        self.default = indices
        return self

    def with_starting_cursor(self, index):
        if not 0 <= index < len(self.options):
            raise InvalidConfiguration(
                f"starting cursor {index} is outside the {len(self.options)} options"
            )
        self.starting_cursor = index
        return self

    def prompt_with_renderer(self, renderer):
        return _MultiSelectPrompt(self).prompt(renderer).value


class _MultiSelectPrompt:
    def __init__(self, options):
        self.message = options.message
        self.help_message = options.help_message
        self.formatter = options.formatter
        self.validators = list(options.validators)
        self.keep_filter = options.keep_filter
        self.error = None

        self.view = _ListView(
            options.options, options.filter, options.page_size, options.starting_cursor
        )
        self.selected = set(options.default)

    def on_change(self, key):
        view = self.view

        if key.kind == Key.CHAR and key.char == " " and key.modifiers == Modifier.NONE:
            i = view.current()
            if i is not None:
                self.selected ^= {i}
                if not self.keep_filter:
                    view.set_filter("")

        elif key.kind == Key.RIGHT:
            self.selected.update(view.shown)

        elif key.kind == Key.LEFT:
            self.selected.difference_update(view.shown)

        elif not view.handle_navigation(key):
            view.handle_filter(key)

    def get_final_answer(self):
        answers = [OptionAnswer(i, self.view.items[i]) for i in sorted(self.selected)]
        _validate(self.validators, answers)
        return Answer.options(answers)

    def format_answer(self, answer):
        return self.formatter(answer.value)

    def render(self, renderer):
        renderer.reset_prompt()

        if self.error is not None:
            renderer.print_error_message(self.error)

        renderer.print_prompt(self.message, content=self.view.filter_text, element="filter")

        if self.help_message is not None:
            renderer.print_help(self.help_message)

        start, shown = self.view.page()
        if not shown:
            renderer.print_line(_NO_MATCHES, "placeholder")
        for pos, i in enumerate(shown, start):
            renderer.print_multi_option(
                pos == self.view.cursor, i in self.selected, str(self.view.items[i])
            )

        renderer.flush()

    def prompt(self, renderer):
        return _run_prompt(self, renderer)
