# Copyright (c) 2026 rawprompt contributors
# SPDX-License-Identifier: ISC
#
# Renderer tests: row bookkeeping (soft wraps, wide characters), the escape
# sequences used to redraw a frame, and styling.

from promptterm import ScriptedTerminal
from rawprompt import Key, Renderer, load_styles
from conftest import plain_output


def _renderer(width=80, styles=None, script=()):
    term = ScriptedTerminal(script, width=width)
    return Renderer(term, styles), term


def _out(term):
    return term.output.getvalue()


def test_cursor_hidden_on_creation():
    _, term = _renderer()
    assert _out(term) == "\x1b[?25l"


def test_rows_counted():
    renderer, _ = _renderer()
    assert renderer.painted_rows == 0

    renderer.print_prompt("Question?")
    assert renderer.painted_rows == 1

    renderer.print_help("help")
    renderer.print_option(True, "a")
    renderer.print_option(False, "b")
    assert renderer.painted_rows == 4


def test_reset_erases_previous_frame():
    renderer, term = _renderer()
    renderer.print_prompt("Question?")
    renderer.print_help("help")

    term.output.truncate(0)
    term.output.seek(0)
    renderer.reset_prompt()

    assert _out(term) == "\r\x1b[2A\x1b[J"
    assert renderer.painted_rows == 0


def test_reset_without_frame_writes_nothing():
    renderer, term = _renderer()
    renderer.reset_prompt()
    assert _out(term) == "\x1b[?25l"


def test_soft_wrapped_rows():
    renderer, _ = _renderer(width=10)

    renderer.print_line("x" * 25)
    assert renderer.painted_rows == 3

    # Exactly as wide as the terminal: no extra row
    renderer.print_line("y" * 10)
    assert renderer.painted_rows == 4

    renderer.print_line("z" * 11)
    assert renderer.painted_rows == 6


def test_empty_line_takes_one_row():
    renderer, _ = _renderer(width=10)
    renderer.print_line("")
    assert renderer.painted_rows == 1


def test_wide_characters():
    renderer, _ = _renderer(width=10)

    # 6 double-width characters are 12 cells
    renderer.print_line("中" * 6)
    assert renderer.painted_rows == 2

    # Combining marks take no cells
    renderer.print_line("e\u0301" * 10)
    assert renderer.painted_rows == 3


def test_wide_character_moved_to_next_row():
    renderer, term = _renderer(width=4, styles={})

    # A 2-cell character never straddles a row boundary. The terminal moves
    # it to the next row, so this is "xxx", "中xx", "中x", "中" on 4 rows.
    renderer.print_line("xxx中xx中x中")
    assert renderer.painted_rows == 4

    term.output.truncate(0)
    term.output.seek(0)
    renderer.reset_prompt()
    assert _out(term) == "\r\x1b[4A\x1b[J"


def test_wrapped_frame_reset():
    renderer, term = _renderer(width=10)
    renderer.print_prompt("a fairly long question")

    term.output.truncate(0)
    term.output.seek(0)
    renderer.reset_prompt()

    # "? a fairly long question" is 24 cells, 3 rows
    assert _out(term) == "\r\x1b[3A\x1b[J"


def test_multiline_text():
    renderer, _ = _renderer()
    renderer.print_line("one\ntwo\nthree")
    assert renderer.painted_rows == 3


def test_print_prompt():
    renderer, term = _renderer()
    renderer.print_prompt("Continue?", "Y/n", "y")
    assert plain_output(term) == "? Continue? (Y/n) y\n"


def test_print_prompt_with_cursor():
    renderer, term = _renderer()
    renderer.print_prompt_with_cursor("Name?", None, "ab", "c", "d")
    assert plain_output(term) == "? Name? abcd\n"


def test_print_prompt_with_cursor_at_end():
    renderer, term = _renderer()
    renderer.print_prompt_with_cursor("Name?", None, "abc", "", "")
    # The cursor is drawn as a space after the text
    assert plain_output(term) == "? Name? abc \n"


def test_placeholder_only_when_empty():
    renderer, term = _renderer()
    renderer.print_prompt_with_cursor("Name?", placeholder="e.g. Bob")
    renderer.print_prompt_with_cursor("Name?", None, "x", placeholder="e.g. Bob")
    assert plain_output(term) == "? Name?  e.g. Bob\n? Name? x \n"


def test_error_and_options():
    renderer, term = _renderer()
    renderer.print_error_message("Bad")
    renderer.print_option(True, "one")
    renderer.print_option(False, "two")
    renderer.print_multi_option(False, True, "three")
    renderer.print_multi_option(True, False, "four")

    assert plain_output(term) == (
        "# Bad\n" "> one\n" "  two\n" "  [x] three\n" "> [ ] four\n"
    )


def test_help_toggle():
    renderer, term = _renderer()
    assert renderer.help_visible

    renderer.toggle_help()
    renderer.print_help("hidden")
    assert renderer.painted_rows == 0

    renderer.toggle_help()
    renderer.print_help("shown")
    assert plain_output(term) == "[shown]\n"


def test_cleanup():
    renderer, term = _renderer(styles={})
    renderer.print_prompt("Name?")
    renderer.print_help("help")
    renderer.cleanup("Name?", "Bob")

    assert renderer.painted_rows == 0
    assert _out(term).endswith("\r\x1b[2A\x1b[J? Name? Bob\r\n\x1b[?25h")

    # The final line is never erased
    term.output.truncate(0)
    term.output.seek(0)
    renderer.reset_prompt()
    assert _out(term) == "\x1b[?25l"


def test_styled_output():
    renderer, term = _renderer(styles=load_styles())
    renderer.print_error_message("Bad")
    assert "\x1b[0;31;49m# Bad\x1b[0m" in _out(term)


def test_monochrome_by_default_on_scripted_terminal():
    renderer, term = _renderer()
    renderer.print_error_message("Bad")
    assert "\x1b[0;39;49;1m# Bad\x1b[0m" in _out(term)


def test_unstyled_elements_written_plain():
    renderer, term = _renderer(styles={})
    renderer.print_prompt("Q")
    assert _out(term) == "\x1b[?25l? Q\r\n"


def test_read_key():
    renderer, _ = _renderer(script=["a\x1b[A\r"])
    assert renderer.read_key() == Key.of_char("a")
    assert renderer.read_key() == Key(Key.UP)
    assert renderer.read_key() == Key(Key.SUBMIT)
