# Copyright (c) 2026 rawprompt contributors
# SPDX-License-Identifier: ISC
#
# Tests for the built-in validators and the Answer types.

from rawprompt import (
    Answer,
    OperationCanceled,
    OptionAnswer,
    PromptError,
    TerminalError,
    ValidationFailed,
    length,
    max_length,
    max_selected,
    min_length,
    min_selected,
    required,
)


def test_required():
    validator = required()
    assert validator("") == "A response is required"
    assert validator([]) == "A response is required"
    assert validator("x") is None
    assert validator([OptionAnswer(0, "a")]) is None


def test_required_custom_message():
    assert required("Say something")("") == "Say something"


def test_min_length():
    validator = min_length(3)
    assert validator("ab") == "The length of the response should be at least 3"
    assert validator("abc") is None
    assert validator("abcd") is None


def test_max_length():
    validator = max_length(3)
    assert validator("abcd") == "The length of the response should be at most 3"
    assert validator("abc") is None
    assert validator("") is None


def test_length():
    validator = length(4, "PIN must have 4 digits")
    assert validator("123") == "PIN must have 4 digits"
    assert validator("12345") == "PIN must have 4 digits"
    assert validator("1234") is None


def test_lengths_count_graphemes():
    # Each of these is a single user-perceived character
    assert length(1)("🧘🏻‍♂️") is None
    assert length(1)("🇫🇷") is None
    assert length(1)("e\u0301") is None
    assert max_length(2)("中文") is None


def test_min_selected():
    one = [OptionAnswer(0, "a")]
    assert min_selected(1)([]) == "Please select at least 1 option"
    assert min_selected(2)(one) == "Please select at least 2 options"
    assert min_selected(1)(one) is None


def test_max_selected():
    two = [OptionAnswer(0, "a"), OptionAnswer(1, "b")]
    assert max_selected(1)(two) == "Please select at most 1 option"
    assert max_selected(2)(two) is None


def test_option_answer():
    answer = OptionAnswer(2, "blue")
    assert answer.index == 2
    assert answer.value == "blue"
    assert str(answer) == "blue"
    assert repr(answer) == "OptionAnswer(2, 'blue')"
    assert answer == OptionAnswer(2, "blue")
    assert answer != OptionAnswer(1, "blue")


def test_answer():
    assert Answer.text("x") == Answer(Answer.TEXT, "x")
    assert Answer.boolean(True).kind == Answer.BOOL
    assert Answer.option(OptionAnswer(0, "a")).value == OptionAnswer(0, "a")
    assert Answer.options([]).kind == Answer.OPTIONS
    assert Answer.text("x") != Answer.text("y")
    assert repr(Answer.boolean(False)) == "Answer('bool', False)"


def test_error_hierarchy():
    assert issubclass(OperationCanceled, PromptError)
    assert issubclass(ValidationFailed, PromptError)
    assert not issubclass(TerminalError, PromptError)

    assert str(OperationCanceled()) == "Operation was canceled by the user"
    assert ValidationFailed("nope").message == "nope"
