#!/usr/bin/env python3

# Copyright (c) 2026 rawprompt contributors
# SPDX-License-Identifier: ISC

"""
Asks a single question on the terminal and prints the answer on stdout, for
use in shell scripts.

Sample usage:

  $ name=$(rawask text "Project name?" --default demo)
  $ rawask confirm "Overwrite config?" --default no && cp new.cfg app.cfg
  $ rawask select "Target?" debug release
  $ rawask multiselect "Features?" ssl zlib lz4 --required

Answers are printed as follows: text and password as typed, confirm as
'yes' or 'no', select as the chosen item, and multiselect as one chosen item
per line.

The question itself is drawn on the terminal, not on stdout, so command
substitution as above works.

The exit status is 1 if the user cancels or the terminal can't be used. For
confirm, --status makes the exit status 0 for yes and 1 for no instead of
printing the answer.
"""

import argparse
import sys

import rawprompt


def _build(args):
    # Returns the prompt options object for the parsed command line

    kind = args.kind

    if kind in ("text", "password"):
        if args.items:
            sys.exit(f"error: {kind} prompts take no items")

        if kind == "text":
            options = rawprompt.Text(args.message)
            if args.default is not None:
                options.with_default(args.default)
            if args.placeholder is not None:
                options.with_placeholder(args.placeholder)
        else:
            options = rawprompt.Password(args.message)
            if args.default is not None:
                sys.exit("error: password prompts have no default")

        if args.required:
            options.with_validator(rawprompt.required())
        if args.min_length is not None:
            options.with_validator(rawprompt.min_length(args.min_length))
        if args.max_length is not None:
            options.with_validator(rawprompt.max_length(args.max_length))

    elif kind == "confirm":
        if args.items:
            sys.exit("error: confirm prompts take no items")

        options = rawprompt.Confirm(args.message)
        if args.default is not None:
            if args.default.lower() in ("y", "yes", "true", "1"):
                options.with_default(True)
            elif args.default.lower() in ("n", "no", "false", "0"):
                options.with_default(False)
            else:
                sys.exit(f"error: '{args.default}' is not a yes/no value")

    else:
        if not args.items:
            sys.exit(f"error: {kind} prompts need at least one item")

        if kind == "select":
            options = rawprompt.Select(args.message, args.items)
            if args.default is not None:
                if args.default not in args.items:
                    sys.exit(f"error: default '{args.default}' is not one of the items")
                options.with_starting_cursor(args.items.index(args.default))
        else:
            options = rawprompt.MultiSelect(args.message, args.items)
            if args.required:
                options.with_validator(rawprompt.min_selected(1))
            if args.default is not None:
                defaults = args.default.split(",")
                for item in defaults:
                    if item not in args.items:
                        sys.exit(f"error: default '{item}' is not one of the items")
                options.with_default(args.items.index(item) for item in defaults)

    if args.help_message is not None:
        options.with_help_message(args.help_message)

    return options


def _answer_lines(kind, answer):
    # Returns the lines to print for 'answer'

    if kind == "confirm":
        return ["yes" if answer else "no"]
    if kind == "select":
        return [answer.value]
    if kind == "multiselect":
        return [option.value for option in answer]
    return [answer]


def main(argv=None):
    parser = argparse.ArgumentParser(
        formatter_class=argparse.RawDescriptionHelpFormatter, description=__doc__
    )

    parser.add_argument(
        "kind",
        choices=("text", "password", "confirm", "select", "multiselect"),
        help="Kind of prompt",
    )

    parser.add_argument("message", help="The question to ask")

    parser.add_argument(
        "items", metavar="ITEM", nargs="*", help="Items to choose from (select/multiselect)"
    )

    parser.add_argument("--help-message", help="Help text shown below the question")

    parser.add_argument(
        "--default",
        help="Default answer. For multiselect, a comma-separated list of items "
        "selected from the start. For select, the item highlighted first.",
    )

    parser.add_argument(
        "--placeholder", help="Hint shown while a text prompt is empty"
    )

    parser.add_argument(
        "--required",
        action="store_true",
        help="Reject empty text, or an empty multiselect selection",
    )

    parser.add_argument(
        "--min-length", type=int, metavar="N", help="Reject text shorter than N"
    )

    parser.add_argument(
        "--max-length", type=int, metavar="N", help="Reject text longer than N"
    )

    parser.add_argument(
        "--status",
        action="store_true",
        help="For confirm: report the answer through the exit status only",
    )

    args = parser.parse_args(argv)

    if args.status and args.kind != "confirm":
        sys.exit("error: --status only applies to confirm prompts")

    if args.placeholder is not None and args.kind != "text":
        sys.exit("error: --placeholder only applies to text prompts")

    for opt, val in ("--min-length", args.min_length), ("--max-length", args.max_length):
        if val is not None and args.kind not in ("text", "password"):
            sys.exit(f"error: {opt} only applies to text and password prompts")

    if args.required and args.kind in ("confirm", "select"):
        sys.exit(f"error: --required doesn't apply to {args.kind} prompts")

    options = _build(args)

    try:
        answer = options.prompt()
    except rawprompt.OperationCanceled:
        sys.exit("error: canceled")
    except rawprompt.TerminalError as e:
        sys.exit(f"error: {e}")

    if args.status:
        sys.exit(0 if answer else 1)

    for line in _answer_lines(args.kind, answer):
        print(line)


if __name__ == "__main__":
    main()
