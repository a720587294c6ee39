# Copyright (c) 2026 rawprompt contributors
# SPDX-License-Identifier: ISC

"""
promptterm -- line-oriented raw terminal I/O for rawprompt

Unlike a full-screen terminal layer, promptterm never switches to the
alternate screen and never clears the whole display. Prompts are drawn inline,
below whatever the host program printed, and redrawn by moving the cursor up
over the rows of the previous frame.

The module provides:

  - Color/Style: SGR styling for output

  - KeyEvent/KeyCode/Modifier: platform key events, as decoded from the raw
    input byte stream

  - KeyDecoder: escape sequence trie and control character decoding

  - Terminal: the real terminal. Creating one enters raw input mode, and
    close() (or leaving a 'with' block) restores the previous mode on every
    exit path

  - ScriptedTerminal: the same interface backed by a fixed list of keys and an
    in-memory output buffer, for tests

Platform support:
  - Unix (Linux, macOS): termios raw input, poll(2) for escape disambiguation
  - Windows 10 build 1511+: VT100 output and input via SetConsoleMode
"""

import atexit
import codecs
import io
import os
import shutil
import signal
import sys
import unicodedata

_IS_WINDOWS = os.name == "nt"

if not _IS_WINDOWS:
    import select
    import termios

    _TERMIOS_ERRORS = (OSError, termios.error)
else:
    _TERMIOS_ERRORS = (OSError,)

# How long to wait (in milliseconds) for the rest of an escape sequence before
# deciding that a lone ESC was pressed
ESCAPE_TIMEOUT_MS = 25


class TerminalError(Exception):
    """
    Raised when the terminal can't be set up, read from, or written to.

    rawprompt re-exports this class, so callers only ever need to catch
    rawprompt.TerminalError.
    """


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


class Color:
    """Terminal color: named constant, 256-color index, or 24-bit RGB."""

    __slots__ = ("_kind", "_value")

    # kind: "default", "named", "index", "rgb"
    def __init__(self, kind, value):
        self._kind = kind
        self._value = value

    DEFAULT = None  # assigned below

    @staticmethod
    def rgb(r, g, b):
        """Create a 24-bit RGB color."""
        return Color("rgb", (r, g, b))

    @staticmethod
    def index(n):
        """Create a color from xterm 256-color palette index."""
        return Color("index", n)

    def _sgr(self, base):
        # 'base' is 30 for foreground and 40 for background
        if self._kind == "default":
            return str(base + 9)
        if self._kind == "named":
            if self._value < 8:
                return str(base + self._value)
            return str(base + 60 + self._value - 8)
        if self._kind == "index":
            return f"{base + 8};5;{self._value}"
        r, g, b = self._value
        return f"{base + 8};2;{r};{g};{b}"

    def __eq__(self, other):
        if not isinstance(other, Color):
            return NotImplemented
        return self._kind == other._kind and self._value == other._value

    def __hash__(self):
        return hash((self._kind, self._value))

    def __repr__(self):
        if self._kind == "default":
            return "Color.DEFAULT"
        if self._kind == "named":
            return f"Color('named', {self._value})"
        if self._kind == "index":
            return f"Color.index({self._value})"
        return "Color.rgb({},{},{})".format(*self._value)


Color.DEFAULT = Color("default", None)

# Color names accepted in style definitions. Indices 0-7 are the standard
# palette, 8-15 the bright variants.
NAMED_COLORS = {}
for _i, _name in enumerate(
    ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")
):
    NAMED_COLORS[_name] = Color("named", _i)
    NAMED_COLORS["bright" + _name] = Color("named", _i + 8)
NAMED_COLORS["purple"] = NAMED_COLORS["magenta"]
NAMED_COLORS["brightpurple"] = NAMED_COLORS["brightmagenta"]
del _i, _name


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------


class Style:
    """Immutable style combining foreground, background, and attributes."""

    __slots__ = ("fg", "bg", "bold", "dim", "standout", "underline", "_sgr_cache")

    def __init__(
        self, fg=None, bg=None, bold=False, dim=False, standout=False, underline=False
    ):
        self.fg = fg if fg is not None else Color.DEFAULT
        self.bg = bg if bg is not None else Color.DEFAULT
        self.bold = bold
        self.dim = dim
        self.standout = standout
        self.underline = underline
        self._sgr_cache = None

    def sgr(self):
        """Return the SGR escape sequence string for this style."""
        if self._sgr_cache is not None:
            return self._sgr_cache

        parts = ["0", self.fg._sgr(30), self.bg._sgr(40)]
        if self.bold:
            parts.append("1")
        if self.dim:
            parts.append("2")
        if self.underline:
            parts.append("4")
        if self.standout:
            parts.append("7")

        self._sgr_cache = "\x1b[{}m".format(";".join(parts))
        return self._sgr_cache

    def _key(self):
        return (self.fg, self.bg, self.bold, self.dim, self.standout, self.underline)

    def __eq__(self, other):
        if not isinstance(other, Style):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        parts = []
        if self.fg != Color.DEFAULT:
            parts.append(f"fg={self.fg}")
        if self.bg != Color.DEFAULT:
            parts.append(f"bg={self.bg}")
        for attr in ("bold", "dim", "standout", "underline"):
            if getattr(self, attr):
                parts.append(attr)
        return "Style({})".format(", ".join(parts))


STYLE_DEFAULT = Style()

_SGR_RESET = "\x1b[0m"


# ---------------------------------------------------------------------------
# Character width
# ---------------------------------------------------------------------------


def char_width(ch):
    """Return the display width of a character in terminal cells.

    - ASCII printable (0x20-0x7E): 1 cell (fast path)
    - East Asian Wide/Fullwidth: 2 cells
    - Combining marks, format and control chars: 0 cells
    - Everything else: 1 cell
    """
    o = ord(ch)

    if 0x20 <= o <= 0x7E:
        return 1

    if o < 0x20 or 0x7F <= o < 0xA0:
        return 0

    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2

    # Combining marks, zero-width joiners and variation selectors
    if unicodedata.category(ch) in ("Mn", "Me", "Cf"):
        return 0

    return 1


# ---------------------------------------------------------------------------
# Key events
# ---------------------------------------------------------------------------


class KeyCode:
    """Named constants for non-character keys."""

    ENTER = "key_enter"
    ESC = "key_esc"
    TAB = "key_tab"
    BACKTAB = "key_backtab"
    BACKSPACE = "key_backspace"
    DELETE = "key_delete"
    INSERT = "key_insert"
    UP = "key_up"
    DOWN = "key_down"
    LEFT = "key_left"
    RIGHT = "key_right"
    HOME = "key_home"
    END = "key_end"
    PAGE_UP = "key_page_up"
    PAGE_DOWN = "key_page_down"
    F1 = "key_f1"
    F2 = "key_f2"
    F3 = "key_f3"
    F4 = "key_f4"


class Modifier:
    """Modifier bit flags carried by a KeyEvent."""

    NONE = 0
    SHIFT = 1
    CTRL = 2
    ALT = 4


class KeyEvent:
    """
    A single key press.

    code:
      A one-character string for character keys (the letter for Ctrl
      combinations, e.g. "c" for Ctrl-C), or one of the KeyCode constants.

    modifiers:
      Bitwise OR of Modifier flags.
    """

    __slots__ = ("code", "modifiers")

    def __init__(self, code, modifiers=Modifier.NONE):
        self.code = code
        self.modifiers = modifiers

    def __eq__(self, other):
        if not isinstance(other, KeyEvent):
            return NotImplemented
        return self.code == other.code and self.modifiers == other.modifiers

    def __hash__(self):
        return hash((self.code, self.modifiers))

    def __repr__(self):
        if self.modifiers:
            return f"KeyEvent({self.code!r}, {self.modifiers})"
        return f"KeyEvent({self.code!r})"


# ---------------------------------------------------------------------------
# Escape sequence trie for input parsing
# ---------------------------------------------------------------------------

# Map escape sequences to key codes. Multiple entries per key to handle
# terminal variants (xterm, rxvt, tmux, application mode).
_ESCAPE_SEQUENCES = {
    "\x1b[A": KeyCode.UP,
    "\x1bOA": KeyCode.UP,
    "\x1b[B": KeyCode.DOWN,
    "\x1bOB": KeyCode.DOWN,
    "\x1b[C": KeyCode.RIGHT,
    "\x1bOC": KeyCode.RIGHT,
    "\x1b[D": KeyCode.LEFT,
    "\x1bOD": KeyCode.LEFT,
    "\x1b[5~": KeyCode.PAGE_UP,
    "\x1b[6~": KeyCode.PAGE_DOWN,
    "\x1b[H": KeyCode.HOME,
    "\x1bOH": KeyCode.HOME,
    "\x1b[1~": KeyCode.HOME,
    "\x1b[7~": KeyCode.HOME,
    "\x1b[F": KeyCode.END,
    "\x1bOF": KeyCode.END,
    "\x1b[4~": KeyCode.END,
    "\x1b[8~": KeyCode.END,
    "\x1b[2~": KeyCode.INSERT,
    "\x1b[3~": KeyCode.DELETE,
    "\x1b[Z": KeyCode.BACKTAB,
    "\x1bOP": KeyCode.F1,
    "\x1bOQ": KeyCode.F2,
    "\x1bOR": KeyCode.F3,
    "\x1bOS": KeyCode.F4,
    "\x1b[11~": KeyCode.F1,
    "\x1b[12~": KeyCode.F2,
    "\x1b[13~": KeyCode.F3,
    "\x1b[14~": KeyCode.F4,
}

# xterm reports modified cursor keys as ESC [ 1 ; <mod> <final>, where <mod> is
# 1 + (shift | alt << 1 | ctrl << 2)
_MODIFIED_FINALS = {
    "A": KeyCode.UP,
    "B": KeyCode.DOWN,
    "C": KeyCode.RIGHT,
    "D": KeyCode.LEFT,
    "H": KeyCode.HOME,
    "F": KeyCode.END,
}


def _xterm_modifiers(param):
    bits = param - 1
    mods = Modifier.NONE
    if bits & 1:
        mods |= Modifier.SHIFT
    if bits & 2:
        mods |= Modifier.ALT
    if bits & 4:
        mods |= Modifier.CTRL
    return mods


def _build_trie():
    """Build a trie (nested dict) from the escape sequence tables.

    Leaves are KeyEvents.
    """
    sequences = {seq: KeyEvent(code) for seq, code in _ESCAPE_SEQUENCES.items()}
    for param in range(2, 9):
        for final, code in _MODIFIED_FINALS.items():
            sequences[f"\x1b[1;{param}{final}"] = KeyEvent(
                code, _xterm_modifiers(param)
            )

    root = {}
    for seq, event in sequences.items():
        node = root
        for ch in seq[:-1]:
            node = node.setdefault(ch, {})
        node[seq[-1]] = event
    return root


_ESCAPE_TRIE = _build_trie()


class KeyDecoder:
    """
    Incremental decoder from terminal input characters to KeyEvents.

    Feed characters one at a time with feed(). Escape sequences are matched
    against a trie; while a sequence is incomplete, feed() returns None and
    pending() is True. If no more input arrives, flush() resolves the partial
    sequence into a lone ESC.
    """

    def __init__(self):
        self._esc_buf = []
        self._esc_node = None
        self._queue = []

    def pending(self):
        """True if a partial escape sequence is buffered."""
        return bool(self._esc_buf)

    def take(self):
        """Return a KeyEvent queued by an earlier dead-end escape, or None."""
        if self._queue:
            return self._queue.pop(0)
        return None

    def feed(self, ch):
        """Feed a character. Returns a KeyEvent, or None if more input is
        needed."""
        if self._esc_node is not None:
            if ch not in self._esc_node:
                # Dead end. A lone ESC followed by a printable character is
                # Alt+character. Anything else is ESC followed by whatever the
                # character decodes to on its own.
                if len(self._esc_buf) == 1 and ch.isprintable():
                    self._reset_escape()
                    return KeyEvent(ch, Modifier.ALT)

                result = self.flush()
                follow = self._feed_char(ch)
                if follow is not None:
                    self._queue.append(follow)
                return result

            val = self._esc_node[ch]
            if isinstance(val, dict):
                self._esc_buf.append(ch)
                self._esc_node = val
                return None

            self._reset_escape()
            return val

        return self._feed_char(ch)

    def flush(self):
        """Resolve a partial escape sequence. Returns an ESC KeyEvent, or None
        if nothing was buffered."""
        if not self._esc_buf:
            return None
        self._reset_escape()
        return KeyEvent(KeyCode.ESC)

    def _reset_escape(self):
        self._esc_buf = []
        self._esc_node = None

    def _feed_char(self, ch):
        # Decodes a character that isn't part of an escape sequence

        if ch == "\x1b":
            self._esc_buf = [ch]
            self._esc_node = _ESCAPE_TRIE["\x1b"]
            return None

        if ch in ("\r", "\n"):
            return KeyEvent(KeyCode.ENTER)

        if ch == "\t":
            return KeyEvent(KeyCode.TAB)

        if ch in ("\x7f", "\x08"):
            return KeyEvent(KeyCode.BACKSPACE)

        if ch == "\0":
            return KeyEvent(" ", Modifier.CTRL)

        o = ord(ch)
        if o < 0x20:
            # Ctrl-A (0x01) through Ctrl-Z (0x1A), plus Ctrl-\ ] ^ _
            return KeyEvent(chr(o + 0x60), Modifier.CTRL)

        return KeyEvent(ch)


def decode_keys(text):
    """
    Decodes a string of raw terminal input into a list of KeyEvents, as if it
    had been typed with a pause after the last character.
    """
    decoder = KeyDecoder()
    events = []
    for ch in text:
        event = decoder.feed(ch)
        if event is not None:
            events.append(event)
        queued = decoder.take()
        if queued is not None:
            events.append(queued)

    event = decoder.flush()
    if event is not None:
        events.append(event)
    return events


# ---------------------------------------------------------------------------
# Output primitives shared by Terminal and ScriptedTerminal
# ---------------------------------------------------------------------------


class _LineOutput:
    # Cursor-addressed output on top of _write_raw(). Subclasses provide
    # _write_raw(), flush(), and the 'width' property.

    def write(self, text, style=None):
        """Write text at the cursor, optionally styled."""
        if style is None or style == STYLE_DEFAULT:
            self._write_raw(text)
        else:
            self._write_raw(style.sgr() + text + _SGR_RESET)

    def carriage_return(self):
        self._write_raw("\r")

    def new_line(self):
        self._write_raw("\r\n")

    def cursor_up(self, n=1):
        if n > 0:
            self._write_raw(f"\x1b[{n}A")

    def cursor_down(self, n=1):
        if n > 0:
            self._write_raw(f"\x1b[{n}B")

    def clear_line(self):
        """Clear the current line. The cursor stays where it is."""
        self._write_raw("\x1b[2K")

    def clear_to_end(self):
        """Clear from the cursor to the end of the screen."""
        self._write_raw("\x1b[J")

    def hide_cursor(self):
        self._write_raw("\x1b[?25l")

    def show_cursor(self):
        self._write_raw("\x1b[?25h")


# ---------------------------------------------------------------------------
# Terminal
# ---------------------------------------------------------------------------


class Terminal(_LineOutput):
    """
    The process's controlling terminal in raw input mode.

    Raw mode is entered in the constructor and left in close(). Use the
    terminal as a context manager so that close() runs on every exit path:

        with Terminal() as term:
            ...
    """

    def __init__(self):
        self._closed = True

        if not _IS_WINDOWS:
            try:
                stdin_tty = os.isatty(sys.stdin.fileno())
                stdout_tty = os.isatty(sys.stdout.fileno())
            except (OSError, ValueError, io.UnsupportedOperation) as e:
                raise TerminalError(f"no usable terminal: {e}") from e
            if not stdin_tty:
                raise TerminalError("stdin is not a terminal")
            if not stdout_tty:
                raise TerminalError("stdout is not a terminal")

        self._decoder = KeyDecoder()
        # UTF-8 incremental decoder for input, so that a code point split
        # across two reads is never returned partially
        self._utf8 = codecs.getincrementaldecoder("utf-8")("replace")

        try:
            if _IS_WINDOWS:
                self._init_windows()
            else:
                self._init_unix()
        except _TERMIOS_ERRORS as e:
            raise TerminalError(f"failed to enter raw mode: {e}") from e

        self._closed = False
        atexit.register(self.close)

    @staticmethod
    def _set_raw():
        """Apply raw input settings: no echo, no canonical mode, no signals."""
        fd = sys.stdin.fileno()
        new = termios.tcgetattr(fd)
        # LFLAG: clear ICANON, ECHO, IEXTEN, and ISIG so that Ctrl-C is
        # delivered as a key instead of SIGINT
        new[3] &= ~(termios.ICANON | termios.ECHO | termios.IEXTEN | termios.ISIG)
        # IFLAG: clear IXON, IXOFF, ICRNL, INLCR, IGNCR
        new[1] &= ~(
            termios.IXON | termios.IXOFF | termios.ICRNL | termios.INLCR | termios.IGNCR
        )
        # Set VMIN=1 (Solaris: VMIN shares slot with VEOF)
        new[6][termios.VMIN] = 1
        new[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSANOW, new)

    def _init_unix(self):
        self._old_termios = termios.tcgetattr(sys.stdin.fileno())
        self._set_raw()

        # SIGTERM would otherwise kill the process with the terminal still in
        # raw mode. Turn it into SystemExit so that close() runs.
        self._old_sigterm = None
        try:
            self._old_sigterm = signal.signal(signal.SIGTERM, self._sigterm_handler)
        except ValueError:
            # Not in the main thread
            pass

        self._poller = select.poll()
        self._poller.register(sys.stdin.fileno(), select.POLLIN)

    def _init_windows(self):
        import ctypes
        from ctypes import wintypes

        kernel32 = ctypes.windll.kernel32

        STD_INPUT_HANDLE = -10
        STD_OUTPUT_HANDLE = -11
        self._stdin_handle = kernel32.GetStdHandle(STD_INPUT_HANDLE)
        self._stdout_handle = kernel32.GetStdHandle(STD_OUTPUT_HANDLE)

        self._old_out_mode = wintypes.DWORD()
        kernel32.GetConsoleMode(self._stdout_handle, ctypes.byref(self._old_out_mode))
        self._old_in_mode = wintypes.DWORD()
        kernel32.GetConsoleMode(self._stdin_handle, ctypes.byref(self._old_in_mode))

        ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004
        new_out = self._old_out_mode.value | ENABLE_VIRTUAL_TERMINAL_PROCESSING
        if not kernel32.SetConsoleMode(self._stdout_handle, new_out):
            raise TerminalError("console does not support VT100 output")

        # VT input, with ECHO, LINE, and PROCESSED input cleared
        ENABLE_VIRTUAL_TERMINAL_INPUT = 0x0200
        new_in = (self._old_in_mode.value | ENABLE_VIRTUAL_TERMINAL_INPUT) & ~(
            0x0004 | 0x0002 | 0x0001
        )
        if not kernel32.SetConsoleMode(self._stdin_handle, new_in):
            kernel32.SetConsoleMode(self._stdout_handle, self._old_out_mode)
            raise TerminalError("console does not support VT100 input")

        self._kernel32 = kernel32

    def close(self):
        """Restore the terminal state saved by the constructor. Safe to call
        more than once."""
        if self._closed:
            return
        self._closed = True

        try:
            self._write_raw(_SGR_RESET)
            self.show_cursor()
            self.flush()
        finally:
            if _IS_WINDOWS:
                self._kernel32.SetConsoleMode(self._stdout_handle, self._old_out_mode)
                self._kernel32.SetConsoleMode(self._stdin_handle, self._old_in_mode)
            else:
                termios.tcsetattr(
                    sys.stdin.fileno(), termios.TCSANOW, self._old_termios
                )
                if self._old_sigterm is not None:
                    signal.signal(signal.SIGTERM, self._old_sigterm)
            atexit.unregister(self.close)

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()

    def _sigterm_handler(self, signum, frame):
        raise SystemExit(128 + signum)

    @property
    def width(self):
        return shutil.get_terminal_size().columns

    @property
    def supports_color(self):
        return os.environ.get("TERM") != "dumb"

    # --- Output ---

    def _write_raw(self, s):
        try:
            sys.stdout.buffer.write(s.encode("utf-8"))
        except OSError as e:
            raise TerminalError(f"failed to write to terminal: {e}") from e

    def flush(self):
        try:
            # Ensure blocking I/O for flush
            fd = sys.stdout.fileno()
            was_blocking = os.get_blocking(fd)
            if not was_blocking:
                os.set_blocking(fd, True)
            try:
                sys.stdout.buffer.flush()
            finally:
                if not was_blocking:
                    os.set_blocking(fd, False)
        except OSError as e:
            raise TerminalError(f"failed to write to terminal: {e}") from e

    # --- Input ---

    def read_key(self):
        """Block until a key is pressed and return its KeyEvent."""
        if self._closed:
            raise TerminalError("terminal is closed")

        queued = self._decoder.take()
        if queued is not None:
            return queued

        if _IS_WINDOWS:
            return self._read_key_windows()
        return self._read_key_unix()

    def _read_key_unix(self):
        fd = sys.stdin.fileno()

        while True:
            try:
                data = os.read(fd, 1)
            except InterruptedError:
                continue
            except OSError as e:
                raise TerminalError(f"failed to read from terminal: {e}") from e

            if not data:
                raise TerminalError("end of input")

            for ch in self._utf8.decode(data):
                result = self._decoder.feed(ch)
                if result is not None:
                    return result
                queued = self._decoder.take()
                if queued is not None:
                    return queued

            # Partial escape sequence. Wait briefly for the rest of it.
            if self._decoder.pending() and not self._poller.poll(ESCAPE_TIMEOUT_MS):
                return self._decoder.flush()

    def _read_key_windows(self):
        import msvcrt
        import time

        waited = 0
        while True:
            if msvcrt.kbhit():
                waited = 0
                result = self._decoder.feed(msvcrt.getwch())
                if result is not None:
                    return result
                queued = self._decoder.take()
                if queued is not None:
                    return queued
            else:
                if self._decoder.pending() and waited >= ESCAPE_TIMEOUT_MS:
                    return self._decoder.flush()
                # Small sleep to avoid busy-wait
                time.sleep(0.01)
                waited += 10


# ---------------------------------------------------------------------------
# Scripted terminal
# ---------------------------------------------------------------------------


class ScriptedTerminal(_LineOutput):
    """
    A terminal that reads keys from a script and writes to a buffer.

    script:
      Sequence of KeyEvents and/or strings. Strings are decoded as raw
      terminal input (see decode_keys()), so "\\r" is Enter, "\\x7f" is
      Backspace, and "\\x1b[A" is Up.

    output:
      Text stream that receives everything written. Defaults to a new
      io.StringIO, available as the 'output' attribute.

    width:
      Terminal width in columns, used for line wrapping.

    Reading past the end of the script raises TerminalError.
    """

    def __init__(self, script, output=None, width=80):
        self._keys = []
        for item in script:
            if isinstance(item, KeyEvent):
                self._keys.append(item)
            else:
                self._keys.extend(decode_keys(item))
        self._keys.reverse()

        self.output = io.StringIO() if output is None else output
        self._width = width
        self.supports_color = False
        self.closed = False

    @property
    def width(self):
        return self._width

    def remaining(self):
        """Number of keys not read yet."""
        return len(self._keys)

    def _write_raw(self, s):
        self.output.write(s)

    def flush(self):
        pass

    def read_key(self):
        if not self._keys:
            raise TerminalError("end of input")
        return self._keys.pop()

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()
