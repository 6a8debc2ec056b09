import contextlib
import enum
import os
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from blessed import Terminal

from cfdk.errors import InputStreamError, TerminalInitError


class Event(enum.Enum):
    MOVE_UP = "up"
    MOVE_DOWN = "down"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    ERROR = "error"  # the input stream broke; handled like CANCEL
    NONE = "none"    # a key nobody is bound to


class Surface(ABC):
    """What the selection loop needs from a display: one event source, one frame sink."""

    @abstractmethod
    def poll_event(self) -> Event: ...

    @abstractmethod
    def clear(self): ...

    @abstractmethod
    def draw_option(self, index: int, text: str, is_selected: bool): ...

    def draw_notice(self, text: str):
        pass

    @abstractmethod
    def flush(self): ...

    @abstractmethod
    def close(self): ...

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class ScreenBuffer:
    def __init__(self, w, h):
        self.w, self.h = w, h
        self.chars = [[' '] * w for _ in range(h)]
        self.styles: List[List[Optional[str]]] = [[None] * w for _ in range(h)]

    def put(self, x, y, char, style=None):
        if 0 <= x < self.w and 0 <= y < self.h:
            self.chars[y][x] = char
            self.styles[y][x] = style

    def puts(self, x, y, text, style=None):
        for i, c in enumerate(text):
            self.put(x + i, y, c, style)

    def clear(self):
        for row in self.chars: row[:] = [' '] * self.w
        for row in self.styles: row[:] = [None] * self.w

    def render(self, term) -> str:
        out = term.home
        for y in range(self.h):
            out += term.move_xy(0, y)
            for x in range(self.w):
                c, s = self.chars[y][x], self.styles[y][x]
                styled = getattr(term, s, None) if s else None
                out += styled(c) if styled else c
        return out

    def flush(self, term):
        # one write per frame, so the terminal never shows a half-drawn list
        print(self.render(term), end='', flush=True)


KEY_EVENTS = {
    'KEY_UP': Event.MOVE_UP,
    'KEY_DOWN': Event.MOVE_DOWN,
    'KEY_ENTER': Event.CONFIRM,
    'KEY_ESCAPE': Event.CANCEL,
}
CHAR_EVENTS = {
    'k': Event.MOVE_UP,
    'j': Event.MOVE_DOWN,
    '\r': Event.CONFIRM,
    '\n': Event.CONFIRM,
    'q': Event.CANCEL,
    '\x03': Event.CANCEL,  # ctrl-c
}


def key_to_event(key) -> Event:
    if key.is_sequence and key.name in KEY_EVENTS:
        return KEY_EVENTS[key.name]
    return CHAR_EVENTS.get(str(key), Event.NONE)


SELECTED_STYLE = 'bold_green'
TITLE = "Select a domain"
HINT = "↑/↓ move · enter select · esc cancel"


class BlessedSurface(Surface):
    '''
    Full-screen blessed terminal surface.

    Entering the surface puts the terminal in cbreak mode with a hidden cursor
    on the alternate screen; `close()` undoes all of it and is safe to call
    more than once. Options are collected during a frame and laid out on
    `flush()`, scrolled so the selected one stays visible.
    '''

    def __init__(self, term: Optional[Terminal] = None, esc_delay: float = 0.05):
        try:
            self.term = term or Terminal()
        except Exception as e:
            raise TerminalInitError(f"cannot initialise terminal: {e}") from e
        if not self.term.is_a_tty:
            raise TerminalInitError("cfdk needs an interactive terminal")
        self.esc_delay = esc_delay
        self.buf = ScreenBuffer(self.term.width, self.term.height)
        self.top = 0
        self._options: List[Tuple[int, str, bool]] = []
        self._notice = ""
        self._stack: Optional[contextlib.ExitStack] = None

    def open(self):
        if self._stack is not None: return self
        stack = contextlib.ExitStack()
        try:
            stack.enter_context(self.term.cbreak())
            stack.enter_context(self.term.hidden_cursor())
            stack.enter_context(self.term.fullscreen())
        except (OSError, ValueError) as e:
            stack.close()
            raise TerminalInitError(f"cannot enter interactive mode: {e}") from e
        self._stack = stack
        return self

    def __enter__(self):
        return self.open()

    def close(self):
        stack, self._stack = self._stack, None
        if stack is not None:
            stack.close()

    def poll_event(self) -> Event:
        try:
            key = self.term.inkey(esc_delay=self.esc_delay)
        except KeyboardInterrupt:
            return Event.CANCEL
        except OSError as e:
            raise InputStreamError(str(e)) from e
        return key_to_event(key)

    def clear(self):
        if self.buf.w != self.term.width or self.buf.h != self.term.height:
            self.buf = ScreenBuffer(self.term.width, self.term.height)
        self.buf.clear()
        self._options = []
        self._notice = ""

    def draw_option(self, index: int, text: str, is_selected: bool):
        self._options.append((index, text, is_selected))

    def draw_notice(self, text: str):
        self._notice = text

    def _layout(self):
        buf = self.buf
        buf.puts(0, 0, TITLE, 'bold')
        rows = max(1, buf.h - 3)  # title, blank line above the hint, hint

        selected = next((i for i, (_, _, sel) in enumerate(self._options) if sel), 0)
        if selected < self.top: self.top = selected
        if selected >= self.top + rows: self.top = selected - rows + 1
        self.top = max(0, min(self.top, max(0, len(self._options) - rows)))

        for row, (_, text, sel) in enumerate(self._options[self.top:self.top + rows]):
            line = ("> " if sel else "  ") + text
            buf.puts(0, 1 + row, line[:buf.w], SELECTED_STYLE if sel else None)
        if self._notice:
            buf.puts(2, 1, self._notice[:buf.w - 2], 'dim')
        buf.puts(0, buf.h - 1, HINT[:buf.w], 'bright_black')

    def flush(self):
        self._layout()
        self.buf.flush(self.term)


def default_esc_delay() -> float:
    # same knob curses programs use; milliseconds
    try:
        return int(os.environ.get('ESCDELAY', '50')) / 1000
    except ValueError:
        return 0.05
