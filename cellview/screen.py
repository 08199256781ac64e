"""Terminal cells, styles, input events and an in-memory screen."""

from __future__ import annotations

import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import IntEnum, IntFlag
from typing import Optional, Union


class AttrMask(IntFlag):
    """Text attributes that may be combined in a style."""

    NONE = 0
    BOLD = 1 << 0
    BLINK = 1 << 1
    REVERSE = 1 << 2
    UNDERLINE = 1 << 3
    DIM = 1 << 4
    ITALIC = 1 << 5
    STRIKETHROUGH = 1 << 6


class Key(IntEnum):
    """Keys reported by key events. ``RUNE`` means a printable character."""

    NUL = 0
    CTRL_A = 1
    CTRL_B = 2
    CTRL_C = 3
    CTRL_D = 4
    CTRL_E = 5
    CTRL_F = 6
    CTRL_G = 7
    BACKSPACE = 8
    TAB = 9
    CTRL_J = 10
    CTRL_K = 11
    CTRL_L = 12
    ENTER = 13
    CTRL_N = 14
    CTRL_O = 15
    CTRL_P = 16
    CTRL_Q = 17
    CTRL_R = 18
    CTRL_S = 19
    CTRL_T = 20
    CTRL_U = 21
    CTRL_V = 22
    CTRL_W = 23
    CTRL_X = 24
    CTRL_Y = 25
    CTRL_Z = 26
    ESCAPE = 27
    BACKSPACE2 = 127
    RUNE = 256
    UP = 257
    DOWN = 258
    RIGHT = 259
    LEFT = 260
    PAGE_UP = 265
    PAGE_DOWN = 266
    HOME = 267
    END = 268
    INSERT = 269
    DELETE = 270
    BACKTAB = 277


class ButtonMask(IntFlag):
    """Mouse buttons and wheel directions reported by mouse events."""

    NONE = 0
    PRIMARY = 1 << 0
    SECONDARY = 1 << 1
    MIDDLE = 1 << 2
    BUTTON4 = 1 << 3
    BUTTON5 = 1 << 4
    BUTTON6 = 1 << 5
    BUTTON7 = 1 << 6
    BUTTON8 = 1 << 7
    WHEEL_UP = 1 << 8
    WHEEL_DOWN = 1 << 9
    WHEEL_LEFT = 1 << 10
    WHEEL_RIGHT = 1 << 11


Color = Optional[str]
"""A colour name or ``#rrggbb`` string; ``None`` is the terminal default."""


@dataclass(frozen=True)
class Style:
    """An immutable combination of colours and attributes for one cell."""

    foreground: Color = None
    background: Color = None
    attributes: AttrMask = AttrMask.NONE

    def with_foreground(self, color: Color) -> "Style":
        """Return a copy with the foreground colour replaced."""
        return replace(self, foreground=color)

    def with_background(self, color: Color) -> "Style":
        """Return a copy with the background colour replaced."""
        return replace(self, background=color)

    def with_attributes(self, attributes: AttrMask) -> "Style":
        """Return a copy with the attributes replaced."""
        return replace(self, attributes=AttrMask(attributes))


DEFAULT_STYLE = Style()


@dataclass(frozen=True)
class EventKey:
    """A key press. ``rune`` holds the character when ``key`` is ``Key.RUNE``."""

    key: Key
    rune: str = ""
    modifiers: int = 0

    @classmethod
    def for_rune(cls, rune: str, modifiers: int = 0) -> "EventKey":
        """Create the event for typing a single character."""
        return cls(Key.RUNE, rune, modifiers)


@dataclass(frozen=True)
class EventMouse:
    """A mouse event: the pointer position and the buttons held down."""

    x: int
    y: int
    buttons: ButtonMask = ButtonMask.NONE
    modifiers: int = 0

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y


@dataclass(frozen=True)
class EventResize:
    """The screen changed its size."""

    width: int
    height: int

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


class EventError(Exception):
    """An error reported by the screen through its event queue."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


Event = Union[EventKey, EventMouse, EventResize, EventError]


class Screen(ABC):
    """The drawing surface and event source an application runs on."""

    @abstractmethod
    def init(self) -> None: ...

    @abstractmethod
    def fini(self) -> None: ...

    @abstractmethod
    def size(self) -> tuple[int, int]: ...

    @abstractmethod
    def set_content(self, x: int, y: int, char: str, style: Style) -> None: ...

    @abstractmethod
    def get_content(self, x: int, y: int) -> tuple[str, Style]: ...

    @abstractmethod
    def clear(self) -> None: ...

    @abstractmethod
    def show(self) -> None: ...

    @abstractmethod
    def sync(self) -> None: ...

    @abstractmethod
    def post_event(self, event: Event) -> None: ...

    @abstractmethod
    def poll_event(self) -> Optional[Event]: ...

    @abstractmethod
    def enable_mouse(self) -> None: ...

    @abstractmethod
    def disable_mouse(self) -> None: ...

    @abstractmethod
    def hide_cursor(self) -> None: ...

    @abstractmethod
    def suspend(self) -> None: ...

    @abstractmethod
    def resume(self) -> None: ...


_BLANK = (" ", DEFAULT_STYLE)


class MemoryScreen(Screen):
    """A screen kept entirely in memory, fed with events by the caller.

    ``poll_event`` blocks until an event is posted or the screen is
    finalized, after which it returns ``None``.
    """

    def __init__(self, width: int = 80, height: int = 25) -> None:
        if width < 0 or height < 0:
            raise ValueError("screen size must not be negative")
        self._width = width
        self._height = height
        self._lock = threading.Lock()
        self._cells = self._blank_cells(width, height)
        self._events: "queue.Queue[Optional[Event]]" = queue.Queue()
        self.initialized = False
        self.finalized = False
        self.suspended = False
        self.mouse_enabled = False
        self.cursor_visible = True
        self.show_count = 0
        self.sync_count = 0

    @staticmethod
    def _blank_cells(width: int, height: int) -> list[list[tuple[str, Style]]]:
        return [[_BLANK] * width for _ in range(height)]

    def init(self) -> None:
        """Prepare the screen for use; a finalized screen may be reused."""
        with self._lock:
            if self.finalized:
                self._events = queue.Queue()
            self.initialized = True
            self.finalized = False
            self.suspended = False
            self._cells = self._blank_cells(self._width, self._height)

    def fini(self) -> None:
        """Finalize the screen, waking any caller blocked in ``poll_event``."""
        with self._lock:
            if self.finalized:
                return
            self.finalized = True
        self._events.put(None)

    def size(self) -> tuple[int, int]:
        return self._width, self._height

    def set_size(self, width: int, height: int) -> None:
        """Change the size, keeping what fits, and post a resize event."""
        if width < 0 or height < 0:
            raise ValueError("screen size must not be negative")
        with self._lock:
            cells = self._blank_cells(width, height)
            for y, row in enumerate(self._cells[:height]):
                cells[y][: min(width, len(row))] = row[:width]
            self._cells = cells
            self._width = width
            self._height = height
        self.post_event(EventResize(width, height))

    def _inside(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def set_content(self, x: int, y: int, char: str, style: Style = DEFAULT_STYLE) -> None:
        """Put one character into a cell; positions off the screen are ignored."""
        with self._lock:
            if self._inside(x, y):
                self._cells[y][x] = (char or " ", style)

    def get_content(self, x: int, y: int) -> tuple[str, Style]:
        """Return a cell's character and style; a blank cell off the screen."""
        with self._lock:
            if self._inside(x, y):
                return self._cells[y][x]
            return _BLANK

    def row_text(self, y: int) -> str:
        """Return the characters of one row as a string."""
        with self._lock:
            if not 0 <= y < self._height:
                raise IndexError(f"row {y} is outside the screen")
            return "".join(char for char, _ in self._cells[y])

    def clear(self) -> None:
        with self._lock:
            self._cells = self._blank_cells(self._width, self._height)

    def show(self) -> None:
        with self._lock:
            self.show_count += 1

    def sync(self) -> None:
        with self._lock:
            self.sync_count += 1

    def post_event(self, event: Event) -> None:
        """Queue an event for ``poll_event``."""
        if event is None:
            raise ValueError("cannot post an empty event")
        self._events.put(event)

    def poll_event(self) -> Optional[Event]:
        """Wait for the next event; ``None`` once the screen is finalized."""
        if self.finalized:
            return None
        event = self._events.get()
        if event is None:
            # Leave the wake-up marker for any other waiting caller.
            self._events.put(None)
        return event

    def enable_mouse(self) -> None:
        self.mouse_enabled = True

    def disable_mouse(self) -> None:
        self.mouse_enabled = False

    def hide_cursor(self) -> None:
        self.cursor_visible = False

    def suspend(self) -> None:
        """Leave screen mode; fails if the screen is not in use."""
        with self._lock:
            if not self.initialized or self.finalized:
                raise RuntimeError("screen is not active")
            if self.suspended:
                raise RuntimeError("screen is already suspended")
            self.suspended = True

    def resume(self) -> None:
        """Return to screen mode after ``suspend``."""
        with self._lock:
            if not self.suspended:
                raise RuntimeError("screen is not suspended")
            self.suspended = False