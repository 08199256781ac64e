"""The basic primitive: a rectangle with an optional border and title."""

from __future__ import annotations

import unicodedata
from enum import IntEnum
from typing import Callable, Optional, Protocol

from cellview.borders import BORDERS
from cellview.screen import (
    DEFAULT_STYLE,
    AttrMask,
    Color,
    EventKey,
    EventMouse,
    Screen,
    Style,
)

_PRIMITIVE_BACKGROUND: Color = "black"
_BORDER_COLOR: Color = "white"
_TITLE_COLOR: Color = "white"
_HORIZONTAL_ELLIPSIS = "\u2026"


class Align(IntEnum):
    """Horizontal text alignment."""

    LEFT = 0
    CENTER = 1
    RIGHT = 2


class MouseAction(IntEnum):
    """The logical actions derived from raw mouse events."""

    MOVE = 0
    LEFT_DOWN = 1
    LEFT_UP = 2
    LEFT_CLICK = 3
    LEFT_DOUBLE_CLICK = 4
    MIDDLE_DOWN = 5
    MIDDLE_UP = 6
    MIDDLE_CLICK = 7
    MIDDLE_DOUBLE_CLICK = 8
    RIGHT_DOWN = 9
    RIGHT_UP = 10
    RIGHT_CLICK = 11
    RIGHT_DOUBLE_CLICK = 12
    SCROLL_UP = 13
    SCROLL_DOWN = 14
    SCROLL_LEFT = 15
    SCROLL_RIGHT = 16


class Primitive(Protocol):
    """What the framework expects of anything that can be drawn and focused."""

    def draw(self, screen: Screen) -> None: ...

    def get_rect(self) -> tuple[int, int, int, int]: ...

    def set_rect(self, x: int, y: int, width: int, height: int) -> None: ...

    def input_handler(self) -> Optional["InputHandler"]: ...

    def mouse_handler(self) -> Optional["MouseHandler"]: ...

    def focus(self, delegate: Callable[["Primitive"], None]) -> None: ...

    def blur(self) -> None: ...

    def has_focus(self) -> bool: ...


SetFocus = Callable[[Primitive], None]
InputHandler = Callable[[EventKey, SetFocus], None]
MouseResult = tuple[bool, Optional[Primitive]]
MouseHandler = Callable[[MouseAction, EventMouse, SetFocus], MouseResult]
InputCapture = Callable[[EventKey], Optional[EventKey]]
MouseCapture = Callable[
    [MouseAction, EventMouse], tuple[MouseAction, Optional[EventMouse]]
]
DrawFunc = Callable[[Screen, int, int, int, int], tuple[int, int, int, int]]


def _char_width(char: str) -> int:
    if unicodedata.combining(char):
        return 0
    return 2 if unicodedata.east_asian_width(char) in ("W", "F") else 1


def _print_text(
    screen: Screen,
    text: str,
    x: int,
    y: int,
    max_width: int,
    align: Align,
    color: Color,
) -> tuple[int, int]:
    """Print plain text into at most ``max_width`` cells of one row.

    Returns the number of characters printed and the width they took.
    Each cell keeps the background colour it already had.
    """
    if max_width <= 0 or not text:
        return 0, 0
    chars = list(text)
    total = sum(_char_width(c) for c in chars)

    if total > max_width and align is not Align.LEFT:
        excess = total - max_width
        drop_target = excess if align is Align.RIGHT else excess // 2
        dropped = 0
        while chars and dropped < drop_target:
            dropped += _char_width(chars.pop(0))

    fitting: list[str] = []
    width = 0
    for char in chars:
        char_width = _char_width(char)
        if width + char_width > max_width:
            break
        fitting.append(char)
        width += char_width

    if align is Align.CENTER:
        start = x + (max_width - width) // 2
    elif align is Align.RIGHT:
        start = x + max_width - width
    else:
        start = x

    position = start
    for char in fitting:
        char_width = _char_width(char)
        if char_width == 0:
            continue
        _, existing = screen.get_content(position, y)
        style = Style(foreground=color, background=existing.background)
        screen.set_content(position, y, char, style)
        position += char_width
    return len(fitting), width


class Box:
    """A rectangle with a background, an optional border and an optional title.

    Every other primitive builds on this one. ``input_capture`` and
    ``mouse_capture`` may intercept events before the default handlers see
    them; ``draw_func`` is called after drawing and returns the inner rect.
    """

    def __init__(self) -> None:
        self._x = 0
        self._y = 0
        self._width = 15
        self._height = 10
        self._inner: Optional[tuple[int, int, int, int]] = None
        self._padding = (0, 0, 0, 0)
        self._background_color: Color = _PRIMITIVE_BACKGROUND
        self._border_style = DEFAULT_STYLE.with_foreground(
            _BORDER_COLOR
        ).with_background(_PRIMITIVE_BACKGROUND)
        self._has_focus = False
        self.dont_clear = False
        self.border = False
        self.title = ""
        self.title_color: Color = _TITLE_COLOR
        self.title_align = Align.CENTER
        self.input_capture: Optional[InputCapture] = None
        self.mouse_capture: Optional[MouseCapture] = None
        self.draw_func: Optional[DrawFunc] = None

    # Geometry.

    def set_border_padding(self, top: int, bottom: int, left: int, right: int) -> "Box":
        """Set the space kept free between the border and the content."""
        self._padding = (top, bottom, left, right)
        return self

    @property
    def padding(self) -> tuple[int, int, int, int]:
        """The padding as (top, bottom, left, right)."""
        return self._padding

    def get_rect(self) -> tuple[int, int, int, int]:
        """Return (x, y, width, height) of the box."""
        return self._x, self._y, self._width, self._height

    def get_inner_rect(self) -> tuple[int, int, int, int]:
        """Return the content area without border and padding, never negative in size."""
        if self._inner is not None and self._inner[0] >= 0:
            return self._inner
        x, y, width, height = self.get_rect()
        if self.border:
            x += 1
            y += 1
            width -= 2
            height -= 2
        top, bottom, left, right = self._padding
        x += left
        y += top
        width = max(width - left - right, 0)
        height = max(height - top - bottom, 0)
        return x, y, width, height

    def set_rect(self, x: int, y: int, width: int, height: int) -> None:
        """Move and resize the box."""
        self._x = x
        self._y = y
        self._width = width
        self._height = height
        self._inner = None

    def in_rect(self, x: int, y: int) -> bool:
        """Whether the given position lies within the box."""
        rect_x, rect_y, width, height = self.get_rect()
        return rect_x <= x < rect_x + width and rect_y <= y < rect_y + height

    # Colours and style.

    @property
    def background_color(self) -> Color:
        return self._background_color

    def set_background_color(self, color: Color) -> "Box":
        """Set the background colour of the box and its border."""
        self._background_color = color
        self._border_style = self._border_style.with_background(color)
        return self

    @property
    def border_style(self) -> Style:
        return self._border_style

    @property
    def border_color(self) -> Color:
        return self._border_style.foreground

    def set_border_color(self, color: Color) -> "Box":
        """Set the colour of the border lines."""
        self._border_style = self._border_style.with_foreground(color)
        return self

    @property
    def border_attributes(self) -> AttrMask:
        return self._border_style.attributes

    def set_border_attributes(self, attributes: AttrMask) -> "Box":
        """Set the text attributes of the border lines."""
        self._border_style = self._border_style.with_attributes(attributes)
        return self

    # Event handling.

    def wrap_input_handler(self, handler: Optional[InputHandler]) -> InputHandler:
        """Wrap ``handler`` so that ``input_capture`` sees each key event first."""

        def wrapped(event: EventKey, set_focus: SetFocus) -> None:
            if self.input_capture is not None:
                event = self.input_capture(event)
            if event is not None and handler is not None:
                handler(event, set_focus)

        return wrapped

    def input_handler(self) -> InputHandler:
        """Return the key handler; a plain box reacts to no keys."""
        return self.wrap_input_handler(None)

    def wrap_mouse_handler(self, handler: Optional[MouseHandler]) -> MouseHandler:
        """Wrap ``handler`` so that ``mouse_capture`` sees each mouse event first."""

        def wrapped(
            action: MouseAction, event: EventMouse, set_focus: SetFocus
        ) -> MouseResult:
            if self.mouse_capture is not None:
                action, event = self.mouse_capture(action, event)
            if event is not None and handler is not None:
                return handler(action, event, set_focus)
            return False, None

        return wrapped

    def mouse_handler(self) -> MouseHandler:
        """Return the mouse handler; a left click inside takes the focus."""

        def handle(
            action: MouseAction, event: EventMouse, set_focus: SetFocus
        ) -> MouseResult:
            if action is MouseAction.LEFT_CLICK and self.in_rect(*event.position):
                set_focus(self)
                return True, None
            return False, None

        return self.wrap_mouse_handler(handle)

    # Drawing.

    def draw(self, screen: Screen) -> None:
        """Draw the box onto the screen."""
        self.draw_for_subclass(screen, self)

    def draw_for_subclass(self, screen: Screen, primitive: Primitive) -> None:
        """Draw the box frame, taking focus from ``primitive``, which builds on it."""
        if self._width <= 0 or self._height <= 0:
            return
        x0, y0, width, height = self._x, self._y, self._width, self._height

        if not self.dont_clear:
            background = DEFAULT_STYLE.with_background(self._background_color)
            for y in range(y0, y0 + height):
                for x in range(x0, x0 + width):
                    screen.set_content(x, y, " ", background)

        if self.border and width >= 2 and height >= 2:
            self._draw_border(screen, primitive.has_focus())

        if self.draw_func is not None:
            self._inner = tuple(self.draw_func(screen, x0, y0, width, height))
        else:
            self._inner = None
            self._inner = self.get_inner_rect()

    def _draw_border(self, screen: Screen, focused: bool) -> None:
        x0, y0, width, height = self._x, self._y, self._width, self._height
        right, bottom = x0 + width - 1, y0 + height - 1
        style = self._border_style
        horizontal, vertical, top_left, top_right, bottom_left, bottom_right = (
            BORDERS.for_focus(focused)
        )
        for x in range(x0 + 1, right):
            screen.set_content(x, y0, horizontal, style)
            screen.set_content(x, bottom, horizontal, style)
        for y in range(y0 + 1, bottom):
            screen.set_content(x0, y, vertical, style)
            screen.set_content(right, y, vertical, style)
        screen.set_content(x0, y0, top_left, style)
        screen.set_content(right, y0, top_right, style)
        screen.set_content(x0, bottom, bottom_left, style)
        screen.set_content(right, bottom, bottom_right, style)

        if self.title and width >= 4:
            printed, _ = _print_text(
                screen, self.title, x0 + 1, y0, width - 2,
                Align(self.title_align), self.title_color,
            )
            if len(self.title) - printed > 0 and printed > 0:
                _, cell_style = screen.get_content(right - 1, y0)
                _print_text(
                    screen, _HORIZONTAL_ELLIPSIS, right - 1, y0, 1,
                    Align.LEFT, cell_style.foreground,
                )

    # Focus.

    def focus(self, delegate: SetFocus) -> None:
        """Called when the box receives the focus."""
        self._has_focus = True

    def blur(self) -> None:
        """Called when the box loses the focus."""
        self._has_focus = False

    def has_focus(self) -> bool:
        return self._has_focus