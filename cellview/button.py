"""A labelled button that triggers an action when selected."""

from __future__ import annotations

from typing import Callable, Optional

from cellview.box import (
    Align,
    Box,
    InputHandler,
    MouseAction,
    MouseHandler,
    MouseResult,
    SetFocus,
    _char_width,
    _print_text,
)
from cellview.screen import Color, EventKey, EventMouse, Key, Screen

_PRIMARY_TEXT: Color = "white"
_INVERSE_TEXT: Color = "blue"
_CONTRAST_BACKGROUND: Color = "blue"

_LEAVE_KEYS = frozenset({Key.BACKTAB, Key.TAB, Key.ESCAPE})


class Button(Box):
    """A one-line box showing a label; Enter or a left click selects it.

    ``selected_func`` is called when the button is selected, ``blur_func``
    with the key (Tab, Backtab or Escape) used to leave it.
    """

    def __init__(self, label: str = "") -> None:
        super().__init__()
        self.set_background_color(_CONTRAST_BACKGROUND)
        self.set_rect(0, 0, sum(_char_width(c) for c in label) + 4, 1)
        self.label = label
        self.label_color: Color = _PRIMARY_TEXT
        self.label_color_activated: Color = _INVERSE_TEXT
        self.background_color_activated: Color = _PRIMARY_TEXT
        self.selected_func: Optional[Callable[[], None]] = None
        self.blur_func: Optional[Callable[[Key], None]] = None

    def draw(self, screen: Screen) -> None:
        """Draw the button, using the activated colours while it has focus."""
        background = self.background_color
        border_style = self.border_style
        focused = self.has_focus()
        if focused:
            self.set_background_color(self.background_color_activated)
            self.set_border_color(self.label_color_activated)
        try:
            self.draw_for_subclass(screen, self)
        finally:
            self._background_color = background
            self._border_style = border_style

        x, y, width, height = self.get_inner_rect()
        if width > 0 and height > 0:
            color = self.label_color_activated if focused else self.label_color
            _print_text(screen, self.label, x, y + height // 2, width, Align.CENTER, color)

    def input_handler(self) -> InputHandler:
        """Return the key handler: Enter selects, Tab/Backtab/Escape leave."""

        def handle(event: EventKey, set_focus: SetFocus) -> None:
            if event.key is Key.ENTER:
                if self.selected_func is not None:
                    self.selected_func()
            elif event.key in _LEAVE_KEYS:
                if self.blur_func is not None:
                    self.blur_func(event.key)

        return self.wrap_input_handler(handle)

    def mouse_handler(self) -> MouseHandler:
        """Return the mouse handler: a left click focuses and selects."""

        def handle(
            action: MouseAction, event: EventMouse, set_focus: SetFocus
        ) -> MouseResult:
            if not self.in_rect(*event.position):
                return False, None
            if action is MouseAction.LEFT_CLICK:
                set_focus(self)
                if self.selected_func is not None:
                    self.selected_func()
                return True, None
            return False, None

        return self.wrap_mouse_handler(handle)