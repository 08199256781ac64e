"""A box for a boolean value that can be checked and unchecked."""

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
from cellview.screen import DEFAULT_STYLE, Color, EventKey, EventMouse, Key, Screen, Style

_PRIMARY_TEXT: Color = "white"
_SECONDARY_TEXT: Color = "yellow"
_CONTRAST_BACKGROUND: Color = "blue"

_DONE_KEYS = frozenset({Key.TAB, Key.BACKTAB, Key.ESCAPE})


def _text_width(text: str) -> int:
    return sum(_char_width(c) for c in text)


def _print_styled(screen: Screen, text: str, x: int, y: int, max_width: int, style: Style) -> None:
    """Print ``text`` left-aligned with a full style into at most ``max_width`` cells."""
    width = 0
    for char in text:
        char_width = _char_width(char)
        if char_width == 0:
            continue
        if width + char_width > max_width:
            break
        screen.set_content(x + width, y, char, style)
        width += char_width


class Checkbox(Box):
    """A label followed by a field that shows ``checked_string`` when checked.

    ``changed_func`` receives the new state after the user toggles it;
    ``done_func`` and ``finished_func`` receive the key used to leave it.
    """

    def __init__(self) -> None:
        super().__init__()
        self.checked = False
        self.label = ""
        self.label_width = 0
        self.label_color: Color = _SECONDARY_TEXT
        self.field_background_color: Color = _CONTRAST_BACKGROUND
        self.field_text_color: Color = _PRIMARY_TEXT
        self.checked_string = "X"
        self.changed_func: Optional[Callable[[bool], None]] = None
        self.done_func: Optional[Callable[[Key], None]] = None
        self.finished_func: Optional[Callable[[Key], None]] = None

    def set_form_attributes(
        self,
        label_width: int,
        label_color: Color,
        bg_color: Color,
        field_text_color: Color,
        field_bg_color: Color,
    ) -> "Checkbox":
        """Apply the attributes a form shares among its items."""
        self.label_width = label_width
        self.label_color = label_color
        self._background_color = bg_color
        self.field_text_color = field_text_color
        self.field_background_color = field_bg_color
        return self

    def get_field_width(self) -> int:
        """The width of the field; always one."""
        return 1

    def _toggle(self) -> None:
        self.checked = not self.checked
        if self.changed_func is not None:
            self.changed_func(self.checked)

    def draw(self, screen: Screen) -> None:
        """Draw the label and the check field."""
        self.draw_for_subclass(screen, self)

        x, y, width, height = self.get_inner_rect()
        right_limit = x + width
        if height < 1 or right_limit <= x:
            return

        if self.label_width > 0:
            label_width = min(self.label_width, right_limit - x)
            _print_text(screen, self.label, x, y, label_width, Align.LEFT, self.label_color)
            x += label_width
        else:
            _, drawn = _print_text(
                screen, self.label, x, y, right_limit - x, Align.LEFT, self.label_color
            )
            x += drawn

        if self.has_focus():
            style = DEFAULT_STYLE.with_background(self.field_text_color).with_foreground(
                self.field_background_color
            )
        else:
            style = DEFAULT_STYLE.with_background(self.field_background_color).with_foreground(
                self.field_text_color
            )
        box_width = _text_width(self.checked_string)
        text = self.checked_string if self.checked else " " * box_width
        _print_styled(screen, text, x, y, box_width, style)

    def input_handler(self) -> InputHandler:
        """Return the key handler: space or Enter toggles, Tab/Backtab/Escape finish."""

        def handle(event: EventKey, set_focus: SetFocus) -> None:
            key = event.key
            if key is Key.RUNE or key is Key.ENTER:
                if key is Key.RUNE and event.rune != " ":
                    return
                self._toggle()
            elif key in _DONE_KEYS:
                if self.done_func is not None:
                    self.done_func(key)
                if self.finished_func is not None:
                    self.finished_func(key)

        return self.wrap_input_handler(handle)

    def mouse_handler(self) -> MouseHandler:
        """Return the mouse handler: a left click on the first row toggles."""

        def handle(
            action: MouseAction, event: EventMouse, set_focus: SetFocus
        ) -> MouseResult:
            x, y = event.position
            _, rect_y, _, _ = self.get_inner_rect()
            if not self.in_rect(x, y):
                return False, None
            if action is MouseAction.LEFT_CLICK and y == rect_y:
                set_focus(self)
                self._toggle()
                return True, None
            return False, None

        return self.wrap_mouse_handler(handle)