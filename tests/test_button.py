import pytest

from cellview.box import MouseAction
from cellview.button import Button
from cellview.screen import EventKey, EventMouse, Key, MemoryScreen


def _noop_focus(_primitive):
    pass


def test_default_rect_fits_label():
    button = Button("OK")
    assert button.get_rect() == (0, 0, 6, 1)


def test_enter_calls_selected():
    calls = []
    button = Button("Go")
    button.selected_func = lambda: calls.append("selected")
    button.input_handler()(EventKey(Key.ENTER), _noop_focus)
    assert calls == ["selected"]


@pytest.mark.parametrize("key", [Key.TAB, Key.BACKTAB, Key.ESCAPE])
def test_leave_keys_call_blur(key):
    keys = []
    button = Button("Go")
    button.blur_func = keys.append
    button.input_handler()(EventKey(key), _noop_focus)
    assert keys == [key]


def test_other_keys_do_nothing():
    calls = []
    button = Button("Go")
    button.selected_func = lambda: calls.append("selected")
    button.blur_func = calls.append
    button.input_handler()(EventKey.for_rune("a"), _noop_focus)
    assert calls == []


def test_input_capture_can_block_events():
    calls = []
    button = Button("Go")
    button.selected_func = lambda: calls.append("selected")
    button.input_capture = lambda event: None
    button.input_handler()(EventKey(Key.ENTER), _noop_focus)
    assert calls == []


def test_left_click_inside_focuses_and_selects():
    focused = []
    calls = []
    button = Button("Go")
    button.selected_func = lambda: calls.append("selected")
    result = button.mouse_handler()(MouseAction.LEFT_CLICK, EventMouse(1, 0), focused.append)
    assert result == (True, None)
    assert focused == [button]
    assert calls == ["selected"]


def test_click_outside_is_ignored():
    calls = []
    button = Button("Go")
    button.selected_func = lambda: calls.append("selected")
    result = button.mouse_handler()(MouseAction.LEFT_CLICK, EventMouse(40, 5), _noop_focus)
    assert result == (False, None)
    assert calls == []


def test_draw_centres_label():
    screen = MemoryScreen(10, 1)
    button = Button("Hi")
    button.draw(screen)
    assert screen.row_text(0)[:6] == "  Hi  "
    _, style = screen.get_content(2, 0)
    assert style.foreground == button.label_color
    assert style.background == button.background_color


def test_focused_draw_uses_activated_colours_and_restores():
    screen = MemoryScreen(10, 1)
    button = Button("Hi")
    original_background = button.background_color
    original_border = button.border_style
    button.focus(_noop_focus)
    button.draw(screen)
    _, style = screen.get_content(2, 0)
    assert style.foreground == button.label_color_activated
    assert style.background == button.background_color_activated
    assert button.background_color == original_background
    assert button.border_style == original_border