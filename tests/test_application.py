import threading

import pytest

from cellview.application import Application
from cellview.borders import BORDERS
from cellview.box import Box, MouseAction
from cellview.screen import (
    ButtonMask,
    EventError,
    EventKey,
    EventMouse,
    EventResize,
    Key,
    MemoryScreen,
)


def _start(app):
    errors = []

    def target():
        try:
            app.run()
        except BaseException as exc:  # pragma: no cover - reported below
            errors.append(exc)

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, errors


def _recording_mouse_capture(actions):
    def capture(event, action):
        actions.append(action)
        return event, action

    return capture


def test_set_root_gives_focus():
    app = Application(MemoryScreen(20, 5))
    box = Box()
    app.set_root(box, True)
    assert app.get_focus() is box
    assert box.has_focus()
    assert app.root is box


def test_set_focus_blurs_previous():
    app = Application()
    first, second = Box(), Box()
    app.set_focus(first)
    app.set_focus(second)
    assert not first.has_focus()
    assert second.has_focus()
    assert app.get_focus() is second


def test_set_focus_hides_cursor():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    app.set_focus(Box())
    assert screen.cursor_visible is False


def test_force_draw_fullscreen_resizes_root():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    box = Box()
    app.set_root(box, True)
    app.force_draw()
    assert box.get_rect() == (0, 0, 20, 5)
    assert screen.show_count == 1


def test_force_draw_not_fullscreen_keeps_rect():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    box = Box()
    box.set_rect(2, 1, 6, 3)
    app.set_root(box, False)
    app.force_draw()
    assert box.get_rect() == (2, 1, 6, 3)


def test_force_draw_without_root_does_nothing():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    app.force_draw()
    assert screen.show_count == 0


def test_before_draw_returning_true_skips_root():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    box = Box()
    box.border = True
    app.set_root(box, True)
    after_calls = []
    app.before_draw = lambda s: True
    app.after_draw = after_calls.append
    app.force_draw()
    assert screen.get_content(0, 0)[0] == " "
    assert screen.show_count == 1
    assert after_calls == []


def test_after_draw_receives_screen():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    box = Box()
    box.border = True
    app.set_root(box, True)
    after_calls = []
    app.after_draw = after_calls.append
    app.force_draw()
    assert after_calls == [screen]
    assert screen.get_content(0, 0)[0] == BORDERS.top_left_focus


def test_key_event_reaches_focused_root():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    box = Box()
    received = []

    def capture(event):
        received.append(event)
        return None

    box.input_capture = capture
    app.set_root(box, True)
    event = EventKey(Key.ENTER)
    app.handle_event(event)
    assert received == [event]
    assert screen.show_count == 1


def test_app_input_capture_can_swallow_keys():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    box = Box()
    received = []
    box.input_capture = lambda e: received.append(e)
    app.set_root(box, True)
    app.input_capture = lambda e: None
    app.handle_event(EventKey.for_rune("a"))
    assert received == []
    assert screen.show_count == 1


def test_app_input_capture_can_replace_keys():
    app = Application(MemoryScreen(20, 5))
    box = Box()
    received = []
    box.input_capture = lambda e: received.append(e)
    app.set_root(box, True)
    replacement = EventKey.for_rune("b")
    app.input_capture = lambda e: replacement
    app.handle_event(EventKey.for_rune("a"))
    assert received == [replacement]


def test_ctrl_c_stops_application():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    app.set_root(Box(), True)
    app.handle_event(EventKey(Key.CTRL_C))
    assert screen.finalized
    assert app.screen is None


def test_mouse_click_focuses_box():
    app = Application(MemoryScreen(20, 5))
    box = Box()
    box.set_rect(0, 0, 5, 5)
    app.set_root(box, False)
    app.set_focus(None)
    assert not box.has_focus()
    app.handle_event(EventMouse(1, 1, ButtonMask.PRIMARY))
    app.handle_event(EventMouse(1, 1, ButtonMask.NONE))
    assert app.get_focus() is box
    assert box.has_focus()


def test_mouse_double_click_sequence():
    app = Application(MemoryScreen(20, 5))
    app.set_root(Box(), False)
    actions = []
    app.mouse_capture = _recording_mouse_capture(actions)
    for buttons in (ButtonMask.PRIMARY, ButtonMask.NONE) * 2:
        app.handle_event(EventMouse(1, 1, buttons))
    assert actions == [
        MouseAction.MOVE,
        MouseAction.LEFT_DOWN,
        MouseAction.LEFT_UP,
        MouseAction.LEFT_CLICK,
        MouseAction.LEFT_DOWN,
        MouseAction.LEFT_UP,
        MouseAction.LEFT_DOUBLE_CLICK,
    ]


def test_mouse_moved_release_is_not_a_click():
    app = Application(MemoryScreen(20, 5))
    app.set_root(Box(), False)
    actions = []
    app.mouse_capture = _recording_mouse_capture(actions)
    app.handle_event(EventMouse(1, 1, ButtonMask.SECONDARY))
    app.handle_event(EventMouse(3, 1, ButtonMask.NONE))
    assert MouseAction.RIGHT_CLICK not in actions
    assert actions[-1] is MouseAction.RIGHT_UP


def test_mouse_wheel_action():
    app = Application(MemoryScreen(20, 5))
    app.set_root(Box(), False)
    actions = []
    app.mouse_capture = _recording_mouse_capture(actions)
    app.handle_event(EventMouse(0, 0, ButtonMask.WHEEL_UP))
    assert actions == [MouseAction.SCROLL_UP]


def test_mouse_capture_swallowing_event_redraws():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    box = Box()
    app.set_root(box, False)
    app.set_focus(None)
    app.mouse_capture = lambda event, action: (None, action)
    app.handle_event(EventMouse(1, 1, ButtonMask.PRIMARY))
    app.handle_event(EventMouse(1, 1, ButtonMask.NONE))
    assert screen.show_count == 2
    assert app.get_focus() is None


def test_resize_clears_and_redraws():
    screen = MemoryScreen(10, 4)
    app = Application(screen)
    box = Box()
    box.border = True
    app.set_root(box, True)
    screen.set_content(0, 0, "x")
    app.handle_event(EventResize(10, 4))
    assert screen.get_content(0, 0)[0] == BORDERS.top_left_focus
    assert box.get_rect() == (0, 0, 10, 4)


def test_enable_mouse_with_screen():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    app.enable_mouse(True)
    assert screen.mouse_enabled
    app.enable_mouse(False)
    assert not screen.mouse_enabled


def test_resize_to_full_screen():
    app = Application(MemoryScreen(20, 5))
    box = Box()
    app.resize_to_full_screen(box)
    assert box.get_rect() == (0, 0, 20, 5)


def test_resize_to_full_screen_without_screen_raises():
    with pytest.raises(RuntimeError):
        Application().resize_to_full_screen(Box())


def test_run_without_screen_raises():
    with pytest.raises(RuntimeError):
        Application().run()


def test_queue_event_rejects_none():
    with pytest.raises(ValueError):
        Application().queue_event(None)


def test_suspend_without_screen_returns_false():
    called = []
    assert Application().suspend(lambda: called.append(1)) is False
    assert called == []


def test_suspend_failure_returns_false():
    called = []
    app = Application(MemoryScreen(20, 5))
    assert app.suspend(lambda: called.append(1)) is False
    assert called == []


def test_suspend_calls_function_and_resumes():
    screen = MemoryScreen(20, 5)
    screen.init()
    app = Application(screen)
    states = []
    assert app.suspend(lambda: states.append(screen.suspended)) is True
    assert states == [True]
    assert screen.suspended is False


def test_run_stops_on_ctrl_c():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    app.set_root(Box(), True)
    screen.post_event(EventKey(Key.CTRL_C))
    assert app.run() is None
    assert screen.finalized
    assert app.screen is None


def test_run_raises_screen_error():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    screen.post_event(EventError("boom"))
    with pytest.raises(EventError) as info:
        app.run()
    assert info.value.message == "boom"


def test_queue_update_runs_in_loop_thread():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    app.set_root(Box(), True)
    thread, errors = _start(app)
    seen = []
    app.queue_update(lambda: seen.append(threading.get_ident()))
    app.stop()
    thread.join(timeout=5)
    assert not thread.is_alive()
    assert errors == []
    assert seen == [thread.ident]


def test_draw_and_sync_while_running():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    app.set_root(Box(), True)
    thread, errors = _start(app)
    app.queue_update(lambda: None)
    shown = screen.show_count
    app.draw()
    app.sync()
    app.queue_update(lambda: None)
    assert screen.show_count == shown + 1
    assert screen.sync_count == 1
    app.stop()
    thread.join(timeout=5)
    assert errors == []


def test_queue_update_draw_redraws():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    app.set_root(Box(), True)
    thread, errors = _start(app)
    app.queue_update(lambda: None)
    shown = screen.show_count
    ran = []
    app.queue_update_draw(lambda: ran.append(True))
    assert ran == [True]
    assert screen.show_count == shown + 1
    app.stop()
    thread.join(timeout=5)
    assert errors == []


def test_queued_key_event_reaches_root_while_running():
    screen = MemoryScreen(20, 5)
    app = Application(screen)
    box = Box()
    received = []
    box.input_capture = lambda e: received.append(e)
    app.set_root(box, True)
    thread, errors = _start(app)
    event = EventKey.for_rune("q")
    app.queue_event(event)
    app.queue_update(lambda: None)
    app.stop()
    thread.join(timeout=5)
    assert received == [event]
    assert errors == []


def test_set_screen_while_running_replaces_screen():
    first = MemoryScreen(20, 5)
    second = MemoryScreen(30, 6)
    app = Application(first)
    box = Box()
    app.set_root(box, True)
    thread, errors = _start(app)
    app.queue_update(lambda: None)
    app.set_screen(second)
    replaced = threading.Event()

    def check():
        if app.screen is second:
            replaced.set()

    for _ in range(200):
        app.queue_update(check)
        if replaced.wait(0.01):
            break
    app.stop()
    thread.join(timeout=5)
    assert replaced.is_set()
    assert first.finalized
    assert second.finalized
    assert box.get_rect() == (0, 0, 30, 6)
    assert errors == []