"""The application: owns the screen, runs the event loop and routes events."""

from __future__ import annotations

import contextlib
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from cellview.box import MouseAction, Primitive
from cellview.screen import (
    ButtonMask,
    Event,
    EventError,
    EventKey,
    EventMouse,
    EventResize,
    Key,
    Screen,
)

REDRAW_PAUSE = 0.05
"""The minimum time in seconds between two redraws caused by resizing."""

DOUBLE_CLICK_INTERVAL = 0.5
"""The longest time in seconds between two clicks that form a double click."""

AppInputCapture = Callable[[EventKey], Optional[EventKey]]
AppMouseCapture = Callable[
    [EventMouse, MouseAction], tuple[Optional[EventMouse], MouseAction]
]
BeforeDraw = Callable[[Screen], bool]
AfterDraw = Callable[[Screen], None]

_STOP = object()

_BUTTON_ACTIONS = (
    (
        ButtonMask.PRIMARY,
        MouseAction.LEFT_DOWN,
        MouseAction.LEFT_UP,
        MouseAction.LEFT_CLICK,
        MouseAction.LEFT_DOUBLE_CLICK,
    ),
    (
        ButtonMask.MIDDLE,
        MouseAction.MIDDLE_DOWN,
        MouseAction.MIDDLE_UP,
        MouseAction.MIDDLE_CLICK,
        MouseAction.MIDDLE_DOUBLE_CLICK,
    ),
    (
        ButtonMask.SECONDARY,
        MouseAction.RIGHT_DOWN,
        MouseAction.RIGHT_UP,
        MouseAction.RIGHT_CLICK,
        MouseAction.RIGHT_DOUBLE_CLICK,
    ),
)

_WHEEL_ACTIONS = (
    (ButtonMask.WHEEL_UP, MouseAction.SCROLL_UP),
    (ButtonMask.WHEEL_DOWN, MouseAction.SCROLL_DOWN),
    (ButtonMask.WHEEL_LEFT, MouseAction.SCROLL_LEFT),
    (ButtonMask.WHEEL_RIGHT, MouseAction.SCROLL_RIGHT),
)

_DOWN_ACTIONS = frozenset(
    {MouseAction.LEFT_DOWN, MouseAction.MIDDLE_DOWN, MouseAction.RIGHT_DOWN}
)


@dataclass
class _QueuedUpdate:
    func: Callable[[], None]
    done: Optional[threading.Event] = None

    def run(self) -> None:
        try:
            self.func()
        finally:
            if self.done is not None:
                self.done.set()


class Application:
    """The top node of a program: draws the root primitive and dispatches events.

    ``input_capture`` may intercept key events before the focused primitive
    sees them, ``mouse_capture`` may intercept mouse events, and
    ``before_draw``/``after_draw`` are called around drawing the root.
    """

    def __init__(self, screen: Optional[Screen] = None) -> None:
        self._lock = threading.RLock()
        self._screen: Optional[Screen] = None
        self._focus: Optional[Primitive] = None
        self._root: Optional[Primitive] = None
        self._root_fullscreen = False
        self._mouse_enabled = False
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._replacements: "queue.Queue[Optional[Screen]]" = queue.Queue()
        self._error: Optional[EventError] = None

        self.input_capture: Optional[AppInputCapture] = None
        self.mouse_capture: Optional[AppMouseCapture] = None
        self.before_draw: Optional[BeforeDraw] = None
        self.after_draw: Optional[AfterDraw] = None
        self.double_click_interval = DOUBLE_CLICK_INTERVAL

        self._last_redraw: Optional[float] = None
        self._redraw_timer: Optional[threading.Timer] = None
        self._mouse_capturing: Optional[Primitive] = None
        self._last_mouse = (0, 0)
        self._mouse_down = (0, 0)
        self._last_click: Optional[float] = None
        self._last_buttons = ButtonMask.NONE

        if screen is not None:
            self.set_screen(screen)

    # Screen management.

    @property
    def screen(self) -> Optional[Screen]:
        with self._lock:
            return self._screen

    def set_screen(self, screen: Optional[Screen]) -> "Application":
        """Use ``screen``; while running, the old screen is finalized and replaced."""
        if screen is None:
            return self
        with self._lock:
            if self._screen is None:
                self._screen = screen
                return self
            old = self._screen
        old.fini()
        self._replacements.put(screen)
        return self

    def enable_mouse(self, enable: bool = True) -> "Application":
        """Switch mouse events on or off."""
        with self._lock:
            if enable != self._mouse_enabled and self._screen is not None:
                if enable:
                    self._screen.enable_mouse()
                else:
                    self._screen.disable_mouse()
            self._mouse_enabled = enable
        return self

    # The event loop.

    def run(self) -> None:
        """Run the event loop until :meth:`stop` is called.

        Raises ``RuntimeError`` without a screen, and the ``EventError`` the
        screen reported if that is what ended the loop.
        """
        with self._lock:
            screen = self._screen
            if screen is None:
                raise RuntimeError("no screen has been set")
            self._error = None
            self._discard_stale()
            screen.init()
            if self._mouse_enabled:
                screen.enable_mouse()

        poller = threading.Thread(target=self._poll_screen, daemon=True)
        try:
            self._draw()
            poller.start()
            self._event_loop()
        except BaseException:
            with self._lock:
                screen = self._screen
                self._screen = None
            if screen is not None:
                screen.fini()
            self._replacements.put(None)
            raise

        poller.join()
        with self._lock:
            self._screen = None
        if self._error is not None:
            raise self._error

    def _discard_stale(self) -> None:
        while True:
            try:
                self._replacements.get_nowait()
            except queue.Empty:
                break
        kept = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is not _STOP:
                kept.append(item)
        for item in kept:
            self._queue.put(item)

    def _poll_screen(self) -> None:
        while True:
            with self._lock:
                screen = self._screen
            if screen is None:
                self._queue.put(_STOP)
                return

            event = screen.poll_event()
            if event is not None:
                self._queue.put(event)
                continue

            # The screen was finalized; wait for a replacement.
            screen = self._replacements.get()
            if screen is None:
                self._queue.put(_STOP)
                return
            with self._lock:
                self._screen = screen
                mouse = self._mouse_enabled
            screen.init()
            if mouse:
                screen.enable_mouse()
            self._draw()

    def _event_loop(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            if isinstance(item, _QueuedUpdate):
                item.run()
            else:
                self.handle_event(item)

    def handle_event(self, event: Event) -> None:
        """Process one screen event the way the event loop does."""
        if isinstance(event, EventKey):
            self._handle_key(event)
        elif isinstance(event, EventResize):
            self._handle_resize(event)
        elif isinstance(event, EventMouse):
            consumed, mouse_down = self._fire_mouse_actions(event)
            if consumed:
                self._draw()
            self._last_buttons = event.buttons
            if mouse_down:
                self._mouse_down = event.position
        elif isinstance(event, EventError):
            self._error = event
            self.stop()

    def _handle_key(self, event: EventKey) -> None:
        with self._lock:
            root = self._root
            capture = self.input_capture

        draw = False
        if capture is not None:
            captured = capture(event)
            if captured is None:
                self._draw()
                return
            event = captured
            draw = True

        if event.key is Key.CTRL_C:
            self.stop()
            return

        if root is not None and root.has_focus():
            handler = root.input_handler()
            if handler is not None:
                handler(event, self.set_focus)
                draw = True

        if draw:
            self._draw()

    def _handle_resize(self, event: EventResize) -> None:
        now = time.monotonic()
        if self._last_redraw is not None and now - self._last_redraw < REDRAW_PAUSE:
            if self._redraw_timer is not None:
                self._redraw_timer.cancel()
            self._redraw_timer = threading.Timer(
                REDRAW_PAUSE, self._queue.put, args=(event,)
            )
            self._redraw_timer.daemon = True
            self._redraw_timer.start()
        with self._lock:
            screen = self._screen
        if screen is None:
            return
        self._last_redraw = time.monotonic()
        screen.clear()
        self._draw()

    def _fire_mouse_actions(self, event: EventMouse) -> tuple[bool, bool]:
        """Derive logical actions from a mouse event and deliver them."""
        consumed = False
        mouse_down = False
        target: Optional[Primitive] = None
        current: Optional[EventMouse] = event

        def fire(action: MouseAction) -> None:
            nonlocal consumed, mouse_down, target, current
            if action in _DOWN_ACTIONS:
                mouse_down = True

            if self.mouse_capture is not None:
                current, action = self.mouse_capture(current, action)
                if current is None:
                    consumed = True
                    return

            capturing: Optional[Primitive] = None
            if self._mouse_capturing is not None:
                primitive = self._mouse_capturing
                target = self._mouse_capturing
            elif target is not None:
                primitive = target
            else:
                primitive = self._root
            if primitive is not None:
                handler = primitive.mouse_handler()
                if handler is not None:
                    was_consumed, capturing = handler(action, current, self.set_focus)
                    if was_consumed:
                        consumed = True
            self._mouse_capturing = capturing

        x, y = event.position
        buttons = event.buttons
        click_moved = (x, y) != self._mouse_down
        changes = buttons ^ self._last_buttons

        if (x, y) != self._last_mouse:
            fire(MouseAction.MOVE)
            self._last_mouse = (x, y)

        for button, down, up, click, double_click in _BUTTON_ACTIONS:
            if not changes & button:
                continue
            if buttons & button:
                fire(down)
                continue
            fire(up)
            if click_moved:
                continue
            now = time.monotonic()
            if self._last_click is None or now - self._last_click > self.double_click_interval:
                fire(click)
                self._last_click = time.monotonic()
            else:
                fire(double_click)
                self._last_click = None

        for button, action in _WHEEL_ACTIONS:
            if buttons & button:
                fire(action)

        return consumed, mouse_down

    def stop(self) -> None:
        """Stop the application, making :meth:`run` return."""
        with self._lock:
            screen = self._screen
            if screen is None:
                return
            self._screen = None
            screen.fini()
            self._replacements.put(None)

    def suspend(self, func: Callable[[], None]) -> bool:
        """Leave screen mode, call ``func`` and return to screen mode.

        Returns False, without calling ``func``, if there is no screen or it
        could not be suspended.
        """
        with self._lock:
            screen = self._screen
        if screen is None:
            return False
        try:
            screen.suspend()
        except Exception:
            return False

        func()

        with self._lock:
            if self._screen is not screen:
                screen.fini()
                if self._screen is None:
                    return True
            else:
                with contextlib.suppress(Exception):
                    screen.resume()
        return True

    # Drawing.

    def draw(self) -> "Application":
        """Redraw the screen as part of the event loop and wait for it."""
        return self.queue_update(self._draw)

    def force_draw(self) -> "Application":
        """Redraw the screen immediately, in the calling thread."""
        return self._draw()

    def _draw(self) -> "Application":
        with self._lock:
            screen = self._screen
            root = self._root
            if screen is None or root is None:
                return self

            if self._root_fullscreen:
                width, height = screen.size()
                root.set_rect(0, 0, width, height)

            if self.before_draw is not None and self.before_draw(screen):
                screen.show()
                return self

            root.draw(screen)
            if self.after_draw is not None:
                self.after_draw(screen)
            screen.show()
        return self

    def sync(self) -> "Application":
        """Fully resynchronise the screen during the next event cycle."""

        def do_sync() -> None:
            with self._lock:
                screen = self._screen
            if screen is not None:
                screen.sync()

        self._queue.put(_QueuedUpdate(do_sync))
        return self

    # Root and focus.

    @property
    def root(self) -> Optional[Primitive]:
        with self._lock:
            return self._root

    def set_root(self, root: Optional[Primitive], fullscreen: bool = True) -> "Application":
        """Set the primitive drawn on the screen and give it the focus.

        With ``fullscreen`` the root is resized to fill the screen.
        """
        with self._lock:
            self._root = root
            self._root_fullscreen = fullscreen
            if self._screen is not None:
                self._screen.clear()
        self.set_focus(root)
        return self

    def resize_to_full_screen(self, primitive: Primitive) -> "Application":
        """Resize ``primitive`` to cover the whole screen."""
        with self._lock:
            screen = self._screen
        if screen is None:
            raise RuntimeError("no screen has been set")
        width, height = screen.size()
        primitive.set_rect(0, 0, width, height)
        return self

    def set_focus(self, primitive: Optional[Primitive]) -> "Application":
        """Move the keyboard focus to ``primitive``, blurring the previous one."""
        with self._lock:
            if self._focus is not None:
                self._focus.blur()
            self._focus = primitive
            if self._screen is not None:
                self._screen.hide_cursor()
        if primitive is not None:
            primitive.focus(self.set_focus)
        return self

    def get_focus(self) -> Optional[Primitive]:
        """Return the primitive that has the focus, or None."""
        with self._lock:
            return self._focus

    # Queued work.

    def queue_update(self, func: Callable[[], None]) -> "Application":
        """Run ``func`` inside the event loop and wait until it has run."""
        done = threading.Event()
        self._queue.put(_QueuedUpdate(func, done))
        done.wait()
        return self

    def queue_update_draw(self, func: Callable[[], None]) -> "Application":
        """Like :meth:`queue_update`, redrawing the screen after ``func``."""

        def update() -> None:
            func()
            self._draw()

        return self.queue_update(update)

    def queue_event(self, event: Event) -> "Application":
        """Send an event to the event loop."""
        if event is None:
            raise ValueError("cannot queue an empty event")
        self._queue.put(event)
        return self