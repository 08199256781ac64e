# cellview

Building blocks for text user interfaces drawn on a grid of character cells.
It has no dependencies outside the standard library.

## Modules

- `cellview.ansi`: `AnsiWriter` and `translate_ansi`. They turn ANSI escape
  sequences into colour tags of the form `[foreground:background:flags]`.
  SGR colours (16-colour, 256-colour and 24-bit), the bold, dim, underline and
  blink attributes, next-line (`ESC [ n E`) and reset (`ESC c`) are all
  translated. Any other escape sequence is dropped.
- `cellview.borders`: `BorderSet` holds the line-drawing characters used for
  frames. `for_focus(focused)` returns the plain set or the double-line focused
  set. `BORDERS` is the instance that boxes draw with.
- `cellview.screen`: this module has several parts.
  - Styles: `Style` is an immutable mix of foreground, background and
    `AttrMask` attributes. Its `with_foreground`, `with_background` and
    `with_attributes` methods return changed copies. A colour is a name, a
    `#rrggbb` string, or `None` for the default.
  - Input: keys and mouse buttons are `Key` and `ButtonMask`.
  - Events: `EventKey` (with `EventKey.for_rune`), `EventMouse`, `EventResize`
    and `EventError`.
  - Screens: the abstract `Screen` interface and `MemoryScreen`, which keeps
    its cells in memory.
- `cellview.box`: `Box` is the base primitive. It has a rectangle, padding, an
  optional border and title, and focus handling. The `input_capture`,
  `mouse_capture` and `draw_func` hooks let you intercept events and drawing.
  `Align` and `MouseAction` are defined here as well.
- `cellview.application`: `Application` runs the event loop on a screen.
  - It draws the root primitive and passes key events to it.
  - It turns raw mouse events into moves, downs, ups, clicks, double clicks
    and scrolls.
  - Ctrl-C stops the loop.
  - Hooks: `input_capture`, `mouse_capture`, `before_draw` and `after_draw`.
- `cellview.button`: `Button` is a one-line labelled box.
  - Enter or a left click calls `selected_func`.
  - Tab, Backtab or Escape calls `blur_func` with the key that was pressed.
- `cellview.checkbox`: `Checkbox` shows a label and a one-field check box.
  - Space, Enter or a left click on its first row toggles `checked` and calls
    `changed_func`.
  - Tab, Backtab or Escape calls `done_func` and `finished_func`.

## Translating ANSI output

```python
from cellview.ansi import translate_ansi

translate_ansi("\x1b[31mred\x1b[0m plain")
# '[maroon:]red[-:-:-] plain'
```

To translate text as it arrives, wrap any object that has a `write` method.
Parser state carries over from one call to the next:

```python
import io
from cellview.ansi import AnsiWriter

sink = io.StringIO()
writer = AnsiWriter(sink)
writer.write("\x1b[1mbold\x1b[22m")
sink.getvalue()
```

## Drawing widgets

```python
from cellview.screen import MemoryScreen
from cellview.button import Button
from cellview.application import Application

screen = MemoryScreen(40, 5)
button = Button("OK")
app = Application(screen)
app.set_root(button, True)
app.force_draw()
print(screen.row_text(2))
```

`MemoryScreen` records everything written to it:

- every cell you set, readable with `get_content` and `row_text`;
- every event you post with `post_event`;
- counters for `show` and `sync`.

`set_size` resizes the screen and posts an `EventResize`. An `Application`
can be driven in two ways:

- Call `run` in one thread. Then feed it events with `queue_event` and work
  with `queue_update` or `draw`, and end it with `stop`.
- Pass events one at a time to `handle_event`, with no loop running.

## What the package does not do

The package has no screen that drives a real terminal. `MemoryScreen` is the
only implementation of `Screen`, so nothing reaches an actual console unless
you supply your own `Screen`. `Application.run` raises `RuntimeError` if no
screen has been set.

The widget set is limited to `Box`, `Button` and `Checkbox`. There are no
layouts, lists, tables, text views or forms. Colour tags are produced by
`cellview.ansi`, but widgets print their labels and titles as plain text and
do not interpret those tags.