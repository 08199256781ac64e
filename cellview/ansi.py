"""Translation of ANSI escape sequences into colour tags."""

from __future__ import annotations

import io
import re
from enum import Enum, auto
from typing import TextIO

_RESET_TAG = "[-:-:-]"
_ESC = "\x1b"

_COLOR_NAMES = (
    "black",
    "maroon",
    "green",
    "olive",
    "navy",
    "purple",
    "teal",
    "silver",
    "gray",
    "red",
    "lime",
    "yellow",
    "blue",
    "fuchsia",
    "aqua",
    "white",
)

_SET_FLAGS = {
    "1": "b", "01": "b",
    "2": "d", "02": "d",
    "4": "u", "04": "u",
    "5": "l", "05": "l",
}
_CLEAR_FLAGS = {"22": "bd", "24": "u", "25": "l"}

_FOREGROUND = frozenset(str(n) for n in range(30, 38))
_BACKGROUND = frozenset(str(n) for n in range(40, 48))
_BRIGHT_FOREGROUND = frozenset(str(n) for n in range(90, 98))
_BRIGHT_BACKGROUND = frozenset(str(n) for n in range(100, 108))

_INTEGER = re.compile(r"[+-]?[0-9]+")


class _State(Enum):
    TEXT = auto()
    ESCAPE = auto()
    SUBSTRING = auto()
    CONTROL_SEQUENCE = auto()


def _atoi(text: str) -> int:
    """Parse a decimal integer, yielding 0 for anything unparsable."""
    return int(text) if _INTEGER.fullmatch(text) else 0


def _lookup_color(number: int) -> str:
    if 0 <= number <= 15:
        return _COLOR_NAMES[number]
    return "black"


def _hex_color(red: int, green: int, blue: int) -> str:
    return f"#{red:02x}{green:02x}{blue:02x}"


def _extended_color(fields: list[str], index: int) -> str:
    """Decode an 8-bit or 24-bit colour following a 38/48 field."""
    if len(fields) <= index + 1:
        return ""
    mode = fields[index + 1]
    if mode == "5" and len(fields) > index + 2:
        number = _atoi(fields[index + 2])
        if number <= 15:
            return _lookup_color(number)
        if number <= 231:
            red = (number - 16) // 36
            green = ((number - 16) // 6) % 6
            blue = (number - 16) % 6
            return _hex_color(255 * red // 5, 255 * green // 5, 255 * blue // 5)
        if number <= 255:
            grey = 255 * (number - 232) // 23
            return _hex_color(grey, grey, grey)
        return ""
    if mode == "2" and len(fields) > index + 4:
        return _hex_color(
            _atoi(fields[index + 2]),
            _atoi(fields[index + 3]),
            _atoi(fields[index + 4]),
        )
    return ""


class AnsiWriter:
    """A text writer that turns ANSI escape codes into colour tags.

    Colour and attribute sequences become tags; other escape sequences are
    dropped. The translated text goes to the wrapped writer. Parser state
    carries over between calls to :meth:`write`.
    """

    def __init__(self, writer: TextIO) -> None:
        self._writer = writer
        self._state = _State.TEXT
        self._csi_parameter: list[str] = []
        self._csi_intermediate: list[str] = []
        self._attributes = ""

    def write(self, text: str | bytes) -> int:
        """Translate ``text`` and write it out; return the length consumed."""
        length = len(text)
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", errors="replace")

        out: list[str] = []
        for char in text:
            if self._state is _State.ESCAPE:
                self._on_escape(char, out)
            elif self._state is _State.CONTROL_SEQUENCE:
                self._on_control_sequence(char, out)
            elif self._state is _State.SUBSTRING:
                if char == _ESC:
                    self._state = _State.ESCAPE
            elif char == _ESC:
                self._state = _State.ESCAPE
            else:
                out.append(char)

        self._writer.write("".join(out))
        return length

    def _on_escape(self, char: str, out: list[str]) -> None:
        if char == "[":
            self._csi_parameter.clear()
            self._csi_intermediate.clear()
            self._state = _State.CONTROL_SEQUENCE
        elif char == "c":
            out.append(_RESET_TAG)
            self._state = _State.TEXT
        elif char in "P]X^_":
            self._state = _State.SUBSTRING
        else:
            self._state = _State.TEXT

    def _on_control_sequence(self, char: str, out: list[str]) -> None:
        code = ord(char)
        if 0x30 <= code <= 0x3F:
            self._csi_parameter.append(char)
            return
        if 0x20 <= code <= 0x2F:
            self._csi_intermediate.append(char)
            return
        if 0x40 <= code <= 0x7E:
            params = "".join(self._csi_parameter)
            if char == "E":
                out.append("\n" * (_atoi(params) or 1))
            elif char == "m":
                out.append(self._select_graphic_rendition(params))
        self._state = _State.TEXT

    def _select_graphic_rendition(self, params: str) -> str:
        fields = params.split(";")
        if not params or fields == ["0"]:
            self._attributes = ""
            return _RESET_TAG

        foreground = ""
        background = ""
        for index, field in enumerate(fields):
            if field in _SET_FLAGS:
                flag = _SET_FLAGS[field]
                if flag not in self._attributes:
                    self._attributes += flag
            elif field in _CLEAR_FLAGS:
                for flag in _CLEAR_FLAGS[field]:
                    self._attributes = self._attributes.replace(flag, "", 1)
            elif field in _FOREGROUND:
                foreground = _lookup_color(int(field) - 30)
            elif field == "39":
                foreground = "-"
            elif field in _BACKGROUND:
                background = _lookup_color(int(field) - 40)
            elif field == "49":
                background = "-"
            elif field in _BRIGHT_FOREGROUND:
                foreground = _lookup_color(int(field) - 82)
            elif field in _BRIGHT_BACKGROUND:
                background = _lookup_color(int(field) - 92)
            elif field in ("38", "48"):
                color = _extended_color(fields, index)
                if color:
                    if field == "38":
                        foreground = color
                    else:
                        background = color
                break

        if not (foreground or background or self._attributes):
            return ""
        colon = ":" if self._attributes else ""
        return f"[{foreground}:{background}{colon}{self._attributes}]"


def translate_ansi(text: str) -> str:
    """Return ``text`` with ANSI escape sequences replaced by colour tags."""
    buffer = io.StringIO()
    AnsiWriter(buffer).write(text)
    return buffer.getvalue()