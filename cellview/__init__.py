"""Colour tags, styles, events, a memory screen, an event loop and basic widgets for character-cell interfaces."""

__version__ = "0.1.0"
__all__ = ["ansi", "borders", "screen", "box", "application", "button", "checkbox"]