"""Plain-terminal frontend: in-place frame output and raw key input."""

from .frame import LiveFrame
from .keyboard import RawKeyboard, parse_keys, split_incomplete_escape

__all__ = ["LiveFrame", "RawKeyboard", "parse_keys", "split_incomplete_escape"]
