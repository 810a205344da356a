"""Rendering-agnostic key events consumed by the input handler.

A front end translates its own key codes into KeyEvent values; the
engine never sees terminal-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class KeyCode(StrEnum):
    """Logical keys the state machine reacts to."""

    CHAR = "char"
    ENTER = "enter"
    ESC = "esc"
    UP = "up"
    DOWN = "down"
    BACKSPACE = "backspace"


@dataclass(frozen=True)
class KeyEvent:
    """A single key press.

    Attributes:
        code: Which logical key was pressed.
        char: The typed character for CHAR events.
        ctrl: Whether the control modifier was held.
    """

    code: KeyCode
    char: str | None = None
    ctrl: bool = False

    def __post_init__(self) -> None:
        if self.code is KeyCode.CHAR and (self.char is None or len(self.char) != 1):
            raise ValueError("CHAR key events need exactly one character")

    @classmethod
    def of(cls, char: str, *, ctrl: bool = False) -> KeyEvent:
        return cls(KeyCode.CHAR, char=char, ctrl=ctrl)

    @classmethod
    def enter(cls) -> KeyEvent:
        return cls(KeyCode.ENTER)

    @classmethod
    def esc(cls) -> KeyEvent:
        return cls(KeyCode.ESC)

    @classmethod
    def up(cls) -> KeyEvent:
        return cls(KeyCode.UP)

    @classmethod
    def down(cls) -> KeyEvent:
        return cls(KeyCode.DOWN)

    @classmethod
    def backspace(cls) -> KeyEvent:
        return cls(KeyCode.BACKSPACE)

    def is_char(self, *chars: str) -> bool:
        """True for a plain CHAR event whose character is one of ``chars``."""
        return self.code is KeyCode.CHAR and not self.ctrl and self.char in chars


def type_text(text: str) -> list[KeyEvent]:
    """Expand ``text`` into one CHAR event per character."""
    return [KeyEvent.of(c) for c in text]


__all__ = [
    "KeyCode",
    "KeyEvent",
    "type_text",
]
