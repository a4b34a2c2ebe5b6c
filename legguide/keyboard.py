"""Keyboard command panel: maps single key presses to user commands and stick values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class UserCommand(Enum):
    """Commands a user can issue from a keyboard or a remote control."""

    NONE = "none"
    START = "start"
    L2_A = "l2_a"
    L2_B = "l2_b"
    L2_X = "l2_x"
    L2_Y = "l2_y"
    L1_X = "l1_x"
    L1_A = "l1_a"
    L1_Y = "l1_y"


@dataclass
class UserValue:
    """Analogue inputs: left and right stick axes and the L2 trigger, each in [-1, 1]."""

    lx: float = 0.0
    ly: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    l2: float = 0.0

    def reset(self) -> None:
        """Set every axis back to zero."""
        self.lx = self.ly = self.rx = self.ry = self.l2 = 0.0


_COMMAND_KEYS = {
    "1": UserCommand.L2_B,
    "2": UserCommand.L2_A,
    "3": UserCommand.L2_X,
    "4": UserCommand.START,
    "0": UserCommand.L1_X,
    "9": UserCommand.L1_A,
    "8": UserCommand.L1_Y,
}

# key -> (axis name, direction, uses the left-stick sensitivity)
_AXIS_KEYS = {
    "w": ("ly", 1.0, True),
    "s": ("ly", -1.0, True),
    "d": ("lx", 1.0, True),
    "a": ("lx", -1.0, True),
    "i": ("ry", 1.0, False),
    "k": ("ry", -1.0, False),
    "l": ("rx", 1.0, False),
    "j": ("rx", -1.0, False),
}


class KeyboardPanel:
    """Turns key presses into a current user command and stick values.

    Digit keys select commands; ``w``/``s``/``a``/``d`` move the left stick and
    ``i``/``k``/``j``/``l`` the right stick by the sensitivity per press,
    clamped to [-1, 1]. Space centres both sticks. Key ``5`` selects
    ``L2_Y`` only when ``move_base`` is enabled.
    """

    def __init__(self, sensitivity_left: float = 0.05, sensitivity_right: float = 0.05,
                 move_base: bool = False):
        self.sensitivity_left = float(sensitivity_left)
        self.sensitivity_right = float(sensitivity_right)
        self.move_base = bool(move_base)
        self.user_cmd = UserCommand.NONE
        self.user_value = UserValue()

    def _check_command(self, key: str) -> UserCommand:
        if key == "5" and self.move_base:
            return UserCommand.L2_Y
        if key == " ":
            self.user_value.reset()
            return UserCommand.NONE
        return _COMMAND_KEYS.get(key, UserCommand.NONE)

    def _change_value(self, key: str) -> None:
        entry = _AXIS_KEYS.get(key.lower())
        if entry is None:
            return
        axis, direction, left = entry
        step = self.sensitivity_left if left else self.sensitivity_right
        current = getattr(self.user_value, axis)
        if direction > 0:
            new = min(current + step, 1.0)
        else:
            new = max(current - step, -1.0)
        setattr(self.user_value, axis, new)

    def press(self, key: str) -> UserCommand:
        """Handle one key press and return the resulting user command."""
        if len(key) != 1:
            raise ValueError(f"expected a single character, got {key!r}")
        self.user_cmd = self._check_command(key)
        if self.user_cmd is UserCommand.NONE:
            self._change_value(key)
        return self.user_cmd

    def feed(self, keys: Iterable[str]) -> UserCommand:
        """Handle a sequence of key presses; return the command after the last one."""
        for key in keys:
            self.press(key)
        return self.user_cmd