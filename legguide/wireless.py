"""Decoding of the 40-byte wireless remote packet into user commands and stick values."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, fields

from legguide.keyboard import UserCommand, UserValue

_PACKET = struct.Struct("<2sH5f16s")
PACKET_SIZE = _PACKET.size
DEAD_ZONE = 0.08


@dataclass
class RemoteButtons:
    """State of the sixteen remote buttons, in bit order from the least significant bit."""

    r1: bool = False
    l1: bool = False
    start: bool = False
    select: bool = False
    r2: bool = False
    l2: bool = False
    f1: bool = False
    f2: bool = False
    a: bool = False
    b: bool = False
    x: bool = False
    y: bool = False
    up: bool = False
    right: bool = False
    down: bool = False
    left: bool = False

    @classmethod
    def from_value(cls, value: int) -> "RemoteButtons":
        """Decode a 16-bit button word."""
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"button word {value} does not fit in 16 bits")
        return cls(**{f.name: bool(value >> bit & 1) for bit, f in enumerate(fields(cls))})

    def __int__(self) -> int:
        return sum(1 << bit for bit, f in enumerate(fields(self)) if getattr(self, f.name))


@dataclass
class RemoteData:
    """Content of a wireless remote packet."""

    head: bytes = b"\x00\x00"
    buttons: RemoteButtons = field(default_factory=RemoteButtons)
    lx: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    l2: float = 0.0
    ly: float = 0.0
    idle: bytes = bytes(16)

    @classmethod
    def unpack(cls, data: bytes) -> "RemoteData":
        """Decode the first 40 bytes of ``data``."""
        raw = bytes(data)
        if len(raw) < PACKET_SIZE:
            raise ValueError(f"remote packet needs {PACKET_SIZE} bytes, got {len(raw)}")
        head, btn, lx, rx, ry, l2, ly, idle = _PACKET.unpack(raw[:PACKET_SIZE])
        return cls(head=head, buttons=RemoteButtons.from_value(btn),
                   lx=lx, rx=rx, ry=ry, l2=l2, ly=ly, idle=idle)

    def pack(self) -> bytes:
        """Encode as a 40-byte packet."""
        if len(self.head) != 2 or len(self.idle) != 16:
            raise ValueError("head must be 2 bytes and idle 16 bytes")
        return _PACKET.pack(self.head, int(self.buttons),
                            self.lx, self.rx, self.ry, self.l2, self.ly, self.idle)


def dead_zone(value: float, limit: float) -> float:
    """Return zero for values strictly inside (-limit, limit), else the value itself."""
    if -limit < value < limit:
        return 0.0
    return value


class WirelessHandle:
    """Tracks the user command and stick values from successive remote packets.

    The command keeps its last value until a new button combination is seen.
    ``L2 + Y`` is recognised only when ``move_base`` is enabled.
    """

    def __init__(self, move_base: bool = False):
        self.move_base = bool(move_base)
        self.user_cmd = UserCommand.NONE
        self.user_value = UserValue()

    def _command(self, btn: RemoteButtons) -> UserCommand | None:
        combos = [
            (btn.l2 and btn.b, UserCommand.L2_B),
            (btn.l2 and btn.a, UserCommand.L2_A),
            (btn.l2 and btn.x, UserCommand.L2_X),
            (self.move_base and btn.l2 and btn.y, UserCommand.L2_Y),
            (btn.l1 and btn.x, UserCommand.L1_X),
            (btn.l1 and btn.a, UserCommand.L1_A),
            (btn.l1 and btn.y, UserCommand.L1_Y),
            (btn.start, UserCommand.START),
        ]
        return next((cmd for hit, cmd in combos if hit), None)

    def receive(self, data: bytes) -> UserCommand:
        """Process one remote packet and return the current user command."""
        remote = RemoteData.unpack(data)
        command = self._command(remote.buttons)
        if command is not None:
            self.user_cmd = command
        value = self.user_value
        value.l2 = dead_zone(remote.l2, DEAD_ZONE)
        value.lx = dead_zone(remote.lx, DEAD_ZONE)
        value.ly = dead_zone(remote.ly, DEAD_ZONE)
        value.rx = dead_zone(remote.rx, DEAD_ZONE)
        value.ry = dead_zone(remote.ry, DEAD_ZONE)
        return self.user_cmd