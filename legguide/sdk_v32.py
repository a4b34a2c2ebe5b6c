"""Packed wire structures of the legged robot SDK, protocol version 3.2.

All structures are little-endian with no padding between fields.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar, Sequence

HIGHLEVEL = 0x00
LOWLEVEL = 0xFF
POS_STOP_F = struct.unpack("<f", struct.pack("<f", 2.146e9))[0]
VEL_STOP_F = 16000.0
MOTOR_COUNT = 20
LED_COUNT = 4
FOOT_COUNT = 4
REMOTE_SIZE = 40

_CARTESIAN = struct.Struct("<3f")
_IMU = struct.Struct("<4f3f3f3fb")
_LED = struct.Struct("<3B")
_MOTOR_STATE = struct.Struct("<B7fb2I")
_MOTOR_CMD = struct.Struct("<B5f3I")
_HEADER = struct.Struct("<BHHIB")
_HIGH_HEADER = struct.Struct("<BHHIBB")
_LOW_STATE_TAIL = struct.Struct("<4h4hI40sII")
_LOW_CMD_TAIL = struct.Struct("<40sII")
_HIGH_STATE_SPEEDS = struct.Struct("<7f")
_HIGH_STATE_TAIL = struct.Struct("<4h4hI40sII")
_HIGH_CMD_FLOATS = struct.Struct("<8f")
_HIGH_CMD_TAIL = struct.Struct("<40s40sII")


def _pack(st: struct.Struct, *values) -> bytes:
    try:
        return st.pack(*values)
    except struct.error as exc:
        raise ValueError(str(exc)) from exc


def _fixed(values: Sequence, count: int, name: str) -> list:
    items = list(values)
    if len(items) != count:
        raise ValueError(f"{name} needs {count} elements, got {len(items)}")
    return items


def _blob(value: bytes, size: int, name: str) -> bytes:
    raw = bytes(value)
    if len(raw) != size:
        raise ValueError(f"{name} needs {size} bytes, got {len(raw)}")
    return raw


def _exact(data: bytes, size: int, name: str) -> bytes:
    raw = bytes(data)
    if len(raw) != size:
        raise ValueError(f"{name} needs {size} bytes, got {len(raw)}")
    return raw


class _Reader:
    """Walks through a byte string field by field."""

    def __init__(self, raw: bytes):
        self._raw = raw
        self._pos = 0

    def take(self, size: int) -> bytes:
        chunk = self._raw[self._pos:self._pos + size]
        self._pos += size
        return chunk

    def fields(self, st: struct.Struct) -> tuple:
        return st.unpack(self.take(st.size))

    def items(self, cls, count: int) -> list:
        return [cls.unpack(self.take(cls.SIZE)) for _ in range(count)]


def _join(items: Sequence, count: int, name: str) -> bytes:
    return b"".join(item.pack() for item in _fixed(items, count, name))


@dataclass
class Cartesian:
    """A point or vector in three dimensions."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    SIZE: ClassVar[int] = _CARTESIAN.size

    def pack(self) -> bytes:
        return _pack(_CARTESIAN, self.x, self.y, self.z)

    @classmethod
    def unpack(cls, data: bytes) -> "Cartesian":
        return cls(*_CARTESIAN.unpack(_exact(data, cls.SIZE, "Cartesian")))


@dataclass
class Imu:
    """Inertial measurement: quaternion (w, x, y, z), gyroscope, accelerometer, Euler angles."""

    quaternion: list = field(default_factory=lambda: [0.0] * 4)
    gyroscope: list = field(default_factory=lambda: [0.0] * 3)
    accelerometer: list = field(default_factory=lambda: [0.0] * 3)
    rpy: list = field(default_factory=lambda: [0.0] * 3)
    temperature: int = 0

    SIZE: ClassVar[int] = _IMU.size

    def pack(self) -> bytes:
        return _pack(
            _IMU,
            *_fixed(self.quaternion, 4, "quaternion"),
            *_fixed(self.gyroscope, 3, "gyroscope"),
            *_fixed(self.accelerometer, 3, "accelerometer"),
            *_fixed(self.rpy, 3, "rpy"),
            self.temperature,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "Imu":
        values = _IMU.unpack(_exact(data, cls.SIZE, "Imu"))
        return cls(
            quaternion=list(values[0:4]),
            gyroscope=list(values[4:7]),
            accelerometer=list(values[7:10]),
            rpy=list(values[10:13]),
            temperature=values[13],
        )


@dataclass
class Led:
    """Foot LED colour, each channel 0 to 255."""

    r: int = 0
    g: int = 0
    b: int = 0

    SIZE: ClassVar[int] = _LED.size

    def pack(self) -> bytes:
        return _pack(_LED, self.r, self.g, self.b)

    @classmethod
    def unpack(cls, data: bytes) -> "Led":
        return cls(*_LED.unpack(_exact(data, cls.SIZE, "Led")))


@dataclass
class MotorState:
    """Feedback of one motor."""

    mode: int = 0
    q: float = 0.0
    dq: float = 0.0
    ddq: float = 0.0
    tau_est: float = 0.0
    q_raw: float = 0.0
    dq_raw: float = 0.0
    ddq_raw: float = 0.0
    temperature: int = 0
    reserve: list = field(default_factory=lambda: [0, 0])

    SIZE: ClassVar[int] = _MOTOR_STATE.size

    def pack(self) -> bytes:
        return _pack(
            _MOTOR_STATE, self.mode, self.q, self.dq, self.ddq, self.tau_est,
            self.q_raw, self.dq_raw, self.ddq_raw, self.temperature,
            *_fixed(self.reserve, 2, "reserve"),
        )

    @classmethod
    def unpack(cls, data: bytes) -> "MotorState":
        values = _MOTOR_STATE.unpack(_exact(data, cls.SIZE, "MotorState"))
        return cls(*values[:9], reserve=list(values[9:11]))


@dataclass
class MotorCmd:
    """Command for one motor."""

    mode: int = 0
    q: float = 0.0
    dq: float = 0.0
    tau: float = 0.0
    kp: float = 0.0
    kd: float = 0.0
    reserve: list = field(default_factory=lambda: [0, 0, 0])

    SIZE: ClassVar[int] = _MOTOR_CMD.size

    def pack(self) -> bytes:
        return _pack(
            _MOTOR_CMD, self.mode, self.q, self.dq, self.tau, self.kp, self.kd,
            *_fixed(self.reserve, 3, "reserve"),
        )

    @classmethod
    def unpack(cls, data: bytes) -> "MotorCmd":
        values = _MOTOR_CMD.unpack(_exact(data, cls.SIZE, "MotorCmd"))
        return cls(*values[:6], reserve=list(values[6:9]))


@dataclass
class LowState:
    """Low-level feedback from the robot."""

    level_flag: int = 0
    comm_version: int = 0
    robot_id: int = 0
    sn: int = 0
    band_width: int = 0
    imu: Imu = field(default_factory=Imu)
    motor_state: list = field(default_factory=lambda: [MotorState() for _ in range(MOTOR_COUNT)])
    foot_force: list = field(default_factory=lambda: [0] * FOOT_COUNT)
    foot_force_est: list = field(default_factory=lambda: [0] * FOOT_COUNT)
    tick: int = 0
    wireless_remote: bytes = bytes(REMOTE_SIZE)
    reserve: int = 0
    crc: int = 0

    SIZE: ClassVar[int] = (_HEADER.size + Imu.SIZE + MOTOR_COUNT * MotorState.SIZE
                           + _LOW_STATE_TAIL.size)

    def pack(self) -> bytes:
        return b"".join([
            _pack(_HEADER, self.level_flag, self.comm_version, self.robot_id,
                  self.sn, self.band_width),
            self.imu.pack(),
            _join(self.motor_state, MOTOR_COUNT, "motor_state"),
            _pack(_LOW_STATE_TAIL,
                  *_fixed(self.foot_force, FOOT_COUNT, "foot_force"),
                  *_fixed(self.foot_force_est, FOOT_COUNT, "foot_force_est"),
                  self.tick,
                  _blob(self.wireless_remote, REMOTE_SIZE, "wireless_remote"),
                  self.reserve, self.crc),
        ])

    @classmethod
    def unpack(cls, data: bytes) -> "LowState":
        reader = _Reader(_exact(data, cls.SIZE, "LowState"))
        header = reader.fields(_HEADER)
        imu = Imu.unpack(reader.take(Imu.SIZE))
        motors = reader.items(MotorState, MOTOR_COUNT)
        tail = reader.fields(_LOW_STATE_TAIL)
        return cls(
            *header, imu=imu, motor_state=motors,
            foot_force=list(tail[0:4]), foot_force_est=list(tail[4:8]),
            tick=tail[8], wireless_remote=tail[9], reserve=tail[10], crc=tail[11],
        )


@dataclass
class LowCmd:
    """Low-level command to the robot."""

    level_flag: int = 0
    comm_version: int = 0
    robot_id: int = 0
    sn: int = 0
    band_width: int = 0
    motor_cmd: list = field(default_factory=lambda: [MotorCmd() for _ in range(MOTOR_COUNT)])
    led: list = field(default_factory=lambda: [Led() for _ in range(LED_COUNT)])
    wireless_remote: bytes = bytes(REMOTE_SIZE)
    reserve: int = 0
    crc: int = 0

    SIZE: ClassVar[int] = (_HEADER.size + MOTOR_COUNT * MotorCmd.SIZE + LED_COUNT * Led.SIZE
                           + _LOW_CMD_TAIL.size)

    def pack(self) -> bytes:
        return b"".join([
            _pack(_HEADER, self.level_flag, self.comm_version, self.robot_id,
                  self.sn, self.band_width),
            _join(self.motor_cmd, MOTOR_COUNT, "motor_cmd"),
            _join(self.led, LED_COUNT, "led"),
            _pack(_LOW_CMD_TAIL,
                  _blob(self.wireless_remote, REMOTE_SIZE, "wireless_remote"),
                  self.reserve, self.crc),
        ])

    @classmethod
    def unpack(cls, data: bytes) -> "LowCmd":
        reader = _Reader(_exact(data, cls.SIZE, "LowCmd"))
        header = reader.fields(_HEADER)
        motors = reader.items(MotorCmd, MOTOR_COUNT)
        leds = reader.items(Led, LED_COUNT)
        remote, reserve, crc = reader.fields(_LOW_CMD_TAIL)
        return cls(*header, motor_cmd=motors, led=leds,
                   wireless_remote=remote, reserve=reserve, crc=crc)


@dataclass
class HighState:
    """High-level feedback from the robot."""

    level_flag: int = 0
    comm_version: int = 0
    robot_id: int = 0
    sn: int = 0
    band_width: int = 0
    mode: int = 0
    imu: Imu = field(default_factory=Imu)
    forward_speed: float = 0.0
    side_speed: float = 0.0
    rotate_speed: float = 0.0
    body_height: float = 0.0
    updown_speed: float = 0.0
    forward_position: float = 0.0
    side_position: float = 0.0
    foot_position2body: list = field(default_factory=lambda: [Cartesian() for _ in range(FOOT_COUNT)])
    foot_speed2body: list = field(default_factory=lambda: [Cartesian() for _ in range(FOOT_COUNT)])
    foot_force: list = field(default_factory=lambda: [0] * FOOT_COUNT)
    foot_force_est: list = field(default_factory=lambda: [0] * FOOT_COUNT)
    tick: int = 0
    wireless_remote: bytes = bytes(REMOTE_SIZE)
    reserve: int = 0
    crc: int = 0

    SIZE: ClassVar[int] = (_HIGH_HEADER.size + Imu.SIZE + _HIGH_STATE_SPEEDS.size
                           + 2 * FOOT_COUNT * Cartesian.SIZE + _HIGH_STATE_TAIL.size)

    def pack(self) -> bytes:
        return b"".join([
            _pack(_HIGH_HEADER, self.level_flag, self.comm_version, self.robot_id,
                  self.sn, self.band_width, self.mode),
            self.imu.pack(),
            _pack(_HIGH_STATE_SPEEDS, self.forward_speed, self.side_speed,
                  self.rotate_speed, self.body_height, self.updown_speed,
                  self.forward_position, self.side_position),
            _join(self.foot_position2body, FOOT_COUNT, "foot_position2body"),
            _join(self.foot_speed2body, FOOT_COUNT, "foot_speed2body"),
            _pack(_HIGH_STATE_TAIL,
                  *_fixed(self.foot_force, FOOT_COUNT, "foot_force"),
                  *_fixed(self.foot_force_est, FOOT_COUNT, "foot_force_est"),
                  self.tick,
                  _blob(self.wireless_remote, REMOTE_SIZE, "wireless_remote"),
                  self.reserve, self.crc),
        ])

    @classmethod
    def unpack(cls, data: bytes) -> "HighState":
        reader = _Reader(_exact(data, cls.SIZE, "HighState"))
        header = reader.fields(_HIGH_HEADER)
        imu = Imu.unpack(reader.take(Imu.SIZE))
        speeds = reader.fields(_HIGH_STATE_SPEEDS)
        positions = reader.items(Cartesian, FOOT_COUNT)
        velocities = reader.items(Cartesian, FOOT_COUNT)
        tail = reader.fields(_HIGH_STATE_TAIL)
        return cls(
            *header, imu, *speeds,
            foot_position2body=positions, foot_speed2body=velocities,
            foot_force=list(tail[0:4]), foot_force_est=list(tail[4:8]),
            tick=tail[8], wireless_remote=tail[9], reserve=tail[10], crc=tail[11],
        )


@dataclass
class HighCmd:
    """High-level command to the robot.

    ``mode`` is 0 for idle (default stand), 1 for forced stand and 2 for
    continuous walking; speeds, height and angles are scaled to [-1, 1].
    """

    level_flag: int = 0
    comm_version: int = 0
    robot_id: int = 0
    sn: int = 0
    band_width: int = 0
    mode: int = 0
    forward_speed: float = 0.0
    side_speed: float = 0.0
    rotate_speed: float = 0.0
    body_height: float = 0.0
    foot_raise_height: float = 0.0
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    led: list = field(default_factory=lambda: [Led() for _ in range(LED_COUNT)])
    wireless_remote: bytes = bytes(REMOTE_SIZE)
    app_remote: bytes = bytes(REMOTE_SIZE)
    reserve: int = 0
    crc: int = 0

    SIZE: ClassVar[int] = (_HIGH_HEADER.size + _HIGH_CMD_FLOATS.size + LED_COUNT * Led.SIZE
                           + _HIGH_CMD_TAIL.size)

    def pack(self) -> bytes:
        return b"".join([
            _pack(_HIGH_HEADER, self.level_flag, self.comm_version, self.robot_id,
                  self.sn, self.band_width, self.mode),
            _pack(_HIGH_CMD_FLOATS, self.forward_speed, self.side_speed,
                  self.rotate_speed, self.body_height, self.foot_raise_height,
                  self.yaw, self.pitch, self.roll),
            _join(self.led, LED_COUNT, "led"),
            _pack(_HIGH_CMD_TAIL,
                  _blob(self.wireless_remote, REMOTE_SIZE, "wireless_remote"),
                  _blob(self.app_remote, REMOTE_SIZE, "app_remote"),
                  self.reserve, self.crc),
        ])

    @classmethod
    def unpack(cls, data: bytes) -> "HighCmd":
        reader = _Reader(_exact(data, cls.SIZE, "HighCmd"))
        header = reader.fields(_HIGH_HEADER)
        floats = reader.fields(_HIGH_CMD_FLOATS)
        leds = reader.items(Led, LED_COUNT)
        remote, app_remote, reserve, crc = reader.fields(_HIGH_CMD_TAIL)
        return cls(*header, *floats, led=leds, wireless_remote=remote,
                   app_remote=app_remote, reserve=reserve, crc=crc)


HIGH_CMD_LENGTH = HighCmd.SIZE
HIGH_STATE_LENGTH = HighState.SIZE