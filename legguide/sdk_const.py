"""Robot types, joint numbering, joint limits and link settings of the legged robot SDK."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class LeggedType(Enum):
    """Robot models known to the SDK."""

    ALIENGO = "aliengo"
    A1 = "a1"
    GO1 = "go1"


class HighLevelType(Enum):
    """Flavours of high-level control."""

    BASIC = "basic"
    SPORT = "sport"


class RecvMode(IntEnum):
    """How a UDP receive waits for data."""

    NON_BLOCK = 0x00
    BLOCK = 0x01
    BLOCK_TIMEOUT = 0x02


# Leg indices.
FR = 0
FL = 1
RR = 2
RL = 3
LEG_COUNT = 4

# Joint indices within a leg.
HIP = 0
THIGH = 1
CALF = 2
JOINTS_PER_LEG = 3

UDP_CLIENT_PORT = 8080
UDP_SERVER_PORT = 8007
UDP_SERVER_IP_BASIC = "192.168.123.10"
UDP_SERVER_IP_SPORT = "192.168.123.161"

HIGH_CMD_CHANNEL = "LCM_High_Cmd"
HIGH_STATE_CHANNEL = "LCM_High_State"
LOW_CMD_CHANNEL = "LCM_Low_Cmd"
LOW_STATE_CHANNEL = "LCM_Low_State"

THREAD_PRIORITY = 99


@dataclass(frozen=True)
class JointLimits:
    """Angle range, in radians, of the hip, thigh and calf joints."""

    hip_min: float
    hip_max: float
    thigh_min: float
    thigh_max: float
    calf_min: float
    calf_max: float

    def __post_init__(self):
        for lower, upper in self._ranges():
            if lower > upper:
                raise ValueError(f"joint minimum {lower} exceeds maximum {upper}")

    def _ranges(self) -> tuple[tuple[float, float], ...]:
        return (
            (self.hip_min, self.hip_max),
            (self.thigh_min, self.thigh_max),
            (self.calf_min, self.calf_max),
        )

    def clamp(self, joint: int, angle: float) -> float:
        """Limit ``angle`` to the range of ``joint`` (HIP, THIGH or CALF)."""
        if joint not in (HIP, THIGH, CALF):
            raise ValueError(f"joint must be 0, 1 or 2, got {joint}")
        lower, upper = self._ranges()[joint]
        return min(upper, max(lower, angle))


_LIMITS = {
    LeggedType.A1: JointLimits(
        hip_min=-0.802, hip_max=0.802,
        thigh_min=-1.05, thigh_max=4.19,
        calf_min=-2.7, calf_max=-0.916,
    ),
    LeggedType.ALIENGO: JointLimits(
        hip_min=-0.873, hip_max=1.047,
        thigh_min=-0.524, thigh_max=3.927,
        calf_min=-2.775, calf_max=-0.611,
    ),
}


def joint_limits(legged_type: LeggedType) -> JointLimits:
    """Joint limits of a robot model."""
    try:
        return _LIMITS[legged_type]
    except KeyError:
        raise ValueError(f"no joint limits are known for {legged_type}") from None


def joint_index(leg: int, joint: int) -> int:
    """Index of a joint among the twelve motors, legs in the order FR, FL, RR, RL."""
    if not 0 <= leg < LEG_COUNT:
        raise ValueError(f"leg must be in [0, {LEG_COUNT}), got {leg}")
    if not 0 <= joint < JOINTS_PER_LEG:
        raise ValueError(f"joint must be in [0, {JOINTS_PER_LEG}), got {joint}")
    return leg * JOINTS_PER_LEG + joint