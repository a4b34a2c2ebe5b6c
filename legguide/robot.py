"""Whole-body kinematics of a four-legged robot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from legguide.leg import FrameType, QuadrupedLeg


def _skew(v) -> np.ndarray:
    x, y, z = np.asarray(v, dtype=float).ravel()
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def _quat_to_rot(quaternion) -> np.ndarray:
    w, x, y, z = np.asarray(quaternion, dtype=float).ravel()
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
        [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
    ])


def _legs_matrix(value) -> np.ndarray:
    """Turn 12 joint values (leg after leg) or a 3x4 array into a 3x4 array."""
    arr = np.asarray(value, dtype=float)
    if arr.shape == (3, 4):
        return arr.copy()
    if arr.size == 12 and arr.ndim == 1:
        return arr.reshape(4, 3).T.copy()
    raise ValueError(f"expected 12 joint values or a 3x4 array, got shape {arr.shape}")


@dataclass
class RobotState:
    """Measured joint and body state.

    ``q`` and ``qd`` are 3x4 arrays whose column ``i`` holds the joints of leg ``i``.
    """

    q: np.ndarray
    qd: np.ndarray
    rot_mat: np.ndarray = field(default_factory=lambda: np.eye(3))
    gyro: np.ndarray = field(default_factory=lambda: np.zeros(3))
    acc: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.q = _legs_matrix(self.q)
        self.qd = _legs_matrix(self.qd)
        self.rot_mat = np.asarray(self.rot_mat, dtype=float).reshape(3, 3)
        self.gyro = np.asarray(self.gyro, dtype=float).ravel()
        self.acc = np.asarray(self.acc, dtype=float).ravel()

    @classmethod
    def from_quaternion(cls, q, qd, quaternion, gyro, acc) -> "RobotState":
        """Build a state from an IMU quaternion ordered (w, x, y, z)."""
        return cls(q=q, qd=qd, rot_mat=_quat_to_rot(quaternion), gyro=gyro, acc=acc)


class QuadrupedRobot:
    """Four legs plus the body's mass properties and velocity limits."""

    def __init__(self, legs: Sequence[QuadrupedLeg], feet_pos_normal_stand,
                 vel_limit_x, vel_limit_y, vel_limit_yaw, mass: float, pcb, inertia):
        self.legs = tuple(legs)
        if len(self.legs) != 4:
            raise ValueError("a quadruped robot needs exactly four legs")
        self.feet_pos_normal_stand = np.asarray(feet_pos_normal_stand, dtype=float).reshape(3, 4)
        self.vel_limit_x = np.asarray(vel_limit_x, dtype=float).ravel()
        self.vel_limit_y = np.asarray(vel_limit_y, dtype=float).ravel()
        self.vel_limit_yaw = np.asarray(vel_limit_yaw, dtype=float).ravel()
        self.mass = float(mass)
        self.pcb = np.asarray(pcb, dtype=float).ravel()
        inertia_arr = np.asarray(inertia, dtype=float)
        self.inertia = np.diag(inertia_arr) if inertia_arr.ndim == 1 else inertia_arr.reshape(3, 3)

    def foot_position(self, state: RobotState, leg_id: int, frame: FrameType) -> np.ndarray:
        """Position of one foot in the BODY or HIP frame."""
        q = state.q[:, leg_id]
        if frame is FrameType.BODY:
            return self.legs[leg_id].foot_position_body(q)
        if frame is FrameType.HIP:
            return self.legs[leg_id].foot_position_hip(q)
        raise ValueError("The frame of foot_position can only be BODY or HIP.")

    def foot_velocity(self, state: RobotState, leg_id: int) -> np.ndarray:
        """Velocity of one foot relative to the body."""
        return self.legs[leg_id].foot_velocity(state.q[:, leg_id], state.qd[:, leg_id])

    def feet_positions(self, state: RobotState, frame: FrameType) -> np.ndarray:
        """Feet positions relative to the body origin, one foot per column."""
        if frame is FrameType.GLOBAL:
            body = self.feet_positions(state, FrameType.BODY)
            return state.rot_mat @ body
        if frame in (FrameType.BODY, FrameType.HIP):
            return np.column_stack([self.foot_position(state, i, frame) for i in range(4)])
        raise ValueError("Frame error of function feet_positions")

    def feet_velocities(self, state: RobotState, frame: FrameType) -> np.ndarray:
        """Feet velocities relative to the body, one foot per column."""
        feet_vel = np.column_stack([self.foot_velocity(state, i) for i in range(4)])
        if frame is FrameType.GLOBAL:
            feet_pos = self.feet_positions(state, FrameType.BODY)
            feet_vel = feet_vel + _skew(state.gyro) @ feet_pos
            return state.rot_mat @ feet_vel
        if frame in (FrameType.BODY, FrameType.HIP):
            return feet_vel
        raise ValueError("Frame error of function feet_velocities")

    def vec_xp(self, state: RobotState) -> np.ndarray:
        """Body-frame positions of every foot relative to foot 0."""
        x = self.foot_position(state, 0, FrameType.BODY)
        return np.column_stack(
            [self.legs[i].foot_position_body(state.q[:, i]) - x for i in range(4)]
        )

    def joint_angles(self, feet_pos, frame: FrameType) -> np.ndarray:
        """Inverse kinematics for all legs; returns 12 joint angles leg after leg."""
        pos = np.asarray(feet_pos, dtype=float).reshape(3, 4)
        return np.concatenate(
            [leg.inverse_kinematics(pos[:, i], frame) for i, leg in enumerate(self.legs)]
        )

    def joint_velocities(self, feet_pos, feet_vel, frame: FrameType) -> np.ndarray:
        """Joint velocities for all legs from feet positions and velocities."""
        pos = np.asarray(feet_pos, dtype=float).reshape(3, 4)
        vel = np.asarray(feet_vel, dtype=float).reshape(3, 4)
        return np.concatenate([
            leg.joint_velocity_at(pos[:, i], vel[:, i], frame)
            for i, leg in enumerate(self.legs)
        ])

    def joint_torques(self, q, feet_force) -> np.ndarray:
        """Joint torques balancing the feet forces; ``q`` holds 12 joint angles."""
        angles = np.asarray(q, dtype=float).ravel()
        force = np.asarray(feet_force, dtype=float).reshape(3, 4)
        return np.concatenate([
            leg.joint_torque(angles[3 * i:3 * i + 3], force[:, i])
            for i, leg in enumerate(self.legs)
        ])

    def jacobian(self, state: RobotState, leg_id: int) -> np.ndarray:
        """Jacobian of one leg at the measured joint angles."""
        return self.legs[leg_id].jacobian(state.q[:, leg_id])


def _build(leg_lengths, hip_x, hip_y, stand_y, stand_z, mass, pcb, inertia_diag):
    abad, hip, knee = leg_lengths
    offsets = [(hip_x, -hip_y), (hip_x, hip_y), (-hip_x, -hip_y), (-hip_x, hip_y)]
    legs = [QuadrupedLeg(i, abad, hip, knee, (ox, oy, 0.0)) for i, (ox, oy) in enumerate(offsets)]
    stand = np.array([
        [hip_x, hip_x, -hip_x, -hip_x],
        [-stand_y, stand_y, -stand_y, stand_y],
        [stand_z] * 4,
    ])
    return QuadrupedRobot(legs, stand, (-0.4, 0.4), (-0.3, 0.3), (-0.5, 0.5),
                          mass, pcb, np.diag(inertia_diag))


def a1_robot(abad_link_length: float, hip_link_length: float, knee_link_length: float,
             real_robot: bool = False) -> QuadrupedRobot:
    """An A1 robot; ``real_robot`` selects the hardware mass properties over the simulated ones."""
    mass, pcb = (12.5, (0.01, 0.0, 0.0)) if real_robot else (13.4, (0.0, 0.0, 0.0))
    return _build((abad_link_length, hip_link_length, knee_link_length),
                  0.1805, 0.047, 0.1308, -0.3180, mass, pcb, (0.132, 0.3475, 0.3775))


def go1_robot(abad_link_length: float, hip_link_length: float, knee_link_length: float,
              real_robot: bool = False) -> QuadrupedRobot:
    """A Go1 robot; ``real_robot`` selects the hardware mass properties over the simulated ones."""
    mass, pcb = (10.5, (0.04, 0.0, 0.0)) if real_robot else (12.0, (0.0, 0.0, 0.0))
    return _build((abad_link_length, hip_link_length, knee_link_length),
                  0.1881, 0.04675, 0.1300, -0.3200, mass, pcb, (0.0792, 0.2085, 0.2265))