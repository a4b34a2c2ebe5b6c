"""Kinematics of one three-joint leg of a quadruped robot."""

from __future__ import annotations

import math
from enum import Enum

import numpy as np


class FrameType(Enum):
    """Coordinate frames in which foot quantities are expressed."""

    HIP = "hip"
    BODY = "body"
    GLOBAL = "global"


def _sqrt(value: float) -> float:
    return math.sqrt(value) if value >= 0.0 else math.nan


def _vec3(value) -> np.ndarray:
    arr = np.asarray(value, dtype=float).ravel()
    if arr.size != 3:
        raise ValueError(f"expected a vector of 3 elements, got {arr.size}")
    return arr


class QuadrupedLeg:
    """Abduction, hip and knee joints with their link lengths and hip offset.

    Legs 0 and 2 lie on the right side of the body, legs 1 and 3 on the left.
    """

    def __init__(self, leg_id: int, abad_link_length: float, hip_link_length: float,
                 knee_link_length: float, p_hip2b):
        if leg_id in (0, 2):
            self.side_sign = -1
        elif leg_id in (1, 3):
            self.side_sign = 1
        else:
            raise ValueError("Leg ID incorrect!")
        self.leg_id = leg_id
        self.abad_link_length = float(abad_link_length)
        self.hip_link_length = float(hip_link_length)
        self.knee_link_length = float(knee_link_length)
        self.p_hip2b = _vec3(p_hip2b)

    def _lengths(self) -> tuple[float, float, float]:
        return (self.side_sign * self.abad_link_length,
                -self.hip_link_length,
                -self.knee_link_length)

    def foot_position_hip(self, q) -> np.ndarray:
        """Forward kinematics: foot position in the hip frame."""
        q1, q2, q3 = _vec3(q)
        l1, l2, l3 = self._lengths()
        s1, s2, s3 = math.sin(q1), math.sin(q2), math.sin(q3)
        c1, c2, c3 = math.cos(q1), math.cos(q2), math.cos(q3)
        c23 = c2 * c3 - s2 * s3
        s23 = s2 * c3 + c2 * s3
        return np.array([
            l3 * s23 + l2 * s2,
            -l3 * s1 * c23 + l1 * c1 - l2 * c2 * s1,
            l3 * c1 * c23 + l1 * s1 + l2 * c1 * c2,
        ])

    def foot_position_body(self, q) -> np.ndarray:
        """Forward kinematics: foot position in the body frame."""
        return self.p_hip2b + self.foot_position_hip(q)

    def foot_velocity(self, q, qd) -> np.ndarray:
        """Foot velocity produced by joint velocities ``qd`` at angles ``q``."""
        return self.jacobian(q) @ _vec3(qd)

    def inverse_kinematics(self, p_ee, frame: FrameType) -> np.ndarray:
        """Joint angles that put the foot at ``p_ee`` given in the HIP or BODY frame."""
        if frame is FrameType.HIP:
            p = _vec3(p_ee)
        elif frame is FrameType.BODY:
            p = _vec3(p_ee) - self.p_hip2b
        else:
            raise ValueError("The frame of inverse kinematics can only be HIP or BODY")

        px, py, pz = p
        b2y = self.abad_link_length * self.side_sign
        b3z = -self.hip_link_length
        b4z = -self.knee_link_length
        a = self.abad_link_length
        c = math.sqrt(px * px + py * py + pz * pz)
        b = _sqrt(c * c - a * a)

        q1 = self._q1_ik(py, pz, b2y)
        q3 = self._q3_ik(b3z, b4z, b)
        q2 = self._q2_ik(q1, q3, px, py, pz, b3z, b4z)
        return np.array([q1, q2, q3])

    def joint_velocity(self, q, v_ee) -> np.ndarray:
        """Joint velocities that give foot velocity ``v_ee`` at angles ``q``."""
        return np.linalg.inv(self.jacobian(q)) @ _vec3(v_ee)

    def joint_velocity_at(self, p_ee, v_ee, frame: FrameType) -> np.ndarray:
        """Joint velocities for foot velocity ``v_ee`` with the foot at ``p_ee``."""
        return self.joint_velocity(self.inverse_kinematics(p_ee, frame), v_ee)

    def joint_torque(self, q, force) -> np.ndarray:
        """Joint torques that balance the foot force ``force``."""
        return self.jacobian(q).T @ _vec3(force)

    def jacobian(self, q) -> np.ndarray:
        """Jacobian of the foot position with respect to the joint angles."""
        q1, q2, q3 = _vec3(q)
        l1, l2, l3 = self._lengths()
        s1, s2, s3 = math.sin(q1), math.sin(q2), math.sin(q3)
        c1, c2, c3 = math.cos(q1), math.cos(q2), math.cos(q3)
        c23 = c2 * c3 - s2 * s3
        s23 = s2 * c3 + c2 * s3
        return np.array([
            [0.0, l3 * c23 + l2 * c2, l3 * c23],
            [-l3 * c1 * c23 - l2 * c1 * c2 - l1 * s1,
             l3 * s1 * s23 + l2 * s1 * s2,
             l3 * s1 * s23],
            [-l3 * s1 * c23 - l2 * c2 * s1 + l1 * c1,
             -l3 * c1 * s23 - l2 * c1 * s2,
             -l3 * c1 * s23],
        ])

    @staticmethod
    def _q1_ik(py: float, pz: float, l1: float) -> float:
        length = _sqrt(py * py + pz * pz - l1 * l1)
        return math.atan2(pz * l1 + py * length, py * l1 - pz * length)

    @staticmethod
    def _q3_ik(b3z: float, b4z: float, b: float) -> float:
        temp = (b3z * b3z + b4z * b4z - b * b) / (2.0 * abs(b3z * b4z))
        if math.isnan(temp):
            return math.nan
        temp = min(1.0, max(-1.0, temp))
        return -(math.pi - math.acos(temp))

    @staticmethod
    def _q2_ik(q1: float, q3: float, px: float, py: float, pz: float,
               b3z: float, b4z: float) -> float:
        a1 = py * math.sin(q1) - pz * math.cos(q1)
        a2 = px
        m1 = b4z * math.sin(q3)
        m2 = b3z + b4z * math.cos(q3)
        return math.atan2(m1 * a1 + m2 * a2, m1 * a2 - m2 * a1)