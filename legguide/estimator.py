"""Kalman filter estimating body position and velocity from leg kinematics and the IMU."""

from __future__ import annotations

import numpy as np

from legguide.filters import LowPassFilter
from legguide.leg import FrameType

_GRAVITY = np.array([0.0, 0.0, -9.81])
_LARGE_VARIANCE = 100.0

_R_INIT_ROWS = (
    (0.008, 0.012, 0, -0.009, 0.012, 0, 0.009, -0.009, 0, -0.009, -0.009, 0,
     0, 0, 0, 0, 0, -0.001, -0.002, 0, 0, -0.003, 0, -0.001),
    (0.012, 0.019, -0.001, -0.014, 0.018, 0, 0.014, -0.013, 0, -0.014, -0.014, 0.001,
     -0.001, 0.001, -0.001, 0, 0, -0.001, -0.003, 0, -0.001, -0.004, 0, -0.001),
    (0, -0.001, 0.001, 0.001, -0.001, 0, 0, 0, 0, 0.001, 0, 0,
     0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    (-0.009, -0.014, 0.001, 0.010, -0.013, 0, -0.010, 0.010, 0, 0.010, 0.010, 0,
     0.001, 0, 0, 0.001, 0, 0.001, 0.002, 0, 0, 0.003, 0, 0.001),
    (0.012, 0.018, -0.001, -0.013, 0.018, 0, 0.013, -0.013, 0, -0.013, -0.013, 0.001,
     -0.001, 0, -0.001, 0, 0.001, -0.001, -0.003, 0, -0.001, -0.004, 0, -0.001),
    (0, 0, 0, 0, 0, 0.001, 0, 0, 0, 0, 0, 0,
     0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    (0.009, 0.014, 0, -0.010, 0.013, 0, 0.010, -0.010, 0, -0.010, -0.010, 0,
     -0.001, 0, -0.001, 0, 0, -0.001, -0.001, 0, 0, -0.003, 0, -0.001),
    (-0.009, -0.013, 0, 0.010, -0.013, 0, -0.010, 0.009, 0, 0.010, 0.010, 0,
     0.001, 0, 0, 0, 0, 0.001, 0.002, 0, 0, 0.003, 0, 0.001),
    (0, 0, 0, 0, 0, 0, 0, 0, 0.001, 0, 0, 0,
     0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    (-0.009, -0.014, 0.001, 0.010, -0.013, 0, -0.010, 0.010, 0, 0.010, 0.010, 0,
     0.001, 0, 0, 0, 0, 0.001, 0.002, 0, 0, 0.003, 0, 0.001),
    (-0.009, -0.014, 0, 0.010, -0.013, 0, -0.010, 0.010, 0, 0.010, 0.010, 0,
     0.001, 0, 0, 0, 0, 0.001, 0.002, 0, 0, 0.003, 0.001, 0.001),
    (0, 0.001, 0, 0, 0.001, 0, 0, 0, 0, 0, 0, 0.001,
     0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    (0, -0.001, 0, 0.001, -0.001, 0, -0.001, 0.001, 0, 0.001, 0.001, 0,
     1.708, 0.048, 0.784, 0.062, 0.042, 0.053, 0.077, 0.001, -0.061, 0.046, -0.019, -0.029),
    (0, 0.001, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0,
     0.048, 5.001, -1.631, -0.036, 0.144, 0.040, 0.036, 0.016, -0.051, -0.067, -0.024, -0.005),
    (0, -0.001, 0, 0, -0.001, 0, -0.001, 0, 0, 0, 0, 0,
     0.784, -1.631, 1.242, 0.057, -0.037, 0.018, 0.034, -0.017, -0.015, 0.058, -0.021, -0.029),
    (0, 0, 0, 0.001, 0, 0, 0, 0, 0, 0, 0, 0,
     0.062, -0.036, 0.057, 6.228, -0.014, 0.932, 0.059, 0.053, -0.069, 0.148, 0.015, -0.031),
    (0, 0, 0, 0, 0.001, 0, 0, 0, 0, 0, 0, 0,
     0.042, 0.144, -0.037, -0.014, 3.011, 0.986, 0.076, 0.030, -0.052, -0.027, 0.057, 0.051),
    (-0.001, -0.001, 0, 0.001, -0.001, 0, -0.001, 0.001, 0, 0.001, 0.001, 0,
     0.053, 0.040, 0.018, 0.932, 0.986, 0.885, 0.090, 0.044, -0.055, 0.057, 0.051, -0.003),
    (-0.002, -0.003, 0, 0.002, -0.003, 0, -0.001, 0.002, 0, 0.002, 0.002, 0,
     0.077, 0.036, 0.034, 0.059, 0.076, 0.090, 6.230, 0.139, 0.763, 0.013, -0.019, -0.024),
    (0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0,
     0.001, 0.016, -0.017, 0.053, 0.030, 0.044, 0.139, 3.130, -1.128, -0.010, 0.131, 0.018),
    (0, -0.001, 0, 0, -0.001, 0, 0, 0, 0, 0, 0, 0,
     -0.061, -0.051, -0.015, -0.069, -0.052, -0.055, 0.763, -1.128, 0.866, -0.022, -0.053, 0.007),
    (-0.003, -0.004, 0, 0.003, -0.004, 0, -0.003, 0.003, 0, 0.003, 0.003, 0,
     0.046, -0.067, 0.058, 0.148, -0.027, 0.057, 0.013, -0.010, -0.022, 2.437, -0.102, 0.938),
    (0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0.001, 0,
     -0.019, -0.024, -0.021, 0.015, 0.057, 0.051, -0.019, 0.131, -0.053, -0.102, 4.944, 1.724),
    (-0.001, -0.001, 0, 0.001, -0.001, 0, -0.001, 0.001, 0, 0.001, 0.001, 0,
     -0.029, -0.005, -0.029, -0.031, 0.051, -0.003, -0.024, 0.018, 0.007, 0.938, 1.724, 1.569),
)

_CU = np.array([
    [268.573, -43.819, -147.211],
    [-43.819, 92.949, 58.082],
    [-147.211, 58.082, 302.120],
])


def _r_init() -> np.ndarray:
    r = np.zeros((28, 28))
    r[:24, :24] = np.array(_R_INIT_ROWS, dtype=float)
    r[24:, 24:] = np.eye(4)
    return r


def _window(x: float, ratio: float) -> float:
    """Trapezoidal trust window over a phase in [0, 1]."""
    if x < 0.0 or x > 1.0:
        raise ValueError(f"phase {x} is outside [0, 1]")
    if x < ratio:
        return x / ratio
    if x > 1.0 - ratio:
        return (1.0 - x) / ratio
    return 1.0


def _default_q_diag() -> np.ndarray:
    return np.concatenate([np.full(6, 0.0003), np.full(12, 0.01)])


class Estimator:
    """Linear Kalman filter over body position, body velocity and four foot positions.

    The state holds the body position, the body velocity and the world
    positions of the four feet. Measurements are the feet positions and
    velocities relative to the body from leg kinematics, plus the feet heights.
    """

    def __init__(self, robot, dt: float, q_diag=None):
        self.robot = robot
        self.dt = float(dt)
        q = _default_q_diag() if q_diag is None else np.asarray(q_diag, dtype=float).ravel()
        if q.size != 18:
            raise ValueError(f"q_diag must have 18 elements, got {q.size}")
        self.q_diag = q.copy()

        i3 = np.eye(3)
        self._a = np.zeros((18, 18))
        self._a[0:3, 0:3] = i3
        self._a[0:3, 3:6] = i3 * self.dt
        self._a[3:6, 3:6] = i3
        self._a[6:18, 6:18] = np.eye(12)

        self._b = np.zeros((18, 3))
        self._b[3:6, 0:3] = i3 * self.dt

        self._c = np.zeros((28, 18))
        for k in range(4):
            self._c[3 * k:3 * k + 3, 0:3] = -i3
            self._c[12 + 3 * k:15 + 3 * k, 3:6] = -i3
            self._c[24 + k, 8 + 3 * k] = 1.0
        self._c[0:12, 6:18] = np.eye(12)

        self._p = _LARGE_VARIANCE * np.eye(18)
        self._r_init = _r_init()
        self._q_init = np.diag(self.q_diag) + self._b @ _CU @ self._b.T
        self._xhat = np.zeros(18)

        self._vel_filters = tuple(LowPassFilter(self.dt, 3.0) for _ in range(3))

    def run(self, state, contact, phase) -> None:
        """Advance the filter by one time step."""
        contact_arr = np.asarray(contact).ravel()
        phase_arr = np.asarray(phase, dtype=float).ravel()
        if contact_arr.size != 4 or phase_arr.size != 4:
            raise ValueError("contact and phase must hold one value per leg")

        feet_pos = self.robot.feet_positions(state, FrameType.GLOBAL)
        feet_vel = self.robot.feet_velocities(state, FrameType.GLOBAL)

        q = self._q_init.copy()
        r = self._r_init.copy()
        for i in range(4):
            qs = slice(6 + 3 * i, 9 + 3 * i)
            rs = slice(12 + 3 * i, 15 + 3 * i)
            h = 24 + i
            if contact_arr[i] == 0:
                q[qs, qs] = _LARGE_VARIANCE * np.eye(3)
                r[rs, rs] = _LARGE_VARIANCE * np.eye(3)
                r[h, h] = _LARGE_VARIANCE
            else:
                trust = _window(float(phase_arr[i]), 0.2)
                factor = 1.0 + (1.0 - trust) * _LARGE_VARIANCE
                q[qs, qs] = factor * self._q_init[qs, qs]
                r[rs, rs] = factor * self._r_init[rs, rs]
                r[h, h] = factor * self._r_init[h, h]

        rot = state.rot_mat
        u = rot @ state.acc + _GRAVITY
        self._xhat = self._a @ self._xhat + self._b @ u
        yhat = self._c @ self._xhat
        y = np.concatenate([feet_pos.T.ravel(), feet_vel.T.ravel(), np.zeros(4)])

        c = self._c
        p_priori = self._a @ self._p @ self._a.T + q
        s = r + c @ p_priori @ c.T
        sy = np.linalg.solve(s, y - yhat)
        sc = np.linalg.solve(s, c)
        sr = np.linalg.solve(s, r)
        stc = np.linalg.solve(s.T, c)
        ikc = np.eye(18) - p_priori @ c.T @ sc

        self._xhat = self._xhat + p_priori @ c.T @ sy
        self._p = ikc @ p_priori @ ikc.T + p_priori @ c.T @ sr @ stc @ p_priori.T

        for filt, value in zip(self._vel_filters, self._xhat[3:6]):
            filt.add_value(float(value))

    def position(self) -> np.ndarray:
        """Estimated body position in the world frame."""
        return self._xhat[0:3].copy()

    def velocity(self) -> np.ndarray:
        """Estimated body velocity in the world frame."""
        return self._xhat[3:6].copy()

    def foot_position(self, state, leg_id: int) -> np.ndarray:
        """World position of one foot from the estimate and leg kinematics."""
        body = self.robot.foot_position(state, leg_id, FrameType.BODY)
        return self.position() + state.rot_mat @ body

    def feet_positions(self, state) -> np.ndarray:
        """World positions of all feet, one foot per column."""
        return np.column_stack([self.foot_position(state, i) for i in range(4)])

    def feet_velocities(self, state) -> np.ndarray:
        """World velocities of all feet, one foot per column."""
        feet_vel = self.robot.feet_velocities(state, FrameType.GLOBAL)
        return feet_vel + self.velocity()[:, None]

    def feet_positions_relative(self, state) -> np.ndarray:
        """Feet positions relative to the body, expressed in the world frame."""
        position = self.position()
        return np.column_stack(
            [self.foot_position(state, i) - position for i in range(4)]
        )