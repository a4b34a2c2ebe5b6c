"""Distribution of the body wrench over the stance feet by quadratic programming."""

from __future__ import annotations

import numpy as np

from legguide.quadprog import solve_quadprog

_GRAVITY = np.array([0.0, 0.0, -9.81])


def _skew(v) -> np.ndarray:
    x, y, z = np.asarray(v, dtype=float).ravel()
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def _square(value, size: int) -> np.ndarray:
    """Accept a diagonal given as a vector or a full square matrix."""
    arr = np.asarray(value, dtype=float)
    if arr.ndim == 1:
        if arr.size != size:
            raise ValueError(f"expected {size} diagonal elements, got {arr.size}")
        return np.diag(arr)
    return arr.reshape(size, size).copy()


class BalanceCtrl:
    """Computes feet forces that produce a desired body acceleration.

    The forces minimise the weighted error of the body wrench plus a penalty
    on their size and on their change since the previous call, with the
    stance feet held inside a friction pyramid and the swing feet unloaded.
    """

    def __init__(self, mass, inertia, pcb, s, w, u, alpha, beta, fric_ratio=0.3):
        self.mass = float(mass)
        self.inertia = _square(inertia, 3)
        self.pcb = np.asarray(pcb, dtype=float).ravel()
        if self.pcb.size != 3:
            raise ValueError("pcb must have 3 elements")
        self.s = _square(s, 6)
        self.w = _square(w, 12)
        self.u = _square(u, 12)
        self.alpha = float(alpha)
        self.beta = float(beta)
        self.fric_ratio = float(fric_ratio)
        f = self.fric_ratio
        self.fric_mat = np.array([
            [1.0, 0.0, f],
            [-1.0, 0.0, f],
            [0.0, 1.0, f],
            [0.0, -1.0, f],
            [0.0, 0.0, 1.0],
        ])
        self._f_prev = np.zeros(12)

    @classmethod
    def from_robot(cls, robot) -> "BalanceCtrl":
        """A controller tuned for ``robot`` with the standard weights."""
        return cls(
            mass=robot.mass,
            inertia=robot.inertia,
            pcb=robot.pcb,
            s=(20, 20, 50, 450, 450, 450),
            w=(10, 10, 4) * 4,
            u=(3,) * 12,
            alpha=0.001,
            beta=0.1,
            fric_ratio=0.4,
        )

    def _matrix_a(self, feet_pos2b: np.ndarray, rot_m: np.ndarray) -> np.ndarray:
        a = np.zeros((6, 12))
        offset = rot_m @ self.pcb
        for i in range(4):
            a[:3, 3 * i:3 * i + 3] = np.eye(3)
            a[3:, 3 * i:3 * i + 3] = _skew(feet_pos2b[:, i] - offset)
        return a

    def _vector_bd(self, ddpcd: np.ndarray, dwbd: np.ndarray, rot_m: np.ndarray) -> np.ndarray:
        linear = self.mass * (ddpcd - _GRAVITY)
        angular = (rot_m @ self.inertia @ rot_m.T) @ dwbd
        return np.concatenate([linear, angular])

    def _constraints(self, in_contact: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        inequalities = []
        equalities = []
        for i, touching in enumerate(in_contact):
            if touching:
                block = np.zeros((5, 12))
                block[:, 3 * i:3 * i + 3] = self.fric_mat
                inequalities.append(block)
            else:
                block = np.zeros((3, 12))
                block[:, 3 * i:3 * i + 3] = np.eye(3)
                equalities.append(block)
        ci = np.vstack(inequalities) if inequalities else np.zeros((0, 12))
        ce = np.vstack(equalities) if equalities else np.zeros((0, 12))
        return ci, ce

    def compute_forces(self, ddpcd, dwbd, rot_m, feet_pos2b, contact) -> np.ndarray:
        """Feet forces as a 3x4 array, one foot per column.

        ``contact`` holds one flag per leg; a leg is in stance when its flag is 1.
        """
        contact_arr = np.asarray(contact).ravel()
        if contact_arr.size != 4:
            raise ValueError("contact must hold one flag per leg")
        ddpcd_v = np.asarray(ddpcd, dtype=float).ravel()
        dwbd_v = np.asarray(dwbd, dtype=float).ravel()
        rot = np.asarray(rot_m, dtype=float).reshape(3, 3)
        feet = np.asarray(feet_pos2b, dtype=float).reshape(3, 4)

        a = self._matrix_a(feet, rot)
        bd = self._vector_bd(ddpcd_v, dwbd_v, rot)
        ci, ce = self._constraints(contact_arr == 1)

        g = a.T @ self.s @ a + self.alpha * self.w + self.beta * self.u
        g0 = -(bd @ self.s @ a) - self.beta * (self._f_prev @ self.u)

        forces, _ = solve_quadprog(
            g, g0, ce.T, np.zeros(ce.shape[0]), ci.T, np.zeros(ci.shape[0])
        )
        self._f_prev = forces.copy()
        return forces.reshape(4, 3).T.copy()