"""Dense convex quadratic programming with the Goldfarb-Idnani dual active-set method.

The problem solved is::

    minimise    0.5 * x^T G x + g0^T x
    subject to  CE^T x + ce0 == 0
                CI^T x + ci0 >= 0

``G`` must be symmetric positive definite. Each column of ``CE`` and ``CI``
holds the normal of one constraint.
"""

from __future__ import annotations

import math

import numpy as np

_EPS = float(np.finfo(float).eps)
_INF = math.inf


class QuadProgError(Exception):
    """Base class for failures of the quadratic programming solver."""


class LinearDependenceError(QuadProgError):
    """The equality constraints are linearly dependent."""


class CholeskyError(QuadProgError):
    """The matrix is not positive definite."""


def seq(start: int, end: int) -> set[int]:
    """Return the set of integers from ``start`` to ``end``, both included."""
    return set(range(start, end + 1))


def singleton(i: int) -> set[int]:
    """Return a set holding ``i`` alone."""
    return {i}


def cholesky_decomposition(a) -> np.ndarray:
    """Factorise a symmetric positive definite matrix as ``L L^T``.

    The result holds ``L`` in its lower triangle and ``L^T`` in its upper
    triangle, the form that :func:`cholesky_solve` expects.
    """
    result = np.array(a, dtype=float, copy=True)
    if result.ndim != 2 or result.shape[0] != result.shape[1]:
        raise ValueError(f"The matrix is not a squared matrix {result.shape}")
    n = result.shape[0]
    for i in range(n):
        for j in range(i, n):
            total = result[i, j] - result[i, :i] @ result[j, :i]
            if i == j:
                if total <= 0.0:
                    raise CholeskyError(f"Error in cholesky decomposition, sum: {total}")
                result[i, i] = math.sqrt(total)
            else:
                result[j, i] = total / result[i, i]
        result[i, i + 1:] = result[i + 1:, i]
    return result


def _forward_elimination(l: np.ndarray, b: np.ndarray) -> np.ndarray:
    n = l.shape[0]
    y = np.zeros(n)
    for i in range(n):
        y[i] = (b[i] - l[i, :i] @ y[:i]) / l[i, i]
    return y


def _backward_elimination(u: np.ndarray, y: np.ndarray) -> np.ndarray:
    n = u.shape[0]
    x = np.zeros(n)
    for i in range(n - 1, -1, -1):
        x[i] = (y[i] - u[i, i + 1:] @ x[i + 1:]) / u[i, i]
    return x


def cholesky_solve(l, b) -> np.ndarray:
    """Solve ``A x = b`` given the factor of ``A`` from :func:`cholesky_decomposition`."""
    factor = np.asarray(l, dtype=float)
    rhs = np.asarray(b, dtype=float).ravel()
    return _backward_elimination(factor, _forward_elimination(factor, rhs))


def _diagonal_sum(matrix: np.ndarray) -> float:
    return float(matrix.diagonal().sum())


class _WorkingSet:
    """Active constraints together with the factorisation data that tracks them."""

    def __init__(self, j: np.ndarray, n: int, size: int, n_equalities: int):
        self.r = np.zeros((n, n))
        self.j = j
        self.active = np.zeros(size, dtype=int)
        self.u = np.zeros(size)
        self.iq = 0
        self.r_norm = 1.0
        self.n = n
        self.p = n_equalities

    def step_direction(self, normal: np.ndarray, r: np.ndarray):
        """Return ``d`` and the primal step ``z``; fill ``r`` with the dual step."""
        d = self.j.T @ normal
        z = self.j[:, self.iq:] @ d[self.iq:]
        for i in range(self.iq - 1, -1, -1):
            total = self.r[i, i + 1:self.iq] @ r[i + 1:self.iq]
            r[i] = (d[i] - total) / self.r[i, i]
        return d, z

    def add(self, d: np.ndarray) -> bool:
        """Add the constraint whose ``d`` vector is given; False if degenerate."""
        j_mat = self.j
        for j in range(self.n - 1, self.iq, -1):
            cc = d[j - 1]
            ss = d[j]
            h = math.hypot(cc, ss)
            if abs(h) < _EPS:
                continue
            d[j] = 0.0
            ss /= h
            cc /= h
            if cc < 0.0:
                cc, ss = -cc, -ss
                d[j - 1] = -h
            else:
                d[j - 1] = h
            xny = ss / (1.0 + cc)
            t1 = j_mat[:, j - 1].copy()
            t2 = j_mat[:, j].copy()
            j_mat[:, j - 1] = t1 * cc + t2 * ss
            j_mat[:, j] = xny * (t1 + j_mat[:, j - 1]) - t2
        self.iq += 1
        iq = self.iq
        self.r[:iq, iq - 1] = d[:iq]
        if abs(d[iq - 1]) <= _EPS * self.r_norm:
            return False
        self.r_norm = max(self.r_norm, abs(d[iq - 1]))
        return True

    def delete(self, constraint: int) -> None:
        """Drop an inequality constraint from the active set."""
        active, u, r_mat, j_mat = self.active, self.u, self.r, self.j
        iq = self.iq
        try:
            qq = next(i for i in range(self.p, iq) if active[i] == constraint)
        except StopIteration:
            raise ValueError(
                f"Attempt to delete non existing constraint, constraint: {constraint}"
            ) from None

        for i in range(qq, iq - 1):
            active[i] = active[i + 1]
            u[i] = u[i + 1]
            r_mat[:, i] = r_mat[:, i + 1]
        active[iq - 1] = active[iq]
        u[iq - 1] = u[iq]
        active[iq] = 0
        u[iq] = 0.0
        r_mat[:iq, iq - 1] = 0.0
        self.iq = iq = iq - 1
        if iq == 0:
            return

        for j in range(qq, iq):
            cc = r_mat[j, j]
            ss = r_mat[j + 1, j]
            h = math.hypot(cc, ss)
            if abs(h) < _EPS:
                continue
            cc /= h
            ss /= h
            r_mat[j + 1, j] = 0.0
            if cc < 0.0:
                r_mat[j, j] = -h
                cc, ss = -cc, -ss
            else:
                r_mat[j, j] = h
            xny = ss / (1.0 + cc)
            t1 = r_mat[j, j + 1:iq].copy()
            t2 = r_mat[j + 1, j + 1:iq].copy()
            r_mat[j, j + 1:iq] = t1 * cc + t2 * ss
            r_mat[j + 1, j + 1:iq] = xny * (t1 + r_mat[j, j + 1:iq]) - t2
            t1 = j_mat[:, j].copy()
            t2 = j_mat[:, j + 1].copy()
            j_mat[:, j] = t1 * cc + t2 * ss
            j_mat[:, j + 1] = xny * (j_mat[:, j] + t1) - t2


def _as_matrix(value, n: int, name: str) -> np.ndarray:
    arr = np.asarray(value if value is not None else [], dtype=float)
    if arr.size == 0:
        return np.zeros((n, 0))
    if arr.ndim != 2:
        raise ValueError(f"The matrix {name} must be two-dimensional")
    return arr


def _as_vector(value) -> np.ndarray:
    arr = np.asarray(value if value is not None else [], dtype=float)
    return arr.ravel()


def solve_quadprog(g, g0, ce, ce0, ci, ci0) -> tuple[np.ndarray, float]:
    """Solve the quadratic program and return ``(x, objective value)``.

    The objective value is ``inf`` when the problem is infeasible. The inputs
    are not modified.
    """
    g_mat = np.array(g, dtype=float, copy=True)
    if g_mat.ndim != 2:
        raise ValueError("The matrix G must be two-dimensional")
    n = g_mat.shape[1]
    if g_mat.shape[0] != n:
        raise ValueError(
            f"The matrix G is not a squared matrix ({g_mat.shape[0]} x {g_mat.shape[1]})"
        )
    g0_vec = _as_vector(g0)
    if g0_vec.size != n:
        raise ValueError(
            f"The vector g0 is incompatible (incorrect dimension {g0_vec.size}, expecting {n})"
        )
    ce_mat = _as_matrix(ce, n, "CE")
    ce0_vec = _as_vector(ce0)
    ci_mat = _as_matrix(ci, n, "CI")
    ci0_vec = _as_vector(ci0)
    p = ce_mat.shape[1]
    m = ci_mat.shape[1]
    if ce_mat.shape[0] != n:
        raise ValueError(
            f"The matrix CE is incompatible (incorrect number of rows {ce_mat.shape[0]} , expecting {n})"
        )
    if ce0_vec.size != p:
        raise ValueError(
            f"The vector ce0 is incompatible (incorrect dimension {ce0_vec.size}, expecting {p})"
        )
    if ci_mat.shape[0] != n:
        raise ValueError(
            f"The matrix CI is incompatible (incorrect number of rows {ci_mat.shape[0]} , expecting {n})"
        )
    if ci0_vec.size != m:
        raise ValueError(
            f"The vector ci0 is incompatible (incorrect dimension {ci0_vec.size}, expecting {m})"
        )

    size = m + p + 1
    c1 = _diagonal_sum(g_mat)
    factor = cholesky_decomposition(g_mat)

    # Initial H = G^-1 through J = L^-T; c1 * c2 estimates cond(G).
    j_mat = np.array([_forward_elimination(factor, e) for e in np.eye(n)]).reshape(n, n)
    c2 = _diagonal_sum(j_mat)

    x = -cholesky_solve(factor, g0_vec)
    f_value = 0.5 * float(g0_vec @ x)

    ws = _WorkingSet(j_mat, n, size, p)
    u = ws.u
    active = ws.active
    r = np.zeros(size)

    for i in range(p):
        normal = ce_mat[:, i].copy()
        d, z = ws.step_direction(normal, r)
        t2 = 0.0
        if abs(z @ z) > _EPS:
            t2 = (-(normal @ x) - ce0_vec[i]) / (z @ normal)
        x = x + t2 * z
        iq = ws.iq
        u[iq] = t2
        u[:iq] -= t2 * r[:iq]
        f_value += 0.5 * (t2 * t2) * float(z @ normal)
        active[i] = -i - 1
        if not ws.add(d):
            raise LinearDependenceError("Constraints are linearly dependent")

    iai = np.zeros(size, dtype=int)
    iai[:m] = np.arange(m)
    iaexcl = np.zeros(size, dtype=bool)
    s = np.zeros(size)
    u_old = np.zeros(size)
    active_old = np.zeros(size, dtype=int)

    while True:
        # Step 1: choose a violated constraint.
        for i in range(p, ws.iq):
            iai[active[i]] = -1
        iaexcl[:m] = True
        s[:m] = ci_mat.T @ x + ci0_vec
        psi = float(np.minimum(0.0, s[:m]).sum())
        if abs(psi) <= m * _EPS * c1 * c2 * 100.0:
            return x, f_value

        iq = ws.iq
        u_old[:iq] = u[:iq]
        active_old[:iq] = active[:iq]
        x_old = x.copy()
        ss = 0.0
        ip = 0

        restart_step2 = True
        while restart_step2:
            restart_step2 = False
            # Step 2: check feasibility and pick a new S-pair.
            for i in range(m):
                if s[i] < ss and iai[i] != -1 and iaexcl[i]:
                    ss = s[i]
                    ip = i
            if ss >= 0.0:
                return x, f_value

            normal = ci_mat[:, ip].copy()
            u[ws.iq] = 0.0
            active[ws.iq] = ip

            while True:
                # Step 2a: step direction.
                d, z = ws.step_direction(normal, r)
                iq = ws.iq

                # Step 2b: step length.
                constraint = 0
                t1 = _INF
                for k in range(p, iq):
                    if r[k] > 0.0 and u[k] / r[k] < t1:
                        t1 = u[k] / r[k]
                        constraint = int(active[k])
                if abs(z @ z) > _EPS:
                    t2 = -s[ip] / float(z @ normal)
                    if t2 < 0:
                        t2 = _INF
                else:
                    t2 = _INF
                t = min(t1, t2)

                # Step 2c: take the step.
                if t >= _INF:
                    return x, _INF
                if t2 >= _INF:
                    u[:iq] -= t * r[:iq]
                    u[iq] += t
                    iai[constraint] = constraint
                    ws.delete(constraint)
                    continue

                x = x + t * z
                f_value += t * float(z @ normal) * (0.5 * t + u[iq])
                u[:iq] -= t * r[:iq]
                u[iq] += t

                if abs(t - t2) < _EPS:
                    if not ws.add(d):
                        iaexcl[ip] = False
                        ws.delete(ip)
                        iai[:m] = np.arange(m)
                        for i in range(p, ws.iq):
                            active[i] = active_old[i]
                            u[i] = u_old[i]
                            iai[active[i]] = -1
                        x = x_old.copy()
                        restart_step2 = True
                    else:
                        iai[ip] = -1
                    break

                # Partial step: drop the blocking constraint and go on.
                iai[constraint] = constraint
                ws.delete(constraint)
                s[ip] = float(ci_mat[:, ip] @ x) + ci0_vec[ip]