# Copyright (c) 2016 by Welded Anvil Technologies (David D. Newell). All Rights Reserved.
# This software is the confidential and proprietary information of
# Welded Anvil Technologies (David D. Newell) ("Confidential Information").
# You shall not disclose such Confidential Information and shall use it
# only in accordance with the terms of the license agreement you entered
# into with Welded Anvil Technologies (David D. Newell).
# @author david@newell.at

"""
Dense convex quadratic programming with the Goldfarb-Idnani dual method.

    minimize    1/2 x'Px + q'x
    subject to  C[:, :meq]'x == d[:meq]
                C[:, meq:]'x >= d[meq:]

P must be symmetric positive definite. The method starts from the
unconstrained minimum and adds violated constraints to the active set one
at a time, dropping constraints whose multipliers would turn negative.
"""

import logging, math
import numpy as np
from scipy.linalg import solve_triangular
logger = logging.getLogger("genolayout")

EPS = np.finfo(float).eps


class QPError(ValueError):
    """The quadratic program cannot be solved"""


class InfeasibleProblemError(QPError):
    """The constraints of the quadratic program cannot all be satisfied"""


def solve_qp(P, q, C, d, meq=0, max_iter=None):
    """
    Returns the minimizer x of 1/2 x'Px + q'x subject to C'x >= d

    :param P: Symmetric positive definite n x n matrix
    :type P: array_like
    :param q: Linear term, length n
    :type q: array_like
    :param C: Constraint matrix, n x m, one constraint per column
    :type C: array_like
    :param d: Constraint bounds, length m
    :type d: array_like
    :param meq: Number of leading constraints treated as equalities
    :type meq: int
    :param max_iter: Iteration limit, defaults to 10*(n+m)+100
    :type max_iter: int
    """
    P = np.array(P, dtype=float)
    q = np.array(q, dtype=float).ravel()
    n = P.shape[0]
    C = np.array(C, dtype=float)
    if C.ndim == 1:
        C = C.reshape(n, -1)
    d = np.array(d, dtype=float).ravel()
    m = C.shape[1]
    if P.shape != (n, n) or q.shape != (n,) or C.shape[0] != n or d.shape != (m,):
        raise QPError("Inconsistent problem dimensions: P {0}, q {1}, C {2}, d {3}".format(P.shape, q.shape, C.shape, d.shape))
    if meq < 0 or meq > m:
        raise QPError("Invalid number of equality constraints: {0}".format(meq))
    if max_iter is None:
        max_iter = 10*(n + m) + 100

    try:
        L = np.linalg.cholesky(P)
    except np.linalg.LinAlgError:
        raise QPError("Matrix P is not positive definite")

    # J = L^-T; its columns span the space the active constraints leave free
    J = solve_triangular(L, np.eye(n), lower=True).T
    R = np.zeros((n, n))
    c1 = np.trace(P)
    c2 = np.trace(J)
    r_norm = 1.0

    x = -solve_triangular(L.T, solve_triangular(L, q, lower=True), lower=False)
    A = np.zeros(n+1, dtype=int)
    u = np.zeros(n+1)
    iq = 0

    for i in range(meq):
        normal = C[:, i]
        dv = J.T.dot(normal)
        z = J[:, iq:].dot(dv[iq:])
        r = _solve_r(R, dv, iq)
        t2 = 0.0
        if abs(z.dot(z)) > EPS:
            t2 = (d[i] - normal.dot(x))/z.dot(normal)
        x += t2*z
        u[iq] = t2
        u[:iq] -= t2*r
        A[iq] = i
        ok, r_norm = _add_constraint(R, J, dv, iq, r_norm)
        iq += 1
        if not ok:
            raise QPError("Equality constraints are linearly dependent")

    iterations = 0

    while True:
        iterations += 1
        if iterations > max_iter:
            raise QPError("No solution found after {0} iterations".format(max_iter))

        candidates = np.ones(m, dtype=bool)
        candidates[:meq] = False
        candidates[A[meq:iq]] = False
        excluded = np.zeros(m, dtype=bool)

        s = C.T.dot(x) - d
        psi = np.minimum(s[meq:], 0.0).sum()
        if abs(psi) <= m*EPS*c1*c2*100.0:
            logger.debug("QP solved in %i iterations with %i active constraints", iterations, iq)
            return x

        u_old = u[:iq].copy()
        A_old = A[:iq].copy()
        x_old = x.copy()

        restart = True
        while restart:
            restart = False
            pick = np.where(candidates & ~excluded & (s < 0))[0]
            if len(pick) == 0:
                logger.debug("QP solved in %i iterations with %i active constraints", iterations, iq)
                return x
            ip = pick[np.argmin(s[pick])]
            normal = C[:, ip]
            u[iq] = 0.0
            A[iq] = ip

            while True:
                dv = J.T.dot(normal)
                z = J[:, iq:].dot(dv[iq:])
                r = _solve_r(R, dv, iq)

                # largest dual step keeping the active multipliers non-negative
                t1 = math.inf
                drop = -1
                for k in range(meq, iq):
                    if r[k] > 0.0 and u[k]/r[k] < t1:
                        t1 = u[k]/r[k]
                        drop = A[k]
                # full primal step
                t2 = math.inf
                if abs(z.dot(z)) > EPS:
                    t2 = -s[ip]/z.dot(normal)

                t = min(t1, t2)
                if math.isinf(t):
                    raise InfeasibleProblemError("Constraints are inconsistent, no solution")

                if math.isinf(t2):
                    # step in dual space only
                    u[:iq] -= t*r
                    u[iq] += t
                    candidates[drop] = True
                    iq = _delete_constraint(R, J, A, u, meq, iq, drop)
                    continue

                x += t*z
                u[:iq] -= t*r
                u[iq] += t

                if abs(t - t2) < EPS:
                    # full step, constraint ip becomes active
                    ok, r_norm = _add_constraint(R, J, dv, iq, r_norm)
                    iq += 1
                    if ok:
                        candidates[ip] = False
                        break
                    logger.debug("Constraint %i is degenerate, excluding it", ip)
                    excluded[ip] = True
                    iq = _delete_constraint(R, J, A, u, meq, iq, ip)
                    candidates[:] = True
                    candidates[:meq] = False
                    for k in range(meq, iq):
                        A[k] = A_old[k]
                        u[k] = u_old[k]
                        candidates[A[k]] = False
                    x = x_old.copy()
                    restart = True
                    break

                # partial step, drop the blocking constraint and continue with ip
                candidates[drop] = True
                iq = _delete_constraint(R, J, A, u, meq, iq, drop)
                s[ip] = normal.dot(x) - d[ip]


def _solve_r(R, dv, iq):
    if iq == 0:
        return np.zeros(0)
    return solve_triangular(R[:iq, :iq], dv[:iq], lower=False)


def _add_constraint(R, J, dv, iq, r_norm):
    """Rotates dv so that only its first iq+1 entries are nonzero and stores it as column iq of R"""
    n = len(dv)
    for j in range(n-1, iq, -1):
        cc = dv[j-1]
        ss = dv[j]
        h = math.hypot(cc, ss)
        if h == 0.0:
            continue
        dv[j] = 0.0
        ss = ss/h
        cc = cc/h
        if cc < 0.0:
            cc = -cc
            ss = -ss
            dv[j-1] = -h
        else:
            dv[j-1] = h
        xny = ss/(1.0 + cc)
        t1 = J[:, j-1].copy()
        t2 = J[:, j].copy()
        J[:, j-1] = t1*cc + t2*ss
        J[:, j] = xny*(t1 + J[:, j-1]) - t2

    R[:iq+1, iq] = dv[:iq+1]
    if abs(dv[iq]) <= EPS*r_norm:
        return False, r_norm
    return True, max(r_norm, abs(dv[iq]))


def _delete_constraint(R, J, A, u, meq, iq, l):
    """Removes constraint l from the active set, returns the new active count"""
    qq = -1
    for i in range(meq, iq):
        if A[i] == l:
            qq = i
            break
    if qq < 0:
        raise QPError("Constraint {0} is not in the active set".format(l))

    for i in range(qq, iq-1):
        A[i] = A[i+1]
        u[i] = u[i+1]
        R[:, i] = R[:, i+1]
    A[iq-1] = A[iq]
    u[iq-1] = u[iq]
    A[iq] = 0
    u[iq] = 0.0
    R[:iq, iq-1] = 0.0
    iq -= 1

    for j in range(qq, iq):
        cc = R[j, j]
        ss = R[j+1, j]
        h = math.hypot(cc, ss)
        if h == 0.0:
            continue
        cc = cc/h
        ss = ss/h
        R[j+1, j] = 0.0
        if cc < 0.0:
            R[j, j] = -h
            cc = -cc
            ss = -ss
        else:
            R[j, j] = h
        xny = ss/(1.0 + cc)
        t1 = R[j, j+1:iq].copy()
        t2 = R[j+1, j+1:iq].copy()
        R[j, j+1:iq] = t1*cc + t2*ss
        R[j+1, j+1:iq] = xny*(t1 + R[j, j+1:iq]) - t2
        t1 = J[:, j].copy()
        t2 = J[:, j+1].copy()
        J[:, j] = t1*cc + t2*ss
        J[:, j+1] = xny*(J[:, j] + t1) - t2
    return iq
