"""
Dual ascent on ``alpha`` for a fixed support ``s``. The saddle objective is

    f(alpha, s) = - sum_i l*(y_i, alpha_i) - gamma/2 sum_{j in s} (X_j^T alpha)^2

so the gradient is ``-grad_fenchel(y, alpha) - gamma sum_{j in s} (X_j^T alpha) X_j``. Each selected column enters
through its current alignment with ``alpha``, a step costs O(n_indices * n).
"""

from __future__ import annotations

import numpy as np

import nbsel.op.vector as opv
import nbsel.utils as nbu
from nbsel.fenchel import fenchel, grad_fenchel, project_dual


@nbu.jti
def proj_intercept(alpha: np.ndarray) -> np.ndarray:
    """Project onto ``sum(alpha) = 0``, the dual constraint of a free bias term."""
    return opv.ax(alpha, -opv.vmean(alpha))


@nbu.jt
def grad_dual(
    code: int, eps: float, Y: np.ndarray, X: np.ndarray, alpha: np.ndarray, indices: np.ndarray, n_indices: int,
    gamma: float, g: np.ndarray,
) -> np.ndarray:
    """
    Gradient of the dual objective in ``alpha``, written into ``g``.

    :param code: Loss code.
    :param eps: SVR insensitivity.
    :param Y: Labels (n,).
    :param X: Design matrix (n, p).
    :param alpha: Dual variable (n,).
    :param indices: Support buffer, only ``indices[:n_indices]`` is read.
    :param n_indices: Support size.
    :param gamma: Ridge strength.
    :param g: (n,) output, usually ``cache.g``.
    :returns: ``g``.
    """
    n = Y.shape[0]
    for i in range(n): g[i] = -grad_fenchel(code, eps, Y[i], alpha[i])
    for j in range(n_indices):
        x = X[:, indices[j]]
        opv.axpy(g, x, -gamma * opv.dot(x, alpha))
    return g


@nbu.jt
def dual_ascent(
    code: int, eps: float, Y: np.ndarray, X: np.ndarray, alpha: np.ndarray, indices: np.ndarray, n_indices: int,
    gamma: float, delta: float, n_steps: int, intercept: bool, g: np.ndarray,
) -> np.ndarray:
    """
    ``n_steps`` of projected gradient ascent, ``alpha <- proj(alpha + delta * grad)``. With ``intercept`` the mean is
    removed after each projection.

    :returns: ``alpha``, updated in place.
    """
    for _ in range(n_steps):
        grad_dual(code, eps, Y, X, alpha, indices, n_indices, gamma, g)
        opv.axpy(alpha, g, delta)
        project_dual(code, Y, alpha)
        if intercept: proj_intercept(alpha)
    return alpha


@nbu.jti
def inner_steps(grad_up: int, p: int, n_indices: int) -> int:
    """Gradient steps per support update, ``min(grad_up, p // n_indices)``. Shrinks as the support grows so one outer
    iteration costs about the same whatever the support size. An empty support takes the full ``grad_up``."""
    if n_indices <= 0: return grad_up
    return min(grad_up, p // n_indices)


@nbu.jt
def dual_value(
    code: int, eps: float, Y: np.ndarray, X: np.ndarray, alpha: np.ndarray, indices: np.ndarray, n_indices: int,
    gamma: float,
) -> float:
    """Dual objective ``f(alpha, s)``."""
    v = 0.0
    for i in range(Y.shape[0]): v -= fenchel(code, eps, Y[i], alpha[i])
    for j in range(n_indices):
        xa = opv.dot(X[:, indices[j]], alpha)
        v -= 0.5 * gamma * xa * xa
    return v
