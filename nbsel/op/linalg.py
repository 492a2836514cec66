from __future__ import annotations

import numpy as np

import nbsel.utils as nbu

from . import vector as opv


@nbu.jtic
def dadd(x: np.ndarray, s: float) -> None:
    """Square diagonal Add."""
    for i in range(x.shape[0]): x[i, i] += s


@nbu.jt
def gram_cols(X: np.ndarray, out: np.ndarray) -> np.ndarray:
    """
    Gram matrix of the columns of ``X``, ``out = X^T X``. Only the lower half is computed then mirrored.

    :param X: Matrix (n, k).
    :param out: (k, k) output.
    :returns: ``out``.
    """
    k = X.shape[1]
    for j in range(k):
        xj = X[:, j]
        for i in range(j, k): out[i, j] = opv.dot(X[:, i], xj)
        for i in range(0, j): out[i, j] = out[j, i]
    return out


@nbu.jt
def potrs(L: np.ndarray, x: np.ndarray) -> np.ndarray:
    """
    Solve ``L L^T z = x`` from the lower cholesky factor, ``x`` is overwritten with ``z``.

    :param L: The lower factored matrix.
    :param x: The system vector, overwritten by the solution.
    :returns: ``x``.
    """
    n = x.shape[0]
    for i in range(n): x[i] = (x[i] - opv.dot(L[i, :i], x[:i])) / L[i, i]
    for i in range(n - 1, -1, -1): x[i] = (x[i] - opv.dot(L[i + 1 :, i], x[i + 1 :])) / L[i, i]
    return x


@nbu.jtc
def cholesky_fsolve_inplace(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Solve ``a x = b`` for symmetric positive definite ``a``, ``b`` is overwritten with ``x``.

    :param a: SPD system matrix.
    :param b: Right hand side, overwritten.
    :returns: ``b``.
    """
    L = np.linalg.cholesky(a)
    return potrs(L, b)


@nbu.jtc
def ridge_fsolve(X: np.ndarray, y: np.ndarray, l2: float, gram: np.ndarray, out: np.ndarray) -> np.ndarray:
    """
    Ridge normal equations ``(X^T X + l2 I) w = X^T y``, solved by cholesky.

    :param X: Design matrix (n, k).
    :param y: Targets (n,).
    :param l2: Ridge weight added to the diagonal, must be > 0 unless ``X`` has full column rank.
    :param gram: (k, k) scratch for the system matrix.
    :param out: (k,) output, the solution.
    :returns: ``out``.
    """
    gram_cols(X, gram)
    dadd(gram, l2)
    for j in range(X.shape[1]): out[j] = opv.dot(X[:, j], y)
    return cholesky_fsolve_inplace(gram, out)
