"""
Support selection, the exact minimisation over ``s`` of the saddle objective for a fixed dual ``alpha``.

Both selectors write into a caller-owned index buffer of capacity ``p`` and return the logical support size. Scores
``X_j^T alpha`` are written into ``cache.ax``, the ranking into ``cache.perm``, so a call never allocates.
"""

from __future__ import annotations

import numpy as np

import nbsel.op.vector as opv
import nbsel.utils as nbu
from nbsel.memory import Cache
from nbsel.rng import place_bernoulli
from nbsel.sort import arg_merge_sort, insert_sort
from nbsel.types import CONSTRAINT_, Sparsity


@nbu.jt
def initial_support(sp_code: int, k: int, p: int, out: np.ndarray) -> int:
    """
    Random starting support. Each feature is drawn independently, with probability ``k/p`` for a cardinality
    constraint (redrawn until the size is in [1, k]) and 1/2 for a penalty (redrawn until non-empty).

    :param sp_code: Sparsity code.
    :param k: Cardinality bound, ignored for a penalty.
    :param p: Number of features.
    :param out: Index buffer of capacity >= p.
    :returns: The support size, ``out[:size]`` is ascending.
    """
    buf = out[:p]
    cnt = 0
    if sp_code == CONSTRAINT_:
        prob = min(k / p, 1.0)
        while cnt < 1 or cnt > k: cnt = place_bernoulli(buf, prob)
    else:
        while cnt < 1: cnt = place_bernoulli(buf, 0.5)
    return cnt


def ind_init(sparsity: Sparsity, p: int) -> np.ndarray:
    """Random starting support for ``sparsity`` as a new ascending int64 array. See ``initial_support``."""
    out = np.empty(p, dtype=np.int64)
    cnt = initial_support(sparsity.code, sparsity.k, p, out)
    return out[:cnt].copy()


@nbu.jt
def select_constraint(k: int, X: np.ndarray, alpha: np.ndarray, indices: np.ndarray, cache: Cache) -> int:
    """
    Keep the ``min(k, p)`` features with the largest ``|X_j^T alpha|``. Ties go to the lower column index, the result
    is written ascending.

    :param k: Cardinality bound.
    :param X: Design matrix (n, p).
    :param alpha: Dual variable (n,).
    :param indices: Output support buffer, capacity >= min(k, p).
    :param cache: Working memory of the run.
    :returns: ``min(k, p)``.
    """
    p = X.shape[1]
    ax, perm = cache.ax, cache.perm
    for j in range(p): ax[j] = abs(opv.dot(X[:, j], alpha))

    nbu.placerange(perm)
    arg_merge_sort(ax, perm, False, cache.ws)

    m = min(k, p)
    for i in range(m): indices[i] = perm[i]
    insert_sort(indices[:m], True)
    return m


@nbu.jt
def select_penalty(lam: float, gamma: float, X: np.ndarray, alpha: np.ndarray, indices: np.ndarray, cache: Cache) -> int:
    """
    Hard threshold, feature ``j`` is kept when ``lam - gamma/2 * (X_j^T alpha)^2 < 0``.

    :param lam: Penalty per selected feature.
    :param gamma: Ridge strength.
    :param X: Design matrix (n, p).
    :param alpha: Dual variable (n,).
    :param indices: Output support buffer, capacity >= p.
    :param cache: Working memory of the run.
    :returns: The number of selected features, possibly 0.
    """
    ax = cache.ax
    half = 0.5 * gamma
    cnt = 0
    for j in range(X.shape[1]):
        xa = opv.dot(X[:, j], alpha)
        ax[j] = xa * xa
        if lam - half * ax[j] < 0.0:
            indices[cnt] = j
            cnt += 1
    return cnt


@nbu.jt
def partial_min(
    sp_code: int, k: int, lam: float, gamma: float, X: np.ndarray, alpha: np.ndarray, indices: np.ndarray, cache: Cache,
) -> int:
    """Minimise over the support for a fixed ``alpha``, dispatching on the sparsity code."""
    if sp_code == CONSTRAINT_: return select_constraint(k, X, alpha, indices, cache)
    return select_penalty(lam, gamma, X, alpha, indices, cache)


@nbu.jti
def indices_same(indices: np.ndarray, n: int, indices_old: np.ndarray, n_old: int) -> bool:
    """True if ``indices[:n]`` and ``indices_old[:n_old]`` hold the same entries in the same order."""
    if n != n_old: return False
    for j in range(n):
        if indices[j] != indices_old[j]: return False
    return True
