"""
Saddle point subset selection. Alternates projected dual ascent on ``alpha`` with exact support minimisation, keeps a
running average of the dual iterate, restarts with a smaller step when the iterate diverges and finally recovers the
primal weights on the selected support.
"""

from __future__ import annotations

import logging
import math as mt

import numpy as np

import nbsel.fenchel as fen
import nbsel.op.vector as opv
import nbsel.support as sup
import nbsel.utils as nbu
from nbsel.dual import dual_ascent, dual_value, grad_dual, inner_steps
from nbsel.errors import DimensionMismatch, InvalidLabels, NumericalDivergence
from nbsel.memory import Cache, check_cache, subset_memspec
from nbsel.primal import recover_primal
from nbsel.rng import set_seed
from nbsel.types import LossFunction, LoopState, SparseEstimator, Sparsity

logger = logging.getLogger(__name__)

MAX_RESTARTS = 10

RESTARTING_ = int(LoopState.RESTARTING)
BUDGET_ = int(LoopState.STOPPED_BY_ITERATION_BUDGET)
STAGNATION_ = int(LoopState.STOPPED_BY_STAGNATION)


@nbu.jtc
def run_dual_loop(
    code: int, eps: float, sp_code: int, k: int, lam: float, Y: np.ndarray, X: np.ndarray, alpha: np.ndarray,
    a: np.ndarray, indices: np.ndarray, n_indices: int, indices_old: np.ndarray, gamma: float, delta: float,
    max_iter: int, grad_up: int, intercept: bool, anticycling: bool, averaging: bool, cache: Cache,
) -> tuple[int, int, int]:
    """
    The running state of the outer loop. Every buffer is updated in place.

    Each outer iteration runs ``inner_steps`` projected ascent steps, checks ``alpha`` is finite, folds it into the
    average ``a`` and reselects the support from ``alpha``. Returns as soon as ``alpha`` holds a non-finite entry, the
    caller decides whether to restart.

    :param code: Loss code.
    :param eps: SVR insensitivity.
    :param sp_code: Sparsity code.
    :param k: Cardinality bound (Constraint).
    :param lam: Penalty weight (Penalty).
    :param Y: Labels (n,).
    :param X: Design matrix (n, p).
    :param alpha: Dual iterate (n,).
    :param a: Running average of ``alpha`` (n,).
    :param indices: Support buffer, capacity p.
    :param n_indices: Size of the starting support.
    :param indices_old: Previous support, capacity p.
    :param gamma: Ridge strength.
    :param delta: Step size.
    :param max_iter: Outer iteration budget.
    :param grad_up: Upper bound of ascent steps per outer iteration.
    :param intercept: Keep ``sum(alpha) = 0``.
    :param anticycling: Stop once the support repeats.
    :param averaging: Maintain ``a``.
    :param cache: Working memory.
    :returns: (state code, outer iterations run, support size).
    """
    p = X.shape[1]
    t = 0
    while t < max_iter:
        n_steps = inner_steps(grad_up, p, n_indices)
        dual_ascent(code, eps, Y, X, alpha, indices, n_indices, gamma, delta, n_steps, intercept, cache.g)
        if not opv.allfinite(alpha): return RESTARTING_, t, n_indices

        t += 1
        if averaging: opv.pxaxpy(a, alpha, (t - 1) / t, 1.0 / t)

        n_old = n_indices
        opv.cxy(indices_old[:n_old], indices[:n_old])
        n_indices = sup.partial_min(sp_code, k, lam, gamma, X, alpha, indices, cache)

        if anticycling and sup.indices_same(indices, n_indices, indices_old, n_old): return STAGNATION_, t, n_indices
    return BUDGET_, t, n_indices


@nbu.jt
def compute_bias(
    code: int, eps: float, Y: np.ndarray, X: np.ndarray, alpha: np.ndarray, indices: np.ndarray, n_indices: int,
    gamma: float, g: np.ndarray,
) -> float:
    """Intercept, midpoint of the extreme dual gradient entries where ``alpha`` is non-zero. 0 when all of ``alpha`` is."""
    grad_dual(code, eps, Y, X, alpha, indices, n_indices, gamma, g)
    lo, hi = mt.inf, -mt.inf
    for i in range(alpha.shape[0]):
        if alpha[i] != 0.0:
            if g[i] < lo: lo = g[i]
            if g[i] > hi: hi = g[i]
    if lo > hi: return 0.0
    return 0.5 * (lo + hi)


def _check_labels(loss: LossFunction, Y: np.ndarray) -> None:
    if not loss.classification: return
    levels = np.unique(Y)
    if levels.size != 2: raise InvalidLabels(f"two-class classification needs exactly 2 label values, got {levels.size}")
    if levels[0] != -1.0 or levels[1] != 1.0: raise InvalidLabels(f"class labels must be -1 and +1, got {levels}")


def _check_positive(name: str, v: float) -> None:
    if not (mt.isfinite(v) and v > 0): raise ValueError(f"{name} must be a positive finite number, got {v}")


def subset_selection(
    loss: LossFunction,
    sparsity: Sparsity,
    Y: np.ndarray,
    X: np.ndarray,
    *,
    ind_init: np.ndarray | None = None,
    alpha_init: np.ndarray | None = None,
    gamma: float | None = None,
    intercept: bool = False,
    max_iter: int = 100,
    delta: float = 1e-3,
    grad_up: int = 10,
    anticycling: bool = False,
    averaging: bool = True,
    seed: int | None = None,
    cache: Cache | None = None,
) -> SparseEstimator:
    """
    Sparse linear regression or two-class classification by saddle point subset selection.

    Solves ``min_s max_alpha -sum_i l*(y_i, alpha_i) - gamma/2 sum_{j in s} (X_j^T alpha)^2`` over supports ``s``
    allowed by ``sparsity``. The columns of ``X`` should be normalized, unnormalized data is the usual cause of
    divergence restarts.

    :param loss: Loss variant, eg ``OLS()`` or ``LogReg()``.
    :param sparsity: ``Constraint(k)`` or ``Penalty(lam)``.
    :param Y: Labels (n,). -1/+1 for classification losses.
    :param X: Design matrix (n, p).
    :param ind_init: Starting support. Defaults to a random draw, see ``nbsel.support.ind_init``.
    :param alpha_init: Starting dual variable (n,). Defaults to ``nbsel.fenchel.alpha_init``.
    :param gamma: Ridge strength, defaults to ``1/sqrt(n)``.
    :param intercept: Fit a bias term.
    :param max_iter: Outer iteration budget.
    :param delta: Dual ascent step size.
    :param grad_up: Upper bound of ascent steps per outer iteration.
    :param anticycling: Stop as soon as the support repeats.
    :param averaging: Select the final support from the average of the dual iterates.
    :param seed: Seeds the random starting support when given.
    :param cache: Working memory from ``subset_memspec(n, p)``, allocated when None.
    :returns: The fitted ``SparseEstimator``.
    :raises DimensionMismatch: Sizes of ``Y``, ``X``, ``ind_init``, ``alpha_init`` or ``cache`` disagree.
    :raises InvalidLabels: Classification labels other than exactly {-1, +1}.
    :raises NumericalDivergence: The iterate diverged after ``MAX_RESTARTS`` step size reductions.
    """
    if not isinstance(loss, LossFunction) or loss.code < 0: raise TypeError(f"not a loss variant: {loss!r}")
    if not isinstance(sparsity, Sparsity) or sparsity.code < 0: raise TypeError(f"not a sparsity variant: {sparsity!r}")

    Y = np.ascontiguousarray(Y, dtype=np.float64)
    X = np.asfortranarray(X, dtype=np.float64)
    if Y.ndim != 1 or X.ndim != 2: raise DimensionMismatch(f"Y must be 1-d and X 2-d, got {Y.shape} and {X.shape}")
    n, p = X.shape
    if Y.shape[0] != n: raise DimensionMismatch(f"X and Y must have the same number of rows, got {n} and {Y.shape[0]}")
    if n == 0 or p == 0: raise ValueError(f"X must be non-empty, got shape {X.shape}")
    _check_labels(loss, Y)

    gamma = 1.0 / mt.sqrt(n) if gamma is None else float(gamma)
    delta = float(delta)
    _check_positive("gamma", gamma)
    _check_positive("delta", delta)
    if int(max_iter) != max_iter or max_iter < 1: raise ValueError(f"max_iter must be a positive integer, got {max_iter}")
    if int(grad_up) != grad_up or grad_up < 1: raise ValueError(f"grad_up must be a positive integer, got {grad_up}")

    if cache is None: cache = subset_memspec(n, p)
    elif not check_cache(cache, n, p): raise DimensionMismatch(f"cache does not fit a ({n}, {p}) problem")

    set_seed(seed)
    if ind_init is None: ind0 = sup.ind_init(sparsity, p)
    else:
        ind0 = np.unique(np.asarray(ind_init, dtype=np.int64))
        if ind0.size and (ind0[0] < 0 or ind0[-1] >= p):
            raise DimensionMismatch(f"ind_init entries must lie in [0, {p}), got {ind0}")
    if alpha_init is None: alpha0 = fen.alpha_init(loss, Y)
    else:
        alpha0 = np.array(alpha_init, dtype=np.float64)
        if alpha0.shape != (n,): raise DimensionMismatch(f"alpha_init must have shape ({n},), got {alpha0.shape}")

    n0 = ind0.size
    indices = np.empty(p, dtype=np.int64)
    indices_old = np.empty(p, dtype=np.int64)
    alpha, a = alpha0.copy(), alpha0.copy()
    indices[:n0] = ind0

    sp_code, k, lam = sparsity.code, int(sparsity.k), float(sparsity.lam)
    code, eps = loss.code, float(loss.eps)
    restarts = 0
    while True:
        state, t, n_indices = run_dual_loop(
            code, eps, sp_code, k, lam, Y, X, alpha, a, indices, n0, indices_old, gamma, delta,
            int(max_iter), int(grad_up), bool(intercept), bool(anticycling), bool(averaging), cache,
        )
        state = LoopState(state)
        if state != LoopState.RESTARTING: break

        if restarts == MAX_RESTARTS:
            raise NumericalDivergence(
                f"step size reduced {restarts} times down to delta={delta:g} and the dual iterate still diverges, "
                "check that the columns of X are normalized",
                delta, restarts,
            )
        restarts += 1
        delta /= 10
        logger.warning(
            "dual iterate diverged, restart %d/%d with step size delta=%g. Is the data normalized?",
            restarts, MAX_RESTARTS, delta,
        )
        alpha[:] = alpha0
        a[:] = alpha0
        indices[:n0] = ind0

    final = a if averaging and state != LoopState.STOPPED_BY_STAGNATION else alpha
    n_indices = sup.partial_min(sp_code, k, lam, gamma, X, final, indices, cache)
    selected = indices[:n_indices].copy()

    w = recover_primal(loss, Y, X[:, selected], gamma)
    b = compute_bias(code, eps, Y, X, final, indices, n_indices, gamma, cache.g) if intercept else 0.0

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "%s after %d iterations (restarts=%d, delta=%g): %d features selected, dual value %.6g",
            state.name, t, restarts, delta, n_indices, dual_value(code, eps, Y, X, final, indices, n_indices, gamma),
        )
    return SparseEstimator(loss, sparsity, selected, w, final, float(b), int(t), state, delta, restarts)
