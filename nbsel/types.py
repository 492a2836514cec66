"""
Loss and sparsity taxonomy, loop states and the fitted estimator record.

Compiled kernels never see these python objects, they branch on the integer ``code`` of each variant (plus ``eps``,
``k`` and ``lam`` scalars). The codes are module constants so numba freezes them into the compiled branches.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, NamedTuple

import numpy as np

# Loss codes
OLS_ = 0
L1SVR_ = 1
L2SVR_ = 2
LOGREG_ = 3
L1SVM_ = 4
L2SVM_ = 5

# Sparsity codes
CONSTRAINT_ = 0
PENALTY_ = 1


class _Variant:
    """Immutable value object, equal when the class and the parameters are equal."""

    __slots__ = ()
    _params: tuple[str, ...] = ()

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def _set(self, name: str, value: Any) -> None: object.__setattr__(self, name, value)

    def _key(self) -> tuple[Any, ...]: return (type(self),) + tuple(getattr(self, p) for p in self._params)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Variant) and self._key() == other._key()

    def __hash__(self) -> int: return hash(self._key())

    def __repr__(self) -> str:
        args = ", ".join(f"{p}={getattr(self, p)!r}" for p in self._params)
        return f"{type(self).__name__}({args})"


class LossFunction(_Variant):
    __slots__ = ()
    code: int = -1
    eps: float = 0.0
    classification: bool = False


class Regression(LossFunction):
    __slots__ = ()


class Classification(LossFunction):
    """Two-class losses, labels must be exactly -1 and +1."""

    __slots__ = ()
    classification = True


class OLS(Regression):
    """Least squares, ``l(y, u) = (y - u)^2 / 2``."""

    __slots__ = ()
    code = OLS_


class _EpsInsensitive(Regression):
    __slots__ = ("eps",)
    _params = ("eps",)

    def __init__(self, eps: float = 0.0) -> None:
        eps = float(eps)
        if not eps >= 0.0: raise ValueError(f"eps must be non-negative, got {eps}")
        self._set("eps", eps)


class L1SVR(_EpsInsensitive):
    """Epsilon-insensitive absolute loss, ``l(y, u) = max(|y - u| - eps, 0)``."""

    __slots__ = ()
    code = L1SVR_


class L2SVR(_EpsInsensitive):
    """Epsilon-insensitive squared loss, ``l(y, u) = max(|y - u| - eps, 0)^2 / 2``."""

    __slots__ = ()
    code = L2SVR_


class LogReg(Classification):
    """Logistic loss, ``l(y, u) = log(1 + exp(-y u))``."""

    __slots__ = ()
    code = LOGREG_


class L1SVM(Classification):
    """Hinge loss, ``l(y, u) = max(0, 1 - y u)``."""

    __slots__ = ()
    code = L1SVM_


class L2SVM(Classification):
    """Squared hinge loss, ``l(y, u) = max(0, 1 - y u)^2 / 2``."""

    __slots__ = ()
    code = L2SVM_


class Sparsity(_Variant):
    __slots__ = ()
    code: int = -1
    k: int = 0
    lam: float = 0.0

    def max_index_size(self, p: int) -> int:
        """Capacity a support buffer needs for ``p`` features."""
        return p


class Constraint(Sparsity):
    """Hard cardinality bound, at most ``k`` features are selected."""

    __slots__ = ("k",)
    _params = ("k",)
    code = CONSTRAINT_

    def __init__(self, k: int) -> None:
        if isinstance(k, bool) or int(k) != k or k < 1: raise ValueError(f"k must be a positive integer, got {k!r}")
        self._set("k", int(k))

    def max_index_size(self, p: int) -> int: return min(self.k, p)


class Penalty(Sparsity):
    """Penalised support size, feature j is kept when ``lam < gamma/2 * (X_j^T alpha)^2``."""

    __slots__ = ("lam",)
    _params = ("lam",)
    code = PENALTY_

    def __init__(self, lam: float) -> None:
        lam = float(lam)
        if not lam >= 0.0: raise ValueError(f"lam must be non-negative, got {lam}")
        self._set("lam", lam)


class LoopState(IntEnum):
    RUNNING = 0
    RESTARTING = 1
    STOPPED_BY_ITERATION_BUDGET = 2
    STOPPED_BY_STAGNATION = 3


class SparseEstimator(NamedTuple):
    """
    Result of ``subset_selection``.

    :ivar loss: Loss used.
    :ivar sparsity: Sparsity model used.
    :ivar indices: Selected feature columns, ascending.
    :ivar w: Weights of the selected columns, ``w[i]`` belongs to ``indices[i]``.
    :ivar alpha: Final dual variable (the running average unless averaging was off or the loop stagnated).
    :ivar b: Bias, the midpoint of the dual gradient over the non-zero duals. 0 when no intercept is fitted.
    :ivar n_iter: Outer iterations run since the last restart.
    :ivar state: How the loop stopped.
    :ivar delta: Step size in effect at the end, smaller than the requested one after restarts.
    :ivar restarts: Number of divergence restarts.
    """

    loss: LossFunction
    sparsity: Sparsity
    indices: np.ndarray
    w: np.ndarray
    alpha: np.ndarray
    b: float
    n_iter: int
    state: LoopState
    delta: float
    restarts: int

    def coef(self, p: int) -> np.ndarray:
        """Dense length ``p`` weight vector, zero outside the support."""
        out = np.zeros(p, dtype=np.float64)
        out[self.indices] = self.w
        return out

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Linear scores ``X[:, indices] @ w - b``. Classification labels are their sign.

        ``b`` is the dual gradient midpoint, which sits at minus the offset of the fitted scores, hence the subtraction.
        """
        X = np.asarray(X, dtype=np.float64)
        return X[:, self.indices] @ self.w - self.b
