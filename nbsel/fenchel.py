"""
Per-loss fenchel conjugates ``l*(y, a)``, their derivatives in ``a``, the default dual start and the projection onto the
domain of the conjugate.

With ``v = y a`` the conjugates are:

| Loss   | l*(y, a)                          | d l*/d a                  | domain      |
|--------|-----------------------------------|---------------------------|-------------|
| OLS    | a^2/2 + y a                       | a + y                     | R           |
| L2SVR  | a^2/2 + y a + eps |a|             | a + y + eps sign(a)       | R           |
| L1SVR  | y a + eps |a|                     | y + eps sign(a)           | [-1, 1]     |
| LogReg | (-v) log(-v) + (1 + v) log(1 + v) | y log((1 + v) / (-v))     | v in [-1, 0]|
| L1SVM  | v                                 | y                         | v in [-1, 0]|
| L2SVM  | a^2/2 + v                         | a + y                     | v <= 0      |

Every kernel dispatches on the integer loss code from ``nbsel.types``.
"""

from __future__ import annotations

import math as mt

import numpy as np

import nbsel.utils as nbu
from nbsel.types import L1SVM_, L1SVR_, L2SVM_, L2SVR_, LOGREG_, OLS_, LossFunction

# Logistic conjugate derivative is unbounded at the domain edges, it's evaluated this far inside them.
LOGREG_CLIP = 1e-12


@nbu.jti
def _sign(a: float) -> float:
    return 1.0 if a > 0.0 else -1.0 if a < 0.0 else 0.0


@nbu.jti
def _xlogx(x: float) -> float:
    return x * mt.log(x) if x > 0.0 else 0.0


@nbu.jti
def fenchel(code: int, eps: float, y: float, a: float) -> float:
    """
    Fenchel conjugate value ``l*(y, a)``. Assumes ``a`` lies in the domain (see ``project_dual``).

    :param code: Loss code.
    :param eps: Insensitivity of the SVR losses, ignored otherwise.
    :param y: Label.
    :param a: Dual value.
    :returns: The conjugate value.
    """
    if code == OLS_: return 0.5 * a * a + y * a
    elif code == L2SVR_: return 0.5 * a * a + y * a + eps * abs(a)
    elif code == L1SVR_: return y * a + eps * abs(a)
    elif code == LOGREG_:
        u = min(max(-y * a, 0.0), 1.0)
        return _xlogx(u) + _xlogx(1.0 - u)
    elif code == L1SVM_: return y * a
    elif code == L2SVM_: return 0.5 * a * a + y * a
    return mt.nan


@nbu.jti
def grad_fenchel(code: int, eps: float, y: float, a: float) -> float:
    """
    Derivative of the fenchel conjugate in ``a``.

    :param code: Loss code.
    :param eps: Insensitivity of the SVR losses, ignored otherwise.
    :param y: Label.
    :param a: Dual value.
    :returns: ``d l*(y, a) / d a``.
    """
    if code == OLS_: return a + y
    elif code == L2SVR_: return a + y + eps * _sign(a)
    elif code == L1SVR_: return y + eps * _sign(a)
    elif code == LOGREG_:
        u = min(max(-y * a, LOGREG_CLIP), 1.0 - LOGREG_CLIP)
        return y * mt.log((1.0 - u) / u)
    elif code == L1SVM_: return y
    elif code == L2SVM_: return a + y
    return mt.nan


@nbu.jt
def initial_dual(code: int, Y: np.ndarray, out: np.ndarray) -> np.ndarray:
    """
    Default dual start, the dual point that matches the all-zero predictor.

    OLS and L2SVR start at ``-Y``, L1SVR at ``-Y`` clamped to [-1, 1], classification losses at ``-Y/2``.

    :param code: Loss code.
    :param Y: Labels (n,).
    :param out: (n,) output.
    :returns: ``out``.
    """
    n = Y.shape[0]
    if code == L1SVR_:
        for i in range(n): out[i] = min(max(-Y[i], -1.0), 1.0)
    elif code == LOGREG_ or code == L1SVM_ or code == L2SVM_:
        for i in range(n): out[i] = -0.5 * Y[i]
    else:
        for i in range(n): out[i] = -Y[i]
    return out


@nbu.jti
def project_dual(code: int, Y: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    """
    In-place projection of ``alpha`` onto the domain of the conjugate.

    LogReg and L1SVM share the same formula, ``y a`` is clamped to [-1, 0] for both.

    :param code: Loss code.
    :param Y: Labels (n,), +-1 for classification losses.
    :param alpha: (n,) dual variable, overwritten.
    :returns: ``alpha``.
    """
    n = alpha.shape[0]
    if code == L1SVR_:
        for i in range(n): alpha[i] = min(max(alpha[i], -1.0), 1.0)
    elif code == LOGREG_ or code == L1SVM_:
        for i in range(n):
            y = Y[i]
            alpha[i] = min(max(y * alpha[i], -1.0), 0.0) / y
    elif code == L2SVM_:
        for i in range(n):
            y = Y[i]
            alpha[i] = min(y * alpha[i], 0.0) / y
    return alpha


def alpha_init(loss: LossFunction, Y: np.ndarray) -> np.ndarray:
    """Default dual start for ``loss`` as a new array. See ``initial_dual``."""
    Y = np.asarray(Y, dtype=np.float64)
    return initial_dual(loss.code, Y, np.empty_like(Y))
