"""
Primal weights on a fixed support. Given the loss, the labels and the columns of the selected features, find ``w``
minimising the ridge regularised empirical risk

    sum_i l(y_i, x_i^T w) + ||w||^2 / (2 gamma)

which is the primal counterpart of the saddle objective restricted to the support.
"""

from __future__ import annotations

import numpy as np
from scipy.optimize import minimize
from scipy.special import expit

import nbsel.op.linalg as opl
from nbsel.dual import dual_ascent
from nbsel.fenchel import initial_dual
from nbsel.types import L1SVM_, L1SVR_, L2SVM_, L2SVR_, LOGREG_, OLS_, LossFunction

# Projected dual ascent iterations for the non-smooth losses.
NONSMOOTH_ITERS = 2000
LBFGS_OPTIONS = {"maxiter": 1000, "ftol": 1e-12, "gtol": 1e-9}


def _risk_l2svr(w, Y, Xs, gamma, eps):
    r = Y - Xs @ w
    e = np.maximum(np.abs(r) - eps, 0.0)
    f = 0.5 * e @ e + 0.5 * (w @ w) / gamma
    return f, -(Xs.T @ (np.sign(r) * e)) + w / gamma


def _risk_logreg(w, Y, Xs, gamma, eps):
    m = -Y * (Xs @ w)
    f = np.logaddexp(0.0, m).sum() + 0.5 * (w @ w) / gamma
    return f, -(Xs.T @ (Y * expit(m))) + w / gamma


def _risk_l2svm(w, Y, Xs, gamma, eps):
    h = np.maximum(1.0 - Y * (Xs @ w), 0.0)
    f = 0.5 * h @ h + 0.5 * (w @ w) / gamma
    return f, -(Xs.T @ (Y * h)) + w / gamma


_SMOOTH_RISKS = {L2SVR_: _risk_l2svr, LOGREG_: _risk_logreg, L2SVM_: _risk_l2svm}


def _restricted_dual(loss: LossFunction, Y: np.ndarray, Xs: np.ndarray, gamma: float) -> np.ndarray:
    n, k = Xs.shape
    alpha = initial_dual(loss.code, Y, np.empty(n, dtype=np.float64))
    every = np.arange(k, dtype=np.int64)
    step = 1.0 / (gamma * np.linalg.norm(Xs, 2) ** 2 + 1.0)
    dual_ascent(
        loss.code, loss.eps, Y, Xs, alpha, every, k, gamma, step, NONSMOOTH_ITERS, False, np.empty(n, dtype=np.float64)
    )
    return -gamma * (Xs.T @ alpha)


def recover_primal(loss: LossFunction, Y: np.ndarray, Xs: np.ndarray, gamma: float) -> np.ndarray:
    """
    Weights of the selected columns.

    Least squares is solved exactly from the ridge normal equations. The smooth losses (L2SVR, LogReg, L2SVM) go
    through L-BFGS-B from the zero vector with analytic gradients. The hinge and absolute losses are not
    differentiable, their restricted dual is solved by projected ascent and mapped back by ``w = -gamma Xs^T alpha``.

    :param loss: Loss variant.
    :param Y: Labels (n,).
    :param Xs: Design matrix restricted to the support (n, k).
    :param gamma: Ridge strength, > 0.
    :returns: (k,) weights, empty when ``k == 0``.
    """
    Y = np.ascontiguousarray(Y, dtype=np.float64)
    Xs = np.asfortranarray(Xs, dtype=np.float64)
    k = Xs.shape[1]
    if k == 0: return np.empty(0, dtype=np.float64)

    code = loss.code
    if code == OLS_:
        return opl.ridge_fsolve(Xs, Y, 1.0 / gamma, np.empty((k, k), dtype=np.float64), np.empty(k, dtype=np.float64))
    if code == L1SVR_ or code == L1SVM_: return _restricted_dual(loss, Y, Xs, gamma)

    risk = _SMOOTH_RISKS.get(code)
    if risk is None: raise TypeError(f"no primal recovery for {loss!r}")
    res = minimize(
        risk, np.zeros(k), args=(Y, Xs, gamma, loss.eps), jac=True, method="L-BFGS-B", options=LBFGS_OPTIONS
    )
    return np.asarray(res.x, dtype=np.float64)
