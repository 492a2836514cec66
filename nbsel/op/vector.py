"""
Vector kernels for the dual ascent loop. The naming convention extends the axpy BLAS operator to other kernels.

Array vectors: x, y. To qualify for this naming convention:
- x : Is always the write array and the first argument of the kernel.
- y : This will always be the optional second array.

Values: s1, s2. In latex: $s_1, s_2$

Char names:
- a : Add.
- p : Product.
- c : Copy. (x only).

So:
    | ax* -> x += ...
    | cx* -> x = ...
    | px* -> x *= ...

Every kernel writes into memory it is handed, none of them allocate. They are inlined into the solver routines.
"""

from __future__ import annotations

import math as mt

import numpy as np

import nbsel.utils as nbu


@nbu.jti
def dot(x: np.ndarray, y: np.ndarray) -> float:
    r"""Vector dot product: $v \leftarrow x^T y$"""
    n = x.shape[0]
    s = nbu.type_ref(x)(0.0)
    for i in range(n): s += x[i] * y[i]
    return s


@nbu.jti
def cxy(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    r"""`x = y`, $x := y$."""
    n = y.shape[0]
    for i in range(n): x[i] = y[i]
    return x


@nbu.jti
def axpy(x: np.ndarray, y: np.ndarray, s1: float) -> np.ndarray:
    r"""`x += s1 * y`, $x := x + s_1 y$."""
    n = y.shape[0]
    s1 = nbu.type_ref(y)(s1)
    for i in range(n): x[i] += s1 * y[i]
    return x


@nbu.jti
def ax(x: np.ndarray, s1: float) -> np.ndarray:
    r"""`x += s1`, $x := x + s_1$. Shifts every entry, eg to center the dual variable."""
    n = x.shape[0]
    s1 = nbu.type_ref(x)(s1)
    for i in range(n): x[i] += s1
    return x


@nbu.jti
def pxaxpy(x: np.ndarray, y: np.ndarray, s1: float, s2: float) -> np.ndarray:
    r"""`x = s1 * x + s2 * y`, $x := s_1 x + s_2 y$. The running average update is ``pxaxpy(a, alpha, (t-1)/t, 1/t)``."""
    n = y.shape[0]
    typ = nbu.type_ref(y)
    s1, s2 = typ(s1), typ(s2)
    for i in range(n): x[i] = s1 * x[i] + s2 * y[i]
    return x


@nbu.jti
def vmean(x: np.ndarray) -> float:
    r"""Arithmetic mean: $v \leftarrow \frac{1}{n}\sum_i x_i$"""
    n = x.shape[0]
    s = nbu.type_ref(x)(0.0)
    for i in range(n): s += x[i]
    return s / n


@nbu.jti
def allfinite(x: np.ndarray) -> bool:
    """True if no entry is nan or +-inf. Short circuits on the first failure."""
    for e in x:
        if not mt.isfinite(e): return False
    return True
