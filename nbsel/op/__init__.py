from __future__ import annotations

from . import linalg, vector
from .linalg import cholesky_fsolve_inplace, dadd, gram_cols, potrs, ridge_fsolve

__all__ = [
    "linalg",
    "vector",
    "cholesky_fsolve_inplace",
    "dadd",
    "gram_cols",
    "potrs",
    "ridge_fsolve",
]
