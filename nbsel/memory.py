from __future__ import annotations

from typing import NamedTuple

import numpy as np


class Cache(NamedTuple):
    """
    Working memory of one solver run. Compiled kernels receive it as a tuple and only ever write into its buffers.

    A cache belongs to a single run at a time, two concurrent ``subset_selection`` calls must not share one.

    :ivar g: (n,) dual gradient.
    :ivar ax: (p,) feature scores ``X^T alpha`` (absolute or squared, depending on the selector).
    :ivar perm: (p,) feature ranking.
    :ivar ws: (max(1, p // 2),) merge workspace of the ranking sort.
    """

    g: np.ndarray
    ax: np.ndarray
    perm: np.ndarray
    ws: np.ndarray


def subset_memspec(n: int, p: int) -> Cache:
    """
    Allocate the working memory for a problem with ``n`` observations and ``p`` features.

    :param n: Number of observations (rows of X).
    :param p: Number of features (columns of X).
    :returns: A ``Cache``.
    """
    return Cache(
        np.empty(n, dtype=np.float64),
        np.empty(p, dtype=np.float64),
        np.empty(p, dtype=np.int64),
        np.empty(max(1, p // 2), dtype=np.int64),
    )


def check_cache(cache: Cache, n: int, p: int) -> bool:
    """True if ``cache`` can serve an ``(n, p)`` problem without reallocating."""
    return (
        cache.g.shape == (n,) and cache.ax.shape == (p,) and cache.perm.shape == (p,)
        and cache.ws.shape[0] >= max(1, p // 2)
        and cache.g.dtype == np.float64 and cache.ax.dtype == np.float64
        and cache.perm.dtype == np.int64 and cache.ws.dtype == np.int64
    )
