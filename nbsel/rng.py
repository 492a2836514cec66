from __future__ import annotations

import random as rand

import numpy as np

import nbsel.utils as nbu


@nbu.jtc
def _ss(f) -> None:
    rand.seed(f)
    np.random.seed(f)


def set_seed(seed: int | None) -> None:
    """Set both ``random`` and ``numpy.random`` seeds for both python and jit execution, from a python scope.
     Or just jit execution from a jit scope.

     The randomized initial support is the only random draw in the solver, seeding here makes a run reproducible."""
    if seed is not None:
        _ss(seed)
        rand.seed(seed)
        np.random.seed(seed)


@nbu.ovs(set_seed)
def impl_set_seed(seed: int | None):
    return _ss


@nbu.jti
def place_bernoulli(out: np.ndarray, prob: float) -> int:
    """
    Independent bernoulli draw per position ``j < out.size``, the accepted positions are written ascending into ``out``.

    :param out: Index buffer, its length is the number of candidates.
    :param prob: Acceptance probability of each candidate.
    :returns: The number of accepted indices, ``out[:count]`` is valid.
    """
    count = 0
    for j in range(out.shape[0]):
        if rand.random() < prob:
            out[count] = j
            count += 1
    return count
