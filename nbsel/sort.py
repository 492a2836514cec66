"""
In-place sorts for the support selector. Feature ranking is a stable descending argsort of the scores, the selected
block is then put back in ascending index order with an insertion sort.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

import nbsel.utils as nbu

INS_SEP = 56
FI = int | float
MArray = np.ndarray | None


@nbu.jti
def _lessthan(a, b):
    return a < b


@nbu.jti
def _greaterthan(a, b):
    return a > b


# index comparators, a and b index into vals.
@nbu.jti
def _arg_lessthan(a, b, vals):
    return vals[a] < vals[b]


@nbu.jti
def _arg_greaterthan(a, b, vals):
    return vals[a] > vals[b]


@nbu.jt
def impl_insert_sort(sr: np.ndarray, comp_call: Callable[[FI, FI], bool]) -> None:
    for i in range(1, sr.shape[0]):
        k = sr[i]
        j = i
        while j > 0 and comp_call(k, sr[j - 1]):
            sr[j] = sr[j - 1]
            j -= 1
        sr[j] = k


@nbu.jt
def impl_arg_insert_sort(sr: np.ndarray, idxr: np.ndarray, comp_call: Callable[[int, int, np.ndarray], bool]) -> None:
    # only idxr moves, sr is read through the comparator.
    for i in range(1, idxr.shape[0]):
        k = idxr[i]
        j = i
        while j > 0 and comp_call(k, idxr[j - 1], sr):
            idxr[j] = idxr[j - 1]
            j -= 1
        idxr[j] = k


@nbu.jt
def insert_sort(sr: np.ndarray, small_first: bool = True) -> None:
    """
    Insertion sort. Used to put short support index blocks in canonical order.

    :param sr: Array to sort in-place.
    :param small_first: If True, sort ascending; otherwise descending.
    :returns: None.
    """
    if small_first: impl_insert_sort(sr, _lessthan)
    else: impl_insert_sort(sr, _greaterthan)


@nbu.jt
def impl_arg_merge_sort(
    sr: np.ndarray, idxr: np.ndarray, ws: np.ndarray, comp_call: Callable[[int, int, np.ndarray], bool]
) -> None:
    if idxr.size <= INS_SEP:
        impl_arg_insert_sort(sr, idxr, comp_call)
        return

    mid = idxr.size // 2
    impl_arg_merge_sort(sr, idxr[:mid], ws, comp_call)
    impl_arg_merge_sort(sr, idxr[mid:], ws, comp_call)

    # Left half goes to the workspace, the merge writes over it.
    for i in range(mid): ws[i] = idxr[i]
    left = ws[:mid]
    right = idxr[mid:]

    i = j = k = 0
    ls, rs = left.size, right.size
    # ties take from the left, so the sort is stable.
    while i < ls and j < rs:
        if comp_call(right[j], left[i], sr):
            idxr[k] = right[j]
            j += 1
        else:
            idxr[k] = left[i]
            i += 1
        k += 1
    while i < ls:
        idxr[k] = left[i]
        i += 1
        k += 1
    # right leftovers are already in place, idxr[k] aliases right[j].


@nbu.jt
def arg_merge_sort(sr: np.ndarray, idxr: np.ndarray, small_first: bool = True, ws: MArray = None) -> None:
    """
    Top-down stable merge argsort.

    Sorts ``idxr`` in-place based on values in ``sr``. If no workspace is provided, one is allocated with size
    ``idxr.size // 2``. The feature ranking passes ``Cache.ws`` so the selector never allocates.

    :param sr: Array used for sort comparison.
    :param idxr: Index array to sort in-place.
    :param small_first: If True, sort ascending by ``sr`` values; otherwise descending.
    :param ws: Optional workspace array, same dtype as ``idxr`` and at least ``idxr.size // 2`` long.
    :returns: None.
    """
    if ws is None: ws = np.empty(idxr.size // 2, dtype=idxr.dtype)
    if small_first: impl_arg_merge_sort(sr, idxr, ws, _arg_lessthan)
    else: impl_arg_merge_sort(sr, idxr, ws, _arg_greaterthan)
