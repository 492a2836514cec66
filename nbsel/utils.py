from __future__ import annotations

import os
from ast import literal_eval
from typing import Any, Callable

import numba as nb
import numpy as np
from numba import types
from numba.extending import overload

# This only changes once at import time.
# --- Numba Global Fastmath : "true" gives every fastmath flag except nnan/ninf. The solver reads non-finite duals to
# detect divergence, and with nnan/ninf LLVM is free to fold ``isfinite`` to a constant. A literal set/list of flags
# (eg "{'contract', 'afn'}") is passed straight through.
_FM_SAFE = {"nsz", "arcp", "contract", "afn", "reassoc"}
_fm = os.environ.get("NB_GLOB_FM", "true")
_fm = (
    False if not _fm or _fm.lower() in ("false", "0", "no")
    else set(literal_eval(_fm)) if any(i in _fm for i in ("[", "{", "(")) else _FM_SAFE
)
# --- Numba Global Error Model : 'numpy' lets float division by zero produce inf/nan instead of raising, which is what
# the divergence check expects.
_erm = os.environ.get("NB_GLOB_EM", "numpy")


"""
## Configurations
c : Cache the compilation for new signatures.
i : Manual/forced Numba-IR level inline.

## Decorators
jt - Numba jit using the base defaults and extension characters seen above. The python definition of a jitted function
stays reachable through `jitfunc.py_func(*args, **kwargs)`.
ov - Overload decorators.

Small kernels are inlined (jti) into the solver loops instead of cached on their own, a cached callee is always linked
as a function pointer. Caching is applied at the scope of the larger procedures.
"""

_dft = dict(fastmath=_fm, error_model=_erm)  # base python arguments.
jit_s = _dft
jit_sc = jit_s | dict(cache=True)
jit_si = jit_s | dict(inline="always")
jit_sci = jit_si | dict(cache=True)

# --- JIT DECORATORS
jt = nb.njit(**jit_s)  # plain jit
jtc = nb.njit(**jit_sc)  # cache
jti = nb.njit(**jit_si)  # inline
jtic = nb.njit(**jit_sci)  # inline and cache


# --- OVERLOADS DECORATORS
def ovs(impl: Callable[..., Any]) -> Callable[..., Any]: return overload(impl, jit_options=jit_s)


def ovsic(impl: Callable[..., Any]) -> Callable[..., Any]: return overload(impl, jit_options=jit_sc, inline="always")


def type_ref(arg: Any) -> type[Any]:
    """Get the data type of an array, otherwise get the type of a value.

    Works in python and numba blocks.

    :param arg: Value or array.
    :returns: A dtype/type reference for ``arg``.
    """
    if isinstance(arg, np.ndarray): return arg.dtype.type
    else: return type(arg)


@ovsic(type_ref)
def _type_ref(arg):  # pragma: no cover
    if isinstance(arg, types.Literal):
        typ = arg._literal_type_cache
        return lambda arg: typ
    elif isinstance(arg, types.Array):
        typ = arg.dtype
        return lambda arg: typ
    else:
        typ = arg  # it only sees type in this scope not value
        return lambda arg: typ


@jtic
def placerange(r: np.ndarray, start: int = 0, step: int = 1) -> None:
    """
    Like numpy arange but for existing arrays. Resets the feature ranking before each sort.

    :param r: Output array.
    :param start: Starting value.
    :param step: Step value.
    :returns: None.
    """
    for i in range(r.shape[0]): r[i] = start + i * step
