from __future__ import annotations

import numpy as np
import pytest

import nbsel
import nbsel.op.linalg as opl
import nbsel.op.vector as opv
import nbsel.sort as sorti
from tests.numba_layers import iter_function_layers


def test_vector_kernels_write_in_place() -> None:
    x0 = np.array([1.0, -2.0, 3.0, 0.5], dtype=np.float64)
    y = np.array([0.5, 4.0, -1.0, 2.0], dtype=np.float64)

    for _, f in iter_function_layers(opv.dot):
        assert f(x0, y) == pytest.approx(float(x0 @ y))

    for _, f in iter_function_layers(opv.cxy):
        x = np.zeros(4)
        assert f(x, y) is x
        np.testing.assert_array_equal(x, y)
    for _, f in iter_function_layers(opv.axpy):
        np.testing.assert_allclose(f(x0.copy(), y, 0.5), x0 + 0.5 * y)
    for _, f in iter_function_layers(opv.ax):
        np.testing.assert_allclose(f(x0.copy(), -1.5), x0 - 1.5)
    for _, f in iter_function_layers(opv.pxaxpy):
        np.testing.assert_allclose(f(x0.copy(), y, 0.75, 0.25), 0.75 * x0 + 0.25 * y)


def test_vector_reductions() -> None:
    x = np.array([3.0, -7.5, 2.0, 9.25, 0.0])
    for _, f in iter_function_layers(opv.vmean):
        assert f(x) == pytest.approx(x.mean())
    for _, f in iter_function_layers(opv.allfinite):
        assert f(x)
        assert not f(np.array([1.0, np.nan]))
        assert not f(np.array([np.inf, 1.0]))
        assert not f(np.array([0.0, -np.inf]))


def test_gram_and_ridge_solve_match_numpy() -> None:
    rng = np.random.default_rng(4)
    X = np.asfortranarray(rng.standard_normal((25, 5)))
    y = rng.standard_normal(25)

    for _, f in iter_function_layers(opl.gram_cols):
        np.testing.assert_allclose(f(X, np.empty((5, 5))), X.T @ X, rtol=1e-10, atol=1e-12)

    expected = np.linalg.solve(X.T @ X + 0.3 * np.eye(5), X.T @ y)
    for _, f in iter_function_layers(opl.ridge_fsolve):
        np.testing.assert_allclose(f(X, y, 0.3, np.empty((5, 5)), np.empty(5)), expected, rtol=1e-9)


def test_cholesky_solves() -> None:
    spd = np.array([[4.0, 1.5, 0.2], [1.5, 3.5, -0.4], [0.2, -0.4, 2.0]])
    rhs = np.array([1.0, -2.0, 0.5])
    L = np.linalg.cholesky(spd)
    for _, f in iter_function_layers(opl.potrs):
        np.testing.assert_allclose(spd @ f(L, rhs.copy()), rhs, atol=1e-10)
    for _, f in iter_function_layers(opl.cholesky_fsolve_inplace):
        np.testing.assert_allclose(spd @ f(spd, rhs.copy()), rhs, atol=1e-10)
    for _, f in iter_function_layers(opl.dadd):
        a = np.zeros((3, 3))
        f(a, 2.0)
        np.testing.assert_array_equal(a, 2.0 * np.eye(3))


@pytest.mark.parametrize("n", [9, 57, 300])
def test_insert_sort_matches_numpy(n: int) -> None:
    rng = np.random.default_rng(n)
    vals = rng.standard_normal(n)

    for _, f in iter_function_layers(sorti.insert_sort):
        a = vals.copy()
        f(a, True)
        np.testing.assert_array_equal(a, np.sort(vals))
        a = vals.copy()
        f(a, False)
        np.testing.assert_array_equal(a, np.sort(vals)[::-1])


@pytest.mark.parametrize("n", [12, 300])
def test_arg_sorts_are_stable(n: int) -> None:
    # few distinct values, so there are many ties
    rng = np.random.default_rng(10 + n)
    vals = rng.integers(0, 5, n).astype(np.float64)

    for _, f in iter_function_layers(sorti.arg_merge_sort):
        idx = np.arange(n, dtype=np.int64)
        f(vals, idx, False, np.empty(max(1, n // 2), dtype=np.int64))
        np.testing.assert_array_equal(idx, np.argsort(-vals, kind="stable"))
        idx = np.arange(n, dtype=np.int64)
        f(vals, idx)
        np.testing.assert_array_equal(idx, np.argsort(vals, kind="stable"))


def test_placerange_and_type_ref() -> None:
    r = np.empty(5, dtype=np.int64)
    for _, f in iter_function_layers(nbsel.utils.placerange):
        f(r)
        np.testing.assert_array_equal(r, np.arange(5))
        f(r, 3, 2)
        np.testing.assert_array_equal(r, 3 + 2 * np.arange(5))

    assert nbsel.utils.type_ref(np.zeros(2, dtype=np.float32)) is np.float32
    assert nbsel.utils.type_ref(1.0) is float


@pytest.mark.parametrize("small_first", [True, False])
def test_arg_insert_sort_moves_int_indices_over_float_values(small_first: bool) -> None:
    vals = np.array([0.3, -1.2, 2.5, 0.3, -0.7, 1.1, 2.5, 0.0])
    comp = sorti._arg_lessthan if small_first else sorti._arg_greaterthan
    expected = np.argsort(vals if small_first else -vals, kind="stable")

    for _, f in iter_function_layers(sorti.impl_arg_insert_sort):
        idx = np.arange(vals.size, dtype=np.int64)
        f(vals, idx, comp)
        np.testing.assert_array_equal(idx, expected)
        np.testing.assert_array_equal(vals, [0.3, -1.2, 2.5, 0.3, -0.7, 1.1, 2.5, 0.0])
