from __future__ import annotations

import numpy as np
import pytest

import nbsel
from nbsel import rng
from nbsel.memory import check_cache
from tests.numba_layers import iter_function_layers

ALL_LOSSES = [nbsel.OLS(), nbsel.L1SVR(0.1), nbsel.L2SVR(0.1), nbsel.LogReg(), nbsel.L1SVM(), nbsel.L2SVM()]


def test_loss_and_sparsity_variants_are_values() -> None:
    assert nbsel.OLS() == nbsel.OLS()
    assert nbsel.L1SVR(0.1) == nbsel.L1SVR(0.1)
    assert nbsel.L1SVR(0.1) != nbsel.L2SVR(0.1)
    assert nbsel.L1SVR() != nbsel.L1SVR(0.5)
    assert len({nbsel.Constraint(3), nbsel.Constraint(3), nbsel.Penalty(0.5)}) == 2
    assert repr(nbsel.Constraint(3)) == "Constraint(k=3)"
    assert repr(nbsel.LogReg()) == "LogReg()"

    with pytest.raises(AttributeError):
        nbsel.Constraint(3).k = 4
    with pytest.raises(AttributeError):
        nbsel.L2SVR(0.1).eps = 0.0

    codes = {loss.code for loss in ALL_LOSSES}
    assert len(codes) == len(ALL_LOSSES)
    assert [loss.classification for loss in ALL_LOSSES] == [False] * 3 + [True] * 3
    assert all(isinstance(loss, nbsel.Regression) for loss in ALL_LOSSES[:3])
    assert all(isinstance(loss, nbsel.Classification) for loss in ALL_LOSSES[3:])


@pytest.mark.parametrize("bad", [0, -2, 2.5, True, "3"])
def test_constraint_rejects_bad_k(bad) -> None:
    with pytest.raises((ValueError, TypeError)):
        nbsel.Constraint(bad)


def test_parameter_validation() -> None:
    with pytest.raises(ValueError):
        nbsel.Penalty(-1.0)
    with pytest.raises(ValueError):
        nbsel.Penalty(float("nan"))
    with pytest.raises(ValueError):
        nbsel.L1SVR(-0.1)
    assert nbsel.Constraint(np.int64(4)).k == 4
    assert nbsel.Constraint(5).max_index_size(3) == 3
    assert nbsel.Constraint(2).max_index_size(9) == 2
    assert nbsel.Penalty(0.2).max_index_size(9) == 9


def test_error_hierarchy() -> None:
    assert issubclass(nbsel.DimensionMismatch, ValueError)
    assert issubclass(nbsel.InvalidLabels, ValueError)
    assert issubclass(nbsel.NumericalDivergence, FloatingPointError)
    for err in (nbsel.DimensionMismatch, nbsel.InvalidLabels, nbsel.NumericalDivergence):
        assert issubclass(err, nbsel.SubsetSelectionError)
    e = nbsel.NumericalDivergence("diverged", 1e-9, 10)
    assert (e.delta, e.restarts, str(e)) == (1e-9, 10, "diverged")


def test_loop_states() -> None:
    assert [s.name for s in nbsel.LoopState] == [
        "RUNNING",
        "RESTARTING",
        "STOPPED_BY_ITERATION_BUDGET",
        "STOPPED_BY_STAGNATION",
    ]
    assert nbsel.LoopState(3) is nbsel.LoopState.STOPPED_BY_STAGNATION


def test_memspec_shapes_and_check() -> None:
    cache = nbsel.subset_memspec(7, 5)
    assert cache.g.shape == (7,) and cache.g.dtype == np.float64
    assert cache.ax.shape == (5,) and cache.ax.dtype == np.float64
    assert cache.perm.shape == (5,) and cache.perm.dtype == np.int64
    assert cache.ws.shape == (2,) and cache.ws.dtype == np.int64
    assert nbsel.subset_memspec(3, 1).ws.shape == (1,)

    assert check_cache(cache, 7, 5)
    assert not check_cache(cache, 8, 5)
    assert not check_cache(cache, 7, 6)
    assert not check_cache(cache._replace(ax=np.empty(5, dtype=np.float32)), 7, 5)


def test_set_seed_reproduces_bernoulli_draws() -> None:
    for _, f in iter_function_layers(rng.place_bernoulli):
        out_a, out_b = np.empty(40, dtype=np.int64), np.empty(40, dtype=np.int64)
        nbsel.set_seed(123)
        ca = f(out_a, 0.3)
        nbsel.set_seed(123)
        cb = f(out_b, 0.3)
        assert ca == cb
        np.testing.assert_array_equal(out_a[:ca], out_b[:cb])
        assert np.all(np.diff(out_a[:ca]) > 0)

        assert f(out_a, 0.0) == 0
        assert f(out_a, 1.0) == 40
        np.testing.assert_array_equal(out_a, np.arange(40))
    nbsel.set_seed(None)


def test_estimator_coef_and_predict() -> None:
    est = nbsel.SparseEstimator(
        nbsel.OLS(), nbsel.Constraint(2), np.array([1, 3]), np.array([2.0, -1.0]), np.zeros(3), 0.5, 10,
        nbsel.LoopState.STOPPED_BY_ITERATION_BUDGET, 1e-3, 0,
    )
    np.testing.assert_array_equal(est.coef(5), [0.0, 2.0, 0.0, -1.0, 0.0])
    X = np.arange(15, dtype=np.float64).reshape(3, 5)
    np.testing.assert_allclose(est.predict(X), X @ est.coef(5) - 0.5)
    with pytest.raises(AttributeError):
        est.b = 1.0
