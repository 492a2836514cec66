from __future__ import annotations

import pytest

from tests.numba_layers import NUMBA_TEST_CACHE, NUMBA_TEST_LAYER, reset_nbsel_numba_cache


def pytest_report_header() -> str:
    """Show active numba testing mode in pytest output."""
    return f"NUMBA_TEST_LAYER={NUMBA_TEST_LAYER}, NUMBA_TEST_CACHE={'true' if NUMBA_TEST_CACHE else 'false'}"


@pytest.fixture(scope="session", autouse=True)
def maybe_reset_numba_cache() -> None:
    """Clear the nbsel dispatcher caches once per session when NUMBA_TEST_CACHE=true, so every kernel and the solver
    loop are recompiled from source for the jit layer."""
    if NUMBA_TEST_CACHE:
        reset_nbsel_numba_cache()
