"""Shared pytest fixtures for the ioengine test suite.

Provides:
- sequential: single-threaded ExecutionContext (deterministic, no pool)
- threaded: two-worker ExecutionContext, shut down at teardown
- fresh_pool: process-wide pool reset to UNINITIALIZED around a test
- scenario_table: the 3-sector (T, p) reference table
"""

import numpy as np
import pytest

from ioengine.engine.execution import ExecutionContext, reset_pool


@pytest.fixture()
def sequential() -> ExecutionContext:
    return ExecutionContext.sequential()


@pytest.fixture()
def threaded():
    ctx = ExecutionContext.threaded(2)
    yield ctx
    ctx.shutdown()


@pytest.fixture()
def fresh_pool():
    """Reset the shared pool before and after the test."""
    reset_pool()
    yield
    reset_pool()


@pytest.fixture()
def scenario_table() -> tuple[np.ndarray, np.ndarray]:
    """T[i, j] = flow from sector i to sector j; p = total production."""
    T = np.array([
        [1.0, 4.0, 7.0],
        [2.0, 5.0, 8.0],
        [3.0, 6.0, 9.0],
    ])
    p = np.array([100.0, 200.0, 300.0])
    return T, p
