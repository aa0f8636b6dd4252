"""Tests for the execution context and the shared worker pool."""

import logging
import threading

import pytest

from ioengine.engine.execution import (
    ExecutionContext,
    PoolState,
    PoolStatus,
    configure_pool,
    get_execution_context,
    ordered_sum,
    pool_state,
)


class TestExecutionContext:

    def test_sequential_runs_inline(self) -> None:
        ctx = ExecutionContext.sequential()
        names = ctx.map(lambda _: threading.current_thread().name, range(3))
        assert not ctx.is_parallel
        assert set(names) == {threading.current_thread().name}

    def test_map_preserves_order(self, threaded) -> None:
        assert threaded.map(lambda x: x * x, range(20)) == [x * x for x in range(20)]

    def test_task_exception_propagates(self, threaded) -> None:
        def boom(x: int) -> int:
            if x == 3:
                msg = "task 3 failed"
                raise RuntimeError(msg)
            return x

        with pytest.raises(RuntimeError, match="task 3"):
            threaded.map(boom, range(6))

    def test_threaded_one_is_sequential(self) -> None:
        assert not ExecutionContext.threaded(1).is_parallel

    def test_zero_workers_rejected(self) -> None:
        with pytest.raises(ValueError):
            ExecutionContext(max_workers=0)


@pytest.mark.usefixtures("fresh_pool")
class TestWorkerPool:
    """UNINITIALIZED -> CONFIGURED, configured at most once."""

    def test_starts_uninitialized(self) -> None:
        assert pool_state() == PoolState.UNINITIALIZED

    def test_first_configure(self) -> None:
        assert configure_pool(2) == PoolStatus.CONFIGURED
        assert pool_state() == PoolState.CONFIGURED
        assert get_execution_context().max_workers == 2

    def test_reconfigure_is_reported_not_fatal(self, caplog) -> None:
        configure_pool(2)
        with caplog.at_level(logging.WARNING, logger="ioengine.engine.execution"):
            status = configure_pool(4)
        assert status == PoolStatus.ALREADY_CONFIGURED
        assert "already configured" in caplog.text
        assert get_execution_context().max_workers == 2

    def test_zero_means_all_cpus(self, monkeypatch) -> None:
        monkeypatch.setattr("os.cpu_count", lambda: 3)
        configure_pool(0)
        assert get_execution_context().max_workers == 3

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            configure_pool(-1)
        assert pool_state() == PoolState.UNINITIALIZED

    def test_reconfigure_with_invalid_argument_is_reported(self) -> None:
        configure_pool(2)
        assert configure_pool(-1) == PoolStatus.ALREADY_CONFIGURED
        assert get_execution_context().max_workers == 2

    def test_first_use_reads_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("IOENGINE_MAX_THREADS", "1")
        ctx = get_execution_context()
        assert pool_state() == PoolState.CONFIGURED
        assert ctx.max_workers == 1
        assert configure_pool(4) == PoolStatus.ALREADY_CONFIGURED

    def test_concurrent_configure_succeeds_once(self) -> None:
        results: list[PoolStatus] = []
        lock = threading.Lock()

        def worker() -> None:
            status = configure_pool(2)
            with lock:
                results.append(status)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert results.count(PoolStatus.CONFIGURED) == 1
        assert results.count(PoolStatus.ALREADY_CONFIGURED) == 7


class TestOrderedSum:

    def test_sums_in_order(self) -> None:
        assert ordered_sum([1.0, 2.0, 3.0], 0.0) == 6.0

    def test_empty_returns_start(self) -> None:
        assert ordered_sum([], 5.0) == 5.0
