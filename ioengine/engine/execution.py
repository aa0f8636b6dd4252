"""Execution context and the process-wide worker pool.

Analyses fan independent sub-problems (sectors, rows of perturbations) out
to an ExecutionContext and join before returning. The shared pool follows an
explicit state machine, UNINITIALIZED -> CONFIGURED, and is configured at
most once per process. Reconfiguration is a non-fatal no-op that reports
``PoolStatus.ALREADY_CONFIGURED`` and logs a warning.

NumPy and SciPy release the GIL inside LAPACK calls, so a thread pool gives
real parallelism for the per-task factorisations.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from enum import StrEnum
from typing import TypeVar

from ioengine.config.settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class PoolState(StrEnum):
    UNINITIALIZED = "UNINITIALIZED"
    CONFIGURED = "CONFIGURED"


class PoolStatus(StrEnum):
    """Outcome of a configure_pool() call."""

    CONFIGURED = "CONFIGURED"
    ALREADY_CONFIGURED = "ALREADY_CONFIGURED"


class ExecutionContext:
    """Fan-out/join helper over a thread pool.

    With ``max_workers == 1`` (or no executor) work runs inline on the
    calling thread, which keeps tests deterministic and cheap.
    """

    def __init__(self, max_workers: int = 1, executor: Executor | None = None) -> None:
        if max_workers < 1:
            msg = "max_workers must be positive."
            raise ValueError(msg)
        self._max_workers = max_workers
        self._executor = executor

    @classmethod
    def sequential(cls) -> ExecutionContext:
        return cls(max_workers=1)

    @classmethod
    def threaded(cls, max_workers: int) -> ExecutionContext:
        if max_workers == 1:
            return cls.sequential()
        executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="ioengine",
        )
        return cls(max_workers=max_workers, executor=executor)

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def is_parallel(self) -> bool:
        return self._executor is not None and self._max_workers > 1

    def map(self, fn: Callable[[T], R], items: Iterable[T]) -> list[R]:
        """Apply fn to every item and return results in input order.

        Blocks until every task has finished; the first task exception is
        re-raised to the caller.
        """
        items = list(items)
        if not self.is_parallel or len(items) <= 1:
            return [fn(item) for item in items]
        return list(self._executor.map(fn, items))

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


class _WorkerPool:
    """Process-wide pool holder guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = PoolState.UNINITIALIZED
        self._context: ExecutionContext | None = None

    @property
    def state(self) -> PoolState:
        return self._state

    def configure(self, max_threads: int) -> PoolStatus:
        with self._lock:
            if self._state == PoolState.CONFIGURED:
                logger.warning(
                    "Worker pool already configured with %d threads; "
                    "ignoring request for %d.",
                    self._context.max_workers,
                    max_threads,
                )
                return PoolStatus.ALREADY_CONFIGURED
            if max_threads < 0:
                msg = "max_threads must be non-negative (0 = all CPUs)."
                raise ValueError(msg)
            self._context = ExecutionContext.threaded(_resolve_threads(max_threads))
            self._state = PoolState.CONFIGURED
            logger.info("Worker pool configured with %d threads.", self._context.max_workers)
            return PoolStatus.CONFIGURED

    def context(self) -> ExecutionContext:
        with self._lock:
            if self._state == PoolState.UNINITIALIZED:
                threads = _resolve_threads(get_settings().MAX_THREADS)
                self._context = ExecutionContext.threaded(threads)
                self._state = PoolState.CONFIGURED
                logger.debug("Worker pool configured on first use with %d threads.", threads)
            return self._context

    def reset(self) -> None:
        with self._lock:
            if self._context is not None:
                self._context.shutdown()
            self._context = None
            self._state = PoolState.UNINITIALIZED


def _resolve_threads(max_threads: int) -> int:
    if max_threads == 0:
        return os.cpu_count() or 1
    return max_threads


_POOL = _WorkerPool()


def configure_pool(max_threads: int = 0) -> PoolStatus:
    """Configure the shared pool. 0 = all CPUs, 1 = sequential.

    Only the first call takes effect; later calls return
    ``PoolStatus.ALREADY_CONFIGURED`` and leave the live pool serving,
    whatever argument they pass. A negative value on the first call raises
    ValueError.
    """
    return _POOL.configure(max_threads)


def pool_state() -> PoolState:
    return _POOL.state


def get_execution_context() -> ExecutionContext:
    """Return the shared context, configuring it from settings on first use."""
    return _POOL.context()


def reset_pool() -> None:
    """Shut the shared pool down and return to UNINITIALIZED."""
    _POOL.reset()


def resolve_context(context: ExecutionContext | None) -> ExecutionContext:
    return context if context is not None else get_execution_context()


def ordered_sum(partials: Sequence[T], start: T) -> T:
    """Sum partial results in sequence order (fixed floating-point order)."""
    total = start
    for part in partials:
        total = total + part
    return total
