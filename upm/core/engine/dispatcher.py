"""
Dispatcher — runs translated Commands as child processes.

This is the SINGLE PLACE where backend processes are spawned. Each
Command becomes one ``subprocess.Popen`` with an explicit argument
vector (never a shell), its own captured stdout/stderr and its own
Result. Backend misfortune never raises: a non-zero exit, a program
that vanished since probing, or a timeout all become Results.

Commands of one ResultSet may run concurrently on a thread pool.
Results are always reported in the order the Commands were given,
regardless of completion order.

Cancellation (Ctrl-C in the waiting thread, or a caller-supplied
event) terminates every running child, prevents the rest from
starting, and abandons the whole set: a cancelled ResultSet has no
results.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait

from upm.core.engine.privilege import DEFAULT_ESCALATION, elevate
from upm.core.models.command import Command, Result, ResultSet

logger = logging.getLogger(__name__)

# How often the waiting thread checks for cancellation
_POLL_INTERVAL = 0.1

# Seconds a terminated child gets before it is killed
_TERMINATE_GRACE = 5.0


class _Execution:
    """Bookkeeping shared by the workers of one ``execute`` call."""

    def __init__(self, cancel_event: threading.Event | None):
        self.cancel = cancel_event or threading.Event()
        self.lock = threading.Lock()
        self.running: dict[int, subprocess.Popen[str]] = {}


class Dispatcher:
    """Executes Commands and aggregates their Results.

    Args:
        parallel: Run the Commands of one set concurrently.
        max_workers: Upper bound on concurrent children (default: one
            per Command).
        escalation: Prefix for privileged Commands (e.g. ``["sudo"]``).
        timeout: Per-command time budget in seconds, None = unlimited.
    """

    def __init__(
        self,
        parallel: bool = True,
        max_workers: int | None = None,
        escalation: Sequence[str] = DEFAULT_ESCALATION,
        timeout: float | None = None,
    ):
        self._parallel = parallel
        self._max_workers = max_workers
        self._escalation = tuple(escalation)
        self._timeout = timeout

    def execute(
        self,
        commands: Iterable[Command],
        cancel_event: threading.Event | None = None,
    ) -> ResultSet:
        """Run every Command and wait for all of them.

        Args:
            commands: Commands in the order their Results must appear.
            cancel_event: Optional event; setting it abandons the set.

        Returns:
            ResultSet with one Result per Command, or an empty set
            marked ``cancelled``.
        """
        commands = list(commands)
        if not commands:
            return ResultSet()

        action = commands[0].action
        execution = _Execution(cancel_event)
        workers = self._worker_count(len(commands))

        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="upm-dispatch")
        futures: list[Future[Result | None]] = [
            pool.submit(self._run_one, index, command, execution)
            for index, command in enumerate(commands)
        ]

        cancelled = False
        try:
            pending = set(futures)
            while pending:
                if execution.cancel.is_set():
                    cancelled = True
                    break
                _, pending = wait(pending, timeout=_POLL_INTERVAL)
        except KeyboardInterrupt:
            logger.warning("Interrupted — terminating running backends")
            cancelled = True
        finally:
            if cancelled:
                self._terminate_all(execution)
            pool.shutdown(wait=True, cancel_futures=True)

        if cancelled:
            logger.info("%s cancelled; discarding partial results", action)
            return ResultSet(action=action, cancelled=True)

        results = [f.result() for f in futures]
        return ResultSet(action=action, results=tuple(r for r in results if r is not None))

    def _worker_count(self, total: int) -> int:
        if not self._parallel:
            return 1
        if self._max_workers:
            return min(self._max_workers, total)
        return total

    def _run_one(self, index: int, command: Command, execution: _Execution) -> Result | None:
        """Spawn one Command and collect its Result (None if cancelled first)."""
        argv = elevate(command.argv, self._escalation) if command.privilege else list(command.argv)
        start = time.monotonic()

        with execution.lock:
            if execution.cancel.is_set():
                return None
            logger.debug("Executing: %s", " ".join(argv))
            try:
                proc = subprocess.Popen(
                    argv,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                    errors="replace",
                )
            except (OSError, ValueError) as e:
                # ValueError: argv the OS cannot represent, e.g. an embedded NUL
                logger.warning("✗ %s could not start: %s", command.backend, e)
                return Result.launch_failure(
                    backend=command.backend,
                    error=f"Could not start {argv[0]}: {getattr(e, 'strerror', None) or e}",
                    argv=tuple(argv),
                    duration_ms=_elapsed_ms(start),
                )
            execution.running[index] = proc

        try:
            stdout, stderr = proc.communicate(timeout=self._timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            stdout, stderr = proc.communicate()
            assert self._timeout is not None
            logger.warning("✗ %s timed out after %ss", command.backend, self._timeout)
            return Result.timeout(
                backend=command.backend,
                seconds=self._timeout,
                stdout=stdout,
                stderr=stderr,
                argv=tuple(argv),
                duration_ms=_elapsed_ms(start),
            )
        finally:
            with execution.lock:
                execution.running.pop(index, None)

        result = Result.completed(
            backend=command.backend,
            exit_code=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            argv=tuple(argv),
            duration_ms=_elapsed_ms(start),
        )
        marker = "✓" if result.ok else "✗"
        logger.info(
            "%s %s:%s → exit %s (%dms)",
            marker, command.backend, command.action, proc.returncode, result.duration_ms,
        )
        return result

    @staticmethod
    def _terminate_all(execution: _Execution) -> None:
        """Stop every running child; nothing new may start afterwards."""
        with execution.lock:
            execution.cancel.set()
            procs = list(execution.running.values())

        for proc in procs:
            if proc.poll() is None:
                proc.terminate()

        deadline = time.monotonic() + _TERMINATE_GRACE
        for proc in procs:
            try:
                proc.wait(timeout=max(deadline - time.monotonic(), 0))
            except subprocess.TimeoutExpired:
                proc.kill()

        if procs:
            logger.info("Terminated %d running backend processes", len(procs))


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
