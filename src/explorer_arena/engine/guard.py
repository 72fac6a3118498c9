"""Wall-clock guarded execution of agent calls.

Each agent call runs on its own daemon thread and reports back through a
single-use queue. When the deadline passes the control thread stops reading
that queue, so a late result is never observed. Anything the agent prints is
routed to a buffer owned by the worker thread; writes from other threads reach
the real console unchanged.

The routing proxy replaces sys.stdout and sys.stderr for the whole process
while any capture is active. An abandoned worker keeps its capture open, so
the proxy stays installed until that thread finishes.
"""

from __future__ import annotations

import io
import queue
import sys
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generator, TextIO


class EngineFault(RuntimeError):
    """Infrastructure failure that is not attributable to the agent."""


class CallStatus(str, Enum):
    OK = "ok"
    TIMEOUT = "Timeout"
    RAISED = "AgentRaised"


@dataclass(frozen=True)
class CallReport:
    name: str
    status: CallStatus
    value: Any = None
    cause: str | None = None
    output: str = ""
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is CallStatus.OK


class _ThreadRoutedStream(io.TextIOBase):
    """Stream proxy writing to the calling thread's sink when it has one."""

    def __init__(self, fallback: TextIO) -> None:
        self._fallback = fallback

    @property
    def fallback(self) -> TextIO:
        return self._fallback

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        sink = _sinks.get(threading.get_ident())
        if sink is not None:
            return sink.write(text)
        return self._fallback.write(text)

    def flush(self) -> None:
        if threading.get_ident() not in _sinks:
            self._fallback.flush()

    @property
    def encoding(self) -> str:  # type: ignore[override]
        return getattr(self._fallback, "encoding", "utf-8")


_capture_lock = threading.Lock()
_sinks: dict[int, io.StringIO] = {}


@contextmanager
def captured_output() -> Generator[io.StringIO, None, None]:
    """Capture stdout/stderr written by the current thread only."""
    sink = io.StringIO()
    ident = threading.get_ident()
    with _capture_lock:
        if not isinstance(sys.stdout, _ThreadRoutedStream):
            sys.stdout = _ThreadRoutedStream(sys.stdout)
        if not isinstance(sys.stderr, _ThreadRoutedStream):
            sys.stderr = _ThreadRoutedStream(sys.stderr)
        _sinks[ident] = sink
    try:
        yield sink
    finally:
        with _capture_lock:
            _sinks.pop(ident, None)
            if not _sinks:
                while isinstance(sys.stdout, _ThreadRoutedStream):
                    sys.stdout = sys.stdout.fallback
                while isinstance(sys.stderr, _ThreadRoutedStream):
                    sys.stderr = sys.stderr.fallback


class TimeoutGuard:
    def __init__(self, timeout_ms: int = 2000) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be > 0")
        self.timeout_ms = timeout_ms

    def call(self, name: str, fn: Callable[..., Any], *args: Any) -> CallReport:
        """Run ``fn(*args)`` on an isolated worker and wait up to the deadline."""
        channel: queue.Queue[tuple[CallStatus, Any, str | None, str]] = queue.Queue(maxsize=1)

        def worker() -> None:
            with captured_output() as sink:
                try:
                    value = fn(*args)
                except BaseException as exc:  # agent code may even call sys.exit()
                    status, value, cause = CallStatus.RAISED, None, f"{type(exc).__name__}: {exc}"
                else:
                    status, cause = CallStatus.OK, None
            channel.put((status, value, cause, sink.getvalue()))

        thread = threading.Thread(target=worker, name=f"agent-{name}", daemon=True)
        start = time.perf_counter()
        try:
            thread.start()
        except RuntimeError as exc:
            raise EngineFault(f"cannot dispatch agent call {name}: {exc}") from exc

        try:
            status, value, cause, output = channel.get(timeout=self.timeout_ms / 1000)
        except queue.Empty:
            return CallReport(
                name=name,
                status=CallStatus.TIMEOUT,
                cause=f"{name} did not return within {self.timeout_ms} ms",
                elapsed_ms=(time.perf_counter() - start) * 1000,
            )
        return CallReport(
            name=name,
            status=status,
            value=value,
            cause=cause,
            output=output,
            elapsed_ms=(time.perf_counter() - start) * 1000,
        )
