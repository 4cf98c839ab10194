import asyncio
import enum
import time
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class CircuitState(str, enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    pass


class CircuitBreaker:
    """
    Fail fast around an unreliable async dependency.

    After `failure_threshold` consecutive failures (errors or timeouts) the
    breaker opens and rejects calls without running them. Once
    `reset_timeout` seconds have passed since the last failure, a single
    trial call is let through; its outcome closes or re-opens the circuit.
    State is in-memory and local to this instance.
    """

    def __init__(
        self,
        failure_threshold: int = 3,
        call_timeout: float = 30.0,
        reset_timeout: float = 120.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self.failure_threshold = failure_threshold
        self.call_timeout = call_timeout
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._last_failure_time = 0.0
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failures(self) -> int:
        return self._failures

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self._state == CircuitState.OPEN:
            if self._clock() - self._last_failure_time >= self.reset_timeout:
                self._state = CircuitState.HALF_OPEN
            else:
                raise CircuitOpenError("Circuit breaker is OPEN")

        if self._state == CircuitState.HALF_OPEN:
            if self._trial_in_flight:
                raise CircuitOpenError("Circuit breaker is HALF_OPEN, trial call already in flight")
            self._trial_in_flight = True

        try:
            result = await asyncio.wait_for(operation(), timeout=self.call_timeout)
        except asyncio.TimeoutError:
            self._record_failure()
            raise TimeoutError(f"Operation timeout after {self.call_timeout}s")
        except Exception:
            self._record_failure()
            raise
        finally:
            self._trial_in_flight = False

        self._reset()
        return result

    def _record_failure(self) -> None:
        self._failures += 1
        self._last_failure_time = self._clock()
        if self._state == CircuitState.HALF_OPEN or self._failures >= self.failure_threshold:
            self._state = CircuitState.OPEN

    def _reset(self) -> None:
        self._failures = 0
        self._state = CircuitState.CLOSED
