"""
Retry handler with exponential backoff, modelled as a small state machine.

    idle -> in_flight -> delivered
                      -> backoff -> in_flight
                      -> failed
"""

import logging
import random
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from timelog.exceptions import DeliveryError, TimeLogError

logger = logging.getLogger(__name__)


class DeliveryPhase(str, Enum):
    """Phases of one retried operation."""

    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    BACKOFF = "backoff"
    DELIVERED = "delivered"
    FAILED = "failed"


ALLOWED_TRANSITIONS: Dict[DeliveryPhase, set] = {
    DeliveryPhase.IDLE: {DeliveryPhase.IN_FLIGHT},
    DeliveryPhase.IN_FLIGHT: {
        DeliveryPhase.DELIVERED,
        DeliveryPhase.BACKOFF,
        DeliveryPhase.FAILED,
    },
    DeliveryPhase.BACKOFF: {DeliveryPhase.IN_FLIGHT},
    DeliveryPhase.DELIVERED: set(),
    DeliveryPhase.FAILED: set(),
}


class InvalidTransitionError(TimeLogError):
    """Raised when a retry run attempts a transition the machine forbids."""

    pass


@dataclass
class RetryRun:
    """State of a single retried operation.

    Attributes:
        phase: Current phase
        attempts: Number of attempts started so far
        history: Every phase entered, starting with idle
        delays: Backoff delays slept between attempts
        last_error: Exception raised by the most recent attempt
        value: Return value of the successful attempt
    """

    phase: DeliveryPhase = DeliveryPhase.IDLE
    attempts: int = 0
    history: List[DeliveryPhase] = field(default_factory=lambda: [DeliveryPhase.IDLE])
    delays: List[float] = field(default_factory=list)
    last_error: Optional[BaseException] = None
    value: Any = None

    def transition(self, target: DeliveryPhase) -> None:
        """Move to another phase.

        Raises:
            InvalidTransitionError: If the move is not allowed
        """
        if target not in ALLOWED_TRANSITIONS[self.phase]:
            raise InvalidTransitionError(
                f"Cannot move from {self.phase.value} to {target.value}"
            )
        if target == DeliveryPhase.IN_FLIGHT:
            self.attempts += 1
        self.phase = target
        self.history.append(target)

    @property
    def succeeded(self) -> bool:
        return self.phase == DeliveryPhase.DELIVERED

    @property
    def finished(self) -> bool:
        return self.phase in (DeliveryPhase.DELIVERED, DeliveryPhase.FAILED)


def _default_retry_condition(exception: BaseException) -> bool:
    """Retry on transport failures and rejected responses."""
    return isinstance(exception, DeliveryError)


class RetryHandler:
    """
    Runs an operation with bounded retries and capped exponential backoff.

    Unlike a plain try/except loop every run is tracked as a RetryRun so
    the sequence of phases and delays can be inspected and tested.
    Failures are reported through the returned run, never raised.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2,
        jitter_factor: float = 0.1,
        retry_condition: Optional[Callable[[BaseException], bool]] = None,
    ):
        """
        Initialize retry handler.

        Args:
            max_attempts: Total number of attempts, including the first
            base_delay: Delay before the first retry (seconds)
            max_delay: Upper bound for any single delay (seconds)
            exponential_base: Growth factor between consecutive delays
            jitter_factor: Random jitter as a fraction of the delay (0.0 to 1.0)
            retry_condition: Decides whether an exception is worth retrying
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter_factor = jitter_factor
        self.retry_condition = retry_condition or _default_retry_condition

        # Statistics
        self._total_calls = 0
        self._total_retries = 0
        self._total_failures = 0
        self._lock = threading.Lock()

    def calculate_delay(self, retry_number: int) -> float:
        """
        Calculate the backoff delay before a retry.

        Args:
            retry_number: 0 for the first retry, 1 for the second, ...

        Returns:
            Delay in seconds, never above max_delay
        """
        delay = min(self.base_delay * (self.exponential_base**retry_number), self.max_delay)

        if self.jitter_factor:
            jitter = random.uniform(-self.jitter_factor, self.jitter_factor) * delay
            delay = max(0.0, delay + jitter)

        return min(delay, self.max_delay)

    def execute_with_retry(self, func: Callable, *args, **kwargs) -> RetryRun:
        """
        Execute a function, retrying failures allowed by the retry condition.

        Args:
            func: Function to execute
            *args: Positional arguments for function
            **kwargs: Keyword arguments for function

        Returns:
            The finished RetryRun (phase delivered or failed)
        """
        with self._lock:
            self._total_calls += 1

        func_name = getattr(func, "__name__", repr(func))
        run = RetryRun()

        while True:
            run.transition(DeliveryPhase.IN_FLIGHT)
            try:
                run.value = func(*args, **kwargs)
            except Exception as e:
                run.last_error = e

                if not self.retry_condition(e):
                    logger.error(
                        f"{func_name} failed with non-retryable {type(e).__name__}: {e}",
                        exc_info=True,
                    )
                    self._finish_failed(run)
                    return run

                if run.attempts >= self.max_attempts:
                    logger.warning(
                        f"{func_name} failed after {run.attempts} attempt(s). "
                        f"Last error: {type(e).__name__}: {e}"
                    )
                    self._finish_failed(run)
                    return run

                delay = self.calculate_delay(run.attempts - 1)
                run.transition(DeliveryPhase.BACKOFF)
                run.delays.append(delay)
                logger.debug(
                    f"Retrying {func_name} in {delay:.2f}s "
                    f"(attempt {run.attempts + 1}/{self.max_attempts}). "
                    f"Error: {type(e).__name__}: {e}"
                )
                time.sleep(delay)
                continue

            run.transition(DeliveryPhase.DELIVERED)
            if run.attempts > 1:
                logger.info(f"{func_name} succeeded after {run.attempts - 1} retries")
            with self._lock:
                self._total_retries += run.attempts - 1
            return run

    def _finish_failed(self, run: RetryRun) -> None:
        run.transition(DeliveryPhase.FAILED)
        with self._lock:
            self._total_retries += run.attempts - 1
            self._total_failures += 1

    def get_retry_statistics(self) -> dict:
        """
        Get retry statistics.

        Returns:
            Dictionary with call, retry and failure counts
        """
        with self._lock:
            return {
                "total_calls": self._total_calls,
                "total_retries": self._total_retries,
                "total_failures": self._total_failures,
            }

    def reset_statistics(self):
        """Reset retry statistics."""
        with self._lock:
            self._total_calls = 0
            self._total_retries = 0
            self._total_failures = 0
