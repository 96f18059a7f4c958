"""Trailing debounce for (possibly asynchronous) validators.

Example:
    ```python
    check_email = create_debounced_validator(orchestrator_email_check, delay_ms=250)

    # Three keystrokes in quick succession
    check_email("j")
    check_email("jo")
    result = await check_email("john@example.com")
    # orchestrator_email_check ran once, with "john@example.com",
    # and every caller received that single result
    ```
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from formknobs_common import ConfigurationError

from .settings import DEFAULT_DEBOUNCE_DELAY_MS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DebounceState(Enum):
    """Whether a burst of calls is waiting for its trailing invocation."""

    IDLE = "idle"
    PENDING = "pending"


class DebouncedValidator(Generic[T]):
    """Coalesces rapid calls into one trailing invocation.

    The wrapper is either ``IDLE`` or ``PENDING`` with a timer, the latest
    call's arguments and the futures of every call in the burst. Each call
    restarts the timer. When it fires, the wrapped validator runs once with
    the latest arguments and all waiting futures receive that outcome (or
    its exception). The wrapper is idle again as soon as the timer fires, so
    a call arriving while the validator is still running starts a new burst.

    Calling the wrapper requires a running event loop and returns a future
    immediately; callers that do not need the result may leave it unawaited.
    """

    def __init__(
        self,
        validator_fn: Callable[..., Union[T, Awaitable[T]]],
        delay_ms: float = DEFAULT_DEBOUNCE_DELAY_MS,
    ) -> None:
        """Initialize the debounced wrapper.

        Args:
            validator_fn: Sync or async callable to debounce
            delay_ms: Quiet period in milliseconds before the trailing call

        Raises:
            ConfigurationError: If the validator is not callable or the delay
                is negative
        """
        if not callable(validator_fn):
            raise ConfigurationError("Debounced validator must be callable")
        if delay_ms < 0:
            raise ConfigurationError(
                f"delay_ms cannot be negative: {delay_ms}", context={"delay_ms": delay_ms}
            )
        self._validator = validator_fn
        self._delay_ms = delay_ms
        self._timer: asyncio.TimerHandle | None = None
        self._latest_args: tuple[Any, ...] = ()
        self._latest_kwargs: dict[str, Any] = {}
        self._waiters: list[asyncio.Future[T]] = []
        # Strong references keep running invocations from being garbage collected
        self._running: set[asyncio.Task[None]] = set()

    @property
    def delay_ms(self) -> float:
        return self._delay_ms

    @property
    def state(self) -> DebounceState:
        return DebounceState.PENDING if self._timer is not None else DebounceState.IDLE

    @property
    def pending_calls(self) -> int:
        """Number of calls waiting on the current burst."""
        return len(self._waiters)

    def __call__(self, *args: Any, **kwargs: Any) -> asyncio.Future[T]:
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()

        self._latest_args = args
        self._latest_kwargs = kwargs
        waiter: asyncio.Future[T] = loop.create_future()
        self._waiters.append(waiter)
        self._timer = loop.call_later(self._delay_ms / 1000, self._fire)
        return waiter

    def _fire(self) -> None:
        args, kwargs, waiters = self._latest_args, self._latest_kwargs, self._waiters
        self._timer = None
        self._latest_args, self._latest_kwargs, self._waiters = (), {}, []

        logger.debug(f"Debounce fired after {self._delay_ms}ms for {len(waiters)} coalesced calls")
        task = asyncio.ensure_future(self._invoke(args, kwargs, waiters))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _invoke(
        self,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        waiters: list[asyncio.Future[T]],
    ) -> None:
        try:
            outcome = self._validator(*args, **kwargs)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except asyncio.CancelledError:
            for waiter in waiters:
                waiter.cancel()
            raise
        except Exception as e:
            for waiter in waiters:
                if not waiter.done():
                    waiter.set_exception(e)
            return

        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(outcome)  # type: ignore[arg-type]


def create_debounced_validator(
    validator_fn: Callable[..., Union[T, Awaitable[T]]],
    delay_ms: float = DEFAULT_DEBOUNCE_DELAY_MS,
) -> DebouncedValidator[T]:
    """Wrap ``validator_fn`` so bursts of calls collapse into one trailing call.

    Args:
        validator_fn: Sync or async callable to debounce
        delay_ms: Quiet period in milliseconds

    Returns:
        Callable wrapper returning an awaitable future per call
    """
    return DebouncedValidator(validator_fn, delay_ms)
