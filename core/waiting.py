"""
Condition polling for a UI that re-renders asynchronously.

Every mutation of the entry form is expressed as "wait until the predicate
holds, then act". The polling loop itself is delegated to tenacity: the
predicate is retried at a fixed interval while it returns a falsy value or
raises a transient lookup error, and the whole wait stops once the deadline
has elapsed.
"""

import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, Union

from playwright.async_api import Error as PlaywrightError
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    retry_if_result,
    stop_after_delay,
    wait_fixed,
)

from core.errors import LocatorTimeout

logger = logging.getLogger(__name__)

Predicate = Callable[[], Union[Any, Awaitable[Any]]]

# Raised while an element is detached, re-attached or not rendered yet.
# IndexError covers ordinal access into a shrinking match list.
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (PlaywrightError, IndexError)


def _not_satisfied(value: Any) -> bool:
    return not value


async def _evaluate(predicate: Predicate) -> Any:
    result = predicate()
    if inspect.isawaitable(result):
        result = await result
    return result


async def await_condition(
    predicate: Predicate,
    timeout_ms: int,
    poll_interval_ms: int,
    description: str,
    transient_errors: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS,
) -> Any:
    """
    Poll ``predicate`` until it returns a truthy value or ``timeout_ms`` elapses.

    Args:
        predicate: Zero-argument callable, sync or async. A truthy return value
            ends the wait and is handed back to the caller.
        timeout_ms: Deadline measured from the first invocation.
        poll_interval_ms: Pause between two invocations.
        description: Human readable condition, used as the timeout message.
        transient_errors: Exceptions that count as "not yet true". Anything
            else propagates immediately.

    Returns:
        The first truthy value produced by the predicate.

    Raises:
        LocatorTimeout: If the predicate never held before the deadline.
    """
    retrying = AsyncRetrying(
        stop=stop_after_delay(timeout_ms / 1000.0),
        wait=wait_fixed(poll_interval_ms / 1000.0),
        retry=retry_if_result(_not_satisfied) | retry_if_exception_type(transient_errors),
        reraise=False,
    )
    try:
        return await retrying(_evaluate, predicate)
    except RetryError as exc:
        last_error = exc.last_attempt.exception()
        if last_error is not None:
            logger.debug(f"Last transient error while waiting for '{description}': {last_error}")
        raise LocatorTimeout(description, timeout_ms) from last_error


class WaitEngine:
    """
    Binds the polling cadence and the metrics sink once, so that call sites
    only state the condition, its deadline and its description.
    """

    def __init__(self, poll_interval_ms: int, metrics_collector=None):
        self.poll_interval_ms = poll_interval_ms
        self.metrics_collector = metrics_collector

    async def until(
        self,
        predicate: Predicate,
        timeout_ms: int,
        description: str,
        label: Optional[str] = None,
    ) -> Any:
        """Waits for ``predicate``; ``label`` groups the outcome in metrics."""
        started = time.monotonic()
        status = "success"
        try:
            return await await_condition(
                predicate,
                timeout_ms=timeout_ms,
                poll_interval_ms=self.poll_interval_ms,
                description=description,
            )
        except LocatorTimeout:
            status = "timeout"
            raise
        except Exception:
            status = "error"
            raise
        finally:
            if self.metrics_collector is not None:
                self.metrics_collector.record_wait(
                    label or description,
                    status,
                    (time.monotonic() - started) * 1000,
                )
