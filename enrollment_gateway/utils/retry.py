"""Bounded retry with exponential backoff"""

import logging
import time
from typing import Callable, Tuple, Type, TypeVar

T = TypeVar("T")


def call_with_retries(
    operation: Callable[[], T],
    retry_on: Tuple[Type[BaseException], ...],
    max_attempts: int,
    backoff_base: float,
    description: str,
    on_retry: Callable[[BaseException], None] | None = None,
) -> T:
    """
    Run an idempotent operation, retrying on the given exceptions.

    Backoff doubles after each failure: base, 2*base, 4*base...
    The last exception is re-raised once attempts are exhausted.
    """
    attempt = 0
    while True:
        try:
            return operation()
        except retry_on as e:
            attempt += 1
            if attempt >= max_attempts:
                raise

            if on_retry is not None:
                on_retry(e)

            backoff = backoff_base * (2 ** (attempt - 1))
            logging.warning(f"{description} failed (attempt {attempt}/{max_attempts}), retrying in {backoff}s: {e}")
            time.sleep(backoff)
