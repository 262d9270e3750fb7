"""
Async/sync bridge for Flask views.

Views are synchronous; wizard stages run on asyncio. Each bridged call runs
on a fresh event loop, so a stage started inside it must also be awaited
inside it.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

log = logging.getLogger(__name__)

T = TypeVar('T')


def run_async(coro: Awaitable[T]) -> T:
    """
    Run a coroutine from synchronous code using ``asyncio.run()``.

    Raises:
        Exception: Any exception raised by the coroutine
    """
    try:
        return asyncio.run(coro)
    except Exception as e:
        log.error(f"Async bridge error: {e}")
        raise

