"""
Time-related asyncio tools: sleeping between the attempts of API calls.

A separate module, so that the tests can replace the sleeps with no-ops
and measure the intended delays without actually waiting for them.
"""
import asyncio
from typing import Optional


async def sleep(delay: Optional[float]) -> None:
    """
    Sleep for the specified delay, or skip sleeping if there is nothing to wait.

    The sleep is not interruptable by anything except the task's cancellation.
    """
    if delay is not None and delay > 0:
        await asyncio.sleep(delay)
