"""Isolated background units of work with a cancellable handle.

``spawn`` starts a coroutine as its own asyncio task and returns a
``TaskHandle``. The handle settles exactly once into a ``TaskResult``: ok,
failed, cancelled or timeout. Nothing is shared with the caller except that
result, so a unit of work should open its own session.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict

from cardledger.config import settings

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"


class TaskResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    status: TaskStatus
    value: Any = None
    error: str | None = None


class TaskHandle:
    def __init__(self, name: str, task: asyncio.Task) -> None:
        self.name = name
        self._task = task

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        self._task.cancel()

    async def result(self) -> TaskResult:
        """Wait for the unit of work to settle. Never raises for task failures."""
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                return TaskResult(name=self.name, status=TaskStatus.CANCELLED)
            raise


async def _settle(name: str, work: Awaitable[Any], timeout: float | None) -> TaskResult:
    try:
        value = await asyncio.wait_for(work, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Task %s timed out after %ss", name, timeout)
        return TaskResult(name=name, status=TaskStatus.TIMEOUT, error=f"timed out after {timeout}s")
    except asyncio.CancelledError:
        logger.info("Task %s cancelled", name)
        raise
    except Exception as e:
        logger.exception("Task %s failed", name)
        return TaskResult(name=name, status=TaskStatus.FAILED, error=str(e))
    return TaskResult(name=name, status=TaskStatus.OK, value=value)


def spawn(
    name: str,
    work: Callable[[], Awaitable[Any]],
    timeout: float | None = None,
) -> TaskHandle:
    """Start ``work()`` in the background. ``timeout`` defaults to settings.task_timeout_seconds."""
    if timeout is None:
        timeout = settings.task_timeout_seconds
    task = asyncio.create_task(_settle(name, work(), timeout), name=name)
    return TaskHandle(name, task)
