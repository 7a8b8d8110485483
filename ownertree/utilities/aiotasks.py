"""
Starting, waiting and stopping of the concurrent asyncio tasks.

The concurrent requests (the discovery of API groups, the listing of resources)
are never left running in the background: whatever happens to the waiting
side, the tasks are cancelled and awaited before the results are returned.
"""
import asyncio
from typing import Any, Collection, Coroutine, Iterable, Optional, Set, Tuple

from ownertree.helpers import typedefs

Task = typedefs.Task


def create_task(
        coro: Coroutine[Any, Any, Any],
        *,
        name: Optional[str] = None,
) -> Task:
    return asyncio.create_task(coro, name=name)


async def wait(
        tasks: Collection[Task],
        *,
        timeout: Optional[float] = None,
        return_when: Any = asyncio.ALL_COMPLETED,
) -> Tuple[Set[Task], Set[Task]]:
    """ Same as :func:`asyncio.wait`, but an empty collection is not an error. """
    if not tasks:
        return set(), set()
    done, pending = await asyncio.wait(tasks, timeout=timeout, return_when=return_when)
    return done, pending


async def stop(
        tasks: Collection[Task],
        *,
        title: str,
        logger: Optional[typedefs.Logger] = None,
) -> Set[Task]:
    """
    Cancel the unfinished tasks and wait until they exit.

    There is no timeout: the tasks are expected to exit soon after cancellation.
    If the stopping is cancelled itself, the tasks stay cancelled but not awaited.
    Returns the tasks that were cancelled by this call.
    """
    _retrieve_errors(task for task in tasks if task.done())
    pending = {task for task in tasks if not task.done()}
    for task in pending:
        task.cancel()

    try:
        stopped, _ = await wait(pending)
    except asyncio.CancelledError:
        if logger is not None:
            remaining = [task for task in pending if not task.done()]
            logger.debug(f"{title.capitalize()} is cancelled while stopping; "
                         f"{len(remaining)} tasks are left: {remaining!r}")
        raise

    _retrieve_errors(stopped)
    if logger is not None and stopped:
        logger.debug(f"{title.capitalize()} is stopped: {len(stopped)} tasks cancelled.")
    return stopped


def _retrieve_errors(tasks: Iterable[Task]) -> None:
    # Mark the errors as retrieved, so that asyncio does not log them at garbage collection.
    for task in tasks:
        if not task.cancelled():
            task.exception()
