"""
Listing of all objects of all resources in a namespace -- concurrently.

Every namespaced resource is listed in its own task, all at once (or as many
at once as configured). Every task appends its objects to one shared list
under a lock. The results are only returned if all tasks have succeeded:
partial data would silently under-report the ownership, which is worse
than an explicit failure.

If several tasks fail, the first failure wins in the order of completion.
If several tasks fail within the same wake-up of the waiting, the failure
of the resource that goes first in the given order wins.
As soon as any task fails, all other tasks are cancelled and awaited,
so that no requests are left running after the listing is over.
The same happens if the listing itself is cancelled.
"""
import asyncio
import contextlib
import logging
from typing import AsyncIterator, Collection, Dict, List, Optional

from ownertree.clients import fetching
from ownertree.engines import loggers
from ownertree.structs import bodies, configuration, references
from ownertree.utilities import aiotasks

logger = logging.getLogger(__name__)


async def fetch_fleet(
        *,
        settings: configuration.OwnerTreeSettings,
        resources: Collection[references.Resource],
        namespace: references.Namespace,
) -> List[bodies.ObjectRecord]:
    """
    List all objects of all namespaced resources in the namespace.

    Cluster-scoped resources are excluded: the ownership is inspected
    within one namespace only. The objects of one resource are kept
    in the server's order; the order between resources is arbitrary.
    """
    namespaced = [resource for resource in resources if resource.namespaced]
    skipped = len(resources) - len(namespaced)
    logger.debug(f"Listing {len(namespaced)} namespaced resources in {namespace!r}; "
                 f"{skipped} cluster-scoped resources are skipped.")

    records: List[bodies.ObjectRecord] = []
    lock = asyncio.Lock()
    limit = settings.fetching.max_concurrency
    semaphore = asyncio.Semaphore(limit) if limit else None
    tasks: Dict[aiotasks.Task, references.Resource] = {
        aiotasks.create_task(
            _fetch_resource(
                settings=settings,
                resource=resource,
                namespace=namespace,
                records=records,
                lock=lock,
                semaphore=semaphore,
            ),
            name=f'listing of {resource.qualified_name}',
        ): resource
        for resource in namespaced
    }

    try:
        pending = set(tasks)
        while pending:
            done, pending = await aiotasks.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
            failed = [task for task in tasks if task in done and _has_failed(task)]
            if failed:
                failed[0].result()  # re-raises the task's error or cancellation
    finally:
        await aiotasks.stop(tasks, title='listing', logger=logger)

    logger.debug(f"Listed {len(records)} objects of {len(namespaced)} resources in {namespace!r}.")
    return records


async def _fetch_resource(
        *,
        settings: configuration.OwnerTreeSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        records: List[bodies.ObjectRecord],
        lock: asyncio.Lock,
        semaphore: Optional[asyncio.Semaphore],
) -> None:
    async with _limited(semaphore):
        found = await fetching.list_objs(
            settings=settings,
            resource=resource,
            namespace=namespace,
            logger=loggers.ResourceLogger(resource=resource, namespace=namespace),
        )
    async with lock:
        records.extend(found)


def _has_failed(task: aiotasks.Task) -> bool:
    return task.cancelled() or task.exception() is not None


@contextlib.asynccontextmanager
async def _limited(semaphore: Optional[asyncio.Semaphore]) -> AsyncIterator[None]:
    if semaphore is None:
        yield
    else:
        async with semaphore:
            yield
