import asyncio
from typing import List, Optional

from ownertree import errors as domain_errors
from ownertree.clients import api, errors
from ownertree.helpers import typedefs
from ownertree.structs import catalogs, configuration
from ownertree.utilities import aiotasks


async def scan_resources(
        *,
        settings: configuration.OwnerTreeSettings,
        logger: typedefs.Logger,
) -> catalogs.ResourceCatalog:
    """
    Discover all server-preferred resources and index them for lookups.

    The discovery is done once per inspection and is not retried:
    any failure of it makes the inspection impossible, so it fails fast.
    """
    try:
        groups = await read_preferred_groups(settings=settings, logger=logger)
    except errors.REQUEST_ERRORS as e:
        raise domain_errors.DiscoveryError(f"Failed to fetch the API groups: {e}") from e
    catalog = catalogs.build_catalog(groups)
    logger.debug(f"Discovered {len(catalog)} listable resources in {len(groups)} API groups.")
    return catalog


async def read_preferred_groups(
        *,
        settings: configuration.OwnerTreeSettings,
        logger: typedefs.Logger,
) -> List[catalogs.RawAPIResourceList]:
    """
    Read the resource lists of the core API and of the preferred versions of all API groups.

    The order is the same as the server's order: the core API goes first,
    then the API groups as listed by the server (usually, built-ins first).
    """
    core_rsp = await api.get('/api', settings=settings, logger=logger)
    apis_rsp = await api.get('/apis', settings=settings, logger=logger)
    coros = [
        _read_version(
            url=f'/api/{version_name}',
            group_version=version_name,
            settings=settings,
            logger=logger,
        )
        for version_name in core_rsp.get('versions') or []
    ] + [
        _read_version(
            url=f'/apis/{group_dat["preferredVersion"]["groupVersion"]}',
            group_version=group_dat['preferredVersion']['groupVersion'],
            settings=settings,
            logger=logger,
        )
        for group_dat in apis_rsp.get('groups') or []
        if group_dat.get('preferredVersion')
    ]
    tasks = [aiotasks.create_task(coro) for coro in coros]
    try:
        results = await asyncio.gather(*tasks)
    finally:
        await aiotasks.stop(tasks, title='discovery', logger=logger)
    return [result for result in results if result is not None]


async def _read_version(
        *,
        url: str,
        group_version: str,
        settings: configuration.OwnerTreeSettings,
        logger: typedefs.Logger,
) -> Optional[catalogs.RawAPIResourceList]:
    try:
        rsp: catalogs.RawAPIResourceList = await api.get(url, settings=settings, logger=logger)
    except errors.APINotFoundError:
        # This happens when the last and the only resource of a group/version
        # has been deleted, the whole group/version is gone, but is still listed.
        logger.debug(f"API group-version {group_version!r} is gone; ignoring it.")
        return None
    else:
        rsp.setdefault('groupVersion', group_version)
        return rsp
