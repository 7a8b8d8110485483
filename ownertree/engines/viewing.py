"""
The ownership inspection as exposed to the callers (e.g. the CLI).

All functions here require an established API connection: see `connected()`.
The settings are optional; the defaults are used if none are passed.
"""
import logging
from typing import Optional

from ownertree.clients import fetching, scanning
from ownertree.engines import fleets, loggers
from ownertree.structs import bodies, catalogs, configuration, ownership, references

logger = logging.getLogger(__name__)


async def scan_resources(
        *,
        settings: Optional[configuration.OwnerTreeSettings] = None,
) -> catalogs.ResourceCatalog:
    settings = settings if settings is not None else configuration.OwnerTreeSettings()
    return await scanning.scan_resources(settings=settings, logger=logger)


async def get_object(
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        *,
        settings: Optional[configuration.OwnerTreeSettings] = None,
) -> bodies.ObjectRecord:
    """
    Read one object of the resource by its name.

    The namespace is required for namespaced resources and ignored for cluster-scoped ones.
    Calling it for a namespaced resource without a namespace is an error of the caller
    and raises `ValueError` before any request is made, not an error of the inspection.
    """
    if resource.namespaced and namespace is None:
        raise ValueError(f"A namespace is required to get {resource.qualified_name}/{name}.")

    settings = settings if settings is not None else configuration.OwnerTreeSettings()
    return await fetching.read_obj(
        settings=settings,
        resource=resource,
        namespace=namespace,
        name=name,
        logger=loggers.ResourceLogger(resource=resource, namespace=namespace),
    )


async def build_ownership_view(
        namespace: references.Namespace,
        *,
        catalog: Optional[catalogs.ResourceCatalog] = None,
        settings: Optional[configuration.OwnerTreeSettings] = None,
) -> ownership.OwnershipDirectory:
    """
    Fetch all objects in the namespace and build their ownership relations.

    If the catalog is not passed, the resources are discovered first.
    """
    settings = settings if settings is not None else configuration.OwnerTreeSettings()
    if catalog is None:
        catalog = await scanning.scan_resources(settings=settings, logger=logger)
    records = await fleets.fetch_fleet(
        settings=settings,
        resources=catalog.resources,
        namespace=namespace,
    )
    directory = ownership.OwnershipDirectory.build(records)
    logger.debug(f"Built the ownership view of {namespace!r}: {directory!r}")
    return directory
