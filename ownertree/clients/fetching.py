from typing import Dict, List

from ownertree import errors as domain_errors
from ownertree.clients import api, errors
from ownertree.helpers import typedefs
from ownertree.structs import bodies, configuration, references


async def read_obj(
        *,
        settings: configuration.OwnerTreeSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        logger: typedefs.Logger,
) -> bodies.ObjectRecord:
    """
    Read one object by its name.

    For cluster-scoped resources, the namespace is ignored.
    """
    namespace = resource.get_scope(namespace)
    try:
        body: bodies.RawBody = await api.get(
            url=resource.get_url(namespace=namespace, name=name),
            settings=settings,
            logger=logger,
        )
    except errors.APINotFoundError as e:
        raise domain_errors.ObjectNotFoundError(resource, namespace, name) from e
    except errors.REQUEST_ERRORS as e:
        where = f" in {namespace!r}" if namespace is not None else ""
        raise domain_errors.FetchError(
            resource, namespace,
            f"Failed to get {resource.qualified_name}/{name}{where}: {e}") from e
    return bodies.ObjectRecord.from_body(body)


async def list_objs(
        *,
        settings: configuration.OwnerTreeSettings,
        resource: references.Resource,
        namespace: references.Namespace,
        logger: typedefs.Logger,
) -> List[bodies.ObjectRecord]:
    """
    List all objects of a specific resource type, page by page.

    The cluster-scoped call is used in two cases:

    * The resource itself is cluster-scoped, and has no namespaces.
    * The namespace is not specified, so all namespaces are listed.

    Otherwise, the namespace-scoped call is used.

    The pages are requested one after another, following the continuation
    cursors until the server reports no more pages. The objects are returned
    in the server's order. If any page fails, the whole listing fails:
    the already fetched pages are discarded.
    """
    namespace = resource.get_scope(namespace)
    records: List[bodies.ObjectRecord] = []
    cursor = ''
    pages = 0
    while True:
        params: Dict[str, str] = {'limit': str(settings.fetching.page_size)}
        if cursor:
            params['continue'] = cursor
        try:
            rsp: bodies.RawList = await api.get(
                url=resource.get_url(namespace=namespace, params=params),
                settings=settings,
                logger=logger,
            )
        except errors.REQUEST_ERRORS as e:
            where = f" in {namespace!r}" if namespace is not None else ""
            raise domain_errors.FetchError(
                resource, namespace,
                f"Listing {resource.qualified_name}{where} failed: {e}") from e

        pages += 1
        for item in rsp.get('items') or []:
            if 'kind' in rsp:
                item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
            if 'apiVersion' in rsp:
                item.setdefault('apiVersion', rsp['apiVersion'])
            records.append(bodies.ObjectRecord.from_body(item))

        cursor = (rsp.get('metadata') or {}).get('continue') or ''
        if not cursor:
            break

    logger.debug(f"Listed {len(records)} objects in {pages} page(s).")
    return records
