"""
The raw HTTP requests to the API, with the errors converted to `errors.APIError`.

Only the reading requests are needed: the discovery, the listing, and the reading
of individual objects. Nothing is retried; the failures go to the callers.
"""
from typing import Any, Mapping, Optional

import aiohttp

from ownertree.clients import auth, errors
from ownertree.helpers import typedefs
from ownertree.structs import configuration


@auth.authenticated
async def request(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.OwnerTreeSettings,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        context: Optional[auth.APIContext] = None,  # injected by the decorator
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    """
    Send a request and return the response unread, but already checked for errors.

    The caller is responsible for reading and closing the response.
    """
    if context is None:  # for type-checking!
        raise RuntimeError("API instance is not injected by the decorator.")

    full_url = url if '://' in url else context.server.rstrip('/') + '/' + url.lstrip('/')
    logger.debug(f"Requesting: {method.upper()} {full_url}")
    response = await context.session.request(
        method=method,
        url=full_url,
        headers=headers,
        timeout=timeout if timeout is not None else _get_timeout(settings),
    )
    await errors.check_response(response)
    return response


async def get(
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.OwnerTreeSettings,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> Any:
    """ Get the parsed JSON document from the URL. """
    response = await request('get', url, settings=settings, headers=headers,
                             timeout=timeout, logger=logger)
    async with response:
        return await response.json()


def _get_timeout(settings: configuration.OwnerTreeSettings) -> aiohttp.ClientTimeout:
    return aiohttp.ClientTimeout(
        total=settings.networking.request_timeout,
        sock_connect=settings.networking.connect_timeout,
    )
