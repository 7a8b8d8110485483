"""
Errors of the K8s API as seen on the HTTP level.

The HTTP client (``aiohttp``) is an implementation detail of the transport,
so its exceptions are not spread over the code: every non-successful response
is converted to `APIError` (or to one of the few status-specific subclasses)
with the client's own exception chained as the cause.

Network-level failures (connection refused, TLS errors, timeouts) are not
API errors: they are escalated from the client library as they are.

None of these errors reaches the callers of the tool directly: the fetching
and discovery routines wrap them into :mod:`ownertree.errors`.
"""
import asyncio
import collections.abc
import json
from typing import Any, Dict, List, Mapping, Optional, Type

import aiohttp
from typing_extensions import TypedDict


class RawStatusDetails(TypedDict, total=False):
    name: str
    group: str
    kind: str
    uid: str
    causes: List[Mapping[str, Any]]


# https://kubernetes.io/docs/reference/kubernetes-api/common-definitions/status/
class RawStatus(TypedDict, total=False):
    apiVersion: str
    kind: str
    status: str
    reason: str
    code: int
    message: str
    details: RawStatusDetails


class APIError(Exception):
    """
    A failed API request, with the server-reported ``Status`` if there was one.

    The HTTP status is always known. The payload is only kept if the server
    responded with a proper ``kind: Status`` document; any other bodies
    can contain arbitrary data and are never kept or shown.
    """

    def __init__(self, payload: Optional[RawStatus], *, status: int) -> None:
        super().__init__(payload.get('message') if payload else None, payload)
        self.status = status
        self.payload: RawStatus = payload or {}

    def __str__(self) -> str:
        return self.message or f"API responded with HTTP {self.status}."

    @property
    def code(self) -> Optional[int]:
        return self.payload.get('code')

    @property
    def message(self) -> Optional[str]:
        return self.payload.get('message')

    @property
    def details(self) -> Optional[RawStatusDetails]:
        return self.payload.get('details')


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


ERRORS_BY_STATUS: Dict[int, Type[APIError]] = {
    401: APIUnauthorizedError,
    403: APIForbiddenError,
    404: APINotFoundError,
}

# All possible failures of one request, as wrapped into the errors of the inspection.
REQUEST_ERRORS = (APIError, aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError)


async def check_response(response: aiohttp.ClientResponse) -> None:
    """ Raise an `APIError` for an unsuccessful response, do nothing otherwise. """
    if response.status < 400:
        return

    # The body is only readable until `raise_for_status()` releases the response.
    payload: Optional[RawStatus]
    try:
        payload = await response.json()
    except (json.JSONDecodeError, aiohttp.ContentTypeError, aiohttp.ClientConnectionError):
        payload = None
    if not isinstance(payload, collections.abc.Mapping) or payload.get('kind') != 'Status':
        payload = None

    cls = ERRORS_BY_STATUS.get(response.status, APIError)
    try:
        response.raise_for_status()
    except aiohttp.ClientResponseError as e:
        raise cls(payload, status=response.status) from e
