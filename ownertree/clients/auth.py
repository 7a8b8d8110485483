"""
The authenticated HTTP sessions for the API requests.

One inspection uses one session for all its requests, including the concurrent
ones. The session is established by `connected` for a block of code, and then
injected into the requesting routines by the `authenticated` decorator,
so that the session is not passed through all the layers explicitly.
"""
import base64
import contextlib
import functools
import os
import ssl
import tempfile
from contextvars import ContextVar
from typing import Any, AsyncIterator, Callable, Dict, Optional, TypeVar, Union, cast

import aiohttp

from ownertree.helpers import versions
from ownertree.structs import credentials

context_var: ContextVar['APIContext'] = ContextVar('context_var')

_F = TypeVar('_F', bound=Callable[..., Any])

_PathLike = Union[str, 'os.PathLike[str]']


def authenticated(fn: _F) -> _F:
    """
    Inject the session of the current connection as the ``context=`` kwarg.

    An explicitly passed context is used as is, even within a connected block.
    """
    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        if kwargs.get('context') is None:
            try:
                kwargs['context'] = context_var.get()
            except LookupError:
                raise credentials.LoginError("No API connection is established; "
                                             "use ownertree.connected() first.") from None
        return await fn(*args, **kwargs)

    return cast(_F, wrapper)


@contextlib.asynccontextmanager
async def connected(info: credentials.ConnectionInfo) -> AsyncIterator['APIContext']:
    """
    Connect to the API for the duration of the block.

    Usage::

        async with ownertree.connected(info):
            catalog = await ownertree.scan_resources()

    The session is closed on exit, even if the block fails.
    """
    context = APIContext(info)
    token = context_var.set(context)
    try:
        yield context
    finally:
        context_var.reset(token)
        await context.close()


class APIContext:
    """
    An HTTP session with the server's address and the default namespace.

    The requests are built with ``context.server`` as the URL base.
    """

    session: aiohttp.ClientSession
    server: str
    default_namespace: Optional[str]

    def __init__(self, info: credentials.ConnectionInfo) -> None:
        super().__init__()
        self.server = info.server
        self.default_namespace = info.default_namespace
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=0, ssl=_make_ssl_context(info)),
            headers=_make_headers(info),
            auth=_make_basic_auth(info),
        )

    async def close(self) -> None:
        await self.session.close()


def _make_headers(info: credentials.ConnectionInfo) -> Dict[str, str]:
    headers = {'User-Agent': f'ownertree/{versions.version or "unknown"}'}
    if info.scheme or info.token:
        scheme = info.scheme or 'Bearer'
        headers['Authorization'] = f'{scheme} {info.token}' if info.token else scheme
    return headers


def _make_basic_auth(info: credentials.ConnectionInfo) -> Optional[aiohttp.BasicAuth]:
    if info.username and info.password:
        return aiohttp.BasicAuth(info.username, info.password)
    return None


def _make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    cadata = decode_to_pem(info.ca_data) if info.ca_data is not None else None
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cafile=info.ca_path, cadata=cadata)

    # The client certificate & key are only loadable from files; the inline data go to temp files,
    # which are created only when really needed (the filesystem can be read-only).
    with contextlib.ExitStack() as stack:
        cert_path = _as_path(stack, info.certificate_path, info.certificate_data)
        pkey_path = _as_path(stack, info.private_key_path, info.private_key_data)
        if cert_path and pkey_path:
            context.load_cert_chain(certfile=cert_path, keyfile=pkey_path)

    if info.insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def _as_path(
        stack: contextlib.ExitStack,
        path: Optional[_PathLike],
        data: Optional[Union[str, bytes]],
) -> Optional[_PathLike]:
    if path:
        return path
    if data:
        file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
        file.write(decode_to_pem(data).encode('ascii'))
        return file.name
    return None


def decode_to_pem(data: Union[str, bytes]) -> str:
    """ Accept the PEM-encoded data either as is, or base64-encoded (as in kubeconfigs). """
    if isinstance(data, str) and data.startswith('-----BEGIN '):
        return data
    elif isinstance(data, bytes) and data.startswith(b'-----BEGIN '):
        return data.decode('ascii')
    else:
        return base64.b64decode(data).decode('ascii')
