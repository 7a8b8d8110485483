import asyncio
import json
import logging
import re
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from aresponses import ResponsesMockServer

from ownertree.clients import auth
from ownertree.clients.auth import APIContext
from ownertree.structs.configuration import OwnerTreeSettings
from ownertree.structs.credentials import ConnectionInfo
from ownertree.structs.references import Resource


@pytest.fixture()
async def aresponses():
    """
    A mock server bound to the test's own event loop.

    It is the same as the plugin's fixture, but does not depend
    on the deprecated ``event_loop`` fixture of pytest-asyncio.
    """
    async with ResponsesMockServer(loop=asyncio.get_running_loop()) as server:
        yield server


@pytest.fixture()
def hostname():
    """ The server of the API, as mocked by `aresponses`. """
    return 'fake-host'


@pytest.fixture()
def settings():
    return OwnerTreeSettings()


@pytest.fixture()
def logger():
    return logging.getLogger('ownertree.tests')


@pytest.fixture()
def namespaced_resource():
    return Resource('ownertree.dev', 'v1', 'examples', kind='Example', namespaced=True,
                    verbs=frozenset({'list', 'get'}))


@pytest.fixture()
def cluster_resource():
    return Resource('ownertree.dev', 'v1', 'clusterexamples', kind='ClusterExample',
                    namespaced=False, verbs=frozenset({'list', 'get'}))


@pytest.fixture(params=[True, False], ids=['namespaced', 'cluster'])
def resource(request):
    """ The same resource, both namespaced and cluster-scoped. """
    return Resource('ownertree.dev', 'v1', 'examples', kind='Example',
                    namespaced=request.param, verbs=frozenset({'list', 'get'}))


@pytest.fixture()
def namespace(resource):
    return 'ns' if resource.namespaced else None


@pytest.fixture()
def connection_info(hostname):
    return ConnectionInfo(server=f'https://{hostname}')


@pytest.fixture()
async def api_context(connection_info):
    """
    The API connection for the duration of a test, closed when the test is over.
    """
    context = APIContext(connection_info)
    try:
        yield context
    finally:
        await context.close()


@pytest.fixture()
def enforced_context(api_context, mocker):
    """
    Force the authenticating decorator to always use one specific connection.

    The context variables set in the fixtures do not always reach the tests
    (it depends on how the event loops & tasks are run by the test plugins),
    so the variable itself is replaced for the duration of the test.
    """
    mocker.patch.object(auth, 'context_var', Mock(get=Mock(return_value=api_context)))
    return api_context


@pytest.fixture()
def resp_mocker(enforced_context, aresponses):
    """
    Make the `aresponses` handlers which are also mocks, to assert on the calls.

    The arguments are those of `MagicMock` (``return_value``, ``side_effect``);
    the handler responds with what that mock returns (or raises).
    The received requests are passed to the mock's calls, with their JSON
    or text bodies preserved as ``request.data``.

    Usage::

        handler = resp_mocker(return_value=aiohttp.web.json_response({}))
        aresponses.add(hostname, '/api', 'get', handler)
        ...
        assert handler.call_count == 1
    """
    def make_handler(*args, **kwargs):
        response_mock = MagicMock(*args, **kwargs)

        async def respond(request):
            # The body is only readable while the request is being handled.
            try:
                request.data = await request.json()
            except json.JSONDecodeError:
                request.data = await request.text()
            return response_mock()

        return AsyncMock(side_effect=respond)
    return make_handler


@pytest.fixture()
def assert_logs(caplog):
    """
    Check that the log messages match the patterns, in that order.

    Unmatched messages in between are allowed, unless they match
    any of the prohibited patterns.
    """
    def check(patterns, prohibited=()):
        __traceback_hide__ = True
        expected = list(patterns)
        for message in caplog.messages:
            bad = [pattern for pattern in prohibited if re.search(pattern, message)]
            if bad:
                raise AssertionError(f"Prohibited message {message!r} matches {bad!r}")
            if expected and re.search(expected[0], message):
                expected.pop(0)
        if expected:
            raise AssertionError(f"Messages are not found for the patterns: {expected!r}")

    return check


@pytest.fixture()
def root_logger_handlers():
    """ Restore the loggers after the tests that configure the logging. """
    logger = logging.getLogger()
    handlers = list(logger.handlers)
    level = logger.level
    lowlevel = {name: (logging.getLogger(name).propagate, list(logging.getLogger(name).handlers))
                for name in ['asyncio', 'aiohttp']}
    try:
        yield handlers
    finally:
        logger.handlers[:] = handlers
        logger.setLevel(level)
        for name, (propagate, lowlevel_handlers) in lowlevel.items():
            logging.getLogger(name).propagate = propagate
            logging.getLogger(name).handlers[:] = lowlevel_handlers
