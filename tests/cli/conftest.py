import functools

import click.testing
import pytest

from ownertree.cli import main
from ownertree.structs.bodies import ObjectRecord
from ownertree.structs.catalogs import build_catalog
from ownertree.structs.credentials import ConnectionInfo
from ownertree.structs.ownership import OwnershipDirectory

CATALOG = build_catalog([
    {'groupVersion': 'example.com/v1', 'resources': [
        {'name': 'workloads', 'singularName': 'workload', 'kind': 'Workload',
         'namespaced': True, 'verbs': ['get', 'list']},
    ]},
    {'groupVersion': 'example.org/v1', 'resources': [
        {'name': 'gadgets', 'singularName': 'gadget', 'kind': 'Gadget',
         'namespaced': True, 'shortNames': ['wl'], 'verbs': ['get', 'list']},
    ]},
    {'groupVersion': 'example.net/v1', 'resources': [
        {'name': 'gizmos', 'singularName': 'gizmo', 'kind': 'Gizmo',
         'namespaced': True, 'shortNames': ['wl'], 'verbs': ['get', 'list']},
    ]},
])
PETC = ObjectRecord(uid='w1', kind='Workload', name='petc', namespace='ns1')


@pytest.fixture(autouse=True)
def _restored_loggers(root_logger_handlers):
    pass


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture()
def login(mocker):
    info = ConnectionInfo(server='https://fake-host', default_namespace='from-login')
    return mocker.patch('ownertree.clients.login.login', return_value=info)


@pytest.fixture()
def scan_resources(mocker):
    return mocker.patch('ownertree.engines.viewing.scan_resources', return_value=CATALOG)


@pytest.fixture()
def petc():
    return PETC


@pytest.fixture()
def get_object(mocker):
    return mocker.patch('ownertree.engines.viewing.get_object', return_value=PETC)


@pytest.fixture()
def build_ownership_view(mocker):
    return mocker.patch('ownertree.engines.viewing.build_ownership_view',
                        return_value=OwnershipDirectory.build([PETC]))
