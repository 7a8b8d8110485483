import json

import aiohttp.web
import pytest

from ownertree.clients.errors import APIError
from ownertree.clients.fetching import list_objs
from ownertree.errors import FetchError


def _page(*uids, cont=None):
    meta = {'resourceVersion': '123'}
    if cont is not None:
        meta['continue'] = cont
    return {
        'kind': 'ExampleList',
        'apiVersion': 'ownertree.dev/v1',
        'metadata': meta,
        'items': [{'metadata': {'uid': uid, 'name': f'name-{uid}'}} for uid in uids],
    }


async def test_listing_works(
        resp_mocker, aresponses, hostname, settings, logger, resource, namespace):

    result = _page('uid1', 'uid2')
    list_mock = resp_mocker(return_value=aiohttp.web.json_response(result))
    aresponses.add(hostname, resource.get_url(namespace=namespace), 'get', list_mock)

    records = await list_objs(
        logger=logger,
        settings=settings,
        resource=resource,
        namespace=namespace,
    )
    assert [record.uid for record in records] == ['uid1', 'uid2']
    assert [record.name for record in records] == ['name-uid1', 'name-uid2']

    assert list_mock.called
    assert list_mock.call_count == 1


async def test_kinds_and_api_versions_are_taken_from_the_list(
        resp_mocker, aresponses, hostname, settings, logger, resource, namespace):

    result = _page('uid1')
    list_mock = resp_mocker(return_value=aiohttp.web.json_response(result))
    aresponses.add(hostname, resource.get_url(namespace=namespace), 'get', list_mock)

    records = await list_objs(
        logger=logger,
        settings=settings,
        resource=resource,
        namespace=namespace,
    )
    assert records[0].kind == 'Example'
    assert records[0].api_version == 'ownertree.dev/v1'
    assert str(records[0]) == 'Example/name-uid1'


async def test_owner_references_are_interpreted(
        resp_mocker, aresponses, hostname, settings, logger, resource, namespace):

    result = {'items': [{'metadata': {'uid': 'uid1', 'ownerReferences': [
        {'uid': 'owner1', 'kind': 'Workload', 'name': 'w1'},
        {'uid': 'owner2', 'kind': 'Workload', 'name': 'w2'},
    ]}}]}
    list_mock = resp_mocker(return_value=aiohttp.web.json_response(result))
    aresponses.add(hostname, resource.get_url(namespace=namespace), 'get', list_mock)

    records = await list_objs(
        logger=logger,
        settings=settings,
        resource=resource,
        namespace=namespace,
    )
    assert records[0].owners == ('owner1', 'owner2')


async def test_page_size_is_requested(
        resp_mocker, aresponses, hostname, settings, logger, resource, namespace):

    settings.fetching.page_size = 123
    list_mock = resp_mocker(return_value=aiohttp.web.json_response(_page()))
    aresponses.add(hostname, resource.get_url(namespace=namespace), 'get', list_mock)

    await list_objs(
        logger=logger,
        settings=settings,
        resource=resource,
        namespace=namespace,
    )
    request = list_mock.call_args_list[0][0][0]
    assert request.query['limit'] == '123'
    assert 'continue' not in request.query


async def test_all_pages_are_fetched_in_order(
        resp_mocker, aresponses, hostname, settings, logger, resource, namespace):

    url = resource.get_url(namespace=namespace)
    page1_mock = resp_mocker(return_value=aiohttp.web.json_response(_page('a', 'b', cont='C1')))
    page2_mock = resp_mocker(return_value=aiohttp.web.json_response(_page('c', 'd', cont='C2')))
    page3_mock = resp_mocker(return_value=aiohttp.web.json_response(_page('e', cont='')))
    aresponses.add(hostname, url, 'get', page1_mock)
    aresponses.add(hostname, url, 'get', page2_mock)
    aresponses.add(hostname, url, 'get', page3_mock)

    records = await list_objs(
        logger=logger,
        settings=settings,
        resource=resource,
        namespace=namespace,
    )
    assert [record.uid for record in records] == ['a', 'b', 'c', 'd', 'e']

    assert page1_mock.call_count == 1
    assert page2_mock.call_count == 1
    assert page3_mock.call_count == 1
    assert 'continue' not in page1_mock.call_args_list[0][0][0].query
    assert page2_mock.call_args_list[0][0][0].query['continue'] == 'C1'
    assert page3_mock.call_args_list[0][0][0].query['continue'] == 'C2'


async def test_empty_listing_is_a_success(
        resp_mocker, aresponses, hostname, settings, logger, resource, namespace):

    list_mock = resp_mocker(return_value=aiohttp.web.json_response({'items': None}))
    aresponses.add(hostname, resource.get_url(namespace=namespace), 'get', list_mock)

    records = await list_objs(
        logger=logger,
        settings=settings,
        resource=resource,
        namespace=namespace,
    )
    assert records == []


@pytest.mark.parametrize('status', [400, 401, 403, 404, 500, 666])
async def test_api_errors_are_wrapped(
        resp_mocker, aresponses, hostname, settings, logger, status, resource, namespace):

    list_mock = resp_mocker(return_value=aiohttp.web.Response(status=status, reason='oops'))
    aresponses.add(hostname, resource.get_url(namespace=namespace), 'get', list_mock)

    with pytest.raises(FetchError) as e:
        await list_objs(
            logger=logger,
            settings=settings,
            resource=resource,
            namespace=namespace,
        )
    assert e.value.resource == resource
    assert e.value.namespace == namespace
    assert isinstance(e.value.__cause__, APIError)
    assert e.value.__cause__.status == status


async def test_unparseable_page_is_wrapped(
        resp_mocker, aresponses, hostname, settings, logger, resource, namespace):

    broken = aiohttp.web.Response(text='{"items": [', content_type='application/json')
    aresponses.add(hostname, resource.get_url(namespace=namespace), 'get',
                   resp_mocker(return_value=broken))

    with pytest.raises(FetchError) as e:
        await list_objs(
            logger=logger,
            settings=settings,
            resource=resource,
            namespace=namespace,
        )
    assert e.value.resource == resource
    assert isinstance(e.value.__cause__, json.JSONDecodeError)


async def test_failed_page_discards_the_fetched_pages(
        resp_mocker, aresponses, hostname, settings, logger, resource, namespace):

    url = resource.get_url(namespace=namespace)
    page1_mock = resp_mocker(return_value=aiohttp.web.json_response(_page('a', 'b', cont='C1')))
    page2_mock = resp_mocker(return_value=aiohttp.web.Response(status=500, reason='oops'))
    aresponses.add(hostname, url, 'get', page1_mock)
    aresponses.add(hostname, url, 'get', page2_mock)

    with pytest.raises(FetchError):
        await list_objs(
            logger=logger,
            settings=settings,
            resource=resource,
            namespace=namespace,
        )
    assert page1_mock.call_count == 1
    assert page2_mock.call_count == 1


async def test_pages_are_logged(
        resp_mocker, aresponses, hostname, settings, logger, resource, namespace,
        caplog, assert_logs):
    caplog.set_level(0)

    url = resource.get_url(namespace=namespace)
    aresponses.add(hostname, url, 'get', aiohttp.web.json_response(_page('a', cont='C1')))
    aresponses.add(hostname, url, 'get', aiohttp.web.json_response(_page('b')))

    await list_objs(
        logger=logger,
        settings=settings,
        resource=resource,
        namespace=namespace,
    )
    assert_logs([
        r"Requesting: GET https://fake-host/apis/ownertree.dev/v1/",
        r"Requesting: GET https://fake-host/apis/ownertree.dev/v1/",
        r"Listed 2 objects in 2 page\(s\)\.",
    ])
