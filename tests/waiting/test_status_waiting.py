import pytest

from aiolinode._cogs.clients.errors import APINotFoundError
from aiolinode._core.waiting import WaitTimeoutError, wait_for_status

VOLUME_PATH = '/v4/volumes/123'


async def test_target_status_is_returned_immediately(fake_api, settings, context, logger):
    fake_api.add('get', VOLUME_PATH, {'id': 123, 'status': 'active'})

    body = await wait_for_status('volumes/123', 'active', timeout=1,
                                 settings=settings, context=context, logger=logger)

    assert body == {'id': 123, 'status': 'active'}
    assert len(fake_api.requests) == 1


async def test_status_is_polled_until_reached(
        fake_api, settings, context, logger, assert_logs):
    fake_api.add('get', VOLUME_PATH, {'id': 123, 'status': 'creating'})
    fake_api.add('get', VOLUME_PATH, {'id': 123, 'status': 'creating'})
    fake_api.add('get', VOLUME_PATH, {'id': 123, 'status': 'active'})

    body = await wait_for_status('volumes/123', 'active', timeout=1,
                                 entity_type='volume', entity_id=123,
                                 settings=settings, context=context, logger=logger)

    assert body['status'] == 'active'
    assert len(fake_api.requests) == 3
    assert_logs([r"The volume 123 status is 'creating'; waiting for \['active'\]"])


async def test_any_of_multiple_targets(fake_api, settings, context, logger):
    fake_api.add('get', VOLUME_PATH, {'id': 123, 'status': 'resizing'})
    fake_api.add('get', VOLUME_PATH, {'id': 123, 'status': 'offline'})

    body = await wait_for_status('volumes/123', ['active', 'offline'], timeout=1,
                                 settings=settings, context=context, logger=logger)

    assert body['status'] == 'offline'


async def test_custom_field(fake_api, settings, context, logger):
    fake_api.add('get', '/v4/linode/instances/123/disks/456', {'id': 456, 'state': 'ready'})

    body = await wait_for_status('linode/instances/123/disks/456', 'ready', field='state',
                                 timeout=1, settings=settings, context=context, logger=logger)

    assert body['state'] == 'ready'


async def test_timeout(fake_api, settings, context, logger):
    fake_api.add('get', VOLUME_PATH, responder=lambda request: {'id': 123, 'status': 'creating'})

    with pytest.raises(WaitTimeoutError) as err:
        await wait_for_status('volumes/123', 'active', timeout=0.05,
                              entity_type='volume', entity_id=123,
                              settings=settings, context=context, logger=logger)

    assert str(err.value) == ("Timed out waiting for the volume 123 status to become ['active'] "
                              "after 0.05s; last seen: 'creating'.")
    assert err.value.entity_type == 'volume'
    assert err.value.entity_id == 123
    assert err.value.timeout == 0.05


async def test_api_errors_escalate(fake_api, settings, context, logger):
    fake_api.add('get', VOLUME_PATH, {'errors': [{'reason': 'Not found'}]}, status=404)

    with pytest.raises(APINotFoundError):
        await wait_for_status('volumes/123', 'active', timeout=1,
                              settings=settings, context=context, logger=logger)
