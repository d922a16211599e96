import ssl

import aiohttp
import pytest

from aiolinode._cogs.clients.api import get
from aiolinode._cogs.clients.auth import APIContext
from aiolinode._cogs.structs.credentials import ConnectionInfo


@pytest.mark.parametrize('url, expected', [
    ('regions', 'https://api.linode.com/v4/regions'),
    ('/regions', 'https://api.linode.com/v4/regions'),
    ('linode/instances/123', 'https://api.linode.com/v4/linode/instances/123'),
    ('https://elsewhere.example.com/x', 'https://elsewhere.example.com/x'),
    ('http://127.0.0.1:8080/x', 'http://127.0.0.1:8080/x'),
])
def test_urls_are_resolved_against_the_api_root(url, expected):
    context = APIContext(ConnectionInfo())
    assert context.get_url(url) == expected


def test_api_root_from_the_info():
    context = APIContext(ConnectionInfo(server='http://localhost:1234/', api_version='v4beta'))
    assert context.server == 'http://localhost:1234/'
    assert context.base_url == 'http://localhost:1234/v4beta'
    assert context.get_url('regions') == 'http://localhost:1234/v4beta/regions'
    assert repr(context) == '<APIContext: http://localhost:1234/v4beta>'


def test_ssl_is_verified_by_default():
    context = APIContext(ConnectionInfo())
    assert context._ssl.verify_mode == ssl.CERT_REQUIRED
    assert context._ssl.check_hostname


def test_ssl_is_not_verified_if_insecure():
    context = APIContext(ConnectionInfo(insecure=True))
    assert context._ssl.verify_mode == ssl.CERT_NONE
    assert not context._ssl.check_hostname


async def test_session_is_created_lazily_and_reused():
    context = APIContext(ConnectionInfo())
    assert context._session is None
    session1 = context.session
    session2 = context.session
    assert isinstance(session1, aiohttp.ClientSession)
    assert session1 is session2
    await context.close()
    assert session1.closed
    assert context._session is None


async def test_session_is_recreated_after_closing():
    context = APIContext(ConnectionInfo())
    session1 = context.session
    await context.close()
    session2 = context.session
    await context.close()
    assert session1 is not session2


async def test_closing_without_a_session_is_noop():
    context = APIContext(ConnectionInfo())
    await context.close()
    assert context._session is None


async def test_context_manager_closes_the_session():
    async with APIContext(ConnectionInfo()) as context:
        session = context.session
    assert session.closed


async def test_no_authorization_without_a_token(fake_api, settings, logger):
    fake_api.add('get', '/v4/profile', {})
    info = ConnectionInfo(server=fake_api.server)
    async with APIContext(info, settings=settings) as context:
        await get('profile', settings=settings, context=context, logger=logger)
    assert 'Authorization' not in fake_api.requests[0].headers


async def test_custom_user_agent(fake_api, settings, logger):
    settings.user_agent = 'my-tool/1.2.3'
    fake_api.add('get', '/v4/profile', {})
    info = ConnectionInfo(server=fake_api.server)
    async with APIContext(info, settings=settings) as context:
        await get('profile', settings=settings, context=context, logger=logger)
    assert fake_api.requests[0].headers['User-Agent'] == 'my-tool/1.2.3'


async def test_external_connector_is_not_closed(fake_api, settings, logger):
    fake_api.add('get', '/v4/profile', {})
    connector = aiohttp.TCPConnector()
    info = ConnectionInfo(server=fake_api.server)
    async with APIContext(info, settings=settings, connector=connector) as context:
        await get('profile', settings=settings, context=context, logger=logger)
    assert not connector.closed
    await connector.close()
