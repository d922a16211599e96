import collections
import dataclasses
import json
import logging
import re
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Sequence, Tuple

import aiohttp.web
import pytest
from aiohttp.test_utils import TestServer

from aiolinode import APIContext, Client, ClientSettings, ConnectionInfo

#
# A fake API server. No external calls must be made under any circumstances:
# the unit-tests must be fully isolated from the environment. But the HTTP layer
# is not mocked: the requests go through aiohttp to a local aiohttp.web server.
#

Responder = Callable[[aiohttp.web.Request], Any]


@dataclasses.dataclass(frozen=True)
class RecordedRequest:
    method: str
    path: str
    query: Mapping[str, str]
    headers: Mapping[str, str]
    body: bytes

    @property
    def data(self) -> Any:
        """ The parsed JSON body, or ``None`` if there was no body. """
        return json.loads(self.body) if self.body else None


class FakeAPI:
    """
    A scripted API server: every request is recorded, every response is pre-defined.

    Sample usage::

        def test_me(fake_api):
            fake_api.add('get', '/v4/regions', {'data': [], 'page': 1, 'pages': 1})
            fake_api.add('get', '/v4/volumes/1', status=404, json={'errors': [...]})
            fake_api.add('get', '/v4/account/events', responder=lambda request: {...})
            do_something()
            assert len(fake_api.requests) == 2

    The responses given as values are used once each, in the order of addition.
    The responders given as callables are used for every request infinitely.
    The unexpected requests get ``418 I'm a teapot``.
    """

    def __init__(self) -> None:
        super().__init__()
        self.requests: List[RecordedRequest] = []
        self._responses: Dict[Tuple[str, str], Deque[Tuple[Responder, bool]]] = \
            collections.defaultdict(collections.deque)
        self._server: Optional[TestServer] = None

    @property
    def server(self) -> str:
        assert self._server is not None
        return str(self._server.make_url('')).rstrip('/')

    def add(
            self,
            method: str,
            path: str,
            json: Any = None,
            *,
            status: int = 200,
            text: Optional[str] = None,
            headers: Optional[Mapping[str, str]] = None,
            responder: Optional[Responder] = None,
    ) -> None:
        if responder is not None:
            self._responses[method.upper(), path].append((responder, True))
            return

        def respond(request: aiohttp.web.Request) -> aiohttp.web.Response:
            if text is not None:
                # As bytes: otherwise, aiohttp adds a charset to the explicit content type.
                explicit = headers is not None and 'Content-Type' in headers
                return aiohttp.web.Response(body=text.encode(), status=status, headers=headers,
                                            content_type=None if explicit else 'text/plain')
            return aiohttp.web.json_response(json, status=status, headers=headers)

        self._responses[method.upper(), path].append((respond, False))

    def requests_to(self, method: str, path: str) -> List[RecordedRequest]:
        return [r for r in self.requests if r.method == method.upper() and r.path == path]

    async def _handle(self, request: aiohttp.web.Request) -> aiohttp.web.StreamResponse:
        body = await request.read()
        self.requests.append(RecordedRequest(
            method=request.method,
            path=request.path,
            query=dict(request.query),
            headers=dict(request.headers),
            body=body,
        ))
        queue = self._responses.get((request.method, request.path))
        if not queue:
            return aiohttp.web.Response(status=418, text="Unexpected request.")
        responder, sticky = queue[0]
        if not sticky:
            queue.popleft()
        result = responder(request)
        if isinstance(result, aiohttp.web.StreamResponse):
            return result
        return aiohttp.web.json_response(result)

    async def start(self) -> None:
        app = aiohttp.web.Application()
        app.router.add_route('*', '/{tail:.*}', self._handle)
        self._server = TestServer(app)
        await self._server.start_server()

    async def close(self) -> None:
        if self._server is not None:
            await self._server.close()


@pytest.fixture()
async def fake_api():
    api = FakeAPI()
    await api.start()
    try:
        yield api
    finally:
        await api.close()


def make_page(
        data: List[Any],
        *,
        page: int = 1,
        pages: int = 1,
        results: Optional[int] = None,
) -> Dict[str, Any]:
    """ A wire-level page of a paginated listing. """
    return {
        'page': page,
        'pages': pages,
        'results': results if results is not None else len(data),
        'data': data,
    }


@pytest.fixture()
def page_factory():
    return make_page


@pytest.fixture()
def settings():
    settings = ClientSettings()
    settings.networking.error_backoffs = []  # no retries unless a test enables them.
    settings.polling.interval = 0.01
    return settings


@pytest.fixture()
def info(fake_api):
    return ConnectionInfo(server=fake_api.server, api_version='v4', token='fake-token')


@pytest.fixture()
async def context(info, settings):
    context = APIContext(info, settings=settings)
    async with context:
        yield context


@pytest.fixture()
async def client(info, settings):
    async with Client(info, settings=settings) as client:
        yield client


@pytest.fixture()
def logger():
    return logging.getLogger('aiolinode.tests')


#
# Log assertions: by regexp patterns over the captured messages.
#

@pytest.fixture()
def assert_logs(caplog):
    """
    Assert that the patterns are found in the captured log messages, in order.

    Every pattern must match its own message, later than the previous pattern's
    message; unrelated messages in between are allowed. The prohibited patterns
    must match none of the messages at all.
    """
    caplog.set_level(logging.DEBUG)

    def assert_logs_fn(patterns: Sequence[str] = (), prohibited: Sequence[str] = ()) -> None:
        __traceback_hide__ = True
        messages = iter(caplog.messages)
        for pattern in patterns:
            if not any(re.search(pattern, message) for message in messages):
                raise AssertionError(f"Pattern is missed or out of order: {pattern!r}")

        for message in caplog.messages:
            for pattern in prohibited:
                if re.search(pattern, message):
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

    return assert_logs_fn
