import ssl
from typing import Any, Dict, Optional

import aiohttp

from aiolinode._cogs.configs import configuration
from aiolinode._cogs.structs import credentials


class APIContext:
    """
    A container for an aiohttp session and the information for URL building.

    The container is constructed once per client, and is used for all requests
    of that client. It must be closed when not needed anymore: either explicitly
    with `close`, or by using it as an async context manager.

    The session is created lazily on the first request. This allows constructing
    the context outside of a running event loop (e.g. at the module level
    of an application), while the session itself is bound to the loop.
    """

    # Contextual information for URL building.
    server: str
    base_url: str

    def __init__(
            self,
            info: credentials.ConnectionInfo,
            *,
            settings: Optional[configuration.ClientSettings] = None,
            connector: Optional[aiohttp.BaseConnector] = None,
    ) -> None:
        super().__init__()
        settings = settings if settings is not None else configuration.ClientSettings()

        # The SSL part (CA verification only; no client certificates are used by the API).
        context = ssl.create_default_context(cafile=info.ca_path)
        if info.insecure:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        # The token auth part, and the content negotiation.
        headers: Dict[str, str] = {
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'User-Agent': settings.user_agent,
        }
        if info.token:
            headers['Authorization'] = f'Bearer {info.token}'

        self.server = info.server
        self.base_url = info.base_url
        self._headers = headers
        self._ssl = context
        self._connector = connector
        self._session: Optional[aiohttp.ClientSession] = None

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {self.base_url}>'

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def session(self) -> aiohttp.ClientSession:
        # The pluggable connector is for testing/mocking; the default one is SSL-aware.
        if self._session is None or self._session.closed:
            connector = self._connector or aiohttp.TCPConnector(limit=0, ssl=self._ssl)
            self._session = aiohttp.ClientSession(
                connector=connector,
                connector_owner=self._connector is None,
                headers=self._headers,
            )
        return self._session

    def get_url(self, url: str) -> str:
        """ Prepend the relative URLs with the API root; keep the absolute ones. """
        if '://' in url:
            return url
        return self.base_url.rstrip('/') + '/' + url.lstrip('/')

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None
