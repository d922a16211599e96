import datetime
import logging
from typing import Any, Iterable, List, Optional, Union

import aiohttp

from aiolinode._cogs.clients import api, auth, caching, fetching
from aiolinode._cogs.clients import events as event_clients
from aiolinode._cogs.configs import configuration
from aiolinode._cogs.helpers import typedefs
from aiolinode._cogs.structs import credentials, events, pages, references
from aiolinode._core import waiting

default_logger = logging.getLogger('aiolinode')


class Client:
    """
    The entry point to the API: the credentials, the settings, and the session.

    Usage::

        async with aiolinode.Client(aiolinode.ConnectionInfo.from_env()) as client:
            regions = await client.list_all('regions')
            volume = await client.post('volumes', payload={'label': 'data', 'size': 20})
            await client.wait_for_status(f"volumes/{volume['id']}", 'active', timeout=300)

    The client is cheap, but it holds an HTTP session: close it when not needed.
    All the client's settings are fixed at construction; for different settings,
    create another client (they can share the cache if needed).
    """

    def __init__(
            self,
            info: Optional[credentials.ConnectionInfo] = None,
            *,
            settings: Optional[configuration.ClientSettings] = None,
            resources: references.ResourceRegistry = references.DEFAULT_RESOURCES,
            cache: Optional[caching.ResponseCache] = None,
            connector: Optional[aiohttp.BaseConnector] = None,
            logger: Optional[typedefs.Logger] = None,
    ) -> None:
        super().__init__()
        self.info = info if info is not None else credentials.ConnectionInfo()
        self.settings = settings if settings is not None else configuration.ClientSettings()
        self.resources = resources
        self.cache = cache if cache is not None else caching.ResponseCache()
        self.logger = logger if logger is not None else default_logger
        self.context = auth.APIContext(self.info, settings=self.settings, connector=connector)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "Client":
        """ Create a client with the credentials & settings from the environment variables. """
        kwargs.setdefault('settings', configuration.ClientSettings.from_env())
        return cls(credentials.ConnectionInfo.from_env(), **kwargs)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {self.context.base_url}>'

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.context.close()

    def endpoint(self, name: str, *ids: references.ResourceId) -> str:
        """ Resolve the resource's name to a URL; e.g. ``("instance_disks", 123)``. """
        return self.resources.endpoint(name, *ids)

    async def get(
            self,
            url: str,
            *,
            into: typedefs.Decoder[typedefs.T] = typedefs.identity,
            timeout: Optional[aiohttp.ClientTimeout] = None,
    ) -> typedefs.T:
        return await api.get(url, into=into, timeout=timeout,
                             settings=self.settings, context=self.context, logger=self.logger)

    async def post(
            self,
            url: str,
            payload: Optional[object] = None,
            *,
            into: typedefs.Decoder[typedefs.T] = typedefs.identity,
            timeout: Optional[aiohttp.ClientTimeout] = None,
    ) -> typedefs.T:
        return await api.post(url, payload=payload, into=into, timeout=timeout,
                              settings=self.settings, context=self.context, logger=self.logger)

    async def put(
            self,
            url: str,
            payload: Optional[object] = None,
            *,
            into: typedefs.Decoder[typedefs.T] = typedefs.identity,
            timeout: Optional[aiohttp.ClientTimeout] = None,
    ) -> typedefs.T:
        return await api.put(url, payload=payload, into=into, timeout=timeout,
                             settings=self.settings, context=self.context, logger=self.logger)

    async def delete(
            self,
            url: str,
            *,
            timeout: Optional[aiohttp.ClientTimeout] = None,
    ) -> None:
        await api.delete(url, timeout=timeout,
                         settings=self.settings, context=self.context, logger=self.logger)

    async def list_all(
            self,
            url: str,
            options: Optional[pages.ListOptions] = None,
            *,
            into: typedefs.Decoder[typedefs.T] = typedefs.identity,
            timeout: Optional[aiohttp.ClientTimeout] = None,
    ) -> List[typedefs.T]:
        return await fetching.list_all(url, options=options, into=into, timeout=timeout,
                                       settings=self.settings, context=self.context,
                                       logger=self.logger)

    async def list_all_cached(
            self,
            url: str,
            options: Optional[pages.ListOptions] = None,
            *,
            into: typedefs.Decoder[typedefs.T] = typedefs.identity,
            timeout: Optional[aiohttp.ClientTimeout] = None,
    ) -> List[typedefs.T]:
        return await fetching.list_all_cached(url, options=options, into=into, timeout=timeout,
                                              cache=self.cache, settings=self.settings,
                                              context=self.context, logger=self.logger)

    async def list_events(
            self,
            options: Optional[pages.ListOptions] = None,
    ) -> List[events.Event]:
        return await event_clients.list_events(options=options, settings=self.settings,
                                               context=self.context, logger=self.logger)

    async def wait_for_event_finished(
            self,
            entity_id: Optional[events.EntityId],
            entity_type: str,
            action: str,
            min_start: datetime.datetime,
            timeout: float,
    ) -> events.Event:
        return await waiting.wait_for_event_finished(
            entity_id, entity_type, action,
            min_start=min_start, timeout=timeout,
            settings=self.settings, context=self.context, logger=self.logger)

    async def wait_for_status(
            self,
            url: str,
            target: Union[str, Iterable[str]],
            timeout: float,
            *,
            field: str = 'status',
    ) -> typedefs.RawBody:
        return await waiting.wait_for_status(
            url, target, timeout=timeout, field=field,
            settings=self.settings, context=self.context, logger=self.logger)
