from typing import List, Optional

import aiohttp

from aiolinode._cogs.clients import auth, fetching
from aiolinode._cogs.configs import configuration
from aiolinode._cogs.helpers import typedefs
from aiolinode._cogs.structs import events, pages, references

EVENTS_URL = references.DEFAULT_RESOURCES.endpoint('events')


async def list_events(
        *,
        options: Optional[pages.ListOptions] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        logger: typedefs.Logger,
) -> List[events.Event]:
    """
    List the actions taken on the account's entities.

    The visible events depend on the token's grants and the user's grants.
    """
    return await fetching.list_all(
        EVENTS_URL,
        options=options,
        into=events.Event.from_raw,
        timeout=timeout,
        settings=settings,
        context=context,
        logger=logger,
    )
