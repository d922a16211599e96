from typing import List, Optional

import aiohttp

from aiolinode._cogs.clients import api, auth, caching
from aiolinode._cogs.configs import configuration
from aiolinode._cogs.helpers import typedefs
from aiolinode._cogs.structs import pages


async def list_all(
        url: str,  # relative to the API root, or absolute.
        *,
        options: Optional[pages.ListOptions] = None,
        into: typedefs.Decoder[typedefs.T] = typedefs.identity,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        logger: typedefs.Logger,
) -> List[typedefs.T]:
    """
    List the items of a paginated endpoint: all pages, or one specific page.

    If the options have a page explicitly set, only that page is fetched,
    regardless of how many pages are there. Otherwise, all pages are fetched
    sequentially starting from the 1st one, and aggregated in their order.
    The number of pages is taken from the 1st page and is not re-read later.

    Any failed page fails the whole call: no partial results are returned.

    The options are updated with the last fetched page number, the number
    of pages, and the number of results -- for the caller's introspection.

    If the collection is modified while the pages are fetched, the aggregated
    result can be inconsistent (e.g. have duplicates or miss some items).
    There is no way to detect or prevent this with the page-numbered API.
    """
    options = options if options is not None else pages.ListOptions()

    # The same base request for all pages; only the page number varies.
    params = options.to_params()
    headers = options.to_headers()

    result: List[typedefs.T] = []

    async def fetch_page(page: int) -> pages.PaginatedResponse[typedefs.T]:
        raw = await api.get(
            url=url,
            params=dict(params, page=str(page)),
            headers=headers,
            timeout=timeout,
            settings=settings,
            context=context,
            logger=logger,
        )
        response = pages.PaginatedResponse.from_raw(raw, into=into)
        options.last_page = page
        options.pages = response.pages
        options.results = response.results
        result.extend(response.data)
        return response

    starting_page = options.page if options.page_defined else 1
    assert starting_page is not None  # for type-checking
    first = await fetch_page(starting_page)
    logger.debug(f"Fetched page {starting_page}/{first.pages} of {url}: {len(first.data)} items.")

    # If the caller has explicitly specified a page, no other pages are needed.
    if options.page_defined:
        return result

    for page in range(2, first.pages + 1):
        response = await fetch_page(page)
        logger.debug(f"Fetched page {page}/{first.pages} of {url}: {len(response.data)} items.")
        if response.pages != first.pages or response.results != first.results:
            logger.debug(f"The listing of {url} has changed while paginating: "
                         f"{first.pages} pages & {first.results} results at first, "
                         f"{response.pages} pages & {response.results} results now.")

    return result


async def list_all_cached(
        url: str,  # relative to the API root, or absolute.
        *,
        cache: caching.ResponseCache,
        options: Optional[pages.ListOptions] = None,
        into: typedefs.Decoder[typedefs.T] = typedefs.identity,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        logger: typedefs.Logger,
) -> List[typedefs.T]:
    """
    The same as `list_all`, but served from the cache if fetched recently.

    On a cache hit, no requests are made, and the options are not updated.
    The concurrent misses of the same key make only one fetch: the others wait
    and then get the fetched result (or make their own attempt if it failed).
    """
    if not settings.caching.enabled:
        return await list_all(url, options=options, into=into, timeout=timeout,
                              settings=settings, context=context, logger=logger)

    key = caching.make_cache_key(url, options)
    async with cache.key_lock(key):
        cached: Optional[List[typedefs.T]] = await cache.get(key)
        if cached is not None:
            logger.debug(f"Serving {url} from the cache.")
            return cached

        result = await list_all(url, options=options, into=into, timeout=timeout,
                                settings=settings, context=context, logger=logger)
        await cache.put(key, result, expiry=settings.caching.expiry)
        return result
