import asyncio
import collections.abc
import itertools
from typing import Iterable, Mapping, Optional

import aiohttp

from aiolinode._cogs.clients import auth, errors
from aiolinode._cogs.configs import configuration
from aiolinode._cogs.helpers import typedefs

RETRYABLE_STATUSES = frozenset({408, 429, 503})


def is_retryable(e: errors.APIError) -> bool:
    return e.status in RETRYABLE_STATUSES or errors.is_busy(e)


async def request(
        method: str,
        url: str,  # relative to the API root, or absolute.
        *,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        payload: Optional[object] = None,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    """
    Perform one HTTP request and return the checked but unparsed response.

    The ``payload`` of ``None`` means no body at all: not even a JSON ``null``,
    which is rejected by the API on the endpoints with no required fields.
    """
    url = context.get_url(url)

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    backoffs: Iterable[float]
    backoffs = settings.networking.error_backoffs or []
    backoffs = backoffs if isinstance(backoffs, collections.abc.Iterable) else [backoffs]
    count = len(backoffs) + 1 if isinstance(backoffs, collections.abc.Sized) else None
    backoff: Optional[float]
    for retry, backoff in enumerate(itertools.chain(backoffs, [None]), start=1):
        idx = f"#{retry}/{count}" if count is not None else f"#{retry}"
        what = f"{method.upper()} {url}"
        try:
            if retry > 1:
                logger.debug(f"Request attempt {idx}: {what}")
            if settings.debug:
                logger.debug(f"Requesting {what} with params={params!r}, payload={payload!r}")

            response = await context.session.request(
                method=method.upper(),
                url=url,
                params=params,
                headers=headers,
                timeout=timeout,
                **({} if payload is None else {'json': payload}),
            )
            await errors.check_response(response)  # but do not parse it!

        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            if backoff is None:  # i.e. the last or the only attempt.
                logger.error(f"Request attempt {idx} failed; escalating: {what} -> {e!r}")
                raise
            else:
                logger.error(f"Request attempt {idx} failed; will retry: {what} -> {e!r}")
                await asyncio.sleep(backoff)  # cancellable.

        except errors.APIError as e:
            if not is_retryable(e):
                raise
            elif backoff is None:  # i.e. the last or the only attempt.
                if retry > 1:
                    logger.error(f"Request attempt {idx} failed; escalating: {what} -> {e}")
                raise
            delay = backoff
            if e.retry_after is not None:
                delay = min(e.retry_after, settings.networking.retry_max_wait)
            logger.error(f"Request attempt {idx} failed; will retry in {delay}s: {what} -> {e}")
            await asyncio.sleep(delay)  # cancellable.

        else:
            if retry > 1:
                logger.debug(f"Request attempt {idx} succeeded: {what}")
            if settings.debug:
                logger.debug(f"Response for {what}: {response.status}")
            return response

    raise RuntimeError("Broken retryable routine.")  # impossible, but needed for type-checking.


def decode(
        raw: typedefs.RawJSON,
        into: typedefs.Decoder[typedefs.T],
) -> typedefs.T:
    """
    Convert the raw JSON value into the caller's type, uniformly reporting the failures.
    """
    try:
        return into(raw)
    except errors.DecodingError:
        raise
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        raise errors.DecodingError(f"Cannot decode the response with {into!r}: {e!r}") from e


async def get(
        url: str,  # relative to the API root, or absolute.
        *,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        into: typedefs.Decoder[typedefs.T] = typedefs.identity,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> typedefs.T:
    response = await request(
        method='get',
        url=url,
        params=params,
        headers=headers,
        timeout=timeout,
        settings=settings,
        context=context,
        logger=logger,
    )
    async with response:
        raw = await errors.parse_response(response)
    return decode(raw, into)


async def post(
        url: str,  # relative to the API root, or absolute.
        *,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        into: typedefs.Decoder[typedefs.T] = typedefs.identity,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> typedefs.T:
    response = await request(
        method='post',
        url=url,
        payload=payload,
        headers=headers,
        timeout=timeout,
        settings=settings,
        context=context,
        logger=logger,
    )
    async with response:
        raw = await errors.parse_response(response)
    return decode(raw, into)


async def put(
        url: str,  # relative to the API root, or absolute.
        *,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        into: typedefs.Decoder[typedefs.T] = typedefs.identity,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> typedefs.T:
    response = await request(
        method='put',
        url=url,
        payload=payload,
        headers=headers,
        timeout=timeout,
        settings=settings,
        context=context,
        logger=logger,
    )
    async with response:
        raw = await errors.parse_response(response)
    return decode(raw, into)


async def delete(
        url: str,  # relative to the API root, or absolute.
        *,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        logger: typedefs.Logger,
) -> None:
    response = await request(
        method='delete',
        url=url,
        headers=headers,
        timeout=timeout,
        settings=settings,
        context=context,
        logger=logger,
    )
    async with response:
        pass
