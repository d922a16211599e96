"""
Waiting for the asynchronous actions to complete.

Most of the mutating API calls only schedule the actions (e.g. a boot,
a resize, a disk creation) and return immediately. The outcome of the action
is reported later via the account's events, or via the entity's status.

The event-based waiting is best-effort: the API cannot filter the events
by entity or action server-side, so the recent events are fetched and filtered
locally. A burst of unrelated events can push the awaited event off the fetched
page before it is noticed; in that case, the waiting times out.
"""
import asyncio
import datetime
from typing import Iterable, Optional, Union

import aiohttp

from aiolinode._cogs.clients import api, auth
from aiolinode._cogs.clients import events as event_clients
from aiolinode._cogs.configs import configuration
from aiolinode._cogs.helpers import typedefs
from aiolinode._cogs.structs import events, pages

# The newest events first; only the first page of them is checked per poll.
EVENTS_FILTER = pages.Filter(order_by='created', order=pages.Order.DESC)


class WaitError(Exception):
    """ A base for the failed waits. Not an API error: the API calls succeeded. """

    def __init__(
            self,
            message: str,
            *,
            entity_type: str,
            entity_id: Optional[events.EntityId],
            action: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.action = action


class WaitTimeoutError(WaitError):
    """ The awaited condition did not happen within the specified time. """

    def __init__(
            self,
            message: str,
            *,
            timeout: float,
            entity_type: str,
            entity_id: Optional[events.EntityId],
            action: Optional[str] = None,
    ) -> None:
        super().__init__(message, entity_type=entity_type, entity_id=entity_id, action=action)
        self.timeout = timeout


class ActionFailedError(WaitError):
    """ The awaited action has finished, but unsuccessfully. """

    def __init__(
            self,
            message: str,
            *,
            event: events.Event,
            entity_type: str,
            entity_id: Optional[events.EntityId],
            action: Optional[str] = None,
    ) -> None:
        super().__init__(message, entity_type=entity_type, entity_id=entity_id, action=action)
        self.event = event


def _as_utc(moment: datetime.datetime) -> datetime.datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=datetime.timezone.utc)


def find_event(
        candidates: Iterable[events.Event],
        *,
        entity_type: str,
        action: str,
        min_start: datetime.datetime,
) -> Optional[events.Event]:
    """
    Find the first (i.e. the newest) event of the specific action & entity type.

    The events created at or before ``min_start`` are ignored: they are leftovers
    of the previous actions, which happened before the awaited one was initiated.
    """
    min_start = _as_utc(min_start)
    for event in candidates:
        if event.action != action:
            continue
        if event.entity is None or event.entity.type != entity_type:
            continue
        if event.created is None or not event.created > min_start:
            continue
        return event
    return None


async def wait_for_event_finished(
        entity_id: Optional[events.EntityId],
        entity_type: str,
        action: str,
        *,
        min_start: datetime.datetime,
        timeout: float,
        request_timeout: Optional[aiohttp.ClientTimeout] = None,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        logger: typedefs.Logger,
) -> events.Event:
    """
    Wait until the action on the entity is finished, and return its event.

    Raises `ActionFailedError` if the action has failed, `WaitTimeoutError`
    if no finished/failed event is seen within ``timeout`` seconds.
    The API errors of the polling requests are escalated as they are.

    To stop waiting prematurely, cancel the task that waits.
    """
    loop = asyncio.get_running_loop()
    started = loop.time()
    what = f"{entity_type} {entity_id} action {action}"
    while True:
        options = pages.ListOptions(page=1, filter=str(EVENTS_FILTER))
        recent = await event_clients.list_events(
            options=options,
            timeout=request_timeout,
            settings=settings,
            context=context,
            logger=logger,
        )
        event = find_event(recent, entity_type=entity_type, action=action, min_start=min_start)
        if event is not None:
            if event.status == events.EventStatus.FAILED:
                raise ActionFailedError(
                    f"{entity_type.title()} {entity_id} action {action} failed.",
                    event=event, entity_type=entity_type, entity_id=entity_id, action=action)
            elif event.status == events.EventStatus.FINISHED:
                logger.debug(f"The {what} is finished (event {event.id}).")
                return event
            else:
                status = getattr(event.status, 'value', event.status)
                logger.debug(f"The {what} is {status} (event {event.id}, "
                             f"{event.percent_complete}% complete). Still waiting.")

        await asyncio.sleep(settings.polling.interval)  # cancellable.

        elapsed = loop.time() - started
        if elapsed > timeout:
            raise WaitTimeoutError(
                f"Timed out waiting for the {what} to finish after {timeout}s.",
                timeout=timeout, entity_type=entity_type, entity_id=entity_id, action=action)


async def wait_for_status(
        url: str,  # relative to the API root, or absolute.
        target: Union[str, Iterable[str]],
        *,
        timeout: float,
        field: str = 'status',
        entity_type: Optional[str] = None,
        entity_id: Optional[events.EntityId] = None,
        request_timeout: Optional[aiohttp.ClientTimeout] = None,
        settings: configuration.ClientSettings,
        context: auth.APIContext,
        logger: typedefs.Logger,
) -> typedefs.RawBody:
    """
    Wait until the entity's field (usually, ``status``) reaches the target value(s).

    E.g. until an instance is ``"running"``, or a volume is ``"active"``.
    Returns the last fetched body of the entity.
    """
    targets = {target} if isinstance(target, str) else set(target)
    entity_type = entity_type if entity_type is not None else url
    loop = asyncio.get_running_loop()
    started = loop.time()
    while True:
        body: typedefs.RawBody = await api.get(
            url,
            timeout=request_timeout,
            settings=settings,
            context=context,
            logger=logger,
        )
        value = body.get(field) if isinstance(body, dict) else None
        if value in targets:
            return body

        logger.debug(f"The {entity_type} {entity_id} {field} is {value!r}; "
                     f"waiting for {sorted(targets)!r}.")
        await asyncio.sleep(settings.polling.interval)  # cancellable.

        elapsed = loop.time() - started
        if elapsed > timeout:
            raise WaitTimeoutError(
                f"Timed out waiting for the {entity_type} {entity_id} {field} "
                f"to become {sorted(targets)!r} after {timeout}s; last seen: {value!r}.",
                timeout=timeout, entity_type=entity_type, entity_id=entity_id)
