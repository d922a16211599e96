"""
The account's events: the records of actions taken on the account's entities.

The events are produced by the provider only. The library never creates them,
it only reads them (mostly for waiting until some action is finished).
"""
import collections.abc
import dataclasses
import datetime
import enum
from typing import Optional, Union

import iso8601

from aiolinode._cogs.clients import errors
from aiolinode._cogs.helpers import typedefs

EntityId = Union[int, str]


class EventStatus(str, enum.Enum):
    SCHEDULED = 'scheduled'
    STARTED = 'started'
    FINISHED = 'finished'
    FAILED = 'failed'
    NOTIFICATION = 'notification'

    @property
    def terminal(self) -> bool:
        return self in (EventStatus.FINISHED, EventStatus.FAILED)


def parse_timestamp(value: Optional[str]) -> Optional[datetime.datetime]:
    """
    Parse the API's timestamps. The API omits the timezone, but means UTC.
    """
    if not value:
        return None
    return iso8601.parse_date(value, default_timezone=datetime.timezone.utc)


def parse_status(value: Optional[str]) -> Union[EventStatus, str, None]:
    if value is None:
        return None
    try:
        return EventStatus(value)
    except ValueError:
        return value  # a new status unknown to this library; keep it as is.


@dataclasses.dataclass(frozen=True)
class EventEntity:
    """
    The entity affected by an event: e.g. a compute instance, a volume, etc.
    """
    id: Optional[EntityId]
    type: Optional[str]
    label: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: typedefs.RawBody) -> "EventEntity":
        if not isinstance(raw, collections.abc.Mapping):
            raise errors.DecodingError(f"An event's entity must be an object, got {raw!r}.")
        return cls(
            id=raw.get('id'),
            type=raw.get('type'),
            label=raw.get('label'),
            url=raw.get('url'),
        )


@dataclasses.dataclass(frozen=True)
class Event:
    id: int
    action: str
    status: Union[EventStatus, str, None]
    entity: Optional[EventEntity]
    created: Optional[datetime.datetime]
    username: Optional[str] = None
    percent_complete: Optional[int] = None
    time_remaining: Optional[Union[int, str]] = None
    seen: bool = False
    read: bool = False

    @classmethod
    def from_raw(cls, raw: typedefs.RawJSON) -> "Event":
        if not isinstance(raw, collections.abc.Mapping):
            raise errors.DecodingError(f"An event must be an object, got {raw!r}.")
        entity = raw.get('entity')
        try:
            return cls(
                id=raw['id'],
                action=raw.get('action') or '',
                status=parse_status(raw.get('status')),
                entity=EventEntity.from_raw(entity) if entity else None,
                created=parse_timestamp(raw.get('created')),
                username=raw.get('username'),
                percent_complete=raw.get('percent_complete'),
                time_remaining=raw.get('time_remaining'),
                seen=bool(raw.get('seen')),
                read=bool(raw.get('read')),
            )
        except (KeyError, iso8601.ParseError) as e:
            raise errors.DecodingError(f"Cannot decode the event: {e!r}") from e
