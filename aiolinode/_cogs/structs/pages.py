"""
Paginated listings: the options going in, the pages coming out.

The API returns the collections page by page, each page wrapped as::

    {"page": 1, "pages": 9, "results": 4231, "data": [...]}

The filtering is done by an opaque JSON expression in the ``X-Filter`` header.
Its syntax belongs to the provider; `Filter` only helps to build the common
cases (exact matches & ordering), while any raw string is accepted as well.
"""
import collections.abc
import dataclasses
import enum
import json
from typing import Any, Dict, Generic, List, Mapping, Optional, Union

from aiolinode._cogs.clients import errors
from aiolinode._cogs.helpers import typedefs


@dataclasses.dataclass
class ListOptions:
    """
    The input of a listing call, and its output (written back after the call).

    If ``page`` is set (positive), only that page is fetched. Otherwise,
    all pages are fetched and aggregated. After the call, ``page`` remains
    as it was given by the caller, while ``last_page``, ``pages`` & ``results``
    are set as reported by the API for the last fetched page.
    """

    page: Optional[int] = None
    page_size: Optional[int] = None
    filter: Optional[Union[str, "Filter"]] = None

    # Populated by the listing calls.
    last_page: Optional[int] = None
    pages: Optional[int] = None
    results: Optional[int] = None

    @property
    def page_defined(self) -> bool:
        return self.page is not None and self.page > 0

    def to_params(self) -> Dict[str, str]:
        """ The query parameters shared by all page requests (except the page itself). """
        params: Dict[str, str] = {}
        if self.page_size is not None and self.page_size > 0:
            params['page_size'] = str(self.page_size)
        return params

    def to_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.filter:
            headers['X-Filter'] = str(self.filter)
        return headers


@dataclasses.dataclass(frozen=True)
class PaginatedResponse(Generic[typedefs.T]):
    page: int
    pages: int
    results: int
    data: List[typedefs.T]

    @classmethod
    def from_raw(
            cls,
            raw: typedefs.RawJSON,
            *,
            into: typedefs.Decoder[typedefs.T] = typedefs.identity,
    ) -> "PaginatedResponse[typedefs.T]":
        if not isinstance(raw, collections.abc.Mapping):
            raise errors.DecodingError(f"A paginated response must be an object, got {raw!r}.")
        data = raw.get('data', [])
        if not isinstance(data, list):
            raise errors.DecodingError(f"The paginated data must be a list, got {data!r}.")
        try:
            items = [into(item) for item in data]
            page = int(raw.get('page') or 1)
            pages = int(raw.get('pages') or 1)
            results = int(raw['results']) if raw.get('results') is not None else len(items)
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise errors.DecodingError(f"Cannot decode the paginated response: {e}") from e
        return cls(page=page, pages=pages, results=results, data=items)


class Order(str, enum.Enum):
    ASC = 'asc'
    DESC = 'desc'


@dataclasses.dataclass(frozen=True)
class Filter:
    """
    A builder of the provider's filter expressions.

    Usage::

        Filter({'region': 'us-east'}, order_by='created', order=Order.DESC)

    Renders ``{"+order": "desc", "+order_by": "created", "region": "us-east"}``.
    The rendering is deterministic (sorted keys), so it can be used in cache keys.
    """
    fields: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    order_by: Optional[str] = None
    order: Optional[Union[Order, str]] = None

    def to_json(self) -> Dict[str, Any]:
        result: Dict[str, Any] = dict(self.fields)
        if self.order_by is not None:
            result['+order_by'] = self.order_by
        if self.order is not None:
            result['+order'] = Order(self.order).value
        return result

    def __str__(self) -> str:
        return json.dumps(self.to_json(), sort_keys=True, separators=(',', ':'))
