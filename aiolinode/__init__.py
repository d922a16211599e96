"""
The main module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from aiolinode._cogs.clients.api import (
    request,
    get,
    post,
    put,
    delete,
)
from aiolinode._cogs.clients.auth import (
    APIContext,
)
from aiolinode._cogs.clients.caching import (
    ResponseCache,
    make_cache_key,
)
from aiolinode._cogs.clients.errors import (
    APIError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
    APITooManyRequestsError,
    APIServiceUnavailableError,
    DecodingError,
)
from aiolinode._cogs.clients.events import (
    list_events,
)
from aiolinode._cogs.clients.fetching import (
    list_all,
    list_all_cached,
)
from aiolinode._cogs.configs.configuration import (
    ClientSettings,
    NetworkingSettings,
    PollingSettings,
    CachingSettings,
)
from aiolinode._cogs.helpers.typedefs import (
    Logger,
)
from aiolinode._cogs.helpers.versions import (
    version as __version__,
)
from aiolinode._cogs.structs.credentials import (
    ConnectionInfo,
    LoginError,
)
from aiolinode._cogs.structs.events import (
    Event,
    EventEntity,
    EventStatus,
)
from aiolinode._cogs.structs.pages import (
    Filter,
    ListOptions,
    Order,
    PaginatedResponse,
)
from aiolinode._cogs.structs.references import (
    Resource,
    ResourceRegistry,
    UnknownResourceError,
    DEFAULT_RESOURCES,
    build_endpoint,
)
from aiolinode._core.client import (
    Client,
)
from aiolinode._core.loggers import (
    LogFormat,
    configure,
)
from aiolinode._core.waiting import (
    WaitError,
    WaitTimeoutError,
    ActionFailedError,
    find_event,
    wait_for_event_finished,
    wait_for_status,
)

__all__ = [
    'request', 'get', 'post', 'put', 'delete',
    'APIContext',
    'ResponseCache', 'make_cache_key',
    'APIError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
    'APITooManyRequestsError',
    'APIServiceUnavailableError',
    'DecodingError',
    'list_events',
    'list_all', 'list_all_cached',
    'ClientSettings',
    'NetworkingSettings',
    'PollingSettings',
    'CachingSettings',
    'Logger',
    'ConnectionInfo',
    'LoginError',
    'Event', 'EventEntity', 'EventStatus',
    'Filter', 'ListOptions', 'Order', 'PaginatedResponse',
    'Resource', 'ResourceRegistry', 'UnknownResourceError',
    'DEFAULT_RESOURCES', 'build_endpoint',
    'Client',
    'LogFormat', 'configure',
    'WaitError', 'WaitTimeoutError', 'ActionFailedError',
    'find_event', 'wait_for_event_finished', 'wait_for_status',
]
