"""
All configuration flags, options, settings to fine-tune a client.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The settings are passed explicitly into every API call (usually by `Client`).
There are no module-level variables to tweak: two clients in one process
can run with different settings without affecting each other.

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
"""
import dataclasses
import logging
import os
from typing import Iterable, Optional

from aiolinode._cogs.helpers import versions

DEBUG_ENV_VAR = 'LINODE_DEBUG'

_TRUTHY = {'1', 't', 'true', 'y', 'yes', 'on'}
_FALSY = {'0', 'f', 'false', 'n', 'no', 'off'}

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60
    """
    A total timeout of a single API request, in seconds.
    It covers the connection, the sending, and the reading of the response.
    """

    connect_timeout: Optional[float] = None
    """
    A connection timeout of a single API request, in seconds.
    """

    error_backoffs: Optional[Iterable[float]] = (1, 2, 4)
    """
    Delays between the retries of a failed request, in seconds.

    Only the retryable failures are retried: connectivity issues, timeouts,
    HTTP 408/429/503, and the provider's "Linode busy." responses.
    All other API errors are escalated immediately.

    The amount of delays defines the amount of retries: e.g., 3 delays
    mean 4 attempts in total. To disable retries, set it to ``[]`` or ``None``.
    """

    retry_max_wait: float = 30
    """
    The upper limit for the delay requested by the server via ``Retry-After``.
    """


@dataclasses.dataclass
class PollingSettings:

    interval: float = 3
    """
    How often (in seconds) to poll the events or the statuses while waiting.
    Affects all ``wait_for_*`` functions.
    """


@dataclasses.dataclass
class CachingSettings:

    enabled: bool = True
    """
    Should the cacheable listings (e.g. the pricing catalogues) be cached?
    If disabled, every call goes to the API as for the regular listings.
    """

    expiry: float = 15 * 60
    """
    For how long (in seconds) the cached listing is considered actual.
    """


@dataclasses.dataclass
class ClientSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    polling: PollingSettings = dataclasses.field(default_factory=PollingSettings)
    caching: CachingSettings = dataclasses.field(default_factory=CachingSettings)

    user_agent: str = f'aiolinode/{versions.version or "unknown"}'
    """
    It is a good practice to self-identify a bit.
    """

    debug: bool = False
    """
    Should the requests & responses be logged in details (at the debug level)?
    """

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """
        Construct the default settings with the overrides from the environment.
        """
        settings = cls()
        value = os.environ.get(DEBUG_ENV_VAR)
        if value is not None:
            if value.strip().lower() in _TRUTHY:
                settings.debug = True
            elif value.strip().lower() in _FALSY:
                settings.debug = False
            else:
                logger.warning(f"{DEBUG_ENV_VAR} should be a boolean, such as 0 or 1; "
                               f"got {value!r}. Ignoring.")
        return settings
