"""
Authentication-related structures.

Only the rudimentary information is kept here: everything usable in a generic
HTTP client to reach the API, and nothing more than that:

* The API server's scheme, host & port, and the API version.
* HTTP ``Authorization: Bearer token``.
* SSL verification/ignorance flag.
* SSL certificate authority.

Loading of the credentials from the CLI tools' configuration files is not done.
The environment variables are supported as the minimal common denominator.
"""
import dataclasses
import os
from typing import Optional

DEFAULT_SERVER = 'https://api.linode.com'
DEFAULT_API_VERSION = 'v4'

TOKEN_ENV_VAR = 'LINODE_TOKEN'
SERVER_ENV_VAR = 'LINODE_URL'
API_VERSION_ENV_VAR = 'LINODE_API_VERSION'
CA_ENV_VAR = 'LINODE_CA'


class LoginError(Exception):
    """ Raised when the client cannot be configured to access the API. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """
    A single endpoint with specific credentials and connection flags to use.
    """
    server: str = DEFAULT_SERVER  # e.g. "https://api.linode.com"
    api_version: str = DEFAULT_API_VERSION
    token: Optional[str] = None
    ca_path: Optional[str] = None
    insecure: Optional[bool] = None

    @property
    def base_url(self) -> str:
        """ The root of all relative API URLs, e.g. ``https://api.linode.com/v4``. """
        server = self.server if '://' in self.server else f'https://{self.server}'
        return f"{server.rstrip('/')}/{self.api_version.strip('/')}"

    @classmethod
    def from_env(cls) -> "ConnectionInfo":
        ca_path = os.environ.get(CA_ENV_VAR) or None
        if ca_path is not None and not os.path.isfile(ca_path):
            raise LoginError(f"The CA certificate is not found: {ca_path}")
        return cls(
            server=os.environ.get(SERVER_ENV_VAR) or DEFAULT_SERVER,
            api_version=os.environ.get(API_VERSION_ENV_VAR) or DEFAULT_API_VERSION,
            token=os.environ.get(TOKEN_ENV_VAR) or None,
            ca_path=ca_path,
        )
