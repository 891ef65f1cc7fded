"""
Authentication-related structures.

The client handles only a rudimentary authentication directly: the things
passed to the HTTP protocol and TCP/SSL connection, and nothing more:

* The API server's base URL.
* SSL certificate authority (as a file or as PEM data).
* HTTP ``Authorization: Bearer token``.
* URL's default namespace for the cases when this is implied.

.. seealso::
    :func:`kubecall._core.intents.piggybacking.login_with_service_account`.
"""
import dataclasses
from typing import Optional


class LoginError(Exception):
    """ Raised when the client cannot obtain the credentials for the API. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """
    A single endpoint with specific credentials and connection flags to use.
    """
    server: str  # e.g. "https://kubernetes"
    token: Optional[str] = dataclasses.field(default=None, repr=False)
    ca_path: Optional[str] = None
    ca_data: Optional[bytes] = dataclasses.field(default=None, repr=False)
    default_namespace: Optional[str] = None
