"""
All configuration settings to fine-tune the client.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The settings are read on every call and are never modified by the client
itself. They can be modified by the users between the calls (e.g. in tests),
but such modifications are not synchronised with the calls in flight.
"""
import dataclasses
from typing import Iterable, List, Optional

DEFAULT_RETRY_ATTEMPTS = 8
DEFAULT_RETRY_DELAY = 2.0


def exponential_backoffs(
        initial: float = DEFAULT_RETRY_DELAY,
        attempts: int = DEFAULT_RETRY_ATTEMPTS,
) -> List[float]:
    """
    The delays between the attempts, doubling from the initial one.

    There is one delay less than there are attempts: nothing is slept
    neither before the first attempt, nor after the last one.
    """
    return [initial * 2 ** idx for idx in range(max(0, attempts - 1))]


@dataclasses.dataclass
class NetworkingSettings:

    error_backoffs: Iterable[float] = dataclasses.field(default_factory=exponential_backoffs)
    """
    Backoffs in seconds between the attempts if the API cannot be reached.

    Only the transport-level failures are retried: the connectivity issues,
    DNS resolution failures, timeouts. An HTTP response with any status,
    including the server errors, is a valid response and is never retried.

    The number of attempts is the number of backoffs plus one. An empty list
    disables the retries (the only attempt is made).

    The default is 8 attempts with 2, 4, 8, ... 128 seconds between them.
    """

    request_timeout: Optional[float] = None
    """
    A total timeout of one attempt, including the body transfer.
    If ``None`` (the default), the attempt can last forever.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for establishing a TCP/SSL connection in one attempt.
    If ``None`` (the default), only the ``request_timeout`` limits it.
    """


@dataclasses.dataclass
class ClientSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
