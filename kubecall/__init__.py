"""
The main module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kubecall._cogs.clients.errors import (
    APIError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
    APIPayloadError,
)
from kubecall._cogs.configs.configuration import (
    ClientSettings,
    NetworkingSettings,
    exponential_backoffs,
)
from kubecall._cogs.helpers.typedefs import (
    CallLogger,
    Logger,
)
from kubecall._cogs.helpers.versions import (
    version as __version__,
)
from kubecall._cogs.structs.bodies import (
    Pod,
    Job,
    Secret,
    labels_to_selector,
)
from kubecall._cogs.structs.credentials import (
    ConnectionInfo,
    LoginError,
)
from kubecall._cogs.structs.requests import (
    APIRequest,
)
from kubecall._core.clients import (
    Client,
    DEFAULT_NAMESPACE,
)
from kubecall._core.engines.loggers import (
    LogFormat,
    configure,
)
from kubecall._core.intents.piggybacking import (
    has_service_account,
    login_with_service_account,
)

__all__ = [
    'APIError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
    'APIPayloadError',
    'ClientSettings',
    'NetworkingSettings',
    'exponential_backoffs',
    'CallLogger',
    'Logger',
    'Pod',
    'Job',
    'Secret',
    'labels_to_selector',
    'ConnectionInfo',
    'LoginError',
    'APIRequest',
    'Client',
    'DEFAULT_NAMESPACE',
    'LogFormat',
    'configure',
    'has_service_account',
    'login_with_service_account',
]
