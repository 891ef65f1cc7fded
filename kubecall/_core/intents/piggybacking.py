"""
Login from the environment: the in-cluster service account.

Unlike other frameworks, there is no fallback to kubeconfigs or third-party
client libraries: the client is designed to run inside the pods only,
or in the fake mode in the tests and dry runs.
"""
import os
from typing import Optional

from kubecall._cogs.structs import credentials

# As per https://kubernetes.io/docs/tasks/run-application/access-api-from-pod/
TOKEN_PATH = '/var/run/secrets/kubernetes.io/serviceaccount/token'
CA_PATH = '/var/run/secrets/kubernetes.io/serviceaccount/ca.crt'
IN_CLUSTER_SERVER = 'https://kubernetes'


def has_service_account() -> bool:
    return os.path.exists(TOKEN_PATH)


def login_with_service_account(
        namespace: Optional[str] = None,
) -> credentials.ConnectionInfo:
    """
    Read the credentials of the pod's service account.

    Both the token and the certificate authority are mandatory: if either
    of them cannot be read, the login fails as a whole.
    """
    try:
        with open(TOKEN_PATH, encoding='utf-8') as f:
            token = f.read().strip()
        with open(CA_PATH, 'rb'):
            pass  # loaded by path when the SSL context is built
    except OSError as e:
        raise credentials.LoginError(f"Cannot read the service account: {e}") from e

    return credentials.ConnectionInfo(
        server=IN_CLUSTER_SERVER,
        token=token or None,
        ca_path=CA_PATH,
        default_namespace=namespace,
    )
