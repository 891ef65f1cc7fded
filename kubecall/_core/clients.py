"""
The client for the K8s API: pods, jobs, secrets, logs of one namespace.

All the resource methods are thin: they only describe the request and
the expected shape of the response, and pass them to `Client.request`,
which is the only place where the requests are actually executed.

Usage::

    async with Client.in_cluster('test-pods', logger=logger) as client:
        pods = await client.list_pods({'app': 'prow'})

For the tests and the dry runs, the same code can run without the API::

    async with Client.fake() as client:
        pods = await client.list_pods({'app': 'prow'})  # always empty
"""
import logging
import ssl
from typing import Any, List, Mapping, Optional, Type, TypeVar, cast

from kubecall._cogs.clients import api, auth
from kubecall._cogs.configs import configuration
from kubecall._cogs.helpers import typedefs
from kubecall._cogs.structs import bodies, credentials, requests
from kubecall._core.intents import piggybacking

DEFAULT_NAMESPACE = 'default'

logger = logging.getLogger('kubecall.clients')

_C = TypeVar('_C', bound='Client')


class Client:
    """
    Interacts with the K8s API server within a single namespace.

    If the call logger is set, all the public method calls are logged with it
    before they are executed. Secrets' payloads are never logged.

    The client is immutable after the construction and can be shared
    by many concurrent tasks. The only network resource is an aiohttp session,
    which is opened on the first call (or when entering the client's context)
    and must be closed by the owner (or by exiting the client's context).
    """

    def __init__(
            self,
            info: credentials.ConnectionInfo,
            *,
            namespace: Optional[str] = None,
            logger: Optional[typedefs.CallLogger] = None,
            settings: Optional[configuration.ClientSettings] = None,
            fake: bool = False,
    ) -> None:
        super().__init__()
        self._info = info
        self._namespace = namespace or info.default_namespace or DEFAULT_NAMESPACE
        self._logger = logger
        self._settings = settings if settings is not None else configuration.ClientSettings()
        self._fake = fake
        self._ssl_context: Optional[ssl.SSLContext] = None
        self._context: Optional[auth.APIContext] = None
        if not fake and (info.ca_path is not None or info.ca_data is not None):
            self._ssl_context = auth.make_ssl_context(info)

    @classmethod
    def fake(
            cls: Type[_C],
            namespace: str = DEFAULT_NAMESPACE,
            *,
            logger: Optional[typedefs.CallLogger] = None,
    ) -> _C:
        """ A client that does nothing: every call succeeds with an empty result. """
        info = credentials.ConnectionInfo(server='', default_namespace=namespace)
        return cls(info, namespace=namespace, logger=logger, fake=True)

    @classmethod
    def in_cluster(
            cls: Type[_C],
            namespace: str,
            *,
            logger: Optional[typedefs.CallLogger] = None,
            settings: Optional[configuration.ClientSettings] = None,
    ) -> _C:
        """ A client that works from within a pod, with the pod's service account. """
        info = piggybacking.login_with_service_account(namespace=namespace)
        return cls(info, namespace=namespace, logger=logger, settings=settings)

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def fake_mode(self) -> bool:
        return self._fake

    @property
    def server(self) -> str:
        return self._info.server

    @property
    def settings(self) -> configuration.ClientSettings:
        return self._settings

    async def __aenter__(self: _C) -> _C:
        self._get_context()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        context, self._context = self._context, None
        if context is not None:
            await context.close()

    def _get_context(self) -> auth.APIContext:
        # No awaiting between the check and the assignment: one session per client.
        if self._context is None:
            self._context = auth.APIContext(self._info, ssl_context=self._ssl_context,
                                            fake=self._fake)
        return self._context

    def _log(self, method_name: str, *args: Any) -> None:
        if self._logger is None:
            return
        self._logger.info("%s(%s)", method_name, ', '.join(str(arg) for arg in args))

    async def request(
            self,
            request: requests.APIRequest,
            *,
            shape: Any = None,
    ) -> Any:
        """
        Execute the request and parse the response into the shape (if not ``None``).
        """
        return await api.request(
            request,
            shape=shape,
            context=self._get_context(),
            settings=self._settings,
            logger=logger,
        )

    async def execute(self, request: requests.APIRequest) -> bytes:
        """ Execute the request and return the raw response body. """
        return await api.execute(
            request,
            context=self._get_context(),
            settings=self._settings,
            logger=logger,
        )

    async def get_pod(self, name: str) -> bodies.Pod:
        self._log('get_pod', name)
        return cast(bodies.Pod, await self.request(requests.APIRequest(
            method='GET',
            path=f'/api/v1/namespaces/{self._namespace}/pods/{name}',
        ), shape=dict))

    async def list_pods(self, labels: Mapping[str, str]) -> List[bodies.Pod]:
        self._log('list_pods', labels)
        result = cast(bodies.RawList, await self.request(requests.APIRequest(
            method='GET',
            path=f'/api/v1/namespaces/{self._namespace}/pods',
            query={'labelSelector': bodies.labels_to_selector(labels)},
        ), shape=dict))
        return list(result.get('items') or [])

    async def create_pod(self, pod: bodies.Pod) -> bodies.Pod:
        self._log('create_pod', pod)
        return cast(bodies.Pod, await self.request(requests.APIRequest(
            method='POST',
            path=f'/api/v1/namespaces/{self._namespace}/pods',
            payload=pod,
        ), shape=dict))

    async def delete_pod(self, name: str) -> None:
        self._log('delete_pod', name)
        await self.request(requests.APIRequest(
            method='DELETE',
            path=f'/api/v1/namespaces/{self._namespace}/pods/{name}',
        ))

    async def get_job(self, name: str) -> bodies.Job:
        self._log('get_job', name)
        return cast(bodies.Job, await self.request(requests.APIRequest(
            method='GET',
            path=f'/apis/batch/v1/namespaces/{self._namespace}/jobs/{name}',
        ), shape=dict))

    async def list_jobs(self, labels: Mapping[str, str]) -> List[bodies.Job]:
        self._log('list_jobs', labels)
        result = cast(bodies.RawList, await self.request(requests.APIRequest(
            method='GET',
            path=f'/apis/batch/v1/namespaces/{self._namespace}/jobs',
            query={'labelSelector': bodies.labels_to_selector(labels)},
        ), shape=dict))
        return list(result.get('items') or [])

    async def create_job(self, job: bodies.Job) -> bodies.Job:
        self._log('create_job', job)
        return cast(bodies.Job, await self.request(requests.APIRequest(
            method='POST',
            path=f'/apis/batch/v1/namespaces/{self._namespace}/jobs',
            payload=job,
        ), shape=dict))

    async def delete_job(self, name: str) -> None:
        self._log('delete_job', name)
        await self.request(requests.APIRequest(
            method='DELETE',
            path=f'/apis/batch/v1/namespaces/{self._namespace}/jobs/{name}',
        ))

    async def patch_job(self, name: str, job: bodies.Job) -> bodies.Job:
        self._log('patch_job', name, job)
        return cast(bodies.Job, await self.request(requests.APIRequest(
            method='PATCH',
            path=f'/apis/batch/v1/namespaces/{self._namespace}/jobs/{name}',
            payload=job,
        ), shape=dict))

    async def patch_job_status(self, name: str, job: bodies.Job) -> bodies.Job:
        self._log('patch_job_status', name, job)
        return cast(bodies.Job, await self.request(requests.APIRequest(
            method='PATCH',
            path=f'/apis/batch/v1/namespaces/{self._namespace}/jobs/{name}/status',
            payload=job,
        ), shape=dict))

    async def replace_secret(self, name: str, secret: bodies.Secret) -> None:
        self._log('replace_secret', name)  # never the secret itself!
        await self.request(requests.APIRequest(
            method='PUT',
            path=f'/api/v1/namespaces/{self._namespace}/secrets/{name}',
            payload=secret,
        ))

    async def get_log(self, pod: str) -> bytes:
        self._log('get_log', pod)
        return await self.execute(requests.APIRequest(
            method='GET',
            path=f'/api/v1/namespaces/{self._namespace}/pods/{pod}/log',
        ))
