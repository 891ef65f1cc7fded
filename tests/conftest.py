import dataclasses
import json
import re
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import aiohttp.test_utils
import aiohttp.web
import pytest

from kubecall._cogs.configs.configuration import ClientSettings
from kubecall._cogs.structs.credentials import ConnectionInfo
from kubecall._core.clients import Client

TOKEN = 'secret-token'


#
# A fake API server: a real HTTP server on localhost with programmable responses.
# No external calls must be made under any circumstances.
# The unit-tests must be fully isolated from the environment.
#


@dataclasses.dataclass(frozen=True)
class RecordedRequest:
    method: str
    path: str
    query: Dict[str, str]
    headers: Dict[str, str]
    data: bytes

    @property
    def json(self) -> Any:
        return json.loads(self.data.decode('utf-8'))


@dataclasses.dataclass(frozen=True)
class CannedResponse:
    status: int = 200
    body: Union[bytes, Callable[[RecordedRequest], bytes]] = b'{}'
    reason: Optional[str] = None


class FakeAPI:
    """
    Responses by method & path, in the order of their addition.

    A response is consumed once it is matched, unless it is the last one
    for its method & path: the last one is repeated for all further requests.
    Unknown routes respond with HTTP 404 (no retries are expected anyway).

    Sample usage::

        async def test_me(fake_api, client):
            fake_api.add('get', '/api/v1/namespaces/ns/pods/p', body=b'{"a": "b"}')
            await client.get_pod('p')
            assert len(fake_api.requests) == 1
    """

    def __init__(self) -> None:
        super().__init__()
        self.url = ''
        self.requests: List[RecordedRequest] = []
        self._routes: Dict[Tuple[str, str], List[CannedResponse]] = {}

    def add(
            self,
            method: str,
            path: str,
            *,
            status: int = 200,
            body: Union[bytes, Callable[[RecordedRequest], bytes]] = b'{}',
            reason: Optional[str] = None,
    ) -> None:
        key = (method.upper(), path)
        self._routes.setdefault(key, []).append(CannedResponse(status, body, reason))

    def echo(self, method: str, path: str) -> None:
        """ Respond with the request's own body. """
        self.add(method, path, body=lambda request: request.data)

    async def handle(self, request: aiohttp.web.Request) -> aiohttp.web.Response:
        recorded = RecordedRequest(
            method=request.method,
            path=request.path,
            query=dict(request.query),
            headers=dict(request.headers),
            data=await request.read(),
        )
        self.requests.append(recorded)

        canned = self._routes.get((request.method, request.path))
        if not canned:
            return aiohttp.web.Response(status=404, body=b'{"kind": "Status", "code": 404}')
        response = canned.pop(0) if len(canned) > 1 else canned[0]
        body = response.body(recorded) if callable(response.body) else response.body
        return aiohttp.web.Response(status=response.status, reason=response.reason, body=body,
                                    content_type='application/json')


@pytest.fixture()
async def fake_api():
    api = FakeAPI()
    app = aiohttp.web.Application()
    app.router.add_route('*', '/{tail:.*}', api.handle)
    server = aiohttp.test_utils.TestServer(app)
    await server.start_server()
    api.url = str(server.make_url('')).rstrip('/')
    try:
        yield api
    finally:
        await server.close()


#
# Clients, settings, credentials.
#


class CapturingLogger:
    """ A call logger that remembers the rendered messages. """

    def __init__(self) -> None:
        super().__init__()
        self.messages: List[str] = []

    def info(self, msg: str, *args: Any) -> None:
        self.messages.append(msg % args)


@pytest.fixture()
def ca_pem():
    """ A real self-signed CA certificate, valid for a century. """
    return (
        '-----BEGIN CERTIFICATE-----\n'
        'MIIBjTCCATOgAwIBAgIURaCCATtScvBD+A7+2iTZdAnUV9swCgYIKoZIzj0EAwIw\n'
        'GzEZMBcGA1UEAwwQa3ViZWNhbGwtdGVzdC1jYTAgFw0yNjEwMTUyMTM5MDNaGA8y\n'
        'MTI2MDkyMTIxMzkwM1owGzEZMBcGA1UEAwwQa3ViZWNhbGwtdGVzdC1jYTBZMBMG\n'
        'ByqGSM49AgEGCCqGSM49AwEHA0IABLkeeL/Ae61jkcC4W+prxuwkG7nD/RImw/6E\n'
        'Uyal5UeR5hv+juE/0McRdDoeFf8DqOyK0m5BjR5/Rx2ql2EbTAWjUzBRMB0GA1Ud\n'
        'DgQWBBSCpaQkrlegD/gFTGv5FvSXdT+nSTAfBgNVHSMEGDAWgBSCpaQkrlegD/gF\n'
        'TGv5FvSXdT+nSTAPBgNVHRMBAf8EBTADAQH/MAoGCCqGSM49BAMCA0gAMEUCIQCb\n'
        'hg+D0Vg5T3HnBtR0GF87tOKnhX14gWZlkKc/4pYY9wIgAqHiu2qkPkCXwgZHq5AM\n'
        'Nl9PReoZ+LuuiK8RWEbTJhQ=\n'
        '-----END CERTIFICATE-----\n'
    )


@pytest.fixture()
def call_logger():
    return CapturingLogger()


@pytest.fixture()
def settings():
    return ClientSettings()


@pytest.fixture()
def info(fake_api):
    return ConnectionInfo(server=fake_api.url, token=TOKEN)


@pytest.fixture()
async def client(info, settings, call_logger):
    async with Client(info, namespace='ns', settings=settings, logger=call_logger) as client:
        yield client


@pytest.fixture()
async def fake_client(call_logger):
    async with Client.fake(logger=call_logger) as client:
        yield client


@pytest.fixture(autouse=True)
def sleep_mock(mocker):
    """ Never sleep between the retries for real, but remember the intended delays. """
    return mocker.patch('kubecall._cogs.aiokits.aiotime.sleep')


@pytest.fixture()
def flaky_transport(client, mocker):
    """
    Make the client's session fail the first N requests on the transport level.

    The failing attempts never reach the server; the following ones do.
    Returns the mock of the session's request method to count the attempts.
    """
    session = client._get_context().session
    real_request = session.request

    def make_flaky(failures: int, exc: Optional[BaseException] = None):
        remaining = [exc or aiohttp.ClientConnectionError("boom")] * failures

        async def request(*args, **kwargs):
            if remaining:
                raise remaining.pop(0)
            return await real_request(*args, **kwargs)

        return mocker.patch.object(aiohttp.ClientSession, 'request', side_effect=request)

    return make_flaky


#
# Helpers for the logging checks.
#


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    def assert_logs_fn(patterns, prohibited=[], strict=False):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # The expected pattern is at position 0.
            # Looking-ahead: if one of the following patterns matches, while the
            # 0th does not, then the log message is missing, and we fail the test.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
                elif strict:
                    raise AssertionError(f"Unexpected log message: {message!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        # If all patterns have been matched in order, we are done.
        # if some are left, but the messages are over, then we fail.
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
