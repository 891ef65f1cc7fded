import pytest

from kubecall._cogs.structs.requests import APIRequest
from kubecall._core.clients import DEFAULT_NAMESPACE, Client


@pytest.fixture(autouse=True)
def no_network(mocker):
    """ Any attempt to allocate the network resources fails the test. """
    mocker.patch('aiohttp.ClientSession', side_effect=AssertionError("No sessions in fake mode!"))
    mocker.patch('aiohttp.TCPConnector', side_effect=AssertionError("No connectors in fake mode!"))


def test_fake_client_defaults():
    client = Client.fake()
    assert client.fake_mode is True
    assert client.namespace == DEFAULT_NAMESPACE == 'default'


def test_fake_client_in_a_namespace():
    client = Client.fake('ns')
    assert client.namespace == 'ns'


async def test_raw_requests_are_empty_objects(fake_client, sleep_mock):
    body = await fake_client.execute(APIRequest('POST', '/api/v1/anything', payload={'x': 'y'}))
    assert body == b'{}'
    assert not sleep_mock.called


async def test_typed_requests_are_empty_objects(fake_client):
    result = await fake_client.request(APIRequest('GET', '/api/v1/anything'), shape=dict)
    assert result == {}


@pytest.mark.parametrize('method, args, expected', [
    ('get_pod', ['pod1'], {}),
    ('list_pods', [{'a': 'b'}], []),
    ('create_pod', [{'metadata': {'name': 'pod1'}}], {}),
    ('delete_pod', ['pod1'], None),
    ('get_job', ['job1'], {}),
    ('list_jobs', [{'a': 'b'}], []),
    ('create_job', [{'metadata': {'name': 'job1'}}], {}),
    ('delete_job', ['job1'], None),
    ('patch_job', ['job1', {'spec': {}}], {}),
    ('patch_job_status', ['job1', {'status': {}}], {}),
    ('replace_secret', ['secret1', {'data': {'k': 'dg=='}}], None),
    ('get_log', ['pod1'], b'{}'),
])
async def test_all_operations_succeed_empty(fake_client, method, args, expected):
    result = await getattr(fake_client, method)(*args)
    assert result == expected


async def test_closing_is_harmless():
    client = Client.fake()
    await client.get_pod('pod1')
    await client.close()
    await client.close()
