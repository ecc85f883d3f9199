import pytest

from clientaggregator import AggregatingClient, GroupVersionKind, Scheme
from clientaggregator.testing import FakeClient

VERBS = ['get', 'list', 'create', 'update', 'delete', 'patch', 'delete_all_of', 'watch']
SUBRESOURCE_VERBS = ['get', 'create', 'update', 'patch']
STATUS_VERBS = ['create', 'update', 'patch']


class Unregistered:
    """ A 3rd-party class which the scheme knows nothing about. """


class TypedDeployment:
    """ A 3rd-party class registered in the scheme as a Deployment. """


@pytest.fixture()
def scheme():
    scheme = Scheme()
    scheme.add_known_type(GroupVersionKind('apps', 'v1', 'Deployment'), TypedDeployment)
    scheme.add_known_type(GroupVersionKind('batch', 'v1', 'Job'))
    scheme.add_known_type(GroupVersionKind('batch', 'v1', 'CronJob'))
    scheme.add_known_type(GroupVersionKind('', 'v1', 'Pod'))
    scheme.add_known_type(GroupVersionKind('', 'v1', 'Namespace'), namespaced=False)
    return scheme


@pytest.fixture()
def deployment():
    return {'apiVersion': 'apps/v1', 'kind': 'Deployment',
            'metadata': {'name': 'deploy1', 'namespace': 'ns1'},
            'spec': {'replicas': 1}}


@pytest.fixture()
def job():
    return {'apiVersion': 'batch/v1', 'kind': 'Job',
            'metadata': {'name': 'job1', 'namespace': 'ns1'},
            'spec': {'parallelism': 1}}


@pytest.fixture()
def cronjob():
    return {'apiVersion': 'batch/v1', 'kind': 'CronJob',
            'metadata': {'name': 'cronjob1', 'namespace': 'ns1'},
            'spec': {'schedule': '* * * * *'}}


@pytest.fixture()
def pod():
    return {'apiVersion': 'v1', 'kind': 'Pod',
            'metadata': {'name': 'pod1', 'namespace': 'ns1'},
            'spec': {'containers': []}}


@pytest.fixture()
def unresolvable():
    return Unregistered()


@pytest.fixture()
def typed_deployment():
    return TypedDeployment()


#
# Fake backends: in-memory, so that it is visible which of them has served the calls.
#


@pytest.fixture()
def fake_d(scheme):
    return FakeClient(scheme, name='D')


@pytest.fixture()
def fake_a(scheme):
    return FakeClient(scheme, name='A')


@pytest.fixture()
def fake_b(scheme):
    return FakeClient(scheme, name='B')


@pytest.fixture()
def fake_aggregator(fake_d, fake_a, fake_b):
    client = AggregatingClient(fake_d)
    client.add_group('apps', fake_a)
    client.add_group_kind('batch', 'Job', fake_b)
    return client


#
# Mocked backends: to check the exact arguments and results of the delegation.
#


@pytest.fixture()
def backend_factory(mocker, scheme):
    def make_backend(name):
        backend = mocker.Mock(name=name)
        backend.scheme = scheme
        for verb in VERBS:
            setattr(backend, verb, mocker.AsyncMock(name=f'{name}.{verb}'))

        subresource = mocker.Mock(name=f'{name}.subresource()')
        for verb in SUBRESOURCE_VERBS:
            setattr(subresource, verb, mocker.AsyncMock(name=f'{name}.subresource().{verb}'))
        backend.subresource = mocker.Mock(return_value=subresource)

        status = mocker.Mock(name=f'{name}.status()')
        for verb in STATUS_VERBS:
            setattr(status, verb, mocker.AsyncMock(name=f'{name}.status().{verb}'))
        backend.status = mocker.Mock(return_value=status)

        backend.gvk_for = mocker.Mock(name=f'{name}.gvk_for')
        backend.is_namespaced = mocker.Mock(name=f'{name}.is_namespaced')
        return backend
    return make_backend


@pytest.fixture()
def mock_d(backend_factory):
    return backend_factory('D')


@pytest.fixture()
def mock_a(backend_factory):
    return backend_factory('A')


@pytest.fixture()
def mock_b(backend_factory):
    return backend_factory('B')


@pytest.fixture()
def aggregator(mock_d, mock_a, mock_b):
    client = AggregatingClient(mock_d)
    client.add_group('apps', mock_a)
    client.add_group_kind('batch', 'Job', mock_b)
    return client
