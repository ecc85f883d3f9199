import pytest

from clientaggregator import DryRun, Patch, StatusWriter, SubResourceBody, SubResourceClient
from clientaggregator._cogs.clients import errors


@pytest.fixture()
def scale_payload():
    return {'apiVersion': 'autoscaling/v1', 'kind': 'Scale', 'spec': {'replicas': 3}}


@pytest.fixture()
def eviction_payload():
    return {'apiVersion': 'policy/v1', 'kind': 'Eviction', 'metadata': {'name': 'pod1'}}


def test_subresource_proxy_creation(aggregator):
    proxy = aggregator.subresource('scale')
    assert isinstance(proxy, SubResourceClient)
    assert proxy.name == 'scale'
    assert repr(proxy) == "<SubResourceClient 'scale'>"


def test_subresource_proxy_resolves_nothing_when_created(aggregator, mocker):
    resolve = mocker.patch.object(aggregator, 'resolve')
    aggregator.subresource('scale')
    aggregator.status()
    assert not resolve.called


def test_status_proxy_creation(aggregator):
    proxy = aggregator.status()
    assert isinstance(proxy, StatusWriter)
    assert not hasattr(proxy, 'get')


async def test_subresource_get(aggregator, mock_a, mock_d, deployment, scale_payload):
    result = await aggregator.subresource('scale').get(deployment, scale_payload, DryRun())
    subresource = mock_a.subresource.return_value
    assert result is subresource.get.return_value
    mock_a.subresource.assert_called_once_with('scale')
    subresource.get.assert_awaited_once_with(deployment, scale_payload, DryRun())
    assert not mock_d.subresource.called


async def test_subresource_create(aggregator, mock_d, pod, eviction_payload):
    result = await aggregator.subresource('eviction').create(pod, eviction_payload)
    subresource = mock_d.subresource.return_value
    assert result is subresource.create.return_value
    mock_d.subresource.assert_called_once_with('eviction')
    subresource.create.assert_awaited_once_with(pod, eviction_payload)


async def test_subresource_update(aggregator, mock_b, job):
    opts = (SubResourceBody({'spec': {'parallelism': 2}}),)
    result = await aggregator.subresource('scale').update(job, *opts)
    subresource = mock_b.subresource.return_value
    assert result is subresource.update.return_value
    mock_b.subresource.assert_called_once_with('scale')
    subresource.update.assert_awaited_once_with(job, *opts)


async def test_subresource_patch(aggregator, mock_a, deployment):
    patch = Patch.merge({'spec': {'replicas': 5}})
    result = await aggregator.subresource('scale').patch(deployment, patch)
    subresource = mock_a.subresource.return_value
    assert result is subresource.patch.return_value
    subresource.patch.assert_awaited_once_with(deployment, patch)


async def test_subresource_routed_by_primary_object_not_payload(
        aggregator, mock_a, mock_b, mock_d, deployment, job, pod):
    # The payloads are of kinds routed elsewhere, but they must not affect the routing.
    proxy = aggregator.subresource('scale')
    await proxy.get(deployment, job)
    await proxy.get(deployment, pod)
    await proxy.create(deployment, job)
    await proxy.create(deployment, {'kind': 'Whatever'})
    assert mock_a.subresource.return_value.get.await_count == 2
    assert mock_a.subresource.return_value.create.await_count == 2
    assert not mock_b.subresource.called
    assert not mock_d.subresource.called


async def test_subresource_resolves_on_every_call(aggregator, mock_a, mock_b, deployment, scale_payload):
    proxy = aggregator.subresource('scale')
    await proxy.get(deployment, scale_payload)
    aggregator.add_group('apps', mock_b)
    await proxy.get(deployment, scale_payload)
    assert mock_a.subresource.return_value.get.await_count == 1
    assert mock_b.subresource.return_value.get.await_count == 1


async def test_subresource_errors_are_propagated_untouched(aggregator, mock_a, deployment, scale_payload):
    error = errors.make_error(404, 'NotFound', "No such sub-resource.")
    mock_a.subresource.return_value.get.side_effect = error
    with pytest.raises(errors.APINotFoundError) as e:
        await aggregator.subresource('unknown').get(deployment, scale_payload)
    assert e.value is error


async def test_status_create(aggregator, mock_b, job):
    payload = {'status': {'active': 1}}
    result = await aggregator.status().create(job, payload)
    status = mock_b.status.return_value
    assert result is status.create.return_value
    status.create.assert_awaited_once_with(job, payload)
    assert not mock_b.subresource.called


async def test_status_update(aggregator, mock_a, deployment):
    result = await aggregator.status().update(deployment, DryRun())
    status = mock_a.status.return_value
    assert result is status.update.return_value
    status.update.assert_awaited_once_with(deployment, DryRun())


async def test_status_patch(aggregator, mock_d, unresolvable):
    patch = Patch.json([{'op': 'replace', 'path': '/status/phase', 'value': 'Done'}])
    result = await aggregator.status().patch(unresolvable, patch)
    status = mock_d.status.return_value
    assert result is status.patch.return_value
    status.patch.assert_awaited_once_with(unresolvable, patch)


async def test_status_routed_by_primary_object_not_payload(aggregator, mock_b, mock_a, mock_d, job, deployment):
    await aggregator.status().create(job, deployment)
    await aggregator.status().create(job, {'apiVersion': 'v1', 'kind': 'Pod'})
    assert mock_b.status.return_value.create.await_count == 2
    assert not mock_a.status.called
    assert not mock_d.status.called


async def test_status_errors_are_propagated_untouched(aggregator, mock_b, job):
    error = errors.make_error(409, 'Conflict', "Modified.")
    mock_b.status.return_value.update.side_effect = error
    with pytest.raises(errors.APIConflictError) as e:
        await aggregator.status().update(job)
    assert e.value is error
