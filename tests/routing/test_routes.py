import threading

import pytest

from clientaggregator import GroupKind, GroupVersionKind, Precedence, Routes


def test_creation_with_no_routes():
    routes = Routes('default')
    assert routes.default == 'default'
    assert dict(routes.groups) == {}
    assert dict(routes.kinds) == {}


@pytest.mark.parametrize('gvk', [
    None,
    GroupVersionKind('', 'v1', 'Pod'),
    GroupVersionKind('apps', 'v1', 'Deployment'),
])
def test_default_when_no_routes(gvk):
    routes = Routes('default')
    assert routes.select(gvk) == 'default'


def test_default_when_no_gvk_despite_routes():
    routes = Routes('default')
    routes.add_group('', 'core')
    routes.add_group_kind(GroupKind('', 'Pod'), 'pods')
    assert routes.select(None) == 'default'


def test_group_route():
    routes = Routes('default')
    routes.add_group('apps', 'A')
    assert routes.select(GroupVersionKind('apps', 'v1', 'Deployment')) == 'A'
    assert routes.select(GroupVersionKind('apps', 'v1beta1', 'StatefulSet')) == 'A'
    assert routes.select(GroupVersionKind('batch', 'v1', 'Job')) == 'default'


def test_core_group_route():
    routes = Routes('default')
    routes.add_group('', 'core')
    assert routes.select(GroupVersionKind('', 'v1', 'Pod')) == 'core'
    assert routes.select(GroupVersionKind('apps', 'v1', 'Deployment')) == 'default'


def test_group_kind_route_ignores_versions():
    routes = Routes('default')
    routes.add_group_kind(GroupKind('batch', 'Job'), 'B')
    assert routes.select(GroupVersionKind('batch', 'v1', 'Job')) == 'B'
    assert routes.select(GroupVersionKind('batch', 'v2alpha1', 'Job')) == 'B'
    assert routes.select(GroupVersionKind('batch', 'v1', 'CronJob')) == 'default'
    assert routes.select(GroupVersionKind('other', 'v1', 'Job')) == 'default'


def test_groups_first_by_default():
    routes = Routes('default')
    routes.add_group('batch', 'group')
    routes.add_group_kind(GroupKind('batch', 'Job'), 'kind')
    assert routes.select(GroupVersionKind('batch', 'v1', 'Job')) == 'group'


def test_groups_first_explicitly():
    routes = Routes('default')
    routes.add_group('batch', 'group')
    routes.add_group_kind(GroupKind('batch', 'Job'), 'kind')
    gvk = GroupVersionKind('batch', 'v1', 'Job')
    assert routes.select(gvk, precedence=Precedence.GROUPS_FIRST) == 'group'


def test_kinds_first_when_requested():
    routes = Routes('default')
    routes.add_group('batch', 'group')
    routes.add_group_kind(GroupKind('batch', 'Job'), 'kind')
    assert routes.select(GroupVersionKind('batch', 'v1', 'Job'),
                         precedence=Precedence.KINDS_FIRST) == 'kind'
    assert routes.select(GroupVersionKind('batch', 'v1', 'CronJob'),
                         precedence=Precedence.KINDS_FIRST) == 'group'


def test_last_registration_wins():
    routes = Routes('default')
    routes.add_group('apps', 'first')
    routes.add_group('apps', 'second')
    routes.add_group_kind(GroupKind('batch', 'Job'), 'first')
    routes.add_group_kind(GroupKind('batch', 'Job'), 'second')
    assert routes.select(GroupVersionKind('apps', 'v1', 'Deployment')) == 'second'
    assert routes.select(GroupVersionKind('batch', 'v1', 'Job')) == 'second'
    assert len(routes.groups) == 1
    assert len(routes.kinds) == 1


def test_same_registration_twice_is_idempotent():
    routes = Routes('default')
    routes.add_group('apps', 'A')
    routes.add_group('apps', 'A')
    assert dict(routes.groups) == {'apps': 'A'}


def test_registration_replaces_snapshots():
    routes = Routes('default')
    groups_before = routes.groups
    kinds_before = routes.kinds

    routes.add_group('apps', 'A')
    routes.add_group_kind(GroupKind('batch', 'Job'), 'B')

    assert routes.groups is not groups_before
    assert routes.kinds is not kinds_before
    assert dict(groups_before) == {}
    assert dict(kinds_before) == {}


def test_snapshots_are_immutable():
    routes = Routes('default')
    routes.add_group('apps', 'A')
    with pytest.raises(TypeError):
        routes.groups['batch'] = 'B'  # type: ignore
    with pytest.raises(TypeError):
        routes.kinds[GroupKind('batch', 'Job')] = 'B'  # type: ignore


def test_concurrent_registrations_from_threads_are_all_kept():
    routes = Routes('default')
    barrier = threading.Barrier(8)

    def register(index):
        barrier.wait()
        for i in range(100):
            routes.add_group(f'group{index}-{i}.example.com', f'backend{index}')
            routes.add_group_kind(GroupKind(f'group{index}', f'Kind{i}'), f'backend{index}')

    threads = [threading.Thread(target=register, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(routes.groups) == 800
    assert len(routes.kinds) == 800
    assert routes.groups['group3-42.example.com'] == 'backend3'
    assert routes.kinds[GroupKind('group5', 'Kind7')] == 'backend5'
