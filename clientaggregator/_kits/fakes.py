"""
An in-memory backend implementing the whole access-client contract.

It is intended for testing the routing and the code built on top of it:
the objects created via one fake backend are invisible to the others,
so it is easy to see which backend has served which calls.

The fake backend mimics the API servers only to the extent needed for that:

* The objects are stored as dicts, keyed by the group, kind, namespace, name.
  The versions are ignored, so all versions of a kind share the same objects.
* Resource versions are increased on every change, and are checked on updates.
* The main resource's updates & patches keep the status as it was,
  the ``status`` sub-resource's updates & patches change only the status.
* The ``scale`` sub-resource maps to ``spec.replicas`` & ``status.replicas``.
* The ``eviction`` sub-resource deletes the object.
* Watchers get the existing objects first, then the changes as they happen.

Only the dict-like bodies are supported, not the 3rd-party classes.
"""
import asyncio
import collections.abc
import copy
import itertools
from typing import Any, AsyncIterator, Collection, Dict, Iterable, Iterator, List, \
                   MutableMapping, NoReturn, Optional, Tuple

from clientaggregator._cogs.clients import errors, schemes
from clientaggregator._cogs.structs import bodies, options, patches, references

ObjectsKey = Tuple[references.GroupKind, references.Namespace, str]
SUPPORTED_PATCH_TYPES = frozenset({patches.PatchType.MERGE, patches.PatchType.STRATEGIC, patches.PatchType.JSON})


class FakeWatcher:

    def __init__(
            self,
            client: "FakeClient",
            gk: references.GroupKind,
            opts: Collection[options.Option],
    ) -> None:
        super().__init__()
        self._client = client
        self._gk = gk
        self._opts = opts
        self._queue: "asyncio.Queue[Optional[bodies.RawEvent]]" = asyncio.Queue()
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def matches(self, gk: references.GroupKind, body: bodies.RawBody) -> bool:
        return gk == self._gk and _matches(body, self._opts)

    def put(self, event: bodies.RawEvent) -> None:
        if not self._stopped:
            self._queue.put_nowait(event)

    def stop(self) -> None:
        if not self._stopped:
            self._stopped = True
            self._queue.put_nowait(None)
            self._client.unsubscribe(self)

    async def __aiter__(self) -> AsyncIterator[bodies.RawEvent]:
        while True:
            event = await self._queue.get()
            if event is None:
                break
            yield event


class FakeClient:

    def __init__(
            self,
            scheme: Optional[schemes.Scheme] = None,
            *,
            name: str = 'fake',
    ) -> None:
        super().__init__()
        self._scheme = scheme if scheme is not None else schemes.Scheme()
        self._name = name
        self._objects: Dict[ObjectsKey, bodies.RawBody] = {}
        self._watchers: List[FakeWatcher] = []
        self._version = 0
        self._uids = itertools.count(1)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self._name!r}>'

    @property
    def name(self) -> str:
        return self._name

    @property
    def scheme(self) -> schemes.Scheme:
        return self._scheme

    @property
    def objects(self) -> List[bodies.RawBody]:
        """ Copies of all stored objects, for assertions in the tests. """
        return [copy.deepcopy(body) for body in self._objects.values()]

    def rest_mapper(self) -> NoReturn:
        raise NotImplementedError("REST mapping is not supported by the fake client.")

    def gvk_for(self, obj: Any) -> references.GroupVersionKind:
        return schemes.gvk_for_object(obj, self._scheme)

    def is_namespaced(self, obj: Any) -> bool:
        return self._scheme.is_namespaced(self.gvk_for(obj).group_kind)

    async def get(self, key: references.ObjectKey, obj: Any, *opts: options.Option) -> None:
        gvk = self.gvk_for(obj)
        body = _mutable(obj)
        stored = self._objects.get(self._key(gvk, key.namespace, key.name))
        if stored is None:
            raise _not_found(gvk, key.name)
        _fill(body, stored, gvk)

    async def list(self, objs: Any, *opts: options.Option) -> None:
        gvk = self.gvk_for(objs)
        body = _mutable(objs)
        gk = _item_group_kind(gvk)
        items = list(self._select(gk, opts))
        limit = options.find_option(opts, options.Limit)
        remaining = max(0, len(items) - limit.limit) if limit is not None else 0
        items = items[:limit.limit] if limit is not None else items
        item_gvk = references.GroupVersionKind(gvk.group, gvk.version, gk.kind)
        filled: List[bodies.RawBody] = []
        for item in items:
            filled.append(_filled(item, item_gvk))
        body['items'] = filled
        body['metadata'] = {'resourceVersion': str(self._version)}
        if remaining:
            body['metadata']['remainingItemCount'] = remaining

    async def create(self, obj: Any, *opts: options.Option) -> None:
        gvk = self.gvk_for(obj)
        body = _mutable(obj)
        meta = body.setdefault('metadata', {})
        if not meta.get('name') and meta.get('generateName'):
            meta['name'] = f"{meta['generateName']}{next(self._uids):05d}"
        name = meta.get('name')
        if not name:
            raise errors.make_error(422, 'Invalid', "The name is required.", kind=gvk.kind)
        namespace = self._namespace(gvk.group_kind, meta.get('namespace'))
        key = (gvk.group_kind, namespace, name)
        if key in self._objects:
            raise errors.make_error(409, 'AlreadyExists', f"{gvk.group_kind!r} {name!r} already exists.",
                                    name=name, kind=gvk.kind, group=gvk.group)

        stored: bodies.RawBody = copy.deepcopy(body)  # type: ignore
        stored['metadata'].pop('resourceVersion', None)
        stored['metadata']['uid'] = f'uid-{next(self._uids)}'
        stored['metadata']['generation'] = 1
        if namespace is None:
            stored['metadata'].pop('namespace', None)
        self._commit(key, stored, 'ADDED', opts)
        _fill(body, stored, gvk)

    async def update(self, obj: Any, *opts: options.Option) -> None:
        gvk = self.gvk_for(obj)
        body = _mutable(obj)
        key, stored = self._find(gvk, body)
        self._check_version(gvk, body, stored)

        updated: bodies.RawBody = copy.deepcopy(body)  # type: ignore
        _keep_status(updated, stored)
        _keep_identity(updated, stored, spec_changed=updated.get('spec') != stored.get('spec'))
        self._commit(key, updated, 'MODIFIED', opts)
        _fill(body, updated, gvk)

    async def patch(self, obj: Any, patch: patches.Patch, *opts: options.Option) -> None:
        gvk = self.gvk_for(obj)
        body = _mutable(obj)
        key, stored = self._find(gvk, body)

        patched: bodies.RawBody = _patched(stored, patch)  # type: ignore
        _keep_status(patched, stored)
        _keep_identity(patched, stored, spec_changed=patched.get('spec') != stored.get('spec'))
        self._commit(key, patched, 'MODIFIED', opts)
        _fill(body, patched, gvk)

    async def delete(self, obj: Any, *opts: options.Option) -> None:
        gvk = self.gvk_for(obj)
        body = _mutable(obj)
        key, stored = self._find(gvk, body)
        self._discard(key, stored, opts)

    async def delete_all_of(self, obj: Any, *opts: options.Option) -> None:
        gvk = self.gvk_for(obj)
        for key, stored in list(self._iter_selected(gvk.group_kind, opts)):
            self._discard(key, stored, opts)

    async def watch(self, objs: Any, *opts: options.Option) -> FakeWatcher:
        gvk = self.gvk_for(objs)
        gk = _item_group_kind(gvk)
        watcher = FakeWatcher(self, gk, opts)
        item_gvk = references.GroupVersionKind(gvk.group, gvk.version, gk.kind)
        for item in self._select(gk, opts):
            watcher.put({'type': 'ADDED', 'object': _filled(item, item_gvk)})
        self._watchers.append(watcher)
        return watcher

    def unsubscribe(self, watcher: FakeWatcher) -> None:
        if watcher in self._watchers:
            self._watchers.remove(watcher)

    def subresource(self, name: str) -> "FakeSubResourceClient":
        return FakeSubResourceClient(self, name)

    def status(self) -> "FakeSubResourceClient":
        return FakeSubResourceClient(self, 'status')

    #
    # Internals, also used by the sub-resource clients.
    #

    def _namespace(self, gk: references.GroupKind, namespace: references.Namespace) -> references.Namespace:
        namespaced = self._scheme.is_namespaced(gk) if self._scheme.recognizes(gk) else bool(namespace)
        if namespaced and not namespace:
            raise errors.make_error(400, 'BadRequest', f"A namespace is required for {gk!r}.")
        return namespace if namespaced else None

    def _key(self, gvk: references.GroupVersionKind, namespace: references.Namespace, name: str) -> ObjectsKey:
        gk = gvk.group_kind
        namespaced = self._scheme.is_namespaced(gk) if self._scheme.recognizes(gk) else bool(namespace)
        return (gk, namespace if namespaced else None, name)

    def _find(
            self,
            gvk: references.GroupVersionKind,
            body: MutableMapping[str, Any],
    ) -> Tuple[ObjectsKey, bodies.RawBody]:
        name = bodies.get_name(body) or ''
        key = self._key(gvk, bodies.get_namespace(body), name)
        stored = self._objects.get(key)
        if stored is None:
            raise _not_found(gvk, name)
        return key, stored

    def _check_version(
            self,
            gvk: references.GroupVersionKind,
            body: MutableMapping[str, Any],
            stored: bodies.RawBody,
    ) -> None:
        version = body.get('metadata', {}).get('resourceVersion')
        if version and version != stored['metadata']['resourceVersion']:
            name = stored['metadata']['name']
            raise errors.make_error(409, 'Conflict', f"{gvk.group_kind!r} {name!r} has been modified.",
                                    name=name, kind=gvk.kind, group=gvk.group)

    def _iter_selected(
            self,
            gk: references.GroupKind,
            opts: Iterable[options.Option],
    ) -> Iterator[Tuple[ObjectsKey, bodies.RawBody]]:
        opts = list(opts)
        for key, stored in sorted(self._objects.items(), key=lambda kv: (kv[0][1] or '', kv[0][2])):
            if key[0] == gk and _matches(stored, opts):
                yield key, stored

    def _select(self, gk: references.GroupKind, opts: Iterable[options.Option]) -> Iterator[bodies.RawBody]:
        for _, stored in self._iter_selected(gk, opts):
            yield stored

    def _commit(
            self,
            key: ObjectsKey,
            body: bodies.RawBody,
            event_type: bodies.RawEventType,
            opts: Iterable[options.Option],
    ) -> None:
        if options.find_option(opts, options.DryRun) is not None:
            return
        self._version += 1
        body['metadata']['resourceVersion'] = str(self._version)
        self._objects[key] = body
        self._notify(key[0], body, event_type)

    def _discard(self, key: ObjectsKey, stored: bodies.RawBody, opts: Iterable[options.Option]) -> None:
        if options.find_option(opts, options.DryRun) is not None:
            return
        del self._objects[key]
        self._notify(key[0], stored, 'DELETED')

    def _notify(self, gk: references.GroupKind, body: bodies.RawBody, event_type: bodies.RawEventType) -> None:
        for watcher in list(self._watchers):
            if watcher.matches(gk, body):
                watcher.put({'type': event_type, 'object': copy.deepcopy(body)})


class FakeSubResourceClient:

    def __init__(self, client: FakeClient, name: str) -> None:
        super().__init__()
        self._client = client
        self._name = name

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self._name!r} of {self._client!r}>'

    async def get(self, obj: Any, subresource: Any, *opts: options.Option) -> None:
        gvk = self._client.gvk_for(obj)
        _, stored = self._client._find(gvk, _mutable(obj))
        target = _mutable(subresource)
        if self._name == 'status':
            _fill(target, stored, gvk)
        elif self._name == 'scale':
            target.clear()
            target.update(_scale_of(stored))
        else:
            raise self._unsupported(gvk)

    async def create(self, obj: Any, subresource: Any, *opts: options.Option) -> None:
        gvk = self._client.gvk_for(obj)
        key, stored = self._client._find(gvk, _mutable(obj))
        if self._name == 'eviction':
            self._client._discard(key, stored, opts)
        else:
            raise self._unsupported(gvk)

    async def update(self, obj: Any, *opts: options.Option) -> None:
        gvk = self._client.gvk_for(obj)
        body = _mutable(obj)
        key, stored = self._client._find(gvk, body)
        if self._name == 'status':
            self._client._check_version(gvk, body, stored)
            updated = copy.deepcopy(stored)
            _replace_status(updated, body)
        elif self._name == 'scale':
            payload = options.find_option(opts, options.SubResourceBody)
            if payload is None:
                raise errors.make_error(400, 'BadRequest', "The scale's body is required.")
            updated = _rescaled(stored, payload.body)
        else:
            raise self._unsupported(gvk)
        self._client._commit(key, updated, 'MODIFIED', opts)
        _fill(body, updated, gvk)

    async def patch(self, obj: Any, patch: patches.Patch, *opts: options.Option) -> None:
        gvk = self._client.gvk_for(obj)
        body = _mutable(obj)
        key, stored = self._client._find(gvk, body)
        if self._name == 'status':
            updated = copy.deepcopy(stored)
            _replace_status(updated, _patched(stored, patch))
        elif self._name == 'scale':
            updated = _rescaled(stored, _patched(_scale_of(stored), patch))
        else:
            raise self._unsupported(gvk)
        self._client._commit(key, updated, 'MODIFIED', opts)
        _fill(body, updated, gvk)

    def _unsupported(self, gvk: references.GroupVersionKind) -> errors.APIError:
        return errors.make_error(405, 'MethodNotAllowed',
                                 f"The sub-resource {self._name!r} is not supported for {gvk.group_kind!r}.",
                                 kind=gvk.kind, group=gvk.group)


def _mutable(obj: Any) -> MutableMapping[str, Any]:
    if not isinstance(obj, collections.abc.MutableMapping):
        raise TypeError(f"The fake client only supports dict-like bodies, got {type(obj).__qualname__}.")
    return obj


def _item_group_kind(gvk: references.GroupVersionKind) -> references.GroupKind:
    if not gvk.kind.endswith('List') or gvk.kind == 'List':
        raise errors.make_error(400, 'BadRequest', f"{gvk!r} is not a list kind.",
                                kind=gvk.kind, group=gvk.group)
    return references.GroupKind(group=gvk.group, kind=gvk.kind[:-4])


def _not_found(gvk: references.GroupVersionKind, name: str) -> errors.APIError:
    return errors.make_error(404, 'NotFound', f"{gvk.group_kind!r} {name!r} not found.",
                             name=name, kind=gvk.kind, group=gvk.group)


def _filled(stored: bodies.RawBody, gvk: references.GroupVersionKind) -> bodies.RawBody:
    body: bodies.RawBody = copy.deepcopy(stored)
    body['apiVersion'] = gvk.api_version
    body['kind'] = gvk.kind
    return body


def _fill(target: MutableMapping[str, Any], stored: bodies.RawBody, gvk: references.GroupVersionKind) -> None:
    # Keep the caller's object identity, as the callers hold the references to it.
    target.clear()
    target.update(_filled(stored, gvk))


def _patched(stored: bodies.RawBody, patch: patches.Patch) -> MutableMapping[str, Any]:
    if patch.type not in SUPPORTED_PATCH_TYPES:
        raise errors.make_error(415, 'UnsupportedMediaType', f"Unsupported patch type: {patch.type.value}")
    try:
        return patches.apply_patch(stored, patch)
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise errors.make_error(422, 'Invalid', f"The patch cannot be applied: {e}") from e


def _keep_status(body: bodies.RawBody, stored: bodies.RawBody) -> None:
    if 'status' in stored:
        body['status'] = copy.deepcopy(stored['status'])
    else:
        body.pop('status', None)


def _replace_status(body: bodies.RawBody, source: MutableMapping[str, Any]) -> None:
    if 'status' in source:
        body['status'] = copy.deepcopy(source['status'])
    else:
        body.pop('status', None)


def _keep_identity(body: bodies.RawBody, stored: bodies.RawBody, *, spec_changed: bool) -> None:
    meta = body.setdefault('metadata', {})
    old = stored['metadata']
    for field in ['name', 'namespace', 'uid']:
        if field in old:
            meta[field] = old[field]
        else:
            meta.pop(field, None)  # type: ignore
    meta['generation'] = old.get('generation', 1) + (1 if spec_changed else 0)


def _scale_of(stored: bodies.RawBody) -> Dict[str, Any]:
    meta = stored.get('metadata', {})
    return {
        'apiVersion': 'autoscaling/v1',
        'kind': 'Scale',
        'metadata': {key: meta[key] for key in ['name', 'namespace'] if key in meta},
        'spec': {'replicas': stored.get('spec', {}).get('replicas', 0)},
        'status': {'replicas': stored.get('status', {}).get('replicas', 0)},
    }


def _rescaled(stored: bodies.RawBody, scale: Any) -> bodies.RawBody:
    try:
        replicas = scale['spec']['replicas']
    except (KeyError, TypeError):
        raise errors.make_error(422, 'Invalid', "The scale has no spec.replicas.") from None
    updated = copy.deepcopy(stored)
    updated['spec'] = dict(updated.get('spec', {}), replicas=replicas)
    updated['metadata']['generation'] = stored['metadata'].get('generation', 1) + 1
    return updated


def _matches(body: bodies.RawBody, opts: Collection[options.Option]) -> bool:
    namespace = options.find_option(opts, options.InNamespace)
    if namespace is not None and bodies.get_namespace(body) != namespace.namespace:
        return False

    labels = options.find_option(opts, options.MatchingLabels)
    if labels is not None:
        present = bodies.get_labels(body)
        if any(present.get(key) != value for key, value in labels.labels.items()):
            return False

    fields = options.find_option(opts, options.MatchingFields)
    if fields is not None:
        for path, value in fields.fields.items():
            if _resolve(body, path.split('.')) != value:
                return False

    return True


def _resolve(body: Any, keys: List[str]) -> Optional[str]:
    for key in keys:
        if not isinstance(body, collections.abc.Mapping) or key not in body:
            return None
        body = body[key]
    return None if body is None else str(body)
