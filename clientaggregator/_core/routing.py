"""
The routes: which backend serves which kinds of resources.

There are two kinds of routes: for the whole API groups, and for the specific
kinds within the API groups (regardless of their versions). Everything else
goes to the default backend.

The routes are registered during the setup, before the traffic is served.
Every registration replaces the mapping with a new immutable snapshot, so
the selection always sees a consistent state of the routes, and the routes
can be read from any number of tasks or threads without locks. The registrations
themselves are serialized with a lock, so concurrent registrations from several
threads never lose each other's routes. Still, the selections made before
a registration are not affected by it.

The routes are generic over the backends: the real clients in the aggregator,
or just the backends' names in the routing tables and the CLI.
"""
import threading
import types
from typing import Generic, Mapping, Optional, TypeVar

from clientaggregator._cogs.configs import configuration
from clientaggregator._cogs.structs import references

BackendT = TypeVar('BackendT')


class Routes(Generic[BackendT]):

    def __init__(self, default: BackendT) -> None:
        super().__init__()
        self._default = default
        self._groups: Mapping[str, BackendT] = types.MappingProxyType({})
        self._kinds: Mapping[references.GroupKind, BackendT] = types.MappingProxyType({})
        self._lock = threading.Lock()

    @property
    def default(self) -> BackendT:
        return self._default

    @property
    def groups(self) -> Mapping[str, BackendT]:
        return self._groups

    @property
    def kinds(self) -> Mapping[references.GroupKind, BackendT]:
        return self._kinds

    def add_group(self, group: str, backend: BackendT) -> None:
        with self._lock:
            groups = dict(self._groups)
            groups[group] = backend
            self._groups = types.MappingProxyType(groups)

    def add_group_kind(self, gk: references.GroupKind, backend: BackendT) -> None:
        with self._lock:
            kinds = dict(self._kinds)
            kinds[gk] = backend
            self._kinds = types.MappingProxyType(kinds)

    def select(
            self,
            gvk: Optional[references.GroupVersionKind],
            *,
            precedence: configuration.Precedence = configuration.Precedence.GROUPS_FIRST,
    ) -> BackendT:
        """
        Select the backend for a kind, or the default one if the kind is unknown.
        """
        if gvk is None:
            return self._default

        # Take both snapshots once, so that a concurrent registration is either seen or not.
        groups, kinds = self._groups, self._kinds
        gk = gvk.group_kind
        if precedence is configuration.Precedence.KINDS_FIRST:
            if gk in kinds:
                return kinds[gk]
            if gvk.group in groups:
                return groups[gvk.group]
        else:
            if gvk.group in groups:
                return groups[gvk.group]
            if gk in kinds:
                return kinds[gk]
        return self._default
