"""
The scheme: a registry of the known kinds of resources.

The scheme maps the objects to their group-version-kinds. For the dict-like
bodies (as they come from K8s API), the group-version-kind is taken from their
``apiVersion`` & ``kind`` fields. For other classes (e.g. from the 3rd-party
clients), it is taken from the registrations made in the scheme.

The scheme also remembers which kinds are namespaced and which are clustered.

One and only one scheme is shared by the aggregator and all of its backends.
Registering a class in a backend's own scheme has no effect on the routing.
"""
import collections.abc
from typing import Any, Dict, List, Mapping, Optional, Type

from clientaggregator._cogs.clients import errors
from clientaggregator._cogs.structs import references


class Scheme:

    def __init__(self) -> None:
        super().__init__()
        self._kinds: Dict[Type[Any], List[references.GroupVersionKind]] = {}
        self._scopes: Dict[references.GroupKind, bool] = {}

    def add_known_type(
            self,
            gvk: references.GroupVersionKind,
            cls: Optional[Type[Any]] = None,
            *,
            namespaced: bool = True,
    ) -> None:
        """
        Register a kind, optionally with the class representing its objects.

        The same class can be registered for several kinds; but then,
        its objects cannot be resolved to a kind unambiguously.
        """
        if cls is not None:
            kinds = self._kinds.setdefault(cls, [])
            if gvk not in kinds:
                kinds.append(gvk)
        self._scopes[gvk.group_kind] = namespaced

    def object_kinds(self, obj: object) -> List[references.GroupVersionKind]:
        kinds = self._kinds.get(type(obj))
        if not kinds:
            raise errors.UnregisteredKindError(
                f"No kind is registered for the type {type(obj).__qualname__}.")
        return list(kinds)

    def recognizes(self, gk: references.GroupKind) -> bool:
        return gk in self._scopes

    def is_namespaced(self, gk: references.GroupKind) -> bool:
        try:
            return self._scopes[gk]
        except KeyError:
            raise errors.UnregisteredKindError(f"The kind {gk!r} is not registered.") from None


def gvk_for_object(obj: object, scheme: Scheme) -> references.GroupVersionKind:
    """
    Determine the group-version-kind of an object.

    Raises one of `errors.KindResolutionError` if it cannot be determined
    exactly: i.e. if it is not declared or registered at all, or if it is
    registered for several group-version-kinds at once.
    """
    if isinstance(obj, collections.abc.Mapping):
        return _gvk_for_body(obj)

    kinds = scheme.object_kinds(obj)
    if len(kinds) > 1:
        raise errors.AmbiguousKindError(
            f"Multiple kinds are registered for the type {type(obj).__qualname__}: {kinds!r}")
    return kinds[0]


def _gvk_for_body(body: Mapping[str, Any]) -> references.GroupVersionKind:
    api_version = body.get('apiVersion')
    kind = body.get('kind')
    if not api_version or not isinstance(api_version, str):
        raise errors.MissingKindError("The object has no apiVersion.")
    if not kind or not isinstance(kind, str):
        raise errors.MissingKindError("The object has no kind.")
    try:
        return references.GroupVersionKind.from_api_version(api_version, kind)
    except ValueError as e:
        raise errors.MissingKindError(str(e)) from e
