"""
References to the kinds of resources and to individual objects.

These are the routing keys of the aggregator: an API group alone,
or an API group with a kind (regardless of the version).
"""
import dataclasses
from typing import Iterator, Optional, Tuple

# A namespace reference usable in the API calls. `None` means cluster-wide API calls.
Namespace = Optional[str]


def parse_api_version(api_version: str) -> Tuple[str, str]:
    """
    Split the ``apiVersion`` field into the group and the version.

    The core API has no group in its ``apiVersion``: e.g. ``"v1"``.
    All other APIs have both: e.g. ``"apps/v1"``, ``"batch/v1"``.
    """
    group, slash, version = api_version.rpartition('/')
    if slash and (not group or not version or '/' in group):
        raise ValueError(f"Unparseable API version: {api_version!r}")
    if not version:
        raise ValueError(f"Unparseable API version: {api_version!r}")
    return group, version


@dataclasses.dataclass(frozen=True)
class GroupKind:
    """
    A kind of resources irrespective of its version.

    It is used as a key for the kind-specific routes.
    """

    group: str
    """
    The resource's API group; e.g. ``"apps"``, ``"batch"``.
    For Core v1 API resources, an empty string: ``""``.
    """

    kind: str
    """
    The resource's kind (as in YAML files); e.g. ``"Job"``, ``"Deployment"``.
    """

    def __repr__(self) -> str:
        return f'{self.kind}.{self.group}' if self.group else self.kind

    # Mostly for tests and unpacking: `group, kind = gk`.
    def __iter__(self) -> Iterator[str]:
        return iter((self.group, self.kind))


@dataclasses.dataclass(frozen=True)
class GroupVersionKind:
    """
    A fully qualified kind of resources, as declared in the objects' bodies.
    """

    group: str
    version: str
    kind: str

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> "GroupVersionKind":
        group, version = parse_api_version(api_version)
        return cls(group=group, version=version, kind=kind)

    @property
    def api_version(self) -> str:
        return f'{self.group}/{self.version}' if self.group else self.version

    @property
    def group_kind(self) -> GroupKind:
        return GroupKind(group=self.group, kind=self.kind)

    def __repr__(self) -> str:
        return f'{self.kind}.{self.version}.{self.group}'.rstrip('.')

    def __iter__(self) -> Iterator[str]:
        return iter((self.group, self.version, self.kind))


@dataclasses.dataclass(frozen=True)
class ObjectKey:
    """
    An identifier of an individual object within its kind of resources.

    The namespace is ``None`` for cluster-scoped objects.
    """

    name: str
    namespace: Namespace = None

    def __repr__(self) -> str:
        return f'{self.namespace}/{self.name}' if self.namespace else self.name
