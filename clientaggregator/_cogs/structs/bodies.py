"""
All the structures coming from/to the Kubernetes API.

The Kubernetes-originated objects are dicts or dict-like custom classes.
Arbitrary 3rd-party classes can be routed too, as long as they are registered
in the scheme (see `clientaggregator._cogs.clients.schemes`), but the built-in
fake backend only stores the dicts.

For strict type-checking, the fields are detailed to the level used
by the library. All other fields are allowed at runtime.
"""
from typing import Any, List, Mapping, Optional

from typing_extensions import Literal, TypedDict

Labels = Mapping[str, str]
Annotations = Mapping[str, str]

RawEventType = Literal['ADDED', 'MODIFIED', 'DELETED', 'BOOKMARK', 'ERROR']


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    finalizers: List[str]
    resourceVersion: str
    deletionTimestamp: str
    creationTimestamp: str
    generation: int


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


class RawListMeta(TypedDict, total=False):
    resourceVersion: str
    remainingItemCount: int


class RawList(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawListMeta
    items: List[RawBody]


class RawEvent(TypedDict, total=True):
    type: RawEventType
    object: RawBody


def get_name(body: Mapping[str, Any]) -> Optional[str]:
    return body.get('metadata', {}).get('name')


def get_namespace(body: Mapping[str, Any]) -> Optional[str]:
    return body.get('metadata', {}).get('namespace')


def get_labels(body: Mapping[str, Any]) -> Labels:
    return body.get('metadata', {}).get('labels') or {}
