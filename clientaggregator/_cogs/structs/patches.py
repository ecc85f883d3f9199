"""
All the structures needed for Kubernetes patching.

A patch is a pair of a patch type (as sent in the ``Content-Type`` header)
and the patch data: a dict for the merge-like patches (RFC 7386 & alike),
a list of operations for the JSON patches (RFC 6902).

The aggregator does not interpret the patches, it only passes them through.
The appliers here are used by the fake backend to mimic the API servers.
"""
import collections.abc
import copy
import dataclasses
import enum
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Union

from typing_extensions import Literal, TypedDict

JSONPatchOp = Literal["add", "replace", "remove"]


def _unescaped_keys(path: str) -> List[str]:
    """Splits the escaped path of JSON Patches into the keys.

    See https://datatracker.ietf.org/doc/html/rfc6901#section-3 for more details.
    """
    if not path.startswith('/'):
        raise ValueError(f"JSON Patch paths must start with a slash: {path!r}")
    return [key.replace('~1', '/').replace('~0', '~') for key in path[1:].split('/')]


class JSONPatchItem(TypedDict, total=False):
    op: JSONPatchOp
    path: str
    value: Optional[Any]


JSONPatch = List[JSONPatchItem]


class PatchType(str, enum.Enum):
    """ Patch strategies, as known to Kubernetes API by their content types. """
    JSON = 'application/json-patch+json'
    MERGE = 'application/merge-patch+json'
    STRATEGIC = 'application/strategic-merge-patch+json'
    APPLY = 'application/apply-patch+yaml'


@dataclasses.dataclass(frozen=True)
class Patch:
    type: PatchType
    data: Union[Mapping[str, Any], JSONPatch]

    @classmethod
    def merge(cls, data: Mapping[str, Any]) -> "Patch":
        return cls(type=PatchType.MERGE, data=data)

    @classmethod
    def strategic(cls, data: Mapping[str, Any]) -> "Patch":
        return cls(type=PatchType.STRATEGIC, data=data)

    @classmethod
    def json(cls, data: JSONPatch) -> "Patch":
        return cls(type=PatchType.JSON, data=data)

    @classmethod
    def apply(cls, data: Mapping[str, Any]) -> "Patch":
        return cls(type=PatchType.APPLY, data=data)

    @classmethod
    def merge_from(cls, original: Mapping[str, Any], modified: Mapping[str, Any]) -> "Patch":
        """
        Build a merge-patch that turns the original body into the modified one.

        Removed fields become ``None`` (i.e. deletions), changed or added fields
        are put as is, unchanged fields are omitted. Lists are replaced as a whole.
        """
        return cls.merge(_diff_for_merge(original, modified))


def _diff_for_merge(original: Mapping[str, Any], modified: Mapping[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key in original:
        if key not in modified:
            result[key] = None
    for key, new in modified.items():
        old = original.get(key)
        if isinstance(old, collections.abc.Mapping) and isinstance(new, collections.abc.Mapping):
            nested = _diff_for_merge(old, new)
            if nested:
                result[key] = nested
        elif key not in original or old != new:
            result[key] = copy.deepcopy(new)
    return result


def apply_merge_patch(target: Any, patch: Any) -> Any:
    """
    Apply a JSON merge-patch (RFC 7386) and return the new value.

    The target is not modified; the result shares no mutable parts with it.
    """
    if not isinstance(patch, collections.abc.Mapping):
        return copy.deepcopy(patch)
    result = dict(copy.deepcopy(target)) if isinstance(target, collections.abc.Mapping) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = apply_merge_patch(result.get(key), value)
    return result


def apply_json_patch(target: Mapping[str, Any], ops: JSONPatch) -> Dict[str, Any]:
    """
    Apply a JSON patch (RFC 6902) and return the new value.

    Only the operations which are produced by the framework are supported:
    ``add``, ``replace``, ``remove``.
    """
    result: Dict[str, Any] = dict(copy.deepcopy(target))
    for op in ops:
        *keys, last = _unescaped_keys(op['path'])
        parent: Any = result
        for key in keys:
            parent = parent[int(key)] if isinstance(parent, list) else parent[key]

        if op['op'] == 'remove':
            if isinstance(parent, list):
                del parent[int(last)]
            else:
                del parent[last]
        elif op['op'] == 'replace':
            if isinstance(parent, list):
                parent[int(last)] = copy.deepcopy(op.get('value'))
            elif last not in parent:
                raise KeyError(f"Cannot replace a missing field: {op['path']!r}")
            else:
                parent[last] = copy.deepcopy(op.get('value'))
        elif op['op'] == 'add':
            if isinstance(parent, list):
                index = len(parent) if last == '-' else int(last)
                parent.insert(index, copy.deepcopy(op.get('value')))
            else:
                parent[last] = copy.deepcopy(op.get('value'))
        else:
            raise ValueError(f"Unsupported JSON Patch operation: {op['op']!r}")
    return result


def apply_patch(target: Mapping[str, Any], patch: Patch) -> MutableMapping[str, Any]:
    """
    Apply a patch of any supported type, as the API servers would do.

    Strategic merge-patches are applied as plain merge-patches, i.e. without
    the schema-specific merging of lists.
    """
    if patch.type in (PatchType.MERGE, PatchType.STRATEGIC):
        return apply_merge_patch(target, patch.data)
    elif patch.type is PatchType.JSON:
        return apply_json_patch(target, patch.data)  # type: ignore
    else:
        raise ValueError(f"Unsupported patch type: {patch.type!r}")
