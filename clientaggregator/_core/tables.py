"""
Routing tables: the routes declared in YAML files instead of the code.

The backends are referred by their names; the actual clients are provided
when the aggregator is built from the table::

    default: primary
    groups:
      apps: secondary
    kinds:
      - group: batch
        kind: Job
        backend: jobs
    strict: false
    precedence: groups-first

The core API group is an empty string (``""``) in both groups and kinds.
"""
import collections.abc
import copy
import dataclasses
import os
from typing import Any, FrozenSet, Mapping, Optional, Union

import yaml

from clientaggregator._cogs.clients import protocols, schemes
from clientaggregator._cogs.configs import configuration
from clientaggregator._cogs.structs import references
from clientaggregator._core import aggregation, routing

KNOWN_KEYS = frozenset({'default', 'groups', 'kinds', 'strict', 'precedence'})
KNOWN_KIND_KEYS = frozenset({'group', 'kind', 'backend'})


@dataclasses.dataclass(frozen=True)
class RoutingTable:
    default: str
    groups: Mapping[str, str] = dataclasses.field(default_factory=dict)
    kinds: Mapping[references.GroupKind, str] = dataclasses.field(default_factory=dict)
    settings: configuration.AggregatorSettings = dataclasses.field(
        default_factory=configuration.AggregatorSettings)

    @property
    def names(self) -> FrozenSet[str]:
        """ All backend names referred by the table. """
        return frozenset({self.default, *self.groups.values(), *self.kinds.values()})

    def as_routes(self) -> routing.Routes[str]:
        routes: routing.Routes[str] = routing.Routes(self.default)
        for group, name in self.groups.items():
            routes.add_group(group, name)
        for gk, name in self.kinds.items():
            routes.add_group_kind(gk, name)
        return routes

    def build(
            self,
            backends: Mapping[str, protocols.Client],
            *,
            scheme: Optional[schemes.Scheme] = None,
    ) -> aggregation.AggregatingClient:
        """
        Build an aggregating client with the named backends put in place.
        """
        missing = self.names - set(backends)
        if missing:
            raise LookupError(f"Unknown backends in the routing table: {sorted(missing)!r}")

        client = aggregation.AggregatingClient(
            backends[self.default],
            scheme=scheme,
            settings=copy.deepcopy(self.settings),
        )
        for group, name in self.groups.items():
            client.add_group(group, backends[name])
        for gk, name in self.kinds.items():
            client.add_group_kind(gk.group, gk.kind, backends[name])
        return client


def parse_table(data: Any) -> RoutingTable:
    if not isinstance(data, collections.abc.Mapping):
        raise ValueError(f"The routing table must be a mapping, got {type(data).__name__}.")

    unknown = set(data) - KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown keys in the routing table: {sorted(unknown)!r}")

    default = data.get('default')
    if not default or not isinstance(default, str):
        raise ValueError("The routing table must have a default backend's name.")

    groups = data.get('groups') or {}
    if not isinstance(groups, collections.abc.Mapping):
        raise ValueError("The groups must be a mapping of API groups to backends' names.")
    for group, name in groups.items():
        if not isinstance(group, str) or not isinstance(name, str) or not name:
            raise ValueError(f"Malformed group route: {group!r}: {name!r}")

    items = data.get('kinds') or []
    if not isinstance(items, list):
        raise ValueError("The kinds must be a list of kind routes.")

    kinds = {}
    for item in items:
        if not isinstance(item, collections.abc.Mapping) or set(item) != KNOWN_KIND_KEYS:
            raise ValueError(f"Malformed kind route: {item!r}")
        if not all(isinstance(item[key], str) for key in KNOWN_KIND_KEYS):
            raise ValueError(f"Malformed kind route: {item!r}")
        if not item['kind'] or not item['backend']:
            raise ValueError(f"Malformed kind route: {item!r}")
        kinds[references.GroupKind(group=item['group'], kind=item['kind'])] = item['backend']

    try:
        precedence = configuration.Precedence(data.get('precedence', 'groups-first'))
    except ValueError:
        raise ValueError(f"Unsupported precedence: {data.get('precedence')!r}") from None

    strict = data.get('strict', False)
    if not isinstance(strict, bool):
        raise ValueError(f"The strictness must be a boolean, got {strict!r}.")

    settings = configuration.AggregatorSettings(
        routing=configuration.RoutingSettings(strict=strict, precedence=precedence),
    )
    return RoutingTable(default=default, groups=dict(groups), kinds=kinds, settings=settings)


def load_table(path: Union[str, 'os.PathLike[str]']) -> RoutingTable:
    with open(path, 'rt', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Not a valid YAML document: {e}") from e
    return parse_table(data)
