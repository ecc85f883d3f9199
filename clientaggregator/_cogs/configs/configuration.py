"""
All configuration flags, options, settings to fine-tune the aggregator.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

The defaults reproduce the conventional routing policy. Every non-default
value is a deliberate deviation from it and should be used as such.
"""
import dataclasses
import enum


class Precedence(str, enum.Enum):
    """ Which of the routes wins when both match the same object. """

    GROUPS_FIRST = 'groups-first'
    """
    A route for the whole API group wins over a route for a specific kind
    in that group. This is the conventional policy.
    """

    KINDS_FIRST = 'kinds-first'
    """
    A route for a specific kind wins over a route for its whole API group,
    i.e. the most specific route wins.
    """


@dataclasses.dataclass
class RoutingSettings:

    strict: bool = False
    """
    Should the kind resolution errors be raised to the callers?

    By default (``False``), the objects of unknown or ambiguous kinds
    are silently routed to the default backend. If ``True``, the errors
    are raised and no backend is called at all.
    """

    precedence: Precedence = Precedence.GROUPS_FIRST
    """
    Which route wins if both a group route and a group-kind route match.
    """


@dataclasses.dataclass
class AggregatorSettings:
    routing: RoutingSettings = dataclasses.field(default_factory=RoutingSettings)
