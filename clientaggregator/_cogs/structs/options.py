"""
Typed options of the API calls, passed as varargs to the client's verbs.

The aggregator never looks into the options, it passes them to the backends
as they are. The backends collect the ones they support and ignore the rest.
Some options apply to several verbs (e.g. `DryRun` for all writing verbs).
"""
import dataclasses
from typing import Any, Iterable, Mapping, Optional, Type, TypeVar


class Option:
    """ A base class of all options, for type-checking only. """


@dataclasses.dataclass(frozen=True)
class InNamespace(Option):
    """ Restrict the listing, watching, deleting-all-of to one namespace. """
    namespace: str


@dataclasses.dataclass(frozen=True)
class MatchingLabels(Option):
    """ Restrict the listing, watching, deleting-all-of by exact label values. """
    labels: Mapping[str, str]


@dataclasses.dataclass(frozen=True)
class MatchingFields(Option):
    """
    Restrict the listing, watching, deleting-all-of by exact field values.

    The fields are dot-separated paths, e.g. ``"metadata.name"``.
    """
    fields: Mapping[str, str]


@dataclasses.dataclass(frozen=True)
class Limit(Option):
    limit: int


@dataclasses.dataclass(frozen=True)
class DryRun(Option):
    """ Validate the writing request, but do not persist the changes. """


@dataclasses.dataclass(frozen=True)
class SubResourceBody(Option):
    """ The payload of a sub-resource update, e.g. a ``Scale`` object. """
    body: Any


OptionT = TypeVar('OptionT', bound=Option)


def find_option(opts: Iterable[Option], cls: Type[OptionT]) -> Optional[OptionT]:
    """
    Find the last option of a specific class, as the last one wins.
    """
    found: Optional[OptionT] = None
    for opt in opts:
        if isinstance(opt, cls):
            found = opt
    return found
