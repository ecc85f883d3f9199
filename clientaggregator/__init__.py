"""
The main module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from clientaggregator._cogs.clients.errors import (
    KindResolutionError,
    UnregisteredKindError,
    AmbiguousKindError,
    MissingKindError,
    APIError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
    APIUnsupportedError,
)
from clientaggregator._cogs.clients.protocols import (
    Client,
    SubResourceReader,
    SubResourceWriter,
    SubResourceClient as SubResourceClientProtocol,
    Watcher,
)
from clientaggregator._cogs.clients.schemes import (
    Scheme,
    gvk_for_object,
)
from clientaggregator._cogs.configs.configuration import (
    AggregatorSettings,
    RoutingSettings,
    Precedence,
)
from clientaggregator._cogs.helpers.versions import (
    version as __version__,
)
from clientaggregator._cogs.structs.bodies import (
    RawBody,
    RawMeta,
    RawList,
    RawEvent,
    RawEventType,
    Labels,
    Annotations,
)
from clientaggregator._cogs.structs.options import (
    Option,
    InNamespace,
    MatchingLabels,
    MatchingFields,
    Limit,
    DryRun,
    SubResourceBody,
)
from clientaggregator._cogs.structs.patches import (
    Patch,
    PatchType,
    JSONPatch,
    JSONPatchItem,
)
from clientaggregator._cogs.structs.references import (
    GroupKind,
    GroupVersionKind,
    ObjectKey,
    Namespace,
)
from clientaggregator._core.aggregation import (
    AggregatingClient,
    SubResourceClient,
    StatusWriter,
)
from clientaggregator._core.routing import (
    Routes,
)
from clientaggregator._core.tables import (
    RoutingTable,
    load_table,
    parse_table,
)

__all__ = [
    'KindResolutionError',
    'UnregisteredKindError',
    'AmbiguousKindError',
    'MissingKindError',
    'APIError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
    'APIUnsupportedError',
    'Client',
    'SubResourceReader',
    'SubResourceWriter',
    'SubResourceClientProtocol',
    'Watcher',
    'Scheme',
    'gvk_for_object',
    'AggregatorSettings',
    'RoutingSettings',
    'Precedence',
    'RawBody',
    'RawMeta',
    'RawList',
    'RawEvent',
    'RawEventType',
    'Labels',
    'Annotations',
    'Option',
    'InNamespace',
    'MatchingLabels',
    'MatchingFields',
    'Limit',
    'DryRun',
    'SubResourceBody',
    'Patch',
    'PatchType',
    'JSONPatch',
    'JSONPatchItem',
    'GroupKind',
    'GroupVersionKind',
    'ObjectKey',
    'Namespace',
    'AggregatingClient',
    'SubResourceClient',
    'StatusWriter',
    'Routes',
    'RoutingTable',
    'load_table',
    'parse_table',
]
