"""
The aggregating client: one client-like facade over several backend clients.

Every call is routed to one of the backends by the kind of the object
in question (see `routing.Routes`), and then delegated to that backend
with exactly the same arguments. The backend's results and errors are
returned and raised as they are: no retries, no caching, no wrapping.

If the object's kind cannot be determined (e.g., its class is unregistered),
the call goes to the default backend, as if there were no routes at all.

The sub-resources and the statuses are routed by the primary objects,
not by the sub-resource payloads (which are often of other kinds).

The routes should be registered before the client is used, usually in the
setup phase. Registering them concurrently with the calls, or with each other
from several threads, is safe, but the calls that are in progress keep using
the previously selected backends.

The aggregator owns neither the backends nor the watchers it returns:
they are closed and stopped by the callers.
"""
import logging
from typing import Any, NoReturn, Optional

from clientaggregator._cogs.clients import errors, protocols, schemes
from clientaggregator._cogs.configs import configuration
from clientaggregator._cogs.structs import options, patches, references
from clientaggregator._core import routing

logger = logging.getLogger(__name__)


class AggregatingClient:

    def __init__(
            self,
            default: protocols.Client,
            *,
            scheme: Optional[schemes.Scheme] = None,
            settings: Optional[configuration.AggregatorSettings] = None,
    ) -> None:
        super().__init__()
        self._scheme = scheme if scheme is not None else default.scheme
        self._settings = settings if settings is not None else configuration.AggregatorSettings()
        self._routes: routing.Routes[protocols.Client] = routing.Routes(default)

    def __repr__(self) -> str:
        groups = len(self._routes.groups)
        kinds = len(self._routes.kinds)
        return f'<{self.__class__.__name__} groups={groups} kinds={kinds}>'

    @property
    def routes(self) -> routing.Routes[protocols.Client]:
        return self._routes

    @property
    def settings(self) -> configuration.AggregatorSettings:
        return self._settings

    @property
    def scheme(self) -> schemes.Scheme:
        """
        The shared scheme used to resolve the kinds for all backends.

        To make new classes routable, register them in this scheme.
        """
        return self._scheme

    def add_group(self, group: str, backend: protocols.Client) -> None:
        self._routes.add_group(group, backend)

    def add_group_kind(self, group: str, kind: str, backend: protocols.Client) -> None:
        self._routes.add_group_kind(references.GroupKind(group=group, kind=kind), backend)

    def resolve(self, obj: Any) -> protocols.Client:
        """
        Select the backend to serve the object (or the list of objects).
        """
        gvk: Optional[references.GroupVersionKind]
        try:
            gvk = schemes.gvk_for_object(obj, self._scheme)
        except errors.KindResolutionError as e:
            if self._settings.routing.strict:
                raise
            logger.debug(f"Routing to the default backend due to unresolved kind: {e}")
            gvk = None
        return self._routes.select(gvk, precedence=self._settings.routing.precedence)

    def rest_mapper(self) -> NoReturn:
        raise NotImplementedError("REST mapping is not supported by the aggregating client.")

    def gvk_for(self, obj: Any) -> references.GroupVersionKind:
        return self.resolve(obj).gvk_for(obj)

    def is_namespaced(self, obj: Any) -> bool:
        return self.resolve(obj).is_namespaced(obj)

    async def get(self, key: references.ObjectKey, obj: Any, *opts: options.Option) -> None:
        return await self.resolve(obj).get(key, obj, *opts)

    async def list(self, objs: Any, *opts: options.Option) -> None:
        return await self.resolve(objs).list(objs, *opts)

    async def create(self, obj: Any, *opts: options.Option) -> None:
        return await self.resolve(obj).create(obj, *opts)

    async def update(self, obj: Any, *opts: options.Option) -> None:
        return await self.resolve(obj).update(obj, *opts)

    async def delete(self, obj: Any, *opts: options.Option) -> None:
        return await self.resolve(obj).delete(obj, *opts)

    async def patch(self, obj: Any, patch: patches.Patch, *opts: options.Option) -> None:
        return await self.resolve(obj).patch(obj, patch, *opts)

    async def delete_all_of(self, obj: Any, *opts: options.Option) -> None:
        return await self.resolve(obj).delete_all_of(obj, *opts)

    async def watch(self, objs: Any, *opts: options.Option) -> protocols.Watcher:
        return await self.resolve(objs).watch(objs, *opts)

    def subresource(self, name: str) -> "SubResourceClient":
        return SubResourceClient(self, name)

    def status(self) -> "StatusWriter":
        return StatusWriter(self)


class SubResourceClient:
    """
    A view of the aggregating client for one named sub-resource.
    """

    def __init__(self, client: AggregatingClient, name: str) -> None:
        super().__init__()
        self._client = client
        self._name = name

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self._name!r}>'

    @property
    def name(self) -> str:
        return self._name

    async def get(self, obj: Any, subresource: Any, *opts: options.Option) -> None:
        backend = self._client.resolve(obj)
        return await backend.subresource(self._name).get(obj, subresource, *opts)

    async def create(self, obj: Any, subresource: Any, *opts: options.Option) -> None:
        backend = self._client.resolve(obj)
        return await backend.subresource(self._name).create(obj, subresource, *opts)

    async def update(self, obj: Any, *opts: options.Option) -> None:
        backend = self._client.resolve(obj)
        return await backend.subresource(self._name).update(obj, *opts)

    async def patch(self, obj: Any, patch: patches.Patch, *opts: options.Option) -> None:
        backend = self._client.resolve(obj)
        return await backend.subresource(self._name).patch(obj, patch, *opts)


class StatusWriter:
    """
    A view of the aggregating client for the ``status`` sub-resource.
    """

    def __init__(self, client: AggregatingClient) -> None:
        super().__init__()
        self._client = client

    async def create(self, obj: Any, subresource: Any, *opts: options.Option) -> None:
        return await self._client.resolve(obj).status().create(obj, subresource, *opts)

    async def update(self, obj: Any, *opts: options.Option) -> None:
        return await self._client.resolve(obj).status().update(obj, *opts)

    async def patch(self, obj: Any, patch: patches.Patch, *opts: options.Option) -> None:
        return await self._client.resolve(obj).status().patch(obj, patch, *opts)
