"""
The access-client contract, as implemented by all backends and the aggregator.

The contract is structural: any class with these methods is a valid backend,
there is no need to inherit from the protocols. The writing and reading verbs
are coroutines, as they usually involve the network round-trips; the kind
introspection is synchronous, as it is served from the scheme.

The verbs fill the passed objects in place (as the API servers respond)
and return nothing, except for ``watch()``, which returns a `Watcher`.
All failures are raised as exceptions, usually `errors.APIError`.
"""
from typing import Any, AsyncIterator

from typing_extensions import Protocol

from clientaggregator._cogs.clients import schemes
from clientaggregator._cogs.structs import bodies, options, patches, references


class Watcher(Protocol):
    """
    A live stream of events, owned by the caller once returned.

    Iterating over it yields the events until the watcher is stopped
    (or until the underlying stream ends on its own).
    """

    def __aiter__(self) -> AsyncIterator[bodies.RawEvent]: ...

    def stop(self) -> None: ...


class SubResourceReader(Protocol):

    async def get(
            self,
            obj: Any,
            subresource: Any,
            *opts: options.Option,
    ) -> None: ...


class SubResourceWriter(Protocol):

    async def create(
            self,
            obj: Any,
            subresource: Any,
            *opts: options.Option,
    ) -> None: ...

    async def update(
            self,
            obj: Any,
            *opts: options.Option,
    ) -> None: ...

    async def patch(
            self,
            obj: Any,
            patch: patches.Patch,
            *opts: options.Option,
    ) -> None: ...


class SubResourceClient(SubResourceReader, SubResourceWriter, Protocol):
    pass


class Client(Protocol):

    @property
    def scheme(self) -> schemes.Scheme: ...

    def rest_mapper(self) -> Any: ...

    def gvk_for(self, obj: Any) -> references.GroupVersionKind: ...

    def is_namespaced(self, obj: Any) -> bool: ...

    async def get(
            self,
            key: references.ObjectKey,
            obj: Any,
            *opts: options.Option,
    ) -> None: ...

    async def list(
            self,
            objs: Any,
            *opts: options.Option,
    ) -> None: ...

    async def create(
            self,
            obj: Any,
            *opts: options.Option,
    ) -> None: ...

    async def update(
            self,
            obj: Any,
            *opts: options.Option,
    ) -> None: ...

    async def delete(
            self,
            obj: Any,
            *opts: options.Option,
    ) -> None: ...

    async def patch(
            self,
            obj: Any,
            patch: patches.Patch,
            *opts: options.Option,
    ) -> None: ...

    async def delete_all_of(
            self,
            obj: Any,
            *opts: options.Option,
    ) -> None: ...

    async def watch(
            self,
            objs: Any,
            *opts: options.Option,
    ) -> Watcher: ...

    def subresource(self, name: str) -> SubResourceClient: ...

    def status(self) -> SubResourceWriter: ...
