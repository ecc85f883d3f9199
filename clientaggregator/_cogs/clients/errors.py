"""
Errors of the kind resolution and of the K8s API calls.

The resolution errors are raised by the scheme when an object cannot be mapped
to exactly one group-version-kind. The aggregator intercepts them and routes
such objects to the default backend (unless configured to be strict).

The K8s API errors are raised by the backends. The aggregator never intercepts,
wraps or translates them: the callers see them exactly as raised by a backend.
They follow the K8s API's ``Status`` structure, so that the real API clients
and the fake ones can raise them the same way.

Some selected reasons of K8s API errors are made into their own classes,
so that they could be intercepted and handled in other places.
All other reasons are raised as the base error class and are indistinguishable
from each other (except via the exception's fields).
"""
from typing import Collection, Optional

from typing_extensions import Literal, TypedDict


class KindResolutionError(Exception):
    """ An object cannot be mapped to its group-version-kind. """


class UnregisteredKindError(KindResolutionError):
    """ The object's class is not registered in the scheme. """


class AmbiguousKindError(KindResolutionError):
    """ The object's class is registered for several group-version-kinds. """


class MissingKindError(KindResolutionError):
    """ The object's body has no or malformed ``apiVersion`` or ``kind``. """


class RawStatusCause(TypedDict):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict, total=False):
    name: str
    uid: str
    retryAfterSeconds: int
    kind: str
    group: str
    causes: Collection[RawStatusCause]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.19/#status-v1-meta
class RawStatus(TypedDict, total=False):
    apiVersion: str
    kind: Literal["Status"]
    code: int
    status: Literal["Success", "Failure"]
    reason: str
    message: str
    details: RawStatusDetails


class APIError(Exception):

    def __init__(
            self,
            payload: Optional[RawStatus],
            *,
            status: int,
    ) -> None:
        message = payload.get('message') if payload else None
        super().__init__(message, payload)
        self._status = status
        self._payload = payload

    @property
    def status(self) -> int:
        return self._status

    @property
    def code(self) -> Optional[int]:
        return self._payload.get('code') if self._payload else None

    @property
    def reason(self) -> Optional[str]:
        return self._payload.get('reason') if self._payload else None

    @property
    def message(self) -> Optional[str]:
        return self._payload.get('message') if self._payload else None

    @property
    def details(self) -> Optional[RawStatusDetails]:
        return self._payload.get('details') if self._payload else None


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


class APIConflictError(APIError):
    pass


class APIUnsupportedError(APIError):
    pass


def make_error(
        status: int,
        reason: str,
        message: str,
        *,
        name: Optional[str] = None,
        kind: Optional[str] = None,
        group: Optional[str] = None,
) -> APIError:
    """
    Build an API error of a proper class as if it came from K8s API.
    """
    details: RawStatusDetails = {}
    if name is not None:
        details['name'] = name
    if kind is not None:
        details['kind'] = kind
    if group is not None:
        details['group'] = group
    payload: RawStatus = {
        'apiVersion': 'v1',
        'kind': 'Status',
        'code': status,
        'status': 'Failure',
        'reason': reason,
        'message': message,
        'details': details,
    }
    cls = (
        APIUnauthorizedError if status == 401 else
        APIForbiddenError if status == 403 else
        APINotFoundError if status == 404 else
        APIConflictError if status == 409 else
        APIUnsupportedError if status in (405, 415) else
        APIError
    )
    return cls(payload, status=status)
