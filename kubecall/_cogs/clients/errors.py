"""
K8s API errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on embedding its exceptions all over the callers' code.
Hence, we have our own hierarchy of exceptions for K8s API errors.

Low-level errors, such as the network connectivity issues, SSL/HTTPS issues,
timeouts, etc, are escalated from the client library as is, since they are
related not to the domain of K8s API, but rather to the networking. These are
the only errors that are retried; once the retries are exhausted, the last
one is raised unmodified.

Some selected reasons of K8s API errors are made into their own classes,
so that they could be intercepted and handled by the callers. Most notably,
HTTP 409 Conflict is raised as `APIConflictError`, so that the callers could
re-fetch the object and re-apply their changes (optimistic concurrency).
All other reasons are raised as the base error class and are indistinguishable
from each other (except via the exception's fields).

The response body is always read in full before the error is raised,
so that it is available for inspection even if it is not a K8s ``Status``.

Successful responses that cannot be parsed into what the caller expects are
raised as `APIPayloadError`, which is not an `APIError`: the request succeeded,
but the server broke the contract.
"""
import collections.abc
import json
from typing import Any, Collection, Optional

from typing_extensions import Literal, TypedDict

EMPTY_BODY = b'{}'


class RawStatusCause(TypedDict):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict):
    name: str
    uid: str
    retryAfterSeconds: int
    kind: str
    group: str
    causes: Collection[RawStatusCause]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.19/#status-v1-meta
class RawStatus(TypedDict):
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
            body: bytes,
            *,
            status: int,
            reason: Optional[str] = None,
    ) -> None:
        self._status = status
        self._reason = reason or ''
        self._body = body
        self._payload = parse_status(body)
        super().__init__(
            f"response has status \"{self._status} {self._reason}\" and body \"{self.text}\""
        )

    @property
    def status(self) -> int:
        return self._status

    @property
    def reason(self) -> str:
        return self._reason

    @property
    def body(self) -> bytes:
        return self._body

    @property
    def text(self) -> str:
        return self._body.decode('utf-8', errors='replace')

    @property
    def code(self) -> Optional[int]:
        return self._payload.get('code') if self._payload else None

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


class APIPayloadError(Exception):
    """ A successful response has a body that does not match the expectations. """


def parse_status(body: bytes) -> Optional[RawStatus]:
    try:
        payload = json.loads(body.decode('utf-8'))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None

    # Better be safe: who knows which sensitive information can be dumped unless kind==Status.
    if not isinstance(payload, collections.abc.Mapping) or payload.get('kind') != 'Status':
        return None
    return payload  # type: ignore


def check_response(
        body: bytes,
        *,
        status: int,
        reason: Optional[str] = None,
) -> bytes:
    """
    Classify the fully read response: either return its body as is, or raise.
    """
    if 200 <= status <= 299:
        return body

    cls = (
        APIUnauthorizedError if status == 401 else
        APIForbiddenError if status == 403 else
        APINotFoundError if status == 404 else
        APIConflictError if status == 409 else
        APIError
    )
    raise cls(body, status=status, reason=reason)


def parse_response(body: bytes, *, shape: Any) -> Any:
    """
    Parse the body of a successful response and verify its top-level type.

    An empty body is interpreted as an empty object, so that the callers
    expecting a JSON object have something to parse.
    """
    try:
        payload = json.loads((body or EMPTY_BODY).decode('utf-8'))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise APIPayloadError(f"Unparseable response body: {body[:100]!r}") from e
    if not isinstance(payload, shape):
        raise APIPayloadError(f"Unexpected response type: {type(payload).__name__}")
    return payload
