"""
Descriptors of the individual API requests.

A request is described once per call and is never modified afterwards:
the same descriptor is re-sent on every attempt of the retry cycle.
"""
import dataclasses
import types
from typing import Mapping, Optional


@dataclasses.dataclass(frozen=True)
class APIRequest:
    method: str
    path: str  # relative to the server/api root.
    query: Mapping[str, str] = dataclasses.field(default_factory=dict)
    payload: Optional[object] = None

    def __post_init__(self) -> None:
        # Detach from the caller's dict: later changes there must not leak into the retries.
        object.__setattr__(self, 'method', self.method.upper())
        object.__setattr__(self, 'query', types.MappingProxyType(dict(self.query)))
