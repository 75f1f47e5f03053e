"""Request context threaded through the Pre and Post phases of the hook.

The host framework owns the context; the hook reads the request shape from
it and may overwrite ``result`` (Pre phase, on a cache hit) or read it
(Post phase, to persist it).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Phase(str, Enum):
    """Which side of the underlying operation the hook is running on."""
    PRE = "pre"
    POST = "post"


class Operation(str, Enum):
    """Service operation being executed."""
    LIST = "list"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    PATCH = "patch"
    DELETE = "delete"

    @property
    def is_mutation(self) -> bool:
        return self in (Operation.UPDATE, Operation.PATCH, Operation.DELETE)


@dataclass
class Envelope:
    """Result wrapped with metadata, e.g. a paginated listing or status message."""
    data: Any
    metadata: Dict[str, Any] = field(default_factory=dict)
    message: str = ""


@dataclass
class Raw:
    """Result that is the payload itself."""
    payload: Any


Payload = Union[Envelope, Raw]


def payload_data(result: Optional[Payload]) -> Any:
    """Return the business data carried by a result, whichever variant it is."""
    if isinstance(result, Envelope):
        return result.data
    if isinstance(result, Raw):
        return result.payload
    return None


@dataclass
class RequestContext:
    """One invocation of a service operation as seen by the cache hook."""
    phase: Phase
    operation: Operation
    resource_path: str
    service_name: str
    resource_id: Optional[str] = None
    query_params: Dict[str, Any] = field(default_factory=dict)
    selected_headers: Dict[str, str] = field(default_factory=dict)
    acting_user_id: Optional[str] = None
    access_channel: Optional[str] = None
    action: Optional[str] = None  # custom action name routed through the service
    service_id_field: Optional[str] = None  # id field declared by the service itself
    result: Optional[Payload] = None
    cache_hit_keys: List[str] = field(default_factory=list)
    served_from_cache: bool = False

    def record_cache_hit(self, query_key: str, result: Payload) -> None:
        """Substitute a cached result and remember its key for the Post phase."""
        if query_key not in self.cache_hit_keys:
            self.cache_hit_keys.append(query_key)
        self.result = result
        self.served_from_cache = True

    def was_served(self, query_key: str) -> bool:
        return query_key in self.cache_hit_keys
