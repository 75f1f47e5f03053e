"""Cache key construction.

Convention:
    {prefix}{service}                 service watermark
    {prefix}{service}:{id}            id watermark
    {prefix}{hash}                    collection query value
    {prefix}{id}:{hash}               single-item query value

The query hash is SHA-256 over a JSON array of the request shape, in this
fixed order: resource path, operation, query params (sorted keys), custom
action, access channel, allow-listed header values, acting user id (only
when per-user caching is on). Changing the order changes every key, which
amounts to flushing the cache on deploy.

Examples:
    hookcache:users
    hookcache:users:42
    hookcache:42:9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08
"""

import hashlib
from datetime import date, datetime
from typing import Any, List, Optional

import orjson
from pydantic import BaseModel

from hookcache.exceptions import SerializationError

from .context import RequestContext

# orjson only encodes integers that fit in 64 bits.
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 64 - 1


def service_key(prefix: str, service_name: str) -> str:
    """Key of the watermark covering a whole service."""
    return f"{prefix}{service_name}"


def id_key(prefix: str, service_name: str, resource_id: Any) -> str:
    """Key of the watermark covering one item of a service."""
    return f"{prefix}{service_name}:{resource_id}"


def derive_query_key(
    ctx: RequestContext,
    prefix: str,
    headers: Optional[List[str]] = None,
    per_user: bool = False,
    explicit_id: Any = None,
) -> str:
    """Build a deterministic key for one shape of read request.

    Args:
        ctx: Request context supplying the hashed fields
        prefix: Namespace prefix
        headers: Allow-list of (lower-cased) header names folded into the key
        per_user: Whether the acting user id is folded into the key
        explicit_id: Item id scoping the key; None for collection queries

    Returns:
        Key string like "hookcache:42:9f86d0..."
    """
    selected = {name.lower(): value for name, value in ctx.selected_headers.items()}
    shape = [
        ctx.resource_path,
        ctx.operation.value,
        _normalize(ctx.query_params),
        ctx.action or "",
        ctx.access_channel or "",
        [_header_value(selected.get(name)) for name in headers or []],
        _normalize(ctx.acting_user_id or "") if per_user else "",
    ]
    try:
        material = orjson.dumps(shape, option=orjson.OPT_SORT_KEYS)
    except TypeError as e:
        raise SerializationError(prefix, f"request shape cannot be hashed: {e}") from e
    digest = hashlib.sha256(material).hexdigest()
    if explicit_id is not None and explicit_id != "":
        return f"{prefix}{explicit_id}:{digest}"
    return f"{prefix}{digest}"


def _header_value(value):
    """Header values as text; ASGI scopes carry them as latin-1 bytes."""
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def _normalize(obj):
    """Normalize query values for deterministic hashing."""
    if isinstance(obj, int) and not isinstance(obj, bool) and not INT_MIN <= obj <= INT_MAX:
        return str(obj)
    elif isinstance(obj, (str, int, float, bool, type(None))):
        return obj
    elif isinstance(obj, (date, datetime)):
        return obj.isoformat()
    elif isinstance(obj, BaseModel):
        return _normalize(obj.model_dump(mode="json"))
    elif isinstance(obj, dict):
        return {str(k): _normalize(v) for k, v in sorted(obj.items(), key=lambda kv: str(kv[0]))}
    elif isinstance(obj, (list, tuple)):
        return [_normalize(item) for item in obj]
    elif isinstance(obj, (set, frozenset)):
        return sorted((_normalize(item) for item in obj), key=str)
    else:
        return str(obj)
