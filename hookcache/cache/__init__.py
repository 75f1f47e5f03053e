"""Caching hook: key derivation, watermark invalidation and phase orchestration."""

from .context import Envelope, Operation, Payload, Phase, Raw, RequestContext
from .decorator import cached_operation
from .hook import CacheHook
from .keys import derive_query_key, id_key, service_key
from .serialization import CacheEntry, WatermarkEntry
from .watermarks import WatermarkCache, is_outdated

__all__ = [
    "CacheEntry",
    "CacheHook",
    "Envelope",
    "Operation",
    "Payload",
    "Phase",
    "Raw",
    "RequestContext",
    "WatermarkCache",
    "WatermarkEntry",
    "cached_operation",
    "derive_query_key",
    "id_key",
    "is_outdated",
    "service_key",
]
