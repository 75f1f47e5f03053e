"""Stored entry formats, encoded with orjson.

Value entry (one per query key)::

    {"kind": "envelope", "message": "", "metadata": {"lastWrite": 1700000000000, ...}, "data": ...}

Watermark entry (one per service and per item id)::

    {"lastWrite": 1700000000000}

``lastWrite`` is an integer millisecond timestamp. Entries are written whole
and never patched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import orjson
from pydantic import BaseModel

from hookcache.exceptions import SerializationError

from .context import Envelope, Payload, Raw

LAST_WRITE = "lastWrite"
KIND_ENVELOPE = "envelope"
KIND_RAW = "raw"


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload stamped with the time it was written."""
    last_write: int
    data: Any
    metadata: Dict[str, Any] = field(default_factory=dict)
    message: str = ""
    kind: str = KIND_RAW

    @classmethod
    def from_payload(cls, payload: Payload, last_write: int) -> "CacheEntry":
        """Split a result into metadata and data, stamping ``last_write``."""
        if isinstance(payload, Envelope):
            metadata = {k: v for k, v in payload.metadata.items() if k not in ("data", LAST_WRITE)}
            return cls(
                last_write=last_write,
                data=payload.data,
                metadata=metadata,
                message=payload.message,
                kind=KIND_ENVELOPE,
            )
        return cls(last_write=last_write, data=payload.payload, kind=KIND_RAW)

    def to_payload(self) -> Payload:
        """Restore the result variant this entry was written from, without ``lastWrite``."""
        if self.kind == KIND_ENVELOPE:
            return Envelope(data=self.data, metadata=dict(self.metadata), message=self.message)
        return Raw(self.data)


@dataclass(frozen=True)
class WatermarkEntry:
    """Time of the most recent mutation known to affect a scope."""
    last_write: int


def _default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def encode_entry(key: str, entry: CacheEntry) -> str:
    """Serialize a value entry for the store."""
    document = {
        "kind": entry.kind,
        "message": entry.message,
        "metadata": {**entry.metadata, LAST_WRITE: entry.last_write},
        "data": entry.data,
    }
    try:
        return orjson.dumps(document, default=_default).decode("utf-8")
    except TypeError as e:
        raise SerializationError(key, str(e)) from e


def decode_entry(key: str, raw: Optional[str]) -> Optional[CacheEntry]:
    """Parse a value entry; None when the key was absent."""
    if raw is None:
        return None
    try:
        document = orjson.loads(raw)
        metadata = dict(document["metadata"])
        last_write = metadata.pop(LAST_WRITE)
        if not isinstance(last_write, int):
            raise TypeError(f"{LAST_WRITE} must be an integer")
        return CacheEntry(
            last_write=last_write,
            data=document.get("data"),
            metadata=metadata,
            message=document.get("message") or "",
            kind=document.get("kind", KIND_ENVELOPE),
        )
    except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise SerializationError(key, f"undecodable cache entry: {e}") from e


def encode_watermark(watermark: WatermarkEntry) -> str:
    return orjson.dumps({LAST_WRITE: watermark.last_write}).decode("utf-8")


def decode_watermark(key: str, raw: Optional[str]) -> Optional[WatermarkEntry]:
    """Parse a watermark entry; None when the key was absent."""
    if raw is None:
        return None
    try:
        last_write = orjson.loads(raw)[LAST_WRITE]
        if not isinstance(last_write, int):
            raise TypeError(f"{LAST_WRITE} must be an integer")
        return WatermarkEntry(last_write=last_write)
    except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise SerializationError(key, f"undecodable watermark: {e}") from e
