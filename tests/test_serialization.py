"""Tests for stored entry encoding."""

import orjson
import pytest
from pydantic import BaseModel

from hookcache.cache import CacheEntry, Envelope, Raw, WatermarkEntry
from hookcache.cache.serialization import (
    decode_entry,
    decode_watermark,
    encode_entry,
    encode_watermark,
)
from hookcache.exceptions import SerializationError


class User(BaseModel):
    id: int
    name: str


class TestCacheEntry:
    def test_envelope_split_into_metadata_and_data(self):
        payload = Envelope(data=[{"id": 1}], metadata={"total": 1, "data": "dropped"}, message="ok")

        entry = CacheEntry.from_payload(payload, last_write=100)

        assert entry.data == [{"id": 1}]
        assert entry.metadata == {"total": 1}
        assert entry.message == "ok"
        assert entry.last_write == 100

    def test_stored_document_carries_last_write_in_metadata(self):
        entry = CacheEntry.from_payload(Envelope(data=[], metadata={"total": 0}), last_write=100)

        document = orjson.loads(encode_entry("k", entry))

        assert document["metadata"] == {"total": 0, "lastWrite": 100}
        assert document["kind"] == "envelope"

    def test_decoded_payload_has_no_last_write(self):
        entry = CacheEntry.from_payload(Envelope(data=[1], metadata={"total": 1}, message="m"), last_write=7)

        decoded = decode_entry("k", encode_entry("k", entry))

        assert decoded.last_write == 7
        assert decoded.to_payload() == Envelope(data=[1], metadata={"total": 1}, message="m")

    def test_raw_payload_restores_raw(self):
        entry = CacheEntry.from_payload(Raw({"id": 42}), last_write=1)

        decoded = decode_entry("k", encode_entry("k", entry))

        assert decoded.to_payload() == Raw({"id": 42})

    def test_pydantic_models_are_stored_as_json(self):
        entry = CacheEntry.from_payload(Raw(User(id=1, name="alice")), last_write=1)

        decoded = decode_entry("k", encode_entry("k", entry))

        assert decoded.data == {"id": 1, "name": "alice"}

    def test_unserializable_payload_raises(self):
        entry = CacheEntry.from_payload(Raw(object()), last_write=1)

        with pytest.raises(SerializationError):
            encode_entry("k", entry)

    def test_absent_entry_decodes_to_none(self):
        assert decode_entry("k", None) is None

    @pytest.mark.parametrize("raw", ["not json", "[]", '{"data": 1}', '{"metadata": {"lastWrite": "soon"}}'])
    def test_malformed_entry_raises(self, raw):
        with pytest.raises(SerializationError):
            decode_entry("k", raw)


class TestWatermarkEntry:
    def test_encode_decode(self):
        raw = encode_watermark(WatermarkEntry(last_write=150))

        assert orjson.loads(raw) == {"lastWrite": 150}
        assert decode_watermark("w", raw) == WatermarkEntry(last_write=150)

    def test_absent_watermark_decodes_to_none(self):
        assert decode_watermark("w", None) is None

    @pytest.mark.parametrize("raw", ["{", "{}", '{"lastWrite": null}', "3"])
    def test_malformed_watermark_raises(self, raw):
        with pytest.raises(SerializationError):
            decode_watermark("w", raw)
