"""Tests for the shared ranged-read logic of object readers."""

import io

import pytest

from swiftstore.infra.storage.client import RangedObjectReader, StorageError

PAYLOAD = b"abcdefghijklmnop"


class InMemoryReader(RangedObjectReader):
    def __init__(self, data: bytes) -> None:
        super().__init__("pre/data/abc")
        self._data = data
        self._length = len(data)
        self.fetches: list[int] = []
        self.bodies: list[io.BytesIO] = []

    def _fetch(self, offset: int) -> io.BytesIO:
        self.fetches.append(offset)
        body = io.BytesIO(self._data[offset:])
        self.bodies.append(body)
        return body


class TestRangedObjectReader:
    """Test body reuse, refetching and closing."""

    def test_sequential_reads_use_one_request(self):
        reader = InMemoryReader(PAYLOAD)
        buf = bytearray(4)

        reader.readinto(memoryview(buf))
        reader.readinto(memoryview(buf))

        assert bytes(buf) == b"efgh"
        assert reader.fetches == [0]

    def test_seek_drops_body_and_refetches(self):
        reader = InMemoryReader(PAYLOAD)
        buf = bytearray(3)
        reader.readinto(memoryview(buf))

        reader.seek(10)
        reader.readinto(memoryview(buf))

        assert bytes(buf) == b"klm"
        assert reader.fetches == [0, 10]
        assert reader.bodies[0].closed

    def test_read_at_end_does_not_fetch(self):
        reader = InMemoryReader(PAYLOAD)
        reader.seek(len(PAYLOAD))

        assert reader.readinto(memoryview(bytearray(2))) == 0
        assert reader.fetches == []

    def test_negative_seek_rejected(self):
        with pytest.raises(StorageError, match="Negative seek"):
            InMemoryReader(PAYLOAD).seek(-1)

    def test_close_releases_body_once(self):
        reader = InMemoryReader(PAYLOAD)
        reader.readinto(memoryview(bytearray(1)))

        reader.close()
        reader.close()

        assert reader.bodies[0].closed
        with pytest.raises(StorageError, match="closed"):
            reader.seek(0)

    def test_base_class_needs_fetch(self):
        reader = RangedObjectReader("k")
        reader._length = 1

        with pytest.raises(NotImplementedError):
            reader.readinto(memoryview(bytearray(1)))
