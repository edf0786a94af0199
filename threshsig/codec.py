"""
Wire format of a signature share:

    [2 byte big endian index][payload]

There is no version field, both sides agree on the payload format out of band.
"""

from collections import namedtuple

from .errors import MalformedShare

index_length = 2
max_index = 2 ** (8 * index_length) - 1

SigShare = namedtuple("SigShare", "index value")


class SigShare(SigShare):
    def encode(self) -> bytes:
        return encode(self.index, self.value)

    @classmethod
    def decode(cls, data: bytes) -> "SigShare":
        return cls(*decode(data))

    def __repr__(self):
        return f"SigShare(index={self.index}, value={self.value.hex()})"


def encode(index: int, payload: bytes) -> bytes:
    if not 0 <= index <= max_index:
        raise ValueError(f"share index {index} does not fit in {index_length} bytes")
    return index.to_bytes(index_length, byteorder="big") + bytes(payload)


def decode(data: bytes):
    if len(data) < index_length:
        raise MalformedShare(f"share is {len(data)} bytes, need at least {index_length}")
    return int.from_bytes(data[:index_length], byteorder="big"), bytes(data[index_length:])
