"""
Hash helpers shared by the Schnorr engine and its callers.
"""

from hashlib import sha256 as _sha256


def sha256(data: bytes) -> bytes:
    return _sha256(data).digest()


def double_sha256(data: bytes) -> bytes:
    """
    sha256(sha256(data)), the Bitcoin style message digest.
    """
    return sha256(sha256(data))


def hash_to_scalar(data: bytes, order: int) -> int:
    """
    Interpret sha256(data) as a big endian integer and reduce it mod order.
    """
    return int.from_bytes(sha256(data), byteorder="big") % order
