"""
Group capabilities used by the threshold protocols.

The protocol code never does curve arithmetic itself. It goes through a
CurveGroup, which wraps a real implementation:

    1. secp256k1 on top of python-ecdsa (Schnorr aggregation).
    2. BLS12-381 G1 and G2 on top of py_ecc (threshold BLS). Public keys and
       commitments live in G1, signatures in G2, as in the min-pubkey-size
       variant of
       https://datatracker.ietf.org/doc/html/draft-irtf-cfrg-bls-signature

Scalars are plain python ints reduced mod `order`.
"""

import secrets
from functools import reduce

from ecdsa import SECP256k1
from ecdsa.ellipticcurve import INFINITY, PointJacobi
from ecdsa.errors import MalformedPointError
from ecdsa.numbertheory import jacobi
from py_ecc.optimized_bls12_381 import G1, G2, Z1, Z2, add, multiply, eq, curve_order
from py_ecc.bls.g2_primitives import (
    G1_to_pubkey,
    pubkey_to_G1,
    G2_to_signature,
    signature_to_G2,
)

from .errors import RandomnessFailure

scalar_length = 32


class CurveGroup:
    """
    A prime order group with a fixed generator.
    Subclasses provide the point operations and point encoding.
    """

    name = None
    order = None

    def identity(self):
        raise NotImplementedError

    def base_point(self):
        raise NotImplementedError

    def add(self, a, b):
        raise NotImplementedError

    def scalar_mul(self, point, scalar: int):
        raise NotImplementedError

    def eq(self, a, b) -> bool:
        raise NotImplementedError

    def encode_point(self, point) -> bytes:
        raise NotImplementedError

    def decode_point(self, data: bytes):
        raise NotImplementedError

    def base_mul(self, scalar: int):
        return self.scalar_mul(self.base_point(), scalar)

    def sum_points(self, points):
        # point addition is commutative and associative, so any order will do.
        return reduce(self.add, points, self.identity())

    def random_scalar(self, rng=None) -> int:
        """
        Uniform scalar in [1, order). `rng` is anything with a randrange method,
        a seeded random.Random in tests and the OS CSPRNG otherwise.
        A failing source is fatal, there is no fallback.
        """
        if rng is None:
            rng = secrets.SystemRandom()
        try:
            return rng.randrange(1, self.order)
        except (OSError, NotImplementedError, ValueError) as e:
            raise RandomnessFailure(f"randomness source failed: {e}") from e

    def encode_scalar(self, scalar: int) -> bytes:
        return (scalar % self.order).to_bytes(scalar_length, byteorder="big")

    def decode_scalar(self, data: bytes) -> int:
        if len(data) != scalar_length:
            raise ValueError(f"scalar must be {scalar_length} bytes, got {len(data)}")
        value = int.from_bytes(data, byteorder="big")
        if value >= self.order:
            raise ValueError("scalar is not reduced mod the group order")
        return value

    def __repr__(self):
        return f"{self.__class__.__name__}({self.name})"


class Secp256k1Group(CurveGroup):
    name = "secp256k1"
    order = SECP256k1.order
    # size of the base field
    p = SECP256k1.curve.p()

    def identity(self):
        return INFINITY

    def base_point(self):
        return SECP256k1.generator

    def add(self, a, b):
        return a + b

    def scalar_mul(self, point, scalar: int):
        return point * (scalar % self.order)

    def eq(self, a, b) -> bool:
        return a == b

    def is_identity(self, point) -> bool:
        return point == INFINITY

    def has_square_y(self, point) -> bool:
        """
        True if the affine y coordinate is a quadratic residue mod p.
        This is the nonce sign convention of the bip-schnorr draft.
        """
        return jacobi(point.y(), self.p) == 1

    def encode_point(self, point) -> bytes:
        """SEC1 compressed, 33 bytes"""
        if self.is_identity(point):
            raise ValueError("Cannot serialize the point at infinity.")
        return point.to_bytes("compressed")

    def decode_point(self, data: bytes):
        try:
            return PointJacobi.from_bytes(SECP256k1.curve, data, order=self.order)
        except MalformedPointError as e:
            raise ValueError("Invalid encoding of a secp256k1 point.") from e


class BLS12381G1Group(CurveGroup):
    name = "bls12-381 G1"
    order = curve_order

    def identity(self):
        return Z1

    def base_point(self):
        return G1

    def add(self, a, b):
        return add(a, b)

    def scalar_mul(self, point, scalar: int):
        return multiply(point, scalar % self.order)

    def eq(self, a, b) -> bool:
        return eq(a, b)

    def encode_point(self, point) -> bytes:
        """48 byte compressed public key"""
        return G1_to_pubkey(point)

    def decode_point(self, data: bytes):
        return pubkey_to_G1(data)


class BLS12381G2Group(CurveGroup):
    name = "bls12-381 G2"
    order = curve_order

    def identity(self):
        return Z2

    def base_point(self):
        return G2

    def add(self, a, b):
        return add(a, b)

    def scalar_mul(self, point, scalar: int):
        return multiply(point, scalar % self.order)

    def eq(self, a, b) -> bool:
        return eq(a, b)

    def encode_point(self, point) -> bytes:
        """96 byte compressed signature"""
        return G2_to_signature(point)

    def decode_point(self, data: bytes):
        return signature_to_G2(data)


SECP256K1 = Secp256k1Group()
BLS_G1 = BLS12381G1Group()
BLS_G2 = BLS12381G2Group()
