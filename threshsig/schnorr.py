"""
n-of-n Schnorr signature aggregation over secp256k1 (MuSig like, with no nonce
commitment round and no key aggregation coefficients).

Signatures follow the pre BIP340 bip-schnorr draft:
https://github.com/sipa/bips/blob/bip-schnorr/bip-schnorr.mediawiki

    k0 = int(sha256(bytes(d) || m)) mod n
    R  = k0 * G, k = k0 if jacobi(R.y) == 1 else n - k0
    e  = int(sha256(bytes(R.x) || bytes(P) || m)) mod n
    s  = k + e * d mod n
    sig = bytes(R.x) || bytes(s)

With several parties, P and R are the sums of the parties' keys and nonces,
and s the sum of the partial signatures. Every party has to apply the sign
rule against the aggregate R, not against its own R_i: if the aggregate has a
non square y, all parties negate their nonce, which negates R as a whole.
Applying the rule per party leaves a mix of signs and the sum no longer
matches R.

The aggregate key is specific to the subset of parties that signs. A signature
by a subset verifies against the sum of that subset's keys only.
"""

import logging
from collections import namedtuple
from typing import List

from .config import run_parallel
from .curve import SECP256K1
from .hashing import hash_to_scalar

logger = logging.getLogger(__name__)

group = SECP256K1
N = group.order

Signature = namedtuple("Signature", "r s")


class Signature(Signature):
    def to_bytes(self) -> bytes:
        return self.r.to_bytes(32, byteorder="big") + group.encode_scalar(self.s)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Signature":
        if len(data) != 64:
            raise ValueError(f"signature must be 64 bytes, got {len(data)}")
        return cls(int.from_bytes(data[:32], byteorder="big"), int.from_bytes(data[32:], byteorder="big"))

    def __repr__(self):
        return f"{self.r:0>64X}{self.s:0>64X}"


class SchnorrParty:
    """
    State of one participant for one signing session. The nonce is set once
    and a party is not reused for another message.
    """

    def __init__(self, private_key: int):
        if not 0 < private_key < N:
            raise ValueError("private key must be in [1, n)")
        self.private_key = private_key
        self.public_key = group.base_mul(private_key)
        self.k0 = None
        self.nonce_point = None
        self.message = None
        self.sig = None

    @classmethod
    def from_hex(cls, hexint: str) -> "SchnorrParty":
        return cls(int(hexint, 16))

    def derive_nonce(self, message: bytes):
        """
        Deterministic nonce k0 = H(d || m) mod n and its point R_i = k0 * G.
        """
        if self.k0 is not None:
            raise ValueError("Nonce already set")
        k0 = hash_to_scalar(group.encode_scalar(self.private_key) + message, N)
        if k0 == 0:
            raise ValueError("nonce is zero")
        self.k0 = k0
        self.message = message
        self.nonce_point = group.base_mul(k0)
        return self.nonce_point

    def partial_sign(self, aggregate_nonce, aggregate_key) -> int:
        """
        s_i = k + e * d mod n, with k the nonce sign adjusted against the
        aggregate nonce.
        """
        if self.k0 is None:
            raise ValueError("Nonce not set")
        e = challenge(aggregate_nonce, aggregate_key, self.message)
        k = self.k0 if group.has_square_y(aggregate_nonce) else N - self.k0
        self.sig = (k + e * self.private_key) % N
        logger.debug("party sig: %064x", self.sig)
        return self.sig


def pick_parties(picks: List[bool], parties: List[SchnorrParty]) -> List[SchnorrParty]:
    if len(picks) != len(parties):
        raise ValueError("subset mask and party list differ in length")
    return [party for pick, party in zip(picks, parties) if pick]


def aggregate_public_keys(public_keys):
    return group.sum_points(public_keys)


def aggregate_nonces(nonce_points):
    return group.sum_points(nonce_points)


def challenge(nonce_point, public_key, message: bytes) -> int:
    """
    e = int(sha256(bytes(R.x) || compressed(P) || m)) mod n
    """
    return hash_to_scalar(nonce_point.x().to_bytes(32, byteorder="big") + group.encode_point(public_key) + message, N)


def aggregate_signature(aggregate_nonce, partial_signatures) -> Signature:
    s = 0
    for s_i in partial_signatures:
        s = (s + s_i) % N
    return Signature(aggregate_nonce.x(), s)


def verify(public_key, message: bytes, signature: Signature) -> bool:
    """
    R' = s * G - e * P must be finite, have a square y and R'.x == r.
    """
    r, s = signature
    if not all(isinstance(v, int) for v in (r, s)):
        return False
    if not (0 <= r < group.p and 0 <= s < N):
        return False
    if group.is_identity(public_key):
        return False
    e = hash_to_scalar(r.to_bytes(32, byteorder="big") + group.encode_point(public_key) + message, N)
    R = group.add(group.base_mul(s), group.scalar_mul(public_key, N - e))
    if group.is_identity(R):
        return False
    if not group.has_square_y(R):
        return False
    return R.x() == r


def sign(parties: List[SchnorrParty], message: bytes, max_workers=None):
    """
    Run a full session for `parties` and return (aggregate public key, signature).
    Per party work runs on a thread pool, the sums are computed here.
    """
    if not parties:
        raise ValueError("no parties to sign")
    # phase 1, aggregate public key of exactly this subset
    aggregate_key = aggregate_public_keys(p.public_key for p in parties)
    if group.is_identity(aggregate_key):
        raise ValueError("aggregate public key of the subset is the point at infinity")
    # phase 2, deterministic nonces
    nonce_points = run_parallel(lambda p: p.derive_nonce(message), parties, max_workers)
    # phase 3, aggregate nonce
    aggregate_nonce = aggregate_nonces(nonce_points)
    if group.is_identity(aggregate_nonce):
        raise ValueError("aggregate nonce is the point at infinity")
    # phase 4 and 5, challenge and partial signatures
    partials = run_parallel(lambda p: p.partial_sign(aggregate_nonce, aggregate_key), parties, max_workers)
    # phase 6, aggregate signature
    signature = aggregate_signature(aggregate_nonce, partials)
    logger.debug("final sig: %r", signature)
    return aggregate_key, signature
