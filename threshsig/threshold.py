"""
Threshold BLS signatures over BLS12-381.

Key setup (as in https://eprint.iacr.org/2020/540.pdf section 2.8, without the
ZK proofs):
1. Each of the n contributors creates a random polynomial of degree t-1 and
   publishes its commitment.
2. Party i adds up the evaluations of every polynomial at i+1. The sum is a
   Shamir share of the sum of all secrets, and the summed commitments are its
   public polynomial. Nobody knows the group secret.

Signing:
1. Each party signs the message with its local key share and ships
   [index][signature] (see codec).
2. Every share is checked against the public polynomial evaluated at its index.
   A single bad share aborts the session with InvalidShare; it is never skipped.
3. Any t verified shares are interpolated in G2, which gives the signature of
   the group secret.

Recovering the group secret from t key shares and signing with it directly
gives the very same signature. Both ways are SigningStrategy implementations.
"""

import enum
import logging
from typing import List

from . import bls
from .codec import SigShare
from .config import SessionConfig, run_parallel
from .curve import BLS_G1, BLS_G2
from .errors import DuplicateIndex, InsufficientShares, InvalidShare
from .polynomial import PriPoly, PriShare, PubPoly, PubShare, add_commitments, recover_commit, recover_secret

logger = logging.getLogger(__name__)


def sign_share(share: PriShare, message: bytes) -> bytes:
    """
    Partial signature of a party, encoded with its index.
    """
    return SigShare(share.index, bls.sign(share.value, message)).encode()


def verify_share(pub_poly: PubPoly, message: bytes, sig_share: bytes) -> bool:
    share = SigShare.decode(sig_share)
    public_share = pub_poly.eval(share.index).value
    return bls.verify(public_share, message, share.value)


def verify_aggregate(public_key, message: bytes, signature: bytes) -> bool:
    return bls.verify(public_key, message, signature)


def recover_signature(pub_poly: PubPoly, message: bytes, sig_shares, t: int, n: int) -> bytes:
    """
    Verify every share, then interpolate t of them in the exponent.
    Raises InvalidShare for the first share that does not verify and
    InsufficientShares if fewer than t are given.
    """
    points = []
    for data in sig_shares:
        share = SigShare.decode(data)
        if not verify_share(pub_poly, message, data):
            logger.warning("signature share %d failed verification", share.index)
            raise InvalidShare(share.index)
        points.append(PubShare(share.index, BLS_G2.decode_point(share.value)))
    return BLS_G2.encode_point(recover_commit(BLS_G2, points, t, n))


class SessionState(enum.Enum):
    IDLE = "idle"
    SHARES_COLLECTED = "shares collected"
    VERIFIED = "verified"
    RECOVERED = "recovered"


class ThresholdSession:
    """
    Collects signature shares for one message and recovers the group signature.
    Idle -> SharesCollected -> Verified -> Recovered, calls out of order raise
    ValueError. After InvalidShare the caller may discard that index and keep
    collecting.
    """

    def __init__(self, config: SessionConfig, pub_poly: PubPoly):
        if pub_poly.threshold != config.t:
            raise ValueError("public polynomial does not match the threshold")
        self.config = config
        self.pub_poly = pub_poly
        self.state = SessionState.IDLE
        self.shares = {}
        self.signature = None

    def _expect(self, *states):
        if self.state not in states:
            raise ValueError(f"session is {self.state.value}")

    def collect(self, sig_share: bytes) -> None:
        self._expect(SessionState.IDLE, SessionState.SHARES_COLLECTED)
        share = SigShare.decode(sig_share)
        if share.index in self.shares:
            raise DuplicateIndex(share.index)
        if share.index >= self.config.n:
            raise InvalidShare(share.index)
        self.shares[share.index] = share
        self.state = SessionState.SHARES_COLLECTED

    def discard(self, index: int) -> None:
        """
        Drop the share of an excluded party.
        """
        self._expect(SessionState.IDLE, SessionState.SHARES_COLLECTED)
        if index not in self.shares:
            raise ValueError(f"no share collected for index {index}")
        del self.shares[index]
        self.state = SessionState.SHARES_COLLECTED if self.shares else SessionState.IDLE

    def verify(self) -> None:
        """
        Check every collected share, concurrently. Any failure aborts the
        session with InvalidShare for the lowest failing index. Fewer than t
        valid shares raise InsufficientShares.
        """
        self._expect(SessionState.IDLE, SessionState.SHARES_COLLECTED)
        message = self.config.message
        indices = sorted(self.shares)
        results = run_parallel(
            lambda i: verify_share(self.pub_poly, message, self.shares[i].encode()),
            indices, self.config.max_workers)
        for index, ok in zip(indices, results):
            if not ok:
                logger.warning("signature share %d failed verification", index)
                raise InvalidShare(index)
        if len(self.shares) < self.config.t:
            raise InsufficientShares(len(self.shares), self.config.t)
        self.state = SessionState.VERIFIED

    def recover(self) -> bytes:
        self._expect(SessionState.VERIFIED)
        points = [PubShare(i, BLS_G2.decode_point(self.shares[i].value)) for i in sorted(self.shares)]
        sig = recover_commit(BLS_G2, points, self.config.t, self.config.n)
        self.signature = BLS_G2.encode_point(sig)
        self.state = SessionState.RECOVERED
        logger.debug("group signature %s", self.signature.hex())
        return self.signature


class JointKey:
    def __init__(self, polys: List[PriPoly], t: int, n: int, max_workers=None):
        """
        Combine the contributors' polynomials into per party key shares.
        Every local share is checked against the summed commitments.
        """
        if any(p.threshold != t for p in polys):
            raise ValueError("every polynomial must have t coefficients")
        self.t = t
        self.n = n
        self.pub_polys = [p.commit() for p in polys]
        self.pub_poly = add_commitments(self.pub_polys)
        order = BLS_G1.order

        def local_share(index):
            return PriShare(index, sum(p.eval(index).value for p in polys) % order)

        self.shares = run_parallel(local_share, range(n), max_workers)
        for share in self.shares:
            if not self.pub_poly.check(share):
                raise InvalidShare(share.index)

    @classmethod
    def generate(cls, config: SessionConfig) -> "JointKey":
        polys = [PriPoly(BLS_G1, config.t, rng=config.rng) for _ in range(config.n)]
        return cls(polys, config.t, config.n, config.max_workers)

    @property
    def public_key(self):
        return self.pub_poly.commit()

    def __repr__(self):
        return f"JointKey(t={self.t}, n={self.n}, public_key={BLS_G1.encode_point(self.public_key).hex()})"


class SigningStrategy:
    """
    Turns the key shares of the signing parties into the group signature.
    """

    def __init__(self, config: SessionConfig, pub_poly: PubPoly):
        self.config = config
        self.pub_poly = pub_poly

    def sign(self, key_shares: List[PriShare]) -> bytes:
        raise NotImplementedError


class ExponentRecovery(SigningStrategy):
    """Each party signs, the signatures are interpolated in G2."""

    def sign(self, key_shares: List[PriShare]) -> bytes:
        message = self.config.message
        sig_shares = run_parallel(lambda s: sign_share(s, message), key_shares, self.config.max_workers)
        session = ThresholdSession(self.config, self.pub_poly)
        for sig_share in sig_shares:
            session.collect(sig_share)
        session.verify()
        return session.recover()


class SecretRecovery(SigningStrategy):
    """The group secret is interpolated from key shares and signs directly."""

    def sign(self, key_shares: List[PriShare]) -> bytes:
        for share in key_shares:
            if not self.pub_poly.check(share):
                raise InvalidShare(share.index)
        secret = recover_secret(BLS_G1, key_shares, self.config.t, self.config.n)
        return bls.sign(secret, self.config.message)
