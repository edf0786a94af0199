"""
Shamir secret sharing with public commitments (Feldman VSS).

A private polynomial f of degree t-1 over the scalar field of a group has the
shared secret as its constant term. Party `i` (0 based) receives f(i+1); x = 0
is never handed out since f(0) is the secret itself. Committing to f means
publishing every coefficient times the base point, which lets anyone check a
share without learning it:

    G * f(i+1) == sum_j( C_j * (i+1)^j )

Any t shares recover f(0) with Lagrange interpolation. The same coefficients
applied to points (G * f(x_i), or BLS partial signatures H(m) * f(x_i))
recover G * f(0) or H(m) * f(0), see https://eprint.iacr.org/2020/540.pdf
section 2.8 for the commitment check.
"""

import logging
from collections import namedtuple
from functools import reduce
from typing import List

from .errors import DuplicateIndex, InsufficientShares

logger = logging.getLogger(__name__)

PriShare = namedtuple("PriShare", "index value")
PubShare = namedtuple("PubShare", "index value")


def _x(index: int) -> int:
    if index < 0:
        raise ValueError(f"share index must be >= 0, got {index}")
    return index + 1


class PriPoly:
    def __init__(self, group, t: int, secret=None, rng=None, coefficients=None):
        """
        Random polynomial with t coefficients: secret followed by t-1 random
        scalars. A random secret is drawn when none is given.
        `coefficients` rebuilds a known polynomial instead.
        """
        self.group = group
        if coefficients is not None:
            self.coefficients = tuple(c % group.order for c in coefficients)
        else:
            if t < 1:
                raise ValueError(f"threshold must be >= 1, got {t}")
            if secret is None:
                secret = group.random_scalar(rng)
            self.coefficients = (secret % group.order,) + tuple(
                group.random_scalar(rng) for _ in range(t - 1))

    @property
    def threshold(self) -> int:
        return len(self.coefficients)

    def secret(self) -> int:
        return self.coefficients[0]

    def eval(self, index: int) -> PriShare:
        """
        Horner's method at x = index + 1. For f = a + bx + cx^2, coefficients
        are [a, b, c] and the loop computes (c * x + b) * x + a.
        """
        x = _x(index)
        order = self.group.order
        y = 0
        for c in reversed(self.coefficients):
            y = (y * x + c) % order
        return PriShare(index, y)

    def shares(self, n: int) -> List[PriShare]:
        return [self.eval(i) for i in range(n)]

    def commit(self, base=None) -> "PubPoly":
        if base is None:
            base = self.group.base_point()
        return PubPoly(self.group, [self.group.scalar_mul(base, c) for c in self.coefficients], base)

    def add(self, other: "PriPoly") -> "PriPoly":
        if self.threshold != other.threshold:
            raise ValueError("polynomials have different thresholds")
        order = self.group.order
        return PriPoly(self.group, self.threshold, coefficients=[
            (a + b) % order for a, b in zip(self.coefficients, other.coefficients)])


class PubPoly:
    def __init__(self, group, commitments, base=None):
        self.group = group
        self.commitments = tuple(commitments)
        self.base = group.base_point() if base is None else base

    @property
    def threshold(self) -> int:
        return len(self.commitments)

    def commit(self):
        """
        The constant term, i.e. the public key of the shared secret.
        """
        return self.commitments[0]

    def eval(self, index: int) -> PubShare:
        x = _x(index)
        group = self.group
        v = group.identity()
        for c in reversed(self.commitments):
            v = group.add(group.scalar_mul(v, x), c)
        return PubShare(index, v)

    def shares(self, n: int) -> List[PubShare]:
        return [self.eval(i) for i in range(n)]

    def add(self, other: "PubPoly") -> "PubPoly":
        if self.threshold != other.threshold:
            raise ValueError("commitments have different lengths")
        group = self.group
        return PubPoly(group, [group.add(a, b) for a, b in zip(self.commitments, other.commitments)], self.base)

    def check(self, share: PriShare) -> bool:
        expected = self.eval(share.index).value
        return self.group.eq(self.group.scalar_mul(self.base, share.value), expected)

    def __eq__(self, other):
        if not isinstance(other, PubPoly) or self.threshold != other.threshold:
            return False
        return all(self.group.eq(a, b) for a, b in zip(self.commitments, other.commitments))


def add_commitments(pub_polys) -> PubPoly:
    """
    Combined public polynomial of several contributors. Any order gives the same
    result.
    """
    pub_polys = list(pub_polys)
    if not pub_polys:
        raise ValueError("no commitments to add")
    return reduce(lambda acc, p: acc.add(p), pub_polys[1:], pub_polys[0])


def lagrange_coefficient(order: int, index: int, indices) -> int:
    """
    lambda_i evaluated at x = 0 for the share with `index`, interpolating over
    the shares with `indices` (all 0 based, x = index + 1):

        lambda_i = prod_{j != i} x_j / (x_j - x_i)  mod order
    """
    xi = _x(index)
    num = 1
    denom = 1
    for j in indices:
        if j == index:
            continue
        xj = _x(j)
        num = num * xj % order
        denom = denom * (xj - xi) % order
    return num * pow(denom, -1, order) % order


def _select(shares, t: int, n: int):
    """
    First t shares after rejecting duplicates and out of range indices.
    """
    shares = list(shares)
    seen = set()
    for s in shares:
        if s.index in seen:
            raise DuplicateIndex(s.index)
        if not 0 <= s.index < n:
            raise ValueError(f"share index {s.index} outside [0, {n})")
        seen.add(s.index)
    if len(seen) < t:
        raise InsufficientShares(len(seen), t)
    return shares[:t]


def recover_secret(group, shares, t: int, n: int) -> int:
    """
    f(0) from at least t private shares.
    """
    selected = _select(shares, t, n)
    indices = [s.index for s in selected]
    order = group.order
    secret = 0
    for s in selected:
        secret = (secret + s.value * lagrange_coefficient(order, s.index, indices)) % order
    return secret


def recover_commit(group, shares, t: int, n: int):
    """
    Interpolation in the exponent: sum(lambda_i * V_i) for point valued shares.
    """
    selected = _select(shares, t, n)
    indices = [s.index for s in selected]
    logger.debug("recovering commit from shares %s", indices)
    return group.sum_points(
        group.scalar_mul(s.value, lagrange_coefficient(group.order, s.index, indices))
        for s in selected)
