"""
Tests
"""

import itertools
import random

import pytest

from threshsig.curve import SECP256K1, BLS_G1
from threshsig.errors import DuplicateIndex, InsufficientShares, RandomnessFailure
from threshsig.polynomial import (
    PriPoly, PriShare, PubShare, add_commitments, lagrange_coefficient,
    recover_commit, recover_secret,
)


def generate_t_n():
    t = random.randint(1, 8)
    n = random.randint(t, 10)
    return t, n


def test_polynomial():
    for _ in range(5):
        t, n = generate_t_n()
        print(f"\nt={t} n={n}")
        poly = PriPoly(SECP256K1, t)
        assert poly.threshold == t
        assert len(poly.shares(n)) == n


def test_secret_is_constant_term(rng):
    poly = PriPoly(SECP256K1, 3, secret=1234, rng=rng)
    assert poly.secret() == 1234
    assert poly.coefficients[0] == 1234


def test_eval_never_uses_zero(rng):
    poly = PriPoly(SECP256K1, 3, secret=99, rng=rng)
    a, b, c = poly.coefficients
    # index 0 is evaluated at x = 1
    assert poly.eval(0).value == (a + b + c) % SECP256K1.order
    assert poly.eval(1).value == (a + 2 * b + 4 * c) % SECP256K1.order
    with pytest.raises(ValueError):
        poly.eval(-1)


@pytest.mark.parametrize("t,n", [(1, 1), (1, 3), (2, 3), (3, 5), (5, 5)])
def test_recover_from_any_subset(t, n, rng):
    secret = SECP256K1.random_scalar(rng)
    poly = PriPoly(SECP256K1, t, secret=secret, rng=rng)
    shares = poly.shares(n)
    for subset in itertools.combinations(shares, t):
        assert recover_secret(SECP256K1, subset, t, n) == secret


def test_recover_uses_first_t_shares(rng):
    poly = PriPoly(SECP256K1, 3, rng=rng)
    shares = poly.shares(6)
    random.Random(7).shuffle(shares)
    assert recover_secret(SECP256K1, shares, 3, 6) == poly.secret()


@pytest.mark.parametrize("t", [2, 3, 6])
def test_insufficient_shares(t, rng):
    poly = PriPoly(SECP256K1, t, rng=rng)
    shares = poly.shares(t)
    with pytest.raises(InsufficientShares):
        recover_secret(SECP256K1, shares[:t - 1], t, t)
    pub_shares = poly.commit().shares(t)
    with pytest.raises(InsufficientShares):
        recover_commit(SECP256K1, pub_shares[:t - 1], t, t)


def test_duplicate_index(rng):
    poly = PriPoly(SECP256K1, 2, rng=rng)
    shares = poly.shares(3)
    with pytest.raises(DuplicateIndex) as e:
        recover_secret(SECP256K1, [shares[0], shares[1], shares[1]], 2, 3)
    assert e.value.index == 1
    # same index with another value is just as ambiguous
    with pytest.raises(DuplicateIndex):
        recover_secret(SECP256K1, [shares[0], PriShare(0, 5)], 2, 3)


def test_index_out_of_range(rng):
    poly = PriPoly(SECP256K1, 2, rng=rng)
    with pytest.raises(ValueError):
        recover_secret(SECP256K1, poly.shares(4), 2, 3)


def test_share_consistency(rng):
    poly = PriPoly(SECP256K1, 3, rng=rng)
    pub = poly.commit()
    for share, pub_share in zip(poly.shares(5), pub.shares(5)):
        assert pub.check(share)
        assert SECP256K1.base_mul(share.value) == pub_share.value
        # any change to the value breaks the commitment check
        assert not pub.check(PriShare(share.index, share.value + 1))
        assert not pub.check(PriShare(share.index + 1, share.value))


def test_recover_commit_is_public_key(rng):
    poly = PriPoly(SECP256K1, 3, rng=rng)
    pub = poly.commit()
    assert recover_commit(SECP256K1, pub.shares(5)[2:], 3, 5) == pub.commit()
    assert pub.commit() == SECP256K1.base_mul(poly.secret())


def test_add_commitments_any_order(rng):
    polys = [PriPoly(SECP256K1, 3, rng=rng) for _ in range(4)]
    pubs = [p.commit() for p in polys]
    expected = add_commitments(pubs)
    for perm in itertools.permutations(pubs):
        assert add_commitments(perm) == expected

    # the sum commits to the sum of the polynomials
    total = polys[0]
    for p in polys[1:]:
        total = total.add(p)
    assert total.commit() == expected


def test_add_commitments_mismatch(rng):
    with pytest.raises(ValueError):
        add_commitments([PriPoly(SECP256K1, 2, rng=rng).commit(), PriPoly(SECP256K1, 3, rng=rng).commit()])
    with pytest.raises(ValueError):
        add_commitments([])


def test_summed_shares_recover_summed_secret(rng):
    t, n = 2, 4
    order = BLS_G1.order
    polys = [PriPoly(BLS_G1, t, rng=rng) for _ in range(n)]
    shares = [PriShare(i, sum(p.eval(i).value for p in polys) % order) for i in range(n)]
    master_secret = sum(p.secret() for p in polys) % order
    assert recover_secret(BLS_G1, shares[1:3], t, n) == master_secret
    pub = add_commitments(p.commit() for p in polys)
    assert BLS_G1.eq(pub.commit(), BLS_G1.base_mul(master_secret))


def test_lagrange_coefficients_sum_to_one():
    # interpolating the constant polynomial 1
    order = SECP256K1.order
    indices = [0, 3, 4, 7]
    assert sum(lagrange_coefficient(order, i, indices) for i in indices) % order == 1


def test_recover_commit_points(rng):
    poly = PriPoly(SECP256K1, 2, rng=rng)
    base = SECP256K1.base_mul(5)
    pub = poly.commit(base)
    shares = [PubShare(s.index, s.value) for s in pub.shares(3)]
    assert recover_commit(SECP256K1, shares, 2, 3) == SECP256K1.scalar_mul(base, poly.secret())


class FailingSource:
    def randrange(self, start, stop):
        raise OSError("entropy source unavailable")


def test_randomness_failure():
    with pytest.raises(RandomnessFailure):
        PriPoly(SECP256K1, 3, secret=1, rng=FailingSource())
