"""
BLS signing primitive over BLS12-381, delegated to py_ecc.

    sign(sk, m)      = H(m) * sk            (point in G2)
    verify(pk, m, s) = e(pk, H(m)) == e(G1, s)

Both are deterministic, which is what lets a signature recovered from shares be
compared byte for byte with one made from the recovered secret.
"""

from py_ecc.bls import G2ProofOfPossession as py_ecc_bls

from .curve import BLS_G1


def sign(private_key: int, message: bytes) -> bytes:
    """
    96 byte compressed G2 signature of message under private_key.
    """
    return py_ecc_bls.Sign(private_key % BLS_G1.order, message)


def verify(public_key, message: bytes, signature: bytes) -> bool:
    """
    public_key is a G1 point. Malformed signatures and invalid keys verify as
    False, py_ecc does not raise for them.
    """
    return py_ecc_bls.Verify(BLS_G1.encode_point(public_key), message, signature)
