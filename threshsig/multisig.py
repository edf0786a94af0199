"""
m-of-n multisig in the style of a Bitcoin multisig script: n independent
ECDSA key pairs on NIST P-256, any m of them sign the message separately and
the verifier counts valid signatures from distinct keys.

Unlike the threshold schemes this produces m signatures and needs all n public
keys to verify, it is kept as the baseline to compare against.
"""

import logging
from hashlib import sha256
from typing import Dict, List

from ecdsa import BadSignatureError, NIST256p, SigningKey

logger = logging.getLogger(__name__)


def generate_keys(n: int) -> List[SigningKey]:
    if n < 1:
        raise ValueError(f"need at least one key, got {n}")
    return [SigningKey.generate(curve=NIST256p, hashfunc=sha256) for _ in range(n)]


def sign(signing_keys: List[SigningKey], message: bytes, signers: List[int]) -> Dict[int, bytes]:
    """
    Signatures of message keyed by the index of the signing key.
    """
    signatures = {}
    for i in signers:
        if not 0 <= i < len(signing_keys):
            raise ValueError(f"signer {i} outside [0, {len(signing_keys)})")
        signatures[i] = signing_keys[i].sign(message)
        logger.debug("key #%d signature: %s", i + 1, signatures[i].hex())
    return signatures


def verify_multisig(verifying_keys, message: bytes, signatures: Dict[int, bytes], m: int) -> bool:
    """
    True if at least m distinct keys produced a valid signature.
    """
    valid = 0
    for i, sig in signatures.items():
        if not 0 <= i < len(verifying_keys):
            return False
        try:
            verifying_keys[i].verify(sig, message)
        except BadSignatureError:
            logger.warning("signature of key #%d does not verify", i + 1)
            continue
        valid += 1
    return valid >= m
