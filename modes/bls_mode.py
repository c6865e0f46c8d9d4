#!/usr/bin/env python3
"""
bls_mode.py - Ordinary (single key) BLS signatures

sig = sk * H(m) in G1, pk = sk * B in G2
verify: e(sig, B) == e(H(m), pk)

Used after threshold recovery to check the combined signature against the
group public key, and by anyone consuming the final signature.
"""

from typing import Tuple
import logging

from core.pairing_suite import PairingSuite, Point

logger = logging.getLogger(__name__)


def generate_keypair(suite: PairingSuite) -> Tuple[int, Point]:
    """Fresh (sk, pk) with pk in G2"""
    sk = suite.random_scalar()
    return sk, suite.g2.mul(suite.g2.base(), sk)


def sign(suite: PairingSuite, sk: int, message: bytes) -> bytes:
    """Encoded G1 signature sk * H(message)"""
    hm = suite.hash_to_g1(message)
    return suite.g1.encode(suite.g1.mul(hm, sk))


def verify(suite: PairingSuite, public_key: Point, message: bytes, signature: bytes,
           check_key: bool = True) -> bool:
    """
    Check an encoded signature against a G2 public key.

    check_key=False skips the G2 subgroup check, for keys that were already
    validated (e.g. decoded commitments of a public polynomial).

    Returns:
        False for undecodable / out-of-group signatures or a failed pairing check
    """
    try:
        sig = suite.g1.decode(signature)
    except ValueError as exc:
        logger.debug("Rejecting undecodable BLS signature: %s", exc)
        return False
    if suite.g1.is_identity(sig):
        return False
    if check_key and not suite.g2.is_valid(public_key):
        return False

    hm = suite.hash_to_g1(message)
    left = suite.pairing(sig, suite.g2.base())
    right = suite.pairing(hm, public_key)
    return suite.gt_equal(left, right)
