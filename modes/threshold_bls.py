#!/usr/bin/env python3
"""
threshold_bls.py - t-of-n threshold BLS signatures

Each party holds a Shamir share x_i of the group secret x (from a DKG) and
the public polynomial commitment in G2.

    PARTIAL SIGN:    sig_i = x_i * H(m)                            (G1)
    PARTIAL VERIFY:  e(sig_i, B) == e(H(m), X_i),  X_i = PubPoly.eval(i)
    AGGREGATE:       sig = sum_{j in S} L_j(0) * sig_j,  |S| = t   (G1)
                     then e(sig, B) == e(H(m), X),  X = PubPoly.commit()

The aggregate is an ordinary BLS signature under the group key although no
party ever holds x.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union
import base64
import logging

from core.pairing_suite import PairingSuite, Point
from core.shamir import PriPoly, PriShare, PubPoly, PubShare, recover_commit
from modes import bls_mode

logger = logging.getLogger(__name__)

INDEX_BYTES = 4

# reasons passed to the on_reject hook
REJECT_INVALID = "invalid"
REJECT_DUPLICATE = "duplicate"
REJECT_OUT_OF_RANGE = "out_of_range"


# =============================
# ERRORS
# =============================
class ThresholdError(Exception):
    """Threshold signature error."""

    pass


class InsufficientSharesError(ThresholdError, ValueError):
    """Fewer than t valid partial signatures; gather more and retry."""

    def __init__(self, valid: int, required: int):
        super().__init__(
            f"Not enough valid threshold BLS signatures: got {valid}, need {required}"
        )
        self.valid = valid
        self.required = required


class InvariantViolationError(ThresholdError, RuntimeError):
    """Recovered signature fails verification under the group key.

    Points at inconsistent parameters or a broken recovery routine, never at
    bad input; retrying with more shares will not help.
    """

    pass


# =============================
# DATA TYPES
# =============================
@dataclass(frozen=True)
class DistKeyShare:
    """What a DKG leaves with each party: its private share and the public polynomial"""
    pri_share: PriShare
    polynomial: PubPoly


@dataclass(frozen=True)
class ThresholdSig:
    """Partial signature of party `index`"""
    index: int
    sig: Point

    def to_bytes(self, suite: PairingSuite) -> bytes:
        """4-byte big-endian index || G1 encoding"""
        return self.index.to_bytes(INDEX_BYTES, "big") + suite.g1.encode(self.sig)

    @classmethod
    def from_bytes(cls, suite: PairingSuite, data: bytes) -> "ThresholdSig":
        if len(data) != INDEX_BYTES + suite.g1.point_size:
            raise ValueError(f"Invalid partial signature length {len(data)}")
        index = int.from_bytes(data[:INDEX_BYTES], "big")
        return cls(index, suite.g1.decode(data[INDEX_BYTES:]))

    def to_dict(self, suite: PairingSuite) -> Dict[str, Any]:
        return {
            "index": self.index,
            "sig": base64.b64encode(suite.g1.encode(self.sig)).decode(),
        }

    @classmethod
    def from_dict(cls, suite: PairingSuite, data: Dict[str, Any]) -> "ThresholdSig":
        return cls(int(data["index"]), suite.g1.decode(base64.b64decode(data["sig"])))


# =============================
# DEALER (stand-in for DKG output)
# =============================
def deal_shares(suite: PairingSuite, n: int, t: int,
                secret: Optional[int] = None) -> Tuple[List[DistKeyShare], PubPoly]:
    """
    Trusted-dealer sharing of a (random) group secret.

    Args:
        suite: pairing suite
        n: number of parties
        t: threshold
        secret: group secret key, random if None

    Returns:
        (one DistKeyShare per party, public polynomial committed in G2)
    """
    _check_params(n, t)
    poly = PriPoly.random(suite.order, t, secret)
    public = poly.commit(suite.g2)
    shares = [DistKeyShare(s, public) for s in poly.shares(n)]
    return shares, public


def _check_params(n: int, t: int) -> None:
    if not (1 <= t <= n):
        raise ValueError("threshold must be within [1, n_parties]")


# =============================
# SIGN / VERIFY
# =============================
def hash_to_signature_group(suite: PairingSuite, message: bytes) -> Point:
    """H(m) in G1, domain-separated by the suite's DST"""
    return suite.hash_to_g1(message)


def threshold_sign(suite: PairingSuite, share: Union[PriShare, DistKeyShare],
                   message: bytes) -> ThresholdSig:
    """
    Partial signature sig_i = x_i * H(m), tagged with the share index.
    """
    if isinstance(share, DistKeyShare):
        share = share.pri_share
    hm = hash_to_signature_group(suite, message)
    return ThresholdSig(share.index, suite.g1.mul(hm, share.value))


def _is_index(index: Any) -> bool:
    return isinstance(index, int) and not isinstance(index, bool)


def threshold_verify(suite: PairingSuite, public: PubPoly, message: bytes,
                     sig: ThresholdSig) -> bool:
    """
    Check that sig was produced with the share of sig.index:

        e(sig_i, B) == e(H(m), X_i)

    Returns False (never raises) for forged, mis-indexed or malformed input.
    """
    index = sig.index
    if not _is_index(index):
        return False
    # x = index + 1 must stay in [1, order) or it aliases another share
    if not 0 <= index < suite.order - 1:
        return False
    if not suite.g1.is_valid(sig.sig) or suite.g1.is_identity(sig.sig):
        return False

    try:
        x_i = public.eval(index).point
    except ValueError:
        return False
    hm = hash_to_signature_group(suite, message)
    left = suite.pairing(sig.sig, suite.g2.base())
    right = suite.pairing(hm, x_i)
    return suite.gt_equal(left, right)


# =============================
# AGGREGATION
# =============================
def aggregate_signatures(suite: PairingSuite, public: PubPoly, message: bytes,
                         sigs: Iterable[ThresholdSig], n: int, t: int,
                         on_reject: Optional[Callable[[ThresholdSig, str], None]] = None) -> bytes:
    """
    Combine partial signatures into the group BLS signature.

    Candidates are taken in input order; invalid ones (including non-int
    indices), indices outside
    [0, n) and repeats of an already accepted index are skipped. Collection
    stops at t valid shares.

    Args:
        suite: pairing suite
        public: public polynomial from the DKG
        message: signed message
        sigs: candidate partial signatures (may contain garbage)
        n: number of parties
        t: threshold
        on_reject: optional hook called with (sig, reason) for every skipped
            candidate; reason is "invalid", "duplicate" or "out_of_range"

    Returns:
        Encoded G1 signature, valid under public.commit()

    Raises:
        ValueError: t outside [1, n]
        InsufficientSharesError: fewer than t valid partial signatures
        RecoveryError: the interpolation primitive rejected its input
        InvariantViolationError: recovered signature does not verify
    """
    _check_params(n, t)

    def reject(sig: ThresholdSig, reason: str) -> None:
        logger.debug("Dropping partial signature index=%s: %s", sig.index, reason)
        if on_reject is not None:
            on_reject(sig, reason)

    pub_shares: List[PubShare] = []
    accepted: Set[int] = set()
    for sig in sigs:
        if not _is_index(sig.index):
            reject(sig, REJECT_INVALID)
            continue
        if not 0 <= sig.index < n:
            reject(sig, REJECT_OUT_OF_RANGE)
            continue
        if sig.index in accepted:
            reject(sig, REJECT_DUPLICATE)
            continue
        if not threshold_verify(suite, public, message, sig):
            reject(sig, REJECT_INVALID)
            continue
        accepted.add(sig.index)
        pub_shares.append(PubShare(sig.index, sig.sig))
        if len(pub_shares) >= t:
            break

    if len(pub_shares) < t:
        raise InsufficientSharesError(len(pub_shares), t)

    recovered = recover_commit(suite.g1, pub_shares, t, n)
    encoded = suite.g1.encode(recovered)

    if not bls_mode.verify(suite, public.commit(), message, encoded, check_key=False):
        logger.critical(
            "Recovered %s signature from indices %s does not verify under the group key",
            suite.name, sorted(accepted),
        )
        raise InvariantViolationError(
            "Recovered threshold signature failed verification against the group public key"
        )

    logger.info("Aggregated %d-of-%d %s signature from indices %s",
                t, n, suite.name, sorted(accepted))
    return encoded
