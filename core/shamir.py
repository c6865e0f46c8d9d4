#!/usr/bin/env python3
"""
shamir.py - Shamir sharing with public polynomial commitments

Private side: PriPoly of degree t-1 over the scalar field, PriShare = f(i+1).
Public side: PubPoly = coefficients committed in a group (c_k * B), so anyone
can compute the public counterpart PubShare of a private share.

recover_commit() interpolates t public shares at x = 0 inside the group
(Lagrange in the exponent) without materialising any scalar secret.

Indices are 0-based; share i sits at x = i + 1.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
import base64
import secrets

from .pairing_suite import Group, Point


class RecoveryError(ValueError):
    """Interpolation input cannot determine the committed value"""


# =============================
# SHARES
# =============================
@dataclass(frozen=True)
class PriShare:
    """Private share: value = f(index + 1)"""
    index: int
    value: int


@dataclass(frozen=True)
class PubShare:
    """Public share: point = f(index + 1) * B"""
    index: int
    point: Point


# =============================
# LAGRANGE COEFFICIENTS
# =============================
def lagrange_coeffs_at_zero(xs: List[int], q: int) -> List[int]:
    """
    Compute Lagrange coefficients L_j(0) for interpolation at zero.

    L_j(0) = prod_{m != j} x_m / (x_m - x_j) mod q

    Args:
        xs: list of distinct evaluation points
        q: field modulus

    Returns:
        List of Lagrange coefficients, same order as xs

    Raises:
        ValueError: duplicate evaluation points
    """
    if len(set(x % q for x in xs)) != len(xs):
        raise ValueError("Lagrange interpolation needs distinct evaluation points")
    lams: List[int] = []
    k = len(xs)
    for j in range(k):
        num = 1
        den = 1
        xj = xs[j]
        for m in range(k):
            if m == j:
                continue
            xm = xs[m]
            num = (num * xm) % q
            den = (den * ((xm - xj) % q)) % q
        lams.append((num * pow(den, -1, q)) % q)
    return lams


# =============================
# PRIVATE POLYNOMIAL
# =============================
class PriPoly:
    """
    Secret polynomial f(x) = a_0 + a_1 x + ... + a_{t-1} x^{t-1} mod q.

    Only a dealer (or a DKG participant) ever holds one.
    """

    def __init__(self, order: int, coeffs: Sequence[int]):
        if not coeffs:
            raise ValueError("Polynomial needs at least one coefficient")
        self.order = order
        self.coeffs: Tuple[int, ...] = tuple(c % order for c in coeffs)

    @classmethod
    def random(cls, order: int, t: int, secret: Optional[int] = None) -> "PriPoly":
        """Random degree t-1 polynomial; a_0 = secret if given"""
        if t < 1:
            raise ValueError("threshold must be at least 1")
        a0 = secrets.randbelow(order) if secret is None else secret
        rest = [secrets.randbelow(order) for _ in range(t - 1)]
        return cls(order, [a0] + rest)

    @property
    def threshold(self) -> int:
        return len(self.coeffs)

    def secret(self) -> int:
        return self.coeffs[0]

    def eval(self, index: int) -> PriShare:
        """Horner evaluation at x = index + 1"""
        x = (index + 1) % self.order
        value = 0
        for c in reversed(self.coeffs):
            value = (value * x + c) % self.order
        return PriShare(index, value)

    def shares(self, n: int) -> List[PriShare]:
        return [self.eval(i) for i in range(n)]

    def commit(self, group: Group) -> "PubPoly":
        """Commit each coefficient in the group: C_k = a_k * B"""
        b = group.base()
        return PubPoly(group, [group.mul(b, c) for c in self.coeffs])


# =============================
# PUBLIC POLYNOMIAL
# =============================
class PubPoly:
    """
    Public commitment to a PriPoly: C_k = a_k * B for k = 0..t-1.

    commit() is C_0, the group public key.
    """

    def __init__(self, group: Group, commits: Sequence[Point]):
        if not commits:
            raise ValueError("Public polynomial needs at least one commitment")
        self.group = group
        self.commits: Tuple[Point, ...] = tuple(commits)

    @property
    def threshold(self) -> int:
        return len(self.commits)

    def commit(self) -> Point:
        return self.commits[0]

    def eval(self, index: int) -> PubShare:
        """
        Evaluate in the group at x = index + 1 (Horner's rule).

        Raises:
            ValueError: index outside [0, order - 1); x would wrap mod the
                group order and alias another share or the constant term
        """
        if not 0 <= index < self.group.order - 1:
            raise ValueError(f"Share index {index} outside [0, {self.group.order - 1})")
        x = index + 1
        v = self.group.identity()
        for c in reversed(self.commits):
            v = self.group.add(self.group.mul(v, x), c)
        return PubShare(index, v)

    def equal(self, other: "PubPoly") -> bool:
        if self.threshold != other.threshold:
            return False
        return all(self.group.eq(a, b) for a, b in zip(self.commits, other.commits))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group": self.group.name,
            "commits": [base64.b64encode(self.group.encode(c)).decode() for c in self.commits],
        }

    @classmethod
    def from_dict(cls, group: Group, data: Dict[str, Any]) -> "PubPoly":
        """
        Raises:
            ValueError: group mismatch or undecodable commitment
        """
        if data.get("group") != group.name:
            raise ValueError(f"Commitment group {data.get('group')} != {group.name}")
        commits = [group.decode(base64.b64decode(c)) for c in data["commits"]]
        return cls(group, commits)


# =============================
# RECOVERY IN THE EXPONENT
# =============================
def recover_commit(group: Group, shares: Sequence[Optional[PubShare]], t: int, n: int) -> Point:
    """
    Interpolate the committed value at x = 0 from t public shares.

    Uses the first t non-None shares. Every one of them must be a genuine
    evaluation of the same degree t-1 polynomial; with fewer points the
    result would be an unrelated group element, so that case is an error.

    Args:
        group: group the share points live in
        shares: public shares (None entries are skipped)
        t: threshold (number of points needed)
        n: total number of shares in the scheme

    Returns:
        sum_j L_j(0) * V_j

    Raises:
        RecoveryError: not enough shares, index out of [0, n), duplicate index
    """
    selected: List[PubShare] = []
    seen = set()
    for share in shares:
        if share is None:
            continue
        if not 0 <= share.index < n:
            raise RecoveryError(f"Share index {share.index} outside [0, {n})")
        if share.index in seen:
            raise RecoveryError(f"Duplicate share index {share.index}")
        seen.add(share.index)
        selected.append(share)
        if len(selected) >= t:
            break

    if len(selected) < t:
        raise RecoveryError(
            f"Not enough public shares to recover commitment: got {len(selected)}, need {t}"
        )

    xs = [s.index + 1 for s in selected]
    lams = lagrange_coeffs_at_zero(xs, group.order)
    acc = group.identity()
    for share, lam in zip(selected, lams):
        acc = group.add(acc, group.mul(share.point, lam))
    return acc
