#!/usr/bin/env python3
"""
pairing_suite.py - Pairing-friendly curve suites for threshold BLS

Contains:
1. Group: point arithmetic, validation and canonical encoding for G1 / G2
2. PairingSuite: G1 + G2 + pairing e: G1 x G2 -> GT + hash-to-G1
3. BLS12381Suite / BN254Suite backed by py_ecc
4. get_suite(): suite registry, selected by name or TBLS_SUITE

Signatures live in G1, public keys and commitments in G2.
"""

from abc import ABC, abstractmethod
from types import ModuleType
from typing import Any, Callable, Dict, Optional, Tuple, Type
import hashlib
import os
import secrets

from py_ecc import optimized_bls12_381 as bls12_381
from py_ecc import optimized_bn128 as bn128
from py_ecc.bls.g2_primitives import (
    G1_to_pubkey, pubkey_to_G1,
    G2_to_signature, signature_to_G2,
)
from py_ecc.bls.hash_to_curve import hash_to_G1

# Projective point (x, y, z) as used by py_ecc's optimized curves
Point = Tuple[Any, Any, Any]

# =============================
# CONSTANTS & PARAMETERS
# =============================
BLS12_381_DST = b"BLS_SIG_BLS12381G1_XMD:SHA-256_SSWU_RO_NUL_"
BN254_DST = b"BLS_SIG_BN254G1_XMD:SHA-256_TAI_NUL_"

BLS12_381_G1_SIZE = 48
BLS12_381_G2_SIZE = 96
BN254_G1_SIZE = 64
BN254_G2_SIZE = 128

DEFAULT_SUITE = "bls12-381"
SUITE_ENV_VAR = "TBLS_SUITE"


# =============================
# GROUP
# =============================
class Group:
    """
    One prime-order group of a pairing-friendly curve (G1 or G2).

    Points are immutable py_ecc tuples, so a Group can be shared freely
    between threads.
    """

    def __init__(self, name: str, curve: ModuleType, generator: Point, zero: Point,
                 curve_b: Any, point_size: int,
                 encoder: Callable[[Point], bytes],
                 decoder: Callable[[bytes], Point],
                 prime_order: bool = False):
        self.name = name
        self.curve = curve
        self.order = curve.curve_order
        self.point_size = point_size
        self._generator = generator
        self._zero = zero
        self._b = curve_b
        self._encoder = encoder
        self._decoder = decoder
        self._prime_order = prime_order

    def __repr__(self) -> str:
        return f"Group({self.name})"

    def base(self) -> Point:
        """Agreed generator of the group"""
        return self._generator

    def identity(self) -> Point:
        """Point at infinity"""
        return self._zero

    def add(self, p: Point, q: Point) -> Point:
        return self.curve.add(p, q)

    def mul(self, p: Point, scalar: int) -> Point:
        """Scalar multiplication; the scalar is reduced mod the group order"""
        return self.curve.multiply(p, scalar % self.order)

    def eq(self, p: Point, q: Point) -> bool:
        return self.curve.eq(p, q)

    def is_identity(self, p: Point) -> bool:
        return self.curve.is_inf(p)

    def is_valid(self, p: Any) -> bool:
        """
        Check that p is a point of this group: well-formed, on the curve and
        in the prime-order subgroup.
        """
        if not isinstance(p, tuple) or len(p) != 3:
            return False
        try:
            if not self.curve.is_on_curve(p, self._b):
                return False
            if self._prime_order:
                return True
            return self.curve.is_inf(self.curve.multiply(p, self.order))
        except (TypeError, AttributeError):
            # coordinates from another field / curve
            return False

    def encode(self, p: Point) -> bytes:
        """Canonical fixed-length byte encoding"""
        return bytes(self._encoder(p))

    def decode(self, data: bytes) -> Point:
        """
        Decode a canonical encoding.

        Raises:
            ValueError: wrong length, not on the curve or outside the subgroup
        """
        if len(data) != self.point_size:
            raise ValueError(f"{self.name}: expected {self.point_size} bytes, got {len(data)}")
        p = self._decoder(bytes(data))
        if not self.is_valid(p):
            raise ValueError(f"{self.name}: point is not in the group")
        return p


# =============================
# PAIRING SUITE INTERFACE
# =============================
class PairingSuite(ABC):
    """
    Capability bundle: G1 (signatures), G2 (verification base / public keys),
    the bilinear map e: G1 x G2 -> GT and a hash onto G1.
    """

    name: str = ""
    dst: bytes = b""

    def __init__(self, curve: ModuleType, g1: Group, g2: Group):
        self.curve = curve
        self.g1 = g1
        self.g2 = g2

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"

    @property
    def order(self) -> int:
        """Order of G1, G2 and GT (the scalar field modulus)"""
        return self.curve.curve_order

    def random_scalar(self) -> int:
        """Uniform non-zero scalar"""
        return secrets.randbelow(self.order - 1) + 1

    def pairing(self, p: Point, q: Point) -> Any:
        """e(p, q) for p in G1, q in G2 (py_ecc takes the G2 argument first)"""
        return self.curve.pairing(q, p)

    def gt_equal(self, a: Any, b: Any) -> bool:
        return a == b

    @abstractmethod
    def hash_to_g1(self, message: bytes) -> Point:
        """Deterministically map a message onto G1 under this suite's DST"""


# =============================
# BLS12-381
# =============================
def _bls12_381_g1_decode(data: bytes) -> Point:
    return pubkey_to_G1(data)


def _bls12_381_g2_decode(data: bytes) -> Point:
    return signature_to_G2(data)


class BLS12381Suite(PairingSuite):
    """BLS12-381 with ZCash-format compressed points (48-byte G1, 96-byte G2)"""

    name = "bls12-381"
    dst = BLS12_381_DST

    def __init__(self):
        g1 = Group("bls12-381/G1", bls12_381, bls12_381.G1, bls12_381.Z1, bls12_381.b,
                   BLS12_381_G1_SIZE, G1_to_pubkey, _bls12_381_g1_decode)
        g2 = Group("bls12-381/G2", bls12_381, bls12_381.G2, bls12_381.Z2, bls12_381.b2,
                   BLS12_381_G2_SIZE, G2_to_signature, _bls12_381_g2_decode)
        super().__init__(bls12_381, g1, g2)

    def hash_to_g1(self, message: bytes) -> Point:
        return hash_to_G1(message, self.dst, hashlib.sha256)


# =============================
# BN254 (alt_bn128)
# =============================
def _fq_bytes(value: Any) -> bytes:
    return int(value).to_bytes(32, "big")


def _bn254_g1_encode(p: Point) -> bytes:
    if bn128.is_inf(p):
        return bytes(BN254_G1_SIZE)
    x, y = bn128.normalize(p)
    return _fq_bytes(x) + _fq_bytes(y)


def _bn254_g1_decode(data: bytes) -> Point:
    if data == bytes(BN254_G1_SIZE):
        return bn128.Z1
    x = int.from_bytes(data[:32], "big")
    y = int.from_bytes(data[32:], "big")
    if x >= bn128.field_modulus or y >= bn128.field_modulus:
        raise ValueError("bn254/G1: coordinate out of range")
    return (bn128.FQ(x), bn128.FQ(y), bn128.FQ.one())


def _bn254_g2_encode(p: Point) -> bytes:
    if bn128.is_inf(p):
        return bytes(BN254_G2_SIZE)
    x, y = bn128.normalize(p)
    return b"".join(_fq_bytes(c) for c in (*x.coeffs, *y.coeffs))


def _bn254_g2_decode(data: bytes) -> Point:
    if data == bytes(BN254_G2_SIZE):
        return bn128.Z2
    coords = [int.from_bytes(data[i:i + 32], "big") for i in range(0, BN254_G2_SIZE, 32)]
    if any(c >= bn128.field_modulus for c in coords):
        raise ValueError("bn254/G2: coordinate out of range")
    x = bn128.FQ2(coords[0:2])
    y = bn128.FQ2(coords[2:4])
    return (x, y, bn128.FQ2.one())


class BN254Suite(PairingSuite):
    """
    BN254 (alt_bn128) with uncompressed big-endian affine encodings.

    Hash-to-G1 is try-and-increment; G1 has cofactor 1 so every curve point
    is a group element.
    """

    name = "bn254"
    dst = BN254_DST

    def __init__(self):
        g1 = Group("bn254/G1", bn128, bn128.G1, bn128.Z1, bn128.b,
                   BN254_G1_SIZE, _bn254_g1_encode, _bn254_g1_decode, prime_order=True)
        g2 = Group("bn254/G2", bn128, bn128.G2, bn128.Z2, bn128.b2,
                   BN254_G2_SIZE, _bn254_g2_encode, _bn254_g2_decode)
        super().__init__(bn128, g1, g2)

    def hash_to_g1(self, message: bytes) -> Point:
        p = bn128.field_modulus
        # p = 3 mod 4, so sqrt(a) = a^((p+1)/4)
        counter = 0
        while True:
            digest = hashlib.sha256(self.dst + counter.to_bytes(4, "big") + message).digest()
            x = int.from_bytes(digest, "big") % p
            rhs = (pow(x, 3, p) + 3) % p
            y = pow(rhs, (p + 1) // 4, p)
            if (y * y) % p == rhs:
                if y % 2:
                    y = p - y
                return (bn128.FQ(x), bn128.FQ(y), bn128.FQ.one())
            counter += 1


# =============================
# REGISTRY / CONFIG
# =============================
SUITES: Dict[str, Type[PairingSuite]] = {
    BLS12381Suite.name: BLS12381Suite,
    BN254Suite.name: BN254Suite,
}


def get_suite(name: Optional[str] = None) -> PairingSuite:
    """
    Build a suite by name.

    Args:
        name: "bls12-381" or "bn254"; if None, $TBLS_SUITE or "bls12-381"

    Returns:
        A fresh PairingSuite instance

    Raises:
        ValueError: unknown suite name
    """
    if name is None:
        name = os.environ.get(SUITE_ENV_VAR, DEFAULT_SUITE)
    key = name.strip().lower()
    if key not in SUITES:
        raise ValueError(f"Unsupported pairing suite: {name} (choose from {', '.join(SUITES)})")
    return SUITES[key]()
