"""
Core primitives for threshold BLS signatures

This package contains:
- pairing_suite: G1/G2 groups, pairing and hash-to-G1 for BLS12-381 and BN254
- shamir: private/public polynomials, shares and recovery in the exponent
"""

__version__ = "1.0.0"
