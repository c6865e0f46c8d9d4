"""
modes - BLS signing modes

- bls_mode: ordinary single-key BLS (sign / verify)
- threshold_bls: t-of-n partial signing, partial verification, aggregation
"""

from .bls_mode import (
    generate_keypair,
    sign,
    verify,
)

from .threshold_bls import (
    DistKeyShare,
    ThresholdSig,
    ThresholdError,
    InsufficientSharesError,
    InvariantViolationError,
    deal_shares,
    hash_to_signature_group,
    threshold_sign,
    threshold_verify,
    aggregate_signatures,
)

__all__ = [
    'generate_keypair',
    'sign',
    'verify',
    'DistKeyShare',
    'ThresholdSig',
    'ThresholdError',
    'InsufficientSharesError',
    'InvariantViolationError',
    'deal_shares',
    'hash_to_signature_group',
    'threshold_sign',
    'threshold_verify',
    'aggregate_signatures',
]
