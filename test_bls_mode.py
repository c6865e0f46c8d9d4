#!/usr/bin/env python3
"""
Test ordinary single-key BLS
"""
import pytest

from core.pairing_suite import get_suite
from modes import bls_mode


@pytest.fixture(scope="module", params=["bls12-381", "bn254"])
def suite(request):
    return get_suite(request.param)


def test_sign_verify(suite):
    sk, pk = bls_mode.generate_keypair(suite)
    sig = bls_mode.sign(suite, sk, b"hello")

    assert len(sig) == suite.g1.point_size
    assert bls_mode.verify(suite, pk, b"hello", sig)
    assert not bls_mode.verify(suite, pk, b"hello?", sig), "signature must not cover another message"


def test_verify_rejects_wrong_key_and_garbage():
    suite = get_suite("bn254")
    sk, pk = bls_mode.generate_keypair(suite)
    _, other_pk = bls_mode.generate_keypair(suite)
    sig = bls_mode.sign(suite, sk, b"msg")

    assert not bls_mode.verify(suite, other_pk, b"msg", sig)
    assert not bls_mode.verify(suite, pk, b"msg", b"\x00" * 10)
    assert not bls_mode.verify(suite, pk, b"msg", bytes(suite.g1.point_size)), "identity is not a signature"


def test_signing_is_deterministic():
    suite = get_suite("bn254")
    assert bls_mode.sign(suite, 99, b"m") == bls_mode.sign(suite, 99, b"m")
