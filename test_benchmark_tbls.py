#!/usr/bin/env python3
"""
Test the threshold BLS benchmark CLI
"""
import json

import pytest

import benchmark_tbls


def test_rejects_zero_iterations(capsys):
    with pytest.raises(SystemExit) as exc_info:
        benchmark_tbls.main(["--suite", "bn254", "--iterations", "0"])
    assert exc_info.value.code == 2
    assert "--iterations" in capsys.readouterr().err

    with pytest.raises(ValueError):
        benchmark_tbls.run_benchmark("bn254", 3, 2, iterations=0)


def test_single_run_with_garbage(tmp_path):
    result = benchmark_tbls.run_benchmark("bn254", 3, 2, iterations=1, invalid=1)
    assert result.success, result.error_message
    assert result.signature_size == 64
    assert result.partial_signature_size == 4 + 64

    path = benchmark_tbls.save_results([result], str(tmp_path))
    with open(path) as f:
        data = json.load(f)
    assert data["results"][0]["suite"] == "bn254"
