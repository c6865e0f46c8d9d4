#!/usr/bin/env python3
"""
benchmark_tbls.py - Threshold BLS timing benchmark

Measures, per suite and (t, n):
  T_Deal       trusted-dealer sharing (stand-in for DKG output)
  T_Sign       one partial signature
  T_Verify     one partial verification (2 pairings)
  T_Aggregate  filter + recover + final check, with optional garbage shares

Usage:
  python benchmark_tbls.py --suite bn254 -n 5 -t 3 --iterations 3 --invalid 2
"""

import argparse
import json
import logging
import os
import statistics
import time
from dataclasses import dataclass, asdict
from typing import Dict, List, Any

import psutil

from core.pairing_suite import SUITES, get_suite
from modes.threshold_bls import (
    ThresholdSig,
    deal_shares,
    threshold_sign,
    threshold_verify,
    aggregate_signatures,
)
from modes import bls_mode

logger = logging.getLogger("benchmark_tbls")


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class TimingMetrics:
    """Averaged timings (seconds) for one suite / parameter set"""
    suite: str
    n_parties: int
    threshold: int
    invalid_shares: int
    iterations: int

    deal_time: float
    sign_time: float
    verify_time: float
    aggregate_time: float

    signature_size: int
    partial_signature_size: int
    memory_mb_max: float
    success: bool = True
    error_message: str = ""


# ============================================================================
# BENCHMARK
# ============================================================================

def run_benchmark(suite_name: str, n: int, t: int, iterations: int = 3,
                  invalid: int = 0) -> TimingMetrics:
    """Run `iterations` full deal / sign / verify / aggregate rounds"""
    if iterations < 1:
        raise ValueError("iterations must be at least 1")
    suite = get_suite(suite_name)
    process = psutil.Process(os.getpid())
    message = b"threshold bls benchmark"

    deal_times: List[float] = []
    sign_times: List[float] = []
    verify_times: List[float] = []
    aggregate_times: List[float] = []
    mem_max = 0.0
    signature = b""
    partial_size = 0

    try:
        for it in range(iterations):
            t0 = time.perf_counter()
            shares, public = deal_shares(suite, n, t)
            deal_times.append(time.perf_counter() - t0)

            partials: List[ThresholdSig] = []
            for share in shares[:t]:
                t0 = time.perf_counter()
                partials.append(threshold_sign(suite, share, message))
                sign_times.append(time.perf_counter() - t0)
            partial_size = len(partials[0].to_bytes(suite))

            t0 = time.perf_counter()
            ok = threshold_verify(suite, public, message, partials[0])
            verify_times.append(time.perf_counter() - t0)
            if not ok:
                raise RuntimeError("partial signature failed verification")

            # garbage first, so the aggregator has to filter it
            garbage = [
                ThresholdSig((p.index + 1) % n, p.sig) for p in partials[:invalid]
            ]
            t0 = time.perf_counter()
            signature = aggregate_signatures(suite, public, message, garbage + partials, n, t)
            aggregate_times.append(time.perf_counter() - t0)

            if not bls_mode.verify(suite, public.commit(), message, signature):
                raise RuntimeError("aggregated signature failed verification")

            mem_max = max(mem_max, process.memory_info().rss / (1024 * 1024))
            logger.info("iteration %d/%d done", it + 1, iterations)
    except Exception as exc:
        logger.exception("Benchmark failed for %s (t=%d, n=%d)", suite_name, t, n)
        return TimingMetrics(suite_name, n, t, invalid, iterations,
                             0.0, 0.0, 0.0, 0.0, 0, 0, mem_max,
                             success=False, error_message=str(exc))

    return TimingMetrics(
        suite=suite_name,
        n_parties=n,
        threshold=t,
        invalid_shares=invalid,
        iterations=iterations,
        deal_time=statistics.mean(deal_times),
        sign_time=statistics.mean(sign_times),
        verify_time=statistics.mean(verify_times),
        aggregate_time=statistics.mean(aggregate_times),
        signature_size=len(signature),
        partial_signature_size=partial_size,
        memory_mb_max=mem_max,
    )


def print_summary(results: List[TimingMetrics]) -> None:
    print("=" * 80)
    print(f"{'suite':<10} {'t/n':<7} {'deal ms':>9} {'sign ms':>9} {'verify ms':>10} "
          f"{'agg ms':>9} {'sig B':>6} {'ok':>4}")
    print("-" * 80)
    for r in results:
        print(f"{r.suite:<10} {f'{r.threshold}/{r.n_parties}':<7} "
              f"{r.deal_time * 1000:>9.1f} {r.sign_time * 1000:>9.1f} "
              f"{r.verify_time * 1000:>10.1f} {r.aggregate_time * 1000:>9.1f} "
              f"{r.signature_size:>6} {'yes' if r.success else 'NO':>4}")
    print("=" * 80)


def save_results(results: List[TimingMetrics], output_dir: str) -> str:
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, "tbls_benchmark.json")
    payload: Dict[str, Any] = {
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "results": [asdict(r) for r in results],
    }
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)
    return path


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Threshold BLS Benchmark")
    parser.add_argument("--suite", choices=sorted(SUITES) + ["all"], default="all")
    parser.add_argument("-n", type=int, default=5, help="Number of parties")
    parser.add_argument("-t", type=int, default=3, help="Threshold")
    parser.add_argument("--iterations", type=int, default=3)
    parser.add_argument("--invalid", type=int, default=0,
                        help="Garbage partial signatures placed before the valid ones")
    parser.add_argument("--output", default=None, help="Directory for JSON results")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if not (1 <= args.t <= args.n):
        parser.error("threshold must be within [1, n]")
    if args.iterations < 1:
        parser.error("--iterations must be at least 1")
    if not (0 <= args.invalid <= args.t):
        parser.error("--invalid must be within [0, t]")

    names = sorted(SUITES) if args.suite == "all" else [args.suite]
    results = [run_benchmark(name, args.n, args.t, args.iterations, args.invalid) for name in names]
    print_summary(results)

    if args.output:
        print(f"Results saved to {save_results(results, args.output)}")
    return 0 if all(r.success for r in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
