"""Deterministic evaluation of the cipher engines.

Provides algebraic unit testing (roundtrip verification) and statistical
analysis (SAC) with an aggregated report.

Research / education only. Do NOT use in production.
"""

from .roundtrip import RoundtripResult, RoundtripFailure, run_roundtrip_tests, run_all_ciphers
from .avalanche import SACResult, compute_sac
from .report import EvaluationReport

__all__ = [
    "RoundtripResult",
    "RoundtripFailure",
    "run_roundtrip_tests",
    "run_all_ciphers",
    "SACResult",
    "compute_sac",
    "EvaluationReport",
]
