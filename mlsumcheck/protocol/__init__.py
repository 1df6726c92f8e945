"""
Sum-check protocol engine.

Key Components:
    - SumCheckProver / GKRSumCheckProver: compute the round polynomials
    - SumCheckVerifier: running-claim state machine, accepts or rejects
    - Transcript: Fiat-Shamir challenge source for one proof session
    - run_sumcheck / prove_sumcheck / verify_sumcheck: drivers

Usage:
    >>> from mlsumcheck.config import create_toy_config
    >>> from mlsumcheck.mle import MultilinearExtension
    >>> from mlsumcheck.protocol import SumCheckProver, run_sumcheck
    >>>
    >>> config = create_toy_config(verbose=False)
    >>> f = MultilinearExtension.lagrange(config.field, 3, [3, 7, 2, 5, 1, 8, 4, 6])
    >>> result = run_sumcheck(SumCheckProver(f, config))
    >>> result.verified
    True
"""

from .transcript import Transcript
from .prover import SumCheckProver, GKRSumCheckProver
from .verifier import SumCheckVerifier, VerifierState
from .core import (
    RoundData,
    SumCheckResult,
    SumCheckProof,
    run_sumcheck,
    prove_sumcheck,
    verify_sumcheck,
)

__all__ = [
    "Transcript",
    "SumCheckProver",
    "GKRSumCheckProver",
    "SumCheckVerifier",
    "VerifierState",
    "RoundData",
    "SumCheckResult",
    "SumCheckProof",
    "run_sumcheck",
    "prove_sumcheck",
    "verify_sumcheck",
]
