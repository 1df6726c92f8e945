"""
Sum-Check Protocol Drivers.

Two ways to run a prover against a verifier:

    Interactive (run_sumcheck):
        The driver plays the message channel. Each round it asks the prover
        for g_i, hands it to a SumCheckVerifier, and feeds the challenge the
        verifier drew back to the prover. Everything that happened is
        captured in a SumCheckResult for inspection.

    Non-interactive (prove_sumcheck / verify_sumcheck):
        Fiat-Shamir. The prover derives the challenges itself from its own
        transcript and outputs a SumCheckProof (claimed sum + round
        polynomials). The verifier replays the same transcript calls from
        a fresh transcript with the same label, so it recomputes the same
        challenges only if the proof is unmodified.

In both cases the final check is delegated to an oracle, a callable
returning g(r_1, ..., r_v). For a plain MLE the oracle is the MLE itself.

A rejection is never an exception at this level: ProtocolRejection raised
by the verifier is caught and reported as verified=False with its reason.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence
import logging

from ..common.errors import PreconditionViolation, ProtocolRejection
from ..common.field import FieldElement, PrimeField
from ..common.polynomial import Polynomial
from ..config import ProtocolConfig
from .transcript import Transcript
from .verifier import SumCheckVerifier

logger = logging.getLogger(__name__)

Oracle = Callable[[Sequence[FieldElement]], FieldElement]


@dataclass
class RoundData:
    """
    Everything exchanged in one sum-check round.

    Attributes:
        round_num: Round number (1-indexed)
        round_polynomial: The univariate polynomial g_i sent by the prover
        claim: The running claim g_i(0) + g_i(1) had to match
        challenge: The challenge r_i, or None if the round was rejected
    """
    round_num: int
    round_polynomial: Polynomial
    claim: FieldElement
    challenge: Optional[FieldElement] = None

    @property
    def next_claim(self) -> Optional[FieldElement]:
        if self.challenge is None:
            return None
        return self.round_polynomial.evaluate(self.challenge)

    def __repr__(self) -> str:
        challenge = None if self.challenge is None else self.challenge.value
        return f"RoundData(round={self.round_num}, challenge={challenge})"


@dataclass
class SumCheckResult:
    """
    Complete result of a sum-check execution.

    Attributes:
        claimed_sum: The sum being proven
        challenges: All challenges drawn before the run ended
        round_data: Per-round record
        final_value: Oracle value g(r_1, ..., r_v), None if the run was
            rejected before the final check
        verified: Whether the verifier accepted
        rejection_reason: Message of the ProtocolRejection, if any
    """
    claimed_sum: FieldElement
    challenges: List[FieldElement]
    round_data: List[RoundData]
    final_value: Optional[FieldElement] = None
    verified: bool = True
    rejection_reason: Optional[str] = None

    @property
    def num_rounds(self) -> int:
        return len(self.challenges)


@dataclass
class SumCheckProof:
    """
    Non-interactive sum-check proof: the claimed sum and one polynomial per round.

    challenges holds the prover's own view of the Fiat-Shamir challenges so
    a caller (the GKR prover) can continue from the final point. It is not
    part of the proof: verifiers recompute it and never read it.
    """
    claimed_sum: FieldElement
    round_polynomials: List[Polynomial] = field(default_factory=list)
    challenges: List[FieldElement] = field(default_factory=list, compare=False, repr=False)

    @property
    def num_rounds(self) -> int:
        return len(self.round_polynomials)


def run_sumcheck(prover, transcript: Optional[Transcript] = None,
                 oracle: Optional[Oracle] = None,
                 config: Optional[ProtocolConfig] = None) -> SumCheckResult:
    """
    Run the interactive protocol between prover and a fresh verifier.

    Args:
        prover: SumCheckProver or GKRSumCheckProver
        transcript: Verifier's challenge source (a fresh one labelled with
            config.transcript_label if omitted)
        oracle: Final-check oracle, defaults to prover.final_evaluation
        config: Defaults to the prover's configuration

    Returns:
        SumCheckResult; verified=False if the verifier rejected
    """
    config = config if config is not None else prover.config
    if transcript is None:
        transcript = Transcript(config.transcript_label)
    if oracle is None:
        oracle = prover.final_evaluation

    claimed_sum = prover.claimed_sum()
    verifier = SumCheckVerifier(prover.field, prover.num_rounds, claimed_sum,
                                prover.max_degree, transcript)
    logger.info("sum-check started: %d rounds, degree bound %d",
                prover.num_rounds, prover.max_degree)
    if config.verbose:
        _print_header(prover, claimed_sum)

    history: List[RoundData] = []
    result = SumCheckResult(claimed_sum=claimed_sum, challenges=verifier.challenges,
                            round_data=history)
    try:
        for i in range(prover.num_rounds):
            poly = prover.round_polynomial(list(verifier.challenges))
            rd = RoundData(round_num=i + 1, round_polynomial=poly, claim=verifier.claim)
            history.append(rd)
            rd.challenge = verifier.receive_round(poly)
            if config.verbose:
                _print_round(rd)

        result.final_value = prover.field.element(oracle(list(verifier.challenges)))
        verifier.finalize(result.final_value)
    except ProtocolRejection as e:
        result.verified = False
        result.rejection_reason = str(e)

    if config.verbose:
        _print_final(result, verifier.claim)
    return result


def prove_sumcheck(prover, transcript: Transcript) -> SumCheckProof:
    """
    Produce a Fiat-Shamir proof, drawing every challenge from transcript.

    The transcript calls mirror SumCheckVerifier exactly: the claimed sum
    first, then per round the polynomial followed by one challenge.
    """
    claimed_sum = prover.claimed_sum()
    transcript.append_field_elements([claimed_sum])

    challenges: List[FieldElement] = []
    polys: List[Polynomial] = []
    for _ in range(prover.num_rounds):
        poly = prover.round_polynomial(challenges)
        polys.append(poly)
        transcript.append_polynomial(poly)
        challenges.append(transcript.challenge_scalar(prover.field))
        logger.debug("proved round %d, r = %s", len(challenges), challenges[-1].value)

    return SumCheckProof(claimed_sum=claimed_sum, round_polynomials=polys, challenges=challenges)


def verify_sumcheck(proof: SumCheckProof, field: PrimeField, num_rounds: int,
                    max_degree: int, transcript: Transcript,
                    oracle: Oracle) -> SumCheckResult:
    """
    Check a SumCheckProof against an oracle for g.

    A proof with the wrong number of rounds, or with values from another
    field, is rejected rather than treated as a caller error: both are
    chosen by the prover.
    """
    if num_rounds < 0:
        raise PreconditionViolation(f"num_rounds must be non-negative, got {num_rounds}")

    if not field.contains(proof.claimed_sum):
        error = ProtocolRejection(
            f"claimed sum is over Z_{proof.claimed_sum.field.prime}, expected Z_{field.prime}"
        )
        logger.warning("%s", error)
        return SumCheckResult(claimed_sum=proof.claimed_sum, challenges=[], round_data=[],
                              verified=False, rejection_reason=str(error))

    verifier = SumCheckVerifier(field, num_rounds, proof.claimed_sum, max_degree, transcript)
    history: List[RoundData] = []
    result = SumCheckResult(claimed_sum=verifier.claimed_sum, challenges=verifier.challenges,
                            round_data=history)
    try:
        if proof.num_rounds != num_rounds:
            verifier.reject(f"proof has {proof.num_rounds} rounds, expected {num_rounds}",
                            min(proof.num_rounds, num_rounds))
        for i, poly in enumerate(proof.round_polynomials):
            rd = RoundData(round_num=i + 1, round_polynomial=poly, claim=verifier.claim)
            history.append(rd)
            rd.challenge = verifier.receive_round(poly)
        result.final_value = field.element(oracle(list(verifier.challenges)))
        verifier.finalize(result.final_value)
    except ProtocolRejection as e:
        result.verified = False
        result.rejection_reason = str(e)
    return result


# =========================================================================
# Walkthrough printing (config.verbose)
# =========================================================================

def _print_header(prover, claimed_sum: FieldElement):
    print("\n" + "═" * 70)
    print("                    SUM-CHECK PROTOCOL")
    print("═" * 70)
    print(f"\nProver: {type(prover).__name__}")
    print(f"Rounds: v = {prover.num_rounds}, degree bound d = {prover.max_degree}")
    print(f"Field: {prover.field.prime.bit_length()}-bit prime")
    print(f"\nClaimed sum: C = {claimed_sum.value}")


def _print_round(rd: RoundData):
    g = rd.round_polynomial
    g0, g1 = g.evaluate(0), g.evaluate(1)
    print(f"\n{'─' * 70}")
    print(f"ROUND {rd.round_num}")
    print(f"{'─' * 70}")
    print(f"  g_{rd.round_num}(X) = {g}")
    print(f"  g(0) + g(1) = {g0.value} + {g1.value} = {(g0 + g1).value}  (claim {rd.claim.value})")
    print(f"  Challenge: r_{rd.round_num} = {rd.challenge.value}")
    print(f"  Next claim: g_{rd.round_num}(r_{rd.round_num}) = {rd.next_claim.value}")


def _print_final(result: SumCheckResult, final_claim: FieldElement):
    print(f"\n{'═' * 70}")
    print("PROTOCOL COMPLETE")
    print(f"{'═' * 70}")
    print(f"\nChallenges: ({', '.join(str(r.value) for r in result.challenges)})")
    if result.final_value is not None:
        print(f"Oracle value g(r) = {result.final_value.value}")
    print(f"Final claim:        {final_claim.value}")
    if result.verified:
        print("\n✓ ACCEPT")
    else:
        print(f"\n✗ {result.rejection_reason}")
