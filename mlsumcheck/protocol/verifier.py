"""
Sum-Check Verifier.

The verifier holds one running claim. It starts as the claimed sum C and,
after each round message g_i, must satisfy

    g_i(0) + g_i(1) == claim

after which a challenge r_i is drawn from the transcript and the claim
becomes g_i(r_i). Once every round is done, the claim has been reduced to
a single evaluation g(r_1, ..., r_v), checked against an oracle (or handed
over to the next GKR layer).

States:
    INIT ──receive_round──▶ ROUND ──(last round)──▶ FINAL ──finalize──▶ ACCEPT
      │                       │                        │
      └───────────────────────┴────── failed check ────┴─────────────▶ REJECT
"""

from __future__ import annotations
from enum import Enum
from typing import List, Optional, Union
import logging

from ..common.errors import PreconditionViolation, ProtocolRejection
from ..common.field import FieldElement, PrimeField
from ..common.polynomial import Polynomial
from .transcript import Transcript

logger = logging.getLogger(__name__)


class VerifierState(Enum):
    INIT = "init"
    ROUND = "round"
    FINAL = "final"
    ACCEPT = "accept"
    REJECT = "reject"


class SumCheckVerifier:
    """
    Round-by-round verifier of one sum-check instance.

    The claimed sum is absorbed into the transcript on construction, so the
    first challenge already depends on it.

    Attributes:
        field: Prime field of the protocol
        num_rounds: Number of variables v
        max_degree: Degree bound of every round polynomial
        claim: Current running claim
        challenges: Challenges drawn so far
        state: Current VerifierState

    Example:
        >>> verifier = SumCheckVerifier(field, 3, claimed_sum, 1, Transcript())
        >>> r_1 = verifier.receive_round(g_1)
        >>> ...
        >>> verifier.finalize(f.evaluate(verifier.challenges))
        True
    """

    def __init__(self, field: PrimeField, num_rounds: int,
                 claimed_sum: Union[FieldElement, int], max_degree: int,
                 transcript: Transcript):
        if num_rounds < 0:
            raise PreconditionViolation(f"num_rounds must be non-negative, got {num_rounds}")
        if max_degree < 1:
            raise PreconditionViolation(f"max_degree must be at least 1, got {max_degree}")
        self.field = field
        self.num_rounds = num_rounds
        self.max_degree = max_degree
        self.transcript = transcript
        self.claimed_sum = field.element(claimed_sum)
        self.claim = self.claimed_sum
        self.challenges: List[FieldElement] = []
        self.state = VerifierState.INIT if num_rounds else VerifierState.FINAL

        transcript.append_field_elements([self.claimed_sum])

    @property
    def round_index(self) -> int:
        """0-based index of the round expected next."""
        return len(self.challenges)

    def receive_round(self, poly: Polynomial) -> FieldElement:
        """
        Check one round message and return the challenge for the next round.

        Raises:
            ProtocolRejection: If the polynomial is over another field, or the
                degree bound or g(0) + g(1) == claim fails
            PreconditionViolation: If every round has already been received
        """
        if self.state not in (VerifierState.INIT, VerifierState.ROUND):
            raise PreconditionViolation(f"Cannot receive a round message in state {self.state.name}")
        i = self.round_index
        if poly.field != self.field:
            self.reject(f"round polynomial is over Z_{poly.field.prime}, expected Z_{self.field.prime}", i)
        if poly.degree() > self.max_degree:
            self.reject(f"degree {poly.degree()} exceeds bound {self.max_degree}", i)
        total = poly.evaluate(0) + poly.evaluate(1)
        if total != self.claim:
            self.reject(f"g(0) + g(1) = {total.value} but claim is {self.claim.value}", i)

        self.transcript.append_polynomial(poly)
        r = self.transcript.challenge_scalar(self.field)
        self.challenges.append(r)
        self.claim = poly.evaluate(r)
        logger.debug("round %d accepted, r = %s, next claim = %s", i + 1, r.value, self.claim.value)

        self.state = VerifierState.FINAL if len(self.challenges) == self.num_rounds else VerifierState.ROUND
        return r

    def expected_final_claim(self) -> FieldElement:
        """The claim g(r_1, ..., r_v) all rounds reduced to, for delegation to another check."""
        if self.state is not VerifierState.FINAL:
            raise PreconditionViolation(f"Rounds are not complete (state {self.state.name})")
        return self.claim

    def finalize(self, oracle_value: Union[FieldElement, int]) -> bool:
        """
        Compare the final claim with the oracle's g(r_1, ..., r_v).

        Raises:
            ProtocolRejection: If they differ
        """
        if self.state is not VerifierState.FINAL:
            raise PreconditionViolation(f"Cannot finalize in state {self.state.name}")
        oracle_value = self.field.element(oracle_value)
        if oracle_value != self.claim:
            self.reject(f"oracle value {oracle_value.value} != final claim {self.claim.value}")
        self.state = VerifierState.ACCEPT
        logger.info("sum-check accepted after %d rounds", self.num_rounds)
        return True

    def reject(self, reason: str, round_index: Optional[int] = None) -> None:
        self.state = VerifierState.REJECT
        error = ProtocolRejection(reason, round_index)
        logger.warning("%s", error)
        raise error
