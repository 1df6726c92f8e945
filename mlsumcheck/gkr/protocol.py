"""
GKR Protocol over Layered Circuits.

Proves that a layered circuit maps the given inputs to the claimed outputs
with one sum-check instance per layer, walking from the outputs to the
inputs:

    1. The verifier draws r ∈ F^{k_0} and sets claim = W_0(r) from the
       claimed outputs.
    2. For each layer i, a GKR layer sum-check reduces "W_i(r) = claim" to
       a claim about add_i, mult_i (which the verifier computes itself from
       the wiring) and two values of the next layer, W_{i+1}(a*) and
       W_{i+1}(b*).
    3. The two claims are merged into one along the line through a* and b*:

           ℓ(t) = a* + t·(b* - a*),   q(t) = W_{i+1}(ℓ(t))

       The prover sends q (degree ≤ k_{i+1}), the verifier reads
       W_{i+1}(a*) = q(0) and W_{i+1}(b*) = q(1), draws r*, and continues
       with r = ℓ(r*) and claim = q(r*).
    4. At the input layer the verifier evaluates the input MLE itself.

Everything is non-interactive: prover and verifier each own a Transcript
with the same label and make the same sequence of calls, starting with the
inputs and the claimed outputs.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union
import logging

from ..common.errors import PreconditionViolation, ProtocolRejection
from ..common.field import FieldElement
from ..common.polynomial import Polynomial
from ..config import ProtocolConfig, create_default_config
from ..protocol.core import SumCheckProof, prove_sumcheck
from ..protocol.prover import GKRSumCheckProver
from ..protocol.transcript import Transcript
from ..protocol.verifier import SumCheckVerifier
from .circuit import LayeredCircuit

logger = logging.getLogger(__name__)

Scalar = Union[FieldElement, int]


@dataclass
class GKRLayerProof:
    """
    Messages for one layer.

    Attributes:
        sumcheck: Round polynomials of the layer sum-check
        line: q(t) = W_{i+1}(ℓ(t)), the restriction of the next layer to the
            line through the two final points
    """
    sumcheck: SumCheckProof
    line: Polynomial


@dataclass
class GKRProof:
    """Claimed outputs plus one GKRLayerProof per layer, outputs first."""
    outputs: List[FieldElement]
    layers: List[GKRLayerProof] = field(default_factory=list)


@dataclass
class GKRResult:
    """
    Result of run_gkr.

    Attributes:
        outputs: Circuit outputs the prover claimed
        proof: The proof that was checked
        verified: Whether the verifier accepted
        rejection_reason: Message of the ProtocolRejection, if any
    """
    outputs: List[FieldElement]
    proof: GKRProof
    verified: bool
    rejection_reason: Optional[str] = None


def line_point(a: Sequence[FieldElement], b: Sequence[FieldElement],
               t: Scalar) -> List[FieldElement]:
    """ℓ(t) = a + t·(b - a), coordinate-wise."""
    return [x + (y - x) * t for x, y in zip(a, b)]


class GKRProver:
    """
    Honest GKR prover for one circuit.

    Example:
        >>> prover = GKRProver(circuit, config)
        >>> proof = prover.prove([1, 2, 3, 4], Transcript(config.transcript_label))
    """

    def __init__(self, circuit: LayeredCircuit, config: Optional[ProtocolConfig] = None):
        self.circuit = circuit
        self.field = circuit.field
        self.config = config if config is not None else create_default_config()

    def prove(self, inputs: Sequence[Scalar], transcript: Transcript) -> GKRProof:
        circuit = self.circuit
        values = circuit.evaluate(inputs)
        outputs = values[0]

        transcript.append_field_elements(values[-1])
        transcript.append_field_elements(outputs)
        r = transcript.challenge_scalars(self.field, circuit.layer_var_num(0))

        layer_proofs: List[GKRLayerProof] = []
        for i in range(circuit.depth):
            add_i, mult_i = circuit.wiring_predicates(i)
            next_layer = circuit.layer_mle(values[i + 1])
            k = next_layer.var_num

            layer_prover = GKRSumCheckProver(
                (len(r), 2 * k), (add_i, mult_i, next_layer), r, self.config
            )
            sumcheck = prove_sumcheck(layer_prover, transcript)
            a_star, b_star = sumcheck.challenges[:k], sumcheck.challenges[k:]

            # q has degree <= k, so k + 1 points determine it.
            ts = list(range(k + 1))
            ys = [next_layer.evaluate(line_point(a_star, b_star, t)) for t in ts]
            line = Polynomial.interpolate(self.field, ts, ys)

            transcript.append_polynomial(line)
            r_star = transcript.challenge_scalar(self.field)
            r = line_point(a_star, b_star, r_star)
            layer_proofs.append(GKRLayerProof(sumcheck=sumcheck, line=line))
            logger.debug("layer %d proved, reduced to %d-variable point", i, len(r))

        logger.info("GKR proof produced for %r", circuit)
        return GKRProof(outputs=list(outputs), layers=layer_proofs)


class GKRVerifier:
    """
    GKR verifier for one circuit.

    The verifier knows the circuit (and so every wiring predicate) and the
    inputs. It trusts nothing else in the proof.

    Attributes:
        rejection_reason: Message of the last rejection, None after an accept
    """

    def __init__(self, circuit: LayeredCircuit):
        self.circuit = circuit
        self.field = circuit.field
        self.rejection_reason: Optional[str] = None

    def verify(self, proof: GKRProof, inputs: Sequence[Scalar], transcript: Transcript) -> bool:
        """Return True iff the proof is accepted; rejections are logged, not raised."""
        if len(inputs) != self.circuit.num_inputs:
            raise PreconditionViolation(
                f"Expected {self.circuit.num_inputs} inputs, got {len(inputs)}"
            )
        try:
            self._check(proof, inputs, transcript)
        except ProtocolRejection as e:
            self.rejection_reason = str(e)
            return False
        self.rejection_reason = None
        logger.info("GKR proof accepted for %r", self.circuit)
        return True

    def _check(self, proof: GKRProof, inputs: Sequence[Scalar], transcript: Transcript) -> None:
        circuit = self.circuit
        field = self.field

        if len(proof.outputs) != len(circuit.layers[0]):
            self._reject(f"proof claims {len(proof.outputs)} outputs, circuit has {len(circuit.layers[0])}")
        if len(proof.layers) != circuit.depth:
            self._reject(f"proof has {len(proof.layers)} layers, circuit has {circuit.depth}")
        if not all(field.contains(x) for x in proof.outputs):
            self._reject(f"proof outputs are not all in Z_{field.prime}")

        outputs = [field.element(x) for x in proof.outputs]
        transcript.append_field_elements([field.element(x) for x in inputs])
        transcript.append_field_elements(outputs)
        r = transcript.challenge_scalars(field, circuit.layer_var_num(0))
        claim = circuit.layer_mle(outputs).evaluate(r)

        for i, layer_proof in enumerate(proof.layers):
            add_i, mult_i = circuit.wiring_predicates(i)
            k = circuit.layer_var_num(i + 1)

            sumcheck = layer_proof.sumcheck
            if not field.contains(sumcheck.claimed_sum):
                self._reject(f"layer {i} sum-check claim is not in Z_{field.prime}")
            if sumcheck.claimed_sum != claim:
                self._reject(f"layer {i} sum-check claims {sumcheck.claimed_sum}, expected {claim.value}")
            if sumcheck.num_rounds != 2 * k:
                self._reject(f"layer {i} sum-check has {sumcheck.num_rounds} rounds, expected {2 * k}")

            verifier = SumCheckVerifier(field, 2 * k, claim, GKRSumCheckProver.max_degree, transcript)
            for poly in sumcheck.round_polynomials:
                verifier.receive_round(poly)
            final_claim = verifier.expected_final_claim()
            point = list(verifier.challenges)
            a_star, b_star = point[:k], point[k:]

            line = layer_proof.line
            if line.field != field:
                self._reject(f"layer {i} line polynomial is over Z_{line.field.prime}, expected Z_{field.prime}")
            if line.degree() > k:
                self._reject(f"layer {i} line polynomial has degree {line.degree()}, bound is {k}")
            w_a, w_b = line.evaluate(0), line.evaluate(1)
            domain = r + point
            expected = add_i.evaluate(domain) * (w_a + w_b) + mult_i.evaluate(domain) * (w_a * w_b)
            if expected != final_claim:
                self._reject(f"layer {i} final check: wiring gives {expected.value}, "
                             f"sum-check ended at {final_claim.value}")

            transcript.append_polynomial(line)
            r_star = transcript.challenge_scalar(field)
            r = line_point(a_star, b_star, r_star)
            claim = line.evaluate(r_star)
            logger.debug("layer %d verified, next claim %s", i, claim.value)

        input_value = circuit.layer_mle(inputs).evaluate(r)
        if input_value != claim:
            self._reject(f"input layer: W_in(r) = {input_value.value}, claim is {claim.value}")

    def _reject(self, reason: str) -> None:
        error = ProtocolRejection(reason)
        logger.warning("%s", error)
        raise error


def run_gkr(circuit: LayeredCircuit, inputs: Sequence[Scalar],
            config: Optional[ProtocolConfig] = None) -> GKRResult:
    """
    Prove and verify one circuit evaluation, each side with its own transcript.

    Example:
        >>> result = run_gkr(circuit, [1, 2, 3, 4], create_toy_config(verbose=False))
        >>> result.verified
        True
    """
    config = config if config is not None else create_default_config()
    if circuit.field != config.field:
        raise PreconditionViolation("Circuit field does not match the configured field")

    proof = GKRProver(circuit, config).prove(inputs, Transcript(config.transcript_label))
    verifier = GKRVerifier(circuit)
    verified = verifier.verify(proof, inputs, Transcript(config.transcript_label))
    return GKRResult(outputs=proof.outputs, proof=proof, verified=verified,
                     rejection_reason=verifier.rejection_reason)
