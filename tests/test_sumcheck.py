"""
Tests for the sum-check prover, verifier and drivers.
"""

import logging
import random

import pytest

from mlsumcheck.common import Polynomial, PreconditionViolation, ProtocolRejection
from mlsumcheck.config import ProtocolConfig
from mlsumcheck.mle import MultilinearExtension
from mlsumcheck.protocol import (
    SumCheckProof,
    SumCheckProver,
    SumCheckVerifier,
    Transcript,
    VerifierState,
    prove_sumcheck,
    run_sumcheck,
    verify_sumcheck,
)


class CorruptRoundProver(SumCheckProver):
    """Adds 1 to the constant term of one round message."""

    def __init__(self, mle, bad_round, config=None):
        super().__init__(mle, config)
        self.bad_round = bad_round

    def round_polynomial(self, challenges):
        poly = super().round_polynomial(challenges)
        if len(challenges) == self.bad_round:
            poly = poly + 1
        return poly


class WrongSumProver(SumCheckProver):

    def claimed_sum(self):
        return super().claimed_sum() + 1


class HighDegreeProver(SumCheckProver):
    """Adds X^2 - X, which vanishes on {0, 1}: only the degree bound catches it."""

    def round_polynomial(self, challenges):
        poly = super().round_polynomial(challenges)
        return poly + Polynomial(self.field, [0, -1, 1])


class TestProver:

    def test_round_messages(self, worked_mle, toy_config):
        prover = SumCheckProver(worked_mle, toy_config)
        assert prover.num_rounds == 3
        assert prover.max_degree == 1
        assert prover.claimed_sum().value == 61
        assert prover.round_polynomial([10]) == Polynomial(worked_mle.field, [12, 16])

    def test_final_evaluation(self, worked_mle, toy_config):
        prover = SumCheckProver(worked_mle, toy_config)
        assert prover.final_evaluation((0, 1, 1)).value == 10


class TestInteractive:

    @pytest.mark.parametrize("var_num", [1, 2, 3, 5])
    def test_honest_run_accepts(self, big_field, default_config, var_num):
        f = MultilinearExtension.random(big_field, var_num, rng=random.Random(var_num))
        result = run_sumcheck(SumCheckProver(f, default_config))
        assert result.verified
        assert result.rejection_reason is None
        assert result.num_rounds == var_num
        assert result.claimed_sum == f.sum_all_evals()
        assert result.final_value == f.evaluate(result.challenges)
        assert len(result.round_data) == var_num

    def test_round_data_chain(self, worked_mle, toy_config):
        result = run_sumcheck(SumCheckProver(worked_mle, toy_config))
        claim = result.claimed_sum
        for rd in result.round_data:
            g = rd.round_polynomial
            assert rd.claim == claim
            assert g(0) + g(1) == claim
            assert g.degree() <= 1
            claim = rd.next_claim
        assert claim == result.final_value

    def test_toy_field_honest_run(self, worked_mle, toy_config):
        assert run_sumcheck(SumCheckProver(worked_mle, toy_config)).verified

    @pytest.mark.parametrize("bad_round", [0, 1, 2])
    def test_corrupted_round_rejected(self, worked_mle, toy_config, bad_round):
        result = run_sumcheck(CorruptRoundProver(worked_mle, bad_round, toy_config))
        assert not result.verified
        assert f"round {bad_round + 1}" in result.rejection_reason
        assert result.final_value is None
        assert len(result.round_data) == bad_round + 1
        assert result.round_data[-1].challenge is None

    def test_wrong_claimed_sum_rejected_in_first_round(self, worked_mle, toy_config):
        result = run_sumcheck(WrongSumProver(worked_mle, toy_config))
        assert not result.verified
        assert "round 1" in result.rejection_reason

    def test_degree_bound_enforced(self, worked_mle, toy_config):
        result = run_sumcheck(HighDegreeProver(worked_mle, toy_config))
        assert not result.verified
        assert "degree 2 exceeds bound 1" in result.rejection_reason

    def test_bad_oracle_rejected_in_final_check(self, worked_mle, toy_config):
        result = run_sumcheck(SumCheckProver(worked_mle, toy_config),
                              oracle=lambda point: worked_mle.evaluate(point) + 1)
        assert not result.verified
        assert result.rejection_reason.startswith("Reject (final check)")
        assert result.num_rounds == 3

    def test_parallel_config_same_result(self, big_field):
        f = MultilinearExtension.random(big_field, 8, rng=random.Random(3))
        sequential = run_sumcheck(SumCheckProver(f, ProtocolConfig()))
        parallel = run_sumcheck(SumCheckProver(f, ProtocolConfig(max_workers=4, parallel_threshold=2)))
        assert parallel.verified
        assert parallel.challenges == sequential.challenges
        assert parallel.final_value == sequential.final_value

    def test_rejection_is_logged(self, worked_mle, toy_config, caplog):
        with caplog.at_level(logging.WARNING, logger="mlsumcheck"):
            run_sumcheck(CorruptRoundProver(worked_mle, 1, toy_config))
        assert any("Reject (round 2)" in r.getMessage() for r in caplog.records)

    def test_verbose_walkthrough(self, worked_mle, capsys):
        config = ProtocolConfig(name="toy", prime=97, verbose=True)
        run_sumcheck(SumCheckProver(worked_mle, config))
        out = capsys.readouterr().out
        assert "ROUND 3" in out
        assert "ACCEPT" in out


class TestVerifierStateMachine:

    def test_states(self, worked_mle, field):
        prover = SumCheckProver(worked_mle)
        verifier = SumCheckVerifier(field, 3, 61, 1, Transcript())
        assert verifier.state is VerifierState.INIT
        for i in range(3):
            verifier.receive_round(prover.round_polynomial(verifier.challenges))
            assert verifier.state is (VerifierState.FINAL if i == 2 else VerifierState.ROUND)
        assert verifier.expected_final_claim() == worked_mle.evaluate(verifier.challenges)
        assert verifier.finalize(worked_mle.evaluate(verifier.challenges))
        assert verifier.state is VerifierState.ACCEPT

    def test_finalize_before_rounds(self, field):
        verifier = SumCheckVerifier(field, 2, 0, 1, Transcript())
        with pytest.raises(PreconditionViolation):
            verifier.finalize(0)
        with pytest.raises(PreconditionViolation):
            verifier.expected_final_claim()

    def test_round_after_final(self, field):
        verifier = SumCheckVerifier(field, 1, 5, 1, Transcript())
        verifier.receive_round(Polynomial(field, [1, 3]))
        with pytest.raises(PreconditionViolation):
            verifier.receive_round(Polynomial(field, [1, 3]))

    def test_rejected_verifier_is_terminal(self, field):
        verifier = SumCheckVerifier(field, 2, 5, 1, Transcript())
        with pytest.raises(ProtocolRejection) as exc:
            verifier.receive_round(Polynomial(field, [1, 1]))
        assert exc.value.round_index == 0
        assert verifier.state is VerifierState.REJECT
        with pytest.raises(PreconditionViolation):
            verifier.receive_round(Polynomial(field, [1, 3]))

    def test_zero_rounds(self, field):
        verifier = SumCheckVerifier(field, 0, 42, 1, Transcript())
        assert verifier.state is VerifierState.FINAL
        assert verifier.finalize(42)

    def test_zero_rounds_mismatch(self, field):
        verifier = SumCheckVerifier(field, 0, 42, 1, Transcript())
        with pytest.raises(ProtocolRejection) as exc:
            verifier.finalize(41)
        assert exc.value.round_index is None

    def test_wrong_field_polynomial(self, field, big_field):
        verifier = SumCheckVerifier(field, 1, 5, 1, Transcript())
        with pytest.raises(ProtocolRejection) as exc:
            verifier.receive_round(Polynomial(big_field, [1, 3]))
        assert exc.value.round_index == 0
        assert verifier.state is VerifierState.REJECT

    def test_invalid_parameters(self, field):
        with pytest.raises(PreconditionViolation):
            SumCheckVerifier(field, -1, 0, 1, Transcript())
        with pytest.raises(PreconditionViolation):
            SumCheckVerifier(field, 1, 0, 0, Transcript())


class TestFiatShamir:

    def _prove(self, f, label=b"test"):
        return prove_sumcheck(SumCheckProver(f), Transcript(label))

    def _verify(self, proof, f, label=b"test"):
        return verify_sumcheck(proof, f.field, f.var_num, 1, Transcript(label), f.evaluate)

    def test_honest_proof_verifies(self, big_field):
        f = MultilinearExtension.random(big_field, 4, rng=random.Random(11))
        proof = self._prove(f)
        assert proof.num_rounds == 4
        result = self._verify(proof, f)
        assert result.verified
        assert result.challenges == proof.challenges

    def test_tampered_round_rejected(self, big_field):
        f = MultilinearExtension.random(big_field, 4, rng=random.Random(12))
        proof = self._prove(f)
        # Keep g(0) + g(1) intact: the transcript, not the sum check, must catch it.
        g = proof.round_polynomials[1]
        shifted = Polynomial(big_field, [g.coefficient(0) + 1, g.coefficient(1) - 2])
        tampered = SumCheckProof(proof.claimed_sum,
                                 proof.round_polynomials[:1] + [shifted] + proof.round_polynomials[2:])
        assert not self._verify(tampered, f).verified

    def test_tampered_claim_rejected(self, big_field):
        f = MultilinearExtension.random(big_field, 3, rng=random.Random(13))
        proof = self._prove(f)
        proof.claimed_sum = proof.claimed_sum + 1
        result = self._verify(proof, f)
        assert not result.verified
        assert "round 1" in result.rejection_reason

    def test_label_mismatch_rejected(self, big_field):
        f = MultilinearExtension.random(big_field, 3, rng=random.Random(14))
        proof = self._prove(f, label=b"prover")
        assert not self._verify(proof, f, label=b"verifier").verified

    def test_truncated_proof_rejected(self, big_field):
        f = MultilinearExtension.random(big_field, 3, rng=random.Random(15))
        proof = self._prove(f)
        proof.round_polynomials.pop()
        result = self._verify(proof, f)
        assert not result.verified
        assert "rounds" in result.rejection_reason

    def test_foreign_field_round_rejected(self, big_field, field):
        f = MultilinearExtension.random(big_field, 3, rng=random.Random(17))
        proof = self._prove(f)
        proof.round_polynomials[0] = Polynomial(field, [1, 2])
        result = self._verify(proof, f)
        assert not result.verified
        assert result.rejection_reason.startswith("Reject (round 1)")

    def test_foreign_field_claim_rejected(self, big_field, field):
        f = MultilinearExtension.random(big_field, 3, rng=random.Random(18))
        proof = self._prove(f)
        proof.claimed_sum = field.element(1)
        result = self._verify(proof, f)
        assert not result.verified
        assert "claimed sum" in result.rejection_reason
        assert result.final_value is None

    def test_proof_equality_ignores_challenges(self, big_field):
        f = MultilinearExtension.random(big_field, 2, rng=random.Random(16))
        proof = self._prove(f)
        assert proof == SumCheckProof(proof.claimed_sum, list(proof.round_polynomials))
