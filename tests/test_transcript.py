"""
Tests for the Fiat-Shamir transcript.
"""

from mlsumcheck.common import Polynomial, PrimeField
from mlsumcheck.protocol import Transcript
from mlsumcheck.protocol.transcript import DIGEST_SIZE


class TestTranscript:

    def test_challenge_size(self):
        assert len(Transcript().challenge()) == DIGEST_SIZE == 32

    def test_deterministic(self, big_field):
        a, b = Transcript(b"label"), Transcript(b"label")
        for t in (a, b):
            t.append(b"message")
            t.append_field_elements([big_field.element(7)])
        assert a.challenge_scalars(big_field, 3) == b.challenge_scalars(big_field, 3)

    def test_str_label_matches_bytes(self):
        assert Transcript("label").challenge() == Transcript(b"label").challenge()

    def test_label_separates_domains(self):
        assert Transcript(b"one").challenge() != Transcript(b"two").challenge()

    def test_messages_change_challenges(self):
        a, b = Transcript(), Transcript()
        a.append(b"x")
        b.append(b"y")
        assert a.challenge() != b.challenge()

    def test_length_prefix_prevents_concatenation_collisions(self):
        a, b = Transcript(), Transcript()
        a.append(b"ab")
        a.append(b"c")
        b.append(b"a")
        b.append(b"bc")
        assert a.challenge() != b.challenge()

    def test_successive_challenges_differ(self):
        t = Transcript()
        assert t.challenge() != t.challenge()
        assert t.challenge_count == 2

    def test_order_matters(self):
        a, b = Transcript(), Transcript()
        a.append(b"m")
        a.challenge()
        b.challenge()
        b.append(b"m")
        assert a.challenge() != b.challenge()

    def test_polynomial_trailing_zeros_do_not_matter(self, field):
        a, b = Transcript(), Transcript()
        a.append_polynomial(Polynomial(field, [1, 2]))
        b.append_polynomial(Polynomial(field, [1, 2, 0]))
        assert a.challenge() == b.challenge()

    def test_challenge_scalar_in_range(self, field):
        t = Transcript()
        for _ in range(50):
            r = t.challenge_scalar(field)
            assert 0 <= r.value < 97
            assert r.field == field

    def test_goldilocks_scalars(self):
        goldilocks = PrimeField(PrimeField.GOLDILOCKS_PRIME)
        values = Transcript().challenge_scalars(goldilocks, 10)
        assert len(set(v.value for v in values)) == 10
