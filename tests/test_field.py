"""
Tests for prime field arithmetic.
"""

import random

import pytest

from mlsumcheck.common import BatchInverter, FieldElement, PrimeField


class TestFieldElement:
    """Arithmetic on FieldElement."""

    def test_reduction_on_construction(self, field):
        assert field.element(100).value == 3
        assert field.element(-1).value == 96

    def test_add_sub_mul(self, field):
        a, b = field.element(45), field.element(67)
        assert (a + b).value == 15
        assert (a - b).value == 75
        assert (a * b).value == (45 * 67) % 97

    def test_int_operands_both_sides(self, field):
        x = field.element(10)
        assert (x + 1).value == 11
        assert (1 + x).value == 11
        assert (2 * x).value == 20
        assert (x * 2).value == 20
        assert (1 - x).value == 88
        assert (x - 11).value == 96

    def test_negation(self, field):
        assert (-field.one()).value == 96
        assert (-field.zero()).value == 0

    def test_inverse(self, field):
        for v in range(1, 97):
            x = field.element(v)
            assert (x * x.inverse()).is_one()

    def test_inverse_of_zero_raises(self, field):
        with pytest.raises(ValueError):
            field.zero().inverse()

    def test_division(self, field):
        a, b = field.element(10), field.element(7)
        assert (a / b) * b == a
        assert (a / 5).value == 2

    def test_pow(self, field):
        x = field.element(3)
        assert (x ** 4).value == 81
        assert (x ** -1) == x.inverse()
        assert (x ** 96).is_one()

    def test_equality_with_int(self, field):
        assert field.element(5) == 5
        assert field.element(5) != 102
        assert field.element(5) != 6
        assert field.element(-1) == 96

    def test_mixed_fields_rejected(self, field):
        other = PrimeField(101)
        with pytest.raises(ValueError):
            field.element(1) + other.element(1)
        with pytest.raises(ValueError):
            field.element(other.element(1))

    def test_hashable(self, field):
        assert len({field.element(1), field.element(98), field.element(2)}) == 2

    def test_int_keys_interchangeable(self, field):
        table = {5: "five"}
        assert table[field.element(5)] == "five"
        assert field.element(102) in {5}
        assert hash(field.element(5)) == hash(5)

    def test_immutable(self, field):
        x = field.element(1)
        with pytest.raises(AttributeError):
            x.value = 2


class TestPrimeField:
    """Field construction, sampling and encoding."""

    def test_prime_too_small(self):
        with pytest.raises(ValueError):
            PrimeField(1)

    def test_named_primes(self):
        assert PrimeField.GOLDILOCKS_PRIME == 2 ** 64 - 2 ** 32 + 1
        assert PrimeField.BLS12_381_SCALAR_PRIME.bit_length() == 255

    def test_byte_length(self):
        assert PrimeField(97).byte_length == 1
        assert PrimeField(PrimeField.GOLDILOCKS_PRIME).byte_length == 8
        assert PrimeField(PrimeField.BLS12_381_SCALAR_PRIME).byte_length == 32

    def test_bytes_round_trip(self, big_field):
        x = big_field.element(123456789)
        data = x.to_bytes()
        assert len(data) == 32
        assert big_field.from_bytes(data) == x

    def test_random_is_reproducible_with_rng(self, big_field):
        a = big_field.random(rng=random.Random(7))
        b = big_field.random(rng=random.Random(7))
        assert a == b

    def test_random_exclude_zero(self):
        tiny = PrimeField(2)
        rng = random.Random(0)
        assert all(tiny.random(exclude_zero=True, rng=rng).is_one() for _ in range(20))

    def test_raw(self, field):
        assert field.raw(field.element(5)) == 5
        assert field.raw(-1) == 96
        with pytest.raises(ValueError):
            field.raw(PrimeField(101).element(5))

    def test_contains(self, field):
        assert field.contains(5)
        assert field.contains(field.element(5))
        assert field.contains(PrimeField(97).element(5))
        assert not field.contains(PrimeField(101).element(5))

    def test_equality(self):
        assert PrimeField(97) == PrimeField(97)
        assert PrimeField(97) != PrimeField(101)


class TestBatchInverter:

    def test_matches_individual_inverses(self, field):
        elements = [field.element(i) for i in range(1, 20)]
        inverses = BatchInverter(field).invert_batch(elements)
        assert inverses == [e.inverse() for e in elements]

    def test_empty(self, field):
        assert BatchInverter(field).invert_batch([]) == []

    def test_zero_raises(self, field):
        with pytest.raises(ValueError):
            BatchInverter(field).invert_batch([field.one(), field.zero()])


def test_field_element_repr(field):
    assert repr(FieldElement(10, field)) == "FieldElement(10, mod 97)"
