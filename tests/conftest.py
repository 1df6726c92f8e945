"""Shared fixtures for the mlsumcheck test suite."""

import random

import pytest

from mlsumcheck.common import PrimeField
from mlsumcheck.config import create_default_config, create_toy_config
from mlsumcheck.gkr import Gate, GateType, Layer, LayeredCircuit
from mlsumcheck.mle import MultilinearExtension


@pytest.fixture
def field():
    """Z_97, small enough to check by hand."""
    return PrimeField(PrimeField.SMALL_TEST_PRIME)


@pytest.fixture
def big_field():
    return PrimeField(PrimeField.BLS12_381_SCALAR_PRIME)


@pytest.fixture
def toy_config():
    return create_toy_config(verbose=False)


@pytest.fixture
def default_config():
    return create_default_config()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def worked_mle(field):
    """f = 5 + 2·x3 + 3·x2 + x1·x2·x3 over Z_97."""
    return MultilinearExtension(field, 3, [5, 2, 3, 0, 0, 0, 0, 1])


def make_circuit(field):
    """outputs: [(a·b) + (c+d), (a+b)·(c·d)] over inputs [a, b, c, d]."""
    return LayeredCircuit(field, [
        Layer([Gate(GateType.ADD, 0, 1), Gate(GateType.MUL, 2, 3)]),
        Layer([Gate(GateType.MUL, 0, 1), Gate(GateType.ADD, 2, 3),
               Gate(GateType.ADD, 0, 1), Gate(GateType.MUL, 2, 3)]),
    ], num_inputs=4)


@pytest.fixture
def circuit(field):
    return make_circuit(field)


@pytest.fixture
def big_circuit(big_field):
    return make_circuit(big_field)
