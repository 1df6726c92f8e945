"""
Common building blocks for mlsumcheck.

This module provides:
    - Finite field arithmetic (PrimeField, FieldElement, BatchInverter)
    - Univariate polynomials (the per-round sum-check message)
    - Boolean hypercube enumeration
    - The error taxonomy (PreconditionViolation, ProtocolRejection)
"""

from .errors import MLSumcheckError, PreconditionViolation, ProtocolRejection
from .field import PrimeField, FieldElement, BatchInverter
from .hypercube import Hypercube, bits, from_bits
from .polynomial import Polynomial

__all__ = [
    "MLSumcheckError",
    "PreconditionViolation",
    "ProtocolRejection",
    "PrimeField",
    "FieldElement",
    "BatchInverter",
    "Hypercube",
    "bits",
    "from_bits",
    "Polynomial",
]
