"""
Multilinear extensions.

Key Components:
    - MultilinearExtension: dense, bitmask-indexed coefficient table of a
      multilinear polynomial, with interpolation from hypercube tables,
      full evaluation and the partial evaluation used by every sum-check
      round

Usage:
    >>> from mlsumcheck.common import PrimeField
    >>> from mlsumcheck.mle import MultilinearExtension
    >>>
    >>> field = PrimeField(97)
    >>> f = MultilinearExtension.lagrange(field, 2, [3, 7, 2, 5])
    >>> f.sum_all_evals()
    FieldElement(17, mod 97)
"""

from .multilinear import MultilinearExtension, DEFAULT_PARALLEL_THRESHOLD

__all__ = [
    "MultilinearExtension",
    "DEFAULT_PARALLEL_THRESHOLD",
]
