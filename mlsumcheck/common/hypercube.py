"""
Boolean Hypercube Enumeration.

Interpolation, evaluation and partial evaluation all walk the hypercube
{0,1}^k. Points are bit tuples read most-significant-bit first, so the
point at position i of the enumeration is ``bits(i, k)`` and the first
coordinate is the high bit of i:

    >>> list(Hypercube(2))
    [(0, 0), (0, 1), (1, 0), (1, 1)]
"""

from __future__ import annotations
from typing import Iterator, Sequence, Tuple

from .errors import PreconditionViolation


def bits(index: int, width: int) -> Tuple[int, ...]:
    """
    Binary expansion of index as a width-tuple, most significant bit first.

    Raises:
        PreconditionViolation: If index does not fit in width bits
    """
    if index < 0 or index >> width:
        raise PreconditionViolation(f"Index {index} does not fit in {width} bits")
    return tuple((index >> (width - 1 - j)) & 1 for j in range(width))


def from_bits(point: Sequence[int]) -> int:
    """Inverse of bits(): pack an MSB-first bit sequence into an integer."""
    index = 0
    for b in point:
        if b not in (0, 1):
            raise PreconditionViolation(f"Not a hypercube point: {tuple(point)}")
        index = (index << 1) | b
    return index


class Hypercube:
    """
    The finite, restartable sequence of all 2^k bit-vectors of length k.

    Iterating twice yields the same points in the same order. Slices of the
    enumeration (used to split work across threads) come from ``chunk``.

    Example:
        >>> cube = Hypercube(3)
        >>> len(cube)
        8
        >>> cube[5]
        (1, 0, 1)
    """

    def __init__(self, dimension: int):
        if dimension < 0:
            raise PreconditionViolation(f"Hypercube dimension must be non-negative, got {dimension}")
        self.dimension = dimension

    def __len__(self) -> int:
        return 1 << self.dimension

    def __iter__(self) -> Iterator[Tuple[int, ...]]:
        return self.points(0, len(self))

    def __getitem__(self, index: int) -> Tuple[int, ...]:
        if index < 0:
            index += len(self)
        return bits(index, self.dimension)

    def __repr__(self) -> str:
        return f"Hypercube({self.dimension})"

    def points(self, start: int, stop: int) -> Iterator[Tuple[int, ...]]:
        """Lazily yield the points with enumeration index in [start, stop)."""
        for index in range(start, min(stop, len(self))):
            yield bits(index, self.dimension)

    def chunk(self, num_chunks: int) -> Iterator[Tuple[int, int]]:
        """Split the index range into at most num_chunks contiguous (start, stop) ranges."""
        total = len(self)
        num_chunks = max(1, min(num_chunks, total))
        size, extra = divmod(total, num_chunks)
        start = 0
        for c in range(num_chunks):
            stop = start + size + (1 if c < extra else 0)
            yield start, stop
            start = stop
