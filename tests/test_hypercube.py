"""
Tests for Boolean hypercube enumeration and bit conversion.
"""

import pytest

from mlsumcheck.common import Hypercube, PreconditionViolation, bits, from_bits


class TestHypercube:

    def test_enumeration_order(self):
        assert list(Hypercube(2)) == [(0, 0), (0, 1), (1, 0), (1, 1)]

    def test_restartable(self):
        cube = Hypercube(3)
        assert list(cube) == list(cube)
        assert len(cube) == 8

    def test_zero_dimensional(self):
        assert list(Hypercube(0)) == [()]

    def test_getitem(self):
        cube = Hypercube(3)
        assert cube[5] == (1, 0, 1)
        assert cube[-1] == (1, 1, 1)

    def test_negative_dimension(self):
        with pytest.raises(PreconditionViolation):
            Hypercube(-1)

    def test_bits_and_from_bits(self):
        assert bits(6, 4) == (0, 1, 1, 0)
        assert from_bits((0, 1, 1, 0)) == 6
        for i in range(16):
            assert from_bits(bits(i, 4)) == i

    def test_bits_out_of_range(self):
        with pytest.raises(PreconditionViolation):
            bits(8, 3)
        with pytest.raises(PreconditionViolation):
            bits(-1, 3)

    def test_from_bits_rejects_non_boolean(self):
        with pytest.raises(PreconditionViolation):
            from_bits((0, 2))

    @pytest.mark.parametrize("dimension,chunks", [(0, 4), (3, 1), (3, 3), (4, 4), (2, 16)])
    def test_chunks_cover_range(self, dimension, chunks):
        cube = Hypercube(dimension)
        ranges = list(cube.chunk(chunks))
        assert ranges[0][0] == 0
        assert ranges[-1][1] == len(cube)
        for (_, stop), (start, _) in zip(ranges, ranges[1:]):
            assert stop == start
        joined = [p for start, stop in ranges for p in cube.points(start, stop)]
        assert joined == list(cube)
