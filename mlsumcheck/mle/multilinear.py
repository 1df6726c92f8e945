"""
Multilinear Extension (MLE) in Coefficient Form.

A function f: {0,1}^v → F has exactly one multilinear extension: the
polynomial of degree at most 1 in each variable that agrees with f on the
hypercube. Since every exponent is 0 or 1, a monomial is fully described
by the set of variables it contains, i.e. by a v-bit mask. The extension
is therefore stored densely:

    coeffs[i] = coefficient of the monomial whose exponent vector is bits(i, v)

The expansion is read most-significant-bit first: x_0 is the high bit of
the index and x_{v-1} the low bit. For v = 3:

    index 0 = 0b000 → 1
    index 1 = 0b001 → x3
    index 2 = 0b010 → x2
    index 7 = 0b111 → x1·x2·x3

so coeffs [5, 2, 3, 0, 0, 0, 0, 1] is f = 5 + 2·x3 + 3·x2 + x1·x2·x3.

Key Operations:
    - lagrange: interpolate the evaluation table on {0,1}^v
    - basis: coefficient table of one Lagrange basis indicator X_w
    - evaluate: f at an arbitrary point of F^v
    - partial_evaluate: fix a prefix of variables, keep the next one
      symbolic and sum the rest over the hypercube (one sum-check round)
    - sum_all_evals: Σ f over the whole hypercube (the claimed sum)
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging
import random

from ..common.errors import PreconditionViolation
from ..common.field import FieldElement, PrimeField
from ..common.hypercube import Hypercube
from ..common.polynomial import Polynomial

logger = logging.getLogger(__name__)

Scalar = Union[FieldElement, int]

# Below this many hypercube points, a thread pool costs more than it saves.
DEFAULT_PARALLEL_THRESHOLD = 64


class MultilinearExtension:
    """
    A multilinear polynomial over v variables, stored by coefficient.

    Instances are immutable: partial evaluation returns a new univariate
    Polynomial and never touches the coefficient table.

    Attributes:
        field: The prime field of the coefficients
        var_num: Number of variables v
        coeffs: Tuple of 2^v coefficients, indexed by exponent bitmask

    Example:
        >>> field = PrimeField(97)
        >>> f = MultilinearExtension(field, 3, [5, 2, 3, 0, 0, 0, 0, 1])
        >>> f.evaluate((0, 1, 1))
        FieldElement(10, mod 97)
        >>> f.partial_evaluate([10])
        Polynomial([12, 16], mod 97)
    """

    def __init__(self, field: PrimeField, var_num: int, coeffs: Sequence[Scalar]):
        if var_num < 0:
            raise PreconditionViolation(f"var_num must be non-negative, got {var_num}")
        if len(coeffs) != 1 << var_num:
            raise PreconditionViolation(
                f"Coefficient table has {len(coeffs)} entries, expected 2^{var_num} = {1 << var_num}"
            )
        self.field = field
        self.var_num = var_num
        self.coeffs: Tuple[FieldElement, ...] = tuple(field.element(c) for c in coeffs)
        self._raw: Tuple[int, ...] = tuple(c.value for c in self.coeffs)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def lagrange(cls, field: PrimeField, var_num: int,
                 evals: Sequence[Scalar]) -> MultilinearExtension:
        """
        Interpolate the evaluation table of a function on {0,1}^v.

            F(x) = Σ_w f(w) · X_w(x),   X_w(x) = Π (x_i·w_i + (1 - x_i)(1 - w_i))

        Expanding that sum basis by basis costs O(4^v). Because the
        coefficient index and the hypercube index use the same bitmask, the
        same result is the Möbius transform of the table over subsets,
        computed here in O(v · 2^v):

            coeffs[S] = Σ_{T ⊆ S} (-1)^{|S| - |T|} f(T)

        Raises:
            PreconditionViolation: If len(evals) != 2^var_num
        """
        n = 1 << var_num
        if len(evals) != n:
            raise PreconditionViolation(
                f"Evaluation table has {len(evals)} entries, expected 2^{var_num} = {n}"
            )
        p = field.prime
        table = [field.raw(e) for e in evals]
        step = 1
        while step < n:
            for i in range(n):
                if i & step:
                    table[i] = (table[i] - table[i ^ step]) % p
            step <<= 1
        return cls(field, var_num, table)

    @staticmethod
    def basis(field: PrimeField, var_num: int, w: Sequence[int]) -> List[FieldElement]:
        """
        Coefficient table of the Lagrange basis indicator X_w.

        X_w is the product of one 2-term factor per variable:

            w_i = 0  →  (1 - x_i): +1 at position 0, -1 at the x_i position
            w_i = 1  →  x_i:       +1 at the x_i position

        The factors are multiplied into a running product one at a time.
        Each factor only touches a bit no earlier factor used, so a product
        term at position p times a factor term at position q lands at p | q.

        Example: v = 4, w = (0, 0, 1, 1)
            X_w = (1 - x1)(1 - x2)·x3·x4
                = x3x4 - x2x3x4 - x1x3x4 + x1x2x3x4
            → +1 at 3 and 15, -1 at 7 and 11

        Raises:
            PreconditionViolation: If len(w) != var_num or some w_i ∉ {0, 1}
        """
        if len(w) != var_num:
            raise PreconditionViolation(f"Point {tuple(w)} has {len(w)} coordinates, expected {var_num}")

        p = field.prime
        product: Dict[int, int] = {0: 1}
        for i, w_i in enumerate(w):
            position = 1 << (var_num - 1 - i)
            if w_i == 1:
                factor = {position: 1}
            elif w_i == 0:
                factor = {0: 1, position: p - 1}
            else:
                raise PreconditionViolation(
                    f"Basis point must lie in {{0,1}}^{var_num}, got w_{i} = {w_i}"
                )
            product = _expand(product, factor, p)

        table = [0] * (1 << var_num)
        for position, coeff in product.items():
            table[position] = coeff
        return [FieldElement(c, field) for c in table]

    @classmethod
    def from_evaluations(cls, field: PrimeField, evals: Sequence[Scalar]) -> MultilinearExtension:
        """Interpolate a table whose length is a power of two."""
        n = len(evals)
        if n == 0 or n & (n - 1):
            raise PreconditionViolation(f"Table size must be a power of 2, got {n}")
        return cls.lagrange(field, n.bit_length() - 1, evals)

    @classmethod
    def from_function(cls, field: PrimeField, var_num: int,
                      func: Callable[[Tuple[int, ...]], Scalar]) -> MultilinearExtension:
        """
        Tabulate a function of the hypercube point and interpolate it.

        Example:
            >>> and_gate = MultilinearExtension.from_function(field, 2, lambda b: b[0] & b[1])
        """
        return cls.lagrange(field, var_num, [func(point) for point in Hypercube(var_num)])

    @classmethod
    def random(cls, field: PrimeField, var_num: int,
               rng: Optional[random.Random] = None) -> MultilinearExtension:
        """MLE of a uniformly random evaluation table."""
        return cls.lagrange(field, var_num, [field.random(rng=rng) for _ in range(1 << var_num)])

    @classmethod
    def zero(cls, field: PrimeField, var_num: int) -> MultilinearExtension:
        return cls(field, var_num, [0] * (1 << var_num))

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluations(self) -> List[FieldElement]:
        """The table f(bits(i)) for every hypercube point (inverse of lagrange)."""
        n = 1 << self.var_num
        p = self.field.prime
        table = list(self._raw)
        step = 1
        while step < n:
            for i in range(n):
                if i & step:
                    table[i] = (table[i] + table[i ^ step]) % p
            step <<= 1
        return [FieldElement(v, self.field) for v in table]

    def evaluate(self, domain: Sequence[Scalar]) -> FieldElement:
        """
        Evaluate at a point of F^v (Boolean points may be given as plain ints).

            f(x) = Σ_i coeffs[i] · Π_j x_j^{bit_j(i)}

        Monomials whose product hits a zero coordinate are skipped.

        Raises:
            PreconditionViolation: If len(domain) != var_num
        """
        if len(domain) != self.var_num:
            raise PreconditionViolation(
                f"Domain has {len(domain)} coordinates, expected var_num = {self.var_num}"
            )
        p = self.field.prime
        point = [self.field.raw(x) for x in domain]
        masks = self._variable_masks()

        total = 0
        for index, coeff in enumerate(self._raw):
            if coeff == 0:
                continue
            term = coeff
            for j, mask in enumerate(masks):
                if index & mask:
                    x = point[j]
                    if x == 0:
                        term = 0
                        break
                    term = term * x % p
            total += term
        return FieldElement(total, self.field)

    def __call__(self, domain: Sequence[Scalar]) -> FieldElement:
        return self.evaluate(domain)

    def sum_all_evals(self) -> FieldElement:
        """
        Σ f(x) over x ∈ {0,1}^v.

        A monomial over a set S of variables is 1 on exactly 2^{v-|S|} points
        of the hypercube and 0 elsewhere.
        """
        p = self.field.prime
        total = 0
        for index, coeff in enumerate(self._raw):
            if coeff:
                total += coeff * pow(2, self.var_num - bin(index).count("1"), p)
        return FieldElement(total, self.field)

    # =========================================================================
    # Partial evaluation
    # =========================================================================

    def restrict(self, fixed_prefix: Sequence[Scalar],
                 suffix: Sequence[int]) -> Polynomial:
        """
        f(fixed_prefix, X, suffix) as a polynomial in X (degree ≤ 1).

        This is one summand of partial_evaluate: the trailing variables are
        pinned to a single hypercube point instead of being summed.

        Raises:
            PreconditionViolation: If the prefix leaves no free variable, the
                suffix has the wrong length, or a suffix entry is not a bit
        """
        j = self._check_prefix(fixed_prefix)
        expected = self.var_num - j - 1
        if len(suffix) != expected:
            raise PreconditionViolation(
                f"Suffix has {len(suffix)} coordinates, expected {expected}"
            )
        if any(b not in (0, 1) for b in suffix):
            raise PreconditionViolation(f"Suffix must be a hypercube point, got {tuple(suffix)}")

        prefix = [self.field.raw(r) for r in fixed_prefix]
        accumulator: Dict[int, int] = {}
        self._accumulate(prefix, [tuple(suffix)], accumulator)
        return self._densify(accumulator)

    def partial_evaluate(self, fixed_prefix: Sequence[Scalar],
                         max_workers: int = 1,
                         parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD) -> Polynomial:
        """
        Fix the first j variables, keep x_j symbolic and sum out the rest:

            g(X) = Σ_{x_{j+1},...,x_{v-1} ∈ {0,1}} f(fixed_prefix, X, x_{j+1}, ..., x_{v-1})

        For every hypercube completion and every nonzero coefficient, the
        contribution of all variables except X is accumulated under the
        exponent X carries in that monomial (0 or 1). The sparse
        exponent → value map is then densified into a Polynomial.

        With max_workers > 1 and at least parallel_threshold completions,
        the completions are split into chunks summed on a thread pool and
        the partial maps are merged with field addition.

        Example:
            f = 5 + 2·x3 + 3·x2 + x1·x2·x3, prefix [10]
            x3 = 0: 5 + 3X
            x3 = 1: 7 + 13X
            g(X) = 12 + 16X

        Raises:
            PreconditionViolation: If not 0 <= len(fixed_prefix) < var_num
        """
        j = self._check_prefix(fixed_prefix)
        prefix = [self.field.raw(r) for r in fixed_prefix]
        cube = Hypercube(self.var_num - j - 1)

        accumulator: Dict[int, int] = {}
        if max_workers > 1 and len(cube) >= parallel_threshold:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = [
                    executor.submit(self._accumulate_range, prefix, cube, start, stop)
                    for start, stop in cube.chunk(max_workers)
                ]
                for future in futures:
                    for key, value in future.result().items():
                        accumulator[key] = (accumulator.get(key, 0) + value) % self.field.prime
        else:
            self._accumulate(prefix, cube, accumulator)

        poly = self._densify(accumulator)
        logger.debug("partial_evaluate(j=%d, completions=%d) -> %r", j, len(cube), poly)
        return poly

    def _accumulate_range(self, prefix: List[int], cube: Hypercube,
                          start: int, stop: int) -> Dict[int, int]:
        accumulator: Dict[int, int] = {}
        self._accumulate(prefix, cube.points(start, stop), accumulator)
        return accumulator

    def _accumulate(self, prefix: List[int], suffixes: Iterable[Tuple[int, ...]],
                    accumulator: Dict[int, int]) -> None:
        """Add Σ over suffixes of f(prefix, X, suffix) into accumulator[exp of X]."""
        p = self.field.prime
        j = len(prefix)
        masks = self._variable_masks()
        x_mask = masks[j]
        prefix_masks = masks[:j]
        suffix_masks = masks[j + 1:]
        nonzero = [(index, coeff) for index, coeff in enumerate(self._raw) if coeff]

        for suffix in suffixes:
            # Monomials containing a suffix variable pinned to 0 vanish.
            zero_mask = 0
            for mask, b in zip(suffix_masks, suffix):
                if not b:
                    zero_mask |= mask
            for index, coeff in nonzero:
                if index & zero_mask:
                    continue
                term = coeff
                for mask, r in zip(prefix_masks, prefix):
                    if index & mask:
                        if r == 0:
                            term = 0
                            break
                        term = term * r % p
                if term == 0:
                    continue
                key = 1 if index & x_mask else 0
                accumulator[key] = (accumulator.get(key, 0) + term) % p

    def _densify(self, accumulator: Dict[int, int]) -> Polynomial:
        if not accumulator:
            return Polynomial.zero(self.field)
        top = max(accumulator)
        return Polynomial(self.field, [accumulator.get(k, 0) for k in range(top + 1)])

    def _check_prefix(self, fixed_prefix: Sequence[Scalar]) -> int:
        j = len(fixed_prefix)
        if not 0 <= j < self.var_num:
            raise PreconditionViolation(
                f"Cannot fix {j} of {self.var_num} variables and keep one free"
            )
        return j

    def _variable_masks(self) -> List[int]:
        """masks[j] is the index bit that carries the exponent of x_j."""
        return [1 << (self.var_num - 1 - j) for j in range(self.var_num)]

    # =========================================================================
    # Misc
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultilinearExtension):
            return NotImplemented
        return (self.field == other.field and self.var_num == other.var_num
                and self.coeffs == other.coeffs)

    def __hash__(self) -> int:
        return hash((self.field.prime, self.var_num, self._raw))

    def __repr__(self) -> str:
        if self.var_num <= 3:
            return f"MultilinearExtension(var_num={self.var_num}, coeffs={list(self._raw)})"
        return (f"MultilinearExtension(var_num={self.var_num}, "
                f"first_few={list(self._raw[:4])}...)")


def _expand(product: Dict[int, int], factor: Dict[int, int], p: int) -> Dict[int, int]:
    """Multiply two sparse coefficient tables whose supports use disjoint bits."""
    out: Dict[int, int] = {}
    for pos_a, a in product.items():
        for pos_b, b in factor.items():
            pos = pos_a | pos_b
            out[pos] = (out.get(pos, 0) + a * b) % p
    return {pos: c for pos, c in out.items() if c}

