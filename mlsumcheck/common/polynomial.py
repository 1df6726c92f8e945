"""
Univariate Polynomials over a Prime Field.

Each sum-check round, the prover sends the verifier one univariate
polynomial g_i(X): the sum of the multilinear polynomial over the
remaining hypercube variables with X_i left free. This module is the
representation of that message.

Representation:
    Dense coefficient list, low-to-high: coeffs[k] is the coefficient of X^k.

    g(X) = 12 + 16X   →   Polynomial(field, [12, 16])

Conventions:
    - Trailing zero coefficients are trimmed on construction, so two
      polynomials are equal exactly when their coefficient tuples are.
    - The zero polynomial has no coefficients; its degree() is 0.
    - A scalar operand of add/mul is a degree-0 polynomial.
"""

from __future__ import annotations
from typing import List, Sequence, Tuple, Union

from .field import BatchInverter, FieldElement, PrimeField

Scalar = Union[FieldElement, int]


class Polynomial:
    """
    A univariate polynomial with coefficients in a prime field.

    Example:
        >>> field = PrimeField(97)
        >>> g = Polynomial(field, [12, 16])
        >>> g.evaluate(10)
        FieldElement(75, mod 97)
        >>> (g * g).degree()
        2
    """

    __slots__ = ("field", "coeffs")

    def __init__(self, field: PrimeField, coeffs: Sequence[Scalar] = ()):
        values = [field.element(c) for c in coeffs]
        while values and values[-1].is_zero():
            values.pop()
        self.field = field
        self.coeffs: Tuple[FieldElement, ...] = tuple(values)

    @classmethod
    def zero(cls, field: PrimeField) -> Polynomial:
        return cls(field, ())

    @classmethod
    def constant(cls, field: PrimeField, value: Scalar) -> Polynomial:
        return cls(field, (value,))

    @classmethod
    def interpolate(cls, field: PrimeField, xs: Sequence[Scalar],
                    ys: Sequence[Scalar]) -> Polynomial:
        """
        Lagrange interpolation: the unique polynomial of degree < len(xs)
        through the points (xs[i], ys[i]).

        All denominators are inverted in one batch.

        Raises:
            ValueError: If the lengths differ or the xs are not distinct
        """
        if len(xs) != len(ys):
            raise ValueError(f"Got {len(xs)} x-coordinates but {len(ys)} values")
        points = [field.element(x) for x in xs]
        if len(set(points)) != len(points):
            raise ValueError("Interpolation points must be distinct")

        denominators = []
        for i, xi in enumerate(points):
            d = field.one()
            for j, xj in enumerate(points):
                if i != j:
                    d = d * (xi - xj)
            denominators.append(d)
        inverses = BatchInverter(field).invert_batch(denominators)

        result = cls.zero(field)
        for i, (xi, yi) in enumerate(zip(points, ys)):
            # L_i(X) = Π_{j != i} (X - x_j) / (x_i - x_j)
            basis = cls.constant(field, inverses[i] * yi)
            for j, xj in enumerate(points):
                if i != j:
                    basis = basis.mul(cls(field, (-xj, 1)))
            result = result.add(basis)
        return result

    @classmethod
    def from_evaluations(cls, field: PrimeField, evals: Sequence[Scalar]) -> Polynomial:
        """Interpolate through (0, evals[0]), (1, evals[1]), ..., (d, evals[d])."""
        return cls.interpolate(field, list(range(len(evals))), evals)

    # Basic properties

    def degree(self) -> int:
        """Degree; the zero polynomial is reported as degree 0."""
        return max(len(self.coeffs) - 1, 0)

    def is_zero(self) -> bool:
        return not self.coeffs

    def coefficient(self, power: int) -> FieldElement:
        """Coefficient of X^power (zero beyond the stored length)."""
        if power < len(self.coeffs):
            return self.coeffs[power]
        return self.field.zero()

    # Arithmetic

    def evaluate(self, x: Scalar) -> FieldElement:
        """Horner's method: O(degree) multiplications."""
        p = self.field.prime
        xv = self.field.raw(x)
        acc = 0
        for c in reversed(self.coeffs):
            acc = (acc * xv + c.value) % p
        return FieldElement(acc, self.field)

    def add(self, other: Union[Polynomial, Scalar]) -> Polynomial:
        """Index-wise sum; the result has max(len(self), len(other)) slots."""
        other = self._lift(other)
        n = max(len(self.coeffs), len(other.coeffs))
        return Polynomial(self.field, [self.coefficient(k) + other.coefficient(k) for k in range(n)])

    def sub(self, other: Union[Polynomial, Scalar]) -> Polynomial:
        return self.add(self._lift(other).neg())

    def neg(self) -> Polynomial:
        return Polynomial(self.field, [-c for c in self.coeffs])

    def mul(self, other: Union[Polynomial, Scalar]) -> Polynomial:
        """Full convolution; len(result) = len(self) + len(other) - 1."""
        other = self._lift(other)
        if self.is_zero() or other.is_zero():
            return Polynomial.zero(self.field)
        p = self.field.prime
        out = [0] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            if a.is_zero():
                continue
            for j, b in enumerate(other.coeffs):
                out[i + j] = (out[i + j] + a.value * b.value) % p
        return Polynomial(self.field, out)

    def _lift(self, other: Union[Polynomial, Scalar]) -> Polynomial:
        if isinstance(other, Polynomial):
            if other.field != self.field:
                raise ValueError(f"Cannot combine polynomials over {self.field!r} and {other.field!r}")
            return other
        return Polynomial.constant(self.field, other)

    # Operators

    def __call__(self, x: Scalar) -> FieldElement:
        return self.evaluate(x)

    def __add__(self, other: Union[Polynomial, Scalar]) -> Polynomial:
        return self.add(other)

    def __radd__(self, other: Scalar) -> Polynomial:
        return self.add(other)

    def __sub__(self, other: Union[Polynomial, Scalar]) -> Polynomial:
        return self.sub(other)

    def __rsub__(self, other: Scalar) -> Polynomial:
        return self.neg().add(other)

    def __neg__(self) -> Polynomial:
        return self.neg()

    def __mul__(self, other: Union[Polynomial, Scalar]) -> Polynomial:
        return self.mul(other)

    def __rmul__(self, other: Scalar) -> Polynomial:
        return self.mul(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self.field == other.field and self.coeffs == other.coeffs

    def __hash__(self) -> int:
        return hash((self.field.prime, self.coeffs))

    def __repr__(self) -> str:
        return f"Polynomial({[c.value for c in self.coeffs]}, mod {self.field.prime})"

    def __str__(self) -> str:
        if self.is_zero():
            return "0"
        terms: List[str] = []
        for k, c in enumerate(self.coeffs):
            if c.is_zero():
                continue
            if k == 0:
                terms.append(str(c))
            else:
                coeff = "" if c.is_one() else str(c)
                power = "X" if k == 1 else f"X^{k}"
                terms.append(coeff + power)
        return " + ".join(terms)
