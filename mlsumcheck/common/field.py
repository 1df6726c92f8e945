"""
Prime Field Arithmetic for the Sum-Check Engine.

Every value handled by the engine (MLE coefficients, round polynomials,
verifier challenges, claimed sums) lives in a prime field Z_p. There is no
floating point anywhere: a single rounding error would not crash, it would
silently produce an unsound proof.

Key Concepts:
    - All arithmetic is done modulo a prime p
    - Addition: (a + b) mod p
    - Multiplication: (a * b) mod p
    - Negation: (p - a) mod p
    - Division: a * b^(-1) mod p (multiply by modular inverse)

Example:
    >>> field = PrimeField(97)
    >>> a = field.element(45)
    >>> b = field.element(67)
    >>> a + b
    FieldElement(15, mod 97)
    >>> -field.one()
    FieldElement(96, mod 97)

Named primes:
    - BLS12_381_SCALAR_PRIME: the default, a 255-bit field, so the
      sum-check soundness error v/|F| is negligible
    - GOLDILOCKS_PRIME: 2^64 - 2^32 + 1, fast on 64-bit hardware
    - SMALL_TEST_PRIME: 97, for examples that are checked by hand
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union, List, Optional
import random


@dataclass(frozen=True)
class FieldElement:
    """
    An element of a prime field Z_p.

    Elements are immutable; every operation returns a new element. Plain
    ints are accepted as the other operand and reduced modulo p, so
    ``2 * x + 1`` works as expected. An element compares equal to an int
    only when the int is its canonical value in [0, p-1].

    Attributes:
        value: The integer value (always in range [0, p-1])
        field: Reference to the parent PrimeField
    """
    value: int
    field: 'PrimeField'

    def __post_init__(self):
        """Ensure value is reduced modulo p."""
        object.__setattr__(self, "value", self.value % self.field.prime)

    def __repr__(self) -> str:
        return f"FieldElement({self.value}, mod {self.field.prime})"

    def __str__(self) -> str:
        return str(self.value)

    def __int__(self) -> int:
        return self.value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FieldElement):
            return self.value == other.value and self.field.prime == other.field.prime
        if isinstance(other, int):
            return self.value == other
        return False

    def __hash__(self) -> int:
        # Equal to hash(value), so an element and its canonical int are
        # interchangeable as dict and set keys.
        return hash(self.value)

    # Arithmetic Operations

    def _coerce(self, other: Union[FieldElement, int]) -> int:
        if isinstance(other, FieldElement):
            if other.field.prime != self.field.prime:
                raise ValueError(
                    f"Cannot combine elements of Z_{self.field.prime} and Z_{other.field.prime}"
                )
            return other.value
        return other

    def __add__(self, other: Union[FieldElement, int]) -> FieldElement:
        """Addition in the field: (a + b) mod p"""
        return FieldElement(self.value + self._coerce(other), self.field)

    def __radd__(self, other: int) -> FieldElement:
        return self.__add__(other)

    def __sub__(self, other: Union[FieldElement, int]) -> FieldElement:
        """Subtraction in the field: (a - b) mod p"""
        return FieldElement(self.value - self._coerce(other), self.field)

    def __rsub__(self, other: int) -> FieldElement:
        return FieldElement(other - self.value, self.field)

    def __mul__(self, other: Union[FieldElement, int]) -> FieldElement:
        """Multiplication in the field: (a * b) mod p"""
        return FieldElement(self.value * self._coerce(other), self.field)

    def __rmul__(self, other: int) -> FieldElement:
        return self.__mul__(other)

    def __truediv__(self, other: Union[FieldElement, int]) -> FieldElement:
        """Division in the field: a * b^(-1) mod p"""
        if isinstance(other, FieldElement):
            return self * other.inverse()
        return self * self.field.element(other).inverse()

    def __neg__(self) -> FieldElement:
        """Negation: -a = p - a"""
        return FieldElement(-self.value, self.field)

    def __pow__(self, exp: int) -> FieldElement:
        """Exponentiation; negative exponents go through the inverse."""
        if exp < 0:
            return self.inverse() ** (-exp)
        return FieldElement(pow(self.value, exp, self.field.prime), self.field)

    def inverse(self) -> FieldElement:
        """
        Compute the modular inverse with the extended Euclidean algorithm.

        Raises:
            ValueError: If self.value is 0 (no inverse exists)
        """
        if self.value == 0:
            raise ValueError("Cannot invert zero")

        old_r, r = self.value, self.field.prime
        old_s, s = 1, 0

        while r != 0:
            quotient = old_r // r
            old_r, r = r, old_r - quotient * r
            old_s, s = s, old_s - quotient * s

        if old_r != 1:
            raise ValueError(f"No inverse exists (gcd = {old_r})")

        return FieldElement(old_s, self.field)

    def is_zero(self) -> bool:
        """Check if this element is zero."""
        return self.value == 0

    def is_one(self) -> bool:
        """Check if this element is one."""
        return self.value == 1

    def to_bytes(self) -> bytes:
        """Canonical big-endian encoding, fixed width for the field."""
        return self.value.to_bytes(self.field.byte_length, "big")


class PrimeField:
    """
    A prime field Z_p.

    Provides factory methods for elements. The MLE inner loops work on the
    reduced ints returned by raw(), since allocating a FieldElement per
    multiplication would dominate the running time.

    Attributes:
        prime: The prime modulus p

    Example:
        >>> field = PrimeField(PrimeField.GOLDILOCKS_PRIME)
        >>> x = field.random()
        >>> x * x.inverse() == field.one()
        True
    """

    SMALL_TEST_PRIME = 97
    GOLDILOCKS_PRIME = (1 << 64) - (1 << 32) + 1
    BLS12_381_SCALAR_PRIME = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001

    def __init__(self, prime: int):
        """
        Initialize a prime field.

        Args:
            prime: The prime modulus. Primality is not verified.
        """
        if prime < 2:
            raise ValueError("Prime must be at least 2")
        self.prime = prime
        self.byte_length = (prime.bit_length() + 7) // 8

    def __repr__(self) -> str:
        return f"PrimeField({self.prime})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PrimeField) and other.prime == self.prime

    def __hash__(self) -> int:
        return hash(self.prime)

    def element(self, value: Union[FieldElement, int]) -> FieldElement:
        """Create a field element from an integer (or re-home an element)."""
        if isinstance(value, FieldElement):
            if value.field.prime != self.prime:
                raise ValueError(f"{value!r} is not an element of {self!r}")
            return value
        return FieldElement(value, self)

    def contains(self, value: Union[FieldElement, int]) -> bool:
        """True for plain ints and for elements of this field."""
        return not isinstance(value, FieldElement) or value.field.prime == self.prime

    def zero(self) -> FieldElement:
        """Return the additive identity (0)."""
        return FieldElement(0, self)

    def one(self) -> FieldElement:
        """Return the multiplicative identity (1)."""
        return FieldElement(1, self)

    def random(self, exclude_zero: bool = False,
               rng: Optional[random.Random] = None) -> FieldElement:
        """
        Sample a uniformly random field element.

        Args:
            exclude_zero: If True, never returns zero
            rng: Random source (defaults to the module-level generator)
        """
        source = rng if rng is not None else random
        low = 1 if exclude_zero else 0
        return FieldElement(source.randint(low, self.prime - 1), self)

    def from_bytes(self, data: bytes) -> FieldElement:
        """Decode a big-endian integer and reduce it into the field."""
        return FieldElement(int.from_bytes(data, "big"), self)

    def raw(self, value: Union[FieldElement, int]) -> int:
        """Reduced integer representative of an int or element."""
        if isinstance(value, FieldElement):
            return self.element(value).value
        return value % self.prime


class BatchInverter:
    """
    Batch modular inversion using Montgomery's trick.

    n inverses cost one inversion plus 3(n-1) multiplications. Lagrange
    interpolation of round polynomials needs one inverse per denominator,
    so they are inverted together.

    Example:
        >>> field = PrimeField(97)
        >>> inverter = BatchInverter(field)
        >>> elements = [field.element(i) for i in range(1, 11)]
        >>> inverses = inverter.invert_batch(elements)
        >>> all((e * inv).is_one() for e, inv in zip(elements, inverses))
        True
    """

    def __init__(self, field: PrimeField):
        self.field = field

    def invert_batch(self, elements: List[FieldElement]) -> List[FieldElement]:
        """
        Compute inverses of all elements in a batch.

        Raises:
            ValueError: If any element is zero
        """
        if not elements:
            return []

        n = len(elements)

        for i, e in enumerate(elements):
            if e.is_zero():
                raise ValueError(f"Cannot invert zero (element {i})")

        # products[i] = elements[0] * ... * elements[i]
        products = [elements[0]]
        for i in range(1, n):
            products.append(products[i-1] * elements[i])

        inv = products[n-1].inverse()

        inverses = [self.field.zero()] * n
        for i in range(n-1, 0, -1):
            # inv = (a[0]*...*a[i])^(-1), so inv * products[i-1] = a[i]^(-1)
            inverses[i] = inv * products[i-1]
            inv = inv * elements[i]

        inverses[0] = inv
        return inverses
