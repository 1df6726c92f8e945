"""
Fiat-Shamir Transcript.

The transcript replaces the verifier's coin tosses: every prover message is
absorbed into a running hash state, and each challenge is derived from the
state after everything sent so far. A challenge therefore binds all prior
messages, and reordering the absorb/challenge calls changes every later
challenge.

A transcript is a plain object owned by one proof session. Prover and
verifier each build their own from the same label and replay the same
sequence of calls; nothing is shared between sessions.
"""

from __future__ import annotations
from typing import Iterable, List, Union
import hashlib

from ..common.field import FieldElement, PrimeField
from ..common.polynomial import Polynomial

DIGEST_SIZE = 32


class Transcript:
    """
    SHA-256 based Fiat-Shamir transcript.

    Example:
        >>> field = PrimeField(97)
        >>> t = Transcript(b"example")
        >>> t.append(b"hello")
        >>> r = t.challenge_scalar(field)
    """

    def __init__(self, label: Union[bytes, str] = b"mlsumcheck"):
        if isinstance(label, str):
            label = label.encode()
        self.label = label
        self.state = hashlib.sha256(b"mlsumcheck-transcript:" + label).digest()
        self.challenge_count = 0

    def append(self, message: bytes) -> None:
        """Absorb a message (length-prefixed, so concatenations cannot collide)."""
        h = hashlib.sha256()
        h.update(self.state)
        h.update(len(message).to_bytes(8, "big"))
        h.update(message)
        self.state = h.digest()

    def append_field_elements(self, elements: Iterable[FieldElement]) -> None:
        self.append(b"".join(e.to_bytes() for e in elements))

    def append_polynomial(self, poly: Polynomial) -> None:
        """Absorb a round message: degree followed by its coefficients."""
        self.append(len(poly.coeffs).to_bytes(4, "big"))
        self.append_field_elements(poly.coeffs)

    def challenge(self) -> bytes:
        """
        Derive 32 pseudorandom bytes and fold them back into the state.
        """
        h = hashlib.sha256()
        h.update(self.state)
        h.update(b"challenge")
        h.update(self.challenge_count.to_bytes(8, "big"))
        out = h.digest()
        self.challenge_count += 1
        self.state = hashlib.sha256(self.state + out).digest()
        return out

    def challenge_scalar(self, field: PrimeField) -> FieldElement:
        """
        Derive a uniformly distributed field element.

        Candidates are 256-bit values; one is accepted only below the largest
        multiple of p that fits, and reduced mod p.
        """
        bound = 1 << (8 * DIGEST_SIZE)
        if field.prime > bound:
            raise ValueError(f"Transcript cannot sample a {field.prime.bit_length()}-bit field")
        limit = bound - bound % field.prime
        while True:
            candidate = int.from_bytes(self.challenge(), "big")
            if candidate < limit:
                return FieldElement(candidate, field)

    def challenge_scalars(self, field: PrimeField, count: int) -> List[FieldElement]:
        return [self.challenge_scalar(field) for _ in range(count)]

    def __repr__(self) -> str:
        return f"Transcript(label={self.label!r}, challenges={self.challenge_count})"
