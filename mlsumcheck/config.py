"""
Protocol Configuration.

Everything that varies between runs of the engine but not within one:
the field, how much of the hypercube summation is fanned out to threads,
and the domain-separation label of the Fiat-Shamir transcript.

Presets:
    - create_default_config(): BLS12-381 scalar field, single-threaded
    - create_goldilocks_config(): 64-bit Goldilocks field
    - create_toy_config(): Z_97, for walkthroughs checked by hand
      (soundness error v/97 is far from negligible, never use it for
      anything but illustration)
    - create_parallel_config(n): default field, n worker threads
"""

from __future__ import annotations
from dataclasses import dataclass

from .common.field import PrimeField
from .mle.multilinear import DEFAULT_PARALLEL_THRESHOLD


@dataclass
class ProtocolConfig:
    """
    Configuration of a sum-check / GKR session.

    Attributes:
        name: Configuration name for identification
        prime: Field modulus
        max_workers: Threads used for the hypercube summation inside a
            round (1 = sequential)
        parallel_threshold: Minimum number of hypercube points before the
            summation is fanned out
        transcript_label: Domain separator absorbed first by the transcript
        verbose: Print a walkthrough of every round

    Example:
        >>> config = ProtocolConfig(name="wide", max_workers=8)
        >>> config.field
        PrimeField(52435875175126190479447740508185965837690552500527637822603658699938581184513)
    """

    name: str = "default"
    prime: int = PrimeField.BLS12_381_SCALAR_PRIME
    max_workers: int = 1
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD
    transcript_label: bytes = b"mlsumcheck"
    verbose: bool = False

    def __post_init__(self):
        """Validate configuration."""
        if self.prime < 2:
            raise ValueError("prime must be at least 2")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.parallel_threshold < 1:
            raise ValueError("parallel_threshold must be at least 1")
        if isinstance(self.transcript_label, str):
            self.transcript_label = self.transcript_label.encode()
        self._field = PrimeField(self.prime)

    @property
    def field(self) -> PrimeField:
        return self._field

    @property
    def is_parallel(self) -> bool:
        return self.max_workers > 1

    def summary(self) -> str:
        """Return configuration summary string."""
        return (
            f"ProtocolConfig '{self.name}':\n"
            f"  Field: {self.prime.bit_length()}-bit prime\n"
            f"  Workers: {self.max_workers} (fan out from {self.parallel_threshold} points)\n"
            f"  Transcript label: {self.transcript_label!r}"
        )


def create_default_config() -> ProtocolConfig:
    return ProtocolConfig(name="bls12-381")


def create_goldilocks_config() -> ProtocolConfig:
    return ProtocolConfig(name="goldilocks", prime=PrimeField.GOLDILOCKS_PRIME)


def create_toy_config(verbose: bool = True) -> ProtocolConfig:
    return ProtocolConfig(name="toy", prime=PrimeField.SMALL_TEST_PRIME, verbose=verbose)


def create_parallel_config(max_workers: int = 4) -> ProtocolConfig:
    return ProtocolConfig(name=f"bls12-381-x{max_workers}", max_workers=max_workers)
