"""
Error taxonomy for the sum-check engine.

Two kinds of failure exist and they must never be confused:

    - PreconditionViolation: the caller broke a contract (wrong table size,
      wrong number of challenges, a non-Boolean hypercube point, ...).
      These are bugs, raised immediately and never recovered from.
    - ProtocolRejection: a verifier check failed. A dishonest prover can
      trigger this on purpose, so it is the protocol's terminal "Reject"
      state rather than a bug.
"""

from __future__ import annotations
from typing import Optional


class MLSumcheckError(Exception):
    """Base class for all errors raised by mlsumcheck."""


class PreconditionViolation(MLSumcheckError, ValueError):
    """A caller supplied arguments outside an operation's domain."""


class ProtocolRejection(MLSumcheckError):
    """
    The verifier rejected the proof.

    Attributes:
        reason: Human-readable description of the failed check
        round_index: 0-based round in which the check failed, or None for
            the final oracle check
    """

    def __init__(self, reason: str, round_index: Optional[int] = None):
        self.reason = reason
        self.round_index = round_index
        if round_index is None:
            message = f"Reject (final check): {reason}"
        else:
            message = f"Reject (round {round_index + 1}): {reason}"
        super().__init__(message)
