"""
GKR: sum-check delegated layer by layer through an arithmetic circuit.

Key Components:
    - LayeredCircuit: fan-in-2 ADD/MUL layers and their wiring predicates
    - GKRProver / GKRVerifier: one layer sum-check plus a line reduction
      per layer, ending in a direct check of the inputs
    - run_gkr: prove and verify in one call
"""

from .circuit import Gate, GateType, Layer, LayeredCircuit
from .protocol import (
    GKRLayerProof,
    GKRProof,
    GKRResult,
    GKRProver,
    GKRVerifier,
    line_point,
    run_gkr,
)

__all__ = [
    "Gate",
    "GateType",
    "Layer",
    "LayeredCircuit",
    "GKRLayerProof",
    "GKRProof",
    "GKRResult",
    "GKRProver",
    "GKRVerifier",
    "line_point",
    "run_gkr",
]
