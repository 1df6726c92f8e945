"""
Layered Arithmetic Circuits.

A layered circuit is a list of layers, listed from the outputs down to the
inputs. Every gate in layer i is a fan-in-2 ADD or MUL gate whose two
operands are values of layer i+1; the layer below the last one is the
input vector.

    layer 0 (outputs):   g0 = v[0] + v[1]     g1 = v[2] * v[3]
                           │                    │
    layer 1:             v = [ a*b,  c+d,  a+b,  c*d ]
                           │
    inputs:              [a, b, c, d]

Layer i with S_i = 2^{k_i} gates has a value function W_i: {0,1}^{k_i} → F
and two wiring predicates over k_i + 2·k_{i+1} variables (z, a, b):

    add_i(z, a, b)  = 1 iff gate z is ADD and reads gates a and b of layer i+1
    mult_i(z, a, b) = 1 iff gate z is MUL and reads gates a and b of layer i+1

so that for Boolean z

    W_i(z) = Σ_{a,b} add_i(z,a,b)·(W_{i+1}(a) + W_{i+1}(b))
           + mult_i(z,a,b)·W_{i+1}(a)·W_{i+1}(b)

which is exactly the sum the GKR layer sum-check proves.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence, Tuple, Union

from ..common.errors import PreconditionViolation
from ..common.field import FieldElement, PrimeField
from ..mle.multilinear import MultilinearExtension


class GateType(Enum):
    """Operation of a fan-in-2 gate."""
    ADD = "add"
    MUL = "mul"


@dataclass(frozen=True)
class Gate:
    """
    One gate: op(values[left], values[right]) over the layer below.

    Attributes:
        gate_type: ADD or MUL
        left: Index of the left operand in the next layer
        right: Index of the right operand in the next layer
    """
    gate_type: GateType
    left: int
    right: int

    def apply(self, a: FieldElement, b: FieldElement) -> FieldElement:
        if self.gate_type is GateType.ADD:
            return a + b
        return a * b


@dataclass
class Layer:
    """A row of gates, all reading from the layer below."""
    gates: List[Gate] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.gates)

    @property
    def var_num(self) -> int:
        return len(self.gates).bit_length() - 1


def _is_power_of_two(n: int) -> bool:
    return n >= 2 and n & (n - 1) == 0


class LayeredCircuit:
    """
    Fan-in-2 layered arithmetic circuit over a prime field.

    Attributes:
        field: Field of every wire value
        layers: Layers from outputs (index 0) to the layer just above the inputs
        num_inputs: Size of the input vector

    Example:
        >>> circuit = LayeredCircuit(field, [
        ...     Layer([Gate(GateType.ADD, 0, 1), Gate(GateType.MUL, 2, 3)]),
        ...     Layer([Gate(GateType.MUL, 0, 1), Gate(GateType.ADD, 2, 3),
        ...            Gate(GateType.ADD, 0, 1), Gate(GateType.MUL, 2, 3)]),
        ... ], num_inputs=4)
        >>> circuit.evaluate([1, 2, 3, 4])[0]
        [FieldElement(9, mod 97), FieldElement(36, mod 97)]
    """

    def __init__(self, field: PrimeField, layers: Sequence[Layer], num_inputs: int):
        if not layers:
            raise PreconditionViolation("A circuit needs at least one layer")
        if not _is_power_of_two(num_inputs):
            raise PreconditionViolation(f"Input count must be a power of two >= 2, got {num_inputs}")

        sizes = [len(layer) for layer in layers] + [num_inputs]
        for i, layer in enumerate(layers):
            if not _is_power_of_two(len(layer)):
                raise PreconditionViolation(
                    f"Layer {i} has {len(layer)} gates, expected a power of two >= 2"
                )
            below = sizes[i + 1]
            for j, gate in enumerate(layer.gates):
                if not (0 <= gate.left < below and 0 <= gate.right < below):
                    raise PreconditionViolation(
                        f"Gate {j} of layer {i} reads ({gate.left}, {gate.right}), "
                        f"but the layer below has {below} values"
                    )

        self.field = field
        self.layers = list(layers)
        self.num_inputs = num_inputs
        self._predicates: Dict[int, Tuple[MultilinearExtension, MultilinearExtension]] = {}

    @property
    def depth(self) -> int:
        return len(self.layers)

    def layer_var_num(self, i: int) -> int:
        """k_i; i == depth is the input layer."""
        if i == self.depth:
            return self.num_inputs.bit_length() - 1
        return self.layers[i].var_num

    def evaluate(self, inputs: Sequence[Union[FieldElement, int]]) -> List[List[FieldElement]]:
        """
        Values of every layer, outputs first and the inputs last.

        Raises:
            PreconditionViolation: If len(inputs) != num_inputs
        """
        if len(inputs) != self.num_inputs:
            raise PreconditionViolation(f"Expected {self.num_inputs} inputs, got {len(inputs)}")

        values = [self.field.element(x) for x in inputs]
        result = [values]
        for layer in reversed(self.layers):
            values = [g.apply(values[g.left], values[g.right]) for g in layer.gates]
            result.append(values)
        result.reverse()
        return result

    def layer_mle(self, values: Sequence[Union[FieldElement, int]]) -> MultilinearExtension:
        """W for a vector of layer values."""
        return MultilinearExtension.from_evaluations(self.field, values)

    def wiring_predicates(self, i: int) -> Tuple[MultilinearExtension, MultilinearExtension]:
        """
        (add_i, mult_i) as MLEs over k_i + 2·k_{i+1} variables.

        The hypercube index of (z, a, b) is (z << 2k') | (a << k') | b with
        k' = k_{i+1}, so z occupies the leading variables.
        """
        if not 0 <= i < self.depth:
            raise PreconditionViolation(f"Layer index {i} out of range [0, {self.depth})")
        if i in self._predicates:
            return self._predicates[i]

        k = self.layer_var_num(i)
        k_next = self.layer_var_num(i + 1)
        size = 1 << (k + 2 * k_next)
        add_table = [0] * size
        mult_table = [0] * size
        for z, gate in enumerate(self.layers[i].gates):
            index = (z << (2 * k_next)) | (gate.left << k_next) | gate.right
            if gate.gate_type is GateType.ADD:
                add_table[index] = 1
            else:
                mult_table[index] = 1

        var_num = k + 2 * k_next
        predicates = (
            MultilinearExtension.lagrange(self.field, var_num, add_table),
            MultilinearExtension.lagrange(self.field, var_num, mult_table),
        )
        self._predicates[i] = predicates
        return predicates

    def __repr__(self) -> str:
        shape = " → ".join(str(len(layer)) for layer in self.layers)
        return f"LayeredCircuit({shape} ← {self.num_inputs} inputs)"
