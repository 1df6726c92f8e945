"""
Sum-Check Provers.

The prover convinces the verifier that

    C = Σ_{x ∈ {0,1}^v} g(x)

using v rounds. In round j (0-based) it has received challenges
r_1, ..., r_j and sends

    g_j(X) = Σ_{x_{j+1}, ..., x_{v-1} ∈ {0,1}} g(r_1, ..., r_j, X, x_{j+1}, ..., x_{v-1})

Two provers share that interface:

    - SumCheckProver: g is a single multilinear extension, so every round
      message is exactly one partial evaluation and has degree ≤ 1.
    - GKRSumCheckProver: one layer of a layered arithmetic circuit,

          g(a, b) = add(r, a, b)·(W(a) + W(b)) + mult(r, a, b)·(W(a)·W(b))

      where add/mult are the gate wiring predicates of the layer, W is the
      MLE of the next layer's values and r is the point the previous layer
      reduced to. Round messages have degree ≤ 2.

Interface used by the protocol drivers:
    num_rounds, max_degree, field,
    claimed_sum(), round_polynomial(challenges), final_evaluation(point)
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple, Union
import logging

from ..common.errors import PreconditionViolation
from ..common.field import FieldElement
from ..common.hypercube import Hypercube
from ..common.polynomial import Polynomial
from ..config import ProtocolConfig, create_default_config
from ..mle.multilinear import MultilinearExtension

logger = logging.getLogger(__name__)

Scalar = Union[FieldElement, int]


class SumCheckProver:
    """
    Honest prover for Σ f(x) over {0,1}^v, f multilinear.

    Example:
        >>> f = MultilinearExtension.lagrange(field, 3, table)
        >>> prover = SumCheckProver(f)
        >>> g_1 = prover.round_polynomial([])
        >>> g_2 = prover.round_polynomial([r_1])
    """

    max_degree = 1

    def __init__(self, mle: MultilinearExtension, config: Optional[ProtocolConfig] = None):
        self.mle = mle
        self.field = mle.field
        self.config = config if config is not None else create_default_config()

    @property
    def num_rounds(self) -> int:
        return self.mle.var_num

    def claimed_sum(self) -> FieldElement:
        return self.mle.sum_all_evals()

    def round_polynomial(self, challenges: Sequence[Scalar]) -> Polynomial:
        """g_j(X) for j = len(challenges); the MLE partially evaluated at the challenges."""
        return self.mle.partial_evaluate(
            challenges,
            max_workers=self.config.max_workers,
            parallel_threshold=self.config.parallel_threshold,
        )

    def final_evaluation(self, point: Sequence[Scalar]) -> FieldElement:
        return self.mle.evaluate(point)


class GKRSumCheckProver:
    """
    Prover for one GKR layer.

    Variables of the wiring predicates are ordered (z, a, b): the first
    v_l = k_i select the gate of the current layer (fixed to r), the next
    v_r = 2·k_{i+1} select its left and right inputs in the next layer.

    Attributes:
        v_l: Number of fixed variables (length of r)
        v_r: Number of sum-check variables (2 · next_layer.var_num)
        add_selector: add_i(z, a, b) MLE
        mult_selector: mult_i(z, a, b) MLE
        next_layer: W_{i+1} MLE
        bound_prefix: r, the point the previous layer reduced to
    """

    max_degree = 2

    def __init__(self, var_nums: Tuple[int, int],
                 polys: Tuple[MultilinearExtension, MultilinearExtension, MultilinearExtension],
                 bound_prefix: Sequence[Scalar],
                 config: Optional[ProtocolConfig] = None):
        v_l, v_r = var_nums
        add_selector, mult_selector, next_layer = polys

        if v_r != 2 * next_layer.var_num or v_r < 2:
            raise PreconditionViolation(
                f"v_r = {v_r} must be twice the next layer's var_num ({next_layer.var_num}) and at least 2"
            )
        for name, selector in (("add", add_selector), ("mult", mult_selector)):
            if selector.var_num != v_l + v_r:
                raise PreconditionViolation(
                    f"{name} selector has {selector.var_num} variables, expected v_l + v_r = {v_l + v_r}"
                )
        if len(bound_prefix) != v_l:
            raise PreconditionViolation(f"Bound prefix has {len(bound_prefix)} entries, expected v_l = {v_l}")

        self.v_l = v_l
        self.v_r = v_r
        self.add_selector = add_selector
        self.mult_selector = mult_selector
        self.next_layer = next_layer
        self.field = next_layer.field
        self.bound_prefix: List[FieldElement] = [self.field.element(x) for x in bound_prefix]
        self.config = config if config is not None else create_default_config()

        # W on the hypercube, used for every Boolean half of (a, b)
        self._next_values = next_layer.evaluations()

    @property
    def num_rounds(self) -> int:
        return self.v_r

    @property
    def k(self) -> int:
        """Variables per half: k_{i+1}."""
        return self.next_layer.var_num

    def claimed_sum(self) -> FieldElement:
        """
        Σ_{a,b ∈ {0,1}^k} add(r,a,b)·(W(a) + W(b)) + mult(r,a,b)·(W(a)·W(b)), brute force.
        """
        cube = Hypercube(self.k)
        points = list(cube)

        def rows(start: int, stop: int) -> FieldElement:
            total = self.field.zero()
            for ia in range(start, stop):
                a = points[ia]
                w_a = self._next_values[ia]
                for ib, b in enumerate(points):
                    w_b = self._next_values[ib]
                    domain = self.bound_prefix + list(a) + list(b)
                    add_v = self.add_selector.evaluate(domain)
                    mult_v = self.mult_selector.evaluate(domain)
                    total = total + add_v * (w_a + w_b) + mult_v * (w_a * w_b)
            return total

        return sum(self._fan_out(cube, rows), self.field.zero())

    def round_1(self) -> Polynomial:
        """g_1(X): no challenges yet, X is the first variable of a."""
        return self._round([])

    def recursive_round_j(self, challenges: Sequence[Scalar]) -> Polynomial:
        """g_j(X) for an intermediate round, 1 <= len(challenges) < v_r - 1."""
        if not 1 <= len(challenges) < self.v_r - 1:
            raise PreconditionViolation(
                f"Intermediate round needs 1..{self.v_r - 2} challenges, got {len(challenges)}"
            )
        return self._round(challenges)

    def round_v(self, challenges: Sequence[Scalar]) -> Polynomial:
        """g_v(X): the last round, every other variable already bound."""
        if len(challenges) != self.v_r - 1:
            raise PreconditionViolation(
                f"Last round needs v_r - 1 = {self.v_r - 1} challenges, got {len(challenges)}"
            )
        return self._round(challenges)

    def round_polynomial(self, challenges: Sequence[Scalar]) -> Polynomial:
        j = len(challenges)
        if j == 0:
            return self.round_1()
        if j == self.v_r - 1:
            return self.round_v(challenges)
        return self.recursive_round_j(challenges)

    def _round(self, challenges: Sequence[Scalar]) -> Polynomial:
        """
        Σ over completions s of the remaining variables of

            add_s(X)·W_a(X) + add_s(X)·W_b(X) + mult_s(X)·(W_a(X)·W_b(X))

        where add_s, mult_s, W_a and W_b are the restrictions to
        (r, challenges, X, s). The combination is formed per completion and
        only then summed: a sum of products is not the product of sums.
        """
        j = len(challenges)
        k = self.k
        challenges = [self.field.element(c) for c in challenges]
        prefix = self.bound_prefix + challenges
        cube = Hypercube(self.v_r - j - 1)

        # X lies in a when j < k, otherwise in b and a is fully bound.
        if j < k:
            a_bound = None
        else:
            a_bound = Polynomial.constant(self.field, self.next_layer.evaluate(challenges[:k]))

        def completions(start: int, stop: int) -> Polynomial:
            total = Polynomial.zero(self.field)
            for s in cube.points(start, stop):
                add_poly = self.add_selector.restrict(prefix, s)
                mult_poly = self.mult_selector.restrict(prefix, s)
                if add_poly.is_zero() and mult_poly.is_zero():
                    continue
                if a_bound is None:
                    split = k - j - 1
                    w_a = self.next_layer.restrict(challenges, s[:split])
                    w_b = Polynomial.constant(self.field, self._table_value(s[split:]))
                else:
                    w_a = a_bound
                    w_b = self.next_layer.restrict(challenges[k:], s)
                total = (total
                         + add_poly.mul(w_a)
                         + add_poly.mul(w_b)
                         + mult_poly.mul(w_a.mul(w_b)))
            return total

        poly = sum(self._fan_out(cube, completions), Polynomial.zero(self.field))
        logger.debug("GKR round %d/%d -> %r", j + 1, self.v_r, poly)
        return poly

    def final_evaluation(self, point: Sequence[Scalar]) -> FieldElement:
        """add(r,a*,b*)·(W(a*) + W(b*)) + mult(r,a*,b*)·W(a*)·W(b*) at the final point."""
        if len(point) != self.v_r:
            raise PreconditionViolation(f"Final point has {len(point)} coordinates, expected {self.v_r}")
        w_a, w_b = self.wire_claims(point)
        domain = self.bound_prefix + [self.field.element(x) for x in point]
        add_v = self.add_selector.evaluate(domain)
        mult_v = self.mult_selector.evaluate(domain)
        return add_v * (w_a + w_b) + mult_v * (w_a * w_b)

    def wire_claims(self, point: Sequence[Scalar]) -> Tuple[FieldElement, FieldElement]:
        """(W(a*), W(b*)) for the final point (a*, b*)."""
        k = self.k
        return self.next_layer.evaluate(point[:k]), self.next_layer.evaluate(point[k:])

    def _table_value(self, point: Sequence[int]) -> FieldElement:
        index = 0
        for b in point:
            index = (index << 1) | b
        return self._next_values[index]

    def _fan_out(self, cube: Hypercube, work: Callable[[int, int], object]) -> list:
        """Run work over contiguous slices of the cube, on threads when configured."""
        if self.config.max_workers > 1 and len(cube) >= self.config.parallel_threshold:
            ranges = list(cube.chunk(self.config.max_workers))
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                return list(executor.map(lambda r: work(*r), ranges))
        return [work(0, len(cube))]
