"""Active-set solver for separation constraints.

Minimises sum(w_i * (x_i - d_i)^2) subject to

    scale_r * x_r - scale_l * x_l >= gap    (or == gap)

by alternating two moves until the cost settles:

- satisfy: merge blocks across the most violated inactive constraint
- split: break a block where a negative Lagrangian multiplier says an
  active constraint is holding the cost up

Infeasible constraint sets do not raise. A constraint that would close a
cycle of active constraints is flagged unsatisfiable and ignored from then on.
"""

import logging
import math
from typing import List, Optional, Sequence

from vpsc.config.settings import get_setting
from vpsc.core.blocks import Blocks
from vpsc.core.variable import Constraint, Variable

logger = logging.getLogger(__name__)


class Solver:
    """Solve for variable positions under separation constraints.

    Example:
        a, b = Variable(0.0), Variable(5.0)
        solver = Solver([a, b], [Constraint(a, b, 10.0)])
        solver.solve()
        a.position(), b.position()  # (-2.5, 7.5)
    """

    LAGRANGIAN_TOLERANCE = get_setting('lagrangian_tolerance')
    ZERO_UPPERBOUND = get_setting('zero_upperbound')
    COST_CONVERGENCE = get_setting('cost_convergence')

    def __init__(self, vs: List[Variable], cs: List[Constraint]):
        self.vs = vs
        for v in vs:
            v.c_in = []
            v.c_out = []
        self.cs = cs
        for c in cs:
            c.left.c_out.append(c)
            c.right.c_in.append(c)
        self.inactive = self._deactivate_all()
        self.bs: Optional[Blocks] = None

    def _deactivate_all(self) -> List[Constraint]:
        for c in self.cs:
            c.active = False
        return list(self.cs)

    def _ensure_blocks(self) -> Blocks:
        if self.bs is None:
            self.bs = Blocks(self.vs)
        return self.bs

    def cost(self) -> float:
        return self._ensure_blocks().cost()

    def set_starting_positions(self, ps: Sequence[float]) -> None:
        """Place each variable at a starting position, keeping desired positions.

        Any previous block structure is thrown away.

        Raises:
            ValueError: If the number of positions does not match the variables
        """
        self._check_length(ps, "starting")
        self.inactive = self._deactivate_all()
        self.bs = Blocks(self.vs)
        for b, p in zip(self.bs, ps):
            b.posn = p

    def set_desired_positions(self, ps: Sequence[float]) -> None:
        """Overwrite the desired position of every variable.

        Raises:
            ValueError: If the number of positions does not match the variables
        """
        self._check_length(ps, "desired")
        for v, p in zip(self.vs, ps):
            v.desired_position = p

    def _check_length(self, ps: Sequence[float], kind: str) -> None:
        if len(ps) != len(self.vs):
            raise ValueError(
                f"Expected {len(self.vs)} {kind} positions, got {len(ps)}"
            )

    def _most_violated(self) -> Optional[Constraint]:
        """Pick the inactive constraint to work on next.

        Equality constraints win outright; otherwise the one with the least
        slack. The pick is removed from the inactive list when it will be
        processed.
        """
        min_slack = math.inf
        v = None
        inactive = self.inactive
        n = len(inactive)
        delete_point = n
        for i, c in enumerate(inactive):
            if c.unsatisfiable:
                continue
            slack = c.slack()
            if c.equality or slack < min_slack:
                min_slack = slack
                v = c
                delete_point = i
                if c.equality:
                    break
        if delete_point != n and (
            (min_slack < self.ZERO_UPPERBOUND and not v.active) or v.equality
        ):
            inactive[delete_point] = inactive[-1]
            inactive.pop()
        return v

    def _mark_unsatisfiable(self, c: Constraint, reason: str) -> None:
        c.unsatisfiable = True
        logger.warning(f"{c!r} is unsatisfiable ({reason}); ignoring it")

    def satisfy(self) -> None:
        """Build block structure over violated constraints.

        Blocks are moved to their optimal positions as they form.
        """
        bs = self._ensure_blocks()
        bs.split(self.inactive, self.LAGRANGIAN_TOLERANCE)

        while True:
            v = self._most_violated()
            if v is None or not (
                v.equality or (v.slack() < self.ZERO_UPPERBOUND and not v.active)
            ):
                break

            lb = v.left.block
            rb = v.right.block
            if lb is not rb:
                bs.merge(v)
                continue

            if lb.is_active_directed_path_between(v.right, v.left):
                self._mark_unsatisfiable(v, "closes a cycle of active constraints")
                continue

            # Both ends already share a block: split it somewhere between them first.
            split = lb.split_between(v.left, v.right)
            if split is None:
                self._mark_unsatisfiable(v, "no splittable constraint between its ends")
                continue
            bs.insert(split.left)
            bs.insert(split.right)
            bs.remove(lb)
            self.inactive.append(split.constraint)

            if v.slack() >= 0:
                # The split alone satisfied v.
                self.inactive.append(v)
            else:
                bs.merge(v)

    def solve(self) -> float:
        """Alternate satisfy and split until the cost stops changing.

        Returns:
            Final total cost
        """
        self.satisfy()
        last_cost = math.inf
        cost = self.bs.cost()
        iterations = 1
        while abs(last_cost - cost) > self.COST_CONVERGENCE:
            self.satisfy()
            last_cost = cost
            cost = self.bs.cost()
            iterations += 1
        logger.debug(
            f"Solved {len(self.vs)} variables, {len(self.cs)} constraints in "
            f"{iterations} passes (cost={cost:.6g}, blocks={len(self.bs)})"
        )
        return cost
