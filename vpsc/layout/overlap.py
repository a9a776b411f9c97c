"""One-dimensional overlap removal.

Keeps an ordered sequence of spans from overlapping while moving each
span's center as little as possible. Lower and upper bounds are respected
when the spans physically fit between them; otherwise the bounds move too
and their new positions are returned.

Usage:
    from vpsc.layout.overlap import remove_overlap_in_one_dimension

    result = remove_overlap_in_one_dimension(
        [{"size": 10, "desired_center": 0}, {"size": 10, "desired_center": 5}]
    )
    result.new_centers  # [-2.5, 7.5]
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from vpsc.config.settings import get_setting
from vpsc.core.solver import Solver
from vpsc.core.variable import Constraint, Variable
from vpsc.models.spans import OverlapRemovalResult, Span

logger = logging.getLogger(__name__)


def remove_overlap_in_one_dimension(
    spans: Sequence[Union[Span, Mapping[str, Any]]],
    lower_bound: Optional[float] = None,
    upper_bound: Optional[float] = None,
) -> OverlapRemovalResult:
    """Remove overlap between adjacent spans.

    Each adjacent pair is separated by at least the sum of their half sizes.
    A bound adds a heavily weighted variable pinned near the bound value and
    constrained to sit outside the outermost span.

    Args:
        spans: Spans in layout order (Span models or mappings)
        lower_bound: Optional position the first span should not cross
        upper_bound: Optional position the last span should not cross

    Returns:
        OverlapRemovalResult with new centers and realised bounds

    Raises:
        ValueError: If spans is empty
    """
    spans = [Span.coerce(s) for s in spans]
    if not spans:
        raise ValueError("Cannot remove overlap from empty spans")

    vs = [Variable(s.desired_center) for s in spans]
    cs = [
        Constraint(vs[i], vs[i + 1], (spans[i].size + spans[i + 1].size) / 2)
        for i in range(len(spans) - 1)
    ]

    left_most = vs[0]
    right_most = vs[-1]
    left_most_size = spans[0].half_size
    right_most_size = spans[-1].half_size
    weight_factor = get_setting('bound_weight_factor')

    v_lower = None
    if lower_bound is not None:
        v_lower = Variable(lower_bound, left_most.weight * weight_factor)
        vs.append(v_lower)
        cs.append(Constraint(v_lower, left_most, left_most_size))

    v_upper = None
    if upper_bound is not None:
        v_upper = Variable(upper_bound, right_most.weight * weight_factor)
        vs.append(v_upper)
        cs.append(Constraint(right_most, v_upper, right_most_size))

    cost = Solver(vs, cs).solve()
    logger.debug(f"Removed overlap among {len(spans)} spans (cost={cost:.6g})")

    return OverlapRemovalResult(
        new_centers=[v.position() for v in vs[: len(spans)]],
        lower_bound=(
            v_lower.position() if v_lower is not None
            else left_most.position() - left_most_size
        ),
        upper_bound=(
            v_upper.position() if v_upper is not None
            else right_most.position() + right_most_size
        ),
    )
