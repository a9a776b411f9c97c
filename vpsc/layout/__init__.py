"""Layout helpers built on the solver.

This module provides:
- One-dimensional overlap removal for ordered spans
"""

from vpsc.layout.overlap import remove_overlap_in_one_dimension

__all__ = [
    "remove_overlap_in_one_dimension",
]
