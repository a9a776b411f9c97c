"""Converters between external graph representations and solver problems."""

from .graph_converter import (
    active_edges,
    graph_to_problem,
    problem_to_graph,
    solve_graph,
)

__all__ = [
    "active_edges",
    "graph_to_problem",
    "problem_to_graph",
    "solve_graph",
]
