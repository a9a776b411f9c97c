"""Pydantic models for the public overlap-removal interface."""

from .spans import OverlapRemovalResult, Span

__all__ = [
    "OverlapRemovalResult",
    "Span",
]
