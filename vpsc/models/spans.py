"""Span models for one-dimensional overlap removal.

A span is an interval given by its size and the center the caller would
like it to keep. Spans are laid out in the order given: each one must end
up entirely after its predecessor.
"""

from typing import Any, List, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field


class Span(BaseModel):
    """An interval to keep clear of its neighbours.

    Attributes:
        size: Length of the interval
        desired_center: Preferred center position
    """

    model_config = ConfigDict(populate_by_name=True)

    size: float = Field(..., description="Length of the interval")
    desired_center: float = Field(
        ..., alias="desiredCenter", description="Preferred center position"
    )

    @classmethod
    def coerce(cls, value: Union["Span", Mapping[str, Any]]) -> "Span":
        """Accept a Span or a mapping with size and desired_center/desiredCenter."""
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)

    @property
    def half_size(self) -> float:
        return self.size / 2


class OverlapRemovalResult(BaseModel):
    """New span centers and the extent they occupy.

    Attributes:
        new_centers: One center per input span, in input order
        lower_bound: Solved lower bound, or the first span's lower edge
        upper_bound: Solved upper bound, or the last span's upper edge
    """

    new_centers: List[float] = Field(
        ..., description="Solved span centers in input order"
    )
    lower_bound: float = Field(..., description="Lower extent of the layout")
    upper_bound: float = Field(..., description="Upper extent of the layout")

    @property
    def extent(self) -> float:
        """Distance between the lower and upper bounds."""
        return self.upper_bound - self.lower_bound
