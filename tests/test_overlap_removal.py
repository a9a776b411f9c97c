"""Tests for one-dimensional overlap removal."""

import pytest
from pydantic import ValidationError

from vpsc.layout.overlap import remove_overlap_in_one_dimension
from vpsc.models.spans import OverlapRemovalResult, Span

EPS = 1e-6


def _spans(sizes, centers):
    return [Span(size=s, desired_center=c) for s, c in zip(sizes, centers)]


def _assert_no_overlap(spans, centers):
    for i in range(len(spans) - 1):
        required = (spans[i].size + spans[i + 1].size) / 2
        assert centers[i + 1] - centers[i] >= required - EPS


class TestOverlapRemovalScenarios:
    """Test concrete overlap removal scenarios."""

    def test_two_overlapping_spans(self):
        """Test symmetric correction of two overlapping spans."""
        result = remove_overlap_in_one_dimension(_spans([10, 10], [0, 5]))

        assert isinstance(result, OverlapRemovalResult)
        assert result.new_centers == pytest.approx([-2.5, 7.5])
        assert result.lower_bound == pytest.approx(-7.5)
        assert result.upper_bound == pytest.approx(12.5)

    def test_three_stacked_spans(self):
        """Test even spacing when all spans want the same center."""
        result = remove_overlap_in_one_dimension(_spans([10, 10, 10], [0, 0, 0]))
        assert result.new_centers == pytest.approx([-10.0, 0.0, 10.0])

    def test_non_overlapping_spans_are_unchanged(self):
        """Test that spans already apart keep their exact centers."""
        result = remove_overlap_in_one_dimension(_spans([10, 10, 4], [0, 20, 30]))

        assert result.new_centers == [0.0, 20.0, 30.0]
        assert result.lower_bound == -5.0
        assert result.upper_bound == 32.0

    def test_single_span(self):
        """Test that a lone span stays put."""
        result = remove_overlap_in_one_dimension(_spans([6], [3]))
        assert result.new_centers == [3.0]
        assert result.lower_bound == 0.0
        assert result.upper_bound == 6.0
        assert result.extent == 6.0

    def test_order_is_preserved(self):
        """Test that every adjacent pair ends up separated in input order."""
        spans = _spans([4, 8, 2, 6, 10, 3], [5, 1, 3, 3, 0, 12])
        result = remove_overlap_in_one_dimension(spans)

        assert len(result.new_centers) == len(spans)
        _assert_no_overlap(spans, result.new_centers)

    def test_solution_is_a_fixed_point(self):
        """Test that feeding the solution back in returns it unchanged."""
        sizes = [4, 8, 2, 6, 10, 3]
        first = remove_overlap_in_one_dimension(_spans(sizes, [5, 1, 3, 3, 0, 12]))
        second = remove_overlap_in_one_dimension(_spans(sizes, first.new_centers))
        assert second.new_centers == pytest.approx(first.new_centers, abs=EPS)

    def test_zero_size_spans(self):
        """Test that zero-size spans may share a center."""
        result = remove_overlap_in_one_dimension(_spans([0, 0], [1, 1]))
        assert result.new_centers == [1.0, 1.0]


class TestOverlapRemovalBounds:
    """Test lower and upper bounds."""

    def test_lower_bound_pushes_spans_right(self):
        """Test that a lower bound of 0 is honoured."""
        unbounded = remove_overlap_in_one_dimension(_spans([10, 10], [0, 5]))
        result = remove_overlap_in_one_dimension(_spans([10, 10], [0, 5]), lower_bound=0)

        assert result.new_centers[0] > unbounded.new_centers[0]
        assert result.new_centers[1] > unbounded.new_centers[1]
        assert result.lower_bound == pytest.approx(0.0, abs=0.02)
        assert result.new_centers[0] - 5 >= result.lower_bound - EPS
        assert result.new_centers[0] - 5 >= 0 - 0.02
        assert result.new_centers == pytest.approx([5.0 - 15 / 1002, 15.0 - 15 / 1002])

    def test_upper_bound_pushes_spans_left(self):
        """Test that an upper bound holds the last span back."""
        result = remove_overlap_in_one_dimension(_spans([10, 10], [0, 5]), upper_bound=10)

        assert result.upper_bound == pytest.approx(10.0, abs=0.01)
        assert result.new_centers[1] + 5 <= result.upper_bound + EPS
        assert result.new_centers[0] < -2.5
        _assert_no_overlap(_spans([10, 10], [0, 5]), result.new_centers)

    def test_both_bounds(self):
        """Test spans that fit between both bounds."""
        spans = _spans([10, 10, 10], [0, 0, 0])
        result = remove_overlap_in_one_dimension(spans, lower_bound=-20, upper_bound=20)

        assert result.lower_bound == pytest.approx(-20.0)
        assert result.upper_bound == pytest.approx(20.0)
        assert result.new_centers == pytest.approx([-10.0, 0.0, 10.0])

    def test_bounds_too_tight_move(self):
        """Test that bounds give way when spans do not fit."""
        spans = _spans([10, 10], [0, 0])
        result = remove_overlap_in_one_dimension(spans, lower_bound=-5, upper_bound=5)

        _assert_no_overlap(spans, result.new_centers)
        assert result.new_centers[0] - 5 >= result.lower_bound - EPS
        assert result.new_centers[1] + 5 <= result.upper_bound + EPS
        assert result.extent == pytest.approx(20.0)


class TestOverlapRemovalInputs:
    """Test accepted input forms and errors."""

    def test_mapping_inputs(self):
        """Test snake_case and camelCase mappings."""
        result = remove_overlap_in_one_dimension(
            [{"size": 10, "desired_center": 0}, {"size": 10, "desiredCenter": 5}]
        )
        assert result.new_centers == pytest.approx([-2.5, 7.5])

    def test_empty_spans_raise(self):
        """Test that an empty span list is rejected."""
        with pytest.raises(ValueError, match="Cannot remove overlap from empty spans"):
            remove_overlap_in_one_dimension([])

    def test_missing_field_raises(self):
        """Test that spans without a size fail validation."""
        with pytest.raises(ValidationError):
            remove_overlap_in_one_dimension([{"desired_center": 0}])


class TestSpanModel:
    """Test the Span model."""

    def test_alias(self):
        """Test that desiredCenter populates desired_center."""
        span = Span.model_validate({"size": 4, "desiredCenter": 2})
        assert span.desired_center == 2.0
        assert span.half_size == 2.0

    def test_coerce_passes_spans_through(self):
        """Test that coerce returns existing Span instances unchanged."""
        span = Span(size=1, desired_center=0)
        assert Span.coerce(span) is span
