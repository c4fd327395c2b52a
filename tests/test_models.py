"""Tests for value types: vectors, motion state, precision and options."""

import math

import pytest

from spline_travel.models import (
    MotionState,
    PrecisionSettings,
    ProcessingOptions,
    TravelMode,
    Vector3,
    format_number,
    initial_state,
    round_to,
)


class TestVector3:
    """Test Vector3 arithmetic."""

    def test_default_is_origin(self):
        """Test that a default vector is the origin."""
        assert Vector3() == Vector3(0.0, 0.0, 0.0)

    def test_add_and_subtract(self):
        """Test component-wise addition and subtraction."""
        a = Vector3(1.0, 2.0, 3.0)
        b = Vector3(0.5, -1.0, 2.0)
        assert a + b == Vector3(1.5, 1.0, 5.0)
        assert a - b == Vector3(0.5, 3.0, 1.0)

    def test_scale_both_sides(self):
        """Test multiplication by a scalar from either side."""
        v = Vector3(1.0, -2.0, 0.5)
        assert v * 2.0 == Vector3(2.0, -4.0, 1.0)
        assert 2.0 * v == Vector3(2.0, -4.0, 1.0)

    def test_negation(self):
        """Test unary minus."""
        assert -Vector3(1.0, -2.0, 0.0) == Vector3(-1.0, 2.0, 0.0)

    def test_length(self):
        """Test Euclidean length."""
        assert Vector3(3.0, 4.0, 0.0).length == pytest.approx(5.0)
        assert Vector3(1.0, 2.0, 2.0).length == pytest.approx(3.0)

    def test_normalized(self):
        """Test unit vector in the same direction."""
        unit = Vector3(0.0, 10.0, 0.0).normalized()
        assert unit == Vector3(0.0, 1.0, 0.0)

    def test_normalized_zero_vector(self):
        """Test that the zero vector normalizes without NaN."""
        unit = Vector3().normalized()
        assert unit == Vector3(1.0, 0.0, 0.0)
        assert not any(math.isnan(c) for c in unit.as_tuple())

    def test_dot(self):
        """Test dot product."""
        assert Vector3(1.0, 2.0, 3.0).dot(Vector3(4.0, -5.0, 6.0)) == pytest.approx(12.0)

    def test_distance(self):
        """Test distance between points."""
        a = Vector3(1.0, 1.0, 0.0)
        b = Vector3(4.0, 5.0, 0.0)
        assert a.distance_to(b) == pytest.approx(5.0)

    def test_linear_combination(self):
        """Test weighted sum of several vectors."""
        result = Vector3.linear_combination(
            (0.5, Vector3(2.0, 0.0, 0.0)),
            (2.0, Vector3(0.0, 1.0, 0.0)),
            (-1.0, Vector3(0.0, 0.0, 3.0)),
        )
        assert result == Vector3(1.0, 2.0, -3.0)

    def test_immutable(self):
        """Test that vectors cannot be modified."""
        v = Vector3(1.0, 2.0, 3.0)
        with pytest.raises(AttributeError):
            v.x = 5.0


class TestMotionState:
    """Test MotionState snapshots."""

    def test_defaults(self):
        """Test default state values."""
        state = MotionState()
        assert state.position == Vector3()
        assert state.filament_position == 0.0
        assert state.feed_rate == 0.0
        assert state.position_relative is False
        assert state.extrusion_relative is False

    def test_initial_state(self):
        """Test the state assumed before the first line."""
        state = initial_state()
        assert state.position_relative is False
        assert state.extrusion_relative is True

    def test_replace_returns_copy(self):
        """Test that replace leaves the original untouched."""
        state = MotionState()
        moved = state.replace(position=Vector3(1.0, 2.0, 3.0), feed_rate=50.0)
        assert moved.position == Vector3(1.0, 2.0, 3.0)
        assert moved.feed_rate == 50.0
        assert state.position == Vector3()
        assert state.feed_rate == 0.0


class TestPrecisionSettings:
    """Test PrecisionSettings thresholds."""

    def test_defaults(self):
        """Test default decimal places."""
        precision = PrecisionSettings()
        assert precision.position_decimals == 3
        assert precision.extrusion_decimals == 3
        assert precision.speed_decimals == -1

    def test_confusion_thresholds(self):
        """Test that confusion is one tenth of the last written digit."""
        precision = PrecisionSettings(position_decimals=3, extrusion_decimals=5, speed_decimals=1)
        assert precision.position_confusion == pytest.approx(1e-4)
        assert precision.extrusion_confusion == pytest.approx(1e-6)
        assert precision.speed_confusion == pytest.approx(1e-2)

    def test_negative_speed_decimals(self):
        """Test that negative speed decimals write F on any change."""
        assert PrecisionSettings(speed_decimals=-1).speed_confusion == 0.0


class TestNumberFormatting:
    """Test round_to and format_number."""

    def test_round_to(self):
        """Test rounding with positive and negative decimal counts."""
        assert round_to(1.23456, 3) == pytest.approx(1.235)
        assert round_to(1234.56, -1) == pytest.approx(1235.0)

    @pytest.mark.parametrize(
        "value,decimals,expected",
        [
            (10.0, 3, "10"),
            (10.5, 3, "10.5"),
            (-0.12345, 3, "-0.123"),
            (12000.0, 0, "12000"),
            (12000.4, -1, "12000"),
            (-0.0001, 3, "0"),
            (0.0, 3, "0"),
        ],
    )
    def test_format_number(self, value, decimals, expected):
        """Test G-code number text."""
        assert format_number(value, decimals) == expected


class TestProcessingOptions:
    """Test ProcessingOptions defaults and mode selection."""

    def test_defaults(self):
        """Test default option values."""
        options = ProcessingOptions()
        assert options.retract_length == 1.5
        assert options.acceleration == 800.0
        assert options.curve_jerk == 2.0
        assert options.speed_limit == 200.0
        assert options.loop_tolerance == 0.3
        assert options.z_hop == 1.0

    def test_default_mode_is_spline(self):
        """Test that spline travel is selected by default."""
        assert ProcessingOptions().travel_mode == TravelMode.SPLINE

    def test_straight_mode(self):
        """Test selecting straight travel."""
        options = ProcessingOptions(use_spline_travel=False, use_straight_travel=True)
        assert options.travel_mode == TravelMode.STRAIGHT

    def test_spline_wins_when_both_set(self):
        """Test that spline is kept when both modes are requested."""
        options = ProcessingOptions(use_spline_travel=True, use_straight_travel=True)
        assert options.travel_mode == TravelMode.SPLINE

    def test_spline_is_fallback(self):
        """Test that disabling both modes still selects spline."""
        options = ProcessingOptions(use_spline_travel=False, use_straight_travel=False)
        assert options.travel_mode == TravelMode.SPLINE
