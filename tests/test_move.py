"""Tests for GeometricMove."""

import pytest

from spline_travel.errors import DegenerateMoveError
from spline_travel.models import MotionState, PrecisionSettings, Vector3
from spline_travel.move import GeometricMove


@pytest.fixture
def precision():
    """Default precision: 3 decimals, F only on change."""
    return PrecisionSettings()


@pytest.fixture
def relative_state():
    """Absolute XYZ, relative E, at (5, 0, 0) moving at 20 mm/s."""
    return MotionState(
        position=Vector3(5.0, 0.0, 0.0),
        feed_rate=20.0,
        extrusion_relative=True,
    )


class TestGeometricMoveProperties:
    """Test derived quantities of a move."""

    def test_speed(self):
        """Test nozzle speed from distance and duration."""
        move = GeometricMove(Vector3(), Vector3(10.0, 0.0, 0.0), duration=0.5)
        assert move.travel_distance == pytest.approx(10.0)
        assert move.speed == pytest.approx(20.0)
        assert move.feed_rate == pytest.approx(20.0)

    def test_feed_rate_of_filament_only_move(self):
        """Test that pure filament moves use filament speed as feed rate."""
        move = GeometricMove(Vector3(), Vector3(), duration=0.01, filament_delta=-1.5)
        assert move.feed_rate == pytest.approx(150.0)
        assert move.filament_speed == pytest.approx(150.0)

    def test_from_speed(self):
        """Test construction from a target speed."""
        move = GeometricMove.from_speed(Vector3(), Vector3(0.0, 30.0, 40.0), speed=100.0)
        assert move.duration == pytest.approx(0.5)

    def test_from_speed_zero_distance(self):
        """Test that a zero-distance move has no speed to set."""
        with pytest.raises(DegenerateMoveError, match="zero-distance"):
            GeometricMove.from_speed(Vector3(1.0, 1.0, 1.0), Vector3(1.0, 1.0, 1.0), 100.0)

    def test_with_speed(self):
        """Test that with_speed changes only the duration."""
        move = GeometricMove(Vector3(), Vector3(10.0, 0.0, 0.0), duration=0.01, filament_delta=-0.2)
        slowed = move.with_speed(200.0)
        assert slowed.duration == pytest.approx(0.05)
        assert slowed.speed == pytest.approx(200.0)
        assert slowed.filament_delta == -0.2
        assert move.duration == 0.01

    def test_zero_duration_has_no_speed(self):
        """Test that speed is undefined for zero-time moves."""
        move = GeometricMove(Vector3(), Vector3(1.0, 0.0, 0.0), duration=0.0)
        with pytest.raises(DegenerateMoveError):
            _ = move.speed
        with pytest.raises(DegenerateMoveError):
            _ = move.feed_rate

    def test_is_pause(self):
        """Test pause detection."""
        assert GeometricMove(Vector3(), Vector3(), duration=1.0).is_pause
        assert not GeometricMove(Vector3(), Vector3(), duration=1.0, filament_delta=0.1).is_pause


class TestGeometricMoveRender:
    """Test rendering moves to G-code text."""

    def test_writes_only_changed_axes(self, relative_state, precision):
        """Test that unchanged axes are omitted."""
        move = GeometricMove(Vector3(5.0, 0.0, 0.0), Vector3(10.0, 0.0, 0.0), duration=0.5)
        text, error = move.render(relative_state.replace(feed_rate=10.0), precision)
        assert text == "G1 X10"
        assert error == 0.0

    def test_writes_feed_rate_on_change(self, relative_state, precision):
        """Test that F is written in mm/min when the speed changes."""
        move = GeometricMove(Vector3(5.0, 0.0, 0.0), Vector3(10.0, 0.0, 0.0), duration=0.025)
        text, _ = move.render(relative_state, precision)
        assert text == "G1 X10 F12000"

    def test_feed_rate_decimals(self, relative_state):
        """Test F with positive speed decimals."""
        precision = PrecisionSettings(speed_decimals=1)
        move = GeometricMove(Vector3(5.0, 0.0, 0.0), Vector3(6.0, 0.0, 0.0), duration=0.3)
        text, _ = move.render(relative_state, precision)
        assert text == "G1 X6 F200"

    def test_relative_positioning(self, precision):
        """Test that relative mode writes the offset."""
        state = MotionState(position=Vector3(5.0, 5.0, 0.0), feed_rate=10.0, position_relative=True)
        move = GeometricMove(Vector3(5.0, 5.0, 0.0), Vector3(7.0, 4.0, 0.0), duration=0.2)
        text, _ = move.render(state, precision)
        assert text == "G1 X2 Y-1 F671"

    def test_relative_extrusion(self, relative_state, precision):
        """Test relative E amount."""
        move = GeometricMove(
            Vector3(5.0, 0.0, 0.0), Vector3(10.0, 0.0, 0.0), duration=0.25, filament_delta=0.5
        )
        text, error = move.render(relative_state, precision)
        assert text == "G1 X10 E0.5"
        assert error == pytest.approx(0.0)

    def test_absolute_extrusion(self, precision):
        """Test that absolute E is the new filament position."""
        state = MotionState(filament_position=10.0, feed_rate=20.0, extrusion_relative=False)
        move = GeometricMove(Vector3(), Vector3(5.0, 0.0, 0.0), duration=0.25, filament_delta=-1.5)
        text, _ = move.render(state, precision)
        assert text == "G1 X5 E8.5"

    def test_rounding_error_carried(self, relative_state, precision):
        """Test that E rounding error is returned and applied to the next move."""
        move = GeometricMove(
            Vector3(5.0, 0.0, 0.0), Vector3(10.0, 0.0, 0.0), duration=0.25, filament_delta=0.0004
        )
        text, error = move.render(relative_state, precision)
        assert "E" not in text
        assert error == pytest.approx(0.0004)

        text, error = move.render(relative_state, precision, filament_error=error)
        assert text == "G1 X10 E0.001"
        assert error == pytest.approx(-0.0002)

    def test_pause_renders_dwell(self, relative_state, precision):
        """Test that a pause becomes G4 in milliseconds."""
        move = GeometricMove(Vector3(5.0, 0.0, 0.0), Vector3(5.0, 0.0, 0.0), duration=0.25)
        text, _ = move.render(relative_state, precision)
        assert text == "G4 P250"

    def test_zero_duration_raises(self, relative_state, precision):
        """Test that zero-time moves cannot be rendered."""
        move = GeometricMove(Vector3(5.0, 0.0, 0.0), Vector3(6.0, 0.0, 0.0), duration=0.0)
        with pytest.raises(DegenerateMoveError, match="zero time"):
            move.render(relative_state, precision)


class TestGeometricMoveSplit:
    """Test splitting a move in time."""

    def test_split_in_half(self):
        """Test proportional split of position, time and filament."""
        move = GeometricMove(Vector3(), Vector3(10.0, 0.0, 0.0), duration=1.0, filament_delta=2.0)
        first, second = move.split(0.25)
        assert first.end == Vector3(2.5, 0.0, 0.0)
        assert second.start == first.end
        assert first.duration == pytest.approx(0.25)
        assert second.duration == pytest.approx(0.75)
        assert first.filament_delta + second.filament_delta == pytest.approx(2.0)

    @pytest.mark.parametrize("time_point", [0.0, 1.0, -0.5, 2.0])
    def test_split_outside(self, time_point):
        """Test that split points not strictly inside return None."""
        move = GeometricMove(Vector3(), Vector3(10.0, 0.0, 0.0), duration=1.0)
        assert move.split(time_point) is None


class TestGeometricMoveResolution:
    """Test detection and joining of steps too small to write."""

    def test_tiny_step_below_resolution(self, relative_state, precision):
        """Test that sub-precision travel and filament write nothing."""
        move = GeometricMove(
            Vector3(5.0, 0.0, 0.0), Vector3(5.00005, 0.0, 0.0), duration=0.01, filament_delta=0.0002
        )
        assert move.is_below_resolution(relative_state, precision)

    def test_travel_above_resolution(self, relative_state, precision):
        """Test that a written axis makes the step visible."""
        move = GeometricMove(Vector3(5.0, 0.0, 0.0), Vector3(5.001, 0.0, 0.0), duration=0.01)
        assert not move.is_below_resolution(relative_state, precision)

    def test_filament_above_resolution(self, relative_state, precision):
        """Test that a written E makes the step visible."""
        move = GeometricMove(
            Vector3(5.0, 0.0, 0.0), Vector3(5.0, 0.0, 0.0), duration=0.01, filament_delta=0.002
        )
        assert not move.is_below_resolution(relative_state, precision)

    def test_carried_error_counts(self, relative_state, precision):
        """Test that the rounding error carried in is included."""
        move = GeometricMove(
            Vector3(5.0, 0.0, 0.0), Vector3(5.0, 0.0, 0.0), duration=0.01, filament_delta=0.0002
        )
        assert not move.is_below_resolution(relative_state, precision, filament_error=0.0004)

    def test_joined_with(self):
        """Test that joining keeps the first start and sums time and filament."""
        first = GeometricMove(Vector3(), Vector3(1.0, 0.0, 0.0), duration=0.5, filament_delta=-0.25)
        second = GeometricMove(
            Vector3(1.0, 0.0, 0.0), Vector3(3.0, 0.0, 0.0), duration=1.0, filament_delta=-0.5
        )
        joined = first.joined_with(second)
        assert joined.start == Vector3()
        assert joined.end == Vector3(3.0, 0.0, 0.0)
        assert joined.duration == pytest.approx(1.5)
        assert joined.filament_delta == pytest.approx(-0.75)
