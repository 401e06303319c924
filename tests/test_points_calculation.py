"""
Unit tests for points calculation
"""
import pytest

from services.points import PointsAccumulator, points_for_position, position_label


def test_position_to_points_mapping():
    """Test that positions correctly map to points"""

    position_points = {
        1: 100,
        2: 75,
        3: 50,
        4: 50,
        5: 25,
        8: 25,
        9: 15,
        16: 15,
    }

    for position, expected_points in position_points.items():
        assert points_for_position(position) == expected_points, \
            f"Position {position} should give {expected_points} points"


@pytest.mark.parametrize("position", [0, 17, 100, -1, None])
def test_positions_off_the_table_give_zero(position):
    """Test that positions outside the table attribute nothing"""
    assert points_for_position(position) == 0


def test_every_table_position_gives_points():
    """Test positions 1..16 all attribute points, decreasing with position"""
    previous = None
    for position in range(1, 17):
        points = points_for_position(position)
        assert points > 0
        if previous is not None:
            assert points <= previous
        previous = points


def test_position_labels():
    """Test display labels for positions"""
    assert position_label(1) == "Winner"
    assert position_label(2) == "Runner-Up"
    assert position_label(3) == "Semifinal"
    assert position_label(4) == "Semifinal"
    assert position_label(6) == "Quarter Final"
    assert position_label(12) == "Pre-Quarter"
    assert position_label(20) == "20"
    assert position_label(None) == ""


class _Entity:
    def __init__(self, name):
        self.name = name


def test_accumulator_merges_same_player_and_category():
    """Test a player appearing twice in one category gets a single delta"""
    alice = _Entity("Alice")
    ms = _Entity("MS")

    accumulator = PointsAccumulator()
    accumulator.attribute(alice, ms, 3)
    accumulator.attribute(alice, ms, 1)

    deltas = list(accumulator)
    assert len(deltas) == 1
    assert deltas[0].points == 150
    assert deltas[0].positions == [3, 1]
    assert deltas[0].best_position == 1


def test_accumulator_keeps_categories_apart():
    """Test deltas are keyed per (player, category)"""
    alice = _Entity("Alice")
    ms = _Entity("MS")
    xd = _Entity("XD")

    accumulator = PointsAccumulator()
    accumulator.attribute(alice, ms, 1)
    accumulator.attribute(alice, xd, 2)

    assert len(accumulator) == 2
    assert accumulator.total_for(alice) == 175


def test_best_position_ignores_unplaced_rows():
    """Test position 0 (missing) does not win over a real placement"""
    alice = _Entity("Alice")
    ms = _Entity("MS")

    accumulator = PointsAccumulator()
    accumulator.attribute(alice, ms, 0)
    accumulator.attribute(alice, ms, 5)

    delta = next(iter(accumulator))
    assert delta.points == 25
    assert delta.best_position == 5
