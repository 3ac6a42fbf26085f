import pytest

import putting_engine as pe


def test_yards_to_feet():
    assert pe.convert_distance(10, "yards", "feet") == pytest.approx(30)
    assert pe.convert_distance(30, "feet", "yards") == pytest.approx(10)


def test_paces_use_pace_length():
    assert pe.convert_distance(4, "paces", "feet") == pytest.approx(12)
    assert pe.convert_distance(4, "paces", "feet", pace_length_feet=2.5) == pytest.approx(10)
    assert pe.convert_distance(3, "yards", "paces", pace_length_feet=2.25) == pytest.approx(4)


@pytest.mark.parametrize("value", [0.0, 0.001, 1.0, 3.3, 47.25, 1335.0])
def test_feet_yards_round_trip(value):
    there = pe.convert_distance(value, "feet", "yards")
    assert pe.convert_distance(there, "yards", "feet") == pytest.approx(value)


@pytest.mark.parametrize("pace", [2.0, 2.7, 3.0, 3.6])
def test_paces_round_trip(pace):
    there = pe.convert_distance(17.5, "feet", "paces", pace_length_feet=pace)
    assert pe.convert_distance(there, "paces", "feet", pace_length_feet=pace) == pytest.approx(17.5)


def test_same_unit_is_identity():
    assert pe.convert_distance(12.5, "yards", "yards") == pytest.approx(12.5)


def test_unit_labels_are_forgiving():
    assert pe.convert_distance(1, "YD", "ft") == pytest.approx(3)
    # unknown labels are treated as feet
    assert pe.convert_distance(7, "cubits", "feet") == pytest.approx(7)


def test_bad_pace_length_falls_back_to_default():
    assert pe.convert_distance(2, "paces", "feet", pace_length_feet=0) == pytest.approx(6)
    assert pe.convert_distance(2, "paces", "feet", pace_length_feet=-1) == pytest.approx(6)


def test_feet_yards_helpers():
    assert pe.feet_to_yards(9) == pytest.approx(3)
    assert pe.yards_to_feet(445) == pytest.approx(1335)
