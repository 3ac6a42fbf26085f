import math

import pytest

import putting_engine as pe


def test_flat_ten_footer_is_a_normal_stroke():
    res = pe.calculate_putt_recommendation(distance=10, slope_percent=0, break_percent=0)
    assert res["strength_percent"] == 100
    assert res["aim_point"] == {"x": 0.0, "y": 0.0}
    assert res["success_probability"] > 0


def test_uphill_adds_one_and_a_half_percent_per_slope_point():
    res = pe.calculate_putt_recommendation(distance=10, slope_percent=5)
    assert res["strength_percent"] == pytest.approx(107.5)


def test_slower_green_and_longer_putt_need_more_strength():
    base = pe.calculate_putt_recommendation(distance=10)["strength_percent"]
    slow = pe.calculate_putt_recommendation(distance=10, green_speed=8)["strength_percent"]
    long_putt = pe.calculate_putt_recommendation(distance=30)["strength_percent"]
    assert slow == pytest.approx(base + 4)
    assert long_putt == pytest.approx(base + 10)


def test_break_right_aims_right():
    res = pe.calculate_putt_recommendation(
        distance=10, break_percent=10, break_direction_deg=45, green_speed=10
    )
    assert res["aim_point"]["x"] > 0
    assert res["aim_point"]["y"] > 0


def test_faster_green_widens_the_aim():
    slow = pe.calculate_putt_recommendation(distance=20, break_percent=20, break_direction_deg=90, green_speed=8)
    fast = pe.calculate_putt_recommendation(distance=20, break_percent=20, break_direction_deg=90, green_speed=12)
    assert fast["aim_point"]["x"] > slow["aim_point"]["x"]


def test_yards_and_paces_are_converted_before_modelling():
    feet = pe.calculate_putt_recommendation(distance=30, distance_unit="feet")
    yards = pe.calculate_putt_recommendation(distance=10, distance_unit="yards")
    paces = pe.calculate_putt_recommendation(distance=12, distance_unit="paces", pace_length_feet=2.5)
    assert yards["distance_feet"] == pytest.approx(30)
    assert paces["distance_feet"] == pytest.approx(30)
    assert yards["strength_percent"] == pytest.approx(feet["strength_percent"])
    assert paces["success_probability"] == pytest.approx(feet["success_probability"])


def test_trajectory_runs_from_ball_to_hole():
    res = pe.calculate_putt_recommendation(distance=15, break_percent=20, break_direction_deg=90)
    traj = res["trajectory"]
    assert len(traj) == pe.DEFAULT_TRAJECTORY_POINTS + 1
    assert traj[0] == {"x": 0.0, "y": 0.0, "t": 0.0}
    assert traj[-1]["t"] == 1.0
    assert traj[-1]["y"] == pytest.approx(15)
    assert traj[-1]["x"] == pytest.approx(0.2 * 15)


def test_trajectory_break_grows_with_t_squared():
    traj = pe.generate_trajectory(20, 10, 90, n_points=10)
    xs = [p["x"] for p in traj]
    assert xs == sorted(xs)
    # halfway down the line only a quarter of the break has happened
    assert traj[5]["x"] == pytest.approx(traj[-1]["x"] * 0.25)


def test_trajectory_is_recomputable():
    a = pe.calculate_putt_recommendation(distance=12, break_percent=15, break_direction_deg=300)
    b = pe.calculate_putt_recommendation(distance=12, break_percent=15, break_direction_deg=300)
    assert a == b


def test_styles_shift_strength_and_probability():
    straight = pe.calculate_putt_recommendation(distance=20, putting_style="straight")
    slight = pe.calculate_putt_recommendation(distance=20, putting_style="slight-arc")
    strong = pe.calculate_putt_recommendation(distance=20, putting_style="strong-arc")
    assert slight["strength_percent"] > straight["strength_percent"] > strong["strength_percent"]
    assert slight["success_probability"] > straight["success_probability"] > strong["success_probability"]


def test_unknown_style_falls_back_to_straight():
    odd = pe.calculate_putt_recommendation(distance=20, putting_style="claw")
    straight = pe.calculate_putt_recommendation(distance=20)
    assert odd["strength_percent"] == straight["strength_percent"]


def test_probability_drops_with_distance_slope_and_break():
    short = pe.calculate_putt_recommendation(distance=5)["success_probability"]
    longer = pe.calculate_putt_recommendation(distance=25)["success_probability"]
    sloped = pe.calculate_putt_recommendation(distance=5, slope_percent=-10)["success_probability"]
    breaking = pe.calculate_putt_recommendation(distance=5, break_percent=30)["success_probability"]
    assert short > longer
    assert short > sloped
    assert short > breaking


def test_green_speed_off_baseline_hurts_both_ways():
    base = pe.calculate_putt_recommendation(distance=8)["success_probability"]
    slow = pe.calculate_putt_recommendation(distance=8, green_speed=6)["success_probability"]
    fast = pe.calculate_putt_recommendation(distance=8, green_speed=14)["success_probability"]
    assert slow == pytest.approx(fast)
    assert slow < base


@pytest.mark.parametrize(
    "kwargs",
    [
        {"distance": 0.1},
        {"distance": 0},
        {"distance": -5},
        {"distance": 300, "distance_unit": "yards", "slope_percent": 20},
        {"distance": 1, "slope_percent": -500, "green_speed": 40},
        {"distance": 80, "break_percent": 900, "break_direction_deg": -1000},
        {"distance": float("nan"), "slope_percent": float("inf")},
        {"distance": 1e308, "distance_unit": "yards", "break_percent": 10, "break_direction_deg": 0},
    ],
)
def test_outputs_always_in_band(kwargs):
    res = pe.calculate_putt_recommendation(**kwargs)
    assert 50 <= res["strength_percent"] <= 150
    assert 0.05 <= res["success_probability"] <= 0.98
    assert 0 <= res["break_direction_deg"] < 360
    for p in res["trajectory"]:
        assert p["x"] == p["x"] and p["y"] == p["y"]


def test_huge_distance_is_capped_and_finite():
    res = pe.calculate_putt_recommendation(
        distance=1e308, distance_unit="yards", break_percent=10, break_direction_deg=0
    )
    assert res["distance_feet"] == pe.MAX_DISTANCE_FEET
    assert math.isfinite(res["aim_point"]["x"]) and math.isfinite(res["aim_point"]["y"])
    for p in res["trajectory"]:
        assert math.isfinite(p["x"]) and math.isfinite(p["y"])


def test_ideal_putt_is_not_a_sure_thing():
    res = pe.calculate_putt_recommendation(distance=0.5, putting_style="slight-arc")
    assert res["success_probability"] == pytest.approx(min(0.98, (1 - 0.5 / 50) * 1.05 * 0.85))
