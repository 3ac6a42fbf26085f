import pytest

import world_scaling as ws


@pytest.fixture
def tee_shot():
    return ws.make_game_state(ball_position_yards=0, hole_position_yards=445, game_mode="swing", total_hole_yards=445)


@pytest.mark.parametrize("yards", [0, 1, 50, 356, 445, 600, 5000])
@pytest.mark.parametrize("game_mode", ["putt", "swing"])
def test_pin_is_always_visible(yards, game_mode):
    state = ws.make_game_state(0, 445, game_mode, 445)
    res = ws.resolve_feature_visibility(yards, "pin", state)
    assert res["visible"] is True
    assert 0 < res["scale"] <= 1


def test_pin_full_size_when_putting():
    state = ws.make_game_state(0, 10, "putt", 10)
    assert ws.resolve_feature_visibility(300, "pin", state)["scale"] == 1.0


def test_pin_shrinks_linearly_in_swing_mode(tee_shot):
    half = ws.resolve_feature_visibility(222.5, "pin", tee_shot)
    assert half["scale"] == pytest.approx(0.5)
    far = ws.resolve_feature_visibility(445, "pin", tee_shot)
    assert far["scale"] == pytest.approx(ws.MIN_PIN_SCALE)


def test_features_hidden_beyond_eighty_percent(tee_shot):
    res = ws.resolve_feature_visibility(400, "bunker", tee_shot)
    assert res["visible"] is False
    assert res["scale"] == 0
    assert "too far" in res["reason"]


def test_feature_scale_falls_off_squared(tee_shot):
    max_d = 445 * 0.8
    res = ws.resolve_feature_visibility(max_d / 2, "rough", tee_shot)
    assert res["visible"]
    assert res["scale"] == pytest.approx(0.25)


def test_feature_scale_has_a_floor(tee_shot):
    res = ws.resolve_feature_visibility(350, "terrain", tee_shot)
    assert res["visible"]
    assert res["scale"] == pytest.approx(0.01)


def test_feature_at_ball_is_full_size(tee_shot):
    assert ws.resolve_feature_visibility(0, "water", tee_shot)["scale"] == 1.0


def test_features_behind_the_ball_use_distance(tee_shot):
    state = ws.update_game_state(tee_shot, ball_position_yards=300)
    behind = ws.resolve_feature_visibility(250, "bunker", state)
    ahead = ws.resolve_feature_visibility(350, "bunker", state)
    assert behind["scale"] == pytest.approx(ahead["scale"])
    assert behind["world_position"]["z"] > ws.BALL_REFERENCE_Z > ahead["world_position"]["z"]


def test_visibility_follows_ball_progress(tee_shot):
    assert not ws.resolve_feature_visibility(430, "bunker", tee_shot)["visible"]
    approach = ws.update_game_state(tee_shot, ball_position_yards=300)
    assert ws.resolve_feature_visibility(430, "bunker", approach)["visible"]


def test_unknown_category_is_terrain(tee_shot):
    odd = ws.resolve_feature_visibility(100, "grandstand", tee_shot)
    terrain = ws.resolve_feature_visibility(100, "terrain", tee_shot)
    assert odd["scale"] == terrain["scale"]


def test_zero_length_hole_does_not_divide_by_zero():
    state = ws.make_game_state(0, 0, "swing", 0)
    assert ws.resolve_feature_visibility(0, "bunker", state)["scale"] == 1.0
    assert ws.resolve_feature_visibility(0, "pin", state)["scale"] == 1.0


def test_zero_length_hole_keeps_features_in_range():
    state = ws.make_game_state(0, 0, "swing", 0)
    res = ws.resolve_feature_visibility(20, "bunker", state)
    assert res["visible"]
    assert res["scale"] == 1.0


def test_resolve_features_keeps_names(tee_shot):
    features = [
        {"name": "Flag", "category": "pin", "yards_from_tee": 445},
        {"name": "Fairway bunker", "category": "bunker", "yards_from_tee": 280, "lateral_yards": 10},
        {"category": "water", "yards_from_tee": 420},
    ]
    out = ws.resolve_features(features, tee_shot)
    assert [r["name"] for r in out] == ["Flag", "Fairway bunker", "water"]
    assert [r["visible"] for r in out] == [True, True, False]
    assert out[1]["world_position"]["x"] > 0
