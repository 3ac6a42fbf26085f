import math

from coach_logging import get_logger
from putting_engine import FEET_PER_YARD, clamp, as_finite, yards_to_feet

logger = get_logger(__name__)

# ============================================================
# Constants
# ============================================================

# Ball stays put at this render-space depth; the world moves around it.
BALL_REFERENCE_Z = 4.0
BALL_HEIGHT = 0.08
HOLE_HEIGHT = 0.01
PIN_HEIGHT = 0.05

SCALING_BANDED = "banded"
SCALING_AVERAGED = "averaged"

# (max distance in feet, world units per foot). Non-increasing by design.
UNITS_PER_FOOT_BANDS = [
    (10.0, 1.0),
    (25.0, 0.8),
    (50.0, 0.6),
    (100.0, 0.4),
]
FAR_UNITS_PER_FOOT = 0.25

# What a given distance should look like on screen:
# (distance in yards, world units it should span, description)
VISUAL_REFERENCES = [
    (3.33, 10.0, "Tap-in range - pin large and detailed"),
    (8.33, 20.0, "Makeable putt - pin clearly visible"),
    (16.67, 30.0, "Challenging putt - pin visible but smaller"),
    (33.33, 40.0, "Two-putt territory - pin small but visible"),
    (66.67, 50.0, "Approach distance - pin tiny but visible"),
]

SCALING_TOLERANCE = 0.10
MIN_FEATURE_SIZE = 0.1

GAME_MODE_PUTT = "putt"
GAME_MODE_SWING = "swing"

FEATURE_PIN = "pin"
FEATURE_BUNKER = "bunker"
FEATURE_WATER = "water"
FEATURE_ROUGH = "rough"
FEATURE_TERRAIN = "terrain"
FEATURE_CATEGORIES = (FEATURE_PIN, FEATURE_BUNKER, FEATURE_WATER, FEATURE_ROUGH, FEATURE_TERRAIN)

# Non-pin features render only within this share of the hole length.
FEATURE_RANGE_SHARE = 0.8
MIN_PIN_SCALE = 0.05

# Hole capture tolerances by putt length (feet):
# (max distance, capture radius ft, max speed ft/frame, description)
HOLE_DETECTION_BANDS = [
    (3.0, 0.25, 0.50, "Tap-in range - precision critical"),
    (8.0, 0.30, 0.60, "Close range - high precision required"),
    (15.0, 0.35, 0.70, "Medium range - standard precision"),
]
LONG_HOLE_DETECTION = (0.40, 0.90, "Long range - focus on distance control")


# ============================================================
# Scaling engine
# ============================================================

def _normalize_mode(mode):
    m = (mode or SCALING_BANDED).lower().strip()
    if m not in (SCALING_BANDED, SCALING_AVERAGED):
        logger.warning("Unknown scaling mode %r, using banded", mode)
        return SCALING_BANDED
    return m


def _usable_pairs(calibration):
    pairs = []
    for ref in calibration or []:
        yards = as_finite(ref[0])
        units = as_finite(ref[1])
        if yards > 0 and units > 0:
            pairs.append((yards, units))
    return pairs


def banded_units_per_foot(distance_feet: float) -> float:
    """Step function from the band table; negative distances use their magnitude."""
    d = abs(as_finite(distance_feet))
    for max_feet, units in UNITS_PER_FOOT_BANDS:
        if d <= max_feet:
            return units
    return FAR_UNITS_PER_FOOT


def calibrate_averaged_scale(calibration=None):
    """
    Single world-units-per-yard constant from calibration pairs.

    The ratio visual_units / distance is averaged across every usable pair.
    With no usable pairs the default VISUAL_REFERENCES are used.
    """
    pairs = _usable_pairs(calibration if calibration is not None else VISUAL_REFERENCES)
    if not pairs:
        logger.warning("No usable calibration pairs, using default visual references")
        pairs = _usable_pairs(VISUAL_REFERENCES)

    ratios = [units / yards for yards, units in pairs]
    return sum(ratios) / len(ratios)


def get_world_units_per_foot(distance_feet, mode=SCALING_BANDED, calibration=None):
    """
    World units per real foot for a given distance.

    banded:   step table, larger distances get fewer units per foot.
    averaged: one constant for every distance (calibration average / 3).
    """
    if _normalize_mode(mode) == SCALING_AVERAGED:
        return calibrate_averaged_scale(calibration) / FEET_PER_YARD
    return banded_units_per_foot(distance_feet)


def get_world_units_per_yard(distance_yards, mode=SCALING_BANDED, calibration=None):
    distance_feet = yards_to_feet(distance_yards)
    return get_world_units_per_foot(distance_feet, mode, calibration) * FEET_PER_YARD


def world_units_for_distance(distance_feet, mode=SCALING_BANDED, calibration=None):
    d = as_finite(distance_feet)
    return d * get_world_units_per_foot(d, mode, calibration)


def compute_world_position(distance_feet, reference_z=BALL_REFERENCE_Z, mode=SCALING_BANDED, calibration=None):
    """
    Render-space position of something `distance_feet` in front of the viewer.

    Always relative to the fixed reference depth, never an absolute course
    coordinate: the ball stays anchored and the world shrinks around it.
    """
    z = as_finite(reference_z, BALL_REFERENCE_Z) - world_units_for_distance(distance_feet, mode, calibration)
    return {"x": 0.0, "y": 0.0, "z": z}


def check_scaling_consistency(calibration=None, tolerance=SCALING_TOLERANCE):
    """
    Compare banded and averaged modes at each calibration point.

    Returns one row per point plus an overall `consistent` flag. A row
    agrees when the two modes are within `tolerance` (fraction) of each
    other, measured against the banded value.
    """
    pairs = _usable_pairs(calibration if calibration is not None else VISUAL_REFERENCES)
    per_yard = calibrate_averaged_scale(pairs or None)

    rows = []
    for yards, desired in pairs:
        feet = yards_to_feet(yards)
        banded = world_units_for_distance(feet, SCALING_BANDED)
        averaged = yards * per_yard
        error = abs(averaged - banded) / banded if banded else 0.0
        rows.append(
            {
                "distance_yards": yards,
                "desired_units": desired,
                "banded_units": banded,
                "averaged_units": averaged,
                "error_pct": error * 100.0,
                "agrees": error <= tolerance,
            }
        )

    consistent = all(r["agrees"] for r in rows)
    if not consistent:
        worst = max(rows, key=lambda r: r["error_pct"])
        logger.warning(
            "Scaling modes disagree: worst %.1f%% at %.2f yd (tolerance %.0f%%)",
            worst["error_pct"], worst["distance_yards"], tolerance * 100,
        )
    return {"units_per_yard": per_yard, "consistent": consistent, "points": rows}


def validate_visual_distance(actual_units, expected_yards, mode=SCALING_BANDED, calibration=None):
    """Is a rendered distance within 10% of what `expected_yards` should span?"""
    expected_units = world_units_for_distance(yards_to_feet(expected_yards), mode, calibration)
    error = abs(as_finite(actual_units) - expected_units)
    error_pct = (error / expected_units) * 100.0 if expected_units else 0.0
    return {
        "correct": error_pct < SCALING_TOLERANCE * 100.0,
        "expected_units": expected_units,
        "error": error,
        "error_pct": error_pct,
    }


def calculate_feature_size(base_size_feet, distance_yards, max_distance=300.0, mode=SCALING_BANDED, calibration=None):
    """Render size for a feature of `base_size_feet`, shrunk linearly with distance."""
    max_d = as_finite(max_distance, 300.0)
    d = abs(as_finite(distance_yards))
    factor = clamp(1.0 - d / max_d, 0.1, 1.0) if max_d > 0 else 1.0
    upf = get_world_units_per_foot(yards_to_feet(d), mode, calibration)
    return max(MIN_FEATURE_SIZE, as_finite(base_size_feet) * upf * factor)


def get_hole_detection_precision(distance_feet, mode=SCALING_BANDED, calibration=None):
    """Capture radius / speed threshold for a putt, in feet and in world units."""
    d = abs(as_finite(distance_feet))
    radius, speed, description = LONG_HOLE_DETECTION
    for max_feet, r, s, desc in HOLE_DETECTION_BANDS:
        if d <= max_feet:
            radius, speed, description = r, s, desc
            break

    upf = get_world_units_per_foot(d, mode, calibration)
    return {
        "detection_radius_feet": radius,
        "speed_threshold_feet": speed,
        "detection_radius_units": radius * upf,
        "speed_threshold_units": speed * upf,
        "description": description,
    }


# ============================================================
# Game state
# ============================================================

def _normalize_game_mode(mode):
    m = (mode or GAME_MODE_PUTT).lower().strip()
    return GAME_MODE_SWING if m == GAME_MODE_SWING else GAME_MODE_PUTT


def make_game_state(ball_position_yards=0.0, hole_position_yards=10.0, game_mode=GAME_MODE_PUTT, total_hole_yards=None):
    """
    Fresh game-state snapshot. remaining_yards is always derived, never set.

    total_hole_yards defaults to the hole position (a single putt or a hole
    measured from the tee).
    """
    ball = as_finite(ball_position_yards)
    hole = as_finite(hole_position_yards)
    total = hole if total_hole_yards is None else as_finite(total_hole_yards, hole)
    remaining = abs(hole - ball)
    return {
        "ball_position_yards": ball,
        "hole_position_yards": hole,
        "remaining_yards": remaining,
        "remaining_feet": yards_to_feet(remaining),
        "game_mode": _normalize_game_mode(game_mode),
        "total_hole_yards": max(0.0, total),
    }


def update_game_state(state, **changes):
    """Copy-on-write update: returns a new snapshot, `state` is left untouched."""
    merged = dict(state)
    merged.update(changes)
    return make_game_state(
        ball_position_yards=merged.get("ball_position_yards", 0.0),
        hole_position_yards=merged.get("hole_position_yards", 0.0),
        game_mode=merged.get("game_mode", GAME_MODE_PUTT),
        total_hole_yards=merged.get("total_hole_yards"),
    )


def get_world_positions(state, reference_z=BALL_REFERENCE_Z, mode=SCALING_BANDED, calibration=None):
    """Ball, hole and pin in render space for the current snapshot."""
    hole = compute_world_position(state["remaining_feet"], reference_z, mode, calibration)
    return {
        "ball": {"x": 0.0, "y": BALL_HEIGHT, "z": reference_z},
        "hole": {"x": 0.0, "y": HOLE_HEIGHT, "z": hole["z"]},
        "pin": {"x": 0.0, "y": PIN_HEIGHT, "z": hole["z"]},
    }


def validate_positioning(state, reference_z=BALL_REFERENCE_Z, mode=SCALING_BANDED, calibration=None):
    issues = []
    positions = get_world_positions(state, reference_z, mode, calibration)
    ball = positions["ball"]
    hole = positions["hole"]

    actual = math.dist((ball["x"], ball["z"]), (hole["x"], hole["z"]))
    expected = world_units_for_distance(state["remaining_feet"], mode, calibration)

    if abs(actual - expected) > 0.1:
        issues.append(f"Distance mismatch: actual {actual:.2f} vs expected {expected:.2f}")
    if state["hole_position_yards"] < state["ball_position_yards"]:
        issues.append("Ball is past the hole")
    if hole["z"] > ball["z"]:
        issues.append("Hole positioned behind ball")

    return {
        "valid": not issues,
        "issues": issues,
        "ball_position": ball,
        "hole_position": hole,
        "actual_distance": actual,
        "expected_distance": expected,
    }


def course_to_world(yards_from_tee, state, lateral_yards=0.0, elevation_feet=0.0,
                    reference_z=BALL_REFERENCE_Z, mode=SCALING_BANDED, calibration=None):
    """Course coordinates (yards from tee, lateral yards, elevation) to render space."""
    relative_feet = yards_to_feet(as_finite(yards_from_tee) - state["ball_position_yards"])
    upf = get_world_units_per_foot(abs(relative_feet), mode, calibration)
    return {
        "x": yards_to_feet(lateral_yards) * upf,
        "y": as_finite(elevation_feet) * upf,
        "z": reference_z - relative_feet * upf,
    }


def describe_relative_position(yards_from_tee, state):
    relative = as_finite(yards_from_tee) - state["ball_position_yards"]
    if abs(relative) < 5:
        description = "at ball position"
    elif relative > 0:
        description = f"{relative:.0f}yd ahead"
    else:
        description = f"{abs(relative):.0f}yd behind"
    return {
        "relative_yards": relative,
        "is_ahead": relative > 0,
        "is_behind": relative < 0,
        "description": description,
    }


# ============================================================
# Feature visibility
# ============================================================

def _normalize_category(category):
    c = (category or FEATURE_TERRAIN).lower().strip()
    if c not in FEATURE_CATEGORIES:
        logger.warning("Unknown feature category %r, treating as terrain", category)
        return FEATURE_TERRAIN
    return c


def pin_scale(relative_yards, state):
    if state["game_mode"] == GAME_MODE_PUTT:
        return 1.0
    total = state["total_hole_yards"]
    if total <= 0:
        return 1.0
    return clamp(1.0 - relative_yards / total, MIN_PIN_SCALE, 1.0)


def feature_scale(relative_yards, max_feature_distance):
    """Squared falloff: distant features shrink faster than near ones."""
    if max_feature_distance <= 0:
        return 1.0
    return clamp(1.0 - relative_yards / max_feature_distance, 0.1, 1.0) ** 2


def resolve_feature_visibility(yards_from_tee, category, state, lateral_yards=0.0, elevation_feet=0.0,
                               reference_z=BALL_REFERENCE_Z, mode=SCALING_BANDED, calibration=None):
    """
    Should a course feature render for this game state, and how large?

    - pin: always visible. Putt mode -> scale 1.0; swing mode -> shrinks
      linearly over the hole length, floored at 0.05.
    - everything else: hidden beyond 80% of the hole length from the ball,
      otherwise scale = clamp(1 - d/max, 0.1, 1) ** 2.

    Returns {"world_position", "visible", "scale", "reason"}. Hidden
    features get an origin position and scale 0.
    """
    cat = _normalize_category(category)
    relative_yards = abs(as_finite(yards_from_tee) - state["ball_position_yards"])

    if cat == FEATURE_PIN:
        scale = pin_scale(relative_yards, state)
        if state["game_mode"] == GAME_MODE_PUTT:
            reason = "putting mode - pin always full size"
        else:
            reason = f"swing mode - pin kept as course reference ({relative_yards:.0f}yd away)"
        position = course_to_world(yards_from_tee, state, lateral_yards, elevation_feet, reference_z, mode, calibration)
        return {"world_position": position, "visible": True, "scale": scale, "reason": reason}

    max_feature_distance = state["total_hole_yards"] * FEATURE_RANGE_SHARE
    # zero-length hole: everything is in range
    if 0 < max_feature_distance < relative_yards:
        return {
            "world_position": {"x": 0.0, "y": 0.0, "z": 0.0},
            "visible": False,
            "scale": 0.0,
            "reason": f"{cat} too far ({relative_yards:.0f}yd > {max_feature_distance:.0f}yd)",
        }

    scale = feature_scale(relative_yards, max_feature_distance)
    position = course_to_world(yards_from_tee, state, lateral_yards, elevation_feet, reference_z, mode, calibration)
    return {
        "world_position": position,
        "visible": True,
        "scale": scale,
        "reason": f"{cat} at {relative_yards:.0f}yd with {scale:.2f}x scale",
    }


def resolve_features(features, state, mode=SCALING_BANDED, calibration=None):
    """
    Resolve a batch of features for one state change.

    `features` is an iterable of dicts with "yards_from_tee", "category" and
    optional "lateral_yards" / "elevation_feet" / "name". Each result keeps the
    input's name.
    """
    out = []
    for feat in features:
        res = resolve_feature_visibility(
            feat.get("yards_from_tee", 0.0),
            feat.get("category"),
            state,
            lateral_yards=feat.get("lateral_yards", 0.0),
            elevation_feet=feat.get("elevation_feet", 0.0),
            mode=mode,
            calibration=calibration,
        )
        res["name"] = feat.get("name", feat.get("category"))
        out.append(res)

    logger.debug(
        "Resolved %d features (%d visible) at ball %.0fyd",
        len(out), sum(1 for r in out if r["visible"]), state["ball_position_yards"],
    )
    return out
