import math

from coach_logging import get_logger

logger = get_logger(__name__)

# ============================================================
# Constants
# ============================================================

FEET_PER_YARD = 3.0
DEFAULT_PACE_LENGTH_FEET = 3.0   # one walking pace, configurable per player

UNIT_FEET = "feet"
UNIT_YARDS = "yards"
UNIT_PACES = "paces"
DISTANCE_UNITS = (UNIT_FEET, UNIT_YARDS, UNIT_PACES)

# Input ranges (inputs are clamped into these, never rejected)
SLOPE_RANGE = (-20.0, 20.0)          # percent, + = uphill
BREAK_RANGE = (0.0, 50.0)            # percent
GREEN_SPEED_RANGE = (6.0, 14.0)      # stimpmeter feet
BASELINE_GREEN_SPEED = 10.0

# Output ranges
STRENGTH_RANGE = (50.0, 150.0)
PROBABILITY_RANGE = (0.05, 0.98)

DEFAULT_TRAJECTORY_POINTS = 20

# Longest putt the model reads (1000 yd); keeps every output finite.
MAX_DISTANCE_FEET = 3000.0

# Putting styles: (strength multiplier, make-probability bonus)
STYLE_STRAIGHT = "straight"
STYLE_SLIGHT_ARC = "slight-arc"
STYLE_STRONG_ARC = "strong-arc"

PUTTING_STYLES = {
    STYLE_STRAIGHT:   (1.00, 1.00),
    STYLE_SLIGHT_ARC: (1.02, 1.05),
    STYLE_STRONG_ARC: (0.98, 0.95),
}

# Share of the full break a player aims inside of, and the small
# forward/back correction on the aim line.
AIM_LATERAL_FACTOR = 0.3
AIM_DEPTH_FACTOR = 0.1

# Even a perfect read on a flat green is not a certainty.
MAKE_RATE_DERATING = 0.85


# ============================================================
# Utility functions
# ============================================================

def clamp(value, lo, hi):
    return max(lo, min(hi, value))


def as_finite(value, default=0.0):
    """Coerce to float; NaN/inf (or garbage) becomes the default."""
    try:
        val = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(val) or math.isinf(val):
        return default
    return val


def _normalize_unit(unit):
    u = (unit or UNIT_FEET).lower().strip()
    if u in ("ft", "foot", "feet"):
        return UNIT_FEET
    if u in ("yd", "yds", "yard", "yards"):
        return UNIT_YARDS
    if u in ("pace", "paces"):
        return UNIT_PACES
    logger.warning("Unknown distance unit %r, treating as feet", unit)
    return UNIT_FEET


def _normalize_style(style):
    s = (style or STYLE_STRAIGHT).lower().strip().replace("_", "-").replace(" ", "-")
    if s not in PUTTING_STYLES:
        logger.warning("Unknown putting style %r, using straight", style)
        return STYLE_STRAIGHT
    return s


def _feet_per_unit(unit, pace_length_feet):
    if unit == UNIT_YARDS:
        return FEET_PER_YARD
    if unit == UNIT_PACES:
        return pace_length_feet
    return 1.0


# ============================================================
# Distance unit conversion
# ============================================================

def convert_distance(value, from_unit, to_unit, pace_length_feet=DEFAULT_PACE_LENGTH_FEET):
    """
    Convert a distance between feet, yards and paces.

    Everything routes through feet. A pace is `pace_length_feet` long; a
    non-positive pace length falls back to the 3 ft default so the division
    on the way out can never blow up.
    """
    pace = as_finite(pace_length_feet, DEFAULT_PACE_LENGTH_FEET)
    if pace <= 0:
        logger.warning("Pace length %r is not positive, using %.1f ft", pace_length_feet, DEFAULT_PACE_LENGTH_FEET)
        pace = DEFAULT_PACE_LENGTH_FEET

    src = _normalize_unit(from_unit)
    dst = _normalize_unit(to_unit)

    feet = as_finite(value) * _feet_per_unit(src, pace)
    return feet / _feet_per_unit(dst, pace)


def to_feet(value, unit, pace_length_feet=DEFAULT_PACE_LENGTH_FEET):
    return convert_distance(value, unit, UNIT_FEET, pace_length_feet)


def feet_to_yards(distance_feet: float) -> float:
    return as_finite(distance_feet) / FEET_PER_YARD


def yards_to_feet(distance_yards: float) -> float:
    return as_finite(distance_yards) * FEET_PER_YARD


# ============================================================
# Putt outcome model
# ============================================================

def calculate_aim_point(distance_feet, break_percent, break_direction_deg, green_speed):
    """
    Where to start the ball relative to the hole line.

    Faster greens resist lateral drift less, so the effective break grows
    with stimp. Players aim inside the full break, hence the 0.3 factor.
    """
    if break_percent == 0:
        return {"x": 0.0, "y": 0.0}

    rad = math.radians(break_direction_deg)
    break_effect = (break_percent / 100.0) * distance_feet * (green_speed / BASELINE_GREEN_SPEED)

    return {
        "x": math.sin(rad) * break_effect * AIM_LATERAL_FACTOR,
        "y": math.cos(rad) * break_effect * AIM_DEPTH_FACTOR,
    }


def calculate_strength(distance_feet, slope_percent, green_speed, putting_style=STYLE_STRAIGHT):
    """Stroke strength in percent of a normal stroke (100 = flat 10 ft putt at stimp 10)."""
    strength = 100.0

    # Uphill needs more, downhill less
    strength += slope_percent * 1.5

    # Slower greens need more pace
    strength += (BASELINE_GREEN_SPEED - green_speed) * 2.0

    # Friction adds up over longer rolls
    strength += max(0.0, (distance_feet - 10.0) * 0.5)

    style_mult, _ = PUTTING_STYLES[_normalize_style(putting_style)]
    strength *= style_mult

    return clamp(strength, *STRENGTH_RANGE)


def generate_trajectory(distance_feet, break_percent, break_direction_deg, n_points=DEFAULT_TRAJECTORY_POINTS):
    """
    Sampled ball path from the ball (t=0) to the hole (t=1).

    Forward travel is linear in t; the lateral offset grows with t**2 since
    the break has longer to act as the ball slows near the hole.
    """
    n = max(1, int(as_finite(n_points, DEFAULT_TRAJECTORY_POINTS)))
    rad = math.radians(break_direction_deg)
    total_break = (break_percent / 100.0) * distance_feet

    points = []
    for i in range(n + 1):
        t = i / n
        points.append(
            {
                "x": math.sin(rad) * total_break * t * t,
                "y": t * distance_feet,
                "t": t,
            }
        )
    return points


def calculate_success_probability(distance_feet, slope_percent, break_percent, green_speed, putting_style=STYLE_STRAIGHT):
    """
    Make probability for the putt.

    Starts from a distance baseline (50 ft ~ 10%) and stacks multiplicative
    penalties for slope, break and an off-baseline green speed.
    """
    p = max(0.1, 1.0 - distance_feet / 50.0)

    p *= max(0.3, 1.0 - abs(slope_percent) / 100.0)
    p *= max(0.4, 1.0 - break_percent / 200.0)

    # Too fast and too slow both hurt
    speed_penalty = abs(green_speed - BASELINE_GREEN_SPEED) / 20.0
    p *= max(0.5, 1.0 - speed_penalty)

    _, style_bonus = PUTTING_STYLES[_normalize_style(putting_style)]
    p *= style_bonus

    p *= MAKE_RATE_DERATING

    return clamp(p, *PROBABILITY_RANGE)


def calculate_putt_recommendation(
    distance,
    distance_unit=UNIT_FEET,
    slope_percent=0.0,
    break_percent=0.0,
    break_direction_deg=0.0,
    green_speed=BASELINE_GREEN_SPEED,
    putting_style=STYLE_STRAIGHT,
    pace_length_feet=DEFAULT_PACE_LENGTH_FEET,
    n_points=DEFAULT_TRAJECTORY_POINTS,
):
    """
    Full putt read used by the coach on every control change.

    Steps:
      1) Convert the distance to feet.
      2) Clamp slope / break / stimp into their playable ranges.
      3) Aim point, stroke strength, sampled trajectory and make probability.

    Nothing is rejected: out-of-range inputs are clamped so the renderer
    always gets finite, in-band numbers back.

    Returns a fresh dict:
      aim_point:           {"x", "y"} in feet, x = lateral, y = along the line
      strength_percent:    50..150
      trajectory:          list of {"x", "y", "t"} samples
      success_probability: 0.05..0.98
      distance_feet, break_direction_deg (normalised into [0, 360))
    """
    # a huge finite distance can overflow to inf in feet; the clamp caps it
    distance_feet = clamp(to_feet(distance, distance_unit, pace_length_feet), 0.0, MAX_DISTANCE_FEET)

    slope = clamp(as_finite(slope_percent), *SLOPE_RANGE)
    brk = clamp(as_finite(break_percent), *BREAK_RANGE)
    direction = as_finite(break_direction_deg) % 360.0
    stimp = clamp(as_finite(green_speed, BASELINE_GREEN_SPEED), *GREEN_SPEED_RANGE)
    style = _normalize_style(putting_style)

    if (slope, brk, stimp) != (as_finite(slope_percent), as_finite(break_percent), as_finite(green_speed, BASELINE_GREEN_SPEED)):
        logger.warning(
            "Putt inputs clamped: slope=%s break=%s stimp=%s -> %.1f / %.1f / %.1f",
            slope_percent, break_percent, green_speed, slope, brk, stimp,
        )

    result = {
        "aim_point": calculate_aim_point(distance_feet, brk, direction, stimp),
        "strength_percent": calculate_strength(distance_feet, slope, stimp, style),
        "trajectory": generate_trajectory(distance_feet, brk, direction, n_points),
        "success_probability": calculate_success_probability(distance_feet, slope, brk, stimp, style),
        "distance_feet": distance_feet,
        "break_direction_deg": direction,
    }

    logger.debug(
        "Putt %.1f ft: strength=%.1f%% p=%.3f aim=(%.2f, %.2f)",
        distance_feet,
        result["strength_percent"],
        result["success_probability"],
        result["aim_point"]["x"],
        result["aim_point"]["y"],
    )
    return result
