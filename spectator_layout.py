import math
import random
import time

from coach_logging import get_logger
from putting_engine import as_finite

logger = get_logger(__name__)

# ============================================================
# Constants
# ============================================================

SPECTATOR_KINDS = ("female", "putting", "cooler")

MIN_SPECTATORS = 1
MAX_SPECTATORS = 2

DEFAULT_MIN_RADIUS = 2.5
DEFAULT_MAX_RADIUS = 5.0
FULL_RADIUS_DISTANCE_FEET = 30.0   # putts shorter than this pull spectators in

# Angles are degrees around the hole, 0 = straight on along the ball-to-hole
# line, 180 = back toward the ball. (start, end) arcs, start may be negative.
FRONT_BACK_EXCLUSIONS = [(-20.0, 20.0), (160.0, 200.0)]
SIDE_EXCLUSIONS = [(80.0, 100.0), (260.0, 280.0)]

MIN_SEPARATION_DEG = 45.0
MAX_PLACEMENT_ATTEMPTS = 20

PRACTICE_HOLE_DISTANCE_FEET = 20.0
SEED_OFFSET = 0.5


# ============================================================
# Random sources
# ============================================================

def seeded_random(seed):
    """
    Deterministic [0, 1) generator: x -> frac(sin(x * 10000) * 10000).

    Cosmetic only. The seed is shifted by SEED_OFFSET first: sin(0) is a
    fixed point, so an unshifted seed 0 would return 0.0 forever.
    """
    x = float(seed) + SEED_OFFSET

    def _next():
        nonlocal x
        x = math.sin(x * 10000.0) * 10000.0
        frac = x - math.floor(x)
        # tiny negative x rounds up to exactly 1.0
        return frac if frac < 1.0 else 0.0

    return _next


def _random_source(seed):
    if seed is None:
        return random.random
    return seeded_random(seed)


def shuffle_kinds(kinds, rand):
    """Fisher-Yates on a copy, driven by `rand`."""
    result = list(kinds)
    for i in range(len(result) - 1, 0, -1):
        j = int(math.floor(rand() * (i + 1)))
        result[i], result[j] = result[j], result[i]
    return result


# ============================================================
# Angle helpers
# ============================================================

def _normalize_arcs(arcs):
    """Arcs as (start, end) pieces inside [0, 360), wrapping ones split."""
    pieces = []
    for start, end in arcs:
        lo = start % 360.0
        span = end - start
        if span >= 360.0:
            return [(0.0, 360.0)]
        hi = lo + span
        if hi <= 360.0:
            pieces.append((lo, hi))
        else:
            pieces.append((lo, 360.0))
            pieces.append((0.0, hi - 360.0))
    return sorted(pieces)


def exclusion_arcs(exclude_sides=False):
    arcs = list(FRONT_BACK_EXCLUSIONS)
    if exclude_sides:
        arcs.extend(SIDE_EXCLUSIONS)
    return arcs


def allowed_intervals(arcs):
    """Complement of the exclusion arcs on the circle, as open intervals."""
    allowed = []
    cursor = 0.0
    for lo, hi in _normalize_arcs(arcs):
        if lo > cursor:
            allowed.append((cursor, lo))
        cursor = max(cursor, hi)
    if cursor < 360.0:
        allowed.append((cursor, 360.0))
    return allowed


def is_angle_excluded(angle_deg, arcs):
    a = angle_deg % 360.0
    return any(lo <= a <= hi for lo, hi in _normalize_arcs(arcs))


def angular_separation(a, b):
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


def _draw_angle(rand, intervals):
    """
    Map one uniform draw onto the allowed part of the circle.

    Interval end points are the exclusion boundaries, so the draw is nudged
    to stay strictly inside.
    """
    total = sum(hi - lo for lo, hi in intervals)
    u = rand() * total
    for lo, hi in intervals:
        width = hi - lo
        if u < width:
            return min(max(lo + u, lo + 1e-6), hi - 1e-6)
        u -= width
    return intervals[-1][1] - 1e-6


# ============================================================
# Layout generation
# ============================================================

def generate_positions(count, hole_distance_feet, rand, min_radius=DEFAULT_MIN_RADIUS,
                       max_radius=DEFAULT_MAX_RADIUS, exclude_sides=False):
    """
    Place `count` spectators around the hole.

    Each angle avoids the exclusion arcs. Spread between spectators is
    best-effort: after MAX_PLACEMENT_ATTEMPTS draws closer than
    MIN_SEPARATION_DEG to an earlier spectator the last draw is kept.
    Radii shrink for putts shorter than 30 ft.
    """
    intervals = allowed_intervals(exclusion_arcs(exclude_sides))
    radius_mult = min(1.0, max(0.0, as_finite(hole_distance_feet)) / FULL_RADIUS_DISTANCE_FEET)
    r_min = min_radius * radius_mult
    r_max = max_radius * radius_mult

    positions = []
    used_angles = []
    for _ in range(count):
        attempts = 0
        while True:
            angle = _draw_angle(rand, intervals)
            attempts += 1
            crowded = any(angular_separation(a, angle) < MIN_SEPARATION_DEG for a in used_angles)
            if not crowded or attempts >= MAX_PLACEMENT_ATTEMPTS:
                break
        if crowded:
            logger.debug("Spectator spread not met after %d attempts, keeping %.1f deg", attempts, angle)

        used_angles.append(angle)
        radius = r_min + rand() * (r_max - r_min)
        rad = math.radians(angle)
        positions.append(
            {
                "x": math.cos(rad) * radius,
                "z": math.sin(rad) * radius,
                "angle": angle,
                "radius": radius,
            }
        )
    return positions


def generate_spectator_config(hole_distance_feet, seed=None, min_radius=DEFAULT_MIN_RADIUS,
                              max_radius=DEFAULT_MAX_RADIUS, exclude_sides=False):
    """
    Pick 1 or 2 of the background spectators and place them around the hole.

    Same (hole_distance_feet, seed) -> identical output. seed=None draws from
    the process RNG for a fresh layout each call.

    Returns:
      selected:      kinds in placement order
      show_<kind>:   flag per kind
      positions:     {kind: {"x", "z", "angle", "radius"}} for selected kinds
    """
    rand = _random_source(seed)

    count = int(math.floor(rand() * MAX_SPECTATORS)) + MIN_SPECTATORS
    count = max(MIN_SPECTATORS, min(MAX_SPECTATORS, count))
    selected = shuffle_kinds(SPECTATOR_KINDS, rand)[:count]

    placed = generate_positions(
        len(selected),
        hole_distance_feet,
        rand,
        min_radius=min_radius,
        max_radius=max_radius,
        exclude_sides=exclude_sides,
    )

    config = {"selected": selected, "positions": dict(zip(selected, placed))}
    for kind in SPECTATOR_KINDS:
        config[f"show_{kind}"] = kind in selected

    logger.debug("Spectators for %.0f ft (seed=%s): %s", as_finite(hole_distance_feet), seed, ", ".join(selected))
    return config


def challenge_seed(level, attempt_number):
    return int(level) * 1000 + int(attempt_number)


def challenge_spectator_config(level, hole_distance_feet, attempt_number):
    """Reproducible layout for a challenge level: the same attempt always looks the same."""
    return generate_spectator_config(hole_distance_feet, seed=challenge_seed(level, attempt_number))


def practice_spectator_config(hole_distance_feet=PRACTICE_HOLE_DISTANCE_FEET):
    """New layout every practice attempt, seeded from the clock."""
    return generate_spectator_config(hole_distance_feet, seed=int(time.time() * 1000))
