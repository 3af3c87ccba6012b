# swirl_engine.py
"""
Ornament engine: mirrored flourish paths under the message bubble.

The look is derived from the (sender, receiver) pair, so both directions of
a conversation share one ornament, and from the day index, which lets the
curves "breathe" a little from one day to the next.
"""
from typing import List

from hashing import hash_to_bytes, map_byte
from models import OrnamentParams, OrnamentPaths

ARCHETYPE_NAMES = [
    "Soft Wave",
    "High Wave",
    "Swirl",
    "Twin Swirl",
    "Crown Wave",
    "Leaf Curve",
    "Minimal Arc",
    "Double Arc",
]

PAIR_SEPARATOR = "::"
EMPTY_PAIR_KEY = "pair::empty"

# Horizontal gap between the rarity code and the first ornament point
INNER_GAP = 40
LAYER_OFFSET = 4


def fmt(value: float) -> str:
    """Compact number for path data: 2 decimals, no trailing zeros."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


# ----------------------
# Pair key / params
# ----------------------
def canonical_pair_key(a: str, b: str) -> str:
    """Order-independent key for two addresses."""
    first = (a or "").strip()
    second = (b or "").strip()
    if not first and not second:
        return EMPTY_PAIR_KEY
    if first <= second:
        return f"{first}{PAIR_SEPARATOR}{second}"
    return f"{second}{PAIR_SEPARATOR}{first}"


def day_jitter(day_index: int) -> float:
    return 1 + ((day_index % 5) - 2) * 0.01


def derive_ornament_params(addr_a: str, addr_b: str,
                           year_index: int = 0, day_index: int = 0) -> OrnamentParams:
    """
    Ornament parameters for a pair plus the Y/D indices of the rarity code.

    ``year_index`` is accepted for symmetry with the rarity code; only the
    day index currently affects the output.
    """
    key = canonical_pair_key(addr_a, addr_b)
    b = hash_to_bytes(key, 8)

    archetype = b[0] % 8

    amplitude = map_byte(b[1], 6, 14)
    curvature = map_byte(b[2], 0.30, 0.90)
    stroke_width = map_byte(b[3], 1.0, 1.35)
    spread = map_byte(b[4], 90, 150)
    layers = (b[5] % 3) + 1

    # Archetype fine-tuning keeps each style recognizable
    if archetype == 0:  # Soft Wave
        amplitude *= 0.85
        curvature = map_byte(b[2], 0.30, 0.50)
        layers = 1
    elif archetype == 1:  # High Wave
        amplitude *= 1.20
        curvature = map_byte(b[2], 0.45, 0.75)
    elif archetype == 2:  # Swirl
        curvature = map_byte(b[2], 0.55, 0.90)
    elif archetype == 3:  # Twin Swirl
        curvature = map_byte(b[2], 0.60, 0.90)
        layers = 2 + (b[5] % 2)
    elif archetype == 4:  # Crown Wave
        curvature = map_byte(b[2], 0.30, 0.50)
    elif archetype == 5:  # Leaf Curve
        curvature = map_byte(b[2], 0.40, 0.70)
    elif archetype == 6:  # Minimal Arc
        amplitude = map_byte(b[1], 4, 7)
        curvature = map_byte(b[2], 0.20, 0.35)
        layers = 1
        stroke_width = map_byte(b[3], 1.00, 1.15)
    elif archetype == 7:  # Double Arc
        amplitude = map_byte(b[1], 6, 10)
        curvature = map_byte(b[2], 0.25, 0.45)
        layers = 2

    jitter = day_jitter(day_index)
    amplitude *= jitter
    spread *= jitter

    return OrnamentParams(
        archetype_index=archetype,
        amplitude=amplitude,
        curvature=curvature,
        stroke_width=stroke_width,
        spread=spread,
        layers=layers,
    )


# ----------------------
# Path construction
# ----------------------
def _ornament_path(params: OrnamentParams, center_x: float, y: float, direction: int) -> str:
    amp = params.amplitude
    spread = params.spread
    curv = params.curvature

    start_x = center_x + direction * INNER_GAP
    end_x = center_x + direction * (INNER_GAP + spread * 0.50)
    mid_x1 = center_x + direction * (INNER_GAP + spread * curv * 0.30)
    mid_x2 = center_x + direction * (INNER_GAP + spread * curv * 0.80)

    up = y - amp
    down = y + amp * 0.60
    move = f"M {fmt(start_x)} {fmt(y)}"
    archetype = params.archetype_index

    if archetype == 1:  # High Wave
        return (f"{move} C {fmt(mid_x1)} {fmt(up - amp * 0.20)}, "
                f"{fmt(mid_x2)} {fmt(down + amp * 0.10)}, {fmt(end_x)} {fmt(y)}")
    if archetype == 2:  # Swirl
        return (f"{move} C {fmt(mid_x1)} {fmt(up)}, {fmt(mid_x2)} {fmt(y)}, "
                f"{fmt(end_x - direction * amp * 0.60)} {fmt(y)} "
                f"S {fmt(end_x)} {fmt(y - amp * 0.40)}, {fmt(end_x)} {fmt(y)}")
    if archetype == 3:  # Twin Swirl
        return (f"{move} C {fmt(mid_x1)} {fmt(up)}, {fmt(mid_x2)} {fmt(down)}, "
                f"{fmt(end_x - direction * amp * 0.80)} {fmt(y)} "
                f"S {fmt(end_x)} {fmt(y - amp * 0.60)}, {fmt(end_x)} {fmt(y)}")
    if archetype == 4:  # Crown Wave
        peak_x = center_x + direction * (INNER_GAP + spread * 0.30)
        peak_y = y - amp * 1.10
        return (f"{move} C {fmt(mid_x1)} {fmt(up)}, {fmt(peak_x)} {fmt(peak_y)}, "
                f"{fmt(mid_x2)} {fmt(up)} S {fmt(end_x)} {fmt(down)}, {fmt(end_x)} {fmt(y)}")
    if archetype == 5:  # Leaf Curve
        return (f"{move} C {fmt(mid_x1)} {fmt(up)}, {fmt(mid_x2)} {fmt(y)}, "
                f"{fmt(end_x - direction * amp * 0.40)} {fmt(y + amp * 0.20)}")
    if archetype == 6:  # Minimal Arc
        return f"{move} Q {fmt(mid_x2)} {fmt(up)}, {fmt(end_x)} {fmt(y)}"
    if archetype == 7:  # Double Arc
        return (f"{move} Q {fmt(mid_x1)} {fmt(up)}, {fmt(mid_x2)} {fmt(y)} "
                f"T {fmt(end_x)} {fmt(y)}")

    # Soft Wave, and anything unknown
    return (f"{move} C {fmt(mid_x1)} {fmt(up)}, {fmt(mid_x2)} {fmt(down)}, "
            f"{fmt(end_x)} {fmt(y)}")


def build_ornament_paths(params: OrnamentParams, center_x: float, baseline_y: float) -> OrnamentPaths:
    """Left/right path data, one entry per layer, mirrored around center_x."""
    left: List[str] = []
    right: List[str] = []
    for i in range(params.layers):
        y = baseline_y + i * LAYER_OFFSET
        left.append(_ornament_path(params, center_x, y, -1))
        right.append(_ornament_path(params, center_x, y, 1))
    return OrnamentPaths(left=left, right=right)


def archetype_name(params: OrnamentParams) -> str:
    return ARCHETYPE_NAMES[params.archetype_index % len(ARCHETYPE_NAMES)]
