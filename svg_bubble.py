# svg_bubble.py
"""
Speech bubble illustration: wrapped message, mirrored ornaments, rarity code
and (optionally) the sender's sigil, drawn as one self-contained SVG.
"""
import base64
import copy
import re
from typing import List, Optional, Union
from urllib.parse import quote, unquote

import svgwrite

from constants import EMPTY_MESSAGE_PLACEHOLDER, MAX_MESSAGE_LENGTH, MEDIA_TYPE_SVG
from models import OrnamentParams, SigilParams
from sigil_engine import build_sigil_element, new_drawing
from swirl_engine import build_ornament_paths

CANVAS_WIDTH = 600
CENTER_X = CANVAS_WIDTH / 2

BUBBLE_X = 40
BUBBLE_Y = 40
BUBBLE_WIDTH = 520
BUBBLE_MIN_HEIGHT = 200
BUBBLE_CORNER = 40
ARROW_HALF_WIDTH = 32
ARROW_DEPTH = 38

LINE_HEIGHT = 28
ORNAMENT_GAP = 56
ORNAMENT_ROW_HEIGHT = 70

SIGIL_DISPLAY_SIZE = 64
SIGIL_GAP = 30
SIGIL_BOTTOM_MARGIN = 24

BACKGROUND = "#020617"
BUBBLE_FILL = "#0b1120"
ACCENT = "#0ea5e9"
TEXT_COLOR = "#e5e7eb"
FONT_FAMILY = "system-ui, -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif"

DATA_URI_PREFIX = f"data:{MEDIA_TYPE_SVG},"
DATA_URI_BASE64_PREFIX = f"data:{MEDIA_TYPE_SVG};base64,"

# Code points XML 1.0 does not allow in character data
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


# ----------------------
# Text layout
# ----------------------
def strip_xml_illegal(text: str) -> str:
    return _XML_ILLEGAL.sub("", text)


def wrap_text(message: str, max_line_length: int = 42, max_lines: int = 10) -> List[str]:
    """
    Greedy word wrap for the bubble.

    Words longer than a line are cut, and output silently stops at
    ``max_lines``; the full text lives in the metadata anyway. Characters
    that cannot appear in XML are dropped.
    """
    trimmed = strip_xml_illegal((message or "")[:MAX_MESSAGE_LENGTH]).strip()
    if not trimmed:
        return []

    lines: List[str] = []
    current = ""
    for word in trimmed.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_line_length:
            current = candidate
            continue
        if current:
            lines.append(current)
            if len(lines) >= max_lines:
                return lines
        current = word[:max_line_length]

    if current and len(lines) < max_lines:
        lines.append(current)
    return lines


# ----------------------
# Geometry
# ----------------------
def bubble_outline(bubble_height: float) -> str:
    """Rounded rectangle with the arrow notch, as one path."""
    bx, by = BUBBLE_X, BUBBLE_Y
    bw, c = BUBBLE_WIDTH, BUBBLE_CORNER
    ay = by + bubble_height
    cx = CENTER_X
    return " ".join([
        f"M {bx + c} {by}",
        f"H {bx + bw - c}",
        f"Q {bx + bw} {by} {bx + bw} {by + c}",
        f"V {ay - c}",
        f"Q {bx + bw} {ay} {bx + bw - c} {ay}",
        f"H {cx + ARROW_HALF_WIDTH:g}",
        f"L {cx:g} {ay + ARROW_DEPTH}",
        f"L {cx - ARROW_HALF_WIDTH:g} {ay}",
        f"H {bx + c}",
        f"Q {bx} {ay} {bx} {ay - c}",
        f"V {by + c}",
        f"Q {bx} {by} {bx + c} {by}",
        "Z",
    ])


def _place_sigil(sigil, top: float, dwg: svgwrite.Drawing):
    x = CENTER_X - SIGIL_DISPLAY_SIZE / 2
    if isinstance(sigil, SigilParams):
        return build_sigil_element(sigil, insert=(x, top), display_size=SIGIL_DISPLAY_SIZE, dwg=dwg)
    # Pre-built fragment: placed on a copy, the caller's element is untouched
    placed = copy.copy(sigil)
    placed.attribs = dict(sigil.attribs)
    placed["x"] = x
    placed["y"] = top
    placed["width"] = SIGIL_DISPLAY_SIZE
    placed["height"] = SIGIL_DISPLAY_SIZE
    return placed


def compose_bubble(lines: List[str], rarity_code: str, ornament_params: OrnamentParams,
                   sigil: Optional[Union[SigilParams, svgwrite.container.SVG]] = None) -> str:
    """
    Full bubble document. The canvas height follows the number of lines and
    grows by one row when a sigil is inlined under the rarity code.
    """
    safe_lines = [strip_xml_illegal(line) for line in lines] if lines else [EMPTY_MESSAGE_PLACEHOLDER]

    bubble_height = max(BUBBLE_MIN_HEIGHT, len(safe_lines) * LINE_HEIGHT + 80)
    center_y = BUBBLE_Y + bubble_height / 2
    start_y = center_y - (len(safe_lines) - 1) * LINE_HEIGHT / 2

    arrow_y = BUBBLE_Y + bubble_height
    ornament_baseline = arrow_y + ORNAMENT_GAP
    svg_height = ornament_baseline + ORNAMENT_ROW_HEIGHT
    sigil_top = ornament_baseline + SIGIL_GAP
    if sigil is not None:
        svg_height = sigil_top + SIGIL_DISPLAY_SIZE + SIGIL_BOTTOM_MARGIN

    dwg = new_drawing(CANVAS_WIDTH, svg_height)
    dwg.add(dwg.rect(insert=(0, 0), size=("100%", "100%"), fill=BACKGROUND))
    dwg.add(dwg.path(d=bubble_outline(bubble_height), fill=BUBBLE_FILL, stroke=ACCENT,
                     stroke_width=4, stroke_linejoin="round"))

    for idx, line in enumerate(safe_lines):
        dwg.add(dwg.text(line, insert=("50%", start_y + idx * LINE_HEIGHT), text_anchor="middle",
                         fill=TEXT_COLOR, font_size=22, font_family=FONT_FAMILY))

    paths = build_ornament_paths(ornament_params, CENTER_X, ornament_baseline)
    row = dwg.g(stroke=ACCENT, stroke_width=f"{ornament_params.stroke_width:.2f}", fill="none",
                stroke_linecap="round", stroke_linejoin="round")
    for d in paths.left + paths.right:
        row.add(dwg.path(d=d))
    row.add(dwg.text(rarity_code, insert=(CENTER_X, ornament_baseline), text_anchor="middle",
                     dominant_baseline="middle", fill=ACCENT, stroke="none", font_size=18,
                     font_family=FONT_FAMILY))
    dwg.add(row)

    if sigil is not None:
        dwg.add(_place_sigil(sigil, sigil_top, dwg))

    return dwg.tostring()


# ----------------------
# Data URIs
# ----------------------
def to_embeddable_uri(document: str) -> str:
    """Percent-encode an SVG (quotes included) into an image/svg+xml data URI."""
    encoded = quote(document, safe="-_.!~*()")
    return DATA_URI_PREFIX + encoded


def from_embeddable_uri(uri: str) -> Optional[str]:
    """Back from a data URI to SVG markup; None when it is not an SVG data URI."""
    if uri.startswith(DATA_URI_BASE64_PREFIX):
        try:
            return base64.b64decode(uri[len(DATA_URI_BASE64_PREFIX):]).decode("utf-8")
        except ValueError:
            return None
    if uri.startswith(DATA_URI_PREFIX):
        return unquote(uri[len(DATA_URI_PREFIX):])
    return None
