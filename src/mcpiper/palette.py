"""Color scheme for rendered trace messages.

The scheme maps semantic roles (operation delimiters, header text, attribute
labels/values, flag descriptions, match highlight, JSON tokens) to display
colors. It is resolved once at startup and shared read-only by every render.

Two sources:
  - default_scheme(): fixed 8/16-color ANSI mapping, safe on any terminal.
  - scheme_from_seed_hue(): 24-bit colors spaced by the golden angle in HSL
    space from a configurable seed hue, so roles stay maximally distinct.
"""

import colorsys
from dataclasses import dataclass

from mcpiper import colors

GOLDEN_ANGLE = 137.508

DEFAULT_SEED_HUE = 190.0

# Semantic target hues (degrees) for roles whose meaning relies on hue
_SEMANTIC_TARGETS = {
    "match": 0.0,  # red
    "data_value": 50.0,  # yellow-ish
    "msg_attr": 300.0,  # magenta-ish
}


@dataclass(frozen=True)
class ColorScheme:
    """Role → color mapping. Colors are rich color/style strings."""

    data_op: str | None = colors.DARK_GRAY
    header: str | None = colors.WHITE
    msg_attr: str | None = colors.MAGENTA
    data_value: str | None = colors.DARK_YELLOW
    attr: str | None = colors.DARK_GRAY
    match: str | None = colors.MATCH
    # Value formatter roles
    json_key: str | None = colors.BLUE
    json_string: str | None = colors.GREEN
    json_number: str | None = colors.CYAN
    json_bool: str | None = colors.YELLOW
    json_null: str | None = colors.DARK_GRAY
    json_punctuation: str | None = colors.DEFAULT


def default_scheme() -> ColorScheme:
    """The fixed ANSI scheme used when no seed hue is configured."""
    return ColorScheme()


def _hsl_to_hex(h: float, s: float, lightness: float) -> str:
    """Convert HSL (h in 0-360, s/lightness in 0-1) to #RRGGBB hex string."""
    # colorsys uses h in 0-1
    r, g, b = colorsys.hls_to_rgb(h / 360.0, lightness, s)
    return "#{:02X}{:02X}{:02X}".format(
        int(round(r * 255)),
        int(round(g * 255)),
        int(round(b * 255)),
    )


def _angular_distance(a: float, b: float) -> float:
    """Shortest angular distance between two hues in degrees."""
    d = abs(a - b) % 360
    return min(d, 360 - d)


class Palette:
    """Color palette with golden-angle spacing from a seed hue.

    Args:
        seed_hue: Starting hue in degrees (0-360). Default 190 (cyan).
        count: Number of colors to generate. Default 12.
    """

    def __init__(self, seed_hue: float = DEFAULT_SEED_HUE, count: int = 12):
        self._hues = [(seed_hue + i * GOLDEN_ANGLE) % 360 for i in range(count)]
        self._fg_colors = [_hsl_to_hex(hue, 0.75, 0.70) for hue in self._hues]

        # Semantic roles take the closest free hue; first come, first served
        taken: set[int] = set()
        self._semantic_indices: dict[str, int] = {}
        for role, target_hue in _SEMANTIC_TARGETS.items():
            best_idx = 0
            best_dist = 360.0
            for i, hue in enumerate(self._hues):
                if i in taken:
                    continue
                dist = _angular_distance(hue, target_hue)
                if dist < best_dist:
                    best_dist = dist
                    best_idx = i
            taken.add(best_idx)
            self._semantic_indices[role] = best_idx
        self._free = [i for i in range(count) if i not in taken]

    def semantic(self, role: str) -> str:
        return self._fg_colors[self._semantic_indices[role]]

    def free(self, n: int) -> str:
        """The n-th palette color not claimed by a semantic role."""
        return self._fg_colors[self._free[n % len(self._free)]]


def scheme_from_seed_hue(seed_hue: float) -> ColorScheme:
    """Build a 24-bit scheme from a seed hue."""
    palette = Palette(seed_hue=seed_hue)
    return ColorScheme(
        data_op=colors.DARK_GRAY,
        header=colors.WHITE,
        msg_attr=palette.semantic("msg_attr"),
        data_value=palette.semantic("data_value"),
        attr=colors.DARK_GRAY,
        match="bold " + palette.semantic("match"),
        json_key=palette.free(0),
        json_string=palette.free(1),
        json_number=palette.free(2),
        json_bool=palette.free(3),
        json_null=colors.DARK_GRAY,
        json_punctuation=colors.DEFAULT,
    )


def resolve_scheme(seed_hue: float | None = None) -> ColorScheme:
    """Resolve the startup scheme: seeded 24-bit when a hue is given, else default."""
    if seed_hue is None:
        return default_scheme()
    return scheme_from_seed_hue(seed_hue % 360)
