"""Theme colors and color utilities for the game canvas."""


class GameColors:
    """Dark arcade palette."""

    BACKGROUND = "#1a1a2e"
    PRIMARY = "#0f3460"
    SECONDARY = "#e94560"
    ACCENT = "#16213e"
    LIGHT = "#f1f1f1"
    HIGHLIGHT = "#00adb5"

    TILE_SELECTED = "#e94560"
    TILE_CLEARED = "#00adb5"
    TILE_OPEN = ("#4CAF50", "#5CB85C", "#449D44", "#398439", "#3C763D")

    FALLBACK_BRICK = "#CCCCCC"


def _parse_hex(color: str) -> tuple[int, int, int]:
    value = color.strip()
    if not (value.startswith("#") and len(value) == 7):
        raise ValueError(f"not a #RRGGBB color: {color!r}")
    return int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16)


def _format_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02X}{g:02X}{b:02X}"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    try:
        ar, ag, ab = _parse_hex(a)
        br, bg, bb = _parse_hex(b)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    return _format_hex(
        int(ar + (br - ar) * t),
        int(ag + (bg - ag) * t),
        int(ab + (bb - ab) * t),
    )


def lighten_hex(color: str, percent: float) -> str:
    """Add ``percent`` of full brightness to each channel, capped at 255."""
    try:
        r, g, b = _parse_hex(color)
    except ValueError:
        return color
    amount = round(2.55 * percent)
    return _format_hex(min(255, r + amount), min(255, g + amount), min(255, b + amount))


def darken_hex(color: str, percent: float) -> str:
    """Remove ``percent`` of full brightness from each channel, floored at 0."""
    try:
        r, g, b = _parse_hex(color)
    except ValueError:
        return color
    amount = round(2.55 * percent)
    return _format_hex(max(0, r - amount), max(0, g - amount), max(0, b - amount))
