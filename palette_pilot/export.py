"""Text renderings of a palette: JSON, plain hex list and CSS custom properties."""

import json


def to_hex(color: tuple[int, int, int]) -> str:
    """Format an RGB color as #rrggbb."""
    return '#' + ''.join(f'{int(c):02x}' for c in color[:3])


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Parse #rrggbb (leading # optional) into an RGB tuple."""
    hex_color = hex_color.removeprefix('#')
    if len(hex_color) != 6:
        raise ValueError(f"Expected a 6-digit hex color, got {hex_color!r}")
    return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))


def as_json(palette: list[tuple[int, int, int]]) -> str:
    entries = [{"r": r, "g": g, "b": b, "hex": to_hex((r, g, b))} for r, g, b in palette]
    return json.dumps(entries, indent=2)


def as_hex_list(palette: list[tuple[int, int, int]]) -> str:
    return "\n".join(to_hex(c) for c in palette)


def as_css(palette: list[tuple[int, int, int]]) -> str:
    lines = [f"--color-{i}: {to_hex(c)};" for i, c in enumerate(palette, start=1)]
    return ":root {\n" + "\n".join(lines) + "\n}"


# format name -> (renderer, default file name)
FORMATS = {
    "json": (as_json, "palette.json"),
    "hex": (as_hex_list, "palette.txt"),
    "css": (as_css, "palette.css"),
}


def render(palette: list[tuple[int, int, int]], fmt: str) -> str:
    """Render a palette in one of the FORMATS."""
    if fmt not in FORMATS:
        raise ValueError(f"Unknown export format {fmt!r} (expected one of {', '.join(FORMATS)})")
    renderer, _ = FORMATS[fmt]
    return renderer(palette)
