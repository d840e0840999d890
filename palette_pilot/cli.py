"""Command-line interface for palette-pilot."""

import argparse
from pathlib import Path

from .core import DEFAULT_COLORS, DEFAULT_QUALITY, ImageLoadError, extract_palette
from .export import FORMATS, render
from .store import PaletteStore

DEFAULT_STORE = Path.home() / ".palette-pilot" / "palettes.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract a color palette from an image using median-cut quantization"
    )
    parser.add_argument("input", help="Input image path")
    parser.add_argument("-n", "--colors", type=int, default=DEFAULT_COLORS,
                        help=f"Number of palette colors, 2-256 (default: {DEFAULT_COLORS})")
    parser.add_argument("--quality", type=int, default=DEFAULT_QUALITY,
                        help=f"Sample every Nth pixel; lower is slower but more accurate (default: {DEFAULT_QUALITY})")
    parser.add_argument("-f", "--format", choices=sorted(FORMATS), default="hex", help="Export format (default: hex)")
    parser.add_argument("-o", "--output", help="Output path, '-' for stdout (default: input_palette.<ext>)")
    parser.add_argument("--save", metavar="NAME", help="Also save the palette under this name")
    parser.add_argument("--store", default=str(DEFAULT_STORE), help=f"Saved palettes file (default: {DEFAULT_STORE})")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress output")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.quality < 1:
        parser.error("--quality must be at least 1")

    to_stdout = args.output == "-"
    verbose = not args.quiet and not to_stdout

    # Default output path
    if args.output is None:
        input_path = Path(args.input)
        suffix = Path(FORMATS[args.format][1]).suffix
        args.output = input_path.parent / f"{input_path.stem}_palette{suffix}"

    try:
        palette = extract_palette(args.input, colors=args.colors, quality=args.quality, verbose=verbose)
    except ImageLoadError as e:
        parser.exit(1, f"error: {e}\n")

    text = render(palette, args.format)
    if to_stdout:
        print(text)
    else:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        if verbose:
            print(f"Saved to: {args.output}")

    if args.save is not None:
        saved = PaletteStore(args.store).save(palette, args.save)
        if verbose:
            print(f"Stored as '{saved.name}' ({saved.id}) in {args.store}")


if __name__ == "__main__":
    main()
