#!/usr/bin/env python3
"""
Report the dominant colors of a single image.

Prints the ranked colors with their hex, RGB and HSL values and the share of
counted pixels each one covers. Optionally writes a swatch image.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from PIL import Image, ImageDraw

from extract_colors import (
    DEFAULT_IGNORE, DEFAULT_SCALE, ColorCount, ExtractOptions, extract_color_counts,
)


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def summarize(counts: list[ColorCount], top: int) -> list[dict]:
    """Top `top` colors as plain dicts with their pixel share."""
    total = sum(entry.count for entry in counts)
    rows = []
    for entry in counts[:top]:
        row = entry.color.to_dict()
        row['count'] = entry.count
        row['share'] = entry.count / total
        rows.append(row)
    return rows


def render(rows: list[dict]) -> str:
    """Plain text table of summarized colors."""
    if not rows:
        return "No countable colors (every pixel is transparent or ignored)."

    lines = [f"{'#':>3}  {'Hex':<10} {'RGB':<16} {'HSL':<14} {'Pixels':>10} {'Share':>7}"]
    for i, row in enumerate(rows, 1):
        rgb = '({}, {}, {})'.format(*row['rgb'])
        hsl = '({}, {}, {})'.format(*row['hsl'])
        lines.append(
            f"{i:>3}  {row['hex']:<10} {rgb:<16} {hsl:<14} "
            f"{row['count']:>10,} {row['share']:>6.1%}"
        )
    return '\n'.join(lines)


def visualize_colors(rows: list[dict], output_path: str) -> None:
    """
    Create a swatch image of the ranked colors with percentages.

    Args:
        rows: Output of summarize()
        output_path: Path to save the output image
    """
    swatch_size = 80
    padding = 10
    text_height = 25
    cols = max(1, min(len(rows), 6))
    rows_count = max(1, (len(rows) + cols - 1) // cols)

    img_width = cols * (swatch_size + padding) + padding
    img_height = rows_count * (swatch_size + text_height + padding) + padding

    img = Image.new('RGB', (img_width, img_height), (240, 240, 240))
    draw = ImageDraw.Draw(img)

    for i, row in enumerate(rows):
        x = padding + (i % cols) * (swatch_size + padding)
        y = padding + (i // cols) * (swatch_size + text_height + padding)

        draw.rectangle([x, y, x + swatch_size, y + swatch_size], fill=tuple(row['rgb']))

        text = f"{row['share'] * 100:.1f}%"
        bbox = draw.textbbox((0, 0), text)
        text_width = bbox[2] - bbox[0]
        text_x = x + (swatch_size - text_width) // 2
        draw.text((text_x, y + swatch_size + 4), text, fill=(0, 0, 0))

    img.save(output_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Rank the colors of an image by pixel count.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    parser.add_argument(
        '--scale', '-s',
        type=float,
        default=DEFAULT_SCALE,
        help=f'Resolution factor in (0, 1]; lower is faster (default {DEFAULT_SCALE})'
    )
    parser.add_argument(
        '--ignore',
        action='append',
        metavar='HEX',
        help='Hex color to skip; repeatable. Replaces the default (black and white)'
    )
    parser.add_argument(
        '--top', '-n',
        type=positive_int,
        default=10,
        help='Number of colors to report (default 10)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the report as JSON'
    )
    parser.add_argument(
        '--swatch',
        metavar='PATH',
        help='Write a swatch PNG of the reported colors'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log debug output'
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    image_path = Path(args.input)
    ignore = DEFAULT_IGNORE if args.ignore is None else args.ignore
    options = ExtractOptions(ignore=ignore, scale=args.scale)

    try:
        counts = extract_color_counts(image_path, options)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error analyzing image: {e}", file=sys.stderr)
        return 1

    rows = summarize(counts, args.top)

    if args.json:
        print(json.dumps({'image': image_path.name, 'colors': rows}, indent=2))
    else:
        print(render(rows))

    if args.swatch:
        try:
            visualize_colors(rows, args.swatch)
        except OSError as e:
            print(f"Error writing swatch: {e}", file=sys.stderr)
            return 1
        if not args.json:
            print(f"\nWrote: {args.swatch}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
