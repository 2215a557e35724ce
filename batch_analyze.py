#!/usr/bin/env python3
"""Batch extract dominant colors and write a filename -> hex JSON mapping."""

import argparse
import json
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional

from extract_colors import DEFAULT_IGNORE, DEFAULT_SCALE, ExtractOptions, extract_colors


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
IMAGE_EXTENSIONS = ('.png',)
OUTPUT_FILE = 'bg-colors.json'


def find_images(directory: Path, extensions=IMAGE_EXTENSIONS) -> list[Path]:
    """Find image files directly inside directory, matching extensions case-insensitively."""
    wanted = {ext.lower() if ext.startswith('.') else f'.{ext.lower()}' for ext in extensions}
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in wanted
    )


def extract_dominant(image_path: Path, options: ExtractOptions) -> tuple[Optional[str], float]:
    """Dominant hex of one image (None if nothing was counted) and seconds taken."""
    start = time.perf_counter()
    colors = extract_colors(image_path, options)
    elapsed = time.perf_counter() - start
    return (colors[0].hex if colors else None), elapsed


def run_batch(images: list[Path], options: ExtractOptions, workers: int = 1) -> tuple[dict, list]:
    """
    Extract the dominant color of every image.

    A failing image is reported and skipped; the rest still run.

    Returns:
        (mapping of filename -> hex or None, list of (filename, error message))
    """
    total = len(images)
    results = {}
    failed = []

    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        futures = {pool.submit(extract_dominant, path, options): path for path in images}
        for i, future in enumerate(as_completed(futures), 1):
            path = futures[future]
            try:
                hex_value, elapsed = future.result()
            except Exception as e:
                error_msg = f"{type(e).__name__}: {e}"
                print(f"[{i}/{total}] {path.name} → ERROR: {error_msg}", file=sys.stderr)
                failed.append((path.name, error_msg))
                continue

            results[path.name] = hex_value
            print(f"[{i}/{total}] {path.name} → {hex_value or 'no colors'} ({elapsed:.2f}s)")

    return dict(sorted(results.items())), failed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Extract the dominant color of every image in a directory.'
    )
    parser.add_argument(
        '--root-dir', '--rootDir', '-i',
        dest='root_dir',
        required=True,
        help='Directory containing images to analyze'
    )
    parser.add_argument(
        '--output', '-o',
        default=OUTPUT_FILE,
        help=f'JSON file to write (default {OUTPUT_FILE})'
    )
    parser.add_argument(
        '--ext',
        action='append',
        help='Image extension to include; repeatable (default .png)'
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
        '--workers', '-w',
        type=int,
        default=1,
        help='Images processed in parallel (default 1)'
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

    root_dir = Path(args.root_dir).expanduser()
    output_path = Path(args.output)

    if not root_dir.is_dir():
        print(f"Error: Input directory not found: {root_dir}", file=sys.stderr)
        return 2

    images = find_images(root_dir, args.ext or IMAGE_EXTENSIONS)
    if not images:
        print(f"No images found in {root_dir}", file=sys.stderr)
        return 2

    ignore = DEFAULT_IGNORE if args.ignore is None else args.ignore
    options = ExtractOptions(ignore=ignore, scale=args.scale)

    batch_start = time.perf_counter()
    results, failed = run_batch(images, options, workers=args.workers)
    batch_elapsed = time.perf_counter() - batch_start

    try:
        output_path.write_text(json.dumps(results, indent=2) + '\n')
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    # Summary
    print()
    print(f"Extracted colors from {len(results)}/{len(images)} images in {batch_elapsed:.2f}s")
    print(f"Wrote: {output_path}")
    if failed:
        print(f"Failed ({len(failed)}):")
        for name, error in failed:
            print(f"  - {name}: {error}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
