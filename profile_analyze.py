#!/usr/bin/env python3
"""Profile color extraction across scales to weigh speed against accuracy."""

import argparse
import cProfile
import pstats
import io
import sys
import time
from pathlib import Path

from extract_colors import DEFAULT_IGNORE, count_colors
from rasterize import rasterize
from batch_analyze import find_images

DEFAULT_SCALES = (1.0, 0.5, 0.3, 0.1)
STATS_LIMIT = 30


def profile_image(image_path: Path, scales=DEFAULT_SCALES, verbose: bool = True,
                  profile: bool = False) -> list[dict]:
    """
    Time rasterize and aggregate for one image at each scale.

    With `profile`, count_colors also runs under cProfile and each run keeps
    the cumulative stats report under 'stats'.
    """

    if verbose:
        print(f"\n{'='*60}")
        print(f"Profiling: {image_path.name}")
        print(f"{'='*60}")

    runs = []
    for scale in scales:
        start = time.perf_counter()
        pixels = rasterize(image_path, scale)
        rasterize_time = time.perf_counter() - start

        profiler = cProfile.Profile() if profile else None
        start = time.perf_counter()
        if profiler:
            profiler.enable()
        counts = count_colors(pixels, DEFAULT_IGNORE)
        if profiler:
            profiler.disable()
        aggregate_time = time.perf_counter() - start

        run = {
            'scale': scale,
            'pixels': len(pixels),
            'colors': len(counts),
            'dominant': counts[0].color.hex if counts else None,
            'rasterize': rasterize_time,
            'aggregate': aggregate_time,
        }
        if profiler:
            stream = io.StringIO()
            pstats.Stats(profiler, stream=stream).sort_stats('cumulative').print_stats(STATS_LIMIT)
            run['stats'] = stream.getvalue()
        runs.append(run)

    # Compare against the largest scale
    reference = max(runs, key=lambda r: r['scale'])['dominant']
    for run in runs:
        run['matches'] = run['dominant'] == reference

    if verbose:
        print(f"{'Scale':>6} {'Pixels':>10} {'Colors':>8} {'Dominant':>10} "
              f"{'Raster':>8} {'Count':>8}  Match")
        for run in runs:
            print(f"{run['scale']:>6.2f} {run['pixels']:>10,} {run['colors']:>8,} "
                  f"{run['dominant'] or '-':>10} {run['rasterize']:>7.3f}s "
                  f"{run['aggregate']:>7.3f}s  {'yes' if run['matches'] else 'NO'}")
        for run in runs:
            if 'stats' in run:
                print(f"\ncount_colors() at scale {run['scale']}:")
                print(run['stats'])

    return runs


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--input', '-i', required=True, help='Directory of images')
    parser.add_argument('--ext', action='append', help='Image extension; repeatable (default .png)')
    parser.add_argument('--scales', type=float, nargs='+', default=list(DEFAULT_SCALES))
    parser.add_argument('--detailed', action='store_true', help='cProfile count_colors on the first image')
    args = parser.parse_args(argv)

    images_dir = Path(args.input)
    if not images_dir.is_dir():
        print(f"Error: Input directory not found: {images_dir}", file=sys.stderr)
        return 2

    images = find_images(images_dir, args.ext or ('.png',))
    if not images:
        print(f"No images found in {images_dir}", file=sys.stderr)
        return 1

    print(f"Found {len(images)} test images")

    all_runs = []
    for i, img in enumerate(images):
        try:
            runs = profile_image(img, args.scales, profile=args.detailed and i == 0)
            all_runs.append((img.name, runs))
        except (OSError, ValueError) as e:
            print(f"Error profiling {img.name}: {e}", file=sys.stderr)

    # Summary
    print(f"\n{'='*60}")
    print("SUMMARY")
    print(f"{'='*60}")
    print(f"{'Scale':>6} {'Total time':>11} {'Dominant matches':>18}")
    print("-" * 60)
    for scale in args.scales:
        total = 0.0
        matches = 0
        for _, runs in all_runs:
            for run in runs:
                if run['scale'] == scale:
                    total += run['rasterize'] + run['aggregate']
                    matches += run['matches']
        print(f"{scale:>6.2f} {total:>10.3f}s {matches:>10}/{len(all_runs)}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
