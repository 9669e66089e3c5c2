#!/usr/bin/env python3
"""
CLI tool to encode a numeric sequence with the Golden Ratio Fractal Codec.

Usage:
    python quick_codec.py series.txt
    python quick_codec.py data.bin --save encoded.json --verbose
    python quick_codec.py --generate 500 --source fractal --seed 7
"""

import argparse
import json
import logging
import os
import sys
import numpy as np
from golden_fractal_codec import (
    GoldenRatioFractalCodec, CodecConfig, InvalidSequenceError, PHI_INV
)


def load_sequence(filename):
    """Numbers separated by whitespace or commas; .bin files are read as bytes."""
    if filename.endswith(".bin"):
        with open(filename, "rb") as f:
            return np.frombuffer(f.read(), dtype=np.uint8).astype(float)
    with open(filename) as f:
        text = f.read().replace(",", " ")
    try:
        return np.array([float(tok) for tok in text.split()])
    except ValueError as e:
        raise InvalidSequenceError(f"'{filename}' is not a numeric sequence: {e}") from e


def configure_logging(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Encode a numeric sequence with golden-ratio self-similarity."
    )
    parser.add_argument("filename", nargs="?",
                        help="Text file of numbers, or a .bin file of bytes")
    parser.add_argument("--generate", type=int, metavar="N",
                        help="Encode N generated samples instead of a file")
    parser.add_argument("--source", default="fractal",
                        help="Generator for --generate (default: fractal)")
    parser.add_argument("--seed", type=int, default=42,
                        help="Seed for --generate (default: 42)")
    parser.add_argument("--save", metavar="OUT",
                        help="Write the encode result as JSON")
    parser.add_argument("--ratio", type=float, default=PHI_INV,
                        help="Scale ratio (default: 1/phi)")
    parser.add_argument("--threshold", type=float, default=0.01,
                        help="Correlation threshold (default: 0.01)")
    parser.add_argument("--max-scales", type=int, default=8,
                        help="Maximum scale index (default: 8)")
    parser.add_argument("--min-segment-size", type=int, default=4,
                        help="Minimum segment size (default: 4)")
    parser.add_argument("--verbose", action="store_true",
                        help="Debug logging and the full scale ranking")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    if args.generate is None and args.filename is None:
        parser.error("give a filename or --generate N")

    try:
        config = CodecConfig(ratio=args.ratio,
                             correlation_threshold=args.threshold,
                             max_scales=args.max_scales,
                             min_segment_size=args.min_segment_size)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.generate is not None:
        from tools.sources import get_source, seed_adapter
        try:
            gen = seed_adapter(get_source(args.source).gen_fn)
        except KeyError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        data = gen(args.seed, args.generate)
        label = f"{args.source} (seed {args.seed})"
    else:
        if not os.path.exists(args.filename):
            print(f"Error: File '{args.filename}' not found.", file=sys.stderr)
            return 1
        try:
            data = load_sequence(args.filename)
        except InvalidSequenceError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        label = args.filename

    codec = GoldenRatioFractalCodec(config)
    print(f"Encoding {label} ({len(data)} samples)...")

    try:
        result = codec.encode(data)
    except InvalidSequenceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print()
        print(f"  {'#':<4} {'Scale':>5} {'Size':>6} {'Clusters':>9} "
              f"{'Matches':>8} {'Ratio':>8}")
        print(f"  {'─'*4} {'─'*5} {'─'*6} {'─'*9} {'─'*8} {'─'*8}")
        for i, r in enumerate(result.ranking):
            print(f"  {i + 1:<4} {r.scale:>5} {r.segment_size:>6} "
                  f"{len(r.clusters):>9} {r.n_matches:>8} "
                  f"{r.compression_ratio:>7.1%}")

    print()
    print(result.summary())

    if args.save:
        with open(args.save, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        print(f"\nSaved: {args.save}")

    if not result.success:
        return 1

    print()
    print(codec.analyze(data, result).summary())
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
