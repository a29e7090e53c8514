"""
Local helper: runs the background removal pipeline on a local image and
writes an RGBA PNG to disk. This bypasses the API and R2 upload layers.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rmbg_service.imaging import encode_png, load_image
from rmbg_service.pipeline import get_remover


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove the background of a local image")
    parser.add_argument("--input", required=True, help="Path to the input image")
    parser.add_argument("--output", required=True, help="Path to write the RGBA PNG")
    parser.add_argument("--verbose", action="store_true", help="Log per-stage details")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    input_path = Path(args.input)
    output_path = Path(args.output)
    image = load_image(input_path)
    png_bytes = encode_png(get_remover().produce_masked_image(image))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(png_bytes)
    print(f"Wrote RGBA output to {output_path}")


if __name__ == "__main__":
    main()
