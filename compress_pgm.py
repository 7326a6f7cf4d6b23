"""
Huffman compression for 8-bit grayscale PGM images

How to run:
  python compress_pgm.py roundtrip image.pgm
  python compress_pgm.py roundtrip image.pgm --output image.huff --decompressed out.pgm
  python compress_pgm.py compress image.pgm --standalone
  python compress_pgm.py decompress image.pgm.huff restored.pgm --standalone
  python compress_pgm.py decompress image.pgm.huff restored.pgm --reference image.pgm

Notes:
  Plain containers do not carry the code table, so decompressing one needs the
  original image (--reference) to rebuild the same tree. --standalone stores the
  frequency table in the container instead; pass it again when decompressing.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from codec import compression_stats, decode_image, encode_image, tree_for
from container import read_container, write_container
from errors import HuffmanError
from pgm import read_pgm, write_pgm


def default_output(input_path: str) -> str:
    return input_path + ".huff"


def default_decompressed(input_path: str) -> str:
    p = Path(input_path)
    return str(p.with_name(f"decompressed_{p.name}"))


def print_sizes(original_path: str, compressed_path: str) -> None:
    stats = compression_stats(Path(original_path).stat().st_size, Path(compressed_path).stat().st_size)
    print(f"Original size: {stats.original_size} bytes")
    print(f"Compressed size: {stats.compressed_size} bytes")
    print(f"Compression ratio: {stats.ratio:.4f}")


def cmd_compress(args: argparse.Namespace) -> int:
    image = read_pgm(args.input)
    output = args.output or default_output(args.input)
    blob = encode_image(image.samples, image.width, image.height, standalone=args.standalone)
    write_container(output, blob)
    print(f"Compressed {args.input} ({image.width}x{image.height}) -> {output}")
    print_sizes(args.input, output)
    return 0


def cmd_decompress(args: argparse.Namespace) -> int:
    blob = read_container(args.input)
    tree = None
    if not args.standalone:
        if not args.reference:
            print("error: plain containers have no code table, pass --reference ORIGINAL.pgm or --standalone",
                  file=sys.stderr)
            return 2
        tree = tree_for(read_pgm(args.reference).samples)

    samples, width, height = decode_image(blob, tree, standalone=args.standalone)
    write_pgm(args.output, samples, width, height)
    print(f"Decompressed {args.input} -> {args.output} ({width}x{height})")
    return 0


def cmd_roundtrip(args: argparse.Namespace) -> int:
    image = read_pgm(args.input)
    output = args.output or default_output(args.input)
    decompressed = args.decompressed or default_decompressed(args.input)

    write_container(output, encode_image(image.samples, image.width, image.height, standalone=args.standalone))

    blob = read_container(output)
    tree = None if args.standalone else tree_for(image.samples)
    samples, width, height = decode_image(blob, tree, standalone=args.standalone)
    write_pgm(decompressed, samples, width, height, image.maxval)

    print_sizes(args.input, output)
    if samples == image.samples:
        print(f"Decompressed image {decompressed} is identical to the original")
        return 0
    print(f"Decompressed image {decompressed} differs from the original", file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="compress-pgm", description="Lossless Huffman compression for P5 PGM images")
    sub = ap.add_subparsers(dest="command", required=True)

    rt = sub.add_parser("roundtrip", help="Compress, decompress again and compare with the original")
    rt.add_argument("input", help="P5 PGM image")
    rt.add_argument("--output", type=str, default=None, help="Compressed file (default: INPUT.huff)")
    rt.add_argument("--decompressed", type=str, default=None, help="Reconstructed image (default: decompressed_INPUT)")
    rt.add_argument("--standalone", action="store_true", help="Embed the frequency table in the container")
    rt.set_defaults(func=cmd_roundtrip)

    c = sub.add_parser("compress", help="Compress a PGM image")
    c.add_argument("input", help="P5 PGM image")
    c.add_argument("--output", type=str, default=None, help="Compressed file (default: INPUT.huff)")
    c.add_argument("--standalone", action="store_true", help="Embed the frequency table in the container")
    c.set_defaults(func=cmd_compress)

    d = sub.add_parser("decompress", help="Decompress a container back to PGM")
    d.add_argument("input", help="Compressed file")
    d.add_argument("output", help="PGM image to write")
    d.add_argument("--reference", type=str, default=None,
                   help="Original image, required for containers without an embedded table")
    d.add_argument("--standalone", action="store_true", help="Container was written with --standalone")
    d.set_defaults(func=cmd_decompress)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (HuffmanError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
