"""
Command line front end.

How to run:
  hufcomp compress notes.txt          -> notes.txt.huf
  hufcomp decompress notes.txt.huf    -> notes_unc.txt
  hufcomp -v compress notes.txt       (debug logging)
"""
import argparse
import logging
import sys
from typing import List, Optional

from .errors import HufError
from .huffman import compress_file, decompress_file


def _print_compress(stats) -> None:
    print(f"{stats['input']} -> {stats['output']}")
    print(f"  original:   {stats['original_bytes']} bytes")
    print(f"  compressed: {stats['compressed_bytes']} bytes "
          f"({stats['header_bytes']} header, {stats['payload_bits']} payload bits)")
    ratio = stats['compression_ratio']
    print("  ratio:      " + ("N/A (empty file)" if ratio is None else f"{ratio:.4f}"))
    print(f"  symbols:    {stats['unique_symbols']}")
    print(f"  time:       {stats['time_total']:.4f}s")


def _print_decompress(stats) -> None:
    print(f"{stats['input_huf']} -> {stats['output']}")
    print(f"  compressed: {stats['compressed_size']} bytes")
    print(f"  restored:   {stats['restored_size']} bytes")
    print(f"  time:       {stats['time_total']:.4f}s")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="hufcomp", description="Huffman file compressor")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)
    c = sub.add_parser("compress", help="write PATH.huf")
    c.add_argument("path")
    c.add_argument("--bits", action="store_true", help="also print the encoded bit-string")
    d = sub.add_parser("decompress", help="PATH must end in .txt.huf; writes <stem>_unc.txt")
    d.add_argument("path")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        if args.command == "compress":
            bits, stats = compress_file(args.path)
            _print_compress(stats)
            if args.bits:
                print(bits)
        else:
            _, stats = decompress_file(args.path)
            _print_decompress(stats)
    except (HufError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
