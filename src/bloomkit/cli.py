"""bloomkit CLI entry point.

Usage: bloomkit probe --bits 128 --hashes 3 --insert apple banana --query apple fig
"""
import argparse
import logging
import sys

from bloomkit.bits import BitLayout
from bloomkit.errors import BloomFilterError
from bloomkit.filter import BloomFilter


def _add_probe_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "probe",
        help="Build a filter, insert keys, and query it.",
    )
    p.add_argument(
        "--bits", type=int, required=True,
        help="Filter size in bits (1..65535)",
    )
    p.add_argument(
        "--hashes", type=int, required=True,
        help="Number of hash rounds (1..255)",
    )
    p.add_argument(
        "--layout", choices=[layout.value for layout in BitLayout],
        default=BitLayout.REFERENCE.value,
        help="Bit addressing convention (default: reference)",
    )
    p.add_argument(
        "--insert", nargs="*", default=[], metavar="KEY",
        help="Keys to insert.",
    )
    p.add_argument(
        "--query", nargs="*", default=[], metavar="KEY",
        help="Keys to look up after inserting.",
    )
    p.add_argument(
        "--int", dest="as_int", action="store_true",
        help="Treat keys as integers instead of strings.",
    )


def _parse_keys(raw: list[str], as_int: bool) -> list:
    if not as_int:
        return list(raw)
    try:
        return [int(k) for k in raw]
    except ValueError as exc:
        raise SystemExit(f"error: --int given but {exc}") from None


def _run_probe(args: argparse.Namespace) -> None:
    bf = BloomFilter(args.bits, args.hashes, BitLayout(args.layout))
    bf.update(_parse_keys(args.insert, args.as_int))

    for raw, key in zip(args.query, _parse_keys(args.query, args.as_int)):
        print(f"{raw}: {'maybe' if key in bf else 'no'}")

    print(f"set bits: {bf.set_bit_count()} / {bf.bit_length}")
    print(f"estimated items: {bf.estimated_cardinality()}")
    print(f"false positive rate: {bf.false_positive_rate():.6f}")
    print(f"raw bits: {bytes(bf.raw_bits()).hex()}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="bloomkit",
        description="Fixed-size Bloom filters with set algebra and estimates.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log debug output to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    _add_probe_parser(subparsers)

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        if args.command == "probe":
            _run_probe(args)
    except BloomFilterError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(2)
