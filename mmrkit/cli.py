from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Optional, Sequence

from . import navigation
from .config import MMRConfig
from .mmr import MerkleMountainRange
from .observability import setup_logging
from .store import MemoryStore


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mmrkit",
        description="Merkle Mountain Range position arithmetic",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Config file (JSON, TOML or YAML)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("peaks", help="Peak positions for a MMR size")
    p.add_argument("size", type=int)

    p = subparsers.add_parser("height", help="Height of the node at a position")
    p.add_argument("pos", type=int)

    p = subparsers.add_parser("family", help="Parent and sibling of a position")
    p.add_argument("pos", type=int)

    p = subparsers.add_parser("path", help="Family path from a position up to end_pos")
    p.add_argument("pos", type=int)
    p.add_argument("end_pos", type=int)

    p = subparsers.add_parser("root", help="Root of a fresh in-memory MMR over UTF-8 payloads")
    p.add_argument("payloads", nargs="*")

    return parser


def _emit(result: Any) -> None:
    sys.stdout.write(json.dumps(result) + "\n")


def _run_root(payloads: Sequence[str], config: MMRConfig) -> dict:
    # always a fresh tree; a configured file backend is never read or written
    mmr = MerkleMountainRange(MemoryStore(retain_payloads=config.store.retain_payloads))
    for payload in payloads:
        mmr.append(payload.encode("utf-8"))
    return {
        "size": mmr.size,
        "leaves": mmr.leaf_count,
        "peaks": mmr.peaks(),
        "root": mmr.root().hex(),
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = MMRConfig.load(args.config)
    setup_logging(config.logging)

    if args.command == "peaks":
        _emit(navigation.peaks(args.size))
    elif args.command == "height":
        _emit(navigation.node_height(args.pos))
    elif args.command == "family":
        _emit(list(navigation.family(args.pos)))
    elif args.command == "path":
        _emit([list(pair) for pair in navigation.family_path(args.pos, args.end_pos)])
    elif args.command == "root":
        _emit(_run_root(args.payloads, config))
    else:
        raise ValueError(f"Unknown command: {args.command}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
