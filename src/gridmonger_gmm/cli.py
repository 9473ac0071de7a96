from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .exceptions import GmmError
from .export import export_chunks
from .frames import format_tree
from .parser import GmmParser
from .riff import read_riff

logger = logging.getLogger(__name__)


def _dump_json(data, path: str, indent: int) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)


def cmd_dump(args: argparse.Namespace) -> None:
    payload = read_riff(args.gmm)
    chunks = GmmParser(cast_enums=True).parse(payload)
    if args.tree:
        print(format_tree(chunks), file=sys.stderr)
    data = export_chunks(chunks)
    if args.output:
        _dump_json(data, args.output, args.indent)
        logger.info("wrote %d top-level chunks to %s", len(data), args.output)
    else:
        print(json.dumps(data, indent=args.indent, ensure_ascii=False))


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gmm2json", description="Convert a Gridmonger .gmm map to JSON.")
    p.add_argument("gmm", help="path to the .gmm file")
    p.add_argument("-o", "--output", help="write JSON to this file instead of stdout")
    p.add_argument("--tree", action="store_true", help="print the chunk outline to stderr")
    p.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        cmd_dump(args)
    except GmmError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
