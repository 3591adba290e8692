#!/usr/bin/env python3
"""Generate the recompiler's opcode dispatch tables from the x86 encoding table."""

from __future__ import annotations

import argparse
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from x86jitgen import (
    CTextRenderer,
    GenerationError,
    TableKind,
    UsageError,
    build_tables,
    finalize_table,
    load_encoding_table,
    serialize_node,
)


DEFAULT_OUTPUT_DIR = Path(__file__).resolve().parent / "build"

logger = logging.getLogger("gen_jit")


@dataclass(frozen=True)
class GeneratorOptions:
    tables: Tuple[TableKind, ...]
    output_dir: Path
    encodings: Optional[Path] = None
    ir_json: bool = False


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--table",
        choices=[kind.value for kind in TableKind],
        help="Generate a single table",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Generate every table",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help="Directory receiving the generated <table>.c files",
    )
    parser.add_argument(
        "--encodings",
        type=Path,
        default=None,
        help="JSON encoding table to use instead of the built-in one",
    )
    parser.add_argument(
        "--ir-json",
        action="store_true",
        help="Also write the statement tree of each table as <table>.json",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    return parser.parse_args(argv)


def resolve_options(args: argparse.Namespace) -> GeneratorOptions:
    if args.all:
        tables = tuple(TableKind)
    elif args.table:
        tables = (TableKind(args.table),)
    else:
        raise UsageError(
            "pass --table [jit|jit0f_16|jit0f_32] or --all to pick which tables to generate"
        )
    return GeneratorOptions(
        tables=tables,
        output_dir=args.output_dir,
        encodings=args.encodings,
        ir_json=args.ir_json,
    )


def generate(options: GeneratorOptions) -> None:
    encodings = load_encoding_table(options.encodings)
    tables = build_tables(encodings, options.tables)

    renderer = CTextRenderer()
    rendered = {kind: renderer.render(table) for kind, table in tables.items()}

    for kind, table in tables.items():
        result = finalize_table(options.output_dir, kind.value, rendered[kind])
        status = "written to" if result.written else "unchanged at"
        print(f"{kind.value} table {status} {result.path}")
        if options.ir_json:
            payload = json.dumps(serialize_node(table), indent=1) + "\n"
            finalize_table(options.output_dir, kind.value, payload, suffix=".json")


def main(argv: Optional[Sequence[str]] = None) -> None:
    start_time = time.perf_counter()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = resolve_options(args)
    except UsageError as exc:
        logger.error("%s", exc)
        raise SystemExit(2) from None

    try:
        generate(options)
    except GenerationError as exc:
        logger.error("generation failed: %s", exc)
        raise SystemExit(1) from None

    total_time = time.perf_counter() - start_time
    print(f"total execution time: {total_time:.2f}s")


if __name__ == "__main__":
    main()
