"""Command line interface for tracestack."""

from __future__ import annotations

import argparse
from pathlib import Path

from .export_cmd import run_export
from .inspect_cmd import run_inspect


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tracestack")
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser("inspect", help="Inspect a call trace JSON file")
    inspect_parser.add_argument("trace_file", type=Path, help="Path to call trace JSON file")
    inspect_parser.add_argument("--thread", default=None, help="Thread to show (default: first)")
    inspect_parser.add_argument(
        "--compress",
        action="store_true",
        help="Compress every recursive entry point of the thread before rendering",
    )
    inspect_parser.add_argument(
        "--all",
        dest="show_all",
        action="store_true",
        help="Render collapsed nodes' children too",
    )
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit machine-readable summary JSON instead of text output",
    )
    inspect_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional output file path for --json summary",
    )

    export_parser = subparsers.add_parser(
        "export", help="Export a bounded or compressed subtree as JSON"
    )
    export_parser.add_argument("trace_file", type=Path, help="Path to call trace JSON file")
    export_parser.add_argument("node_id", nargs="?", default=None, help="Root node of the export")
    export_parser.add_argument("--thread", default=None, help="Thread to use (default: first)")
    export_parser.add_argument(
        "--selected",
        action="store_true",
        help="Export the selected regions of the thread instead of one subtree",
    )
    export_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional output file path",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "inspect":
        return run_inspect(
            args.trace_file,
            args.thread,
            compress=args.compress,
            show_all=args.show_all,
            as_json=args.json,
            output_path=args.output,
        )
    if args.command == "export":
        return run_export(
            args.trace_file,
            args.node_id,
            args.thread,
            selected=args.selected,
            output_path=args.output,
        )

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
