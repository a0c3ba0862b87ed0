"""
CLI entry point for asset reconciliation.

Usage:
    python -m atlas.asset_match similarity "Mesa de reunião" "MESA REUNIAO"
    python -m atlas.asset_match rank --system sys.csv --registry giap.xlsx --id a1
    python -m atlas.asset_match match --system sys.csv --pasted rows.tsv --unit "Escola Central"
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import load_config, DEFAULT_CONFIG_PATH
from .adapters import (
    FileRecordAdapter,
    load_registry_records,
    parse_pasted_rows,
    parse_system_row,
)
from .ranker import rank, top_score
from .batch import match_batch
from .similarity import similarity
from .report import format_console, format_candidates, export_csv


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asset_match",
        description="Asset reconciliation - match system inventory against the registry",
    )
    parser.add_argument(
        "--config",
        default=None,
        metavar="FILE",
        help="Reconcile config file (default: module's reconcile_config.json)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    sim = commands.add_parser("similarity", help="Score two descriptions")
    sim.add_argument("a")
    sim.add_argument("b")

    rnk = commands.add_parser("rank", help="Rank registry candidates for one system record")
    rnk.add_argument("--system", required=True, metavar="FILE", help="System records (CSV, JSON or XLSX)")
    rnk.add_argument("--registry", required=True, metavar="FILE", help="Registry records (CSV, JSON or XLSX)")
    rnk.add_argument("--id", required=True, help="System record id to rank for")
    rnk.add_argument("--limit", type=int, default=10, help="Candidates to show (default 10)")

    mtc = commands.add_parser("match", help="Match pasted rows against a unit's system records")
    mtc.add_argument("--system", required=True, metavar="FILE", help="System records (CSV, JSON or XLSX)")
    mtc.add_argument("--pasted", required=True, metavar="FILE", help="Pasted rows (tab or comma separated)")
    mtc.add_argument("--unit", required=True, help="System unit the rows belong to")
    mtc.add_argument("--output-csv", metavar="FILE", help="Output CSV file path")
    mtc.add_argument("--quiet", "-q", action="store_true", help="Suppress console output (only output CSV)")

    return parser


def _run_rank(args, config) -> int:
    system_records = FileRecordAdapter(args.system, parse_system_row).get_all_records()
    item = next((r for r in system_records if r.id == args.id), None)
    if item is None:
        print(f"Error: System record not found: {args.id}", file=sys.stderr)
        return 1

    pool = load_registry_records(args.registry)
    candidates = rank(item, pool, settings=config.settings)

    print(f"Ranking {len(pool)} registry records for \"{item.description}\"")
    print(format_candidates(candidates, limit=args.limit))
    print(f"\nTop score: {top_score(candidates):.3f}")
    return 0


def _run_match(args, config) -> int:
    adapter = FileRecordAdapter(args.system, parse_system_row)
    pool = adapter.get_records_for_unit(args.unit)
    if not pool:
        print(f"Warning: No system records found for unit {args.unit}", file=sys.stderr)

    pasted_path = Path(args.pasted)
    if not pasted_path.exists():
        raise FileNotFoundError(f"Pasted data file not found: {pasted_path}")
    rows = parse_pasted_rows(pasted_path.read_text(encoding="utf-8"))

    if not args.quiet:
        print(f"Matching {len(rows)} pasted rows against {len(pool)} system records...")

    outcome = match_batch(rows, pool, settings=config.settings)

    if not args.quiet:
        print(format_console(outcome.results))

    if args.output_csv:
        output_path = Path(args.output_csv)
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            export_csv(outcome.results, output=f)
        if not args.quiet:
            print(f"\nCSV exported to: {output_path}")
    return 0


def main(argv=None):
    args = _build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    config_path = Path(args.config) if args.config else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)

    try:
        config = load_config(config_path)

        if args.command == "similarity":
            print(f"{similarity(args.a, args.b, config.settings):.4f}")
            status = 0
        elif args.command == "rank":
            status = _run_rank(args, config)
        else:
            status = _run_match(args, config)

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
