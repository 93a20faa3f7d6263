#!/usr/bin/env python3
"""
Format Checker: randomized differential run of a SQLite SUT against the
reference oracle.

Bulk loads both stores, runs a weighted random stream of deletes, inserts,
writes and reads with cursor walks in between, then re-reads a sample of
the key space and compares full forward/backward dumps. Any disagreement
between the stores ends the run.

Usage:
    python demo/format_checker.py [--layout=row|fix|var] [--rows=N] [--ops=N]
        [--seed=N] [--runs=N] [--config=PATH] [--log=PATH] [--verbose]

Options:
    --layout=L     Storage layout (default: row)
    --rows=N       Records to bulk load (default: 100)
    --ops=N        Mutation/read operations per run (default: 2000)
    --seed=N       RNG seed for reproducibility (default: random)
    --runs=N       Number of runs; runs after the first draw a fresh
                   configuration for every option not given explicitly
    --config=PATH  JSON object of RunConfig overrides
    --log=PATH     JSONL audit trail (default: none)
    --verbose      Print every operation
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from dataclasses import replace
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure kvformat is importable from a source checkout
# ---------------------------------------------------------------------------

_REPO = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO / "python"))

from kvformat import (  # noqa: E402
    ConfigError,
    DivergenceError,
    FormatEngine,
    OperationLog,
    RunConfig,
    load_config,
    randomize_config,
)

# Options that map one to one onto RunConfig fields.
_FIELD_OPTIONS = (
    "layout",
    "rows",
    "ops",
    "delete_pct",
    "insert_pct",
    "write_pct",
    "key_min",
    "key_max",
    "value_min",
    "value_max",
    "bitcnt",
    "max_stride",
    "sut_path",
)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="kvformat checker: differential run of SQLite against the reference oracle"
    )
    parser.add_argument("--layout", choices=["row", "fix", "var"], default=None,
                        help="Storage layout (default: row)")
    parser.add_argument("--rows", type=int, default=None,
                        help="Records to bulk load (default: 100)")
    parser.add_argument("--ops", type=int, default=None,
                        help="Operations per run (default: 2000)")
    parser.add_argument("--delete-pct", type=int, default=None)
    parser.add_argument("--insert-pct", type=int, default=None)
    parser.add_argument("--write-pct", type=int, default=None)
    parser.add_argument("--key-min", type=int, default=None)
    parser.add_argument("--key-max", type=int, default=None)
    parser.add_argument("--value-min", type=int, default=None)
    parser.add_argument("--value-max", type=int, default=None)
    parser.add_argument("--bitcnt", type=int, default=None,
                        help="Bits per fixed-width value, 1-8 (default: 8)")
    parser.add_argument("--max-stride", type=int, default=None,
                        help="Largest gap between records in the read scan (default: 17)")
    parser.add_argument("--reverse", action="store_true",
                        help="Reverse key collation (row layout only)")
    parser.add_argument("--sut-path", type=str, default=None,
                        help="SQLite database file for the SUT (default: in-memory)")
    parser.add_argument("--config", type=str, default=None,
                        help="JSON file of RunConfig overrides")
    parser.add_argument("--seed", type=int, default=None,
                        help="RNG seed (default: random)")
    parser.add_argument("--runs", type=int, default=1,
                        help="Number of runs (default: 1)")
    parser.add_argument("--full-scan", action="store_true",
                        help="Read every record in the post-run scan")
    parser.add_argument("--verbose", action="store_true",
                        help="Print every operation")
    parser.add_argument("--log", type=str, default=None,
                        help="JSONL log path (default: none)")
    parser.add_argument("--summary-json-out", type=str, default=None,
                        help="Write the run summaries as JSON")
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace, seed: int) -> tuple[RunConfig, set[str]]:
    """Defaults, then --config, then explicit options. Returns (config, fixed fields)."""
    config = RunConfig(seed=seed)
    fixed: set[str] = {"sut_path"}
    if args.config:
        path = Path(args.config)
        if not path.exists():
            raise SystemExit(f"--config {path} does not exist")
        config = load_config(path, config)
        with path.open(encoding="utf-8") as f:
            fixed |= set(json.load(f))
    overrides = {}
    for name in _FIELD_OPTIONS:
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
            fixed.add(name)
    if args.reverse:
        overrides["reverse"] = True
        fixed.add("reverse")
    return replace(config, **overrides).validate(), fixed


def _run_once(config: RunConfig, run_no: int, args: argparse.Namespace, oplog: OperationLog) -> dict:
    print(
        f"run {run_no}: layout={config.layout} rows={config.rows} ops={config.ops} "
        f"seed={config.seed} del/ins/wr={config.delete_pct}/{config.insert_pct}/{config.write_pct}"
        + (" reverse" if config.reverse else "")
    )
    if config.sut_path != ":memory:":
        # Each run starts from an empty SUT.
        Path(config.sut_path).unlink(missing_ok=True)
    oplog.log(op="run_start", run=run_no, layout=config.layout, seed=config.seed)
    with FormatEngine(config, oplog=oplog) as engine:
        try:
            engine.bulk_load()
            engine.run_operations()
            engine.read_scan(full=args.full_scan)
            engine.dump_compare(f"run {run_no}")
        except DivergenceError as e:
            print(f"\nFATAL DIVERGENCE: {e}")
            engine.record_divergence(e)
        outcome = engine.report(f"run {run_no}")
    stats = outcome.summary["stats"]
    print(
        f"  {stats['ops']} ops | {stats['puts']} puts | {stats['inserts']} inserts | "
        f"{stats['deletes']} deletes | {stats['reads']} reads | "
        f"{stats['traversals']} cursor steps | {outcome.result.upper()}"
    )
    return outcome.summary


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.runs < 1:
        raise SystemExit("--runs must be at least 1")

    seed = args.seed if args.seed is not None else random.randint(0, 2**32 - 1)
    try:
        base, fixed = _build_config(args, seed)
    except ConfigError as e:
        raise SystemExit(str(e)) from e

    print(f"kvformat checker | seed={seed} | runs={args.runs}")
    print("=" * 64)

    rng = random.Random(seed)
    oplog = OperationLog(args.log, verbose=args.verbose)
    summaries = []
    exit_code = 0
    try:
        for run_no in range(1, args.runs + 1):
            config = base if run_no == 1 else randomize_config(rng, base, fixed)
            summary = _run_once(config, run_no, args, oplog)
            summaries.append(summary)
            if summary["exit_code"] != 0:
                exit_code = summary["exit_code"]
                break
    finally:
        oplog.close()

    print("=" * 64)
    failed = sum(1 for s in summaries if s["result"] == "fail")
    print(f"SUMMARY: {len(summaries)} runs | {failed} failed | exit={exit_code}")

    if args.summary_json_out:
        payload = {
            "schema_version": "kvformat_checker_v1",
            "seed": seed,
            "result": "fail" if exit_code else "pass",
            "exit_code": exit_code,
            "runs": summaries,
        }
        out = Path(args.summary_json_out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(payload, indent=2, default=str) + "\n", encoding="utf-8")
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
