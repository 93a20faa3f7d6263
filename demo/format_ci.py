#!/usr/bin/env python3
"""CI orchestrator for format_checker.py profiles."""

from __future__ import annotations

import argparse
import json
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_SEED = 12345


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class LegSpec:
    leg_id: str
    layout: str
    rows: int
    ops: int
    runs: int = 1
    extra_args: list[str] = field(default_factory=list)


def _profile_legs(profile: str, ops_override: int | None = None) -> list[LegSpec]:
    if profile == "pr":
        ops = ops_override if ops_override is not None else 2000
        return [
            LegSpec(leg_id="pr_row", layout="row", rows=200, ops=ops),
            LegSpec(leg_id="pr_fix", layout="fix", rows=200, ops=ops),
            LegSpec(leg_id="pr_var", layout="var", rows=200, ops=ops),
        ]

    # nightly profile
    ops = ops_override if ops_override is not None else 20000
    return [
        LegSpec(leg_id="nightly_row", layout="row", rows=5000, ops=ops),
        LegSpec(leg_id="nightly_row_reverse", layout="row", rows=2000, ops=ops,
                extra_args=["--reverse"]),
        LegSpec(leg_id="nightly_fix", layout="fix", rows=5000, ops=ops,
                extra_args=["--bitcnt", "3"]),
        LegSpec(leg_id="nightly_var", layout="var", rows=5000, ops=ops),
        LegSpec(leg_id="nightly_var_insert_heavy", layout="var", rows=500, ops=ops,
                extra_args=["--insert-pct", "40", "--delete-pct", "20"]),
    ]


def _load_json(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def _run_leg(*, leg: LegSpec, seed: int, python_exe: str, out_dir: Path,
             timeout: int) -> dict[str, Any]:
    out_dir.mkdir(parents=True, exist_ok=True)
    summary_json = out_dir / f"{leg.leg_id}.summary.json"
    run_log = out_dir / f"{leg.leg_id}.log"
    oplog = out_dir / f"{leg.leg_id}.ops.jsonl"

    cmd = [
        python_exe,
        "demo/format_checker.py",
        "--layout",
        leg.layout,
        "--rows",
        str(leg.rows),
        "--ops",
        str(leg.ops),
        "--runs",
        str(leg.runs),
        "--seed",
        str(seed),
        "--log",
        str(oplog),
        "--summary-json-out",
        str(summary_json),
        *leg.extra_args,
    ]

    try:
        proc = subprocess.run(
            cmd,
            cwd=str(REPO_ROOT),
            text=True,
            capture_output=True,
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        timeout_msg = f"[format-ci] TIMEOUT: {leg.leg_id} exceeded {timeout}s\n"
        log_payload = (exc.stdout or "") + "\n[stderr]\n" + (exc.stderr or "") + "\n" + timeout_msg
        run_log.write_text(log_payload, encoding="utf-8")
        print(timeout_msg, file=sys.stderr)
        return {
            "leg_id": leg.leg_id,
            "layout": leg.layout,
            "seed": seed,
            "return_code": -1,
            "result": "fail",
            "summary_path": str(summary_json),
            "artifacts": {"run_log": str(run_log)},
        }

    log_payload = proc.stdout
    if proc.stderr:
        log_payload += "\n[stderr]\n" + proc.stderr
    run_log.write_text(log_payload, encoding="utf-8")
    if proc.stdout:
        print(proc.stdout, end="")
    if proc.stderr:
        print(proc.stderr, end="", file=sys.stderr)

    summary: dict[str, Any] | None = None
    if summary_json.exists():
        summary = _load_json(summary_json)

    result = "fail" if proc.returncode != 0 else "pass"
    if summary is not None and summary.get("result") in {"pass", "fail"}:
        result = str(summary["result"])
    if proc.returncode not in (0, 2):
        # Store failure or crash: never a pass, whatever the summary says.
        result = "fail"

    return {
        "leg_id": leg.leg_id,
        "layout": leg.layout,
        "seed": seed,
        "return_code": proc.returncode,
        "result": result,
        "summary_path": str(summary_json),
        "artifacts": {
            "summary_json": str(summary_json),
            "run_log": str(run_log),
            "ops_log": str(oplog),
        },
    }


def _build_markdown(payload: dict[str, Any]) -> str:
    lines: list[str] = []
    lines.append("# kvformat CI Summary")
    lines.append("")
    lines.append(f"- Timestamp: `{payload.get('timestamp')}`")
    lines.append(f"- Profile: `{payload.get('profile')}`")
    lines.append(f"- Result: `{payload.get('result')}`")
    lines.append(f"- Exit code: `{payload.get('exit_code')}`")
    lines.append("")
    lines.append("## Legs")
    lines.append("")
    lines.append("| Leg | Layout | Seed | Result | Exit |")
    lines.append("|---|---|---:|---|---:|")
    for leg in payload.get("legs", []):
        lines.append(
            f"| {leg.get('leg_id')} | {leg.get('layout')} | {leg.get('seed')} | "
            f"{leg.get('result')} | {leg.get('return_code')} |"
        )
    return "\n".join(lines) + "\n"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run format checker CI profiles")
    parser.add_argument("--profile", choices=["pr", "nightly"], default="pr")
    parser.add_argument("--out-dir", type=str, default="demo/format_ci_runs")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--export-json", type=str, default=None)
    parser.add_argument("--export-md", type=str, default=None)
    parser.add_argument("--python", type=str, default=sys.executable)
    parser.add_argument("--timeout", type=int, default=1800)
    parser.add_argument("--ops-override", type=int, default=None, help=argparse.SUPPRESS)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    export_json = Path(args.export_json) if args.export_json else (out_dir / "format_ci_summary.json")
    export_md = Path(args.export_md) if args.export_md else (out_dir / "format_ci_summary.md")
    export_json.parent.mkdir(parents=True, exist_ok=True)
    export_md.parent.mkdir(parents=True, exist_ok=True)

    legs = _profile_legs(args.profile, args.ops_override)
    leg_results: list[dict[str, Any]] = []

    started = _utc_now_iso()
    for idx, leg in enumerate(legs):
        leg_seed = args.seed + idx
        print(f"[format-ci] running {leg.leg_id} (seed={leg_seed}, ops={leg.ops})")
        leg_results.append(
            _run_leg(
                leg=leg,
                seed=leg_seed,
                python_exe=args.python,
                out_dir=out_dir,
                timeout=args.timeout,
            )
        )

    failed_legs = [leg["leg_id"] for leg in leg_results if leg.get("result") == "fail"]
    overall_fail = bool(failed_legs)
    exit_code = 2 if overall_fail else 0

    payload = {
        "schema_version": "format_ci_v1",
        "timestamp": _utc_now_iso(),
        "started_utc": started,
        "profile": args.profile,
        "result": "fail" if overall_fail else "pass",
        "exit_code": exit_code,
        "seed_base": args.seed,
        "legs": leg_results,
        "failed_legs": failed_legs,
    }

    export_json.write_text(json.dumps(payload, indent=2, ensure_ascii=True) + "\n", encoding="utf-8")
    export_md.write_text(_build_markdown(payload), encoding="utf-8")
    print(f"[format-ci] JSON: {export_json}")
    print(f"[format-ci] MD: {export_md}")
    print(
        f"[format-ci] result={payload['result']} "
        f"legs={len(leg_results)} failed_legs={len(failed_legs)}"
    )
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
