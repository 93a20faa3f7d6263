#!/usr/bin/env python3

from __future__ import annotations

import json
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(REPO_ROOT / "demo"))

import format_ci as fci  # noqa: E402


class FormatCIOrchestratorTests(unittest.TestCase):
    def test_pr_profile_covers_every_layout(self) -> None:
        legs = fci._profile_legs("pr")
        self.assertEqual(sorted(leg.layout for leg in legs), ["fix", "row", "var"])
        self.assertTrue(all(leg.ops == 2000 for leg in legs))

    def test_nightly_profile_includes_reverse_leg(self) -> None:
        legs = fci._profile_legs("nightly", ops_override=5)
        self.assertEqual(len(legs), 5)
        reverse = [leg for leg in legs if "--reverse" in leg.extra_args]
        self.assertEqual(len(reverse), 1)
        self.assertEqual(reverse[0].layout, "row")
        self.assertTrue(all(leg.ops == 5 for leg in legs))

    def test_markdown_lists_legs(self) -> None:
        md = fci._build_markdown({
            "profile": "pr",
            "result": "pass",
            "exit_code": 0,
            "legs": [{"leg_id": "pr_row", "layout": "row", "seed": 1, "result": "pass", "return_code": 0}],
        })
        self.assertIn("| pr_row | row | 1 | pass | 0 |", md)

    def test_pr_profile_smoke(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            out_dir = root / "out"
            export_json = root / "format_ci_pr.json"
            export_md = root / "format_ci_pr.md"
            cmd = [
                sys.executable,
                "demo/format_ci.py",
                "--profile",
                "pr",
                "--ops-override",
                "50",
                "--out-dir",
                str(out_dir),
                "--export-json",
                str(export_json),
                "--export-md",
                str(export_md),
            ]
            proc = subprocess.run(cmd, cwd=str(REPO_ROOT), check=False)
            self.assertTrue(export_json.exists())
            self.assertTrue(export_md.exists())
            payload = json.loads(export_json.read_text(encoding="utf-8"))
            self.assertEqual(payload.get("profile"), "pr")
            self.assertEqual(len(payload.get("legs", [])), 3)
            self.assertEqual(payload.get("result"), "pass")
            self.assertEqual(proc.returncode, int(payload.get("exit_code")))


if __name__ == "__main__":
    unittest.main()
