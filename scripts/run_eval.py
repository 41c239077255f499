# scripts/run_eval.py
from __future__ import annotations

import argparse
import hashlib
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from sqlgate.gate_policy import GatePolicy, DEFAULT_POLICY, load_policy
from sqlgate.sql_validator import validate_sql
from sqlgate.verdict import Verdict


# ----------------------------
# Helpers
# ----------------------------

def sha256_text(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()

def verdict_fingerprint(v: Verdict) -> str:
    return sha256_text(json.dumps(v.to_dict(), sort_keys=True))

def load_cases(path: str) -> List[Dict[str, Any]]:
    cases: List[Dict[str, Any]] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            cases.append(json.loads(line))
    return cases

def check_expectations(v: Verdict, expect: Dict[str, Any]) -> List[str]:
    reasons: List[str] = []

    if "accepted" in expect and bool(expect["accepted"]) != v.accepted:
        reasons.append(f"accepted_mismatch:{v.accepted}")

    want_reason = expect.get("reason")
    got_reason = v.reason.value if v.reason else None
    if want_reason and want_reason != got_reason:
        reasons.append(f"reason_mismatch:{got_reason}")

    return reasons


@dataclass(frozen=True)
class CaseOutcome:
    case_id: str
    accepted: bool
    reason: Optional[str]
    detail: Optional[str]
    correct: bool
    deterministic: bool
    mismatches: List[str]


def eval_case(case: Dict[str, Any], policy: GatePolicy, runs: int) -> CaseOutcome:
    sql = case["sql"]
    verdicts = [validate_sql(sql, policy=policy) for _ in range(max(1, runs))]
    fps = {verdict_fingerprint(v) for v in verdicts}

    v = verdicts[0]
    mismatches = check_expectations(v, case.get("expect", {}))
    return CaseOutcome(
        case_id=case.get("id", sha256_text(sql)[:12]),
        accepted=v.accepted,
        reason=v.reason.value if v.reason else None,
        detail=v.detail,
        correct=not mismatches,
        deterministic=len(fps) == 1,
        mismatches=mismatches,
    )


# ----------------------------
# Eval
# ----------------------------

def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--cases", default="eval/cases_gate.jsonl")
    ap.add_argument("--outdir", default="reports/gate_eval")
    ap.add_argument("--policy", default=os.environ.get("SQLGATE_POLICY"))
    ap.add_argument("--runs", type=int, default=3, help="Repeat runs per case to check determinism.")
    args = ap.parse_args()

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    policy = load_policy(args.policy) if args.policy else DEFAULT_POLICY
    cases = load_cases(args.cases)
    outcomes = [eval_case(c, policy, args.runs) for c in cases]

    # records.jsonl: one record per case
    jsonl_path = outdir / "records.jsonl"
    with jsonl_path.open("w", encoding="utf-8") as f:
        for o in outcomes:
            f.write(json.dumps(o.__dict__, ensure_ascii=False) + "\n")

    df = pd.DataFrame(
        [o.__dict__ for o in outcomes],
        columns=["case_id", "accepted", "reason", "detail", "correct", "deterministic", "mismatches"],
    )
    df["reason"] = df["reason"].fillna("accepted")

    by_reason = (
        df.groupby("reason")
        .agg(cases=("case_id", "count"), correct=("correct", "sum"))
        .reset_index()
        .sort_values("reason")
    )
    by_reason.to_csv(outdir / "by_reason.csv", index=False)

    total = len(df)
    summary = {
        "policy_version": policy.version,
        "cases": total,
        "accepted": int(df["accepted"].sum()) if total else 0,
        "correctness_rate": float(df["correct"].mean()) if total else 0.0,
        "determinism_rate": float(df["deterministic"].mean()) if total else 0.0,
        "runs_per_case": args.runs,
    }
    summary_path = outdir / "summary.json"
    summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")

    # markdown dashboard
    md_lines = [
        "# Gate Evaluation Summary",
        "",
        f"- Policy: `{policy.version}`",
        f"- Cases: `{args.cases}` ({total})",
        f"- Correct: {summary['correctness_rate']:.3f}",
        f"- Deterministic: {summary['determinism_rate']:.3f}",
        "",
        "| Verdict | Cases | Correct |",
        "|---------|-------|---------|",
    ]
    for row in by_reason.itertuples(index=False):
        md_lines.append(f"| {row.reason} | {row.cases} | {int(row.correct)} |")

    failed = df[~df["correct"].astype(bool)]
    if len(failed):
        md_lines += ["", "## Mismatches", ""]
        for row in failed.itertuples(index=False):
            md_lines.append(f"- `{row.case_id}`: {', '.join(row.mismatches)}")

    md_path = outdir / "summary.md"
    md_path.write_text("\n".join(md_lines), encoding="utf-8")

    print("\n".join(md_lines))
    print(f"\nWrote: {summary_path}")
    print(f"Wrote: {md_path}")
    print(f"Wrote: {jsonl_path}")
    return 0 if len(failed) == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
