# sqlgate/cli.py
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from sqlgate.errors import PolicyConfigError
from sqlgate.gate_policy import GatePolicy, DEFAULT_POLICY, load_policy, policy_to_dict
from sqlgate.keywords import find_all_disallowed_keywords
from sqlgate.sanitizer import sanitize_sql
from sqlgate.sql_validator import validate_sql


logger = logging.getLogger("sqlgate")


def _read_sql(args: argparse.Namespace) -> str:
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            return f.read()
    if args.sql is not None:
        return args.sql
    return sys.stdin.read()


def _resolve_policy(path: Optional[str]) -> GatePolicy:
    if not path:
        return DEFAULT_POLICY
    policy = load_policy(path)
    logger.info("Loaded policy %s from %s", policy.version, path)
    return policy


def _cmd_check(args: argparse.Namespace, policy: GatePolicy) -> int:
    sql = _read_sql(args)
    verdict = validate_sql(sql, policy=policy)

    if args.json:
        print(json.dumps(verdict.to_dict()))
    elif verdict.accepted:
        print("ACCEPTED")
    else:
        print(f"REJECTED [{verdict.reason.value}] {verdict.message}")
        if args.verbose:
            hits = find_all_disallowed_keywords(sanitize_sql(sql), policy)
            if hits:
                print(f"denylisted tokens: {', '.join(hits)}")

    return 0 if verdict.accepted else 1


def _cmd_sanitize(args: argparse.Namespace, policy: GatePolicy) -> int:
    print(sanitize_sql(_read_sql(args)))
    return 0


def _cmd_policy(args: argparse.Namespace, policy: GatePolicy) -> int:
    print(json.dumps(policy_to_dict(policy), indent=2))
    return 0


def _add_sql_source(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "sql",
        nargs="?",
        default=None,
        help="SQL text. Reads stdin when omitted.",
    )
    p.add_argument(
        "-f",
        "--file",
        default=None,
        help="Read SQL from a file instead.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlgate",
        description="Read-only SQL gate for model-generated queries",
    )
    parser.add_argument(
        "--policy",
        dest="policy_path",
        default=os.environ.get("SQLGATE_POLICY"),
        help="Path to a JSON policy file. Defaults to env SQLGATE_POLICY or the built-in policy.",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("SQLGATE_LOG_LEVEL", "WARNING"),
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_check = sub.add_parser("check", help="Validate SQL and print the verdict.")
    _add_sql_source(p_check)
    p_check.add_argument("--json", action="store_true", help="Print the verdict as JSON.")
    p_check.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="On rejection, also list every denylisted token found.",
    )
    p_check.set_defaults(func=_cmd_check)

    p_sanitize = sub.add_parser("sanitize", help="Print SQL with comments and literals masked.")
    _add_sql_source(p_sanitize)
    p_sanitize.set_defaults(func=_cmd_sanitize)

    p_policy = sub.add_parser("policy", help="Print the active policy as JSON.")
    p_policy.set_defaults(func=_cmd_policy)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = getattr(logging, str(args.log_level).upper(), None)
    if not isinstance(level, int):
        print(f"ERROR: unknown log level {args.log_level!r}", file=sys.stderr)
        return 2
    logging.basicConfig(level=level)

    try:
        policy = _resolve_policy(args.policy_path)
    except PolicyConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    try:
        return args.func(args, policy)
    except (OSError, UnicodeDecodeError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
