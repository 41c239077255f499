# sqlgate/gate_policy.py
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Union

from sqlgate.errors import PolicyConfigError


DENYLIST: tuple = (
    # Writes / schema changes
    "insert", "update", "delete", "merge", "replace",
    "create", "alter", "drop", "truncate",
    # Privileges
    "grant", "revoke",
    # Engine escape hatches (files, extensions, procedures)
    "attach", "detach", "copy", "export", "load", "install", "uninstall",
    "call", "exec", "execute",
    # Session / transaction control
    "set", "reset", "pragma",
    "begin", "commit", "rollback", "savepoint", "release",
    # Maintenance / introspection
    "vacuum", "analyze", "explain", "refresh", "cluster", "reindex", "checkpoint",
)

MAJOR_STATEMENTS: tuple = ("select", "insert", "update", "delete", "merge")

ALLOWED_STATEMENT = "select"
MAX_SQL_LENGTH = 20000

BUILTIN_POLICY_PATH = Path(__file__).parent / "policies" / "readonly_select.json"

_TOKEN_RE = re.compile(r"^\w+$", re.ASCII)
_POLICY_KEYS = ("version", "denylist", "major_statements", "allowed_statement", "max_length")


def _normalize_tokens(name: str, tokens: Iterable[str]) -> FrozenSet[str]:
    if not isinstance(tokens, (list, tuple, set, frozenset)):
        raise PolicyConfigError(f"{name} must be a list of tokens")
    out = set()
    for tok in tokens:
        if not isinstance(tok, str) or not _TOKEN_RE.match(tok.strip()):
            raise PolicyConfigError(f"{name} contains an invalid token: {tok!r}")
        out.add(tok.strip().lower())
    if not out:
        raise PolicyConfigError(f"{name} must not be empty")
    return frozenset(out)


@dataclass(frozen=True)
class GatePolicy:
    """
    Immutable gate configuration. Build once at startup and share freely.
    Tokens are stored lower-cased; matching is always case-insensitive.
    """

    version: str = "builtin"
    denylist: FrozenSet[str] = field(default_factory=lambda: frozenset(DENYLIST))
    major_statements: FrozenSet[str] = field(default_factory=lambda: frozenset(MAJOR_STATEMENTS))
    allowed_statement: str = ALLOWED_STATEMENT
    max_length: int = MAX_SQL_LENGTH

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "denylist", _normalize_tokens("denylist", self.denylist))
        object.__setattr__(
            self, "major_statements", _normalize_tokens("major_statements", self.major_statements)
        )

        if not isinstance(self.allowed_statement, str):
            raise PolicyConfigError("allowed_statement must be a string")
        allowed = self.allowed_statement.strip().lower()
        if allowed not in self.major_statements:
            raise PolicyConfigError(
                f"allowed_statement {allowed!r} is not one of the major statements"
            )
        if allowed in self.denylist:
            raise PolicyConfigError(f"allowed_statement {allowed!r} is also denylisted")
        object.__setattr__(self, "allowed_statement", allowed)

        if isinstance(self.max_length, bool) or not isinstance(self.max_length, int):
            raise PolicyConfigError("max_length must be an integer")
        if self.max_length <= 0:
            raise PolicyConfigError("max_length must be positive")

        if not isinstance(self.version, str) or not self.version.strip():
            raise PolicyConfigError("version must be a non-empty string")

    @property
    def denylist_pattern(self) -> "re.Pattern[str]":
        return word_pattern(self.denylist)

    @property
    def major_pattern(self) -> "re.Pattern[str]":
        return word_pattern(self.major_statements)

    @property
    def allowed_pattern(self) -> "re.Pattern[str]":
        return word_pattern(frozenset((self.allowed_statement,)))


@lru_cache(maxsize=64)
def word_pattern(tokens: FrozenSet[str]) -> "re.Pattern[str]":
    # Longest first so overlapping alternatives (exec / execute) are tried deterministically.
    ordered = sorted(tokens, key=lambda t: (-len(t), t))
    alternation = "|".join(re.escape(t) for t in ordered)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE | re.ASCII)


WITH_PREFIX_RE = re.compile(r"^\s*with\b", re.IGNORECASE | re.ASCII)

DEFAULT_POLICY = GatePolicy()


def policy_from_dict(data: Dict[str, Any]) -> GatePolicy:
    if not isinstance(data, dict):
        raise PolicyConfigError("policy document must be a JSON object")

    unknown = sorted(set(data) - set(_POLICY_KEYS))
    if unknown:
        raise PolicyConfigError(f"unknown policy keys: {', '.join(unknown)}")

    kwargs: Dict[str, Any] = {}
    for key in _POLICY_KEYS:
        if key in data:
            kwargs[key] = data[key]
    return GatePolicy(**kwargs)


def policy_to_dict(policy: GatePolicy) -> Dict[str, Any]:
    return {
        "version": policy.version,
        "denylist": sorted(policy.denylist),
        "major_statements": sorted(policy.major_statements),
        "allowed_statement": policy.allowed_statement,
        "max_length": policy.max_length,
    }


def load_policy(path: Union[str, Path]) -> GatePolicy:
    """
    Load a policy artifact (JSON). Missing keys fall back to the built-in
    defaults; unknown keys and malformed values raise PolicyConfigError.
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PolicyConfigError(f"cannot read policy file {p}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PolicyConfigError(f"policy file {p} is not valid JSON: {e}") from e

    return policy_from_dict(data)
