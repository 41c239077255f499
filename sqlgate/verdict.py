# sqlgate/verdict.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ReasonKind(str, Enum):
    INVALID_INPUT_TYPE = "invalid_input_type"
    TOO_LONG = "too_long"
    NULL_BYTE = "null_byte"
    MULTIPLE_STATEMENTS = "multiple_statements"
    DISALLOWED_KEYWORD = "disallowed_keyword"
    NON_SELECT_STATEMENT = "non_select_statement"
    DANGLING_WITH = "dangling_with"


@dataclass(frozen=True)
class Verdict:
    accepted: bool
    reason: Optional[ReasonKind] = None
    detail: Optional[str] = None

    @classmethod
    def accept(cls) -> "Verdict":
        return ACCEPTED

    @classmethod
    def reject(cls, reason: ReasonKind, detail: Optional[str] = None) -> "Verdict":
        return cls(accepted=False, reason=reason, detail=detail)

    @property
    def ok(self) -> bool:
        return self.accepted

    @property
    def message(self) -> str:
        if self.accepted:
            return "SQL accepted."
        return _MESSAGES[self.reason](self.detail)

    def to_dict(self) -> Dict[str, Any]:
        if self.accepted:
            return {"accepted": True}
        out: Dict[str, Any] = {"accepted": False, "reason": self.reason.value}
        if self.detail is not None:
            out["detail"] = self.detail
        return out


ACCEPTED = Verdict(accepted=True)


def _upper(detail: Optional[str]) -> str:
    return (detail or "").upper()


_MESSAGES = {
    ReasonKind.INVALID_INPUT_TYPE: lambda d: f"SQL must be a string (got {d}).",
    ReasonKind.TOO_LONG: lambda d: f"SQL too long (> {d} chars).",
    ReasonKind.NULL_BYTE: lambda d: "SQL contains null bytes.",
    ReasonKind.MULTIPLE_STATEMENTS: lambda d: "Multiple statements are not allowed.",
    ReasonKind.DISALLOWED_KEYWORD: lambda d: f"Disallowed keyword found: {_upper(d)}.",
    ReasonKind.NON_SELECT_STATEMENT: lambda d: f"Only SELECT is permitted (found {_upper(d)}).",
    ReasonKind.DANGLING_WITH: lambda d: "WITH must lead to a SELECT query.",
}
