# sqlgate/errors.py
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from sqlgate.verdict import Verdict


# ----------------------------
# Error taxonomy
# ----------------------------

class SQLGateError(Exception):
    code: str = "sqlgate_error"


class PolicyConfigError(SQLGateError, ValueError):
    code = "policy_config_error"


class CompletionFormatError(SQLGateError, ValueError):
    code = "completion_format_error"


class SQLRejected(SQLGateError):
    """
    Raised at the pipeline seam when the gate rejects candidate SQL.
    The gate itself never raises; it returns a Verdict.
    """

    code = "sql_rejected"

    def __init__(self, verdict: "Verdict", sql: Optional[str] = None):
        super().__init__(verdict.message)
        self.verdict = verdict
        self.sql = sql
