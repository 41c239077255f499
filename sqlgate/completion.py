# sqlgate/completion.py
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict

from sqlgate.errors import CompletionFormatError


logger = logging.getLogger(__name__)

CODE_FENCE_RE = re.compile(r"^\s*```(?:json|sql)?\s*([\s\S]*?)\s*```\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class Completion:
    sql: str
    reason: str


def _strip_code_fences(text: str) -> str:
    m = CODE_FENCE_RE.match(text)
    if m:
        return m.group(1).strip()
    return text.strip()


def _load_json_object(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("completion is not valid JSON: %s", e)
        raise CompletionFormatError(f"completion is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CompletionFormatError("completion JSON must be an object with 'sql' and 'reason'")
    return data


def parse_completion(text: str) -> Completion:
    """
    Extract {"sql": ..., "reason": ...} from a model completion.

    The model is asked for strict JSON, but fenced output (```json ... ```)
    shows up often enough that it is unwrapped first. The SQL is returned
    untouched: it is still untrusted and must go through the gate.
    """
    if not isinstance(text, str) or not text.strip():
        raise CompletionFormatError("empty completion")

    data = _load_json_object(_strip_code_fences(text))

    sql = data.get("sql")
    reason = data.get("reason")
    if not isinstance(sql, str) or not sql.strip():
        raise CompletionFormatError("model did not return a non-empty 'sql' string")
    if not isinstance(reason, str) or not reason.strip():
        raise CompletionFormatError("model did not return a non-empty 'reason' string")

    return Completion(sql=sql, reason=reason)
