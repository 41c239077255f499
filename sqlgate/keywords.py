# sqlgate/keywords.py
from __future__ import annotations

from typing import List, Optional

from sqlgate.gate_policy import GatePolicy, DEFAULT_POLICY


def find_disallowed_keyword(sanitized: str, policy: Optional[GatePolicy] = None) -> Optional[str]:
    """Leftmost denylisted token, as written in the input, or None."""
    policy = policy or DEFAULT_POLICY
    m = policy.denylist_pattern.search(sanitized)
    if m is None:
        return None
    return m.group(0)


def find_all_disallowed_keywords(sanitized: str, policy: Optional[GatePolicy] = None) -> List[str]:
    # Diagnostics only (CLI, eval). The gate stops at the first hit.
    policy = policy or DEFAULT_POLICY
    return [m.group(0) for m in policy.denylist_pattern.finditer(sanitized)]
