# sqlgate/sanitizer.py
from __future__ import annotations

from enum import Enum
from typing import List


class ScanState(Enum):
    NORMAL = "normal"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    SINGLE_QUOTED = "single_quoted"
    DOUBLE_QUOTED = "double_quoted"


_QUOTE_FOR_STATE = {
    ScanState.SINGLE_QUOTED: "'",
    ScanState.DOUBLE_QUOTED: '"',
}

# Every masked span (comment, literal, quoted identifier) collapses to this.
MASK = " "


def sanitize_sql(raw: str) -> str:
    """
    Replace comments, string literals and quoted identifiers with a single
    space each, keeping everything else verbatim.

    Keyword and statement checks must only ever look at this output:
    anything an attacker hides inside a literal or a comment is gone here.

    Unterminated comments and literals run to end of input; this stage
    never raises.
    """
    out: List[str] = []
    state = ScanState.NORMAL
    i = 0
    n = len(raw)

    while i < n:
        ch = raw[i]
        nxt = raw[i + 1] if i + 1 < n else ""

        if state is ScanState.NORMAL:
            if ch == "-" and nxt == "-":
                state = ScanState.LINE_COMMENT
                i += 2
            elif ch == "/" and nxt == "*":
                state = ScanState.BLOCK_COMMENT
                i += 2
            elif ch == "'":
                state = ScanState.SINGLE_QUOTED
                i += 1
            elif ch == '"':
                state = ScanState.DOUBLE_QUOTED
                i += 1
            else:
                out.append(ch)
                i += 1

        elif state is ScanState.LINE_COMMENT:
            if ch == "\n":
                # newline itself is not part of the comment
                out.append(MASK)
                state = ScanState.NORMAL
            else:
                i += 1

        elif state is ScanState.BLOCK_COMMENT:
            if ch == "*" and nxt == "/":
                out.append(MASK)
                state = ScanState.NORMAL
                i += 2
            else:
                i += 1

        else:
            quote = _QUOTE_FOR_STATE[state]
            if ch == quote and nxt == quote:
                i += 2
            elif ch == quote:
                out.append(MASK)
                state = ScanState.NORMAL
                i += 1
            else:
                i += 1

    if state is not ScanState.NORMAL:
        # unterminated span absorbed to end of input
        out.append(MASK)

    return "".join(out)
