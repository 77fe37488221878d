# fcmpush/log_utils.py
"""Redaction helpers so tokens and keys never reach the logs verbatim."""

from __future__ import annotations

import re
from typing import Any

_RE_BEARER = re.compile(r"Bearer\s+[A-Za-z0-9\-\._~\+\/]+=*", re.I)
_RE_KEY = re.compile(r"key=[A-Za-z0-9\-_]+", re.I)


def redact(value: Any, keep_tail: int = 6) -> str:
    """Return a redacted version of tokens/ids for safe logging."""
    s = str(value or "")
    if not s:
        return ""
    if len(s) <= keep_tail:
        return "•••"
    return f"•••{s[-keep_tail:]}"


def redact_text(s: str) -> str:
    """Redact Authorization header values embedded in free text."""
    s = _RE_BEARER.sub("Bearer <redacted>", s)
    return _RE_KEY.sub("key=<redacted>", s)


__all__ = ["redact", "redact_text"]
