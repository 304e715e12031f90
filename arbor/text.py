"""
Content text canonicalization.

Node text is a single trimmed line capped at the configured length, so a
markdown export of any stored tree parses back to the same text.
"""

import re
from typing import Any, Optional

from arbor.constants import get_text_max_length

_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


def single_line(text: Any) -> str:
    """Join line breaks into single spaces and trim the ends."""
    value = "" if text is None else str(text)
    return _LINE_BREAKS.sub(" ", value).strip()


def cap_text(text: Any, limit: Optional[int] = None) -> str:
    """Canonical node text: one trimmed line, truncated to the content cap.

    Args:
        text: Raw text; None becomes "" and other scalars their string form.
        limit: Maximum length; defaults to the configured cap (100).
    """
    max_length = limit if limit is not None else get_text_max_length()
    return single_line(text)[:max_length].rstrip()
