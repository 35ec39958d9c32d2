import re
from typing import Optional

from catalog_search.domain.services.constants import (
    SNIPPET_MAX_LENGTH,
    SNIPPET_WINDOW,
    SUGGESTION_SNIPPET_LENGTH,
)

# . * + ? ^ $ { } ( ) | [ ] \
_REGEX_META = re.compile(r"[.*+?^${}()|\[\]\\]")


def escape_regex(q: str) -> str:
    """Escape regex metacharacters so `q` matches literally (Python re and PCRE)."""
    return _REGEX_META.sub(lambda m: "\\" + m.group(0), q)


def make_snippet(
    description: Optional[str],
    q: str,
    max_length: int = SNIPPET_MAX_LENGTH,
    window: int = SNIPPET_WINDOW,
) -> str:
    """
    Description excerpt centered on the first case-insensitive occurrence of q.
    Without an occurrence, a plain prefix of max_length characters.
    """
    if not description:
        return ""

    idx = description.lower().find(q.lower())
    if idx == -1:
        return description[:max_length] + "..." if len(description) > max_length else description

    start = max(0, idx - window)
    end = min(len(description), idx + len(q) + window)
    snippet = description[start:end]
    if start > 0:
        snippet = "..." + snippet
    if end < len(description):
        snippet = snippet + "..."
    return snippet


def suggestion_snippet(description: Optional[str]) -> str:
    return (description or "")[:SUGGESTION_SNIPPET_LENGTH]
