"""Keyword extraction from issue text."""

import re

from docgap.constants import CATEGORY_KEYWORDS, STOP_WORDS
from docgap.models.issue_models import Issue

_WORD_RE = re.compile(r"\b[a-z0-9]{3,}\b")


def extract_keywords(issue: Issue) -> list[str]:
    """Deduplicated keywords from title, description and category.

    Category-specific keywords are appended when the category is known.
    Order is stable: first occurrence wins.
    """
    text = f"{issue.title} {issue.description} {issue.category}".lower()
    words = [w for w in _WORD_RE.findall(text) if w not in STOP_WORDS]
    words.extend(CATEGORY_KEYWORDS.get(issue.category, []))
    return list(dict.fromkeys(words))
