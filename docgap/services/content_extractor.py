"""Heuristic HTML content extraction.

Pipeline code depends only on the :class:`ContentExtractor` protocol. The
default :class:`RegexContentExtractor` uses pattern matching rather than a
parser; :class:`SoupContentExtractor` provides the same contract through
BeautifulSoup.
"""

import html as html_lib
import re
from dataclasses import dataclass
from typing import List, Protocol

from bs4 import BeautifulSoup

from docgap.constants import (
    MAX_PAGE_CODE_SNIPPETS,
    MIN_TAGGED_SNIPPET_CHARS,
    MIN_UNTAGGED_SNIPPET_CHARS,
)
from docgap.models.generation_models import CodeSnippet

# Elements whose content never counts as page text
_BOILERPLATE_TAGS = ("script", "style", "nav", "footer", "header", "aside")


@dataclass(frozen=True)
class ExtractedContent:
    title: str
    description: str
    content: str


class ContentExtractor(Protocol):
    """Derives title, meta description and visible text from raw HTML."""

    def extract(self, html: str) -> ExtractedContent: ...


_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_META_DESCRIPTION_RE = re.compile(
    r"<meta[^>]*name=[\"']description[\"'][^>]*content=[\"']([^\"']*?)[\"'][^>]*>",
    re.IGNORECASE,
)
_BOILERPLATE_RES = [
    re.compile(rf"<{tag}[^>]*>[\s\S]*?</{tag}>", re.IGNORECASE)
    for tag in _BOILERPLATE_TAGS
]
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


class RegexContentExtractor:
    """Pattern-matching extractor; tolerant of malformed markup."""

    def extract(self, html: str) -> ExtractedContent:
        title_match = _TITLE_RE.search(html)
        title = html_lib.unescape(title_match.group(1).strip()) if title_match else ""

        desc_match = _META_DESCRIPTION_RE.search(html)
        description = desc_match.group(1).strip() if desc_match else ""

        content = html
        for pattern in _BOILERPLATE_RES:
            content = pattern.sub("", content)
        content = _TAG_RE.sub(" ", content)
        content = _WHITESPACE_RE.sub(" ", content).strip()
        return ExtractedContent(title=title, description=description, content=content)


class SoupContentExtractor:
    """BeautifulSoup-backed extractor."""

    def extract(self, html: str) -> ExtractedContent:
        soup = BeautifulSoup(html, "html.parser")
        title = ""
        if soup.title and soup.title.string:
            title = soup.title.string.strip()

        description = ""
        meta = soup.find("meta", attrs={"name": "description"})
        if meta is not None and meta.get("content"):
            description = str(meta["content"]).strip()

        for tag in soup(list(_BOILERPLATE_TAGS)):
            tag.decompose()
        content = _WHITESPACE_RE.sub(" ", soup.get_text(" ")).strip()
        return ExtractedContent(title=title, description=description, content=content)


def get_content_extractor(name: str = "regex") -> ContentExtractor:
    """Return the extractor implementation selected by configuration."""
    if name == "soup":
        return SoupContentExtractor()
    return RegexContentExtractor()


# =============================================================================
# Code snippet extraction
# =============================================================================

_TAGGED_PRE_CODE_RE = re.compile(
    r"<pre[^>]*>\s*<code[^>]*class=[\"']?[^\"'>]*?language-([\w+-]+)[^>]*>([\s\S]*?)</code>\s*</pre>",
    re.IGNORECASE,
)
_MARKDOWN_FENCE_RE = re.compile(r"```([\w+-]+)[ \t]*\n([\s\S]*?)```")
_CODE_ELEMENT_RE = re.compile(r"<code[^>]*>([\s\S]*?)</code>", re.IGNORECASE)
_STRUCTURAL_SYMBOLS = ("{", "}", ";", "=>", "=", "(", ")")


def _clean_code(raw: str) -> str:
    return html_lib.unescape(_TAG_RE.sub("", raw)).strip()


def _looks_like_code(code: str) -> bool:
    if len(code) > MIN_UNTAGGED_SNIPPET_CHARS:
        return True
    return len(code) > MIN_TAGGED_SNIPPET_CHARS and any(
        symbol in code for symbol in _STRUCTURAL_SYMBOLS
    )


def extract_code_snippets(
    html: str, limit: int = MAX_PAGE_CODE_SNIPPETS
) -> List[CodeSnippet]:
    """Collect existing code examples from a documentation page.

    First pass: language-tagged blocks (``<pre><code class="language-x">``
    and Markdown fences). Second pass: remaining ``<code>`` elements that
    look like code, skipping anything already collected.
    """
    snippets: List[CodeSnippet] = []
    seen: set[str] = set()

    tagged = [(m.group(1), m.group(2)) for m in _TAGGED_PRE_CODE_RE.finditer(html)]
    tagged += [(m.group(1), m.group(2)) for m in _MARKDOWN_FENCE_RE.finditer(html)]
    for language, raw in tagged:
        code = _clean_code(raw)
        if len(code) > MIN_TAGGED_SNIPPET_CHARS and code not in seen:
            seen.add(code)
            snippets.append(CodeSnippet(code=code, language=language.lower()))

    for match in _CODE_ELEMENT_RE.finditer(html):
        code = _clean_code(match.group(1))
        if code in seen or not _looks_like_code(code):
            continue
        seen.add(code)
        snippets.append(CodeSnippet(code=code))

    return snippets[:limit]
