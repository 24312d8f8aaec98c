"""Markdown document parsing: front matter, tags, rendering and matching.

The front-matter grammar is intentionally narrow: flat ``key: value``
lines between two ``---`` lines at the very top of the file, plus one
inline ``tags: [a, b]`` list. Anything richer is not interpreted.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path

import markdown
from frontmatter.default_handlers import BaseHandler
from pydantic import BaseModel

logger = logging.getLogger(__name__)

FRONT_MATTER_RE = re.compile(r"\A---\r?\n(.*?)^---(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)
INLINE_TAGS_RE = re.compile(r"^[ \t]*tags[ \t]*:[ \t]*\[(.*?)\]", re.IGNORECASE | re.MULTILINE)
HASHTAG_RE = re.compile(r"(?<!\w)#(\w+)")
WIKILINK_RE = re.compile(r"\[\[([^\]]+)\]\]")
WHITESPACE_RE = re.compile(r"\s+")

SNIPPET_RADIUS = 50

MARKDOWN_EXTENSIONS = [
    "tables",
    "footnotes",
    "fenced_code",
    "attr_list",
    "def_list",
    "abbr",
    "toc",
    "sane_lists",
    "pymdownx.magiclink",
]


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class MatchType(str, Enum):
    ID = "ID"
    TITLE = "Title"
    TAG = "Tag"
    CONTENT = "Content"


class ParsedDocument(BaseModel):
    metadata: dict[str, str] = {}
    tags: list[str] = []
    body: str = ""


class SearchHit(BaseModel):
    match_type: MatchType
    snippet: str | None = None


class LoadResult(BaseModel):
    """Outcome of loading one file during a bulk listing or search."""

    path: Path
    document: ParsedDocument | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


# ---------------------------------------------------------------------------
# Front matter
# ---------------------------------------------------------------------------

def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


class FlatFrontMatterHandler(BaseHandler):
    """python-frontmatter handler for flat ``key: value`` blocks."""

    FM_BOUNDARY = FRONT_MATTER_RE
    START_DELIMITER = END_DELIMITER = "---"

    def detect(self, text: str) -> bool:
        return bool(self.FM_BOUNDARY.match(text))

    def split(self, text: str) -> tuple[str, str]:
        match = self.FM_BOUNDARY.match(text)
        if match is None:
            raise ValueError("No front matter block")
        return match.group(1), text[match.end():]

    def load(self, fm: str, **kwargs) -> dict[str, str]:
        metadata: dict[str, str] = {}
        for line in fm.splitlines():
            key, sep, value = line.partition(":")
            if not sep:
                continue
            key = key.strip().lower()
            value = _unquote(value.strip())
            if key and value:
                metadata[key] = value
        return metadata


FRONT_MATTER = FlatFrontMatterHandler()


def extract_front_matter(raw: str) -> tuple[dict[str, str], str]:
    """Split *raw* into (metadata, body).

    Without a leading ``---`` block the metadata is empty and the body is
    *raw* unchanged.
    """
    if not FRONT_MATTER.detect(raw):
        return {}, raw
    fm, body = FRONT_MATTER.split(raw)
    return FRONT_MATTER.load(fm), body


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

def extract_tags(raw: str) -> list[str]:
    """Collect tags from front matter, hashtags and ``[[wiki links]]``.

    Hashtags and wiki links are scanned over the whole text, front matter
    included. Duplicates are dropped case-insensitively; the first
    spelling seen is kept.
    """
    found: dict[str, str] = {}

    def add(tag: str) -> None:
        if tag:
            found.setdefault(tag.casefold(), tag)

    if FRONT_MATTER.detect(raw):
        fm, _ = FRONT_MATTER.split(raw)
        inline = INLINE_TAGS_RE.search(fm)
        if inline:
            for item in inline.group(1).split(","):
                add(_unquote(item.strip()))

    for match in HASHTAG_RE.finditer(raw):
        add(match.group(1))

    for match in WIKILINK_RE.finditer(raw):
        add(match.group(1).strip())

    return list(found.values())


def parse(raw: str) -> ParsedDocument:
    metadata, body = extract_front_matter(raw)
    return ParsedDocument(metadata=metadata, tags=extract_tags(raw), body=body)


def load_document(file_path: Path) -> LoadResult:
    """Read and parse one file, capturing failures instead of raising."""
    try:
        raw = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping unreadable document %s: %s", file_path, exc)
        return LoadResult(path=file_path, error=str(exc))
    return LoadResult(path=file_path, document=parse(raw))


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render_html(body: str) -> str:
    """Render a front-matter-free markdown body to HTML."""
    return markdown.markdown(body, extensions=MARKDOWN_EXTENSIONS)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

def _contains(value: str | None, pattern: re.Pattern[str]) -> bool:
    return value is not None and pattern.search(value) is not None


def make_snippet(body: str, start_index: int, length: int) -> str:
    start = max(0, start_index - SNIPPET_RADIUS)
    end = min(len(body), start_index + length + SNIPPET_RADIUS)
    window = WHITESPACE_RE.sub(" ", body[start:end]).strip()
    return ("..." if start > 0 else "") + window + ("..." if end < len(body) else "")


def search(
    body: str,
    metadata: dict[str, str],
    tags: list[str],
    query: str,
) -> SearchHit | None:
    """Classify how *query* matches a document, or return None.

    Checks id, title, tags and body in that order and stops at the first
    hit. Only body hits carry a snippet.
    """
    if not query or not query.strip():
        return None
    pattern = re.compile(re.escape(query), re.IGNORECASE)

    if _contains(metadata.get("id"), pattern):
        return SearchHit(match_type=MatchType.ID)
    if _contains(metadata.get("title"), pattern):
        return SearchHit(match_type=MatchType.TITLE)
    if any(_contains(tag, pattern) for tag in tags):
        return SearchHit(match_type=MatchType.TAG)

    match = pattern.search(body)
    if match is None:
        return None
    snippet = make_snippet(body, match.start(), match.end() - match.start())
    return SearchHit(match_type=MatchType.CONTENT, snippet=snippet)
