from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, computed_field

from filebrowser.documents import MatchType

SIZE_UNITS = ["B", "KB", "MB", "GB"]


def format_size(size: int) -> str:
    value = float(size)
    order = 0
    while value >= 1024 and order < len(SIZE_UNITS) - 1:
        order += 1
        value /= 1024
    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {SIZE_UNITS[order]}"


class FileItem(BaseModel):
    name: str
    path: str
    is_directory: bool
    size: int = 0
    last_modified: datetime
    extension: str | None = None

    # Populated for markdown files only
    title: str | None = None
    id: str | None = None
    author: str | None = None
    tags: list[str] = []

    @computed_field
    @property
    def formatted_size(self) -> str:
        if self.is_directory:
            return "-"
        return format_size(self.size)


class DirectoryListing(BaseModel):
    current_path: str
    parent_path: str | None = None
    items: list[FileItem] = []


class MarkdownView(BaseModel):
    title: str
    id: str | None = None
    author: str | None = None
    date: str | None = None
    tags: list[str] = []
    html: str
    path: str
    metadata: dict[str, str] = {}


class DocumentContent(BaseModel):
    path: str
    metadata: dict[str, str]
    content: str
    tags: list[str]


class SearchMatch(BaseModel):
    name: str
    path: str
    title: str
    id: str | None = None
    tags: list[str] = []
    match_type: MatchType
    snippet: str | None = None
    last_modified: datetime


class SearchResponse(BaseModel):
    query: str
    total: int
    results: list[SearchMatch]
