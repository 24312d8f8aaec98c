"""Filesystem operations behind the HTTP routes.

Every method takes caller-supplied relative paths and routes them through
the injected :class:`PathResolver` before touching the disk.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from filebrowser import documents
from filebrowser.errors import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    PathUnsafeError,
)
from filebrowser.models import (
    DirectoryListing,
    DocumentContent,
    FileItem,
    MarkdownView,
    SearchMatch,
)
from filebrowser.paths import PathResolver

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


def _mtime(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


def _is_markdown(path: Path) -> bool:
    return path.suffix.lower() == MARKDOWN_SUFFIX


def _entry_name(name: str | None) -> str:
    """Validate a single path component supplied by the caller."""
    cleaned = (name or "").strip()
    if not cleaned or cleaned in (".", "..") or "/" in cleaned or "\\" in cleaned:
        raise InvalidRequestError(f"Invalid name: {name!r}")
    return cleaned


class FileService:
    def __init__(self, resolver: PathResolver) -> None:
        self.resolver = resolver

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _existing_file(self, rel_path: str) -> Path:
        file_path = self.resolver.resolve_safe(rel_path)
        if not file_path.is_file():
            raise NotFoundError(rel_path)
        return file_path

    def _existing_dir(self, rel_path: str) -> Path:
        dir_path = self.resolver.resolve_safe(rel_path)
        if not dir_path.is_dir():
            raise NotFoundError(rel_path)
        return dir_path

    def _read_text(self, file_path: Path) -> str:
        try:
            return file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise InvalidRequestError("File is not UTF-8 text")

    def _file_item(self, entry: Path) -> FileItem:
        rel = self.resolver.relative_to_root(entry)
        if entry.is_dir():
            return FileItem(
                name=entry.name,
                path=rel,
                is_directory=True,
                last_modified=_mtime(entry),
            )

        item = FileItem(
            name=entry.name,
            path=rel,
            is_directory=False,
            size=entry.stat().st_size,
            last_modified=_mtime(entry),
            extension=entry.suffix or None,
        )
        if _is_markdown(entry):
            result = documents.load_document(entry)
            if result.ok:
                meta = result.document.metadata
                item.title = meta.get("title")
                item.id = meta.get("id")
                item.author = meta.get("author")
                item.tags = result.document.tags
        return item

    def _iter_markdown(self, directory: Path, recursive: bool):
        candidates = directory.rglob("*") if recursive else directory.iterdir()
        for path in sorted(candidates):
            if not _is_markdown(path) or not path.is_file():
                continue
            # Symlinks may point outside the root
            if not self.resolver.is_safe(path):
                continue
            yield path

    # -----------------------------------------------------------------------
    # Browsing
    # -----------------------------------------------------------------------

    def list_directory(self, rel_path: str = "") -> DirectoryListing:
        """List a directory: subdirectories first, then files, each by name."""
        directory = self._existing_dir(rel_path)
        entries = sorted(directory.iterdir(), key=lambda p: (not p.is_dir(), p.name))

        items: list[FileItem] = []
        for entry in entries:
            # Symlinks may point outside the root
            if not self.resolver.is_safe(entry):
                continue
            try:
                items.append(self._file_item(entry))
            except OSError as exc:
                logger.warning("Skipping unreadable entry %s: %s", entry, exc)

        current = self.resolver.relative_to_root(directory)
        return DirectoryListing(
            current_path=current,
            parent_path=self.resolver.get_parent(current),
            items=items,
        )

    def view_document(self, rel_path: str) -> MarkdownView:
        file_path = self._existing_file(rel_path)
        doc = documents.parse(self._read_text(file_path))
        meta = doc.metadata
        return MarkdownView(
            title=meta.get("title", file_path.stem),
            id=meta.get("id"),
            author=meta.get("author"),
            date=meta.get("date"),
            tags=doc.tags,
            html=documents.render_html(doc.body),
            path=self.resolver.relative_to_root(file_path),
            metadata=meta,
        )

    def read_raw(self, rel_path: str) -> str:
        return self._read_text(self._existing_file(rel_path))

    def download_path(self, rel_path: str) -> Path:
        return self._existing_file(rel_path)

    def read_document(self, rel_path: str) -> DocumentContent:
        file_path = self._existing_file(rel_path)
        doc = documents.parse(self._read_text(file_path))
        return DocumentContent(
            path=self.resolver.relative_to_root(file_path),
            metadata=doc.metadata,
            content=doc.body,
            tags=doc.tags,
        )

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------

    def write_document(self, rel_path: str, content: str) -> str:
        """Create or overwrite a text file, creating parent directories."""
        file_path = self.resolver.resolve_safe(rel_path)
        if file_path == self.resolver.root or file_path.is_dir():
            raise InvalidRequestError("Path is a directory")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        rel = self.resolver.relative_to_root(file_path)
        logger.info("Wrote %s (%d chars)", rel, len(content))
        return rel

    def upload(self, rel_path: str, files: list[tuple[str | None, bytes]]) -> list[str]:
        """Store uploaded files in a directory. Empty uploads are skipped."""
        directory = self.resolver.resolve_safe(rel_path)
        names = [_entry_name(PurePosixPath((filename or "").replace("\\", "/")).name)
                 for filename, _ in files]

        directory.mkdir(parents=True, exist_ok=True)
        stored: list[str] = []
        for name, (_, data) in zip(names, files):
            if not data:
                continue
            target = directory / name
            if not self.resolver.is_safe(target):
                raise PathUnsafeError(name)
            target.write_bytes(data)
            stored.append(self.resolver.relative_to_root(target))

        logger.info("Uploaded %d file(s) to /%s", len(stored), rel_path)
        return stored

    def create_folder(self, rel_path: str, name: str) -> str:
        if not (name or "").strip():
            raise InvalidRequestError("Folder name is required")
        base = rel_path.rstrip("/")
        target = self.resolver.resolve_safe(f"{base}/{name.strip()}" if base else name.strip())
        target.mkdir(parents=True, exist_ok=True)
        rel = self.resolver.relative_to_root(target)
        logger.info("Created folder %s", rel)
        return rel

    def delete(self, rel_path: str, is_directory: bool) -> None:
        """Delete a file, or an empty directory."""
        target = self.resolver.resolve_safe(rel_path)
        if target == self.resolver.root:
            raise InvalidRequestError("The data root cannot be deleted")

        if is_directory:
            if not target.is_dir():
                raise NotFoundError(rel_path)
            if any(target.iterdir()):
                raise ConflictError("Directory not empty")
            target.rmdir()
        else:
            if not target.is_file():
                raise NotFoundError(rel_path)
            target.unlink()
        logger.info("Deleted %s", rel_path)

    def rename(self, rel_path: str, new_name: str) -> str:
        """Rename a file or directory in place; returns the new relative path."""
        source = self.resolver.resolve_safe(rel_path)
        if source == self.resolver.root:
            raise InvalidRequestError("The data root cannot be renamed")
        if not source.exists():
            raise NotFoundError(rel_path)

        destination = source.parent / _entry_name(new_name)
        if not self.resolver.is_safe(destination):
            raise PathUnsafeError(new_name)
        if destination.exists():
            raise ConflictError("Destination already exists")

        source.rename(destination)
        rel = self.resolver.relative_to_root(destination)
        logger.info("Renamed %s -> %s", rel_path, rel)
        return rel

    # -----------------------------------------------------------------------
    # Search
    # -----------------------------------------------------------------------

    def search(self, query: str, rel_path: str = "", recursive: bool = True) -> list[SearchMatch]:
        """Match *query* against every markdown file under *rel_path*.

        Files that cannot be read are skipped. Blank queries and paths
        outside the root yield no results.
        """
        if not query or not query.strip():
            return []
        try:
            directory = self._existing_dir(rel_path)
        except PathUnsafeError:
            return []

        results: list[SearchMatch] = []
        skipped = 0
        for md_file in self._iter_markdown(directory, recursive):
            loaded = documents.load_document(md_file)
            if not loaded.ok:
                skipped += 1
                continue
            doc = loaded.document
            hit = documents.search(doc.body, doc.metadata, doc.tags, query)
            if hit is None:
                continue
            results.append(SearchMatch(
                name=md_file.name,
                path=self.resolver.relative_to_root(md_file),
                title=doc.metadata.get("title", md_file.stem),
                id=doc.metadata.get("id"),
                tags=doc.tags,
                match_type=hit.match_type,
                snippet=hit.snippet,
                last_modified=_mtime(md_file),
            ))

        if skipped:
            logger.warning("Search for %r skipped %d unreadable file(s)", query, skipped)
        return results
