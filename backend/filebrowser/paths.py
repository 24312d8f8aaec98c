from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath

from filebrowser.errors import PathUnsafeError

logger = logging.getLogger(__name__)


class PathResolver:
    """Map caller-supplied relative paths onto a fixed data root."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def resolve(self, relative: str) -> Path:
        """Join *relative* onto the root and canonicalize it.

        No containment check happens here; see :meth:`is_safe`.
        """
        if not relative:
            return self.root
        return (self.root / relative.replace("/", os.sep)).resolve()

    def is_safe(self, absolute: str | Path) -> bool:
        """Return True if *absolute* is the root or lies beneath it.

        Comparison is by path segments, so ``/data-evil`` is not treated
        as inside ``/data``.
        """
        candidate = Path(absolute).resolve()
        root = self.root.resolve()
        return candidate == root or root in candidate.parents

    def resolve_safe(self, relative: str) -> Path:
        resolved = self.resolve(relative)
        if not self.is_safe(resolved):
            logger.warning("Rejected path outside data root: %r", relative)
            raise PathUnsafeError(relative)
        return resolved

    def relative_to_root(self, absolute: Path) -> str:
        """Root-relative forward-slash form of *absolute* ('' for the root)."""
        rel = Path(absolute).relative_to(self.root).as_posix()
        return "" if rel == "." else rel

    @staticmethod
    def get_parent(relative: str | None) -> str | None:
        """Parent of a relative path, '' meaning the root.

        Returns None for the root itself or input without any component.
        """
        if not relative:
            return None
        normalized = relative.replace("\\", "/").strip("/")
        if not normalized or normalized == ".":
            return None
        parent = PurePosixPath(normalized).parent.as_posix()
        return "" if parent == "." else parent
