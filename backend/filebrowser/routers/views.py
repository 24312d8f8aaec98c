from __future__ import annotations

from html import escape

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from filebrowser.dependencies import get_file_service
from filebrowser.models import MarkdownView
from filebrowser.services import FileService

router = APIRouter()
page_router = APIRouter()

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
<header>
<h1>{title}</h1>
<p class="meta">{meta}</p>
<p class="tags">{tags}</p>
</header>
<article>
{html}
</article>
</body>
</html>
"""


def _render_page(view: MarkdownView) -> str:
    meta = " · ".join(
        escape(value) for value in (view.id, view.author, view.date) if value
    )
    tags = " ".join(f'<span class="tag">#{escape(tag)}</span>' for tag in view.tags)
    return PAGE_TEMPLATE.format(title=escape(view.title), meta=meta, tags=tags, html=view.html)


@router.get("/documents/{file_path:path}", response_model=MarkdownView)
def get_document(file_path: str, service: FileService = Depends(get_file_service)):
    """Return a document's metadata, tags and rendered HTML."""
    return service.view_document(file_path)


@page_router.get("/view/{file_path:path}", response_class=HTMLResponse)
def view_page(file_path: str, service: FileService = Depends(get_file_service)):
    """Serve a rendered document as a standalone HTML page."""
    return HTMLResponse(_render_page(service.view_document(file_path)))
