from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from filebrowser.dependencies import get_file_service
from filebrowser.models import SearchResponse
from filebrowser.services import FileService

router = APIRouter()


@router.get("/search", response_model=SearchResponse)
def search_documents(
    q: str = Query(""),
    path: str = "",
    recursive: bool = True,
    service: FileService = Depends(get_file_service),
) -> SearchResponse:
    """Search markdown ids, titles, tags and bodies under *path*."""
    results = service.search(q, path, recursive=recursive)
    return SearchResponse(query=q, total=len(results), results=results)
