from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse
from pydantic import BaseModel

from filebrowser.dependencies import get_file_service
from filebrowser.models import DirectoryListing, DocumentContent
from filebrowser.services import FileService

router = APIRouter()


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class WriteRequest(BaseModel):
    content: str = ""


class FolderCreate(BaseModel):
    path: str = ""  # parent directory relative to the data root
    name: str


class RenameRequest(BaseModel):
    path: str
    new_name: str


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("/files", response_model=DirectoryListing)
def list_files(path: str = "", service: FileService = Depends(get_file_service)):
    """List a directory under the data root."""
    return service.list_directory(path)


@router.get("/raw/{file_path:path}", response_class=PlainTextResponse)
def get_raw(file_path: str, service: FileService = Depends(get_file_service)):
    """Return a file's text unchanged."""
    return PlainTextResponse(service.read_raw(file_path))


@router.get("/download/{file_path:path}")
def download(file_path: str, service: FileService = Depends(get_file_service)):
    target = service.download_path(file_path)
    return FileResponse(target, media_type="application/octet-stream", filename=target.name)


@router.get("/read/{file_path:path}", response_model=DocumentContent)
def read_document(file_path: str, service: FileService = Depends(get_file_service)):
    """Return parsed metadata, front-matter-free body and tags."""
    return service.read_document(file_path)


@router.put("/write/{file_path:path}")
def write_document(
    file_path: str,
    body: WriteRequest,
    service: FileService = Depends(get_file_service),
):
    """Create or overwrite a document."""
    rel = service.write_document(file_path, body.content)
    return {"path": rel, "status": "saved"}


@router.post("/upload")
async def upload_files(
    files: list[UploadFile] = File(...),
    path: str = Form(""),
    service: FileService = Depends(get_file_service),
):
    """Upload one or more files into a directory."""
    payload = [(upload.filename, await upload.read()) for upload in files]
    stored = service.upload(path, payload)
    return {"paths": stored, "status": "uploaded", "message": f"{len(stored)} file(s) uploaded"}


@router.post("/folders")
def create_folder(body: FolderCreate, service: FileService = Depends(get_file_service)):
    rel = service.create_folder(body.path, body.name)
    return {"path": rel, "status": "created"}


@router.delete("/entries/{entry_path:path}")
def delete_entry(
    entry_path: str,
    is_directory: bool = False,
    service: FileService = Depends(get_file_service),
):
    """Delete a file, or a directory if it is empty."""
    service.delete(entry_path, is_directory)
    return {"path": entry_path, "status": "deleted"}


@router.post("/rename")
def rename_entry(body: RenameRequest, service: FileService = Depends(get_file_service)):
    rel = service.rename(body.path, body.new_name)
    return {"from": body.path, "to": rel, "status": "renamed"}
