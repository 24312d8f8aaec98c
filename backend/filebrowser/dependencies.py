from fastapi import Request

from filebrowser.services import FileService


def get_file_service(request: Request) -> FileService:
    """Return the FileService bound to this application's data root."""
    return request.app.state.file_service
