from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from filebrowser.config import Settings
from filebrowser.main import create_app
from filebrowser.paths import PathResolver
from filebrowser.services import FileService


@pytest.fixture()
def root(tmp_path: Path) -> Path:
    data = tmp_path / "data"
    data.mkdir()
    return data


@pytest.fixture()
def resolver(root: Path) -> PathResolver:
    return PathResolver(root)


@pytest.fixture()
def service(resolver: PathResolver) -> FileService:
    return FileService(resolver)


@pytest.fixture()
def client(root: Path) -> TestClient:
    return TestClient(create_app(Settings(data_path=root)))


@pytest.fixture()
def write(root: Path):
    """Write a text file under the data root, creating parents."""

    def _write(rel: str, text: str) -> Path:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
