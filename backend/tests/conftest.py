import os
import sys
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep the module-level app from staging into the working directory.
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="gateway-uploads-"))
os.environ.setdefault("AWS_BUCKET_NAME", "test-bucket")

from bucket_gateway.core.config import Settings
from bucket_gateway.core.errors import StorageError
from bucket_gateway.main import create_app
from bucket_gateway.services import storage as storage_service


class DummyStorage(storage_service.StorageService):
    """In-memory bucket that records every call made against it."""

    def __init__(self, settings: Settings) -> None:  # type: ignore[super-init-not-called]
        self.settings = settings
        self.bucket = settings.bucket_name
        self.objects: dict[str, bytes] = {}
        self.calls: list[tuple[str, str | None]] = []
        self.staged_paths: list[Path] = []
        self.fail_with: StorageError | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def list_keys(self) -> list[str]:  # type: ignore[override]
        self.calls.append(("list", None))
        self._check()
        return list(self.objects)

    async def upload_file(self, path: Path, key: str) -> str:  # type: ignore[override]
        self.calls.append(("upload", key))
        self.staged_paths.append(path)
        assert path.exists()
        self._check()
        self.objects[key] = path.read_bytes()
        return self.object_location(key)

    def object_location(self, key: str) -> str:  # type: ignore[override]
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def create_presigned_get(self, key: str, expires_in: int = 60) -> str:  # type: ignore[override]
        self.calls.append(("sign", key))
        self._check()
        return f"https://{self.bucket}.s3.amazonaws.com/{key}?X-Amz-Expires={expires_in}"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        AWS_ACCESS_KEY_ID="test",
        AWS_SECRET_ACCESS_KEY="test",
        AWS_REGION="us-east-1",
        AWS_BUCKET_NAME="test-bucket",
        UPLOAD_DIR=tmp_path / "uploads",
        STATIC_DIR=tmp_path / "public",
    )


@pytest.fixture
def storage(settings) -> DummyStorage:
    return DummyStorage(settings)


@pytest.fixture
def app_instance(settings, storage):
    return create_app(settings, storage)


@pytest_asyncio.fixture
async def client(app_instance):
    transport = ASGITransport(app=app_instance)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
