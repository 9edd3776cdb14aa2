import asyncio
import logging
import os
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from starlette.datastructures import UploadFile

logger = logging.getLogger(__name__)


def ensure_staging_dir(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    return directory


@asynccontextmanager
async def staged_upload(upload: UploadFile, directory: Path) -> AsyncIterator[Path]:
    """Copy an uploaded stream to a private file in ``directory``.

    The staged file is removed when the block exits, whatever the outcome.
    A failed removal is logged and otherwise ignored.
    """
    fd, name = tempfile.mkstemp(dir=directory, prefix="upload-")
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as target:
            await asyncio.to_thread(shutil.copyfileobj, upload.file, target)
        yield path
    finally:
        try:
            path.unlink()
        except OSError:
            logger.exception("Failed to delete staged file %s", path)
