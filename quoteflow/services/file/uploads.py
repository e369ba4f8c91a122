"""On-disk storage for uploaded file bytes."""

import logging
import uuid
from pathlib import Path

from quoteflow.config import settings

logger = logging.getLogger(__name__)


class UploadDirectory:
    """Keeps uploaded bytes under generated names inside one directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def save(self, content: bytes, filename: str) -> str:
        """
        Write an upload to disk.

        Args:
            content: Raw file bytes
            filename: Original file name (only its extension is kept)

        Returns:
            The generated stored name
        """
        self.root.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}{Path(filename).suffix.lower()}"
        (self.root / stored_name).write_bytes(content)
        logger.info(f"Stored upload {filename} as {stored_name} ({len(content)} bytes)")
        return stored_name

    def read(self, stored_name: str) -> bytes:
        """Read an upload back; raises FileNotFoundError if it is gone."""
        return self._path(stored_name).read_bytes()

    def delete(self, stored_name: str) -> None:
        path = self._path(stored_name)
        if path.exists():
            path.unlink()
        else:
            logger.warning(f"Upload {stored_name} already removed")

    def _path(self, stored_name: str) -> Path:
        # Stored names are generated; reject anything that could escape root
        if Path(stored_name).name != stored_name:
            raise ValueError(f"Invalid stored name: {stored_name!r}")
        return self.root / stored_name


def get_uploads() -> UploadDirectory:
    """FastAPI dependency for the configured upload directory."""
    return UploadDirectory(settings.upload_dir)
