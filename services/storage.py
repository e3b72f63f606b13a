import logging
import uuid
from pathlib import Path

from core.config import settings

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Writes chat attachments under the upload directory and returns their public URL."""

    def __init__(self, root: str = None, subdir: str = None, url_prefix: str = "/uploads"):
        self.root = Path(root or settings.UPLOAD_DIR)
        self.subdir = subdir or settings.CHAT_FILES_SUBDIR
        self.url_prefix = url_prefix.rstrip("/")
        self.directory = self.root / self.subdir
        self.directory.mkdir(parents=True, exist_ok=True)

    def save(self, content: bytes, filename: str) -> str:
        # Fresh key per upload; only the extension of the original name survives
        file_ext = Path(filename).suffix.lower() if filename else ""
        key = f"{uuid.uuid4().hex}{file_ext}"
        file_path = self.directory / key

        with open(file_path, "wb") as buffer:
            buffer.write(content)

        logger.info(f"Stored {len(content)} bytes as {file_path}")
        return f"{self.url_prefix}/{self.subdir}/{key}"

    def path_for(self, url: str) -> Path:
        """Filesystem location of a URL returned by save()."""
        return self.directory / url.rsplit("/", 1)[-1]
