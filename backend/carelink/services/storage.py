"""
Local filesystem storage for uploaded medical documents.
"""

import logging
import os
import time
import uuid

from carelink.core.config import settings

logger = logging.getLogger(__name__)


class LocalFileStorage:
    def __init__(self, root: str | None = None):
        self.root = os.path.abspath(root or settings.UPLOAD_DIR)

    def _safe_name(self, original_name: str) -> str:
        name = os.path.basename(original_name.replace("\\", "/")) or "document"
        # millisecond stamp alone collides for same-name uploads
        return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{name}"

    def store(self, data: bytes, original_name: str) -> tuple[str, str]:
        """Write *data* to disk; returns ``(stored_name, path)``."""
        os.makedirs(self.root, exist_ok=True)
        stored_name = self._safe_name(original_name)
        path = os.path.join(self.root, stored_name)
        with open(path, "xb") as f:
            f.write(data)
        logger.info("Stored %s (%d bytes)", path, len(data))
        return stored_name, path

    def remove(self, path: str) -> None:
        """Delete a stored file; a missing file is ignored."""
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        logger.info("Removed %s", path)


def get_storage() -> LocalFileStorage:
    """FastAPI dependency — the configured document storage."""
    return LocalFileStorage()
