from pathlib import Path
from typing import Optional
import logging
import re

from ..core.config import settings

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"[A-Za-z0-9_.\-]+")


class LocalPhotoStore:
    """
    Key/value text storage kept on the local machine only (one file per key).
    Not shared between hosts and not guarded against concurrent writers.
    """

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.PHOTO_STORAGE_DIR)

    def _path_for(self, key: str) -> Path:
        if not key or not _KEY_PATTERN.fullmatch(key) or key in (".", ".."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.base_dir / f"{key}.txt"

    def set_item(self, key: str, value: str):
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(value, encoding="utf-8")
        logger.debug(f"Stored {len(value)} chars under {key}")

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def remove_item(self, key: str) -> bool:
        path = self._path_for(key)
        if not path.exists():
            return False
        path.unlink()
        return True


local_photo_store = LocalPhotoStore()
