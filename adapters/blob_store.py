"""Local filesystem blob store for uploaded meal images.

Files live under a single root directory and are addressed by a relative
key. The same files are served publicly under ``url_prefix``, so a key and
its public path are interchangeable through ``url_for`` / ``key_for``.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Optional

from app.config import Settings, settings as app_settings
from app.exceptions import StorageWriteError

logger = logging.getLogger("meallog.storage")


class DeleteStatus(str, enum.Enum):
    """Outcome of a best-effort delete"""

    DELETED = "deleted"
    MISSING = "missing"
    FAILED = "failed"


class LocalBlobStore:
    def __init__(self, root: Path | str, url_prefix: str = "/uploads/meals"):
        self.root = Path(root)
        self.url_prefix = "/" + url_prefix.strip("/")

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "LocalBlobStore":
        config = config or app_settings
        return cls(config.upload_root, config.upload_url_prefix)

    # ------------------ Addressing ------------------
    def url_for(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"

    def key_for(self, path: str) -> Optional[str]:
        """Return the key behind a public path, or None if it is not ours."""
        if not path or not path.startswith(f"{self.url_prefix}/"):
            return None
        key = path[len(self.url_prefix) + 1 :]
        return key or None

    def _resolve(self, key: str) -> Path:
        root = self.root.resolve()
        candidate = (root / key).resolve()
        try:
            candidate.relative_to(root)
        except ValueError as exc:
            raise ValueError(f"Invalid storage key: {key}") from exc
        if candidate == root:
            raise ValueError(f"Invalid storage key: {key}")
        return candidate

    # ------------------ Operations ------------------
    def put(self, key: str, data: bytes) -> str:
        """Write data at root/key, replacing any existing file.

        Returns the public path. Raises StorageWriteError on any failure.
        """
        try:
            target = self._resolve(key)
        except ValueError as exc:
            raise StorageWriteError(str(exc)) from exc

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            logger.error("Failed to write %s: %s", target, exc)
            raise StorageWriteError(
                "Failed to store image", details={"key": key}
            ) from exc

        logger.debug("Stored %s (%d bytes)", target, len(data))
        return self.url_for(key)

    def delete(self, key: str) -> DeleteStatus:
        """Remove root/key. Never raises; absence is not an error."""
        try:
            target = self._resolve(key)
        except ValueError:
            logger.warning("Refusing to delete outside the store root: %s", key)
            return DeleteStatus.FAILED

        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug("Nothing to delete at %s", target)
            return DeleteStatus.MISSING
        except OSError as exc:
            logger.warning("Failed to delete %s: %s", target, exc)
            return DeleteStatus.FAILED

        logger.info("Deleted image %s", target)
        return DeleteStatus.DELETED

    def exists(self, key: str) -> bool:
        try:
            return self._resolve(key).is_file()
        except ValueError:
            return False
