import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from dochub.core.config import settings
from dochub.core.errors import StorageError, StoredFileNotFoundError
from dochub.schemas.file import StoredFileOut
from dochub.utils.files import content_type_for, generate_file_id, get_file_extension, utc_now_iso

logger = logging.getLogger(__name__)


@dataclass
class StoredFileStat:
    path: str
    name: str
    size: int
    mtime: float
    content_type: str


class LocalStorageService:
    """Uploads kept as ``<id><ext>`` files in a single flat directory."""

    def __init__(self, root: Optional[str] = None):
        # None follows settings.upload_path, which may change at runtime
        self._root = root

    @property
    def root(self) -> str:
        return os.path.realpath(self._root or settings.upload_path)

    def _ensure_root(self) -> str:
        root = self.root
        os.makedirs(root, exist_ok=True)
        return root

    def save(self, filename: str, file_content: bytes, content_type: Optional[str] = None) -> StoredFileOut:
        file_id = generate_file_id()
        stored_name = f"{file_id}{get_file_extension(filename)}"
        path = os.path.join(self._ensure_root(), stored_name)
        try:
            with open(path, "wb") as f:
                f.write(file_content)
        except OSError as exc:
            logger.error("Could not write upload %s to %s: %s", filename, path, exc)
            raise StorageError("Failed to save file", details=str(exc)) from exc

        logger.info("Stored %s as %s (%d bytes)", filename, stored_name, len(file_content))
        return StoredFileOut(
            id=file_id,
            name=filename,
            size=len(file_content),
            type=content_type or content_type_for(filename),
            uploaded_at=utc_now_iso(),
            path=path,
            url=f"{settings.API_PREFIX}/files/{stored_name}",
        )

    def resolve(self, file_id: str) -> str:
        """Path of a stored file, accepting ``<id><ext>`` or the bare ``<id>``.

        Only the final path component of ``file_id`` is used and the result must
        sit directly inside the uploads directory.
        """
        name = os.path.basename((file_id or "").replace("\\", "/"))
        if not name or name.startswith("."):
            raise StoredFileNotFoundError("File not found")

        root = self.root
        path = os.path.realpath(os.path.join(root, name))
        if os.path.dirname(path) != root:
            raise StoredFileNotFoundError("File not found")
        if os.path.isfile(path):
            return path

        if os.path.isdir(root):
            for entry in sorted(os.listdir(root)):
                if os.path.splitext(entry)[0] == name:
                    return os.path.join(root, entry)
        raise StoredFileNotFoundError("File not found")

    def stat(self, file_id: str) -> StoredFileStat:
        path = self.resolve(file_id)
        st = os.stat(path)
        name = os.path.basename(path)
        return StoredFileStat(
            path=path, name=name, size=st.st_size, mtime=st.st_mtime, content_type=content_type_for(name)
        )

    def read(self, file_id: str) -> bytes:
        path = self.resolve(file_id)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as exc:
            logger.error("Could not read stored file %s: %s", path, exc)
            raise StorageError("Failed to serve file", details=str(exc)) from exc

    def delete(self, file_id: str) -> None:
        path = self.resolve(file_id)
        try:
            os.remove(path)
        except OSError as exc:
            logger.error("Could not delete stored file %s: %s", path, exc)
            raise StorageError("Failed to delete file", details=str(exc)) from exc
        logger.info("Deleted stored file %s", os.path.basename(path))

    def purge_expired(self, max_age_hours: float, now: Optional[float] = None) -> int:
        """Delete files older than ``max_age_hours``; returns how many were removed."""
        root = self.root
        if max_age_hours <= 0 or not os.path.isdir(root):
            return 0

        cutoff = (now if now is not None else time.time()) - max_age_hours * 3600
        removed = 0
        for entry in os.listdir(root):
            path = os.path.join(root, entry)
            if entry.startswith(".") or not os.path.isfile(path):
                continue
            try:
                if os.path.getmtime(path) < cutoff:
                    os.remove(path)
                    removed += 1
            except OSError as exc:
                logger.warning("Could not expire %s: %s", entry, exc)
        if removed:
            logger.info("Expired %d stored file(s) older than %sh", removed, max_age_hours)
        return removed

storage_service = LocalStorageService()
