"""
Local Blob Storage Repository Implementation

Concrete implementation of IBlobStorageRepository for the local filesystem.
Blobs live under ``base_path`` as ``keyword/file_name``; downloads go through
HMAC-signed URLs served by the application's blob endpoint.
"""

import os
import tempfile
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from dropzone.domain.errors import StorageUnavailableError
from dropzone.domain.file_storage.signed_url_service import SignedUrlService
from dropzone.domain.file_storage.storage_repository import IBlobStorageRepository

# Keywords never contain dots, so no blob path can fall under this directory.
TEMP_DIR_NAME = ".tmp"


class LocalBlobStorageRepository(IBlobStorageRepository):
    """
    Local filesystem implementation of IBlobStorageRepository.

    Thread Safety:
        Writes go to a temporary file under ``base_path/.tmp`` and are moved
        into place with os.replace, so readers never observe partial blobs and
        concurrent writes to one path resolve as last-write-wins. Temporary
        files stranded by an interrupted write are listed as ``.tmp/<name>``
        and age out through orphan reclamation.

    Attributes:
        base_path: Root directory of the blob container
        signed_url_service: Signs download URLs for the blob endpoint
    """

    def __init__(
        self,
        base_path: str = "/tmp/dropzone",
        signed_url_service: Optional[SignedUrlService] = None,
    ):
        """
        Initialize the local blob storage repository.

        Args:
            base_path: Root directory for blob storage (default: /tmp/dropzone)
            signed_url_service: Signer for download URLs (created if omitted)
        """
        self.base_path = Path(base_path)
        self.signed_url_service = signed_url_service or SignedUrlService()

    def _resolve(self, path: str) -> Path:
        """
        Map a blob path to a filesystem path inside base_path.

        Raises:
            ValueError: If path is empty or escapes base_path
        """
        if not path or not path.strip():
            raise ValueError("path cannot be empty")

        base = self.base_path.resolve()
        full_path = (base / path).resolve()
        if full_path != base and base not in full_path.parents:
            raise ValueError(f"path escapes storage root: {path}")
        if full_path == base:
            raise ValueError(f"path does not name a blob: {path}")
        return full_path

    def ensure_container(self) -> None:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to create storage directory {self.base_path}: {e}", e
            ) from e

    def put(
        self,
        path: str,
        content: Union[bytes, BinaryIO],
        content_type: Optional[str] = None,
    ) -> str:
        """
        Write a blob atomically.

        ``content_type`` is not persisted on the filesystem.

        Returns:
            The blob path
        """
        full_path = self._resolve(path)

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            temp_dir = self.base_path / TEMP_DIR_NAME
            temp_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=temp_dir)
            try:
                with os.fdopen(fd, "wb") as f:
                    if isinstance(content, (bytes, bytearray)):
                        f.write(content)
                    else:
                        # Read and write in chunks for memory efficiency
                        while True:
                            chunk = content.read(8192)
                            if not chunk:
                                break
                            f.write(chunk)
                os.replace(tmp_name, full_path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageUnavailableError(f"Failed to write blob {path}: {e}", e) from e

        return path

    def get(self, path: str) -> Optional[BinaryIO]:
        try:
            full_path = self._resolve(path)
        except ValueError:
            return None

        try:
            with open(full_path, "rb") as f:
                content = BytesIO(f.read())
        except (FileNotFoundError, IsADirectoryError):
            return None
        except OSError as e:
            raise StorageUnavailableError(f"Failed to read blob {path}: {e}", e) from e

        content.seek(0)
        return content

    def delete(self, path: str) -> bool:
        """
        Delete a blob. Deleting a missing blob succeeds.

        Directories left empty are not removed.
        """
        try:
            full_path = self._resolve(path)
        except ValueError:
            return True  # Idempotent - invalid path treated as success

        try:
            full_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageUnavailableError(f"Failed to delete blob {path}: {e}", e) from e
        return True

    def list_paths(self, prefix: str = "") -> List[str]:
        if not self.base_path.exists():
            return []

        try:
            paths = [
                candidate.relative_to(self.base_path).as_posix()
                for candidate in self.base_path.rglob("*")
                if candidate.is_file()
            ]
        except OSError as e:
            raise StorageUnavailableError(f"Failed to list blobs: {e}", e) from e

        return sorted(p for p in paths if p.startswith(prefix))

    def generate_signed_url(self, path: str, ttl_minutes: int = 15) -> str:
        return self.signed_url_service.generate_signed_url(path, ttl_minutes).url

    def get_updated_at(self, path: str) -> Optional[datetime]:
        try:
            full_path = self._resolve(path)
            mtime = full_path.stat().st_mtime
        except (ValueError, FileNotFoundError):
            return None
        except OSError as e:
            raise StorageUnavailableError(f"Failed to stat blob {path}: {e}", e) from e
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def exists(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except (OSError, ValueError):
            # Never raise exceptions - return False for errors
            return False
