"""
Google Cloud Storage Blob Repository Implementation

Concrete implementation of IBlobStorageRepository for Google Cloud Storage.
Blobs are objects named ``keyword/file_name`` in a single bucket; downloads
use V4 signed URLs issued by GCS.
"""

import logging
import os
from datetime import timedelta
from io import BytesIO
from typing import BinaryIO, List, Optional, Union

from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage
from google.cloud.exceptions import NotFound
from google.oauth2 import service_account

from dropzone.domain.errors import StorageUnavailableError
from dropzone.domain.file_storage.storage_repository import IBlobStorageRepository

logger = logging.getLogger(__name__)

DEFAULT_GCS_TIMEOUT_SECONDS = 30.0


def create_gcs_client(credentials_path: Optional[str] = None) -> storage.Client:
    """
    Create a GCS client.

    Uses the service account file when the path exists, default
    credentials otherwise.
    """
    if credentials_path and os.path.exists(credentials_path):
        credentials = service_account.Credentials.from_service_account_file(
            credentials_path
        )
        print(f"GCS client initialized with service account: {credentials_path}")
        return storage.Client(credentials=credentials)

    print("GCS client initialized with default credentials")
    return storage.Client()


class GCSBlobStorageRepository(IBlobStorageRepository):
    """
    Google Cloud Storage implementation of IBlobStorageRepository.

    Thread Safety:
        This implementation is thread-safe. The GCS client handles concurrent
        operations safely.

    Attributes:
        bucket_name: Name of the GCS bucket for blob storage
        client: Google Cloud Storage client instance
        bucket: GCS bucket object
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        bucket_name: str,
        client: Optional[storage.Client] = None,
        location: Optional[str] = None,
        timeout: float = DEFAULT_GCS_TIMEOUT_SECONDS,
    ):
        """
        Initialize the GCS blob repository.

        Args:
            bucket_name: Name of the GCS bucket to use for storage
            client: GCS client (default credentials if omitted)
            location: Bucket location used when the bucket has to be created
            timeout: Per-request timeout in seconds

        Raises:
            ValueError: If bucket_name is empty
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("bucket_name cannot be empty")

        self.bucket_name = bucket_name
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)
        self.location = location
        self.timeout = timeout
        self._container_ready = False

    def _unavailable(self, action: str, error: Exception) -> StorageUnavailableError:
        logger.error(f"GCS {action} failed for bucket {self.bucket_name}: {error}")
        return StorageUnavailableError(f"Failed to {action}: {error}", error)

    def ensure_container(self) -> None:
        """Create the bucket if it does not exist. Success is cached."""
        if self._container_ready:
            return

        try:
            existing = self.client.lookup_bucket(self.bucket_name, timeout=self.timeout)
            if existing is None:
                logger.info(f"Creating GCS bucket {self.bucket_name}")
                existing = self.client.create_bucket(
                    self.bucket_name, location=self.location, timeout=self.timeout
                )
            self.bucket = existing
        except (GoogleAPIError, OSError) as e:
            raise self._unavailable("ensure bucket", e) from e

        self._container_ready = True

    def put(
        self,
        path: str,
        content: Union[bytes, BinaryIO],
        content_type: Optional[str] = None,
    ) -> str:
        if not path or not path.strip():
            raise ValueError("path cannot be empty")

        blob = self.bucket.blob(path)
        try:
            if isinstance(content, (bytes, bytearray)):
                blob.upload_from_string(
                    bytes(content), content_type=content_type, timeout=self.timeout
                )
            else:
                if hasattr(content, "seek"):
                    content.seek(0)
                blob.upload_from_file(
                    content, content_type=content_type, timeout=self.timeout
                )
        except (GoogleAPIError, OSError) as e:
            raise self._unavailable(f"write blob {path}", e) from e

        return f"gs://{self.bucket_name}/{path}"

    def get(self, path: str) -> Optional[BinaryIO]:
        if not path or not path.strip():
            return None

        content = BytesIO()
        try:
            self.bucket.blob(path).download_to_file(content, timeout=self.timeout)
        except NotFound:
            return None
        except (GoogleAPIError, OSError) as e:
            raise self._unavailable(f"read blob {path}", e) from e

        content.seek(0)
        return content

    def delete(self, path: str) -> bool:
        if not path or not path.strip():
            return True  # Idempotent - invalid path treated as success

        try:
            self.bucket.blob(path).delete(timeout=self.timeout)
        except NotFound:
            pass
        except (GoogleAPIError, OSError) as e:
            raise self._unavailable(f"delete blob {path}", e) from e
        return True

    def list_paths(self, prefix: str = "") -> List[str]:
        try:
            blobs = self.client.list_blobs(
                self.bucket_name, prefix=prefix or None, timeout=self.timeout
            )
            return sorted(blob.name for blob in blobs)
        except NotFound:
            return []
        except (GoogleAPIError, OSError) as e:
            raise self._unavailable(f"list blobs under '{prefix}'", e) from e

    def generate_signed_url(self, path: str, ttl_minutes: int = 15) -> str:
        """
        Generate a V4 signed GET URL.

        Signing is local to the client credentials; the blob is not checked
        for existence.
        """
        try:
            return self.bucket.blob(path).generate_signed_url(
                version="v4",
                expiration=timedelta(minutes=ttl_minutes),
                method="GET",
            )
        except (GoogleAPIError, AttributeError, ValueError) as e:
            # AttributeError/ValueError: credentials without a signing key
            raise self._unavailable(f"sign URL for {path}", e) from e

    def get_updated_at(self, path: str):
        try:
            blob = self.bucket.get_blob(path, timeout=self.timeout)
        except NotFound:
            return None
        except (GoogleAPIError, OSError) as e:
            raise self._unavailable(f"stat blob {path}", e) from e
        return blob.updated if blob is not None else None

    def exists(self, path: str) -> bool:
        if not path or not path.strip():
            return False
        try:
            return self.bucket.blob(path).exists(timeout=self.timeout)
        except (GoogleAPIError, OSError):
            # Never raise exceptions - return False for errors
            return False
