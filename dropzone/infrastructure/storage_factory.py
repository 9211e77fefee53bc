"""
Storage Factory

Factory for creating the blob storage repository implementation based on
environment configuration (local filesystem vs Google Cloud Storage).

The application layer depends only on IBlobStorageRepository, not on the
concrete backend selected here.
"""

from typing import Optional

from dropzone.config.storage_config import StorageConfig
from dropzone.domain.file_storage.signed_url_service import SignedUrlService
from dropzone.domain.file_storage.storage_repository import IBlobStorageRepository
from dropzone.infrastructure.local_blob_storage_repository import (
    LocalBlobStorageRepository,
)


class StorageFactory:
    """
    Factory for creating blob storage repository implementations.

    Selection Logic:
    - If GCS_BUCKET_NAME is configured, use GCS storage
    - Otherwise, fall back to local filesystem storage
    """

    @staticmethod
    def create_storage(
        signed_url_service: Optional[SignedUrlService] = None,
        config: Optional[StorageConfig] = None,
    ) -> IBlobStorageRepository:
        """
        Create blob storage repository based on environment configuration.

        Args:
            signed_url_service: URL signer for the local backend
            config: Storage settings (read from the environment if omitted)

        Returns:
            IBlobStorageRepository implementation (either local or GCS)

        Raises:
            RuntimeError: If storage initialization fails

        Environment Variables:
            GCS_BUCKET_NAME: If set, enables GCS storage
            GCS_LOCATION: Location for a bucket created on first use
            GCS_TIMEOUT_SECONDS: Per-request GCS timeout (default: 30)
            GOOGLE_APPLICATION_CREDENTIALS: Path to GCS service account key
            STORAGE_DIR: Base directory for local storage (default: /tmp/dropzone)
        """
        if config is None:
            config = StorageConfig()

        if config.use_gcs:
            return StorageFactory._create_gcs_storage(config)
        return StorageFactory._create_local_storage(config, signed_url_service)

    @staticmethod
    def _create_local_storage(
        config: StorageConfig,
        signed_url_service: Optional[SignedUrlService] = None,
    ) -> IBlobStorageRepository:
        try:
            storage = LocalBlobStorageRepository(config.storage_dir, signed_url_service)
            print(f"Storage factory: Using local filesystem storage at {config.storage_dir}")
            return storage
        except (OSError, ValueError) as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e

    @staticmethod
    def _create_gcs_storage(config: StorageConfig) -> IBlobStorageRepository:
        bucket_name = config.gcs_bucket_name
        if not bucket_name.strip():
            raise ValueError("GCS_BUCKET_NAME cannot be empty")

        try:
            from google.auth.exceptions import GoogleAuthError

            from dropzone.infrastructure.gcs_blob_storage_repository import (
                GCSBlobStorageRepository,
                create_gcs_client,
            )

            client = create_gcs_client(config.credentials_path)
            storage = GCSBlobStorageRepository(
                bucket_name,
                client=client,
                location=config.gcs_location,
                timeout=config.gcs_timeout,
            )
            print(f"Storage factory: Using GCS storage with bucket {bucket_name}")
            return storage
        except (GoogleAuthError, OSError, ValueError) as e:
            raise RuntimeError(f"Failed to initialize GCS storage: {e}") from e
