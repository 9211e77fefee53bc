"""
Blob Storage Configuration

Selects and parameterizes the blob storage backend.
"""

import os
from typing import Optional

DEFAULT_STORAGE_DIR = "/tmp/dropzone"


class StorageConfig:
    """Blob storage configuration settings."""

    def __init__(self):
        # Google Cloud Storage (enabled when a bucket is named)
        self.gcs_bucket_name: Optional[str] = os.getenv("GCS_BUCKET_NAME")
        self.gcs_location: Optional[str] = os.getenv("GCS_LOCATION")
        self.gcs_timeout = float(os.getenv("GCS_TIMEOUT_SECONDS", 30))
        self.credentials_path: Optional[str] = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

        # Local filesystem fallback
        self.storage_dir = os.getenv("STORAGE_DIR", DEFAULT_STORAGE_DIR)

        if self.gcs_timeout <= 0:
            raise ValueError("GCS_TIMEOUT_SECONDS must be positive")

    @property
    def use_gcs(self) -> bool:
        return self.gcs_bucket_name is not None and self.gcs_bucket_name != ""
