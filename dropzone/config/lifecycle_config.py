"""
File Lifecycle Configuration

Tunables for signed URLs and the orphan sweep. Retention (24 hours) and the
per-file size cap (10 MiB) are fixed by the domain and not configurable here.
"""

import os
from datetime import timedelta

from dropzone.domain.file_storage.value_objects import DEFAULT_DOWNLOAD_URL_TTL_MINUTES


class LifecycleConfig:
    """File lifecycle configuration settings."""

    def __init__(self):
        self.download_url_ttl_minutes = int(
            os.getenv("DOWNLOAD_URL_TTL_MINUTES", DEFAULT_DOWNLOAD_URL_TTL_MINUTES)
        )
        self.orphan_grace_seconds = int(os.getenv("ORPHAN_GRACE_SECONDS", 3600))
        self.expire_sweep_interval_seconds = int(
            os.getenv("EXPIRE_SWEEP_INTERVAL_SECONDS", 3600)
        )

        if self.download_url_ttl_minutes <= 0:
            raise ValueError("DOWNLOAD_URL_TTL_MINUTES must be positive")
        if self.orphan_grace_seconds < 0:
            raise ValueError("ORPHAN_GRACE_SECONDS cannot be negative")

    @property
    def orphan_grace(self) -> timedelta:
        return timedelta(seconds=self.orphan_grace_seconds)
