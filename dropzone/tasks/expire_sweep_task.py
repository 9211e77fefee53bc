"""
Expire Sweep Task

Celery beat task that purges expired files and reclaims orphan blobs.
Thin wrapper that delegates to FileService.
"""

import logging

from celery_app import celery_app
from dropzone.config.celery_config import EXPIRE_SWEEP_TASK

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name=EXPIRE_SWEEP_TASK)
def run_expire_sweep(self):
    """
    Periodic sweep removing expired files and orphan blobs.

    Runs every EXPIRE_SWEEP_INTERVAL_SECONDS (Celery beat) and:
    1. Deletes expired file records and their blobs
    2. Reclaims blobs that have no file record

    Returns:
        dict: Sweep statistics with counts and errors
    """
    logger.info("Starting expire sweep task")

    try:
        from celery_app import flask_app
        from dropzone.application.file_service import FileService

        file_service = flask_app.container.resolve(FileService)
        stats = file_service.run_maintenance()

    except Exception as e:
        error_msg = f"Expire sweep task failed: {e}"
        logger.error(error_msg, exc_info=True)
        return {
            "expired_files_removed": 0,
            "orphaned_blobs_reclaimed": 0,
            "errors": [error_msg],
        }

    logger.info(
        f"Expire sweep completed - Expired: {stats['expired_files_removed']}, "
        f"Orphaned: {stats['orphaned_blobs_reclaimed']}, "
        f"Errors: {len(stats['errors'])}"
    )
    if stats["errors"]:
        logger.warning(f"Expire sweep errors: {stats['errors']}")

    return stats
