"""
Celery Application Instance

Creates the Celery app instance for use by workers and beat scheduler.
Uses the app factory to ensure all services are properly initialized.
"""

from app_factory import create_app

# Create Flask app with all services initialized (including dependency container)
flask_app = create_app()

# Get Celery instance from Flask app
celery_app = flask_app.celery

# Task modules are imported by the worker at startup, not here, to avoid a
# circular import (expire_sweep_task -> celery_app -> expire_sweep_task).
celery_app.conf.imports = ("dropzone.tasks.expire_sweep_task",)
