"""
main.py

Flask backend for Drop Zone: keyword-addressed file sharing with 24 hour
retention.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, redis, celery,
    google-cloud-storage
  - Infrastructure: Redis server; a GCS bucket when GCS_BUCKET_NAME is set

Notes:
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Expired files are purged by the Celery beat task
    dropzone.tasks.run_expire_sweep (or POST /api/v1/maintenance/sweep)
"""

import os

from app_factory import create_app

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "true").lower() == "true"

    app.run(host=host, port=port, debug=debug)
