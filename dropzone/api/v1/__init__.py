"""
API v1 - Drop Zone REST API

This module contains the versioned API endpoints with OpenAPI/Swagger documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

# Get API version from environment
API_VERSION = os.getenv("API_VERSION", "v1")

# Create blueprint for API v1
api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

# Initialize Flask-RESTX API with Swagger documentation
api = Api(
    api_v1_bp,
    version="1.0",
    title="Drop Zone API",
    description="Share files under a keyword for 24 hours",
    doc="/docs",  # Swagger UI will be available at /api/v1/docs
    contact="Drop Zone Team",
    license="MIT",
    # No authentication required: the keyword is the only credential
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import blobs_ns, files_ns, keywords_ns, maintenance_ns  # noqa: E402

# Register namespaces
api.add_namespace(files_ns, path="/files")
api.add_namespace(keywords_ns, path="/keywords")
api.add_namespace(blobs_ns, path="/blobs")
api.add_namespace(maintenance_ns, path="/maintenance")
