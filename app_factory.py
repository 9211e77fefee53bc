"""
Application Factory

Creates and configures Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from dropzone.application.dependency_container import DependencyContainer
from dropzone.application.event_publisher import EventPublisher
from dropzone.application.file_service import FileService
from dropzone.config.celery_config import make_celery
from dropzone.config.lifecycle_config import LifecycleConfig
from dropzone.config.redis_config import (
    get_redis_repository,
    init_redis,
    redis_health_check,
)
from dropzone.domain.file_storage import (
    FileLifecycleManager,
    FileRecordRepository,
    IBlobStorageRepository,
    SignedUrlService,
)
from dropzone.infrastructure.redis_file_record_repository import (
    RedisFileRecordRepository,
)
from dropzone.infrastructure.storage_factory import StorageFactory


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()


def create_app(
    config: Optional[AppConfig] = None,
    container: Optional[DependencyContainer] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        container: Pre-built dependency container (tests); built from the
            environment if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = Flask(__name__)

    # Configure CORS
    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization"],
                "expose_headers": ["Content-Type", "Content-Disposition"],
                "max_age": 3600,
            }
        },
    )

    _initialize_infrastructure(app, config)

    if container is not None:
        app.container = container
    else:
        _initialize_services(app)

    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _initialize_infrastructure(app: Flask, config: AppConfig) -> None:
    """
    Initialize infrastructure components (Redis, Celery).

    Args:
        app: Flask application
        config: Application configuration
    """
    try:
        init_redis()
        print("Redis initialized successfully")

        celery = make_celery(app)
        app.celery = celery
        print("Celery initialized successfully")

    except Exception as e:
        print(f"Warning: Could not initialize infrastructure: {e}")
        app.celery = None


def _initialize_services(app: Flask) -> None:
    """
    Initialize application services and attach the DependencyContainer to the app.

    PATTERN:
    --------
    1. Create DependencyContainer instance
    2. Register infrastructure adapters (metadata store, blob store, URL signer)
    3. Register the domain service (FileLifecycleManager)
    4. Register the application service (FileService)
    5. Attach container to Flask app context for global access

    API routes and tasks resolve services via app.container.resolve().

    Args:
        app: Flask application
    """
    try:
        container = DependencyContainer()
        lifecycle_config = LifecycleConfig()

        # Infrastructure adapters
        redis_repo = get_redis_repository()
        container.register_singleton(type(redis_repo), redis_repo)

        file_repository = RedisFileRecordRepository(redis_repo)
        container.register_singleton(FileRecordRepository, file_repository)

        signed_url_service = SignedUrlService()
        container.register_singleton(SignedUrlService, signed_url_service)

        storage_repository = StorageFactory.create_storage(signed_url_service)
        container.register_singleton(IBlobStorageRepository, storage_repository)

        # Domain events
        event_publisher = EventPublisher()
        container.setup_event_handlers(event_publisher)
        container.register_singleton(EventPublisher, event_publisher)

        # Domain service
        lifecycle_manager = FileLifecycleManager(
            file_repository,
            storage_repository,
            event_publisher=event_publisher,
            download_url_ttl_minutes=lifecycle_config.download_url_ttl_minutes,
            orphan_grace=lifecycle_config.orphan_grace,
        )
        container.register_singleton(FileLifecycleManager, lifecycle_manager)

        # Application service
        file_service = FileService(lifecycle_manager)
        container.register_singleton(FileService, file_service)

        app.container = container

        print("Application services initialized successfully with DependencyContainer")
        print(f"  - Registered {len(container._singletons)} singleton services")

    except Exception as e:
        print(f"Warning: Could not initialize services: {e}")
        app.container = None


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    from dropzone.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    print(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "redis": "unknown",
        "celery": "unknown",
        "storage": "unknown",
    }

    try:
        if redis_health_check():
            health_status["redis"] = "connected"
        else:
            health_status["redis"] = "disconnected"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["redis"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"
    else:
        health_status["celery"] = "unavailable"
        health_status["status"] = "degraded"

    container = getattr(app, "container", None)
    if container is not None and container.is_registered(IBlobStorageRepository):
        storage = container.resolve(IBlobStorageRepository)
        health_status["storage"] = type(storage).__name__
    else:
        health_status["storage"] = "unavailable"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its dependencies.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
