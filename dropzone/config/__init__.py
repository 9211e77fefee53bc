"""Environment-driven configuration for Redis, Celery and the file lifecycle."""
