"""
Celery Tasks

Periodic maintenance tasks for shared files.
"""
