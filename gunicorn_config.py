"""
Gunicorn configuration for the HR admin API.

Run with: gunicorn -c gunicorn_config.py main:app
"""

import logging
import os

logger = logging.getLogger(__name__)

# Gunicorn server settings
bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"
workers = int(os.getenv('GUNICORN_WORKERS', '4'))
timeout = 120
worker_class = 'sync'

# Logging
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
accesslog = '-'
errorlog = '-'


def on_starting(server):
    """Create missing tables once, before any worker forks."""
    from src.utils.database import init_database, reset_engine

    init_database()
    # Workers must not inherit the master's pooled connections
    reset_engine()
    logger.info("Database schema verified before starting workers")


def worker_exit(server, worker):
    """Dispose the worker's connection pool on shutdown."""
    try:
        from src.utils.database import reset_engine

        reset_engine()
    except Exception as e:
        logger.error(f"Error disposing database engine in worker {worker.pid}: {e}")
