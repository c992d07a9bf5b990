"""
Celery worker entry point
Delivers reminders when their ETA is reached
"""
import logging
from celery.signals import worker_ready, worker_shutdown

from clinic_notify.config.celery_config import celery_app
from clinic_notify.config.settings import get_settings
from clinic_notify.utils.my_logging import setup_logging

# Setup logging first
setup_logging(verbose=get_settings().DEBUG)
logger = logging.getLogger(__name__)


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    """Handle worker startup"""
    logger.info("Celery worker ready")
    logger.info(f"Registered tasks: {list(celery_app.tasks.keys())}")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    """Handle worker shutdown"""
    logger.info("Celery worker shutting down...")


if __name__ == "__main__":
    # Run worker directly
    celery_app.start([
        'worker',
        '--loglevel=info',
        '--concurrency=2',
        '--max-tasks-per-child=1000'
    ])
