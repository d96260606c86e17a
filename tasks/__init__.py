from .celery_config import celery_app

__all__ = ('celery_app',)

# Import tasks to register them with Celery
from . import subscription_tasks  # noqa
