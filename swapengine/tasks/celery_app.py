"""
Celery application configuration.

Defines the Celery app with Redis broker, task autodiscovery,
and the periodic beat schedule for the reciprocal optimizer.
"""

from celery import Celery

from swapengine.config import settings

celery_app = Celery(
    "swapengine",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

celery_app.autodiscover_tasks(["swapengine.tasks"], related_name="optimizer_tasks")

celery_app.conf.beat_schedule = {
    "run-reciprocal-optimizer": {
        "task": "swapengine.tasks.optimizer_tasks.run_reciprocal_optimizer",
        "schedule": settings.OPTIMIZER_INTERVAL_SECONDS,
    },
}
