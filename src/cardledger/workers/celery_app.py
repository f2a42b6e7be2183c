from celery import Celery

from cardledger.config import settings

celery_app = Celery(
    "cardledger",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["cardledger.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_time_limit=int(settings.task_timeout_seconds),
    timezone="UTC",
)
