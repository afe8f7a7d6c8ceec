from celery import Celery

from quizplay.core.config import get_settings

settings = get_settings()

RANKINGS_QUEUE = "q_rankings"

celery_app = Celery(
    "quizplay",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "quizplay.workers.tasks.monthly_rankings",
    ],
)

celery_app.conf.update(
    task_default_queue="q_normal",
    task_routes={"quizplay.workers.tasks.monthly_rankings.*": {"queue": RANKINGS_QUEUE}},
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    # Month tokens are UTC calendar months.
    timezone="UTC",
    enable_utc=True,
    result_expires=24 * 3600,
)
