from celery import Celery

from gacha_arena.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "gacha_arena",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "gacha_arena.workers.tasks.arena_ranking",
        "gacha_arena.workers.tasks.economy_maintenance",
    ],
)

celery_app.conf.update(
    task_default_queue="q_normal",
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
)


@celery_app.task(name="gacha_arena.workers.celery_app.ping")
def ping() -> str:
    return "pong"
