import logging
import time

import redis
from celery import shared_task

from .entities import EntityType
from .events import push_to_queue
from .metrics import (
    careplan_stored_records,
    celery_task_duration_seconds,
    celery_task_failures_total,
    celery_task_retries_total,
)
from .models import EntityRecord

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def deliver_domain_event(self, name, payload):
    start = time.monotonic()
    try:
        push_to_queue(name, payload)
        celery_task_duration_seconds.labels(task_name='deliver_domain_event').observe(time.monotonic() - start)
        logger.info(f"[Celery] Delivered event {name}")
    except redis.RedisError as e:
        celery_task_duration_seconds.labels(task_name='deliver_domain_event').observe(time.monotonic() - start)
        logger.warning(f"[Celery] Event {name} delivery failed (attempt {self.request.retries + 1}/3): {e}")
        try:
            celery_task_retries_total.labels(task_name='deliver_domain_event').inc()
            self.retry(countdown=2 ** self.request.retries)
        except self.MaxRetriesExceededError:
            celery_task_failures_total.labels(task_name='deliver_domain_event').inc()
            logger.error(f"[Celery] Event {name} dropped after 3 retries")


@shared_task
def update_record_gauge():
    """Sync the Prometheus gauge with stored record counts per namespace."""
    for entity_type in EntityType:
        count = EntityRecord.objects.filter(namespace=entity_type.value).count()
        careplan_stored_records.labels(namespace=entity_type.value).set(count)
