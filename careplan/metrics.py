from prometheus_client import Counter, Gauge, Histogram

# Commands
careplan_commands_total = Counter(
    'careplan_commands_total',
    'Successful care-plan commands, by the event they published',
    ['event'],
)

careplan_stored_records = Gauge(
    'careplan_stored_records',
    'Stored records per entity namespace',
    ['namespace'],
)

# Celery
celery_task_duration_seconds = Histogram(
    'celery_task_duration_seconds',
    'Celery task execution time',
    ['task_name'],
)

celery_task_retries_total = Counter(
    'celery_task_retries_total',
    'Celery task retries',
    ['task_name'],
)

celery_task_failures_total = Counter(
    'celery_task_failures_total',
    'Celery tasks that failed after exhausting retries',
    ['task_name'],
)
