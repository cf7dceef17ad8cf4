import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-secret-key-change-in-production')
DEBUG = os.environ.get('DJANGO_DEBUG', 'true').lower() == 'true'
ALLOWED_HOSTS = ['*']

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'careplan',
]

MIDDLEWARE = [
    'django.middleware.common.CommonMiddleware',
    'careplan.middleware.ExceptionHandlerMiddleware',
]

ROOT_URLCONF = 'config.urls'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DATABASE_NAME', 'careplan_db'),
        'USER': os.environ.get('DATABASE_USER', 'careplan_user'),
        'PASSWORD': os.environ.get('DATABASE_PASSWORD', 'careplan_pass'),
        'HOST': os.environ.get('DATABASE_HOST', 'localhost'),
        'PORT': os.environ.get('DATABASE_PORT', '5432'),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_TZ = True

# Redis / Celery
REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = int(os.environ.get('REDIS_PORT', '6379'))
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', f'redis://{REDIS_HOST}:{REDIS_PORT}/0')
CELERY_TASK_SERIALIZER = 'json'
CELERY_ACCEPT_CONTENT = ['json']
CELERY_BEAT_SCHEDULE = {
    'update-record-gauge': {
        'task': 'careplan.tasks.update_record_gauge',
        'schedule': 60.0,
    },
}

# Care plans
CAREPLAN_EVENT_SINK = os.environ.get('CAREPLAN_EVENT_SINK', 'celery')
CAREPLAN_EVENT_QUEUE = os.environ.get('CAREPLAN_EVENT_QUEUE', 'careplan_events')
CAREPLAN_PRINCIPAL_SALT = os.environ.get('CAREPLAN_PRINCIPAL_SALT', 'careplan.principal')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'careplan': {
            'handlers': ['console'],
            'level': os.environ.get('CAREPLAN_LOG_LEVEL', 'INFO'),
        },
    },
}
