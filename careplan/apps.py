from django.apps import AppConfig


class CareplanConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'careplan'
