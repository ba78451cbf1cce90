"""Django app configuration for filedrop app."""

from django.apps import AppConfig


class FiledropConfig(AppConfig):
    """Configuration for filedrop app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.filedrop'
    verbose_name = 'File drop'
