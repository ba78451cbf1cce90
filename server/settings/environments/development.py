"""This file contains all the settings that defines the development server."""

from server.settings.components import config

# Debug pages replace the plain-text error bodies
DEBUG = config('DJANGO_DEBUG', cast=bool, default=False)

ALLOWED_HOSTS = [
    'localhost',
    '0.0.0.0',  # noqa: S104
    '127.0.0.1',
    '[::1]',
    'testserver',
]

SECRET_KEY = config(
    'DJANGO_SECRET_KEY',
    default='django-insecure-filedrop-development-key',
)
