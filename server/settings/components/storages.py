"""Django storage configuration.

Blobs live on the local filesystem under ``FILEDROP_CONTENT_ROOT``, one file
per identifier. The backend is registered under the ``blobs`` alias and
resolved through ``django.core.files.storage.storages``.
"""

from typing import Any, Final

from server.settings.components.filedrop import FILEDROP_CONTENT_ROOT

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'blobs': {
        'BACKEND': 'server.apps.filedrop.infrastructure.storage.BlobStorage',
        'OPTIONS': {
            'location': FILEDROP_CONTENT_ROOT,
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
