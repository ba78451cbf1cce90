"""File drop settings."""

from server.settings.components import BASE_DIR, config

# Directory holding one blob per file identifier
FILEDROP_CONTENT_ROOT = config(
    'FILEDROP_CONTENT_ROOT',
    default=str(BASE_DIR.joinpath('files')),
)

# Absolute base for the download links handed back to uploaders
FILEDROP_BASE_URL = config(
    'FILEDROP_BASE_URL',
    default='http://localhost:8000',
)

# Uploads larger than this are rejected with 413 (default: 1 GiB)
FILEDROP_MAX_UPLOAD_SIZE = config(
    'FILEDROP_MAX_UPLOAD_SIZE',
    cast=int,
    default=1024 * 1024 * 1024,
)

# WSGI server host, port and worker threads
FILEDROP_SERVER_HOST = config('FILEDROP_SERVER_HOST', default='0.0.0.0')
FILEDROP_SERVER_PORT = config('FILEDROP_SERVER_PORT', cast=int, default=8000)
FILEDROP_SERVER_THREADS = config(
    'FILEDROP_SERVER_THREADS',
    cast=int,
    default=10,
)
