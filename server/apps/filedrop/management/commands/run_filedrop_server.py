"""Django management command to run the file drop HTTP server."""

import logging
from typing import Any, final, override

from cheroot.wsgi import Server as WSGIServer
from django.conf import settings
from django.core.management.base import BaseCommand
from django.core.wsgi import get_wsgi_application

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Serve the Django application with the cheroot WSGI server."""

    help = 'Run the file drop HTTP server'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--host',
            type=str,
            default=None,
            help='Host to bind to (default: from settings)',
        )
        parser.add_argument(
            '--port',
            type=int,
            default=None,
            help='Port to bind to (default: from settings)',
        )
        parser.add_argument(
            '--threads',
            type=int,
            default=None,
            help='Worker threads, one request each (default: from settings)',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments.
            options: Keyword arguments from command line.
        """
        host = options['host'] or settings.FILEDROP_SERVER_HOST
        port = options['port'] or settings.FILEDROP_SERVER_PORT
        threads = options['threads'] or settings.FILEDROP_SERVER_THREADS

        server = WSGIServer(
            bind_addr=(host, port),
            wsgi_app=get_wsgi_application(),
            numthreads=threads,
            server_name='filedrop',
        )

        self.stdout.write(
            self.style.SUCCESS(
                f'Starting file drop server on {host}:{port} '
                f'({threads} threads), content root: '
                f'{settings.FILEDROP_CONTENT_ROOT}',
            ),
        )
        if settings.DEBUG:
            self.stdout.write(
                self.style.WARNING(
                    'DEBUG is on: errors are served as HTML debug pages '
                    'instead of plain-text bodies',
                ),
            )

        try:
            logger.info('File drop server starting on %s:%d', host, port)
            server.start()
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nShutting down...'))
        finally:
            server.stop()
            self.stdout.write(self.style.SUCCESS('File drop server stopped'))
