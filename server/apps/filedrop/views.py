"""HTTP boundary for the file drop.

Views translate requests into TransferService calls and map the error
taxonomy onto status codes. No storage logic lives here.
"""

import functools
import logging
from collections.abc import Callable
from typing import Final, TypeAlias
from urllib.parse import urlsplit

from django.core.exceptions import RequestDataTooBig
from django.core.files.uploadedfile import TemporaryUploadedFile, UploadedFile
from django.http import (
    FileResponse,
    Http404,
    HttpRequest,
    HttpResponse,
    HttpResponseNotFound,
    HttpResponseServerError,
)
from django.http.multipartparser import MultiPartParserError

from server.apps.filedrop import identifiers
from server.apps.filedrop.exceptions import (
    BlobIOError,
    FileDropError,
    FileRecordNotFoundError,
    IndexStorageError,
    InvalidFormError,
    InvalidIdentifierError,
    UploadTooLargeError,
)
from server.apps.filedrop.logic.transfer import get_transfer_service

logger = logging.getLogger(__name__)

_ERROR_STATUS: Final[dict[type[FileDropError], int]] = {
    InvalidIdentifierError: 400,
    FileRecordNotFoundError: 404,
    UploadTooLargeError: 413,
    InvalidFormError: 422,
    IndexStorageError: 500,
    BlobIOError: 500,
}

_TEXT_CONTENT_TYPE: Final = 'text/plain; charset=utf-8'
_BINARY_CONTENT_TYPE: Final = 'application/octet-stream'
_RAW_CONTENT_TYPE: Final = 'application/x-www-form-urlencoded'
_FORM_CONTENT_TYPE: Final = 'multipart/form-data'
_DOWNLOAD_PREFIX: Final = '/fd/'
_CHUNK_SIZE: Final = 64 * 1024

# Undecoded request target: cheroot sets REQUEST_URI, gunicorn RAW_URI
_RAW_URI_KEYS: Final = ('REQUEST_URI', 'RAW_URI')

_View: TypeAlias = Callable[..., HttpResponse]


def _allow_methods(*methods: str) -> Callable[[_View], _View]:
    """Route only the given methods, others get the unmatched-route 404."""
    def decorator(view: _View) -> _View:
        @functools.wraps(view)
        def inner(request: HttpRequest, *args, **kwargs) -> HttpResponse:
            if request.method not in methods:
                return page_not_found(request, Http404(request.path))
            return view(request, *args, **kwargs)
        return inner
    return decorator


def _raw_identifier(request: HttpRequest, identifier: str) -> str:
    """Identifier segment exactly as the client sent it.

    Routing works on the percent-decoded path, so ``%61`` or ``%2F`` in
    the identifier is already gone by the time the view runs. The server's
    undecoded request target still has it.

    Args:
        request: Download request.
        identifier: Routed, already decoded identifier.

    Returns:
        Undecoded first segment after ``/fd/``, or the routed identifier
        when the server does not expose the raw target.
    """
    raw_uri = next(
        (request.META[key] for key in _RAW_URI_KEYS if request.META.get(key)),
        None,
    )
    if raw_uri is None:
        return identifier
    _, prefix, tail = urlsplit(raw_uri).path.partition(_DOWNLOAD_PREFIX)
    if not prefix:
        return identifier
    return tail.split('/', 1)[0]


def _error_response(
    request: HttpRequest,
    exc: FileDropError,
) -> HttpResponse:
    status = _ERROR_STATUS.get(type(exc), 500)
    body = exc.message
    if isinstance(exc, FileRecordNotFoundError):
        missing = request.path.removeprefix(_DOWNLOAD_PREFIX)
        body = f'ENOENT: No such file or directory: "{missing}"\n'
    if status >= 500:
        logger.error(
            '%s %s failed with %d: %s',
            request.method,
            request.path,
            status,
            exc,
        )
    return HttpResponse(body, status=status, content_type=_TEXT_CONTENT_TYPE)


def _client_address(request: HttpRequest) -> str:
    return request.META['REMOTE_ADDR']


def _announced_length(request: HttpRequest) -> int:
    try:
        return int(request.META.get('CONTENT_LENGTH') or 0)
    except ValueError:
        return 0


def _check_announced_length(request: HttpRequest, max_bytes: int) -> None:
    announced = _announced_length(request)
    if announced > max_bytes:
        raise UploadTooLargeError(max_bytes, announced)


def _spool_body(request: HttpRequest, max_bytes: int) -> UploadedFile:
    """Copy the raw request body to a temporary file.

    Args:
        request: Upload request whose body is the file content.
        max_bytes: Size cap, checked while reading.

    Returns:
        Temporary file rewound to the start, deleted when closed.

    Raises:
        UploadTooLargeError: If the body exceeds max_bytes.
    """
    spooled = TemporaryUploadedFile(
        name='upload',
        content_type=_BINARY_CONTENT_TYPE,
        size=0,
        charset=None,
    )
    received = 0
    try:
        for chunk in iter(lambda: request.read(_CHUNK_SIZE), b''):
            received += len(chunk)
            if received > max_bytes:
                raise UploadTooLargeError(max_bytes, received)
            spooled.write(chunk)
    except Exception:
        spooled.close()
        raise

    spooled.seek(0)
    spooled.size = received
    return spooled


def _uploaded_form_file(request: HttpRequest, max_bytes: int) -> UploadedFile:
    if request.content_type != _FORM_CONTENT_TYPE:
        raise InvalidFormError('Expected a multipart form')
    try:
        uploaded = request.FILES.get('file')
    except MultiPartParserError as exc:
        raise InvalidFormError('Malformed multipart form') from exc
    except RequestDataTooBig as exc:
        raise UploadTooLargeError(max_bytes, _announced_length(request)) from exc

    if uploaded is None:
        raise InvalidFormError('Missing "file" field')
    if uploaded.size is not None and uploaded.size > max_bytes:
        uploaded.close()
        raise UploadTooLargeError(max_bytes, uploaded.size)
    return uploaded


def _upload_response(url: str) -> HttpResponse:
    return HttpResponse(f'{url}\n', content_type=_TEXT_CONTENT_TYPE)


@_allow_methods('GET', 'HEAD')
def download(
    request: HttpRequest,
    identifier: str,
    name: str | None = None,
) -> HttpResponse:
    """Stream a stored file back as an attachment.

    Args:
        request: Download request.
        identifier: Routed identifier text, still untrusted.
        name: Optional display name overriding the stored one.

    Returns:
        FileResponse with the blob, or a plain-text error response.
    """
    try:
        parsed = identifiers.parse(_raw_identifier(request, identifier))
        file_download = get_transfer_service().download(parsed, name)
    except FileDropError as exc:
        return _error_response(request, exc)

    return FileResponse(
        file_download.file,
        as_attachment=True,
        filename=file_download.filename,
        content_type=_BINARY_CONTENT_TYPE,
    )


@_allow_methods('GET', 'HEAD')
def download_unrouted(
    request: HttpRequest,
    identifier: str,
    rest: str,
) -> HttpResponse:
    """Reject deeper paths under ``/fd/``.

    A malformed leading identifier is a 400, anything else a 404.
    """
    try:
        identifiers.parse(_raw_identifier(request, identifier))
    except InvalidIdentifierError as exc:
        return _error_response(request, exc)
    return _error_response(request, FileRecordNotFoundError(identifier))


@_allow_methods('POST')
def upload_raw(request: HttpRequest) -> HttpResponse:
    """Store the raw request body as a new file.

    Only ``application/x-www-form-urlencoded`` bodies are accepted, the
    body is taken verbatim and never parsed as a form.
    """
    service = get_transfer_service()
    max_bytes = service.max_upload_size
    try:
        if request.content_type != _RAW_CONTENT_TYPE:
            raise InvalidFormError('Expected a raw body')
        _check_announced_length(request, max_bytes)
        content = _spool_body(request, max_bytes)
        try:
            url = service.upload(content, _client_address(request))
        finally:
            content.close()
    except FileDropError as exc:
        return _error_response(request, exc)

    return _upload_response(url)


@_allow_methods('POST')
def upload_form(request: HttpRequest) -> HttpResponse:
    """Store the ``file`` field of a multipart form as a new file.

    The optional ``name`` field becomes the stored display name.
    """
    service = get_transfer_service()
    max_bytes = service.max_upload_size
    try:
        _check_announced_length(request, max_bytes)
        content = _uploaded_form_file(request, max_bytes)
        try:
            url = service.upload(
                content,
                _client_address(request),
                name=request.POST.get('name') or None,
            )
        finally:
            content.close()
    except FileDropError as exc:
        return _error_response(request, exc)

    return _upload_response(url)


def bad_request(request: HttpRequest, exception: Exception) -> HttpResponse:
    """Plain-text replacement for Django's 400 page."""
    return HttpResponse(
        InvalidIdentifierError.message,
        status=400,
        content_type=_TEXT_CONTENT_TYPE,
    )


def page_not_found(request: HttpRequest, exception: Exception) -> HttpResponse:
    """Plain-text 404 naming the requested path."""
    return HttpResponseNotFound(
        f'ENOENT: No such file or directory "{request.path}"\n',
        content_type=_TEXT_CONTENT_TYPE,
    )


def server_error(request: HttpRequest) -> HttpResponse:
    """Plain-text 500 for faults outside the error taxonomy."""
    logger.error('Unhandled fault on %s %s', request.method, request.path)
    return HttpResponseServerError(
        FileDropError.message,
        content_type=_TEXT_CONTENT_TYPE,
    )
