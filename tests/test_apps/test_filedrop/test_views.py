"""Tests for the HTTP surface of the file drop."""

import ipaddress
from unittest import mock
from urllib.parse import urlsplit

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from server.apps.filedrop import identifiers
from server.apps.filedrop.exceptions import IndexStorageError
from server.apps.filedrop.infrastructure.index import MetadataIndex
from server.apps.filedrop.models import FileRecord

_RAW_CONTENT_TYPE = 'application/x-www-form-urlencoded'


def _upload_raw(client, content: bytes, **extra) -> str:
    response = client.post(
        '/raw',
        data=content,
        content_type=_RAW_CONTENT_TYPE,
        **extra,
    )
    assert response.status_code == 200
    return response.content.decode()


def _upload_form(client, content: bytes, name: str | None = None, **extra) -> str:
    form = {'file': SimpleUploadedFile('upload.bin', content)}
    if name is not None:
        form['name'] = name
    response = client.post('/', form, **extra)
    assert response.status_code == 200
    return response.content.decode()


def _download_path(body: str) -> str:
    return urlsplit(body.strip()).path


def _percent_encode(text: str) -> str:
    return ''.join(f'%{ord(char):02X}' for char in text)


def _read(response) -> bytes:
    content = b''.join(response.streaming_content)
    response.close()
    return content


@pytest.mark.django_db
class TestUploadRaw:
    """Tests for POST /raw."""

    def test_upload_raw(self, client, blob_root):
        """Test raw body is stored and a download URL is returned."""
        body = _upload_raw(client, b'raw bytes', REMOTE_ADDR='203.0.113.5')

        assert body.startswith('https://drop.example/fd/')
        assert body.endswith('\n')
        identifier = identifiers.parse(_download_path(body).split('/')[-1])
        record = FileRecord.objects.get(identifier=identifier)
        assert record.name is None
        assert record.get_upload_address() == ipaddress.IPv4Address('203.0.113.5')
        assert (blob_root / str(identifier)).read_bytes() == b'raw bytes'

    def test_upload_raw_body_not_parsed(self, client, blob_root):
        """Test form-looking bodies are stored verbatim."""
        body = _upload_raw(client, b'a=1&b=2')

        response = client.get(_download_path(body))

        assert _read(response) == b'a=1&b=2'

    def test_upload_raw_multipart_rejected(self, client, blob_root):
        """Test multipart bodies on the raw route are rejected."""
        response = client.post(
            '/raw',
            {'file': SimpleUploadedFile('a.txt', b'x')},
        )

        assert response.status_code == 422
        assert response.content == b'EINVAL: Invalid argument\n'
        assert FileRecord.objects.count() == 0

    def test_upload_raw_other_content_type(self, client, blob_root):
        """Test raw route only accepts form-urlencoded bodies."""
        response = client.post(
            '/raw',
            data=b'{}',
            content_type='application/json',
        )

        assert response.status_code == 422

    def test_upload_raw_too_large(self, client, settings, blob_root):
        """Test oversized raw uploads are rejected before storage."""
        settings.FILEDROP_MAX_UPLOAD_SIZE = 4

        response = client.post(
            '/raw',
            data=b'12345',
            content_type=_RAW_CONTENT_TYPE,
        )

        assert response.status_code == 413
        assert response.content == b'ENOSPC: No space left on device\n'
        assert FileRecord.objects.count() == 0
        assert not blob_root.exists()

    def test_upload_raw_at_limit(self, client, settings, blob_root):
        """Test an upload exactly at the cap is accepted."""
        settings.FILEDROP_MAX_UPLOAD_SIZE = 4

        body = _upload_raw(client, b'1234')

        assert _read(client.get(_download_path(body))) == b'1234'

    def test_get_is_unmatched_route(self, client, blob_root):
        """Test upload routes answer other methods like unknown paths."""
        response = client.get('/raw')

        assert response.status_code == 404
        assert response.content == (
            b'ENOENT: No such file or directory "/raw"\n'
        )


@pytest.mark.django_db
class TestUploadForm:
    """Tests for POST / with a multipart form."""

    def test_upload_form(self, client, blob_root):
        """Test file field and name field are stored."""
        body = _upload_form(
            client,
            b'form bytes',
            name='a.txt',
            REMOTE_ADDR='2001:db8::1',
        )

        identifier = identifiers.parse(_download_path(body).split('/')[-1])
        record = FileRecord.objects.get(identifier=identifier)
        assert record.name == 'a.txt'
        assert record.get_upload_address() == ipaddress.IPv6Address('2001:db8::1')

    def test_upload_form_empty_name(self, client, blob_root):
        """Test an empty name field stores no display name."""
        body = _upload_form(client, b'x', name='')

        identifier = identifiers.parse(_download_path(body).split('/')[-1])
        assert FileRecord.objects.get(identifier=identifier).name is None

    def test_upload_form_missing_file(self, client, blob_root):
        """Test forms without a file field are rejected."""
        response = client.post('/', {'name': 'a.txt'})

        assert response.status_code == 422
        assert FileRecord.objects.count() == 0

    def test_upload_form_raw_body_rejected(self, client, blob_root):
        """Test raw bodies on the form route are rejected."""
        response = client.post(
            '/',
            data=b'raw bytes',
            content_type=_RAW_CONTENT_TYPE,
        )

        assert response.status_code == 422

    def test_upload_form_too_large(self, client, settings, blob_root):
        """Test oversized form uploads are rejected."""
        settings.FILEDROP_MAX_UPLOAD_SIZE = 16

        response = client.post(
            '/',
            {'file': SimpleUploadedFile('a.txt', b'x' * 1024)},
        )

        assert response.status_code == 413
        assert FileRecord.objects.count() == 0


@pytest.mark.django_db
class TestDownload:
    """Tests for GET /fd/<identifier>[/<name>]."""

    def test_round_trip(self, client, blob_root):
        """Test upload then download returns content and stored name."""
        body = _upload_form(
            client,
            b'hello drop',
            name='a.txt',
            REMOTE_ADDR='203.0.113.5',
        )

        response = client.get(_download_path(body))

        assert response.status_code == 200
        assert response['Content-Type'] == 'application/octet-stream'
        assert response['Content-Disposition'] == 'attachment; filename="a.txt"'
        assert _read(response) == b'hello drop'

    def test_identifier_as_filename(self, client, blob_root):
        """Test identifier text is offered when no name was stored."""
        path = _download_path(_upload_raw(client, b'x'))
        identifier_text = path.split('/')[-1]

        response = client.get(path)

        assert response['Content-Disposition'] == (
            f'attachment; filename="{identifier_text}"'
        )
        response.close()

    def test_name_override(self, client, blob_root):
        """Test path-supplied name wins over the stored name."""
        path = _download_path(_upload_form(client, b'x', name='a.txt'))

        response = client.get(f'{path}/b.txt')

        assert response.status_code == 200
        assert response['Content-Disposition'] == 'attachment; filename="b.txt"'
        assert _read(response) == b'x'

    def test_name_override_quotes_escaped(self, client, blob_root):
        """Test quotes in a display name cannot break the header."""
        path = _download_path(_upload_raw(client, b'x'))

        response = client.get(f'{path}/a%22b.txt')

        assert response['Content-Disposition'] == (
            'attachment; filename="a\\"b.txt"'
        )
        response.close()

    def test_name_override_non_ascii(self, client, blob_root):
        """Test non-ASCII display names use the RFC 6266 form."""
        path = _download_path(_upload_raw(client, b'x'))

        response = client.get(f'{path}/r%C3%A9sum%C3%A9.pdf')

        assert response['Content-Disposition'] == (
            "attachment; filename*=utf-8''r%C3%A9sum%C3%A9.pdf"
        )
        response.close()

    def test_unknown_identifier(self, client, blob_root):
        """Test valid but never-minted identifier is a 404."""
        identifier = identifiers.mint()

        response = client.get(f'/fd/{identifier}')

        assert response.status_code == 404
        assert response.content.decode() == (
            f'ENOENT: No such file or directory: "{identifier}"\n'
        )

    @pytest.mark.parametrize('path', [
        '/fd/not-a-uuid',
        '/fd/not-a-uuid/a.txt',
        '/fd/abc%25def',
        '/fd/abc%2Fdef',
        '/fd/3f2504e0-4f89-41d3-9a0c-0305e82c3301%2Fa.txt',
        '/fd/3f2504e0-4f89-41d3-9a0c-0305e82c33%30%31',
        '/fd/3f2504e04f8941d39a0c0305e82c3301',
        '/fd/not-a-uuid/deeper/path',
    ])
    def test_malformed_identifier(self, client, blob_root, path):
        """Test malformed identifiers are a 400 and never reach storage."""
        with mock.patch(
            'server.apps.filedrop.views.get_transfer_service',
        ) as service_factory:
            response = client.get(path, REQUEST_URI=path)

        assert response.status_code == 400
        assert response.content == b'EINVAL: invalid argument\n'
        service_factory.assert_not_called()

    @pytest.mark.parametrize('raw_uri_key', ['REQUEST_URI', 'RAW_URI'])
    def test_percent_encoded_identifier(self, client, blob_root, raw_uri_key):
        """Test a stored identifier sent percent-encoded is a 400."""
        stored_path = _download_path(_upload_raw(client, b'x'))
        identifier_text = stored_path.split('/')[-1]
        path = f'/fd/{_percent_encode(identifier_text)}'

        response = client.get(path, **{raw_uri_key: path})

        assert response.status_code == 400
        assert response.content == b'EINVAL: invalid argument\n'

    def test_encoded_slash_after_identifier(self, client, blob_root):
        """Test an encoded slash cannot smuggle in a display name."""
        stored_path = _download_path(_upload_raw(client, b'x'))
        path = f'{stored_path}%2Fevil.exe'

        response = client.get(path, REQUEST_URI=path)

        assert response.status_code == 400
        assert not response.has_header('Content-Disposition')

    def test_percent_encoded_identifier_deeper_path(self, client, blob_root):
        """Test encoded identifiers are a 400 on deeper paths too."""
        path = f'/fd/{_percent_encode(str(identifiers.mint()))}/a/b'

        response = client.get(path, REQUEST_URI=path)

        assert response.status_code == 400

    def test_encoded_display_name_with_raw_uri(self, client, blob_root):
        """Test the display name segment is still percent-decoded."""
        stored_path = _download_path(_upload_raw(client, b'x'))
        path = f'{stored_path}/my%20file.txt?download=1'

        response = client.get(path, REQUEST_URI=path)

        assert response.status_code == 200
        assert response['Content-Disposition'] == (
            'attachment; filename="my file.txt"'
        )
        response.close()

    def test_deeper_path_valid_identifier(self, client, blob_root):
        """Test extra segments after a valid identifier are a 404."""
        identifier = identifiers.mint()

        response = client.get(f'/fd/{identifier}/a/b')

        assert response.status_code == 404

    def test_index_fault(self, client, blob_root):
        """Test index failures are a 500."""
        with mock.patch.object(
            MetadataIndex,
            'lookup',
            side_effect=IndexStorageError('disk I/O error'),
        ):
            response = client.get(f'/fd/{identifiers.mint()}')

        assert response.status_code == 500
        assert response.content == b'EROFS: Read-only file system\n'

    def test_missing_blob(self, client, blob_root):
        """Test indexed file whose blob vanished is a 500."""
        path = _download_path(_upload_raw(client, b'x'))
        (blob_root / path.split('/')[-1]).unlink()

        response = client.get(path)

        assert response.status_code == 500
        assert response.content == b'EIO: I/O error\n'

    def test_post_is_unmatched_route(self, client, blob_root):
        """Test download routes answer other methods like unknown paths."""
        identifier = identifiers.mint()

        response = client.post(f'/fd/{identifier}')

        assert response.status_code == 404
        assert response.content.decode() == (
            f'ENOENT: No such file or directory "/fd/{identifier}"\n'
        )


def test_unmatched_route(client):
    """Test unknown paths are a 404 naming the path."""
    response = client.get('/nope/nothing')

    assert response.status_code == 404
    assert response.content == (
        b'ENOENT: No such file or directory "/nope/nothing"\n'
    )
