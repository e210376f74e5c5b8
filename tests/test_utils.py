import io
import re

import pytest
from fastapi import HTTPException, UploadFile
from starlette.datastructures import Headers

import config
from conftest import run
from main import app
from utils.forms import clean_quotes, parse_address
from utils.uploads import build_upload_filename, save_image_upload


@pytest.mark.parametrize(
    ('raw', 'expected'),
    [
        ('"Dr. Lisa Cuddy"', 'Dr. Lisa Cuddy'),
        ('  plain  ', 'plain'),
        ('say "hi"', 'say "hi'),
        (None, None),
    ],
)
def test_clean_quotes(raw, expected) -> None:
    assert clean_quotes(raw) == expected


def test_parse_address_accepts_json_and_fills_missing_lines() -> None:
    address = parse_address('{"line1": "1 Main St"}')

    assert address.line1 == '1 Main St'
    assert address.line2 == ''


@pytest.mark.parametrize('raw', ['{broken', '["a", "b"]', '42'])
def test_parse_address_rejects_non_objects(raw: str) -> None:
    with pytest.raises(HTTPException) as exception_info:
        parse_address(raw)

    assert exception_info.value.status_code == 400


def test_build_upload_filename_keeps_field_and_extension() -> None:
    filename = build_upload_filename('image', 'portrait.JPG')

    assert re.fullmatch(r'image-\d+-\d+\.JPG', filename)


class _RecordingFile(io.BytesIO):
    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.requested_sizes = []

    def read(self, size=-1):
        self.requested_sizes.append(size)
        return super().read(size)


def test_save_image_upload_reads_at_most_one_byte_past_limit(app_config, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'MAX_UPLOAD_SIZE', 10)
    image_file = _RecordingFile(b'\x89PNG' + b'\x00' * 1000)
    upload = UploadFile(file=image_file, filename='large.png', headers=Headers({'content-type': 'image/png'}))

    with pytest.raises(HTTPException) as exception_info:
        run(save_image_upload(upload))

    assert exception_info.value.status_code == 413
    assert image_file.requested_sizes == [11]
    assert not list(app_config.glob('*'))


def test_health_check(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.text == 'API WORKING'


def test_unknown_route_uses_error_envelope(client) -> None:
    response = client.get('/api/nowhere')

    assert response.status_code == 404
    assert response.json()['success'] is False


def test_webhook_is_mounted_outside_api_prefix() -> None:
    paths = {route.path for route in app.routes}

    assert '/webhook' in paths
    assert '/api/create-checkout-session' in paths
    assert '/api/user/book-appointment' in paths
