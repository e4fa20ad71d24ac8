"""QR payload parsing and rendering."""
import base64
import json

import pytest

from campus_attendance.services.qr_service import QRService
from campus_attendance.services.session_service import SessionService
from campus_attendance.utils.errors import InvalidQRPayload

from .conftest import T0


def test_payload_carries_session_and_token(campus):
    session = SessionService.create_session(campus.lecturer, campus.course_id, now=T0)

    payload = QRService.build_payload(session)

    assert ' ' not in payload
    assert json.loads(payload)['expires_at'] == '2025-03-10T09:05:00'
    assert QRService.decode_payload(payload) == (session.id, session.token)


@pytest.mark.parametrize('qr_data, message', [
    ('', 'Invalid QR code format'),
    ('{not json', 'Invalid QR code format'),
    ('[1, 2]', 'Invalid QR code format'),
    ('{"token": "abc"}', 'Missing field: session_id'),
    ('{"session_id": 1}', 'Missing field: token'),
    ('{"session_id": "1", "token": "abc"}', 'Invalid session id in QR code'),
    ('{"session_id": true, "token": "abc"}', 'Invalid session id in QR code'),
    ('{"session_id": 2147483648, "token": "abc"}', 'Invalid session id in QR code'),
    ('{"session_id": 1, "token": ""}', 'Invalid token in QR code'),
])
def test_decode_rejects_malformed_payloads(qr_data, message):
    with pytest.raises(InvalidQRPayload) as excinfo:
        QRService.decode_payload(qr_data)
    assert excinfo.value.message == message


def test_decode_ignores_extra_fields():
    assert QRService.decode_payload('{"session_id": 3, "token": "t", "v": 2}') == (3, 't')


def test_render_png():
    image = QRService.render_png('{"session_id":1,"token":"abc"}')

    prefix = 'data:image/png;base64,'
    assert image.startswith(prefix)
    assert base64.b64decode(image[len(prefix):])[:8] == b'\x89PNG\r\n\x1a\n'
