"""Client addresses behind a trusted reverse proxy."""
import pytest

from campus_attendance import create_app, db
from config.testing import TestingConfig

SELFIE = 'data:image/jpeg;base64,c2VsZmll'


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setattr(TestingConfig, 'PROXY_FIX_X_FOR', 1)
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


def scan_from(client, campus, auth_headers, principal, forwarded_for):
    response = client.post('/api/attendance/sessions', json={'course_id': campus.course_id},
                           headers=auth_headers(campus.lecturer))
    session = response.get_json()['data']
    headers = dict(auth_headers(principal), **{'X-Forwarded-For': forwarded_for})
    return client.post('/api/attendance/scan', headers=headers,
                       json={'qr_data': session['qr_payload'], 'selfie': SELFIE})


def test_address_taken_from_trusted_proxy(client, campus, auth_headers):
    response = scan_from(client, campus, auth_headers, campus.student, '203.0.113.9')

    assert response.status_code == 201
    assert response.get_json()['data']['ip_address'] == '203.0.113.9'


def test_forged_hops_before_the_proxy_are_ignored(client, campus, auth_headers):
    response = scan_from(client, campus, auth_headers, campus.student,
                         '198.51.100.66, 203.0.113.9')

    assert response.status_code == 201
    assert response.get_json()['data']['ip_address'] == '203.0.113.9'
