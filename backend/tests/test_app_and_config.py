import pytest
from fastapi.testclient import TestClient

from auction import main
from auction.config import Settings


def test_root_and_health(client):
    assert client.get('/').json() == {'status': 'Alive'}
    assert client.get('/health').json() == {'status': 'ok'}


def test_request_id_header(client):
    r = client.get('/health')
    assert 'X-Request-ID' in r.headers
    echoed = client.get('/health', headers={'X-Request-ID': 'abc123'})
    assert echoed.headers['X-Request-ID'] == 'abc123'


def test_unknown_route_uses_error_body(client):
    r = client.get('/api/nowhere')
    assert r.status_code == 404
    assert 'error_message' in r.json()


def test_malformed_json_is_bad_request(client):
    r = client.post('/api/users', content=b'{not json', headers={'Content-Type': 'application/json'})
    assert r.status_code == 400


def test_settings_reject_default_secret_outside_dev(monkeypatch):
    monkeypatch.setenv('ENV', 'prod')
    monkeypatch.delenv('JWT_SECRET', raising=False)
    monkeypatch.delenv('ALLOW_INSECURE_JWT', raising=False)
    with pytest.raises(RuntimeError):
        Settings()
    monkeypatch.setenv('JWT_SECRET', 'a-real-secret')
    assert Settings().ENV == 'prod'


def test_settings_defaults(monkeypatch):
    monkeypatch.setenv('ENV', 'dev')
    monkeypatch.delenv('MIN_AUCTION_SECONDS', raising=False)
    monkeypatch.delenv('SESSION_EXPIRE_HOURS', raising=False)
    s = Settings()
    assert s.MIN_AUCTION_SECONDS == 60
    assert s.SESSION_EXPIRE_HOURS == 24


def test_unhandled_error_returns_500_with_error_id(monkeypatch):
    def _boom(self, user_id):
        raise RuntimeError("database went away")

    monkeypatch.setattr("auction.services.ProfileService.get_profile", _boom)
    client = TestClient(main.app, raise_server_exceptions=False)
    r = client.get('/api/users/1', headers={'X-Request-ID': 'req-500'})
    assert r.status_code == 500
    body = r.json()
    assert body['error_message'] == 'Internal server error'
    assert body['error_id'] == 'req-500'
    other = client.get('/api/users/1').json()
    assert other['error_id'] and other['error_id'] != 'req-500'
