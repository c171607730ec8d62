"""App factory wiring: health check, CORS headers and JSON error pages."""
from __future__ import annotations

from backend.app import create_app
from backend.app import db as db_module
from backend.app.config import TestingConfig


def test_health_ok(client, monkeypatch) -> None:
    monkeypatch.setattr(db_module, 'health_check', lambda: {'status': 'healthy', 'database': 'locality_surveys_test'})
    response = client.get('/api/health')
    body = response.get_json()
    assert response.status_code == 200
    assert body['status'] == 'ok'
    assert body['service'] == 'locality-survey-api'
    assert body['database']['status'] == 'healthy'


def test_health_degraded(client, monkeypatch) -> None:
    monkeypatch.setattr(db_module, 'health_check', lambda: {'status': 'unhealthy', 'error': 'down'})
    body = client.get('/api/health').get_json()
    assert body['status'] == 'degraded'


def test_cors_allowed_origin(client) -> None:
    response = client.get('/api/localities/states', headers={'Origin': 'https://tally-survey-app.netlify.app'})
    assert response.headers['Access-Control-Allow-Origin'] == 'https://tally-survey-app.netlify.app'
    assert response.headers['Access-Control-Allow-Credentials'] == 'true'


def test_cors_unknown_origin(client) -> None:
    response = client.get('/api/localities/states', headers={'Origin': 'https://evil.example'})
    assert 'Access-Control-Allow-Origin' not in response.headers


def test_cors_wildcard(store) -> None:
    class WildcardConfig(TestingConfig):
        CORS_ALLOWED_ORIGINS = ['*']

    app = create_app(WildcardConfig, store_factory=lambda: store)
    response = app.test_client().get('/api/localities/states', headers={'Origin': 'http://localhost:5173'})
    assert response.headers['Access-Control-Allow-Origin'] == 'http://localhost:5173'


def test_unknown_api_route_returns_json(client) -> None:
    response = client.get('/api/nope')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'not found', 'path': '/api/nope'}


def test_wrong_method_returns_json(client) -> None:
    response = client.get('/api/surveys/add')
    assert response.status_code == 405
    assert response.get_json()['error'] == 'method not allowed'


def test_submission_rate_limited(store, payload_factory) -> None:
    class LimitedConfig(TestingConfig):
        RATELIMIT_ENABLED = True
        SURVEY_SUBMIT_RATE_LIMIT = '2 per minute'

    client = create_app(LimitedConfig, store_factory=lambda: store).test_client()
    statuses = [client.post('/api/surveys/add', json=payload_factory()).status_code for _ in range(3)]
    assert statuses == [201, 201, 429]
    assert len(store.docs('surveys')) == 2
