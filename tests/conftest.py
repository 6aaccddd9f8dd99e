from datetime import datetime

import pytest

import reputation_service
from app import create_app
from models import db
from settings import Settings

TRACKING_HOST = 'track.example.com'
VIEWER_HOST = 'viewer.example.com'
REDIRECT_URL = 'https://decoy.example.org/watch'
NOW = datetime(2026, 1, 15, 12, 0, 0)


def make_settings(**overrides):
    values = {
        'database_uri': 'sqlite://',
        'secret_key': 'test-secret',
        'domain': 'example.com',
        'redirect_url': REDIRECT_URL,
        'viewer_host': VIEWER_HOST,
        'viewer_page_size': 20,
        'proxycheck_api_key': None,
        'log_level': 'WARNING',
    }
    values.update(overrides)
    return Settings(**values)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=False):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeProxycheck:
    """Stands in for requests.get and records every call made to proxycheck.io"""

    def __init__(self):
        self.calls = []
        self.response = FakeResponse(status_code=500)
        self.error = None

    def respond_with(self, ip, country='Germany', city='Berlin', provider='Hetzner Online GmbH', proxy='no'):
        self.response = FakeResponse(payload={
            'status': 'ok',
            ip: {
                'asn': 'AS24940',
                'provider': provider,
                'country': country,
                'city': city,
                'proxy': proxy,
                'type': 'VPN' if proxy == 'yes' else 'Business',
            },
        })

    def __call__(self, url, params=None, timeout=None):
        self.calls.append({'url': url, 'params': params, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def proxycheck(monkeypatch):
    fake = FakeProxycheck()
    monkeypatch.setattr(reputation_service.requests, 'get', fake)
    return fake


@pytest.fixture
def make_app():
    created = []

    def _make_app(**overrides):
        app = create_app(make_settings(**overrides))
        app.config['TESTING'] = True
        created.append(app)
        return app

    yield _make_app

    for app in created:
        with app.app_context():
            db.session.remove()
            db.drop_all()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    # cookies are sent explicitly so each test controls what the tracker sees
    return app.test_client(use_cookies=False)


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def store(app):
    return app.extensions['visitor_tracker']['store']
