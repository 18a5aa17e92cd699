import os
import sys
import pytest

# Ensure the backend root (containing the `lobby` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from lobby import create_app


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SNAPSHOT_BACKEND = 'file'
    SNAPSHOT_PATH = None
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    BCRYPT_HANDLE_LONG_PASSWORDS = True
    ROOM_CODE_LENGTH = 6
    CORS_ORIGINS = ['*']
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def snapshot_path(tmp_path):
    return str(tmp_path / 'server-db.json')


@pytest.fixture()
def make_app(snapshot_path):
    def _make(**overrides):
        attrs = {'SNAPSHOT_PATH': snapshot_path}
        attrs.update(overrides)
        config = type('Config', (TestConfig,), attrs)
        return create_app(config)
    return _make


@pytest.fixture()
def flask_app(make_app):
    return make_app()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def lifecycle(flask_app):
    return flask_app.extensions['lobby']


@pytest.fixture()
def register(client):
    """Registers a user over HTTP; returns (auth headers, user dict)."""
    def _register(username, password='pw'):
        res = client.post('/api/register', json={'username': username, 'password': password})
        assert res.status_code == 200, res.get_json()
        data = res.get_json()
        return {'Authorization': f"Bearer {data['token']}"}, data['user']
    return _register


@pytest.fixture()
def new_user(lifecycle):
    """Registers a user directly against the store; returns the User record."""
    def _new_user(username):
        _, user = lifecycle.store.accounts.register(username, 'pw')
        return user
    return _new_user
