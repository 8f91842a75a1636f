import itertools

import pytest

from app import create_app
from models import db


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    response = client.post('/api/auth/login', json={'username': 'admin', 'password': 'admin123'})
    assert response.status_code == 200
    return client


@pytest.fixture
def store(app):
    with app.app_context():
        yield app.extensions['document_store']


@pytest.fixture
def ticking_clock(monkeypatch):
    """Strictly increasing creation timestamps so ordering is deterministic"""
    counter = itertools.count(1_700_000_000_000, 1000)
    monkeypatch.setattr('services.store.now_millis', lambda: next(counter))
    return counter


def make_company(client, name='Acme', **extra):
    response = client.post('/api/companies', json={'name': name, **extra})
    assert response.status_code == 201
    return response.get_json()['record']


SITE_FIELDS = {
    'description': 'Edificio Norte',
    'contractor': 'Constructora Sur',
    'status': 'Contratada',
    'manager': 'Luis',
    'manager_phone': '600000001',
    'site_chief': 'Marta',
    'site_chief_phone': '600000002',
    'address': 'Calle Mayor 1',
    'town': 'Valencia',
    'start_date': '2024-03-05',
    'request': 'Alicatado de baños',
}
