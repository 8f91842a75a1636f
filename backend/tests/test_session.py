from middleware.auth import is_safe_redirect, login_redirect_url
from services.session_state import SESSION_KEY, SessionState


def test_session_state_login_and_logout():
    storage = {}
    state = SessionState(storage)
    assert not state.is_authenticated

    assert state.login('admin', 'wrong', 'admin', 'admin123') is False
    assert not state.is_authenticated

    assert state.login('admin', 'admin123', 'admin', 'admin123') is True
    assert storage[SESSION_KEY] is True
    assert state.is_authenticated

    state.logout()
    assert SESSION_KEY not in storage
    assert not state.is_authenticated


def test_login_redirect_url():
    assert login_redirect_url('/obras') == '/login?redirect=/obras'
    assert login_redirect_url('/obras?page=2') == '/login?redirect=/obras%3Fpage%3D2'
    assert login_redirect_url('//evil.example') == '/login'
    assert login_redirect_url('/login') == '/login'


def test_safe_redirects():
    assert is_safe_redirect('/mediciones')
    assert not is_safe_redirect('https://evil.example')
    assert not is_safe_redirect('//evil.example')
    assert not is_safe_redirect(None)


def test_api_requires_login(client):
    response = client.get('/api/companies')
    assert response.status_code == 401
    body = response.get_json()
    assert body['code'] == 'UNAUTHORIZED'
    assert body['redirect'] == '/login?redirect=/api/companies'


def test_public_endpoints(client):
    assert client.get('/').status_code == 200
    assert client.get('/api/health/simple').status_code == 200
    health = client.get('/api/health')
    assert health.status_code == 200
    assert health.get_json()['timestamp'].endswith('+00:00')
    assert client.get('/api/auth/status').get_json() == {'authenticated': False}
    assert client.get('/login?redirect=/obras').get_json()['redirect'] == '/obras'


def test_login_flow(client):
    response = client.post('/api/auth/login', json={'username': 'admin', 'password': 'nope'})
    assert response.status_code == 401

    response = client.post('/api/auth/login', json={'username': 'admin', 'password': ''})
    assert response.status_code == 400

    response = client.post('/api/auth/login', json={
        'username': 'admin', 'password': 'admin123', 'redirect': '/mediciones',
    })
    assert response.status_code == 200
    assert response.get_json()['redirect'] == '/mediciones'

    assert client.get('/api/auth/status').get_json() == {'authenticated': True, 'username': 'admin'}
    assert client.get('/api/companies').status_code == 200

    client.post('/api/auth/logout')
    assert client.get('/api/auth/status').get_json() == {'authenticated': False}
    assert client.get('/api/companies').status_code == 401


def test_login_ignores_external_redirect(client):
    response = client.post('/api/auth/login', json={
        'username': 'admin', 'password': 'admin123', 'redirect': 'https://evil.example',
    })
    assert response.get_json()['redirect'] == '/'
