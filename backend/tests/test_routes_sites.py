from conftest import SITE_FIELDS, make_company


def test_create_site_with_companies(auth_client):
    make_company(auth_client, 'Acme')
    make_company(auth_client, 'Beta')

    response = auth_client.post('/api/sites', json={**SITE_FIELDS, 'companies': ['Beta', 'Acme']})
    assert response.status_code == 201
    site = response.get_json()['record']
    assert site['companies'] == ['Acme', 'Beta']
    assert site['status'] == 'Contratada'
    assert response.get_json()['banner']['message'] == 'Obra agregada correctamente'


def test_site_requires_every_field(auth_client):
    response = auth_client.post('/api/sites', json={'description': 'Edificio Norte'})
    assert response.status_code == 400
    errors = response.get_json()['errors']
    assert 'companies' in errors
    assert 'start_date' in errors
    assert 'description' not in errors


def test_unknown_company_is_rejected(auth_client):
    make_company(auth_client, 'Acme')
    response = auth_client.post('/api/sites', json={**SITE_FIELDS, 'companies': ['Acme', 'Fantasma']})
    assert response.status_code == 400
    assert 'Fantasma' in response.get_json()['errors']['companies']
    assert auth_client.get('/api/sites').get_json() == []


def test_invalid_status_and_date(auth_client):
    make_company(auth_client, 'Acme')
    response = auth_client.post('/api/sites', json={**SITE_FIELDS, 'companies': ['Acme'], 'status': 'Parada'})
    assert response.status_code == 400
    assert 'status' in response.get_json()['errors']

    response = auth_client.post('/api/sites', json={**SITE_FIELDS, 'companies': ['Acme'], 'start_date': '05/03/2024'})
    assert response.status_code == 400
    assert 'start_date' in response.get_json()['errors']


def test_update_companies_and_status(auth_client):
    make_company(auth_client, 'Acme')
    make_company(auth_client, 'Beta')
    site = auth_client.post('/api/sites', json={**SITE_FIELDS, 'companies': ['Acme']}).get_json()['record']

    response = auth_client.patch(f"/api/sites/{site['id']}", json={'companies': ['Beta'], 'status': 'En Ejecucion'})
    assert response.status_code == 200
    body = response.get_json()
    assert body['companies'] == ['Beta']
    assert body['status'] == 'En Ejecucion'
    assert body['town'] == 'Valencia'

    response = auth_client.patch(f"/api/sites/{site['id']}", json={'companies': []})
    assert response.status_code == 400


def test_deleting_a_company_keeps_the_site(auth_client):
    acme = make_company(auth_client, 'Acme')
    make_company(auth_client, 'Beta')
    site = auth_client.post('/api/sites', json={**SITE_FIELDS, 'companies': ['Acme', 'Beta']}).get_json()['record']

    assert auth_client.delete(f"/api/companies/{acme['id']}?confirm=true").status_code == 200

    remaining = auth_client.get(f"/api/sites/{site['id']}").get_json()
    assert remaining['companies'] == ['Beta']


def test_renaming_a_company_shows_in_sites(auth_client):
    acme = make_company(auth_client, 'Acme')
    site = auth_client.post('/api/sites', json={**SITE_FIELDS, 'companies': ['Acme']}).get_json()['record']

    auth_client.put(f"/api/companies/{acme['id']}", json={'name': 'Acme Obras'})
    assert auth_client.get(f"/api/sites/{site['id']}").get_json()['companies'] == ['Acme Obras']
