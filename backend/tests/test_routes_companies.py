from conftest import make_company


def test_create_with_only_a_name(auth_client):
    response = auth_client.post('/api/companies', json={'name': 'Acme'})
    assert response.status_code == 201
    body = response.get_json()
    assert body['record']['name'] == 'Acme'
    assert body['record']['phone'] == ''
    assert body['banner'] == {'kind': 'success', 'message': 'Empresa agregada correctamente', 'dismiss_after': 2}


def test_create_without_name_is_rejected(auth_client):
    response = auth_client.post('/api/companies', json={'phone': '600'})
    assert response.status_code == 400
    body = response.get_json()
    assert body['code'] == 'invalid-argument'
    assert 'name' in body['errors']
    assert auth_client.get('/api/companies').get_json() == []


def test_list_update_and_get(auth_client, ticking_clock):
    make_company(auth_client, 'Acme')
    beta = make_company(auth_client, 'Beta', email='beta@example.com')

    listed = auth_client.get('/api/companies').get_json()
    assert [c['name'] for c in listed] == ['Beta', 'Acme']

    response = auth_client.put(f"/api/companies/{beta['id']}", json={'phone': '961000000'})
    assert response.status_code == 200
    assert response.get_json()['phone'] == '961000000'
    assert response.get_json()['email'] == 'beta@example.com'

    response = auth_client.put(f"/api/companies/{beta['id']}", json={'name': ''})
    assert response.status_code == 400

    assert auth_client.get(f"/api/companies/{beta['id']}").get_json()['name'] == 'Beta'


def test_delete_requires_confirmation(auth_client):
    acme = make_company(auth_client)

    response = auth_client.delete(f"/api/companies/{acme['id']}")
    assert response.status_code == 409
    assert response.get_json()['code'] == 'confirmation-required'
    assert auth_client.get(f"/api/companies/{acme['id']}").status_code == 200

    response = auth_client.delete(f"/api/companies/{acme['id']}?confirm=true")
    assert response.status_code == 200

    response = auth_client.get(f"/api/companies/{acme['id']}")
    assert response.status_code == 404
    assert response.get_json()['code'] == 'not-found'


def test_delete_confirmation_in_body(auth_client):
    acme = make_company(auth_client)
    response = auth_client.delete(f"/api/companies/{acme['id']}", json={'confirm': True})
    assert response.status_code == 200


def test_live_feed_starts_with_current_snapshot(auth_client):
    make_company(auth_client, 'Acme')

    response = auth_client.get('/api/companies/live', buffered=False)
    assert response.status_code == 200
    assert response.mimetype == 'text/event-stream'

    first = next(iter(response.response))
    if isinstance(first, bytes):
        first = first.decode('utf-8')
    assert first.startswith('data: ')
    assert 'Acme' in first
    response.close()


def test_other_catalogues(auth_client):
    response = auth_client.post('/api/contractors', json={'name': 'Constructora Sur'})
    assert response.status_code == 201
    assert response.get_json()['banner']['dismiss_after'] == 2

    response = auth_client.post('/api/activities', json={'description': 'Alicatado'})
    assert response.status_code == 201
    assert response.get_json()['banner']['dismiss_after'] == 3

    assert auth_client.post('/api/activities', json={}).status_code == 400


def test_workers_validate_status(auth_client):
    worker = {
        'name': 'Juan', 'alias': 'Juanito', 'address': 'Calle 1', 'phone_number': '600',
        'job': 'Oficial', 'company': 'Acme', 'work_status': 'contratado',
    }
    response = auth_client.post('/api/workers', json=worker)
    assert response.status_code == 201
    worker_id = response.get_json()['record']['id']

    response = auth_client.post('/api/workers', json={**worker, 'work_status': 'vacaciones'})
    assert response.status_code == 400

    response = auth_client.patch(f'/api/workers/{worker_id}', json={'work_status': 'despedido'})
    assert response.get_json()['work_status'] == 'despedido'

    response = auth_client.post('/api/workers', json={'name': 'Ana'})
    assert set(response.get_json()['errors']) == {
        'alias', 'address', 'phone_number', 'job', 'company', 'work_status',
    }
