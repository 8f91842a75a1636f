import pytest

ORDER = {
    'date': '2024-03-05',
    'description': 'Cemento gris 25kg',
    'quantity': '40',
    'cost': '212,50',
    'contractor': 'Constructora Sur',
    'site': 'Edificio Norte',
    'company': 'Acme',
    'supplier': 'Almacenes Levante',
    'worker': 'Juan',
}


@pytest.fixture
def order(auth_client):
    response = auth_client.post('/api/purchaseOrders', json=ORDER)
    assert response.status_code == 201
    return response.get_json()['record']


def test_create_purchase_order(auth_client, order):
    assert order['description'] == 'Cemento gris 25kg'
    assert order['cost'] == '212,50'
    assert isinstance(order['created_at'], int)
    assert auth_client.get('/api/purchaseOrders').get_json()[0]['id'] == order['id']


def test_negative_or_invalid_amounts(auth_client):
    response = auth_client.post('/api/purchaseOrders', json={**ORDER, 'cost': '-5'})
    assert response.status_code == 400
    assert 'cost' in response.get_json()['errors']

    response = auth_client.post('/api/purchaseOrders', json={**ORDER, 'quantity': 'muchos'})
    assert response.status_code == 400
    assert 'quantity' in response.get_json()['errors']


def test_missing_fields(auth_client):
    response = auth_client.post('/api/purchaseOrders', json={'description': 'Arena'})
    assert response.status_code == 400
    assert set(response.get_json()['errors']) == set(ORDER) - {'description'}


def test_export_xlsx(auth_client, order):
    response = auth_client.get(f"/api/purchaseOrders/{order['id']}/export/xlsx")
    assert response.status_code == 200
    assert response.mimetype == 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    assert 'Hoja_Pedidos_Cemento_gris_25kg_05-03-2024.xlsx' in response.headers['Content-Disposition']
    assert response.data[:2] == b'PK'


def test_export_pdf(auth_client, order):
    response = auth_client.get(f"/api/purchaseOrders/{order['id']}/export/pdf")
    assert response.status_code == 200
    assert response.mimetype == 'application/pdf'
    assert 'attachment' in response.headers['Content-Disposition']
    assert response.data.startswith(b'%PDF')


def test_export_missing_order(auth_client):
    response = auth_client.get('/api/purchaseOrders/999/export/pdf')
    assert response.status_code == 404
