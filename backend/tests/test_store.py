import pytest
from sqlalchemy.exc import OperationalError

from models import db, MeasurementSheet, site_companies
from services.errors import (
    NotFoundError,
    OrderingUnavailableError,
    PermissionDeniedError,
    StoreUnavailableError,
    ValidationError,
)
from conftest import SITE_FIELDS


def test_insert_assigns_id_and_creation_time(store, ticking_clock):
    record = store.insert('companies', {'name': 'Acme'})
    assert record['id'] is not None
    assert record['created_at'] == 1_700_000_000_000


def test_list_is_newest_first(store, ticking_clock):
    store.insert('companies', {'name': 'First'})
    store.insert('companies', {'name': 'Second'})
    store.insert('companies', {'name': 'Third'})

    names = [c['name'] for c in store.list('companies')]
    assert names == ['Third', 'Second', 'First']

    names = [c['name'] for c in store.list('companies', descending=False)]
    assert names == ['First', 'Second', 'Third']


def test_ordering_without_index_is_refused(store):
    with pytest.raises(OrderingUnavailableError):
        store.list('companies', order_by='name')


def test_unordered_list(store, ticking_clock):
    store.insert('activities', {'description': 'Pintura'})
    store.insert('activities', {'description': 'Solado'})
    assert len(store.list('activities', order_by=None)) == 2


def test_update_is_partial(store):
    record = store.insert('companies', {'name': 'Acme', 'phone': '600', 'email': 'a@acme.es'})
    updated = store.update('companies', record['id'], {'phone': '700'})
    assert updated['phone'] == '700'
    assert updated['name'] == 'Acme'
    assert updated['email'] == 'a@acme.es'
    assert updated['created_at'] == record['created_at']


def test_get_and_delete(store):
    record = store.insert('contractors', {'name': 'Constructora Sur'})
    assert store.get('contractors', record['id'])['name'] == 'Constructora Sur'

    store.delete('contractors', record['id'])
    with pytest.raises(NotFoundError):
        store.get('contractors', record['id'])
    with pytest.raises(NotFoundError):
        store.delete('contractors', record['id'])


def test_unknown_collection(store):
    with pytest.raises(ValueError):
        store.list('invoices')


def test_subscription_receives_snapshots_until_unsubscribed(store, ticking_clock):
    snapshots = []
    subscription = store.subscribe('activities', snapshots.append)
    assert snapshots == [[]]

    store.insert('activities', {'description': 'Pintura'})
    assert [a['description'] for a in snapshots[-1]] == ['Pintura']

    subscription.unsubscribe()
    store.insert('activities', {'description': 'Solado'})
    assert len(snapshots) == 2
    assert store.subscriber_count('activities') == 0


def test_subscription_error_ends_subscription(store):
    errors = []
    store.subscribe('companies', lambda records: None, errors.append, order_by='name')
    assert isinstance(errors[0], OrderingUnavailableError)
    assert store.subscriber_count('companies') == 0


def test_site_requires_existing_companies(store):
    with pytest.raises(ValidationError) as excinfo:
        store.insert('sites', {**SITE_FIELDS, 'companies': ['Ghost']})
    assert 'Ghost' in excinfo.value.field_errors['companies']
    assert store.list('sites') == []


def test_deleting_company_keeps_site(store):
    acme = store.insert('companies', {'name': 'Acme'})
    store.insert('companies', {'name': 'Beta'})
    site = store.insert('sites', {**SITE_FIELDS, 'companies': ['Acme', 'Beta']})
    assert site['companies'] == ['Acme', 'Beta']

    store.delete('companies', acme['id'])

    remaining = store.get('sites', site['id'])
    assert remaining['companies'] == ['Beta']
    rows = db.session.execute(db.select(site_companies)).all()
    assert len(rows) == 1


def test_company_change_refreshes_site_subscribers(store):
    store.insert('companies', {'name': 'Acme'})
    store.insert('sites', {**SITE_FIELDS, 'companies': ['Acme']})
    snapshots = []
    store.subscribe('sites', snapshots.append)

    company_id = store.list('companies')[0]['id']
    store.update('companies', company_id, {'name': 'Acme Norte'})

    assert snapshots[-1][0]['companies'] == ['Acme Norte']


def test_legacy_sheet_reads_in_current_shape(store):
    legacy = MeasurementSheet(
        company='Cliente SL', description='Muro', length='2', height='3',
        quantity='2', total='12', sites='Obra Norte', date='2024-03-05', created_at=1,
    )
    db.session.add(legacy)
    db.session.commit()

    sheet = store.get('measurementSheets', legacy.id)
    assert sheet['client_name'] == 'Cliente SL'
    assert sheet['sites'] == ['Obra Norte']
    assert sheet['line_items'][0]['total'] == '12.00'


def test_driver_errors_are_classified(store):
    denied = OperationalError('SELECT 1', {}, Exception('permission denied for table companies'))
    assert isinstance(store._failed('companies', denied, 'listing'), PermissionDeniedError)

    down = OperationalError('SELECT 1', {}, Exception('could not connect to server'))
    error = store._failed('companies', down, 'listing')
    assert isinstance(error, StoreUnavailableError)
    assert error.status_code == 503
