from decimal import Decimal

import pytest

from services.errors import ValidationError
from services.measurements import (
    LEGACY_SINGLE_ITEM,
    LINE_ITEM_LIST,
    MAX_INTEGER_DIGITS,
    apply_line_item_change,
    compute_total,
    empty_line_item,
    normalize_sheet,
    parse_decimal,
    sheet_shape,
    validate_sheet,
)


def test_parse_decimal_accepts_comma_and_prefixes():
    assert parse_decimal('2,5', 0) == Decimal('2.5')
    assert parse_decimal(' 3.25 ', 0) == Decimal('3.25')
    assert parse_decimal('12abc', 0) == Decimal('12')
    assert parse_decimal('abc', 0) == Decimal('0')
    assert parse_decimal('', 1) == Decimal('1')
    assert parse_decimal(None, 1) == Decimal('1')
    assert parse_decimal(4, 0) == Decimal('4')


def test_total_is_product_with_two_decimals():
    assert compute_total('2', '3.5', '4') == '28.00'
    assert compute_total('2,5', '2', '1') == '5.00'


def test_empty_quantity_counts_as_one():
    assert compute_total('2', '3.5', '') == '7.00'
    assert compute_total('2', '3.5', None) == '7.00'
    assert compute_total('2', '3.5', 'x') == '7.00'


def test_missing_dimensions_count_as_zero():
    assert compute_total('', '3', '2') == '0.00'
    assert compute_total('abc', '3', '2') == '0.00'


def test_zero_and_negative_values_are_kept():
    assert compute_total('2', '3', '0') == '0.00'
    assert compute_total('-2', '3', '1') == '-6.00'
    assert compute_total('-2', '0', '1') == '0.00'


def test_rounding_is_half_up():
    assert compute_total('0.125', '1', '1') == '0.13'
    assert compute_total('1.005', '1', '1') == '1.01'


def test_editing_factors_recomputes_total():
    items = [empty_line_item()]
    items = apply_line_item_change(items, 0, 'length', '2')
    items = apply_line_item_change(items, 0, 'height', '3.5')
    items = apply_line_item_change(items, 0, 'quantity', '4')
    assert items[0]['total'] == '28.00'

    items = apply_line_item_change(items, 0, 'quantity', '')
    assert items[0]['total'] == '7.00'


def test_change_only_touches_the_edited_item():
    first = {**empty_line_item(), 'length': '1', 'height': '1', 'total': '1.00'}
    second = {**empty_line_item(), 'length': '5', 'height': '2', 'total': '10.00'}
    items = [first, second]

    updated = apply_line_item_change(items, 0, 'length', '3')

    assert updated[0]['total'] == '3.00'
    assert updated[1] is second
    assert second['total'] == '10.00'
    # the input list and its items are left as they were
    assert items[0]['length'] == '1'
    assert first['total'] == '1.00'


def test_non_factor_field_keeps_total():
    items = [{**empty_line_item(), 'length': '2', 'height': '2', 'total': '4.00'}]
    updated = apply_line_item_change(items, 0, 'notes', 'revisar')
    assert updated[0]['total'] == '4.00'
    assert updated[0]['notes'] == 'revisar'


def test_price_fields_do_not_follow_total():
    items = [{**empty_line_item(priced=True), 'length': '2', 'height': '2', 'worker_value': '40'}]
    updated = apply_line_item_change(items, 0, 'length', '10')
    assert updated[0]['total'] == '20.00'
    assert updated[0]['worker_value'] == '40'


def test_change_out_of_range_raises():
    with pytest.raises(IndexError):
        apply_line_item_change([empty_line_item()], 3, 'length', '1')


def test_legacy_sheet_is_normalised():
    legacy = {
        'id': 7,
        'company': 'Cliente SL',
        'description': 'Muro',
        'length': '2',
        'height': '3',
        'quantity': '',
        'site': 'Obra Norte',
        'date': '2024-03-05',
    }
    assert sheet_shape(legacy) == LEGACY_SINGLE_ITEM

    sheet = normalize_sheet(legacy)

    assert sheet['client_name'] == 'Cliente SL'
    assert sheet['sites'] == ['Obra Norte']
    assert len(sheet['line_items']) == 1
    item = sheet['line_items'][0]
    assert item['description'] == 'Muro'
    assert item['quantity'] == '1'
    assert item['total'] == '6.00'


def test_current_sheet_totals_are_recomputed_on_read():
    sheet = normalize_sheet({
        'sites': ['A'],
        'line_items': [{'description': 'Suelo', 'length': '2', 'height': '2', 'quantity': '2', 'total': '1'}],
    })
    assert sheet_shape({'line_items': [{}]}) == LINE_ITEM_LIST
    assert sheet['line_items'][0]['total'] == '8.00'


def test_validate_sheet_drops_blank_rows():
    sheet = validate_sheet({
        'date': '2024-03-05',
        'sites': ['Obra Norte'],
        'client_name': 'Reformas Levante',
        'line_items': [
            {'description': 'Muro', 'length': '2', 'height': '3.5', 'quantity': '4', 'total': '999'},
            {'description': '', 'length': '', 'height': '', 'quantity': '1'},
        ],
    })
    assert len(sheet['line_items']) == 1
    assert sheet['line_items'][0]['total'] == '28.00'
    assert 'id' not in sheet


def test_validate_sheet_requires_a_row_with_data():
    with pytest.raises(ValidationError) as excinfo:
        validate_sheet({'date': '2024-03-05', 'sites': ['A'], 'client_name': 'C', 'line_items': [empty_line_item()]})
    assert excinfo.value.field_errors['line_items'] == 'Debes agregar al menos un concepto con datos'


def test_validate_sheet_requires_complete_rows():
    with pytest.raises(ValidationError) as excinfo:
        validate_sheet({
            'date': '2024-03-05',
            'sites': ['A'],
            'client_name': 'C',
            'line_items': [{'description': 'Muro', 'length': '2', 'height': ''}],
        })
    assert 'line_items' in excinfo.value.field_errors


def test_validate_sheet_requires_header_fields():
    with pytest.raises(ValidationError) as excinfo:
        validate_sheet({'sites': [], 'line_items': []})
    assert set(excinfo.value.field_errors) == {'date', 'sites', 'client_name'}


def test_priced_sheet_requires_client_contact():
    header = {'date': '2024-03-05', 'sites': ['A'], 'client_name': 'C'}
    items = [{'description': 'Muro', 'length': '2', 'height': '3'}]

    assert validate_sheet({**header, 'line_items': items})['client_name'] == 'C'

    with pytest.raises(ValidationError) as excinfo:
        validate_sheet({**header, 'line_items': items}, priced=True)
    assert set(excinfo.value.field_errors) == {'contractor', 'client_email', 'client_phone1'}

    sheet = validate_sheet({
        **header, 'contractor': 'Sur', 'client_email': 'c@example.com', 'client_phone1': '600',
        'line_items': items,
    }, priced=True)
    assert sheet['client_phone1'] == '600'


@pytest.mark.parametrize('line_items', [
    ['x'],
    [{'description': 'Muro', 'length': '2', 'height': '3'}, 7],
    {'description': 'Muro', 'length': '2', 'height': '3'},
    'Muro',
])
def test_validate_sheet_rejects_malformed_line_items(line_items):
    with pytest.raises(ValidationError) as excinfo:
        validate_sheet({'date': '2024-03-05', 'sites': ['A'], 'client_name': 'C', 'line_items': line_items})
    assert 'line_items' in excinfo.value.field_errors


def test_large_numbers_keep_two_decimals():
    assert compute_total('1e30', '1', '1') == '1' + '0' * 30 + '.00'
    length = '9' * 27
    assert compute_total(length, '2', '1') == str(int(length) * 2) + '.00'
    assert compute_total('99999999999999999999999999999', '0,5', '3') == '149999999999999999999999999998.50'


def test_out_of_range_numbers_are_ignored():
    huge = '1e%d' % MAX_INTEGER_DIGITS
    assert parse_decimal(huge, 0) == Decimal('0')
    assert parse_decimal(float('inf'), 1) == Decimal('1')
    assert compute_total(huge, '2', '1') == '0.00'
    assert compute_total('2', '3', '1e999999') == '6.00'
    assert compute_total('1e-999999', '2', '1') == '0.00'


def test_large_numbers_on_read_and_change():
    sheet = normalize_sheet({'id': 1, 'description': 'Muro', 'length': '1e30', 'height': '1'})
    assert sheet['line_items'][0]['total'] == '1' + '0' * 30 + '.00'

    items = [{'description': 'Muro', 'length': '2', 'height': '3', 'quantity': '1', 'total': '6.00'}]
    updated = apply_line_item_change(items, 0, 'length', '99999999999999999999999999999')
    assert updated[0]['total'] == '299999999999999999999999999997.00'
