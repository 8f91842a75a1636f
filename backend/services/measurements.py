# backend/services/measurements.py
"""
Measurement-sheet computation.

A line item measures length x height x count; its total is always derived from
those three values. Sheets stored before line items existed keep a single flat
item on the document itself; they are normalised here into the list shape the
rest of the application works with.
"""

import re
import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, localcontext

from services.errors import ValidationError

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')

# Values with this many integer digits or more are not treated as measurements
MAX_INTEGER_DIGITS = 100
# Working precision for the line-item product
PRODUCT_PRECISION = 400

# Leading numeric prefix, same tolerance as the browser inputs the data comes from
_NUMBER_PREFIX = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')

FACTOR_FIELDS = ('length', 'height', 'quantity')
LINE_ITEM_FIELDS = ('activity', 'description', 'length', 'height', 'quantity', 'total', 'notes')
PRICE_FIELDS = ('worker_price', 'worker_value', 'contractor_price', 'contractor_value')

# Header fields every sheet needs; the priced sheet also needs the client contact
SHEET_REQUIRED = {
    'date': 'La fecha es requerida',
    'sites': 'La obra es requerida',
    'client_name': 'La empresa es requerida',
}
PRICED_SHEET_REQUIRED = {
    **SHEET_REQUIRED,
    'contractor': 'La constructora es requerida',
    'client_email': 'El email es requerido',
    'client_phone1': 'El teléfono es requerido',
}

# Document shapes a stored sheet can come in
LINE_ITEM_LIST = 'line_item_list'
LEGACY_SINGLE_ITEM = 'legacy_single_item'
EMPTY_SHEET = 'empty'

LEGACY_ITEM_FIELDS = ('description', 'length', 'height', 'quantity', 'total', 'notes')


def parse_decimal(value, default):
    """
    Parse a free-text number. Comma or dot are both accepted as decimal separator.

    Returns ``default`` (as Decimal) when the value is empty, has no numeric
    prefix, is not finite or is too large to be a measurement.
    """
    default = Decimal(str(default))
    if value is None:
        return default
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        number = Decimal(str(value))
    else:
        text = str(value).strip().replace(',', '.')
        match = _NUMBER_PREFIX.match(text)
        if not match:
            return default
        try:
            number = Decimal(match.group(0))
        except InvalidOperation:
            return default
    if not number.is_finite() or (number and number.adjusted() >= MAX_INTEGER_DIGITS):
        logger.debug(f"Ignoring out of range number {value!r}")
        return default
    return number


def quantize(number):
    with localcontext() as ctx:
        # quantize fails when the result needs more digits than the context allows
        ctx.prec = max(ctx.prec, number.adjusted() + 3)
        result = number.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    if result == 0:
        # avoid '-0.00' for negative factors multiplied by zero
        result = Decimal('0.00')
    return result


def compute_total(length, height, quantity):
    """total = round(length * height * quantity, 2), rendered with two decimals"""
    with localcontext() as ctx:
        ctx.prec = PRODUCT_PRECISION
        product = (
            parse_decimal(length, 0)
            * parse_decimal(height, 0)
            * parse_decimal(quantity if quantity not in (None, '') else None, 1)
        )
    return str(quantize(product))


def empty_line_item(priced=False):
    item = {
        'activity': '',
        'description': '',
        'length': '',
        'height': '',
        'quantity': '1',
        'total': '0.00',
        'notes': '',
    }
    if priced:
        item.update({field: '' for field in PRICE_FIELDS})
    return item


def _as_text(value):
    if value is None:
        return ''
    if isinstance(value, float):
        return repr(value)
    return str(value).strip()


def normalize_line_item(raw):
    """Canonical line item: every field a string, quantity defaulted, total recomputed"""
    if not isinstance(raw, dict):
        raw = {}
    item = {field: _as_text(raw.get(field)) for field in LINE_ITEM_FIELDS}
    if item['quantity'] == '':
        item['quantity'] = '1'
    for field in PRICE_FIELDS:
        if field in raw:
            item[field] = _as_text(raw.get(field))
    item['total'] = compute_total(item['length'], item['height'], item['quantity'])
    return item


def apply_line_item_change(items, index, field, value):
    """
    Edit one field of one line item.

    Returns a new list; only the item at ``index`` is replaced and its total is
    recomputed when a factor changes. The other items are returned untouched.
    """
    if index < 0 or index >= len(items):
        raise IndexError(f'Line item {index} does not exist')
    updated = list(items)
    item = dict(updated[index])
    item[field] = value
    if field in FACTOR_FIELDS:
        item['total'] = compute_total(item.get('length'), item.get('height'), item.get('quantity'))
    updated[index] = item
    return updated


def sheet_shape(document):
    """Tell which stored shape a sheet document has"""
    if document.get('line_items'):
        return LINE_ITEM_LIST
    if any(document.get(field) for field in ('description', 'length', 'height')):
        return LEGACY_SINGLE_ITEM
    return EMPTY_SHEET


def normalize_sites(value):
    """Site names come either as one string (legacy) or as a list"""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v and str(v).strip()]
    text = str(value).strip()
    return [text] if text else []


def normalize_sheet(document):
    """
    Turn a stored sheet, in whichever shape it was written, into the canonical one.

    Legacy documents keep the client name under ``company`` and a single item in
    flat fields; both are folded into ``client_name`` and ``line_items``.
    """
    shape = sheet_shape(document)
    if shape == LINE_ITEM_LIST:
        line_items = [normalize_line_item(item) for item in document['line_items']]
    elif shape == LEGACY_SINGLE_ITEM:
        logger.debug(f"Normalising legacy sheet {document.get('id')}")
        line_items = [normalize_line_item({field: document.get(field) for field in LEGACY_ITEM_FIELDS})]
    else:
        line_items = []

    return {
        'id': document.get('id'),
        'client_name': _as_text(document.get('client_name') or document.get('company')),
        'client_email': _as_text(document.get('client_email')),
        'client_phone1': _as_text(document.get('client_phone1')),
        'client_phone2': _as_text(document.get('client_phone2')),
        'contractor': _as_text(document.get('contractor')),
        'sites': normalize_sites(document.get('sites') or document.get('site')),
        'date': _as_text(document.get('date')),
        'line_items': line_items,
        'created_at': document.get('created_at'),
    }


def check_line_item_list(items):
    """
    Reject line items that are not a list of objects.

    Raises:
        ValidationError: on the ``line_items`` field
    """
    if not isinstance(items, list):
        raise ValidationError({'line_items': 'Se esperaba una lista de conceptos'})
    if not all(isinstance(item, dict) for item in items):
        raise ValidationError({'line_items': 'Cada concepto debe ser un objeto'})
    return items


def has_data(item):
    return any(_as_text(item.get(field)) for field in ('description', 'length', 'height'))


def clean_line_items(items):
    """
    Drop rows left completely blank and validate the rest.

    Raises:
        ValidationError: when no row has data, or a row with data lacks
            description, length or height
    """
    kept = [normalize_line_item(item) for item in check_line_item_list(items or []) if has_data(item)]
    if not kept:
        raise ValidationError({'line_items': 'Debes agregar al menos un concepto con datos'})

    incomplete = [
        index for index, item in enumerate(kept)
        if not (item['description'] and item['length'] and item['height'])
    ]
    if incomplete:
        raise ValidationError(
            {'line_items': 'Todos los conceptos deben tener concepto, L y H'},
            message=f'Conceptos incompletos: {", ".join(str(i + 1) for i in incomplete)}',
        )
    return kept


def validate_sheet(payload, priced=False):
    """
    Validate a submitted sheet and return the canonical document to persist.

    Header fields are checked first, then the line items; nothing is written
    unless both pass. The priced sheet also requires the contractor and the
    client's email and first phone.
    """
    required = PRICED_SHEET_REQUIRED if priced else SHEET_REQUIRED
    errors = {}
    for field, message in required.items():
        value = normalize_sites(payload.get(field)) if field == 'sites' else _as_text(payload.get(field))
        if not value:
            errors[field] = message
    if errors:
        raise ValidationError(errors)

    items = clean_line_items(payload.get('line_items'))
    sheet = normalize_sheet({**payload, 'line_items': items})
    sheet.pop('id', None)
    sheet.pop('created_at', None)
    return sheet
