# backend/services/validators.py
import logging
from datetime import datetime

from services.errors import ValidationError

logger = logging.getLogger(__name__)

def clean_value(value):
    """Normalise a submitted form value: strings are stripped, None becomes ''"""
    if value is None:
        return ''
    if isinstance(value, str):
        return value.strip()
    return value


def is_blank(value):
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (list, tuple, set)):
        return len([v for v in value if not is_blank(v)]) == 0
    return False


def pick_fields(data, fields):
    """Keep only the known fields of a payload, cleaning each value"""
    return {field: clean_value(data.get(field)) for field in fields if field in data}


def validate_required(data, required):
    """
    Check required fields before anything reaches the store.

    Args:
        data (dict): submitted values
        required (dict): field name -> message shown when the field is missing

    Raises:
        ValidationError: with one message per missing field
    """
    errors = {}
    for field, message in required.items():
        if is_blank(data.get(field)):
            errors[field] = message
    if errors:
        logger.info(f"Validation failed for fields: {sorted(errors)}")
        raise ValidationError(errors)


def validate_choice(data, field, choices, label):
    value = data.get(field)
    if value and value not in choices:
        raise ValidationError({field: f"{label} debe ser uno de: {', '.join(choices)}"})


def validate_non_negative(data, field, label):
    value = data.get(field)
    if is_blank(value):
        return
    try:
        number = float(str(value).replace(',', '.'))
    except ValueError:
        raise ValidationError({field: f'{label} debe ser un número'})
    if number < 0:
        raise ValidationError({field: f'{label} no puede ser negativo'})


def validate_iso_date(data, field, label):
    value = data.get(field)
    if is_blank(value):
        return
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except (TypeError, ValueError):
        raise ValidationError({field: f'{label} debe tener el formato AAAA-MM-DD'})
