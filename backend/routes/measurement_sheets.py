# backend/routes/measurement_sheets.py
from flask import Blueprint, jsonify
from flask_login import login_required
import logging

from models import Company
from routes.common import (
    create_record, delete_record, error_response, get_json_payload, list_records,
    request_flag, send_export, stream_records,
)
from services.errors import BackofficeError, ValidationError
from services.excel_utils import generate_measurement_xlsx
from services.file_utils import generate_measurement_pdf
from services.measurements import (
    FACTOR_FIELDS, LINE_ITEM_FIELDS, PRICE_FIELDS, PRICED_SHEET_REQUIRED, SHEET_REQUIRED,
    apply_line_item_change, check_line_item_list, empty_line_item, validate_sheet,
)
from services.store import current_store
from services.validators import is_blank

measurement_sheets_bp = Blueprint('measurement_sheets', __name__)
logger = logging.getLogger(__name__)

COLLECTION = 'measurementSheets'
EDITABLE_ITEM_FIELDS = LINE_ITEM_FIELDS + PRICE_FIELDS


def fill_client_contact(values):
    """
    Copy the email and phone of the company named as client into blank fields.

    The priced sheet takes its client contact from the company catalogue.
    """
    name = values.get('client_name')
    if not isinstance(name, str) or not name.strip():
        return values
    company = Company.query.filter_by(name=name.strip()).first()
    if company is None:
        return values

    filled = dict(values)
    for field, source in (('client_email', company.email), ('client_phone1', company.phone)):
        if is_blank(filled.get(field)) and source:
            filled[field] = source
    return filled


@measurement_sheets_bp.route('', methods=['GET'])
@login_required
def get_measurement_sheets():
    """Get all sheets in their current shape, newest first"""
    try:
        return jsonify(list_records(COLLECTION))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error retrieving measurement sheets: {str(e)}")
        return jsonify({'error': 'Error al cargar las mediciones'}), 500


@measurement_sheets_bp.route('', methods=['POST'])
@login_required
def create_measurement_sheet():
    """
    Create a sheet; blank rows are dropped and every total is recomputed.

    With ``priced=true`` (query or body) the sheet is validated as a priced
    sheet and the client contact is filled from the company catalogue.
    """
    try:
        priced = request_flag('priced')
        values = get_json_payload()
        if priced:
            values = fill_client_contact(values)
        return create_record(
            COLLECTION,
            PRICED_SHEET_REQUIRED if priced else SHEET_REQUIRED,
            'Medición agregada correctamente',
            prepare=lambda data: validate_sheet(data, priced=priced),
            values=values,
        )
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error creating measurement sheet: {str(e)}")
        return jsonify({'error': f'Error al agregar la medición: {str(e)}'}), 500


@measurement_sheets_bp.route('/live', methods=['GET'])
@login_required
def stream_measurement_sheets():
    return stream_records(COLLECTION)


@measurement_sheets_bp.route('/line-items/new', methods=['GET'])
@login_required
def new_line_item():
    """Blank row for the sheet form; ``?priced=true`` adds the price fields"""
    return jsonify(empty_line_item(priced=request_flag('priced')))


@measurement_sheets_bp.route('/line-items/change', methods=['POST'])
@login_required
def change_line_item():
    """
    Apply one field edit to a list of rows and return the updated list.

    Body: ``{"line_items": [...], "index": 0, "field": "length", "value": "2"}``
    """
    try:
        data = get_json_payload()
        items = check_line_item_list(data.get('line_items'))
        field = data.get('field')
        if field not in EDITABLE_ITEM_FIELDS or field == 'total':
            raise ValidationError({'field': f'Campo no editable: {field}'})
        try:
            index = int(data.get('index'))
        except (TypeError, ValueError):
            raise ValidationError({'index': 'Índice de concepto no válido'})

        try:
            updated = apply_line_item_change(items, index, field, data.get('value'))
        except IndexError:
            raise ValidationError({'index': f'El concepto {index} no existe'})

        return jsonify({'line_items': updated, 'recalculated': field in FACTOR_FIELDS})
    except BackofficeError as e:
        return error_response(e)


@measurement_sheets_bp.route('/<int:sheet_id>', methods=['GET'])
@login_required
def get_measurement_sheet(sheet_id):
    try:
        return jsonify(current_store().get(COLLECTION, sheet_id))
    except BackofficeError as e:
        return error_response(e)


@measurement_sheets_bp.route('/<int:sheet_id>', methods=['PUT', 'PATCH'])
@login_required
def update_measurement_sheet(sheet_id):
    """
    Update a sheet. The submitted fields are merged over the stored sheet and
    the result is validated as a whole, so legacy sheets are rewritten in the
    current shape. ``priced=true`` applies the priced-sheet rules.
    """
    try:
        store = current_store()
        current = store.get(COLLECTION, sheet_id)
        priced = request_flag('priced')
        merged = {**current, **get_json_payload()}
        if priced:
            merged = fill_client_contact(merged)
        sheet = validate_sheet(merged, priced=priced)
        return jsonify(store.update(COLLECTION, sheet_id, sheet))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating measurement sheet {sheet_id}: {str(e)}")
        return jsonify({'error': f'Error al actualizar la medición: {str(e)}'}), 500


@measurement_sheets_bp.route('/<int:sheet_id>', methods=['DELETE'])
@login_required
def delete_measurement_sheet(sheet_id):
    try:
        return delete_record(COLLECTION, sheet_id)
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deleting measurement sheet {sheet_id}: {str(e)}")
        return jsonify({'error': f'Error al eliminar la medición: {str(e)}'}), 500


def _export(sheet_id, generator, label, priced):
    try:
        sheet = current_store().get(COLLECTION, sheet_id)
        return send_export(generator(sheet, priced=priced))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error exporting measurement sheet {sheet_id} to {label}: {str(e)}")
        return jsonify({'error': f'Error al exportar a {label}. Por favor, intenta de nuevo.'}), 500


@measurement_sheets_bp.route('/<int:sheet_id>/export/xlsx', methods=['GET'])
@login_required
def export_measurement_sheet_xlsx(sheet_id):
    return _export(sheet_id, generate_measurement_xlsx, 'Excel', priced=False)


@measurement_sheets_bp.route('/<int:sheet_id>/export/pdf', methods=['GET'])
@login_required
def export_measurement_sheet_pdf(sheet_id):
    return _export(sheet_id, generate_measurement_pdf, 'PDF', priced=False)


@measurement_sheets_bp.route('/<int:sheet_id>/export/priced/xlsx', methods=['GET'])
@login_required
def export_priced_measurement_sheet_xlsx(sheet_id):
    """Spreadsheet with the worker and contractor price columns"""
    return _export(sheet_id, generate_measurement_xlsx, 'Excel', priced=True)


@measurement_sheets_bp.route('/<int:sheet_id>/export/priced/pdf', methods=['GET'])
@login_required
def export_priced_measurement_sheet_pdf(sheet_id):
    return _export(sheet_id, generate_measurement_pdf, 'PDF', priced=True)
