# backend/routes/purchase_orders.py
from flask import Blueprint, jsonify
from flask_login import login_required
import logging

from models import PurchaseOrder
from routes.common import (
    create_record, delete_record, error_response, list_records, send_export, stream_records, update_record,
)
from services.errors import BackofficeError
from services.excel_utils import generate_purchase_order_xlsx
from services.file_utils import generate_purchase_order_pdf
from services.store import current_store
from services.validators import pick_fields, validate_iso_date, validate_non_negative

purchase_orders_bp = Blueprint('purchase_orders', __name__)
logger = logging.getLogger(__name__)

COLLECTION = 'purchaseOrders'
REQUIRED = {
    'date': 'La fecha es requerida',
    'description': 'La descripción es requerida',
    'quantity': 'La cantidad es requerida',
    'cost': 'El costo es requerido',
    'contractor': 'La constructora es requerida',
    'site': 'La obra es requerida',
    'company': 'La empresa es requerida',
    'supplier': 'El proveedor es requerido',
    'worker': 'El trabajador es requerido',
}


def _prepare(values):
    data = pick_fields(values, PurchaseOrder.EDITABLE_FIELDS)
    validate_iso_date(data, 'date', 'La fecha')
    validate_non_negative(data, 'quantity', 'La cantidad')
    validate_non_negative(data, 'cost', 'El costo')
    return data


@purchase_orders_bp.route('', methods=['GET'])
@login_required
def get_purchase_orders():
    try:
        return jsonify(list_records(COLLECTION))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error retrieving purchase orders: {str(e)}")
        return jsonify({'error': 'Error al cargar los pedidos'}), 500


@purchase_orders_bp.route('', methods=['POST'])
@login_required
def create_purchase_order():
    try:
        return create_record(COLLECTION, REQUIRED, 'Pedido agregado correctamente', prepare=_prepare)
    except Exception as e:
        logger.error(f"Error creating purchase order: {str(e)}")
        return jsonify({'error': f'Error al agregar el pedido: {str(e)}'}), 500


@purchase_orders_bp.route('/live', methods=['GET'])
@login_required
def stream_purchase_orders():
    return stream_records(COLLECTION)


@purchase_orders_bp.route('/<int:order_id>', methods=['GET'])
@login_required
def get_purchase_order(order_id):
    try:
        return jsonify(current_store().get(COLLECTION, order_id))
    except BackofficeError as e:
        return error_response(e)


@purchase_orders_bp.route('/<int:order_id>', methods=['PUT', 'PATCH'])
@login_required
def update_purchase_order(order_id):
    try:
        return jsonify(update_record(COLLECTION, order_id, REQUIRED, _prepare))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating purchase order {order_id}: {str(e)}")
        return jsonify({'error': f'Error al actualizar el pedido: {str(e)}'}), 500


@purchase_orders_bp.route('/<int:order_id>', methods=['DELETE'])
@login_required
def delete_purchase_order(order_id):
    try:
        return delete_record(COLLECTION, order_id)
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deleting purchase order {order_id}: {str(e)}")
        return jsonify({'error': f'Error al eliminar el pedido: {str(e)}'}), 500


@purchase_orders_bp.route('/<int:order_id>/export/xlsx', methods=['GET'])
@login_required
def export_purchase_order_xlsx(order_id):
    """Download the order as a spreadsheet"""
    try:
        order = current_store().get(COLLECTION, order_id)
        return send_export(generate_purchase_order_xlsx(order))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error exporting purchase order {order_id} to Excel: {str(e)}")
        return jsonify({'error': 'Error al exportar a Excel. Por favor, intenta de nuevo.'}), 500


@purchase_orders_bp.route('/<int:order_id>/export/pdf', methods=['GET'])
@login_required
def export_purchase_order_pdf(order_id):
    """Download the order as a PDF"""
    try:
        order = current_store().get(COLLECTION, order_id)
        return send_export(generate_purchase_order_pdf(order))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error exporting purchase order {order_id} to PDF: {str(e)}")
        return jsonify({'error': 'Error al exportar a PDF. Por favor, intenta de nuevo.'}), 500
