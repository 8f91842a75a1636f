# backend/routes/workers.py
from flask import Blueprint, jsonify
from flask_login import login_required
import logging

from models import Worker, WORK_STATUSES
from routes.common import (
    create_record, delete_record, error_response, list_records, stream_records, update_record,
)
from services.errors import BackofficeError
from services.store import current_store
from services.validators import pick_fields, validate_choice

workers_bp = Blueprint('workers', __name__)
logger = logging.getLogger(__name__)

COLLECTION = 'workers'
REQUIRED = {
    'name': 'El nombre es requerido',
    'alias': 'El alias es requerido',
    'address': 'La dirección es requerida',
    'phone_number': 'El teléfono es requerido',
    'job': 'El puesto es requerido',
    'company': 'La empresa es requerida',
    'work_status': 'El estado es requerido',
}


def _prepare(values):
    data = pick_fields(values, Worker.EDITABLE_FIELDS)
    validate_choice(data, 'work_status', WORK_STATUSES, 'El estado')
    return data


@workers_bp.route('', methods=['GET'])
@login_required
def get_workers():
    try:
        return jsonify(list_records(COLLECTION))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error retrieving workers: {str(e)}")
        return jsonify({'error': 'Error al cargar los trabajadores'}), 500


@workers_bp.route('', methods=['POST'])
@login_required
def create_worker():
    try:
        return create_record(COLLECTION, REQUIRED, 'Trabajador agregado correctamente', prepare=_prepare)
    except Exception as e:
        logger.error(f"Error creating worker: {str(e)}")
        return jsonify({'error': f'Error al agregar el trabajador: {str(e)}'}), 500


@workers_bp.route('/live', methods=['GET'])
@login_required
def stream_workers():
    return stream_records(COLLECTION)


@workers_bp.route('/<int:worker_id>', methods=['GET'])
@login_required
def get_worker(worker_id):
    try:
        return jsonify(current_store().get(COLLECTION, worker_id))
    except BackofficeError as e:
        return error_response(e)


@workers_bp.route('/<int:worker_id>', methods=['PUT', 'PATCH'])
@login_required
def update_worker(worker_id):
    """Update a worker; firing is a status change, not a delete"""
    try:
        return jsonify(update_record(COLLECTION, worker_id, REQUIRED, _prepare))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating worker {worker_id}: {str(e)}")
        return jsonify({'error': f'Error al actualizar el trabajador: {str(e)}'}), 500


@workers_bp.route('/<int:worker_id>', methods=['DELETE'])
@login_required
def delete_worker(worker_id):
    try:
        return delete_record(COLLECTION, worker_id)
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deleting worker {worker_id}: {str(e)}")
        return jsonify({'error': f'Error al eliminar el trabajador: {str(e)}'}), 500
