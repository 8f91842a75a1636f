# backend/routes/contractors.py
from flask import Blueprint, jsonify
from flask_login import login_required
import logging

from models import Contractor
from routes.common import (
    create_record, delete_record, error_response, list_records, stream_records, update_record,
)
from services.errors import BackofficeError
from services.store import current_store
from services.validators import pick_fields

contractors_bp = Blueprint('contractors', __name__)
logger = logging.getLogger(__name__)

COLLECTION = 'contractors'
REQUIRED = {'name': 'El nombre es requerido'}


def _prepare(values):
    return pick_fields(values, Contractor.EDITABLE_FIELDS)


@contractors_bp.route('', methods=['GET'])
@login_required
def get_contractors():
    try:
        return jsonify(list_records(COLLECTION))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error retrieving contractors: {str(e)}")
        return jsonify({'error': 'Error al cargar las constructoras'}), 500


@contractors_bp.route('', methods=['POST'])
@login_required
def create_contractor():
    try:
        return create_record(
            COLLECTION, REQUIRED, 'Constructora agregada correctamente', prepare=_prepare, short_banner=True
        )
    except Exception as e:
        logger.error(f"Error creating contractor: {str(e)}")
        return jsonify({'error': f'Error al agregar la constructora: {str(e)}'}), 500


@contractors_bp.route('/live', methods=['GET'])
@login_required
def stream_contractors():
    return stream_records(COLLECTION)


@contractors_bp.route('/<int:contractor_id>', methods=['GET'])
@login_required
def get_contractor(contractor_id):
    try:
        return jsonify(current_store().get(COLLECTION, contractor_id))
    except BackofficeError as e:
        return error_response(e)


@contractors_bp.route('/<int:contractor_id>', methods=['PUT', 'PATCH'])
@login_required
def update_contractor(contractor_id):
    try:
        return jsonify(update_record(COLLECTION, contractor_id, REQUIRED, _prepare))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating contractor {contractor_id}: {str(e)}")
        return jsonify({'error': f'Error al actualizar la constructora: {str(e)}'}), 500


@contractors_bp.route('/<int:contractor_id>', methods=['DELETE'])
@login_required
def delete_contractor(contractor_id):
    try:
        return delete_record(COLLECTION, contractor_id)
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deleting contractor {contractor_id}: {str(e)}")
        return jsonify({'error': f'Error al eliminar la constructora: {str(e)}'}), 500
