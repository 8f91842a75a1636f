# backend/routes/sites.py
from flask import Blueprint, jsonify
from flask_login import login_required
import logging

from models import Site, SITE_STATUSES
from routes.common import (
    create_record, delete_record, error_response, list_records, stream_records, update_record,
)
from services.errors import BackofficeError
from services.store import current_store
from services.validators import pick_fields, validate_choice, validate_iso_date

sites_bp = Blueprint('sites', __name__)
logger = logging.getLogger(__name__)

COLLECTION = 'sites'
REQUIRED = {
    'companies': 'Selecciona al menos una empresa',
    'description': 'La descripción es requerida',
    'contractor': 'La constructora es requerida',
    'status': 'El estado es requerido',
    'manager': 'El encargado es requerido',
    'manager_phone': 'El teléfono del encargado es requerido',
    'site_chief': 'El jefe de obra es requerido',
    'site_chief_phone': 'El teléfono del jefe de obra es requerido',
    'address': 'La dirección es requerida',
    'town': 'La población es requerida',
    'start_date': 'La fecha de inicio es requerida',
    'request': 'La solicitud es requerida',
}


def _prepare(values):
    data = pick_fields(values, Site.EDITABLE_FIELDS + ('companies',))
    validate_choice(data, 'status', SITE_STATUSES, 'El estado')
    validate_iso_date(data, 'start_date', 'La fecha de inicio')
    return data


@sites_bp.route('', methods=['GET'])
@login_required
def get_sites():
    """Get all sites with the names of their companies"""
    try:
        return jsonify(list_records(COLLECTION))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error retrieving sites: {str(e)}")
        return jsonify({'error': 'Error al cargar las obras'}), 500


@sites_bp.route('', methods=['POST'])
@login_required
def create_site():
    """Create a site; every company name must exist"""
    try:
        return create_record(COLLECTION, REQUIRED, 'Obra agregada correctamente', prepare=_prepare)
    except Exception as e:
        logger.error(f"Error creating site: {str(e)}")
        return jsonify({'error': f'Error al agregar la obra: {str(e)}'}), 500


@sites_bp.route('/live', methods=['GET'])
@login_required
def stream_sites():
    return stream_records(COLLECTION)


@sites_bp.route('/<int:site_id>', methods=['GET'])
@login_required
def get_site(site_id):
    try:
        return jsonify(current_store().get(COLLECTION, site_id))
    except BackofficeError as e:
        return error_response(e)


@sites_bp.route('/<int:site_id>', methods=['PUT', 'PATCH'])
@login_required
def update_site(site_id):
    try:
        return jsonify(update_record(COLLECTION, site_id, REQUIRED, _prepare))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating site {site_id}: {str(e)}")
        return jsonify({'error': f'Error al actualizar la obra: {str(e)}'}), 500


@sites_bp.route('/<int:site_id>', methods=['DELETE'])
@login_required
def delete_site(site_id):
    try:
        return delete_record(COLLECTION, site_id)
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deleting site {site_id}: {str(e)}")
        return jsonify({'error': f'Error al eliminar la obra: {str(e)}'}), 500
