# backend/routes/companies.py
from flask import Blueprint, jsonify
from flask_login import login_required
import logging

from models import Company
from routes.common import (
    create_record, delete_record, error_response, list_records, stream_records, update_record,
)
from services.errors import BackofficeError
from services.store import current_store
from services.validators import pick_fields

companies_bp = Blueprint('companies', __name__)
logger = logging.getLogger(__name__)

COLLECTION = 'companies'
REQUIRED = {'name': 'El nombre es requerido'}


def _prepare(values):
    return pick_fields(values, Company.EDITABLE_FIELDS)


@companies_bp.route('', methods=['GET'])
@login_required
def get_companies():
    """Get all companies, newest first"""
    try:
        return jsonify(list_records(COLLECTION))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error retrieving companies: {str(e)}")
        return jsonify({'error': 'Error al cargar las empresas'}), 500


@companies_bp.route('', methods=['POST'])
@login_required
def create_company():
    """Create a new company"""
    try:
        return create_record(
            COLLECTION, REQUIRED, 'Empresa agregada correctamente', prepare=_prepare, short_banner=True
        )
    except Exception as e:
        logger.error(f"Error creating company: {str(e)}")
        return jsonify({'error': f'Error al agregar la empresa: {str(e)}'}), 500


@companies_bp.route('/live', methods=['GET'])
@login_required
def stream_companies():
    return stream_records(COLLECTION)


@companies_bp.route('/<int:company_id>', methods=['GET'])
@login_required
def get_company(company_id):
    try:
        return jsonify(current_store().get(COLLECTION, company_id))
    except BackofficeError as e:
        return error_response(e)


@companies_bp.route('/<int:company_id>', methods=['PUT', 'PATCH'])
@login_required
def update_company(company_id):
    """Update the submitted fields of a company"""
    try:
        return jsonify(update_record(COLLECTION, company_id, REQUIRED, _prepare))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating company {company_id}: {str(e)}")
        return jsonify({'error': f'Error al actualizar la empresa: {str(e)}'}), 500


@companies_bp.route('/<int:company_id>', methods=['DELETE'])
@login_required
def delete_company(company_id):
    """Delete a company; sites keep existing without it"""
    try:
        return delete_record(COLLECTION, company_id)
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deleting company {company_id}: {str(e)}")
        return jsonify({'error': f'Error al eliminar la empresa: {str(e)}'}), 500
