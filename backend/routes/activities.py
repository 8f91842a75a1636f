# backend/routes/activities.py
from flask import Blueprint, jsonify
from flask_login import login_required
import logging

from routes.common import (
    create_record, delete_record, error_response, list_records, stream_records, update_record,
)
from services.errors import BackofficeError
from services.store import current_store
from services.validators import pick_fields

activities_bp = Blueprint('activities', __name__)
logger = logging.getLogger(__name__)

COLLECTION = 'activities'
REQUIRED = {'description': 'La descripción es requerida'}


def _prepare(values):
    return pick_fields(values, ('description',))


@activities_bp.route('', methods=['GET'])
@login_required
def get_activities():
    try:
        return jsonify(list_records(COLLECTION))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error retrieving activities: {str(e)}")
        return jsonify({'error': 'Error al cargar las actividades'}), 500


@activities_bp.route('', methods=['POST'])
@login_required
def create_activity():
    try:
        return create_record(COLLECTION, REQUIRED, 'Actividad agregada correctamente', prepare=_prepare)
    except Exception as e:
        logger.error(f"Error creating activity: {str(e)}")
        return jsonify({'error': f'Error al agregar la actividad: {str(e)}'}), 500


@activities_bp.route('/live', methods=['GET'])
@login_required
def stream_activities():
    return stream_records(COLLECTION)


@activities_bp.route('/<int:activity_id>', methods=['GET'])
@login_required
def get_activity(activity_id):
    try:
        return jsonify(current_store().get(COLLECTION, activity_id))
    except BackofficeError as e:
        return error_response(e)


@activities_bp.route('/<int:activity_id>', methods=['PUT', 'PATCH'])
@login_required
def update_activity(activity_id):
    try:
        return jsonify(update_record(COLLECTION, activity_id, REQUIRED, _prepare))
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating activity {activity_id}: {str(e)}")
        return jsonify({'error': f'Error al actualizar la actividad: {str(e)}'}), 500


@activities_bp.route('/<int:activity_id>', methods=['DELETE'])
@login_required
def delete_activity(activity_id):
    try:
        return delete_record(COLLECTION, activity_id)
    except BackofficeError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deleting activity {activity_id}: {str(e)}")
        return jsonify({'error': f'Error al eliminar la actividad: {str(e)}'}), 500
