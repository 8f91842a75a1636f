# backend/routes/auth.py
from flask import Blueprint, current_app, jsonify, session
from flask_login import current_user
import logging

from middleware.auth import is_safe_redirect
from routes.common import get_json_payload, error_response
from services.errors import BackofficeError
from services.session_state import SessionState

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Check the static credentials and set the session flag"""
    try:
        data = get_json_payload()
    except BackofficeError as e:
        return error_response(e)

    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    target = data.get('redirect')

    if not username or not password:
        return jsonify({'error': 'Usuario y contraseña son requeridos'}), 400

    state = SessionState(session)
    if not state.login(username, password,
                       current_app.config['AUTH_USERNAME'],
                       current_app.config['AUTH_PASSWORD']):
        return jsonify({'error': 'Usuario o contraseña incorrectos'}), 401

    session.permanent = True
    return jsonify({
        'message': 'Sesión iniciada',
        'authenticated': True,
        'redirect': target if is_safe_redirect(target) else '/',
    })


@auth_bp.route('/logout', methods=['POST'])
def logout():
    SessionState(session).logout()
    logger.info("Session closed")
    return jsonify({'message': 'Sesión cerrada', 'authenticated': False})


@auth_bp.route('/status', methods=['GET'])
def status():
    """Report whether this browser session is logged in"""
    if current_user.is_authenticated:
        return jsonify({'authenticated': True, 'username': current_user.username})
    return jsonify({'authenticated': False})
