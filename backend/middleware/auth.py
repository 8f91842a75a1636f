# backend/middleware/auth.py

from urllib.parse import quote

from flask import current_app, jsonify, redirect, request, session
from flask_login import LoginManager, UserMixin
import logging

from services.session_state import SessionState

logger = logging.getLogger(__name__)

LOGIN_PATH = '/login'


class Operator(UserMixin):
    """The single back-office operator; there are no per-user accounts"""

    def __init__(self, username):
        self.id = username
        self.username = username


def is_safe_redirect(target):
    """Only same-site absolute paths are accepted as post-login destinations"""
    return bool(target) and target.startswith('/') and not target.startswith('//')


def login_redirect_url(path):
    if not is_safe_redirect(path) or path == LOGIN_PATH:
        return LOGIN_PATH
    return f"{LOGIN_PATH}?redirect={quote(path, safe='/')}"


def setup_login(app):
    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.session_protection = 'basic'

    @login_manager.request_loader
    def load_operator(req):
        if SessionState(session).is_authenticated:
            return Operator(current_app.config['AUTH_USERNAME'])
        return None

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        """JSON 401 for API calls, redirect to the login page otherwise"""
        target = login_redirect_url(request.full_path.rstrip('?') if request.query_string else request.path)
        if request.path.startswith('/api/'):
            logger.warning(f"Unauthorized API access attempt to {request.path} from {request.remote_addr}")
            return jsonify({
                'error': 'Authentication required',
                'message': 'Debes iniciar sesión para acceder a este recurso',
                'code': 'UNAUTHORIZED',
                'redirect': target,
            }), 401
        return redirect(target)

    return login_manager
