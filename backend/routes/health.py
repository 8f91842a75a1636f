from datetime import datetime

import pytz
from flask import Blueprint, jsonify, current_app
from sqlalchemy import text

from config import validate_config
from models import db

health_bp = Blueprint('health', __name__)

CRITICAL_BLUEPRINTS = ['auth', 'companies', 'sites', 'measurement_sheets']


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint to verify service status
    Tests database connectivity, configuration and registered blueprints
    """
    health_status = {
        'status': 'healthy',
        'app': f"{current_app.config.get('SITE_NAME', 'Obras')} API",
        'version': '1.0.0',
        'timestamp': datetime.now(pytz.utc).isoformat(),
        'checks': {}
    }

    overall_healthy = True
    status_code = 200

    # Test 1: Database Connection
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()

        db_url = current_app.config.get('SQLALCHEMY_DATABASE_URI', '')
        if 'sqlite' in db_url.lower():
            db_type = 'SQLite'
        elif 'postgresql' in db_url.lower():
            db_type = 'PostgreSQL'
        else:
            db_type = 'Unknown'

        health_status['checks']['database'] = {
            'status': 'healthy',
            'type': db_type,
            'connected': True
        }
    except Exception as db_error:
        db.session.rollback()
        current_app.logger.error(f"Database health check failed: {db_error}")
        health_status['checks']['database'] = {
            'status': 'unhealthy',
            'connected': False,
            'error': str(db_error)
        }
        overall_healthy = False

    # Test 2: Environment Configuration
    config_valid, config_message = validate_config(current_app.config.get('ENV_NAME'))
    health_status['checks']['configuration'] = {
        'status': 'healthy' if config_valid else 'warning',
        'environment': current_app.config.get('ENV_NAME'),
        'message': config_message,
        'cors_configured': bool(current_app.config.get('CORS_ORIGINS'))
    }
    if not config_valid:
        current_app.logger.warning(f"Configuration issues detected: {config_message}")

    # Test 3: Application State
    registered_blueprints = [bp.name for bp in current_app.blueprints.values()]
    missing_blueprints = [bp for bp in CRITICAL_BLUEPRINTS if bp not in registered_blueprints]
    health_status['checks']['application'] = {
        'status': 'healthy' if not missing_blueprints else 'warning',
        'blueprints': {
            'registered': registered_blueprints,
            'missing_critical': missing_blueprints,
            'total_count': len(registered_blueprints)
        },
        'routes': {
            'total': len(list(current_app.url_map.iter_rules())),
            'api_routes': len([rule for rule in current_app.url_map.iter_rules()
                               if rule.rule.startswith('/api/')])
        }
    }

    # Determine overall health status
    if not overall_healthy:
        health_status['status'] = 'unhealthy'
        status_code = 503  # Service Unavailable
    elif any(check.get('status') == 'warning' for check in health_status['checks'].values()):
        health_status['status'] = 'degraded'

    current_app.logger.info(f"Health check completed: {health_status['status']}")
    return jsonify(health_status), status_code


@health_bp.route('/health/simple', methods=['GET'])
def simple_health_check():
    """
    Simple health check for basic monitoring
    Returns minimal response for load balancers and simple monitoring
    """
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()

        return jsonify({
            'status': 'healthy',
            'message': 'Service is running'
        }), 200

    except Exception as e:
        current_app.logger.error(f"Simple health check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'message': 'Database connection failed'
        }), 503
