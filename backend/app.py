import os
import logging
from flask import Flask, request, jsonify

# Import configuration with proper instantiation
from config import config, get_config_name

# Import database and models
from models import db, COLLECTIONS
from middleware.auth import is_safe_redirect, setup_login
from middleware.cors import setup_cors
from routes import BLUEPRINTS
from services.errors import BackofficeError
from services.store import init_store


def create_app(config_name=None):
    """
    Application factory for the Obras back-office API
    """
    # Auto-detect environment if not specified
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__)

    try:
        config_class = config[config_name]
        config_instance = config_class()  # Create instance to resolve database URL
        app.config.from_object(config_instance)
        app.config['ENV_NAME'] = config_name
        app.logger.info(f"✓ Configuration loaded successfully for {config_name} environment")

        # Log database URL type for debugging (without exposing credentials)
        db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
        if 'sqlite' in db_uri.lower():
            app.logger.info("✓ Using SQLite database")
        elif 'postgresql' in db_uri.lower():
            app.logger.info("✓ Using PostgreSQL database")
        else:
            app.logger.info(f"✓ Using database: {db_uri.split('://')[0] if '://' in db_uri else 'unknown'}")

    except Exception as config_error:
        app.logger.error(f"❌ Configuration loading failed: {config_error}")
        raise

    # Configure logging based on environment
    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if config_name == 'production':
        logging.basicConfig(level=log_level)
        app.logger.setLevel(log_level)
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        app.logger.addHandler(handler)
        app.logger.info("✓ Production logging configured")
    elif app.debug:
        app.logger.setLevel(logging.DEBUG)
        app.logger.info("✓ Debug logging enabled")
    else:
        app.logger.setLevel(log_level)

    try:
        db.init_app(app)
        init_store(app, db, COLLECTIONS)
        app.logger.info("✓ Database initialized successfully")
    except Exception as db_init_error:
        app.logger.error(f"❌ Database initialization failed: {db_init_error}")
        raise

    setup_cors(app)
    setup_login(app)

    # Import and register blueprints
    app.logger.info("Starting blueprint registration...")
    registered_blueprints = []
    failed_blueprints = []

    for module_name, blueprint_name, url_prefix in BLUEPRINTS:
        try:
            module = __import__(module_name, fromlist=[blueprint_name])
            blueprint = getattr(module, blueprint_name)
            app.register_blueprint(blueprint, url_prefix=url_prefix)
            registered_blueprints.append(blueprint_name)
            app.logger.info(f"✓ Registered {blueprint_name} blueprint at {url_prefix}")
        except (ImportError, AttributeError) as e:
            app.logger.error(f"❌ Failed to register {blueprint_name} from {module_name}: {e}")
            failed_blueprints.append(blueprint_name)

    app.logger.info(f"Blueprint registration complete: {len(registered_blueprints)} successful, {len(failed_blueprints)} failed")
    if failed_blueprints:
        app.logger.error(f"Failed blueprints: {failed_blueprints}")

    @app.route('/')
    def index():
        """Root endpoint with API information"""
        return jsonify({
            'message': f"{app.config.get('SITE_NAME')} API",
            'status': 'running',
            'version': '1.0.0',
            'environment': config_name,
            'endpoints': {prefix.split('/')[-1] or 'health': prefix for _, _, prefix in BLUEPRINTS},
            'blueprint_status': {
                'registered': registered_blueprints,
                'failed': failed_blueprints,
                'total_routes': len(list(app.url_map.iter_rules()))
            },
            'documentation': {
                'health_check': f"{request.host_url}api/health",
                'simple_health': f"{request.host_url}api/health/simple"
            }
        })

    @app.route('/login')
    def login_page():
        """Where unauthenticated browsers are sent; the front-end posts to /api/auth/login"""
        target = request.args.get('redirect')
        return jsonify({
            'message': 'Inicia sesión para continuar',
            'login_endpoint': '/api/auth/login',
            'redirect': target if is_safe_redirect(target) else '/',
        })

    @app.errorhandler(BackofficeError)
    def handle_backoffice_error(error):
        if error.status_code >= 500:
            app.logger.error(f"{error.__class__.__name__} on {request.path}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        if request.path.startswith('/api/'):
            return jsonify({
                'error': 'Not Found',
                'message': f'The requested endpoint {request.path} does not exist',
                'code': 'NOT_FOUND',
                'available_endpoints': '/api/health for service status'
            }), 404
        return jsonify({'error': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': f'The method {request.method} is not allowed for endpoint {request.path}',
            'code': 'METHOD_NOT_ALLOWED',
            'allowed_methods': list(error.valid_methods) if getattr(error, 'valid_methods', None) else None
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        """500 handler with database rollback"""
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred. Please try again later.',
            'code': 'INTERNAL_ERROR'
        }), 500

    with app.app_context():
        try:
            db.create_all()
            app.logger.info("✓ Database tables created/verified successfully")
        except Exception as db_error:
            app.logger.error(f"❌ Database initialization error: {db_error}")
            # In production, log error but don't crash the app
            if config_name == 'production':
                app.logger.error("Production database error - app will start but may not function properly")
            else:
                raise

    total_routes = len(list(app.url_map.iter_rules()))
    api_routes = len([rule for rule in app.url_map.iter_rules() if rule.rule.startswith('/api/')])
    app.logger.info(f"✓ {app.config.get('SITE_NAME')} API created successfully")
    app.logger.info(f"✓ Environment: {config_name}")
    app.logger.info(f"✓ Total routes: {total_routes} ({api_routes} API routes)")

    return app


if __name__ == '__main__':
    # For local development - auto-detect environment
    local_app = create_app()
    port = int(os.environ.get('PORT', 5000))
    local_app.run(
        debug=local_app.config.get('DEBUG', False),
        host='0.0.0.0',
        port=port
    )
