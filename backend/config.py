import os
from datetime import timedelta

from dotenv import load_dotenv

# Pick up a local .env before any value is read
load_dotenv()


def _normalise_database_url(database_url):
    # Ensure we're using postgresql:// not postgres://
    if database_url and database_url.startswith('postgres://'):
        return database_url.replace('postgres://', 'postgresql://', 1)
    return database_url


def _split_origins(value):
    return [origin.strip() for origin in value.split(',') if origin.strip()]


class Config:
    """Base configuration"""

    # Security Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Static back-office credentials, compared in plain text
    AUTH_USERNAME = os.environ.get('AUTH_USERNAME', 'admin')
    AUTH_PASSWORD = os.environ.get('AUTH_PASSWORD', 'admin123')

    SITE_NAME = os.environ.get('SITE_NAME', 'Obras')
    TIMEZONE = os.environ.get('TIMEZONE', 'Europe/Madrid')

    # Seconds a banner stays visible after a form submission
    SUCCESS_BANNER_SECONDS = int(os.environ.get('SUCCESS_BANNER_SECONDS', 3))
    SHORT_SUCCESS_BANNER_SECONDS = 2
    ERROR_BANNER_SECONDS = int(os.environ.get('ERROR_BANNER_SECONDS', 5))

    # Idle time between keep-alive comments on live list streams
    LIVE_KEEPALIVE_SECONDS = 15

    SQLALCHEMY_DATABASE_URI = None  # Will be set in __init__
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }

    # The session flag never expires on its own
    PERMANENT_SESSION_LIFETIME = timedelta(days=365)
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'None'
    SESSION_COOKIE_NAME = 'obras_auth'

    CORS_ORIGINS = _split_origins(os.environ.get(
        'CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000'
    ))
    CORS_SUPPORTS_CREDENTIALS = True

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    def __init__(self):
        """Initialize configuration with proper database URL"""
        self.SQLALCHEMY_DATABASE_URI = _normalise_database_url(
            os.environ.get('DATABASE_URL')
        ) or 'sqlite:///obras.db'


class DevelopmentConfig(Config):
    """Development configuration for local testing"""
    DEBUG = True

    def __init__(self):
        super().__init__()

        # Relaxed settings for development
        self.SESSION_COOKIE_SECURE = False
        self.SESSION_COOKIE_SAMESITE = 'Lax'

        dev_database_url = _normalise_database_url(os.environ.get('DEV_DATABASE_URL'))
        if dev_database_url:
            self.SQLALCHEMY_DATABASE_URI = dev_database_url


class ProductionConfig(Config):
    DEBUG = False

    def __init__(self):
        super().__init__()

        # Ensure SECRET_KEY is set for production
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable is required for production")
        self.SECRET_KEY = secret_key

        database_url = os.environ.get('DATABASE_URL')
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is required for production")
        self.SQLALCHEMY_DATABASE_URI = _normalise_database_url(database_url)

        self.SQLALCHEMY_ENGINE_OPTIONS = {
            'pool_recycle': 3600,
            'pool_pre_ping': True,
            'pool_size': 10,
            'max_overflow': 20,
            'pool_timeout': 30,
        }


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    AUTH_USERNAME = 'admin'
    AUTH_PASSWORD = 'admin123'

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        self.SQLALCHEMY_ENGINE_OPTIONS = {}
        self.SESSION_COOKIE_SECURE = False
        self.SESSION_COOKIE_SAMESITE = 'Lax'
        self.CORS_ORIGINS = ['http://localhost:3000']
        self.LIVE_KEEPALIVE_SECONDS = 1


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config_name():
    """Detect environment from FLASK_ENV, falling back to development"""
    flask_env = os.environ.get('FLASK_ENV', '').lower()
    if flask_env in ['production', 'testing', 'development']:
        return flask_env

    if os.environ.get('TESTING') or os.environ.get('CI'):
        return 'testing'

    return 'development'


def validate_config(config_name=None):
    """Check the environment variables a deployment needs"""
    config_name = config_name or get_config_name()

    if config_name == 'production':
        required_vars = ['SECRET_KEY', 'DATABASE_URL']
        missing_vars = [var for var in required_vars if not os.environ.get(var)]
        if missing_vars:
            return False, f"Missing required environment variables: {', '.join(missing_vars)}"

    if os.environ.get('AUTH_PASSWORD') is None and config_name == 'production':
        return False, "AUTH_PASSWORD is using the default value"

    return True, "Configuration is valid"


__all__ = [
    'config',
    'get_config_name',
    'validate_config',
]
