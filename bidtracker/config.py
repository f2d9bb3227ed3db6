# bidtracker/config.py
import os
from datetime import timedelta
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(basedir, '.env'))


def _database_url(name='DATABASE_URL'):
    """Database URL from the environment, with Heroku/Azure style postgres:// fixed up."""
    database_url = os.environ.get(name)
    if database_url and database_url.startswith('postgres://'):
        database_url = database_url.replace('postgres://', 'postgresql://', 1)
    return database_url


def _split_origins(value):
    return [origin.strip() for origin in value.split(',') if origin.strip()]


class Config:
    """Base configuration"""

    # Security Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database - set in __init__ so environment changes are picked up per instance
    SQLALCHEMY_DATABASE_URI = None
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }

    # Session Configuration
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_NAME = 'bidtracker_auth'
    SESSION_PROTECTION = 'strong'

    CORS_ORIGINS = _split_origins(os.environ.get('CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'))
    CORS_SUPPORTS_CREDENTIALS = True

    # Uploads and bulk import
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 16 * 1024 * 1024))  # 16MB
    IMPORT_MAX_ROWS = int(os.environ.get('IMPORT_MAX_ROWS', 5000))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = _database_url() or 'sqlite:///' + os.path.join(basedir, 'instance', 'bidtracker.db')


class DevelopmentConfig(Config):
    """Development configuration for local testing"""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')

    def __init__(self):
        super().__init__()
        dev_database_url = _database_url('DEV_DATABASE_URL')
        if dev_database_url:
            self.SQLALCHEMY_DATABASE_URI = dev_database_url


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_SAMESITE = 'None'

    def __init__(self):
        super().__init__()

        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable is required for production")
        self.SECRET_KEY = secret_key

        database_url = _database_url()
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is required for production")
        self.SQLALCHEMY_DATABASE_URI = database_url

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
    # Test clients log users in by writing the session directly
    SESSION_PROTECTION = None

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        self.SQLALCHEMY_ENGINE_OPTIONS = {}
        self.CORS_ORIGINS = ['*']


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config_name():
    """Detect environment from FLASK_ENV, CI/TESTING flags or the presence of DATABASE_URL"""

    flask_env = os.environ.get('FLASK_ENV', '').lower()
    if flask_env in ['production', 'testing', 'development']:
        return flask_env

    if os.environ.get('TESTING') or os.environ.get('CI'):
        return 'testing'

    if os.environ.get('DATABASE_URL'):
        return 'production'

    return 'development'


__all__ = [
    'config',
    'get_config_name',
]
