# config/settings.py
"""
Environment-driven configuration for the lead capture service
"""

import os
import secrets


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class BaseConfig:
    """Settings shared by every environment"""

    SECRET_KEY = os.environ.get('SECRET_KEY') or secrets.token_urlsafe(32)
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # Database
    DATABASE_URL = os.environ.get('DATABASE_URL', 'sqlite:///leads.db')
    DB_CONNECT_TIMEOUT = int(os.environ.get('DB_CONNECT_TIMEOUT', 10))
    AUTO_CREATE_TABLES = False

    # Rate limiting: unset storage URL disables the rate check entirely
    RATELIMIT_STORAGE_URL = os.environ.get('RATELIMIT_STORAGE_URL')
    RATELIMIT_STORAGE_OPTIONS = {}
    RATELIMIT_CONTACT = int(os.environ.get('RATELIMIT_CONTACT', 10))
    RATELIMIT_CAREERS = int(os.environ.get('RATELIMIT_CAREERS', 5))
    RATELIMIT_REPORT = int(os.environ.get('RATELIMIT_REPORT', 20))

    # Outbound mail
    SMTP_HOST = os.environ.get('SMTP_HOST', 'localhost')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', 587))
    SMTP_USERNAME = os.environ.get('SMTP_USERNAME')
    SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD')
    SMTP_TIMEOUT = float(os.environ.get('SMTP_TIMEOUT', 30))
    SMTP_VALIDATE_CERTS = _env_flag('SMTP_VALIDATE_CERTS', True)
    MAIL_FROM_NAME = os.environ.get('MAIL_FROM_NAME', 'CIUS')
    MAIL_FROM_ADDRESS = os.environ.get('MAIL_FROM_ADDRESS', 'noreply@cius.com')
    MAIL_REPLY_TO = os.environ.get('MAIL_REPLY_TO')

    # Used for links inside outgoing mail
    APP_URL = os.environ.get('APP_URL', 'http://localhost:3000')
    COMPANY_NAME = os.environ.get('COMPANY_NAME', 'CIUS')

    # CSRF protection for form actions
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get('CORS_ORIGINS', 'http://localhost:3000').split(',')
        if origin.strip()
    ]

    SECURITY_HEADERS = {
        'X-Content-Type-Options': 'nosniff',
        'X-Frame-Options': 'DENY',
        'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
        'Referrer-Policy': 'strict-origin-when-cross-origin',
        'Permissions-Policy': 'camera=(), microphone=(), geolocation=()'
    }

    MAX_CONTENT_LENGTH = 1024 * 1024  # 1MB, form payloads only


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')
    AUTO_CREATE_TABLES = True
    SESSION_COOKIE_SECURE = False


class TestingConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    DATABASE_URL = 'sqlite:///:memory:'
    AUTO_CREATE_TABLES = True
    RATELIMIT_STORAGE_URL = None
    WTF_CSRF_ENABLED = False
    APP_URL = 'https://www.example.com'
    LOG_LEVEL = 'WARNING'


class ProductionConfig(BaseConfig):
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    # 'None' when the forms are served from another origin than the API
    SESSION_COOKIE_SAMESITE = os.environ.get('SESSION_COOKIE_SAMESITE', 'Lax')
    RATELIMIT_STORAGE_OPTIONS = {
        'socket_timeout': float(os.environ.get('RATELIMIT_SOCKET_TIMEOUT', 2)),
        'socket_connect_timeout': float(os.environ.get('RATELIMIT_SOCKET_TIMEOUT', 2)),
    }


CONFIGS = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


def get_config(config_name: str = None):
    """Resolve a config class by name, falling back to FLASK_ENV then production"""
    config_name = config_name or os.environ.get('FLASK_ENV', 'production')
    return CONFIGS.get(config_name, ProductionConfig)
