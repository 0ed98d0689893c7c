# app.py
"""
Flask Application Factory for the Lead Capture Service

Wires the form submission pipelines to their collaborators and exposes them
through two entry shapes:
- JSON API endpoints under /api
- Form actions under /actions

All collaborators (database store, SMTP notifier, rate limit storage) are
constructed here once and passed explicitly into the pipelines; tests inject
their own.
"""

import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS
from flask_wtf.csrf import CSRFProtect
from werkzeug.exceptions import HTTPException

from api.submissions import submissions_bp
from config.settings import get_config
from core.pipeline import build_pipelines
from core.rate_limiter import build_rate_limiters, create_rate_limit_storage
from core.template_engine import EmailTemplateEngine
from middleware.security import security_headers
from routes.actions import actions_bp
from services.notifier import SMTPNotifier, SMTPSettings
from services.storage import SQLAlchemySubmissionStore, create_database_engine

csrf = CSRFProtect()


def setup_logging(app: Flask) -> None:
    """
    Configure process logging

    Module loggers propagate to the root logger, so handlers live there.
    Repeated factory calls (tests) replace the handlers installed earlier.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, '_lead_capture', False):
            root.removeHandler(handler)

    console_formatter = logging.Formatter(
        fmt='%(name)s[%(process)d]: %(levelname)s %(message)s'
    )

    detailed_formatter = logging.Formatter(
        fmt='%(asctime)s %(name)-20s %(levelname)-8s %(funcName)-15s:%(lineno)-4d %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    root.setLevel(log_level)
    app.logger.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(log_level)
    console_handler._lead_capture = True
    root.addHandler(console_handler)

    # File handler for detailed debugging (development only)
    if app.debug and not app.testing:
        log_dir = Path(app.config.get('LOG_DIR', 'logs'))
        log_dir.mkdir(exist_ok=True, parents=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / 'lead-capture.log',
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(detailed_formatter)
        file_handler.setLevel(logging.DEBUG)
        file_handler._lead_capture = True
        root.addHandler(file_handler)

    # Suppress verbose third-party logs in production
    if not app.debug:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)
        logging.getLogger('aiosmtplib').setLevel(logging.WARNING)
        logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


def create_dependencies(app: Flask,
                        store=None,
                        notifier=None,
                        rate_limit_storage=None) -> Dict[str, Any]:
    """
    Build the long-lived collaborators shared by all requests

    Anything passed in is used as-is; the rest is built from app.config.
    """
    config = app.config

    if store is None:
        engine = create_database_engine(
            config['DATABASE_URL'],
            connect_timeout=config.get('DB_CONNECT_TIMEOUT', 10),
            echo=False
        )
        store = SQLAlchemySubmissionStore(engine)
        database_url = config['DATABASE_URL']
        app.logger.info(f"Database configured: {database_url.split('@')[-1]}")

    if config.get('AUTO_CREATE_TABLES') and hasattr(store, 'create_tables'):
        store.create_tables()
        app.logger.info("Database tables created")

    if notifier is None:
        notifier = SMTPNotifier(SMTPSettings.from_config(config))

    if rate_limit_storage is None:
        rate_limit_storage = create_rate_limit_storage(
            config.get('RATELIMIT_STORAGE_URL'),
            config.get('RATELIMIT_STORAGE_OPTIONS')
        )

    limiters = build_rate_limiters(rate_limit_storage, {
        'contact': config['RATELIMIT_CONTACT'],
        'careers': config['RATELIMIT_CAREERS'],
        'report': config['RATELIMIT_REPORT'],
    })

    templates = EmailTemplateEngine(config['APP_URL'], config.get('COMPANY_NAME', 'CIUS'))

    return {
        'store': store,
        'notifier': notifier,
        'rate_limit_storage': rate_limit_storage,
        'pipelines': build_pipelines(store, notifier, templates, limiters),
    }


def register_blueprints(app: Flask) -> None:
    """Register the JSON API and form action blueprints"""
    app.register_blueprint(submissions_bp, url_prefix='/api')
    app.register_blueprint(actions_bp, url_prefix='/actions')

    # JSON clients do not carry a CSRF token; form actions do
    csrf.exempt(submissions_bp)

    app.logger.info("Application blueprints registered")


def configure_error_handlers(app: Flask) -> None:
    """
    JSON error responses that never include exception details
    """
    @app.errorhandler(400)
    def bad_request(error):
        app.logger.warning(f"Bad request from {request.remote_addr}: {error}")
        return jsonify({
            'success': False,
            'message': 'Invalid request format or parameters'
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'message': 'The requested resource was not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'message': 'Method not allowed'
        }), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({
            'success': False,
            'message': 'Request payload too large'
        }), 413

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({
            'success': False,
            'message': 'Internal server error'
        }), 500

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Handle unexpected exceptions"""
        if isinstance(e, HTTPException):
            return e

        app.logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'message': 'Internal server error'
        }), 500


def configure_health_checks(app: Flask) -> None:
    """
    Health check endpoints for monitoring and load balancing
    """
    @app.route('/health')
    def health_check():
        """Basic health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'version': app.config.get('VERSION', '1.0.0')
        })

    @app.route('/health/detailed')
    def detailed_health_check():
        """Detailed health check with component status"""
        health_status = {
            'status': 'healthy',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'components': {}
        }

        store = app.store
        if hasattr(store, 'ping'):
            if store.ping():
                health_status['components']['database'] = 'healthy'
            else:
                health_status['components']['database'] = 'unhealthy'
                health_status['status'] = 'unhealthy'

        storage = app.rate_limit_storage
        if storage is None:
            health_status['components']['rate_limit'] = 'disabled'
        else:
            try:
                healthy = storage.check()
            except Exception as e:
                app.logger.error(f"Rate limit storage health check failed: {e}")
                healthy = False
            health_status['components']['rate_limit'] = 'healthy' if healthy else 'unhealthy'
            if not healthy:
                health_status['status'] = 'unhealthy'

        status_code = 200 if health_status['status'] == 'healthy' else 503
        return jsonify(health_status), status_code


def create_app(config_name: Optional[str] = None,
               store=None,
               notifier=None,
               rate_limit_storage=None,
               config_overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Flask application factory

    Args:
        config_name: Configuration environment ('development', 'testing', 'production')
        store: Persistence collaborator; built from DATABASE_URL when omitted
        notifier: Email collaborator; built from SMTP_* settings when omitted
        rate_limit_storage: `limits` storage; built from RATELIMIT_STORAGE_URL when omitted
        config_overrides: Extra config values applied after the config class

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    config_class = get_config(config_name)
    app.config.from_object(config_class)
    if config_overrides:
        app.config.update(config_overrides)

    setup_logging(app)
    app.logger.info(f"Starting lead capture service with {config_class.__name__}")

    dependencies = create_dependencies(app, store, notifier, rate_limit_storage)
    app.store = dependencies['store']
    app.notifier = dependencies['notifier']
    app.rate_limit_storage = dependencies['rate_limit_storage']
    app.pipelines = dependencies['pipelines']

    csrf.init_app(app)
    origins = app.config.get('CORS_ORIGINS', [])
    CORS(app,
         resources={
             r'/api/*': {'origins': origins},
             # Form actions carry the session cookie that the CSRF token is bound to
             r'/actions/*': {'origins': origins, 'supports_credentials': True},
         },
         allow_headers=['Content-Type', 'X-CSRFToken'])

    register_blueprints(app)
    configure_error_handlers(app)
    configure_health_checks(app)
    app.after_request(security_headers)

    app.logger.info("Flask application factory completed successfully")
    return app


if __name__ == '__main__':
    # Development server
    app = create_app('development')
    app.run(host='0.0.0.0', port=5000, debug=True)
