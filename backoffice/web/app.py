# backoffice/web/app.py
"""
Flask application factory.
Wires settings, logging and services, mounts the backend blueprint and
installs the request hooks the request helpers depend on.
"""
import logging
from typing import Any, Dict, Optional

from flask import Flask, g, redirect, url_for

from backoffice.config.settings import configure_logging, get_settings
from backoffice.services.container import ServiceCreationError
from backoffice.services.factory import get_request_helpers, initialize_services
from backoffice.web.flash import FlashBag
from backoffice.web.routes.backend import backend_bp
from backoffice.web.utils.auth import login_manager
from backoffice.web.utils.request_helpers import shared_view_data

logger = logging.getLogger(__name__)


def create_app(environment: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Flask:
    settings = get_settings(environment)
    configure_logging(settings)

    try:
        container = initialize_services(settings)
        logger.info("Service container initialized successfully")
    except ServiceCreationError as e:
        logger.error(f"Failed to initialize services: {e}")
        raise

    app = Flask(__name__, template_folder="../templates")
    app.config.update({
        'SECRET_KEY': settings.web.secret_key,
        'DEBUG': settings.web.debug,
        'ENVIRONMENT': settings.environment,
        'TESTING': settings.environment == "test",
    })
    app.config.update(overrides or {})

    login_manager.init_app(app)

    flash_bag = FlashBag()

    @app.before_request
    def start_request():
        g.request_started_at = container.get("mockably").microtime()
        flash_bag.age()
        container.get("database_connection").flush_query_log()

    @app.context_processor
    def inject_view_data():
        data = shared_view_data()
        data["flash_message"] = flash_bag.get
        data["trans"] = container.get("translator").get
        return data

    @app.after_request
    def log_request_performance(response):
        if settings.cms.log_performance:
            get_request_helpers().log_performance()
        return response

    @app.errorhandler(404)
    def not_found(error):
        helpers = get_request_helpers()
        helpers.init_base_controller()
        return helpers.force_404()

    app.register_blueprint(backend_bp, url_prefix=settings.cms.backend_prefix or None)
    logger.info(f"Registered backend blueprint at '{settings.cms.backend_prefix or '/'}'")

    if settings.cms.backend_prefix:
        @app.route('/')
        def index():
            """Root route redirects to the backend dashboard."""
            return redirect(url_for('backend.dashboard'))

    logger.info(f"Flask app created for environment: {settings.environment}")
    return app


def create_wsgi_app() -> Flask:
    """Create WSGI application for production deployment."""
    return create_app('production')


def create_development_app() -> Flask:
    return create_app('development')


def create_testing_app() -> Flask:
    return create_app('testing')


if __name__ == '__main__':
    app = create_development_app()
    settings = get_settings('development')

    logger.info(f"Starting development server on {settings.web.host}:{settings.web.port}")
    app.run(
        debug=settings.web.debug,
        host=settings.web.host,
        port=settings.web.port
    )
