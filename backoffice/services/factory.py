"""
Service factory: builds the collaborators the request helpers need and
registers them in the service container.
"""
import logging
from typing import Optional

from flask import g

from backoffice.config.settings import PERFORMANCE_LOGGER, Settings, get_settings
from backoffice.database.connection import DatabaseConnection
from backoffice.services.container import ServiceContainer, get_container
from backoffice.services.mockably import Mockably
from backoffice.services.translator import Translator

logger = logging.getLogger(__name__)


def create_database_connection(settings: Settings) -> DatabaseConnection:
    logger.info(f"Creating database connection for {settings.database.db_path}")
    return DatabaseConnection(settings.database.db_path)


def create_translator(settings: Settings) -> Translator:
    return Translator(
        locale=settings.cms.backend_language,
        fallback_locale=settings.cms.fallback_language,
    )


def create_request_helpers(container: Optional[ServiceContainer] = None):
    """Build a fresh RequestHelpers from the registered collaborators."""
    from backoffice.web.utils.request_helpers import HelperContext, RequestHelpers

    container = container or get_container()
    mockably = container.get("mockably")
    context = HelperContext(
        settings=container.get("settings"),
        lang=container.get("translator"),
        mockably=mockably,
        log=container.get("performance_logger"),
        db=container.get("database_connection"),
        started_at=mockably.microtime(),
    )
    return RequestHelpers(context)


def initialize_services(settings: Optional[Settings] = None) -> ServiceContainer:
    """Register every service the web layer resolves."""
    settings = settings or get_settings()
    container = get_container()

    container.register_instance("settings", settings)
    container.register_singleton("translator", lambda: create_translator(settings))
    container.register_singleton("mockably", Mockably)
    container.register_singleton("database_connection", lambda: create_database_connection(settings))
    container.register_instance("performance_logger", logging.getLogger(PERFORMANCE_LOGGER))
    container.register_factory("request_helpers", lambda: create_request_helpers(container))

    logger.info(f"Registered services: {sorted(container.list_services())}")
    return container


def get_request_helpers():
    """The RequestHelpers for the current request, built once per request."""
    if "request_helpers" not in g:
        g.request_helpers = get_container().get("request_helpers")
    return g.request_helpers
