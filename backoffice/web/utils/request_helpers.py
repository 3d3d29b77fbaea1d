# backoffice/web/utils/request_helpers.py
"""
Request helpers shared by every backend controller.

Bundles the cross-cutting concerns a controller would otherwise repeat:
view data defaults, page titles, timing, performance logging, HTTPS
enforcement, 404 responses, flash-message redirects and mapping caught
exceptions to user-facing messages.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, Union
from urllib.parse import urlsplit, urlunsplit

from flask import (
    Response,
    current_app,
    g,
    make_response,
    redirect,
    render_template,
    request,
    url_for,
)

from backoffice.config.settings import Settings
from backoffice.database.connection import DatabaseConnection
from backoffice.services.mockably import Mockably
from backoffice.services.translator import Translator
from backoffice.web.flash import FlashBag

logger = logging.getLogger(__name__)

TIME_UNITS = ("ms", "s", "m")

NOT_FOUND_TEMPLATE = "errors/404.html"

_ROUTE_PLACEHOLDER = re.compile(r"<(?:[^<>:]+:)?([^<>]+)>")

ErrorCatalog = Mapping[Union[str, Type[BaseException]], str]


class InvalidTimeUnitError(ValueError):
    """Raised when a time difference is requested in an unknown unit."""
    pass


def share_view_data(**values: Any) -> None:
    """Make values available to every template rendered during this request."""
    g.setdefault("_view_data", {}).update(values)


def shared_view_data() -> Dict[str, Any]:
    return dict(g.get("_view_data", {}))


@dataclass
class HelperContext:
    """Collaborators a RequestHelpers instance works with."""

    settings: Settings
    lang: Translator
    mockably: Mockably
    log: logging.Logger
    db: DatabaseConnection
    flash: FlashBag = field(default_factory=FlashBag)
    started_at: float = 0.0


class RequestHelpers:
    """Facade over the request, session, routing, view and logging layers."""

    def __init__(self, context: HelperContext):
        self.context = context

    def init_base_controller(self) -> None:
        """Share the backend defaults every view relies on."""
        settings = self.context.settings
        self.context.lang.set_locale(settings.cms.backend_language)

        share_view_data(
            cms_name=settings.cms.name,
            backend_prefix=settings.cms.backend_prefix,
            locale=self.context.lang.locale,
            debug=current_app.debug,
            environment=settings.environment,
        )
        g._view_data.setdefault("title", settings.cms.name)

    def set_page_title(self, page_name: str) -> None:
        title = self.context.lang.get(f"titles.{page_name}", default=page_name)
        share_view_data(title=title)

    def get_current_time_difference(self, time_record: float, unit: str = "m") -> int:
        """
        Time elapsed since ``time_record`` (a past ``Mockably.microtime()`` reading).

        Args:
            time_record: Timestamp in seconds
            unit: 'ms', 's' or 'm' (milliseconds, seconds, minutes)

        Returns:
            Elapsed time in the given unit, truncated to an integer

        Raises:
            InvalidTimeUnitError: If ``unit`` is not one of TIME_UNITS
        """
        difference = self.context.mockably.microtime() - time_record

        if unit == "ms":
            return int(difference * 1000)
        if unit == "s":
            return int(difference)
        if unit == "m":
            return int(difference / 60)
        raise InvalidTimeUnitError(
            f"Unknown time unit '{unit}', expected one of: {', '.join(TIME_UNITS)}"
        )

    def log_performance(self) -> None:
        """Write request duration and resource usage to the performance log."""
        mockably = self.context.mockably
        started_at = g.get("request_started_at", self.context.started_at)

        message = self.context.lang.get(
            "performance.log",
            {
                "url": request.url,
                "time": self.get_current_time_difference(started_at, "ms"),
                "memory": f"{mockably.memory_usage_mb():.2f}",
                "modules": mockably.loaded_module_count(),
                "queries": self.context.db.query_count,
            },
            locale="en",
        )
        self.context.log.info(message)

    def force_ssl(self) -> Optional[Response]:
        """
        Redirect insecure requests to the same URL over https.

        Returns:
            A redirect response, or None when the request is already secure
        """
        if request.is_secure:
            return None

        secure_url = urlunsplit(urlsplit(request.url)._replace(scheme="https"))
        logger.debug(f"Redirecting insecure request to {secure_url}")
        return redirect(secure_url)

    def force_404(self) -> Response:
        self.set_page_title("404")
        return make_response(render_template(NOT_FOUND_TEMPLATE), 404)

    def redirect_with_flash_message(
        self,
        key: str,
        message: str,
        route: Optional[str] = None,
        parameters: Union[Sequence[Any], Mapping[str, Any], None] = None,
        status: int = 302,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Response:
        """
        Flash ``key -> message`` for the next request and redirect.

        Args:
            key: Flash message key
            message: Flash message value
            route: Endpoint name to redirect to; None redirects back to the referrer
            parameters: Route values, positional (in path order) or by name
            status: 3xx status code of the redirect
            headers: Extra response headers

        Returns:
            The redirect response (not yet sent)
        """
        if not 300 <= status < 400:
            raise ValueError(f"Redirect status must be 3xx, got {status}")

        self.context.flash.put(key, message)

        if route is None:
            target = request.referrer or "/"
        else:
            target = url_for(route, **self._route_values(route, parameters))

        response = redirect(target, code=status)
        for name, value in (headers or {}).items():
            response.headers[name] = value
        return response

    def handle_multiple_exceptions(self, exception: BaseException, error_messages: ErrorCatalog) -> str:
        """
        Pick the message for the most specific exception type in ``error_messages``.

        Keys may be exception classes, dotted ``module.QualName`` strings or
        bare class names. The exception's MRO is walked from its concrete type
        upward and the first level with an entry wins.

        Raises:
            The original exception when no entry matches.
        """
        for cls in type(exception).__mro__:
            for candidate in (cls, f"{cls.__module__}.{cls.__qualname__}", cls.__name__):
                if candidate in error_messages:
                    return error_messages[candidate]
        raise exception

    def _route_values(self, route: str, parameters) -> Dict[str, Any]:
        if not parameters:
            return {}
        if isinstance(parameters, Mapping):
            return dict(parameters)

        placeholders = self._route_placeholders(route, len(parameters))
        return dict(zip(placeholders, parameters))

    @staticmethod
    def _route_placeholders(route: str, count: int) -> List[str]:
        """
        Placeholder names, in path order, of the rule for ``route`` that fits
        ``count`` positional values. With several rules per endpoint the one
        with the fewest placeholders that still fits wins.
        """
        candidates = [
            _ROUTE_PLACEHOLDER.findall(rule.rule)
            for rule in current_app.url_map.iter_rules()
            if rule.endpoint == route
        ]
        fitting = [names for names in candidates if len(names) >= count]
        if not fitting:
            most = max((len(names) for names in candidates), default=0)
            raise ValueError(f"Route '{route}' takes at most {most} parameter(s), got {count}")
        return min(fitting, key=len)
