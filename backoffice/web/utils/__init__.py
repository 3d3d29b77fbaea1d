# backoffice/web/utils/__init__.py
"""
Web utilities for Flask controllers.
"""

from .request_helpers import (
    HelperContext,
    InvalidTimeUnitError,
    RequestHelpers,
    share_view_data,
    shared_view_data,
)

__all__ = [
    "HelperContext",
    "InvalidTimeUnitError",
    "RequestHelpers",
    "share_view_data",
    "shared_view_data",
]
