"""
Service layer: container, collaborators and their wiring.
"""

from .container import (
    ServiceContainer,
    ServiceCreationError,
    ServiceNotFoundError,
    get_container,
    reset_container,
)

__all__ = [
    "ServiceContainer",
    "ServiceCreationError",
    "ServiceNotFoundError",
    "get_container",
    "reset_container",
]
