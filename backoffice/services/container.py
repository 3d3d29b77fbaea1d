"""
Service Container holding the collaborators the request helpers are built from.
Supports singleton, factory and pre-built instance registrations.
"""
from typing import Dict, Any, Callable, TypeVar, Optional
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ServiceNotFoundError(Exception):
    """Raised when a requested service is not registered."""
    pass


class ServiceCreationError(Exception):
    """Raised when a registered factory fails to build its service."""
    pass


class ServiceContainer:
    """
    Registry of named services.

    - singleton: factory runs on first get(), result is reused
    - factory: factory runs on every get()
    - instance: object registered as-is
    """

    def __init__(self):
        self._instances: Dict[str, Any] = {}
        self._singleton_factories: Dict[str, Callable[[], Any]] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}

    def register_singleton(self, name: str, factory: Callable[[], T]) -> None:
        self._singleton_factories[name] = factory
        self._instances.pop(name, None)
        logger.debug(f"Registered singleton service: {name}")

    def register_factory(self, name: str, factory: Callable[[], T]) -> None:
        self._factories[name] = factory
        logger.debug(f"Registered factory service: {name}")

    def register_instance(self, name: str, instance: T) -> None:
        self._instances[name] = instance
        logger.debug(f"Registered service instance: {name}")

    def get(self, name: str) -> Any:
        """
        Resolve a service by name.

        Raises:
            ServiceNotFoundError: If nothing is registered under ``name``
            ServiceCreationError: If the registered factory raises
        """
        if name in self._instances:
            return self._instances[name]

        if name in self._singleton_factories:
            instance = self._build(name, self._singleton_factories[name], "singleton")
            self._instances[name] = instance
            return instance

        if name in self._factories:
            return self._build(name, self._factories[name], "factory")

        raise ServiceNotFoundError(f"Service '{name}' not found in container")

    def _build(self, name: str, factory: Callable[[], Any], kind: str) -> Any:
        try:
            logger.debug(f"Creating {kind} service: {name}")
            return factory()
        except Exception as e:
            logger.error(f"Failed to create {kind} service '{name}': {e}")
            raise ServiceCreationError(f"Failed to create {kind} service '{name}': {e}") from e

    def has_service(self, name: str) -> bool:
        return (name in self._instances or
                name in self._singleton_factories or
                name in self._factories)

    def clear_singletons(self) -> None:
        """Drop built singletons so the next get() rebuilds them."""
        for name in self._singleton_factories:
            self._instances.pop(name, None)
        logger.debug("Cleared all singleton instances")

    def list_services(self) -> Dict[str, str]:
        services = {}
        for name in self._instances:
            services[name] = "instance"
        for name in self._singleton_factories:
            services[name] = "singleton"
        for name in self._factories:
            services[name] = "factory"
        return services


_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the global service container instance."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    _container = None
