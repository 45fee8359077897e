# cmdsense/core/registry.py
"""
Service registry for process-wide cmdsense components.

The registry supports lazy initialization through factories and
``get_or_create``, and is safe to use from several threads.
"""
from typing import Dict, Any, Type, Optional, Callable, TypeVar
import logging
import threading

# Type variable for generic methods
T = TypeVar('T')


class ServiceRegistry:
    """
    Thread-safe registry of named service instances.

    This registry implements:
    - Lazy initialization via get_or_create
    - Factory functions for complex initialization
    - Prefix clearing so tests can drop what they created
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> 'ServiceRegistry':
        """Get the singleton instance of the registry."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = ServiceRegistry()
        return cls._instance

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._service_types: Dict[str, Type] = {}
        self._logger = logging.getLogger(__name__)

    def register(self, name: str, service: Any) -> Any:
        """
        Register a service with the registry.

        Args:
            name: Unique identifier for the service
            service: The service instance to register

        Returns:
            The registered service (for method chaining)
        """
        with self._lock:
            self._services[name] = service
            self._service_types[name] = type(service)

            self._logger.debug(f"Registered service: {name} ({type(service).__name__})")
            return service

    def register_factory(self, name: str, factory: Callable[[], Any]) -> None:
        """Register a factory function for lazy initialization."""
        with self._lock:
            self._factories[name] = factory
            self._logger.debug(f"Registered factory for: {name}")

    def get(self, name: str) -> Optional[Any]:
        """
        Get a service from the registry.

        Args:
            name: The name of the service to retrieve

        Returns:
            The service instance or None if not found
        """
        if name in self._services:
            return self._services[name]

        if name in self._factories:
            with self._lock:
                # Check again in case another thread created it
                if name in self._services:
                    return self._services[name]

                self._logger.debug(f"Creating service via factory: {name}")
                service = self._factories[name]()
                return self.register(name, service)

        return None

    def get_or_create(
        self,
        name: str,
        cls: Type[T],
        *args: Any,
        factory: Optional[Callable[[], T]] = None,
        **kwargs: Any,
    ) -> T:
        """
        Get a service or create it if it doesn't exist.

        Args:
            name: Service name
            cls: Expected type; instantiated with ``*args, **kwargs`` when no factory is given
            factory: Optional callable producing the instance instead of ``cls``

        Returns:
            The existing or newly created service
        """
        service = self.get(name)
        if service is not None:
            if not isinstance(service, cls):
                self._logger.warning(
                    f"Type mismatch for service '{name}': expected {cls.__name__}, "
                    f"got {type(service).__name__}"
                )
            return service

        try:
            with self._lock:
                if name in self._services:
                    return self._services[name]

                self._logger.debug(f"Creating service: {name} ({cls.__name__})")
                service = factory() if factory is not None else cls(*args, **kwargs)
                return self.register(name, service)
        except Exception as e:
            self._logger.error(f"Error creating service '{name}': {e}", exc_info=True)
            raise

    def clear(self) -> None:
        """Clear all registered services."""
        with self._lock:
            self._logger.debug("Clearing service registry")
            self._services.clear()
            self._factories.clear()
            self._service_types.clear()

    def partial_clear(self, prefix: str) -> None:
        """Clear services with names starting with the given prefix."""
        with self._lock:
            to_remove = [name for name in self._services if name.startswith(prefix)]

            for name in to_remove:
                self._services.pop(name, None)
                self._factories.pop(name, None)
                self._service_types.pop(name, None)

            self._logger.debug(f"Cleared {len(to_remove)} services with prefix '{prefix}'")

    def list_services(self) -> Dict[str, Type]:
        """Names of all registered services and their types."""
        with self._lock:
            return self._service_types.copy()


# Create global registry instance
registry = ServiceRegistry.get_instance()
