"""Service container for dependency injection.

Provides centralized service registration and resolution.
Supports both singleton and transient lifetimes.
"""
import logging
import threading
from typing import Dict, Type, Any, Callable

from .interfaces import (
    AuthInterface,
    DatabaseInterface,
    DocumentRendererInterface,
    FileChooserInterface,
    ObjectStorageInterface,
    VideoFrameExtractorInterface,
)

log = logging.getLogger(__name__)


class ServiceContainer:
    """
    Dependency injection container for managing service instances.

    Each instance has its own registrations, so a test or a TUI session can
    build its own container without touching anyone else's.

    Supports:
    - Singleton services (one instance shared)
    - Transient services (new instance per request)
    - Factory functions for deferred initialization
    """

    def __init__(self):
        self._services: Dict[Type, Any] = {}
        self._factories: Dict[Type, Callable[[], Any]] = {}
        self._singletons: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register(
        self,
        interface: Type,
        implementation: Type,
        singleton: bool = True
    ) -> None:
        """
        Register a service implementation.

        Args:
            interface: The abstract interface type
            implementation: The concrete implementation class
            singleton: If True, reuse same instance (default)
        """
        if singleton:
            self._services[interface] = implementation
        else:
            self._factories[interface] = implementation
        log.debug(f"Registered {implementation.__name__} for {interface.__name__}")

    def register_instance(self, interface: Type, instance: Any) -> None:
        """Register a pre-created service instance."""
        self._singletons[interface] = instance
        log.debug(f"Registered instance for {interface.__name__}")

    def register_factory(
        self,
        interface: Type,
        factory: Callable[[], Any],
        singleton: bool = False
    ) -> None:
        """
        Register a factory function for creating services.

        Args:
            interface: The abstract interface type
            factory: Callable that creates the service
            singleton: If True, call the factory once and reuse the result
        """
        if singleton:
            self._services[interface] = factory
        else:
            self._factories[interface] = factory
        log.debug(f"Registered factory for {interface.__name__}")

    def resolve(self, interface: Type) -> Any:
        """
        Resolve a service by its interface.

        Raises:
            KeyError: If service not registered
        """
        # Fast path: check for pre-created singleton (no lock needed)
        if interface in self._singletons:
            return self._singletons[interface]

        with self._lock:
            if interface in self._singletons:
                return self._singletons[interface]

            if interface in self._services:
                impl = self._services[interface]
                self._singletons[interface] = impl()
                return self._singletons[interface]

        if interface in self._factories:
            return self._factories[interface]()

        raise KeyError(f"No service registered for {interface.__name__}")

    def get_database(self) -> DatabaseInterface:
        return self.resolve(DatabaseInterface)

    def get_storage(self) -> ObjectStorageInterface:
        return self.resolve(ObjectStorageInterface)

    def get_auth(self) -> AuthInterface:
        return self.resolve(AuthInterface)

    def get_document_renderer(self) -> DocumentRendererInterface:
        return self.resolve(DocumentRendererInterface)

    def get_frame_extractor(self) -> VideoFrameExtractorInterface:
        return self.resolve(VideoFrameExtractorInterface)

    def get_file_chooser(self) -> FileChooserInterface:
        return self.resolve(FileChooserInterface)

    def reset(self) -> None:
        """Clear all registrations (useful for testing)."""
        self._services.clear()
        self._factories.clear()
        self._singletons.clear()

    def is_registered(self, interface: Type) -> bool:
        """Check if a service is registered."""
        return (
            interface in self._services or
            interface in self._factories or
            interface in self._singletons
        )
