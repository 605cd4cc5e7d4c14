#!/usr/bin/env python3
"""
Dependency Injection Container

Wires the store, repositories, quota tracker, engine and services from
configuration so callers never instantiate them by hand. Supports
singleton and factory registrations.
"""

import logging
from typing import Any, Dict, Callable, TypeVar, Optional
from functools import wraps
import threading

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        """Initialize empty container."""
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as singleton (created once, reused).

        Args:
            service_name: Unique name for the service
            factory: Function that creates the service instance
        """
        with self._lock:
            factory._is_singleton = True
            self._factories[service_name] = factory
            # Remove any existing instance to force recreation
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a service as factory (new instance each time)."""
        with self._lock:
            self._factories[service_name] = factory

    def register_instance(self, service_name: str, instance: T) -> None:
        """Register an existing instance as singleton."""
        with self._lock:
            self._singletons[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        if service_name in self._singletons:
            return self._singletons[service_name]

        if service_name not in self._factories:
            raise KeyError(f"Service '{service_name}' not registered")

        # Re-entrant: singleton factories resolve their own dependencies
        with self._lock:
            factory = self._factories[service_name]

            if getattr(factory, '_is_singleton', False):
                if service_name not in self._singletons:
                    self._singletons[service_name] = factory()
                    logger.debug(f"Created singleton instance for '{service_name}'")
                return self._singletons[service_name]

            instance = factory()
            logger.debug(f"Created new instance for '{service_name}'")
            return instance

    def has(self, service_name: str) -> bool:
        """Check if service is registered."""
        return service_name in self._factories or service_name in self._singletons

    def clear(self) -> None:
        """Clear all registered services and instances."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()

    def reset_singleton(self, service_name: str) -> None:
        """Reset a singleton instance (will be recreated on next get())."""
        with self._lock:
            if self._singletons.pop(service_name, None) is not None:
                logger.debug(f"Reset singleton '{service_name}'")


def singleton(factory_func: Callable[[], T]) -> Callable[[], T]:
    """
    Decorator to mark a factory function as singleton.

    Usage:
        @singleton
        def create_backend():
            return FileBackend(config.data_path)
    """
    @wraps(factory_func)
    def wrapper():
        return factory_func()

    wrapper._is_singleton = True
    return wrapper


# Global container instance
_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = Container()
                _setup_default_services(_container)
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None


def _setup_default_services(container: Container) -> None:
    """Set up default service registrations with configuration injection."""

    @singleton
    def create_config():
        from .config import get_config
        return get_config()

    @singleton
    def create_backend():
        from .storage import FileBackend
        return FileBackend(container.get('config').data_path)

    @singleton
    def create_collection_store():
        from .storage import BoundedCollectionStore
        return BoundedCollectionStore(container.get('backend'))

    @singleton
    def create_quota_tracker():
        from .quota import QuotaTracker
        quota = container.get('config').quota
        return QuotaTracker(
            timezone_str=quota.timezone,
            free_analyses_per_week=quota.free_analyses_per_week,
            free_max_sides=quota.free_max_sides,
            pro_max_sides=quota.pro_max_sides
        )

    @singleton
    def create_analysis_repository():
        from .storage import AnalysisRepository
        return AnalysisRepository(
            container.get('collection_store'),
            cap=container.get('config').storage.analyses_cap
        )

    @singleton
    def create_template_repository():
        from .storage import TemplateRepository
        return TemplateRepository(
            container.get('collection_store'),
            cap=container.get('config').storage.templates_cap
        )

    @singleton
    def create_settings_store():
        from .storage import SettingsStore
        return SettingsStore(container.get('collection_store'), container.get('quota_tracker'))

    @singleton
    def create_draft_manager():
        from .drafts import DraftManager
        return DraftManager(
            container.get('collection_store'),
            ttl_hours=container.get('config').storage.draft_ttl_hours
        )

    @singleton
    def create_verdict_engine():
        from .analysis import VerdictEngine
        config = container.get('config')
        return VerdictEngine(config=config.verdict, simulated_delay_ms=config.app.simulated_delay_ms)

    @singleton
    def create_transfer_service():
        from .transfer import TransferService
        return TransferService(
            container.get('analysis_repository'),
            app_version=container.get('config').app.app_version
        )

    @singleton
    def create_insights_service():
        from .insights import InsightsService
        return InsightsService(
            container.get('collection_store'),
            container.get('analysis_repository'),
            container.get('quota_tracker')
        )

    def create_session():
        from .session import AppSession
        return AppSession.from_container(container)

    container.register_singleton('config', create_config)
    container.register_singleton('backend', create_backend)
    container.register_singleton('collection_store', create_collection_store)
    container.register_singleton('quota_tracker', create_quota_tracker)
    container.register_singleton('analysis_repository', create_analysis_repository)
    container.register_singleton('template_repository', create_template_repository)
    container.register_singleton('settings_store', create_settings_store)
    container.register_singleton('draft_manager', create_draft_manager)
    container.register_singleton('verdict_engine', create_verdict_engine)
    container.register_singleton('transfer_service', create_transfer_service)
    container.register_singleton('insights_service', create_insights_service)

    # Non-singletons
    container.register_factory('session', create_session)

    logger.debug("Default services registered in container")


def get_service(service_name: str) -> Any:
    """Get a service instance from the global container."""
    return get_container().get(service_name)
