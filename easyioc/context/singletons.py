"""
Three-tier singleton cache.

    tier 1  finished singletons        name -> fully initialized instance
    tier 2  early references           name -> instantiated, not yet populated
    tier 3  singleton factories        name -> callable producing the early reference

A bean whose creation is in progress publishes a tier 3 factory right after
its raw instantiation. When one of its dependencies asks for it again on the
same thread, the factory is consumed and the raw instance handed out through
tier 2, which is what lets two singletons inject each other.

Every multi-step mutation happens under one reentrant lock shared by all bean
names, so at most one thread is inside bean creation at any time. Reads that
hit tier 1 skip the lock. The one exception is a singleton published during
the creation cycle that is still open on another thread: it may point at
early references that are not wired yet, so readers of that name wait for
the cycle to complete. Singletons finished before the cycle began stay
lock-free.
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ..core.exceptions import BeanCreationException, CircularDependencyException
from ..core.interfaces import ObjectFactory
from ..core.logging_config import get_logger
from ..core.metrics import CIRCULAR_REFERENCES, MetricsCollector

logger = get_logger(__name__)


class SingletonRegistry:
    """Holds the singleton tiers and runs the singleton creation protocol."""

    def __init__(self, metrics: Optional[MetricsCollector] = None):
        self._singleton_objects: Dict[str, Any] = {}
        self._early_singleton_objects: Dict[str, Any] = {}
        self._singleton_factories: Dict[str, ObjectFactory] = {}
        # bean name -> id of the thread creating it
        self._currently_in_creation: Dict[str, int] = {}
        self._creating_thread: Optional[int] = None
        self._creation_depth = 0
        # names written to tier 1 since the open creation cycle began
        self._published_in_cycle: Set[str] = set()
        self._metrics = metrics
        self.lock = threading.RLock()

    def get_singleton(self, bean_name: str, singleton_factory: Callable[[], Any]) -> Any:
        """
        Return the singleton for bean_name, creating it with singleton_factory if needed.

        Args:
            bean_name: Name of the singleton
            singleton_factory: Creates the fully initialized bean; called at most
                once per successful creation

        Returns:
            The finished singleton, or its early reference when called again
            from inside its own creation
        """
        singleton = self._singleton_objects.get(bean_name)
        if singleton is not None and self._readable_without_lock(bean_name):
            return singleton

        if singleton is None and self.is_currently_in_creation(bean_name):
            return self._get_early_reference(bean_name)

        with self.lock:
            singleton = self._singleton_objects.get(bean_name)
            if singleton is not None:
                return singleton
            return self._create_singleton(bean_name, singleton_factory)

    def _get_early_reference(self, bean_name: str) -> Any:
        with self.lock:
            singleton = self._singleton_objects.get(bean_name)
            if singleton is not None:
                return singleton

            singleton = self._early_singleton_objects.get(bean_name)
            if singleton is None:
                factory = self._singleton_factories.get(bean_name)
                if factory is not None:
                    try:
                        singleton = factory()
                    except Exception as e:
                        raise BeanCreationException(bean_name, "Failed to get early reference", cause=e) from e
                    self._early_singleton_objects[bean_name] = singleton
                    self._singleton_factories.pop(bean_name, None)
                    logger.debug(f"Resolved circular dependency for bean: {bean_name}")

        if singleton is None:
            cause = CircularDependencyException(
                bean_name,
                "no early reference is available, a constructor-injected cycle cannot be resolved"
            )
            raise BeanCreationException(
                bean_name,
                "Requested bean is currently in creation",
                cause=cause
            ) from cause

        if self._metrics is not None:
            self._metrics.increment(CIRCULAR_REFERENCES, tags={'bean': bean_name})
        return singleton

    def _create_singleton(self, bean_name: str, singleton_factory: Callable[[], Any]) -> Any:
        self._before_creation(bean_name)
        try:
            singleton = singleton_factory()
            self._early_singleton_objects.pop(bean_name, None)
            self._singleton_factories.pop(bean_name, None)
            self._publish(bean_name, singleton)
            logger.debug(f"Created and cached singleton bean: {bean_name}")
            return singleton
        except Exception as e:
            self._singleton_objects.pop(bean_name, None)
            self._early_singleton_objects.pop(bean_name, None)
            self._singleton_factories.pop(bean_name, None)
            if isinstance(e, BeanCreationException) and e.bean_name == bean_name:
                raise
            raise BeanCreationException(bean_name, cause=e) from e
        finally:
            self._after_creation(bean_name)

    def _before_creation(self, bean_name: str):
        ident = threading.get_ident()
        self._currently_in_creation[bean_name] = ident
        if self._creation_depth == 0:
            self._creating_thread = ident
        self._creation_depth += 1

    def _after_creation(self, bean_name: str):
        self._currently_in_creation.pop(bean_name, None)
        self._creation_depth -= 1
        if self._creation_depth == 0:
            self._creating_thread = None
            self._published_in_cycle.clear()

    def _publish(self, bean_name: str, singleton: Any):
        # the name goes into the cycle set before tier 1 so lock-free readers never miss it
        if self._creation_depth > 0:
            self._published_in_cycle.add(bean_name)
        self._singleton_objects[bean_name] = singleton

    def _readable_without_lock(self, bean_name: str) -> bool:
        if bean_name not in self._published_in_cycle:
            return True
        return self._creating_thread == threading.get_ident()

    def is_currently_in_creation(self, bean_name: str) -> bool:
        """True when the calling thread is creating bean_name right now."""
        return self._currently_in_creation.get(bean_name) == threading.get_ident()

    def add_singleton_factory(self, bean_name: str, factory: ObjectFactory):
        """Publish the tier 3 factory for a bean that was just instantiated."""
        with self.lock:
            if bean_name not in self._singleton_objects:
                self._singleton_factories[bean_name] = factory
                self._early_singleton_objects.pop(bean_name, None)
                logger.debug(f"Added bean factory to third-level cache for: {bean_name}")

    def add_singleton(self, bean_name: str, singleton: Any):
        """Put a finished object straight into tier 1."""
        with self.lock:
            self._early_singleton_objects.pop(bean_name, None)
            self._singleton_factories.pop(bean_name, None)
            self._publish(bean_name, singleton)

    def contains_singleton(self, bean_name: str) -> bool:
        return bean_name in self._singleton_objects

    def singleton_items(self) -> List[Tuple[str, Any]]:
        """Snapshot of tier 1 in creation order."""
        with self.lock:
            return list(self._singleton_objects.items())

    def clear(self):
        with self.lock:
            self._singleton_objects.clear()
            self._early_singleton_objects.clear()
            self._singleton_factories.clear()
            self._currently_in_creation.clear()
            self._creating_thread = None
            self._creation_depth = 0
            self._published_in_cycle.clear()

    def __len__(self):
        return len(self._singleton_objects)
