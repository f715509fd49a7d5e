"""
Application context.

The facade applications talk to. It owns the definition registry, the
singleton tiers and the helpers that instantiate, inject and initialize
beans, and it drives the creation cycle:

    instantiate -> publish early reference (singletons) -> inject fields
    -> @post_construct / after_properties_set -> record @pre_destroy hooks

Singletons go through the three-tier cache; prototypes are created fresh on
every lookup and never cached.
"""

import threading
from typing import Any, Dict, List, Optional, Set, Type, TypeVar, Union, overload

from ..config.settings import Settings, get_settings
from ..core.exceptions import (
    BeanCreationException,
    CircularDependencyException,
    NoSuchBeanException,
    NoUniqueBeanException,
)
from ..core.logging_config import get_logger
from ..core.metrics import BEAN_CREATION, BEANS_CREATED, MetricsCollector, Timer
from .decorators import bean_name_for, is_singleton_scope
from .injector import DependencyInjector
from .instantiation import InstantiationStrategy
from .lifecycle import LifecycleManager
from .registry import BeanDefinition, BeanDefinitionRegistry
from .scanner import ComponentScanner
from .singletons import SingletonRegistry

logger = get_logger(__name__)

T = TypeVar('T')


class ApplicationContext:
    """
    Lightweight IoC container.

    Example:
        with ApplicationContext() as context:
            context.scan('myapp.services')
            service = context.get_bean(OrderService)
    """

    def __init__(self, settings: Optional[Settings] = None, metrics: Optional[MetricsCollector] = None):
        """
        Initialize an empty context.

        Args:
            settings: Settings object (uses the global settings if None)
            metrics: Metrics collector (a new one honoring settings if None)
        """
        self.settings = settings or get_settings()
        self.metrics = metrics or MetricsCollector(enabled=self.settings.enable_metrics)

        self._registry = BeanDefinitionRegistry()
        self._singletons = SingletonRegistry(self.metrics)
        self._instantiation = InstantiationStrategy(self.get_bean)
        self._injector = DependencyInjector(self.get_bean)
        self._lifecycle = LifecycleManager()
        self._scanner = ComponentScanner(self)
        self._prototype_state = threading.local()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def scan(self, *base_packages: str) -> int:
        """
        Discover and register every component below the given packages.

        Returns:
            Number of components registered
        """
        logger.info(f"Scanning packages: {list(base_packages)}")
        return self._scanner.scan(*base_packages)

    def register_component(
        self,
        bean_type: type,
        name: Optional[str] = None,
        singleton: Optional[bool] = None
    ) -> BeanDefinition:
        """
        Register a class as a bean definition.

        Markers on the class supply the defaults: the `@component` name (or
        the decapitalized class name) and the `@scope`.

        Args:
            bean_type: Class to register; it does not need `@component`
            name: Bean name override
            singleton: Scope override

        Returns:
            The registered definition
        """
        if not isinstance(bean_type, type):
            raise TypeError(f"Bean type must be a class, got {bean_type!r}")
        definition = BeanDefinition(
            name=name or bean_name_for(bean_type),
            bean_type=bean_type,
            singleton=is_singleton_scope(bean_type) if singleton is None else singleton,
        )
        return self._registry.register(definition)

    def register_bean(self, name: str, instance: Any):
        """
        Register an already built object as a finished singleton.

        The object is indexed by its type like any scanned bean and is part of
        the DisposableBean sweep on `destroy()`.
        """
        if instance is None:
            raise ValueError(f"Bean instance for '{name}' must not be None")
        with self._singletons.lock:
            self._registry.register(BeanDefinition(name=name, bean_type=type(instance), singleton=True))
            self._singletons.add_singleton(name, instance)
        logger.debug(f"Registered bean instance: {name} -> {type(instance).__qualname__}")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @overload
    def get_bean(self, name_or_type: str) -> Any: ...

    @overload
    def get_bean(self, name_or_type: Type[T]) -> T: ...

    def get_bean(self, name_or_type: Union[str, type]) -> Any:
        """
        Get a bean by name or by type.

        Lookup by type matches the implementation class and every base class
        or interface it inherits from.

        Raises:
            NoSuchBeanException: nothing is registered under the name or type
            NoUniqueBeanException: more than one bean matches the type
            BeanCreationException: the bean (or one of its dependencies) could
                not be created
        """
        if isinstance(name_or_type, str):
            return self._get_bean(self._registry.get(name_or_type))

        names = self._registry.names_for_type(name_or_type)
        if not names:
            raise NoSuchBeanException(bean_type=name_or_type)
        if len(names) > 1:
            raise NoUniqueBeanException(name_or_type, names)
        return self._get_bean(self._registry.get(names[0]))

    def get_beans_of_type(self, bean_type: Type[T]) -> Dict[str, T]:
        """Every bean matching bean_type, keyed by name; never ambiguous."""
        return {
            name: self._get_bean(self._registry.get(name))
            for name in self._registry.names_for_type(bean_type)
        }

    def contains_bean(self, name: str) -> bool:
        return self._registry.contains(name)

    def is_singleton(self, name: str) -> bool:
        """True when name is registered with singleton scope; False for unknown names."""
        definition = self._registry.find(name)
        return definition is not None and definition.singleton

    def contains_singleton(self, name: str) -> bool:
        """True once the singleton named name has finished creation and is cached."""
        return self._singletons.contains_singleton(name)

    def get_bean_names(self) -> Set[str]:
        return self._registry.names()

    def get_bean_definition(self, name: str) -> BeanDefinition:
        return self._registry.get(name)

    def get_bean_definitions(self) -> List[BeanDefinition]:
        """All definitions in registration order."""
        return self._registry.definitions()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _get_bean(self, definition: BeanDefinition) -> Any:
        if definition.singleton:
            return self._singletons.get_singleton(
                definition.name,
                lambda: self._create_bean(definition)
            )
        return self._get_prototype(definition)

    def _get_prototype(self, definition: BeanDefinition) -> Any:
        in_creation = self._prototypes_in_creation()
        if definition.name in in_creation:
            cause = CircularDependencyException(
                definition.name,
                "prototype beans are never exposed early"
            )
            raise BeanCreationException(
                definition.name,
                "Requested prototype bean is currently in creation",
                cause=cause
            ) from cause

        in_creation.add(definition.name)
        try:
            return self._create_bean(definition)
        finally:
            in_creation.discard(definition.name)

    def _prototypes_in_creation(self) -> Set[str]:
        names = getattr(self._prototype_state, 'names', None)
        if names is None:
            names = self._prototype_state.names = set()
        return names

    def _create_bean(self, definition: BeanDefinition) -> Any:
        bean_name = definition.name
        logger.debug(f"Creating bean: {bean_name} ({definition.scope})")

        try:
            with Timer(BEAN_CREATION, self.metrics, tags={'bean': bean_name}):
                instance = self._instantiation.instantiate(definition.bean_type, bean_name)

                if definition.singleton:
                    self._singletons.add_singleton_factory(bean_name, lambda: instance)

                self._injector.inject(instance, bean_name)
                self._lifecycle.initialize(instance, bean_name)
                self._lifecycle.register_destroy_callbacks(instance, bean_name)
        except BeanCreationException as e:
            self.metrics.record_error(bean_name, type(e.root_cause() or e).__name__)
            raise
        except Exception as e:
            self.metrics.record_error(bean_name, type(e).__name__)
            raise BeanCreationException(bean_name, cause=e) from e

        self.metrics.increment(BEANS_CREATED, tags={'bean': bean_name})
        return instance

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def destroy(self):
        """
        Run every recorded pre-destroy hook, then destroy() of each
        DisposableBean singleton. Failures are logged and never interrupt
        the remaining teardown.
        """
        failures = self._lifecycle.destroy(self._singletons.singleton_items())
        if failures:
            logger.warning(f"{failures} destroy callback(s) failed")
        logger.info("All beans destroyed")

    def clear(self):
        """Tear down, then forget every definition and cached instance."""
        self.destroy()
        with self._singletons.lock:
            self._registry.clear()
            self._singletons.clear()
            self._lifecycle.clear()
        self._prototypes_in_creation().clear()
        logger.info("ApplicationContext cleared")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.destroy()
        return False

    def __len__(self):
        return len(self._registry)

    def __contains__(self, name: str):
        return self.contains_bean(name)
