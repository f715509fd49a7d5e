"""
Component scanner.

Imports every module below the given package roots and registers the
classes marked with `@component`. `pkgutil.walk_packages` drives the
traversal, so packages living in plain directories and packages imported
from zip archives (eggs, wheels, zipapps on `sys.path`) are both covered.
"""

import importlib
import inspect
import pkgutil
from types import ModuleType
from typing import Iterator, List, TYPE_CHECKING

from ..core.logging_config import get_logger
from ..core.results import Result
from .decorators import is_component

if TYPE_CHECKING:
    from .application_context import ApplicationContext

logger = get_logger(__name__)


class ComponentScanner:
    """
    Finds component classes and registers them with a context.

    A module that fails to import is logged and skipped; it never stops the
    rest of the scan.
    """

    def __init__(self, context: 'ApplicationContext'):
        self.context = context

    def scan(self, *base_packages: str) -> int:
        """
        Scan package roots for components.

        Args:
            *base_packages: Dotted names of packages (or single modules)

        Returns:
            Number of components registered by this scan
        """
        registered = 0
        for base_package in base_packages:
            root = load_module(base_package)
            if root.is_failure():
                logger.error(f"Failed to scan package: {base_package}: {root.get_error()}")
                continue
            for module in self._iter_modules(root.get_value()):
                registered += self._register_components(module)

        logger.info(f"Total registered beans: [{len(self.context.get_bean_names())}]")
        return registered

    def _iter_modules(self, root: ModuleType) -> Iterator[ModuleType]:
        yield root

        search_path = getattr(root, '__path__', None)
        if search_path is None:
            return

        for module_info in pkgutil.walk_packages(
            search_path,
            prefix=f"{root.__name__}.",
            onerror=_log_walk_error,
        ):
            loaded = load_module(module_info.name)
            if loaded.is_failure():
                logger.warning(f"Failed to load module: {module_info.name}: {loaded.get_error()}")
                continue
            yield loaded.get_value()

    def _register_components(self, module: ModuleType) -> int:
        registered = 0
        for cls in components_in(module):
            try:
                self.context.register_component(cls)
                registered += 1
            except Exception:
                logger.error(f"Error processing class: {module.__name__}.{cls.__qualname__}", exc_info=True)
        return registered


def components_in(module: ModuleType) -> List[type]:
    """Component classes defined in (not merely imported into) a module."""
    return [
        obj for _, obj in inspect.getmembers(module, inspect.isclass)
        if obj.__module__ == module.__name__ and is_component(obj)
    ]


def load_module(name: str) -> Result[ModuleType]:
    """Import a module, reporting failure as a Result instead of raising."""
    try:
        return Result.success_result(importlib.import_module(name))
    except Exception as e:
        return Result.failure_result(f"{type(e).__name__}: {e}", exception=e)


def _log_walk_error(name: str):
    logger.warning(f"Failed to load package: {name}")
