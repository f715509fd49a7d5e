"""
Process-wide container handle.

    bean_factory.init('myapp')          # once, at startup
    service = bean_factory.get_bean(OrderService)
    bean_factory.destroy()              # once, at shutdown
"""

import threading
from typing import Any, Optional, Type, TypeVar, Union

from ..config.settings import get_settings
from ..core.logging_config import get_logger
from .application_context import ApplicationContext

logger = get_logger(__name__)

T = TypeVar('T')

# Global context instance (can be replaced for testing)
_context: Optional[ApplicationContext] = None
_lock = threading.Lock()


def init(*base_packages: str) -> ApplicationContext:
    """
    Create and scan the global context.

    Calling it again returns the existing context untouched.

    Args:
        *base_packages: Package roots to scan; IOC_BASE_PACKAGES when omitted

    Returns:
        The global context
    """
    global _context
    with _lock:
        if _context is not None:
            logger.info("ApplicationContext already initialized")
            return _context

        settings = get_settings()
        packages = base_packages or tuple(settings.base_packages)
        if not packages:
            logger.warning("No base packages given and IOC_BASE_PACKAGES is empty; nothing to scan")

        context = ApplicationContext(settings=settings)
        context.scan(*packages)
        _context = context
        logger.info(f"ApplicationContext initialized with packages: {list(packages)}")
        return _context


def get_context() -> ApplicationContext:
    """Get the global context, raising RuntimeError before `init()`."""
    if _context is None:
        raise RuntimeError("ApplicationContext is not initialized, call bean_factory.init() first")
    return _context


def get_bean(name_or_type: Union[str, Type[T]]) -> Any:
    """Get a bean from the global context by name or type."""
    return get_context().get_bean(name_or_type)


def destroy():
    """Tear down the global context and drop it; no-op when not initialized."""
    global _context
    with _lock:
        context, _context = _context, None
    if context is not None:
        context.destroy()


def set_context(context: Optional[ApplicationContext]):
    """Set the global context instance (useful for testing)."""
    global _context
    with _lock:
        _context = context
