"""
Lifecycle callbacks.

After injection a bean gets, in this fixed order:
    1. every `@post_construct` method, most-derived class first;
    2. `after_properties_set()` if it implements InitializingBean.

Its `@pre_destroy` methods are recorded at creation time. On teardown all
recorded hooks run in registration order, then `destroy()` of every finished
singleton implementing DisposableBean. Teardown failures are logged one by
one and never stop the rest of the sweep.
"""

import inspect
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Set, Tuple

from ..core.exceptions import BeanCreationException
from ..core.interfaces import is_disposable, is_initializing
from ..core.logging_config import get_logger
from .decorators import POST_CONSTRUCT_ATTR, PRE_DESTROY_ATTR, marked_methods

logger = get_logger(__name__)


@dataclass
class DestroyCallbacks:
    """Pre-destroy hooks recorded for one bean instance."""
    bean_name: str
    instance: Any
    method_names: List[str] = field(default_factory=list)


class LifecycleManager:
    """Runs initialization callbacks and keeps the pre-destroy registry."""

    def __init__(self):
        self._destroy_callbacks: List[DestroyCallbacks] = []
        # ids of singletons whose destroy() already ran; tier 1 keeps them alive
        self._disposed: Set[int] = set()
        self._lock = threading.Lock()

    def initialize(self, instance: Any, bean_name: str):
        """
        Run post-construction callbacks on a fully injected instance.

        Raises:
            BeanCreationException: a callback takes parameters or raised
        """
        for method_name in marked_methods(type(instance), POST_CONSTRUCT_ATTR):
            method = self._zero_arg_method(instance, method_name, bean_name, '@post_construct')
            try:
                method()
            except Exception as e:
                raise BeanCreationException(
                    bean_name,
                    f"Failed to invoke @post_construct method '{method_name}'",
                    cause=e
                ) from e
            logger.debug(f"Invoked @post_construct method: {type(instance).__qualname__}.{method_name}")

        if is_initializing(instance):
            try:
                instance.after_properties_set()
            except Exception as e:
                raise BeanCreationException(
                    bean_name,
                    "Failed to invoke after_properties_set()",
                    cause=e
                ) from e
            logger.debug(f"Invoked InitializingBean.after_properties_set() for: {bean_name}")

    def register_destroy_callbacks(self, instance: Any, bean_name: str):
        """
        Record the `@pre_destroy` methods of an instance for teardown.

        Raises:
            BeanCreationException: a hook takes parameters
        """
        names = marked_methods(type(instance), PRE_DESTROY_ATTR)
        for method_name in names:
            self._zero_arg_method(instance, method_name, bean_name, '@pre_destroy')
        if names:
            with self._lock:
                self._destroy_callbacks.append(DestroyCallbacks(bean_name, instance, names))

    def pending_callbacks(self) -> int:
        """Number of pre-destroy hooks waiting for teardown."""
        with self._lock:
            return sum(len(entry.method_names) for entry in self._destroy_callbacks)

    def destroy(self, singletons: Iterable[Tuple[str, Any]]) -> int:
        """
        Run every recorded pre-destroy hook, then every DisposableBean singleton.

        Each recorded hook runs once; `destroy()` of a singleton runs at most
        once until `clear()`, even across repeated teardowns.

        Args:
            singletons: (name, instance) pairs of the finished singletons

        Returns:
            Number of callbacks that raised
        """
        with self._lock:
            callbacks = list(self._destroy_callbacks)
            self._destroy_callbacks.clear()

        failures = 0
        invoked: Set[Tuple[int, str]] = set()

        for entry in callbacks:
            for method_name in entry.method_names:
                invoked.add((id(entry.instance), method_name))
                if not _invoke_quietly(
                    getattr(entry.instance, method_name),
                    f"@pre_destroy method {type(entry.instance).__qualname__}.{method_name}"
                ):
                    failures += 1

        for bean_name, instance in singletons:
            if not is_disposable(instance) or id(instance) in self._disposed:
                continue
            self._disposed.add(id(instance))
            if (id(instance), 'destroy') in invoked:
                continue
            if not _invoke_quietly(instance.destroy, f"DisposableBean.destroy() for: {bean_name}"):
                failures += 1

        return failures

    def clear(self):
        with self._lock:
            self._destroy_callbacks.clear()
            self._disposed.clear()

    @staticmethod
    def _zero_arg_method(instance: Any, method_name: str, bean_name: str, marker: str) -> Callable:
        method = getattr(instance, method_name)
        if inspect.signature(method).parameters:
            raise BeanCreationException(
                bean_name,
                f"{marker} method '{method_name}' must have no parameters"
            )
        return method


def _invoke_quietly(callback: Callable[[], Any], description: str) -> bool:
    try:
        callback()
    except Exception:
        logger.error(f"Failed to invoke {description}", exc_info=True)
        return False
    logger.debug(f"Invoked {description}")
    return True
