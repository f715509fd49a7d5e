"""
Capability interfaces using Python Protocols.

The container checks these structurally: any bean exposing the right method
satisfies the capability, without inheriting from the Protocol.

Example usage:
    class ConnectionPool:
        def after_properties_set(self) -> None:
            self.open()

        def destroy(self) -> None:
            self.close()

    # ConnectionPool satisfies both InitializingBean and DisposableBean
"""

from typing import Any, Protocol, TypeVar, runtime_checkable

T_co = TypeVar('T_co', covariant=True)


@runtime_checkable
class InitializingBean(Protocol):
    """
    Bean that wants a callback once all its dependencies are injected.

    `after_properties_set` runs after every `@post_construct` method of the
    bean. An exception raised here aborts creation of the bean.
    """

    def after_properties_set(self) -> None:
        """Finish initialization; may raise to signal a broken bean."""
        ...


@runtime_checkable
class DisposableBean(Protocol):
    """
    Singleton that wants a callback when the container is torn down.

    `destroy` runs after every recorded `@pre_destroy` hook. Exceptions are
    logged by the container and never stop the remaining teardown.
    """

    def destroy(self) -> None:
        """Release resources held by the bean."""
        ...


class ObjectFactory(Protocol[T_co]):
    """Zero-argument callable producing an object on demand."""

    def __call__(self) -> T_co:
        ...


def is_initializing(instance: Any) -> bool:
    """Check whether an instance implements the initializing capability."""
    return isinstance(instance, InitializingBean)


def is_disposable(instance: Any) -> bool:
    """Check whether an instance implements the disposable capability."""
    return isinstance(instance, DisposableBean)
