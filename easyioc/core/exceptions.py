"""
Custom exception hierarchy for the container.

Provides specific exception types for lookup and creation failures.
"""

from typing import Any, List, Optional, Sequence


class BeanException(Exception):
    """Base exception for all container errors."""
    pass


class NoSuchBeanException(BeanException):
    """Raised when a lookup by name or type matches no registration."""

    def __init__(self, bean_name: Optional[str] = None, bean_type: Optional[type] = None):
        if bean_type is not None:
            message = f"No bean of type '{_type_name(bean_type)}' is registered"
        else:
            message = f"No bean named '{bean_name}' is registered"
        super().__init__(message)
        self.bean_name = bean_name
        self.bean_type = bean_type


class NoUniqueBeanException(BeanException):
    """Raised when a lookup by type matches more than one registration."""

    def __init__(self, bean_type: type, candidates: Sequence[str]):
        super().__init__(
            f"Multiple beans of type '{_type_name(bean_type)}' found: {list(candidates)}"
        )
        self.bean_type = bean_type
        self.candidates: List[str] = list(candidates)


class CircularDependencyException(BeanException):
    """Raised when a dependency cycle cannot be resolved with early references."""

    def __init__(self, bean_name: str, reason: str):
        super().__init__(f"Unresolvable circular reference involving bean '{bean_name}': {reason}")
        self.bean_name = bean_name


class BeanCreationException(BeanException):
    """
    Raised when instantiation, injection or a lifecycle hook fails.

    Always carries the bean name and, when available, the underlying cause.
    """

    def __init__(
        self,
        bean_name: str,
        detail: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        message = f"Error creating bean with name '{bean_name}'"
        if detail:
            message += f": {detail}"
        if cause is not None:
            message += f"; nested exception is {type(cause).__name__}: {cause}"
        super().__init__(message)
        self.bean_name = bean_name
        self.detail = detail
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def root_cause(self) -> Optional[BaseException]:
        """Follow nested creation failures down to the original error."""
        cause: Any = self.cause
        while isinstance(cause, BeanCreationException) and cause.cause is not None:
            cause = cause.cause
        return cause


def _type_name(bean_type: Any) -> str:
    module = getattr(bean_type, '__module__', None)
    qualname = getattr(bean_type, '__qualname__', repr(bean_type))
    if module and module != 'builtins':
        return f"{module}.{qualname}"
    return qualname
