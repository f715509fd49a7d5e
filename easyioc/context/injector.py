"""
Field injection.

Fills every `autowired()` field of a freshly instantiated bean, walking the
class and its ancestors. Resolution goes through the container's `get_bean`,
so a field pointing back at a bean that is still being created receives that
bean's early reference.
"""

from typing import Any, Callable

from ..core.exceptions import BeanCreationException, BeanException, NoSuchBeanException
from ..core.logging_config import get_logger
from .decorators import Autowired, autowired_fields
from .introspection import lookup_type, resolved_annotations, type_label, unwrap_optional

logger = get_logger(__name__)


class DependencyInjector:
    """Assigns resolved dependencies to the injection fields of an instance."""

    def __init__(self, resolver: Callable[[Any], Any]):
        self._resolver = resolver

    def inject(self, instance: Any, bean_name: str):
        """
        Inject every marked field of instance.

        Args:
            instance: Raw bean instance
            bean_name: Name of the bean being created (for diagnostics)

        Raises:
            BeanCreationException: a required field could not be resolved, or
                resolving any field failed for a reason other than a missing bean
        """
        for owner, field_name, marker in autowired_fields(type(instance)):
            field_type = self._field_type(owner, field_name, marker, bean_name)

            try:
                dependency = self._resolver(field_type)
            except NoSuchBeanException as e:
                if marker.required:
                    raise BeanCreationException(
                        bean_name,
                        f"Failed to inject required field '{field_name}': {e}",
                        cause=e
                    ) from e
                logger.debug(f"Skipped optional field injection: {owner.__qualname__}.{field_name}")
                continue
            except BeanException as e:
                raise BeanCreationException(
                    bean_name,
                    f"Failed to inject field '{field_name}'",
                    cause=e
                ) from e

            # object.__setattr__ also works for frozen dataclasses and custom __setattr__
            object.__setattr__(instance, field_name, dependency)
            logger.debug(f"Injected field '{field_name}' in bean '{bean_name}'")

    def _field_type(self, owner: type, field_name: str, marker: Autowired, bean_name: str) -> Any:
        try:
            field_type = marker.bean_type
            if field_type is None:
                field_type = resolved_annotations(owner).get(field_name)
            elif isinstance(field_type, str):
                field_type = lookup_type(field_type, owner)
        except Exception as e:
            raise BeanCreationException(
                bean_name,
                f"Cannot evaluate the type of field '{field_name}' declared on '{owner.__qualname__}'",
                cause=e
            ) from e

        if field_type is None:
            raise BeanCreationException(
                bean_name,
                f"Field '{field_name}' of '{owner.__qualname__}' has neither an annotation "
                f"nor an explicit type in autowired()"
            )

        field_type = unwrap_optional(field_type)
        logger.debug(f"Field '{field_name}' of {owner.__qualname__} resolves by type {type_label(field_type)}")
        return field_type
