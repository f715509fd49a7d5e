"""
Bean definition registry and type index.

The registry maps bean names to definitions; the type index maps every type
in a bean's hierarchy to the names implementing it, so a lookup by an
interface or base class finds the concrete bean.
"""

import abc
import threading
import typing
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from ..core.exceptions import NoSuchBeanException
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# Bases every class may share; indexing them would make them useless as lookups.
_UNINDEXED_TYPES = frozenset({object, abc.ABC, typing.Generic, typing.Protocol})


@dataclass(frozen=True)
class BeanDefinition:
    """Metadata describing how to create one bean."""
    name: str
    bean_type: type
    singleton: bool = True

    @property
    def scope(self) -> str:
        return 'singleton' if self.singleton else 'prototype'

    def __repr__(self):
        return (
            f"BeanDefinition(name={self.name!r}, type={self.bean_type.__qualname__}, "
            f"scope={self.scope})"
        )


def indexable_types(bean_type: type) -> List[type]:
    """The implementation type followed by every ancestor worth indexing."""
    return [klass for klass in bean_type.__mro__ if klass not in _UNINDEXED_TYPES]


class TypeIndex:
    """Maps a type to the names of beans whose hierarchy contains it."""

    def __init__(self):
        self._index: Dict[type, List[str]] = {}
        self._lock = threading.Lock()

    def add(self, bean_type: type, bean_name: str):
        with self._lock:
            for klass in indexable_types(bean_type):
                names = self._index.setdefault(klass, [])
                if bean_name not in names:
                    names.append(bean_name)

    def remove(self, bean_type: type, bean_name: str):
        with self._lock:
            for klass in indexable_types(bean_type):
                names = self._index.get(klass)
                if names and bean_name in names:
                    names.remove(bean_name)
                    if not names:
                        del self._index[klass]

    def names_for_type(self, bean_type: type) -> List[str]:
        with self._lock:
            return list(self._index.get(bean_type, ()))

    def clear(self):
        with self._lock:
            self._index.clear()

    def __len__(self):
        return len(self._index)


class BeanDefinitionRegistry:
    """
    Holds one definition per bean name plus the type index over them.

    Reads never block; registration of a single definition is atomic.
    """

    def __init__(self):
        self._definitions: Dict[str, BeanDefinition] = {}
        self._type_index = TypeIndex()
        self._lock = threading.Lock()

    def register(self, definition: BeanDefinition) -> BeanDefinition:
        """
        Register a definition, replacing any previous one with the same name.

        Args:
            definition: Definition to register

        Returns:
            The registered definition
        """
        with self._lock:
            previous = self._definitions.get(definition.name)
            if previous is not None and previous != definition:
                logger.warning(
                    f"Overriding bean definition '{definition.name}': "
                    f"{previous.bean_type.__qualname__} -> {definition.bean_type.__qualname__}"
                )
                self._type_index.remove(previous.bean_type, previous.name)
            self._definitions[definition.name] = definition
            self._type_index.add(definition.bean_type, definition.name)

        logger.debug(
            f"Registered bean: {definition.name} -> "
            f"{definition.bean_type.__module__}.{definition.bean_type.__qualname__} "
            f"(singleton={definition.singleton})"
        )
        return definition

    def get(self, name: str) -> BeanDefinition:
        """Get a definition by name, raising NoSuchBeanException when absent."""
        definition = self._definitions.get(name)
        if definition is None:
            raise NoSuchBeanException(bean_name=name)
        return definition

    def find(self, name: str) -> Optional[BeanDefinition]:
        return self._definitions.get(name)

    def names_for_type(self, bean_type: type) -> List[str]:
        return self._type_index.names_for_type(bean_type)

    def contains(self, name: str) -> bool:
        return name in self._definitions

    def names(self) -> Set[str]:
        return set(self._definitions)

    def definitions(self) -> List[BeanDefinition]:
        """All definitions in registration order."""
        return list(self._definitions.values())

    def clear(self):
        with self._lock:
            self._definitions.clear()
            self._type_index.clear()

    def __len__(self):
        return len(self._definitions)
