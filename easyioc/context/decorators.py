"""
Declarative markers for container-managed classes.

    @component
    @scope(PROTOTYPE)
    class ReportBuilder:
        repository: Repository = autowired()
        cache: Cache = autowired(required=False)

        @post_construct
        def warm_up(self):
            ...

Markers are plain attributes set on the decorated class or function, so
they cost nothing until the container inspects them. Component and scope
markers live in the class's own namespace and are not inherited.
"""

from dataclasses import dataclass
from types import FunctionType
from typing import Any, Callable, List, Optional, Type, Union

SINGLETON = 'singleton'
PROTOTYPE = 'prototype'

COMPONENT_ATTR = '__ioc_component__'
SCOPE_ATTR = '__ioc_scope__'
AUTOWIRED_ATTR = '__ioc_autowired__'
CONSTRUCTOR_ATTR = '__ioc_constructor__'
POST_CONSTRUCT_ATTR = '__ioc_post_construct__'
PRE_DESTROY_ATTR = '__ioc_pre_destroy__'


@dataclass(frozen=True)
class ComponentInfo:
    """Metadata attached by `@component`."""
    name: str = ''


def component(value: Union[type, str, None] = None, *, name: str = ''):
    """
    Mark a class as a component to be discovered by the scanner.

    Usable bare (`@component`), with a positional name (`@component("repo")`)
    or with a keyword (`@component(name="repo")`). Without an explicit name
    the bean name is the class name with its first letter lowercased.
    """
    if isinstance(value, type):
        return _mark_component(value, name)

    explicit = value if value is not None else name

    def decorator(cls):
        return _mark_component(cls, explicit)

    return decorator


def _mark_component(cls: type, name: str) -> type:
    if not isinstance(cls, type):
        raise TypeError(f"@component can only decorate classes, got {cls!r}")
    setattr(cls, COMPONENT_ATTR, ComponentInfo(name=name or ''))
    return cls


def scope(value: str = SINGLETON):
    """Select the scope of a component: SINGLETON (default) or PROTOTYPE."""
    if value not in (SINGLETON, PROTOTYPE):
        raise ValueError(f"Unknown scope '{value}', expected '{SINGLETON}' or '{PROTOTYPE}'")

    def decorator(cls):
        if not isinstance(cls, type):
            raise TypeError(f"@scope can only decorate classes, got {cls!r}")
        setattr(cls, SCOPE_ATTR, value)
        return cls

    return decorator


class Autowired:
    """
    Field injection marker.

    Declared as a class attribute; the container replaces it per instance
    with the resolved dependency. Until then (or when an optional dependency
    is missing) the attribute reads as None.
    """

    def __init__(self, bean_type: Union[type, str, None] = None, required: bool = True):
        self.bean_type = bean_type
        self.required = required
        self.name: Optional[str] = None

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return None

    def __call__(self, func):
        # `@autowired()` / `@autowired(required=...)` used on a constructor
        return _mark_function(func, AUTOWIRED_ATTR)

    def __repr__(self):
        target = getattr(self.bean_type, '__name__', self.bean_type)
        return f"Autowired(name={self.name!r}, bean_type={target!r}, required={self.required})"


def autowired(target: Any = None, *, required: bool = True):
    """
    Injection marker for fields and constructors.

    Field:        `repo: Repository = autowired()`
                  `repo = autowired(Repository, required=False)`
    Constructor:  `@autowired` on `__init__` or on an alternate-constructor
                  classmethod selects it over every other constructor.
    """
    if _is_function_like(target):
        return _mark_function(target, AUTOWIRED_ATTR)
    return Autowired(target, required=required)


def constructor(func):
    """Declare a classmethod as an alternate constructor of its class."""
    if not isinstance(func, (classmethod, FunctionType)):
        raise TypeError("@constructor must decorate a classmethod")
    return _mark_function(func, CONSTRUCTOR_ATTR)


def post_construct(func: Callable) -> Callable:
    """Run this zero-argument method after the bean's dependencies are injected."""
    return _mark_function(func, POST_CONSTRUCT_ATTR)


def pre_destroy(func: Callable) -> Callable:
    """Run this zero-argument method when the container is destroyed."""
    return _mark_function(func, PRE_DESTROY_ATTR)


def _is_function_like(target: Any) -> bool:
    return isinstance(target, (FunctionType, classmethod, staticmethod))


def _mark_function(func, attr: str):
    underlying = func.__func__ if isinstance(func, (classmethod, staticmethod)) else func
    setattr(underlying, attr, True)
    return func


def _is_marked(value: Any, attr: str) -> bool:
    underlying = value.__func__ if isinstance(value, (classmethod, staticmethod)) else value
    return bool(getattr(underlying, attr, False))


def get_component_info(cls: type) -> Optional[ComponentInfo]:
    """Return the component marker declared on this exact class, if any."""
    return vars(cls).get(COMPONENT_ATTR)


def is_component(cls: Any) -> bool:
    return isinstance(cls, type) and get_component_info(cls) is not None


def get_scope(cls: type) -> str:
    return vars(cls).get(SCOPE_ATTR, SINGLETON)


def is_singleton_scope(cls: type) -> bool:
    return get_scope(cls) != PROTOTYPE


def default_bean_name(cls: type) -> str:
    """Decapitalized simple class name: `ServiceA` -> `serviceA`."""
    simple_name = cls.__name__
    return simple_name[:1].lower() + simple_name[1:]


def bean_name_for(cls: type) -> str:
    info = get_component_info(cls)
    if info is not None and info.name:
        return info.name
    return default_bean_name(cls)


def is_autowired(func: Any) -> bool:
    return _is_marked(func, AUTOWIRED_ATTR)


def is_constructor(func: Any) -> bool:
    return _is_marked(func, CONSTRUCTOR_ATTR)


def autowired_fields(cls: Type) -> List[tuple]:
    """
    List `(owner, field_name, marker)` for every injected field of a class.

    Walks the MRO from the most-derived class; a name redefined lower in the
    hierarchy hides the ancestor's declaration.
    """
    seen = set()
    fields = []
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(value, Autowired):
                fields.append((klass, name, value))
    return fields


def marked_methods(cls: Type, attr: str) -> List[str]:
    """
    Names of methods carrying a lifecycle marker, most-derived class first.

    Each name is listed once; the container calls it through normal attribute
    lookup, so an override in a subclass runs instead of the marked original.
    """
    seen = set()
    names = []
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name in seen or not isinstance(value, FunctionType):
                continue
            if getattr(value, attr, False):
                seen.add(name)
                names.append(name)
    return names
