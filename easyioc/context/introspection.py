"""Annotation helpers shared by the instantiation strategy and the injector."""

import inspect
import sys
import typing
from types import UnionType
from typing import Any, Dict, Optional, Union


def resolved_annotations(obj: Any) -> Dict[str, Any]:
    """
    Own annotations of a class or function with string annotations evaluated.

    Called at injection time rather than at decoration time, so `peer: "ServiceB"`
    works for classes declared later in the same module.
    """
    return inspect.get_annotations(obj, eval_str=True)


def lookup_type(name: str, owner: type) -> Any:
    """
    Resolve a dotted type name given to `autowired("...")`.

    The first part is looked up in the module that declares owner (or is owner
    itself), the rest through attribute access.
    """
    head, *rest = name.split('.')
    if head == owner.__name__:
        target = owner
    else:
        module = sys.modules.get(owner.__module__)
        namespace = vars(module) if module is not None else {}
        if head not in namespace:
            raise NameError(f"name '{head}' is not defined in module '{owner.__module__}'")
        target = namespace[head]
    for part in rest:
        target = getattr(target, part)
    return target


def unwrap_optional(annotation: Any) -> Any:
    """`Optional[X]` (or `X | None`) -> `X`; anything else is returned unchanged."""
    origin = typing.get_origin(annotation)
    if origin is Union or origin is UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def type_label(annotation: Optional[Any]) -> str:
    if annotation is None:
        return 'None'
    module = getattr(annotation, '__module__', None)
    qualname = getattr(annotation, '__qualname__', None)
    if qualname is None:
        return repr(annotation)
    if module and module != 'builtins':
        return f"{module}.{qualname}"
    return qualname
