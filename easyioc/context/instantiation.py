"""
Instantiation strategy.

Chooses how to build the raw instance of a bean class and resolves the
chosen constructor's parameters through the container. A class's
constructors are its `__init__` plus every classmethod declared with
`@constructor` or `@autowired`.

Selection policy, first match wins:
    1. the constructor marked `@autowired`;
    2. the only constructor, when it takes parameters;
    3. a constructor callable without arguments (`__init__` preferred);
    4. otherwise a BeanCreationException.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from ..core.exceptions import BeanCreationException, BeanException, NoSuchBeanException
from ..core.logging_config import get_logger
from .decorators import is_autowired, is_constructor
from .introspection import resolved_annotations, type_label, unwrap_optional

logger = get_logger(__name__)

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass
class ConstructorCandidate:
    """One way of building an instance of a class."""
    name: str
    factory: Callable[..., Any]
    function: Any
    parameters: List[inspect.Parameter]
    autowired: bool = False

    @property
    def required_parameters(self) -> List[inspect.Parameter]:
        return [p for p in self.parameters if p.default is inspect.Parameter.empty]

    def describe(self, bean_type: type) -> str:
        if self.name == '__init__':
            return f"{bean_type.__qualname__}()"
        return f"{bean_type.__qualname__}.{self.name}()"


def find_constructors(bean_type: type) -> List[ConstructorCandidate]:
    """List the constructors of a class, `__init__` first."""
    init = bean_type.__init__
    if init is object.__init__:
        init_parameters: List[inspect.Parameter] = []
    else:
        init_parameters = list(inspect.signature(init).parameters.values())[1:]
    candidates = [
        ConstructorCandidate(
            name='__init__',
            factory=bean_type,
            function=init,
            parameters=[p for p in init_parameters if p.kind not in _VARIADIC],
            autowired=is_autowired(init),
        )
    ]

    seen = {'__init__'}
    for klass in bean_type.__mro__:
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name in seen or not isinstance(value, classmethod):
                continue
            seen.add(name)
            if not (is_constructor(value) or is_autowired(value)):
                continue
            bound = getattr(bean_type, name)
            candidates.append(
                ConstructorCandidate(
                    name=name,
                    factory=bound,
                    function=value.__func__,
                    parameters=[
                        p for p in inspect.signature(bound).parameters.values()
                        if p.kind not in _VARIADIC
                    ],
                    autowired=is_autowired(value),
                )
            )
    return candidates


class InstantiationStrategy:
    """
    Builds raw bean instances.

    Constructor parameters are resolved by type through `resolver`, which is
    the container's `get_bean`; this may recursively create other beans.
    """

    def __init__(self, resolver: Callable[[Any], Any]):
        self._resolver = resolver

    def instantiate(self, bean_type: type, bean_name: str) -> Any:
        """
        Create a raw instance of bean_type.

        Args:
            bean_type: Class to instantiate
            bean_name: Name of the bean being created (for diagnostics)

        Returns:
            New instance; dependencies are not injected yet
        """
        candidate = self.select_constructor(bean_type, bean_name)
        args, kwargs = self._resolve_arguments(candidate, bean_type, bean_name)
        try:
            return candidate.factory(*args, **kwargs)
        except Exception as e:
            raise BeanCreationException(
                bean_name,
                f"Instantiation via {candidate.describe(bean_type)} failed",
                cause=e
            ) from e

    def select_constructor(self, bean_type: type, bean_name: str) -> ConstructorCandidate:
        """Apply the selection policy to the constructors of bean_type."""
        candidates = find_constructors(bean_type)

        marked = [c for c in candidates if c.autowired]
        if len(marked) > 1:
            raise BeanCreationException(
                bean_name,
                f"Multiple constructors of '{bean_type.__qualname__}' are marked @autowired: "
                f"{[c.name for c in marked]}"
            )
        if marked:
            logger.debug(f"Found @autowired constructor for {bean_type.__qualname__}: {marked[0].name}")
            return marked[0]

        if len(candidates) == 1 and candidates[0].parameters:
            logger.debug(f"Using single constructor with parameters for {bean_type.__qualname__}")
            return candidates[0]

        for candidate in candidates:
            if not candidate.required_parameters:
                logger.debug(f"Using no-arg constructor {candidate.name} for {bean_type.__qualname__}")
                return _without_parameters(candidate)

        raise BeanCreationException(
            bean_name,
            f"No suitable constructor found for '{bean_type.__qualname__}'. Please provide either: "
            "1) a no-arg constructor, "
            "2) a single constructor with parameters, or "
            "3) a constructor marked with @autowired"
        )

    def _resolve_arguments(
        self,
        candidate: ConstructorCandidate,
        bean_type: type,
        bean_name: str
    ) -> Tuple[List[Any], Dict[str, Any]]:
        if not candidate.parameters:
            return [], {}

        try:
            hints = resolved_annotations(candidate.function)
        except Exception as e:
            raise BeanCreationException(
                bean_name,
                f"Cannot evaluate the parameter annotations of {candidate.describe(bean_type)}",
                cause=e
            ) from e

        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        for index, param in enumerate(candidate.parameters):
            has_default = param.default is not inspect.Parameter.empty
            annotation = unwrap_optional(hints.get(param.name))

            if annotation is None:
                if has_default:
                    _pass(param, param.default, args, kwargs)
                    continue
                raise BeanCreationException(
                    bean_name,
                    f"Constructor parameter [{index}] '{param.name}' of "
                    f"'{bean_type.__qualname__}' has no type annotation"
                )

            try:
                value = self._resolver(annotation)
            except NoSuchBeanException as e:
                if has_default:
                    logger.debug(
                        f"No bean for constructor parameter {index} of {bean_type.__qualname__}, "
                        f"using default"
                    )
                    _pass(param, param.default, args, kwargs)
                    continue
                raise _parameter_failure(bean_name, bean_type, index, annotation, e) from e
            except BeanException as e:
                raise _parameter_failure(bean_name, bean_type, index, annotation, e) from e

            logger.debug(
                f"Resolved constructor parameter {index} for {bean_type.__qualname__}: "
                f"{type_label(annotation)}"
            )
            _pass(param, value, args, kwargs)

        return args, kwargs


def _pass(param: inspect.Parameter, value: Any, args: List[Any], kwargs: Dict[str, Any]):
    if param.kind is inspect.Parameter.POSITIONAL_ONLY:
        args.append(value)
    else:
        kwargs[param.name] = value


def _without_parameters(candidate: ConstructorCandidate) -> ConstructorCandidate:
    # defaulted parameters are left to their defaults on the no-arg path
    return ConstructorCandidate(
        name=candidate.name,
        factory=candidate.factory,
        function=candidate.function,
        parameters=[],
        autowired=candidate.autowired,
    )


def _parameter_failure(
    bean_name: str,
    bean_type: type,
    index: int,
    annotation: Any,
    error: BeanException
) -> BeanCreationException:
    return BeanCreationException(
        bean_name,
        f"Failed to resolve constructor parameter [{index}] of type '{type_label(annotation)}' "
        f"for '{bean_type.__qualname__}': {error}",
        cause=error
    )
