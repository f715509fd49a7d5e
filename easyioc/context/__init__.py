"""
Container module.

Markers for declaring components, and the ApplicationContext that scans,
creates, wires and tears them down.
"""

from .application_context import ApplicationContext
from .decorators import (
    PROTOTYPE,
    SINGLETON,
    Autowired,
    autowired,
    component,
    constructor,
    post_construct,
    pre_destroy,
    scope,
)
from .registry import BeanDefinition

__all__ = [
    'ApplicationContext',
    'BeanDefinition',
    'Autowired',
    'autowired',
    'component',
    'constructor',
    'post_construct',
    'pre_destroy',
    'scope',
    'SINGLETON',
    'PROTOTYPE',
]
