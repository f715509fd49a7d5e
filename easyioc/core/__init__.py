"""
Core module providing foundational components for the container.

Includes capability interfaces, exceptions, results, metrics and logging.
"""

from .interfaces import DisposableBean, InitializingBean
from .exceptions import (
    BeanException,
    BeanCreationException,
    CircularDependencyException,
    NoSuchBeanException,
    NoUniqueBeanException,
)
from .results import Result

__all__ = [
    'DisposableBean',
    'InitializingBean',
    'BeanException',
    'BeanCreationException',
    'CircularDependencyException',
    'NoSuchBeanException',
    'NoUniqueBeanException',
    'Result',
]
