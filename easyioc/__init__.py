"""
easy-ioc: a lightweight inversion-of-control container.

    from easyioc import ApplicationContext, autowired, component

    @component
    class ServiceA:
        b: "ServiceB" = autowired()

    @component
    class ServiceB:
        a: ServiceA = autowired()

    context = ApplicationContext()
    context.scan('myapp')
    assert context.get_bean(ServiceA).b.a is context.get_bean(ServiceA)
"""

from .context import (
    PROTOTYPE,
    SINGLETON,
    ApplicationContext,
    BeanDefinition,
    autowired,
    component,
    constructor,
    post_construct,
    pre_destroy,
    scope,
)
from .context import bean_factory
from .core import (
    BeanCreationException,
    BeanException,
    CircularDependencyException,
    DisposableBean,
    InitializingBean,
    NoSuchBeanException,
    NoUniqueBeanException,
)

__version__ = '1.0.0'

__all__ = [
    'ApplicationContext',
    'BeanDefinition',
    'bean_factory',
    'autowired',
    'component',
    'constructor',
    'post_construct',
    'pre_destroy',
    'scope',
    'SINGLETON',
    'PROTOTYPE',
    'DisposableBean',
    'InitializingBean',
    'BeanException',
    'BeanCreationException',
    'CircularDependencyException',
    'NoSuchBeanException',
    'NoUniqueBeanException',
]
