"""
Tests for the application context.

Tests bean lookup, scopes, circular dependency resolution, creation
failures and rollback, and the metrics the context records.
"""

import abc
from typing import Optional

import pytest
from easyioc.context.application_context import ApplicationContext
from easyioc.context.decorators import PROTOTYPE, autowired, component, post_construct, scope
from easyioc.core.exceptions import (
    BeanCreationException,
    CircularDependencyException,
    NoSuchBeanException,
    NoUniqueBeanException,
)
from easyioc.core.metrics import BEAN_CREATION, BEANS_CREATED, CIRCULAR_REFERENCES


@component
class ServiceA:
    b: "ServiceB" = autowired()


@component
class ServiceB:
    a: ServiceA = autowired()


class Notifier(abc.ABC):
    @abc.abstractmethod
    def send(self, message):
        ...


@component
class EmailNotifier(Notifier):
    def send(self, message):
        return f"email: {message}"


@component
class SmsNotifier(Notifier):
    def send(self, message):
        return f"sms: {message}"


@component
@scope(PROTOTYPE)
class RequestState:
    pass


@component
class Clock:
    pass


@component
class Scheduler:
    def __init__(self, clock: Clock):
        self.clock = clock


@component
class Auditor:
    missing: "Unregistered" = autowired(required=False)
    clock: Optional[Clock] = autowired()


class Unregistered:
    pass


@component
class NeedsMissing:
    dependency: Unregistered = autowired()


@component
class CtorCycleA:
    def __init__(self, peer: "CtorCycleB"):
        self.peer = peer


@component
class CtorCycleB:
    def __init__(self, peer: CtorCycleA):
        self.peer = peer


@component
@scope(PROTOTYPE)
class PrototypeCycleA:
    peer: "PrototypeCycleB" = autowired()


@component
@scope(PROTOTYPE)
class PrototypeCycleB:
    peer: PrototypeCycleA = autowired()


@component
class SingletonWithPrototype:
    state: RequestState = autowired()


@component
class FailingDependency:
    def __init__(self):
        raise RuntimeError("database unavailable")


@component
class DependsOnFailing:
    dependency: FailingDependency = autowired()


@component
class Broken:
    attempts = 0

    @post_construct
    def connect(self):
        type(self).attempts += 1
        if type(self).attempts == 1:
            raise ConnectionError("first attempt fails")


@component
class Reporting:
    notifier: Notifier = autowired()


@component
class NamedTypes:
    clock = autowired('Clock')
    scheduler = autowired('Scheduler', required=False)


@component
class UnknownNamedType:
    clock = autowired('clocks.Clock')


class TestLookup:
    """Test lookups by name and by type."""

    def test_get_bean_by_name_and_type(self, context):
        """Test both lookup flavors return the same singleton."""
        context.register_component(Clock)

        assert context.get_bean('clock') is context.get_bean(Clock)

    def test_lookup_by_interface(self, context):
        """Test a bean is found by its base class."""
        context.register_component(EmailNotifier)

        assert context.get_bean(Notifier).send('hi') == 'email: hi'

    def test_ambiguous_type_names_every_candidate(self, context):
        """Test ambiguity error lists both beans."""
        context.register_component(EmailNotifier)
        context.register_component(SmsNotifier)

        with pytest.raises(NoUniqueBeanException) as exc_info:
            context.get_bean(Notifier)

        assert 'emailNotifier' in str(exc_info.value)
        assert 'smsNotifier' in str(exc_info.value)
        assert set(exc_info.value.candidates) == {'emailNotifier', 'smsNotifier'}

    def test_get_beans_of_type(self, context):
        """Test every match is returned without an ambiguity error."""
        context.register_component(EmailNotifier)
        context.register_component(SmsNotifier)

        beans = context.get_beans_of_type(Notifier)

        assert set(beans) == {'emailNotifier', 'smsNotifier'}
        assert isinstance(beans['smsNotifier'], SmsNotifier)
        assert context.get_beans_of_type(Unregistered) == {}

    def test_missing_bean(self, context):
        """Test lookups of unknown names and types."""
        with pytest.raises(NoSuchBeanException):
            context.get_bean('nothing')
        with pytest.raises(NoSuchBeanException):
            context.get_bean(Unregistered)

    def test_definition_queries(self, context):
        """Test contains_bean, is_singleton and get_bean_definition."""
        context.register_component(RequestState)
        context.register_component(Clock, name='systemClock')

        assert context.contains_bean('requestState')
        assert 'systemClock' in context
        assert not context.is_singleton('requestState')
        assert context.is_singleton('systemClock')
        assert context.is_singleton('nothing') is False
        assert context.get_bean_definition('systemClock').bean_type is Clock
        assert context.get_bean_names() == {'requestState', 'systemClock'}
        assert len(context) == 2

    def test_register_component_overrides(self, context):
        """Test explicit name and scope override the markers."""
        definition = context.register_component(Clock, name='clockPrototype', singleton=False)

        assert definition.scope == 'prototype'
        assert context.get_bean('clockPrototype') is not context.get_bean('clockPrototype')

    def test_register_component_rejects_non_classes(self, context):
        """Test only classes can be registered."""
        with pytest.raises(TypeError):
            context.register_component(Clock())


class TestScopes:
    """Test singleton and prototype scopes."""

    def test_singleton_idempotence(self, context):
        """Test repeated lookups return the same object."""
        context.register_component(Clock)

        assert context.get_bean('clock') is context.get_bean('clock')

    def test_prototype_distinctness(self, context):
        """Test every prototype lookup creates a new object."""
        context.register_component(RequestState)

        first = context.get_bean(RequestState)
        second = context.get_bean(RequestState)

        assert first is not second

    def test_singleton_holding_prototype(self, context):
        """Test a singleton keeps the prototype instance it was injected with."""
        context.register_component(SingletonWithPrototype)
        context.register_component(RequestState)

        holder = context.get_bean(SingletonWithPrototype)

        assert isinstance(holder.state, RequestState)
        assert context.get_bean(SingletonWithPrototype).state is holder.state
        assert context.get_bean(RequestState) is not holder.state


class TestInjection:
    """Test field and constructor injection."""

    def test_constructor_injection(self, context):
        """Test constructor parameters are resolved by type."""
        context.register_component(Clock)
        context.register_component(Scheduler)

        assert context.get_bean(Scheduler).clock is context.get_bean(Clock)

    def test_optional_fields(self, context):
        """Test optional fields are skipped and Optional[...] is unwrapped."""
        context.register_component(Clock)
        context.register_component(Auditor)

        auditor = context.get_bean(Auditor)

        assert auditor.missing is None
        assert auditor.clock is context.get_bean(Clock)

    def test_required_field_missing(self, context):
        """Test a missing required dependency fails the bean."""
        context.register_component(NeedsMissing)

        with pytest.raises(BeanCreationException) as exc_info:
            context.get_bean(NeedsMissing)

        assert exc_info.value.bean_name == 'needsMissing'
        assert "Failed to inject required field 'dependency'" in str(exc_info.value)
        assert isinstance(exc_info.value.root_cause(), NoSuchBeanException)

    def test_field_ambiguity_is_reported(self, context):
        """Test a field with several candidates fails even if the bean exists."""
        context.register_component(Reporting)
        context.register_component(EmailNotifier)
        context.register_component(SmsNotifier)

        with pytest.raises(BeanCreationException) as exc_info:
            context.get_bean(Reporting)

        assert isinstance(exc_info.value.cause, NoUniqueBeanException)

    def test_explicit_type_by_name(self, context):
        """Test autowired() accepts the name of a type declared in the same module."""
        context.register_component(Clock)
        context.register_component(NamedTypes)

        bean = context.get_bean(NamedTypes)

        assert bean.clock is context.get_bean(Clock)
        assert bean.scheduler is None

    def test_unknown_type_name(self, context):
        """Test a type name that does not resolve fails the bean."""
        context.register_component(UnknownNamedType)

        with pytest.raises(BeanCreationException, match="Cannot evaluate the type of field .clock.") as exc_info:
            context.get_bean(UnknownNamedType)

        assert isinstance(exc_info.value.cause, NameError)

    def test_register_bean_instance(self, context):
        """Test a prebuilt object is served as a singleton and injectable."""
        clock = Clock()
        context.register_bean('clock', clock)
        context.register_component(Scheduler)

        assert context.get_bean('clock') is clock
        assert context.get_bean(Clock) is clock
        assert context.get_bean(Scheduler).clock is clock
        assert context.is_singleton('clock')

    def test_register_bean_rejects_none(self, context):
        """Test None is not a valid bean."""
        with pytest.raises(ValueError):
            context.register_bean('nothing', None)


class TestCircularDependencies:
    """Test circular dependency handling."""

    def test_field_cycle_resolves(self, context):
        """Test two singletons injecting each other."""
        context.register_component(ServiceA)
        context.register_component(ServiceB)

        a = context.get_bean(ServiceA)
        b = context.get_bean(ServiceB)

        assert a.b is b
        assert b.a is a
        assert a.b.a is a

    def test_cycle_resolves_from_either_side(self, context):
        """Test resolution does not depend on which bean is requested first."""
        context.register_component(ServiceA)
        context.register_component(ServiceB)

        b = context.get_bean('serviceB')

        assert b.a.b is b
        assert context.get_bean('serviceA') is b.a

    def test_cycle_metrics(self, context):
        """Test circular resolutions and creations are counted."""
        context.register_component(ServiceA)
        context.register_component(ServiceB)

        context.get_bean(ServiceA)

        assert context.metrics.get_counter(CIRCULAR_REFERENCES) == 1
        assert context.metrics.get_counter(BEANS_CREATED) == 2
        assert context.metrics.get_avg_timing(BEAN_CREATION) is not None

    def test_finished_cycle_is_not_counted_again(self, context):
        """Test only early references handed out during a cycle are counted."""
        context.register_component(ServiceA)
        context.register_component(ServiceB)
        context.register_component(Clock)

        a = context.get_bean(ServiceA)
        context.get_bean(Clock)

        assert context.get_bean(ServiceB).a is a
        assert context.get_bean(ServiceA) is a
        assert context.metrics.get_counter(CIRCULAR_REFERENCES) == 1

    def test_constructor_cycle_fails(self, context):
        """Test a cycle through constructors cannot be resolved."""
        context.register_component(CtorCycleA)
        context.register_component(CtorCycleB)

        with pytest.raises(BeanCreationException) as exc_info:
            context.get_bean(CtorCycleA)

        assert exc_info.value.bean_name == 'ctorCycleA'
        assert isinstance(exc_info.value.root_cause(), CircularDependencyException)
        assert not context.contains_singleton('ctorCycleA')
        assert not context.contains_singleton('ctorCycleB')

    def test_prototype_cycle_fails(self, context):
        """Test prototypes never resolve cycles."""
        context.register_component(PrototypeCycleA)
        context.register_component(PrototypeCycleB)

        with pytest.raises(BeanCreationException) as exc_info:
            context.get_bean(PrototypeCycleA)

        assert isinstance(exc_info.value.root_cause(), CircularDependencyException)


class TestCreationFailures:
    """Test failure propagation and rollback."""

    def test_failure_names_the_bean(self, context):
        """Test the outermost error names the requested bean."""
        context.register_component(FailingDependency)
        context.register_component(DependsOnFailing)

        with pytest.raises(BeanCreationException) as exc_info:
            context.get_bean(DependsOnFailing)

        assert exc_info.value.bean_name == 'dependsOnFailing'
        assert isinstance(exc_info.value.root_cause(), RuntimeError)
        assert context.metrics.get_error_count('failingDependency') == 1

    def test_rollback_allows_retry(self, context):
        """Test a failed singleton leaves no tier state and can be created later."""
        Broken.attempts = 0
        context.register_component(Broken)

        with pytest.raises(BeanCreationException):
            context.get_bean(Broken)

        assert not context.contains_singleton('broken')

        bean = context.get_bean(Broken)
        assert isinstance(bean, Broken)
        assert Broken.attempts == 2
        assert context.contains_singleton('broken')
        assert context.get_bean(Broken) is bean


class TestClear:
    """Test clear and context manager behavior."""

    def test_clear_forgets_everything(self, context):
        """Test registry and caches are emptied."""
        context.register_component(Clock)
        context.get_bean(Clock)
        assert context.contains_singleton('clock')

        context.clear()

        assert context.get_bean_names() == set()
        assert not context.contains_singleton('clock')
        with pytest.raises(NoSuchBeanException):
            context.get_bean(Clock)

    def test_metrics_can_be_disabled(self):
        """Test a context built with metrics disabled records nothing."""
        from easyioc.config.settings import Settings
        from easyioc.core.metrics import MetricsCollector

        with ApplicationContext(settings=Settings(), metrics=MetricsCollector(enabled=False)) as context:
            context.register_component(Clock)
            context.get_bean(Clock)

            assert context.metrics.get_counter(BEANS_CREATED) == 0


class TestEndToEnd:
    """Test the full scan -> wire -> teardown flow."""

    def test_service_pair(self, context, package_factory):
        """Test the classic ServiceA/ServiceB scenario from a scanned package."""
        package = package_factory.directory('e2eapp', {
            '__init__.py': '',
            'services.py': '''
                from easyioc import autowired, component


                @component
                class ServiceA:
                    b: "ServiceB" = autowired()

                    def greet(self):
                        return "A"


                @component
                class ServiceB:
                    a: ServiceA = autowired()

                    def greet(self):
                        return "B"
            ''',
        })

        assert context.scan(package) == 2

        a = context.get_bean('serviceA')
        b = context.get_bean('serviceB')

        assert a.b is b and b.a is a
        assert a.b.greet() == 'B'
        assert b.a.greet() == 'A'
