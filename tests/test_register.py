import unittest
from typing import Protocol
from unittest.mock import MagicMock, call

import pytest

from autobind import (
    BinderRegistry,
    BinderResolver,
    CandidateClass,
    Configuration,
    ConfigurationMarker,
    Lifetime,
    LifetimeMarker,
    MissingConfigurationSource,
    ServiceCollection,
    configuration,
    dispatch,
    register_annotated_types,
    scoped,
    select_first_recognized,
    singleton,
    transient,
)
from autobind._register import register_scoped, register_singleton, register_transient
from autobind_sample.services import Clock, ReportOptions, SystemClock, UnitOfWork


class Greeter(Protocol):
    def greet(self, name: str) -> str: ...


def _resolver(*binders):
    registry = BinderRegistry(entry_points=False)
    for binder in binders:
        registry.register(binder)
    return BinderResolver(registry)


class TestLifetimeRegistration(unittest.TestCase):
    services: MagicMock

    def setUp(self):
        self.services = MagicMock()

    def test_undecorated_class_produces_no_calls(self):
        class Plain: ...

        count = register_annotated_types(self.services, sources=[Plain])

        assert count == 0
        assert self.services.mock_calls == []

    def test_transient_registers_class_against_itself(self):
        @transient()
        class Worker: ...

        register_annotated_types(self.services, sources=[Worker])

        assert self.services.mock_calls == [call.add_transient(Worker, None)]

    def test_scoped_registers_class_against_itself(self):
        @scoped()
        class Session: ...

        register_annotated_types(self.services, sources=[Session])

        assert self.services.mock_calls == [call.add_scoped(Session, None)]

    def test_singleton_registers_against_service_type(self):
        @singleton(Greeter)
        class EnglishGreeter:
            def greet(self, name: str) -> str:
                return f"Hello {name}"

        register_annotated_types(self.services, sources=[EnglishGreeter])

        assert self.services.mock_calls == [call.add_singleton(EnglishGreeter, Greeter)]

    def test_first_marker_wins(self):
        @singleton()
        @transient()
        class Cache: ...

        register_annotated_types(self.services, sources=[Cache])

        assert self.services.mock_calls == [call.add_singleton(Cache, None)]

    def test_lifetime_before_configuration_ignores_configuration(self):
        @scoped()
        @configuration("Ignored")
        class Settings: ...

        register_annotated_types(self.services, sources=[Settings])

        assert self.services.mock_calls == [call.add_scoped(Settings, None)]

    def test_unrecognized_markers_are_skipped(self):
        @transient()
        class Worker: ...

        Worker.__autobind_markers__ = ("foreign", *Worker.__autobind_markers__)

        register_annotated_types(self.services, sources=[Worker])

        assert self.services.mock_calls == [call.add_transient(Worker, None)]

    def test_container_errors_propagate(self):
        @transient()
        class Worker: ...

        self.services.add_transient.side_effect = KeyError("boom")

        with pytest.raises(KeyError):
            register_annotated_types(self.services, sources=[Worker])

    def test_none_services_is_a_no_op(self):
        @transient()
        class Worker: ...

        assert register_annotated_types(None, sources=[Worker]) == 0


def test_registers_sample_package_into_service_collection():
    services = ServiceCollection()
    binder = MagicMock()

    def configure(target, svc, section):
        binder(target, svc, dict(section))

    count = register_annotated_types(
        services,
        Configuration({"reports": {"title": "Weekly"}}),
        sources=["autobind_sample"],
        resolver=_resolver(configure),
    )

    assert count == 6
    assert services.get(Clock).implementation is SystemClock
    assert services.get(SystemClock) is None
    # submodules are walked in name order: extras before services
    assert [(d.implementation.__name__, d.lifetime) for d in services] == [
        ("NightlyJob", Lifetime.TRANSIENT),
        ("SystemClock", Lifetime.SINGLETON),
        ("UnitOfWork", Lifetime.SCOPED),
        ("ReportBuilder", Lifetime.TRANSIENT),
        ("Formatter", Lifetime.SINGLETON),
    ]
    assert UnitOfWork in services
    binder.assert_called_once_with(ReportOptions, services, {"title": "Weekly"})


def test_missing_configuration_source_names_the_class():
    @configuration("Foo")
    class FooOptions: ...

    with pytest.raises(MissingConfigurationSource) as ctx:
        register_annotated_types(MagicMock(), sources=[FooOptions])

    assert "FooOptions" in str(ctx.value)
    assert ctx.value.cls is FooOptions


def test_missing_configuration_source_is_raised_before_binder_resolution():
    @configuration("Foo")
    class FooOptions: ...

    resolver = _resolver()

    with pytest.raises(MissingConfigurationSource):
        register_annotated_types(MagicMock(), sources=[FooOptions], resolver=resolver)

    assert not resolver.resolved


def test_configuration_without_key_is_silently_ignored():
    @configuration()
    class Options: ...

    services = MagicMock()
    source = MagicMock()

    count = register_annotated_types(services, source, sources=[Options], resolver=_resolver())

    assert count == 0
    assert services.mock_calls == []
    assert source.mock_calls == []


def test_configuration_marker_binds_section():
    @configuration("Foo")
    class FooOptions: ...

    calls = []

    def configure(target, services, section):
        calls.append((target, services, section))

    services = MagicMock()
    source = MagicMock()

    register_annotated_types(services, source, sources=[FooOptions], resolver=_resolver(configure))

    source.get_section.assert_called_once_with("Foo")
    assert calls == [(FooOptions, services, source.get_section.return_value)]


def test_select_first_recognized():
    lifetime = LifetimeMarker(Lifetime.SCOPED)
    config = ConfigurationMarker(("Key",))

    assert select_first_recognized([]) is None
    assert select_first_recognized(["other", 1]) is None
    assert select_first_recognized(["other", config, lifetime]) is config
    assert select_first_recognized([lifetime, config]) is lifetime


def test_dispatch_reports_whether_class_was_registered():
    @singleton()
    class Service: ...

    class Plain: ...

    services = MagicMock()

    assert dispatch(CandidateClass.from_type(Service), services) is True
    assert dispatch(CandidateClass.from_type(Plain), services) is False


def test_registrar_rejects_marker_of_another_lifetime():
    class Worker: ...

    services = MagicMock()
    marker = LifetimeMarker(Lifetime.SINGLETON)

    with pytest.raises(ValueError):
        register_transient(services, Worker, marker)
    with pytest.raises(ValueError):
        register_scoped(services, Worker, marker)

    register_singleton(services, Worker, marker)
    assert services.mock_calls == [call.add_singleton(Worker, None)]


def test_invalid_service_type_is_rejected_by_service_collection():
    class Base: ...

    @singleton(Base)
    class Unrelated: ...

    with pytest.raises(TypeError):
        register_annotated_types(ServiceCollection(), sources=[Unrelated])
