"""Tests for mutators.host — Host base class, default service and retrofit."""

import inspect
import re
from typing import Any

from mutators.dispatch import BoundInstall, DispatchService, InstallInterceptor
from mutators.host import Host, define_mutator, get_service, retrofit, walk_hosts


def _make() -> str:
    return "made"


class TestDefaultService:
    def test_singleton(self) -> None:
        assert get_service() is get_service()

    def test_host_uses_default(self) -> None:
        assert Host.__dispatch__ is get_service()

    def test_host_is_intercepted(self) -> None:
        interceptor = inspect.getattr_static(Host, "implement")
        assert isinstance(interceptor, InstallInterceptor)
        assert interceptor.service is get_service()
        assert vars(Host)["install"] is interceptor

    def test_define_mutator(self) -> None:
        seen: list[tuple[Any, ...]] = []
        define_mutator(re.compile(r"^zz_host_test\s(\w+)"), lambda target, value, name: seen.append((target, name)))

        class Shape(Host):
            pass

        Shape.implement("zz_host_test corners", 4)

        assert seen == [(Shape, "corners")]


class TestSubclasses:
    def test_new_subclass_is_intercepted(self) -> None:
        class Shape(Host):
            pass

        bound = Shape.implement
        assert isinstance(bound, BoundInstall)
        assert bound.target is Shape

    def test_members_land_on_subclass(self) -> None:
        class Shape(Host):
            pass

        Shape.implement("static make", _make)

        assert "make" in vars(Shape)
        assert not hasattr(Host, "make")

    def test_instance_access(self) -> None:
        class Shape(Host):
            pass

        Shape().implement("sides", 3)  # type: ignore[call-arg]

        assert Shape.sides == 3  # type: ignore[attr-defined]

    def test_own_primitive_is_wrapped(self) -> None:
        received: list[tuple[Any, ...]] = []

        class Custom(Host):
            @classmethod
            def implement(cls, key: Any, value: Any = None, retain: bool = False) -> None:
                received.append((key, value))

        assert isinstance(vars(Custom)["implement"], InstallInterceptor)

        Custom.implement("static make", _make)

        assert received[0][0].startswith(get_service().config.key_prefix)
        assert received[0][1] == [_make, "make"]

    def test_mapping_form(self) -> None:
        class Shape(Host):
            pass

        Shape.implement({"sides": 4, "static make": _make, "linked meta": {"k": 1}})

        assert Shape.sides == 4  # type: ignore[attr-defined]
        assert Shape.make is _make  # type: ignore[attr-defined]
        assert Shape.meta == {"k": 1}  # type: ignore[attr-defined]


class TestInjectedService:
    def test_dispatch_keyword(self) -> None:
        service = DispatchService()

        class Widget(Host, dispatch=service):
            pass

        assert Widget.__dispatch__ is service
        assert vars(Widget)["implement"].service is service

    def test_registrations_are_isolated(self) -> None:
        service = DispatchService()
        service.registry.register_pattern(r"^shout\s(\w+)", lambda target, value, name: setattr(target, name, value.upper()))

        class Widget(Host, dispatch=service):
            pass

        Widget.implement("shout label", "hi")

        assert Widget.label == "HI"  # type: ignore[attr-defined]
        assert get_service().registry.lookup("shout label") is None

    def test_subclasses_inherit_service(self) -> None:
        service = DispatchService()

        class Widget(Host, dispatch=service):
            pass

        class Button(Widget):
            pass

        assert Button.__dispatch__ is service
        assert inspect.getattr_static(Button, "implement").service is service

    def test_default_retrofit_leaves_injected_hosts(self) -> None:
        service = DispatchService()

        class Widget(Host, dispatch=service):
            pass

        retrofit()

        assert vars(Widget)["implement"].service is service


class TestRetrofit:
    def test_walk_hosts(self) -> None:
        class Shape(Host):
            pass

        class Square(Shape):
            pass

        hosts = list(walk_hosts())
        assert hosts[0] is Host
        assert Shape in hosts
        assert Square in hosts
        assert len(hosts) == len(set(hosts))

    def test_restores_interception(self) -> None:
        class Legacy(Host):
            pass

        primitive = vars(Host)["implement"].primitive
        Legacy.implement = primitive  # type: ignore[method-assign]
        Legacy.install = primitive  # type: ignore[method-assign]

        assert retrofit() >= 1
        assert isinstance(vars(Legacy)["implement"], InstallInterceptor)
        assert vars(Legacy)["implement"].primitive is primitive

    def test_namespace(self) -> None:
        class Target:
            @classmethod
            def implement(cls, key: Any, value: Any = None, retain: bool = False) -> None:
                setattr(cls, key, value)

            @classmethod
            def extend(cls, key: Any, value: Any = None) -> None:
                setattr(cls, key, value)

        assert retrofit({"Target": Target, "other": object()}) == 1
        assert inspect.getattr_static(Target, "implement").service is get_service()

    def test_explicit_service(self) -> None:
        service = DispatchService()

        class Target:
            @classmethod
            def implement(cls, key: Any, value: Any = None, retain: bool = False) -> None:
                setattr(cls, key, value)

            @classmethod
            def extend(cls, key: Any, value: Any = None) -> None:
                setattr(cls, key, value)

        assert retrofit([Target], service=service) == 1
        assert inspect.getattr_static(Target, "implement").service is service

    def test_explicit_service_sweeps_its_hosts(self) -> None:
        service = DispatchService()

        class Widget(Host, dispatch=service):
            pass

        primitive = vars(Widget)["implement"].primitive
        Widget.implement = primitive  # type: ignore[method-assign]
        Widget.install = primitive  # type: ignore[method-assign]

        assert retrofit(service=service) >= 1
        assert vars(Widget)["implement"].service is service
