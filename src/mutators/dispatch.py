"""Installation interceptor: pattern-aware member installation.

``DispatchService`` owns a ``MatcherRegistry`` and rewires a target's
installation operation so every key is looked up before it reaches the
target's own primitive:

    no match -> primitive(key, value, retain)
    match    -> primitive(pattern_id, [value, *captures], retain)
                -> handler(target, value, *captures)

Targets whose primitive does not consult this service (no matching
``__dispatch__``) get the pattern handler called directly instead.

The rewiring is an ``InstallInterceptor`` descriptor stored under each
installation name (``implement`` and its ``install`` alias by default).
It binds on access to the accessing class, so subclasses of an upgraded
class install onto themselves.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, Protocol, runtime_checkable

from mutators.config import DispatchConfig
from mutators.errors import ConfigurationError, RetrofitAccessError
from mutators.keys import LiteralKey, PatternKey
from mutators.registry import MatcherRegistry

logger = logging.getLogger("mutators.dispatch")

type Primitive = Callable[..., Any]


@runtime_checkable
class TargetLike(Protocol):
    """A class that can receive installed members.

    ``implement`` is the installation primitive, taking
    ``(key, value, retain)`` or a single mapping of pairs. ``extend``
    installs static members. Both are expected to be classmethods so the
    class they are reached through is the one that receives the member.
    """

    def implement(self, key: Any, value: Any = None, retain: bool = False) -> Any: ...
    def extend(self, key: Any, value: Any = None) -> Any: ...


def is_target(obj: object) -> bool:
    """True for classes exposing the ``TargetLike`` operations."""
    return isinstance(obj, type) and isinstance(obj, TargetLike)


class BoundInstall:
    """An intercepted installation operation bound to one target."""

    __slots__ = ("original", "service", "target")

    def __init__(self, service: DispatchService, target: type, original: Primitive) -> None:
        self.service = service
        self.target = target
        self.original = original

    def __call__(self, key: Any, value: Any = None, retain: bool = False) -> None:
        self.service.install(self.target, key, value, retain, original=self.original)

    def __repr__(self) -> str:
        return f"<intercepted install of {self.target.__qualname__}>"


class InstallInterceptor:
    """Descriptor replacing a target's installation operation.

    ``primitive`` is the raw attribute that was replaced (usually a
    ``classmethod``); it is re-bound to whichever class the interceptor is
    accessed through.
    """

    __slots__ = ("primitive", "service")

    def __init__(self, service: DispatchService, primitive: Any) -> None:
        self.service = service
        self.primitive = primitive

    def __get__(self, instance: object, owner: type | None = None) -> BoundInstall:
        target = owner if owner is not None else type(instance)
        return BoundInstall(self.service, target, self.bind(target))

    def bind(self, target: type) -> Primitive:
        """The original primitive as seen from *target*."""
        getter = getattr(self.primitive, "__get__", None)
        if getter is None:
            return self.primitive
        return getter(None, target)


class DispatchService:
    """Shared matcher registry plus the interceptor that consults it.

    One default instance serves the whole process (see ``get_service``).
    Separate instances can be injected into a host hierarchy to keep their
    registrations isolated::

        service = DispatchService()

        class Widget(Host, dispatch=service):
            pass

        service.registry.register_pattern(r"^cached\\s(\\w+)", cache_member)
        Widget.implement("cached area", compute_area)
    """

    __slots__ = ("config", "registry")

    def __init__(
        self,
        config: DispatchConfig | None = None,
        registry: MatcherRegistry | None = None,
    ) -> None:
        if registry is None:
            registry = MatcherRegistry(config)
        elif config is not None and config != registry.config:
            msg = "config differs from the config of the injected registry; pass only one of them."
            raise ConfigurationError(msg)
        self.config = config or registry.config
        self.registry = registry
        if self.config.install_defaults:
            from mutators.handlers import install_default_handlers

            install_default_handlers(self.registry)

    @property
    def handlers(self) -> dict[str, Any]:
        return self.registry.handlers

    # -- installation --

    def install(
        self,
        target: type,
        key: Any,
        value: Any = None,
        retain: bool = False,
        *,
        original: Primitive | None = None,
    ) -> None:
        """Install *value* on *target* under *key*, routing pattern keys to their handler.

        A mapping passed as *key* installs each pair independently, in
        iteration order. Handler errors propagate unchanged; pairs installed
        before the failing one stay installed.
        """
        primitive = original if original is not None else self.original_primitive(target)

        if isinstance(key, Mapping):
            for name, member in key.items():
                self.install(target, name, member, retain, original=primitive)
            return

        match self.registry.resolve(key):
            case PatternKey(id=resolved, captures=captures):
                logger.debug("%s: %r routed to %s", target.__qualname__, key, resolved)
                payload = [value, *captures]
                if self.resolves_handlers(target):
                    primitive(resolved, payload, retain)
                else:
                    self.handlers[resolved](target, payload)
            case LiteralKey():
                primitive(key, value, retain)

    def resolves_handlers(self, target: type) -> bool:
        """True when *target*'s primitive looks handlers up in this service.

        Hosts declare that through ``__dispatch__``. Other targets get their
        pattern handlers called here instead of through their primitive.
        """
        return inspect.getattr_static(target, "__dispatch__", None) is self

    def original_primitive(self, target: type) -> Primitive:
        """The target's pre-interception installation primitive."""
        raw = inspect.getattr_static(target, self.config.install_names[0])
        if isinstance(raw, InstallInterceptor):
            return raw.bind(target)
        return getattr(target, self.config.install_names[0])

    # -- upgrading targets --

    def upgrade(self, target: type) -> bool:
        """Replace *target*'s installation operation with an interceptor.

        Returns ``False`` when *target* already carries this service's
        interceptor, or declares another service as its ``__dispatch__``.
        An interceptor from another service is unwrapped so
        the original primitive is never intercepted twice.
        """
        if not is_target(target):
            msg = f"{target!r} is not a target-like class (needs implement() and extend())"
            raise TypeError(msg)

        # Hosts bound to another service keep it
        owner = inspect.getattr_static(target, "__dispatch__", None)
        if isinstance(owner, DispatchService) and owner is not self:
            return False

        primary = self.config.install_names[0]
        raw = inspect.getattr_static(target, primary)
        if isinstance(raw, InstallInterceptor):
            if raw.service is self:
                return False
            raw = raw.primitive

        interceptor = InstallInterceptor(self, raw)
        for name in self.config.install_names:
            setattr(target, name, interceptor)
        logger.debug("Upgraded %s.%s", target.__qualname__, primary)
        return True

    def retrofit(self, candidates: Mapping[Any, Any] | Iterable[Any]) -> int:
        """Upgrade every target-like object among *candidates*.

        *candidates* is any collection of live objects: a mapping (such as a
        module namespace) whose values are read one key at a time, or a
        plain iterable. Non-targets are skipped. Candidates that raise while
        being read or inspected are logged and skipped. Returns the number
        of targets upgraded.
        """
        upgraded = 0
        for label, fetch in _candidates(candidates):
            try:
                candidate = fetch()
                if not is_target(candidate):
                    continue
                if self.upgrade(candidate):
                    upgraded += 1
            except Exception as exc:
                error = RetrofitAccessError(label, exc)
                logger.debug("Retrofit skipped: %s", error)
        return upgraded


def _candidates(source: Mapping[Any, Any] | Iterable[Any]) -> Iterator[tuple[str, Callable[[], Any]]]:
    """Yield ``(label, fetch)`` pairs, deferring each read to ``fetch()``.

    Stops quietly if the source itself fails to iterate.
    """
    if isinstance(source, Mapping):
        try:
            keys = list(source)
        except Exception as exc:
            logger.debug("Retrofit source %r cannot be enumerated: %r", type(source).__name__, exc)
            return
        for key in keys:
            yield repr(key), functools.partial(source.__getitem__, key)
        return

    try:
        iterator = iter(source)
    except Exception as exc:
        logger.debug("Retrofit source %r cannot be enumerated: %r", type(source).__name__, exc)
        return
    index = 0
    while True:
        try:
            item = next(iterator)
        except StopIteration:
            return
        except Exception as exc:
            logger.debug("Retrofit source stopped at entry %d: %r", index, exc)
            return
        yield f"#{index}", functools.partial(_identity, item)
        index += 1


def _identity(item: Any) -> Any:
    return item
