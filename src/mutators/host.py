"""Host classes: the stock target for pattern-aware installation.

``Host`` carries the default installation primitive (``implement``, alias
``install``) and the static extension (``extend``). Its
``__init_subclass__`` hook upgrades every new subclass with the dispatch
service it was given, so subclasses are intercepted from the moment they
exist::

    from mutators import Host

    class Shape(Host):
        pass

    Shape.implement({
        "area": lambda self: 0,
        "static unit": lambda: Shape(),
        "linked defaults": {"color": "black"},
    })

Classes defined without ``Host`` can still be intercepted by passing them
to ``retrofit``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, ClassVar

from mutators.dispatch import DispatchService
from mutators.keys import Handler
from mutators.members import extend_member, implement_member

_default_service: DispatchService | None = None


def get_service() -> DispatchService:
    """Return the process-wide dispatch service, creating it on first use."""
    global _default_service
    if _default_service is None:
        _default_service = DispatchService()
    return _default_service


def define_mutator(key: Any, handler: Handler) -> None:
    """Register *handler* on the process-wide registry.

    Convenience for ``get_service().registry.define(key, handler)``.
    """
    get_service().registry.define(key, handler)


class Host:
    """Base class whose members are installed through a dispatch service.

    Pass ``dispatch=`` in the class statement to bind a hierarchy to its own
    service; otherwise the process-wide one is inherited.
    """

    __dispatch__: ClassVar[DispatchService]

    def __init_subclass__(cls, dispatch: DispatchService | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if dispatch is not None:
            cls.__dispatch__ = dispatch
        cls.__dispatch__.upgrade(cls)

    @classmethod
    def implement(cls, key: Any, value: Any = None, retain: bool = False) -> None:
        implement_member(cls, key, value, retain, handlers=cls.__dispatch__.handlers)

    install = implement

    @classmethod
    def extend(cls, key: Any, value: Any = None) -> None:
        extend_member(cls, key, value)


Host.__dispatch__ = get_service()
Host.__dispatch__.upgrade(Host)


def walk_hosts(root: type = Host) -> Iterator[type]:
    """Yield *root* and every live subclass below it, each once."""
    seen: set[type] = set()
    pending = [root]
    while pending:
        cls = pending.pop()
        if cls in seen:
            continue
        seen.add(cls)
        yield cls
        pending.extend(cls.__subclasses__())


def retrofit(
    namespace: Mapping[Any, Any] | Iterable[Any] | None = None,
    *,
    service: DispatchService | None = None,
) -> int:
    """Upgrade existing target-like classes with *service*, the process-wide one by default.

    *namespace* is any collection of live objects, such as ``vars(module)``.
    By default the live ``Host`` subclass tree is swept. Returns the number
    of classes that were upgraded.
    """
    candidates = walk_hosts() if namespace is None else namespace
    return (service or get_service()).retrofit(candidates)
