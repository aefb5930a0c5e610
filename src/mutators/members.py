"""Member installation primitives for host classes.

``implement_member`` is the default installation operation that the
dispatcher intercepts. ``extend_member`` installs static members and
``protect`` marks a function as callable only from inside its class.

Installed functions are wrapped unless retained. The wrapper records its
owner and tracks the active owner in a ``ContextVar``, which is how
protected members know whether they are being called from inside the
class.
"""

import copy
import functools
from collections.abc import Callable, Mapping
from contextvars import ContextVar
from types import FunctionType
from typing import Any

from mutators.errors import ProtectedMemberError
from mutators.keys import Handler

# Owner of the installed member currently executing, None outside of any
_active_owner: ContextVar[type | None] = ContextVar("mutators_active_owner", default=None)


def protect(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Return a protected variant of *fn*.

    Once installed (without ``retain``), the member raises
    ``ProtectedMemberError`` unless called from another member installed on
    the same class or one of its subclasses.
    """

    @functools.wraps(fn)
    def protected(*args: Any, **kwargs: Any) -> Any:
        return fn(*args, **kwargs)

    protected.__protected__ = True  # type: ignore[attr-defined]
    return protected


def is_protected(fn: object) -> bool:
    return bool(getattr(fn, "__protected__", False))


def wrap_member(owner: type, name: str, fn: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap *fn* for installation on *owner* under *name*."""
    guarded = is_protected(fn)

    @functools.wraps(fn)
    def member(*args: Any, **kwargs: Any) -> Any:
        active = _active_owner.get()
        if guarded and (active is None or not issubclass(active, owner)):
            raise ProtectedMemberError(owner.__name__, name)
        token = _active_owner.set(owner)
        try:
            return fn(*args, **kwargs)
        finally:
            _active_owner.reset(token)

    member.__owner__ = owner  # type: ignore[attr-defined]
    member.__member_name__ = name  # type: ignore[attr-defined]
    return member


def merge(base: Mapping[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge *extra* into a copy of *base*. Nested mappings merge; other values are copied."""
    merged = copy.deepcopy(dict(base))
    for key, value in extra.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def implement_member(
    target: type,
    key: str | Mapping[str, Any],
    value: Any = None,
    retain: bool = False,
    *,
    handlers: Mapping[str, Handler],
) -> None:
    """Install *value* on *target* under *key*.

    Resolution order:

    1. ``key`` names a handler -> call ``handler(target, value)``. A literal
       handler's non-``None`` result is installed under ``key``; ``None``
       means the handler took care of it.
    2. plain function -> wrapped member (stored as-is when ``retain``)
    3. mapping        -> deep-merged into the existing mapping member
    4. anything else  -> ``setattr``

    A mapping passed as *key* installs each pair in iteration order.
    """
    if isinstance(key, Mapping):
        for name, member in key.items():
            implement_member(target, name, member, retain, handlers=handlers)
        return

    handler = handlers.get(key)
    if handler is not None:
        value = handler(target, value)
        if value is None:
            return

    if isinstance(value, FunctionType):
        setattr(target, key, value if retain else wrap_member(target, key, value))
    elif isinstance(value, Mapping):
        current = getattr(target, key, None)
        base = current if isinstance(current, Mapping) else {}
        setattr(target, key, merge(base, value))
    else:
        setattr(target, key, value)


def extend_member(target: type, key: str | Mapping[str, Any], value: Any = None) -> None:
    """Install *value* as a static member of *target*.

    Plain functions become ``staticmethod`` so ``target.key is value`` and
    instances see the same unbound function.
    """
    if isinstance(key, Mapping):
        for name, member in key.items():
            extend_member(target, name, member)
        return

    if isinstance(value, FunctionType):
        setattr(target, key, staticmethod(value))
    else:
        setattr(target, key, value)
