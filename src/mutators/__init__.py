"""Mutators: pattern-keyed member installation for Python classes.

Register a pattern once and every key of that shape is routed to your
handler instead of being assigned as-is.

Basic usage::

    import re
    from mutators import Host, define_mutator

    class Shape(Host):
        pass

    Shape.implement("static origin", lambda: (0, 0))
    Shape.origin()  # (0, 0), a staticmethod on Shape

Custom mutators::

    define_mutator(re.compile(r"^cached\\s(\\w+)"), lambda target, fn, name: (
        target.implement(name, functools.cache(fn))
    ))
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "DispatchConfig",
    "DispatchService",
    "Host",
    "InstallInterceptor",
    "InvalidPatternError",
    "LiteralKey",
    "MatcherEntry",
    "MatcherRegistry",
    "MutatorError",
    "PatternKey",
    "ProtectedMemberError",
    "TargetLike",
    "define_mutator",
    "get_service",
    "protect",
    "retrofit",
]

# name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "ConfigurationError": "mutators.errors",
    "DispatchConfig": "mutators.config",
    "DispatchService": "mutators.dispatch",
    "Host": "mutators.host",
    "InstallInterceptor": "mutators.dispatch",
    "InvalidPatternError": "mutators.errors",
    "LiteralKey": "mutators.keys",
    "MatcherEntry": "mutators.keys",
    "MatcherRegistry": "mutators.registry",
    "MutatorError": "mutators.errors",
    "PatternKey": "mutators.keys",
    "ProtectedMemberError": "mutators.errors",
    "TargetLike": "mutators.dispatch",
    "define_mutator": "mutators.host",
    "get_service": "mutators.host",
    "protect": "mutators.members",
    "retrofit": "mutators.host",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import mutators`` free of side effects until ``Host`` or the
    default service is actually needed.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
