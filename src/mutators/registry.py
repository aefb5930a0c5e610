"""Matcher registry: ordered pattern entries plus the handler map.

Patterns are tried newest first, so a handler registered later shadows a
more general one registered earlier. Registration order is the only
precedence rule: there is no priority or specificity tie-break.

Handler map keys are either literal member names or ids derived from a
pattern. Two patterns with the same source and flags share one slot and
the last registration wins.
"""

import logging
import re
from collections.abc import Callable
from typing import Any

from mutators.config import DispatchConfig
from mutators.errors import InvalidPatternError
from mutators.keys import Handler, Key, LiteralKey, MatcherEntry, PatternKey

logger = logging.getLogger("mutators.registry")


def compile_pattern(pattern: str | re.Pattern[str]) -> re.Pattern[str]:
    """Return *pattern* as a compiled ``re.Pattern``.

    Raises ``InvalidPatternError`` if the source does not compile or the
    object is not a string matcher at all.
    """
    if isinstance(pattern, re.Pattern):
        if not isinstance(pattern.pattern, str):
            raise InvalidPatternError(pattern, "bytes patterns cannot match member names")
        return pattern
    if not isinstance(pattern, str):
        raise InvalidPatternError(pattern, f"expected str or re.Pattern, got {type(pattern).__name__}")
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc


def _spread(handler: Handler) -> Handler:
    """Adapt a pattern handler to receive ``[value, *captures]`` as one payload."""

    def adapted(target: Any, payload: list[Any]) -> None:
        handler(target, *payload)

    adapted.__wrapped__ = handler  # type: ignore[attr-defined]
    return adapted


class MatcherRegistry:
    """Ordered pattern entries and the handler map they resolve into.

    Usage::

        registry = MatcherRegistry()
        registry.register_pattern(r"^static\\s(\\w+)", make_static)
        registry.register_literal("Binds", bind_methods)

        registry.lookup("static create")
        # PatternKey(id="$mutator:/^static\\s(\\w+)/32", captures=("create",))
    """

    __slots__ = ("_config", "_entries", "_handlers", "_search")

    def __init__(self, config: DispatchConfig | None = None) -> None:
        self._config = config or DispatchConfig()
        self._entries: list[MatcherEntry] = []
        self._handlers: dict[str, Handler] = {}
        self._search: Callable[[re.Pattern[str], str], re.Match[str] | None] = getattr(
            re.Pattern, self._config.match_mode
        )

    @property
    def config(self) -> DispatchConfig:
        return self._config

    @property
    def handlers(self) -> dict[str, Handler]:
        """The shared handler map, keyed by resolved key."""
        return self._handlers

    @property
    def entries(self) -> tuple[MatcherEntry, ...]:
        """Registered pattern entries in registration order."""
        return tuple(self._entries)

    def entry_id(self, matcher: re.Pattern[str]) -> str:
        """Handler-map key for *matcher*, stable for equal source and flags."""
        return f"{self._config.key_prefix}/{matcher.pattern}/{int(matcher.flags)}"

    def register_pattern(self, pattern: str | re.Pattern[str], handler: Handler) -> MatcherEntry:
        """Append a pattern entry and store its handler.

        The handler is called as ``handler(target, value, *captures)``.
        Registering the same pattern again appends a second entry that is
        consulted first.
        """
        matcher = compile_pattern(pattern)
        entry = MatcherEntry(id=self.entry_id(matcher), matcher=matcher, handler=handler)
        if entry.id in self._handlers:
            logger.debug("Pattern %r re-registered, replacing handler for %s", matcher.pattern, entry.id)
        self._entries.append(entry)
        self._handlers[entry.id] = _spread(handler)
        logger.debug("Registered pattern mutator %s -> %s", entry.id, _name(handler))
        return entry

    def register_literal(self, key: str, handler: Handler) -> None:
        """Store *handler* under the literal member name *key*.

        The handler is called as ``handler(target, value)``. A second
        registration under the same key replaces the first.
        """
        if not isinstance(key, str) or not key:
            raise InvalidPatternError(key, "literal mutator keys must be non-empty strings")
        if key in self._handlers:
            logger.debug("Literal mutator %r overwritten", key)
        self._handlers[key] = handler
        logger.debug("Registered literal mutator %r -> %s", key, _name(handler))

    def define(self, key: str | re.Pattern[str], handler: Handler) -> None:
        """Register *handler* as a pattern or literal mutator depending on *key*.

        A compiled ``re.Pattern`` is a pattern mutator; a string is a
        literal member name.
        """
        if isinstance(key, re.Pattern):
            self.register_pattern(key, handler)
        else:
            self.register_literal(key, handler)

    def mutator(self, key: str | re.Pattern[str]) -> Callable[[Handler], Handler]:
        """Decorator form of ``define``::

            @registry.mutator(re.compile(r"^cached\\s(\\w+)"))
            def cached(target, fn, name):
                target.implement(name, functools.cache(fn))
        """

        def decorator(handler: Handler) -> Handler:
            self.define(key, handler)
            return handler

        return decorator

    def lookup(self, key: object) -> PatternKey | None:
        """Find the most recently registered pattern matching *key*.

        Returns a ``PatternKey`` carrying the entry id and the match's
        sub-groups in order, or ``None`` when nothing matches.
        """
        if not isinstance(key, str):
            return None
        for entry in reversed(self._entries):
            match = self._search(entry.matcher, key)
            if match is not None:
                return PatternKey(id=entry.id, captures=match.groups())
        return None

    def resolve(self, key: str) -> Key:
        """Classify *key* once: ``PatternKey`` on a match, else ``LiteralKey``."""
        return self.lookup(key) or LiteralKey(key)

    def get_handler(self, resolved_key: str) -> Handler | None:
        return self._handlers.get(resolved_key)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, resolved_key: object) -> bool:
        return resolved_key in self._handlers


def _name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
