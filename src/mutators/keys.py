"""MatcherEntry, LiteralKey and PatternKey frozen dataclasses."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

type Handler = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class MatcherEntry:
    """A registered pattern.

    ``id`` is derived from the pattern when the entry is created and names
    the handler slot in the registry's handler map.
    """

    id: str
    matcher: re.Pattern[str]
    handler: Handler


@dataclass(frozen=True, slots=True)
class LiteralKey:
    """A key that matched no pattern. Installed under its own name."""

    name: str


@dataclass(frozen=True, slots=True)
class PatternKey:
    """Result of a successful pattern lookup.

    ``captures`` holds the sub-groups of the match in order, without the
    full match.
    """

    id: str
    captures: tuple[str | None, ...] = ()

    @property
    def resolved_key(self) -> str:
        """Handler-map key the installation is forwarded under."""
        return self.id


type Key = LiteralKey | PatternKey
