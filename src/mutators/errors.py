"""Mutators exception hierarchy.

Shared across the registry, dispatcher and host classes so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class MutatorError(Exception):
    """Base for all mutators-specific errors."""


class ConfigurationError(MutatorError):
    """Raised when a ``DispatchConfig`` is invalid.

    Surfaces at construction time, before any service uses the config.
    """


@dataclass(frozen=True, slots=True)
class InvalidPatternError(MutatorError, ValueError):
    """A mutator key could not be turned into a registry entry.

    Raised by ``MatcherRegistry.register_pattern`` when the pattern does not
    compile, and by ``register_literal`` for empty or non-string keys.
    The registry is left untouched.
    """

    pattern: object
    reason: str = ""

    def __str__(self) -> str:
        if self.reason:
            return f"Invalid mutator pattern {self.pattern!r}: {self.reason}"
        return f"Invalid mutator pattern {self.pattern!r}"


class ProtectedMemberError(MutatorError, AttributeError):
    """A protected member was called from outside its class."""

    def __init__(self, owner: str, name: str) -> None:
        super().__init__(f"The method {owner}.{name}() cannot be called from outside the class.")
        self.owner = owner
        self.name = name


class RetrofitAccessError(MutatorError):
    """A retrofit candidate could not be read or inspected.

    Internal: raised and absorbed by ``DispatchService.retrofit`` so one
    inaccessible object never stops the sweep.
    """

    def __init__(self, label: str, cause: BaseException) -> None:
        super().__init__(f"Cannot inspect retrofit candidate {label}: {cause!r}")
        self.label = label
        self.cause = cause
