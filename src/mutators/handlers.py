"""Default pattern mutators.

Each one reads the member name out of the key and decides how the value
lands on the target:

    "protected name" -> protected variant, installed through ``implement``
    "linked name"    -> written straight onto the class, no merge or wrap
    "static name"    -> static member, installed through ``extend``
"""

from typing import Any

from mutators.members import protect
from mutators.registry import MatcherRegistry

PROTECTED = r"^protected\s(\w+)"
LINKED = r"^linked\s(\w+)"
STATIC = r"^static\s(\w+)"


def protected_member(target: Any, fn: Any, name: str) -> None:
    target.implement(name, protect(fn))


def linked_member(target: Any, value: Any, name: str) -> None:
    setattr(target, name, value)


def static_member(target: Any, value: Any, name: str) -> None:
    target.extend(name, value)


def install_default_handlers(registry: MatcherRegistry) -> None:
    """Register the protected, linked and static mutators on *registry*."""
    registry.register_pattern(PROTECTED, protected_member)
    registry.register_pattern(LINKED, linked_member)
    registry.register_pattern(STATIC, static_member)
