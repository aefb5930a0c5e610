"""Dispatcher configuration.

DispatchConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, validated once at construction.
"""

from dataclasses import dataclass

from mutators.errors import ConfigurationError

MATCH_MODES: frozenset[str] = frozenset({"search", "match", "fullmatch"})


@dataclass(frozen=True, slots=True)
class DispatchConfig:
    """Dispatcher configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = DispatchConfig(match_mode="fullmatch", install_defaults=False)
    """

    # Prefix of the handler-map key derived from a pattern
    key_prefix: str = "$mutator:"

    # Which ``re.Pattern`` method decides a match ("search" keeps patterns
    # responsible for their own anchors)
    match_mode: str = "search"

    # Seed the registry with the protected/linked/static handlers
    install_defaults: bool = True

    # Installation operation first, then its aliases
    install_names: tuple[str, ...] = ("implement", "install")

    def __post_init__(self) -> None:
        if self.match_mode not in MATCH_MODES:
            allowed = ", ".join(sorted(MATCH_MODES))
            msg = f"Unknown match_mode {self.match_mode!r}. Expected one of: {allowed}"
            raise ConfigurationError(msg)
        if not self.key_prefix:
            msg = "key_prefix must be a non-empty string."
            raise ConfigurationError(msg)
        if not self.install_names:
            msg = "install_names must name at least the installation operation."
            raise ConfigurationError(msg)
