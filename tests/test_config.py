"""Tests for mutators.config — DispatchConfig frozen dataclass."""

import pytest

from mutators.config import DispatchConfig
from mutators.errors import ConfigurationError


class TestDispatchConfig:
    def test_defaults(self) -> None:
        cfg = DispatchConfig()

        assert cfg.key_prefix == "$mutator:"
        assert cfg.match_mode == "search"
        assert cfg.install_defaults is True
        assert cfg.install_names == ("implement", "install")

    def test_override(self) -> None:
        cfg = DispatchConfig(key_prefix="@", match_mode="fullmatch", install_defaults=False)

        assert cfg.key_prefix == "@"
        assert cfg.match_mode == "fullmatch"
        assert cfg.install_defaults is False

    def test_frozen(self) -> None:
        cfg = DispatchConfig()

        with pytest.raises(AttributeError):
            cfg.match_mode = "match"  # type: ignore[misc]

    @pytest.mark.parametrize("mode", ["search", "match", "fullmatch"])
    def test_known_match_modes(self, mode: str) -> None:
        assert DispatchConfig(match_mode=mode).match_mode == mode

    def test_unknown_match_mode(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown match_mode 'glob'"):
            DispatchConfig(match_mode="glob")

    def test_empty_prefix(self) -> None:
        with pytest.raises(ConfigurationError, match="key_prefix"):
            DispatchConfig(key_prefix="")

    def test_empty_install_names(self) -> None:
        with pytest.raises(ConfigurationError, match="install_names"):
            DispatchConfig(install_names=())
