"""Tests for RouteSettings — unified settings with TOML source."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from routemap.config.discovery import find_config
from routemap.config.settings import RouteSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "ROUTEMAP_CONFIG",
        "ROUTEMAP_STORE__BACKEND",
        "ROUTEMAP_STORE__NAMESPACE",
        "ROUTEMAP_REDIS__URL",
        "ROUTEMAP_SERVER__HOST",
        "ROUTEMAP_SERVER__PORT",
    ):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = RouteSettings.from_cli(search_root=tmp_path)
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.verbose is False
        assert settings.store.backend == "redis"
        assert settings.store.namespace == "routemap"
        assert settings.redis.url == "redis://localhost:6379/0"
        assert settings.redis.password is None
        assert settings.server.host == "localhost"
        assert settings.server.port == 1337

    def test_frozen(self, tmp_path: Path) -> None:
        settings = RouteSettings.from_cli(search_root=tmp_path)
        with pytest.raises(Exception):
            settings.verbose = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "routemap.toml").write_text(
            '[store]\nbackend = "memory"\n[server]\nport = 8080\n'
        )
        settings = RouteSettings.from_cli(search_root=tmp_path)
        assert settings.store.backend == "memory"
        assert settings.server.port == 8080
        assert settings.server.host == "localhost"

    def test_walks_up_to_parent(self, tmp_path: Path) -> None:
        (tmp_path / "routemap.toml").write_text('[store]\nnamespace = "maps"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "routemap.toml").resolve()
        assert RouteSettings.from_cli(search_root=nested).store.namespace == "maps"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "maps.toml"
        custom.parent.mkdir()
        custom.write_text('[redis]\nurl = "redis://cache:6379/2"\n')
        settings = RouteSettings.from_cli(config_path=str(custom), search_root=tmp_path)
        assert settings.redis.url == "redis://cache:6379/2"
        assert settings.config_path == custom

    def test_env_var_config_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "elsewhere.toml"
        custom.write_text("[server]\nport = 9000\n")
        monkeypatch.setenv("ROUTEMAP_CONFIG", str(custom))
        assert RouteSettings.from_cli(search_root=tmp_path).server.port == 9000

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "routemap.toml").write_text("[store\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            RouteSettings.from_cli(search_root=tmp_path)

    def test_invalid_backend_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "routemap.toml").write_text('[store]\nbackend = "postgres"\n')
        with pytest.raises(Exception):
            RouteSettings.from_cli(search_root=tmp_path)

    def test_missing_env_config_disables_discovery(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "routemap.toml").write_text("[server]\nport = 8080\n")
        monkeypatch.setenv("ROUTEMAP_CONFIG", str(tmp_path / "gone.toml"))
        assert find_config(tmp_path) is None
        assert RouteSettings.from_cli(search_root=tmp_path).server.port == 1337

    def test_nearest_config_wins(self, tmp_path: Path) -> None:
        (tmp_path / "routemap.toml").write_text("[server]\nport = 8080\n")
        inner = tmp_path / "project"
        inner.mkdir()
        (inner / "routemap.toml").write_text("[server]\nport = 9000\n")
        assert find_config(inner) == (inner / "routemap.toml").resolve()


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "routemap.toml").write_text('[server]\nhost = "0.0.0.0"\nport = 8080\n')
        monkeypatch.setenv("ROUTEMAP_SERVER__PORT", "9090")
        settings = RouteSettings.from_cli(search_root=tmp_path)
        assert settings.server.port == 9090
        assert settings.server.host == "0.0.0.0"

    def test_cli_flags_override_toml(self, tmp_path: Path) -> None:
        (tmp_path / "routemap.toml").write_text("verbose = true\n")
        settings = RouteSettings.from_cli(search_root=tmp_path, verbose=False, json_output=True)
        assert settings.verbose is False
        assert settings.json_output is True
