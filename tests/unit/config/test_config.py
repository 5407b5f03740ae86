# pyright: reportAny=false
import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from respawn.config import Config, ConfigSourceName, LogFormat, LogLevel
from respawn.exceptions import ConfigLoadError, ConfigValidationError

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in list(os.environ):
        if key.startswith("RESPAWN_"):
            monkeypatch.delenv(key)
    return monkeypatch


class TestConfigDefaults:
    def test_defaults(self) -> None:
        config = Config.from_dict({})

        assert config.logging.level is LogLevel.INFO
        assert config.logging.format is LogFormat.TEXT
        assert config.admin.serve_admin_panel is True
        assert config.admin.watch_ignore_files == ()
        assert config.develop.port == 1337
        assert config.develop.polling is False
        assert config.develop.build_command[:2] == ("npm", "run")

    def test_get_dotted_key(self) -> None:
        config = Config.from_dict({"develop": {"port": 4000}})

        assert config.get("develop.port") == 4000
        assert config.get("develop.missing", "fallback") == "fallback"
        assert config.get("develop.port.deeper") is None

    def test_to_dict_returns_copy(self) -> None:
        config = Config.from_dict({})

        data = config.to_dict()
        data["develop"]["port"] = 1

        assert config.get("develop.port") == 1337


class TestConfigValidation:
    def test_invalid_level_maps_to_dotted_key(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_dict({"logging": {"level": "loud"}})

        assert exc_info.value.key == "logging.level"
        assert exc_info.value.value == "loud"

    def test_port_out_of_range(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_dict({"develop": {"port": 70000}})

        assert exc_info.value.key == "develop.port"

    def test_nested_admin_section(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_dict({"server": {"admin": {"serve_admin_panel": "maybe"}}})

        assert exc_info.value.key == "server.admin.serve_admin_panel"

    def test_section_must_be_a_table(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_dict({"develop": 3})

        assert exc_info.value.key == "develop"
        assert exc_info.value.expected == "table"

    def test_rotation_settings(self) -> None:
        config = Config.from_dict({"logging": {"max_bytes": 1_048_576, "backup_count": 3}})

        assert config.logging.max_bytes == 1_048_576
        assert config.logging.backup_count == 3

    def test_negative_rotation_size_rejected(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_dict({"logging": {"max_bytes": -1}})

        assert exc_info.value.key == "logging.max_bytes"

    def test_unknown_keys_are_ignored(self) -> None:
        config = Config.from_dict({"develop": {"turbo": True}})

        assert config.develop.port == 1337


class TestConfigFromFile:
    def test_loads_file_over_defaults(self, fs: FakeFilesystem) -> None:
        fs.create_file(
            "/project/custom.toml",
            contents='[develop]\napp = "api.main:create_app"\n\n[server.admin]\nwatch_ignore_files = ["**/*.log"]\n',
        )

        config = Config.from_file(Path("/project/custom.toml"))

        assert config.develop.app == "api.main:create_app"
        assert config.develop.port == 1337
        assert config.admin.watch_ignore_files == ("**/*.log",)
        assert [s.name for s in config.sources] == [ConfigSourceName.PROJECT]

    def test_overrides_apply_on_top(self, fs: FakeFilesystem) -> None:
        fs.create_file("/project/custom.toml", contents='[logging]\nlevel = "error"\n')

        config = Config.from_file(
            Path("/project/custom.toml"), overrides={"logging": {"level": "debug"}}
        )

        assert config.logging.level is LogLevel.DEBUG
        assert [s.name for s in config.sources] == [
            ConfigSourceName.CLI,
            ConfigSourceName.PROJECT,
        ]

    def test_validation_error_names_file(self, fs: FakeFilesystem) -> None:
        fs.create_file("/project/custom.toml", contents="[develop]\npoll_delay_ms = 0\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_file(Path("/project/custom.toml"))

        assert exc_info.value.source == "/project/custom.toml"

    def test_invalid_toml(self, fs: FakeFilesystem) -> None:
        fs.create_file("/project/custom.toml", contents="develop = [\n")

        with pytest.raises(ConfigLoadError):
            _ = Config.from_file(Path("/project/custom.toml"))


class TestConfigLoad:
    def test_precedence(self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch) -> None:
        fs.create_file(
            "/project/respawn.toml",
            contents="[develop]\nport = 2000\nhost = \"0.0.0.0\"\npolling = true\n",
        )
        clean_env.setenv("RESPAWN_DEVELOP__PORT", "3000")
        clean_env.setenv("RESPAWN_DEVELOP__HOST", "localhost")

        config = Config.load(
            project_root=Path("/project"),
            include_cli=True,
            cli_overrides={"develop": {"port": 4000}},
        )

        assert config.develop.port == 4000
        assert config.develop.host == "localhost"
        assert config.develop.polling is True
        assert config.develop.poll_delay_ms == 300

    def test_missing_project_file_uses_defaults(
        self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch
    ) -> None:
        fs.create_dir("/project")

        config = Config.load(project_root=Path("/project"))

        assert config.develop.port == 1337
        project = next(s for s in config.sources if s.name is ConfigSourceName.PROJECT)
        assert project.exists is False

    def test_env_can_be_excluded(self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch) -> None:
        fs.create_dir("/project")
        clean_env.setenv("RESPAWN_DEVELOP__PORT", "3000")

        config = Config.load(project_root=Path("/project"), include_env=False)

        assert config.develop.port == 1337

    def test_sources_are_highest_first(
        self, fs: FakeFilesystem, clean_env: pytest.MonkeyPatch
    ) -> None:
        fs.create_dir("/project")

        config = Config.load(
            project_root=Path("/project"), include_cli=True, cli_overrides={"a": 1}
        )

        assert [s.name for s in config.sources] == [
            ConfigSourceName.CLI,
            ConfigSourceName.ENV,
            ConfigSourceName.PROJECT,
            ConfigSourceName.DEFAULT,
        ]
