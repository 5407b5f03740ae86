from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from respawn.config import safe_load_config

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


class TestSafeLoadConfig:
    def test_success(self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RESPAWN_STRICT_CONFIG", raising=False)
        fs.create_file("/project/respawn.toml", contents="[develop]\nport = 4000\n")

        config, error = safe_load_config(project_root=Path("/project"))

        assert error is None
        assert config.develop.port == 4000

    def test_invalid_config_warns_and_falls_back(
        self,
        fs: FakeFilesystem,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.delenv("RESPAWN_STRICT_CONFIG", raising=False)
        fs.create_file("/project/respawn.toml", contents="[develop]\nport = -1\n")

        config, error = safe_load_config(project_root=Path("/project"))

        assert error is not None
        assert "develop.port" in error
        assert config.develop.port == 1337
        assert "Warning:" in capsys.readouterr().err

    def test_strict_mode_exits(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RESPAWN_STRICT_CONFIG", "1")
        fs.create_file("/project/respawn.toml", contents="[develop\n")

        with pytest.raises(SystemExit) as exc_info:
            _ = safe_load_config(project_root=Path("/project"))

        assert exc_info.value.code == 1

    def test_explicit_missing_file_exits(self, fs: FakeFilesystem) -> None:
        fs.create_dir("/project")

        with pytest.raises(SystemExit) as exc_info:
            _ = safe_load_config(config_path=Path("/project/other.toml"))

        assert exc_info.value.code == 1

    def test_explicit_file_with_overrides(self, fs: FakeFilesystem) -> None:
        fs.create_file("/project/other.toml", contents="[develop]\nport = 4000\n")

        config, error = safe_load_config(
            config_path=Path("/project/other.toml"),
            cli_overrides={"logging": {"level": "debug"}},
        )

        assert error is None
        assert config.develop.port == 4000
        assert config.logging.level.value == "debug"
