from pathlib import Path

import pytest

from respawn.utils import (
    CONFIG_FILE_NAME,
    get_admin_build_dir,
    get_project_config_file,
    get_project_root,
)


class TestGetProjectRoot:
    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert get_project_root() == tmp_path.resolve()

    def test_explicit_root_is_resolved(self, tmp_path: Path) -> None:
        (tmp_path / "app").mkdir()

        assert get_project_root(tmp_path / "app" / "..") == tmp_path.resolve()


class TestProjectPaths:
    def test_config_file(self) -> None:
        assert get_project_config_file(Path("/project")) == Path("/project") / CONFIG_FILE_NAME
        assert CONFIG_FILE_NAME == "respawn.toml"

    def test_admin_build_dir(self) -> None:
        assert get_admin_build_dir(Path("/project"), "build") == Path("/project/build")
