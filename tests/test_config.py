"""
Tests for atask configuration loading.

Each test runs with HOME and the working directory pointed at a temporary
directory, so no real user config is read.
"""
import os
from pathlib import Path

import pytest
import tomli

import atask.config
from atask.config import AtaskConfig, get_config, init_config, user_config_path
from atask.query import EvalConfig


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Empty HOME, empty working directory, no ATASK_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for key in list(os.environ):
        if key.startswith("ATASK_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(atask.config, "_config", None)
    return tmp_path


def write_user_config(text):
    path = user_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestDefaults:
    """Defaults when no file or variable is present."""

    def test_defaults(self):
        config = AtaskConfig.load()
        assert config.notes_directory == os.path.expanduser("~/notes")
        assert config.soon_horizon == 3
        assert config.filter_workers == 1
        assert config.default_sort == "modified"
        assert config.output_format == "table"
        assert config.color_output is True
        assert config.log_level == "WARNING"

    def test_user_config_path_follows_home(self, isolated):
        assert user_config_path() == isolated / "home" / ".config" / "atask" / "config.toml"

    def test_keys(self):
        assert AtaskConfig.keys() == [
            "notes_directory", "soon_horizon", "filter_workers", "default_sort",
            "output_format", "color_output", "log_level",
        ]


class TestFileHierarchy:
    """User, local and explicit files."""

    def test_user_config(self):
        write_user_config('soon_horizon = 5\nnotes_directory = "/data/notes"\n')
        config = AtaskConfig.load()
        assert config.soon_horizon == 5
        assert config.notes_directory == "/data/notes"

    def test_local_atask_toml(self):
        Path("atask.toml").write_text("filter_workers = 4\n")
        assert AtaskConfig.load().filter_workers == 4

    def test_local_ataskrc(self):
        Path(".ataskrc").write_text('default_sort = "due"\n')
        assert AtaskConfig.load().default_sort == "due"

    def test_local_dot_directory(self):
        Path(".atask").mkdir()
        Path(".atask/config.toml").write_text('output_format = "json"\n')
        assert AtaskConfig.load().output_format == "json"

    def test_only_first_local_file_is_used(self):
        Path("atask.toml").write_text("soon_horizon = 1\n")
        Path(".ataskrc").write_text("soon_horizon = 2\nfilter_workers = 3\n")
        config = AtaskConfig.load()
        assert config.soon_horizon == 1
        assert config.filter_workers == 1

    def test_local_overrides_user(self):
        write_user_config("soon_horizon = 5\nfilter_workers = 2\n")
        Path("atask.toml").write_text("soon_horizon = 7\n")
        config = AtaskConfig.load()
        assert config.soon_horizon == 7
        assert config.filter_workers == 2

    def test_explicit_file_overrides_local(self, isolated):
        Path("atask.toml").write_text("soon_horizon = 7\n")
        explicit = isolated / "explicit.toml"
        explicit.write_text("soon_horizon = 9\n")
        assert AtaskConfig.load(explicit).soon_horizon == 9

    def test_missing_explicit_file_is_ignored(self, isolated):
        assert AtaskConfig.load(isolated / "nope.toml").soon_horizon == 3

    def test_unknown_keys_ignored(self):
        Path("atask.toml").write_text('colour = "red"\nsoon_horizon = 4\n')
        config = AtaskConfig.load()
        assert config.soon_horizon == 4
        assert not hasattr(config, "colour")

    def test_invalid_toml(self):
        Path("atask.toml").write_text("soon_horizon = \n")
        with pytest.raises(tomli.TOMLDecodeError):
            AtaskConfig.load()


class TestEnvironment:
    """ATASK_* variables."""

    def test_env_overrides_files(self, monkeypatch):
        Path("atask.toml").write_text("soon_horizon = 7\n")
        monkeypatch.setenv("ATASK_SOON_HORIZON", "10")
        assert AtaskConfig.load().soon_horizon == 10

    def test_env_types(self, monkeypatch):
        monkeypatch.setenv("ATASK_COLOR_OUTPUT", "false")
        monkeypatch.setenv("ATASK_FILTER_WORKERS", "8")
        monkeypatch.setenv("ATASK_NOTES_DIRECTORY", "~/tasks")
        config = AtaskConfig.load()
        assert config.color_output is False
        assert config.filter_workers == 8
        assert config.notes_directory == os.path.expanduser("~/tasks")

    def test_unknown_env_ignored(self, monkeypatch):
        monkeypatch.setenv("ATASK_SOMETHING_ELSE", "1")
        AtaskConfig.load()

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("ATASK_SOON_HORIZON", "soon")
        with pytest.raises(ValueError):
            AtaskConfig.load()


class TestValidation:
    """Values rejected before they reach the evaluator."""

    def test_negative_horizon(self):
        Path("atask.toml").write_text("soon_horizon = -1\n")
        with pytest.raises(ValueError, match="soon_horizon"):
            AtaskConfig.load()

    def test_zero_workers(self):
        with pytest.raises(ValueError, match="filter_workers"):
            AtaskConfig(filter_workers=0).validate()

    def test_unknown_sort(self):
        with pytest.raises(ValueError, match="default_sort"):
            AtaskConfig(default_sort="random").validate()


class TestSetValue:
    """String conversion used by env vars and `atask config set`."""

    def test_int(self):
        config = AtaskConfig()
        config.set_value("soon_horizon", "5")
        assert config.soon_horizon == 5

    @pytest.mark.parametrize("text,expected", [
        ("true", True), ("1", True), ("yes", True), ("False", False), ("no", False),
    ])
    def test_bool(self, text, expected):
        config = AtaskConfig()
        config.set_value("color_output", text)
        assert config.color_output is expected

    def test_string(self):
        config = AtaskConfig()
        config.set_value("log_level", "DEBUG")
        assert config.log_level == "DEBUG"

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            AtaskConfig().set_value("validate", "x")


class TestSaveAndHelpers:
    """Persistence and derived values."""

    def test_save_round_trip(self, isolated):
        path = isolated / "saved" / "config.toml"
        AtaskConfig(soon_horizon=6, default_sort="due", color_output=False).save(path)
        config = AtaskConfig.load(path)
        assert config.soon_horizon == 6
        assert config.default_sort == "due"
        assert config.color_output is False

    def test_save_defaults_to_user_path(self):
        AtaskConfig(filter_workers=3).save()
        assert user_config_path().exists()
        assert AtaskConfig.load().filter_workers == 3

    def test_relative_notes_path(self, isolated):
        config = AtaskConfig(notes_directory="notes")
        assert config.get_notes_path() == isolated / "work" / "notes"

    def test_eval_config(self):
        eval_config = AtaskConfig(soon_horizon=5).eval_config()
        assert isinstance(eval_config, EvalConfig)
        assert eval_config.soon_horizon == 5


class TestGlobalConfig:
    """Module-level accessors."""

    def test_get_config_caches(self):
        assert get_config() is get_config()

    def test_reload(self):
        first = get_config()
        assert get_config(reload=True) is not first

    def test_init_config_overrides(self, isolated):
        config = init_config(notes_directory="~/elsewhere", soon_horizon=2, output_format=None)
        assert config.notes_directory == str(isolated / "home" / "elsewhere")
        assert config.soon_horizon == 2
        assert config.output_format == "table"

    def test_init_config_with_file(self, isolated):
        path = isolated / "explicit.toml"
        path.write_text("filter_workers = 5\n")
        get_config()
        assert init_config(config_file=path).filter_workers == 5

    def test_init_config_validates(self):
        with pytest.raises(ValueError):
            init_config(soon_horizon=-2)
