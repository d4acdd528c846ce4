# tests/test_settings.py
"""Tests for SettingsManager loading, validation and persistence."""

import json

import pytest

from folderterm.settings.config import DefaultSettings
from folderterm.settings.manager import SettingsManager, SettingsValidator
from folderterm.utils.exceptions import ConfigValidationError


@pytest.fixture
def settings_file(tmp_path):
    return tmp_path / "config" / "settings.json"


class TestSettingsValidator:
    """Individual setting checks."""

    def setup_method(self):
        self.validator = SettingsValidator()

    @pytest.mark.parametrize(
        "key,value",
        [
            ("use_login_shell", False),
            ("fallback_shell", "/bin/bash"),
            ("terminate_timeout", 0),
            ("terminate_timeout", 1.5),
            ("tree_root", ""),
            ("console_log_level", "DEBUG"),
        ],
    )
    def test_valid_values(self, key, value):
        assert self.validator.validate(key, value) is None

    @pytest.mark.parametrize(
        "key,value",
        [
            ("use_login_shell", "yes"),
            ("fallback_shell", "zsh"),
            ("terminate_timeout", -1),
            ("terminate_timeout", True),
            ("tree_root", None),
            ("console_log_level", "LOUD"),
        ],
    )
    def test_invalid_values(self, key, value):
        assert self.validator.validate(key, value)

    def test_unknown_keys_pass(self):
        assert self.validator.validate("something_else", object()) is None


class TestSettingsManager:
    """Loading, repair and saving of the settings file."""

    def test_missing_file_gives_defaults(self, settings_file):
        manager = SettingsManager(settings_file)

        for key, value in DefaultSettings.get_defaults().items():
            assert manager.get(key) == value

    def test_corrupt_file_gives_defaults(self, settings_file):
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("{broken", encoding="utf-8")

        manager = SettingsManager(settings_file)

        assert manager.get("use_login_shell") is True

    def test_non_object_root_gives_defaults(self, settings_file):
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("[1, 2]", encoding="utf-8")

        assert SettingsManager(settings_file).get("fallback_shell") == "/bin/zsh"

    def test_invalid_values_are_repaired(self, settings_file):
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text(
            json.dumps({"terminate_timeout": "soon", "fallback_shell": "/bin/fish"}),
            encoding="utf-8",
        )

        manager = SettingsManager(settings_file)

        assert manager.get("terminate_timeout") == 0.2
        assert manager.get("fallback_shell") == "/bin/fish"
        assert manager.is_dirty

    def test_set_rejects_invalid_value(self, settings_file):
        manager = SettingsManager(settings_file)

        with pytest.raises(ConfigValidationError):
            manager.set("use_login_shell", "no")
        assert manager.get("use_login_shell") is True

    def test_set_persists_and_notifies(self, settings_file):
        manager = SettingsManager(settings_file)
        changes = []
        manager.add_change_listener(lambda *change: changes.append(change))

        manager.set("open_home_on_startup", False)

        assert changes == [("open_home_on_startup", True, False)]
        assert json.loads(settings_file.read_text())["open_home_on_startup"] is False
        assert not manager.is_dirty
        assert SettingsManager(settings_file).get("open_home_on_startup") is False

    def test_save_leaves_no_temp_file(self, settings_file):
        manager = SettingsManager(settings_file)

        assert manager.save_settings(force=True) is True
        assert not settings_file.with_suffix(".tmp").exists()

    def test_save_failure_returns_false(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        manager = SettingsManager(blocker / "settings.json")

        assert manager.save_settings(force=True) is False

    def test_reset_to_defaults(self, settings_file):
        manager = SettingsManager(settings_file)
        manager.set("tree_root", "/srv")

        manager.reset_to_defaults(["tree_root"])

        assert manager.get("tree_root") == ""
