"""Tests for preferences loading and surgical saves."""

from __future__ import annotations

import yaml

from valechat_tui.preferences import (
    Preferences,
    load_preferences,
    save_preferred_model,
    save_preferred_provider,
)


class TestLoadPreferences:
    def test_first_run_writes_default_file(self, tmp_path):
        path = tmp_path / "prefs" / "tui-preferences.yaml"
        prefs = load_preferences(path)
        assert path.exists()
        assert prefs == Preferences()
        # The generated file parses back to the same defaults.
        assert load_preferences(path) == Preferences()

    def test_values_applied(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text(
            "theme: light\n"
            "tick_rate_ms: 500\n"
            "display:\n"
            "  show_timestamps: false\n"
            "model:\n"
            "  preferred_provider: openai\n"
            "  preferred_model: gpt-4o-mini\n"
            "providers:\n"
            "  openai:\n"
            "    enabled: true\n"
            "  local:\n"
            "    default_model: llama\n"
        )
        prefs = load_preferences(path)
        assert prefs.theme == "light"
        assert prefs.tick_rate == 0.5
        assert prefs.display.show_timestamps is False
        assert prefs.preferred_provider == "openai"
        assert prefs.preferred_model == "gpt-4o-mini"
        assert prefs.providers["openai"].enabled is True
        assert prefs.providers["openai"].default_model == "gpt-4o"
        assert prefs.providers["local"].default_model == "llama"

    def test_unknown_theme_ignored(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text("theme: neon\n")
        assert load_preferences(path).theme == "dark"

    def test_tick_rate_floor(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text("tick_rate_ms: 1\n")
        assert load_preferences(path).tick_rate == 0.01

    def test_invalid_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text("theme: [unclosed\n")
        assert load_preferences(path) == Preferences()

    def test_bad_value_gives_defaults(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text("tick_rate_ms: fast\n")
        assert load_preferences(path) == Preferences()

    def test_defaults_not_shared(self):
        first = Preferences()
        first.providers["echo"].enabled = False
        assert Preferences().providers["echo"].enabled is True


class TestSavePreferences:
    def test_save_provider_preserves_comments(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        load_preferences(path)
        save_preferred_provider("openai", path=path)
        text = path.read_text()
        assert 'preferred_provider: "openai"' in text
        assert "# provider for new conversations" in text
        assert load_preferences(path).preferred_provider == "openai"

    def test_save_model_clears_with_empty(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        save_preferred_model("gpt-4o", path=path)
        assert load_preferences(path).preferred_model == "gpt-4o"
        save_preferred_model("", path=path)
        assert load_preferences(path).preferred_model == ""

    def test_adds_key_to_existing_model_section(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text("theme: dark\nmodel:\n  preferred_provider: echo\n")
        save_preferred_model("echo", path=path)
        data = yaml.safe_load(path.read_text())
        assert data["model"] == {"preferred_provider": "echo", "preferred_model": "echo"}

    def test_adds_model_section(self, tmp_path):
        path = tmp_path / "prefs.yaml"
        path.write_text("theme: light\n")
        save_preferred_provider("echo", path=path)
        data = yaml.safe_load(path.read_text())
        assert data["theme"] == "light"
        assert data["model"]["preferred_provider"] == "echo"
