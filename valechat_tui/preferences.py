"""User preferences for ValeChat TUI.

Loads settings from ~/.valechat/tui-preferences.yaml.
Falls back to sensible defaults if the file doesn't exist or is invalid.
Creates a default file on first run so users can discover and edit it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import DEFAULT_TICK_RATE
from .core.collaborators import ProviderConfig
from .log import logger
from .providers import DEFAULT_PROVIDERS
from .theme import THEMES

PREFS_PATH = Path.home() / ".valechat" / "tui-preferences.yaml"

_DEFAULT_YAML = """\
# ValeChat TUI Preferences
# Delete this file to reset to defaults.

theme: dark                      # dark, light or matrix
tick_rate_ms: 250                # status bar refresh interval

display:
  show_timestamps: true          # show HH:MM timestamps on messages

model:
  preferred_provider: ""         # provider for new conversations (empty = first enabled)
  preferred_model: ""            # model for new conversations (empty = provider default)

providers:
  echo:
    enabled: true                # offline backend that repeats your message
    default_model: echo
  anthropic:
    enabled: false               # needs the anthropic extra and an API key
    default_model: claude-sonnet-4-20250514
  openai:
    enabled: false               # needs the openai extra and an API key
    default_model: gpt-4o
"""


@dataclass
class DisplayPreferences:
    show_timestamps: bool = True


@dataclass
class Preferences:
    theme: str = "dark"
    tick_rate: float = DEFAULT_TICK_RATE
    display: DisplayPreferences = field(default_factory=DisplayPreferences)
    preferred_provider: str = ""
    preferred_model: str = ""
    providers: dict[str, ProviderConfig] = field(
        default_factory=lambda: {
            name: ProviderConfig(cfg.enabled, cfg.default_model)
            for name, cfg in DEFAULT_PROVIDERS.items()
        }
    )


def _apply(prefs: Preferences, data: dict) -> None:
    theme = data.get("theme")
    if isinstance(theme, str) and theme in THEMES:
        prefs.theme = theme
    if "tick_rate_ms" in data:
        prefs.tick_rate = max(10, int(data["tick_rate_ms"])) / 1000
    if isinstance(data.get("display"), dict):
        ddata = data["display"]
        if "show_timestamps" in ddata:
            prefs.display.show_timestamps = bool(ddata["show_timestamps"])
    if isinstance(data.get("model"), dict):
        mdata = data["model"]
        prefs.preferred_provider = str(mdata.get("preferred_provider") or "")
        prefs.preferred_model = str(mdata.get("preferred_model") or "")
    if isinstance(data.get("providers"), dict):
        for name, pdata in data["providers"].items():
            if not isinstance(pdata, dict):
                continue
            config = prefs.providers.setdefault(str(name), ProviderConfig())
            if "enabled" in pdata:
                config.enabled = bool(pdata["enabled"])
            if "default_model" in pdata:
                config.default_model = str(pdata["default_model"] or "")


def load_preferences(path: Path | None = None) -> Preferences:
    """Load preferences from YAML file.

    Falls back to sensible defaults if the file doesn't exist or is invalid.
    Creates a default preferences file on first run.
    """
    path = path or PREFS_PATH
    prefs = Preferences()

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text()) or {}
            if isinstance(data, dict):
                _apply(prefs, data)
        except (OSError, yaml.YAMLError, TypeError, ValueError):
            logger.debug("invalid preferences file %s; using defaults", path, exc_info=True)
            return Preferences()
    else:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(_DEFAULT_YAML)
        except OSError:
            logger.debug("could not create %s", path, exc_info=True)

    return prefs


def _save_model_key(key: str, value: str, path: Path | None) -> None:
    """Surgically update ``model.<key>``, preserving comments and other sections."""
    path = path or PREFS_PATH
    try:
        if path.exists():
            text = path.read_text()
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            text = _DEFAULT_YAML

        quoted = f'"{value}"' if value else '""'
        if re.search(rf"^[ \t]+{key}:", text, re.MULTILINE):
            text = re.sub(
                rf"^([ \t]+{key}:)[^#\n]*?([ \t]*#.*)?$",
                lambda m: f"{m.group(1)} {quoted}{m.group(2) or ''}",
                text,
                count=1,
                flags=re.MULTILINE,
            )
        elif re.search(r"^model:", text, re.MULTILINE):
            text = re.sub(
                r"^(model:.*)$",
                lambda m: f"{m.group(1)}\n  {key}: {quoted}",
                text,
                count=1,
                flags=re.MULTILINE,
            )
        else:
            text = text.rstrip() + f"\n\nmodel:\n  {key}: {quoted}\n"

        path.write_text(text)
    except OSError:
        logger.debug("could not save %s to %s", key, path, exc_info=True)


def save_preferred_provider(provider: str, path: Path | None = None) -> None:
    """Persist the provider chosen with /provider."""
    _save_model_key("preferred_provider", provider, path)


def save_preferred_model(model: str, path: Path | None = None) -> None:
    """Persist the model chosen with /model."""
    _save_model_key("preferred_model", model, path)
