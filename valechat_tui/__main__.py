"""Entry point for ValeChat TUI CLI."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .core.collaborators import Backend, ProviderConfig
from .log import configure_logging, logger
from .persistence import DATA_DIR, ConversationStore, CredentialFileStore, UsageStore
from .preferences import load_preferences
from .providers import ProviderRouter
from .theme import THEMES

PREFS_FILENAME = "tui-preferences.yaml"
LOG_FILENAME = "tui.log"

# ---------------------------------------------------------------------------
# Environment health checks
# ---------------------------------------------------------------------------

_REQUIRED_LIBS = [
    ("textual", "textual"),
    ("rich", "rich"),
    ("yaml", "PyYAML"),
]

_OPTIONAL_LIBS = [
    ("anthropic", "anthropic"),
    ("openai", "openai"),
]


def build_backend(data_dir: Path, providers: dict[str, ProviderConfig]) -> Backend:
    """Wire the JSON stores and the provider router under *data_dir*."""
    conversations = ConversationStore(data_dir / "conversations.json")
    credentials = CredentialFileStore(data_dir / "credentials.json")
    usage = UsageStore(data_dir / "usage.json")
    router = ProviderRouter(conversations, credentials, usage, providers)
    return Backend(
        conversations=conversations,
        messages=conversations,
        provider=router,
        credentials=credentials,
        usage=usage,
        providers=providers,
    )


def _run_doctor(data_dir: Path) -> None:
    """Print a detailed environment health report and exit."""

    print("ValeChat TUI -- Environment Doctor\n")

    # 1. Python
    print(f"  Python:   {sys.executable} ({sys.version.split()[0]})")

    # 2. Libraries
    print()
    all_ok = True
    for mod_name, pkg_name in _REQUIRED_LIBS:
        try:
            mod = __import__(mod_name)
            ver = getattr(mod, "__version__", "installed")
            print(f"  [ok] {pkg_name:30s}  {ver}")
        except ImportError:
            print(f"  [!!] {pkg_name:30s}  NOT IMPORTABLE")
            all_ok = False
    for mod_name, pkg_name in _OPTIONAL_LIBS:
        try:
            mod = __import__(mod_name)
            ver = getattr(mod, "__version__", "installed")
            print(f"  [ok] {pkg_name:30s}  {ver}")
        except ImportError:
            print(f"  [--] {pkg_name:30s}  not installed (optional)")

    # 3. Data directory and preferences
    print()
    if data_dir.exists():
        print(f"  [ok] {'Data directory':30s}  {data_dir}")
    else:
        print(f"  [--] {'Data directory':30s}  not created yet ({data_dir})")
    prefs = load_preferences(data_dir / PREFS_FILENAME)

    # 4. Providers
    print()
    credentials = CredentialFileStore(data_dir / "credentials.json")
    enabled = [name for name, cfg in prefs.providers.items() if cfg.enabled]
    if not enabled:
        print(f"  [!!] {'Providers':30s}  none enabled")
        all_ok = False
    for name, cfg in prefs.providers.items():
        if not cfg.enabled:
            print(f"  [--] {name:30s}  disabled")
        elif name == "echo" or credentials.get_key(name):
            print(f"  [ok] {name:30s}  {cfg.default_model}")
        else:
            print(f"  [!!] {name:30s}  enabled but no API key")
            all_ok = False

    # Summary
    print()
    if all_ok:
        print("  All checks passed.")
    else:
        print("  Some checks failed.  Try:")
        print("    pip install 'valechat-tui[anthropic,openai]'")
        print("  and set keys from inside the app with /apikey <provider> set <key>")

    sys.exit(0 if all_ok else 1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ValeChat TUI")
    parser.add_argument(
        "--version",
        "-V",
        action="version",
        version=f"valechat-tui {__version__}",
    )
    parser.add_argument(
        "--provider",
        "-p",
        type=str,
        help="Provider for this session (overrides preferences)",
    )
    parser.add_argument(
        "--model",
        "-m",
        type=str,
        help="Model for this session (overrides preferences)",
    )
    parser.add_argument(
        "--theme",
        choices=sorted(THEMES),
        help="Color theme",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Directory for conversations, usage and preferences (default: {DATA_DIR})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level for the log file (default: $VALECHAT_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--tick-rate",
        type=int,
        default=None,
        metavar="MS",
        help="Status bar refresh interval in milliseconds",
    )
    parser.add_argument(
        "--doctor",
        action="store_true",
        help="Check environment health and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run ValeChat TUI."""
    args = build_parser().parse_args(argv)
    data_dir: Path = (args.data_dir or DATA_DIR).expanduser()

    if args.doctor:
        _run_doctor(data_dir)
        return

    configure_logging(args.log_level, data_dir / LOG_FILENAME)
    prefs_path = data_dir / PREFS_FILENAME
    prefs = load_preferences(prefs_path)
    backend = build_backend(data_dir, prefs.providers)
    tick_rate = max(10, args.tick_rate) / 1000 if args.tick_rate else None

    try:
        from .app import run_app

        run_app(
            backend,
            prefs,
            provider=args.provider,
            model=args.model,
            theme_name=args.theme,
            tick_rate=tick_rate,
            preferences_path=prefs_path,
        )
    except (KeyboardInterrupt, SystemExit):
        pass
    except Exception:
        logger.debug("Fatal error in valechat-tui", exc_info=True)
        import traceback

        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
