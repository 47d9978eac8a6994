"""Configuration loading, merging, and interactive creation."""

from __future__ import annotations

import logging
import os
import pathlib
import tomllib


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.toml"

_DEFAULTS: dict[str, object] = {
    "music_dir": "~/Music",
    "farm_dir": "~/MusicFarm",
    "hardlink": False,
    "dry_run": False,
}

_PATH_KEYS = {"music_dir", "farm_dir"}
_BOOL_KEYS = {"hardlink", "dry_run"}


def _config_dir() -> pathlib.Path:
    """Return the tagfarm config directory."""
    base = pathlib.Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
    return base / "tagfarm"


def expand_dir(expr: str) -> pathlib.Path:
    """Expand a shell-style directory expression like ``$HOME/music`` or ``~/music``."""
    return pathlib.Path(os.path.expandvars(expr)).expanduser()


def load_config(config_dir: pathlib.Path | None = None) -> dict:
    """Load config.toml and return its contents as a dict.

    Returns {} if no file exists or on parse error.
    """
    if config_dir is None:
        config_dir = _config_dir()
    path = config_dir / CONFIG_FILENAME
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"ignoring unreadable config {path}: {e}")
        return {}


def merge_config_into_args(args, config: dict) -> None:
    """Three-layer merge: CLI > config > hardcoded defaults.

    Mutates *args* in place.
    """
    for key in _PATH_KEYS:
        cli_val = getattr(args, key, None)
        if cli_val is not None:
            continue
        cfg_val = config.get(key)
        if cfg_val is not None:
            setattr(args, key, expand_dir(str(cfg_val)))
        else:
            setattr(args, key, expand_dir(str(_DEFAULTS[key])))

    for key in _BOOL_KEYS:
        cli_val = getattr(args, key, None)
        if cli_val is not None:
            continue
        cfg_val = config.get(key)
        if cfg_val is not None:
            setattr(args, key, bool(cfg_val))
        else:
            setattr(args, key, _DEFAULTS[key])


def create_config_interactive(
    config_dir: pathlib.Path | None = None,
    input_fn=input,
    print_fn=print,
) -> pathlib.Path:
    """Interactively create or update config.toml.

    Returns the path to the written config file.
    """
    if config_dir is None:
        config_dir = _config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    existing = load_config(config_dir)

    settings: list[tuple[str, str, str]] = [
        ("music_dir", "Music directory to scan", str(_DEFAULTS["music_dir"])),
        ("farm_dir", "Link farm directory", str(_DEFAULTS["farm_dir"])),
        ("hardlink", "Use hardlinks instead of symlinks (true/false)", str(_DEFAULTS["hardlink"]).lower()),
        ("dry_run", "Dry run (true/false)", str(_DEFAULTS["dry_run"]).lower()),
    ]

    result: dict[str, object] = {}

    for key, label, hardcoded_default in settings:
        default = existing.get(key, hardcoded_default)
        if isinstance(default, bool):
            default = str(default).lower()
        value = input_fn(f"  {label} [{default}]: ").strip()
        if not value:
            value = str(default)
        if key in _BOOL_KEYS:
            result[key] = value.lower() in ("true", "1", "yes")
        else:
            result[key] = value

    # Remove boolean defaults that are False to keep config clean
    for key in _BOOL_KEYS:
        if key in result and result[key] is False:
            del result[key]

    path = config_dir / CONFIG_FILENAME
    path.write_text(_to_toml(result))
    print_fn(f"Configuration saved to {path}")
    return path


def _to_toml(data: dict) -> str:
    """Serialize a flat dict to TOML format."""
    lines: list[str] = []
    for key, value in data.items():
        if isinstance(value, bool):
            lines.append(f"{key} = {str(value).lower()}")
        elif isinstance(value, str):
            escaped = value.replace("\\", "\\\\").replace('"', '\\"')
            lines.append(f'{key} = "{escaped}"')
        elif value is None:
            continue
        else:
            lines.append(f"{key} = {value}")
    return "\n".join(lines) + "\n" if lines else ""
