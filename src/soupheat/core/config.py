"""
SoupHeat settings.

Settings are layered, later layers winning:
- built-in defaults (the dataclasses below)
- one settings file: YAML, TOML or JSON, given explicitly or discovered
- SOUPHEAT_* environment variables

The CLI and the API share one process-wide SoupHeatConfig through
get_config() / set_config().
"""

import json
import logging
import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import yaml

from soupheat.core.constants import (
    DEFAULT_BATCH_PAUSE_SECONDS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_PROGRESS_EVERY,
    MATCH_FILE_EXTENSIONS,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Settings Sections
# ============================================================================


@dataclass
class IngestConfig:
    """Directory scanning and summary ingestion."""

    extensions: list[str] = field(default_factory=lambda: list(MATCH_FILE_EXTENSIONS))
    progress_every: int = DEFAULT_PROGRESS_EVERY


@dataclass
class RetrievalConfig:
    """Single and batch match detail retrieval."""

    batch_size: int = DEFAULT_BATCH_SIZE
    # Pause between batches so large requests don't saturate disk I/O
    pause_seconds: float = DEFAULT_BATCH_PAUSE_SECONDS
    # Off keeps MatchDetail.winning_team as the "Unknown" placeholder
    derive_winning_team: bool = False


@dataclass
class WatcherConfig:
    """Folder watching."""

    debounce_seconds: float = 1.0
    recursive: bool = True


@dataclass
class ExportConfig:
    """File export defaults."""

    default_format: str = "json"
    json_indent: int = 2
    csv_delimiter: str = ","


@dataclass
class LoggingConfig:
    """Root logger setup."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    file: str | None = None
    file_max_bytes: int = 5 * 1024 * 1024
    file_backup_count: int = 3


@dataclass
class ApiConfig:
    """HTTP API."""

    default_root: str | None = None
    job_workers: int = 2


@dataclass
class SoupHeatConfig:
    """All settings sections."""

    ingest: IngestConfig = field(default_factory=IngestConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    watcher: WatcherConfig = field(default_factory=WatcherConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    config_version: str = "1.0"


SECTIONS = tuple(f.name for f in fields(SoupHeatConfig) if f.name != "config_version")


# ============================================================================
# Reading Settings
# ============================================================================


def config_search_paths() -> list[Path]:
    """Candidate settings files, first existing one wins."""
    cwd = Path.cwd()
    home = Path.home()
    xdg = Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config")
    return [
        cwd / "soupheat.yaml",
        cwd / "soupheat.toml",
        cwd / "soupheat.json",
        cwd / ".soupheat.yaml",
        xdg / "soupheat" / "config.yaml",
        xdg / "soupheat" / "config.toml",
        home / ".soupheat.yaml",
    ]


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Read one settings file into a plain dict.

    The format follows the suffix. A missing file or an unknown suffix
    yields an empty dict.
    """
    if not path.is_file():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    elif suffix == ".toml":
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    elif suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
    else:
        logger.warning(f"Ignoring settings file with unsupported suffix: {path}")
        return {}

    logger.info(f"Loaded config from: {path}")
    return data or {}


# Environment variable -> (section, key)
ENV_MAPPINGS: dict[str, tuple[str, str]] = {
    "SOUPHEAT_LOG_LEVEL": ("logging", "level"),
    "SOUPHEAT_LOG_FILE": ("logging", "file"),
    "SOUPHEAT_PROGRESS_EVERY": ("ingest", "progress_every"),
    "SOUPHEAT_BATCH_SIZE": ("retrieval", "batch_size"),
    "SOUPHEAT_BATCH_PAUSE_SECONDS": ("retrieval", "pause_seconds"),
    "SOUPHEAT_DERIVE_WINNING_TEAM": ("retrieval", "derive_winning_team"),
    "SOUPHEAT_WATCH_DEBOUNCE_SECONDS": ("watcher", "debounce_seconds"),
    "SOUPHEAT_EXPORT_FORMAT": ("export", "default_format"),
    "SOUPHEAT_DATA_ROOT": ("api", "default_root"),
    "SOUPHEAT_JOB_WORKERS": ("api", "job_workers"),
}


def _coerce_env_value(raw: str) -> bool | int | float | str:
    """Booleans and numbers are recognized; anything else stays a string."""
    lowered = raw.strip().lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    for number in (int, float):
        try:
            return number(raw)
        except ValueError:
            continue
    return raw


def load_env_config() -> dict[str, Any]:
    """Settings taken from SOUPHEAT_* environment variables, as nested dicts."""
    overrides: dict[str, Any] = {}
    for env_var, (section, key) in ENV_MAPPINGS.items():
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        overrides.setdefault(section, {})[key] = _coerce_env_value(raw)
    return overrides


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into a copy of base; nested dicts merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = (
            merge_configs(current, value)
            if isinstance(current, dict) and isinstance(value, dict)
            else value
        )
    return merged


def dict_to_config(data: dict[str, Any]) -> SoupHeatConfig:
    """Build a SoupHeatConfig from nested dicts. Unknown sections and keys are ignored."""
    config = SoupHeatConfig()

    for section in SECTIONS:
        values = data.get(section)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section)
        known = {f.name for f in fields(target)}
        for key, value in values.items():
            if key in known:
                setattr(target, key, value)
            else:
                logger.debug(f"Ignoring unknown config key: {section}.{key}")

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> SoupHeatConfig:
    """
    Resolve settings from every layer.

    Args:
        config_file: Settings file to use instead of searching for one
        include_env: Apply SOUPHEAT_* environment overrides

    Returns:
        SoupHeatConfig
    """
    if config_file is not None:
        data = read_config_file(Path(config_file))
    else:
        found = next((p for p in config_search_paths() if p.is_file()), None)
        data = read_config_file(found) if found else {}

    if include_env:
        data = merge_configs(data, load_env_config())

    return dict_to_config(data)


# ============================================================================
# Writing Settings
# ============================================================================


def config_to_dict(config: SoupHeatConfig) -> dict[str, Any]:
    """Nested plain-dict form of the settings."""
    return asdict(config)


def save_config(config: SoupHeatConfig, path: Path) -> None:
    """
    Write settings to a .yaml/.yml or .json file.

    Raises:
        ValueError: Unsupported suffix
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    elif suffix == ".json":
        text = json.dumps(data, indent=2)
    else:
        raise ValueError(f"Cannot write settings as {suffix or 'a file without suffix'}; use .yaml or .json")

    path.write_text(text, encoding="utf-8")
    logger.info(f"Saved config to: {path}")


DEFAULT_CONFIG_YAML = """# SoupHeat settings

# Directory scanning and summary ingestion
ingest:
  extensions: [".json"]
  progress_every: 10

# Match detail retrieval
retrieval:
  batch_size: 10
  pause_seconds: 0.01
  derive_winning_team: false  # true derives Blue/Red/Draw from round wins

# Folder watching
watcher:
  debounce_seconds: 1.0
  recursive: true

# Export defaults
export:
  default_format: json
  json_indent: 2
  csv_delimiter: ","

# Logging
logging:
  level: INFO
  # file: /path/to/soupheat.log

# HTTP API
api:
  # default_root: /path/to/matches
  job_workers: 2
"""


def generate_default_config(path: Path) -> None:
    """Write a commented YAML template, or plain defaults for other suffixes."""
    if path.suffix.lower() in (".yaml", ".yml"):
        path.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
        logger.info(f"Wrote settings template to: {path}")
    else:
        save_config(SoupHeatConfig(), path)


# ============================================================================
# Logging Setup
# ============================================================================


def configure_logging(log_config: LoggingConfig | None = None) -> None:
    """Apply logging settings to the root logger."""
    log_config = log_config or get_config().logging
    level = getattr(logging, str(log_config.level).upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_config.file:
        handlers.append(
            RotatingFileHandler(
                log_config.file,
                maxBytes=log_config.file_max_bytes,
                backupCount=log_config.file_backup_count,
            )
        )

    logging.basicConfig(level=level, format=log_config.format, handlers=handlers, force=True)


# ============================================================================
# Process-wide Settings
# ============================================================================

_active_config: SoupHeatConfig | None = None


def get_config() -> SoupHeatConfig:
    """The active settings; resolved from all layers on first use."""
    global _active_config
    if _active_config is None:
        _active_config = load_config()
    return _active_config


def set_config(config: SoupHeatConfig) -> None:
    """Replace the active settings."""
    global _active_config
    _active_config = config


def reset_config() -> None:
    """Forget the active settings; the next get_config() resolves them again."""
    global _active_config
    _active_config = None
