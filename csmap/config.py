"""Configuration loading for csmap (.csmap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".csmap.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ClassificationConfig:
    """Extra base type names merged into the built-in classifier sets."""

    lifecycle_types: List[str] = field(default_factory=list)
    asset_types: List[str] = field(default_factory=list)
    tooling_types: List[str] = field(default_factory=list)


@dataclass
class CSMapConfig:
    """Represents the settings defined in .csmap.yml."""

    root: Path
    exclude_dirs: List[str] = field(default_factory=list)
    exclude_extensions: List[str] = field(default_factory=list)
    exclude_paths: List[str] = field(default_factory=list)
    respect_gitignore: bool = False
    external_namespaces: List[str] = field(default_factory=list)
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    workers: int = 1


def load_config(config_path: Path) -> CSMapConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return CSMapConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    classification_data = _as_dict(data.get("classification"))
    classification = ClassificationConfig()
    if classification_data:
        classification.lifecycle_types = _as_str_list(classification_data.get("lifecycle_types"))
        classification.asset_types = _as_str_list(classification_data.get("asset_types"))
        classification.tooling_types = _as_str_list(classification_data.get("tooling_types"))

    workers = _as_int(data.get("workers"))
    if workers is not None and workers < 1:
        raise ConfigError("workers must be a positive integer")

    return CSMapConfig(
        root=root,
        exclude_dirs=_as_str_list(data.get("exclude_dirs")),
        exclude_extensions=[_normalise_extension(ext) for ext in _as_str_list(data.get("exclude_extensions"))],
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        respect_gitignore=_as_bool(data.get("respect_gitignore")) or False,
        external_namespaces=_as_str_list(data.get("external_namespaces")),
        classification=classification,
        workers=workers or 1,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILENAME", "ClassificationConfig", "ConfigError", "CSMapConfig", "load_config"]
