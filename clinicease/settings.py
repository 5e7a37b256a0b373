from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import logging
import os

import yaml

SETTINGS_FILENAME = 'clinicease.yaml'
ENV_PREFIX = 'CLINICEASE_'

logger = logging.getLogger('clinicease.settings')


@dataclass(frozen=True)
class DataDirectories:
    root: Path
    prescriptions: Path
    log_file: Path


def _default_settings() -> Dict[str, Any]:
    return {
        'data_dir': 'data',
        'prescriptions_dir': 'prescriptions',
        'log_level': 'INFO',
        'log_file': None,
    }


def _read_settings_file(path: Path) -> Dict[str, Any]:
    try:
        with path.open('r', encoding='utf-8') as handle:
            data = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a mapping", path)
        return {}
    return data


def load_settings(
    config_path: Optional[str | Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Defaults, then the YAML settings file, then CLINICEASE_* variables, then overrides."""
    settings = _default_settings()
    path = Path(config_path) if config_path else Path.cwd() / SETTINGS_FILENAME
    if path.exists():
        for key, value in _read_settings_file(path).items():
            if key in settings and value is not None:
                settings[key] = value
    env = os.environ if environ is None else environ
    for key in settings:
        value = env.get(ENV_PREFIX + key.upper())
        if value:
            settings[key] = value
    for key, value in (overrides or {}).items():
        if key in settings and value is not None:
            settings[key] = value
    settings['log_level'] = str(settings['log_level']).upper()
    return settings


def resolve_data_dirs(settings: Mapping[str, Any]) -> DataDirectories:
    root = Path(settings['data_dir'])
    prescriptions = Path(settings['prescriptions_dir'])
    log_file = Path(settings['log_file']) if settings.get('log_file') else root / 'clinicease.log'
    return DataDirectories(root=root, prescriptions=prescriptions, log_file=log_file)


def ensure_data_dirs(dirs: DataDirectories) -> None:
    """Create the data directory; failures surface later as storage errors."""
    for path in (dirs.root, dirs.log_file.parent):
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Cannot create directory %s: %s", path, exc)
