"""Settings for the tutor: defaults, an optional YAML file, then environment overrides."""
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

import yaml

from satact_tutor.catalog import CONTENT_DIR
from satact_tutor.db import DEFAULT_DB_PATH

ENV_CONFIG = "SATACT_TUTOR_CONFIG"
ENV_DB_PATH = "SATACT_TUTOR_DB"
ENV_LOG_LEVEL = "SATACT_TUTOR_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB_PATH
    content_dir: str = str(CONTENT_DIR)
    log_level: str = "WARNING"
    practice_question_count: int = 10
    recommended_limit: int = 3


def load_settings(path: Optional[str] = None) -> Settings:
    """Build Settings from defaults, an optional YAML file and the environment.

    Args:
        path: Optional YAML file whose top-level keys match Settings fields.

    Returns:
        The merged Settings. Environment variables win over the file.
    """
    settings = Settings()
    if path:
        with Path(path).open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        unknown = sorted(set(data) - {f.name for f in fields(Settings)})
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        settings = replace(settings, **data)
    env = {}
    if os.environ.get(ENV_DB_PATH):
        env["db_path"] = os.environ[ENV_DB_PATH]
    if os.environ.get(ENV_LOG_LEVEL):
        env["log_level"] = os.environ[ENV_LOG_LEVEL].upper()
    settings = replace(settings, **env)
    if settings.practice_question_count < 1:
        raise ValueError("practice_question_count must be at least 1")
    return settings
