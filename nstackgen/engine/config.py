"""
nstackgen Configuration — Load and validate nstackgen.yaml and the nstack.json trigger input.

Two sources:
    nstackgen.yaml  — optional tool settings (target dialect, trigger, API, logging)
    nstack.json     — per-project credentials; both values required and non-blank

Usage:
    from nstackgen.engine.config import load_settings, get_settings, parse_nstack_config
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from nstackgen.engine.errors import ConfigError
from nstackgen.models import NStackConfig

PROJECT_ID_FIELD = "nstack_project_id"
API_KEY_FIELD = "nstack_api_key"

SETTINGS_FILE = "nstackgen.yaml"


# ---------------------------------------------------------------------------
# Pydantic models for nstackgen.yaml
# ---------------------------------------------------------------------------

class ApiConfig(BaseModel):
    base_url: str = "https://nstack.io"
    timeout: float = 30.0
    concurrent_fetch: bool = True

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got '{v}'")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout must be positive, got {v}")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ""

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level '{v}'")
        return level


class GeneratorSettings(BaseModel):
    """Root model for nstackgen.yaml."""
    target: str = "dart"
    trigger: str = "nstack.json"
    api: ApiConfig = ApiConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        if v not in ("dart", "python"):
            raise ValueError(f"target must be dart/python, got '{v}'")
        return v

    @field_validator("trigger")
    @classmethod
    def validate_trigger(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("trigger must not be blank")
        if not v.endswith(".json"):
            raise ValueError(f"trigger must name a .json input, got '{v}'")
        return v


# ---------------------------------------------------------------------------
# Settings loading
# ---------------------------------------------------------------------------

_settings: Optional[GeneratorSettings] = None


def load_settings(config_path: Optional[str] = None, **overrides: Any) -> GeneratorSettings:
    """
    Load and validate nstackgen.yaml.

    Args:
        config_path: Explicit path. If None, ``nstackgen.yaml`` in the CWD.
        overrides: Top-level values replacing the file's (e.g. target="python").

    Returns:
        Validated GeneratorSettings; defaults when the file does not exist.

    Raises:
        ConfigError: unreadable YAML or values failing validation.
    """
    global _settings

    path = Path(config_path) if config_path else Path.cwd() / SETTINGS_FILE
    raw: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}", path=str(path)) from e
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must contain a mapping", path=str(path))

    raw.update({k: v for k, v in overrides.items() if v is not None})

    try:
        _settings = GeneratorSettings(**raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ConfigError(
            f"Invalid setting '{field}': {first['msg']}", field=field, path=str(path)
        ) from e
    return _settings


def get_settings() -> GeneratorSettings:
    """Get the currently loaded settings, loading if necessary."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


# ---------------------------------------------------------------------------
# nstack.json
# ---------------------------------------------------------------------------

def parse_nstack_config(content: str) -> NStackConfig:
    """
    Decode the trigger input and extract the project credentials.

    Raises:
        ConfigError: not a JSON object, or a value missing / not a string / blank.
    """
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"nstack.json is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError("nstack.json must contain a JSON object")

    values: Dict[str, str] = {}
    for field in (PROJECT_ID_FIELD, API_KEY_FIELD):
        value = raw.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f'"{field}" not set', field=field)
        values[field] = value

    return NStackConfig(project_id=values[PROJECT_ID_FIELD], api_key=values[API_KEY_FIELD])
