# src/pipeforge/core/config.py
"""
Configuration schema and loading for pipeforge.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from pipeforge.contracts.errors import SettingsError
from pipeforge.core.security.web import DEFAULT_DOMAIN_WHITELIST


class ExecutionSettings(BaseModel):
    """Limits applied by the graph validator and execution engine."""

    model_config = {"frozen": True}

    max_nodes: int = Field(
        default=50,
        gt=0,
        description="Maximum operators per pipe",
    )
    pipe_timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Wall-clock budget for a whole execution, checked between nodes",
    )
    operator_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Budget for a single operator execute() call",
    )
    max_output_bytes: int = Field(
        default=1024 * 1024,
        gt=0,
        description="Serialized size cap for any single node's result",
    )
    max_definition_bytes: int = Field(
        default=100 * 1024,
        gt=0,
        description="Serialized size cap for a pipe definition, enforced at the CLI boundary",
    )


class SecuritySettings(BaseModel):
    """Outbound-request policy for fetch operators."""

    model_config = {"frozen": True}

    domain_whitelist: tuple[str, ...] = Field(
        default=DEFAULT_DOMAIN_WHITELIST,
        description="Hostnames fetch operators may contact (exact match, case-insensitive)",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout for fetch operators",
    )
    user_agent: str = Field(
        default="pipeforge/0.1",
        description="User-Agent header sent by fetch operators",
    )

    @field_validator("domain_whitelist", mode="before")
    @classmethod
    def split_domain_whitelist(cls, v: Any) -> Any:
        """Accept a comma-separated string (the usual env var form) or a list."""
        if isinstance(v, str):
            return tuple(d.strip().lower() for d in v.split(",") if d.strip())
        if isinstance(v, (list, tuple)):
            return tuple(str(d).strip().lower() for d in v if str(d).strip())
        return v


class LoggingSettings(BaseModel):
    model_config = {"frozen": True}

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    json_output: bool = Field(default=False, description="Emit JSON log lines instead of console output")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        normalized = v.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return normalized


class PipeforgeSettings(BaseModel):
    """Top-level pipeforge configuration.

    Every section has defaults, so PipeforgeSettings() is a complete,
    production-shaped configuration.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# ${VAR} or ${VAR:-default}, upper-case names only
_ENV_REF = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _resolve_env_refs(value: Any, key: str = "") -> Any:
    """Substitute ${VAR} references in string values, recursing into containers.

    Raises:
        SettingsError: If a reference has no default and VAR is unset. The
            error names the settings key so a bad YAML line is easy to find.
    """
    if isinstance(value, dict):
        return {k: _resolve_env_refs(v, f"{key}.{k}" if key else str(k)) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_refs(item, f"{key}[{i}]") for i, item in enumerate(value)]
    if not isinstance(value, str):
        return value

    def lookup(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        resolved = os.environ.get(name, default)
        if resolved is None:
            raise SettingsError(f"{key}: environment variable {name} is not set", key=key)
        return resolved

    return _ENV_REF.sub(lookup, value)


def _lower_keys(value: Any) -> Any:
    # Dynaconf uppercases top-level keys (and nested ones set from env vars)
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def load_settings(config_path: Path | None = None) -> PipeforgeSettings:
    """Load settings from an optional YAML file with environment overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (PIPEFORGE_*) - highest priority
    2. Config file (settings.yaml), if given
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: PIPEFORGE_SECURITY__DOMAIN_WHITELIST for
    nested keys.

    Args:
        config_path: Path to YAML configuration file, or None for env + defaults

    Returns:
        Validated PipeforgeSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        SettingsError: If a ${VAR} reference has no default and VAR is unset
        FileNotFoundError: If config_path is given but doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check (Dynaconf silently accepts missing files)
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="PIPEFORGE",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): _lower_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _resolve_env_refs(raw_config)

    return PipeforgeSettings(**raw_config)
