"""Server settings and the YAML loader consumed by ``toolwire serve``."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from toolwire import __version__
from toolwire.errors import ConfigError
from toolwire.protocol.models import ServerInfo
from toolwire.tools.catalog import KNOWN_PROVIDERS
from toolwire.tools.context import ProviderConfig


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class ServerSettings(BaseModel):
    """Top-level server configuration."""

    name: str = "toolwire"
    version: str = __version__
    protocol_version: str = "2024-11-05"
    default_region: str = "us-west-2"
    aws_profile: str | None = None
    providers: list[str] = Field(default_factory=lambda: list(KNOWN_PROVIDERS))
    concurrency: Literal["sequential", "concurrent"] = "sequential"
    invoke_timeout: float | None = Field(default=None, gt=0)
    log_file: Path | None = None
    log_level: str = "INFO"
    telemetry: TelemetrySettings | None = None

    @field_validator("providers")
    @classmethod
    def _known_providers(cls, value: list[str]) -> list[str]:
        unknown = [p for p in value if p not in KNOWN_PROVIDERS]
        if unknown:
            msg = f"unknown provider(s): {', '.join(unknown)}"
            raise ValueError(msg)
        return value

    def server_info(self) -> ServerInfo:
        return ServerInfo(name=self.name, version=self.version, protocol_version=self.protocol_version)

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(region=self.default_region, profile=self.aws_profile)


class SettingsLoader:
    """Load and validate a settings YAML file into :class:`ServerSettings`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self, **overrides: Any) -> ServerSettings:
        """Read YAML, interpolate env vars, apply *overrides*, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.  Overrides whose
        value is ``None`` are ignored.

        Raises:
            ConfigError: On unreadable files, YAML errors or validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        return build_settings(data, **overrides)


def build_settings(data: dict[str, Any] | None = None, **overrides: Any) -> ServerSettings:
    """Validate *data* merged with the non-``None`` *overrides*.

    Raises:
        ConfigError: On validation failures.
    """
    merged = {**(data or {}), **{k: v for k, v in overrides.items() if v is not None}}
    try:
        return ServerSettings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
