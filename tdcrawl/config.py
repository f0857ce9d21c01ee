"""Configuration loading for tdcrawl (.tdcrawl.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".tdcrawl.yml"

ENV_TOKEN_KEYS = ("TDCRAWL_TOKEN", "BITBUCKET_TOKEN")
ENV_HOST_KEYS = ("TDCRAWL_HOST", "BITBUCKET_HOST")


@dataclass
class CrawlerConfig:
    """Settings for one crawl run.

    Defaults match the handset automation layout the crawler was written for:
    repositories named ``automation_*`` in the ``MOBAUTOMAT`` project, with
    feature tests under ``.../<feature>/test``.
    """

    host: str = ""
    project_key: str = "MOBAUTOMAT"
    branch: str = "develop"
    token: str = ""
    page_limit: int = 100
    threads: int = 8
    root_path: str = "src/test/java/com/bofa/mda/handsets"
    repo_prefix: str = "automation_"
    namespace: str = "com.bofa.mda.handsets"
    marker: str = "TestData"
    extension: str = ".java"
    sentinel: str = "test"
    request_timeout: float = 30.0

    def validate(self) -> "CrawlerConfig":
        """Raise ConfigError unless the settings are usable for a run."""
        if not self.host:
            raise ConfigError(
                "Bitbucket host is not configured. Set 'host' in .tdcrawl.yml or TDCRAWL_HOST."
            )
        if not self.token:
            raise ConfigError(
                "Bitbucket token is not configured. Set 'token' in .tdcrawl.yml or TDCRAWL_TOKEN."
            )
        if not self.project_key:
            raise ConfigError("'project_key' must not be empty")
        for name in ("page_limit", "threads"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"'{name}' must be a positive integer")
        if self.request_timeout <= 0:
            raise ConfigError("'request_timeout' must be positive")
        if not self.marker or not self.sentinel:
            raise ConfigError("'marker' and 'sentinel' must not be empty")
        return self


def load_config(config_path: Path | None = None, *, env: Mapping[str, str] | None = None) -> CrawlerConfig:
    """Load configuration from disk, applying environment overrides."""
    environ = os.environ if env is None else env
    config = CrawlerConfig()

    if config_path is not None:
        config_file = _resolve_config_path(config_path)
        if config_file.exists():
            data = _read_config(config_file)
            if not isinstance(data, dict):
                raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
            _apply(config, data)

    token = _first_env_value(environ, ENV_TOKEN_KEYS)
    if token:
        config.token = token
    host = _first_env_value(environ, ENV_HOST_KEYS)
    if host:
        config.host = host
    config.host = config.host.rstrip("/")
    return config


def _apply(config: CrawlerConfig, data: Dict[str, Any]) -> None:
    for key in (
        "host",
        "project_key",
        "branch",
        "token",
        "root_path",
        "repo_prefix",
        "namespace",
        "marker",
        "extension",
        "sentinel",
    ):
        value = _as_str(data.get(key))
        if value is not None:
            setattr(config, key, value)

    for key in ("page_limit", "threads"):
        if key in data and data[key] is not None:
            number = _as_int(data[key])
            if number is None:
                raise ConfigError(f"'{key}' must be an integer")
            setattr(config, key, number)

    if data.get("request_timeout") is not None:
        timeout = _as_float(data["request_timeout"])
        if timeout is None:
            raise ConfigError("'request_timeout' must be a number")
        config.request_timeout = timeout

    config.root_path = config.root_path.strip("/")


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _first_env_value(environ: Mapping[str, str], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = environ.get(key)
        if value:
            return value
    return None


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value) if isinstance(value, (str, int, float)) else None


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


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


__all__ = ["CONFIG_FILENAME", "ConfigError", "CrawlerConfig", "load_config"]
