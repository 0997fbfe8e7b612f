#!/usr/bin/env python3
"""
kwarchive Server Configuration Management

One YAML file holds the HTTP server settings and the connection
settings of the keyword archive (a PostgreSQL database):

    host: 0.0.0.0
    port: 8000
    log_level: INFO
    query_timeout: 30
    datasource:
      server: localhost
      port: 5432
      role: grafana
      database: keywords
      metatable: ktlmeta
"""

import logging
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger("kwarchive.config")


class DatasourceSettings(BaseModel):
    """Postgres connection information for the keyword archive."""
    server: str = Field(..., min_length=1)
    port: int = 5432
    role: str = Field(..., min_length=1)
    database: str = Field(..., min_length=1)
    password: Optional[str] = None
    metatable: str = Field("ktlmeta", min_length=1)
    sslmode: str = "disable"


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    # Seconds a batch may run before remaining queries are cancelled
    query_timeout: Optional[float] = Field(None, gt=0)
    datasource: DatasourceSettings


def load_config_from(path: str) -> ServerConfig:
    """Load server configuration from YAML file."""
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a mapping")

    try:
        config = ServerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}: {e}") from e

    logger.info(f"Loaded configuration from: {path}")
    return config
