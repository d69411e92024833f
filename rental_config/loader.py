"""
Configuration Loader (``rental_config.loader``).

Responsibility
--------------
Loads a YAML configuration file, applies environment overrides and parses
the result into the typed ``rental_config.schema`` dataclasses.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values (empty url, negative pool size, unknown log level)
  -> ``ValueError``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from rental_config.schema import (
    DocumentStoreConfig,
    RelationalStoreConfig,
    RentalConfig,
)

# Environment variables that override values read from the file.
ENV_DATABASE_URL = "RENTAL_DATABASE_URL"
ENV_MONGODB_URI = "RENTAL_MONGODB_URI"
ENV_MONGODB_DATABASE = "RENTAL_MONGODB_DATABASE"
ENV_LOG_LEVEL = "RENTAL_LOG_LEVEL"

ENV_CONFIG_PATH = "RENTAL_CONFIG"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("1", "true", "yes", "on"):
        return True
    if isinstance(value, str) and value.lower() in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Cannot parse boolean from {value!r}")


def _parse_log_level(value: Any) -> str:
    level = str(value).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def parse_relational(data: dict[str, Any]) -> RelationalStoreConfig:
    """Parse the ``relational`` section. ``url`` is required."""
    return RelationalStoreConfig(
        url=data["url"],
        echo=_parse_bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 5)),
        max_overflow=int(data.get("max_overflow", 10)),
        pool_pre_ping=_parse_bool(data.get("pool_pre_ping", True)),
        pool_timeout=int(data.get("pool_timeout", 30)),
        pool_recycle=int(data.get("pool_recycle", 1800)),
    )


def parse_documents(data: dict[str, Any]) -> DocumentStoreConfig:
    """Parse the ``documents`` section. ``uri`` is required."""
    return DocumentStoreConfig(
        uri=data["uri"],
        database=data.get("database", "easyloc"),
        customer_collection=data.get("customer_collection", "Customer"),
        vehicle_collection=data.get("vehicle_collection", "Vehicle"),
        server_selection_timeout_ms=int(data.get("server_selection_timeout_ms", 5000)),
    )


def parse_config(data: dict[str, Any]) -> RentalConfig:
    """
    Parse a complete ``RentalConfig`` from a dict.

    Preconditions:
        - ``data["relational"]["url"]`` is present.
    Raises:
        KeyError: if required keys are missing.
        ValueError: if values are invalid.
    """
    documents_data = data.get("documents")
    return RentalConfig(
        relational=parse_relational(data["relational"]),
        documents=parse_documents(documents_data) if documents_data else None,
        log_level=_parse_log_level(data.get("log_level", "INFO")),
    )


def apply_env_overrides(
    data: dict[str, Any],
    environ: Mapping[str, str],
) -> dict[str, Any]:
    """Return a copy of ``data`` with RENTAL_* environment values applied."""
    merged: dict[str, Any] = dict(data)
    merged["relational"] = dict(data.get("relational") or {})
    documents = dict(data.get("documents") or {})

    if environ.get(ENV_DATABASE_URL):
        merged["relational"]["url"] = environ[ENV_DATABASE_URL]
    if environ.get(ENV_MONGODB_URI):
        documents["uri"] = environ[ENV_MONGODB_URI]
    if environ.get(ENV_MONGODB_DATABASE):
        documents["database"] = environ[ENV_MONGODB_DATABASE]
    if documents:
        merged["documents"] = documents
    if environ.get(ENV_LOG_LEVEL):
        merged["log_level"] = environ[ENV_LOG_LEVEL]
    return merged


def load_config(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> RentalConfig:
    """
    Load the startup configuration.

    ``path`` defaults to the file named by ``RENTAL_CONFIG``; when neither is
    given the configuration is built from environment variables alone.
    """
    env = os.environ if environ is None else environ
    if path is None and env.get(ENV_CONFIG_PATH):
        path = env[ENV_CONFIG_PATH]

    data = load_yaml_file(Path(path)) if path is not None else {}
    return parse_config(apply_env_overrides(data, env))
