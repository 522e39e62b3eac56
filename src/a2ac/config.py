"""Endpoint configuration — which agents to talk to and how.

Endpoints come from two places, in this order:

1. an optional endpoints file (YAML or JSON), whose entries may pin a
   stable ``id``::

       - id: planner
         url: http://localhost:10001
       - http://localhost:10002

2. the ``A2A_ENDPOINT_URLS`` environment variable (comma separated),
   or the single ``A2A_ENDPOINT_URL`` when the list is not set.

Entries without an explicit id get a fresh one per process.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from a2ac.utils.ids import IdFactory, new_id

logger = logging.getLogger(__name__)

ENV_ENDPOINT_URLS = "A2A_ENDPOINT_URLS"
ENV_ENDPOINT_URL = "A2A_ENDPOINT_URL"
ENV_ENDPOINTS_FILE = "A2A_ENDPOINTS_FILE"
ENV_TIMEOUT = "A2A_TIMEOUT"
ENV_MAX_UPDATES = "A2A_MAX_UPDATES"


class ConfigError(Exception):
    """Raised when endpoint configuration cannot be parsed."""


class Endpoint(BaseModel):
    """A configured remote agent."""

    model_config = ConfigDict(frozen=True)

    id: str
    url: str


class Settings(BaseModel):
    """Process-level client settings."""

    endpoint_urls: list[str] = Field(default_factory=list)
    endpoints_file: Path | None = None
    timeout: float | None = Field(
        default=30.0, description="HTTP timeout in seconds; None disables."
    )
    max_updates: int = Field(default=10, ge=1, description="Default event cap for subscriptions.")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``A2A_*`` environment variables."""
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}

        urls = env.get(ENV_ENDPOINT_URLS)
        if urls:
            data["endpoint_urls"] = split_urls(urls)
        elif env.get(ENV_ENDPOINT_URL, "").strip():
            data["endpoint_urls"] = [env[ENV_ENDPOINT_URL].strip()]

        if env.get(ENV_ENDPOINTS_FILE):
            data["endpoints_file"] = env[ENV_ENDPOINTS_FILE]

        timeout = env.get(ENV_TIMEOUT)
        if timeout:
            data["timeout"] = None if timeout.lower() in ("none", "0") else timeout

        if env.get(ENV_MAX_UPDATES):
            data["max_updates"] = env[ENV_MAX_UPDATES]

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid A2A settings: {exc}") from exc


def split_urls(value: str) -> list[str]:
    """Split a comma-separated URL list, dropping blank entries."""
    return [url.strip() for url in value.split(",") if url.strip()]


def parse_endpoint_urls(value: str, *, id_factory: IdFactory = new_id) -> list[Endpoint]:
    """Turn a comma-separated URL list into endpoints with fresh ids.

    Duplicate URLs are kept; each gets its own id.
    """
    return [Endpoint(id=id_factory(), url=url) for url in split_urls(value)]


def parse_endpoints(
    raw: str, *, format: str = "yaml", id_factory: IdFactory = new_id
) -> list[Endpoint]:
    """Parse the contents of an endpoints file.

    Args:
        raw: The raw file contents.
        format: ``"yaml"`` (default) or ``"json"``.
        id_factory: Source of ids for entries that do not pin one.
    """
    if format == "json":
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise ConfigError(f"Invalid endpoints JSON: {exc}") from exc
    else:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid endpoints YAML: {exc}") from exc

    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("endpoints", [])
    if not isinstance(data, list):
        msg = "Endpoints file must contain a list of endpoints"
        raise ConfigError(msg)

    endpoints: list[Endpoint] = []
    for entry in data:
        if isinstance(entry, str):
            endpoints.append(Endpoint(id=id_factory(), url=entry.strip()))
        elif isinstance(entry, dict) and entry.get("url"):
            endpoint_id = str(entry.get("id") or id_factory())
            endpoints.append(Endpoint(id=endpoint_id, url=str(entry["url"])))
        else:
            raise ConfigError(f"Invalid endpoint entry: {entry!r}")
    return endpoints


def load_endpoints_file(path: Path, *, id_factory: IdFactory = new_id) -> list[Endpoint]:
    """Read and parse an endpoints file (``.json`` is JSON, anything else YAML)."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read endpoints file {path}: {exc}") from exc
    fmt = "json" if path.suffix == ".json" else "yaml"
    return parse_endpoints(raw, format=fmt, id_factory=id_factory)


def load_endpoints(settings: Settings, *, id_factory: IdFactory = new_id) -> list[Endpoint]:
    """Collect every configured endpoint: file entries first, then URLs."""
    endpoints: list[Endpoint] = []
    if settings.endpoints_file is not None:
        endpoints.extend(load_endpoints_file(settings.endpoints_file, id_factory=id_factory))
    endpoints.extend(Endpoint(id=id_factory(), url=url) for url in settings.endpoint_urls)
    if not endpoints:
        logger.warning(
            "No A2A endpoints configured; set %s or %s", ENV_ENDPOINT_URLS, ENV_ENDPOINT_URL
        )
    return endpoints
