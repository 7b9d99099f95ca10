"""Optimize configuration loading and environment overrides."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .schemas.optimize import OptimizeTaskOptions

logger = logging.getLogger(__name__)

ESBUILD_ENV = "AWARE_OPTIMIZE_ESBUILD"
VERBOSE_ENV = "AWARE_OPTIMIZE_VERBOSE"

_TRUTHY = {"1", "true", "yes", "on"}


def load_config(path: Path) -> OptimizeTaskOptions:
    """Load a YAML or JSON optimize configuration.

    ``root`` defaults to the folder holding the configuration file; a
    relative ``root`` is resolved against that folder as well.
    """

    if not path.exists():
        raise ConfigError("configuration file not found", path=path)
    raw = _read_payload(path)
    if not isinstance(raw, dict):
        raise ConfigError("configuration must be a mapping", path=path)

    try:
        options = OptimizeTaskOptions.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc), path=path) from exc

    base = path.parent.resolve()
    root = (base / options.root).resolve() if options.root else base
    logger.debug("Loaded optimize configuration from %s (root=%s)", path, root)
    return options.model_copy(update={"root": str(root)})


def _read_payload(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"unable to parse configuration: {exc}", path=path) from exc


def esbuild_from_env(env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    value = (os.environ if env is None else env).get(ESBUILD_ENV, "").strip()
    return value or None


def is_verbose(env: Optional[Mapping[str, str]] = None) -> bool:
    value = (os.environ if env is None else env).get(VERBOSE_ENV, "")
    return value.strip().lower() in _TRUTHY
