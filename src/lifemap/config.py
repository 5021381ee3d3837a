"""Runtime configuration: YAML config file, environment and CLI overrides.

Precedence is CLI over environment over config file over ``Constants``
defaults. Every layer writes onto ``Constants`` so the rest of the code reads
a single place.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from lifemap.constants import Constants

logger = logging.getLogger(__name__)

CONFIG_SECTION = "lifemap"


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        path: Config file path; defaults to ``$LIFEMAP_CONFIG``.

    Returns:
        The ``lifemap`` section if present, else the top-level mapping.
        Empty dict when there is no usable file.
    """
    path = path or os.environ.get(Constants.ENV_CONFIG)
    if not path:
        return {}

    if not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Failed to load config %s: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        return {}
    section = data.get(CONFIG_SECTION)
    return section if isinstance(section, dict) else data


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply config-file values onto ``Constants``."""
    if not cfg:
        return
    if cfg.get("local_repository"):
        Constants.LOCAL_REPOSITORY = os.path.expanduser(str(cfg["local_repository"]))
    repositories = cfg.get("remote_repositories")
    if isinstance(repositories, str):
        repositories = [repositories]
    if isinstance(repositories, list):
        Constants.REMOTE_REPOSITORIES = [str(r) for r in repositories if r]
    if "offline" in cfg:
        Constants.OFFLINE = bool(cfg["offline"])
    if cfg.get("registry"):
        Constants.REGISTRY_FILE = str(cfg["registry"])
    http = cfg.get("http")
    if isinstance(http, dict):
        try:
            if http.get("timeout") is not None:
                Constants.REQUEST_TIMEOUT = float(http["timeout"])
            if http.get("retry_max") is not None:
                Constants.HTTP_RETRY_MAX = max(1, int(http["retry_max"]))
            if http.get("retry_base_delay_sec") is not None:
                Constants.HTTP_RETRY_BASE_DELAY_SEC = float(http["retry_base_delay_sec"])
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring invalid http settings in config: %s", exc)


def apply_environment() -> None:
    """Apply ``LIFEMAP_*`` environment variables onto ``Constants``."""
    local_repository = os.environ.get(Constants.ENV_LOCAL_REPOSITORY)
    if local_repository and local_repository.strip():
        Constants.LOCAL_REPOSITORY = os.path.expanduser(local_repository.strip())
    registry = os.environ.get(Constants.ENV_REGISTRY)
    if registry and registry.strip():
        Constants.REGISTRY_FILE = registry.strip()


def apply_cli_overrides(args) -> None:
    """Apply parsed CLI arguments onto ``Constants`` (highest precedence)."""
    if getattr(args, "REGISTRY", None):
        Constants.REGISTRY_FILE = args.REGISTRY
    if getattr(args, "LOCAL_REPOSITORY", None):
        Constants.LOCAL_REPOSITORY = os.path.expanduser(args.LOCAL_REPOSITORY)
    if getattr(args, "REPOSITORIES", None):
        Constants.REMOTE_REPOSITORIES = list(args.REPOSITORIES)
    if getattr(args, "OFFLINE", False):
        Constants.OFFLINE = True


def configure(args) -> None:
    """Apply every configuration layer in precedence order."""
    apply_config(load_config(getattr(args, "CONFIG", None)))
    apply_environment()
    apply_cli_overrides(args)
