"""
Configuration loader for the Gaming Dashboard backend.

Builds DashboardSettings from an optional YAML file and the process
environment. Environment variables win over the YAML file, so secrets
never need to live in it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from gaming_dashboard.config.schema import DashboardSettings
from gaming_dashboard.exceptions import ConfigurationError

# env var -> (section or None, key)
ENV_MAPPING: dict[str, tuple[Optional[str], str]] = {
    "DASHBOARD_ENV": (None, "env"),
    "LOG_LEVEL": (None, "log_level"),
    "HOST": (None, "host"),
    "PORT": (None, "port"),
    "TARGET_REVENUE": (None, "target_revenue"),
    "STOREFRONT_PROVIDER": (None, "storefront_provider"),
    "PUBLIC_DIR": (None, "public_dir"),
    "OPENAI_API_KEY": ("openai", "api_key"),
    "OPENAI_MODEL": ("openai", "model"),
    "ANTHROPIC_API_KEY": ("claude", "api_key"),
    "CLAUDE_API_KEY": ("claude", "api_key"),
    "CLAUDE_MODEL": ("claude", "model"),
    "SHOPIFY_SHOP_NAME": ("shopify", "shop_name"),
    "SHOPIFY_ACCESS_TOKEN": ("shopify", "access_token"),
    "SHOPIFY_API_VERSION": ("shopify", "api_version"),
}


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ConfigurationError(
            f"Config not found: {config_path}", config_path=str(config_path)
        )

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Config file must contain a mapping: {config_path}",
            config_path=str(config_path),
        )
    return raw


def load_settings(
    config_path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DashboardSettings:
    """
    Load and validate the dashboard settings.

    Args:
        config_path: Optional YAML file. Falls back to DASHBOARD_CONFIG.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Validated DashboardSettings instance.

    Raises:
        ConfigurationError: If the YAML file is missing/malformed or a
            value fails validation.
    """
    environ = os.environ if environ is None else environ

    if config_path is None and environ.get("DASHBOARD_CONFIG"):
        config_path = environ["DASHBOARD_CONFIG"]

    raw: dict[str, Any] = {}
    if config_path is not None:
        raw = _read_yaml(Path(config_path))

    # CLAUDE_API_KEY is listed after ANTHROPIC_API_KEY so it takes precedence
    for var_name, (section, key) in ENV_MAPPING.items():
        value = environ.get(var_name, "").strip()
        if not value:
            continue
        if section is None:
            raw[key] = value
        else:
            target = raw.setdefault(section, {})
            if not isinstance(target, dict):
                raise ConfigurationError(
                    f"Config section '{section}' must be a mapping",
                    config_path=str(config_path) if config_path else None,
                )
            target[key] = value

    try:
        return DashboardSettings(**raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid dashboard configuration:\n{e}",
            config_path=str(config_path) if config_path else None,
        ) from e
