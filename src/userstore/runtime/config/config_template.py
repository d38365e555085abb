"""Configuration template substitution utilities."""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.userstore.runtime.config.config_data import ConfigData


def substitute_env_vars(text: str, environ: Mapping[str, str] | None = None) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    env = os.environ if environ is None else environ

    def replacer(match):
        var_expr = match.group(1)

        # Handle default values: ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return env.get(var_name, default)

        # Handle error messages: ${VAR:?message}
        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = env.get(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        # Handle required variables: ${VAR}
        else:
            var_name = var_expr
            value = env.get(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name} not set")
            return value

    # Match ${...} patterns
    pattern = r'\$\{([^}]+)\}'
    return re.sub(pattern, replacer, text)


def substitute_in_tree(node: Any, environ: Mapping[str, str] | None = None) -> Any:
    """Substitute placeholders in every string scalar of a loaded YAML tree.

    A scalar that resolves to an empty string becomes ``None``, like an empty
    YAML value.
    """
    if isinstance(node, dict):
        return {key: substitute_in_tree(value, environ) for key, value in node.items()}
    if isinstance(node, list):
        return [substitute_in_tree(item, environ) for item in node]
    if isinstance(node, str):
        value = substitute_env_vars(node, environ)
        return value if value or not node else None
    return node


def environment_overrides(env_mode: str, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return the environment with ``<ENV_MODE>_``-prefixed variables unprefixed.

    With ``env_mode="test"``, ``TEST_DATABASE_URL`` becomes ``DATABASE_URL``
    and wins over an unprefixed ``DATABASE_URL``.
    """
    env = dict(os.environ if environ is None else environ)
    prefix = f"{env_mode.upper()}_"

    overrides = {var[len(prefix):]: value for var, value in env.items() if var.startswith(prefix)}
    if overrides:
        logger.info("Applying environment-specific overrides: {}", sorted(overrides))
    env.update(overrides)
    return env


def load_templated_yaml(file_path: Path, env_mode: str | None = None) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file
        env_mode: Environment whose prefixed variables override plain ones;
            defaults to ``APP_ENVIRONMENT`` or ``development``

    Returns:
        Parsed configuration with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing or the file is invalid
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    env_mode = env_mode or os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration for environment: {}", env_mode)

    try:
        loaded = yaml.safe_load(content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    # Placeholders are resolved per string scalar, after parsing.
    loaded = substitute_in_tree(loaded, environment_overrides(env_mode))

    try:
        # Extract the 'config' section from the YAML structure
        config_data = loaded.get('config', {})
        config = ConfigData(**config_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return config
