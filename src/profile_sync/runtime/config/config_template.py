"""Loading ``config.yaml`` with environment variable placeholders."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.profile_sync.runtime.config.config_data import ConfigData

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


def _resolve(expression: str) -> str:
    name, sep, rest = expression.partition(":")
    if not sep:
        value = os.getenv(name)
        if value is None:
            raise ValueError(f"Required environment variable {name} not set")
        return value

    if rest.startswith("-"):
        return os.getenv(name, rest[1:])

    if rest.startswith("?"):
        value = os.getenv(name)
        if value is None:
            raise ValueError(f"Required environment variable {name}: {rest[1:]}")
        return value

    raise ValueError(f"Unsupported placeholder '${{{expression}}}'")


def substitute_env_vars(text: str) -> str:
    """Replace environment placeholders in ``text``.

    - ``${NAME}``: required, fails when unset
    - ``${NAME:-default}``: ``default`` when unset
    - ``${NAME:?message}``: required, fails with ``message`` when unset
    """
    return _PLACEHOLDER.sub(lambda match: _resolve(match.group(1)), text)


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``<ENV>_``-prefixed variables to their unprefixed names.

    With ``APP_ENVIRONMENT=test`` the variable ``TEST_DATABASE_URL`` is copied
    to ``DATABASE_URL`` before substitution runs.
    """
    prefix = f"{env_mode.upper()}_"
    overrides = {
        name[len(prefix):]: value
        for name, value in os.environ.items()
        if name.startswith(prefix) and len(name) > len(prefix)
    }
    if overrides:
        logger.info("Applying {} overrides: {}", env_mode, sorted(overrides))
    os.environ.update(overrides)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Parse ``file_path`` into ``ConfigData`` after placeholder substitution.

    Raises:
        ValueError: If the YAML is empty or malformed, a required variable is
            missing, or the ``config`` section fails validation
        FileNotFoundError: If the file doesn't exist
    """
    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration for environment: {}", env_mode)
    apply_environment_overrides(env_mode)

    content = substitute_env_vars(Path(file_path).read_text())
    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not loaded:
        raise ValueError(f"Configuration file {file_path} is empty")

    try:
        config = ConfigData(**(loaded.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if not config.identity_provider.api_key:
        logger.warning("No identity provider API key configured")
    return config


def load_config(file_path: Path) -> ConfigData:
    """Load configuration from ``file_path``, falling back to model defaults."""
    if not file_path.exists():
        logger.warning("Configuration file {} not found, using defaults", file_path)
        return ConfigData()
    return load_templated_yaml(file_path)
