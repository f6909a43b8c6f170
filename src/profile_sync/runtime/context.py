"""Process-wide configuration held in a context variable.

The configuration is read from ``$APP_CONFIG_FILE`` (``config.yaml`` by
default) the first time it is needed. Tests and embedding hosts override it
for a block of code with ``with_context``.
"""

import os
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from src.profile_sync.runtime.config.config_data import ConfigData
from src.profile_sync.runtime.config.config_template import load_config


@dataclass(frozen=True)
class AppContext:
    config: ConfigData


_app_context: ContextVar[AppContext | None] = ContextVar("app_context", default=None)
_loaded_context: AppContext | None = None


def _config_path() -> Path:
    return Path(os.getenv("APP_CONFIG_FILE", "config.yaml"))


def get_context() -> AppContext:
    """Return the active context, loading the configuration file on first use."""
    global _loaded_context

    context = _app_context.get()
    if context is not None:
        return context

    if _loaded_context is None:
        _loaded_context = AppContext(config=load_config(_config_path()))
    return _loaded_context


def set_context(context: AppContext) -> Token:
    return _app_context.set(context)


def get_config() -> ConfigData:
    return get_context().config


def set_config(config: ConfigData) -> None:
    """Replace the whole configuration for the current context."""
    set_context(replace(get_context(), config=config))


def _explicit_fields(model: BaseModel) -> dict[str, Any]:
    """Dump only the fields set explicitly, descending into nested models."""
    explicit: dict[str, Any] = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _explicit_fields(value)
            if nested:
                explicit[name] = nested
            elif name in model.model_fields_set:
                explicit[name] = value.model_dump()
        elif name in model.model_fields_set:
            explicit[name] = value
    return explicit


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_config(base: ConfigData, override: ConfigData) -> ConfigData:
    """Overlay the explicitly set fields of ``override`` on ``base``."""
    return ConfigData.model_validate(
        _deep_merge(base.model_dump(), _explicit_fields(override))
    )


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Run a block with ``config_override`` merged into the active configuration.

    Only fields set on the override change; everything else is inherited.

    Example:
        with with_context(ConfigData(profiles=ProfilesConfig(default_role="member"))):
            assert get_config().profiles.default_role == "member"
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData or None, got {type(config_override)}"
        )

    current = get_context()
    token = set_context(replace(current, config=merge_config(current.config, config_override)))
    try:
        yield
    finally:
        _app_context.reset(token)
