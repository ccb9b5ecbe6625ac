from __future__ import annotations

import importlib
import os
from types import ModuleType

DEFAULT_ENV = "development"

_MODULE_BY_ENV = {
    "development": "config.development",
    "dev": "config.development",
    "local": "config.development",
    "production": "config.production",
    "prod": "config.production",
    "testing": "config.testing",
    "test": "config.testing",
}


def get_settings_module(env: str | None = None) -> str:
    """Settings module for `env`, or for APP_ENV when not given.

    An unset or blank APP_ENV means development. Unknown names fail instead of
    silently running production traffic with development settings.
    """
    if env is None:
        env = os.getenv("APP_ENV", "")
    name = env.strip().lower() or DEFAULT_ENV
    try:
        return _MODULE_BY_ENV[name]
    except KeyError:
        known = ", ".join(sorted(_MODULE_BY_ENV))
        raise ValueError(f"Unknown APP_ENV '{env}' (expected one of: {known})") from None


def load_settings(env: str | None = None) -> ModuleType:
    return importlib.import_module(get_settings_module(env))
