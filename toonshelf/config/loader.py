import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from toonshelf.config.models import AppConfig

logger = logging.getLogger(__name__)

# Environment overrides, applied once at load time: env var -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SUPABASE_PROJECT_URL": ("storage", "base_url"),
    "SUPABASE_SERVICE_ROLE_KEY": ("storage", "service_key"),
    "TOONSHELF_STORAGE_BACKEND": ("storage", "backend"),
    "TOONSHELF_SECRET_KEY": ("auth", "secret_key"),
}


def load_config(path: Path, environ: Mapping[str, str] | None = None) -> AppConfig:
    """
    Load and validate the config file, then apply environment overrides.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in config file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    env = os.environ if environ is None else environ
    for var, (section, key) in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            data.setdefault(section, {})[key] = value
            logger.info("Config %s.%s overridden from %s", section, key, var)

    try:
        config = AppConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Config validation failed:\n{e}") from e

    validate_storage_config(config)
    return config


def validate_storage_config(config: AppConfig) -> None:
    """Fail fast when the remote storage backend has no credentials."""
    storage = config.storage
    if storage.backend != "supabase":
        return
    missing = []
    if not storage.base_url:
        missing.append("storage.base_url (SUPABASE_PROJECT_URL)")
    if not storage.service_key:
        missing.append("storage.service_key (SUPABASE_SERVICE_ROLE_KEY)")
    if missing:
        raise ValueError(f"Server storage configuration missing: {', '.join(missing)}")
