"""Configuration models and loading utilities."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, field_validator


class InferenceConfig(BaseModel):
    """Vision-language inference service configuration."""

    api_key: Optional[str] = None  # Falls back to GEMINI_API_KEY / API_KEY
    model: str = "gemini-2.5-pro"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 120.0
    max_retries: int = 0  # 0 = fail on first error
    retry_backoff_seconds: float = 2.0

    @field_validator("api_key", mode="before")
    @classmethod
    def resolve_env_var(cls, v: Optional[str]) -> Optional[str]:
        """Resolve environment variable references like ${VAR_NAME}."""
        if isinstance(v, str) and v.startswith("${") and v.endswith("}"):
            env_var = v[2:-1]
            return os.environ.get(env_var) or None
        return v


class AssetsConfig(BaseModel):
    """Locations of the static assets the service reads."""

    camera_config_path: str = "config/cameras.json"
    reference_image_path: str = "config/reference_labeled.png"
    parking_map_path: str = "config/parking_map.json"


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Main application configuration."""

    inference: InferenceConfig = InferenceConfig()
    assets: AssetsConfig = AssetsConfig()
    api: APIConfig = APIConfig()


def load_config(path: str | Path) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")

    return AppConfig(**data)


def apply_env_overrides(config: AppConfig, environ: Optional[dict] = None) -> AppConfig:
    """
    Apply environment variable overrides on top of a loaded configuration.

    Recognised variables: GEMINI_API_KEY (or API_KEY), GEMINI_MODEL,
    CAMERA_CONFIG_PATH, REFERENCE_IMAGE_PATH, PARKING_MAP_PATH.
    """
    env = os.environ if environ is None else environ

    inference_updates = {}
    api_key = env.get("GEMINI_API_KEY") or env.get("API_KEY")
    if api_key:
        inference_updates["api_key"] = api_key
    if env.get("GEMINI_MODEL"):
        inference_updates["model"] = env["GEMINI_MODEL"]

    assets_updates = {}
    for field, var in (
        ("camera_config_path", "CAMERA_CONFIG_PATH"),
        ("reference_image_path", "REFERENCE_IMAGE_PATH"),
        ("parking_map_path", "PARKING_MAP_PATH"),
    ):
        if env.get(var):
            assets_updates[field] = env[var]

    return config.model_copy(
        update={
            "inference": config.inference.model_copy(update=inference_updates),
            "assets": config.assets.model_copy(update=assets_updates),
        }
    )


def get_config_path() -> Path:
    """Get the default configuration file path."""
    override = os.environ.get("GAIA_CONFIG_PATH")
    if override:
        return Path(override)

    # Check for config in current directory first
    local_config = Path("config/config.yaml")
    if local_config.exists():
        return local_config

    # Check for config in parent directory (for Docker)
    parent_config = Path("/app/config/config.yaml")
    if parent_config.exists():
        return parent_config

    return local_config  # Return default even if doesn't exist


def resolve_app_config() -> AppConfig:
    """Load the YAML configuration if present and apply environment overrides."""
    config_path = get_config_path()
    config = load_config(config_path) if config_path.exists() else AppConfig()
    return apply_env_overrides(config)
