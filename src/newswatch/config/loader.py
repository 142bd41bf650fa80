"""YAML configuration loading utilities."""

from pathlib import Path

import yaml

from newswatch.config.models import NewswatchConfig


def load_config(path: Path | str) -> NewswatchConfig:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Validated NewswatchConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    return NewswatchConfig.model_validate(raw or {})


def get_default_config_path() -> Path:
    """Get path to the bundled default config file."""
    return Path(__file__).parent / "default.yaml"
