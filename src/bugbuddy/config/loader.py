"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path

import yaml

from .schema import AnalysisConfig, BugBuddyConfig

DEFAULT_CONFIG_PATH = Path("bugbuddy.yaml")


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_config(path: Path | None = None) -> BugBuddyConfig:
    """
    Load configuration from a YAML file with environment variable substitution.

    With no path, ``bugbuddy.yaml`` in the working directory is used if it
    exists; otherwise the defaults apply.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated BugBuddyConfig instance

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return BugBuddyConfig()
        path = DEFAULT_CONFIG_PATH

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open() as f:
        raw_yaml = f.read()

    try:
        config_dict = yaml.safe_load(substitute_env_vars(raw_yaml)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")

    # File values win; BUGBUDDY_* variables fill whatever the file leaves out
    return BugBuddyConfig(**config_dict)


def analysis_settings(path: Path | None = None) -> AnalysisConfig:
    """Re-read the analysis section; used so each gather sees current settings."""
    return load_config(path).analysis
