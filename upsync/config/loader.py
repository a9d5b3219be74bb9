# Upsync Configuration Loader
# Load, save, and validate YAML configuration files

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from upsync.config.defaults import default_config, generate_default_config
from upsync.config.schema import UpsyncConfig
from upsync.exceptions import ConfigurationError

CONFIG_FILE_NAME = "upsync.yml"


def get_config_candidates(cwd: Optional[Path] = None) -> list[Path]:
    """Get config file locations in lookup order."""
    here = cwd or Path.cwd()
    candidates: list[Path] = []

    env_path = os.environ.get("UPSYNC_CONFIG")
    if env_path:
        candidates.append(Path(env_path).expanduser())

    candidates.append(here / CONFIG_FILE_NAME)
    candidates.append(here / "tmp" / CONFIG_FILE_NAME)
    return candidates


def find_config_path(cwd: Optional[Path] = None) -> Path | None:
    """Return the first existing config file, or None."""
    for path in get_config_candidates(cwd):
        if path.is_file():
            return path
    return None


def load_config(config_path: Optional[Path] = None) -> UpsyncConfig:
    """
    Load configuration from YAML file.

    Without an explicit path the lookup order is UPSYNC_CONFIG,
    ./upsync.yml, ./tmp/upsync.yml. When nothing is found the defaults
    are used. Credentials missing from the file are taken from the
    environment.

    Args:
        config_path: Optional path to config file.

    Returns:
        UpsyncConfig: Validated configuration object.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid.
    """
    if config_path is not None and not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    path = config_path or find_config_path()
    data: dict = {}

    if path is not None:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Found, but could not parse config {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root is not a mapping in {path}")

    merged = _merge_with_defaults(data)
    _apply_env_credentials(merged["store"])

    try:
        return UpsyncConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e


def write_default_config(config_path: Path) -> bool:
    """
    Write the commented default config unless the file exists.

    Returns:
        True if the file was created.
    """
    if config_path.exists():
        return False
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return True


def validate_config_file(config_path: Path) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without loading it into the system.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]

    if not isinstance(data, dict):
        return False, ["Configuration root must be a mapping"]

    try:
        UpsyncConfig.model_validate(_merge_with_defaults(data))
    except ValidationError as e:
        return False, [_format_error(error) for error in e.errors()]

    unknown = sorted(set(data) - {"store", "sync", "output"})
    if unknown:
        return False, [f"Unknown section: {name}" for name in unknown]

    return True, []


def _merge_with_defaults(data: dict) -> dict:
    """Merge loaded data with default values for missing keys."""
    result = default_config()

    for section in ("store", "sync", "output"):
        if isinstance(data.get(section), dict):
            result[section] = {**result[section], **data[section]}

    return result


def _apply_env_credentials(store: dict) -> None:
    """Fill missing credentials from KEY/SECRET or the AWS variables."""
    if not store.get("access_key"):
        store["access_key"] = os.environ.get("KEY") or os.environ.get("AWS_ACCESS_KEY_ID")
    if not store.get("secret_key"):
        store["secret_key"] = os.environ.get("SECRET") or os.environ.get("AWS_SECRET_ACCESS_KEY")


def _format_error(error: dict) -> str:
    loc = " -> ".join(str(part) for part in error["loc"])
    return f"{loc}: {error['msg']}"


def _format_validation_error(e: ValidationError) -> str:
    return "Invalid configuration: " + "; ".join(_format_error(error) for error in e.errors())
