"""YAML + environment configuration loader and validator."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

DEFAULT_STATE_FILE = "network-config.json"

# Environment variable -> config key. Environment wins over the YAML file.
ENV_KEYS = {
    "SERVER_IP": "host",
    "SERVER_PORT": "port",
    "WOL_PORT": "wol_port",
    "API_KEY": "api_key",
    "AUTO_DETECT": "auto_detect",
    "LOCAL_INTERFACE": "local_interface",
    "DOCKER_INTERFACE": "docker_interface",
    "EXCLUDE_INTERFACES": "exclude_interfaces",
    "LOCAL_NETWORK_PREFIX": "local_network_prefix",
    "DOCKER_NETWORK_PREFIX": "docker_network_prefix",
    "NETWORK_CONFIG_PATH": "state_file",
}

_PORT_KEYS = ("port", "wol_port")


class ConfigError(Exception):
    """Raised for invalid or missing configuration."""


@dataclass
class Settings:
    """Runtime settings for the wolgate service."""

    host: str = "0.0.0.0"
    port: int = 3000
    wol_port: int = 9
    api_key: str = ""
    auto_detect: bool = True
    local_interface: Optional[str] = None
    docker_interface: Optional[str] = None
    exclude_interfaces: list[str] = field(default_factory=lambda: ["lo"])
    local_network_prefix: Optional[str] = None
    # Accepted for compatibility; interface classification does not use it.
    docker_network_prefix: Optional[str] = "172"
    state_file: Path = field(default_factory=lambda: Path(DEFAULT_STATE_FILE))


def load_config(path: Path) -> Optional[dict[str, Any]]:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML config file

    Returns:
        Parsed configuration dictionary, or None if file is empty

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    with open(path) as f:
        result: Optional[dict[str, Any]] = yaml.safe_load(f)
        return result


def config_from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    """
    Collect raw settings from environment variables.

    Empty variables are treated as unset. ``AUTO_DETECT`` is only disabled by
    the literal string "false"; ``EXCLUDE_INTERFACES`` is a comma-separated list.
    """
    raw: dict[str, Any] = {}
    for var, key in ENV_KEYS.items():
        value = environ.get(var)
        if not value:
            continue
        if key == "auto_detect":
            raw[key] = value.strip().lower() != "false"
        elif key == "exclude_interfaces":
            raw[key] = [n.strip() for n in value.split(",") if n.strip()]
        else:
            raw[key] = value
    return raw


def validate_config(config: dict[str, Any]) -> list[str]:
    """
    Validate a raw configuration dictionary.

    Returns:
        List of validation error messages (empty list = valid)
    """
    if not isinstance(config, dict):
        return ["Config root must be a YAML mapping"]

    errors: list[str] = []

    for key in _PORT_KEYS:
        if key not in config:
            continue
        try:
            port = int(config[key])
        except (TypeError, ValueError):
            errors.append(f"'{key}' must be an integer, got {config[key]!r}")
            continue
        if not 1 <= port <= 65535:
            errors.append(f"'{key}' must be between 1 and 65535, got {port}")

    exclude = config.get("exclude_interfaces")
    if exclude is not None and (
        not isinstance(exclude, list) or not all(isinstance(n, str) for n in exclude)
    ):
        errors.append("'exclude_interfaces' must be a list of interface names")

    auto = config.get("auto_detect")
    if auto is not None and not isinstance(auto, bool):
        errors.append(f"'auto_detect' must be true or false, got {auto!r}")

    for key in ("local_network_prefix", "docker_network_prefix"):
        prefix = config.get(key)
        if prefix is not None and not isinstance(prefix, (str, int)):
            errors.append(f"'{key}' must be a quoted address prefix such as '192.168'")

    return errors


def settings_from_config(config: dict[str, Any]) -> Settings:
    """
    Construct Settings from a validated config dict.

    Args:
        config: Parsed and validated config dictionary

    Returns:
        Settings instance, defaults filled in for missing keys
    """
    defaults = Settings()

    def _opt_str(key: str, default: Optional[str] = None) -> Optional[str]:
        value = config.get(key, default)
        return str(value) if value not in (None, "") else None

    return Settings(
        host=str(config.get("host", defaults.host)),
        port=int(config.get("port", defaults.port)),
        wol_port=int(config.get("wol_port", defaults.wol_port)),
        api_key=str(config.get("api_key") or ""),
        auto_detect=bool(config.get("auto_detect", defaults.auto_detect)),
        local_interface=_opt_str("local_interface"),
        docker_interface=_opt_str("docker_interface"),
        exclude_interfaces=list(config.get("exclude_interfaces", defaults.exclude_interfaces)),
        local_network_prefix=_opt_str("local_network_prefix"),
        docker_network_prefix=_opt_str("docker_network_prefix", defaults.docker_network_prefix),
        state_file=Path(config.get("state_file") or defaults.state_file),
    )


def load_settings(
    path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """
    Load settings from an optional YAML file overlaid with the environment.

    Args:
        path: YAML config file; skipped when None or missing
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated Settings

    Raises:
        ConfigError: If the merged configuration is invalid
    """
    raw: dict[str, Any] = {}
    if path is not None and path.exists():
        try:
            loaded = load_config(path)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError("Config root must be a YAML mapping")
        raw.update(loaded or {})

    raw.update(config_from_env(os.environ if environ is None else environ))

    errors = validate_config(raw)
    if errors:
        raise ConfigError("; ".join(errors))
    return settings_from_config(raw)
