"""Shared configuration loader for the native bridge."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml


class ConfigurationError(RuntimeError):
    """Raised when configuration is invalid."""


DEFAULT_CONFIG_PATH = Path.home() / ".citadel.yaml"
DEFAULT_LIBRARY_NAME = "libcitadel.so"
DEFAULT_DATA_DIR = Path.home() / ".citadel"
SUPPORTED_NETWORKS = frozenset({"bitcoin", "testnet", "signet", "regtest", "liquidv1"})
_CONFIG_PATH_OVERRIDE: Path | None = None


@dataclass
class BridgeConfig:
    """Configuration container for loading and starting the native core."""

    library_path: Path
    network: str = "testnet"
    data_dir: Path = DEFAULT_DATA_DIR
    electrum_server: str = "pandora.network:60001"

    @property
    def library_exists(self) -> bool:
        return self.library_path.exists()


def set_default_config_path(path: str | Path | None) -> None:
    """Remember a user-supplied config path for future loads."""

    global _CONFIG_PATH_OVERRIDE
    _CONFIG_PATH_OVERRIDE = Path(path).expanduser() if path else None


def _load_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        loaded = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - delegated to PyYAML
        raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected {path} to contain a YAML object with a 'bridge' section")
    return loaded


def _first_value(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def _coerce_network(raw: Any, *, source: str) -> str | None:
    if raw is None:
        return None
    network = str(raw).strip().lower()
    if network == "mainnet":
        network = "bitcoin"
    if network not in SUPPORTED_NETWORKS:
        raise ConfigurationError(
            f"Unsupported network in {source}: {raw} (expected one of {', '.join(sorted(SUPPORTED_NETWORKS))})"
        )
    return network


def _coerce_path(raw: Any) -> Path | None:
    if raw is None or raw == "":
        return None
    return Path(str(raw)).expanduser()


def load_bridge_config(
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> BridgeConfig:
    """Load bridge configuration from overrides, environment and optional YAML.

    Precedence is ``overrides`` > environment > the ``bridge`` section of the
    YAML file > built-in defaults. The YAML file is only required to exist when
    a path was given explicitly (argument or :func:`set_default_config_path`).
    """

    env_map = os.environ if env is None else env
    explicit_path = config_path is not None or _CONFIG_PATH_OVERRIDE is not None
    path = (
        Path(config_path).expanduser()
        if config_path is not None
        else _CONFIG_PATH_OVERRIDE or DEFAULT_CONFIG_PATH
    )

    file_config = _load_config_file(path, required=explicit_path)
    section = file_config.get("bridge", {}) if isinstance(file_config, dict) else {}
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Expected 'bridge' to be a mapping in {path}")

    override_map = dict(overrides or {})

    resolved_library = _first_value(
        _coerce_path(override_map.get("library_path")),
        _coerce_path(env_map.get("CITADEL_LIB_PATH")),
        _coerce_path(section.get("library_path")),
        default=Path(DEFAULT_LIBRARY_NAME),
    )
    resolved_network = _first_value(
        _coerce_network(override_map.get("network"), source="overrides"),
        _coerce_network(env_map.get("CITADEL_NETWORK"), source="environment"),
        _coerce_network(section.get("network"), source=f"{path} bridge.network"),
        default="testnet",
    )
    resolved_data_dir = _first_value(
        _coerce_path(override_map.get("data_dir")),
        _coerce_path(env_map.get("CITADEL_DATA_DIR")),
        _coerce_path(section.get("data_dir")),
        default=DEFAULT_DATA_DIR,
    )
    resolved_electrum = _first_value(
        override_map.get("electrum_server"),
        env_map.get("CITADEL_ELECTRUM") or None,
        section.get("electrum_server"),
        default="pandora.network:60001",
    )

    return BridgeConfig(
        library_path=resolved_library,
        network=resolved_network,
        data_dir=resolved_data_dir,
        electrum_server=str(resolved_electrum),
    )
