"""
Configuration Loader (``vesting_config.loader``).

Responsibility
--------------
Loads a configuration set's ``root.yaml`` and parses it into the typed
``vesting_config.schema`` dataclasses.  The single public entry point
for runtime config is ``vesting_config.get_active_config()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Integers that exceed 64 bits may be given as strings; they are parsed
  exactly.  Floats are rejected.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or out-of-range values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from vesting_config.schema import (
    UINT256_MAX,
    TokenParameters,
    VestingConfiguration,
    VestingParameters,
)
from vesting_kernel.exceptions import VestingKernelError


class ConfigurationError(VestingKernelError):
    """A configuration set is missing a field or holds an invalid value."""

    code: str = "CONFIG_INVALID"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid configuration field {field!r}: {reason}")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 over the canonical JSON form of the parsed YAML."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_int(value: Any, field: str) -> int:
    """Parse an exact integer from an int or a decimal string."""
    if isinstance(value, bool):
        raise ConfigurationError(field, f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().replace("_", "")
        if text.isdigit():
            return int(text)
    raise ConfigurationError(field, f"expected an integer, got {value!r}")


def parse_vesting_parameters(data: dict[str, Any]) -> VestingParameters:
    defaults = VestingParameters()
    period = parse_int(
        data.get("period_length_seconds", defaults.period_length_seconds),
        "vesting.period_length_seconds",
    )
    floor = parse_int(
        data.get("start_time_floor", defaults.start_time_floor),
        "vesting.start_time_floor",
    )
    max_amount = parse_int(
        data.get("max_grant_amount", defaults.max_grant_amount),
        "vesting.max_grant_amount",
    )
    if period <= 0:
        raise ConfigurationError("vesting.period_length_seconds", "must be positive")
    if not 0 < max_amount <= UINT256_MAX:
        raise ConfigurationError("vesting.max_grant_amount", "must be in (0, 2**256 - 1]")
    return VestingParameters(
        period_length_seconds=period,
        start_time_floor=floor,
        max_grant_amount=max_amount,
    )


def parse_token_parameters(data: dict[str, Any]) -> TokenParameters:
    defaults = TokenParameters()
    symbol = str(data.get("symbol", defaults.symbol)).strip()
    decimals = parse_int(data.get("decimals", defaults.decimals), "token.decimals")
    total_supply = parse_int(data.get("total_supply", defaults.total_supply), "token.total_supply")
    holding_account = str(data.get("holding_account", defaults.holding_account)).strip()
    if not symbol:
        raise ConfigurationError("token.symbol", "must not be empty")
    if not 0 < total_supply <= UINT256_MAX:
        raise ConfigurationError("token.total_supply", "must be in (0, 2**256 - 1]")
    if not holding_account:
        raise ConfigurationError("token.holding_account", "must not be empty")
    return TokenParameters(
        symbol=symbol,
        decimals=decimals,
        total_supply=total_supply,
        holding_account=holding_account,
    )


def parse_configuration(data: dict[str, Any]) -> VestingConfiguration:
    """
    Parse a full configuration set from its root.yaml contents.

    Raises:
        ConfigurationError: if config_id is missing or any value is invalid.
    """
    config_id = data.get("config_id")
    if not config_id:
        raise ConfigurationError("config_id", "is required")
    return VestingConfiguration(
        config_id=str(config_id),
        version=parse_int(data.get("version", 1), "version"),
        vesting=parse_vesting_parameters(data.get("vesting") or {}),
        token=parse_token_parameters(data.get("token") or {}),
        checksum=compute_checksum(data),
        description=str(data.get("description", "")),
    )


def load_configuration(path: Path) -> VestingConfiguration:
    """Load and parse a root.yaml file."""
    return parse_configuration(load_yaml_file(path))
