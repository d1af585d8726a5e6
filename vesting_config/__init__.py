"""
vesting_config -- single public entrypoint for vesting configuration.

Responsibility:
    Provides the only way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``VestingConfiguration``.

Architecture position:
    Configuration -- sits above ``vesting_kernel``.  The kernel MUST NEVER
    import from ``vesting_config``; bridges in this package translate the
    configuration into kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- no such configuration set.
    - ``ConfigurationError`` -- missing or invalid values.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``VESTING_CONFIG_TRACE`` log entry with the config_id, version and
    checksum, tying each deployment to the exact configuration source.
"""

from __future__ import annotations

import logging
from pathlib import Path

from vesting_config.loader import ConfigurationError, load_configuration
from vesting_config.schema import TokenParameters, VestingConfiguration, VestingParameters

_logger = logging.getLogger("vesting_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

__all__ = [
    "ConfigurationError",
    "TokenParameters",
    "VestingConfiguration",
    "VestingParameters",
    "get_active_config",
]


def get_active_config(
    config_set: str = "default",
    config_dir: Path | None = None,
) -> VestingConfiguration:
    """The only public configuration entrypoint.

    Args:
        config_set: Name of the subdirectory under the sets directory.
        config_dir: Override path to the sets directory.
            Defaults to vesting_config/sets/.

    Raises:
        FileNotFoundError: If the configuration set has no root.yaml.
        ConfigurationError: If validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    root_file = sets_dir / config_set / "root.yaml"
    if not root_file.is_file():
        raise FileNotFoundError(f"Configuration set not found: {root_file}")

    config = load_configuration(root_file)

    _logger.info(
        "VESTING_CONFIG_TRACE",
        extra={
            "trace_type": "VESTING_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "period_length_seconds": config.vesting.period_length_seconds,
            "token_symbol": config.token.symbol,
        },
    )
    return config
