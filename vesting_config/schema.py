"""
VestingConfiguration schema.

Frozen dataclasses the loader parses YAML into.  The kernel never sees
these types; bridges.py translates them into kernel inputs.
"""

from __future__ import annotations

from dataclasses import dataclass

UINT256_MAX = 2**256 - 1


@dataclass(frozen=True)
class VestingParameters:
    """Schedule parameters fixed for the lifetime of a deployment."""

    period_length_seconds: int = 30 * 86_400
    start_time_floor: int = 1_514_764_800
    max_grant_amount: int = UINT256_MAX


@dataclass(frozen=True)
class TokenParameters:
    """The reference token ledger."""

    symbol: str = "VEST"
    decimals: int = 18
    total_supply: int = 1_000_000_000 * 10**18
    holding_account: str = "vesting:holding"


@dataclass(frozen=True)
class VestingConfiguration:
    """
    One complete, validated configuration set.

    checksum is the SHA-256 of the canonical JSON of the source YAML.
    """

    config_id: str
    version: int
    vesting: VestingParameters
    token: TokenParameters
    checksum: str
    description: str = ""
