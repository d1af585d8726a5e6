"""
vesting_config: YAML loading, validation, trace logging and bridges.
"""

from pathlib import Path

import pytest
import yaml

from tests.conftest import ALICE, BENEFICIARY, OWNER
from vesting_config import ConfigurationError, get_active_config
from vesting_config.bridges import build_vesting_policy, build_vesting_service
from vesting_config.loader import compute_checksum, load_yaml_file, parse_configuration
from vesting_kernel.domain.policy import UINT256_MAX, VestingPolicy

DAY = 86_400


def _write_set(tmp_path: Path, data: dict, name: str = "custom") -> Path:
    set_dir = tmp_path / name
    set_dir.mkdir()
    (set_dir / "root.yaml").write_text(yaml.safe_dump(data))
    return tmp_path


class TestDefaultSet:
    def test_defaults(self):
        config = get_active_config()
        assert config.config_id == "default"
        assert config.vesting.period_length_seconds == 30 * DAY
        assert config.vesting.start_time_floor == 1_514_764_800
        assert config.vesting.max_grant_amount == UINT256_MAX
        assert config.token.total_supply == 1_000_000_000 * 10**18
        assert config.token.symbol == "VEST"
        assert config.token.holding_account == "vesting:holding"
        assert len(config.checksum) == 64

    def test_policy_bridge_matches_kernel_defaults(self):
        assert build_vesting_policy(get_active_config()) == VestingPolicy()

    def test_trace_logged(self, captured_logs):
        config = get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "VESTING_CONFIG_TRACE"]
        assert traces[-1]["checksum"] == config.checksum
        assert traces[-1]["config_set_id"] == "default"
        assert traces[-1]["logger"] == "vesting_kernel.config"


class TestLoader:
    def test_missing_set(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config("absent", config_dir=tmp_path)

    def test_custom_set(self, tmp_path):
        sets = _write_set(
            tmp_path,
            {
                "config_id": "weekly",
                "version": 3,
                "vesting": {"period_length_seconds": 7 * DAY},
                "token": {"symbol": "WK", "total_supply": "5000"},
            },
        )
        config = get_active_config("custom", config_dir=sets)
        assert config.version == 3
        assert config.vesting.period_length_seconds == 7 * DAY
        assert config.vesting.start_time_floor == 1_514_764_800
        assert config.token.total_supply == 5_000

    def test_missing_config_id(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_configuration({"vesting": {}})
        assert exc_info.value.field == "config_id"
        assert exc_info.value.code == "CONFIG_INVALID"

    @pytest.mark.parametrize(
        ("section", "field", "value"),
        [
            ("vesting", "period_length_seconds", 0),
            ("vesting", "period_length_seconds", 1.5),
            ("vesting", "max_grant_amount", str(2**256)),
            ("vesting", "start_time_floor", True),
            ("token", "total_supply", "-5"),
            ("token", "symbol", ""),
            ("token", "holding_account", " "),
        ],
    )
    def test_invalid_values(self, section, field, value):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_configuration({"config_id": "bad", section: {field: value}})
        assert exc_info.value.field == f"{section}.{field}"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "root.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})


class TestServiceBridge:
    def test_service_from_config(self, session, clock, tmp_path):
        sets = _write_set(
            tmp_path,
            {
                "config_id": "small",
                "token": {"symbol": "SML", "total_supply": 1_000_000, "holding_account": "escrow"},
            },
        )
        config = get_active_config("custom", config_dir=sets)
        service = build_vesting_service(session, config, clock=clock)

        service.access_control.initialize(OWNER)
        service.token_ledger.mint_initial_supply({OWNER: 1_000_000})
        service.token_ledger.approve(OWNER, "escrow", 1_000_000)
        service.create_grant(
            OWNER, BENEFICIARY, 600_000, clock.timestamp(), 0, 360 * DAY, True
        )

        assert service.holding_account == "escrow"
        assert service.token_ledger.symbol == "SML"
        assert service.token_ledger.balance_of("escrow") == 600_000
        assert service.policy == build_vesting_policy(config)
        assert service.get_grant_beneficiaries() == [BENEFICIARY]
        assert service.token_ledger.balance_of(ALICE) == 0
