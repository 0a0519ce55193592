"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from collateral_ledger.access import StaticAccessControl
from collateral_ledger.config import (
    AppConfig,
    EngineConfig,
    NotificationsConfig,
    PriceOracleConfig,
    PythConfig,
    StaticOracleConfig,
    TelegramConfig,
)
from collateral_ledger.custody import InMemoryCustody
from collateral_ledger.engine import LendingEngine
from collateral_ledger.events import InMemoryEventLog
from collateral_ledger.models import AccountEntry, AssetInfo, PriceSnapshot
from collateral_ledger.oracles import StaticPriceOracle

ONE = 10**18
OPERATOR = "0xOPERATOR"
ALICE = "0xALICE"
BOB = "0xBOB"


# ---------------------------------------------------------------------------
# Asset / config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def weth() -> AssetInfo:
    return AssetInfo(symbol="WETH", decimals=18)


@pytest.fixture()
def usdc() -> AssetInfo:
    return AssetInfo(symbol="USDC", decimals=18)


@pytest.fixture()
def engine_config(weth: AssetInfo, usdc: AssetInfo) -> EngineConfig:
    return EngineConfig(
        collateral=weth,
        debt=usdc,
        operator=OPERATOR,
        price_precision=18,
        oracle_timeout_seconds=1.0,
    )


@pytest.fixture()
def sample_app_config(engine_config: EngineConfig) -> AppConfig:
    return AppConfig(
        engine=engine_config,
        price_oracle=PriceOracleConfig(
            provider="static",
            precision=18,
            timeout_seconds=1.0,
            static=StaticOracleConfig(price=ONE),
            pyth=PythConfig(),
        ),
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=False,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
        ),
    )


@pytest.fixture()
def unit_price() -> PriceSnapshot:
    return PriceSnapshot(price=ONE, precision=18)


# ---------------------------------------------------------------------------
# Collaborator / engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def oracle() -> StaticPriceOracle:
    return StaticPriceOracle(ONE, precision=18)


@pytest.fixture()
def custody(weth: AssetInfo, usdc: AssetInfo) -> InMemoryCustody:
    c = InMemoryCustody()
    c.fund(ALICE, weth.symbol, 10 * ONE)
    c.fund(BOB, weth.symbol, 10 * ONE)
    c.seed_custody(usdc.symbol, 100 * ONE)
    return c


@pytest.fixture()
def event_log() -> InMemoryEventLog:
    return InMemoryEventLog()


@pytest.fixture()
def engine(
    engine_config: EngineConfig,
    oracle: StaticPriceOracle,
    custody: InMemoryCustody,
    event_log: InMemoryEventLog,
) -> LendingEngine:
    return LendingEngine(
        engine_config,
        oracle=oracle,
        transfers=custody,
        access=StaticAccessControl([OPERATOR]),
        events=event_log,
    )


@pytest.fixture()
def sample_entry() -> AccountEntry:
    return AccountEntry(deposit_balance=ONE, debt_balance=ONE // 2)


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    engine:
      collateral: {symbol: WETH, decimals: 18}
      debt: {symbol: USDC, decimals: 6}
      operator: "0xOPERATOR"
    price_oracle:
      provider: static
      precision: 8
      timeout_seconds: 2.5
      static:
        price: "250000000000"
      pyth:
        hermes_url: "https://hermes.example.com"
        collateral_feed: "aaa"
        debt_feed: "bbb"
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: "999"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


SAMPLE_SCENARIO = textwrap.dedent("""\
    price: "1000000000000000000"
    custody:
      USDC: "10000000000000000000"
    steps:
      - fund: {account: alice, asset: WETH, amount: "1000000000000000000"}
      - deposit: {account: alice, amount: "1000000000000000000"}
      - borrow: {account: alice, amount: "600000000000000000"}
      - borrow: {account: alice, amount: "500000000000000000", expect: WouldBecomeUndercollateralized}
      - liquidate: {account: alice, expect: NotUndercollateralized}
      - set_price: {price: "2000000000000000000"}
      - liquidate: {account: alice}
""")


@pytest.fixture()
def sample_scenario_path(tmp_path: Path) -> Path:
    path = tmp_path / "scenario.yaml"
    path.write_text(SAMPLE_SCENARIO)
    return path
