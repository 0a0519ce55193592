"""Wire a LendingEngine and its collaborators from AppConfig."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from .access import StaticAccessControl
from .config import AppConfig
from .custody import InMemoryCustody
from .engine import LendingEngine
from .events import (
    CompositeEventSink,
    InMemoryEventLog,
    LoggingEventSink,
    NotifierEventSink,
)
from .interfaces.asset_transfer import AssetTransfer
from .interfaces.event_sink import EventSink
from .interfaces.notifier import Notifier
from .interfaces.price_oracle import PriceOracle
from .notifications import TelegramNotifier
from .oracles import PythOracle, StaticPriceOracle

logger = logging.getLogger(__name__)


@dataclass
class EngineBundle:
    """An engine together with the collaborators it was built with."""

    engine: LendingEngine
    oracle: PriceOracle
    transfers: AssetTransfer
    access: StaticAccessControl
    history: InMemoryEventLog


def build_oracle(config: AppConfig) -> PriceOracle:
    oracle_cfg = config.price_oracle
    if oracle_cfg.provider == "pyth":
        return PythOracle(
            oracle_cfg.pyth,
            precision=oracle_cfg.precision,
            timeout=oracle_cfg.timeout_seconds,
        )
    if oracle_cfg.provider == "static":
        return StaticPriceOracle(oracle_cfg.static.price, oracle_cfg.precision)
    raise ValueError(f"Unknown price oracle provider '{oracle_cfg.provider}'")


def build_notifiers(config: AppConfig) -> list[Notifier]:
    notifiers: list[Notifier] = []
    if config.notifications.telegram.enabled:
        notifiers.append(TelegramNotifier(config.notifications.telegram))
    return notifiers


def build_engine(
    config: AppConfig,
    oracle: PriceOracle | None = None,
    transfers: AssetTransfer | None = None,
) -> EngineBundle:
    """Build an engine; collaborators not passed in are derived from config."""
    engine_cfg = config.engine
    oracle = oracle if oracle is not None else build_oracle(config)
    transfers = transfers if transfers is not None else InMemoryCustody()
    access = StaticAccessControl([engine_cfg.operator])
    history = InMemoryEventLog()

    sinks: list[EventSink] = [history, LoggingEventSink()]
    notifiers = build_notifiers(config)
    if notifiers:
        sinks.append(NotifierEventSink(notifiers, engine_cfg.collateral, engine_cfg.debt))

    engine = LendingEngine(
        engine_cfg,
        oracle=oracle,
        transfers=transfers,
        access=access,
        events=CompositeEventSink(sinks),
    )
    logger.info(
        "Engine ready: collateral %s(%d), debt %s(%d), %d notifier(s)",
        engine_cfg.collateral.symbol,
        engine_cfg.collateral.decimals,
        engine_cfg.debt.symbol,
        engine_cfg.debt.decimals,
        len(notifiers),
    )
    return EngineBundle(
        engine=engine, oracle=oracle, transfers=transfers, access=access, history=history
    )
