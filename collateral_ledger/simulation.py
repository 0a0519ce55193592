"""Scripted scenario runner against in-memory collaborators.

A scenario is a YAML document::

    price: "1000000000000000000"     # optional; defaults to the static oracle price
    custody: {USDC: "5000000000"}    # optional engine liquidity per asset
    steps:
      - fund: {account: alice, asset: WETH, amount: "1000000000000000000"}
      - deposit: {account: alice, amount: "1000000000000000000"}
      - borrow: {account: alice, amount: "1100000000000000000",
                 expect: WouldBecomeUndercollateralized}
      - set_price: {price: "2000000000000000000"}
      - liquidate: {account: alice}   # caller defaults to the configured operator

``expect`` names the error class a step must raise; a step without ``expect``
must succeed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import AppConfig
from .custody import InMemoryCustody
from .errors import LedgerError
from .factory import EngineBundle, build_engine
from .models import AccountEntry
from .oracles import StaticPriceOracle

logger = logging.getLogger(__name__)

REQUIRED_KEYS: dict[str, tuple[str, ...]] = {
    "fund": ("account", "asset", "amount"),
    "deposit": ("account", "amount"),
    "borrow": ("account", "amount"),
    "repay": ("account", "amount"),
    "withdraw": ("account", "amount"),
    "liquidate": ("account",),
    "set_price": ("price",),
}


@dataclass(frozen=True)
class StepResult:
    index: int
    action: str
    outcome: str
    expected: str | None = None

    @property
    def passed(self) -> bool:
        return self.outcome == (self.expected or "ok")


@dataclass
class ScenarioReport:
    results: list[StepResult] = field(default_factory=list)
    accounts: dict[str, AccountEntry] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)


def load_scenario(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw.get("steps"), list):
        raise ValueError("Scenario must contain a 'steps' list")
    return raw


def _parse_step(index: int, step: Any) -> tuple[str, dict[str, Any]]:
    if not isinstance(step, dict) or len(step) != 1:
        raise ValueError(f"Step {index}: expected a single-key mapping, got {step!r}")
    action, args = next(iter(step.items()))
    if action not in REQUIRED_KEYS:
        raise ValueError(f"Step {index}: unknown action '{action}'")
    if args is not None and not isinstance(args, dict):
        raise ValueError(f"Step {index}: {action} arguments must be a mapping")
    args = dict(args or {})
    missing = [key for key in REQUIRED_KEYS[action] if key not in args]
    if missing:
        raise ValueError(f"Step {index}: {action} missing {', '.join(missing)}")
    return action, args


async def _apply(
    bundle: EngineBundle,
    oracle: StaticPriceOracle,
    custody: InMemoryCustody,
    action: str,
    args: dict[str, Any],
) -> None:
    engine = bundle.engine
    if action == "set_price":
        oracle.set_price(int(args["price"]))
    elif action == "fund":
        custody.fund(args["account"], args["asset"], int(args["amount"]))
    elif action == "liquidate":
        caller = args.get("caller", engine.config.operator)
        await engine.liquidate(caller, args["account"])
    else:
        operation = getattr(engine, action)
        await operation(args["account"], int(args["amount"]))


async def run_scenario(config: AppConfig, scenario: dict[str, Any]) -> ScenarioReport:
    """Replay ``scenario`` step by step and collect per-step outcomes."""
    price = int(scenario.get("price", config.price_oracle.static.price))
    oracle = StaticPriceOracle(price, config.price_oracle.precision)
    custody = InMemoryCustody()
    for asset, amount in (scenario.get("custody") or {}).items():
        custody.seed_custody(asset, int(amount))

    bundle = build_engine(config, oracle=oracle, transfers=custody)
    report = ScenarioReport()

    for index, step in enumerate(scenario["steps"], start=1):
        action, args = _parse_step(index, step)
        expected = args.pop("expect", None)
        try:
            await _apply(bundle, oracle, custody, action, args)
            outcome = "ok"
        except LedgerError as e:
            outcome = type(e).__name__
            logger.debug("Step %d %s raised %s", index, action, e)

        result = StepResult(index=index, action=action, outcome=outcome, expected=expected)
        if not result.passed:
            logger.warning(
                "Step %d %s: expected %s, got %s",
                index, action, expected or "ok", outcome,
            )
        report.results.append(result)

    report.accounts = bundle.engine.accounts()
    return report
