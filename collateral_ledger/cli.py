"""Command-line interface for the collateral ledger."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .calculator import CollateralCalculator
from .config import AppConfig, load_config
from .errors import LedgerError
from .events import format_units
from .factory import build_oracle
from .logging_setup import configure_logging
from .simulation import ScenarioReport, load_scenario, run_scenario


def _non_negative_int(value: str) -> int:
    try:
        amount = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if amount < 0:
        raise argparse.ArgumentTypeError(f"amount must be non-negative, got {amount}")
    return amount


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="collateral-ledger",
        description="Single-pair collateralized lending ledger",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    quote_parser = sub.add_parser(
        "quote", help="Borrowing capacity for a deposit at the current price"
    )
    quote_parser.add_argument(
        "deposit",
        type=_non_negative_int,
        help="Deposit balance in raw collateral units",
    )
    quote_parser.add_argument(
        "--debt",
        type=_non_negative_int,
        default=0,
        help="Existing debt in raw debt units",
    )

    simulate_parser = sub.add_parser(
        "simulate", help="Replay a scripted scenario against an in-memory ledger"
    )
    simulate_parser.add_argument("scenario", help="Path to a scenario YAML file")

    return parser


async def _quote(config: AppConfig, deposit: int, debt: int) -> int:
    engine_cfg = config.engine
    oracle = build_oracle(config)
    snapshot = await asyncio.wait_for(
        oracle.latest_price(), timeout=engine_cfg.oracle_timeout_seconds
    )
    calc = CollateralCalculator(engine_cfg.collateral, engine_cfg.debt, snapshot)

    coll, dbt = engine_cfg.collateral, engine_cfg.debt
    print(f"Price: {snapshot.price} (precision {snapshot.precision})")
    print(f"Deposit: {format_units(deposit, coll.decimals)} {coll.symbol}")
    print(f"Debt: {format_units(debt, dbt.decimals)} {dbt.symbol}")
    capacity = calc.collateral_to_debt(deposit)
    print(f"Capacity: {format_units(capacity, dbt.decimals)} {dbt.symbol}")
    print(
        f"Borrowable: "
        f"{format_units(calc.max_borrowable(deposit, debt), dbt.decimals)} {dbt.symbol}"
    )
    print(
        f"Minimum collateral: "
        f"{format_units(calc.debt_to_collateral(debt), coll.decimals)} {coll.symbol}"
    )
    healthy = calc.is_collateralized(debt, deposit)
    print(f"Status: {'✅ Healthy' if healthy else '🚨 Undercollateralized'}")
    return 0 if healthy else 2


def _print_report(report: ScenarioReport) -> None:
    for r in report.results:
        mark = "✅" if r.passed else "❌"
        expected = f" (expected {r.expected})" if r.expected else ""
        print(f"{mark} {r.index:>3} {r.action:<10} {r.outcome}{expected}")

    print("\nFinal ledger:")
    if not report.accounts:
        print("  (empty)")
    for account, entry in sorted(report.accounts.items()):
        print(
            f"  {account}: deposit={entry.deposit_balance} debt={entry.debt_balance}"
        )


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and return the exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "quote":
        try:
            return await _quote(config, args.deposit, args.debt)
        except (LedgerError, asyncio.TimeoutError) as e:
            print(f"Quote failed: {e}", file=sys.stderr)
            return 1

    if args.command == "simulate":
        report = await run_scenario(config, load_scenario(args.scenario))
        _print_report(report)
        return 0 if report.passed else 1

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
