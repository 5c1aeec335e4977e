"""Coinbets admin CLI entry point."""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from coinbets import __version__
from coinbets.config import Settings, get_settings
from coinbets.database import LedgerStore
from coinbets.exceptions import LedgerError
from coinbets.ledger import Ledger, open_ledger
from coinbets.services import BetEngine

logger = logging.getLogger(__name__)

CONFIG_TEMPLATE = """# Coinbets Configuration
# Operational parameters for the ledger. Secrets belong in .env, not here.

ledger:
  starting_balance: 100
  income_amount: 10

store:
  busy_timeout_seconds: 30
  echo_sql: false
"""


def _configure_logging() -> None:
    try:
        level = get_settings().log_level
    except ValidationError:
        level = "INFO"
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _open_ledger(settings: Settings | None = None) -> Ledger:
    """Open the ledger, then initialize Logfire without failing commands."""
    ledger = open_ledger(settings)
    try:
        from coinbets.observability import initialize_logfire

        initialize_logfire(get_settings(), ledger.store.engine)
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
    return ledger


def cmd_init(args: argparse.Namespace) -> int:
    """Create the data directory, config template and ledger tables."""
    settings = get_settings()
    data_dir = settings.data_dir

    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created data directory: {data_dir}")

        config_path = data_dir / "config.yaml"
        if not config_path.exists():
            config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
            logger.info(f"Created config template: {config_path}")
        else:
            logger.info(f"Config file already exists: {config_path}")

        ledger = _open_ledger(settings)
        ledger.close()

        print(f"\nLedger initialized at {data_dir}\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        print(f"\nInitialization failed: {e}\n")
        return 1


def cmd_purge(args: argparse.Namespace) -> int:
    """Sweep tombstoned bets without starting the full ledger."""
    store = LedgerStore.from_settings(get_settings())
    try:
        store.create_schema()
        purged = BetEngine(store, purge_on_start=False).purge_tombstoned()
        print(f"\nPurged {purged} resolved or aborted bets\n")
        return 0
    finally:
        store.dispose()


def cmd_accounts(args: argparse.Namespace) -> int:
    """List balances of a tenant."""
    ledger = _open_ledger()
    try:
        statuses = ledger.accounts.list_accounts(args.tenant)
        print(f"\n=== Accounts on tenant {args.tenant} ===\n")
        if not statuses:
            print("  No accounts\n")
            return 0
        for status in statuses:
            print(f"  {status.user_id}: {status.balance} coins ({status.in_bet} in bets)")
        print()
        return 0
    finally:
        ledger.close()


def cmd_bet(args: argparse.Namespace) -> int:
    """Show a bet and its wagers."""
    ledger = _open_ledger()
    try:
        status = ledger.bets.get_bet(args.bet_id)
        print(f"\n=== Bet {status.bet_id} ({status.status_label}) ===\n")
        print(f"{status.description}\n")
        for outcome in status.outcomes:
            print(f"  [{outcome.position}] {outcome.description}: {outcome.total} coins")
            for wager in outcome.wagers:
                print(f"      {wager.user_id}: {wager.amount}")
        print(f"\nPool: {status.pool} coins\n")
        return 0
    finally:
        ledger.close()


def cmd_reset(args: argparse.Namespace) -> int:
    """Reset every balance of a tenant and discard its bets."""
    settings = get_settings()
    balance = args.balance if args.balance is not None else settings.ledger.starting_balance

    ledger = _open_ledger(settings)
    try:
        updates = ledger.accounts.reset_all(args.tenant, balance)
        print(f"\nReset {len(updates)} accounts to {balance} coins\n")
        return 0
    finally:
        ledger.close()


def cmd_income(args: argparse.Namespace) -> int:
    """Credit every account of a tenant."""
    settings = get_settings()
    amount = args.amount if args.amount is not None else settings.ledger.income_amount

    ledger = _open_ledger(settings)
    try:
        updates = ledger.accounts.apply_income(args.tenant, amount)
        print(f"\nPaid {amount} coins to {len(updates)} accounts\n")
        return 0
    finally:
        ledger.close()


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Coinbets: coin ledger administration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Coinbets {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_init = subparsers.add_parser(
        "init",
        help="Initialize data directory, configuration and ledger tables",
    )
    parser_init.set_defaults(func=cmd_init)

    parser_purge = subparsers.add_parser(
        "purge",
        help="Remove resolved and aborted bets from the database",
    )
    parser_purge.set_defaults(func=cmd_purge)

    parser_accounts = subparsers.add_parser(
        "accounts",
        help="List the accounts of a tenant",
    )
    parser_accounts.add_argument("tenant", type=int, help="Tenant ID")
    parser_accounts.set_defaults(func=cmd_accounts)

    parser_bet = subparsers.add_parser(
        "bet",
        help="Show a bet with its wagers",
    )
    parser_bet.add_argument("bet_id", type=int, help="Bet ID")
    parser_bet.set_defaults(func=cmd_bet)

    parser_reset = subparsers.add_parser(
        "reset",
        help="Reset all balances of a tenant and discard its bets",
    )
    parser_reset.add_argument("tenant", type=int, help="Tenant ID")
    parser_reset.add_argument(
        "--balance",
        type=int,
        default=None,
        help="New balance (default: ledger.starting_balance)",
    )
    parser_reset.set_defaults(func=cmd_reset)

    parser_income = subparsers.add_parser(
        "income",
        help="Credit every account of a tenant",
    )
    parser_income.add_argument("tenant", type=int, help="Tenant ID")
    parser_income.add_argument(
        "--amount",
        type=int,
        default=None,
        help="Coins per account (default: ledger.income_amount)",
    )
    parser_income.set_defaults(func=cmd_income)

    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    _configure_logging()

    try:
        return args.func(args)
    except (LedgerError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"\n{args.command} failed: {e}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
