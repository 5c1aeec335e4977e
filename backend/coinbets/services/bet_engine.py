"""Bet lifecycle and settlement service."""

import logging
from decimal import Decimal
from typing import Sequence

from sqlalchemy import delete
from sqlalchemy.orm import Session

from coinbets.amount import Amount, resolve_amount, to_amount
from coinbets.database import queries
from coinbets.database.store import LedgerStore
from coinbets.exceptions import (
    AlreadyExistsError,
    BetLockedError,
    MultipleOutcomeStakeError,
    NotFoundError,
)
from coinbets.models import Bet, Outcome, Wager
from coinbets.payout import distribute
from coinbets.schemas import AccountUpdate, BetStatus, OutcomeStatus, WagerStatus
from coinbets.services.account_service import AccountService

logger = logging.getLogger(__name__)


class BetEngine:
    """
    Handles bet creation, staking, locking, resolution and abort.

    Lifecycle:
        Open -> Locked -> Resolved | Aborted -> tombstoned

    Resolving or aborting a bet tombstones it in the same transaction that
    moves the coins. Tombstoned bets behave as missing and are physically
    removed by purge_tombstoned(), which runs when the engine starts.
    """

    def __init__(
        self,
        store: LedgerStore,
        accounts: AccountService | None = None,
        purge_on_start: bool = True,
    ):
        self.store = store
        self.accounts = accounts or AccountService(store)
        if purge_on_start:
            self.purge_tombstoned()

    def create_bet(
        self,
        bet_id: int,
        tenant_id: int,
        description: str,
        outcome_descriptions: Sequence[str],
        author_id: int | None = None,
    ) -> BetStatus:
        """Open a bet with its outcomes, numbered from 0 in the given order."""
        queries.check_ids(bet_id=bet_id, tenant_id=tenant_id, author_id=author_id)
        if len(outcome_descriptions) < 2:
            raise ValueError("A bet needs at least two outcomes")

        with self.store.transaction() as session:
            # Tombstoned ids stay taken until the next purge
            if session.get(Bet, bet_id) is not None:
                raise AlreadyExistsError(f"Bet {bet_id} already exists")

            bet = Bet(
                id=bet_id,
                tenant_id=tenant_id,
                description=description,
                author_id=author_id,
                is_open=True,
                outcomes=[
                    Outcome(position=position, description=str(outcome))
                    for position, outcome in enumerate(outcome_descriptions)
                ],
            )
            session.add(bet)
            session.flush()
            status = self._snapshot(session, bet)

        logger.info(
            f"Created bet {bet_id} on tenant {tenant_id} "
            f"with {len(outcome_descriptions)} outcomes"
        )
        return status

    def list_outcomes(self, bet_id: int) -> list[int]:
        queries.check_ids(bet_id=bet_id)
        with self.store.transaction(write=False) as session:
            queries.get_live_bet(session, bet_id)
            return [outcome.position for outcome in queries.outcomes_of_bet(session, bet_id)]

    def get_bet(self, bet_id: int) -> BetStatus:
        queries.check_ids(bet_id=bet_id)
        with self.store.transaction(write=False) as session:
            return self._snapshot(session, queries.get_live_bet(session, bet_id))

    def list_bets(self, tenant_id: int) -> list[BetStatus]:
        """Live bets of a tenant, open and locked."""
        queries.check_ids(tenant_id=tenant_id)
        with self.store.transaction(write=False) as session:
            return [
                self._snapshot(session, bet)
                for bet in queries.live_bets_for_tenant(session, tenant_id)
            ]

    def stake(
        self,
        bet_id: int,
        outcome_position: int,
        tenant_id: int,
        user_id: int,
        amount: Amount | str | int | float | Decimal,
    ) -> tuple[AccountUpdate, BetStatus]:
        """
        Escrow coins from a user's balance onto an outcome.

        Process:
        1. Check the bet is live, belongs to the tenant and is still open
        2. Check the user does not already back another outcome
        3. Resolve the amount against the current balance
        4. Debit the account and grow the wager, in one transaction

        Repeated stakes on the same outcome accumulate into one wager.
        """
        queries.check_ids(
            bet_id=bet_id,
            outcome_position=outcome_position,
            tenant_id=tenant_id,
            user_id=user_id,
        )
        amount = to_amount(amount)

        with self.store.transaction() as session:
            bet = queries.get_live_bet(session, bet_id)
            if bet.tenant_id != tenant_id:
                raise NotFoundError(f"Bet {bet_id} not found on tenant {tenant_id}")
            if not bet.is_open:
                raise BetLockedError(f"Bet {bet_id} is locked")
            queries.get_outcome(session, bet_id, outcome_position)

            wager = queries.get_wager(session, bet_id, tenant_id, user_id)
            if wager is not None and wager.outcome_position != outcome_position:
                raise MultipleOutcomeStakeError(
                    f"User {user_id} already backs outcome {wager.outcome_position} "
                    f"of bet {bet_id}",
                    held_outcome=wager.outcome_position,
                )

            balance = self.accounts.balance_in(session, tenant_id, user_id)
            value = resolve_amount(balance, amount)

            update = self.accounts.apply_delta(tenant_id, user_id, -value, session=session)
            if wager is None:
                wager = Wager(
                    bet_id=bet_id,
                    tenant_id=tenant_id,
                    user_id=user_id,
                    outcome_position=outcome_position,
                    amount=0,
                )
                session.add(wager)
            wager.amount += value
            session.flush()

            status = self._snapshot(session, bet)

        logger.info(
            f"User {user_id} staked {value} coins ({amount}) on outcome "
            f"{outcome_position} of bet {bet_id}"
        )
        return update, status

    def lock_bet(self, bet_id: int) -> None:
        """Stop accepting wagers. Locking a locked bet is a no-op."""
        queries.check_ids(bet_id=bet_id)
        with self.store.transaction() as session:
            bet = queries.get_live_bet(session, bet_id)
            bet.is_open = False

        logger.info(f"Locked bet {bet_id}")

    def abort_bet(self, bet_id: int) -> list[AccountUpdate]:
        """Refund every wager in full and retire the bet."""
        queries.check_ids(bet_id=bet_id)
        with self.store.transaction() as session:
            bet = queries.get_live_bet(session, bet_id)

            updates = [
                self.accounts.apply_delta(
                    bet.tenant_id, wager.user_id, wager.amount, session=session
                )
                for wager in queries.wagers_for_bet(session, bet_id)
            ]
            self._retire(session, bet)

        logger.info(f"Aborted bet {bet_id}, refunded {len(updates)} wagers")
        return updates

    def resolve(self, bet_id: int, winning_position: int) -> list[AccountUpdate]:
        """
        Pay the whole pool to the backers of the winning outcome.

        Payouts are proportional to stake, rounded with the largest remainder
        method so they add up to the pool exactly. Losing stakes are not
        refunded. When nobody backed the winning outcome no account is
        credited and the pool stays unclaimed.
        """
        queries.check_ids(bet_id=bet_id, winning_position=winning_position)
        with self.store.transaction() as session:
            bet = queries.get_live_bet(session, bet_id)
            queries.get_outcome(session, bet_id, winning_position)

            pool = sum(wager.amount for wager in queries.wagers_for_bet(session, bet_id))
            winners = queries.wagers_for_outcome(session, bet_id, winning_position)
            stakes = [wager.amount for wager in winners]

            updates = []
            if sum(stakes) > 0:
                payouts = distribute(pool, stakes)
                for wager, payout in zip(winners, payouts):
                    updates.append(
                        self.accounts.apply_delta(
                            bet.tenant_id, wager.user_id, payout, session=session
                        )
                    )
            elif pool > 0:
                logger.warning(
                    f"Nobody backed outcome {winning_position} of bet {bet_id}, "
                    f"{pool} coins left unclaimed"
                )

            self._retire(session, bet)

        logger.info(
            f"Resolved bet {bet_id} on outcome {winning_position}: "
            f"{pool} coins to {len(updates)} winners"
        )
        return updates

    def purge_tombstoned(self) -> int:
        """Delete tombstoned bets with their outcomes and wagers."""
        with self.store.transaction() as session:
            bet_ids = queries.tombstoned_bet_ids(session)
            if bet_ids:
                session.execute(delete(Bet).where(Bet.id.in_(bet_ids)))

        if bet_ids:
            logger.info(f"Purged {len(bet_ids)} tombstoned bets")
        return len(bet_ids)

    def _retire(self, session: Session, bet: Bet) -> None:
        bet.is_open = False
        queries.add_tombstone(session, bet.id)

    def _snapshot(self, session: Session, bet: Bet) -> BetStatus:
        outcomes = [
            OutcomeStatus(
                position=outcome.position,
                description=outcome.description,
                wagers=[
                    WagerStatus(user_id=wager.user_id, amount=wager.amount)
                    for wager in queries.wagers_for_outcome(
                        session, bet.id, outcome.position
                    )
                ],
            )
            for outcome in queries.outcomes_of_bet(session, bet.id)
        ]
        return BetStatus(
            bet_id=bet.id,
            tenant_id=bet.tenant_id,
            description=bet.description,
            author_id=bet.author_id,
            is_open=bet.is_open,
            outcomes=outcomes,
        )
