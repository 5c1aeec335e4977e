"""Account balance management service."""

import logging

from sqlalchemy import delete
from sqlalchemy.orm import Session

from coinbets.database import queries
from coinbets.database.store import LedgerStore
from coinbets.exceptions import AlreadyExistsError, InsufficientFundsError, NotFoundError
from coinbets.models import Account, Bet
from coinbets.schemas import AccountStatus, AccountUpdate

logger = logging.getLogger(__name__)


class AccountService:
    """
    Creates accounts and moves coins in and out of them.

    Balances only change through signed deltas, except for the
    administrative reset.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    def create_account(self, tenant_id: int, user_id: int, initial_balance: int) -> None:
        """Register a user on a tenant with a starting balance."""
        queries.check_ids(tenant_id=tenant_id, user_id=user_id)
        if initial_balance < 0:
            raise ValueError(f"Initial balance cannot be negative: {initial_balance}")

        with self.store.transaction() as session:
            if queries.get_account(session, tenant_id, user_id) is not None:
                raise AlreadyExistsError(
                    f"Account {user_id} already exists on tenant {tenant_id}"
                )
            session.add(
                Account(tenant_id=tenant_id, user_id=user_id, balance=initial_balance)
            )

        logger.info(
            f"Created account {user_id} on tenant {tenant_id} "
            f"with {initial_balance} coins"
        )

    def get_balance(self, tenant_id: int, user_id: int) -> int:
        queries.check_ids(tenant_id=tenant_id, user_id=user_id)
        with self.store.transaction(write=False) as session:
            return self.balance_in(session, tenant_id, user_id)

    def balance_in(self, session: Session, tenant_id: int, user_id: int) -> int:
        """Balance read inside the caller's transaction."""
        account = queries.get_account(session, tenant_id, user_id)
        if account is None:
            raise NotFoundError(f"Account {user_id} not found on tenant {tenant_id}")
        return account.balance

    def apply_delta(
        self,
        tenant_id: int,
        user_id: int,
        delta: int,
        session: Session | None = None,
    ) -> AccountUpdate:
        """
        Add a signed delta to a balance and return the update.

        Joins the given session's transaction, or runs in a transaction of
        its own when no session is passed. A debit that would leave the
        balance negative fails with InsufficientFundsError; it is never
        clamped.
        """
        queries.check_ids(tenant_id=tenant_id, user_id=user_id)
        if session is None:
            with self.store.transaction() as own_session:
                return self._change_balance(own_session, tenant_id, user_id, delta)
        return self._change_balance(session, tenant_id, user_id, delta)

    def _change_balance(
        self, session: Session, tenant_id: int, user_id: int, delta: int
    ) -> AccountUpdate:
        account = queries.get_account(session, tenant_id, user_id, lock=True)
        if account is None:
            raise NotFoundError(f"Account {user_id} not found on tenant {tenant_id}")

        new_balance = account.balance + delta
        if new_balance < 0:
            raise InsufficientFundsError(
                f"Account {user_id} has {account.balance} coins, cannot apply {delta}"
            )

        account.balance = new_balance
        session.flush()

        return AccountUpdate(
            tenant_id=tenant_id, user_id=user_id, diff=delta, balance=new_balance
        )

    def reset_all(self, tenant_id: int, new_balance: int) -> list[AccountUpdate]:
        """
        Set every account of a tenant to new_balance and discard all of the
        tenant's bets (admin function).

        Escrowed coins are not refunded: the reset replaces them.
        """
        queries.check_ids(tenant_id=tenant_id)
        if new_balance < 0:
            raise ValueError(f"Balance cannot be negative: {new_balance}")

        with self.store.transaction() as session:
            # Outcomes, wagers and tombstones go with the bets (ON DELETE CASCADE)
            result = session.execute(delete(Bet).where(Bet.tenant_id == tenant_id))
            discarded = result.rowcount

            updates = []
            for account in queries.accounts_for_tenant(session, tenant_id):
                updates.append(
                    AccountUpdate(
                        tenant_id=tenant_id,
                        user_id=account.user_id,
                        diff=new_balance - account.balance,
                        balance=new_balance,
                    )
                )
                account.balance = new_balance

        logger.info(
            f"Reset {len(updates)} accounts on tenant {tenant_id} to {new_balance} "
            f"coins, discarded {discarded} bets"
        )
        return updates

    def apply_income(self, tenant_id: int, income: int) -> list[AccountUpdate]:
        """Credit every account of a tenant with the same amount."""
        queries.check_ids(tenant_id=tenant_id)
        if income < 0:
            raise ValueError(f"Income cannot be negative: {income}")

        with self.store.transaction() as session:
            updates = []
            for account in queries.accounts_for_tenant(session, tenant_id):
                account.balance += income
                updates.append(
                    AccountUpdate(
                        tenant_id=tenant_id,
                        user_id=account.user_id,
                        diff=income,
                        balance=account.balance,
                    )
                )

        logger.info(f"Paid {income} coins of income to {len(updates)} accounts on tenant {tenant_id}")
        return updates

    def list_accounts(self, tenant_id: int) -> list[AccountStatus]:
        """Balances of a tenant's accounts with their coins still in play."""
        queries.check_ids(tenant_id=tenant_id)
        with self.store.transaction(write=False) as session:
            escrowed = queries.escrowed_by_user(session, tenant_id)
            return [
                AccountStatus(
                    user_id=account.user_id,
                    balance=account.balance,
                    in_bet=escrowed.get(account.user_id, 0),
                )
                for account in queries.accounts_for_tenant(session, tenant_id)
            ]
