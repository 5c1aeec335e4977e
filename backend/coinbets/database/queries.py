"""
Point reads, range scans and tombstone bookkeeping used by the services.

All helpers take the caller's session and never commit.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from coinbets.exceptions import NotFoundError
from coinbets.models import Account, Bet, BetTombstone, Outcome, Wager

# Largest value a signed BIGINT column holds
MAX_ID = 2**63 - 1


def check_ids(**ids: int | None) -> None:
    """Reject identifiers outside 0..MAX_ID before they reach the driver."""
    for name, value in ids.items():
        if value is not None and not 0 <= value <= MAX_ID:
            raise ValueError(f"{name} must be between 0 and {MAX_ID}, got {value}")


def get_account(
    session: Session, tenant_id: int, user_id: int, lock: bool = False
) -> Account | None:
    query = select(Account).where(
        Account.tenant_id == tenant_id, Account.user_id == user_id
    )
    if lock:
        query = query.with_for_update()
    return session.execute(query).scalar_one_or_none()


def accounts_for_tenant(session: Session, tenant_id: int) -> list[Account]:
    result = session.execute(
        select(Account)
        .where(Account.tenant_id == tenant_id)
        .order_by(Account.user_id)
    )
    return list(result.scalars().all())


def is_tombstoned(session: Session, bet_id: int) -> bool:
    return session.get(BetTombstone, bet_id) is not None


def add_tombstone(session: Session, bet_id: int) -> None:
    session.add(BetTombstone(bet_id=bet_id))


def get_live_bet(session: Session, bet_id: int) -> Bet:
    """Load a bet, treating tombstoned bets as missing."""
    bet = session.get(Bet, bet_id)
    if bet is None or is_tombstoned(session, bet_id):
        raise NotFoundError(f"Bet {bet_id} not found")
    return bet


def get_outcome(session: Session, bet_id: int, position: int) -> Outcome:
    outcome = session.get(Outcome, {"bet_id": bet_id, "position": position})
    if outcome is None:
        raise NotFoundError(f"Bet {bet_id} has no outcome {position}")
    return outcome


def outcomes_of_bet(session: Session, bet_id: int) -> list[Outcome]:
    result = session.execute(
        select(Outcome).where(Outcome.bet_id == bet_id).order_by(Outcome.position)
    )
    return list(result.scalars().all())


def get_wager(session: Session, bet_id: int, tenant_id: int, user_id: int) -> Wager | None:
    return session.get(
        Wager, {"bet_id": bet_id, "tenant_id": tenant_id, "user_id": user_id}
    )


def wagers_for_outcome(session: Session, bet_id: int, position: int) -> list[Wager]:
    """Wagers on one outcome, in ascending user order."""
    result = session.execute(
        select(Wager)
        .where(Wager.bet_id == bet_id, Wager.outcome_position == position)
        .order_by(Wager.user_id)
    )
    return list(result.scalars().all())


def wagers_for_bet(session: Session, bet_id: int) -> list[Wager]:
    result = session.execute(
        select(Wager)
        .where(Wager.bet_id == bet_id)
        .order_by(Wager.outcome_position, Wager.user_id)
    )
    return list(result.scalars().all())


def escrowed_by_user(session: Session, tenant_id: int) -> dict[int, int]:
    """Coins each user of a tenant has staked on bets that are still live."""
    result = session.execute(
        select(Wager.user_id, func.sum(Wager.amount))
        .outerjoin(BetTombstone, BetTombstone.bet_id == Wager.bet_id)
        .where(Wager.tenant_id == tenant_id, BetTombstone.bet_id.is_(None))
        .group_by(Wager.user_id)
    )
    return {user_id: int(total) for user_id, total in result.all()}


def live_bets_for_tenant(session: Session, tenant_id: int) -> list[Bet]:
    result = session.execute(
        select(Bet)
        .outerjoin(BetTombstone, BetTombstone.bet_id == Bet.id)
        .where(Bet.tenant_id == tenant_id, BetTombstone.bet_id.is_(None))
        .order_by(Bet.id)
    )
    return list(result.scalars().all())


def tombstoned_bet_ids(session: Session) -> list[int]:
    result = session.execute(select(BetTombstone.bet_id).order_by(BetTombstone.bet_id))
    return list(result.scalars().all())
