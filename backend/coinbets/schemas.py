"""Read models returned by the ledger services."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AccountUpdate(BaseModel):
    """Balance change applied to one account."""

    tenant_id: int
    user_id: int
    diff: int
    balance: int


class AccountStatus(BaseModel):
    """Balance of a user plus the coins escrowed in live bets."""

    user_id: int
    balance: int
    in_bet: int = 0

    @property
    def net_worth(self) -> int:
        return self.balance + self.in_bet


class WagerStatus(BaseModel):
    user_id: int
    amount: int


class OutcomeStatus(BaseModel):
    position: int
    description: str
    wagers: list[WagerStatus] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(wager.amount for wager in self.wagers)


class BetStatus(BaseModel):
    """Snapshot of a bet with every outcome and its wagers."""

    bet_id: int
    tenant_id: int
    description: str
    author_id: int | None = None
    is_open: bool
    outcomes: list[OutcomeStatus] = Field(default_factory=list)

    @property
    def pool(self) -> int:
        return sum(outcome.total for outcome in self.outcomes)

    @property
    def status_label(self) -> str:
        return "open" if self.is_open else "locked"
