"""Bet, outcome, wager and tombstone database models."""

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    Integer,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from coinbets.database.base import Base, Timestamped


class Bet(Base, Timestamped):
    """Bet opened on a tenant, with a fixed list of outcomes."""

    __tablename__ = "bets"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    tenant_id = Column(BigInteger, nullable=False, index=True)

    description = Column(Text, nullable=False)
    author_id = Column(BigInteger, nullable=True)
    is_open = Column(Boolean, nullable=False, default=True)

    # Relationships
    outcomes = relationship(
        "Outcome",
        back_populates="bet",
        order_by="Outcome.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tombstone = relationship(
        "BetTombstone",
        back_populates="bet",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        state = "open" if self.is_open else "locked"
        return f"<Bet {self.id} ({state}) {self.description!r}>"


class Outcome(Base):
    """One of the mutually exclusive options of a bet, 0-indexed."""

    __tablename__ = "outcomes"

    bet_id = Column(
        BigInteger,
        ForeignKey("bets.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position = Column(Integer, primary_key=True, autoincrement=False)
    description = Column(Text, nullable=False)

    # Relationships
    bet = relationship("Bet", back_populates="outcomes")
    wagers = relationship(
        "Wager",
        back_populates="outcome",
        order_by="Wager.user_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Outcome {self.bet_id}#{self.position} {self.description!r}>"


class Wager(Base, Timestamped):
    """Accumulated stake of a user on a bet.

    The primary key leaves out the outcome: a user backs a single outcome
    per bet.
    """

    __tablename__ = "wagers"

    bet_id = Column(BigInteger, primary_key=True, autoincrement=False)
    tenant_id = Column(BigInteger, primary_key=True, autoincrement=False)
    user_id = Column(BigInteger, primary_key=True, autoincrement=False)

    outcome_position = Column(Integer, nullable=False)
    amount = Column(BigInteger, nullable=False, default=0)

    # Relationships
    outcome = relationship("Outcome", back_populates="wagers")

    # Constraints
    __table_args__ = (
        ForeignKeyConstraint(
            ["bet_id", "outcome_position"],
            ["outcomes.bet_id", "outcomes.position"],
            ondelete="CASCADE",
        ),
        ForeignKeyConstraint(
            ["tenant_id", "user_id"],
            ["accounts.tenant_id", "accounts.user_id"],
            ondelete="CASCADE",
        ),
        CheckConstraint("amount >= 0", name="wager_amount_non_negative"),
        Index("idx_wagers_tenant_user", "tenant_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Wager {self.user_id} on {self.bet_id}#{self.outcome_position} "
            f"({self.amount})>"
        )


class BetTombstone(Base):
    """Marks a resolved or aborted bet, removed at the next start-up sweep."""

    __tablename__ = "bet_tombstones"

    bet_id = Column(
        BigInteger,
        ForeignKey("bets.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    bet = relationship("Bet", back_populates="tombstone")

    def __repr__(self) -> str:
        return f"<BetTombstone {self.bet_id}>"
