"""Account database model."""

from sqlalchemy import BigInteger, CheckConstraint, Column, Index

from coinbets.database.base import Base, Timestamped


class Account(Base, Timestamped):
    """Coin balance of one user on one tenant."""

    __tablename__ = "accounts"

    tenant_id = Column(BigInteger, primary_key=True, autoincrement=False)
    user_id = Column(BigInteger, primary_key=True, autoincrement=False)

    balance = Column(BigInteger, nullable=False, default=0)

    # Constraints
    __table_args__ = (
        CheckConstraint("balance >= 0", name="balance_non_negative"),
        Index("idx_accounts_tenant", "tenant_id"),
    )

    def __repr__(self) -> str:
        return f"<Account {self.tenant_id}/{self.user_id} ({self.balance})>"
