"""Declarative base shared by all ledger tables."""

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Timestamped:
    """Adds creation and last-change times to mutable ledger rows."""

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    # Bumped by balance changes and stake increments
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
