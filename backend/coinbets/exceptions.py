class LedgerError(Exception):
    """Base exception for ledger errors."""

    pass


class NotFoundError(LedgerError):
    """Unknown or tombstoned bet, unknown outcome, or missing account."""

    pass


class InsufficientFundsError(LedgerError):
    """Stake exceeds the balance, or a fractional stake rounds to zero."""

    pass


class BetLockedError(LedgerError):
    """Bet no longer accepts wagers."""

    pass


class AlreadyExistsError(LedgerError):
    """Duplicate account or bet identifier."""

    pass


class MultipleOutcomeStakeError(LedgerError):
    """User already holds a wager on another outcome of the same bet."""

    def __init__(self, message: str, held_outcome: int):
        super().__init__(message)
        self.held_outcome = held_outcome


class StakeParseError(LedgerError):
    """Stake text could not be parsed."""

    pass


class StoreError(LedgerError):
    """Underlying storage or transaction failure."""

    pass
