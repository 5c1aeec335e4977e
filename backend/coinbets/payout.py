"""
Payout Distributor

Splits the pool of a resolved bet among the winners with the largest
remainder method.

For a pool T and winning stakes s_i summing to S:
- exact share_i   = T * s_i / S
- base payout_i   = floor(share_i)
- leftover units  = T - sum(base payouts), each given to the winner with the
                    next largest fractional remainder (ties: lowest index)

Integer arithmetic only, so the payouts always sum to T when S > 0.
When S == 0 nobody is paid and the pool is left to the caller.
"""

from typing import Sequence


def distribute(pool: int, stakes: Sequence[int]) -> list[int]:
    """Return one payout per stake, in the order the stakes were given."""
    if pool < 0:
        raise ValueError(f"Pool cannot be negative: {pool}")
    if any(stake < 0 for stake in stakes):
        raise ValueError("Stakes cannot be negative")

    total_stake = sum(stakes)
    if total_stake == 0:
        return [0] * len(stakes)

    payouts: list[int] = []
    remainders: list[int] = []
    for stake in stakes:
        # remainder / total_stake is the fractional part of the exact share
        share, remainder = divmod(pool * stake, total_stake)
        payouts.append(share)
        remainders.append(remainder)

    leftover = pool - sum(payouts)
    by_remainder = sorted(range(len(stakes)), key=lambda i: (-remainders[i], i))
    for i in by_remainder[:leftover]:
        payouts[i] += 1

    return payouts
