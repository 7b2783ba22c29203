"""
Ledger invariants under a long pseudo-random sequence of operations:
1. total_staked == sum of individual stakes
2. distribution indices are gapless and equal the count of successful distributes
3. per distribution, floor payouts never exceed the amount and the dust is
   smaller than the number of accounts with a positive historical stake
4. nothing is ever paid twice
"""

import random
from conftest import REF, REWARD, FUNDER, STAKERS
from rewardpool.core.settlement import settlement_engine
from rewardpool.protocol.types.common import LedgerError


def test_invariants_hold_under_random_operations(pool, bank):
    rng = random.Random(42)
    distributed = 0
    paid = {}

    for _ in range(300):
        account = rng.choice(STAKERS)
        roll = rng.random()
        try:
            if roll < 0.35:
                pool.stake(account, rng.randint(1, 200))
            elif roll < 0.55:
                pool.unstake(account, rng.randint(1, 200))
            elif roll < 0.75:
                pool.distribute(FUNDER, REWARD, rng.randint(1, 1_000))
                distributed += 1
            else:
                count = pool.distribution_count
                indices = sorted(rng.sample(range(count + 2), k=min(3, count + 2)))
                for result in pool.claim_rewards(account, indices):
                    key = (account, result.index)
                    assert key not in paid
                    paid[key] = result.amount
        except LedgerError:
            pass

        pool.state.check_invariants()
        assert pool.distribution_count == distributed

    for event in pool.state.registry.events():
        quotes = [settlement_engine.quote(pool.state, a, event.index) for a in STAKERS]
        holders = [a for a in STAKERS if pool.state.ledger.balance_at(a, event.index) > 0]
        total = sum(q.amount for q in quotes)
        assert total <= event.total_amount
        assert event.total_amount - total < max(len(holders), 1)

    for (account, index), amount in paid.items():
        assert amount == settlement_engine.quote(pool.state, account, index).amount

    # custody never pays out more than it received
    assert bank.balance_of(REWARD, pool.custody) >= 0
    assert bank.balance_of(REF, pool.custody) == pool.total_staked
