import random
import pytest
from rewardpool.core.stake_ledger import StakeLedger, require_positive
from rewardpool.protocol.types.common import InvalidAmount, InsufficientBalance


def test_deposit_creates_record_and_updates_total():
    ledger = StakeLedger()
    assert not ledger.has_record("alice")

    ledger.deposit("alice", 100, 0)
    ledger.deposit("bob", 300, 0)

    assert ledger.has_record("alice")
    assert ledger.stake_of("alice") == 100
    assert ledger.stake_of("bob") == 300
    assert ledger.total_staked == 400


def test_withdraw_more_than_stake_fails_and_changes_nothing():
    ledger = StakeLedger()
    ledger.deposit("alice", 100, 0)

    with pytest.raises(InsufficientBalance):
        ledger.withdraw("alice", 101, 0)
    with pytest.raises(InsufficientBalance):
        ledger.withdraw("nobody", 1, 0)

    assert ledger.stake_of("alice") == 100
    assert ledger.total_staked == 100


def test_zero_balance_record_is_kept():
    ledger = StakeLedger()
    ledger.deposit("alice", 50, 0)
    ledger.withdraw("alice", 50, 1)

    assert ledger.has_record("alice")
    assert ledger.stake_of("alice") == 0
    assert ledger.total_staked == 0


@pytest.mark.parametrize("amount", [0, -5, 1.5, "10", True, None])
def test_require_positive_rejects_bad_amounts(amount):
    with pytest.raises(InvalidAmount):
        require_positive(amount)


def test_historical_balances_follow_checkpoints():
    ledger = StakeLedger()
    ledger.deposit("alice", 100, 0)     # effective for distribution 0+
    ledger.deposit("bob", 100, 0)
    ledger.withdraw("alice", 60, 2)     # effective for distribution 2+
    ledger.deposit("bob", 50, 3)

    assert ledger.balance_at("alice", 0) == 100
    assert ledger.balance_at("alice", 1) == 100
    assert ledger.balance_at("alice", 2) == 40
    assert ledger.balance_at("bob", 2) == 100
    assert ledger.balance_at("bob", 3) == 150
    assert ledger.total_at(1) == 200
    assert ledger.total_at(2) == 140
    assert ledger.total_at(3) == 190
    assert ledger.balance_at("nobody", 3) == 0


def test_clone_is_independent():
    ledger = StakeLedger()
    ledger.deposit("alice", 10, 0)
    copy = ledger.clone()
    copy.deposit("alice", 5, 0)

    assert ledger.stake_of("alice") == 10
    assert ledger.get_record("alice").checkpoints[-1].value == 10
    assert copy.stake_of("alice") == 15


def test_total_matches_sum_of_stakes_under_random_operations():
    rng = random.Random(7)
    ledger = StakeLedger()
    accounts = ["a", "b", "c", "d", "e"]
    count = 0

    for _ in range(500):
        account = rng.choice(accounts)
        amount = rng.randint(1, 50)
        if rng.random() < 0.6:
            ledger.deposit(account, amount, count)
        else:
            try:
                ledger.withdraw(account, amount, count)
            except InsufficientBalance:
                pass
        if rng.random() < 0.1:
            count += 1

        assert ledger.total_staked == sum(r.amount for r in ledger.records())
        assert all(r.amount >= 0 for r in ledger.records())
