import pytest
from conftest import REF, REWARD, FUNDER
from rewardpool.core.pool import RewardPool
from rewardpool.core.state import LedgerState
from rewardpool.protocol.config.params import get_config
from rewardpool.protocol.types.common import TransferFailed
from rewardpool.protocol.types.ledger import DistributionEvent
from rewardpool.storage.db import StorageDB


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "pool.db")


def test_empty_db_loads_nothing(db_path):
    db = StorageDB(db_path)
    assert LedgerState.load(db) is None
    db.close()


def test_state_survives_restart(bank, db_path):
    db = StorageDB(db_path)
    pool = RewardPool(REF, bank, db=db)
    pool.stake("alice", 100)
    pool.stake("bob", 300)
    pool.distribute(FUNDER, REWARD, 400)
    pool.unstake("bob", 100)
    pool.claim_rewards("alice", [0])
    db.close()

    db2 = StorageDB(db_path)
    restored = RewardPool(REF, bank, db=db2)

    assert restored.stake_of("alice") == 100
    assert restored.stake_of("bob") == 200
    assert restored.total_staked == 300
    assert restored.distribution_count == 1
    assert restored.claim_cursor("alice").next_index == 1
    assert restored.claim_rewards("alice", [0]) == []
    assert [r.amount for r in restored.claim_rewards("bob", [0])] == [300]
    db2.close()


def test_rolled_back_operation_is_not_persisted(bank, db_path):
    db = StorageDB(db_path)
    pool = RewardPool(REF, bank, db=db)
    pool.stake("alice", 100)
    bank.blocked_assets.add(REWARD)
    with pytest.raises(TransferFailed):
        pool.distribute(FUNDER, REWARD, 10)

    state = LedgerState.load(db)
    assert state.registry.count == 0
    assert state.ledger.total_staked == 100
    db.close()


def test_sparse_settled_indices_round_trip(bank, db_path):
    db = StorageDB(db_path)
    pool = RewardPool(REF, bank, config=get_config("sparse"), db=db)
    pool.stake("alice", 10)
    for _ in range(3):
        pool.distribute(FUNDER, REWARD, 10)
    pool.claim_rewards("alice", [2, 0])

    state = LedgerState.load(db)
    assert state.claims.get("alice").settled == [0, 2]
    assert state.claims.is_claimable("alice", 1, state.registry.count)
    db.close()


def test_mismatched_pool_settings_are_rejected(bank, db_path):
    db = StorageDB(db_path)
    RewardPool(REF, bank, db=db).stake("alice", 1)

    with pytest.raises(ValueError):
        RewardPool("OTHER", bank, db=db)
    with pytest.raises(ValueError):
        RewardPool(REF, bank, config=get_config("sparse"), db=db)
    db.close()


def test_inconsistent_stored_state_is_rejected(bank, db_path):
    db = StorageDB(db_path)
    pool = RewardPool(REF, bank, db=db)
    pool.stake("alice", 100)
    pool.distribute(FUNDER, REWARD, 50)
    db.set_many({
        "dist:000000000000": DistributionEvent(index=5, reward_asset=REWARD, total_amount=50).model_dump_json(),
    })

    with pytest.raises(ValueError, match="Distribution gap"):
        RewardPool(REF, bank, db=db)
    db.close()
