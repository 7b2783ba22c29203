import pytest
from rewardpool.core.assets import InMemoryAssetBank
from rewardpool.core.pool import RewardPool
from rewardpool.protocol.config.params import get_config

REF = "STK"
REWARD = "RWD"
FUNDER = "funder"
STAKERS = ("alice", "bob", "carol", "dave")
STARTING_BALANCE = 10_000


@pytest.fixture
def bank():
    bank = InMemoryAssetBank()
    for account in STAKERS:
        bank.mint(REF, account, STARTING_BALANCE)
        bank.mint(REWARD, account, STARTING_BALANCE)
    bank.mint(REF, FUNDER, 1_000_000)
    bank.mint(REWARD, FUNDER, 1_000_000)
    return bank


@pytest.fixture
def pool(bank):
    return RewardPool(REF, bank)


@pytest.fixture
def sparse_pool(bank):
    return RewardPool(REF, bank, config=get_config("sparse"))
