import pytest
from rewardpool.core.checkpoints import write_checkpoint, value_at


def test_empty_history_reads_zero():
    assert value_at([], 0) == 0
    assert value_at([], 99) == 0


def test_value_applies_from_its_index_onwards():
    history = []
    write_checkpoint(history, 2, 100)
    write_checkpoint(history, 5, 40)

    assert value_at(history, 0) == 0
    assert value_at(history, 1) == 0
    assert value_at(history, 2) == 100
    assert value_at(history, 4) == 100
    assert value_at(history, 5) == 40
    assert value_at(history, 1000) == 40


def test_changes_between_distributions_overwrite_last_checkpoint():
    history = []
    write_checkpoint(history, 3, 10)
    write_checkpoint(history, 3, 25)
    write_checkpoint(history, 3, 7)

    assert len(history) == 1
    assert value_at(history, 3) == 7


def test_history_is_append_only():
    history = []
    write_checkpoint(history, 4, 1)
    with pytest.raises(ValueError):
        write_checkpoint(history, 3, 2)


def test_lookup_over_long_history():
    history = []
    for i in range(0, 1000, 10):
        write_checkpoint(history, i, i * 2)

    for k in (0, 9, 10, 11, 505, 990, 5000):
        expected = (min(k, 990) // 10) * 10 * 2
        assert value_at(history, k) == expected
