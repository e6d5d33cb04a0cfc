import pytest

from docgen.jobs.status import (
    JobStatus,
    allowed_predecessors,
    is_terminal,
    status_rank,
)


def test_status_rank_orders_lifecycle():
    assert status_rank("pending") < status_rank("processing") < status_rank("completed")
    assert status_rank("completed") == status_rank("failed")


def test_status_rank_rejects_unknown_status():
    with pytest.raises(ValueError):
        status_rank("not_found")


def test_terminal_statuses():
    assert is_terminal("completed")
    assert is_terminal(JobStatus.FAILED)
    assert not is_terminal("pending")
    assert not is_terminal("processing")


def test_nothing_moves_back_to_pending():
    assert allowed_predecessors("pending") == frozenset()


def test_processing_only_from_in_flight_statuses():
    assert allowed_predecessors("processing") == {"pending", "processing"}


@pytest.mark.parametrize("terminal", ["completed", "failed"])
def test_terminal_statuses_are_never_left(terminal):
    for target in ("processing", "completed", "failed"):
        assert terminal not in allowed_predecessors(target)
