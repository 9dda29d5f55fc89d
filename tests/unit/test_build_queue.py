"""Tests for the bounded build queue."""

from __future__ import annotations

import threading

import pytest

from spectacle.builds import BuildJob, BuildQueue, BuildQueueFullError


def _job(n: int) -> BuildJob:
    return BuildJob(f"acme/repo{n}", f"file:///repo{n}", "main")


def test_jobs_come_out_in_submission_order() -> None:
    """take returns jobs first in, first out."""
    build_queue = BuildQueue(capacity=3)
    for n in range(3):
        build_queue.submit(_job(n))

    taken = [build_queue.take(timeout=0) for _ in range(3)]

    assert taken == [_job(0), _job(1), _job(2)]


def test_submit_refuses_when_full() -> None:
    """A full queue raises immediately instead of blocking."""
    build_queue = BuildQueue(capacity=1)
    build_queue.submit(_job(0))

    with pytest.raises(BuildQueueFullError, match="busy"):
        build_queue.submit(_job(1))

    assert build_queue.depth == 1


def test_taking_frees_a_slot() -> None:
    """Capacity counts waiting jobs only, not the one being built."""
    build_queue = BuildQueue(capacity=1)
    build_queue.submit(_job(0))

    assert build_queue.take(timeout=0) == _job(0)
    build_queue.submit(_job(1))

    assert build_queue.depth == 1


def test_take_times_out_empty() -> None:
    """take returns None when nothing arrives in time."""
    assert BuildQueue().take(timeout=0.01) is None


def test_close_wakes_a_blocked_consumer() -> None:
    """close makes a blocked take return None."""
    build_queue = BuildQueue()
    results: list[BuildJob | None] = []
    consumer = threading.Thread(target=lambda: results.append(build_queue.take()))
    consumer.start()

    build_queue.close()
    consumer.join(timeout=5)

    assert not consumer.is_alive()
    assert results == [None]


def test_close_lets_queued_jobs_drain_first() -> None:
    """Jobs submitted before close are still handed out."""
    build_queue = BuildQueue()
    build_queue.submit(_job(0))
    build_queue.close()

    assert build_queue.take() == _job(0)
    build_queue.task_done()
    assert build_queue.take() is None


def test_join_waits_for_task_done() -> None:
    """join returns once every taken job is acknowledged."""
    build_queue = BuildQueue()
    build_queue.submit(_job(0))
    build_queue.take()
    build_queue.task_done()

    build_queue.join()


@pytest.mark.parametrize("capacity", [0, -1])
def test_capacity_must_be_positive(capacity: int) -> None:
    """A queue that can hold nothing is a configuration error."""
    with pytest.raises(ValueError, match="capacity must be positive"):
        BuildQueue(capacity)


def test_concurrent_submitters_fill_exactly_to_capacity() -> None:
    """Racing submitters never push the queue past its capacity."""
    build_queue = BuildQueue(capacity=5)
    submitters = 12
    barrier = threading.Barrier(submitters)
    lock = threading.Lock()
    accepted: list[int] = []
    refused: list[int] = []

    def submit(n: int) -> None:
        barrier.wait()
        try:
            build_queue.submit(_job(n))
        except BuildQueueFullError:
            with lock:
                refused.append(n)
            return
        with lock:
            accepted.append(n)

    threads = [threading.Thread(target=submit, args=(n,)) for n in range(submitters)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(accepted) == 5
    assert len(refused) == submitters - 5
    assert build_queue.depth == 5
    taken = {build_queue.take(timeout=0) for _ in range(5)}
    assert taken == {_job(n) for n in accepted}
