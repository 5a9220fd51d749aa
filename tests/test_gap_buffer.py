import threading

import pytest

from sascan.gap_buffer import EmptyPoolError, GapBuffer, GapBufferPool


def test_buffer_capacity_from_bytes():
    b = GapBuffer(40, 3, item_size=4)
    assert b.size == 10
    assert len(b.content) == b.size
    assert b.filled == 0
    assert len(b.sblock_size) == len(b.sblock_beg) == 3


def test_buffer_rejects_bad_item_size():
    with pytest.raises(ValueError):
        GapBuffer(40, 1, item_size=0)


def test_pool_is_fifo():
    pool = GapBufferPool()
    buffers = [GapBuffer(8, 1) for _ in range(3)]
    for b in buffers:
        pool.add(b)
    assert pool.available()
    assert [pool.get() for _ in range(3)] == buffers
    assert not pool.available()


def test_get_from_empty_pool_raises():
    pool = GapBufferPool()
    with pytest.raises(EmptyPoolError):
        pool.get()


def test_finished_counts_workers():
    pool = GapBufferPool(worker_threads=2)
    assert not pool.finished()
    pool.increment_finished_workers()
    assert not pool.finished()
    pool.increment_finished_workers()
    assert pool.finished()


def test_pool_with_no_workers_is_finished():
    assert GapBufferPool().finished()


def test_producer_consumer_handoff():
    full = GapBufferPool(worker_threads=1)
    n_items = 20
    received = []

    def producer():
        for k in range(n_items):
            b = GapBuffer(4, 1, item_size=1)
            b.filled = k
            with full.cv:
                full.add(b)
                full.cv.notify()
        with full.cv:
            full.increment_finished_workers()
            full.cv.notify()

    t = threading.Thread(target=producer)
    t.start()
    while True:
        with full.cv:
            while not full.available() and not full.finished():
                full.cv.wait()
            if not full.available() and full.finished():
                break
            received.append(full.get().filled)
    t.join()
    assert received == list(range(n_items))