# tests/test_concurrency.py

import threading

from qv_node.qv_runtime.cost import credits_used
from qv_node.qv_runtime.errors import InsufficientCredits
from qv_node.qv_runtime.tally import voter_view


def test_parallel_allocations_never_overspend(store, ledger):
    """
    Many threads race to put 7 votes (49 credits) on different proposals
    for the same 100-credit voter. At most two can win.
    """
    store.add_voter("racer", 100)
    pids = [store.create_proposal(f"P{i}").id for i in range(16)]
    barrier = threading.Barrier(len(pids))
    wins = []

    def worker(pid):
        barrier.wait()
        try:
            ledger.allocate("racer", pid, 7)
            wins.append(pid)
        except InsufficientCredits:
            pass

    threads = [threading.Thread(target=worker, args=(pid,)) for pid in pids]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    voter = store.voters["racer"]
    assert len(wins) == 2
    assert credits_used(voter.allocations) == 98
    assert sorted(store.contributors_of(pid) for pid in wins) == [["racer"], ["racer"]]


def test_reads_race_with_allocation_writes(store, ledger):
    """
    A writer flips allocations on and off across many proposals while
    readers build the voter view and run the audit. Readers must never
    see a dict resized under their iteration.
    """
    store.add_voter("flip", 1000)
    pids = [store.create_proposal(f"F{i}").id for i in range(64)]
    stop = threading.Event()
    errors = []

    def writer():
        try:
            for _ in range(50):
                for pid in pids:
                    ledger.allocate("flip", pid, 1)
                for pid in pids:
                    ledger.allocate("flip", pid, 0)
        except Exception as exc:
            errors.append(exc)
        finally:
            stop.set()

    def reader():
        try:
            while not stop.is_set():
                view = voter_view(store, "flip")
                assert view["creditsUsed"] + view["creditsRemaining"] == 1000
                assert store.audit()
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert store.voters["flip"].allocations == {}
