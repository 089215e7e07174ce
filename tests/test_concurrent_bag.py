import threading

from pixelsim.models.concurrent_bag import AtomicCounter, ConcurrentBag


def _hammer(target, threads=16):
    workers = [threading.Thread(target=target, args=(t,)) for t in range(threads)]
    for w in workers:
        w.start()
    for w in workers:
        w.join()


def test_concurrent_appends_are_all_kept():
    bag = ConcurrentBag()
    _hammer(lambda t: [bag.append((t, i)) for i in range(500)])
    items = bag.snapshot()
    assert len(items) == len(bag) == 16 * 500
    assert len(set(items)) == 16 * 500


def test_snapshot_is_a_copy():
    bag = ConcurrentBag()
    bag.append(1)
    snap = bag.snapshot()
    snap.append(2)
    assert bag.snapshot() == [1]


def test_counter_has_no_lost_updates():
    counter = AtomicCounter()
    seen = ConcurrentBag()
    _hammer(lambda t: [seen.append(counter.increment()) for _ in range(1000)])
    assert counter.value == 16 * 1000
    assert sorted(seen.snapshot()) == list(range(1, 16 * 1000 + 1))
