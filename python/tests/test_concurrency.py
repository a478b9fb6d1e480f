import math
import random
import threading
import time
import unittest

from rstats import Accumulator

JOIN_TIMEOUT = 30.0


class ConcurrentUpdateTest(unittest.TestCase):
    def test_no_updates_are_lost(self) -> None:
        stats = Accumulator()
        value = random.random()
        writers = 32
        per_writer = 1_000
        start = threading.Barrier(writers)

        def feed() -> None:
            start.wait()
            for _ in range(per_writer):
                stats.update(value)

        threads = [threading.Thread(target=feed) for _ in range(writers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(JOIN_TIMEOUT)
            self.assertFalse(thread.is_alive())

        self.assertEqual(stats.count(), writers * per_writer)
        self.assertEqual(stats.min(), value)
        self.assertEqual(stats.max(), value)
        self.assertEqual(stats.mean(), value)
        self.assertEqual(stats.variance(), 0.0)
        self.assertEqual(stats.standard_deviation(), 0.0)
        self.assertEqual(stats.skewness(), 0.0)
        self.assertEqual(stats.kurtosis(), 0.0)

    def test_readers_never_observe_torn_state(self) -> None:
        stats = Accumulator()
        value = 2.5
        stop = threading.Event()
        problems = []

        def feed() -> None:
            for _ in range(2_000):
                stats.update(value)

        def watch() -> None:
            while not stop.is_set():
                snapshot = stats.to_snapshot()
                if snapshot.count == 0:
                    continue
                if (snapshot.min, snapshot.max, snapshot.mean) != (value, value, value):
                    problems.append(snapshot)
                if snapshot.variance != 0.0:
                    problems.append(snapshot)

        watchers = [threading.Thread(target=watch) for _ in range(4)]
        writers = [threading.Thread(target=feed) for _ in range(8)]
        for thread in watchers + writers:
            thread.start()
        for thread in writers:
            thread.join(JOIN_TIMEOUT)
        stop.set()
        for thread in watchers:
            thread.join(JOIN_TIMEOUT)

        self.assertEqual(problems, [])
        self.assertEqual(stats.count(), 16_000)

    def test_queries_return_promptly_under_continuous_updates(self) -> None:
        stats = Accumulator()
        stop = threading.Event()

        def feed() -> None:
            while not stop.is_set():
                stats.update(1.0)

        writers = [threading.Thread(target=feed, daemon=True) for _ in range(8)]
        for thread in writers:
            thread.start()
        try:
            worst = 0.0
            for _ in range(20):
                started = time.monotonic()
                stats.count()
                snapshot = stats.to_snapshot()
                worst = max(worst, time.monotonic() - started)
                if snapshot.count:
                    self.assertEqual(snapshot.mean, 1.0)
        finally:
            stop.set()
            for thread in writers:
                thread.join(JOIN_TIMEOUT)

        self.assertLess(worst, 1.0)
        self.assertGreater(stats.count(), 0)

    def test_interleaved_values_match_sequential_result(self) -> None:
        chunks = [[float(i * 100 + j) for j in range(100)] for i in range(8)]
        stats = Accumulator()

        threads = [threading.Thread(target=stats.update_many, args=(chunk,)) for chunk in chunks]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(JOIN_TIMEOUT)

        expected = Accumulator.from_values(value for chunk in chunks for value in chunk)
        self.assertEqual(stats.count(), expected.count())
        self.assertEqual(stats.min(), 0.0)
        self.assertEqual(stats.max(), 799.0)
        self.assertTrue(math.isclose(stats.mean(), expected.mean(), rel_tol=1e-9))
        self.assertTrue(math.isclose(stats.variance(), expected.variance(), rel_tol=1e-9))
        self.assertTrue(math.isclose(stats.kurtosis(), expected.kurtosis(), rel_tol=1e-9))

    def test_reset_during_updates_leaves_consistent_state(self) -> None:
        stats = Accumulator()

        def feed() -> None:
            for _ in range(1_000):
                stats.update(1.0)

        def clear() -> None:
            for _ in range(50):
                stats.reset()

        threads = [threading.Thread(target=feed) for _ in range(4)]
        threads.append(threading.Thread(target=clear))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(JOIN_TIMEOUT)

        snapshot = stats.to_snapshot()
        self.assertLessEqual(snapshot.count, 4_000)
        if snapshot.count:
            self.assertEqual((snapshot.min, snapshot.max, snapshot.mean), (1.0, 1.0, 1.0))
        else:
            self.assertEqual(snapshot.min, math.inf)


class ConcurrentMergeTest(unittest.TestCase):
    def test_cross_merges_do_not_deadlock(self) -> None:
        left = Accumulator.from_values([1.0, 2.0, 3.0])
        right = Accumulator.from_values([10.0, 20.0])

        def merge_into(target: Accumulator, source: Accumulator) -> None:
            for _ in range(200):
                target.merge(source)
                target.reset()
                target.update_many([1.0, 2.0])

        threads = [
            threading.Thread(target=merge_into, args=(left, right)),
            threading.Thread(target=merge_into, args=(right, left)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(JOIN_TIMEOUT)
            self.assertFalse(thread.is_alive())


if __name__ == "__main__":  # pragma: no cover - convenience
    unittest.main()
