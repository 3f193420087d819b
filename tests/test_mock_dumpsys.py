"""Sanity checks for the simulated dumpsys output."""

import logging
from concurrent.futures import ThreadPoolExecutor

from droidmon.collector.android import new_android_collector
from droidmon.mock.dumpsys import MockDumpsys


def test_output_parses():
    collector = new_android_collector(logging.getLogger("test"), source=MockDumpsys(seed=1))
    for _ in range(50):
        samples = []
        collector.update(samples.append)
        charging, level, temperature = (s.value for s in samples)
        assert charging in (0.0, 1.0)
        assert 0 <= level <= 100
        assert 15.0 < temperature < 45.0


def test_deterministic_with_same_seed():
    a, b = MockDumpsys(seed=7), MockDumpsys(seed=7)
    assert [a.read() for _ in range(10)] == [b.read() for _ in range(10)]


def test_low_battery_gets_plugged_in():
    source = MockDumpsys(seed=3, level=10)
    assert "AC powered: true" in source.read()


def test_concurrent_reads_advance_clock_once_each():
    source = MockDumpsys(seed=5)
    with ThreadPoolExecutor(max_workers=8) as pool:
        dumps = list(pool.map(lambda _: source.read(), range(200)))
    assert len(dumps) == 200
    assert source._tick == 200
