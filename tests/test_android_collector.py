"""Tests for the Android battery collector against fixed dumpsys text."""

import logging
import subprocess

import pytest

from droidmon.collector.android import new_android_collector
from droidmon.collector.source import CommandSource, StaticSource, TextSource
from droidmon.errors import DecodeError, ParseError, SourceUnavailable
from droidmon.metrics import MetricKind

LOG = logging.getLogger("test.android")

SAMPLE_DUMPSYS = """\
Current Battery Service state:
  AC powered: true
  USB powered: false
  Wireless powered: false
  Max charging current: 2000000
  Max charging voltage: 5000000
  Charge counter: 3480000
  status: 2
  health: 2
  present: true
  level: 87
  scale: 100
  voltage: 4213
  temperature: 253
  technology: Li-ion
"""


class _FailingSource(TextSource):
    def read(self) -> str:
        raise SourceUnavailable(["/system/bin/dumpsys", "battery"], "No such file or directory")

    def name(self) -> str:
        return "failing"


def _update(text: str):
    collector = new_android_collector(LOG, source=StaticSource(text))
    samples = []
    collector.update(samples.append)
    return samples


def test_minimal_input_emits_three_samples_in_order():
    samples = _update("AC powered: true\nlevel: 87\ntemperature: 253\n")
    assert [s.name for s in samples] == [
        "node_android_battery_charging",
        "node_android_battery_level",
        "node_android_battery_temperature",
    ]
    assert [s.value for s in samples] == [1.0, 87.0, 25.3]


def test_full_dump():
    samples = _update(SAMPLE_DUMPSYS)
    assert [s.value for s in samples] == [1.0, 87.0, 25.3]


def test_samples_are_unlabeled_gauges():
    for sample in _update(SAMPLE_DUMPSYS):
        assert sample.kind is MetricKind.GAUGE
        assert sample.label_values == ()
        assert sample.descriptor.label_names == ()


@pytest.mark.parametrize("token", ["false", "True", "unknown", "1"])
def test_anything_but_true_is_not_charging(token):
    samples = _update(f"AC powered: {token}\nlevel: 50\ntemperature: 300\n")
    assert samples[0].value == 0.0


def test_temperature_is_tenths_of_a_degree():
    samples = _update("AC powered: false\nlevel: 0\ntemperature: 7\n")
    assert samples[2].value == 0.7


@pytest.mark.parametrize("missing", ["charging", "level", "temperature"])
def test_missing_field_raises_parse_error_and_emits_nothing(missing):
    lines = {
        "charging": "AC powered: true",
        "level": "level: 87",
        "temperature": "temperature: 253",
    }
    text = "\n".join(line for field, line in lines.items() if field != missing) + "\n"

    collector = new_android_collector(LOG, source=StaticSource(text))
    samples = []
    with pytest.raises(ParseError) as exc:
        collector.update(samples.append)
    assert exc.value.field == missing
    assert samples == []


def test_non_numeric_level_is_a_parse_error():
    # The pattern only captures digits, so text like "level: full" never matches
    with pytest.raises(ParseError):
        _update("AC powered: true\nlevel: full\ntemperature: 253\n")


def test_decode_error_propagates(monkeypatch):
    from droidmon.collector import android
    from droidmon.collector.extract import decode_int, field_pattern

    patterns = (
        android.BATTERY_PATTERNS[0],
        field_pattern("level", r"level: (\S+)", decode_int),
        android.BATTERY_PATTERNS[2],
    )
    monkeypatch.setattr(android, "BATTERY_PATTERNS", patterns)
    collector = new_android_collector(LOG, source=StaticSource("AC powered: true\nlevel: x9\ntemperature: 1\n"))
    samples = []
    with pytest.raises(DecodeError) as exc:
        collector.update(samples.append)
    assert exc.value.field == "level"
    assert samples == []


def test_source_failure_emits_nothing():
    collector = new_android_collector(LOG, source=_FailingSource())
    samples = []
    with pytest.raises(SourceUnavailable):
        collector.update(samples.append)
    assert samples == []


def test_consecutive_updates_are_identical():
    collector = new_android_collector(LOG, source=StaticSource(SAMPLE_DUMPSYS))
    first, second = [], []
    collector.update(first.append)
    collector.update(second.append)
    assert first == second


def test_descriptors():
    collector = new_android_collector(LOG, source=StaticSource(""))
    descs = collector.descriptors()
    assert [d.name for d in descs] == [
        "node_android_battery_charging",
        "node_android_battery_level",
        "node_android_battery_temperature",
    ]
    assert [d.help_text for d in descs] == [
        "Charging state.",
        "Level of charged battery.",
        "Temperature of battery.",
    ]


def test_default_source_is_dumpsys_and_not_run_at_construction(monkeypatch):
    def _no_process(*args, **kwargs):
        raise AssertionError("constructor must not spawn a process")

    monkeypatch.setattr(subprocess, "run", _no_process)
    monkeypatch.setattr(subprocess, "Popen", _no_process)

    collector = new_android_collector(LOG)
    assert isinstance(collector._source, CommandSource)
    assert collector._source.command == ("/system/bin/dumpsys", "battery")
    assert "dumpsys battery" in collector.name()


def test_negative_temperature():
    samples = _update("AC powered: false\nlevel: 40\ntemperature: -50\n")
    assert [s.value for s in samples] == [0.0, 40.0, -5.0]


def test_negative_level_does_not_match():
    with pytest.raises(ParseError) as exc:
        _update("AC powered: false\nlevel: -4\ntemperature: 200\n")
    assert exc.value.field == "level"
