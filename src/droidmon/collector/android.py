"""
Battery collector for Android devices. Runs `dumpsys battery` and maps
the relevant lines into three gauges:

    AC powered: true      -> node_android_battery_charging     1
    level: 87             -> node_android_battery_level        87
    temperature: 253      -> node_android_battery_temperature  25.3

dumpsys reports temperature in tenths of a degree Celsius. A scrape is
all-or-nothing: if any field is missing or malformed nothing is emitted,
so the three values always come from the same dump.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from droidmon.collector.base import Collector
from droidmon.collector.extract import (
    decode_flag,
    decode_int,
    decode_tenths,
    extract_all,
    field_pattern,
)
from droidmon.collector.source import CommandSource, TextSource
from droidmon.metrics import (
    NAMESPACE,
    MetricDescriptor,
    MetricKind,
    RawSample,
    SampleSink,
    build_fq_name,
)

SUBSYSTEM = "android"

DUMPSYS_PATH = "/system/bin/dumpsys"
DUMPSYS_ARGS = ("battery",)

BATTERY_PATTERNS = (
    field_pattern("charging", r"AC powered: (\w+)", decode_flag),
    field_pattern("level", r"level: (\d+)", decode_int),
    field_pattern("temperature", r"temperature: (-?\d+)", decode_tenths),
)

_HELP = {
    "charging": "Charging state.",
    "level": "Level of charged battery.",
    "temperature": "Temperature of battery.",
}


class AndroidCollector(Collector):

    def __init__(
        self,
        logger: logging.Logger,
        source: TextSource,
        namespace: str = NAMESPACE,
    ):
        self._log = logger
        self._source = source
        self._patterns = BATTERY_PATTERNS
        self._descs: Tuple[MetricDescriptor, ...] = tuple(
            MetricDescriptor(
                name=build_fq_name(namespace, SUBSYSTEM, f"battery_{p.field}"),
                help_text=_HELP[p.field],
            )
            for p in self._patterns
        )

    def update(self, sink: SampleSink) -> None:
        text = self._source.read()
        values = extract_all(self._patterns, text)
        self._log.debug("battery stats: %s", values)

        # Build every sample before emitting any of them
        samples = [
            RawSample(descriptor=desc, kind=MetricKind.GAUGE, value=values[p.field])
            for p, desc in zip(self._patterns, self._descs)
        ]
        for sample in samples:
            sink(sample)

    def descriptors(self) -> Tuple[MetricDescriptor, ...]:
        return self._descs

    def name(self) -> str:
        return f"Android battery ({self._source.name()})"


def new_android_collector(
    logger: logging.Logger,
    source: Optional[TextSource] = None,
) -> AndroidCollector:
    """Build the collector. Does no I/O; dumpsys only runs on update()."""
    if source is None:
        source = CommandSource((DUMPSYS_PATH,) + DUMPSYS_ARGS, logger=logger)
    return AndroidCollector(logger=logger, source=source)
