"""
Core metric definitions for droidmon.

A descriptor is created once per measurement when a collector is built;
samples are short-lived values pushed to a sink during a single scrape.
Names follow the Prometheus namespace_subsystem_name convention.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Tuple

NAMESPACE = "node"


class MetricKind(str, Enum):
    GAUGE = "gauge"
    COUNTER = "counter"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with underscores. Empty name -> empty string."""
    if not name:
        return ""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    help_text: str
    label_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RawSample:
    descriptor: MetricDescriptor
    kind: MetricKind
    value: float
    label_values: Tuple[str, ...] = ()

    def __post_init__(self):
        expected = len(self.descriptor.label_names)
        if len(self.label_values) != expected:
            raise ValueError(
                f"{self.descriptor.name}: expected {expected} label values, "
                f"got {len(self.label_values)}"
            )

    @property
    def name(self) -> str:
        return self.descriptor.name

    def labels(self) -> dict:
        return dict(zip(self.descriptor.label_names, self.label_values))


# Anything that accepts one sample: list.append, queue.Queue.put, ...
SampleSink = Callable[[RawSample], None]
