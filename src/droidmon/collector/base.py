"""
Base collector interface.

A collector owns a fixed set of metric descriptors and, on every scrape,
pushes one sample per descriptor to the sink it is handed. Collectors
keep no per-scrape state on the instance, so the scraper may call
update() from several threads at once.
"""

from abc import ABC, abstractmethod
from typing import Tuple

from droidmon.metrics import MetricDescriptor, SampleSink


class Collector(ABC):
    """Interface for all metric collectors."""

    @abstractmethod
    def update(self, sink: SampleSink) -> None:
        """Emit the current samples to sink. Raises CollectorError on failure."""
        ...

    @abstractmethod
    def descriptors(self) -> Tuple[MetricDescriptor, ...]:
        """Descriptors this collector emits, in emission order."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...
