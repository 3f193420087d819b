"""
Collector registry and scraper.

The registry maps a stable key to a factory plus an enabled-by-default
flag. Nothing is global: main builds a registry, hands it to the setup
routine that registers the built-ins, then asks it for the enabled
collectors. The scraper runs those collectors concurrently on each
scrape and records per-collector duration and success.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from droidmon.collector.base import Collector
from droidmon.collector.source import TextSource
from droidmon.errors import CollectorError
from droidmon.metrics import (
    NAMESPACE,
    MetricDescriptor,
    MetricKind,
    RawSample,
    build_fq_name,
)

log = logging.getLogger(__name__)

CollectorFactory = Callable[..., Collector]

SCRAPE_DURATION_DESC = MetricDescriptor(
    name=build_fq_name(NAMESPACE, "scrape", "collector_duration_seconds"),
    help_text="node_exporter: Duration of a collector scrape.",
    label_names=("collector",),
)
SCRAPE_SUCCESS_DESC = MetricDescriptor(
    name=build_fq_name(NAMESPACE, "scrape", "collector_success"),
    help_text="node_exporter: Whether a collector succeeded.",
    label_names=("collector",),
)


@dataclass(frozen=True)
class _Entry:
    key: str
    enabled_by_default: bool
    factory: CollectorFactory


class CollectorRegistry:

    def __init__(self):
        self._entries: Dict[str, _Entry] = {}

    def register(self, key: str, enabled_by_default: bool, factory: CollectorFactory) -> None:
        if key in self._entries:
            raise ValueError(f"collector {key!r} is already registered")
        self._entries[key] = _Entry(key, enabled_by_default, factory)

    def keys(self) -> List[str]:
        return sorted(self._entries)

    def is_enabled(
        self,
        key: str,
        enable: Iterable[str] = (),
        disable: Iterable[str] = (),
        disable_defaults: bool = False,
    ) -> bool:
        """Explicit disable beats explicit enable beats the default."""
        entry = self._get(key)
        if key in set(disable):
            return False
        if key in set(enable):
            return True
        return entry.enabled_by_default and not disable_defaults

    def build(
        self,
        logger: logging.Logger,
        enable: Iterable[str] = (),
        disable: Iterable[str] = (),
        disable_defaults: bool = False,
        sources: Optional[Mapping[str, TextSource]] = None,
    ) -> Dict[str, Collector]:
        """Instantiate the enabled collectors, keyed by name."""
        enable, disable = list(enable), list(disable)
        for key in enable + disable + list(sources or {}):
            self._get(key)

        collectors: Dict[str, Collector] = {}
        for key in self.keys():
            if not self.is_enabled(key, enable, disable, disable_defaults):
                continue
            entry = self._entries[key]
            child = logger.getChild(key)
            if sources and key in sources:
                collectors[key] = entry.factory(child, sources[key])
            else:
                collectors[key] = entry.factory(child)
            log.debug("enabled collector %s", key)
        return collectors

    def _get(self, key: str) -> _Entry:
        try:
            return self._entries[key]
        except KeyError:
            raise ValueError(
                f"unknown collector {key!r} (known: {', '.join(self.keys())})"
            ) from None


@dataclass
class ScrapeResult:
    key: str
    success: bool
    duration: float
    samples: List[RawSample] = field(default_factory=list)
    error: Optional[Exception] = None

    def meta_samples(self) -> List[RawSample]:
        return [
            RawSample(SCRAPE_DURATION_DESC, MetricKind.GAUGE, self.duration, (self.key,)),
            RawSample(SCRAPE_SUCCESS_DESC, MetricKind.GAUGE, 1.0 if self.success else 0.0, (self.key,)),
        ]


class Scraper:
    """Runs every collector once per scrape, in parallel."""

    def __init__(
        self,
        collectors: Mapping[str, Collector],
        logger: Optional[logging.Logger] = None,
        max_workers: Optional[int] = None,
    ):
        self._collectors = dict(sorted(collectors.items()))
        self._log = logger or log
        self._max_workers = max_workers or max(1, len(self._collectors))

    @property
    def collectors(self) -> Dict[str, Collector]:
        return dict(self._collectors)

    def scrape(self) -> List[ScrapeResult]:
        if not self._collectors:
            return []
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = [
                pool.submit(self._run_one, key, collector)
                for key, collector in self._collectors.items()
            ]
            return [f.result() for f in futures]

    def _run_one(self, key: str, collector: Collector) -> ScrapeResult:
        buffer: List[RawSample] = []
        start = time.perf_counter()
        try:
            collector.update(buffer.append)
        except CollectorError as e:
            duration = time.perf_counter() - start
            self._log.error("collector %s failed after %.3fs: %s", key, duration, e)
            return ScrapeResult(key=key, success=False, duration=duration, error=e)
        except Exception as e:
            duration = time.perf_counter() - start
            self._log.exception("collector %s crashed after %.3fs", key, duration)
            return ScrapeResult(key=key, success=False, duration=duration, error=e)

        duration = time.perf_counter() - start
        self._log.debug("collector %s succeeded in %.3fs", key, duration)
        return ScrapeResult(key=key, success=True, duration=duration, samples=buffer)
