"""
Bridge from our scrape results to prometheus_client.

prometheus_client owns the wire format and the HTTP server; we only
translate RawSamples into metric families. Every HTTP request triggers
exactly one scrape.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List

from prometheus_client import CollectorRegistry, generate_latest, start_http_server
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily

from droidmon.metrics import MetricKind, RawSample
from droidmon.registry import SCRAPE_DURATION_DESC, SCRAPE_SUCCESS_DESC, Scraper

log = logging.getLogger(__name__)

DEFAULT_ADDRESS = "0.0.0.0"
DEFAULT_PORT = 9100


def _families(samples: List[RawSample]) -> Iterator:
    grouped: Dict[str, List[RawSample]] = {}
    for sample in samples:
        grouped.setdefault(sample.name, []).append(sample)

    for name, group in grouped.items():
        first = group[0]
        labels = list(first.descriptor.label_names)
        if first.kind is MetricKind.COUNTER:
            family = CounterMetricFamily(name, first.descriptor.help_text, labels=labels)
        else:
            family = GaugeMetricFamily(name, first.descriptor.help_text, labels=labels)
        for sample in group:
            family.add_metric(list(sample.label_values), sample.value)
        yield family


class ScrapeBridge:
    """prometheus_client custom collector that runs one scrape per collect()."""

    def __init__(self, scraper: Scraper):
        self._scraper = scraper

    def collect(self):
        results = self._scraper.scrape()

        samples: List[RawSample] = []
        meta: List[RawSample] = []
        for result in results:
            samples.extend(result.samples)
            meta.extend(result.meta_samples())

        yield from _families(samples)

        # Keep both meta families present even if there are no collectors
        duration = GaugeMetricFamily(
            SCRAPE_DURATION_DESC.name, SCRAPE_DURATION_DESC.help_text,
            labels=list(SCRAPE_DURATION_DESC.label_names),
        )
        success = GaugeMetricFamily(
            SCRAPE_SUCCESS_DESC.name, SCRAPE_SUCCESS_DESC.help_text,
            labels=list(SCRAPE_SUCCESS_DESC.label_names),
        )
        for sample in meta:
            target = duration if sample.descriptor is SCRAPE_DURATION_DESC else success
            target.add_metric(list(sample.label_values), sample.value)
        yield duration
        yield success


def build_registry(scraper: Scraper) -> CollectorRegistry:
    """Dedicated registry, so the default process/platform collectors stay out."""
    registry = CollectorRegistry()
    registry.register(ScrapeBridge(scraper))
    return registry


def render(scraper: Scraper) -> bytes:
    return generate_latest(build_registry(scraper))


def serve(scraper: Scraper, address: str = DEFAULT_ADDRESS, port: int = DEFAULT_PORT):
    """Start the /metrics HTTP server in a daemon thread. Returns (server, thread)."""
    server, thread = start_http_server(port, addr=address, registry=build_registry(scraper))
    log.info("Serving metrics on http://%s:%d/metrics", address, server.server_port)
    return server, thread
