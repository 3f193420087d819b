"""Tests for the prometheus_client bridge and the HTTP endpoint."""

import logging

import httpx

from droidmon.collector.android import new_android_collector
from droidmon.collector.source import StaticSource
from droidmon.exposition import render, serve
from droidmon.registry import Scraper

LOG = logging.getLogger("test.exposition")

GOOD_TEXT = "AC powered: true\nlevel: 87\ntemperature: 253\n"


def _scraper(text: str) -> Scraper:
    collector = new_android_collector(LOG, source=StaticSource(text))
    return Scraper({"android": collector}, logger=LOG)


def test_render_success():
    body = render(_scraper(GOOD_TEXT)).decode()

    assert "# HELP node_android_battery_charging Charging state." in body
    assert "# TYPE node_android_battery_level gauge" in body
    assert "node_android_battery_charging 1.0" in body
    assert "node_android_battery_level 87.0" in body
    assert "node_android_battery_temperature 25.3" in body
    assert 'node_scrape_collector_success{collector="android"} 1.0' in body
    assert 'node_scrape_collector_duration_seconds{collector="android"}' in body


def test_render_failure_only_reports_success_zero():
    body = render(_scraper("AC powered: true\ntemperature: 253\n")).decode()

    assert "node_android_battery_" not in body
    assert 'node_scrape_collector_success{collector="android"} 0.0' in body


def test_render_without_collectors_still_has_meta_families():
    body = render(Scraper({})).decode()
    assert "# TYPE node_scrape_collector_success gauge" in body


def test_http_endpoint():
    server, _ = serve(_scraper(GOOD_TEXT), address="127.0.0.1", port=0)
    try:
        response = httpx.get(f"http://127.0.0.1:{server.server_port}/metrics", timeout=5.0)
        assert response.status_code == 200
        assert "node_android_battery_temperature 25.3" in response.text
    finally:
        server.shutdown()
