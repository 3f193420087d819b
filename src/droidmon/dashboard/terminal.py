"""Terminal views of scrape results using Rich, plus a JSONL printer."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime
from typing import List, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from droidmon import __version__
from droidmon.registry import ScrapeResult, Scraper

log = logging.getLogger(__name__)

MAX_FAILED_SCRAPES = 5


def _format_value(name: str, value: float) -> str:
    if name.endswith("_charging"):
        return "[green]yes[/green]" if value == 1.0 else "[dim]no[/dim]"
    if name.endswith("_level"):
        color = "green" if value > 50 else ("yellow" if value > 20 else "red")
        return f"[{color}]{value:.0f}%[/{color}]"
    if name.endswith("_temperature"):
        color = "green" if value < 35 else ("yellow" if value < 45 else "red")
        return f"[{color}]{value:.1f} C[/{color}]"
    return f"{value:g}"


def build_samples_table(results: List[ScrapeResult]) -> Table:
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Metric", style="dim")
    table.add_column("Labels")
    table.add_column("Value", justify="right")

    for result in results:
        for sample in result.samples:
            labels = ",".join(f"{k}={v}" for k, v in sample.labels().items())
            table.add_row(sample.name, labels, _format_value(sample.name, sample.value))
    return table


def build_status_table(results: List[ScrapeResult]) -> Table:
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Collector")
    table.add_column("Status", width=6)
    table.add_column("Duration", justify="right")
    table.add_column("Error", style="dim")

    for result in results:
        status = "[green]OK[/green]" if result.success else "[bold red]FAIL[/bold red]"
        error = str(result.error) if result.error else ""
        table.add_row(result.key, status, f"{result.duration * 1000:.1f}ms", error)
    return table


def build_display(results: List[ScrapeResult], source_name: str) -> Group:
    header = Text(f"  droidmon v{__version__}  |  {source_name}", style="bold white on blue")
    header.append(f"\n  {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}", style="dim")

    failed = [r.key for r in results if not r.success]
    border = "red" if failed else "cyan"
    return Group(
        Panel(header, border_style="blue"),
        Panel(build_samples_table(results), title="Samples", border_style=border),
        Panel(build_status_table(results), title="Collectors", border_style=border),
    )


def print_table(results: List[ScrapeResult], source_name: str, console: Optional[Console] = None):
    (console or Console()).print(build_display(results, source_name))


def print_jsonl(results: List[ScrapeResult], out=None):
    """One JSON object per sample, then one per collector status."""
    out = out or sys.stdout
    for result in results:
        for sample in result.samples:
            record = {
                "metric": sample.name,
                "kind": sample.kind.value,
                "labels": sample.labels(),
                "value": sample.value,
            }
            out.write(json.dumps(record) + "\n")
        out.write(json.dumps({
            "collector": result.key,
            "success": result.success,
            "duration_seconds": round(result.duration, 6),
            "error": str(result.error) if result.error else None,
        }) + "\n")
    out.flush()


def run_watch(scraper: Scraper, source_name: str, refresh_interval: float = 2.0):
    """Live view. Gives up after MAX_FAILED_SCRAPES scrapes in a row where nothing succeeded."""
    console = Console()
    log.info("Starting watch: source=%s, refresh=%.1fs", source_name, refresh_interval)

    consecutive_failures = 0

    with Live(console=console, refresh_per_second=1) as live:
        try:
            while True:
                results = scraper.scrape()
                if results and not any(r.success for r in results):
                    consecutive_failures += 1
                    log.warning("Scrape failed (attempt %d/%d)", consecutive_failures, MAX_FAILED_SCRAPES)
                    if consecutive_failures >= MAX_FAILED_SCRAPES:
                        live.update(build_display(results, source_name))
                        log.error("No collector succeeded in %d scrapes, exiting", MAX_FAILED_SCRAPES)
                        break
                else:
                    consecutive_failures = 0

                live.update(build_display(results, source_name))
                time.sleep(refresh_interval)
        except KeyboardInterrupt:
            pass

    console.print("\n[dim]Watch stopped.[/dim]")
    return consecutive_failures < MAX_FAILED_SCRAPES
