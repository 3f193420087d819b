"""
droidmon entry point.

Usage:
    droidmon serve --port 9100          Expose /metrics (default command)
    droidmon --mock show                One scrape against simulated dumpsys
    droidmon --from-file dump.txt show  Parse a saved `dumpsys battery`
    droidmon watch                      Live terminal view
    droidmon collectors                 List collectors and their state
"""

from __future__ import annotations

import logging
import time

import click

from droidmon import __version__
from droidmon.collector import register_builtin
from droidmon.collector.android import DUMPSYS_ARGS, DUMPSYS_PATH
from droidmon.collector.source import DEFAULT_TIMEOUT, CommandSource, StaticSource
from droidmon.dashboard.terminal import print_jsonl, print_table, run_watch
from droidmon.exposition import DEFAULT_ADDRESS, DEFAULT_PORT, serve as serve_metrics
from droidmon.mock.dumpsys import MockDumpsys
from droidmon.registry import CollectorRegistry, Scraper


log = logging.getLogger("droidmon")


def _make_source(obj: dict):
    if obj["mock"]:
        return MockDumpsys()
    if obj["from_file"]:
        with open(obj["from_file"], encoding="utf-8", errors="replace") as f:
            return StaticSource(f.read(), label=obj["from_file"])
    return CommandSource(
        (obj["dumpsys"],) + DUMPSYS_ARGS,
        timeout=obj["timeout"],
        logger=log.getChild("android"),
    )


def _build_scraper(ctx: click.Context) -> tuple[Scraper, str]:
    obj = ctx.obj
    registry: CollectorRegistry = obj["registry"]
    source = _make_source(obj)
    try:
        collectors = registry.build(
            log,
            enable=obj["enable"],
            disable=obj["disable"],
            disable_defaults=obj["disable_defaults"],
            sources={"android": source},
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    if not collectors:
        log.warning("No collectors enabled")
    return Scraper(collectors, logger=log), source.name()


@click.group(invoke_without_command=True, context_settings={"auto_envvar_prefix": "DROIDMON"})
@click.version_option(version=__version__, prog_name="droidmon")
@click.option("--mock", is_flag=True, default=False, help="Use simulated dumpsys output")
@click.option("--from-file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Parse a saved `dumpsys battery` dump instead of running dumpsys")
@click.option("--dumpsys", default=DUMPSYS_PATH, show_default=True, help="Path to the dumpsys binary")
@click.option("--timeout", default=DEFAULT_TIMEOUT, show_default=True,
              help="Seconds to wait for dumpsys before failing the scrape")
@click.option("--enable", multiple=True, help="Enable a collector (repeatable)")
@click.option("--disable", multiple=True, help="Disable a collector (repeatable)")
@click.option("--disable-defaults", is_flag=True, default=False,
              help="Disable all collectors not explicitly enabled")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, mock: bool, from_file: str, dumpsys: str, timeout: float, enable: tuple,
        disable: tuple, disable_defaults: bool, verbose: bool):
    """droidmon - Prometheus exporter for Android battery state."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    if mock and from_file:
        raise click.UsageError("--mock and --from-file are mutually exclusive")

    registry = CollectorRegistry()
    register_builtin(registry)

    ctx.ensure_object(dict)
    ctx.obj["registry"] = registry
    ctx.obj["mock"] = mock
    ctx.obj["from_file"] = from_file
    ctx.obj["dumpsys"] = dumpsys
    ctx.obj["timeout"] = timeout
    ctx.obj["enable"] = enable
    ctx.obj["disable"] = disable
    ctx.obj["disable_defaults"] = disable_defaults

    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.option("--address", default=DEFAULT_ADDRESS, show_default=True, help="Address to listen on")
@click.option("--port", default=DEFAULT_PORT, show_default=True, help="Port to listen on")
@click.pass_context
def serve(ctx, address: str = DEFAULT_ADDRESS, port: int = DEFAULT_PORT):
    """Expose metrics over HTTP until interrupted."""
    scraper, source_name = _build_scraper(ctx)
    server, _ = serve_metrics(scraper, address=address, port=port)
    click.echo(f"droidmon v{__version__} serving {source_name} on http://{address}:{server.server_port}/metrics")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        server.shutdown()


@cli.command()
@click.option("--output", type=click.Choice(["table", "jsonl"]), default="table",
              help="Output mode: table (Rich) or jsonl (one JSON line per sample)")
@click.pass_context
def show(ctx, output: str):
    """Take a single scrape and print it."""
    scraper, source_name = _build_scraper(ctx)
    results = scraper.scrape()

    if output == "jsonl":
        print_jsonl(results)
    else:
        print_table(results, source_name)

    if any(not r.success for r in results):
        raise SystemExit(1)


@cli.command()
@click.option("--refresh", default=2.0, show_default=True, help="Refresh interval in seconds")
@click.pass_context
def watch(ctx, refresh: float):
    """Live terminal view of the collectors."""
    scraper, source_name = _build_scraper(ctx)
    if not run_watch(scraper, source_name, refresh_interval=refresh):
        raise SystemExit(1)


@cli.command()
@click.pass_context
def collectors(ctx):
    """List registered collectors and whether they are enabled."""
    obj = ctx.obj
    registry: CollectorRegistry = obj["registry"]
    unknown = sorted((set(obj["enable"]) | set(obj["disable"])) - set(registry.keys()))
    if unknown:
        raise click.UsageError(f"unknown collector(s): {', '.join(unknown)}")
    for key in registry.keys():
        enabled = registry.is_enabled(key, obj["enable"], obj["disable"], obj["disable_defaults"])
        click.echo(f"{key}\t{'enabled' if enabled else 'disabled'}")


if __name__ == "__main__":
    cli()
