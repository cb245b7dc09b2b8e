"""CLI entry point for the HTTPU discovery tool.

    httpu-discovery search --st upnp:rootdevice
    httpu-discovery probe probes/ssdp.yaml
    httpu-discovery interfaces

Results are printed to stdout as a JSON envelope; logs go to stderr.
"""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

import click

from .config import Settings, get_settings
from .discovery.client import HTTPUClient
from .errors import HTTPUError
from .message.request import Request
from .message.response import Response
from .probe.parser import parse_probe
from .probe.validator import validate_probe
from .reporting.json_reporter import JsonReporter
from .ssdp.description import DescriptionFetcher
from .ssdp.search import DEFAULT_MX, SSDP_HOST, ST_ALL, msearch_request, search
from .transport.interfaces import list_interfaces

log = logging.getLogger(__name__)


@click.group()
@click.option("-v", "--verbose", count=True, help="-v for info, -vv for debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: int):
    """Discover devices and services with HTTP over UDP."""
    try:
        ctx.obj = get_settings()
    except ValueError as e:
        output_error(ctx.invoked_subcommand or "main", f"Invalid configuration: {e}")
        sys.exit(1)
    configure_logging(verbose, ctx.obj.log_level)


@main.command("search")
@click.option("--st", "search_target", default=ST_ALL, show_default=True, help="Search target.")
@click.option("--mx", default=DEFAULT_MX, show_default=True, type=int, help="MX header value.")
@click.option("--host", default=SSDP_HOST, show_default=True, help="Destination host:port.")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Collection window in seconds.")
@click.option("--num-sends", type=click.IntRange(min=1), help="Number of send rounds.")
@click.option("--describe", is_flag=True, help="Fetch device descriptions from LOCATION.")
@click.option("--save-report", type=click.Path(dir_okay=False), help="Save the full report here.")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
@click.pass_obj
def search_command(settings: Settings, search_target, mx, host, timeout, num_sends,
                   describe, save_report, pretty):
    """Send an SSDP M-SEARCH and list the answers."""
    request = msearch_request(search_target, mx, host)
    timeout = timeout if timeout is not None else settings.timeout
    num_sends = num_sends if num_sends is not None else settings.num_sends

    def run(client: HTTPUClient) -> list[Response]:
        results = search(client, search_target, mx, timeout, num_sends, host)
        for result in results:
            log.info("httpu: found %s", result)
        return [result.response for result in results]

    _run_exchange(settings, "search", f"search:{search_target}", request, timeout, num_sends,
                  run, describe, save_report, pretty)


@main.command("probe")
@click.argument("probe_file", type=click.Path(dir_okay=False))
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="Override the probe's timeout.")
@click.option("--num-sends", type=click.IntRange(min=1), help="Override the probe's send rounds.")
@click.option("--save-report", type=click.Path(dir_okay=False), help="Save the full report here.")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
@click.pass_obj
def probe_command(settings: Settings, probe_file, timeout, num_sends, save_report, pretty):
    """Run the exchange described by a YAML probe file."""
    try:
        probe = parse_probe(probe_file)
    except (FileNotFoundError, ValueError) as e:
        output_error("probe", f"Failed to parse probe: {e}", pretty=pretty)
        sys.exit(1)

    if timeout is not None:
        probe.exchange.timeout = timeout
    if num_sends is not None:
        probe.exchange.num_sends = num_sends

    validation = validate_probe(probe)
    if not validation.valid:
        errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
        output_error("probe", f"Invalid probe: {errors_str}", pretty=pretty)
        sys.exit(1)
    for warning in validation.warnings:
        log.warning("httpu: %s: %s", warning.path, warning.message)

    timeout = probe.exchange.timeout
    num_sends = probe.exchange.num_sends

    def run(client: HTTPUClient) -> list[Response]:
        return client.exchange(probe.to_request(), timeout, num_sends)

    _run_exchange(settings, "probe", probe.name, probe.to_request(), timeout, num_sends,
                  run, probe.describe, save_report, pretty)


@main.command("interfaces")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
def interfaces_command(pretty):
    """List local interfaces and whether requests are sent on them."""
    try:
        interfaces = list_interfaces()
    except HTTPUError as e:
        output_error("interfaces", str(e), pretty=pretty)
        sys.exit(1)

    multicast = sum(1 for i in interfaces if i.supports_multicast)
    _print_json({
        "success": True,
        "command": "interfaces",
        "data": {"interfaces": [i.to_dict() for i in interfaces]},
        "message": f"{len(interfaces)} interface(s), {multicast} multicast-capable",
    }, pretty)


def _run_exchange(settings: Settings, command, name, request: Request, timeout, num_sends,
                  run, describe, save_report, pretty):
    """Run one exchange, then report it as JSON and exit non-zero on failure."""
    reporter = JsonReporter()
    responses: list[Response] = []
    descriptions = None
    error: Optional[str] = None

    start_time = time.time()
    try:
        with HTTPUClient.open(bind_addr=settings.bind_addr) as client:
            responses = run(client)
    except (HTTPUError, OSError) as e:
        error = str(e)
    duration_ms = int((time.time() - start_time) * 1000)

    if describe and responses:
        with DescriptionFetcher() as fetcher:
            descriptions = fetcher.fetch_all(r.header("LOCATION") for r in responses)

    report = reporter.generate(
        name=name,
        request=request,
        responses=responses,
        timeout=timeout,
        num_sends=num_sends,
        duration_ms=duration_ms,
        descriptions=descriptions,
        error=error,
    )

    report_path = None
    if save_report:
        report_path = str(reporter.save(report, Path(save_report)))

    output = reporter.generate_cli_output(report, command, report_path)
    _print_json(output, pretty)

    if not output["success"]:
        sys.exit(1)


def configure_logging(verbose: int = 0, log_level: str = "WARNING") -> None:
    """Send logs to stderr; -v and -vv override HTTPU_LOG_LEVEL."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def output_error(command: str, message: str, pretty: bool = False, **extra):
    """Output error as a JSON envelope."""
    _print_json({
        "success": False,
        "command": command,
        "data": extra or None,
        "message": message,
    }, pretty)


def _print_json(output: dict, pretty: bool = False) -> None:
    click.echo(json.dumps(output, indent=2 if pretty else None, ensure_ascii=False))


if __name__ == "__main__":
    main()
