"""
fetch-failover-dsn HOSTNAME

Diagnoses how a monitoring target resolves: fresh resolution, cached
resolution, quarantine filtering, hostname extraction and can_resolve.

Usage:
    fetch-failover-dsn pve.lan
    fetch-failover-dsn pve.lan --mark-first-failed --verbose
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.table import Table

from .config import extract_hostname
from .errors import ResolutionFailed
from .resolver import Resolver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fetch-failover-dsn",
        description="Test DNS resolution, caching and quarantine for a hostname.",
    )
    parser.add_argument("hostname", help="Hostname to resolve, e.g. proxmox.lan")
    parser.add_argument(
        "--mark-first-failed",
        action="store_true",
        help="Quarantine the first resolved address and resolve again",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def _address_table(title: str, addresses: list[str]) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Address")
    for index, address in enumerate(addresses, start=1):
        table.add_row(str(index), address)
    return table


async def run_diagnostics(
    hostname: str,
    resolver: Resolver,
    console: Console,
    mark_first_failed: bool = False,
) -> int:
    """Run the diagnostic steps; returns the process exit status"""
    console.rule(f"Testing DNS Resolution for: {hostname}")

    console.print("[bold]1. Basic DNS resolution[/bold]")
    try:
        result = await resolver.lookup(hostname)
    except ResolutionFailed as e:
        console.print(f"[red]DNS resolution failed:[/red] {e}")
        return 1
    addresses = resolver.filter_quarantined(hostname, result.addresses)
    console.print(_address_table(f"Resolved via {result.source}", addresses))
    console.print(f"Resolution took {result.resolution_time_seconds * 1000:.1f} ms")

    console.print("[bold]2. Cached resolution[/bold]")
    cached = await resolver.lookup(hostname)
    console.print(f"Got {len(cached.addresses)} addresses from {cached.source}")

    if mark_first_failed:
        console.print("[bold]3. Failed IP handling[/bold]")
        if len(addresses) > 1:
            first = addresses[0]
            resolver.health.mark_failed(first)
            console.print(f"Marked {first} as failed")
            filtered = await resolver.resolve(hostname)
            console.print(_address_table("After filtering", filtered))
            state = "still marked as failed" if resolver.health.is_failed(first) else "available again"
            console.print(f"IP {first} is {state}")
        else:
            console.print("[yellow]Only one address resolved, skipping[/yellow]")

    console.print("[bold]4. Hostname extraction[/bold]")
    samples = Table()
    samples.add_column("Input")
    samples.add_column("Hostname")
    for sample in (
        f"https://{hostname}:8006",
        f"{hostname}:8006",
        f"https://{hostname}/api2/json",
        hostname,
    ):
        samples.add_row(sample, extract_hostname(sample))
    console.print(samples)

    console.print("[bold]5. can_resolve[/bold]")
    console.print(f"Can resolve {hostname}: {await resolver.can_resolve(hostname)}")

    stats = resolver.get_stats()
    console.print(
        f"cache hits={stats.cache_hits} misses={stats.cache_misses} "
        f"stale={stats.stale_hits} lookups={stats.lookups}"
    )
    console.rule("[green]Test completed successfully[/green]")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(
        run_diagnostics(
            args.hostname,
            Resolver(),
            Console(),
            mark_first_failed=args.mark_first_failed,
        )
    )


if __name__ == "__main__":
    sys.exit(main())
