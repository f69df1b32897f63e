"""Entry point: fetch core FPL data and print cache diagnostics."""

from __future__ import annotations

import argparse
import asyncio
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from fpldash.config import load_settings
from fpldash.services.data_service import FPLDataService
from fpldash.services.rate_limit import RateLimiter

log = logging.getLogger(__name__)


def _stats_table(stats: dict[str, dict]) -> Table:
    table = Table(title="Cache stats")
    table.add_column("Cache")
    table.add_column("Size", justify="right")
    table.add_column("Capacity", justify="right")
    table.add_column("TTL (s)", justify="right")
    table.add_column("Keys")
    for name, s in stats.items():
        keys = ", ".join(e["key"] for e in s["entries"][:5])
        if s["size"] > 5:
            keys += ", …"
        table.add_row(name, str(s["size"]), str(s["capacity"]), f"{s['ttl'] / 1000:g}", keys)
    return table


def _budget_line(limiter: RateLimiter) -> str:
    if limiter.is_exhausted:
        return f"[bold red]{limiter.status_text} - request limit reached[/bold red]"
    return limiter.status_text


async def run(league_id: int | None, pages: int) -> int:
    settings = load_settings()
    service = FPLDataService(settings)
    console = Console()
    if settings.sweep_enabled:
        service.caches.start_sweep()
    try:
        health = await service.health_check()
        console.print(f"Health: [bold]{health['status']}[/bold] {health['latency']}")
        if health["status"] != "ok":
            return 1

        summary = await service.gameweek_summary()
        console.print(
            f"Current GW: {summary['current_gameweek_name'] or 'Not found'}"
            f"  Next GW: {summary['next_gameweek_name'] or 'Not found'}"
        )

        league_id = league_id or settings.default_league_id
        if league_id:
            for page in range(1, pages + 1):
                standings = await service.fetch_classic_standings(league_id, page)
                console.print(
                    f"{standings.league.name} page {page}: "
                    f"{len(standings.standings.results)} entries"
                )
                if not standings.standings.has_next:
                    break

        console.print(_stats_table(service.caches.stats()))
        console.print(_budget_line(service.client.rate_limiter))
        return 0
    except Exception:
        log.exception("Diagnostics run failed")
        return 1
    finally:
        await service.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="FPL data and cache diagnostics")
    parser.add_argument("--league", type=int, help="classic league id to fetch")
    parser.add_argument("--pages", type=int, default=1, help="standings pages to fetch")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    raise SystemExit(asyncio.run(run(args.league, args.pages)))


if __name__ == "__main__":
    main()
