from __future__ import annotations

import argparse
import sys

import structlog

from .client import SURBL
from .config import settings
from .errors import ConfigError, TldLoadError
from .logging_config import setup_logging
from .models import RunStats
from .output import JsonLinesHandler, OutputHandler, StdoutHandler

log = structlog.get_logger()

EXIT_OK = 0
EXIT_LISTED = 1
EXIT_FATAL = 2


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="surbl-check",
        description="Check hostnames against the SURBL domain blocklist.",
    )
    parser.add_argument("hostnames", nargs="*", help="hostnames or IPv4 addresses to check")
    parser.add_argument("--cache-dir", default=None, help="directory for cached TLD lists")
    parser.add_argument("--zone", default=None, help="blacklist DNS zone")
    parser.add_argument("--workers", type=int, default=settings.workers)
    parser.add_argument("--strict", action="store_true", help="fail instead of reporting clean when DNS is broken")
    parser.add_argument("--json", action="store_true", help="emit one JSON object per host")
    parser.add_argument("--refresh-only", action="store_true", help="only refresh the TLD tables")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None, surbl: SURBL | None = None) -> int:
    args = _parse_args(argv)
    setup_logging(settings.log_format)
    handler: OutputHandler = JsonLinesHandler() if args.json else StdoutHandler()
    stats = RunStats()

    try:
        if surbl is None:
            surbl = SURBL(args.cache_dir, zone=args.zone, strict=args.strict or None)
        stats.tables_reloaded = surbl.load()
    except (ConfigError, TldLoadError) as exc:
        log.error("surbl_setup_failed", error=str(exc))
        print(f"surbl-check: {exc}", file=sys.stderr)
        return EXIT_FATAL

    if args.refresh_only:
        log.info("tld_tables_refreshed", reloaded=stats.tables_reloaded)
        return EXIT_OK

    outcomes = surbl.check_many(args.hostnames, workers=args.workers, return_exceptions=True)

    for hostname, outcome in zip(args.hostnames, outcomes):
        stats.hosts_checked += 1
        if isinstance(outcome, Exception):
            stats.errors += 1
            handler.emit_error(hostname, outcome)
            continue
        if outcome.listed:
            stats.listed_count += 1
        else:
            stats.clean_count += 1
        handler.emit_result(outcome)

    handler.emit_summary(stats)
    log.info("run_complete", **stats.model_dump())
    return EXIT_LISTED if stats.listed_count else EXIT_OK


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
