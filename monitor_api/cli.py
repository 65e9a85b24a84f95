"""Command-line entry point for the resource monitor.

Usage:
    monitor-api serve                       # run the HTTP API
    monitor-api watch --interval 3          # print live metrics
    monitor-api logs nginx --pages 2        # print a log tail plus 2 older pages
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from monitor_api.client import ApiError, LogWindow, MetricsHistory, MonitorClient, poll_metrics
from monitor_api.config import settings

logger = logging.getLogger("monitor_api")


def format_metrics(metrics: dict) -> str:
    return (
        f"cpu {metrics['cpu']:3d}% [{metrics['cpuLoad']}]  "
        f"mem {metrics['memory']:3d}% ({metrics['memoryUsed']}/{metrics['memoryTotal']} GB)  "
        f"disk {metrics['disk']:3d}% ({metrics['diskUsed']}/{metrics['diskTotal']} GB)  "
        f"up {metrics['uptime']}"
    )


def _default_url() -> str:
    host = "127.0.0.1" if settings.host == "0.0.0.0" else settings.host
    return f"http://{host}:{settings.port}"


# ── subcommands ──────────────────────────────────────


def serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("monitor_api.main:app", host=args.host, port=args.port)
    return 0


async def watch(args: argparse.Namespace) -> int:
    history = MetricsHistory()

    def show(metrics: dict) -> None:
        print(format_metrics(metrics), flush=True)

    async with MonitorClient(args.url, token=args.token) as client:
        await poll_metrics(
            client, history, interval=args.interval, on_update=show, max_polls=args.count
        )
    return 0


async def logs(args: argparse.Namespace) -> int:
    async with MonitorClient(args.url, token=args.token) as client:
        window = LogWindow(client, args.source, limit=args.limit)
        await window.reload()
        for _ in range(args.pages):
            if not await window.load_more():
                break
    for line in window.lines:
        print(line)
    if window.has_more:
        logger.info("Older lines available before offset %d", window.oldest_offset)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="monitor-api", description="Host resource monitor")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=settings.host)
    p_serve.add_argument("--port", type=int, default=settings.port)

    for name, help_text in (("watch", "Print live metrics"), ("logs", "Print a log tail")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--url", default=_default_url(), help="API base URL")
        p.add_argument("--token", default=settings.api_token, help="API token")
        if name == "watch":
            p.add_argument("--interval", type=float, default=3.0, help="Seconds between polls")
            p.add_argument("--count", type=int, default=None, help="Stop after N polls")
        else:
            p.add_argument("source", help="Log source id")
            p.add_argument("--limit", type=int, default=settings.log_default_limit)
            p.add_argument("--pages", type=int, default=0, help="Older pages to load")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if args.command == "serve":
        return serve(args)

    handler = watch if args.command == "watch" else logs
    try:
        return asyncio.run(handler(args))
    except ApiError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
