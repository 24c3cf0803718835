"""
Command-line interface for the second-order crawler.
"""

import argparse
import logging
import signal
import sys
import time
import urllib.parse
from pathlib import Path

from second_order.config import (
    DEFAULT_DEPTH,
    DEFAULT_OUTPUT,
    DEFAULT_THREADS,
    ConfigError,
    load_config,
    parse_header_args,
)
from second_order.core.crawler import Crawler
from second_order.core.results import ResultStore
from second_order.core.storage import write_all_results
from second_order.extraction.extractors import (
    ExtractionPipeline,
    build_extractors,
    enabled_categories,
)
from second_order.extraction.probe import NonOkProber
from second_order.session import build_probe_session, build_session
from second_order.utils.log import log, setup_logging
from second_order.utils.url import is_valid_host


class _ArgumentParser(argparse.ArgumentParser):
    """Exit with status 1 on bad arguments, like every other input error."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="second-order",
        description="Scan a website for second-order subdomain takeovers and "
                    "harvest configurable HTML signals from every crawled page.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  second-order --target https://example.com --config config.json\n"
            "  second-order --target https://example.com --config config.json "
            "--depth 3 --threads 20\n"
            "  second-order --target https://example.com --config config.json "
            "--header 'Cookie: session=abc'\n"
        ),
    )
    parser.add_argument("--target", help="Target URL")
    parser.add_argument("--config", help="Configuration file")
    parser.add_argument(
        "--output", default=DEFAULT_OUTPUT,
        help=f"Directory to save results in (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--insecure", action="store_true", default=False,
        help="Accept untrusted SSL/TLS certificates",
    )
    parser.add_argument(
        "--depth", type=int, default=None,
        help="Depth to crawl (default: 'Depth' from the config file, "
             f"else {DEFAULT_DEPTH})",
    )
    parser.add_argument(
        "--threads", type=int, default=DEFAULT_THREADS,
        help=f"Number of concurrent workers (default: {DEFAULT_THREADS})",
    )
    parser.add_argument(
        "--header", action="append", default=[], metavar="'NAME: VALUE'",
        help="Header name and value separated by a colon "
             "(can be used more than once)",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable verbose debug logging",
    )
    parser.add_argument(
        "--log-file",
        help="Write detailed logs to this file (always at DEBUG level)",
    )
    return parser


def _fail(message: str) -> int:
    print(f"[*] {message}", file=sys.stderr)
    return 1


def _normalise_target(raw: str) -> str | None:
    """Return the seed URL, defaulting to https, or None if unusable."""
    target = raw.strip()
    if "://" not in target:
        target = "https://" + target
    try:
        parsed = urllib.parse.urlsplit(target)
        parsed.port
    except ValueError:
        return None
    if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
        return None
    if not is_valid_host(parsed.hostname):
        return None
    return target


def _install_signal_handlers(crawler: Crawler) -> dict:
    """Route SIGINT / SIGTERM to a graceful stop.  Returns the previous
    handlers so they can be restored."""

    def _handler(signum, _frame) -> None:
        log.warning(
            "[INTERRUPT] Received %s, saving the results before exiting",
            signal.Signals(signum).name,
        )
        crawler.stop()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, _handler)
    return previous


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug, log_file=args.log_file)

    if args.debug:
        logging.getLogger("urllib3").setLevel(logging.DEBUG)

    if not args.target or not args.config:
        parser.print_help(sys.stderr)
        return _fail("You need to specify a target and a config file")

    try:
        config = load_config(args.config)
        extractors = build_extractors(config)
    except ConfigError as exc:
        return _fail(str(exc))

    target = _normalise_target(args.target)
    if target is None:
        return _fail(f"Target URL is invalid: {args.target}")

    depth = args.depth
    if depth is None:
        depth = config.depth if config.depth is not None else DEFAULT_DEPTH
    if depth < 0:
        return _fail("Depth must not be negative")
    if args.threads < 1:
        return _fail("Threads must be at least 1")

    headers = dict(config.headers)
    headers.update(parse_header_args(args.header))

    if args.insecure:
        log.warning("TLS certificate verification is DISABLED (--insecure)")

    verify_ssl = not args.insecure
    session = build_session(verify_ssl=verify_ssl, headers=headers, pool_size=args.threads)
    prober = NonOkProber(
        build_probe_session(verify_ssl=verify_ssl, headers=headers, pool_size=args.threads),
        excluded_urls=config.excluded_urls,
        excluded_status_codes=config.excluded_status_codes,
    )
    pipeline = ExtractionPipeline(extractors, prober)
    results = {category: ResultStore() for category in enabled_categories(config)}

    crawler = Crawler(
        start_url=target,
        session=session,
        pipeline=pipeline,
        results=results,
        max_depth=depth,
        concurrency=args.threads,
        rotate_user_agent="user-agent" not in {h.lower() for h in headers},
        show_progress=not args.debug,
    )

    output_dir = Path(args.output)
    previous = _install_signal_handlers(crawler)
    t0 = time.monotonic()
    try:
        crawler.run()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    crawled = crawler.visited.snapshot() if config.log_crawled_urls else None
    write_all_results(output_dir, crawler.snapshot(), crawled)
    log.info("Total elapsed time: %.1f s", time.monotonic() - t0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
