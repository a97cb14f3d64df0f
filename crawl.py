#!/usr/bin/env python3
import argparse
import logging
import sys
from typing import List, Optional

from crawlpool.config import CrawlConfig, DEFAULT_USER_AGENT
from crawlpool.engine import Crawler
from crawlpool.errors import ConfigurationError
from crawlpool.prometheus_exporter import PrometheusExporter
from crawlpool.storage import JsonlWriter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bounded, deduplicated, multi-threaded crawl from a single seed URL.")
    parser.add_argument("--seed", required=True, help="Seed URL to start crawling from.")
    parser.add_argument("--max-depth", type=int, default=2, help="Maximum link depth from the seed (0 = seed only).")
    parser.add_argument("--max-pages", type=int, default=50, help="Hard cap on successfully crawled pages.")
    parser.add_argument("--timeout-ms", type=int, default=5000, help="Per-fetch timeout in milliseconds.")
    parser.add_argument("--follow-external", action="store_true", help="Follow links to other domains.")
    parser.add_argument(
        "--start-domain",
        default="",
        help="Domain to stay within when not following external links. Defaults to the seed's host.",
    )
    parser.add_argument("--concurrency", type=int, default=4, help="Number of worker threads.")
    parser.add_argument("--max-run-seconds", type=float, default=None, help="Wall-clock ceiling for the whole crawl.")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header to send.")
    parser.add_argument("--out", dest="output_path", default="crawl.jsonl", help="Path to JSONL output file.")
    parser.add_argument("--metrics-interval", type=float, default=10.0, help="Seconds between perf logs (0 to disable).")
    parser.add_argument("--prometheus-port", type=int, default=0, help="Port for Prometheus metrics (0 to disable).")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging verbosity.")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> CrawlConfig:
    return CrawlConfig(
        max_depth=args.max_depth,
        max_pages=args.max_pages,
        timeout_ms=args.timeout_ms,
        follow_external_links=args.follow_external,
        start_domain=args.start_domain,
        concurrency=args.concurrency,
        max_run_seconds=args.max_run_seconds,
        user_agent=args.user_agent,
        metrics_interval=args.metrics_interval,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
    )

    try:
        config = build_config(args)
        crawler = Crawler(config)
    except ConfigurationError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2

    exporter = None
    if args.prometheus_port:
        exporter = PrometheusExporter(crawler.metrics, port=args.prometheus_port)
        exporter.start()
        logging.info("Prometheus metrics available at http://0.0.0.0:%d/metrics", args.prometheus_port)

    try:
        result = crawler.crawl(args.seed)
    except ConfigurationError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2
    finally:
        if exporter:
            exporter.stop()
        crawler.close()

    with JsonlWriter(args.output_path) as writer:
        writer.write_result(result)
    print(f"{result} -> {args.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
