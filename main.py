#!/usr/bin/env python
"""CLI for the newswatch ingestion pipeline."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Literal, get_args

from pydantic import BaseModel, ValidationError, field_validator

from newswatch.config import NewswatchConfig, create_store, get_default_config_path, load_config
from newswatch.runner import run_daily_crawl
from newswatch.store import NewsStore

logger = logging.getLogger(__name__)

Command = Literal[
    "crawl",
    "list",
    "remove-sample",
    "remove-unverified",
    "clear-all",
    "last-crawled",
]


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    command: Command
    config: Path
    force_all: bool = False
    log: bool = False
    limit: int = 20

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


async def crawl(config: NewswatchConfig, args: CLIArgs) -> None:
    """Run one crawl and print its result as JSON."""
    result = await run_daily_crawl(
        config,
        force_all=args.force_all,
        log_override=args.log if args.log else None,
    )
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))


def list_news(store: NewsStore, limit: int) -> None:
    load = store.load_news()
    logger.info(f"{len(load.items)} items (source: {load.source})")
    last = store.get_last_crawled()
    if last:
        logger.info(f"Last crawled: {last}")
    for i, item in enumerate(load.items[:limit], 1):
        logger.info(f"{i}. [{item.category}/{item.impact}] {item.title}")
        logger.info(f"   {item.source} {item.date}  {item.url}")


def run(args: CLIArgs) -> None:
    """Dispatch the validated command."""
    config = load_config(args.config)

    if args.command == "crawl":
        asyncio.run(crawl(config, args))
        return

    store = create_store(config.store)
    if args.command == "list":
        list_news(store, args.limit)
    elif args.command == "last-crawled":
        print(store.get_last_crawled() or "never")
    elif args.command == "remove-sample":
        logger.info(f"Removed {store.remove_sample_data()} sample items")
    elif args.command == "remove-unverified":
        logger.info(f"Removed {store.remove_unverified_news()} unverified items")
    elif args.command == "clear-all":
        logger.info(f"Removed all {store.clear_all_news()} items")


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Grounded news ingestion for a monitored industry."
    )
    parser.add_argument(
        "command",
        choices=list(get_args(Command)),
        help="Action to perform",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: bundled default.yaml)",
    )
    parser.add_argument(
        "--all",
        dest="force_all",
        action="store_true",
        default=False,
        help="Crawl every query group regardless of today's schedule",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Write a JSON run log for the crawl",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of items shown by 'list' (default: 20)",
    )

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            command=ns.command,
            config=config_path,
            force_all=ns.force_all,
            log=ns.log,
            limit=ns.limit,
        )
    except ValidationError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        run(args)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
