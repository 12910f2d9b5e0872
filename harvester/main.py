#!/usr/bin/env python3
"""
URL Harvester - Collect tracking URLs from unread Gmail notifications
"""

import os
import sys
import asyncio
import argparse
import logging
from typing import Dict, List, Optional

from googleapiclient.errors import HttpError
from rich.console import Console

from harvester.authorizer import Authorizer
from harvester.config import load_config
from harvester.errors import UrlNotFoundError
from harvester.message_harvester import MessageHarvester


logger = logging.getLogger(__name__)

console = Console()


def configure_logging(level: Optional[str] = None) -> None:
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def prompt_for_code(question: str) -> str:
    """Ask the user for the one-time authorization code"""
    return console.input(question)


async def print_progress(event: str, data: Dict) -> None:
    """Echo harvester progress to the console"""
    if event == "harvest_started":
        console.print(f"[cyan]Searching for messages matching[/cyan] {data['query']}")
    elif event == "page_marked_read":
        console.print(f"[green]Marked {data['message_count']} messages as read[/green] (page {data['page']})")
    elif event == "harvest_completed":
        console.print(f"[bold green]Wrote {data['url_count']} urls to {data['output_path']}[/bold green]")


async def run(service, harvest_config) -> bool:
    """Harvest once, logging any failure. Returns True on success."""
    harvester = MessageHarvester(service, harvest_config, print_progress)

    try:
        await harvester.harvest()
        return True
    except HttpError as error:
        logger.error(f"Gmail API error: {error}")
    except UrlNotFoundError as error:
        logger.error(str(error))
    except Exception as error:
        logger.exception(f"Harvest failed: {error}")

    return False


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Collect tracking URLs from unread Gmail messages')

    parser.add_argument('--credentials', help='OAuth client secrets file (default: credentials.json)')
    parser.add_argument('--token', help='Stored token file (default: token.json)')
    parser.add_argument('--output', help='Output file for the URL list (default: urls.js)')
    parser.add_argument('--query', help='Gmail search query for unread notifications')
    parser.add_argument('--log-level', help='Logging level (default: $LOG_LEVEL or INFO)')

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    auth_config, harvest_config = load_config(
        credentials_path=args.credentials,
        token_path=args.token,
        output_path=args.output,
        query=args.query
    )
    configure_logging(args.log_level)

    authorizer = Authorizer(auth_config, prompt_for_code, show_message=console.print)
    service = authorizer.authorize()
    if service is None:
        return 1

    success = asyncio.run(run(service, harvest_config))
    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())
