#!/usr/bin/env python3
"""
pr-autoupdate - Main Entry Point

Keeps pull request branches up to date with their base branch by merging
the base branch into them whenever it moves.

Usage:
    python -m pr_autoupdate.main run

Or via GitHub Actions (see ``pr-autoupdate init``). The triggering event is
read from GITHUB_EVENT_NAME / GITHUB_EVENT_PATH and settings from the
environment (GITHUB_TOKEN, PR_FILTER, PR_LABELS, ...).
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config import UpdaterConfig
from .errors import AutoUpdateError, ConfigError
from .orchestrator import UpdateOrchestrator
from .router import EventRouter, load_event
from .tools import ActionOutput
from .utils import get_logger, setup_logging


async def run_autoupdate(
    config: UpdaterConfig,
    event_name: str,
    event: Dict[str, Any],
    orchestrator: Optional[UpdateOrchestrator] = None
) -> dict:
    """
    Route one event and update the affected pull request branches.

    Args:
        config: Run configuration
        event_name: GitHub event name (push, pull_request, schedule, ...)
        event: Event payload
        orchestrator: Pre-built orchestrator, mainly for tests

    Returns:
        Dictionary with run statistics
    """
    logger = get_logger()

    if orchestrator is None:
        output = ActionOutput(config.output_path)
        orchestrator = UpdateOrchestrator(config, set_output=output.set_output)

    if config.dry_run:
        logger.warning("DRY_RUN is enabled, no branches will be changed.")

    result = await EventRouter(orchestrator, config, event).route(event_name)

    if isinstance(result, bool):
        updated = 1 if result else 0
    else:
        updated = result

    stats = {
        "event": event_name,
        "updated": updated,
        "failed": orchestrator.failed,
        "failures": [str(e) for e in orchestrator.failures],
    }
    return stats


def cmd_init(args):
    """Handle 'init' subcommand."""
    from .cli import init_repository

    target = Path(args.path) if args.path else Path.cwd()
    success = init_repository(target)
    sys.exit(0 if success else 1)


def cmd_run(args):
    """Handle 'run' subcommand."""
    debug = args.debug or os.environ.get("RUNNER_DEBUG") == "1"
    setup_logging(level=logging.DEBUG if debug else logging.INFO)
    logger = get_logger()

    # Build config
    try:
        config = UpdaterConfig.from_env()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    overrides = {}
    if args.dry_run:
        overrides["dry_run"] = True
    if args.graphql:
        overrides["use_graphql"] = True
    if overrides:
        config = dataclasses.replace(config, **overrides)

    event_name = args.event_name or os.environ.get("GITHUB_EVENT_NAME", "")
    event_path = args.event_path or os.environ.get("GITHUB_EVENT_PATH", "")

    # Validate
    if not event_name:
        logger.error("Event name required. Use --event-name or set GITHUB_EVENT_NAME env var")
        sys.exit(1)

    event: Dict[str, Any] = {}
    if event_path:
        try:
            event = load_event(event_path)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read event payload from {event_path}: {e}")
            sys.exit(1)
    elif event_name != "schedule":
        logger.error("Event payload required. Use --event-path or set GITHUB_EVENT_PATH env var")
        sys.exit(1)

    # Run
    try:
        stats = asyncio.run(run_autoupdate(config, event_name, event))
    except AutoUpdateError as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Auto update failed: {e}")
        sys.exit(1)

    logger.info(f"Run stats: {stats}")
    if stats["failed"]:
        logger.error(f"{len(stats['failures'])} branch update(s) failed.")
        sys.exit(1)
    sys.exit(0)


def main():
    """Main entry point with subcommands."""
    parser = argparse.ArgumentParser(
        description="Keep pull request branches up to date with their base branch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  run        Update PR branches for the current GitHub Actions event
  init       Add the auto update workflow to a repository

Examples:
  pr-autoupdate run
  pr-autoupdate run --event-name push --event-path event.json --dry-run
  pr-autoupdate init
"""
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Update PR branches for the current event"
    )
    run_parser.add_argument(
        "--event-name",
        type=str,
        help="Event name (default: GITHUB_EVENT_NAME env var)"
    )
    run_parser.add_argument(
        "--event-path",
        type=str,
        help="Path to the event payload JSON (default: GITHUB_EVENT_PATH env var)"
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log what would be updated without merging anything"
    )
    run_parser.add_argument(
        "--graphql",
        action="store_true",
        help="List pull requests with the GraphQL API"
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Add the auto update workflow to a repository"
    )
    init_parser.add_argument(
        "--path",
        type=str,
        help="Target directory (default: current directory)"
    )

    args = parser.parse_args()

    # Route to subcommand
    if args.command == "run":
        cmd_run(args)
    elif args.command == "init":
        cmd_init(args)
    else:
        # No subcommand - show help
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
