#!/usr/bin/env python3
"""
CodeSentinel - Main Entry Point

Multi-agent AI code review: a general and a security agent analyze the code,
and a validator re-checks their findings when confidence is low.

Usage:
    codesentinel review path/to/file.py
    codesentinel folder path/to/project --yes
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import ReviewConfig
from .pipeline import FolderReviewer, review_code
from .tools import ClaudeEngine, language_from_extension
from .utils import setup_logging, get_logger


def build_config(args) -> ReviewConfig:
    """Environment config overridden by CLI flags."""
    config = ReviewConfig.from_env()

    if args.threshold is not None:
        config.confidence_threshold = max(0, min(100, args.threshold))
    if args.no_validator:
        config.validator_agent_enabled = False
    if args.no_security:
        config.security_agent_enabled = False
    if args.max_parallel is not None:
        config.max_parallel_files = max(1, args.max_parallel)

    return config


def write_output(data: dict, output: Optional[str] = None) -> None:
    text = json.dumps(data, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        get_logger().info(f"Report written to {output}")
    else:
        print(text)


def large_folder_prompt(assume_yes: bool = False):
    """Async confirmation callback; the blocking prompt runs off the event loop."""

    async def confirm(count: int) -> bool:
        if assume_yes:
            return True
        reply = await asyncio.to_thread(
            input, f"Found {count} files. This may take a while. Continue? [y/N] "
        )
        return reply.strip().lower() in ("y", "yes")

    return confirm


def cmd_review(args):
    """Handle 'review' subcommand."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = get_logger()

    path = Path(args.file)
    try:
        code = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Cannot read {path}: {e}")
        sys.exit(1)

    config = build_config(args)
    language = args.language or language_from_extension(str(path))
    engine = ClaudeEngine(model=config.model, max_tokens=config.max_tokens)

    try:
        report = asyncio.run(review_code(code, language, engine, config))
    except Exception as e:
        logger.exception(f"Review failed: {e}")
        sys.exit(1)

    write_output(report.to_dict(), args.output)
    sys.exit(0)


def cmd_folder(args):
    """Handle 'folder' subcommand."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = get_logger()

    config = build_config(args)
    engine = ClaudeEngine(model=config.model, max_tokens=config.max_tokens)
    reviewer = FolderReviewer(engine, config)

    def progress(index: int, total: int, relative: str) -> None:
        logger.info(f"[{index}/{total}] {relative}")

    try:
        report = asyncio.run(reviewer.review(
            args.folder,
            on_progress=progress,
            confirm_large_folder=large_folder_prompt(args.yes),
        ))
    except KeyboardInterrupt:
        logger.info("Folder review cancelled by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Folder review failed: {e}")
        sys.exit(1)

    if report is None:
        logger.warning("No report produced")
        sys.exit(0)

    write_output(report.to_dict(), args.output)
    sys.exit(0)


def _add_common_arguments(parser):
    parser.add_argument(
        "--threshold",
        type=int,
        help="Confidence threshold for self-correction (0-100, default: 80)"
    )
    parser.add_argument(
        "--no-validator",
        action="store_true",
        help="Disable the self-correction validator"
    )
    parser.add_argument(
        "--no-security",
        action="store_true",
        help="Disable the security agent"
    )
    parser.add_argument(
        "--max-parallel",
        type=int,
        help="Files reviewed at once in folder mode (default: 1)"
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Write the JSON report to this path instead of stdout"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="CodeSentinel multi-agent AI code review"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # review command
    review_parser = subparsers.add_parser("review", help="Review a single file")
    review_parser.add_argument("file", help="File to review")
    review_parser.add_argument(
        "--language",
        type=str,
        help="Language id (default: inferred from the extension)"
    )
    _add_common_arguments(review_parser)

    # folder command
    folder_parser = subparsers.add_parser("folder", help="Review every code file in a folder")
    folder_parser.add_argument("folder", help="Folder to review")
    folder_parser.add_argument(
        "--yes",
        action="store_true",
        help="Don't ask for confirmation on large folders"
    )
    _add_common_arguments(folder_parser)

    args = parser.parse_args()

    # Route to subcommand
    if args.command == "review":
        cmd_review(args)
    elif args.command == "folder":
        cmd_folder(args)
    else:
        # No subcommand - show help
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
