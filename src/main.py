"""
Command line entry point.

Reads a batch of games as JSON, in the shape of ExtractPositionsRequest:
    {"games": {"<game id>": {"pgn": "<notation text>", "headers": {"FEN": "..."}}}}
and writes the replayed positions (or the report listing) to stdout.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from src.api.models import ExtractPositionsRequest
from src.core.config import Settings, configure_logging
from src.core.exceptions import GameError
from src.db.database import SessionLocal, init_db
from src.db.sql_repository import SQLExtractionRepository
from src.services.extraction_service import PositionExtractionService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay chess games and list the FEN position after every move"
    )
    parser.add_argument("games", type=Path, help="JSON file with the games to replay")
    parser.add_argument(
        "--store",
        action="store_true",
        help="also store every result in the configured database",
    )
    parser.add_argument(
        "--report",
        metavar="PLAYER",
        help="print the position listing for the report generator instead of JSON",
    )
    parser.add_argument("--platform", default="lichess", help="used with --report")
    parser.add_argument("--log-level", help="overrides PGN_EXTRACTOR_LOG_LEVEL")
    return parser


def run(args: argparse.Namespace, service: PositionExtractionService) -> str:
    request = ExtractPositionsRequest.model_validate_json(
        args.games.read_text(encoding="utf-8")
    )
    if args.report:
        return service.report_input(request, args.report, args.platform)
    return service.extract_batch(request).model_dump_json(indent=2)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging((args.log_level or settings.log_level).upper())

    try:
        if args.store:
            init_db()
            with SessionLocal() as db:
                service = PositionExtractionService.from_settings(
                    settings, SQLExtractionRepository(db)
                )
                output = run(args, service)
        else:
            output = run(args, PositionExtractionService.from_settings(settings))
    except (GameError, ValidationError, OSError) as exc:
        logger.error("Cannot process %s: %s", args.games, exc)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
