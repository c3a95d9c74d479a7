import argparse
import logging
import sys
from typing import List, Optional
import structlog

from config import Settings, get_settings
from csv_io import load_records, write_snapshots
from errors import PaymentsError
from services import get_transaction_processor

logger = structlog.get_logger()


def configure_logging(settings: Settings) -> None:
    """Configure structured logging on stderr so stdout only carries snapshots."""
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(stream=sys.stderr, format="%(message)s", level=level, force=True)

    renderer = (
        structlog.dev.ConsoleRenderer(colors=False)
        if settings.log_format == "text"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=settings.app_name,
        description="Replay a CSV of transactions and print the final account balances as CSV"
    )
    parser.add_argument("path", help="CSV file with type, client, tx, amount columns")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    args = build_parser(settings).parse_args(argv)
    configure_logging(settings)

    try:
        records = load_records(args.path)

        processor = get_transaction_processor()
        processor.process_records(records)

        write_snapshots(processor.snapshots(), sys.stdout)
    except PaymentsError as e:
        logger.error(
            "Transaction replay failed",
            error=str(e),
            error_type=type(e).__name__,
            path=args.path
        )
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
