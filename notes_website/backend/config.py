import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from .models import ServerConfig

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PACKAGE_LOGGER = "notes_website"


def build_parser() -> argparse.ArgumentParser:
    # -h is the host option, so help is only reachable as --help
    parser = argparse.ArgumentParser(
        prog="notes-website",
        description="Serve a directory of text notes over HTTP",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="show this help message and exit")
    parser.add_argument("-h", "--host", required=True, help="server host")
    parser.add_argument("-p", "--port", required=True, type=int, help="server port")
    parser.add_argument("-c", "--cache", required=True, help="cache directory path")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    return parser


def parse_config(argv: Optional[List[str]] = None) -> ServerConfig:
    """Parse command-line arguments into a validated ServerConfig.

    Exits through argparse with status 2 on missing or invalid options.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return ServerConfig(
            host=args.host,
            port=args.port,
            cache_dir=args.cache,
            log_level=args.log_level,
        )
    except ValidationError as e:
        parser.error(str(e))


def configure_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
