"""
Logging for PartyBid.

Everything logs under the "partybid" namespace, one child logger per
subsystem ("partybid.ledger", "partybid.market", "partybid.bidding",
"partybid.settlement"). Contributions, bids, status changes, fee payouts
and redemptions go out at INFO; refused operations at WARNING.

The console gets coloured output. A plain-text copy can additionally be
written to <log_dir>/partybid.log, e.g. for long simulated runs.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog

NAMESPACE = "partybid"
LOG_FILE = "partybid.log"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PLAIN_FORMAT = "%(asctime)s [%(name)s] %(levelname)-8s %(message)s"
COLOR_FORMAT = "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s"

LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def _console_handler(level: int) -> logging.Handler:
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        colorlog.ColoredFormatter(COLOR_FORMAT, datefmt=DATE_FORMAT, log_colors=LEVEL_COLORS)
    )
    return handler


def _file_handler(log_dir: Path, level: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / LOG_FILE)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT))
    return handler


class PartyBidLogger:
    """Configures the partybid logger tree once per process."""

    _initialized = False
    _log_dir: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
        force: bool = False,
    ):
        """
        Attach handlers to the "partybid" logger.

        Args:
            level: Threshold for the logger and its handlers
            log_dir: Where partybid.log goes (default ./logs)
            log_to_file: Also write plain-text records to a file
            force: Replace the handlers of an earlier setup
        """
        if cls._initialized and not force:
            return

        base = logging.getLogger(NAMESPACE)
        base.setLevel(level)
        base.handlers.clear()
        base.addHandler(_console_handler(level))

        cls._log_dir = None
        if log_to_file:
            cls._log_dir = Path(log_dir or "logs")
            base.addHandler(_file_handler(cls._log_dir, level))

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Child logger "partybid.<name>", configuring defaults on first use."""
        if not cls._initialized:
            cls.setup()
        return logging.getLogger(f"{NAMESPACE}.{name}")


def get_logger(name: str) -> logging.Logger:
    return PartyBidLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
):
    """Reconfigure logging, e.g. from the CLI's --debug flag."""
    PartyBidLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file, force=True)
