"""
Console logging for the kes command.
"""

import logging
import sys


class Colors:
    """ANSI color codes for terminal output"""
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    BOLD = '\033[1m'
    END = '\033[0m'


LEVEL_COLORS = {
    logging.DEBUG: Colors.BLUE,
    logging.INFO: Colors.CYAN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.RED + Colors.BOLD,
}


class ColorFormatter(logging.Formatter):
    """Prefixes each record with its colored level name"""

    def __init__(self, use_color: bool = True):
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not self.use_color:
            return f"{record.levelname.lower()}: {message}"
        color = LEVEL_COLORS.get(record.levelno, '')
        return f"{color}{record.levelname.lower()}{Colors.END}: {message}"


def setup_logging(verbose: bool = False, stream=None) -> logging.Logger:
    """Attach a single console handler to the `kes` logger"""
    stream = stream or sys.stderr
    logger = logging.getLogger("kes")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColorFormatter(use_color=hasattr(stream, "isatty") and stream.isatty()))

    # replace handlers left over from a previous call
    logger.handlers = []
    logger.addHandler(handler)
    logger.propagate = False

    for noisy in ("boto3", "botocore", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger
