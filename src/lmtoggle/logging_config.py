"""Log sink selection.

Every module logs through logging.getLogger(__name__); the sink is picked
once at process start. Exactly one handler is installed on the package
logger, replacing any handler a previous call installed.
"""
import logging
import logging.handlers
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# "lmtoggle" when installed, "src.lmtoggle" when run from a checkout.
PACKAGE_LOGGER = __name__.rsplit(".", 1)[0]


def _syslog_address():
    if os.path.exists("/dev/log"):
        return "/dev/log"
    if os.path.exists("/var/run/syslog"):
        return "/var/run/syslog"
    return ("localhost", logging.handlers.SYSLOG_UDP_PORT)


def build_handler(sink: str, log_file: Optional[str] = None) -> logging.Handler:
    """Create the handler for a sink name.

    Args:
        sink: console, file or syslog
        log_file: Path for the file sink

    Raises:
        ValueError: On an unknown sink or a file sink without a path
    """
    if sink == "console":
        return logging.StreamHandler()
    if sink == "file":
        if not log_file:
            raise ValueError("A log file path is required for the file sink")
        return logging.FileHandler(log_file, encoding="utf-8")
    if sink == "syslog":
        handler = logging.handlers.SysLogHandler(address=_syslog_address())
        handler.ident = "lmtoggle: "
        return handler
    raise ValueError(f"Unknown log sink: {sink!r}")


def configure_logging(
    sink: str = "console",
    log_file: Optional[str] = None,
    level: str | int = logging.INFO,
) -> logging.Logger:
    """Install a single handler on the package logger.

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    handler = build_handler(sink, log_file)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
