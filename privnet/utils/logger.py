"""
Centralized logging configuration for privnet.

All subsystems (chain, storage, checkpoint, guard, rpc, cli) log under the
`privnet` logger tree to a colored stderr handler, leaving stdout to CLI
output.
"""

import logging
import sys

import colorlog

LOG_FORMAT = "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class PrivnetLogger:
    """Owner of the `privnet` logger tree"""

    _initialized = False

    @classmethod
    def setup(cls, level: int = logging.INFO):
        """
        Configure the `privnet` logger tree.

        Module-level loggers trigger a default setup at import, so later
        calls (e.g. the CLI's --debug) only change the level.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        root_logger = logging.getLogger("privnet")
        root_logger.setLevel(level)

        if cls._initialized:
            for handler in root_logger.handlers:
                handler.setLevel(level)
            return

        root_logger.handlers.clear()
        handler = colorlog.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            colorlog.ColoredFormatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", log_colors=LOG_COLORS)
        )
        root_logger.addHandler(handler)

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Logger for subsystem `name`, e.g. 'checkpoint' -> privnet.checkpoint"""
        if not cls._initialized:
            cls.setup()

        return logging.getLogger(f"privnet.{name}")


def get_logger(name: str) -> logging.Logger:
    return PrivnetLogger.get_logger(name)


def setup_logging(level: int = logging.INFO):
    PrivnetLogger.setup(level=level)
