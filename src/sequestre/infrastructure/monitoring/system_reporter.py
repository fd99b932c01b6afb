"""
System Reporter - logging for escrow flows.

One reporter per CLI invocation, injected into every use case. Lines go
to stdout and, when a log directory is configured, are appended to
<log_dir>/<name>.log.
"""

import logging
import os
import sys
from typing import Optional

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SystemReporter:
    """
    Context-tagged logger with a verbosity filter.

    Each call carries the verbosity it needs to be shown at:
        0 = errors, always shown
        1 = flow progress (default)
        2 = extra detail
        3 = debug
    """

    def __init__(
        self,
        name: str = "sequestre",
        log_dir: Optional[str] = None,
        level: int = logging.INFO,
        verbose: int = 1,
    ) -> None:
        """
        Initialize SystemReporter.

        Args:
            name: Logger name, also the log file name
            log_dir: Directory for the log file (stdout only if None)
            level: Python logging level
            verbose: Verbosity filter (0-3)
        """
        self.name = name
        self.verbose = self._clamp(verbose)
        self.logger = self._build_logger(name, log_dir, level)

    @classmethod
    def from_config(cls, config, verbose: int = 1) -> "SystemReporter":
        """Create reporter from SequestreConfig log_level / log_dir."""
        return cls(
            log_dir=config.log_dir,
            level=LOG_LEVELS[config.log_level],
            verbose=verbose,
        )

    @staticmethod
    def _build_logger(
        name: str, log_dir: Optional[str], level: int
    ) -> logging.Logger:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = False

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        handlers = [logging.StreamHandler(sys.stdout)]

        if log_dir:
            log_dir = os.path.abspath(os.path.expanduser(log_dir))
            os.makedirs(log_dir, exist_ok=True)
            handlers.append(
                logging.FileHandler(
                    os.path.join(log_dir, f"{name}.log"), encoding="utf-8"
                )
            )

        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    @staticmethod
    def _clamp(verbose: int) -> int:
        return max(0, min(3, verbose))

    def set_verbose(self, level: int) -> None:
        """Change the verbosity filter."""
        self.verbose = self._clamp(level)
        self.info(
            f"Verbosity set to {self.verbose}",
            context="SystemReporter",
            verbose_level=0,
        )

    def _emit(self, level: int, msg: str, context: str, verbose_level: int) -> None:
        if self.verbose >= verbose_level:
            self.logger.log(level, f"[{context}] {msg}")

    def debug(self, msg: str, context: str = "system", verbose_level: int = 3) -> None:
        """Log debug message."""
        self._emit(logging.DEBUG, msg, context, verbose_level)

    def info(self, msg: str, context: str = "system", verbose_level: int = 1) -> None:
        """Log info message."""
        self._emit(logging.INFO, msg, context, verbose_level)

    def warning(
        self, msg: str, context: str = "system", verbose_level: int = 1
    ) -> None:
        """Log warning message."""
        self._emit(logging.WARNING, msg, context, verbose_level)

    def error(self, msg: str, context: str = "system", verbose_level: int = 0) -> None:
        """Log error message."""
        self._emit(logging.ERROR, msg, context, verbose_level)

    def critical(
        self, msg: str, context: str = "system", verbose_level: int = 0
    ) -> None:
        """Log critical message."""
        self._emit(logging.CRITICAL, msg, context, verbose_level)
