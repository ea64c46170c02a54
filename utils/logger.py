"""
Logger factory for the Accessy client.

Every component asks for its own named logger; level and log directory are
set once per process with `AccessyLogger.configure` (the CLI and the proxy
do this at startup) and apply to loggers created before and after the call.

The protocol modules log through plain module loggers (`protocols.*`);
`configure` attaches the same handlers to the `protocols` package logger so
their debug lines follow the client's level and outputs.

Line format:
    [2026-10-09 14:30:45] [accessy.EnrollmentService] [INFO] Device enrolled
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "accessy.log"

# Package loggers taken over by `configure`
PACKAGE_LOGGERS = ("protocols",)


def parse_level(level: Union[int, str]) -> int:
    """Accepts logging constants or names such as "debug" / "INFO"."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


class AccessyLogger:
    """
    Named, non-propagating loggers sharing one console stream and an
    optional log file.
    """

    _loggers = {}
    _level = logging.INFO
    _log_dir: Optional[Path] = None
    _console_output = True

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        """
        Get or create the logger for a component.

        Args:
            name: Component name (e.g. "EnrollmentService", "AccessyApiClient")

        Returns:
            Configured logger, cached by name
        """
        if name in AccessyLogger._loggers:
            return AccessyLogger._loggers[name]

        logger = logging.getLogger(f"accessy.{name}")
        logger.propagate = False
        AccessyLogger._install_handlers(logger)

        AccessyLogger._loggers[name] = logger
        return logger

    @staticmethod
    def configure(
        level: Union[int, str] = logging.INFO,
        log_dir: Optional[Union[str, Path]] = None,
        console_output: bool = True,
    ) -> None:
        """
        Set level and outputs for all client loggers and the `protocols`
        package logger.

        Args:
            level: Minimum level, as a logging constant or its name
            log_dir: Directory receiving accessy.log (None: no file)
            console_output: Also log to stdout

        Raises:
            ValueError: Unknown level name
        """
        AccessyLogger._level = parse_level(level)
        AccessyLogger._log_dir = Path(log_dir) if log_dir else None
        AccessyLogger._console_output = console_output

        for logger in AccessyLogger._loggers.values():
            AccessyLogger._install_handlers(logger)

        for package in PACKAGE_LOGGERS:
            package_logger = logging.getLogger(package)
            package_logger.propagate = False
            AccessyLogger._install_handlers(package_logger)

    @staticmethod
    def _install_handlers(logger: logging.Logger) -> None:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        logger.setLevel(AccessyLogger._level)
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

        if AccessyLogger._console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if AccessyLogger._log_dir is not None:
            AccessyLogger._log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(AccessyLogger._log_dir / LOG_FILE_NAME, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
