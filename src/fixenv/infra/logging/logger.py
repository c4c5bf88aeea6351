from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from dependency_injector.resources import Resource

from .handlers import build_json_file_handler, build_human_console_handler


LOG_FILE_NAME = "fixenv.jsonl"


class AppLogger(Resource):
    """Structured logger shared by the service, the use cases and the adapters.

    Keyword arguments passed to the logging methods become top-level fields
    of the JSON record.
    """

    def init(
        self,
        *,
        logs_dir: Path,
        logger_name: str = "fixenv",
        file_output: bool = True,
        console_output: bool = False,
        level: str = "INFO",
    ) -> "AppLogger":
        """Attach handlers and return self for the dependency_injector Resource pattern.

        Args:
            logs_dir: Directory for the JSONL log file
            logger_name: Logger name
            file_output: Whether to write ``fixenv.jsonl`` under logs_dir
            console_output: Whether to also log to stderr
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False

        self._logger.handlers.clear()
        self._handlers = []

        if file_output:
            file_handler = build_json_file_handler(logs_dir / LOG_FILE_NAME, level=numeric_level)
            self._logger.addHandler(file_handler)
            self._handlers.append(file_handler)

        if console_output:
            console_handler = build_human_console_handler(level=numeric_level)
            self._logger.addHandler(console_handler)
            self._handlers.append(console_handler)

        return self

    def shutdown(self, resource: "AppLogger") -> None:
        """Flush and close all handlers so file descriptors are released."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message, extra=kwargs or None)

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message, extra=kwargs or None)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message, extra=kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._logger.error(message, extra=kwargs or None, exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        self._logger.exception(message, extra=kwargs or None)
