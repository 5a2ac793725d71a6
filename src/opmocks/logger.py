"""Logging for opmocks with CLI output helpers."""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


class OpMocksLogger(logging.Logger):
    """
    Logger that combines Python logging with rich console output.

    Standard levels (debug, info, warning, error) go through a RichHandler.
    The extra methods write directly to the console and are meant for
    user-facing CLI output.
    """

    def __init__(self, name: str, level: int = logging.INFO) -> None:
        super().__init__(name, level)
        self.console = Console(stderr=True)

        handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.addHandler(handler)

    def print(self, message: str) -> None:
        """
        Print a plain message (with Rich markup support).

        Args:
            message: Message to display
        """
        self.console.print(message)

    def success(self, message: str) -> None:
        """
        Print a success message in green with a checkmark icon.

        Args:
            message: Message to display
        """
        self.print(f"[green]✓[/green] {message}")

    def hint(self, message: str) -> None:
        """Print a dimmed secondary message."""
        self.print(f"[dim]{message}[/dim]")

    def key_value(self, key: str, value: Any, key_style: str = "dim") -> None:
        """
        Print a formatted key-value pair.

        Args:
            key: The key/label to display
            value: The value to display
            key_style: Style for the key (default: "dim")
        """
        self.print(f"[{key_style}]{key}:[/{key_style}] {value}")


def get_logger(name: str = "opmocks") -> OpMocksLogger:
    """
    Get or create an opmocks logger instance.

    Args:
        name: Logger name (default: "opmocks")

    Returns:
        OpMocksLogger instance
    """
    previous = logging.getLoggerClass()
    logging.setLoggerClass(OpMocksLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous)

    return logger  # type: ignore[return-value]
