"""
Colored logging formatter for the module scaffolder.

Generation runs print a short narrative (sections, progress, written files,
warnings); this module colors it when the output is an interactive terminal.
"""

import logging
import sys
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """
    Logging formatter that adds ANSI color codes to log messages.

    Levels get their own colors; INFO and DEBUG messages carrying one of the
    helper markers below get the marker's color instead.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    SPECIAL_COLORS = {
        'success': '\033[92m',    # Bright Green
        'progress': '\033[94m',   # Bright Blue
        'highlight': '\033[96m',  # Bright Cyan
    }

    SUCCESS_MARKER = '✓'
    PROGRESS_MARKER = '→'
    HIGHLIGHT_MARKER = '•'

    RESET = '\033[0m'
    BOLD = '\033[1m'

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        """
        Initialize the colored formatter.

        Args:
            fmt: Log format string (uses default if None)
            use_colors: Whether to use colors (disabled anyway when stderr is not a TTY)
        """
        if fmt is None:
            fmt = "%(levelname)s: %(message)s"
        super().__init__(fmt)

        self.use_colors = use_colors and hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        formatted_message = super().format(record)
        if not self.use_colors:
            return formatted_message

        message = record.getMessage()

        if record.levelname in ('ERROR', 'CRITICAL', 'WARNING'):
            level_color = self.COLORS.get(record.levelname, '')
            return f"{level_color}{formatted_message}{self.RESET}"

        if self._is_success_message(message):
            return f"{self.SPECIAL_COLORS['success']}{self.BOLD}{formatted_message}{self.RESET}"
        if self._is_progress_message(message):
            return f"{self.SPECIAL_COLORS['progress']}{formatted_message}{self.RESET}"
        if self._is_highlight_message(message):
            return f"{self.SPECIAL_COLORS['highlight']}{formatted_message}{self.RESET}"
        if self._is_section_message(message):
            return f"{self.BOLD}{self.SPECIAL_COLORS['highlight']}{formatted_message}{self.RESET}"
        if record.levelname == 'DEBUG':
            return f"{self.COLORS['DEBUG']}{formatted_message}{self.RESET}"
        # Plain INFO stays uncolored
        return formatted_message

    def _is_success_message(self, message: str) -> bool:
        return message.startswith(self.SUCCESS_MARKER)

    def _is_progress_message(self, message: str) -> bool:
        return message.startswith(self.PROGRESS_MARKER)

    def _is_highlight_message(self, message: str) -> bool:
        return message.startswith(self.HIGHLIGHT_MARKER)

    def _is_section_message(self, message: str) -> bool:
        """Check if message is a section header."""
        return '=' in message and len(message.strip()) > 20


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True) -> None:
    """
    Set up colored logging on the root logger.

    Args:
        level: Logging level (default: INFO)
        use_colors: Whether to use colors (default: True)
    """
    formatter = ColoredFormatter(use_colors=use_colors)

    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)


def get_colored_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_success(logger: logging.Logger, message: str) -> None:
    """Log a success message with special formatting."""
    logger.info(f"{ColoredFormatter.SUCCESS_MARKER} {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    """Log a progress message with special formatting."""
    logger.info(f"{ColoredFormatter.PROGRESS_MARKER} {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    """Log a highlighted message with special formatting."""
    logger.info(f"{ColoredFormatter.HIGHLIGHT_MARKER} {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header with special formatting."""
    separator = "=" * 60
    logger.info(f"\n{separator}")
    logger.info(f"  {section_name.upper()}")
    logger.info(f"{separator}")
