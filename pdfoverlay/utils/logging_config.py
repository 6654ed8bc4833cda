"""
Centralized logging configuration.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "pdfoverlay.log"


class LoggingConfig:
    """Central logging configuration"""

    _initialized = False
    _log_file_path: Optional[Path] = None

    @classmethod
    def setup_logging(cls, log_dir: Optional[Path] = None, level: str = "INFO") -> None:
        """
        Set up root logging once per process.

        Args:
            log_dir: Directory for the log file, or None for console only
            level: Console level name
        """
        if cls._initialized:
            return

        logger = logging.getLogger()
        logger.setLevel(logging.DEBUG)

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            cls._log_file_path = log_dir / LOG_FILE_NAME

            file_handler = logging.FileHandler(cls._log_file_path, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

        # Console handler (for terminal output)
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
        console_handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))
        logger.addHandler(console_handler)

        cls._initialized = True
        logging.getLogger(__name__).debug("Logging system initialized")
