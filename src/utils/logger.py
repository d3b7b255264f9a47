"""
Structured Logging System for the URL Data Extractor
Provides rotating file logs with immediate flush for real-time monitoring
"""
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler


class ExtractorLogger:
    """Centralized logging with rotation and component tags"""

    def __init__(self, name="URL-Extractor", log_dir="logs", log_level="INFO",
                 max_mb=10, backup_count=5):
        """
        Initialize logger with rotating file handlers

        Args:
            name: Logger name
            log_dir: Directory for log files
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            max_mb: Size of the main log file before rotation
            backup_count: Rotated files to keep for the main log
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Clear any existing handlers
        self.logger.handlers.clear()

        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        log_format = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # 1. Main rotating file handler
        main_handler = RotatingFileHandler(
            log_path / 'url_extractor.log',
            maxBytes=max_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding='utf-8'
        )
        main_handler.setLevel(logging.DEBUG)
        main_handler.setFormatter(log_format)
        self.logger.addHandler(main_handler)

        # 2. Error-only log file (5MB per file, keep 3 files)
        error_handler = RotatingFileHandler(
            log_path / 'errors.log',
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(log_format)
        self.logger.addHandler(error_handler)

        # 3. Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(log_format)
        self.logger.addHandler(console_handler)

    def debug(self, message, component=""):
        """Log debug message"""
        self._log(logging.DEBUG, message, component)

    def info(self, message, component=""):
        """Log info message"""
        self._log(logging.INFO, message, component)

    def warning(self, message, component=""):
        """Log warning message"""
        self._log(logging.WARNING, message, component)

    def error(self, message, component="", exc_info=False):
        """Log error message"""
        self._log(logging.ERROR, message, component, exc_info=exc_info)

    def critical(self, message, component="", exc_info=False):
        """Log critical message"""
        self._log(logging.CRITICAL, message, component, exc_info=exc_info)

    def _log(self, level, message, component="", exc_info=False):
        """Internal logging method with component prefix"""
        if component:
            message = f"[{component}] {message}"

        self.logger.log(level, message, exc_info=exc_info)

        # Force immediate flush
        for handler in self.logger.handlers:
            handler.flush()

    def log_extraction(self, url, text_length):
        """Log a completed extraction call"""
        self.info(
            f"Extracted {text_length} chars from {url}",
            component="Extraction"
        )

    def log_record(self, field_count, source_url):
        """Log a parsed record"""
        self.debug(
            f"Parsed record with {field_count} fields for {source_url}",
            component="Parser"
        )

    def log_append(self, backend, next_row, wrote_header):
        """Log a dataset append"""
        header_note = " (header written)" if wrote_header else ""
        self.info(
            f"Appended record {next_row} via {backend}{header_note}",
            component="Export"
        )

    def log_error(self, operation, error_type, error_message):
        """Log error with context"""
        self.error(
            f"{operation} - {error_type}: {error_message}",
            component="Error"
        )


# Global logger instance
_global_logger = None

def get_logger(log_level=None):
    """Get or create global logger instance"""
    global _global_logger
    if _global_logger is None:
        import config
        _global_logger = ExtractorLogger(
            log_dir=config.LOG_DIR,
            log_level=log_level or config.LOG_LEVEL,
            max_mb=config.LOG_FILE_MAX_MB,
            backup_count=config.LOG_FILE_BACKUP_COUNT,
        )
    return _global_logger
