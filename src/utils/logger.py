"""
Structured Logging System for Worklog Sheet Sync
Provides rotating file logs with immediate flush for real-time monitoring
"""
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler


class WorklogLogger:
    """Centralized logging with rotation and formatting"""

    def __init__(self, name="Worklog-Sync", log_dir="logs", log_level="INFO",
                 max_mb=10, backup_count=5):
        """
        Initialize logger with rotating file handlers

        Args:
            name: Logger name
            log_dir: Directory for log files
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            max_mb: Size of the main log file before it rotates
            backup_count: Rotated main log files to keep
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        self.logger.handlers.clear()

        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        log_format = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # 1. Main rotating file handler
        main_handler = RotatingFileHandler(
            log_path / 'worklog_sync.log',
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

    def log_correction(self, field, original, corrected, confidence, kind):
        """Log one name/product correction with a confidence band"""
        if confidence >= 0.9:
            band = "HIGH"
        elif confidence >= 0.5:
            band = "MEDIUM"
        else:
            band = "LOW"
        self.info(
            f"{field}: '{original}' -> '{corrected}' ({kind}, {round(confidence * 100)}% {band})",
            component="Corrector"
        )

    def log_row_write(self, sheet_name, row_index, mode, ranges):
        """Log a row upsert into a personal sheet"""
        self.info(
            f"{sheet_name} - {mode} row {row_index} via {', '.join(ranges)}",
            component="Reconciler"
        )

    def log_batch_summary(self, work_date, total, written, failed_workers):
        """Log the outcome of one submission"""
        message = f"Work date {work_date} - {written}/{total} worker(s) written"
        if failed_workers:
            message += f", missing sheets for: {', '.join(failed_workers)}"
        self.info(message, component="Batch")


# Global logger instance
_global_logger = None

def get_logger(log_level=None):
    """Get or create global logger instance"""
    global _global_logger
    if _global_logger is None:
        import config
        _global_logger = WorklogLogger(
            log_dir=config.LOG_DIR,
            log_level=log_level or config.LOG_LEVEL,
            max_mb=config.LOG_FILE_MAX_MB,
            backup_count=config.LOG_FILE_BACKUP_COUNT,
        )
    return _global_logger
