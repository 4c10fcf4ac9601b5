"""
Structured logging for dupcheck.

Provides centralized logging with console and file outputs plus counters
for monitoring how the duplicate check behaves in production (how often
drafts are too short to score, how many candidates get skipped, how many
matches are surfaced to authors).
"""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for the matching engine and candidate-pool sources.
    """

    def __init__(
        self,
        name: str = "dupcheck",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.metrics = self._empty_metrics()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_handler.setFormatter(logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"dupcheck_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(file_handler)

    @staticmethod
    def _empty_metrics() -> dict:
        return {
            "rank_calls": 0,
            "insufficient_signal": 0,
            "candidates_scored": 0,
            "candidates_skipped": 0,
            "matches_returned": 0,
            "pool_fetches": 0,
            "pool_fetch_failures": 0,
            "errors_by_type": {},
        }

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str, ensure_ascii=False)}"
        self.logger.log(level, message)

    # Metric tracking

    def record_rank(self, scored: int, skipped: int, returned: int):
        """Record one completed ranking pass."""
        self.metrics["rank_calls"] += 1
        self.metrics["candidates_scored"] += scored
        self.metrics["candidates_skipped"] += skipped
        self.metrics["matches_returned"] += returned

    def record_insufficient_signal(self):
        """Record a draft title too short or too vague to score."""
        self.metrics["rank_calls"] += 1
        self.metrics["insufficient_signal"] += 1

    def record_pool_fetch(self):
        self.metrics["pool_fetches"] += 1

    def record_pool_failure(self, error_type: str):
        self.metrics["pool_fetch_failures"] += 1
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return current metrics with derived averages."""
        metrics_copy = dict(self.metrics)
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        scored_calls = metrics_copy["rank_calls"] - metrics_copy["insufficient_signal"]
        metrics_copy["average_matches"] = (
            round(metrics_copy["matches_returned"] / scored_calls, 3) if scored_calls > 0 else 0.0
        )
        return metrics_copy

    def log_metrics_summary(self):
        metrics = self.get_metrics()

        self.info("=== Duplicate Check Metrics ===")
        self.info(f"Rank calls: {metrics['rank_calls']} ({metrics['insufficient_signal']} too short)")
        self.info(
            f"Candidates: {metrics['candidates_scored']} scored, {metrics['candidates_skipped']} skipped"
        )
        self.info(f"Matches returned: {metrics['matches_returned']} (avg {metrics['average_matches']})")

        if metrics["pool_fetches"]:
            self.info(f"Pool fetches: {metrics['pool_fetches']} ({metrics['pool_fetch_failures']} failed)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "dupcheck",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Level defaults to DUPCHECK_LOG_LEVEL (or INFO). File output is only
    enabled by default when DUPCHECK_LOG_DIR is set, since the engine is
    mostly used as a library.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        if level is None:
            level = os.getenv("DUPCHECK_LOG_LEVEL", "INFO")
        if "log_dir" not in kwargs and "enable_file" not in kwargs:
            log_dir = os.getenv("DUPCHECK_LOG_DIR")
            kwargs["enable_file"] = bool(log_dir)
            if log_dir:
                kwargs["log_dir"] = Path(log_dir)
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
