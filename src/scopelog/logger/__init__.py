"""Logger handles and the log entry pipeline."""

from scopelog.logger.arguments import format_message, normalize_log_call
from scopelog.logger.factory import LoggerFactory
from scopelog.logger.logger import Logger

__all__ = ["Logger", "LoggerFactory", "format_message", "normalize_log_call"]
