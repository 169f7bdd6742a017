"""Utility modules."""

from stockline.utils.csv_loader import read_csv_text
from stockline.utils.logger import bind_context, clear_context, get_logger
from stockline.utils.tracing import get_tracer, init_tracing, shutdown_tracing

__all__ = [
    "read_csv_text",
    "get_logger",
    "bind_context",
    "clear_context",
    "get_tracer",
    "init_tracing",
    "shutdown_tracing",
]
