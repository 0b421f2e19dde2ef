# Parley Command Library — (c) 2025 rtj.dev LLC — MIT Licensed
"""Global logger instance for Parley."""
import logging

logger: logging.Logger = logging.getLogger("parley")
