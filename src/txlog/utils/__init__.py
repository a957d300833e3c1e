"""
Shared helpers for the API transaction logger:

- logger.py  → structured JSON logging
- config.py  → environment-driven settings
- store.py   → DynamoDB-backed, write-once transaction store

All functions in this package are stateless and thread-safe, suitable for
AWS Lambda execution.
"""

from txlog.utils.logger import get_logger, log

__all__ = [
    "get_logger",
    "log",
]
