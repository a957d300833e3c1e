import os
from typing import Tuple

from txlog.utils.logger import get_logger

logger = get_logger("config")

DEFAULT_REGION = "us-east-1"


def load_store_settings() -> Tuple[str, str]:
    """
    Resolve the transaction-log table name and AWS region from environment variables.

    TRANSACTIONS_TABLE: DynamoDB table holding the API transaction audit trail
    AWS_REGION: optional; defaults to us-east-1 when not set (e.g. local runs)

    Raises RuntimeError with a clear message if something is missing.
    """
    table_name = (os.getenv("TRANSACTIONS_TABLE") or "").strip()
    region_name = os.getenv("AWS_REGION") or DEFAULT_REGION

    missing = []
    if not table_name:
        missing.append("TRANSACTIONS_TABLE")

    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}"
        logger.error(msg)
        raise RuntimeError(msg)

    return table_name, region_name
