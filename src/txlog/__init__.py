"""
API Transaction Logger
======================

Best-effort audit logging for serverless HTTP handlers. Each handled request is
written to an append-only DynamoDB table as one LogRecord, raced against a fixed
1500 ms deadline so logging can never slow down or break the response path.

Modules under this package:
- records.py      → LogRecord / normalized request+response, field derivation
- transactions.py → TransactionLogger (deadline-bounded, never raises)
- adapters.py     → API Gateway v1/v2 event and response normalization
- middleware.py   → logged_handler decorator for Lambda proxy handlers
- health.py       → Health check endpoint (/health), logged through the above
- utils/          → Shared helpers (logging, config, DynamoDB store)

Environment variables expected:
  • TRANSACTIONS_TABLE         - DynamoDB table for the transaction audit trail
  • AWS_REGION                 - AWS region for all resources (default: us-east-1)
  • LOG_LEVEL                  - Log verbosity (default: INFO)
"""

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = ["__version__"]
