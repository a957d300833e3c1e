import json

from txlog import __version__
from txlog.middleware import logged_handler
from txlog.transactions import TransactionLogger
from txlog.utils.logger import log
from txlog.utils.store import build_store

# Audit store + transaction logger, built once per container
tx_logger = TransactionLogger(build_store())


@logged_handler(tx_logger)
def lambda_handler(event, context):
    method = ((event.get("requestContext") or {}).get("http") or {}).get("method") or event.get("httpMethod", "GET")
    log("health.check", path="/health", method=method)
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"status": "ok", "version": __version__}),
    }
