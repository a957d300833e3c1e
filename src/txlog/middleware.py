import time
from functools import wraps
from typing import Any, Callable

from txlog.adapters import error_from_response, from_api_gateway_event, from_lambda_response
from txlog.records import NormalizedResponse
from txlog.transactions import TransactionLogger

Handler = Callable[[Any, Any], Any]


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def logged_handler(tx_logger: TransactionLogger) -> Callable[[Handler], Handler]:
    """
    Decorate a Lambda proxy handler so each invocation is written to the
    transaction log once, after its response (or exception) is known.

        tx_logger = TransactionLogger(build_store())

        @logged_handler(tx_logger)
        def lambda_handler(event, context):
            ...
    """

    def decorator(fn: Handler) -> Handler:
        @wraps(fn)
        def wrapper(event, context):
            start = time.monotonic()
            request = from_api_gateway_event(event)

            try:
                response = fn(event, context)
            except Exception as e:
                tx_logger.log_transaction_sync(
                    request,
                    NormalizedResponse(status_code=500),
                    _elapsed_ms(start),
                    str(e),
                )
                raise

            normalized = from_lambda_response(response)
            tx_logger.log_transaction_sync(
                request,
                normalized,
                _elapsed_ms(start),
                error_from_response(normalized),
            )
            return response

        return wrapper

    return decorator
