"""
Map Lambda invocation shapes onto NormalizedRequest / NormalizedResponse.

Handles API Gateway REST (payload v1) and HTTP API (payload v2) events so the
transaction logger never has to know which one it was given.
"""

import base64
import binascii
import json
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from txlog.records import NormalizedRequest, NormalizedResponse
from txlog.utils.logger import get_logger

logger = get_logger("adapters")


def _headers(raw: Any) -> Dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items() if v is not None}


def _body(event: Dict[str, Any]) -> Any:
    body = event.get("body")
    if body is None or body == "":
        return None

    if event.get("isBase64Encoded") and isinstance(body, str):
        try:
            return base64.b64decode(body).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            logger.warning("adapters.base64_body_invalid")
            return body
    return body


def _url(event: Dict[str, Any], http_ctx: Dict[str, Any]) -> str:
    path = http_ctx.get("path") or event.get("rawPath") or event.get("path") or ""

    query = event.get("rawQueryString")
    if not query:
        params = event.get("queryStringParameters")
        if isinstance(params, dict) and params:
            query = urlencode(params)

    return f"{path}?{query}" if query else path


def from_api_gateway_event(event: Any) -> NormalizedRequest:
    """
    Normalize an API Gateway proxy event. Never raises; anything unexpected
    degrades to an empty request.
    """
    if not isinstance(event, dict):
        return NormalizedRequest()

    try:
        request_ctx = event.get("requestContext") or {}
        http_ctx = request_ctx.get("http") or {}
        identity = request_ctx.get("identity") or {}

        method = http_ctx.get("method") or event.get("httpMethod") or "UNKNOWN"
        source_ip = http_ctx.get("sourceIp") or identity.get("sourceIp")

        return NormalizedRequest(
            method=str(method).upper(),
            url=_url(event, http_ctx),
            headers=_headers(event.get("headers")),
            body=_body(event),
            remote_addr=source_ip or None,
        )
    except (AttributeError, TypeError) as e:
        logger.warning("adapters.event_unreadable", extra={"error": str(e)})
        return NormalizedRequest()


def from_lambda_response(response: Any) -> NormalizedResponse:
    if not isinstance(response, dict):
        return NormalizedResponse()
    return NormalizedResponse(
        status_code=response.get("statusCode"),
        body=response.get("body"),
    )


def error_from_response(response: NormalizedResponse) -> Optional[str]:
    """
    Pull the "error" member out of a JSON error body (status >= 400),
    e.g. {"error": "Event not found"} -> "Event not found".
    """
    try:
        status = int(response.status_code)
    except (TypeError, ValueError):
        return None
    if status < 400:
        return None

    body = response.body
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return None

    if isinstance(body, dict) and body.get("error") is not None:
        return str(body["error"])
    return None
