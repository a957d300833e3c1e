import json
import secrets
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from jose import jwt
from jose.exceptions import JWTError

from txlog.utils.logger import get_logger

logger = get_logger("records")

# CloudFront viewer headers -> LogRecord geo field
GEO_HEADERS = {
    "country": "cloudfront-viewer-country-name",
    "region": "cloudfront-viewer-country-region-name",
    "city": "cloudfront-viewer-city",
    "zip_code": "cloudfront-viewer-postal-code",
    "latitude": "cloudfront-viewer-latitude",
    "longitude": "cloudfront-viewer-longitude",
}


@dataclass
class NormalizedRequest:
    method: str = "UNKNOWN"
    url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    ip: Optional[str] = None
    remote_addr: Optional[str] = None


@dataclass
class NormalizedResponse:
    status_code: Optional[int] = None
    body: Any = None


@dataclass(frozen=True)
class LogRecord:
    log_id: str
    timestamp: str
    request_method: str
    request_url: str
    request_headers: Optional[str]
    request_body: Optional[str]
    response_status_code: Optional[int]
    response_body: Optional[str]
    client_ip: str
    execution_time_ms: int
    error_message: Optional[str]
    api_version: str
    destination: str = "UNKNOWN"
    origin: Optional[str] = None
    role: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None

    def to_item(self) -> Dict[str, Any]:
        return asdict(self)


def new_log_id(timestamp: str) -> str:
    return f"{timestamp}#{secrets.token_hex(4)}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def serialize(value: Any) -> Optional[str]:
    """
    JSON-encode a header/body value for storage.
    Strings pass through untouched; empty or unserializable values become None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    try:
        return json.dumps(value, allow_nan=False)
    except Exception as e:
        logger.warning(
            "records.serialize_failed",
            extra={"value_type": type(value).__name__, "error": str(e)},
        )
        return None


def get_header(headers: Mapping[str, Any], name: str) -> Optional[str]:
    """Case-insensitive header lookup; empty values count as missing."""
    if not isinstance(headers, Mapping):
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if isinstance(key, str) and key.lower() == wanted:
            return str(value) if value not in (None, "") else None
    return None


def client_ip(request: NormalizedRequest) -> str:
    """Explicit IP -> X-Forwarded-For -> connection address -> "unknown"."""
    candidates = (
        request.ip,
        get_header(request.headers, "x-forwarded-for"),
        request.remote_addr,
    )
    for candidate in candidates:
        if candidate:
            return str(candidate)
    return "unknown"


def bearer_claims(headers: Mapping[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """
    Best-effort (origin, role) from an unverified bearer JWT.

    This is enrichment for the audit trail only. Signatures are NOT checked and
    nothing here may be used for an access decision.
    """
    auth = get_header(headers, "authorization")
    if not auth or not auth.strip().lower().startswith("bearer "):
        return None, None

    parts = auth.strip().split(" ")
    if len(parts) != 2 or not parts[1]:
        logger.warning("records.authorization_malformed")
        return None, None

    try:
        claims = jwt.get_unverified_claims(parts[1])
    except (JWTError, TypeError, ValueError) as e:
        logger.warning("records.jwt_decode_error", extra={"error": str(e)})
        return None, None

    aud = claims.get("aud")
    if isinstance(aud, list):
        aud = aud[0] if aud else None
    origin = aud.split("-")[0] if isinstance(aud, str) and aud else None

    role = claims.get("role") or claims.get("custom_claim")
    return origin or None, str(role) if role else None


def geo_fields(headers: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    return {name: get_header(headers, header) for name, header in GEO_HEADERS.items()}


def destination(url: str) -> str:
    """First path segment, capitalised: "/sms/send?x=1" -> "Sms"."""
    path = (url or "").split("?", 1)[0]
    segments = [s for s in path.split("/") if s]
    if not segments:
        return "UNKNOWN"
    return segments[0][0].upper() + segments[0][1:].lower()


def _execution_time(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def _status_code(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def build_log_record(
    request: NormalizedRequest,
    response: NormalizedResponse,
    execution_time_ms: Any,
    error_message: Optional[str],
    api_version: str,
) -> LogRecord:
    """
    Assemble the immutable audit entry for one request/response exchange.
    Every optional input degrades to None/"unknown"; nothing here raises on bad data.
    """
    if not isinstance(request, NormalizedRequest):
        request = NormalizedRequest()
    if not isinstance(response, NormalizedResponse):
        response = NormalizedResponse()

    headers = request.headers if isinstance(request.headers, Mapping) else {}
    origin, role = bearer_claims(headers)
    timestamp = utc_timestamp()

    return LogRecord(
        log_id=new_log_id(timestamp),
        timestamp=timestamp,
        request_method=str(request.method or "UNKNOWN"),
        request_url=str(request.url or ""),
        request_headers=serialize(dict(headers)),
        request_body=serialize(request.body),
        response_status_code=_status_code(response.status_code),
        response_body=serialize(response.body),
        client_ip=client_ip(request),
        execution_time_ms=_execution_time(execution_time_ms),
        error_message=str(error_message) if error_message is not None else None,
        api_version=api_version,
        destination=destination(str(request.url or "")),
        origin=origin,
        role=role,
        **geo_fields(headers),
    )
