import base64
import json

from txlog.adapters import error_from_response, from_api_gateway_event, from_lambda_response
from txlog.records import NormalizedResponse

# Trimmed API Gateway events, REST (payload v1) and HTTP API (payload v2)
REST_EVENT = {
    "resource": "/geocode",
    "path": "/geocode",
    "httpMethod": "get",
    "headers": {
        "Host": "abc123.execute-api.us-east-1.amazonaws.com",
        "X-Forwarded-For": "203.0.113.9, 130.176.1.1",
        "CloudFront-Viewer-Country-Name": "Philippines",
        "X-Empty": None,
    },
    "queryStringParameters": {"address": "Ayala Ave"},
    "requestContext": {"identity": {"sourceIp": "130.176.1.1"}},
    "body": None,
    "isBase64Encoded": False,
}

HTTP_API_EVENT = {
    "version": "2.0",
    "rawPath": "/sms",
    "rawQueryString": "dry_run=1",
    "headers": {"content-type": "application/json"},
    "requestContext": {
        "http": {"method": "POST", "path": "/sms", "sourceIp": "198.51.100.20"},
    },
    "body": json.dumps({"recipientPhone": "+639171234567", "message": "hi"}),
    "isBase64Encoded": False,
}


def test_rest_event_normalized():
    req = from_api_gateway_event(REST_EVENT)
    assert req.method == "GET"
    assert req.url == "/geocode?address=Ayala+Ave"
    assert req.remote_addr == "130.176.1.1"
    assert req.ip is None
    assert req.body is None
    assert "X-Empty" not in req.headers
    assert req.headers["CloudFront-Viewer-Country-Name"] == "Philippines"


def test_http_api_event_normalized():
    req = from_api_gateway_event(HTTP_API_EVENT)
    assert req.method == "POST"
    assert req.url == "/sms?dry_run=1"
    assert req.remote_addr == "198.51.100.20"
    assert json.loads(req.body)["recipientPhone"] == "+639171234567"


def test_base64_body_decoded():
    event = dict(HTTP_API_EVENT, body=base64.b64encode(b'{"a":1}').decode(), isBase64Encoded=True)
    assert from_api_gateway_event(event).body == '{"a":1}'


def test_invalid_base64_body_kept_raw():
    event = dict(HTTP_API_EVENT, body="%%%not-base64", isBase64Encoded=True)
    assert from_api_gateway_event(event).body == "%%%not-base64"


def test_garbage_events_degrade_to_empty_request():
    for event in (None, "nope", 42, {"requestContext": "broken"}):
        req = from_api_gateway_event(event)
        assert req.method == "UNKNOWN"
        assert req.url == ""
        assert req.headers == {}


def test_from_lambda_response():
    resp = from_lambda_response({"statusCode": 202, "body": '{"queued":true}'})
    assert resp.status_code == 202
    assert resp.body == '{"queued":true}'
    assert from_lambda_response(None) == NormalizedResponse()


def test_error_from_response():
    assert error_from_response(NormalizedResponse(404, '{"error": "Event not found"}')) == "Event not found"
    assert error_from_response(NormalizedResponse(400, {"error": "invalid_json"})) == "invalid_json"
    assert error_from_response(NormalizedResponse(500, "plain text")) is None
    assert error_from_response(NormalizedResponse(200, '{"error": "ignored"}')) is None
    assert error_from_response(NormalizedResponse(None, None)) is None
