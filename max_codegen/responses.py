"""JSON/CORS helpers shared by the serverless handlers in ``api/``."""

import json
from http.server import BaseHTTPRequestHandler


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


class BadRequest(ValueError):
    pass


def _send_cors(handler: BaseHTTPRequestHandler, methods: str) -> None:
    for name, value in CORS_HEADERS.items():
        if name == "Access-Control-Allow-Methods":
            value = methods
        handler.send_header(name, value)


def send_json(handler: BaseHTTPRequestHandler, status: int, payload: dict, methods: str = "POST, OPTIONS") -> None:
    body = json.dumps(payload).encode("utf-8")
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json; charset=utf-8")
    handler.send_header("Content-Length", str(len(body)))
    _send_cors(handler, methods)
    handler.end_headers()
    handler.wfile.write(body)


def send_preflight(handler: BaseHTTPRequestHandler, methods: str = "POST, OPTIONS") -> None:
    handler.send_response(200)
    handler.send_header("Content-Length", "0")
    _send_cors(handler, methods)
    handler.end_headers()


def method_not_allowed(handler: BaseHTTPRequestHandler, methods: str = "POST, OPTIONS") -> None:
    send_json(handler, 405, {"error": "Method not allowed"}, methods=methods)


def read_json_body(handler: BaseHTTPRequestHandler) -> dict:
    """Decode the request body as a JSON object. An empty body is ``{}``."""
    try:
        content_length = max(0, int(handler.headers.get("Content-Length", 0) or 0))
    except ValueError:
        raise BadRequest("Invalid JSON body")
    raw = handler.rfile.read(content_length) if content_length else b""
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequest("Invalid JSON body")
    if not isinstance(data, dict):
        raise BadRequest("Invalid JSON body")
    return data
