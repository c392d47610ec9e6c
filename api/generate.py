"""Chat endpoint: one conversation turn with per-user memory."""
import logging
import sys
import os
from http.server import BaseHTTPRequestHandler

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from max_codegen.chat import ChatModelError, handle_turn
from max_codegen.responses import (
    BadRequest,
    method_not_allowed,
    read_json_body,
    send_json,
    send_preflight,
)

log = logging.getLogger(__name__)


class handler(BaseHTTPRequestHandler):
    def do_OPTIONS(self):
        send_preflight(self)

    def do_GET(self):
        method_not_allowed(self)

    do_PUT = do_PATCH = do_DELETE = do_GET

    def do_POST(self):
        try:
            body = read_json_body(self)
        except BadRequest as exc:
            send_json(self, 400, {"error": str(exc)})
            return

        prompt = body.get("prompt")
        user_id = body.get("userId")
        if not prompt or not user_id or not isinstance(prompt, str):
            send_json(self, 400, {"error": "Missing prompt or userId."})
            return

        project = body.get("project")
        try:
            result = handle_turn(str(user_id), prompt, project=project if isinstance(project, str) else None)
        except ChatModelError:
            send_json(self, 500, {"error": "Server error."})
            return
        except Exception:
            log.exception("Backend error")
            send_json(self, 500, {"error": "Server error."})
            return

        send_json(self, 200, {"reply": result.reply, "news": result.news})
