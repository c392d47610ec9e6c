"""Live web search: fan out to the web sources and summarize the results.

Adapter and summarizer failures degrade the response (empty sources, fallback
reply) rather than failing the request.
"""
import logging
import sys
import os
from http.server import BaseHTTPRequestHandler

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from max_codegen.aggregator import aggregate
from max_codegen.responses import (
    BadRequest,
    method_not_allowed,
    read_json_body,
    send_json,
    send_preflight,
)
from max_codegen.summarize import FALLBACK_REPLY, summarize

log = logging.getLogger(__name__)

UNAVAILABLE_REPLY = "Live search temporarily unavailable. Try again later."


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

        query = body.get("query")
        if not isinstance(query, str) or not query.strip():
            send_json(self, 400, {"error": "Missing query."})
            return
        query = query.strip()

        try:
            log.info("Searching for: %s", query)
            sources = body.get("sources")
            if not isinstance(sources, (list, str)):
                sources = None
            results = aggregate(query, sources)
            if body.get("summarize", True):
                reply = summarize(query, results)
            else:
                reply = FALLBACK_REPLY

            send_json(self, 200, {
                "reply": reply,
                "summary": reply,
                "sources": results.to_cards(),
                "images": results.images,
            })

        except Exception as exc:
            log.exception("Search API crashed")
            send_json(self, 500, {
                "reply": UNAVAILABLE_REPLY,
                "sources": [],
                "images": [],
                "error": str(exc),
            })
