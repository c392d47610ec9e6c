"""Social search: reddit, Instagram and YouTube results for ``?q=``.

``sources`` is an optional comma separated list of adapter names.
"""
import logging
import sys
import os
from http.server import BaseHTTPRequestHandler
from urllib.parse import urlparse, parse_qs

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from max_codegen.aggregator import aggregate
from max_codegen.responses import method_not_allowed, send_json, send_preflight
from max_codegen.sources import SOCIAL_SOURCES

log = logging.getLogger(__name__)

METHODS = "GET, OPTIONS"


class handler(BaseHTTPRequestHandler):
    def do_OPTIONS(self):
        send_preflight(self, methods=METHODS)

    def do_POST(self):
        method_not_allowed(self, methods=METHODS)

    do_PUT = do_PATCH = do_DELETE = do_POST

    def do_GET(self):
        params = parse_qs(urlparse(self.path).query)
        query = (params.get("q", [""])[0] or "").strip()
        if not query:
            send_json(self, 400, {"error": "Missing query"}, methods=METHODS)
            return

        raw_sources = params.get("sources", [""])[0]
        requested = [s for s in raw_sources.split(",") if s.strip()] if raw_sources else None

        try:
            results = aggregate(query, requested, default=SOCIAL_SOURCES)
            send_json(self, 200, {"items": results.to_cards()}, methods=METHODS)
        except Exception as exc:
            log.exception("Social search error")
            send_json(self, 500, {"error": str(exc)}, methods=METHODS)
