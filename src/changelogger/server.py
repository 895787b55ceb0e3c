"""Read-only HTTP API over :class:`~changelogger.service.ChangelogService`.

Routes (``GET`` only)::

    /health                              health summary (JSON)
    /repos                               configured repositories (JSON)
    /repos/<repo>                        full parsed changelog (JSON)
    /repos/<repo>/latest                 newest release (JSON)
    /repos/<repo>/<version>              one release (JSON)
    /repos/<repo>/since                  whole changelog (Markdown)
    /repos/<repo>/since/<version>        changes newer than version (Markdown)
    /repos/<repo>/diff/<v1>/<v2>         changes between versions (Markdown)

The ``since`` routes accept a ``?title=`` query parameter. JSON bodies use
the envelope ``{"success": true, "data": ...}`` or ``{"success": false,
"error": ..., "code": ...}``. Every response carries permissive CORS
headers.

Routing is a pure function (:func:`route`) so it can be tested without a
socket; :class:`ChangelogRequestHandler` only adapts it to
:mod:`http.server`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from changelogger.exceptions import ChangeloggerError
from changelogger.models import MarkdownDiff
from changelogger.service import ChangelogService

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
MARKDOWN_CONTENT_TYPE = "text/markdown; charset=utf-8"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@dataclass
class Response:
    """Status, body and content type produced by :func:`route`."""

    status: int
    body: bytes = b""
    content_type: Optional[str] = None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.body)


def json_response(data: Any, status: int = 200) -> Response:
    payload = {"success": True, "data": data}
    return Response(status, json.dumps(payload).encode("utf-8"), JSON_CONTENT_TYPE)


def error_response(message: str, code: str, status: int) -> Response:
    payload = {"success": False, "error": message, "code": code}
    return Response(status, json.dumps(payload).encode("utf-8"), JSON_CONTENT_TYPE)


def markdown_response(diff: MarkdownDiff) -> Response:
    return Response(200, diff.content.encode("utf-8"), MARKDOWN_CONTENT_TYPE)


def _dump(model: Any) -> Any:
    return model.model_dump(mode="json", exclude_none=True)


def _dispatch(service: ChangelogService, parts: list[str], query: dict[str, list[str]]) -> Response:
    title = (query.get("title") or [None])[0] or None

    if parts == ["health"]:
        return json_response(service.health())
    if parts == ["repos"]:
        return json_response({"repositories": service.list_repositories()})
    if not parts or parts[0] != "repos":
        return error_response("API endpoint not found", "ENDPOINT_NOT_FOUND", 404)

    if len(parts) == 2:
        return json_response(_dump(service.load_repository(parts[1])))

    if len(parts) == 3:
        repo_name, identifier = parts[1], parts[2]
        if identifier == "latest":
            return json_response(_dump(service.get_latest(repo_name)))
        if identifier == "since":
            return markdown_response(service.since(repo_name, None, title))
        return json_response(_dump(service.get_version(repo_name, identifier)))

    if len(parts) == 4 and parts[2] == "since":
        diff = service.since(parts[1], parts[3], title)
        if diff.is_empty:
            return Response(204)
        return markdown_response(diff)

    if len(parts) == 5 and parts[2] == "diff":
        return markdown_response(service.diff(parts[1], parts[3], parts[4]))

    return error_response("Invalid API path", "INVALID_PATH", 404)


def route(service: ChangelogService, method: str, target: str) -> Response:
    """Answer one request.

    Args:
        service: Service the request is executed against.
        method: HTTP method.
        target: Request target (path plus optional query string).

    Returns:
        The :class:`Response` to send. Request errors are mapped from
        :class:`~changelogger.exceptions.ChangeloggerError`; anything else
        becomes a logged 500.
    """
    if method == "OPTIONS":
        return Response(200)
    if method != "GET":
        return error_response(
            f"Method {method} not allowed", "METHOD_NOT_ALLOWED", 405
        )

    split = urlsplit(target)
    parts = [unquote(part) for part in split.path.split("/") if part]
    query = parse_qs(split.query)
    try:
        return _dispatch(service, parts, query)
    except ChangeloggerError as exc:
        return error_response(str(exc), exc.code, exc.http_status)
    except Exception as exc:
        logger.exception("Unhandled error serving %s", target)
        return error_response(f"Internal server error: {exc}", "INTERNAL_ERROR", 500)


class ChangelogRequestHandler(BaseHTTPRequestHandler):
    """Adapts :func:`route` to :mod:`http.server`."""

    server: ChangelogHTTPServer

    def do_GET(self) -> None:
        self._respond("GET")

    def do_OPTIONS(self) -> None:
        self._respond("OPTIONS")

    def do_POST(self) -> None:
        self._respond("POST")

    def do_PUT(self) -> None:
        self._respond("PUT")

    def do_PATCH(self) -> None:
        self._respond("PATCH")

    def do_DELETE(self) -> None:
        self._respond("DELETE")

    def _respond(self, method: str) -> None:
        response = route(self.server.service, method, self.path)
        self.send_response(response.status)
        for name, value in CORS_HEADERS.items():
            self.send_header(name, value)
        if response.content_type:
            self.send_header("Content-Type", response.content_type)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        if response.body:
            self.wfile.write(response.body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.info("%s - %s", self.address_string(), format % args)


class ChangelogHTTPServer(ThreadingHTTPServer):
    """Threading HTTP server carrying the :class:`ChangelogService` it serves."""

    daemon_threads = True

    def __init__(self, address: tuple[str, int], service: ChangelogService) -> None:
        self.service = service
        super().__init__(address, ChangelogRequestHandler)


def create_server(service: ChangelogService, host: str, port: int) -> ChangelogHTTPServer:
    """Bind a server to *host*:*port* (port ``0`` picks a free one)."""
    return ChangelogHTTPServer((host, port), service)
