"""HTTP scheduler extender that prioritises nodes by their numeric name suffix."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Mapping
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from .nodenumber import MATCH_SCORE, NON_MATCH_SCORE, suffix_number

VERSION_PATH = "/version"
PRIORITY_PATH = "/priorities"
DEFAULT_PORT = 8080

logger = logging.getLogger(__name__)


def _error_body(status: HTTPStatus) -> dict[str, str]:
    return {"message": status.phrase}


def _object_name(obj: Any, what: str) -> str:
    try:
        name = obj["metadata"]["name"]
    except (KeyError, TypeError) as exc:
        raise ValueError(f"{what} has no name") from exc
    if not isinstance(name, str):
        raise ValueError(f"{what} name is not a string")
    return name


def score_nodes(args: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Score each node in extender arguments against the pod's name suffix.

    ``args`` has the shape of the extender wire format: a ``pod`` object and
    a ``nodes`` list whose ``items`` are node objects. The result is a host
    priority list of ``{"host": ..., "score": ...}`` entries in node order.
    """
    if not isinstance(args, Mapping):
        raise ValueError("extender arguments must be an object")
    pod_number = suffix_number(_object_name(args.get("pod"), "pod"))

    nodes = args.get("nodes")
    if not isinstance(nodes, Mapping):
        raise ValueError("extender arguments carry no node list")
    items = nodes.get("items") or []

    priorities = []
    for node in items:
        host = _object_name(node, "node")
        score = MATCH_SCORE if suffix_number(host) == pod_number else NON_MATCH_SCORE
        priorities.append({"host": host, "score": score})
    return priorities


class NodeNumberExtender:
    """Serves the priorities endpoint of the node-number extender."""

    def __init__(self) -> None:
        self._server: ThreadingHTTPServer | None = None
        self._ready = threading.Event()

    def handle(self, body: bytes | str) -> tuple[int, Any]:
        """Answer one priorities request; return the HTTP status and JSON payload."""
        try:
            args = json.loads(body)
            if not isinstance(args, Mapping):
                raise ValueError("request body is not an object")
        except ValueError as exc:
            logger.error("failed to bind request: %s", exc)
            return HTTPStatus.INTERNAL_SERVER_ERROR, _error_body(HTTPStatus.INTERNAL_SERVER_ERROR)

        try:
            priorities = score_nodes(args)
        except ValueError as exc:
            logger.error("failed to score: %s", exc)
            return HTTPStatus.INTERNAL_SERVER_ERROR, _error_body(HTTPStatus.INTERNAL_SERVER_ERROR)

        return HTTPStatus.OK, priorities

    def _make_handler(self) -> type[BaseHTTPRequestHandler]:
        extender = self

        class _Handler(BaseHTTPRequestHandler):
            def _reply(self, status: int, payload: Any) -> None:
                data = json.dumps(payload).encode("utf-8") + b"\n"
                self.send_response(status)
                self.send_header("Content-Type", "application/json; charset=UTF-8")
                self.send_header("Content-Length", str(len(data)))
                self.end_headers()
                self.wfile.write(data)

            def do_POST(self) -> None:  # noqa: N802
                if self.path != PRIORITY_PATH:
                    self._reply(HTTPStatus.NOT_FOUND, _error_body(HTTPStatus.NOT_FOUND))
                    return
                length = int(self.headers.get("Content-Length") or 0)
                body = self.rfile.read(length)
                status, payload = extender.handle(body)
                self._reply(status, payload)

            def do_GET(self) -> None:  # noqa: N802
                if self.path == PRIORITY_PATH:
                    self._reply(
                        HTTPStatus.METHOD_NOT_ALLOWED, _error_body(HTTPStatus.METHOD_NOT_ALLOWED)
                    )
                else:
                    self._reply(HTTPStatus.NOT_FOUND, _error_body(HTTPStatus.NOT_FOUND))

            def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
                logger.debug(format, *args)

        return _Handler

    def serve(self, host: str = "", port: int = DEFAULT_PORT) -> None:
        """Listen on ``host:port`` and serve until ``shutdown`` is called."""
        server = ThreadingHTTPServer((host, port), self._make_handler())
        self._server = server
        self._ready.set()
        try:
            server.serve_forever()
        finally:
            server.server_close()

    def wait_until_serving(self, timeout: float | None = None) -> tuple[str, int]:
        """Block until the server is listening and return its address."""
        if not self._ready.wait(timeout) or self._server is None:
            raise TimeoutError("extender did not start serving")
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    def shutdown(self) -> None:
        """Stop a running server."""
        server = self._server
        if server is None:
            raise RuntimeError("server is not running")
        logger.info("Shutting down the server...")
        server.shutdown()
        self._server = None
        self._ready.clear()
        logger.info("Shutted down the server...")