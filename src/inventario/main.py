from __future__ import annotations

import base64
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qsl, urlsplit

from inventario.api.router import Router
from inventario.application.container import build_container
from inventario.config import load_config
from inventario.logging_config import setup_logging

log = logging.getLogger("inventario.server")


def request_to_event(method: str, target: str, body: bytes) -> dict:
    parts = urlsplit(target)
    return {
        "httpMethod": method,
        "path": parts.path,
        "queryStringParameters": dict(parse_qsl(parts.query)) or None,
        "pathParameters": None,
        # raw bytes go through as base64 so a bad encoding becomes a 400 in parse_body
        "body": base64.b64encode(body).decode("ascii") if body else None,
        "isBase64Encoded": bool(body),
    }


def make_request_handler(router: Router) -> type[BaseHTTPRequestHandler]:
    class RequestHandler(BaseHTTPRequestHandler):
        def _serve(self) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            response = router.dispatch(request_to_event(self.command, self.path, body))

            payload = response.get("body", "").encode("utf-8")
            self.send_response(response["statusCode"])
            for name, value in response.get("headers", {}).items():
                self.send_header(name, value)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            if payload:
                self.wfile.write(payload)

        do_GET = do_POST = do_PUT = do_PATCH = do_OPTIONS = _serve

        def log_message(self, format, *args):
            log.info("http %s", format % args)

    return RequestHandler


def main() -> None:
    config = load_config()
    setup_logging(config.logs_dir, level=logging.INFO, console=True)
    container = build_container(config)

    server = ThreadingHTTPServer((config.host, config.port), make_request_handler(container.router))
    log.info("server_started host=%s port=%s", config.host, config.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
