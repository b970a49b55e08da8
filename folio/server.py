"""HTTP server for Folio.

Accepts connections one at a time and hands each request's method and path to
the Site, then writes back the status line, content type, content length and
body it returns. The query string is dropped before resolution.

Key classes:
- FolioRequestHandler: Request handler delegating to a Site.

Key functions:
- make_server: Create an HTTPServer bound to a Site.
- serve: Build the index, then serve until interrupted.
"""

from __future__ import annotations

import functools
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import unquote, urlsplit

from .config import read_int
from .site import Response, Site

logger = logging.getLogger(__name__)


class FolioRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler that renders responses through a Site.

    Attributes:
        site: Site answering the requests.
    """

    server_version = "Folio"

    def __init__(self, *args, site: Site, **kwargs):
        self.site = site
        super().__init__(*args, **kwargs)

    def _request_path(self) -> str:
        return unquote(urlsplit(self.path).path) or "/"

    def _send(self, response: Response, include_body: bool = True) -> None:
        self.send_response(response.status_code, response.reason)
        self.send_header("Content-Type", response.content_type)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        if include_body:
            self.wfile.write(response.body)

    def do_GET(self):
        self._send(self.site.handle("GET", self._request_path()))

    def do_POST(self):
        self._send(self.site.handle("POST", self._request_path()))

    def do_HEAD(self):
        self._send(self.site.handle("HEAD", self._request_path()), include_body=False)

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


def make_server(site: Site, host: str = "", port: int | None = None) -> HTTPServer:
    """Create an HTTP server for a site.

    Args:
        site: Site answering the requests.
        host: Interface to bind, all interfaces by default.
        port: Port to bind, the config ``port`` by default.

    Returns:
        A bound, not yet serving, HTTPServer.
    """
    if port is None:
        port = read_int(site.config, "port", 3000)
    handler = functools.partial(FolioRequestHandler, site=site)
    return HTTPServer((host, port), handler)


def serve(
    site: Site, host: str = "", port: int | None = None
) -> None:  # pragma: no cover - integration path
    """Build the site index, then serve requests until interrupted."""
    site.build_index()
    httpd = make_server(site, host, port)
    bound_host, bound_port = httpd.server_address[:2]
    logger.info(
        "Serving %s at http://%s:%s",
        site.static_dir,
        bound_host or "localhost",
        bound_port,
    )
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        httpd.server_close()
