# timeline/edge.py
# WSGI middleware in front of /api. EdgeRewrite answers with an
# x-middleware-rewrite directive for the edge runtime to follow; DevProxy
# forwards the request itself with requests. Both read TIMELINE_BACKEND_URL
# per request and keep the prefix unless strip_prefix is set.
from typing import Callable, Iterable, Mapping, Optional
import logging
import os

import requests
from werkzeug.wrappers import Request, Response

log = logging.getLogger(__name__)

BACKEND_URL_ENV = "TIMELINE_BACKEND_URL"
REWRITE_HEADER = "x-middleware-rewrite"
MISSING_BACKEND_MESSAGE = "Backend URL is not configured."

HOP_BY_HOP = {
    "connection", "keep-alive", "proxy-authenticate", "proxy-authorization",
    "te", "trailers", "transfer-encoding", "upgrade", "content-length",
}


def backend_url(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    env = os.environ if environ is None else environ
    value = (env.get(BACKEND_URL_ENV) or "").strip()
    return value.rstrip("/") or None


class _PrefixMiddleware:
    def __init__(self, app: Callable, prefix: str = "/api", strip_prefix: bool = False,
                 environ: Optional[Mapping[str, str]] = None):
        self.app = app
        self.prefix = "/" + prefix.strip("/")
        self.strip_prefix = strip_prefix
        self._environ = environ

    def matches(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + "/")

    def target_path(self, path: str) -> str:
        if not self.strip_prefix:
            return path
        return path[len(self.prefix):] or "/"

    def destination(self, base: str, request: Request) -> str:
        query = request.query_string.decode("latin-1")
        dest = base + self.target_path(request.path)
        return f"{dest}?{query}" if query else dest

    def __call__(self, environ, start_response) -> Iterable[bytes]:
        request = Request(environ)
        if not self.matches(request.path):
            return self.app(environ, start_response)

        base = backend_url(self._environ)
        if base is None:
            log.error("%s is not set; refusing %s", BACKEND_URL_ENV, request.path)
            response = Response(MISSING_BACKEND_MESSAGE, status=500, mimetype="text/plain")
        else:
            response = self.handle(base, request)
        return response(environ, start_response)

    def handle(self, base: str, request: Request) -> Response:
        raise NotImplementedError


class EdgeRewrite(_PrefixMiddleware):
    """Emit a rewrite directive for the edge runtime; no network call."""

    def handle(self, base: str, request: Request) -> Response:
        headers = [(k, v) for k, v in request.headers.items() if k.lower() not in HOP_BY_HOP]
        response = Response(status=200, headers=headers)
        response.headers[REWRITE_HEADER] = self.destination(base, request)
        return response


class DevProxy(_PrefixMiddleware):
    """Forward matching requests to the backend and relay the answer."""

    def __init__(self, app: Callable, prefix: str = "/api", strip_prefix: bool = False,
                 environ: Optional[Mapping[str, str]] = None, timeout: float = 30):
        super().__init__(app, prefix, strip_prefix, environ)
        self.timeout = timeout

    def handle(self, base: str, request: Request) -> Response:
        url = self.destination(base, request)
        headers = {k: v for k, v in request.headers.items()
                   if k.lower() not in HOP_BY_HOP and k.lower() != "host"}
        try:
            upstream = requests.request(
                request.method,
                url,
                headers=headers,
                data=request.get_data(),
                allow_redirects=False,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            log.error("Proxy to %s failed: %s", url, exc)
            return Response(f"Backend unreachable: {exc}", status=502, mimetype="text/plain")

        relay = [(k, v) for k, v in upstream.headers.items()
                 if k.lower() not in HOP_BY_HOP and k.lower() != "content-encoding"]
        return Response(upstream.content, status=upstream.status_code, headers=relay)


MODES = {"rewrite": EdgeRewrite, "proxy": DevProxy}


def wrap(wsgi_app: Callable, mode: Optional[str], prefix: str = "/api",
         strip_prefix: bool = False) -> Callable:
    """Wrap ``wsgi_app`` according to TIMELINE_EDGE_MODE ("rewrite", "proxy" or unset)."""
    if not mode:
        return wsgi_app
    try:
        middleware = MODES[mode.lower()]
    except KeyError:
        raise ValueError(f"Unknown edge mode {mode!r}; expected one of {sorted(MODES)}") from None
    return middleware(wsgi_app, prefix=prefix, strip_prefix=strip_prefix)
