"""
Listener strategies for running the relay.

The same Flask app is served either on one plain HTTP port, or behind TLS
with a second plain listener that only redirects to the HTTPS URL.
"""
import logging
import ssl
import threading
from urllib.parse import quote, urlsplit, urlunsplit

from flask import Flask, redirect, request
from werkzeug.serving import make_server

from brief_relay.config import RelayConfig
from brief_relay.errors import TLSConfigurationError

logger = logging.getLogger(__name__)


def build_ssl_context(cert_path: str, key_path: str) -> ssl.SSLContext:
    """Load the full certificate chain and private key, or fail startup"""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    try:
        context.load_cert_chain(certfile=cert_path, keyfile=key_path)
    except (OSError, ssl.SSLError) as e:
        raise TLSConfigurationError(
            f"Could not load TLS material (cert={cert_path}, key={key_path}): {e}"
        ) from e
    return context


def https_url_for(host: str, path: str, query: str, https_port: int) -> str:
    """Rewrite an incoming plain request to its https:// equivalent"""
    hostname = host.rsplit(":", 1)[0] if host and not host.endswith("]") else host
    if https_port != 443:
        hostname = f"{hostname}:{https_port}"
    return urlunsplit(("https", hostname, path, query, ""))


PATH_SAFE_CHARS = "/:@!$&'()*+,;=-._~"


def raw_request_path(environ, decoded_path: str) -> str:
    """
    Path as the client sent it, still percent-encoded.

    Servers that keep the request line expose it as RAW_URI or REQUEST_URI;
    otherwise the decoded path is quoted again, which keeps %3F and %23 intact.
    """
    raw_uri = environ.get("RAW_URI") or environ.get("REQUEST_URI")
    if raw_uri:
        if raw_uri.startswith("/"):
            path = raw_uri.split("?", 1)[0].split("#", 1)[0]
        else:
            path = urlsplit(raw_uri).path
        if path:
            return path
    return quote(decoded_path, safe=PATH_SAFE_CHARS)


def create_redirect_app(https_port: int = 443) -> Flask:
    """Plain HTTP app that answers every request with a permanent redirect"""
    redirect_app = Flask("brief_relay.redirect")

    @redirect_app.route("/", defaults={"path": ""}, methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
    @redirect_app.route("/<path:path>", methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
    def to_https(path):
        target = https_url_for(
            request.host,
            raw_request_path(request.environ, request.path),
            request.query_string.decode("latin-1"),
            https_port
        )
        return redirect(target, code=301)

    return redirect_app


class PlainListener:
    """Serve the app over plain HTTP on config.port"""

    def __init__(self, config: RelayConfig, host: str = "0.0.0.0"):
        self.config = config
        self.host = host

    def build_servers(self, app):
        return [make_server(self.host, self.config.port, app, threaded=True)]

    def serve(self, app):
        server = self.build_servers(app)[0]
        logger.info(f"🚀 API listening on port {self.config.port}")
        server.serve_forever()


class SecureListener:
    """Serve the app over HTTPS, with a redirect-only listener on the HTTP port"""

    def __init__(self, config: RelayConfig, host: str = "0.0.0.0"):
        self.config = config
        self.host = host

    def build_servers(self, app):
        # TLS material is loaded first so a missing certificate aborts before any port is bound
        ssl_context = build_ssl_context(self.config.tls_cert_path, self.config.tls_key_path)
        https_server = make_server(
            self.host, self.config.https_port, app,
            threaded=True, ssl_context=ssl_context
        )
        http_server = make_server(
            self.host, self.config.http_port,
            create_redirect_app(self.config.https_port),
            threaded=True
        )
        return [https_server, http_server]

    def serve(self, app):
        https_server, http_server = self.build_servers(app)

        redirect_thread = threading.Thread(target=http_server.serve_forever, daemon=True)
        redirect_thread.start()
        logger.info(f"↪️  Redirecting HTTP on port {self.config.http_port} to HTTPS")

        logger.info(f"🔒 API listening on port {self.config.https_port} (HTTPS)")
        try:
            https_server.serve_forever()
        finally:
            http_server.shutdown()


def listener_for(config: RelayConfig):
    """Pick the listener strategy named by config.listener"""
    if config.is_secure:
        return SecureListener(config)
    return PlainListener(config)
