# tests/test_server.py
import pytest
from unittest.mock import patch

from brief_relay.config import RelayConfig
from brief_relay.errors import TLSConfigurationError
from brief_relay.server import (
    PlainListener,
    SecureListener,
    build_ssl_context,
    create_redirect_app,
    https_url_for,
    listener_for,
    raw_request_path,
)


class TestHttpsUrlFor:

    @pytest.mark.parametrize("host, path, query, port, expected", [
        ("example.com", "/", "", 443, "https://example.com/"),
        ("example.com:80", "/api/submit", "", 443, "https://example.com/api/submit"),
        ("example.com", "/a", "x=1&y=2", 443, "https://example.com/a?x=1&y=2"),
        ("example.com:8000", "/", "", 8443, "https://example.com:8443/"),
        ("[::1]:80", "/", "", 443, "https://[::1]/"),
    ])
    def test_rewrite(self, host, path, query, port, expected):
        assert https_url_for(host, path, query, port) == expected


class TestRedirectApp:

    @pytest.fixture
    def client(self):
        return create_redirect_app(443).test_client()

    @pytest.mark.parametrize("method", ["get", "post", "put", "delete"])
    def test_every_request_is_permanently_redirected(self, client, method):
        response = getattr(client, method)("/api/submit?src=landing", headers={"Host": "brief.example.com"})

        assert response.status_code == 301
        assert response.headers["Location"] == "https://brief.example.com/api/submit?src=landing"

    def test_root(self, client):
        response = client.get("/", headers={"Host": "brief.example.com:80"})

        assert response.status_code == 301
        assert response.headers["Location"] == "https://brief.example.com/"

    @pytest.mark.parametrize("path", ["/files/a%3Fb", "/files/a%2Fb", "/files/a%23b", "/files/a%20b"])
    def test_encoded_path_is_kept(self, client, path):
        response = client.get(path + "?v=1", headers={"Host": "brief.example.com"})

        assert response.status_code == 301
        assert response.headers["Location"] == f"https://brief.example.com{path}?v=1"


class TestRawRequestPath:

    def test_prefers_raw_uri(self):
        environ = {"RAW_URI": "/files/a%3Fb?x=1", "REQUEST_URI": "/ignored"}

        assert raw_request_path(environ, "/files/a?b") == "/files/a%3Fb"

    def test_request_uri_in_absolute_form(self):
        environ = {"REQUEST_URI": "http://brief.example.com/files/a%2Fb?x=1"}

        assert raw_request_path(environ, "/files/a/b") == "/files/a%2Fb"

    @pytest.mark.parametrize("decoded, expected", [
        ("/files/a?b", "/files/a%3Fb"),
        ("/files/a#b", "/files/a%23b"),
        ("/files/a b", "/files/a%20b"),
        ("/api/submit", "/api/submit"),
        ("/привет", "/%D0%BF%D1%80%D0%B8%D0%B2%D0%B5%D1%82"),
    ])
    def test_requotes_decoded_path_without_raw_uri(self, decoded, expected):
        assert raw_request_path({}, decoded) == expected


class TestListeners:

    def test_listener_for(self):
        assert isinstance(listener_for(RelayConfig()), PlainListener)
        assert isinstance(listener_for(RelayConfig(listener="secure")), SecureListener)

    def test_missing_tls_material_is_fatal(self, tmp_path):
        with pytest.raises(TLSConfigurationError):
            build_ssl_context(str(tmp_path / "fullchain.pem"), str(tmp_path / "privkey.pem"))

    def test_garbage_tls_material_is_fatal(self, tmp_path):
        cert = tmp_path / "fullchain.pem"
        key = tmp_path / "privkey.pem"
        cert.write_text("not a certificate")
        key.write_text("not a key")

        with pytest.raises(TLSConfigurationError):
            build_ssl_context(str(cert), str(key))

    @patch("brief_relay.server.make_server")
    def test_secure_listener_fails_before_binding(self, mock_make_server, tmp_path):
        config = RelayConfig(
            listener="secure",
            tls_cert_path=str(tmp_path / "missing.pem"),
            tls_key_path=str(tmp_path / "missing-key.pem"),
        )

        with pytest.raises(TLSConfigurationError):
            SecureListener(config).build_servers(app=object())

        mock_make_server.assert_not_called()

    @patch("brief_relay.server.build_ssl_context")
    @patch("brief_relay.server.make_server")
    def test_secure_listener_builds_https_and_redirect_servers(self, mock_make_server, mock_ssl):
        config = RelayConfig(listener="secure", https_port=8443, http_port=8000)
        app = object()

        SecureListener(config).build_servers(app)

        https_call, http_call = mock_make_server.call_args_list
        assert https_call.args[1:3] == (8443, app)
        assert https_call.kwargs["ssl_context"] is mock_ssl.return_value
        assert http_call.args[1] == 8000
        assert http_call.args[2] is not app
        assert "ssl_context" not in http_call.kwargs

    @patch("brief_relay.server.make_server")
    def test_plain_listener_uses_configured_port(self, mock_make_server):
        app = object()

        PlainListener(RelayConfig(port=5174)).build_servers(app)

        mock_make_server.assert_called_once_with("0.0.0.0", 5174, app, threaded=True)
