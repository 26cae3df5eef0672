"""Tests for health check and metrics endpoints."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from tls_rotator.health import create_combined_wsgi_app, start_metrics_server


def make_environ(path: str) -> dict:
    return {
        "REQUEST_METHOD": "GET",
        "PATH_INFO": path,
        "SCRIPT_NAME": "",
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8080",
        "wsgi.url_scheme": "http",
        "QUERY_STRING": "",
    }


class TestCombinedWsgiApp:
    """Test cases for the combined WSGI application."""

    def test_healthz(self):
        """Test /healthz endpoint."""
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        result = app(make_environ("/healthz"), start_response)

        assert b'"status":"ok"' in b"".join(result)
        assert "200" in start_response.call_args[0][0]

    def test_readyz(self):
        """Test /readyz endpoint."""
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        result = app(make_environ("/readyz"), start_response)

        assert b'"status":"ready"' in b"".join(result)
        assert "200" in start_response.call_args[0][0]

    @patch("tls_rotator.health.make_wsgi_app")
    def test_metrics_delegated(self, mock_make_wsgi_app):
        """Test that other paths are served by the prometheus app."""
        metrics_app = MagicMock(return_value=[b"metrics"])
        mock_make_wsgi_app.return_value = metrics_app
        app = create_combined_wsgi_app()
        environ = make_environ("/metrics")
        start_response = MagicMock()

        result = app(environ, start_response)

        assert result == [b"metrics"]
        metrics_app.assert_called_once_with(environ, start_response)


class TestStartMetricsServer:
    """Test cases for start_metrics_server function."""

    @patch("tls_rotator.health.threading.Thread")
    @patch("tls_rotator.health.make_server")
    def test_serves_from_daemon_thread(self, mock_make_server, mock_thread):
        """Test that the server runs in a daemon thread."""
        server = MagicMock()
        mock_make_server.return_value = server

        result = start_metrics_server(9090)

        assert result is server
        args, kwargs = mock_make_server.call_args
        assert args[:2] == ("", 9090)
        assert kwargs["threaded"] is True
        mock_thread.assert_called_once_with(target=server.serve_forever, daemon=True)
        mock_thread.return_value.start.assert_called_once()
