"""
Unit tests for raw request/response text formatting.
"""

from templar.core.models import HTTPRequest, HTTPResponse
from templar.protocol.formatter import HTTPFormatter, format_request, format_response


class TestHTTPFormatter:
    """Tests for HTTP text formatting."""

    def test_format_request_without_body(self):
        request = HTTPRequest(
            method="GET",
            url="http://localhost:8080/ping",
            headers=[("Accept", "*/*")],
        )

        assert format_request(request) == "GET http://localhost:8080/ping\nAccept: */*"

    def test_format_request_with_body(self):
        request = HTTPRequest(
            method="POST",
            url="http://x/items",
            headers=[("Content-Type", "application/json")],
            body=b'{"id":7}',
        )

        assert format_request(request) == (
            'POST http://x/items\nContent-Type: application/json\n\n{"id":7}'
        )

    def test_format_response(self):
        response = HTTPResponse(
            status_code=200,
            reason="OK",
            headers=[("Content-Type", "text/plain"), ("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")],
            body=b"pong",
        )

        assert format_response(response) == (
            "HTTP/1.1 200 OK\nContent-Type: text/plain\nSet-Cookie: a=1\n"
            "Set-Cookie: b=2\n\npong"
        )

    def test_format_response_without_reason_or_body(self):
        response = HTTPResponse(version="HTTP/2", status_code=204)
        assert format_response(response) == "HTTP/2 204"

    def test_exclude_body(self):
        response = HTTPResponse(status_code=200, reason="OK", body=b"data")
        assert HTTPFormatter.format_response(response, include_body=False) == "HTTP/1.1 200 OK"

    def test_undecodable_bytes_replaced(self):
        response = HTTPResponse(status_code=200, reason="OK", body=b"ok \xff\xfe!")
        assert format_response(response).endswith("\n\nok \ufffd\ufffd!")
