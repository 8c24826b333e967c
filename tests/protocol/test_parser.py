"""
Unit tests for raw request/response text parsing.
"""

import pytest

from templar.core.exceptions import MalformedRequestError
from templar.protocol.parser import (
    RawRequestParser,
    RawResponseParser,
    parse_raw_request,
    parse_raw_response,
)


class TestRawRequestParser:
    """Tests for request text parsing."""

    def test_parse_simple_get(self):
        """Test the GET ping scenario."""
        request = parse_raw_request("GET http://localhost:8080/ping")

        assert request.method == "GET"
        assert request.url == "http://localhost:8080/ping"
        assert request.headers == []
        assert request.body is None

    def test_parse_post_with_header_and_body(self):
        """Test the POST items scenario."""
        text = 'POST http://x/items\nContent-Type: application/json\n\n{"id":7}'

        request = parse_raw_request(text)

        assert request.method == "POST"
        assert request.url == "http://x/items"
        assert request.headers == [("Content-Type", "application/json")]
        assert request.body == b'{"id":7}'

    def test_method_is_case_insensitive(self):
        """Test that lower-case verbs are normalized."""
        assert parse_raw_request("delete http://x/1").method == "DELETE"

    def test_crlf_line_endings(self):
        """Test parsing CRLF-terminated text."""
        text = "PUT http://x/1\r\nAccept: */*\r\nX-Trace: 1\r\n\r\nbody"

        request = parse_raw_request(text)

        assert request.headers == [("Accept", "*/*"), ("X-Trace", "1")]
        assert request.body == b"body"

    def test_leading_blank_lines_ignored(self):
        """Test that blank lines before the request line are skipped."""
        request = parse_raw_request("\n  \r\n\nGET http://x/\nAccept: text/plain")

        assert request.method == "GET"
        assert request.headers == [("Accept", "text/plain")]

    def test_header_whitespace_trimmed(self):
        """Test that header names and values are trimmed."""
        request = parse_raw_request("GET http://x/\n  X-Name  :   some value  ")
        assert request.headers == [("X-Name", "some value")]

    def test_header_value_may_contain_colons(self):
        """Test that only the first colon separates name and value."""
        request = parse_raw_request("GET http://x/\nReferer: http://y:81/a")
        assert request.headers == [("Referer", "http://y:81/a")]

    def test_duplicate_headers_preserved(self):
        """Test that repeated headers stay separate and ordered."""
        request = parse_raw_request("GET http://x/\nX-A: 1\nX-B: 2\nX-A: 3")

        assert request.headers == [("X-A", "1"), ("X-B", "2"), ("X-A", "3")]
        assert request.header_values("x-a") == ["1", "3"]

    def test_body_is_verbatim(self):
        """Test that the body keeps blank lines and trailing whitespace."""
        text = "POST http://x/\n\nline one\n\nline: three  \n"

        request = parse_raw_request(text)

        assert request.body == b"line one\n\nline: three  \n"

    def test_text_ending_at_blank_line_has_no_body(self):
        """Test that a trailing blank line yields no body."""
        assert parse_raw_request("GET http://x/\nAccept: */*\n\n").body is None

    def test_trailing_version_token_accepted(self):
        """Test that 'HTTP/1.1' after the URL is ignored."""
        request = parse_raw_request("GET http://x/ HTTP/1.1")
        assert request.url == "http://x/"

    def test_body_encoded_as_utf8(self):
        """Test non-ASCII bodies."""
        request = parse_raw_request("POST http://x/\n\nhé ✓")
        assert request.body == "hé ✓".encode("utf-8")

    @pytest.mark.parametrize(
        "text, message",
        [
            ("", "Empty request"),
            ("  \n\r\n ", "Empty request"),
            ("GET", "Missing URL"),
            ("GET   \nAccept: */*", "Missing URL"),
            ("FETCH http://x/", "Unrecognized HTTP method"),
            ("GET http://x/ extra token", "Invalid request line"),
            ("GET http://x/\nAccept text/html", "Invalid header line"),
            ("GET http://x/\n: value", "Empty header name"),
        ],
    )
    def test_malformed_requests(self, text, message):
        with pytest.raises(MalformedRequestError, match=message):
            RawRequestParser.parse(text)

    def test_error_reports_line_number(self):
        """Test that header errors report their line."""
        with pytest.raises(MalformedRequestError) as exc_info:
            parse_raw_request("\nGET http://x/\nAccept: */*\nbroken")

        assert exc_info.value.line == 4


class TestRawResponseParser:
    """Tests for response text parsing."""

    def test_parse_response(self):
        text = "HTTP/1.1 404 Not Found\nContent-Type: text/plain\n\nmissing"

        response = parse_raw_response(text)

        assert response.version == "HTTP/1.1"
        assert response.status_code == 404
        assert response.reason == "Not Found"
        assert response.headers == [("Content-Type", "text/plain")]
        assert response.body == b"missing"

    def test_parse_response_without_reason(self):
        response = RawResponseParser.parse("HTTP/2 204")

        assert response.status_code == 204
        assert response.reason == ""
        assert response.body is None

    @pytest.mark.parametrize(
        "text",
        [
            "GET http://x/",
            "HTTP/1.1",
            "HTTP/1.1 abc OK",
            "HTTP/1.1 999 Nope",
            "HTTP/1.1 ²²² OK\n",
            "HTTP/1.1 ٢٠٠ OK",
            "HTTP/1.1 2000 OK",
        ],
    )
    def test_malformed_responses(self, text):
        with pytest.raises(MalformedRequestError):
            parse_raw_response(text)
