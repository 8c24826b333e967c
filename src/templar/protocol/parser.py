"""
Raw HTTP Text Parsing

Parses the line-oriented request/response text form:

    METHOD URL                 (or: HTTP/1.1 200 OK)
    Name: Value
    Name: Value

    body

CRLF and LF line endings are both accepted. Everything after the first blank
line is the body, verbatim.
"""

import re
from typing import Iterator, List, Optional, Tuple

from pydantic import ValidationError

from ..core.exceptions import MalformedRequestError
from ..core.models import Header, HTTPMethod, HTTPRequest, HTTPResponse

_EOL_RE = re.compile(r"\r?\n")
_STATUS_CODE_RE = re.compile(r"[0-9]{3}")

# (line number, line without its terminator, offset just past the terminator)
_Line = Tuple[int, str, int]


def _iter_lines(text: str) -> Iterator[_Line]:
    pos = 0
    lineno = 1
    while pos < len(text):
        match = _EOL_RE.search(text, pos)
        if match is None:
            yield lineno, text[pos:], len(text)
            return
        yield lineno, text[pos : match.start()], match.end()
        pos = match.end()
        lineno += 1


def _first_line(text: str, lines: Iterator[_Line]) -> _Line:
    """Skip leading blank lines and return the start line."""
    if not text or not text.strip():
        raise MalformedRequestError("Empty request")
    for entry in lines:
        if entry[1].strip():
            return entry
    raise MalformedRequestError("Empty request")


def _parse_header_block(
    text: str, lines: Iterator[_Line]
) -> Tuple[List[Header], Optional[bytes]]:
    headers: List[Header] = []
    for lineno, line, offset in lines:
        if not line.strip():
            body = text[offset:]
            return headers, body.encode("utf-8") if body else None

        if ":" not in line:
            raise MalformedRequestError(f"Invalid header line: {line!r}", line=lineno)

        name, value = line.split(":", 1)
        name = name.strip()
        if not name:
            raise MalformedRequestError(f"Empty header name: {line!r}", line=lineno)
        headers.append((name, value.strip()))

    return headers, None


class RawRequestParser:
    """Parser for compiled request text."""

    @staticmethod
    def parse(text: str) -> HTTPRequest:
        """
        Parse compiled request text into an HTTPRequest.

        Args:
            text: Compiled request text

        Returns:
            HTTPRequest object

        Raises:
            MalformedRequestError: If the text is not a valid request
        """
        lines = _iter_lines(text)
        lineno, request_line, _ = _first_line(text, lines)
        method, url = RawRequestParser.parse_request_line(request_line, lineno)
        headers, body = _parse_header_block(text, lines)
        return HTTPRequest(method=method, url=url, headers=headers, body=body)

    @staticmethod
    def parse_request_line(line: str, lineno: Optional[int] = None) -> Tuple[str, str]:
        """
        Parse a request line.

        Args:
            line: Request line, e.g. ``GET http://localhost/ping``; a trailing
                ``HTTP/x.y`` token is accepted and ignored
            lineno: Line number used in error messages

        Returns:
            Tuple of (method, url)

        Raises:
            MalformedRequestError: If parsing fails
        """
        parts = line.split()
        if len(parts) < 2:
            raise MalformedRequestError(
                f"Missing URL in request line: {line.strip()!r}", line=lineno
            )
        if len(parts) > 3 or (len(parts) == 3 and not parts[2].startswith("HTTP/")):
            raise MalformedRequestError(
                f"Invalid request line: {line.strip()!r}", line=lineno
            )

        method = parts[0].upper()
        if method not in HTTPMethod.names():
            raise MalformedRequestError(
                f"Unrecognized HTTP method: {parts[0]!r}", line=lineno
            )
        return method, parts[1]


class RawResponseParser:
    """Parser for raw response text, the inverse of ``format_response``."""

    @staticmethod
    def parse(text: str) -> HTTPResponse:
        """
        Parse raw response text into an HTTPResponse.

        Raises:
            MalformedRequestError: If the text is not a valid response
        """
        lines = _iter_lines(text)
        lineno, status_line, _ = _first_line(text, lines)

        parts = status_line.strip().split(None, 2)
        if len(parts) < 2 or not parts[0].startswith("HTTP/"):
            raise MalformedRequestError(
                f"Invalid status line: {status_line.strip()!r}", line=lineno
            )
        if not _STATUS_CODE_RE.fullmatch(parts[1]):
            raise MalformedRequestError(
                f"Invalid status code: {parts[1]!r}", line=lineno
            )

        headers, body = _parse_header_block(text, lines)
        try:
            return HTTPResponse(
                version=parts[0],
                status_code=int(parts[1]),
                reason=parts[2] if len(parts) > 2 else "",
                headers=headers,
                body=body,
            )
        except ValidationError as e:
            raise MalformedRequestError(
                f"Invalid status code: {parts[1]!r}", line=lineno
            ) from e


def parse_raw_request(text: str) -> HTTPRequest:
    """Parse compiled request text."""
    return RawRequestParser.parse(text)


def parse_raw_response(text: str) -> HTTPResponse:
    """Parse raw response text."""
    return RawResponseParser.parse(text)
