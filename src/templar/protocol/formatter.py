"""
Raw HTTP Text Formatting

Serializes structured requests and responses back into the line-oriented text
form read by the parser, so both directions of the exchange can be displayed
and logged the same way.
"""

from typing import List, Optional

from ..core.models import Header, HTTPRequest, HTTPResponse


def _decode_body(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def _assemble(
    start_line: str, headers: List[Header], body: Optional[bytes], include_body: bool
) -> str:
    lines = [start_line]
    for key, value in headers:
        lines.append(f"{key}: {value}")

    text = "\n".join(lines)
    if include_body and body is not None:
        text += "\n\n" + _decode_body(body)
    return text


class HTTPFormatter:
    """Formatter for structured HTTP requests and responses."""

    @staticmethod
    def format_request(request: HTTPRequest, include_body: bool = True) -> str:
        """
        Format an HTTPRequest as raw request text.

        Args:
            request: HTTPRequest object to format
            include_body: Whether to include the request body

        Returns:
            Text that ``parse_raw_request`` turns back into an equal request
        """
        return _assemble(
            f"{request.method} {request.url}",
            request.headers,
            request.body,
            include_body,
        )

    @staticmethod
    def format_response(response: HTTPResponse, include_body: bool = True) -> str:
        """
        Format an HTTPResponse as raw response text.

        Args:
            response: HTTPResponse object to format
            include_body: Whether to include the response body

        Returns:
            Status line, headers, blank line and body
        """
        status_line = f"{response.version} {response.status_code} {response.reason}"
        return _assemble(
            status_line.rstrip(), response.headers, response.body, include_body
        )


def format_request(request: HTTPRequest, include_body: bool = True) -> str:
    return HTTPFormatter.format_request(request, include_body)


def format_response(response: HTTPResponse, include_body: bool = True) -> str:
    return HTTPFormatter.format_response(response, include_body)
