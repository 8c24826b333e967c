"""
Templar Raw HTTP Text Protocol

Parsing and formatting of the line-oriented request/response text form.
"""

from .formatter import HTTPFormatter, format_request, format_response
from .parser import (
    RawRequestParser,
    RawResponseParser,
    parse_raw_request,
    parse_raw_response,
)

__all__ = [
    "HTTPFormatter",
    "RawRequestParser",
    "RawResponseParser",
    "format_request",
    "format_response",
    "parse_raw_request",
    "parse_raw_response",
]
