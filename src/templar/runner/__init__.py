"""
Templar Request Runner

Network execution of structured requests and the compile-to-response pipeline.
"""

from .engine import RequestRunner, translate_client_error
from .session import RunSession
from .transcript import RequestTranscript

__all__ = [
    "RequestRunner",
    "RequestTranscript",
    "RunSession",
    "translate_client_error",
]
