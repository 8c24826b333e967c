"""
Request Transcript

Running log of executed requests and the responses (or errors) they produced.
"""

from pathlib import Path
from typing import List, Optional

from ..core.exceptions import StorageError
from ..core.logging import get_logger

logger = get_logger(__name__)

REQUEST_MARKER = ">>> New Request"
RESPONSE_MARKER = "<<< Response ***"


class RequestTranscript:
    """
    Accumulates request/response entries as display text.

    Each entry is the marker line, the raw text and a trailing blank line, so
    the transcript reads the same whether it is shown on screen or tailed from
    a file.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        self._chunks: List[str] = []

    def record_request(self, text: str) -> None:
        self._append(REQUEST_MARKER, text)

    def record_response(self, text: str) -> None:
        self._append(RESPONSE_MARKER, text)

    def _append(self, marker: str, text: str) -> None:
        chunk = f"{marker}\n{text}\n\n"
        self._chunks.append(chunk)
        logger.debug(f"{marker} ({len(text)} chars)")

        if self.path is not None:
            try:
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(chunk)
            except OSError as e:
                raise StorageError(
                    f"Failed to append transcript to {self.path}: {e}"
                ) from e

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def clear(self) -> None:
        self._chunks.clear()
