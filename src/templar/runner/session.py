"""
Run Session

Wires the pipeline together: a workspace request is compiled against the
caller's environment, parsed, executed and serialized back to raw text. The
current environment and request are always explicit arguments.
"""

import asyncio
from typing import Any, Optional

from ..core.exceptions import (
    MalformedRequestError,
    NetworkError,
    TemplarException,
    format_error,
)
from ..core.logging import get_logger
from ..core.models import Environment
from ..protocol.formatter import format_response
from ..protocol.parser import parse_raw_request
from ..template.compiler import TemplateCompiler
from ..workspace.workspace import Workspace
from .engine import RequestRunner
from .transcript import RequestTranscript

logger = get_logger(__name__)


class RunSession:
    """
    Compile-and-execute front end used by the CLI (or any other caller).

    ``compile_request`` and ``execute_compiled`` raise the pipeline's errors;
    ``run_request`` turns every recoverable error into labeled text returned
    in place of the response.
    """

    def __init__(
        self,
        workspace: Workspace,
        runner: Optional[RequestRunner] = None,
        transcript: Optional[RequestTranscript] = None,
        compiler: Optional[TemplateCompiler] = None,
    ):
        self.workspace = workspace
        self._owns_runner = runner is None
        self.runner = runner if runner is not None else RequestRunner()
        self.transcript = transcript if transcript is not None else RequestTranscript()
        self.compiler = compiler if compiler is not None else TemplateCompiler()

    async def __aenter__(self) -> "RunSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the runner if this session created it."""
        if self._owns_runner:
            await self.runner.close()

    def compile_request(self, request_id: int, environment: Environment) -> str:
        """
        Compile a workspace request.

        Args:
            request_id: ID of the request to compile
            environment: Environment resolving the template's variables

        Returns:
            Compiled request text

        Raises:
            NotFoundError: If the request does not exist
            CompilationError: If the template cannot be rendered
        """
        request = self.workspace.request(request_id)
        compiled = self.compiler.compile(request.template, environment)
        logger.debug(
            f"Compiled request {request_id} ({request.name!r}) "
            f"with environment {environment.name!r}"
        )
        return compiled

    async def execute_compiled(
        self,
        text: str,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> str:
        """
        Parse and execute compiled request text.

        Returns:
            Raw response text

        Raises:
            MalformedRequestError: If the text does not parse as a request
            NetworkError: If the round trip fails
        """
        request = parse_raw_request(text)
        response = await self.runner.execute(request, timeout=timeout, cancel=cancel)
        return format_response(response)

    async def run_request(
        self,
        request_id: int,
        environment: Environment,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> str:
        """
        Compile, execute and record a workspace request.

        Returns:
            Raw response text, or a labeled error message when any stage fails
        """
        try:
            compiled = self.compile_request(request_id, environment)
        except TemplarException as e:
            logger.warning(f"Request {request_id} not compiled: {e}")
            output = format_error(e)
            self.transcript.record_response(output)
            return output

        self.transcript.record_request(compiled)
        try:
            output = await self.execute_compiled(compiled, timeout, cancel)
        except (MalformedRequestError, NetworkError) as e:
            output = format_error(e)

        self.transcript.record_response(output)
        return output
