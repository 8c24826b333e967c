"""
Workspace

Aggregate root holding the ordered request templates and environments of one
project. Identifiers are assigned monotonically and never reused, so a stale id
always misses instead of aliasing a newer entity.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..core.exceptions import NotFoundError, StorageError
from ..core.logging import get_logger
from ..core.models import Environment, Request, WorkspaceDocument

logger = get_logger(__name__)

DEFAULT_REQUEST_NAME = "Untitled"
DEFAULT_ENVIRONMENT_NAME = "Dev"


class Workspace:
    """
    Ordered collection of requests and environments.

    Accessors hand out deep copies; every mutation goes through a method that
    addresses the entity by id.
    """

    def __init__(self, name: str = "Templar"):
        self.name = name
        self._requests: List[Request] = []
        self._environments: List[Environment] = []
        self._next_request_id = 1
        self._next_environment_id = 1

    # Requests

    @property
    def requests(self) -> List[Request]:
        """Snapshot of all requests in display order."""
        return [request.model_copy(deep=True) for request in self._requests]

    def request(self, request_id: int) -> Request:
        """
        Get a request by ID.

        Raises:
            NotFoundError: If no request has this ID
        """
        return self._find_request(request_id).model_copy(deep=True)

    def create_request(self, name: str = DEFAULT_REQUEST_NAME) -> Request:
        """
        Create an empty request at the end of the list.

        Args:
            name: Display name

        Returns:
            Snapshot of the created request
        """
        request = Request(id=self._next_request_id, name=name, template="")
        self._next_request_id += 1
        self._requests.append(request)
        logger.info(f"Created request {request.id} ({name!r})")
        return request.model_copy(deep=True)

    def delete_request(self, request_id: int) -> bool:
        """
        Delete a request.

        Returns:
            True if the request was deleted, False if not found
        """
        for index, request in enumerate(self._requests):
            if request.id == request_id:
                del self._requests[index]
                logger.info(f"Deleted request {request_id}")
                return True
        logger.warning(f"Cannot delete request {request_id}: not found")
        return False

    def set_request_name(self, request_id: int, name: str) -> bool:
        """Rename a request; returns False (and changes nothing) if not found."""
        request = self._lookup_request(request_id, "rename")
        if request is None:
            return False
        request.name = name
        return True

    def set_request_template(self, request_id: int, template: str) -> bool:
        """Replace a request's template; returns False if not found."""
        request = self._lookup_request(request_id, "update template of")
        if request is None:
            return False
        request.template = template
        logger.debug(f"Saved template of request {request_id}")
        return True

    def _find_request(self, request_id: int) -> Request:
        for request in self._requests:
            if request.id == request_id:
                return request
        raise NotFoundError(f"Request {request_id} not found", {"id": request_id})

    def _lookup_request(self, request_id: int, action: str) -> Optional[Request]:
        try:
            return self._find_request(request_id)
        except NotFoundError:
            logger.warning(f"Cannot {action} request {request_id}: not found")
            return None

    # Environments

    @property
    def environments(self) -> List[Environment]:
        """Snapshot of all environments in creation order."""
        return [env.model_copy(deep=True) for env in self._environments]

    def environment(self, environment_id: int) -> Environment:
        """
        Get an environment by ID.

        Raises:
            NotFoundError: If no environment has this ID
        """
        return self._find_environment(environment_id).model_copy(deep=True)

    def find_environment(self, name: str) -> Optional[Environment]:
        """Get the first environment called ``name``, if any."""
        for env in self._environments:
            if env.name == name:
                return env.model_copy(deep=True)
        return None

    def create_environment(self, name: str) -> Environment:
        """
        Create an empty environment.

        Args:
            name: Environment name

        Returns:
            Snapshot of the created environment
        """
        env = Environment(id=self._next_environment_id, name=name)
        self._next_environment_id += 1
        self._environments.append(env)
        logger.info(f"Created environment {env.id} ({env.name!r})")
        return env.model_copy(deep=True)

    def set_environ(self, environment_id: int, environment: Environment) -> bool:
        """
        Replace a stored environment's name and variables wholesale.

        The stored id is kept whatever ``environment.id`` says.

        Returns:
            True if updated, False if not found
        """
        for index, stored in enumerate(self._environments):
            if stored.id == environment_id:
                self._environments[index] = Environment(
                    id=environment_id,
                    name=environment.name,
                    variables=dict(environment.variables),
                )
                logger.info(f"Saved environment {environment_id} ({environment.name!r})")
                return True
        logger.warning(f"Cannot save environment {environment_id}: not found")
        return False

    def delete_environment(self, environment_id: int) -> bool:
        """Delete an environment; returns False if not found."""
        for index, env in enumerate(self._environments):
            if env.id == environment_id:
                del self._environments[index]
                logger.info(f"Deleted environment {environment_id}")
                return True
        logger.warning(f"Cannot delete environment {environment_id}: not found")
        return False

    def ensure_default_environment(
        self, name: str = DEFAULT_ENVIRONMENT_NAME
    ) -> Environment:
        """Create an environment called ``name`` if the workspace has none."""
        if self._environments:
            return self._environments[0].model_copy(deep=True)
        return self.create_environment(name)

    def _find_environment(self, environment_id: int) -> Environment:
        for env in self._environments:
            if env.id == environment_id:
                return env
        raise NotFoundError(
            f"Environment {environment_id} not found", {"id": environment_id}
        )

    # Persistence

    def serialize(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible document."""
        document = WorkspaceDocument(
            name=self.name,
            next_request_id=self._next_request_id,
            next_environment_id=self._next_environment_id,
            requests=self._requests,
            environments=self._environments,
        )
        return document.model_dump(mode="json")

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "Workspace":
        """
        Create from a document produced by ``serialize``.

        Raises:
            StorageError: If the document is invalid
        """
        try:
            document = WorkspaceDocument.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Invalid workspace document: {e}") from e

        for kind, items in (
            ("request", document.requests),
            ("environment", document.environments),
        ):
            ids = [item.id for item in items]
            if len(ids) != len(set(ids)):
                raise StorageError(f"Invalid workspace document: duplicate {kind} ids")

        workspace = cls(name=document.name)
        workspace._requests = list(document.requests)
        workspace._environments = list(document.environments)
        workspace._next_request_id = max(
            [document.next_request_id] + [r.id + 1 for r in document.requests]
        )
        workspace._next_environment_id = max(
            [document.next_environment_id] + [e.id + 1 for e in document.environments]
        )
        return workspace

    def __repr__(self) -> str:
        return (
            f"Workspace(name={self.name!r}, requests={len(self._requests)}, "
            f"environments={len(self._environments)})"
        )
