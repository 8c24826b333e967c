"""
Workspace Storage

Saves and loads workspaces as indented JSON documents, so workspace files stay
readable and hand-editable.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from ..core.config import get_workspace_path
from ..core.exceptions import StorageError
from ..core.logging import get_logger
from .workspace import Workspace

logger = get_logger(__name__)


class WorkspaceStore:
    """JSON file storage for a single workspace."""

    def __init__(self, path: Optional[Path] = None) -> None:
        """
        Initialize the store.

        Args:
            path: Workspace file path (uses config if None)
        """
        self.path = Path(path) if path else get_workspace_path()

    def exists(self) -> bool:
        return self.path.exists()

    def _write_json(self, path: Path, data: Any) -> None:
        """Write data to JSON file, replacing the target only once fully written."""
        temp_path = path.with_name(f".{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_path, path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write JSON to {path}: {e}") from e

    def _read_json(self, path: Path) -> Any:
        """Read data from JSON file with error handling."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise StorageError(f"File not found: {path}") from e
        except json.JSONDecodeError as e:
            raise StorageError(f"Invalid JSON in {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read JSON from {path}: {e}") from e

    def save(self, workspace: Workspace) -> None:
        """
        Save a workspace.

        Raises:
            StorageError: If writing fails
        """
        self._write_json(self.path, workspace.serialize())
        logger.info(f"Workspace {workspace.name!r} saved to {self.path}")

    def load(self) -> Workspace:
        """
        Load the workspace.

        Raises:
            StorageError: If the file is missing or invalid
        """
        data = self._read_json(self.path)
        if not isinstance(data, dict):
            raise StorageError(f"Invalid workspace document in {self.path}")
        workspace = Workspace.deserialize(data)
        logger.info(f"Workspace {workspace.name!r} loaded from {self.path}")
        return workspace

    def load_or_create(self, name: str = "Templar") -> Workspace:
        """Load the workspace, or return a new empty one if no file exists yet."""
        if self.exists():
            return self.load()
        logger.info(f"No workspace at {self.path}, starting {name!r}")
        return Workspace(name=name)
