"""
Templar Workspace

Request templates, environments and their persistence.
"""

from .store import WorkspaceStore
from .workspace import Workspace

__all__ = ["Workspace", "WorkspaceStore"]
