"""
Remix Studio Storage Module

Workspace persistence: the load/save contract, the JSON file store and the
debounced saver.
"""

from .workspace_store import (
    DebouncedWorkspaceSaver,
    JsonWorkspaceStore,
    StoredWorkspace,
    WorkspacePersistence,
    normalize_owner,
)

__all__ = [
    'WorkspacePersistence',
    'JsonWorkspaceStore',
    'StoredWorkspace',
    'DebouncedWorkspaceSaver',
    'normalize_owner',
]
