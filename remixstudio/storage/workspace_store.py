"""
Remix Studio Workspace Storage

Load/save contract for workspace snapshots, a JSON-file implementation with
one file per owner, and a debounced saver that coalesces bursts of graph
mutations into a single write.
"""

import asyncio
import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from remixstudio.core.constants import DEFAULT_WORKSPACE_NAME, GUEST_OWNER_ID
from remixstudio.core.exceptions import GraphError, PersistenceError
from remixstudio.core.logging_config import get_logger
from remixstudio.graph.workspace_graph import WorkspaceGraph

logger = get_logger("storage.workspace")


def normalize_owner(owner_id: Optional[str]) -> str:
    """Blank owners share the guest workspace."""
    if owner_id and owner_id.strip():
        return owner_id.strip()
    return GUEST_OWNER_ID


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class StoredWorkspace:
    """Persisted workspace document."""
    id: str
    name: str = DEFAULT_WORKSPACE_NAME
    boards: List[dict] = field(default_factory=list)
    connectors: List[dict] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'name': self.name,
            'boards': self.boards,
            'connectors': self.connectors,
            'updatedAt': self.updated_at or _now(),
        }
        if self.created_at:
            data['createdAt'] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'StoredWorkspace':
        return cls(
            id=data.get('id') or GUEST_OWNER_ID,
            name=data.get('name') or DEFAULT_WORKSPACE_NAME,
            boards=data['boards'],
            connectors=data['connectors'],
            created_at=data.get('createdAt'),
            updated_at=data.get('updatedAt'),
        )

    def snapshot(self) -> dict:
        return {'boards': self.boards, 'connectors': self.connectors}

    def to_graph(self) -> WorkspaceGraph:
        return WorkspaceGraph.from_dict(self.snapshot())


class WorkspacePersistence(ABC):
    """Opaque load/save contract used by the API and CLI."""

    @abstractmethod
    async def load(self, owner_id: Optional[str]) -> Optional[StoredWorkspace]:
        """Stored workspace for ``owner_id``, or None when absent."""

    @abstractmethod
    async def save(self, owner_id: Optional[str], snapshot: dict, name: Optional[str] = None) -> StoredWorkspace:
        """Persist a ``{boards, connectors}`` snapshot."""

    async def load_graph(self, owner_id: Optional[str]) -> WorkspaceGraph:
        """Graph for ``owner_id``; an empty graph when nothing usable is stored."""
        stored = await self.load(owner_id)
        if stored is None:
            return WorkspaceGraph()
        try:
            return stored.to_graph()
        except (GraphError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Stored workspace for {normalize_owner(owner_id)} is invalid: {e}")
            return WorkspaceGraph()


class JsonWorkspaceStore(WorkspacePersistence):
    """One JSON document per owner under ``directory``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, owner_id: Optional[str]) -> Path:
        safe = re.sub(r'[^A-Za-z0-9_.-]', '_', normalize_owner(owner_id))
        return self.directory / f"workspace_{safe}.json"

    async def load(self, owner_id: Optional[str]) -> Optional[StoredWorkspace]:
        path = self.path_for(owner_id)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load workspace {path.name}: {e}")
            return None
        if (
            not isinstance(data, dict)
            or not isinstance(data.get('boards'), list)
            or not isinstance(data.get('connectors'), list)
        ):
            logger.warning(f"Workspace file {path.name} has an unexpected shape")
            return None
        return StoredWorkspace.from_dict(data)

    async def save(self, owner_id: Optional[str], snapshot: dict, name: Optional[str] = None) -> StoredWorkspace:
        owner = normalize_owner(owner_id)
        path = self.path_for(owner)
        existing = await self.load(owner)
        now = _now()
        stored = StoredWorkspace(
            id=owner,
            name=name if name and name.strip() else (existing.name if existing else DEFAULT_WORKSPACE_NAME),
            boards=list(snapshot.get('boards', [])),
            connectors=list(snapshot.get('connectors', [])),
            created_at=existing.created_at if existing and existing.created_at else now,
            updated_at=now,
        )
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(json.dumps(stored.to_dict(), indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise PersistenceError(f"Failed to write workspace {path}: {e}", {"owner": owner})
        logger.debug(f"Saved workspace for {owner} ({len(stored.boards)} boards)")
        return stored

    async def clear(self, owner_id: Optional[str]) -> bool:
        path = self.path_for(owner_id)
        if not path.exists():
            return False
        path.unlink()
        return True


class DebouncedWorkspaceSaver:
    """
    Coalesces saves per owner.

    Each ``schedule`` replaces the pending snapshot and restarts the delay, so
    a burst of mutations produces one write of the latest state.

    Usage:
        saver = DebouncedWorkspaceSaver(store, delay=1.0)
        saver.attach(graph, owner_id)
        ...
        await saver.flush()
    """

    def __init__(self, store: WorkspacePersistence, delay: float = 1.0):
        self.store = store
        self.delay = delay
        self._pending: Dict[str, dict] = {}
        self._timers: Dict[str, asyncio.Task] = {}
        self.write_count = 0

    def has_pending(self, owner_id: Optional[str] = None) -> bool:
        if owner_id is None:
            return bool(self._pending)
        return normalize_owner(owner_id) in self._pending

    def schedule(self, owner_id: Optional[str], snapshot: dict) -> None:
        owner = normalize_owner(owner_id)
        self._pending[owner] = snapshot
        timer = self._timers.pop(owner, None)
        if timer is not None:
            timer.cancel()
        self._timers[owner] = asyncio.get_running_loop().create_task(self._delayed_write(owner))

    def attach(self, graph: WorkspaceGraph, owner_id: Optional[str]) -> None:
        """Schedule a save after every mutation of ``graph``."""
        graph.add_listener(lambda g: self.schedule(owner_id, g.to_dict()))

    async def _delayed_write(self, owner: str) -> None:
        await asyncio.sleep(self.delay)
        self._timers.pop(owner, None)
        await self._write(owner)

    async def _write(self, owner: str) -> None:
        snapshot = self._pending.pop(owner, None)
        if snapshot is None:
            return
        try:
            await self.store.save(owner, snapshot)
            self.write_count += 1
        except PersistenceError as e:
            logger.error(f"Debounced save failed for {owner}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error in debounced save for {owner}: {e}")

    async def flush(self, owner_id: Optional[str] = None) -> None:
        """Write pending snapshots now (all owners when ``owner_id`` is None)."""
        owners = [normalize_owner(owner_id)] if owner_id is not None else list(self._pending)
        for owner in owners:
            timer = self._timers.pop(owner, None)
            if timer is not None:
                timer.cancel()
            await self._write(owner)
