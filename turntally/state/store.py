"""
Persistence storage abstraction.

Separates persistence from domain logic for testability.
Collections are read and written whole (get-all / replace-all);
the in-progress session lives in its own single slot.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, TypeAdapter, ValidationError

from .schema import Game, Player, QuickStartData, Session

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    GAME = "games"
    PLAYER = "players"
    SESSION = "sessions"


ENTITY_MODELS: dict[EntityKind, type[BaseModel]] = {
    EntityKind.GAME: Game,
    EntityKind.PLAYER: Player,
    EntityKind.SESSION: Session,
}

_ADAPTERS = {kind: TypeAdapter(list[model]) for kind, model in ENTITY_MODELS.items()}


@runtime_checkable
class PersistenceStore(Protocol):
    """
    Abstract storage interface for TurnTally.

    Implementations:
    - JsonStore: File-based persistence (production)
    - MemoryStore: In-memory storage (testing)

    Callers own the returned objects; nothing is committed until
    replace_all() / set_current() is called.
    """

    def get_all(self, kind: EntityKind) -> list:
        """All entities of a kind. Empty list if none were ever stored."""
        ...

    def replace_all(self, kind: EntityKind, items: list) -> None:
        """Replace the whole collection."""
        ...

    def get_current(self) -> Session | None:
        """The in-progress session, if any."""
        ...

    def set_current(self, session: Session | None) -> None:
        """Store the in-progress session, or clear the slot with None."""
        ...

    def get_quick_start(self) -> QuickStartData:
        ...

    def set_quick_start(self, data: QuickStartData) -> None:
        ...


class JsonStore:
    """
    File-based storage using one JSON file per collection.

    Features:
    - Automatic backup of the previous file on write
    - Missing or corrupted files read as empty
    """

    CURRENT_FILE = "current_session.json"
    QUICK_START_FILE = "quick_start.json"

    def __init__(self, data_dir: Path | str = "data"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def _read(self, path: Path):
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Unreadable store file {path.name}: {e}")
            return None

    def _write(self, path: Path, payload: str) -> None:
        # Backup previous save
        if path.exists():
            backup = path.with_suffix(".json.bak")
            backup.write_text(path.read_text(encoding="utf-8"), encoding="utf-8")
        path.write_text(payload, encoding="utf-8")

    def get_all(self, kind: EntityKind) -> list:
        data = self._read(self._path(f"{kind.value}.json"))
        if data is None:
            return []
        try:
            return _ADAPTERS[kind].validate_python(data)
        except ValidationError as e:
            logger.warning(f"Invalid {kind.value} collection, treating as empty: {e}")
            return []

    def replace_all(self, kind: EntityKind, items: list) -> None:
        payload = _ADAPTERS[kind].dump_json(list(items), indent=2).decode("utf-8")
        self._write(self._path(f"{kind.value}.json"), payload)

    def get_current(self) -> Session | None:
        data = self._read(self._path(self.CURRENT_FILE))
        if data is None:
            return None
        try:
            return Session.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid current session, ignoring: {e}")
            return None

    def set_current(self, session: Session | None) -> None:
        path = self._path(self.CURRENT_FILE)
        if session is None:
            if path.exists():
                path.unlink()
            return
        self._write(path, session.model_dump_json(indent=2))

    def get_quick_start(self) -> QuickStartData:
        data = self._read(self._path(self.QUICK_START_FILE))
        if data is None:
            return QuickStartData()
        try:
            return QuickStartData.model_validate(data)
        except ValidationError:
            # Corrupted file - start fresh
            return QuickStartData()

    def set_quick_start(self, data: QuickStartData) -> None:
        self._write(self._path(self.QUICK_START_FILE), data.model_dump_json(indent=2))


class MemoryStore:
    """
    In-memory storage for testing.

    No file I/O. Reads and writes deep-copy, so mutating a returned
    object has no effect until it is written back, same as JsonStore.
    """

    def __init__(self):
        self.collections: dict[EntityKind, list] = {kind: [] for kind in EntityKind}
        self.current: Session | None = None
        self.quick_start = QuickStartData()

    def get_all(self, kind: EntityKind) -> list:
        return [item.model_copy(deep=True) for item in self.collections[kind]]

    def replace_all(self, kind: EntityKind, items: list) -> None:
        self.collections[kind] = [item.model_copy(deep=True) for item in items]

    def get_current(self) -> Session | None:
        return self.current.model_copy(deep=True) if self.current else None

    def set_current(self, session: Session | None) -> None:
        self.current = session.model_copy(deep=True) if session else None

    def get_quick_start(self) -> QuickStartData:
        return self.quick_start.model_copy(deep=True)

    def set_quick_start(self, data: QuickStartData) -> None:
        self.quick_start = data.model_copy(deep=True)

    def clear(self) -> None:
        """Clear everything (test utility)."""
        self.collections = {kind: [] for kind in EntityKind}
        self.current = None
        self.quick_start = QuickStartData()
