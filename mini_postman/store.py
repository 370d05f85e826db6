"""
mini_postman/store.py

Saved templates and request history, held in memory and mirrored to JSON.

Both collections are loaded once when the store is built and written back
in full on every change. If a write fails, StoreError is raised and the
in-memory change is kept, so memory stays ahead of disk until the next write
succeeds.
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from .config import HISTORY_FILE, MAX_HISTORY_ITEMS, TEMPLATES_FILE, default_data_dir
from .exceptions import StoreError, StoreInitError
from .jsonfile import quarantine, write_atomic
from .models import HistoryEntry, RequestSpec, ResponseResult, Template, local_now

logger = logging.getLogger(__name__)

_TEMPLATES = TypeAdapter(list[Template])
_HISTORY = TypeAdapter(list[HistoryEntry])


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if not self._readers:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read(self):
        self.acquire_read()
        try: yield
        finally: self.release_read()

    @contextmanager
    def write(self):
        self.acquire_write()
        try: yield
        finally: self.release_write()


class RequestStore:
    """
    Thread-safe store for templates and history.

    Usage:
        store = RequestStore()              # ~/.mini_postman
        store = RequestStore(tmp_path)      # explicit directory
        result = executor.execute(spec)
        if not result.failed:
            store.add_history(spec, result)
    """

    def __init__(self, data_dir=None):
        try:
            self.data_dir = Path(data_dir) if data_dir is not None else default_data_dir()
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except (OSError, RuntimeError) as e:
            raise StoreInitError(f"Cannot create data directory: {e}") from e
        self._lock = ReadWriteLock()
        self._templates: list[Template] = sorted(self._load(TEMPLATES_FILE, _TEMPLATES), key=lambda t: t.name)
        self._history: list[HistoryEntry] = self._load(HISTORY_FILE, _HISTORY)[:MAX_HISTORY_ITEMS]

    def _load(self, filename: str, adapter: TypeAdapter) -> list:
        path = self.data_dir / filename
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreError(f"Failed to read {path}: {e}") from e
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            try:
                moved = quarantine(path)
            except OSError as qe:
                raise StoreError(f"{path} is corrupt and could not be moved aside: {qe}") from e
            logger.warning("Corrupt %s moved to %s; starting empty (%d error(s))",
                           filename, moved.name, e.error_count())
            return []

    def _persist(self, filename: str, adapter: TypeAdapter, items: list) -> None:
        path = self.data_dir / filename
        try:
            write_atomic(path, adapter.dump_json(items, indent=2, by_alias=True))
        except OSError as e:
            raise StoreError(f"Failed to save {filename}: {e}") from e
        logger.debug("Saved %d item(s) to %s", len(items), path)

    # Templates

    def list_templates(self) -> list[Template]:
        with self._lock.read():
            return [t.model_copy(deep=True) for t in self._templates]

    def save_template(self, name: str, spec: RequestSpec) -> Template:
        """Create a template, or replace the request of the one already using this name."""
        if not name or not name.strip():
            raise ValueError("Template name is required")
        now = local_now()
        with self._lock.write():
            for t in self._templates:
                if t.name == name:
                    t.request = spec.clone()
                    t.updated_at = now
                    saved = t
                    break
            else:
                saved = Template(name=name, request=spec.clone(), created_at=now, updated_at=now)
                self._templates.append(saved)
                self._templates.sort(key=lambda t: t.name)
            self._persist(TEMPLATES_FILE, _TEMPLATES, self._templates)
            return saved.model_copy(deep=True)

    def delete_template(self, template_id: str) -> None:
        with self._lock.write():
            for i, t in enumerate(self._templates):
                if t.id == template_id:
                    del self._templates[i]
                    self._persist(TEMPLATES_FILE, _TEMPLATES, self._templates)
                    return

    def template_exists(self, name: str) -> bool:
        with self._lock.read():
            return any(t.name == name for t in self._templates)

    def get_template(self, template_id: str) -> Template | None:
        with self._lock.read():
            for t in self._templates:
                if t.id == template_id:
                    return t.model_copy(deep=True)
        return None

    def export_templates(self, path) -> Path:
        with self._lock.read():
            payload = _TEMPLATES.dump_json(self._templates, indent=2, by_alias=True)
        return self._export(Path(path), payload)

    # History

    def list_history(self) -> list[HistoryEntry]:
        with self._lock.read():
            return [h.model_copy(deep=True) for h in self._history]

    def add_history(self, spec: RequestSpec, result: ResponseResult) -> HistoryEntry:
        entry = HistoryEntry(request=spec.clone(), response=result.model_copy(deep=True))
        with self._lock.write():
            self._history.insert(0, entry)
            del self._history[MAX_HISTORY_ITEMS:]
            self._persist(HISTORY_FILE, _HISTORY, self._history)
        return entry.model_copy(deep=True)

    def delete_history(self, entry_id: str) -> None:
        with self._lock.write():
            for i, h in enumerate(self._history):
                if h.id == entry_id:
                    del self._history[i]
                    self._persist(HISTORY_FILE, _HISTORY, self._history)
                    return

    def clear_history(self) -> None:
        with self._lock.write():
            self._history.clear()
            self._persist(HISTORY_FILE, _HISTORY, self._history)

    def get_history(self, entry_id: str) -> HistoryEntry | None:
        with self._lock.read():
            for h in self._history:
                if h.id == entry_id:
                    return h.model_copy(deep=True)
        return None

    def export_history(self, path) -> Path:
        with self._lock.read():
            payload = _HISTORY.dump_json(self._history, indent=2, by_alias=True)
        return self._export(Path(path), payload)

    def _export(self, path: Path, payload: bytes) -> Path:
        try:
            write_atomic(path, payload)
        except OSError as e:
            raise StoreError(f"Failed to export to {path}: {e}") from e
        logger.debug("Exported to %s", path)
        return path
