"""Per-user conversation memory.

One record per user id, loaded at the start of a chat turn and written back at
the end. Read failures fall back to a fresh record; write failures are logged
and dropped so the reply still reaches the caller.
"""

import hashlib
import json
import logging
import os
import re
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

from .config import get_settings
from .models import ConversationRecord, Turn
from .prompts import persona

log = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def storage_key(user_id: str) -> str:
    """Filesystem-safe key for *user_id*.

    Plain ids are used verbatim; anything else is hashed. The dot in the
    hashed form can never appear in a verbatim key, so the two cannot collide.
    """
    if _SAFE_KEY.match(user_id):
        return user_id
    return "sha256." + hashlib.sha256(user_id.encode("utf-8")).hexdigest()


def default_record(user_id: str) -> ConversationRecord:
    return ConversationRecord(
        user_id=user_id,
        conversation=[Turn(role="system", content=persona())],
    )


def apply_retention(record: ConversationRecord, max_turns: Optional[int]) -> ConversationRecord:
    """Keep the leading system turn plus the newest *max_turns* turns."""
    if not max_turns or len(record.conversation) <= max_turns + 1:
        return record
    head, rest = record.conversation[0], record.conversation[1:]
    record.conversation = [head] + rest[-max_turns:]
    return record


class ConversationStore:
    """Key-value store of conversation records keyed by user id.

    Subclasses implement ``get``/``put`` over plain JSON-compatible dicts;
    ``load``/``save`` layer the record semantics on top.
    """

    def __init__(self, max_turns: Optional[int] = None):
        self.max_turns = max_turns
        # user id -> [lock, holders]; entries are dropped when the last holder leaves
        self._locks: Dict[str, list] = {}
        self._locks_guard = threading.Lock()

    def get(self, user_id: str) -> Optional[dict]:
        raise NotImplementedError

    def put(self, user_id: str, data: dict) -> None:
        raise NotImplementedError

    @contextmanager
    def lock(self, user_id: str) -> Iterator[None]:
        """Serialize load-modify-save cycles for one user within this process."""
        with self._locks_guard:
            entry = self._locks.setdefault(user_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[user_id]

    def load(self, user_id: str) -> ConversationRecord:
        try:
            data = self.get(user_id)
        except Exception as exc:
            log.warning("Failed to load memory for %s: %s", user_id, exc)
            data = None
        if data is None:
            return default_record(user_id)

        try:
            record = ConversationRecord.from_dict(data)
        except (ValueError, TypeError, AttributeError) as exc:
            log.warning("Discarding corrupt memory for %s: %s", user_id, exc)
            return default_record(user_id)

        record.user_id = user_id
        if not record.conversation or record.conversation[0].role != "system":
            record.conversation.insert(0, Turn(role="system", content=persona()))
        return record

    def save(self, user_id: str, record: ConversationRecord) -> None:
        apply_retention(record, self.max_turns)
        try:
            self.put(user_id, record.to_dict())
        except Exception as exc:
            log.warning("Failed to save memory for %s: %s", user_id, exc)


class FileConversationStore(ConversationStore):
    """One pretty-printed JSON file per user under *directory*."""

    def __init__(self, directory: Path, max_turns: Optional[int] = None):
        super().__init__(max_turns=max_turns)
        self.directory = Path(directory)

    def path_for(self, user_id: str) -> Path:
        return self.directory / f"memory_{storage_key(user_id)}.json"

    def get(self, user_id: str) -> Optional[dict]:
        path = self.path_for(user_id)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def put(self, user_id: str, data: dict) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(user_id)
        fd, tmp = tempfile.mkstemp(dir=str(self.directory), prefix=".memory_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


class InMemoryConversationStore(ConversationStore):
    def __init__(self, max_turns: Optional[int] = None):
        super().__init__(max_turns=max_turns)
        self._data: Dict[str, str] = {}

    def get(self, user_id: str) -> Optional[dict]:
        raw = self._data.get(user_id)
        return json.loads(raw) if raw is not None else None

    def put(self, user_id: str, data: dict) -> None:
        self._data[user_id] = json.dumps(data)


_default_store: Optional[FileConversationStore] = None


def get_store() -> FileConversationStore:
    """Process-wide file store on ``settings.memory_dir``.

    Rebuilt when the configured directory or turn cap changes so that per-user
    locks are shared by every request served by this process.
    """
    global _default_store
    settings = get_settings()
    if (
        _default_store is None
        or _default_store.directory != settings.memory_dir
        or _default_store.max_turns != settings.max_turns
    ):
        _default_store = FileConversationStore(settings.memory_dir, max_turns=settings.max_turns)
    return _default_store
