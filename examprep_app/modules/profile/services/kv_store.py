"""Key-value persistence with the ``get`` / ``set`` / ``remove`` contract.

Values are opaque strings; callers choose the encoding (JSON throughout).
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from examprep_app.core.extensions import db
from examprep_app.modules.shared.utils.db_session import safe_commit
from ..models import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Backed by the ``kv_entries`` table. Writes commit unless ``commit=False``, which only flushes."""

    def get(self, key: str) -> Optional[str]:
        entry = db.session.get(KeyValueEntry, key)
        return entry.value if entry else None

    def set(self, key: str, value: str, commit: bool = True) -> None:
        entry = db.session.get(KeyValueEntry, key)
        if entry is None:
            db.session.add(KeyValueEntry(key=key, value=value))
        else:
            entry.value = value
        if commit:
            safe_commit(db.session)
        else:
            db.session.flush()

    def remove(self, key: str) -> None:
        entry = db.session.get(KeyValueEntry, key)
        if entry is not None:
            db.session.delete(entry)
            safe_commit(db.session)


class InMemoryKeyValueStore:
    """Same contract over a dict; for engines used without a database."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str, commit: bool = True) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
