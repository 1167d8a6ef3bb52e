"""In-flight exam sessions, keyed by session id, one registry per app."""

from __future__ import annotations

import threading
from typing import Dict, Optional

from flask import current_app

from ..exceptions import SessionNotFoundError
from ..schemas import ExamSession

EXTENSION_KEY = 'examprep_exam_sessions'


class ExamSessionRegistry:
    """A session handle is its id; completed sessions are dropped."""

    def __init__(self):
        self._sessions: Dict[str, ExamSession] = {}
        self._lock = threading.Lock()

    def add(self, session: ExamSession) -> ExamSession:
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> ExamSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def pop(self, session_id: str) -> Optional[ExamSession]:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)

    @staticmethod
    def init_app(app) -> None:
        app.extensions[EXTENSION_KEY] = ExamSessionRegistry()

    @staticmethod
    def current() -> 'ExamSessionRegistry':
        registry = current_app.extensions.get(EXTENSION_KEY)
        if registry is None:
            registry = current_app.extensions[EXTENSION_KEY] = ExamSessionRegistry()
        return registry
