# File: examprep_app/modules/profile/services/profile_storage.py
"""
Profile, exam history, exam preferences and study progress on top of a
key-value store.

Stored values are JSON. A value that cannot be decoded, or decodes to the
wrong shape, reads as absent: the learner starts fresh instead of seeing an
error.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, List, Optional

from flask import current_app

from examprep_app.modules.exam.schemas import ExamConfig, ExamHistoryEntry, ExamResult
from examprep_app.modules.shared.utils.time_utils import utcnow
from ..schemas import UserProfile
from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

USER_PROFILE_KEY = 'examprep:user-profile'
EXAM_HISTORY_KEY = 'examprep:exam-history'
EXAM_CONFIG_KEY = 'examprep:exam-config'
STUDY_PROGRESS_KEY = 'examprep:study-progress:{profile_id}'

MAX_HISTORY_ENTRIES = 50

# Decoding failures that mean "corrupt value", as opposed to a bug
_MALFORMED = (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError)


class ProfileStorage:
    def __init__(self, store, max_history: int = MAX_HISTORY_ENTRIES):
        self.store = store
        self.max_history = max_history

    def _read_json(self, key: str) -> Any:
        raw = self.store.get(key)
        if not raw:
            return None
        return json.loads(raw)

    def _write_json(self, key: str, value: Any, commit: bool = True) -> None:
        self.store.set(key, json.dumps(value, ensure_ascii=False), commit=commit)

    # --- User profile ---

    @staticmethod
    def create_user_profile(name: str) -> UserProfile:
        now = utcnow()
        return UserProfile(id=uuid.uuid4().hex, name=name, created_at=now, last_active_at=now)

    def save_user_profile(self, profile: UserProfile) -> None:
        self._write_json(USER_PROFILE_KEY, profile.to_dict())

    def load_user_profile(self) -> Optional[UserProfile]:
        try:
            data = self._read_json(USER_PROFILE_KEY)
            return UserProfile.from_dict(data) if data is not None else None
        except _MALFORMED as e:
            logger.warning("Stored user profile is unreadable, ignoring it: %s", e)
            return None

    def update_last_active(self, profile: UserProfile) -> UserProfile:
        updated = UserProfile(
            id=profile.id,
            name=profile.name,
            created_at=profile.created_at,
            last_active_at=utcnow(),
        )
        self.save_user_profile(updated)
        return updated

    def clear_user_profile(self) -> None:
        self.store.remove(USER_PROFILE_KEY)

    # --- Exam history ---

    def save_exam_history(self, history: List[ExamHistoryEntry], commit: bool = True) -> None:
        """Persist the most recent ``max_history`` entries, oldest first."""
        trimmed = history[-self.max_history:] if self.max_history > 0 else []
        self._write_json(EXAM_HISTORY_KEY, [entry.to_dict() for entry in trimmed], commit=commit)

    def load_exam_history(self) -> List[ExamHistoryEntry]:
        try:
            data = self._read_json(EXAM_HISTORY_KEY)
            if data is None:
                return []
            return [ExamHistoryEntry.from_dict(item) for item in data]
        except _MALFORMED as e:
            logger.warning("Stored exam history is unreadable, starting empty: %s", e)
            return []

    def add_to_history(self, result: ExamResult, config: ExamConfig, commit: bool = True) -> ExamHistoryEntry:
        history = self.load_exam_history()
        entry = ExamHistoryEntry.from_result(result, config)
        history.append(entry)
        self.save_exam_history(history, commit=commit)
        return entry

    def get_user_history(self, user_id: str) -> List[ExamHistoryEntry]:
        return [entry for entry in self.load_exam_history() if entry.user_id == user_id]

    def clear_exam_history(self) -> None:
        self.store.remove(EXAM_HISTORY_KEY)

    # --- Exam preferences ---

    def save_exam_config(self, config: ExamConfig) -> None:
        self._write_json(EXAM_CONFIG_KEY, config.to_dict())

    def load_exam_config(self) -> Optional[ExamConfig]:
        try:
            data = self._read_json(EXAM_CONFIG_KEY)
            return ExamConfig.from_dict(data) if data is not None else None
        except _MALFORMED as e:
            logger.warning("Stored exam config is unreadable, ignoring it: %s", e)
            return None

    # --- Study progress ---

    def save_study_progress(self, profile_id: str, viewed_question_ids) -> None:
        # sorted so the stored text is stable
        self._write_json(STUDY_PROGRESS_KEY.format(profile_id=profile_id), sorted(set(viewed_question_ids)))

    def load_study_progress(self, profile_id: str) -> List[str]:
        try:
            data = self._read_json(STUDY_PROGRESS_KEY.format(profile_id=profile_id))
            if data is None:
                return []
            if not isinstance(data, list):
                raise TypeError(f'expected a list, got {type(data).__name__}')
            return [str(qid) for qid in data]
        except _MALFORMED as e:
            logger.warning("Stored study progress for %s is unreadable, starting empty: %s", profile_id, e)
            return []

    def clear_study_progress(self, profile_id: str) -> None:
        self.store.remove(STUDY_PROGRESS_KEY.format(profile_id=profile_id))


def get_profile_storage() -> ProfileStorage:
    """Storage bound to the app database and the configured history cap."""
    return ProfileStorage(
        KeyValueStore(),
        max_history=current_app.config.get('EXAM_HISTORY_MAX_ENTRIES', MAX_HISTORY_ENTRIES),
    )
