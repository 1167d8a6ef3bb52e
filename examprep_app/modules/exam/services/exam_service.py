"""Exam orchestration: sessions in the registry, results into history and the memory model."""

from __future__ import annotations

import datetime
import logging
import random
from typing import Optional

from flask import current_app

from examprep_app.core.extensions import db
from examprep_app.modules.catalog.services.catalog_service import CatalogService
from examprep_app.modules.profile.services.profile_storage import get_profile_storage
from examprep_app.modules.shared.utils.db_session import safe_commit
from examprep_app.modules.shared.utils.time_utils import utcnow
from ..config import ExamDefaultConfig
from ..engine.core import ExamEngine
from ..schemas import ExamConfig, ExamResult, ExamSession, UserAnswer
from ..signals import exam_completed
from .session_registry import ExamSessionRegistry

logger = logging.getLogger(__name__)


class ExamService:

    @staticmethod
    def get_default_config() -> ExamConfig:
        """Saved learner preference, else the app default quotas."""
        saved = get_profile_storage().load_exam_config()
        if saved is not None:
            return saved
        quotas = current_app.config.get('DEFAULT_QUESTIONS_PER_SECTION') or ExamDefaultConfig.DEFAULT_QUESTIONS_PER_SECTION
        return ExamConfig(
            questions_per_section=dict(quotas),
            shuffle_questions=ExamDefaultConfig.DEFAULT_SHUFFLE_QUESTIONS,
        )

    @staticmethod
    def save_default_config(config: ExamConfig) -> None:
        get_profile_storage().save_exam_config(config)

    @staticmethod
    def start_exam(
        user_id: str,
        config: Optional[ExamConfig] = None,
        now: Optional[datetime.datetime] = None,
        rng: Optional[random.Random] = None
    ) -> ExamSession:
        session = ExamEngine.create_exam_session(
            CatalogService.get_catalog(),
            config or ExamService.get_default_config(),
            user_id,
            now=now,
            rng=rng,
        )
        ExamSessionRegistry.current().add(session)
        logger.info("Exam %s started for %s with %d questions", session.id, user_id, len(session.questions))
        return session

    @staticmethod
    def get_session(session_id: str) -> ExamSession:
        return ExamSessionRegistry.current().get(session_id)

    @staticmethod
    def answer(
        session_id: str,
        question_id: str,
        selected_answer: Optional[str],
        now: Optional[datetime.datetime] = None
    ) -> UserAnswer:
        session = ExamSessionRegistry.current().get(session_id)
        return ExamEngine.record_answer(session, question_id, selected_answer, now)

    @staticmethod
    def complete(
        session_id: str,
        update_memory: bool = ExamDefaultConfig.FEED_MEMORY_MODEL_ON_COMPLETE,
        now: Optional[datetime.datetime] = None
    ) -> ExamResult:
        """
        Score the session, append it to history and drop it from the registry.
        With ``update_memory`` every answered question is also fed to the
        memory model of the session's learner.

        History and reviews commit together. On failure nothing is written
        and the session stays in the registry so it can be completed again.
        """
        from examprep_app.modules.fsrs.services.scheduler_service import SchedulerService

        registry = ExamSessionRegistry.current()
        session = registry.get(session_id)
        now = now or utcnow()

        result = ExamEngine.complete_exam(session, CatalogService.get_catalog(), now)
        try:
            get_profile_storage().add_to_history(result, session.config, commit=False)
            reviewed = SchedulerService.stage_exam_result(session.user_id, session, now) if update_memory else []
            safe_commit(db.session)
        except Exception:
            db.session.rollback()
            logger.exception("Completing exam %s failed, nothing was recorded", session.id)
            raise

        registry.pop(session_id)
        SchedulerService.announce_reviews(reviewed)
        exam_completed.send(ExamService, session_id=session.id, user_id=session.user_id, result=result)
        return result
