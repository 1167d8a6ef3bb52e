from datetime import datetime, timezone

from examprep_app.core.extensions import db


class MemoryCardRecord(db.Model):
    """
    Persisted FSRS memory state of one (profile, question) pair.
    The primary key is the derived card id ``"{profile_id}_{question_id}"``.
    """
    __tablename__ = 'memory_cards'

    id = db.Column(db.String(255), primary_key=True)
    profile_id = db.Column(db.String(100), nullable=False, index=True)
    question_id = db.Column(db.String(100), nullable=False)

    # FSRS State
    state = db.Column(db.Integer, default=0, nullable=False)  # 0=New, 1=Learning, 2=Review, 3=Relearning
    stability = db.Column(db.Float, default=0.0, nullable=False)
    difficulty = db.Column(db.Float, default=0.0, nullable=False)

    # Scheduling
    due = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    last_review = db.Column(db.DateTime(timezone=True))
    elapsed_days = db.Column(db.Integer, default=0, nullable=False)
    scheduled_days = db.Column(db.Integer, default=0, nullable=False)

    # Metrics
    reps = db.Column(db.Integer, default=0, nullable=False)
    lapses = db.Column(db.Integer, default=0, nullable=False)

    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint('profile_id', 'question_id', name='uq_profile_question_card'),
    )


class ReviewLogRecord(db.Model):
    """Append-only rating history; never read by the scheduler."""
    __tablename__ = 'review_logs'

    id = db.Column(db.String(64), primary_key=True)
    profile_id = db.Column(db.String(100), nullable=False, index=True)
    question_id = db.Column(db.String(100), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    reviewed_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    source = db.Column(db.String(20), nullable=False, default='study')


class SchedulerConfigRecord(db.Model):
    """Per-profile scheduler settings, stored as a JSON document."""
    __tablename__ = 'scheduler_configs'

    profile_id = db.Column(db.String(100), primary_key=True)
    data = db.Column(db.JSON, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))
